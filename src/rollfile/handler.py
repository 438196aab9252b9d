"""``logging`` integration: write formatted records into a byte sink."""

from __future__ import annotations

import logging

from rollfile.appender import ByteSink, FileAppender
from rollfile.config import RotationConfig


class SinkHandler(logging.Handler):
    """Handler that encodes each formatted record and writes it to *sink*.

    ``logging.Handler.handle`` holds the handler lock around ``emit``, which
    serialises concurrent producers before they reach the sink.
    """

    terminator = "\n"

    def __init__(self, sink: ByteSink, level: int = logging.NOTSET, encoding: str = "utf-8") -> None:
        super().__init__(level)
        self.sink = sink
        self.encoding = encoding

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record) + self.terminator
            self.sink.write(line.encode(self.encoding, errors="backslashreplace"))
            self.flush()
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        self.acquire()
        try:
            self.sink.flush()
        finally:
            self.release()

    def close(self) -> None:
        self.acquire()
        try:
            close = getattr(self.sink, "close", None)
            if close is not None:
                close()
        finally:
            self.release()
            super().close()


def setup_logging(
    config: RotationConfig,
    logger_name: str | None = None,
    level: int | str = logging.INFO,
    fmt: str | None = None,
) -> SinkHandler:
    """Attach a rotating file handler to *logger_name* (root by default)."""
    appender = FileAppender.from_config(config)
    handler = SinkHandler(appender)
    handler.setFormatter(logging.Formatter(fmt or "%(asctime)s %(levelname)s %(name)s: %(message)s"))
    target = logging.getLogger(logger_name)
    target.setLevel(level if isinstance(level, int) else level.upper())
    target.addHandler(handler)
    return handler


def configure_from_dict(config: dict, logger_name: str | None = None) -> SinkHandler:
    """Like ``setup_logging`` but driven by a loaded config dict."""
    log_cfg = config.get("logging") or {}
    return setup_logging(
        RotationConfig.from_dict(config),
        logger_name=logger_name,
        level=log_cfg.get("level", "INFO"),
        fmt=log_cfg.get("format"),
    )
