"""The rotating file sink.

``FileAppender`` owns the active file handle and composes size tracking,
rotation, retention and background compression behind a two-method byte
sink (``write`` and ``flush``).

Callers must serialise access: the appender takes no lock on the
write/rotate path. ``rollfile.handler.SinkHandler`` provides that lock when
the appender is driven by the ``logging`` package.
"""

from __future__ import annotations

import logging
import os
import queue
import time
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable

from rollfile.compression import Compressor, CompressionJob
from rollfile.config import RotationConfig
from rollfile.errors import AppenderError, OpenError, RotationError, WriteError
from rollfile.naming import existing_backups
from rollfile.retention import RetentionEnforcer
from rollfile.rotation import RotationPolicy, should_rotate
from rollfile.sizing import SizeTracker

logger = logging.getLogger(__name__)

# Seconds between checks that the active file still exists on disk.
REOPEN_CHECK_INTERVAL = 1.0
DIAGNOSTICS_QUEUE_SIZE = 64


@runtime_checkable
class ByteSink(Protocol):
    """What a formatter needs from a log destination."""

    def write(self, data: bytes) -> int: ...

    def flush(self) -> None: ...


class FileAppender:
    """Append-only log file with size-based rotation.

    On-disk layout for ``app.log`` with ``keep_count=3``::

        app.log      active file
        app.log.1    most recent backup (``app.log.1.gz`` once compressed)
        app.log.2
        app.log.3    oldest retained backup

    Args:
        path: Active log file. Its parent directory must exist.
        truncate: Empty an existing file at open instead of appending to it.
        threshold: Size in bytes a file may reach before the next write
            goes to a fresh file.
        keep_count: Number of backups retained. 0 discards retired files.
        compress: Gzip each retired segment in a background thread.

    A rotation waits for the previous segment's compression job to finish
    before shifting backups, so the write that triggers it can see that
    job's remaining latency on top of the renames.
    """

    def __init__(
        self,
        path: str | Path,
        truncate: bool,
        threshold: int,
        keep_count: int,
        compress: bool,
        *,
        reopen_interval: float = REOPEN_CHECK_INTERVAL,
    ) -> None:
        self._config = RotationConfig(
            path=Path(path),
            truncate=truncate,
            threshold=threshold,
            keep_count=keep_count,
            compress=compress,
        )
        self._reports: queue.Queue[AppenderError] = queue.Queue(maxsize=DIAGNOSTICS_QUEUE_SIZE)
        self._retention = RetentionEnforcer(keep_count, self._reports)
        self._policy = RotationPolicy(self._config.path, keep_count, self._retention)
        self._compressor = Compressor(self._reports)
        self._file: BinaryIO | None = None
        self._size = SizeTracker()
        self._closed = False
        self._reopen_interval = reopen_interval
        self._next_reopen_check = 0.0
        self._open(truncate=truncate)

    @classmethod
    def from_config(cls, config: RotationConfig) -> FileAppender:
        return cls(
            config.path,
            truncate=config.truncate,
            threshold=config.threshold,
            keep_count=config.keep_count,
            compress=config.compress,
        )

    def __repr__(self) -> str:
        return f"<FileAppender {str(self.path)!r} size={self.size} closed={self.closed}>"

    def __enter__(self) -> FileAppender:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def config(self) -> RotationConfig:
        return self._config

    @property
    def path(self) -> Path:
        return self._config.path

    @property
    def size(self) -> int:
        """Bytes in the active file, including data not yet flushed."""
        return self._size.current

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_compression(self) -> CompressionJob | None:
        return self._compressor.pending

    def _open(self, truncate: bool) -> None:
        mode = "wb" if truncate else "ab"
        try:
            handle = open(self.path, mode)
            size = os.fstat(handle.fileno()).st_size
        except OSError as exc:
            raise OpenError(f"Cannot open log file {self.path}: {exc}") from exc
        self._file = handle
        self._size = SizeTracker(size)
        self._next_reopen_check = time.monotonic() + self._reopen_interval

    def _close_handle(self) -> None:
        handle, self._file = self._file, None
        if handle is not None:
            handle.close()

    def _reopen_if_needed(self) -> None:
        if self._file is not None:
            now = time.monotonic()
            if now < self._next_reopen_check:
                return
            self._next_reopen_check = now + self._reopen_interval
            if self.path.exists():
                return
            logger.warning("Log file %s was removed externally, reopening", self.path)
            try:
                self._close_handle()
            except OSError as exc:
                logger.warning("Error closing removed log file %s: %s", self.path, exc)
        try:
            self._open(truncate=False)
        except OpenError as exc:
            raise WriteError(f"Cannot reopen log file {self.path}: {exc}") from exc

    def write(self, data: bytes) -> int:
        """Append *data*, rotating first when it would cross the threshold.

        Returns the number of bytes written.
        """
        if self._closed:
            raise WriteError(f"Write to closed appender for {self.path}")
        self._reopen_if_needed()

        if should_rotate(self._size.current, len(data), self._config.threshold):
            self.rotate()

        try:
            written = self._file.write(data)
        except OSError as exc:
            raise WriteError(f"Failed to write to {self.path}: {exc}") from exc
        self._size.record(written)
        return written

    def flush(self) -> None:
        """Flush buffered bytes and fsync them to disk."""
        if self._file is None:
            return
        try:
            self._file.flush()
            os.fsync(self._file.fileno())
        except OSError as exc:
            raise WriteError(f"Failed to flush {self.path}: {exc}") from exc

    def rotate(self) -> None:
        """Retire the active file and continue in a fresh, empty one.

        On ``RotationError`` the appender stays without an open handle;
        the next ``write`` reopens the active file and retries.
        """
        if self._closed:
            raise RotationError(f"Cannot rotate closed appender for {self.path}")
        try:
            self._close_handle()
        except OSError as exc:
            raise RotationError(f"Failed to close {self.path} for rotation: {exc}") from exc

        # The previous job may still be reading slot 1, which is about to move.
        self._compressor.wait()
        retired = self._policy.rotate()

        try:
            self._open(truncate=True)
        except OpenError as exc:
            raise RotationError(f"Rotated {self.path} but could not reopen it: {exc}") from exc
        self._size.reset()
        logger.debug("Rotated log file %s", self.path)

        if self._config.compress and retired is not None:
            self._compressor.submit(retired)

    def wait_for_compression(self) -> None:
        """Block until the background compression job, if any, has finished."""
        self._compressor.wait()

    def close(self) -> None:
        """Flush and close the active file. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._close_handle()
        except OSError as exc:
            raise WriteError(f"Failed to close {self.path}: {exc}") from exc
        finally:
            self._compressor.wait()

    def failures(self) -> list[AppenderError]:
        """Drain compression and retention failures reported so far."""
        drained = []
        while True:
            try:
                drained.append(self._reports.get_nowait())
            except queue.Empty:
                return drained

    def backups(self) -> list[Path]:
        """Backup files currently on disk, most recent first."""
        return [path for _, path in existing_backups(self.path)]
