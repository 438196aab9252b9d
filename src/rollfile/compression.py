"""Background gzip compression of retired segments.

A rotation retires the active file to ``base.1``; when compression is on,
a worker thread turns it into ``base.1.gz``:

  1. gzip ``base.1`` -> ``base.1.gz.temp``
  2. rename ``base.1.gz.temp`` -> ``base.1.gz``
  3. remove ``base.1``

A crash between steps leaves either the raw file alone or both files with
identical content, never a truncated ``.gz`` under the final name.
"""

from __future__ import annotations

import gzip
import logging
import os
import queue
import shutil
import threading
from dataclasses import dataclass, field
from pathlib import Path

from rollfile.errors import AppenderError, CompressionError
from rollfile.naming import COMPRESSED_SUFFIX, TEMP_SUFFIX

logger = logging.getLogger(__name__)

COMPRESS_LEVEL = 6


def compress(path: Path) -> Path:
    """Gzip *path* in place and return the compressed artifact's path.

    Already-compressed paths are returned untouched. On failure the raw
    file is left as it was and ``CompressionError`` is raised.
    """
    if path.name.endswith(COMPRESSED_SUFFIX):
        return path

    target = path.with_name(path.name + COMPRESSED_SUFFIX)
    temp = target.with_name(target.name + TEMP_SUFFIX)
    try:
        with open(path, "rb") as f_in, gzip.open(temp, "wb", compresslevel=COMPRESS_LEVEL) as f_out:
            shutil.copyfileobj(f_in, f_out)
        os.replace(temp, target)
    except OSError as exc:
        try:
            temp.unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove partial archive %s", temp)
        raise CompressionError(f"Failed to compress {path}: {exc}") from exc

    try:
        path.unlink()
    except OSError as exc:
        raise CompressionError(f"Compressed {path} but could not remove it: {exc}") from exc
    return target


@dataclass
class CompressionJob:
    """One retired segment being compressed on a worker thread."""

    source: Path
    target: Path
    thread: threading.Thread | None = None
    error: CompressionError | None = None
    done: threading.Event = field(default_factory=threading.Event)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the job finishes. Returns False on timeout."""
        return self.done.wait(timeout)

    @property
    def succeeded(self) -> bool:
        return self.done.is_set() and self.error is None


class Compressor:
    """Schedules compression jobs, one at a time, off the write path.

    Failures never propagate to the writer: they are logged and put on
    *reports*, a bounded queue the owning appender drains.
    """

    def __init__(self, reports: queue.Queue[AppenderError]) -> None:
        self._reports = reports
        self._pending: CompressionJob | None = None

    @property
    def pending(self) -> CompressionJob | None:
        if self._pending is not None and self._pending.done.is_set():
            self._pending = None
        return self._pending

    def submit(self, path: Path) -> CompressionJob:
        """Start compressing *path* in a daemon thread."""
        self.wait()
        job = CompressionJob(source=path, target=path.with_name(path.name + COMPRESSED_SUFFIX))
        job.thread = threading.Thread(
            target=self._run,
            args=(job,),
            name=f"rollfile-compress-{path.name}",
            daemon=True,
        )
        self._pending = job
        job.thread.start()
        logger.debug("Scheduled compression of %s", path)
        return job

    def wait(self) -> None:
        """Join the unfinished job, if any."""
        job = self._pending
        if job is not None:
            job.wait()
            self._pending = None

    def _run(self, job: CompressionJob) -> None:
        try:
            compress(job.source)
        except CompressionError as exc:
            job.error = exc
            logger.warning("%s; keeping uncompressed backup", exc)
            report(self._reports, exc)
        else:
            logger.debug("Compressed %s -> %s", job.source, job.target)
        finally:
            job.done.set()


def report(reports: queue.Queue[AppenderError], error: AppenderError) -> None:
    """Non-blocking put on a diagnostics queue. Drops the report when full."""
    try:
        reports.put_nowait(error)
    except queue.Full:
        logger.warning("Diagnostics queue full, dropping: %s", error)
