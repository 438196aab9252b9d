"""Exception hierarchy for the rotating appender.

Errors that mean the bytes being written may be lost (``OpenError``,
``WriteError``, ``RotationError``) are raised to the caller of ``write``.
Housekeeping failures (``CompressionError``, ``RetentionError``) are logged
and queued on the appender's diagnostics channel instead.
"""

from __future__ import annotations


class AppenderError(OSError):
    """Base class for all appender failures."""


class OpenError(AppenderError):
    """Raised when the active file cannot be created or opened."""


class WriteError(AppenderError):
    """Raised when appending to the active file fails."""


class RotationError(AppenderError):
    """Raised when shifting or retiring a segment fails mid-rotation."""


class CompressionError(AppenderError):
    """A retired segment could not be compressed. The raw file is kept."""


class RetentionError(AppenderError):
    """A backup beyond the keep count could not be deleted."""


class ConfigError(ValueError):
    """Raised for invalid rotation configuration."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("; ".join(errors))
