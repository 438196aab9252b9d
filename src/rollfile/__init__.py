"""rollfile - size-rotating file sink for logging pipelines."""

from rollfile.appender import ByteSink, FileAppender
from rollfile.config import RotationConfig
from rollfile.errors import (
    AppenderError,
    CompressionError,
    ConfigError,
    OpenError,
    RetentionError,
    RotationError,
    WriteError,
)

__version__ = "0.3.0"

__all__ = [
    "AppenderError",
    "ByteSink",
    "CompressionError",
    "ConfigError",
    "FileAppender",
    "OpenError",
    "RetentionError",
    "RotationConfig",
    "RotationError",
    "WriteError",
    "__version__",
]
