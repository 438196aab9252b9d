"""Size constants, size-string parsing and the active file's size counter."""

from __future__ import annotations

import os
import re
from pathlib import Path

B = 1
KB = B * 1024
MB = KB * 1024
GB = MB * 1024

_UNITS = {"": B, "b": B, "k": KB, "kb": KB, "m": MB, "mb": MB, "g": GB, "gb": GB}
_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-zA-Z]*)\s*$")


def parse_size(value: int | str) -> int:
    """Convert ``10MB``, ``512k`` or ``2048`` into a byte count."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid size: {value!r}")
    if isinstance(value, int):
        return value
    match = _SIZE_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid size: {value!r}")
    number, unit = match.groups()
    unit = unit.lower()
    if unit not in _UNITS:
        raise ValueError(f"Unknown size unit {unit!r} in {value!r}")
    return int(float(number) * _UNITS[unit])


def format_size(size: int) -> str:
    """Render a byte count for humans, e.g. ``1.5 MB``."""
    for unit, factor in (("GB", GB), ("MB", MB), ("KB", KB)):
        if size >= factor:
            return f"{size / factor:.1f} {unit}"
    return f"{size} B"


class SizeTracker:
    """Byte length of the active file, kept without a stat per write."""

    def __init__(self, initial: int = 0) -> None:
        self.current = initial

    @classmethod
    def from_file(cls, path: Path) -> SizeTracker:
        try:
            return cls(os.stat(path).st_size)
        except FileNotFoundError:
            return cls(0)

    def record(self, written: int) -> int:
        self.current += written
        return self.current

    def reset(self) -> None:
        self.current = 0
