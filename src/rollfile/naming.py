"""Backup file naming: ``app.log`` -> ``app.log.1`` -> ``app.log.1.gz``."""

from __future__ import annotations

from pathlib import Path

COMPRESSED_SUFFIX = ".gz"
TEMP_SUFFIX = ".temp"


def backup_path(base: Path, index: int, compressed: bool = False) -> Path:
    """Return the path of backup slot *index* for *base*.

    Slot 1 is the most recent backup. Compressed backups keep their
    ordinal and gain a ``.gz`` suffix.
    """
    if index < 1:
        raise ValueError(f"Backup index must be >= 1, got {index}")
    name = f"{base.name}.{index}"
    if compressed:
        name += COMPRESSED_SUFFIX
    return base.with_name(name)


def temp_path(base: Path, index: int) -> Path:
    """Where a compression job writes before its atomic rename."""
    compressed = backup_path(base, index, compressed=True)
    return compressed.with_name(compressed.name + TEMP_SUFFIX)


def slot_paths(base: Path, index: int) -> tuple[Path, Path]:
    """Raw and compressed paths for one slot."""
    return backup_path(base, index), backup_path(base, index, compressed=True)


def index_of(base: Path, candidate: Path) -> tuple[int, bool] | None:
    """Parse a sibling file name back into ``(index, compressed)``.

    Returns None for anything that is not a backup of *base*.
    Compression temp files report as compressed.
    """
    prefix = base.name + "."
    name = candidate.name
    if candidate.parent != base.parent or not name.startswith(prefix):
        return None
    rest = name[len(prefix):]
    if rest.endswith(TEMP_SUFFIX):
        rest = rest[: -len(TEMP_SUFFIX)]
        if not rest.endswith(COMPRESSED_SUFFIX):
            return None
    compressed = rest.endswith(COMPRESSED_SUFFIX)
    if compressed:
        rest = rest[: -len(COMPRESSED_SUFFIX)]
    if not rest.isdigit() or int(rest) < 1:
        return None
    return int(rest), compressed


def existing_backups(base: Path) -> list[tuple[int, Path]]:
    """All backup files of *base* currently on disk, ordered by index."""
    if not base.parent.is_dir():
        return []
    found = []
    for candidate in base.parent.iterdir():
        parsed = index_of(base, candidate)
        if parsed is not None and not candidate.name.endswith(TEMP_SUFFIX):
            found.append((parsed[0], candidate))
    return sorted(found, key=lambda item: (item[0], item[1].name))
