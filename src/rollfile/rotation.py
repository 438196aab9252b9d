"""Rotation decision and backup shifting.

Renames the active file to .1, .1 to .2, etc., and hands anything pushed
past the keep count to the retention enforcer.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from rollfile.errors import RotationError
from rollfile.naming import backup_path, slot_paths
from rollfile.retention import RetentionEnforcer

logger = logging.getLogger(__name__)


def should_rotate(current_size: int, next_write_size: int, threshold: int) -> bool:
    """True when appending *next_write_size* bytes would cross *threshold*.

    The decision is taken before the write, so the overflowing write lands
    in a fresh file. This is a soft bound: a single write larger than the
    threshold still goes into one file, and an empty file is never rotated.
    """
    return current_size > 0 and current_size + next_write_size > threshold


class RotationPolicy:
    """Shifts backup slots and retires the active file for one base path."""

    def __init__(self, base: Path, keep_count: int, retention: RetentionEnforcer) -> None:
        self.base = base
        self.keep_count = keep_count
        self.retention = retention

    def _slot_exists(self, index: int) -> bool:
        return any(path.exists() for path in slot_paths(self.base, index))

    def occupied_run(self) -> int:
        """Length of the unbroken run of slots starting at 1, capped at keep_count."""
        run = 0
        while run < self.keep_count and self._slot_exists(run + 1):
            run += 1
        return run

    def shift(self) -> list[tuple[Path, Path]]:
        """Move the unbroken run of slots from 1 up by one, oldest first.

        A missing slot 1 means nothing is shifted. When the run reaches
        ``keep_count`` that slot lands on ``keep_count + 1`` and is left for
        the retention pass. Raw and compressed forms move together.
        Returns the completed moves; on failure they are undone before
        ``RotationError`` is raised.
        """
        moves: list[tuple[Path, Path]] = []
        for index in range(self.occupied_run(), 0, -1):
            sources = slot_paths(self.base, index)
            targets = slot_paths(self.base, index + 1)
            for src, dst in zip(sources, targets):
                if not src.exists():
                    continue
                try:
                    os.replace(src, dst)
                except OSError as exc:
                    self.undo(moves)
                    raise RotationError(f"Failed to shift backup {src} -> {dst}: {exc}") from exc
                moves.append((src, dst))
        return moves

    def undo(self, moves: list[tuple[Path, Path]]) -> None:
        """Reverse completed moves, newest first. Failures are logged only."""
        for src, dst in reversed(moves):
            try:
                os.replace(dst, src)
            except OSError as exc:
                logger.warning("Could not restore %s from %s: %s", src, dst, exc)

    def retire(self) -> Path | None:
        """Move the closed active file to slot 1, or delete it when no backups are kept."""
        if not self.base.exists():
            return None
        try:
            if self.keep_count == 0:
                self.base.unlink()
                return None
            target = backup_path(self.base, 1)
            os.replace(self.base, target)
        except OSError as exc:
            raise RotationError(f"Failed to retire {self.base}: {exc}") from exc
        return target

    def rotate(self) -> Path | None:
        """Shift, retire and prune. The active file must already be closed.

        If the active file cannot be retired the shift is rolled back, so
        the backups are left as they were. Returns the raw path of the newly
        retired segment, if one was kept.
        """
        moves = self.shift()
        try:
            retired = self.retire()
        except RotationError:
            self.undo(moves)
            raise
        removed = self.retention.prune(self.base)
        logger.debug(
            "Rotated %s (retired=%s, pruned=%d)", self.base, retired, len(removed)
        )
        return retired
