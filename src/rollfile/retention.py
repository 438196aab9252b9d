"""Delete backups beyond the configured keep count."""

from __future__ import annotations

import logging
import queue
from pathlib import Path

from rollfile.compression import report
from rollfile.errors import AppenderError, RetentionError
from rollfile.naming import slot_paths, temp_path

logger = logging.getLogger(__name__)


class RetentionEnforcer:
    """Best-effort pruning of ``base.N`` / ``base.N.gz`` just above ``keep_count``.

    A file that cannot be deleted is reported and left in place; the next
    rotation shifts nothing onto it and tries again.
    """

    def __init__(self, keep_count: int, reports: queue.Queue[AppenderError]) -> None:
        self.keep_count = keep_count
        self._reports = reports

    def excess(self, base: Path) -> list[Path]:
        """Backups of *base* in the unbroken run of slots above the keep count.

        The run starts at ``keep_count + 1`` and ends at the first empty
        slot, so unrelated ``base.<digits>`` files further up are left alone.
        """
        found = []
        index = self.keep_count + 1
        while True:
            slot = [
                path
                for path in (*slot_paths(base, index), temp_path(base, index))
                if path.exists()
            ]
            if not slot:
                return found
            found.extend(slot)
            index += 1

    def prune(self, base: Path) -> list[Path]:
        """Delete every excess backup. Returns the paths actually removed."""
        removed: list[Path] = []
        for path in self.excess(base):
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                error = RetentionError(f"Failed to delete old backup {path}: {exc}")
                logger.warning("%s", error)
                report(self._reports, error)
                continue
            logger.debug("Deleted old backup %s", path)
            removed.append(path)
        return removed
