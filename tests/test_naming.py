"""Backup naming tests."""

import pytest
from pathlib import Path

from rollfile.naming import backup_path, existing_backups, index_of, temp_path


class TestBackupPath:
    def test_raw(self, tmp_path) -> None:
        base = tmp_path / "app.log"
        assert backup_path(base, 1) == tmp_path / "app.log.1"
        assert backup_path(base, 12) == tmp_path / "app.log.12"

    def test_compressed(self, tmp_path) -> None:
        base = tmp_path / "app.log"
        assert backup_path(base, 3, compressed=True) == tmp_path / "app.log.3.gz"

    def test_temp(self, tmp_path) -> None:
        assert temp_path(tmp_path / "app.log", 1) == tmp_path / "app.log.1.gz.temp"

    def test_zero_index_rejected(self, tmp_path) -> None:
        with pytest.raises(ValueError):
            backup_path(tmp_path / "app.log", 0)

    def test_no_collisions(self, tmp_path) -> None:
        base = tmp_path / "app.log"
        names = {base}
        for i in range(1, 21):
            names.add(backup_path(base, i))
            names.add(backup_path(base, i, compressed=True))
        assert len(names) == 41


class TestIndexOf:
    def test_parses_raw_and_compressed(self) -> None:
        base = Path("/var/log/app.log")
        assert index_of(base, Path("/var/log/app.log.4")) == (4, False)
        assert index_of(base, Path("/var/log/app.log.4.gz")) == (4, True)
        assert index_of(base, Path("/var/log/app.log.1.gz.temp")) == (1, True)

    def test_rejects_others(self) -> None:
        base = Path("/var/log/app.log")
        assert index_of(base, base) is None
        assert index_of(base, Path("/var/log/app.log.bak")) is None
        assert index_of(base, Path("/var/log/app.log.0")) is None
        assert index_of(base, Path("/var/log/app.log.2.temp")) is None
        assert index_of(base, Path("/var/log/other.log.1")) is None
        assert index_of(base, Path("/tmp/app.log.1")) is None


class TestExistingBackups:
    def test_sorted_and_temp_skipped(self, tmp_path) -> None:
        base = tmp_path / "app.log"
        for name in ("app.log", "app.log.2.gz", "app.log.10", "app.log.1", "app.log.1.gz.temp"):
            (tmp_path / name).write_text("x")
        found = existing_backups(base)
        assert [(i, p.name) for i, p in found] == [
            (1, "app.log.1"),
            (2, "app.log.2.gz"),
            (10, "app.log.10"),
        ]

    def test_missing_directory(self, tmp_path) -> None:
        assert existing_backups(tmp_path / "nope" / "app.log") == []
