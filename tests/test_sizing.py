"""Size parsing and size tracker tests."""

import pytest

from rollfile.sizing import GB, KB, MB, SizeTracker, format_size, parse_size


class TestParseSize:
    def test_plain_int(self) -> None:
        assert parse_size(4096) == 4096

    def test_digit_string(self) -> None:
        assert parse_size("2048") == 2048

    def test_units(self) -> None:
        assert parse_size("1KB") == KB
        assert parse_size("10MB") == 10 * MB
        assert parse_size("2gb") == 2 * GB
        assert parse_size("512k") == 512 * KB

    def test_fractional(self) -> None:
        assert parse_size("1.5MB") == int(1.5 * MB)

    def test_unknown_unit(self) -> None:
        with pytest.raises(ValueError):
            parse_size("10TB")

    def test_garbage(self) -> None:
        with pytest.raises(ValueError):
            parse_size("lots")

    def test_bool_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_size(True)


class TestFormatSize:
    def test_bytes(self) -> None:
        assert format_size(12) == "12 B"

    def test_megabytes(self) -> None:
        assert format_size(3 * MB // 2) == "1.5 MB"


class TestSizeTracker:
    def test_record_accumulates(self) -> None:
        tracker = SizeTracker()
        assert tracker.record(10) == 10
        assert tracker.record(5) == 15

    def test_reset(self) -> None:
        tracker = SizeTracker(100)
        tracker.reset()
        assert tracker.current == 0

    def test_from_existing_file(self, tmp_path) -> None:
        log = tmp_path / "app.log"
        log.write_bytes(b"x" * 321)
        assert SizeTracker.from_file(log).current == 321

    def test_from_missing_file(self, tmp_path) -> None:
        assert SizeTracker.from_file(tmp_path / "missing.log").current == 0
