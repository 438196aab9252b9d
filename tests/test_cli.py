"""Integration tests for CLI commands."""

import gzip
from pathlib import Path

import pytest
from typer.testing import CliRunner

from rollfile.cli import app

runner = CliRunner()


class TestTee:
    def test_copies_stdin(self, tmp_path: Path) -> None:
        log = tmp_path / "app.log"
        result = runner.invoke(app, ["tee", str(log), "--quiet"], input="one\ntwo\n")
        assert result.exit_code == 0
        assert log.read_text() == "one\ntwo\n"

    def test_rotates(self, tmp_path: Path) -> None:
        log = tmp_path / "app.log"
        result = runner.invoke(
            app,
            ["tee", str(log), "--max-size", "20", "--keep", "2", "-q"],
            input="line one\nline two\nline three\n",
        )
        assert result.exit_code == 0
        assert (tmp_path / "app.log.1").read_text() == "line one\nline two\n"
        assert log.read_text() == "line three\n"

    def test_compress_option(self, tmp_path: Path) -> None:
        log = tmp_path / "app.log"
        result = runner.invoke(
            app,
            ["tee", str(log), "--max-size", "10", "--keep", "1", "--compress", "-q"],
            input="aaaaaaaa\nbbbbbbbb\n",
        )
        assert result.exit_code == 0
        assert gzip.decompress((tmp_path / "app.log.1.gz").read_bytes()) == b"aaaaaaaa\n"

    def test_uses_config_file(self, tmp_path: Path) -> None:
        config = tmp_path / "rollfile.yaml"
        config.write_text("threshold: 5\nkeep_count: 0\n")
        log = tmp_path / "app.log"
        result = runner.invoke(app, ["tee", str(log), "--config", str(config), "-q"], input="abcd\nefgh\n")
        assert result.exit_code == 0
        assert log.read_text() == "efgh\n"
        assert not (tmp_path / "app.log.1").exists()

    def test_bad_size(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["tee", str(tmp_path / "app.log"), "--max-size", "big"], input="")
        assert result.exit_code == 1

    def test_missing_directory(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["tee", str(tmp_path / "nope" / "app.log")], input="x\n")
        assert result.exit_code == 1

    def test_unreadable_config_file(self, tmp_path: Path) -> None:
        config = tmp_path / "bad.json"
        config.write_text("{not json")
        result = runner.invoke(app, ["tee", str(tmp_path / "app.log"), "--config", str(config)], input="x\n")
        assert result.exit_code == 1
        assert not isinstance(result.exception, ValueError)
        assert not (tmp_path / "app.log").exists()


class TestStatus:
    def test_lists_backups(self, tmp_path: Path) -> None:
        log = tmp_path / "app.log"
        log.write_text("live")
        (tmp_path / "app.log.1").write_text("one")
        (tmp_path / "app.log.2.gz").write_bytes(gzip.compress(b"two"))
        result = runner.invoke(app, ["status", str(log)])
        assert result.exit_code == 0
        assert "app.log.1" in result.output
        assert "app.log.2.gz" in result.output
        assert "2 slot(s)" in result.output

    def test_reports_gap(self, tmp_path: Path) -> None:
        log = tmp_path / "app.log"
        (tmp_path / "app.log.1").write_text("one")
        (tmp_path / "app.log.3").write_text("three")
        result = runner.invoke(app, ["status", str(log), "--keep", "2"])
        assert result.exit_code == 0
        assert "Gap" in result.output
        assert "beyond keep count" in result.output


class TestInitAndCheck:
    def test_init_then_check(self, tmp_path: Path) -> None:
        config = tmp_path / "rollfile.yaml"
        result = runner.invoke(app, ["init", str(config), "--path", "svc.log"])
        assert result.exit_code == 0
        assert config.exists()

        result = runner.invoke(app, ["check", str(config)])
        assert result.exit_code == 0
        assert "valid" in result.output

    def test_init_refuses_overwrite(self, tmp_path: Path) -> None:
        config = tmp_path / "rollfile.json"
        config.write_text("{}")
        result = runner.invoke(app, ["init", str(config)])
        assert result.exit_code == 1
        assert config.read_text() == "{}"

    def test_check_reports_errors(self, tmp_path: Path) -> None:
        config = tmp_path / "rollfile.json"
        config.write_text('{"path": "a.log", "keep_count": -1}')
        result = runner.invoke(app, ["check", str(config)])
        assert result.exit_code == 1
        assert "keep_count" in result.output


class TestVersion:
    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "rollfile" in result.output
