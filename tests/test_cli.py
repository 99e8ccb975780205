"""Tests for the dlreg command-line interface."""

import logging
import sqlite3
from pathlib import Path

import pytest
import typer
from rich.console import Console
from typer.testing import CliRunner

from download_registry import __version__
from download_registry.__main__ import run
from download_registry.cli import app as cli_app
from download_registry.exceptions import RegistryUnavailableError
from download_registry.models.record import DownloadState
from download_registry.storage.registry import DownloadRegistry

from .helpers import DB_NAME, make_record

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch) -> None:
    """Render tables wide enough that URLs are not folded."""
    monkeypatch.setattr(cli_app, "console", Console(width=200))


@pytest.fixture
def base_args(tmp_path: Path) -> list[str]:
    """Global options pointing the CLI at a temporary config and database."""
    return [
        "--config",
        str(tmp_path / "config.ini"),
        "--db",
        DB_NAME,
        "--base-dir",
        str(tmp_path),
    ]


def _invoke(args: list[str]):
    return runner.invoke(cli_app.app, args)


class TestParseState:
    """Tests for state argument parsing."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("finished", DownloadState.FINISHED),
            ("PAUSED", DownloadState.PAUSED),
            (" failed ", DownloadState.FAILED),
            ("2", DownloadState.DOWNLOADING),
        ],
    )
    def test_accepts_names_and_numbers(self, text: str, expected: DownloadState) -> None:
        """Test states parse from names in any case or from integer codes."""
        assert cli_app.parse_state(text) == expected

    @pytest.mark.parametrize("text", ["done", "42", "-1"])
    def test_rejects_unknown(self, text: str) -> None:
        """Test unknown states are a bad parameter."""
        with pytest.raises(typer.BadParameter):
            cli_app.parse_state(text)


class TestCommands:
    """Tests for the registry commands."""

    def test_version(self) -> None:
        """Test --version prints the package version."""
        result = _invoke(["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_add_and_list(self, base_args: list[str], tmp_path: Path) -> None:
        """Test an added download is stored and listed."""
        result = _invoke(
            [*base_args, "add", "https://example.com/a.zip", "--size", "1024"]
        )
        assert result.exit_code == 0, result.output

        with DownloadRegistry(DB_NAME, base_dir=tmp_path) as registry:
            stored = registry.get("https://example.com/a.zip")
        assert stored.size == 1024
        assert stored.state == DownloadState.PENDING

        result = _invoke([*base_args, "list"])
        assert result.exit_code == 0, result.output
        assert "https://example.com/a.zip" in result.output

    def test_list_empty(self, base_args: list[str]) -> None:
        """Test listing an empty registry."""
        result = _invoke([*base_args, "list"])

        assert result.exit_code == 0
        assert "No downloads" in result.output

    def test_pending_hides_finished(self, base_args: list[str], tmp_path: Path) -> None:
        """Test --pending leaves finished downloads out."""
        with DownloadRegistry(DB_NAME, base_dir=tmp_path) as registry:
            registry.update(make_record("https://example.com/todo.zip"))
            registry.update(
                make_record("https://example.com/done.zip", state=DownloadState.FINISHED)
            )

        result = _invoke([*base_args, "list", "--pending"])

        assert result.exit_code == 0, result.output
        assert "https://example.com/todo.zip" in result.output
        assert "https://example.com/done.zip" not in result.output

    def test_set_state(self, base_args: list[str], tmp_path: Path) -> None:
        """Test set-state changes a stored download."""
        with DownloadRegistry(DB_NAME, base_dir=tmp_path) as registry:
            registry.update(make_record("https://example.com/a.zip"))

        result = _invoke([*base_args, "set-state", "https://example.com/a.zip", "finished"])

        assert result.exit_code == 0, result.output
        with DownloadRegistry(DB_NAME, base_dir=tmp_path) as registry:
            assert registry.get("https://example.com/a.zip").state == DownloadState.FINISHED

    def test_set_state_unknown_url(self, base_args: list[str]) -> None:
        """Test set-state on an unknown URL exits with an error code."""
        result = _invoke([*base_args, "set-state", "https://example.com/none", "paused"])

        assert result.exit_code == 1
        assert "No download stored" in result.output

    def test_stats(self, base_args: list[str], tmp_path: Path) -> None:
        """Test stats reports the total."""
        with DownloadRegistry(DB_NAME, base_dir=tmp_path) as registry:
            registry.update(make_record("https://example.com/a.zip"))
            registry.update(make_record("https://example.com/b.zip"))

        result = _invoke([*base_args, "stats"])

        assert result.exit_code == 0, result.output
        assert "Total Downloads in Registry: 2" in result.output

    def test_vacuum(self, base_args: list[str]) -> None:
        """Test vacuum succeeds on a fresh registry."""
        result = _invoke([*base_args, "vacuum"])

        assert result.exit_code == 0, result.output
        assert "Database optimized" in result.output

    def test_init_writes_config(self, tmp_path: Path) -> None:
        """Test init writes a config file that later commands pick up."""
        config_file = tmp_path / "config.ini"
        result = _invoke(
            [
                "--config",
                str(config_file),
                "init",
                "--database-name",
                "queue.db",
                "--base-dir",
                str(tmp_path),
            ]
        )
        assert result.exit_code == 0, result.output
        assert config_file.is_file()

        result = _invoke(["--config", str(config_file), "add", "https://example.com/a.zip"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "queue.db").is_file()

    def test_unopenable_registry(self, tmp_path: Path) -> None:
        """Test a registry that cannot be opened surfaces as an application error."""
        result = _invoke(
            [
                "--config",
                str(tmp_path / "config.ini"),
                "--base-dir",
                str(tmp_path / "missing"),
                "list",
            ]
        )

        assert result.exit_code == 1
        assert isinstance(result.exception, RegistryUnavailableError)

    def test_verbose_enables_debug_logging(self, base_args: list[str]) -> None:
        """Test a single -v lowers the package log level to DEBUG."""
        logger = logging.getLogger("download_registry")
        previous = logger.level
        try:
            result = _invoke(["-v", *base_args, "list"])

            assert result.exit_code == 0, result.output
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)

    def test_set_state_write_failure(self, base_args: list[str], tmp_path: Path) -> None:
        """Test a stored download that cannot be rewritten reports a failed update."""
        with DownloadRegistry(DB_NAME, base_dir=tmp_path) as registry:
            registry.update(make_record("https://example.com/a.zip"))
        connection = sqlite3.connect(tmp_path / DB_NAME)
        connection.execute(
            "CREATE TRIGGER no_writes BEFORE INSERT ON download "
            "BEGIN SELECT RAISE(ABORT, 'read only'); END"
        )
        connection.commit()
        connection.close()

        result = _invoke([*base_args, "set-state", "https://example.com/a.zip", "paused"])

        assert result.exit_code == 1
        assert "Failed to update" in result.output
        assert "No download stored" not in result.output


class TestEntryPoint:
    """Tests for the exit codes returned by the console script."""

    def test_version_exits_zero(self) -> None:
        """Test a successful command returns 0."""
        assert run(["--version"]) == 0

    def test_command_exit_code_is_kept(self, base_args: list[str]) -> None:
        """Test a command that exits with an error code returns that code."""
        assert run([*base_args, "set-state", "https://example.com/none", "paused"]) == 1

    def test_usage_error_exits_two(self, base_args: list[str]) -> None:
        """Test a bad state argument is a usage error."""
        assert run([*base_args, "set-state", "https://example.com/a.zip", "done"]) == 2

    def test_application_error_exits_one(self, tmp_path: Path, capsys) -> None:
        """Test an application error is rendered as a panel and returns 1."""
        code = run(
            [
                "--config",
                str(tmp_path / "config.ini"),
                "--base-dir",
                str(tmp_path / "missing"),
                "list",
            ]
        )

        assert code == 1
        assert "RegistryUnavailableError" in capsys.readouterr().err
