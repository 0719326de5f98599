"""Unit tests for config commands."""

from pathlib import Path

from hollow.cli.main import app
from hollow.core.config import load_config
from hollow.core.paths import get_config_path
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigInit:
    """Tests for hollow config init."""

    def test_init_writes_config(self) -> None:
        """Init writes a config with the given roots in order."""
        result = runner.invoke(
            app,
            ["config", "init", "-r", "1AbC", "-r", "2DeF", "--credentials", "/keys/sa.json"],
        )

        assert result.exit_code == 0
        assert "Config written" in result.output
        config = load_config()
        assert config.roots == ["1AbC", "2DeF"]
        assert config.browser.credentials_file == Path("/keys/sa.json")
        assert config.report.sink == "csv"

    def test_init_to_explicit_path(self, tmp_path: Path) -> None:
        """--config chooses where the file is written."""
        path = tmp_path / "custom.toml"

        result = runner.invoke(
            app, ["--config", str(path), "config", "init", "-r", "/srv/share", "--backend", "local"]
        )

        assert result.exit_code == 0
        assert load_config(path).browser.backend == "local"
        assert not get_config_path().exists()

    def test_init_refuses_overwrite(self) -> None:
        """An existing config is kept unless --force is given."""
        runner.invoke(app, ["config", "init", "-r", "first"])

        result = runner.invoke(app, ["config", "init", "-r", "second"])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert load_config().roots == ["first"]

    def test_init_force(self) -> None:
        """--force replaces an existing config."""
        runner.invoke(app, ["config", "init", "-r", "first"])

        result = runner.invoke(app, ["config", "init", "-r", "second", "--force"])

        assert result.exit_code == 0
        assert load_config().roots == ["second"]

    def test_init_sheets_requires_spreadsheet(self) -> None:
        """The sheets sink without a spreadsheet ID is rejected."""
        result = runner.invoke(app, ["config", "init", "-r", "1AbC", "--sink", "sheets"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert not get_config_path().exists()

    def test_init_requires_root(self) -> None:
        """At least one --root is required."""
        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code != 0


class TestConfigShow:
    """Tests for hollow config show."""

    def test_show(self) -> None:
        """Show prints the effective settings."""
        runner.invoke(
            app,
            ["config", "init", "-r", "1AbC", "--sink", "sheets", "--spreadsheet-id", "1XyZ"],
        )

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "1AbC" in result.stdout
        assert "1XyZ" in result.stdout
        assert "batch_size" in result.stdout

    def test_show_without_config(self) -> None:
        """Show without a config exits with an error."""
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 1
        assert "Config not found" in result.output
