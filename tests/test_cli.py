"""Tests for the pdc-setup command line."""

from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from pdc_setup.cli import cli
from pdc_setup.config.defaults import ENV_OVERRIDES, get_default_settings

from .conftest import posix_only


@pytest.fixture
def runner() -> CliRunner:
    # Keep the caller's environment out of the configuration lookup
    env = {name: None for name in ENV_OVERRIDES}
    env["PDC_SETUP_CONFIG"] = None
    env["PDC_SETUP_PASSWORD"] = None
    return CliRunner(env=env)


def test_connection_string_masks_password(runner: CliRunner) -> None:
    with runner.isolated_filesystem():
        result = runner.invoke(cli, [
            "connection-string", "--host", "sqlbox", "-d", "MyDB", "-U", "sa", "-P", "Secret123",
        ])

    assert result.exit_code == 0
    assert result.output.strip() == "Data Source=sqlbox; Initial Catalog=MyDB; User Id=sa; Password=********;"


def test_connection_string_uses_configured_defaults(runner: CliRunner) -> None:
    with runner.isolated_filesystem():
        Path("pdc_setup.yaml").write_text("database:\n  host: confighost\n  database: ConfigDB\n")
        result = runner.invoke(cli, ["connection-string", "-P", "pw", "-U", "sa", "--show-password"])

    assert result.exit_code == 0
    assert "Data Source=confighost; Initial Catalog=ConfigDB;" in result.output
    assert "Password=pw;" in result.output


def test_invalid_config_exits_with_error(runner: CliRunner) -> None:
    with runner.isolated_filesystem():
        Path("bad.yaml").write_text("sqlcmd:\n  timeout: -5\n")
        result = runner.invoke(cli, ["--config", "bad.yaml", "connection-string"])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_init_config_writes_defaults(runner: CliRunner) -> None:
    with runner.isolated_filesystem():
        result = runner.invoke(cli, ["init-config", "--output", "conf/setup.yaml"])

        assert result.exit_code == 0
        with open("conf/setup.yaml") as f:
            assert yaml.safe_load(f) == get_default_settings()


def test_init_config_refuses_to_overwrite(runner: CliRunner) -> None:
    with runner.isolated_filesystem():
        Path("pdc_setup.yaml").write_text("keep: me\n")

        result = runner.invoke(cli, ["init-config"])
        assert result.exit_code == 1
        assert Path("pdc_setup.yaml").read_text() == "keep: me\n"

        result = runner.invoke(cli, ["init-config", "--force"])
        assert result.exit_code == 0
        assert "sqlcmd" in yaml.safe_load(Path("pdc_setup.yaml").read_text())


@posix_only
def test_run_statement_reports_client_exit_code(runner: CliRunner, fake_sqlcmd) -> None:
    failing = fake_sqlcmd(1)
    with runner.isolated_filesystem():
        Path("pdc_setup.yaml").write_text(yaml.dump({"sqlcmd": {"executable": str(failing.path)}}))
        result = runner.invoke(cli, ["run-statement", "SELECT 1", "--host", "sqlbox", "-d", "MyDB"])

    assert result.exit_code == 1
    assert "Statement failed" in result.output
    assert failing.argv[-2:] == ["-Q", "SELECT 1"]


@posix_only
def test_run_script_rewrites_database_name(runner: CliRunner, fake_sqlcmd) -> None:
    sqlcmd = fake_sqlcmd(0)
    with runner.isolated_filesystem():
        Path("pdc_setup.yaml").write_text(yaml.dump({"sqlcmd": {"executable": str(sqlcmd.path)}}))
        Path("setup.sql").write_text("USE openPDC\nSELECT 1\n")
        result = runner.invoke(cli, ["run-script", "setup.sql", "--host", "sqlbox", "-d", "Target"])

    assert result.exit_code == 0
    assert "USE Target" in result.output
    assert sqlcmd.copy_file.read_text() == "USE Target\nSELECT 1\n"
