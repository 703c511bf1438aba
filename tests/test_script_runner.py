"""Tests for pdc_setup.database.script_runner."""

import codecs
import threading
from pathlib import Path
from typing import List

import pytest

from pdc_setup.database.connection import ConnectionSettings
from pdc_setup.database.script_runner import (
    OutputLine,
    OutputStream,
    ScriptRunner,
    format_command,
    rewrite_script,
)

from .conftest import posix_only


SCRIPT = (
    b"CREATE DATABASE openPDC\r\n"
    b"GO\r\n"
    b"ALTER DATABASE openPDC SET RECOVERY SIMPLE\n"
    b"USE openPDC\n"
    b"-- USE openPDC\n"
    b"  USE openPDC\n"
    b"INSERT INTO Node(Name) VALUES('openPDC')\n"
    b"USE [openPDC_Archive]"
)


# ─────────────────────────────────────────────────────────────────────────────
# Script rewriting
# ─────────────────────────────────────────────────────────────────────────────


def test_rewrite_script_replaces_database_statements_only(tmp_path: Path) -> None:
    source = tmp_path / "setup.sql"
    source.write_bytes(SCRIPT)
    copy = tmp_path / "copy.sql"

    count = rewrite_script(source, copy, "MyDB")

    assert copy.read_bytes() == (
        b"CREATE DATABASE MyDB\r\n"
        b"GO\r\n"
        b"ALTER DATABASE MyDB SET RECOVERY SIMPLE\n"
        b"USE MyDB\n"
        b"-- USE openPDC\n"
        b"  USE openPDC\n"
        b"INSERT INTO Node(Name) VALUES('openPDC')\n"
        b"USE [MyDB_Archive]"
    )
    assert count == 4


def test_rewrite_script_handles_byte_order_mark(tmp_path: Path) -> None:
    source = tmp_path / "bom.sql"
    source.write_bytes(b"\xef\xbb\xbfUSE openPDC\nSELECT 1\n")
    copy = tmp_path / "copy.sql"

    rewrite_script(source, copy, "MyDB")

    assert copy.read_bytes() == b"\xef\xbb\xbfUSE MyDB\nSELECT 1\n"


@pytest.mark.parametrize("encoding", ["utf-16-le", "utf-16-be"])
def test_rewrite_script_handles_utf16_scripts(tmp_path: Path, encoding: str) -> None:
    bom = codecs.BOM_UTF16_LE if encoding == "utf-16-le" else codecs.BOM_UTF16_BE
    source = tmp_path / "unicode.sql"
    source.write_bytes(bom + "USE openPDC\r\n-- USE openPDC\r\nSELECT N'openPDC'\r\n".encode(encoding))
    copy = tmp_path / "copy.sql"

    count = rewrite_script(source, copy, "MyDB")

    assert count == 1
    assert copy.read_bytes() == bom + "USE MyDB\r\n-- USE openPDC\r\nSELECT N'openPDC'\r\n".encode(encoding)


def test_rewrite_script_rejects_empty_placeholder(tmp_path: Path, connection: ConnectionSettings) -> None:
    source = tmp_path / "setup.sql"
    source.write_bytes(b"USE openPDC\n")

    with pytest.raises(ValueError):
        rewrite_script(source, tmp_path / "copy.sql", "MyDB", placeholder="")
    with pytest.raises(ValueError):
        ScriptRunner(connection, placeholder="")


def test_execute_script_reports_undecodable_unicode_script(connection: ConnectionSettings, tmp_path: Path) -> None:
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    script = tmp_path / "broken.sql"
    script.write_bytes(codecs.BOM_UTF16_LE + b"U\x00S\x00E\x00 \x00\x00\xd8")

    runner = ScriptRunner(connection, executable=str(tmp_path / "missing"), temp_dir=scratch)

    assert runner.execute_script(script) is False
    assert "Could not prepare script" in runner.last_error
    assert list(scratch.iterdir()) == []


def test_rewrite_script_custom_placeholder(tmp_path: Path) -> None:
    source = tmp_path / "setup.sql"
    source.write_bytes(b"USE template_db\n")
    copy = tmp_path / "copy.sql"

    rewrite_script(source, copy, "Target", placeholder="template_db")

    assert copy.read_bytes() == b"USE Target\n"


# ─────────────────────────────────────────────────────────────────────────────
# Argument building
# ─────────────────────────────────────────────────────────────────────────────


def test_statement_arguments_with_login(connection: ConnectionSettings) -> None:
    connection.user_name = "sa"
    connection.password = "Secret123"
    runner = ScriptRunner(connection, executable="sqlcmd")

    args = runner.build_arguments(statement="SELECT 1")

    assert args == [
        "sqlcmd", "-b", "-S", "dbserver", "-d", "MyDB",
        "-U", "sa", "-P", "Secret123", "-Q", "SELECT 1",
    ]


def test_script_arguments_omit_database_and_missing_login(connection: ConnectionSettings) -> None:
    runner = ScriptRunner(connection, executable="sqlcmd")

    args = runner.build_arguments(script_path="/tmp/x.sql")

    assert args == ["sqlcmd", "-b", "-S", "dbserver", "-i", "/tmp/x.sql"]


def test_arguments_require_host() -> None:
    runner = ScriptRunner(ConnectionSettings({"Initial Catalog": "MyDB"}))

    with pytest.raises(ValueError):
        runner.build_arguments(statement="SELECT 1")


def test_format_command_masks_password() -> None:
    text = format_command(["sqlcmd", "-S", "srv", "-P", "Secret123", "-Q", "SELECT 1"])

    assert "Secret123" not in text
    assert "********" in text


# ─────────────────────────────────────────────────────────────────────────────
# Process execution
# ─────────────────────────────────────────────────────────────────────────────


@posix_only
def test_execute_statement_relays_lines_in_stream_order(connection, fake_sqlcmd) -> None:
    sqlcmd = fake_sqlcmd(0)
    runner = ScriptRunner(connection, executable=str(sqlcmd.path))
    output: List[str] = []
    errors: List[str] = []
    threads = set()

    def on_output(line: OutputLine) -> None:
        assert line.stream == OutputStream.STDOUT
        threads.add(threading.get_ident())
        output.append(line.text)

    def on_error(line: OutputLine) -> None:
        assert line.is_error
        errors.append(line.text)

    runner.add_output_listener(on_output)
    runner.add_error_listener(on_error)

    assert runner.execute_statement("SELECT 1") is True
    assert output == ["out 1", "out 2"]
    assert errors == ["err 1", "err 2"]
    assert threading.get_ident() not in threads
    assert runner.last_exit_code == 0
    assert sqlcmd.argv[-2:] == ["-Q", "SELECT 1"]


@posix_only
def test_execute_statement_nonzero_exit_is_failure(connection, fake_sqlcmd) -> None:
    runner = ScriptRunner(connection, executable=str(fake_sqlcmd(1).path))

    assert runner.execute_statement("SELECT 1") is False
    assert runner.last_exit_code == 1
    assert "code 1" in runner.last_error


def test_missing_executable_is_failure(connection, tmp_path: Path) -> None:
    runner = ScriptRunner(connection, executable=str(tmp_path / "no-such-sqlcmd"))

    assert runner.execute_statement("SELECT 1") is False
    assert "Failed to start" in runner.last_error


@posix_only
def test_execute_script_runs_rewritten_copy_and_deletes_it(connection, fake_sqlcmd, tmp_path: Path) -> None:
    sqlcmd = fake_sqlcmd(0)
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    script = tmp_path / "setup.sql"
    script.write_bytes(b"USE openPDC\n-- USE openPDC\nSELECT 1\n")
    output: List[str] = []

    runner = ScriptRunner(connection, executable=str(sqlcmd.path), temp_dir=scratch)
    runner.add_output_listener(lambda line: output.append(line.text))

    assert runner.execute_script(script) is True

    copy_path = Path(sqlcmd.argv[sqlcmd.argv.index("-i") + 1])
    assert copy_path.parent == scratch
    assert not copy_path.exists()
    assert list(scratch.iterdir()) == []
    assert "-d" not in sqlcmd.argv
    assert sqlcmd.copy_file.read_bytes() == b"USE MyDB\n-- USE openPDC\nSELECT 1\n"
    assert "USE MyDB" in output


@posix_only
def test_execute_script_failure_still_deletes_copy(connection, fake_sqlcmd, tmp_path: Path) -> None:
    sqlcmd = fake_sqlcmd(1)
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    script = tmp_path / "setup.sql"
    script.write_text("USE openPDC\n")

    runner = ScriptRunner(connection, executable=str(sqlcmd.path), temp_dir=scratch)

    assert runner.execute_script(script) is False
    assert list(scratch.iterdir()) == []


def test_execute_script_missing_executable_deletes_copy(connection, tmp_path: Path) -> None:
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    script = tmp_path / "setup.sql"
    script.write_text("USE openPDC\n")

    runner = ScriptRunner(connection, executable=str(tmp_path / "missing"), temp_dir=scratch)

    assert runner.execute_script(script) is False
    assert list(scratch.iterdir()) == []


def test_execute_script_unreadable_script_deletes_copy(connection, tmp_path: Path) -> None:
    scratch = tmp_path / "scratch"
    scratch.mkdir()

    runner = ScriptRunner(connection, executable=str(tmp_path / "missing"), temp_dir=scratch)

    assert runner.execute_script(tmp_path / "does-not-exist.sql") is False
    assert "Could not prepare script" in runner.last_error
    assert list(scratch.iterdir()) == []


@posix_only
def test_failing_listener_does_not_stop_output(connection, fake_sqlcmd) -> None:
    runner = ScriptRunner(connection, executable=str(fake_sqlcmd(0).path))
    received: List[str] = []

    def broken(line: OutputLine) -> None:
        raise RuntimeError("listener bug")

    runner.add_output_listener(broken)
    runner.add_output_listener(lambda line: received.append(line.text))

    assert runner.execute_statement("SELECT 1") is True
    assert received == ["out 1", "out 2"]
