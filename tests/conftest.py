"""Shared test fixtures for the setup tool tests.

Provides:
- fake_sqlcmd: writes a POSIX shell script that stands in for sqlcmd
- FakeAuthenticator / FakeRunner: collaborators for wizard tests
"""

import stat
import sys
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from pdc_setup.config.models import SetupSettings
from pdc_setup.database.connection import ConnectionSettings
from pdc_setup.identity import Authenticator
from pdc_setup.wizard.state import SharedState


posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake sqlcmd is a POSIX shell script")


FAKE_SQLCMD = """#!/bin/sh
printf '%s\\n' "$@" > "{argv_file}"
echo "out 1"
echo "err 1" >&2
while [ $# -gt 0 ]; do
  if [ "$1" = "-i" ]; then
    shift
    cat "$1"
    cp "$1" "{copy_file}"
  fi
  shift
done
echo "out 2"
echo "err 2" >&2
exit {exit_code}
"""


class FakeSqlCmd:
    """A fake sqlcmd executable and the files it leaves behind."""

    def __init__(self, directory: Path, exit_code: int = 0):
        self.path = directory / "sqlcmd"
        self.argv_file = directory / "argv.txt"
        self.copy_file = directory / "script_copy.sql"
        self.path.write_text(FAKE_SQLCMD.format(
            argv_file=self.argv_file,
            copy_file=self.copy_file,
            exit_code=exit_code,
        ))
        self.path.chmod(self.path.stat().st_mode | stat.S_IEXEC | stat.S_IXGRP | stat.S_IXOTH)

    @property
    def argv(self) -> List[str]:
        return self.argv_file.read_text().splitlines()


@pytest.fixture
def fake_sqlcmd(tmp_path: Path) -> Callable[[int], FakeSqlCmd]:
    """Factory for fake sqlcmd executables exiting with the given code."""
    def create(exit_code: int = 0) -> FakeSqlCmd:
        directory = tmp_path / f"sqlcmd_{exit_code}"
        directory.mkdir(exist_ok=True)
        return FakeSqlCmd(directory, exit_code)
    return create


@pytest.fixture
def connection() -> ConnectionSettings:
    settings = ConnectionSettings()
    settings.host_name = "dbserver"
    settings.database_name = "MyDB"
    return settings


class FakeAuthenticator(Authenticator):
    """Authenticator with a canned answer."""

    def __init__(self, accept: bool = True, error: Optional[Exception] = None):
        self.accept = accept
        self.error = error
        self.calls: List[tuple] = []

    def authenticate(self, domain: str, user: str, password: str) -> bool:
        self.calls.append((domain, user, password))
        if self.error is not None:
            raise self.error
        return self.accept


class FakeRunner:
    """Records what the apply screen asks sqlcmd to run."""

    def __init__(self, connection: ConnectionSettings, fail_on: Optional[str] = None):
        self.connection = connection
        self.fail_on = fail_on
        self.scripts: List[Path] = []
        self.statements: List[str] = []
        self.listeners: List[Callable] = []
        self.last_error: Optional[str] = None

    def add_listener(self, listener: Callable) -> None:
        self.listeners.append(listener)

    def execute_script(self, script_path) -> bool:
        self.scripts.append(Path(script_path))
        if self.fail_on and self.fail_on in str(script_path):
            self.last_error = "sqlcmd exited with code 1"
            return False
        return True

    def execute_statement(self, statement: str) -> bool:
        self.statements.append(statement)
        if self.fail_on == "statement":
            self.last_error = "sqlcmd exited with code 1"
            return False
        return True


@pytest.fixture
def authenticator() -> FakeAuthenticator:
    return FakeAuthenticator(accept=True)


@pytest.fixture
def runners() -> List[FakeRunner]:
    """FakeRunners created by the shared state, in creation order."""
    return []


@pytest.fixture
def shared_state(authenticator: FakeAuthenticator, runners: List[FakeRunner]) -> SharedState:
    def factory(connection: ConnectionSettings) -> FakeRunner:
        runner = FakeRunner(connection)
        runners.append(runner)
        return runner

    return SharedState(
        settings=SetupSettings(),
        authenticator=authenticator,
        runner_factory=factory,
    )
