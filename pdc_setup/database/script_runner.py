"""
SQL Script Runner

Runs SQL statements and script files through the sqlcmd command-line client
and relays its output line by line to registered listeners.
"""

import codecs
import logging
import os
import subprocess
import tempfile
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import IO, Callable, List, Optional, Union

from .connection import ConnectionSettings


logger = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "sqlcmd"
DEFAULT_PLACEHOLDER = "openPDC"

# Script lines starting with one of these get the placeholder database name replaced
REWRITE_PREFIXES = ("CREATE DATABASE", "ALTER DATABASE", "USE")

# Byte order marks of the UTF-16 encodings SQL Server tools save "Unicode" scripts in
UTF16_BOMS = (
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


class OutputStream(str, Enum):
    """Process output streams."""
    STDOUT = "stdout"
    STDERR = "stderr"


@dataclass
class OutputLine:
    """A single line received from the client process."""
    stream: OutputStream
    text: str

    @property
    def is_error(self) -> bool:
        return self.stream == OutputStream.STDERR

    def __str__(self) -> str:
        return self.text


OutputListener = Callable[[OutputLine], None]


def rewrite_script(
    source: Union[str, Path],
    destination: Union[str, Path],
    database_name: str,
    placeholder: str = DEFAULT_PLACEHOLDER,
) -> int:
    """
    Copy a SQL script, pointing its database statements at another database.

    Every line that starts with CREATE DATABASE, ALTER DATABASE or USE has
    each occurrence of the placeholder replaced with database_name. All other
    lines, and all line endings, are copied unchanged. UTF-16 scripts are
    recognised by their byte order mark and written back in the same
    encoding; anything else is matched as UTF-8 bytes.

    Args:
        source: Path of the original script
        destination: Path of the rewritten copy
        database_name: Target database name
        placeholder: Database name used in the original script

    Returns:
        Number of lines rewritten

    Raises:
        ValueError: If the placeholder is empty
        UnicodeDecodeError: If a UTF-16 script is not valid UTF-16
        OSError: If the source cannot be read or the destination written
    """
    if not placeholder:
        raise ValueError("Script placeholder database name cannot be empty")

    with open(source, "rb") as src:
        data = src.read()

    bom, encoding = b"", None
    for candidate, candidate_encoding in UTF16_BOMS:
        if data.startswith(candidate):
            bom, encoding = candidate, candidate_encoding
            break
    else:
        if data.startswith(codecs.BOM_UTF8):
            bom = codecs.BOM_UTF8

    body = data[len(bom):]
    if encoding:
        lines = body.decode(encoding).splitlines(keepends=True)
        prefixes, old, new = REWRITE_PREFIXES, placeholder, database_name
    else:
        lines = body.splitlines(keepends=True)
        prefixes = tuple(prefix.encode("utf-8") for prefix in REWRITE_PREFIXES)
        old, new = placeholder.encode("utf-8"), database_name.encode("utf-8")

    rewritten = 0
    for number, line in enumerate(lines):
        if line.startswith(prefixes) and old in line:
            lines[number] = line.replace(old, new)
            rewritten += 1

    output = "".join(lines).encode(encoding) if encoding else b"".join(lines)
    with open(destination, "wb") as dst:
        dst.write(bom + output)

    return rewritten


def format_command(args: List[str]) -> str:
    """Create a readable command line for logging, with the password masked."""
    masked = list(args)
    for i, arg in enumerate(masked[:-1]):
        if arg == "-P":
            masked[i + 1] = "********"
    return subprocess.list2cmdline(masked)


class ScriptRunner:
    """
    Executes SQL through the sqlcmd client.

    Each call launches one client process, drains stdout and stderr on two
    reader threads and blocks until the process exits. Lines from one stream
    arrive in order; lines from different streams may interleave. Listeners
    are called on the reader threads.
    """

    def __init__(
        self,
        connection: ConnectionSettings,
        executable: str = DEFAULT_EXECUTABLE,
        placeholder: str = DEFAULT_PLACEHOLDER,
        temp_dir: Optional[Union[str, Path]] = None,
        timeout: Optional[float] = None,
        abort_on_error: bool = True,
    ):
        """
        Initialize the runner.

        Args:
            connection: Target server connection settings
            executable: sqlcmd executable name or path
            placeholder: Database name used inside setup scripts
            temp_dir: Directory for rewritten script copies (system default if None)
            timeout: Seconds to wait for the client before killing it (None waits forever)
            abort_on_error: Pass -b so sqlcmd stops on the first error

        Raises:
            ValueError: If placeholder is empty
        """
        if not placeholder:
            raise ValueError("Script placeholder database name cannot be empty")

        self.connection = connection
        self.executable = executable
        self.placeholder = placeholder
        self.temp_dir = Path(temp_dir) if temp_dir else None
        self.timeout = timeout
        self.abort_on_error = abort_on_error

        self.last_error: Optional[str] = None
        self.last_exit_code: Optional[int] = None

        self._output_listeners: List[OutputListener] = []
        self._error_listeners: List[OutputListener] = []

    # Listener registration

    def add_output_listener(self, listener: OutputListener) -> None:
        self._output_listeners.append(listener)

    def remove_output_listener(self, listener: OutputListener) -> None:
        if listener in self._output_listeners:
            self._output_listeners.remove(listener)

    def add_error_listener(self, listener: OutputListener) -> None:
        self._error_listeners.append(listener)

    def remove_error_listener(self, listener: OutputListener) -> None:
        if listener in self._error_listeners:
            self._error_listeners.remove(listener)

    def add_listener(self, listener: OutputListener) -> None:
        """Register a listener for both streams."""
        self.add_output_listener(listener)
        self.add_error_listener(listener)

    # Execution

    def build_arguments(
        self,
        statement: Optional[str] = None,
        script_path: Optional[Union[str, Path]] = None,
    ) -> List[str]:
        """
        Build the sqlcmd argument vector.

        Exactly one of statement or script_path must be given. Statement mode
        selects the database with -d; script mode leaves that to the script.

        Raises:
            ValueError: If the host or database is missing, or both/neither
                of statement and script_path are given
        """
        if (statement is None) == (script_path is None):
            raise ValueError("Provide either a statement or a script path")

        host = self.connection.host_name
        database = self.connection.database_name
        if not host:
            raise ValueError("Connection settings have no Data Source")
        if not database:
            raise ValueError("Connection settings have no Initial Catalog")

        args = [self.executable]
        if self.abort_on_error:
            args.append("-b")
        args.extend(["-S", host])

        if statement is not None:
            args.extend(["-d", database])

        if self.connection.user_name:
            args.extend(["-U", self.connection.user_name])

        if self.connection.password:
            args.extend(["-P", self.connection.password])

        if statement is not None:
            args.extend(["-Q", statement])
        else:
            args.extend(["-i", str(script_path)])

        return args

    def execute_statement(self, statement: str) -> bool:
        """
        Execute a single SQL statement.

        Args:
            statement: SQL text passed to sqlcmd -Q

        Returns:
            True if sqlcmd exited with code 0
        """
        args = self.build_arguments(statement=statement)
        return self._run(args)

    def execute_script(self, script_path: Union[str, Path]) -> bool:
        """
        Execute a SQL script file against the configured database.

        The script is copied to a private temporary file with its
        CREATE/ALTER DATABASE and USE lines pointed at the configured
        database. The copy is always deleted before returning.

        Args:
            script_path: Path of the script to run

        Returns:
            True if sqlcmd exited with code 0
        """
        database = self.connection.database_name
        if not database:
            raise ValueError("Connection settings have no Initial Catalog")

        self.last_error = None
        self.last_exit_code = None

        try:
            fd, copy_path = tempfile.mkstemp(
                prefix="pdc_setup_",
                suffix=".sql",
                dir=str(self.temp_dir) if self.temp_dir else None,
            )
        except OSError as e:
            return self._fail(f"Could not create temporary script: {e}")

        try:
            os.close(fd)
            args = self.build_arguments(script_path=copy_path)

            try:
                count = rewrite_script(script_path, copy_path, database, self.placeholder)
            except (OSError, UnicodeError) as e:
                return self._fail(f"Could not prepare script {script_path}: {e}")

            logger.debug(f"Rewrote {count} line(s) of {script_path} for database {database}")
            return self._run(args)
        finally:
            try:
                os.remove(copy_path)
            except FileNotFoundError:
                pass

    def _run(self, args: List[str]) -> bool:
        """Launch sqlcmd, relay its output and wait for it to exit."""
        self.last_error = None
        self.last_exit_code = None
        process: Optional[subprocess.Popen] = None
        readers: List[threading.Thread] = []

        logger.info(f"Running: {format_command(args)}")

        try:
            try:
                process = subprocess.Popen(
                    args,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.PIPE,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                    bufsize=1,
                    creationflags=getattr(subprocess, "CREATE_NO_WINDOW", 0),
                )
            except OSError as e:
                return self._fail(f"Failed to start {self.executable}: {e}")

            readers = [
                threading.Thread(
                    target=self._drain,
                    args=(process.stdout, OutputStream.STDOUT, self._output_listeners),
                    name="sqlcmd-stdout",
                    daemon=True,
                ),
                threading.Thread(
                    target=self._drain,
                    args=(process.stderr, OutputStream.STDERR, self._error_listeners),
                    name="sqlcmd-stderr",
                    daemon=True,
                ),
            ]
            for reader in readers:
                reader.start()

            try:
                exit_code = process.wait(timeout=self.timeout)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()
                return self._fail(f"{self.executable} did not finish within {self.timeout} seconds")

            for reader in readers:
                reader.join()

            self.last_exit_code = exit_code
            if exit_code != 0:
                return self._fail(f"{self.executable} exited with code {exit_code}")

            return True
        finally:
            if process is not None:
                if process.poll() is None:
                    process.kill()
                    process.wait()
                for reader in readers:
                    reader.join(timeout=5)
                for pipe in (process.stdout, process.stderr):
                    if pipe is not None:
                        pipe.close()

    def _drain(
        self,
        pipe: Optional[IO[str]],
        stream: OutputStream,
        listeners: List[OutputListener],
    ) -> None:
        """Read one stream to EOF, forwarding each line."""
        if pipe is None:
            return

        try:
            for raw in pipe:
                line = OutputLine(stream=stream, text=raw.rstrip("\r\n"))
                for listener in list(listeners):
                    try:
                        listener(line)
                    except Exception:
                        logger.exception(f"Output listener failed on {stream.value} line")
        except ValueError:
            # Pipe closed underneath us after a kill
            pass

    def _fail(self, message: str) -> bool:
        self.last_error = message
        logger.error(message)
        return False
