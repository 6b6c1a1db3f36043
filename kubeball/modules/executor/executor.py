"""
Command executor for kubeball.

Two invocation modes are offered:

- ``output``: run a program and return its stdout, raising on failure.
  Used for listing contexts/namespaces and reading the picker's choice.
- ``run``: run a program with separate stdout/stderr buffers and an explicit
  success flag. Used for the forwarded per-context command; never raises for
  process-level failures so the caller can report them inline.

Output is passed through untouched apart from decoding. No timeout is
applied: a hung child process blocks its caller.

Decoding is lossy: child output is read as text in the executor's encoding
(UTF-8 by default) with ``errors="replace"``, so bytes that do not decode
(binary ``kubectl cp``/``exec`` output, logs in another charset) come back
as U+FFFD and cannot be recovered. Neither mode is meant for binary data.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol

from kubeball.errors import KubeballError

logger = logging.getLogger("kubeball.executor")


class CommandError(KubeballError):
    """Raised when a program cannot be started or exits non-zero."""

    def __init__(self, program: str, message: str, returncode: Optional[int] = None, stderr: str = ""):
        self.program = program
        self.returncode = returncode
        self.stderr = stderr
        detail = message
        if stderr.strip():
            detail = f"{message}: {stderr.strip()}"
        super().__init__(detail)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a program run with separate output buffers."""

    stdout: str = ""
    stderr: str = ""
    returncode: int = 0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


class CommandExecutor(Protocol):
    """Protocol for running external programs - allows swappable implementations."""

    def output(self, program: str, args: List[str], stdin: Optional[str] = None) -> str:
        """
        Run a program and capture its standard output.

        Args:
            program: Executable name or path
            args: Arguments passed to the program
            stdin: Optional text fed to the program's standard input

        Returns:
            Captured standard output

        Raises:
            CommandError: If the program is missing or exits non-zero
        """
        ...

    def run(self, program: str, args: List[str]) -> CommandResult:
        """
        Run a program capturing stdout and stderr separately.

        Returns:
            CommandResult; ``error`` is set when the program failed
        """
        ...


def find_executable(name: str) -> Optional[str]:
    """Return the full path of ``name`` on PATH, or None."""
    return shutil.which(name)


def _exit_status(returncode: int) -> str:
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status {returncode}"


class SubprocessExecutor:
    """CommandExecutor backed by subprocess.run."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def _spawn(self, program: str, args: List[str], stdin: Optional[str]) -> subprocess.CompletedProcess:
        cmd = [program] + list(args)
        logger.debug(f"Running: {' '.join(cmd)}")
        return subprocess.run(
            cmd,
            input=stdin,
            capture_output=True,
            text=True,
            encoding=self.encoding,
            errors="replace",
        )

    def output(self, program: str, args: List[str], stdin: Optional[str] = None) -> str:
        try:
            process = self._spawn(program, args, stdin)
        except FileNotFoundError:
            raise CommandError(program, f'executable file "{program}" not found in $PATH')
        except OSError as e:
            raise CommandError(program, str(e))

        if process.returncode != 0:
            raise CommandError(
                program,
                _exit_status(process.returncode),
                returncode=process.returncode,
                stderr=process.stderr or "",
            )
        return process.stdout

    def run(self, program: str, args: List[str]) -> CommandResult:
        try:
            process = self._spawn(program, args, None)
        except FileNotFoundError:
            logger.error(f"Executable not found: {program}")
            return CommandResult(error=f'executable file "{program}" not found in $PATH', returncode=-1)
        except OSError as e:
            logger.error(f"Command execution failed: {e}")
            return CommandResult(error=str(e), returncode=-1)

        error = None
        if process.returncode != 0:
            error = _exit_status(process.returncode)
        return CommandResult(
            stdout=process.stdout or "",
            stderr=process.stderr or "",
            returncode=process.returncode,
            error=error,
        )
