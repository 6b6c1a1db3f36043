"""
Shared pytest fixtures for kubeball tests.

This module provides common fixtures including:
- CommandMocker: Mock kubectl/fzf subprocess calls with canned responses
- FakeExecutor: In-memory CommandExecutor standing in for kubectl and fzf
- Settings and picker fixtures for CLI tests
"""

import logging
import os
import sys
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
from unittest.mock import MagicMock, patch

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kubeball.config.provider import Settings
from kubeball.modules.executor import CommandError, CommandResult


# =============================================================================
# Subprocess Mocking Infrastructure
# =============================================================================

@dataclass
class CommandResponse:
    """Represents a mocked command response."""
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0

    def to_completed_process(self) -> MagicMock:
        """Convert to a subprocess.CompletedProcess-like mock."""
        result = MagicMock()
        result.stdout = self.stdout
        result.stderr = self.stderr
        result.returncode = self.returncode
        return result


@dataclass
class CommandCall:
    """Record of a subprocess call made during testing."""
    command: List[str]
    input: Optional[str] = None
    kwargs: Dict[str, object] = field(default_factory=dict)

    @property
    def command_line(self) -> str:
        return " ".join(self.command)


class CommandMocker:
    """
    Stand-in for subprocess.run answering by substring of the command line.

    The first registered substring found in "program arg1 arg2 ..." wins, so
    one mocker serves both kubectl and fzf. Unmatched commands fail with
    exit status 1.
    """

    UNMATCHED = CommandResponse(stderr="no response registered for this command", returncode=1)

    def __init__(self):
        self._responses: List[Tuple[str, CommandResponse]] = []
        self.calls: List[CommandCall] = []
        self._lock = threading.Lock()

    def register(self, fragment: str, response: CommandResponse) -> "CommandMocker":
        self._responses.append((fragment, response))
        return self

    def mock_run(self, cmd: List[str], input: Optional[str] = None, **kwargs) -> MagicMock:
        call = CommandCall(command=list(cmd), input=input, kwargs=kwargs)
        with self._lock:
            self.calls.append(call)
        for fragment, response in self._responses:
            if fragment in call.command_line:
                return response.to_completed_process()
        return self.UNMATCHED.to_completed_process()

    def was_called_with(self, fragment: str) -> bool:
        return any(fragment in call.command_line for call in self.calls)


@pytest.fixture
def command_mocker():
    """CommandMocker installed over subprocess.run for the test's duration."""
    mocker = CommandMocker()
    with patch("subprocess.run", side_effect=mocker.mock_run):
        yield mocker


# =============================================================================
# In-memory Executor
# =============================================================================

@dataclass
class FakeCall:
    """Record of a call made to FakeExecutor."""
    program: str
    args: List[str]
    stdin: Optional[str] = None
    mode: str = "output"


@dataclass
class FakeExecutor:
    """
    CommandExecutor that answers from registered canned outputs.

    Keys are (program, args) with exact argument lists. Unregistered
    output() calls raise CommandError; unregistered run() calls fail.
    """
    outputs: Dict[Tuple[str, Tuple[str, ...]], Union[str, CommandError]] = field(default_factory=dict)
    results: Dict[Tuple[str, Tuple[str, ...]], CommandResult] = field(default_factory=dict)
    calls: List[FakeCall] = field(default_factory=list)

    def __post_init__(self):
        self._lock = threading.Lock()

    def set_output(self, program: str, args: List[str], output: str = "", error: Optional[CommandError] = None):
        self.outputs[(program, tuple(args))] = error if error is not None else output
        return self

    def set_result(self, program: str, args: List[str], result: CommandResult):
        self.results[(program, tuple(args))] = result
        return self

    def output(self, program: str, args: List[str], stdin: Optional[str] = None) -> str:
        with self._lock:
            self.calls.append(FakeCall(program, list(args), stdin, "output"))
        value = self.outputs.get((program, tuple(args)))
        if value is None:
            raise CommandError(program, "exit status 1", returncode=1, stderr="no fake output registered")
        if isinstance(value, CommandError):
            raise value
        return value

    def run(self, program: str, args: List[str]) -> CommandResult:
        with self._lock:
            self.calls.append(FakeCall(program, list(args), None, "run"))
        return self.results.get(
            (program, tuple(args)),
            CommandResult(stderr="no fake result registered", returncode=1, error="exit status 1"),
        )

    def calls_to(self, program: str) -> List[FakeCall]:
        return [c for c in self.calls if c.program == program]


@pytest.fixture
def fake_executor():
    """Fresh FakeExecutor for each test."""
    return FakeExecutor()


# =============================================================================
# CLI Fixtures
# =============================================================================

@pytest.fixture
def config_path(tmp_path) -> Path:
    """Config file location inside a nested, not yet created directory."""
    return tmp_path / "home" / ".kubectl-ball" / "config.yaml"


@pytest.fixture
def settings(config_path) -> Settings:
    """Settings pointing at a temporary config file."""
    return Settings(config_path=config_path, kubectl="kubectl", picker="fzf", log_level="WARNING")


@pytest.fixture
def picker_installed():
    """Pretend fzf is on PATH."""
    with patch("kubeball.modules.selector.selector.find_executable", return_value="/usr/bin/fzf") as which:
        yield which


@pytest.fixture
def picker_missing():
    """Pretend fzf is not on PATH."""
    with patch("kubeball.modules.selector.selector.find_executable", return_value=None) as which:
        yield which


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by main() so later tests don't log to closed streams."""
    yield
    for name in ("kubeball", "kubeball.runner"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
