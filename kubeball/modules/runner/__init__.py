"""
Runner Module - Black Box Interface

Purpose: Run one kubectl command against many cluster contexts at once
Interface: FanOutRunner.run() -> Report, build_command(), filter_lines()
Hidden: worker threads, report locking, output filtering

Every context is always attempted; a failure in one never affects another.
"""

from .runner import (
    ExecutionResult,
    FanOutRunner,
    Report,
    RunnerState,
    build_command,
    filter_lines,
)

__all__ = [
    "ExecutionResult",
    "FanOutRunner",
    "Report",
    "RunnerState",
    "build_command",
    "filter_lines",
]
