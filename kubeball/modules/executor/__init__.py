"""
Executor Module - Black Box Interface

Purpose: Run external programs (kubectl, fzf) as child processes
Interface: CommandExecutor.output(), CommandExecutor.run(), find_executable()
Hidden: subprocess handling, stdin feeding, output decoding

Can be replaced with any object implementing the CommandExecutor protocol,
which is how tests stand in for both kubectl and the picker.
"""

from .executor import (
    CommandError,
    CommandExecutor,
    CommandResult,
    SubprocessExecutor,
    find_executable,
)

__all__ = [
    "CommandError",
    "CommandExecutor",
    "CommandResult",
    "SubprocessExecutor",
    "find_executable",
]
