"""
Fan-out runner for kubeball.

One worker thread is started per cluster context, with no cap on their
number. Each worker runs kubectl on its own and only takes the report lock
to append its finished section, so commands execute fully in parallel.
Sections appear in the order workers reached the lock, which is completion
order and differs between runs.

There is no timeout and no cancellation. ``run`` returns only after every
worker has finished, so a kubectl call that never exits hangs the whole
invocation.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from kubeball.modules.executor import CommandExecutor

logger = logging.getLogger("kubeball.runner")


class RunnerState(Enum):
    """Lifecycle of a single fan-out."""

    IDLE = "idle"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of the command in one context."""

    context: str
    output: str = ""
    error: Optional[str] = None
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.error is None

    def render(self) -> str:
        """Format as a labeled report section."""
        header = f"\n===== [{self.context}] =====\n"
        if self.error is not None:
            return f"{header}Error: {self.error}\n{self.stderr}\n"
        return f"{header}{self.output}\n"


class Report:
    """Sections collected from concurrent workers."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sections: List[ExecutionResult] = []

    def add(self, result: ExecutionResult) -> None:
        with self._lock:
            self._sections.append(result)

    @property
    def sections(self) -> List[ExecutionResult]:
        with self._lock:
            return list(self._sections)

    @property
    def contexts(self) -> List[str]:
        return [section.context for section in self.sections]

    def by_context(self) -> Dict[str, ExecutionResult]:
        """Sections keyed by context label, independent of completion order."""
        return {section.context: section for section in self.sections}

    def render(self) -> str:
        return "".join(section.render() for section in self.sections)

    def __len__(self) -> int:
        return len(self.sections)


def build_command(
    context: str,
    args: List[str],
    namespace: Optional[str] = None,
    output_format: Optional[str] = None,
) -> List[str]:
    """
    Build the kubectl arguments for one context.

    Args:
        context: Context passed as --context
        args: User command, forwarded verbatim
        namespace: Appended as -n when set
        output_format: Appended as -o when set
    """
    cmd_args = ["--context", context] + list(args)
    if namespace:
        cmd_args += ["-n", namespace]
    if output_format:
        cmd_args += ["-o", output_format]
    return cmd_args


def filter_lines(output: str, pattern: str) -> Optional[str]:
    """
    Keep only the lines containing ``pattern`` (case-sensitive).

    Returns:
        Matching lines joined by newlines, or None when nothing matched
    """
    lines = [line for line in output.split("\n") if pattern in line]
    if not lines:
        return None
    return "\n".join(lines)


class FanOutRunner:
    """Runs a kubectl command in every selected context concurrently."""

    def __init__(self, executor: CommandExecutor, kubectl: str = "kubectl"):
        self.executor = executor
        self.kubectl = kubectl
        self.state = RunnerState.IDLE

    def _execute(self, context: str, cmd_args: List[str], grep: Optional[str]) -> Optional[ExecutionResult]:
        extra = {"context": context}
        try:
            result = self.executor.run(self.kubectl, cmd_args)
        except Exception as e:
            logger.error(f"Command execution failed: {e}", extra=extra)
            return ExecutionResult(context=context, error=str(e))

        output = result.stdout
        if grep:
            output = filter_lines(output, grep)
            if output is None:
                logger.info(f"No lines matching {grep!r}, skipping", extra=extra)
                return None

        if not result.success:
            logger.warning(f"Command failed: {result.error}", extra=extra)
        return ExecutionResult(
            context=context,
            output=output,
            error=result.error,
            stderr=result.stderr,
        )

    def _worker(
        self,
        context: str,
        cmd_args: List[str],
        grep: Optional[str],
        report: Report,
    ) -> None:
        section = self._execute(context, cmd_args, grep)
        if section is not None:
            report.add(section)

    def run(
        self,
        contexts: List[str],
        args: List[str],
        namespace: Optional[str] = None,
        grep: Optional[str] = None,
        output_format: Optional[str] = None,
    ) -> Report:
        """
        Run ``kubectl <args>`` in each context and wait for all of them.

        Args:
            contexts: Cluster contexts, one worker each
            args: kubectl arguments forwarded to every context
            namespace: Namespace added to every command
            grep: Only keep output lines containing this text; contexts
                  with no matching line are left out of the report
            output_format: Output format added to every command

        Returns:
            Report with one section per context that produced output
        """
        report = Report()
        threads = []
        for context in contexts:
            cmd_args = build_command(context, args, namespace, output_format)
            logger.debug(f"Dispatching: {self.kubectl} {' '.join(cmd_args)}", extra={"context": context})
            thread = threading.Thread(
                target=self._worker,
                args=(context, cmd_args, grep, report),
                name=f"kubeball-{context}",
            )
            threads.append(thread)

        self.state = RunnerState.DISPATCHED
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.state = RunnerState.COMPLETED

        logger.info(f"Completed {len(threads)} contexts, {len(report)} sections")
        return report
