"""
Interactive cluster and namespace selection.

Candidates come from kubectl and are handed to fzf on stdin, one per line.
fzf draws its UI on the terminal and prints the chosen lines on stdout; it
exits non-zero when the user aborts.
"""

import logging
from typing import List

from kubeball.errors import KubeballError
from kubeball.modules.executor import CommandError, CommandExecutor, find_executable

logger = logging.getLogger("kubeball.selector")

PICKER_INSTALL_HINT = """Install it:
  macOS:   brew install fzf
  Ubuntu:  sudo apt install fzf
  Docs:    https://github.com/junegunn/fzf"""

CLUSTER_PROMPT = "--prompt=Select Clusters > "
NAMESPACE_PROMPT = "--prompt=Select Namespace > "


class SelectionError(KubeballError):
    """Raised when listing candidates or picking among them fails."""


class PickerNotFoundError(SelectionError):
    """The picker executable is not on PATH."""


class NoClustersSelectedError(SelectionError):
    """A namespace was requested before any cluster was selected."""


def _split_lines(text: str) -> List[str]:
    return [line for line in text.strip().split("\n") if line.strip()]


def strip_resource_prefix(name: str) -> str:
    """Turn ``namespace/default`` into ``default``."""
    _, sep, rest = name.partition("/")
    return rest if sep else name


class Selector:
    """Drives kubectl and the picker to choose contexts and a namespace."""

    def __init__(self, executor: CommandExecutor, kubectl: str = "kubectl", picker: str = "fzf"):
        self.executor = executor
        self.kubectl = kubectl
        self.picker = picker
        self._picker_checked = False

    def check_picker(self) -> None:
        """
        Make sure the picker is installed.

        Only the first call looks at PATH.

        Raises:
            PickerNotFoundError: With installation guidance
        """
        if self._picker_checked:
            return
        if find_executable(self.picker) is None:
            raise PickerNotFoundError(f'"{self.picker}" not found. {PICKER_INSTALL_HINT}')
        self._picker_checked = True

    def get_contexts(self, merge: bool = False) -> List[str]:
        """
        List available cluster contexts.

        Args:
            merge: Read context names from the flattened kubeconfig view
                   (merges every file in KUBECONFIG) instead of get-contexts

        Raises:
            SelectionError: If kubectl fails
        """
        if merge:
            args = ["config", "view", "--flatten", "--minify", "-o=jsonpath={.contexts[*].name}"]
        else:
            args = ["config", "get-contexts", "-o=name"]

        try:
            output = self.executor.output(self.kubectl, args)
        except CommandError as e:
            raise SelectionError(f"Failed to get contexts: {e}") from e

        contexts = output.split() if merge else _split_lines(output)
        logger.debug(f"Found {len(contexts)} contexts")
        return contexts

    def _pick(self, candidates: List[str], picker_args: List[str]) -> List[str]:
        if len(candidates) == 1:
            logger.info(f"Only one candidate, selecting {candidates[0]}")
            return list(candidates)

        self.check_picker()
        try:
            output = self.executor.output(self.picker, picker_args, stdin="\n".join(candidates))
        except CommandError as e:
            raise SelectionError(f"{self.picker} selection error: {e}") from e
        return _split_lines(output)

    def select_clusters(self, contexts: List[str]) -> List[str]:
        """
        Choose one or more contexts.

        Returns:
            Selected contexts in picker order; empty if the picker returned nothing

        Raises:
            SelectionError: If there is nothing to choose from or the picker fails
        """
        if not contexts:
            raise SelectionError("No cluster contexts available")
        selected = self._pick(contexts, ["--multi", CLUSTER_PROMPT])
        logger.info(f"Selected clusters: {', '.join(selected)}")
        return selected

    def get_namespaces(self, context: str) -> List[str]:
        """
        List namespaces visible through ``context``.

        Raises:
            SelectionError: If kubectl fails
        """
        args = ["--context", context, "get", "namespaces", "-o", "name"]
        try:
            output = self.executor.output(self.kubectl, args)
        except CommandError as e:
            raise SelectionError(f"Failed to get namespaces: {e}") from e
        return [strip_resource_prefix(line.strip()) for line in _split_lines(output)]

    def select_namespace(self, clusters: List[str]) -> str:
        """
        Choose a single namespace, listed from the first selected cluster.

        Raises:
            NoClustersSelectedError: If no cluster is selected yet
            SelectionError: If listing fails, nothing is available,
                            or the picker is aborted
        """
        if not clusters:
            raise NoClustersSelectedError("No clusters selected, select clusters first (--select)")

        namespaces = self.get_namespaces(clusters[0])
        if not namespaces:
            raise SelectionError(f"No namespaces found in context {clusters[0]}")

        selected = self._pick(namespaces, [NAMESPACE_PROMPT])
        if not selected:
            raise SelectionError("No namespace selected")
        logger.info(f"Selected namespace: {selected[0]}")
        return selected[0]
