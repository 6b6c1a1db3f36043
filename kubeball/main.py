#!/usr/bin/env python3
"""
kubeball - Main Entry Point

This is the thin orchestration layer that:
1. Parses arguments, separating kubeball flags from the kubectl command
2. Loads the saved cluster selection or builds a new one interactively
3. Fans the kubectl command out to every selected context

All business logic is in the modules, following black box principles.
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from rich.console import Console

from kubeball.config.provider import EnvConfigProvider, Settings, SettingsProvider
from kubeball.errors import KubeballError
from kubeball.logging_config import configure_logging
from kubeball.modules.executor import CommandExecutor, SubprocessExecutor
from kubeball.modules.runner import FanOutRunner
from kubeball.modules.selector import SelectionError, Selector
from kubeball.modules.storage import ConfigStore, Configuration

logger = logging.getLogger("kubeball.main")

USAGE = (
    "Usage: kubectl ball [--select] [--select-namespace] [--merge-kubeconfigs] "
    "[--grep pattern] [--format json|yaml|wide|table] [-n ns] <kubectl args>"
)
KNOWN_FORMATS = ("json", "yaml", "wide", "table")
VALUE_FLAGS = ("--grep", "--format", "-n", "--namespace")

console = Console(stderr=True, highlight=False)


class UsageError(KubeballError):
    """Raised when kubeball's own flags are malformed."""


class FlagParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting the process."""

    def error(self, message):
        raise UsageError(f"kubectl ball: {message}")


def build_parser() -> argparse.ArgumentParser:
    """Parser for kubeball's own flags; everything else is left for kubectl."""
    parser = FlagParser(
        prog="kubectl ball",
        usage=USAGE,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("--select", action="store_true", help="Reselect clusters")
    parser.add_argument("--select-namespace", action="store_true", help="Reselect the namespace")
    parser.add_argument(
        "--merge-kubeconfigs",
        action="store_true",
        help="List contexts from the flattened view of all kubeconfig files",
    )
    parser.add_argument("--grep", nargs="?", default=None, help="Only show lines containing pattern")
    parser.add_argument("--format", nargs="?", default=None, dest="output_format", help="kubectl output format")
    parser.add_argument("-n", "--namespace", nargs="?", default=None, help="Set and save the namespace")
    return parser


def join_flag_values(argv: List[str]) -> List[str]:
    """
    Attach the token following a value flag to it as ``--flag=value``.

    argparse refuses values that start with a dash (``--grep -Warning``), so
    the value is bound before parsing. A value flag in last position is left
    alone. Tokens after ``--`` belong to kubectl and are not touched.
    """
    joined = []
    i = 0
    while i < len(argv):
        token = argv[i]
        if token == "--":
            joined.extend(argv[i:])
            break
        if token in VALUE_FLAGS and i + 1 < len(argv) and argv[i + 1] != "--":
            joined.append(f"{token}={argv[i + 1]}")
            i += 2
            continue
        joined.append(token)
        i += 1
    return joined


def parse_args(argv: List[str]) -> Tuple[argparse.Namespace, List[str]]:
    """
    Split argv into kubeball options and the forwarded kubectl arguments.

    Returns:
        Tuple of (options, kubectl_args)

    Raises:
        UsageError: If a kubeball flag is malformed (e.g. ``--select=yes``)
    """
    options, kubectl_args = build_parser().parse_known_args(join_flag_values(argv))
    if options.output_format and options.output_format not in KNOWN_FORMATS:
        logger.warning(f"Unknown output format {options.output_format!r}, passing it to kubectl as is")
    return options, kubectl_args


def resolve_configuration(
    options: argparse.Namespace,
    store: ConfigStore,
    selector: Selector,
) -> Tuple[Configuration, bool]:
    """
    Load the saved selection, or build and save a new one.

    Returns:
        Tuple of (configuration, whether anything was saved)

    Raises:
        KubeballError: On any fatal selection or storage failure
    """
    config = None
    saved = False

    if not options.select:
        if not store.exists():
            logger.info(f"No saved selection at {store.path}, starting cluster selection")
        else:
            config = store.load()
            if not config.clusters:
                logger.info("Saved selection has no clusters, starting cluster selection")
                config = None

    if config is None:
        selector.check_picker()
        contexts = selector.get_contexts(merge=options.merge_kubeconfigs)
        clusters = selector.select_clusters(contexts)
        if not clusters:
            raise SelectionError("Cluster selection failed: no clusters selected")
        config = Configuration(clusters=clusters, namespace=options.namespace)
        store.save(config)
        saved = True
    elif options.namespace:
        config.namespace = options.namespace
        store.save(config)
        saved = True

    if options.select_namespace:
        selector.check_picker()
        config.namespace = selector.select_namespace(config.clusters)
        store.save(config)
        saved = True

    return config, saved


def main(
    argv: Optional[List[str]] = None,
    executor: Optional[CommandExecutor] = None,
    settings: Optional[Settings] = None,
    provider: Optional[SettingsProvider] = None,
) -> int:
    """
    Run kubeball.

    Settings are taken from ``settings`` if given, otherwise from
    ``provider`` (default: the process environment).

    Returns:
        Process exit status
    """
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(USAGE)
        return 1

    settings = settings or (provider or EnvConfigProvider()).get_settings()
    configure_logging(settings.log_level)

    try:
        options, kubectl_args = parse_args(argv)
    except UsageError as e:
        console.print(str(e), style="red", markup=False, soft_wrap=True)
        console.print(USAGE, markup=False, soft_wrap=True)
        return 1

    executor = executor or SubprocessExecutor()
    store = ConfigStore(settings.config_path)
    selector = Selector(executor, kubectl=settings.kubectl, picker=settings.picker)

    try:
        config, saved = resolve_configuration(options, store, selector)
    except KubeballError as e:
        console.print(str(e), style="red", markup=False, soft_wrap=True)
        return 1

    if not kubectl_args:
        if saved:
            console.print(f"Selection saved to {store.path}", style="green", markup=False, soft_wrap=True)
            return 0
        print(USAGE)
        return 1

    runner = FanOutRunner(executor, kubectl=settings.kubectl)
    report = runner.run(
        config.clusters,
        kubectl_args,
        namespace=config.namespace,
        grep=options.grep,
        output_format=options.output_format,
    )
    sys.stdout.write(report.render())
    sys.stdout.flush()
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
