"""
depoverride CLI - Main entry point.

Promotes known-bad transitive NuGet package versions to direct
dependencies at a fixed version, across every project listed in the
override config.

Usage:
    depoverride                      # restore, list, and fix every project
    depoverride --no-restore         # use the existing restore graph
    depoverride --dry-run            # show what would be added
    depoverride -c overrides.yaml    # use another config file
"""

import signal
import sys
import threading
from contextlib import contextmanager
from pathlib import Path

import click

from ..config import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_FILE,
    DEFAULT_DOTNET_EXECUTABLE,
    DEFAULT_TIMEOUT_SECONDS,
    DOTNET_ENV_VAR,
)
from ..core.dotnet import DotnetCli
from ..core.manifest import ConfigError, OverrideConfig
from ..core.resolver import OverrideResolver
from .utils import echo_error, echo_success, echo_warning, print_summary, setup_logging


@contextmanager
def _interrupt_sets(event: threading.Event):
    """
    Turn the first Ctrl+C into a request to stop between targets.

    A second Ctrl+C interrupts immediately.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = signal.getsignal(signal.SIGINT)

    def handler(signum, frame):
        if event.is_set():
            raise KeyboardInterrupt
        event.set()
        echo_warning("Stopping after the current project (Ctrl+C again to abort)")

    signal.signal(signal.SIGINT, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


@click.command()
@click.version_option(package_name="depoverride")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=DEFAULT_CONFIG_FILE,
    envvar=CONFIG_ENV_VAR,
    show_default=True,
    help="Override config file (JSON, or YAML for .yaml/.yml)",
)
@click.option("--no-restore", is_flag=True, help="Skip 'dotnet restore' before listing packages")
@click.option("--dry-run", is_flag=True, help="Show what would be added without changing projects")
@click.option(
    "--timeout",
    type=click.FloatRange(min=1),
    default=DEFAULT_TIMEOUT_SECONDS,
    show_default=True,
    help="Seconds before a single dotnet command is abandoned",
)
@click.option(
    "--dotnet",
    "dotnet_path",
    default=DEFAULT_DOTNET_EXECUTABLE,
    envvar=DOTNET_ENV_VAR,
    show_default=True,
    help="dotnet executable to use",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
def main(
    config_path: str,
    no_restore: bool,
    dry_run: bool,
    timeout: float,
    dotnet_path: str,
    verbose: bool,
):
    """
    Force vulnerable transitive packages to safe direct versions.

    For each project in the config, lists resolved packages with
    'dotnet list package --include-transitive' and runs
    'dotnet add package' for every transitive package whose resolved
    version is listed in an override rule.

    \b
    Examples:
        depoverride
        depoverride --no-restore --dry-run
        depoverride --config ../overrides.json
    """
    setup_logging(verbose)

    tool = DotnetCli(executable=dotnet_path, timeout=timeout)
    if not tool.is_installed():
        echo_error(f"{dotnet_path} CLI is not installed or not in PATH. Please install it or configure your PATH.")
        sys.exit(1)

    try:
        config = OverrideConfig.load(Path(config_path))
    except ConfigError as e:
        echo_error(str(e))
        sys.exit(1)

    resolver = OverrideResolver(config, tool, skip_refresh=no_restore, dry_run=dry_run)
    cancel = threading.Event()

    try:
        with _interrupt_sets(cancel):
            summary = resolver.run(cancel=cancel)
    except KeyboardInterrupt:
        echo_error("Aborted.")
        sys.exit(130)

    if summary.nothing_to_do:
        return

    print_summary(summary)

    if summary.cancelled:
        echo_warning("Run cancelled before all projects were processed.")
        sys.exit(130)

    verb = "planned" if dry_run else "added"
    message = (
        f"{len(summary.applied)} direct dependenc{'y' if len(summary.applied) == 1 else 'ies'} {verb} "
        f"across {len(summary.targets)} project(s)"
    )
    if summary.failed:
        message += f", {len(summary.failed)} failed"
    if summary.skipped:
        message += f", {len(summary.skipped)} skipped"
    echo_success(message)


if __name__ == "__main__":
    main()
