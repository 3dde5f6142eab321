"""
Override Resolver.

Drives a remediation run: for each target project in the config, get a
dependency report from the package tool, walk it with the matcher, and
promote every matching transitive package to a direct dependency.

Per-target failures (restore, list, parse, reported problems, add
package) are logged and the run moves on to the next target. Only a
missing tool or an unusable config stops a run, and those are handled
before the resolver is built.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import List, Optional

from .dotnet import PackageTool, ToolError
from .manifest import OverrideConfig
from .matcher import MutationIntent, build_rule_index, walk_report
from .report import DependencyReport, Problem, ReportParseError

logger = logging.getLogger(__name__)


class TargetStatus(StrEnum):
    """
    Outcome of processing one target project.

    Attributes:
        WALKED: Report was read and every package checked.
        SKIPPED_PROBLEMS: dotnet reported problems; packages not checked.
        SKIPPED_PARSE_ERROR: The report could not be parsed.
        SKIPPED_TOOL_ERROR: dotnet list failed or timed out.
    """

    WALKED = "walked"
    SKIPPED_PROBLEMS = "skipped_problems"
    SKIPPED_PARSE_ERROR = "skipped_parse_error"
    SKIPPED_TOOL_ERROR = "skipped_tool_error"


@dataclass
class TargetResult:
    """
    What happened to a single target project.

    Attributes:
        path: The target project or solution path.
        status: Final state of the target.
        applied: Intents sent to the tool (or reported, in dry-run mode).
        failed: Intents the tool rejected.
        problems: Problems dotnet reported for the target.
        error: Error message for skipped targets.
    """

    path: Path
    status: TargetStatus = TargetStatus.WALKED
    applied: List[MutationIntent] = field(default_factory=list)
    failed: List[MutationIntent] = field(default_factory=list)
    problems: List[Problem] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.status != TargetStatus.WALKED


@dataclass
class RunSummary:
    """
    Result container for a remediation run.

    Attributes:
        targets: One result per processed target, in processing order.
        nothing_to_do: The config held no valid override rules.
        cancelled: The run stopped early between targets.
        dry_run: Intents were reported but not applied.
    """

    targets: List[TargetResult] = field(default_factory=list)
    nothing_to_do: bool = False
    cancelled: bool = False
    dry_run: bool = False

    @property
    def applied(self) -> List[MutationIntent]:
        return [intent for target in self.targets for intent in target.applied]

    @property
    def failed(self) -> List[MutationIntent]:
        return [intent for target in self.targets for intent in target.failed]

    @property
    def skipped(self) -> List[TargetResult]:
        return [target for target in self.targets if target.skipped]


class OverrideResolver:
    """
    Applies override rules to every target project in a config.

    Attributes:
        config: The loaded override config.
        tool: Package tool used to restore, list and add packages.
        skip_refresh: Do not restore before listing.
        dry_run: Report intents without calling the tool to apply them.

    Example:
        ```python
        config = OverrideConfig.load(Path("depoverride.json"))
        resolver = OverrideResolver(config, DotnetCli())
        summary = resolver.run()
        for intent in summary.applied:
            print(intent.describe())
        ```
    """

    def __init__(
        self,
        config: OverrideConfig,
        tool: PackageTool,
        skip_refresh: bool = False,
        dry_run: bool = False,
    ):
        self.config = config
        self.tool = tool
        self.skip_refresh = skip_refresh
        self.dry_run = dry_run
        self.rules = build_rule_index(config.overrides)

    def run(self, cancel: Optional[threading.Event] = None) -> RunSummary:
        """
        Process every target project in config order.

        Args:
            cancel: When set, the run stops before the next target.

        Returns:
            RunSummary describing every processed target.
        """
        summary = RunSummary(dry_run=self.dry_run)

        if not self.rules:
            logger.info("Config contains no valid overrides. Nothing to do.")
            summary.nothing_to_do = True
            return summary

        targets = self.config.target_paths()
        logger.debug(f"{len(self.rules)} override rule(s), {len(targets)} target(s)")

        for target_path in targets:
            if cancel is not None and cancel.is_set():
                logger.warning("Run cancelled; remaining targets were not processed.")
                summary.cancelled = True
                break
            summary.targets.append(self._process_target(target_path))

        return summary

    def _process_target(self, target_path: Path) -> TargetResult:
        """
        Refresh, report, and walk a single target.

        Args:
            target_path: Project or solution to process.

        Returns:
            TargetResult for the target.
        """
        result = TargetResult(path=target_path)
        logger.info(f"Processing {target_path}")

        if not self.skip_refresh:
            try:
                self.tool.refresh(target_path)
            except ToolError as e:
                logger.warning(f"Restore failed for {target_path}, continuing with a possibly stale graph: {e}")

        try:
            raw = self.tool.report(target_path)
        except ToolError as e:
            logger.error(f"Could not list packages for {target_path}: {e}. Skipping...")
            result.status = TargetStatus.SKIPPED_TOOL_ERROR
            result.error = str(e)
            return result

        try:
            report = DependencyReport.parse(raw)
        except ReportParseError as e:
            logger.error(f"Could not parse package report for {target_path}: {e.message}. Skipping...")
            result.status = TargetStatus.SKIPPED_PARSE_ERROR
            result.error = e.message
            return result

        if report.has_problems:
            for problem in report.problems:
                logger.error(f"{problem}. Skipping...")
            result.status = TargetStatus.SKIPPED_PROBLEMS
            result.problems = list(report.problems)
            return result

        seen = set()
        for intent in walk_report(report, self.rules):
            # The same package often shows up under several frameworks;
            # one add per project is enough.
            if intent.key in seen:
                logger.debug(f"Already handled {intent.package_id} for {intent.project_path} ({intent.framework})")
                continue
            seen.add(intent.key)
            self._apply(intent, result)

        return result

    def _apply(self, intent: MutationIntent, result: TargetResult) -> None:
        """Send one intent to the tool and record the outcome."""
        if self.dry_run:
            logger.info(intent.describe(verb="would add"))
            result.applied.append(intent)
            return

        try:
            self.tool.set_direct(intent.project_path, intent.package_id, intent.new_version)
        except ToolError as e:
            logger.error(
                f"Failed to add direct dependency to {intent.project_path} for "
                f"{intent.package_id}:{intent.new_version}: {e}"
            )
            result.failed.append(intent)
            return

        logger.info(intent.describe())
        result.applied.append(intent)


def run_overrides(
    config: OverrideConfig,
    tool: PackageTool,
    skip_refresh: bool = False,
    dry_run: bool = False,
) -> RunSummary:
    """
    Convenience function to run every override in a config.

    Args:
        config: The loaded override config.
        tool: Package tool to use.
        skip_refresh: Do not restore before listing.
        dry_run: Report intents without applying them.

    Returns:
        RunSummary for the run.
    """
    resolver = OverrideResolver(config, tool, skip_refresh=skip_refresh, dry_run=dry_run)
    return resolver.run()
