"""
Override Matcher.

Decides, for each transitive package in a dependency report, whether an
override rule applies and what direct dependency to add.

Matching Rules:
    1. The package entry must have both an id and a resolved version.
    2. A valid rule must exist for the package id (case-sensitive).
    3. The resolved version must be one of the rule's old versions
       (exact string equality, no version ranges).
    4. A framework-scoped rule only matches under that framework.

Everything here is pure: no I/O, no hidden state.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, Optional

from pydantic import BaseModel, ConfigDict

from .manifest import OverrideRule
from .report import DependencyReport, TransitivePackage

logger = logging.getLogger(__name__)


class MutationIntent(BaseModel):
    """
    A decision to add a package as a direct dependency of a project.

    Attributes:
        project_path: Project file to add the reference to.
        package_id: Package to add.
        old_version: Transitive version that triggered the rule.
        new_version: Version to pin.
        framework: Framework the transitive version was found under.
        reason: Rule justification, if any.
    """

    project_path: str
    package_id: str
    old_version: str
    new_version: str
    framework: str = ""
    reason: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> tuple:
        """Identity of the dependency change, ignoring where it was found."""
        return (self.project_path, self.package_id, self.new_version)

    def describe(self, verb: str = "added") -> str:
        """Render the log line for this intent."""
        line = (
            f"{verb} direct dependency to {self.project_path} for "
            f"{self.package_id}:{self.new_version} overriding {self.old_version}"
        )
        if self.reason:
            line += f" (reason: {self.reason})"
        return line


def build_rule_index(rules: Iterable[OverrideRule]) -> Dict[str, OverrideRule]:
    """
    Key the valid rules by package id.

    Invalid rules are dropped. When two valid rules share a package id,
    the one defined last wins.

    Args:
        rules: Rules in config order.

    Returns:
        Dict of package id to rule.
    """
    index: Dict[str, OverrideRule] = {}
    for rule in rules:
        if not rule.is_valid:
            logger.warning(f"Ignoring invalid override rule: {rule}")
            continue
        if rule.package_id in index:
            logger.warning(
                f"Duplicate override for {rule.package_id}; "
                f"'{index[rule.package_id]}' replaced by '{rule}'"
            )
        index[rule.package_id] = rule
    return index


def match(
    rules_by_id: Dict[str, OverrideRule],
    framework: str,
    pkg: TransitivePackage,
    project_path: str = "",
) -> Optional[MutationIntent]:
    """
    Decide whether a transitive package should be overridden.

    Args:
        rules_by_id: Valid rules keyed by package id.
        framework: Target-framework moniker the package was resolved under.
        pkg: The transitive package entry.
        project_path: Project the package belongs to.

    Returns:
        MutationIntent if a rule applies, None otherwise.
    """
    if not pkg.is_valid:
        return None

    rule = rules_by_id.get(pkg.id)
    if rule is None:
        return None

    if pkg.resolved_version not in rule.old_versions:
        return None

    if rule.framework and rule.framework != framework:
        return None

    return MutationIntent(
        project_path=project_path,
        package_id=pkg.id,
        old_version=pkg.resolved_version,
        new_version=rule.new_version,
        framework=framework,
        reason=rule.reason,
    )


def walk_report(
    report: DependencyReport,
    rules_by_id: Dict[str, OverrideRule],
) -> Iterator[MutationIntent]:
    """
    Yield an intent for every matching package in a report.

    A report with problems yields nothing. Invalid projects and
    frameworks without transitive packages are skipped.

    Args:
        report: Parsed dotnet report.
        rules_by_id: Valid rules keyed by package id.

    Yields:
        MutationIntent in report order.
    """
    if report.has_problems:
        return

    for project in report.projects:
        if not project.is_valid:
            continue
        for framework in project.frameworks:
            if not framework.has_packages:
                continue
            for pkg in framework.transitive_packages:
                intent = match(rules_by_id, framework.framework, pkg, project.path)
                if intent is not None:
                    yield intent
