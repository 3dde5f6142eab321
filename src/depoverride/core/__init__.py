"""
Core modules for depoverride.

This package contains the override engine:
- manifest: Override config and rules
- report: dotnet package report model
- matcher: Pure rule matching
- resolver: Remediation run over all targets
- dotnet: dotnet CLI gateway
"""

from .dotnet import DotnetCli, PackageTool, ToolError, ToolMissingError
from .manifest import (
    ConfigError, ConfigMalformedError, ConfigNotFoundError,
    OverrideConfig, OverrideRule,
)
from .matcher import MutationIntent, build_rule_index, match, walk_report
from .report import (
    DependencyReport, FrameworkReport, Problem, ProjectReport,
    ReportParseError, TransitivePackage,
)
from .resolver import (
    OverrideResolver, RunSummary, TargetResult, TargetStatus, run_overrides,
)

__all__ = [
    # Gateway
    "DotnetCli", "PackageTool", "ToolError", "ToolMissingError",
    # Config
    "ConfigError", "ConfigMalformedError", "ConfigNotFoundError",
    "OverrideConfig", "OverrideRule",
    # Report
    "DependencyReport", "FrameworkReport", "Problem", "ProjectReport",
    "ReportParseError", "TransitivePackage",
    # Matching
    "MutationIntent", "build_rule_index", "match", "walk_report",
    # Resolution
    "OverrideResolver", "RunSummary", "TargetResult", "TargetStatus", "run_overrides",
]
