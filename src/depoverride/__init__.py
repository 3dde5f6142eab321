"""
depoverride - Transitive dependency override for .NET projects.

Forces known-bad transitive NuGet package versions to become direct
dependencies at a safe version, across a list of projects.

Key Components:
- core.manifest: Override config and rules
- core.report: dotnet package report model
- core.matcher: Rule matching
- core.resolver: Per-project remediation run
- core.dotnet: dotnet CLI gateway

Usage:
    from depoverride import OverrideConfig, OverrideResolver, DotnetCli

    config = OverrideConfig.load(Path("depoverride.json"))
    summary = OverrideResolver(config, DotnetCli()).run()
"""

__version__ = "0.1.0"

from .core.dotnet import DotnetCli
from .core.manifest import OverrideConfig, OverrideRule
from .core.matcher import MutationIntent
from .core.resolver import OverrideResolver, RunSummary

__all__ = [
    "__version__",
    "DotnetCli",
    "MutationIntent",
    "OverrideConfig",
    "OverrideResolver",
    "OverrideRule",
    "RunSummary",
]
