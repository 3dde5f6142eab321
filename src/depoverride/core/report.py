"""
Dependency report model.

Typed view of the JSON printed by
`dotnet list <project> package --include-transitive --format json`:

    {
      "version": 1,
      "parameters": "--include-transitive",
      "problems": [
        {"project": "...", "level": "error", "text": "..."}
      ],
      "projects": [
        {
          "path": "/src/App/App.csproj",
          "frameworks": [
            {
              "framework": "net8.0",
              "topLevelPackages": [...],
              "transitivePackages": [
                {"id": "Newtonsoft.Json", "resolvedVersion": "12.0.1"}
              ]
            }
          ]
        }
      ]
    }

Only the fields the matcher needs are modelled; everything else is
ignored.
"""

import json
from typing import List

from pydantic import Field, ValidationError, field_validator

from .types import WireModel, blank_if_none, empty_if_none


class ReportParseError(Exception):
    """
    Raised when dotnet output cannot be read as a dependency report.

    Attributes:
        message: Human-readable error message.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class Problem(WireModel):
    """An issue dotnet reported instead of (or alongside) the package list."""

    project: str = ""
    level: str = ""
    text: str = ""

    blank_strings = field_validator("project", "level", "text", mode="before")(blank_if_none)

    def __str__(self) -> str:
        return f"Problem reported for {self.project or '<unknown project>'} ({self.level or 'unknown'}): {self.text}"


class TransitivePackage(WireModel):
    """A package pulled in indirectly, with the version NuGet resolved."""

    id: str = ""
    resolved_version: str = Field(default="", alias="resolvedVersion")

    blank_strings = field_validator("id", "resolved_version", mode="before")(blank_if_none)

    @property
    def is_valid(self) -> bool:
        return bool(self.id) and bool(self.resolved_version)


class FrameworkReport(WireModel):
    """Packages resolved for one target framework of a project."""

    framework: str = ""
    transitive_packages: List[TransitivePackage] = Field(
        default_factory=list, alias="transitivePackages"
    )

    blank_framework = field_validator("framework", mode="before")(blank_if_none)
    empty_packages = field_validator("transitive_packages", mode="before")(empty_if_none)

    @property
    def has_packages(self) -> bool:
        return len(self.transitive_packages) > 0


class ProjectReport(WireModel):
    """One project file and its per-framework package lists."""

    path: str = ""
    frameworks: List[FrameworkReport] = Field(default_factory=list)

    blank_path = field_validator("path", mode="before")(blank_if_none)
    empty_frameworks = field_validator("frameworks", mode="before")(empty_if_none)

    @property
    def is_valid(self) -> bool:
        return bool(self.path) and len(self.frameworks) > 0


class DependencyReport(WireModel):
    """
    Parsed dotnet package report for one target.

    Attributes:
        problems: Issues dotnet reported. When present, the package lists
            cannot be trusted.
        projects: Per-project package information.
    """

    problems: List[Problem] = Field(default_factory=list)
    projects: List[ProjectReport] = Field(default_factory=list)

    empty_lists = field_validator("problems", "projects", mode="before")(empty_if_none)

    @property
    def has_problems(self) -> bool:
        return len(self.problems) > 0

    @classmethod
    def parse(cls, raw: str) -> "DependencyReport":
        """
        Parse raw dotnet stdout.

        Args:
            raw: The text printed by `dotnet list ... --format json`.

        Returns:
            DependencyReport instance.

        Raises:
            ReportParseError: If the output is empty, not JSON, or not
                shaped like a package report.
        """
        if not raw or not raw.strip():
            raise ReportParseError("dotnet produced no output")

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ReportParseError(f"output is not valid JSON ({e})")

        if not isinstance(data, dict):
            raise ReportParseError("expected a JSON object at the top level")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ReportParseError(f"unexpected report shape ({e.error_count()} error(s))")
