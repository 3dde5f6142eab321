"""
Override config definition and parsing.

Defines the schema for the override config file: the set of target
projects to process and the override rules that decide which transitive
package versions get promoted to direct dependencies.

Example (depoverride.json):

    {
      "commonRoot": "../src",
      "projectPaths": ["App/App.csproj", "Lib/Lib.csproj"],
      "overrides": [
        {
          "packageId": "Newtonsoft.Json",
          "oldVersions": ["12.0.1", "12.0.2"],
          "newVersion": "13.0.3",
          "reason": "CVE-2024-21907"
        }
      ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import FrozenSet, List, Optional

import yaml
from pydantic import Field, PrivateAttr, ValidationError, field_validator

from ..config import YAML_SUFFIXES
from .types import WireModel, blank_if_none, empty_if_none


class ConfigError(Exception):
    """
    Raised when the override config cannot be used.

    Attributes:
        path: The config file, if the config came from disk.
        message: Human-readable error message.
    """

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}" if path else message)


class ConfigNotFoundError(ConfigError):
    """Raised when the config file does not exist."""


class ConfigMalformedError(ConfigError):
    """Raised when the config cannot be parsed into the expected shape."""


class OverrideRule(WireModel):
    """
    A single override rule.

    Attributes:
        package_id: Package to watch (case-sensitive).
        old_versions: Resolved versions that need remediation.
        new_version: Version to force as a direct dependency.
        framework: Restrict the rule to one target-framework moniker.
        reason: Free-text justification, used in log lines only.
    """

    package_id: str = Field(default="", alias="packageId")
    old_versions: FrozenSet[str] = Field(default_factory=frozenset, alias="oldVersions")
    new_version: str = Field(default="", alias="newVersion")
    framework: Optional[str] = None
    reason: Optional[str] = None

    blank_strings = field_validator("package_id", "new_version", mode="before")(blank_if_none)
    empty_versions = field_validator("old_versions", mode="before")(empty_if_none)

    @property
    def is_valid(self) -> bool:
        """Check that the rule has everything needed to act on a match."""
        return (
            bool(self.package_id.strip())
            and bool(self.new_version.strip())
            and len(self.old_versions) > 0
        )

    def __str__(self) -> str:
        versions = ", ".join(sorted(self.old_versions))
        scope = f" [{self.framework}]" if self.framework else ""
        return f"{self.package_id or '<no id>'} {{{versions}}} -> {self.new_version or '<no version>'}{scope}"


class OverrideConfig(WireModel):
    """
    Parsed content of the override config file.

    Rules are kept exactly as written, invalid ones included, so loading
    never silently drops data. Validity filtering happens when the rule
    index is built.

    Attributes:
        common_root: Directory prefix shared by all project paths.
        project_paths: Project or solution files, in processing order.
        overrides: All override rules from the file.
        source_path: File the config was loaded from, if any. Never read
            from the file content itself.
    """

    common_root: str = Field(alias="commonRoot")
    project_paths: List[str] = Field(alias="projectPaths")
    overrides: List[OverrideRule]
    _source_path: Optional[Path] = PrivateAttr(default=None)

    blank_root = field_validator("common_root", mode="before")(blank_if_none)
    empty_overrides = field_validator("overrides", mode="before")(empty_if_none)

    @field_validator("project_paths", mode="before")
    @classmethod
    def _blank_null_paths(cls, value):
        if isinstance(value, list):
            return [blank_if_none(v) for v in value]
        return empty_if_none(value)

    @classmethod
    def parse(
        cls,
        text: str,
        fmt: str = "json",
        source: Optional[Path] = None,
    ) -> "OverrideConfig":
        """
        Parse config text.

        Args:
            text: Raw file content.
            fmt: "json" or "yaml".
            source: Path to record as the config's origin.

        Returns:
            OverrideConfig instance.

        Raises:
            ConfigMalformedError: If the text does not parse or does not
                have the expected shape.
        """
        try:
            if fmt == "yaml":
                data = yaml.safe_load(text)
            else:
                data = json.loads(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigMalformedError(f"not a valid {fmt.upper()} document ({e})", source)

        if not isinstance(data, dict):
            raise ConfigMalformedError("expected a mapping at the top level", source)

        try:
            config = cls.model_validate(data)
        except ValidationError as e:
            raise ConfigMalformedError(_summarize_validation_error(e), source)

        config._source_path = source
        return config

    @classmethod
    def load(cls, path: Path) -> "OverrideConfig":
        """
        Load and parse a config file.

        Args:
            path: Path to the config file.

        Returns:
            OverrideConfig instance.

        Raises:
            ConfigNotFoundError: If the file does not exist.
            ConfigMalformedError: If the file is not a valid config.
        """
        if not path.is_file():
            raise ConfigNotFoundError("config file was not found", path)

        fmt = "yaml" if path.suffix.lower() in YAML_SUFFIXES else "json"
        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigMalformedError(f"could not be read ({e})", path)

        return cls.parse(text, fmt=fmt, source=path)

    @property
    def source_path(self) -> Optional[Path]:
        return self._source_path

    @property
    def base_dir(self) -> Path:
        """Directory that relative paths in the config are resolved against."""
        if self.source_path is not None:
            return self.source_path.resolve().parent
        return Path.cwd()

    def valid_rules(self) -> List[OverrideRule]:
        """Get the rules that can be applied, in file order."""
        return [rule for rule in self.overrides if rule.is_valid]

    def target_paths(self) -> List[Path]:
        """
        Resolve the project paths to process.

        Empty entries are skipped. Order follows the config file.

        Returns:
            List of paths joined onto base_dir / common_root.
        """
        root = self.base_dir / self.common_root
        return [root / p for p in self.project_paths if p]


def _summarize_validation_error(error: ValidationError) -> str:
    """Render the first few pydantic errors as one line."""
    parts = []
    for item in error.errors()[:3]:
        location = ".".join(str(part) for part in item["loc"]) or "<root>"
        parts.append(f"{location}: {item['msg']}")
    extra = error.error_count() - len(parts)
    if extra > 0:
        parts.append(f"and {extra} more")
    return "invalid config (" + "; ".join(parts) + ")"
