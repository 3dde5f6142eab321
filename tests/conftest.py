"""
Shared fixtures: a fake package tool and builders for config and report JSON.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest

from depoverride.core.dotnet import ToolError


class FakeTool:
    """
    In-memory PackageTool.

    Reports are looked up by the target's file name. A value that is an
    exception instance is raised instead of returned.
    """

    def __init__(self, reports: Optional[Dict[str, Union[str, Exception]]] = None):
        self.reports = reports or {}
        self.calls: List[tuple] = []
        self.failing_refresh: set = set()
        self.failing_packages: set = set()

    def refresh(self, project_path) -> None:
        self.calls.append(("refresh", Path(project_path).name))
        if Path(project_path).name in self.failing_refresh:
            raise ToolError("dotnet command failed: restore", "NU1101: Unable to find package")

    def report(self, project_path) -> str:
        name = Path(project_path).name
        self.calls.append(("report", name))
        value = self.reports.get(name, "")
        if isinstance(value, Exception):
            raise value
        return value

    def set_direct(self, project_path, package_id: str, version: str) -> None:
        self.calls.append(("set_direct", str(project_path), package_id, version))
        if package_id in self.failing_packages:
            raise ToolError(f"dotnet command failed: add {project_path} package {package_id}")

    def calls_named(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


@pytest.fixture(autouse=True)
def restore_root_logging():
    """The CLI reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def fake_tool():
    return FakeTool()


@pytest.fixture
def report_json():
    """
    Build dotnet list JSON.

    Usage: report_json("App.csproj", {"net8.0": [("Newtonsoft.Json", "12.0.1")]})
    """

    def _build(
        project_path: str = "App.csproj",
        frameworks: Optional[Dict[str, list]] = None,
        problems: Optional[list] = None,
    ) -> str:
        frameworks = frameworks if frameworks is not None else {}
        document = {
            "version": 1,
            "parameters": "--include-transitive",
            "projects": [
                {
                    "path": project_path,
                    "frameworks": [
                        {
                            "framework": moniker,
                            "topLevelPackages": [],
                            "transitivePackages": [
                                {"id": pkg_id, "resolvedVersion": version}
                                for pkg_id, version in packages
                            ],
                        }
                        for moniker, packages in frameworks.items()
                    ],
                }
            ],
        }
        if problems:
            document["problems"] = problems
        return json.dumps(document)

    return _build


@pytest.fixture
def newtonsoft_rule():
    return {
        "packageId": "Newtonsoft.Json",
        "oldVersions": ["12.0.1", "12.0.2"],
        "newVersion": "13.0.3",
    }


@pytest.fixture
def write_config(tmp_path):
    """Write a config file into tmp_path and return its path."""

    def _write(
        overrides: list,
        project_paths: Optional[list] = None,
        common_root: str = "src",
        name: str = "depoverride.json",
    ) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps({
            "commonRoot": common_root,
            "projectPaths": project_paths if project_paths is not None else ["App.csproj"],
            "overrides": overrides,
        }))
        return path

    return _write
