"""
dotnet CLI Gateway.

Runs the three dotnet commands the resolver needs:

    dotnet restore <project>
    dotnet list <project> package --include-transitive --format json
    dotnet add <project> package <id> -v <version>

The resolver only depends on the PackageTool protocol, so tests can
substitute a fake that returns canned reports.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Protocol, Union

from ..config import (
    DEFAULT_DOTNET_EXECUTABLE,
    DEFAULT_TIMEOUT_SECONDS,
    VERSION_CHECK_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ToolError(Exception):
    """
    Raised when a dotnet command fails.

    Attributes:
        message: Human-readable error message.
        stderr: Raw stderr output from the command.
    """

    def __init__(self, message: str, stderr: str = ""):
        self.message = message
        self.stderr = stderr
        super().__init__(f"{message}: {stderr}" if stderr else message)


class ToolMissingError(ToolError):
    """Raised when the dotnet executable cannot be started at all."""


class PackageTool(Protocol):
    """Operations the resolver performs against a package manager."""

    def refresh(self, project_path: PathLike) -> None:
        """Bring the project's resolved graph up to date."""
        ...

    def report(self, project_path: PathLike) -> str:
        """Return the raw dependency report for a project or solution."""
        ...

    def set_direct(self, project_path: PathLike, package_id: str, version: str) -> None:
        """Add or pin a direct package reference."""
        ...


class DotnetCli:
    """
    PackageTool backed by the dotnet CLI.

    Attributes:
        executable: Name or path of the dotnet executable.
        timeout: Seconds before a single command is abandoned.
    """

    def __init__(
        self,
        executable: str = DEFAULT_DOTNET_EXECUTABLE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.executable = executable
        self.timeout = timeout

    def _run(self, *args: str, check: bool = True, timeout: float | None = None) -> subprocess.CompletedProcess:
        """
        Run a dotnet command.

        Args:
            *args: dotnet command arguments.
            check: Raise on a non-zero exit code.
            timeout: Override the instance timeout.

        Returns:
            The completed process with text stdout/stderr.

        Raises:
            ToolMissingError: If the executable cannot be started.
            ToolError: If the command fails or times out.
        """
        cmd: List[str] = [self.executable, *args]
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=check,
                timeout=timeout or self.timeout,
            )
        except FileNotFoundError:
            raise ToolMissingError(f"{self.executable} was not found on PATH")
        except OSError as e:
            raise ToolMissingError(f"{self.executable} could not be started ({e})")
        except subprocess.CalledProcessError as e:
            output = (e.stderr or e.stdout or "").strip()
            raise ToolError(f"dotnet command failed: {' '.join(args)}", output)
        except subprocess.TimeoutExpired:
            raise ToolError(f"dotnet command timed out after {timeout or self.timeout}s: {' '.join(args)}")

    def is_installed(self) -> bool:
        """Check whether dotnet can be invoked."""
        try:
            self._run("--version", timeout=VERSION_CHECK_TIMEOUT_SECONDS)
        except ToolError as e:
            logger.debug(f"dotnet version check failed: {e}")
            return False
        return True

    def refresh(self, project_path: PathLike) -> None:
        self._run("restore", str(project_path))

    def report(self, project_path: PathLike) -> str:
        # dotnet exits non-zero when it reports problems, but still prints
        # the JSON document describing them.
        result = self._run(
            "list",
            str(project_path),
            "package",
            "--include-transitive",
            "--format",
            "json",
            check=False,
        )
        if result.returncode != 0 and not result.stdout.strip():
            raise ToolError(
                f"dotnet list failed for {project_path} (exit code {result.returncode})",
                result.stderr.strip(),
            )
        return result.stdout

    def set_direct(self, project_path: PathLike, package_id: str, version: str) -> None:
        self._run("add", str(project_path), "package", package_id, "-v", version)
