"""
Global Configuration and Defaults.

This module centralizes the process-wide defaults used by the CLI and
the dotnet gateway. Per-run settings (rules, target projects) live in
the override config file, not here.
"""

# --- Config File ---
DEFAULT_CONFIG_FILE = "depoverride.json"
CONFIG_ENV_VAR = "DEPOVERRIDE_CONFIG"

# Suffixes parsed with PyYAML instead of json
YAML_SUFFIXES = {".yaml", ".yml"}

# --- dotnet CLI ---
DEFAULT_DOTNET_EXECUTABLE = "dotnet"
DOTNET_ENV_VAR = "DEPOVERRIDE_DOTNET"

# Restore and list can take minutes on large solutions
DEFAULT_TIMEOUT_SECONDS = 600

# `dotnet --version` should answer almost immediately
VERSION_CHECK_TIMEOUT_SECONDS = 30
