"""Configuration loading and management for TechPref.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in ScanConfig)
    2. Global config (~/.techpref.toml)
    3. Project config (./techpref.toml)
    4. Explicit config file (--config)
    5. Environment variables (TECHPREF_* prefix, plus GITHUB_TOKEN)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(verbose=True, max_samples=5)
    >>> config.verbosity
    'verbose'
    >>> config.max_samples
    5
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]
RemoteInfoSource = Literal["git", "github"]


@dataclass(frozen=True)
class ScanConfig:
    """Configuration for a scan run.

    All fields have sensible defaults. CI typically overrides only the budget
    and the remote-info source through environment variables.

    Attributes:
        Layout:
            data_dir: Root of the versioned result store (catalog + analyses)
            repos_dir: Where working copies are materialized
            cache_dir: Disk cache for source-file counts
            node_tools_dir: Directory whose node_modules holds the linters

        Probes:
            oxlint_command: Command line for oxlint (default: local install)
            eslint_command: Command line for eslint (default: local install)
            max_samples: Violation samples kept per variant
            probe_timeout_seconds: Hard limit for one probe subprocess

        Remote access:
            git_timeout_seconds: Limit for one git subprocess
            sync_concurrency: Worker count for bulk sync and remote triage
            remote_info_source: "git" (ls-remote) or "github" (REST API)
            github_api_url: GitHub REST endpoint
            github_token: Token for the REST API (falls back to GITHUB_TOKEN)

        CI batch control:
            ci_budget_minutes: Wall-clock budget before the loop stops
            ci_sync_interval_minutes: Interval between store commit/push
            cleanup_working_copies: Delete each working copy once analyzed

        Store commits:
            store_git_author_name: Author used for result-store commits
            store_git_author_email: Author email for result-store commits
    """

    # Layout
    data_dir: str = "data"
    repos_dir: str = "repos"
    cache_dir: str = ".techpref-cache"
    node_tools_dir: str = "."

    # Probes
    oxlint_command: Optional[str] = None
    eslint_command: Optional[str] = None
    max_samples: int = 10
    probe_timeout_seconds: int = 600

    # Remote access
    git_timeout_seconds: int = 300
    sync_concurrency: int = 5
    remote_info_source: RemoteInfoSource = "git"
    github_api_url: str = "https://api.github.com"
    github_token: Optional[str] = None

    # CI batch control
    ci_budget_minutes: float = 55.0
    ci_sync_interval_minutes: float = 5.0
    cleanup_working_copies: bool = False

    # Store commits
    store_git_author_name: str = "techpref-bot"
    store_git_author_email: str = "techpref-bot@users.noreply.github.com"

    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_samples < 1:
            raise ValueError("max_samples must be at least 1")
        if self.probe_timeout_seconds < 1:
            raise ValueError("probe_timeout_seconds must be at least 1")
        if self.git_timeout_seconds < 1:
            raise ValueError("git_timeout_seconds must be at least 1")
        if not 1 <= self.sync_concurrency <= 64:
            raise ValueError("sync_concurrency must be between 1 and 64")
        if self.ci_budget_minutes <= 0:
            raise ValueError("ci_budget_minutes must be positive")
        if self.ci_sync_interval_minutes <= 0:
            raise ValueError("ci_sync_interval_minutes must be positive")
        if self.remote_info_source not in ("git", "github"):
            raise ValueError("remote_info_source must be 'git' or 'github'")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be quiet, normal or verbose")

    @property
    def analysis_dir(self) -> Path:
        return Path(self.data_dir) / "analysis"

    @property
    def failing_dir(self) -> Path:
        return self.analysis_dir / "failing"

    @property
    def catalog_path(self) -> Path:
        return Path(self.data_dir) / "repositories.json"

    @property
    def oxlint_argv(self) -> list[str]:
        """Get the oxlint command line as an argv list."""
        return self._tool_argv(self.oxlint_command, "oxlint")

    @property
    def eslint_argv(self) -> list[str]:
        """Get the eslint command line as an argv list."""
        return self._tool_argv(self.eslint_command, "eslint")

    @property
    def ci_budget_seconds(self) -> float:
        return self.ci_budget_minutes * 60

    @property
    def ci_sync_interval_seconds(self) -> float:
        return self.ci_sync_interval_minutes * 60

    def _tool_argv(self, command: Optional[str], tool: str) -> list[str]:
        if command:
            return shlex.split(command)
        local = Path(self.node_tools_dir).resolve() / "node_modules" / ".bin" / tool
        return [str(local)]


def load_config(config_file: Optional[Path] = None, **overrides) -> ScanConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options never mask file config.

    Returns:
        Validated ScanConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing, or a
            value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".techpref.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "techpref.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ScanConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from TECHPREF_* environment variables.

    Every ScanConfig field maps to ``TECHPREF_<FIELD_NAME>``. The plain
    ``GITHUB_TOKEN`` variable is honoured when ``TECHPREF_GITHUB_TOKEN`` is not
    set, since that is what CI runners export.

    Returns:
        Dict of field_name -> parsed_value for any variables found.
    """
    type_hints = get_type_hints(ScanConfig)

    result: dict[str, Any] = {}

    for field_name in ScanConfig.__dataclass_fields__:
        env_key = f"TECHPREF_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint, field_name)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    if "github_token" not in result and os.environ.get("GITHUB_TOKEN"):
        result["github_token"] = os.environ["GITHUB_TOKEN"]

    return result


def _parse_env_value(value: str, type_hint: Any, field_name: str) -> Any:
    """Parse environment variable string to the correct type.

    Args:
        value: Raw string from environment
        type_hint: Type annotation from dataclass
        field_name: Field name for error messages

    Returns:
        Parsed value or None if can't parse

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    The ``[techpref]`` table is used when present so the settings can live in
    a shared file next to other tools' tables.
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data.get("techpref", data)
