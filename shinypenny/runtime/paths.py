"""Centralized path management for shinypenny.

This module provides a single source of truth for the user configuration
paths, so no other module has to know about XDG or environment overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_FILE_NAME = "shinypenny.toml"
BANK_TABLE_FILE_NAME = "banks.toml"


def _get_config_dir() -> Path:
    """Determine the per-user configuration directory."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path("~/.config").expanduser()


@dataclass
class ProjectPaths:
    """Container for all configuration paths.

    ``config_override`` wins over the ``SHINYPENNY_CONFIG`` environment
    variable, which wins over the per-user configuration directory.
    """

    config_dir: Path = field(default_factory=_get_config_dir)
    config_override: Path | None = None

    def __post_init__(self) -> None:
        self.config_dir = self.config_dir.expanduser().resolve()

    @property
    def config_file(self) -> Path:
        """User configuration TOML file (name, IBAN, company, fonts)."""
        if self.config_override is not None:
            return self.config_override.expanduser()
        env = os.environ.get("SHINYPENNY_CONFIG")
        if env:
            return Path(env).expanduser()
        return self.config_dir / CONFIG_FILE_NAME

    @property
    def bank_table(self) -> Path:
        """Bank code lookup table, next to the configuration file."""
        return self.config_file.parent / BANK_TABLE_FILE_NAME

    def default_output(self, today: str) -> Path:
        """Output file name used when none is given."""
        return Path.cwd() / f"reimbursement_{today}.pdf"


# Module-level singleton
_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance.

    Returns:
        The global ProjectPaths instance.
    """
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def set_config_override(path: Path | None) -> None:
    """Point configuration lookups at an explicit file.

    Args:
        path: Configuration file path, or None to restore the default lookup.
    """
    get_paths().config_override = path
