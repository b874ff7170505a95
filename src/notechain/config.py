"""Configuration for notechain.

ChainConfig controls how documents are read into the chain graph:
- Which front matter field holds the predecessor declaration
- Which front matter field holds aliases
- The file suffix appended to unresolved link targets
- Where the markdown vault lives and what to skip in it

Create from environment variables:
    config = ChainConfig.from_env()

Or load from a notechain.yaml file:
    config = load_config("notechain.yaml")

Example notechain.yaml:
    predecessor_field: prev
    aliases_field: aliases
    link_suffix: .md
    vault_root: ~/notes
    ignore_patterns:
      - ".trash/*"
      - "templates/*"
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Default config file names to search for
DEFAULT_CONFIG_FILES = [
    "notechain.yaml",
    "notechain.yml",
    ".notechain.yaml",
    ".notechain.yml",
]


@dataclass
class ChainConfig:
    """Main configuration for notechain.

    Attributes:
        predecessor_field: Front matter key holding the predecessor declaration
        aliases_field: Front matter key holding alternate names
        link_suffix: Suffix appended to link text for unresolved targets
        vault_root: Root directory of the markdown vault (None = not on disk)
        ignore_patterns: Glob patterns (relative to vault_root) to skip
        source_path: Path to the config file that was loaded
    """

    predecessor_field: str = "prev"
    aliases_field: str = "aliases"
    link_suffix: str = ".md"
    vault_root: Path | None = None
    ignore_patterns: list[str] = field(default_factory=list)
    source_path: Path | None = None

    def __post_init__(self) -> None:
        if not self.predecessor_field:
            raise ConfigurationError("predecessor_field must not be empty")
        if self.link_suffix and not self.link_suffix.startswith("."):
            raise ConfigurationError(
                f"link_suffix must start with '.', got {self.link_suffix!r}"
            )
        if self.vault_root is not None and not isinstance(self.vault_root, Path):
            self.vault_root = Path(self.vault_root).expanduser()

    @classmethod
    def from_env(cls) -> ChainConfig:
        """Load configuration from environment variables.

        Environment variables:
        - NOTECHAIN_PREDECESSOR_FIELD: Front matter key (default: prev)
        - NOTECHAIN_ALIASES_FIELD: Front matter key (default: aliases)
        - NOTECHAIN_LINK_SUFFIX: Suffix for unresolved links (default: .md)
        - NOTECHAIN_VAULT_ROOT: Vault directory
        - NOTECHAIN_IGNORE_PATTERNS: Comma-separated glob patterns
        """
        vault_root = os.getenv("NOTECHAIN_VAULT_ROOT")
        ignore = os.getenv("NOTECHAIN_IGNORE_PATTERNS", "")

        return cls(
            predecessor_field=os.getenv("NOTECHAIN_PREDECESSOR_FIELD", "prev"),
            aliases_field=os.getenv("NOTECHAIN_ALIASES_FIELD", "aliases"),
            link_suffix=os.getenv("NOTECHAIN_LINK_SUFFIX", ".md"),
            vault_root=Path(vault_root).expanduser() if vault_root else None,
            ignore_patterns=[p.strip() for p in ignore.split(",") if p.strip()],
        )

    @classmethod
    def default(cls) -> ChainConfig:
        """Create a default configuration (same as no-arg constructor)."""
        return cls()


def load_config(path: Path | str | None = None) -> ChainConfig:
    """Load configuration from a YAML file.

    If no path is provided, searches for default config files in the
    current directory and parent directories.

    Args:
        path: Optional path to config file.

    Returns:
        Loaded configuration (defaults if no file was found).

    Raises:
        ConfigurationError: If the file exists but cannot be parsed.
    """
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            logger.warning(f"Config file not found: {path}")
            return ChainConfig()
    else:
        config_path = _find_config_file()
        if config_path is None:
            logger.debug("No config file found, using defaults")
            return ChainConfig()

    return _load_yaml_config(config_path)


def _find_config_file() -> Path | None:
    """Search for a config file in current and parent directories."""
    current = Path.cwd()

    # Search up to 5 levels up
    for _ in range(5):
        for filename in DEFAULT_CONFIG_FILES:
            config_path = current / filename
            if config_path.exists():
                logger.debug(f"Found config file: {config_path}")
                return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _load_yaml_config(path: Path) -> ChainConfig:
    """Load and parse a YAML config file."""
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config file {path}", cause=e) from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    return _parse_config(raw, path)


def _parse_config(raw: dict[str, Any], source_path: Path | None = None) -> ChainConfig:
    """Parse raw YAML dict into a ChainConfig."""
    raw = _expand_env_vars(raw)

    ignore = raw.get("ignore_patterns", [])
    if isinstance(ignore, str):
        ignore = [ignore]
    elif not isinstance(ignore, list):
        raise ConfigurationError(f"ignore_patterns must be a list, got {ignore!r}")

    vault_root = raw.get("vault_root")
    if vault_root is not None:
        vault_root = Path(vault_root).expanduser()
        if source_path is not None and not vault_root.is_absolute():
            vault_root = source_path.parent / vault_root

    return ChainConfig(
        predecessor_field=str(raw.get("predecessor_field", "prev")),
        aliases_field=str(raw.get("aliases_field", "aliases")),
        link_suffix=str(raw.get("link_suffix", ".md")),
        vault_root=vault_root,
        ignore_patterns=[str(p) for p in ignore],
        source_path=source_path,
    )


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR} and $VAR in config values."""
    if isinstance(data, dict):
        return {k: _expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return os.path.expandvars(data)
    else:
        return data
