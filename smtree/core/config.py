"""
Tree configuration for smtree.

Values come from, in increasing priority: dataclass defaults, a JSON or
TOML file, and SMTREE_* environment variables (a .env file is loaded first).
"""

import json
import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from smtree.core.errors import ConfigError
from smtree.crypto.hashers import HASHERS, LeafableHasher, get_hasher
from smtree.utils.validation import validate_height

ENV_PREFIX = "SMTREE_"


@dataclass
class TreeConfig:
    """Tree construction and runtime parameters"""

    height: int = 32  # Levels below the root (2^height leaves)
    hasher: str = "poseidon"  # One of HASHERS
    log_level: str = "INFO"
    log_dir: Optional[Path] = None  # Log to file when set

    def __post_init__(self):
        """Validate and normalize fields"""
        ok, err = validate_height(self.height)
        if not ok:
            raise ConfigError(err)

        self.hasher = str(self.hasher).lower()
        if self.hasher not in HASHERS:
            raise ConfigError(f"Unknown hasher '{self.hasher}', expected one of {sorted(HASHERS)}")

        self.log_level = str(self.log_level).upper()
        if self.log_dir is not None:
            self.log_dir = Path(self.log_dir)

    def make_hasher(self) -> LeafableHasher:
        return get_hasher(self.hasher)

    def build_tree(self):
        """Fresh SparseMerkleTreeWithLeaves with these parameters."""
        from smtree.core.tree import SparseMerkleTreeWithLeaves

        return SparseMerkleTreeWithLeaves(height=self.height, hasher=self.make_hasher())


def _read_file(config_path: Path) -> Dict[str, Any]:
    suffix = config_path.suffix.lower()
    try:
        if suffix == ".json":
            data = json.loads(config_path.read_text())
        elif suffix == ".toml":
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        else:
            raise ConfigError(f"Unsupported config format: {config_path.suffix}")
    except (OSError, json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read config {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a table/object")
    # [smtree] section is optional in TOML
    return data.get("smtree", data)


def _read_env() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for f in fields(TreeConfig):
        raw = os.environ.get(ENV_PREFIX + f.name.upper())
        if raw is None or raw == "":
            continue
        if f.name == "height":
            try:
                overrides["height"] = int(raw)
            except ValueError:
                raise ConfigError(f"{ENV_PREFIX}HEIGHT must be an integer, got {raw!r}") from None
        else:
            overrides[f.name] = raw
    return overrides


def load_config(config_path: Optional[str] = None, use_env: bool = True) -> TreeConfig:
    """
    Load configuration from file and environment.

    Args:
        config_path: Optional path to a .json or .toml file
        use_env: Apply SMTREE_* environment overrides

    Returns:
        TreeConfig instance

    Raises:
        ConfigError: On unreadable files, unknown keys or invalid values
    """
    values: Dict[str, Any] = {}

    if config_path:
        values.update(_read_file(Path(config_path)))

    if use_env:
        load_dotenv()
        values.update(_read_env())

    known = {f.name for f in fields(TreeConfig)}
    unknown = set(values) - known
    if unknown:
        raise ConfigError(f"Unknown config keys: {sorted(unknown)}")

    return TreeConfig(**values)
