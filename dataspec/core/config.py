"""Centralized configuration loading for dataspec.

This module provides utilities for loading and accessing configuration from
config.json (or a YAML file) with support for environment variable fallbacks
and default values. Limits used by specifications and example sequences are
collected in SpecConfig.
"""

import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"
CONFIG_SECTION = "dataspec"


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from a JSON or YAML file.

    Files ending in ``.yaml`` or ``.yml`` are parsed with ruamel.yaml, anything
    else as JSON. Returns empty dict if file doesn't exist or is invalid.

    Args:
        config_path: Path to the config file (default: $DATASPEC_CONFIG or
            "config.json")

    Returns:
        Configuration dictionary, or empty dict if file not found/invalid
    """
    if config_path is None:
        config_path = os.environ.get("DATASPEC_CONFIG", DEFAULT_CONFIG_PATH)
    path = Path(config_path)

    if not path.exists():
        return {}

    try:
        with open(path, "r") as f:
            if path.suffix in (".yaml", ".yml"):
                data = YAML(typ="safe").load(f)
            else:
                data = json.load(f)
    except (json.JSONDecodeError, YAMLError, IOError) as e:
        # Return empty dict on error, allowing code to use defaults
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}

    return data if isinstance(data, dict) else {}


_TRUE_STRINGS = ("1", "true", "yes", "on")


def _coerce(value: Any, value_type: type) -> Any:
    """Convert a config or environment value to value_type."""
    if isinstance(value, value_type) and not (value_type is int and isinstance(value, bool)):
        return value
    if value_type is bool and isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return value_type(value)


def get_config_value(
    keys: List[str],
    default: Any = None,
    config: Optional[Dict[str, Any]] = None,
    value_type: Optional[type] = None,
) -> Any:
    """Get a nested dataspec setting with fallback to an environment variable.

    Supports key paths like ["dataspec", "max_skip"]. Also checks environment
    variables as fallback (e.g., DATASPEC_MAX_SKIP for dataspec.max_skip).
    Environment variables are always strings and YAML/JSON files may quote
    numbers, so the value found is converted to ``value_type``, which defaults
    to the type of ``default``. A value that cannot be converted is logged and
    replaced by the default.

    Args:
        keys: List of keys to traverse (e.g., ["dataspec", "max_skip"])
        default: Default value if key not found
        config: Optional config dict (uses load_config() if not provided)
        value_type: Type to convert to (default: type(default), or no
            conversion when default is None)

    Returns:
        Configuration value, or default if not found or not convertible
    """
    if config is None:
        config = load_config()
    if value_type is None and default is not None:
        value_type = type(default)

    value = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
            if value is None:
                break
        else:
            value = None
            break

    env_key = "_".join(k.upper() for k in keys)
    if value is None:
        value = os.environ.get(env_key)
    if value is None:
        return default
    if value_type is None:
        return value

    try:
        return _coerce(value, value_type)
    except (TypeError, ValueError):
        logger.warning(
            f"Ignoring {'.'.join(keys)}={value!r} ({env_key}): "
            f"expected {value_type.__name__}, using {default!r}"
        )
        return default


@dataclass(frozen=True)
class SpecConfig:
    """Limits for validation messages and example generation.

    Attributes:
        max_skip: Consecutive rejections a filtered sequence tolerates
        generator_samples: Generator calls validated when a generator is attached
        max_array_length: Exclusive upper bound for generated array lengths
        print_max_items: Container entries shown when printing a value
        seed: Seed for the shared random generator (None keeps it unseeded)
    """

    max_skip: int = 200
    generator_samples: int = 10
    max_array_length: int = 10
    print_max_items: int = 3
    seed: Optional[int] = None

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "SpecConfig":
        """Build a SpecConfig from the ``dataspec`` section of a config dict.

        Args:
            config: Config dict (uses load_config() if not provided)

        Returns:
            SpecConfig with defaults for every missing value
        """
        if config is None:
            config = load_config()

        def _int(name: str, default: Optional[int]) -> Optional[int]:
            return get_config_value([CONFIG_SECTION, name], default, config, value_type=int)

        return cls(
            max_skip=_int("max_skip", cls.max_skip),
            generator_samples=_int("generator_samples", cls.generator_samples),
            max_array_length=_int("max_array_length", cls.max_array_length),
            print_max_items=_int("print_max_items", cls.print_max_items),
            seed=_int("seed", None),
        )


@lru_cache(maxsize=None)
def get_spec_config() -> SpecConfig:
    """Return the process-wide SpecConfig, loading it on first use."""
    spec_config = SpecConfig.from_config()
    logger.debug(f"Loaded {spec_config}")
    return spec_config


def reset_spec_config() -> None:
    """Forget the cached SpecConfig so the next access reloads it."""
    get_spec_config.cache_clear()
