"""Configuration for kubeshape.

Settings live in the ``mapping`` section of config.json:

    {"mapping": {"strict_projections": false}}

Each setting falls back to a ``MAPPING_<NAME>`` environment variable
(``MAPPING_STRICT_PROJECTIONS``) and then to its default. Expanders never read
configuration themselves; callers build MappingOptions once and pass it in.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

CONFIG_SECTION = "mapping"
ENV_PREFIX = "MAPPING_"

_FALSE_STRINGS = {"false", "0", "no", "off"}


def load_config(config_path: str = "config.json") -> Dict[str, Any]:
    """Load config.json, or an empty dict when it is missing or unreadable.

    Args:
        config_path: Path to the JSON file (default: "config.json")

    Returns:
        Top-level configuration mapping
    """
    path = Path(config_path)
    if not path.is_file():
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (ValueError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def mapping_setting(name: str, default: Any = None, config: Optional[Dict[str, Any]] = None) -> Any:
    """Read one setting of the ``mapping`` section.

    Args:
        name: Setting name (e.g., "strict_projections")
        default: Value used when neither the file nor the environment sets it
        config: Loaded configuration (uses load_config() if not provided)

    Returns:
        The configured value, the ``MAPPING_<NAME>`` environment string, or
        ``default``
    """
    if config is None:
        config = load_config()

    section = config.get(CONFIG_SECTION)
    if isinstance(section, dict) and section.get(name) is not None:
        return section[name]
    return os.environ.get(f"{ENV_PREFIX}{name.upper()}", default)


def as_bool(value: Any) -> bool:
    """Interpret a config or environment value as a boolean."""
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


@dataclass(frozen=True)
class MappingOptions:
    """Options honored by expanders.

    Attributes:
        strict_projections: If True, a projection element must hold exactly
            one variant or expansion fails. If False, every present variant
            is populated and an element without variants becomes an empty
            projection.
    """

    strict_projections: bool = True

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "MappingOptions":
        """Build options from config.json (or the given dict) and environment.

        Args:
            config: Optional config dict (uses load_config() if not provided)

        Returns:
            MappingOptions with defaults for missing values
        """
        strict = mapping_setting("strict_projections", default=True, config=config)
        return cls(strict_projections=as_bool(strict))


DEFAULT_OPTIONS = MappingOptions()
