"""Load curation settings from YAML, with CLI overrides.

Overrides use dotted keys naming a setting of `CurationConfig`, e.g.
`clustering.method` or `clustering.distance_threshold` for the `cluster`
command's --method and --threshold options. A None value means the option
was not given and leaves the file's setting in place.
"""

from pathlib import Path
from typing import Any

import pydantic_yaml

from expression_curation.errors import PreconditionError

from .schema import CurationConfig


def load_config(config_path: Path | str) -> CurationConfig:
    """
    Load and validate curation configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated CurationConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return pydantic_yaml.parse_yaml_raw_as(CurationConfig, config_path.read_text())


def _set_setting(settings: dict[str, Any], key: str, value: Any) -> None:
    *sections, name = key.split(".")
    target = settings
    for section in sections:
        if not isinstance(target.get(section), dict):
            raise PreconditionError("Unknown configuration section", {"key": key})
        target = target[section]
    if name not in target:
        raise PreconditionError("Unknown configuration setting", {"key": key})
    target[name] = value


def load_config_with_overrides(
    config_path: Path | str,
    overrides: dict[str, Any],
) -> CurationConfig:
    """
    Load config from YAML and apply command-line overrides.

    Args:
        config_path: Path to YAML configuration file
        overrides: Dotted setting name -> value; None values are skipped

    Returns:
        Validated CurationConfig with overrides applied

    Raises:
        FileNotFoundError: If config file doesn't exist
        PreconditionError: If an override names no existing setting
        pydantic.ValidationError: If final config is invalid
    """
    settings = load_config(config_path).model_dump()

    for key, value in overrides.items():
        if value is not None:
            _set_setting(settings, key, value)

    return CurationConfig.model_validate(settings)
