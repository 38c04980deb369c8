# neurosignals/config/loaders.py

"""
Builds the analytics configuration from TOML files and NEUROSIGNALS_*
environment variables, and holds the process-wide active configuration that
analytics consult for parameters left as None.
"""

import os
import logging
from pathlib import Path
from typing import Dict, Any, Iterator, Optional, List, Tuple

import toml
from pydantic import ValidationError

from .models import NeurosignalsConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "NEUROSIGNALS_"
USER_CONFIG_DIR = Path("~/.config/neurosignals").expanduser()
USER_CONFIG_FILE = USER_CONFIG_DIR / "neurosignals.toml"
PROJECT_CONFIG_FILE = Path("./neurosignals.toml")

ConfigDict = Dict[str, Any]


def _load_toml_file(filepath: Path) -> ConfigDict:
    """Section mapping of a TOML file; {} when the file is absent, unreadable or malformed."""
    if not filepath.is_file():
        return {}
    try:
        return toml.loads(filepath.read_text())
    except toml.TomlDecodeError as e:
        logger.warning(f"Skipping malformed TOML in '{filepath}': {e}")
    except OSError as e:
        logger.warning(f"Skipping unreadable config file '{filepath}': {e}")
    return {}


def _deep_merge_dicts(base: ConfigDict, update: ConfigDict) -> ConfigDict:
    """New mapping with `update` layered over `base`; nested sections merge key by key."""
    merged = dict(base)
    for key, value in update.items():
        current = merged.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merged[key] = _deep_merge_dicts(current, value)
        else:
            merged[key] = value
    return merged


def _parse_env_value(value: str) -> Any:
    """'true'/'false' become bools, numerals become int or float, anything else stays text."""
    lowered = value.lower()
    if lowered in ('true', 'false'):
        return lowered == 'true'
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            pass
    return value


def _get_config_from_env() -> ConfigDict:
    """
    Section mapping from NEUROSIGNALS_<SECTION>_<KEY> variables.

    The section name ends at the first underscore after the prefix, so
    NEUROSIGNALS_ANALYSIS_STATIONARITY_WINDOW=20 sets
    analysis.stationarity_window to 20.
    """
    sections: ConfigDict = {}
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, _, key = name[len(ENV_PREFIX):].lower().partition('_')
        if not key:
            logger.debug(f"Environment variable {name} names no key; ignored.")
            continue
        sections.setdefault(section, {})[key] = _parse_env_value(raw)
    return sections


def _config_sources(
    config_files: Optional[List[Path]],
    disable_project_config: bool,
    disable_user_config: bool
) -> Iterator[Tuple[str, ConfigDict]]:
    """(label, mapping) pairs from lowest to highest precedence."""
    # The first explicit file wins over later ones
    for file_path in reversed(config_files or []):
        yield str(file_path), _load_toml_file(Path(file_path))
    if not disable_project_config:
        yield f"project file {PROJECT_CONFIG_FILE.resolve()}", _load_toml_file(PROJECT_CONFIG_FILE)
    if not disable_user_config:
        yield f"user file {USER_CONFIG_FILE}", _load_toml_file(USER_CONFIG_FILE)
    yield "environment", _get_config_from_env()


def load_configuration(
    config_files: Optional[List[Path]] = None,
    disable_project_config: bool = False,
    disable_user_config: bool = False,
) -> NeurosignalsConfig:
    """
    Validated configuration assembled from every available source.

    Later sources override earlier ones: model defaults, then `config_files`,
    then ./neurosignals.toml, then ~/.config/neurosignals/neurosignals.toml,
    then NEUROSIGNALS_* variables. If the merged values fail validation the
    defaults are returned and the errors are logged.
    """
    merged: ConfigDict = {}
    for label, values in _config_sources(config_files, disable_project_config, disable_user_config):
        if values:
            logger.debug(f"Merging configuration from {label}: {sorted(values)}")
            merged = _deep_merge_dicts(merged, values)

    try:
        return NeurosignalsConfig(**merged)
    except ValidationError as e:
        logger.error(f"Invalid configuration, using defaults instead:\n{e}")
        return NeurosignalsConfig()


_active_config: Optional[NeurosignalsConfig] = None


def get_active_config() -> NeurosignalsConfig:
    """Returns the configuration used for analytics defaults, loading it on first use."""
    global _active_config
    if _active_config is None:
        _active_config = load_configuration()
    return _active_config


def set_active_config(config: Optional[NeurosignalsConfig]) -> None:
    """Replaces the active configuration; None forces a reload on next access."""
    global _active_config
    _active_config = config
