# Copyright 2025 Lars Marowsky-Brée <lars@marowsky-bree.eu>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Settings loading from YAML configuration files."""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .engine import DEFAULT_REPLACEMENT
from .storage import DATA_DIR, DEFAULT_RULES_FILE

logger = logging.getLogger(__name__)

PROJECT_CONFIG_FILE = ".obfuscator.yaml"
GLOBAL_CONFIG_FILE = DATA_DIR / "config.yaml"

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class Settings:
    """Effective settings for the obfuscator."""

    rules_file: Path = DEFAULT_RULES_FILE
    default_replacement: str = DEFAULT_REPLACEMENT
    keep_empty_replacement: bool = False
    log_level: str = "WARNING"
    export_dir: Path | None = None


_PATH_KEYS = {"rules_file", "export_dir"}


def _setting_error(key: str, value: Any) -> str | None:
    """Describe what is wrong with a setting value, or None if it is fine."""
    if key in ("rules_file", "default_replacement") and not isinstance(value, str):
        return f"'{key}' must be a string"
    if key == "export_dir" and value is not None and not isinstance(value, str):
        return "'export_dir' must be a string"
    if key == "keep_empty_replacement" and not isinstance(value, bool):
        return "'keep_empty_replacement' must be true or false"
    if key == "log_level" and (
        not isinstance(value, str) or value.upper() not in VALID_LOG_LEVELS
    ):
        valid = ", ".join(sorted(VALID_LOG_LEVELS))
        return f"invalid log_level '{value}' (must be: {valid})"
    return None


def _load_config_file(path: Path) -> dict[str, Any]:
    """Load one YAML config file into a dict of known keys."""
    if not path.exists():
        return {}
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning("Ignoring invalid config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        return {}

    known = {f.name for f in fields(Settings)}
    values: dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown setting '%s' in %s", key, path)
            continue
        error = _setting_error(key, value)
        if error:
            logger.warning("Ignoring setting in %s: %s", path, error)
            continue
        if key in _PATH_KEYS and value is not None:
            value = Path(value).expanduser()
            if not value.is_absolute():
                value = path.parent / value
        values[key] = value
    return values


def load_settings(project_dir: Path | None = None, config_file: Path | None = None) -> Settings:
    """Load and merge settings from global and project configs.

    Project settings override global ones. An explicit ``config_file``
    replaces the project config.
    """
    values = _load_config_file(GLOBAL_CONFIG_FILE)
    if config_file is None:
        if project_dir is None:
            project_dir = Path.cwd()
        config_file = project_dir / PROJECT_CONFIG_FILE
    values.update(_load_config_file(config_file))
    return Settings(**values)


def validate_settings_file(path: Path) -> list[str]:
    """Validate a settings file, return list of error messages (empty if valid)."""
    if not path.exists():
        return []

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return [f"YAML syntax error: {e}"]
    except (OSError, UnicodeDecodeError) as e:
        return [f"Cannot read file: {e}"]

    if data is None:
        return []

    if not isinstance(data, dict):
        return ["Invalid format: expected a mapping of settings"]

    errors: list[str] = []
    known = {f.name for f in fields(Settings)}
    for key, value in data.items():
        if key not in known:
            errors.append(f"Unknown setting '{key}'")
            continue
        error = _setting_error(key, value)
        if error:
            errors.append(error)

    return errors
