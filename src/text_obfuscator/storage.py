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

"""Reading and writing rule lists: local persistence, export and import."""

import json
import logging
import time
from pathlib import Path
from typing import Any

import yaml

from .errors import InvalidFormatError, NoRulesError, PersistenceError
from .models import Rule
from .store import Confirm, RuleStore, confirm_replace

logger = logging.getLogger(__name__)

DATA_DIR = Path.home() / ".text_obfuscator"
DEFAULT_RULES_FILE = DATA_DIR / "rules.json"
EXPORT_PREFIX = "obfuscation-rules"
YAML_SUFFIXES = {".yaml", ".yml"}

# Serialized field name -> Rule attribute, with the expected type.
_FIELDS: dict[str, tuple[str, type]] = {
    "original": ("original", str),
    "replacement": ("replacement", str),
    "caseSensitive": ("case_sensitive", bool),
    "wholeWord": ("whole_word", bool),
}


def rule_to_dict(rule: Rule) -> dict[str, Any]:
    """Serialize a rule, keeping the field names of exported rule files."""
    return {
        "id": rule.id,
        "original": rule.original,
        "replacement": rule.replacement,
        "caseSensitive": rule.case_sensitive,
        "wholeWord": rule.whole_word,
    }


def rules_to_data(rules: list[Rule]) -> list[dict[str, Any]]:
    return [rule_to_dict(r) for r in rules]


def _parse_rule(data: Any, index: int) -> tuple[int | None, dict[str, Any]]:
    """Validate one serialized rule, return its id (if any) and attributes."""
    prefix = f"Rule {index + 1}"
    if not isinstance(data, dict):
        raise InvalidFormatError(f"{prefix}: must be a mapping")

    rule_id = data.get("id")
    if rule_id is not None and (isinstance(rule_id, bool) or not isinstance(rule_id, int)):
        raise InvalidFormatError(f"{prefix}: 'id' must be an integer")

    attrs: dict[str, Any] = {}
    for key, (attr, expected) in _FIELDS.items():
        value = data.get(key, data.get(attr))
        if value is None:
            continue
        if not isinstance(value, expected):
            raise InvalidFormatError(f"{prefix}: '{key}' must be a {expected.__name__}")
        attrs[attr] = value
    return rule_id, attrs


def rules_from_data(data: Any) -> list[Rule]:
    """Build rules from deserialized data.

    Entries without an id get fresh ones above the highest id present.

    Raises:
        InvalidFormatError: the data is not a list of rule mappings.
    """
    if not isinstance(data, list):
        raise InvalidFormatError("Invalid file format: expected a list of rules")

    parsed = [_parse_rule(item, i) for i, item in enumerate(data)]

    seen: set[int] = set()
    for rule_id, _ in parsed:
        if rule_id is None:
            continue
        if rule_id in seen:
            raise InvalidFormatError(f"Duplicate rule id {rule_id}")
        seen.add(rule_id)

    next_id = max(seen, default=-1) + 1
    rules: list[Rule] = []
    for rule_id, attrs in parsed:
        if rule_id is None:
            rule_id = next_id
            next_id += 1
        rules.append(Rule(id=rule_id, **attrs))
    return rules


class JsonRuleStorage:
    """Persists a rule list as a JSON file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or DEFAULT_RULES_FILE

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> list[Rule]:
        """Load rules. Missing or unreadable files yield an empty list."""
        if not self.path.exists():
            return []
        try:
            with self.path.open(encoding="utf-8") as f:
                return rules_from_data(json.load(f))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, InvalidFormatError) as e:
            logger.warning("Failed to load rules from %s: %s", self.path, e)
            return []

    def save(self, rules: list[Rule]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump(rules_to_data(rules), f)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to save rules to {self.path}: {e}") from e


def export_rules(rules: list[Rule], directory: Path | None = None, fmt: str = "json") -> Path:
    """Write rules to a new timestamped file and return its path.

    Raises:
        NoRulesError: there is nothing to export.
    """
    if not rules:
        raise NoRulesError("No rules to save.")
    if fmt not in ("json", "yaml"):
        raise ValueError(f"Unsupported export format: {fmt}")

    directory = directory or Path.cwd()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{EXPORT_PREFIX}-{int(time.time() * 1000)}.{fmt}"

    data = rules_to_data(rules)
    with path.open("w", encoding="utf-8") as f:
        if fmt == "yaml":
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
        else:
            json.dump(data, f, indent=2, ensure_ascii=False)
    logger.info("Exported %d rule(s) to %s", len(rules), path)
    return path


def read_rules_file(path: Path) -> list[Rule]:
    """Parse an exported rules file (JSON, or YAML by suffix).

    Raises:
        InvalidFormatError: the file is unreadable or not a list of rules.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidFormatError(f"Cannot read {path}: {e}") from e

    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidFormatError(f"Failed to parse {path}: {e}") from e

    return rules_from_data(data)


def import_rules(store: RuleStore, path: Path, confirm: Confirm | None = None) -> bool:
    """Replace the store with the rules in ``path``.

    The file is parsed before anything else, so a malformed file leaves the
    store untouched. Returns False if the caller declined the replace.
    """
    rules = read_rules_file(path)
    if not confirm_replace(store, confirm):
        return False
    store.replace_all(rules)
    logger.info("Imported %d rule(s) from %s", len(rules), path)
    return True
