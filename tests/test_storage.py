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

"""Tests for rule persistence, export and import."""

import json
import logging
import re
from pathlib import Path

import pytest

from text_obfuscator.errors import InvalidFormatError, NoRulesError, PersistenceError
from text_obfuscator.models import Rule
from text_obfuscator.storage import (
    JsonRuleStorage,
    export_rules,
    import_rules,
    read_rules_file,
    rules_from_data,
)
from text_obfuscator.store import RuleStore

# As written by the browser version of the tool.
BROWSER_EXPORT = """[
  {
    "id": 0,
    "original": "BlahBlahCorp",
    "replacement": "PotatoesIncorporated",
    "caseSensitive": false,
    "wholeWord": true
  },
  {
    "id": 3,
    "original": "555-",
    "replacement": "",
    "caseSensitive": true,
    "wholeWord": false
  }
]"""


@pytest.fixture
def store() -> RuleStore:
    """Provide a store with two rules."""
    return RuleStore([Rule(id=0, original="keep"), Rule(id=1, original="me")])


def test_load_missing(tmp_path: Path) -> None:
    """Test loading from non-existent file returns empty list."""
    storage = JsonRuleStorage(tmp_path / "rules.json")
    assert storage.exists() is False
    assert storage.load() == []


def test_save_and_load(tmp_path: Path) -> None:
    """Test that saved rules load back unchanged."""
    storage = JsonRuleStorage(tmp_path / "nested" / "rules.json")
    rules = [
        Rule(id=0, original="a", replacement="b"),
        Rule(id=4, original="c", replacement="", case_sensitive=True, whole_word=False),
    ]
    storage.save(rules)
    assert storage.load() == rules


def test_load_corrupt_file_logs(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Test that a corrupt storage file is logged and ignored."""
    path = tmp_path / "rules.json"
    path.write_text("{not json")
    with caplog.at_level(logging.WARNING):
        assert JsonRuleStorage(path).load() == []
    assert "Failed to load rules" in caplog.text


def test_load_undecodable_file_logs(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Test that a storage file with invalid UTF-8 is logged and ignored."""
    path = tmp_path / "rules.json"
    path.write_bytes(b'[{"id": 0, "original": "\xff\xfe"}]')
    with caplog.at_level(logging.WARNING):
        assert JsonRuleStorage(path).load() == []
    assert "Failed to load rules" in caplog.text


def test_reload_recomputes_next_id_from_stored_rules(tmp_path: Path) -> None:
    """Test that only the rule list is stored, so a reload restarts after the highest id."""
    storage = JsonRuleStorage(tmp_path / "rules.json")
    store = RuleStore(repository=storage)
    for word in ("a", "b", "c"):
        store.add(word)
    store.remove(2)
    assert store.add("d").id == 3

    reloaded = RuleStore(storage.load(), repository=storage)
    assert reloaded.next_id == 4


def test_save_failure_raises(tmp_path: Path) -> None:
    """Test that write errors surface as PersistenceError."""
    storage = JsonRuleStorage(tmp_path)
    with pytest.raises(PersistenceError):
        storage.save([Rule(id=0, original="a")])


def test_rules_from_browser_export() -> None:
    """Test parsing the camelCase field names."""
    rules = rules_from_data(json.loads(BROWSER_EXPORT))
    assert rules == [
        Rule(id=0, original="BlahBlahCorp", replacement="PotatoesIncorporated"),
        Rule(id=3, original="555-", replacement="", case_sensitive=True, whole_word=False),
    ]


def test_rules_without_ids_get_fresh_ones() -> None:
    """Test id assignment for entries that lack one."""
    rules = rules_from_data([{"id": 3, "original": "a"}, {"original": "b"}, {"original": "c"}])
    assert [r.id for r in rules] == [3, 4, 5]


@pytest.mark.parametrize(
    "data",
    [
        {"rules": []},
        "rules",
        None,
        [["not", "a", "mapping"]],
        [{"id": "1", "original": "a"}],
        [{"id": True, "original": "a"}],
        [{"original": 5}],
        [{"original": "a", "wholeWord": "yes"}],
        [{"id": 1, "original": "a"}, {"id": 1, "original": "b"}],
    ],
)
def test_rules_from_invalid_data(data: object) -> None:
    """Test that malformed data is rejected."""
    with pytest.raises(InvalidFormatError):
        rules_from_data(data)


def test_export_json(tmp_path: Path) -> None:
    """Test that exports are pretty-printed and timestamped."""
    rules = [Rule(id=0, original="CEO", replacement="CFO")]
    path = export_rules(rules, tmp_path)
    assert re.fullmatch(r"obfuscation-rules-\d+\.json", path.name)

    content = path.read_text()
    assert '\n  {\n    "id": 0,' in content
    assert json.loads(content) == [
        {
            "id": 0,
            "original": "CEO",
            "replacement": "CFO",
            "caseSensitive": False,
            "wholeWord": True,
        }
    ]


def test_export_yaml_reads_back(tmp_path: Path) -> None:
    """Test exporting to YAML and importing the result."""
    rules = [Rule(id=2, original="£", replacement="$", whole_word=False)]
    path = export_rules(rules, tmp_path, fmt="yaml")
    assert path.suffix == ".yaml"
    assert read_rules_file(path) == rules


def test_export_empty_fails(tmp_path: Path) -> None:
    """Test that there must be something to export."""
    with pytest.raises(NoRulesError):
        export_rules([], tmp_path)


def test_read_unparsable_file(tmp_path: Path) -> None:
    """Test that syntax errors are reported as format errors."""
    path = tmp_path / "rules.json"
    path.write_text("[{")
    with pytest.raises(InvalidFormatError):
        read_rules_file(path)


def test_read_missing_file(tmp_path: Path) -> None:
    """Test that unreadable files are reported as format errors."""
    with pytest.raises(InvalidFormatError):
        read_rules_file(tmp_path / "missing.json")


def test_import_replaces_store(tmp_path: Path, store: RuleStore) -> None:
    """Test a confirmed import."""
    path = tmp_path / "rules.json"
    path.write_text(BROWSER_EXPORT)
    assert import_rules(store, path, lambda: True) is True
    assert [r.original for r in store] == ["BlahBlahCorp", "555-"]
    assert store.add("next").id == 4


def test_import_non_list_leaves_store_unchanged(tmp_path: Path, store: RuleStore) -> None:
    """Test that a non-list file aborts the import."""
    path = tmp_path / "rules.json"
    path.write_text('{"rules": []}')
    before = store.rules
    with pytest.raises(InvalidFormatError):
        import_rules(store, path, lambda: True)
    assert store.rules == before


def test_import_declined(tmp_path: Path, store: RuleStore) -> None:
    """Test that declining the confirmation keeps the rules."""
    path = tmp_path / "rules.json"
    path.write_text(BROWSER_EXPORT)
    assert import_rules(store, path, lambda: False) is False
    assert [r.original for r in store] == ["keep", "me"]


def test_import_into_empty_store_skips_confirmation(tmp_path: Path) -> None:
    """Test that an empty store is replaced without asking."""
    path = tmp_path / "rules.json"
    path.write_text(BROWSER_EXPORT)

    def fail() -> bool:
        raise AssertionError("confirmation should not be requested")

    store = RuleStore()
    assert import_rules(store, path, fail) is True
    assert len(store) == 2
