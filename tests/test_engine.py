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

"""Tests for sequential rule application."""

import pytest

from text_obfuscator.engine import DEFAULT_REPLACEMENT, apply_rules, format_report
from text_obfuscator.errors import EmptyInputError, NoMatchesError, NoRulesError
from text_obfuscator.models import MatchReport, Rule


def test_replaces_every_case_variant() -> None:
    """Test case-insensitive replacement of all occurrences."""
    rule = Rule(id=0, original="acme", replacement="Corp", whole_word=False)
    result = apply_rules("ACME, Acme and acmeish", [rule])
    assert result.text == "Corp, Corp and Corpish"
    assert result.mappings == [MatchReport(original="acme", replacement="Corp", count=3)]


def test_whole_word_rule_without_match_has_no_report() -> None:
    """Test that an embedded occurrence produces no report entry."""
    rules = [
        Rule(id=0, original="CEO", replacement="CFO", whole_word=True),
        Rule(id=1, original="agreed", replacement="left"),
    ]
    result = apply_rules("The CEOs agreed", rules)
    assert result.text == "The CEOs left"
    assert [m.original for m in result.mappings] == ["agreed"]


def test_rules_cascade_in_order() -> None:
    """Test that later rules see earlier replacements."""
    rules = [
        Rule(id=0, original="A", replacement="B"),
        Rule(id=1, original="B", replacement="C"),
    ]
    result = apply_rules("A", rules)
    assert result.text == "C"
    assert [(m.original, m.replacement, m.count) for m in result.mappings] == [
        ("A", "B", 1),
        ("B", "C", 1),
    ]


def test_single_rule_reapplied_matches_nothing() -> None:
    """Test that re-applying a rule whose replacement cannot match is a no-op."""
    rule = Rule(id=0, original="foo", replacement="bar")
    result = apply_rules("foo foo", [rule])
    assert result.text == "bar bar"

    with pytest.raises(NoMatchesError) as excinfo:
        apply_rules(result.text, [rule])
    assert excinfo.value.text == "bar bar"


def test_empty_replacement_uses_default_token() -> None:
    """Test that an empty replacement falls back to the redaction token."""
    rule = Rule(id=0, original="secret", replacement="")
    result = apply_rules("a secret b", [rule])
    assert result.text == f"a {DEFAULT_REPLACEMENT} b"
    assert result.mappings[0].replacement == DEFAULT_REPLACEMENT


def test_keep_empty_replacement_deletes_match() -> None:
    """Test that an explicit empty replacement can delete matches."""
    rule = Rule(id=0, original="secret", replacement="")
    result = apply_rules("a secret b", [rule], keep_empty_replacement=True)
    assert result.text == "a  b"
    assert result.mappings[0].replacement == ""


def test_missing_replacement_always_uses_default() -> None:
    """Test that a None replacement never deletes."""
    rule = Rule(id=0, original="secret", replacement=None)
    result = apply_rules(
        "secret", [rule], default_replacement="***", keep_empty_replacement=True
    )
    assert result.text == "***"


@pytest.mark.parametrize("text", ["", "   ", "\n\t "])
def test_empty_input(text: str) -> None:
    """Test that blank input is rejected regardless of rules."""
    with pytest.raises(EmptyInputError):
        apply_rules(text, [Rule(id=0, original="x")])
    with pytest.raises(EmptyInputError):
        apply_rules(text, [])


def test_no_usable_rules() -> None:
    """Test that rules without text are rejected."""
    with pytest.raises(NoRulesError):
        apply_rules("some text", [Rule(id=0, original=""), Rule(id=1, original="")])
    with pytest.raises(NoRulesError):
        apply_rules("some text", [])


def test_empty_rules_are_skipped() -> None:
    """Test that empty rules do not stop the others from applying."""
    rules = [Rule(id=0, original=""), Rule(id=1, original="text", replacement="words")]
    result = apply_rules("some text", rules)
    assert result.text == "some words"
    assert len(result.mappings) == 1


def test_no_matches_keeps_input() -> None:
    """Test that unmatched rules report the unchanged input."""
    with pytest.raises(NoMatchesError) as excinfo:
        apply_rules("nothing here", [Rule(id=0, original="secret")])
    assert excinfo.value.text == "nothing here"
    assert "No matches found" in str(excinfo.value)


def test_deterministic() -> None:
    """Test that identical calls produce identical results."""
    rules = [
        Rule(id=0, original="alpha", replacement="beta", whole_word=False),
        Rule(id=1, original="beta", replacement="gamma"),
    ]
    text = "alpha alphabet beta"
    assert apply_rules(text, rules) == apply_rules(text, rules)


def test_total_matches() -> None:
    """Test the total match count across rules."""
    rules = [
        Rule(id=0, original="one", replacement="1"),
        Rule(id=1, original="two", replacement="2"),
    ]
    result = apply_rules("one two two", rules)
    assert result.total_matches == 3


def test_format_report() -> None:
    """Test report rendering with singular and plural counts."""
    lines = format_report(
        [
            MatchReport(original="CEO", replacement="CFO", count=1),
            MatchReport(original="Q4", replacement="Period Four", count=2),
        ]
    )
    assert lines == ["CEO → CFO (1 match)", "Q4 → Period Four (2 matches)"]
