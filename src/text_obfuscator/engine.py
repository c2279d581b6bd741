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

"""Sequential application of obfuscation rules to text."""

import logging
from collections.abc import Iterable

from .errors import EmptyInputError, NoMatchesError, NoRulesError
from .matcher import compile_rule
from .models import MatchReport, RedactionResult, Rule

logger = logging.getLogger(__name__)

DEFAULT_REPLACEMENT = "[REDACTED]"


def resolve_replacement(
    rule: Rule,
    default_replacement: str = DEFAULT_REPLACEMENT,
    keep_empty_replacement: bool = False,
) -> str:
    """Get the text a rule's matches are replaced with.

    ``None`` always falls back to ``default_replacement``. An empty string
    does too, unless ``keep_empty_replacement`` is set, in which case the
    matches are deleted.
    """
    if rule.replacement is None:
        return default_replacement
    if rule.replacement == "" and not keep_empty_replacement:
        return default_replacement
    return rule.replacement


def apply_rules(
    text: str,
    rules: Iterable[Rule],
    *,
    default_replacement: str = DEFAULT_REPLACEMENT,
    keep_empty_replacement: bool = False,
) -> RedactionResult:
    """Apply rules in order, each one to the output of the previous.

    Later rules see the replacements made by earlier ones, so rule order
    matters. Rules with an empty ``original`` are skipped.

    Raises:
        EmptyInputError: ``text`` is empty or whitespace only.
        NoRulesError: no rule has text to match.
        NoMatchesError: no rule matched anything.
    """
    if not text.strip():
        raise EmptyInputError()

    usable = [r for r in rules if r.original]
    if not usable:
        raise NoRulesError()

    output = text
    mappings: list[MatchReport] = []

    for rule in usable:
        matcher = compile_rule(rule)
        replacement = resolve_replacement(rule, default_replacement, keep_empty_replacement)
        output, count = matcher.substitute(output, replacement)
        if not count:
            continue
        logger.debug("Rule %d matched %d time(s)", rule.id, count)
        mappings.append(MatchReport(original=rule.original, replacement=replacement, count=count))

    if not mappings:
        raise NoMatchesError(text)

    return RedactionResult(text=output, mappings=mappings)


def format_report(mappings: Iterable[MatchReport]) -> list[str]:
    """Render mapping entries as human-readable lines."""
    lines: list[str] = []
    for m in mappings:
        noun = "match" if m.count == 1 else "matches"
        lines.append(f"{m.original} → {m.replacement} ({m.count} {noun})")
    return lines
