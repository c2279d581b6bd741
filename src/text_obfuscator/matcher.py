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

"""Compile literal rules into regular expressions."""

import re
from dataclasses import dataclass

from .models import Rule


def build_pattern(original: str, case_sensitive: bool, whole_word: bool) -> re.Pattern[str]:
    """Build a regex matching ``original`` verbatim.

    Whole-word patterns are wrapped in ``\\b`` assertions, so a literal that
    starts or ends with a non-word character only matches next to a word
    character on that side.
    """
    pattern = re.escape(original)
    if whole_word:
        pattern = rf"\b{pattern}\b"
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(pattern, flags)


@dataclass
class CompiledMatcher:
    """A rule compiled for a single application pass."""

    rule: Rule
    pattern: re.Pattern[str]

    def substitute(self, text: str, replacement: str) -> tuple[str, int]:
        """Replace all matches with ``replacement`` taken literally.

        Returns the new text and the number of replacements made.
        """
        return self.pattern.subn(lambda _m: replacement, text)


def compile_rule(rule: Rule) -> CompiledMatcher:
    """Compile a rule with a non-empty ``original``."""
    if not rule.original:
        raise ValueError(f"Rule {rule.id} has no text to match")
    return CompiledMatcher(
        rule=rule,
        pattern=build_pattern(rule.original, rule.case_sensitive, rule.whole_word),
    )
