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

"""Data models for obfuscation rules and results."""

from dataclasses import dataclass, field


@dataclass
class Rule:
    """A literal find/replace rule."""

    id: int
    original: str = ""
    replacement: str | None = ""
    case_sensitive: bool = False
    whole_word: bool = True


@dataclass(frozen=True)
class PresetRule:
    """A rule definition without an id, as shipped in preset bundles."""

    original: str
    replacement: str
    case_sensitive: bool = False
    whole_word: bool = True

    def to_rule(self, rule_id: int) -> Rule:
        return Rule(
            id=rule_id,
            original=self.original,
            replacement=self.replacement,
            case_sensitive=self.case_sensitive,
            whole_word=self.whole_word,
        )


@dataclass
class MatchReport:
    """How often a rule matched and what it was replaced with."""

    original: str
    replacement: str
    count: int


@dataclass
class RedactionResult:
    """Result of applying a rule list to a text."""

    text: str
    mappings: list[MatchReport] = field(default_factory=list)

    @property
    def total_matches(self) -> int:
        return sum(m.count for m in self.mappings)
