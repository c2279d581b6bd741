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

"""Ordered, persisted collection of obfuscation rules."""

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any, Protocol

from .errors import PersistenceError
from .models import PresetRule, Rule

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("original", "replacement", "case_sensitive", "whole_word")

DEFAULT_SEED_RULE = PresetRule("BlahBlahCorp", "PotatoesIncorporated")


class RuleRepository(Protocol):
    """Persistence backend for a rule store."""

    def exists(self) -> bool: ...

    def load(self) -> list[Rule]: ...

    def save(self, rules: list[Rule]) -> None: ...


def next_rule_id(rules: Iterable[Rule]) -> int:
    """Get the id following the highest one in ``rules`` (0 when empty).

    Every bulk load goes through this so ids never collide with later adds.
    """
    return max((r.id for r in rules), default=-1) + 1


class RuleStore:
    """Rules in application order, with id assignment and persistence.

    Ids increase monotonically and are never reused after a removal, only
    reset by :meth:`clear` or recomputed by :meth:`replace_all`. Every
    mutation is saved through ``repository`` if one is given; save failures
    are logged and otherwise ignored.
    """

    def __init__(
        self, rules: Iterable[Rule] = (), repository: RuleRepository | None = None
    ) -> None:
        self._rules: list[Rule] = list(rules)
        self._next_id = next_rule_id(self._rules)
        self.repository = repository

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules))

    @property
    def rules(self) -> tuple[Rule, ...]:
        return tuple(self._rules)

    @property
    def next_id(self) -> int:
        return self._next_id

    def usable_rules(self) -> list[Rule]:
        """Rules that have text to match."""
        return [r for r in self._rules if r.original]

    def get(self, rule_id: int) -> Rule | None:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def add(
        self,
        original: str = "",
        replacement: str = "",
        case_sensitive: bool = False,
        whole_word: bool = True,
    ) -> Rule:
        """Append a new rule and return it."""
        rule = Rule(
            id=self._next_id,
            original=original,
            replacement=replacement,
            case_sensitive=case_sensitive,
            whole_word=whole_word,
        )
        self._next_id += 1
        self._rules.append(rule)
        self._persist()
        return rule

    def remove(self, rule_id: int) -> bool:
        """Remove a rule by id. Returns False if there was no such rule."""
        before = len(self._rules)
        self._rules = [r for r in self._rules if r.id != rule_id]
        removed = len(self._rules) != before
        if removed:
            logger.debug("Removed rule %d", rule_id)
        self._persist()
        return removed

    def update(self, rule_id: int, **fields: Any) -> Rule | None:
        """Edit fields of a rule in place.

        An unknown id is logged and ignored. Unknown field names raise
        TypeError.
        """
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise TypeError(f"Cannot update rule field(s): {', '.join(sorted(unknown))}")

        rule = self.get(rule_id)
        if rule is None:
            logger.warning("Cannot update rule %d: no such rule", rule_id)
            return None

        for name, value in fields.items():
            setattr(rule, name, value)
        self._persist()
        return rule

    def clear(self) -> None:
        """Remove all rules and restart ids at 0."""
        self._rules = []
        self._next_id = 0
        self._persist()

    def replace_all(self, rules: Iterable[Rule]) -> None:
        """Replace the whole store, e.g. from an import or a preset."""
        self._rules = list(rules)
        self._next_id = next_rule_id(self._rules)
        self._persist()

    def _persist(self) -> None:
        if self.repository is None:
            return
        try:
            self.repository.save(list(self._rules))
        except PersistenceError as e:
            logger.warning("Failed to save rules: %s", e)


def open_store(repository: RuleRepository, seed_default: bool = True) -> RuleStore:
    """Create a store from persisted rules.

    On first use, when nothing has been persisted yet and ``seed_default`` is
    set, the store starts with a single example rule.
    """
    first_use = not repository.exists()
    store = RuleStore(repository.load(), repository=repository)
    if first_use and seed_default:
        seed = DEFAULT_SEED_RULE
        store.add(seed.original, seed.replacement, seed.case_sensitive, seed.whole_word)
    return store


Confirm = Callable[[], bool]


def confirm_replace(store: RuleStore, confirm: Confirm | None) -> bool:
    """Decide whether a wholesale replace of ``store`` may go ahead.

    Only a non-empty store needs confirmation; no ``confirm`` means yes.
    """
    if not store or confirm is None:
        return True
    return bool(confirm())
