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

"""Built-in rule bundles for common obfuscation jobs."""

import logging
from types import MappingProxyType

from .models import PresetRule, Rule
from .store import Confirm, RuleStore, confirm_replace

logger = logging.getLogger(__name__)

PRESETS: MappingProxyType[str, tuple[PresetRule, ...]] = MappingProxyType(
    {
        "corporate": (
            PresetRule("MiscellaneousCorp", "AnonymousCorp"),
            PresetRule("Project Phoenix", "Project Parakeet"),
            PresetRule("CEO", "CFO"),
            PresetRule("Q4", "Period Four"),
        ),
        "personal": (
            PresetRule("john.doe@", "user123@", whole_word=False),
            PresetRule("John Doe", "Jane Smith"),
            PresetRule("+44", "+00", whole_word=False),
            PresetRule("555-", "000-", whole_word=False),
        ),
        "financial": (
            PresetRule("$", "£", whole_word=False),
            PresetRule("USD", "CURRENCY"),
            PresetRule("Account #", "Acct #", whole_word=False),
            PresetRule("Budget:", "Amount:", whole_word=False),
        ),
    }
)


def preset_names() -> list[str]:
    return list(PRESETS)


def instantiate_preset(name: str) -> list[Rule]:
    """Create fresh rules from a preset, with ids starting at 0.

    Raises:
        KeyError: unknown preset name.
    """
    return [definition.to_rule(i) for i, definition in enumerate(PRESETS[name])]


def load_preset(store: RuleStore, name: str, confirm: Confirm | None = None) -> bool:
    """Replace the store's rules with a preset.

    Returns False if the caller declined to replace existing rules.
    """
    rules = instantiate_preset(name)
    if not confirm_replace(store, confirm):
        return False
    store.replace_all(rules)
    logger.info("Loaded preset '%s' (%d rules)", name, len(rules))
    return True
