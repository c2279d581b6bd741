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

"""Exception types raised by the obfuscator."""


class ObfuscatorError(Exception):
    """Base class for all obfuscator errors."""


class EmptyInputError(ObfuscatorError):
    """Raised when there is no text to obfuscate."""

    def __init__(self, message: str = "Please enter some text to obfuscate.") -> None:
        super().__init__(message)


class NoRulesError(ObfuscatorError):
    """Raised when no usable rule is defined."""

    def __init__(self, message: str = "Please add at least one obfuscation rule.") -> None:
        super().__init__(message)


class NoMatchesError(ObfuscatorError):
    """Raised when rules are present but none of them matched.

    The unchanged input is kept on ``text``.
    """

    def __init__(
        self, text: str, message: str = "No matches found. Check your obfuscation rules."
    ) -> None:
        super().__init__(message)
        self.text = text


class InvalidFormatError(ObfuscatorError):
    """Raised when imported rule data is malformed."""


class PersistenceError(ObfuscatorError):
    """Raised by storage adapters when rules cannot be saved."""
