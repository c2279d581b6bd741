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

"""Command-line interface for the text obfuscator."""

import argparse
import sys
from pathlib import Path
from typing import NoReturn

from .config import load_settings, validate_settings_file
from .engine import apply_rules, format_report
from .errors import InvalidFormatError, ObfuscatorError
from .log import configure_logging
from .models import Rule
from .presets import PRESETS, load_preset
from .storage import JsonRuleStorage, export_rules, import_rules
from .store import Confirm, RuleStore, open_store

REPLACE_PROMPT = "This will replace your current rules. Continue? [y/N] "
CLEAR_PROMPT = "Are you sure you want to clear all rules? [y/N] "


def _prompt(message: str) -> bool:
    """Ask a yes/no question on stderr, reading the answer from stdin."""
    sys.stderr.write(message)
    sys.stderr.flush()
    answer = sys.stdin.readline()
    return answer.strip().lower() in ("y", "yes")


def _confirmation(args: argparse.Namespace, message: str) -> Confirm | None:
    """Build the confirmation callback for a destructive command."""
    if args.yes:
        return None
    return lambda: _prompt(message)


def _open_store(args: argparse.Namespace) -> RuleStore:
    rules_file = args.rules_file or args.settings.rules_file
    return open_store(JsonRuleStorage(Path(rules_file)))


def _describe_rule(rule: Rule) -> str:
    flags = []
    if rule.case_sensitive:
        flags.append("case-sensitive")
    if rule.whole_word:
        flags.append("whole-word")
    replacement = rule.replacement if rule.replacement else "(default)"
    original = rule.original if rule.original else "(empty)"
    suffix = f" [{', '.join(flags)}]" if flags else ""
    return f"{rule.id}: {original} → {replacement}{suffix}"


def cmd_apply(args: argparse.Namespace) -> int:
    """Obfuscate text from a file or stdin."""
    if args.file:
        try:
            text = Path(args.file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: Cannot read {args.file}: {e}", file=sys.stderr)
            return 1
    else:
        text = sys.stdin.read()

    store = _open_store(args)
    settings = args.settings
    result = apply_rules(
        text,
        store.rules,
        default_replacement=settings.default_replacement,
        keep_empty_replacement=settings.keep_empty_replacement,
    )

    if args.output:
        Path(args.output).write_text(result.text, encoding="utf-8")
    else:
        sys.stdout.write(result.text)

    if not args.quiet:
        for line in format_report(result.mappings):
            print(line, file=sys.stderr)
        print(
            f"{len(text)} characters in, {len(result.text)} characters out",
            file=sys.stderr,
        )
    return 0


def cmd_rules_list(args: argparse.Namespace) -> int:
    """List rules in application order."""
    store = _open_store(args)
    if not store:
        print("No rules defined", file=sys.stderr)
        return 0
    for rule in store:
        print(_describe_rule(rule))
    return 0


def cmd_rules_add(args: argparse.Namespace) -> int:
    """Append a rule."""
    store = _open_store(args)
    rule = store.add(args.original, args.replacement, args.case_sensitive, not args.partial)
    print(f"Added rule {rule.id}", file=sys.stderr)
    return 0


def cmd_rules_remove(args: argparse.Namespace) -> int:
    """Remove a rule by id."""
    store = _open_store(args)
    if not store.remove(args.id):
        print(f"No rule with id {args.id}", file=sys.stderr)
    return 0


def cmd_rules_update(args: argparse.Namespace) -> int:
    """Edit fields of an existing rule."""
    changes = {
        name: value
        for name, value in {
            "original": args.original,
            "replacement": args.replacement,
            "case_sensitive": args.case_sensitive,
            "whole_word": args.whole_word,
        }.items()
        if value is not None
    }
    store = _open_store(args)
    rule = store.update(args.id, **changes)
    if rule is None:
        print(f"Error: No rule with id {args.id}", file=sys.stderr)
        return 1
    print(_describe_rule(rule))
    return 0


def cmd_rules_clear(args: argparse.Namespace) -> int:
    """Remove all rules."""
    store = _open_store(args)
    if not store:
        return 0
    confirm = _confirmation(args, CLEAR_PROMPT)
    if confirm is not None and not confirm():
        print("Aborted", file=sys.stderr)
        return 0
    store.clear()
    print("Cleared all rules", file=sys.stderr)
    return 0


def cmd_preset_list(args: argparse.Namespace) -> int:
    """List the built-in presets."""
    for name, definitions in PRESETS.items():
        originals = ", ".join(d.original for d in definitions)
        print(f"{name}: {originals}")
    return 0


def cmd_preset_load(args: argparse.Namespace) -> int:
    """Replace the rules with a preset."""
    store = _open_store(args)
    if not load_preset(store, args.name, _confirmation(args, REPLACE_PROMPT)):
        print("Aborted", file=sys.stderr)
        return 0
    print(f"Loaded preset '{args.name}' ({len(store)} rules)", file=sys.stderr)
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Export rules to a timestamped file."""
    store = _open_store(args)
    directory = Path(args.directory) if args.directory else args.settings.export_dir
    path = export_rules(list(store.rules), directory, args.format)
    print(path)
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    """Replace the rules with those from a file."""
    store = _open_store(args)
    if not import_rules(store, Path(args.file), _confirmation(args, REPLACE_PROMPT)):
        print("Aborted", file=sys.stderr)
        return 0
    print(f"Rules loaded successfully ({len(store)} rules)", file=sys.stderr)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a settings file."""
    path = Path(args.config) if args.config else Path.cwd() / ".obfuscator.yaml"
    errors = validate_settings_file(path)
    if errors:
        print(f"Validation errors in {path}:", file=sys.stderr)
        for err in errors:
            print(f"  {err}", file=sys.stderr)
        return 1
    print(f"{path}: OK")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="obfuscate", description="Apply find/replace rules to redact text"
    )
    parser.add_argument("--config", help="Settings file (default: ./.obfuscator.yaml)")
    parser.add_argument("--rules-file", help="Rules storage file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # apply subcommand
    apply_parser = subparsers.add_parser("apply", help="Obfuscate text (stdin by default)")
    apply_parser.add_argument("file", nargs="?", help="Input file")
    apply_parser.add_argument("-o", "--output", help="Write output to file")
    apply_parser.add_argument("-q", "--quiet", action="store_true", help="Skip the report")
    apply_parser.set_defaults(func=cmd_apply)

    # rules subcommand group
    rules_parser = subparsers.add_parser("rules", help="Manage rules")
    rules_sub = rules_parser.add_subparsers(dest="rules_command", required=True)

    list_parser = rules_sub.add_parser("list", help="List rules")
    list_parser.set_defaults(func=cmd_rules_list)

    add_parser = rules_sub.add_parser("add", help="Add a rule")
    add_parser.add_argument("original", help="Text to find")
    add_parser.add_argument("replacement", nargs="?", default="", help="Replacement text")
    add_parser.add_argument("--case-sensitive", action="store_true", help="Match case")
    add_parser.add_argument("--partial", action="store_true", help="Also match inside words")
    add_parser.set_defaults(func=cmd_rules_add)

    remove_parser = rules_sub.add_parser("remove", help="Remove a rule")
    remove_parser.add_argument("id", type=int, help="Rule id")
    remove_parser.set_defaults(func=cmd_rules_remove)

    update_parser = rules_sub.add_parser("update", help="Edit a rule")
    update_parser.add_argument("id", type=int, help="Rule id")
    update_parser.add_argument("--original", help="Text to find")
    update_parser.add_argument("--replacement", help="Replacement text")
    update_parser.add_argument(
        "--case-sensitive", action=argparse.BooleanOptionalAction, help="Match case"
    )
    update_parser.add_argument(
        "--whole-word", action=argparse.BooleanOptionalAction, help="Match whole words only"
    )
    update_parser.set_defaults(func=cmd_rules_update)

    clear_parser = rules_sub.add_parser("clear", help="Remove all rules")
    clear_parser.add_argument("-y", "--yes", action="store_true", help="Do not ask")
    clear_parser.set_defaults(func=cmd_rules_clear)

    # preset subcommand group
    preset_parser = subparsers.add_parser("preset", help="Built-in rule presets")
    preset_sub = preset_parser.add_subparsers(dest="preset_command", required=True)

    preset_list = preset_sub.add_parser("list", help="List presets")
    preset_list.set_defaults(func=cmd_preset_list)

    preset_load = preset_sub.add_parser("load", help="Replace rules with a preset")
    preset_load.add_argument("name", choices=sorted(PRESETS), help="Preset name")
    preset_load.add_argument("-y", "--yes", action="store_true", help="Do not ask")
    preset_load.set_defaults(func=cmd_preset_load)

    # export / import
    export_parser = subparsers.add_parser("export", help="Export rules to a file")
    export_parser.add_argument("directory", nargs="?", help="Target directory")
    export_parser.add_argument("--format", choices=("json", "yaml"), default="json")
    export_parser.set_defaults(func=cmd_export)

    import_parser = subparsers.add_parser("import", help="Import rules from a file")
    import_parser.add_argument("file", help="JSON or YAML rules file")
    import_parser.add_argument("-y", "--yes", action="store_true", help="Do not ask")
    import_parser.set_defaults(func=cmd_import)

    # validate subcommand
    validate_parser = subparsers.add_parser("validate", help="Validate settings file")
    validate_parser.set_defaults(func=cmd_validate)

    return parser


def main() -> int | NoReturn:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()

    config_file = Path(args.config) if args.config else None
    args.settings = load_settings(config_file=config_file)
    configure_logging("DEBUG" if args.verbose else args.settings.log_level)

    try:
        return int(args.func(args))
    except InvalidFormatError as e:
        print(f"Error: Failed to load rules file: {e}", file=sys.stderr)
        return 1
    except ObfuscatorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
