"""
Local safety data maintenance.

Works on the configured store only; no API calls are made.

Usage:
    python -m fanswipe export-safety
    python -m fanswipe show-settings
    python -m fanswipe set-setting verifiedOnly true
    python -m fanswipe reset-settings
    python -m fanswipe unhide <content_id>
    python -m fanswipe clear-hidden
"""
import argparse
import json
import logging
import sys

from pydantic import ValidationError

from fanswipe.core.config import Settings, get_settings
from fanswipe.schemas.safety import SafetySettings
from fanswipe.services.safety_manager import SafetyManager
from fanswipe.services.storage import create_store

logger = logging.getLogger(__name__)

SETTING_NAMES: frozenset[str] = frozenset(
    {name for name in SafetySettings.model_fields}
    | {field.alias for field in SafetySettings.model_fields.values() if field.alias},
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fanswipe", description=__doc__.splitlines()[1])
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("export-safety", help="Print all local safety data as JSON")
    commands.add_parser("show-settings", help="Print the current safety settings")
    commands.add_parser("reset-settings", help="Restore default safety settings")

    set_setting = commands.add_parser("set-setting", help="Update one safety setting")
    set_setting.add_argument("name", help="Setting name, camelCase or snake_case")
    set_setting.add_argument("value", help="New value (true/false or a number)")

    unhide = commands.add_parser("unhide", help="Show a hidden content item again")
    unhide.add_argument("content_id")

    commands.add_parser("clear-hidden", help="Show all hidden content again")
    return parser


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))  # noqa: T201


def run(args: argparse.Namespace, settings: Settings) -> int:
    """Execute a parsed command. Returns the process exit code."""
    manager = SafetyManager(
        store=create_store(settings),
        storage_prefix=settings.storage_prefix,
    )

    if args.command == "export-safety":
        _print_json(manager.export_safety_data().model_dump(mode="json", by_alias=True))
    elif args.command == "show-settings":
        _print_json(manager.get_safety_settings().model_dump(by_alias=True))
    elif args.command == "reset-settings":
        _print_json(manager.reset_safety_settings().model_dump(by_alias=True))
    elif args.command == "set-setting":
        if args.name not in SETTING_NAMES:
            logger.error("Unknown safety setting: %s", args.name)
            return 2
        try:
            updated = manager.update_safety_settings({args.name: args.value})
        except ValidationError as e:
            logger.error("Invalid value for %s: %s", args.name, e)
            return 2
        _print_json(updated.model_dump(by_alias=True))
    elif args.command == "unhide":
        manager.unhide_content(args.content_id)
    elif args.command == "clear-hidden":
        manager.clear_hidden_content()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the maintenance CLI."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return run(args, get_settings())


if __name__ == "__main__":
    sys.exit(main())
