"""
fieldrules CLI Main Module
==========================

Main CLI entry point with all commands.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path
from typing import Any, List, Optional

import orjson

from fieldrules import __version__
from fieldrules.core.config import Config
from fieldrules.utils.logger import configure_logging, get_logger
from fieldrules.validation.exceptions import InvalidRuleShape
from fieldrules.validation.registry import RuleRegistry
from fieldrules.validation.validator import Validation, ValidationResult

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="fieldrules",
        description="Rule-based field validation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fieldrules validate rules.json data.json          Validate data against rules
  cat data.json | fieldrules validate rules.json -  Read data from stdin
  fieldrules rules                                  List registered rules
        """,
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"fieldrules {__version__}",
    )
    parser.add_argument(
        "--config",
        help="JSON configuration file",
    )
    parser.add_argument(
        "--extend",
        action="append",
        default=[],
        metavar="MODULE",
        help="Module whose register_rules(registry) adds custom rules",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a JSON document against JSON rules",
    )
    validate_parser.add_argument(
        "rules",
        help="JSON file mapping field names to rules",
    )
    validate_parser.add_argument(
        "data",
        help="JSON file with submitted values (- for stdin)",
    )
    validate_parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format",
    )

    # Rules command
    subparsers.add_parser(
        "rules",
        help="List registered rules",
    )

    return parser


def cli(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return EXIT_OK

    handlers = {
        "validate": handle_validate,
        "rules": handle_rules,
    }

    handler = handlers[parsed.command]
    try:
        return handler(parsed)
    except KeyboardInterrupt:
        print("\nAborted.")
        return 130
    except (OSError, ValueError, ImportError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


def build_registry(args: argparse.Namespace) -> RuleRegistry:
    """Load configuration, set up logging and build the rule registry."""
    config = Config.load(path=args.config)

    configure_logging(
        level=config.get("log.level"),
        format=config.get("log.format"),
    )

    registry = RuleRegistry.with_defaults(messages=config.get_dict("validation.messages"))

    for module_name in args.extend:
        module = importlib.import_module(module_name)
        register = getattr(module, "register_rules", None)
        if not callable(register):
            raise ValueError(f"Module {module_name} has no register_rules(registry) function")
        register(registry)
        get_logger("fieldrules.cli").debug("Rules extended", module=module_name)

    return registry


def _read_json(source: str) -> Any:
    if source == "-":
        return orjson.loads(sys.stdin.read())
    return orjson.loads(Path(source).read_bytes())


def handle_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    registry = build_registry(args)

    rules = _read_json(args.rules)
    if not isinstance(rules, dict):
        raise InvalidRuleShape("*", rules)

    data = _read_json(args.data)
    if not isinstance(data, dict):
        raise ValueError("Data should be a JSON object")

    result = Validation(registry=registry).run(rules, data)

    if args.format == "json":
        _print_json(result)
    else:
        _print_text(result)

    return EXIT_OK if result.passes() else EXIT_INVALID


def _print_json(result: ValidationResult) -> None:
    document = {"passed": result.passes(), "errors": result.get_error_messages()}
    print(orjson.dumps(document, option=orjson.OPT_INDENT_2).decode("utf-8"))


def _print_text(result: ValidationResult) -> None:
    if result.passes():
        print("Validation passed")
        return

    print("Validation failed:")
    width = max(len(entry.field) for entry in result.errors)
    for entry in result.errors:
        print(f"  {entry.field.ljust(width + 2)}{entry.message}")


def handle_rules(args: argparse.Namespace) -> int:
    """Handle rules command."""
    registry = build_registry(args)

    print("Rules:")
    width = max(len(name) for name in registry.names())

    for definition in registry:
        message = definition.message
        if isinstance(message, dict):
            message = " / ".join(message.values())
        elif message is None:
            message = "(gate)" if definition.gate else ""
        print(f"  {definition.name.ljust(width + 2)}{message}")

    return EXIT_OK


def main() -> None:
    """Main entry point."""
    sys.exit(cli())


if __name__ == "__main__":
    main()
