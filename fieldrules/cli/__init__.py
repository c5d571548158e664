"""
fieldrules CLI
==============

Command-line interface.

Commands:
- validate: Validate a JSON document against JSON rules
- rules: List registered rules
"""

from fieldrules.cli.main import cli, main

__all__ = ["main", "cli"]
