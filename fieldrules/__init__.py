"""
fieldrules - Rule-based field validation
========================================

Validates submitted field values against per-field rules declared as
pipe-delimited strings or structured mappings, and reports ordered
`{code, message, field}` errors.

Features:
---------
- String grammar: "if_exist|length:min:3;max:5|in:domain:m,f"
- Mapping form: {"required": True, "length": {"min": 3, "max": 5}}
- Explicit, first-wins rule registry with custom predicates
- Gate rules that skip a field when it is absent
- 422 JSON error bodies and a command-line validator

Quick Start:
    >>> from fieldrules import Validation
    >>> result = Validation().run({"name": "required|length:max:5"}, {"name": "Bob"})
    >>> result.passes()
    True
"""

from __future__ import annotations

__version__ = "1.0.0"
__license__ = "MIT"

from typing import TYPE_CHECKING

# Core imports (always available)
from fieldrules.validation import (
    RuleRegistry,
    Validation,
    ValidationResult,
    validate,
)

if TYPE_CHECKING:
    from fieldrules.core.config import Config
    from fieldrules.utils.logger import Logger


def __getattr__(name: str):
    """Lazy loading of the ambient helpers."""
    _imports = {
        "Config": "fieldrules.core.config",
        "Logger": "fieldrules.utils.logger",
        "get_logger": "fieldrules.utils.logger",
        "configure_logging": "fieldrules.utils.logger",
    }

    if name in _imports:
        import importlib
        module = importlib.import_module(_imports[name])
        return getattr(module, name)

    raise AttributeError(f"module 'fieldrules' has no attribute '{name}'")


__all__ = [
    "__version__",
    "__license__",
    "Validation",
    "ValidationResult",
    "RuleRegistry",
    "validate",
    "Config",
    "Logger",
    "get_logger",
    "configure_logging",
]
