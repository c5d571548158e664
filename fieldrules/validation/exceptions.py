"""
fieldrules Validation Exceptions
================================

Configuration errors raised while building or running validations.

These signal programmer mistakes (a misspelled rule name, a rule body
that cannot be called, a rule declaration of the wrong shape). Field
failures are never raised here; they are collected in a ValidationResult.
"""

from __future__ import annotations

from typing import Any, Optional


class ValidationConfigError(ValueError):
    """
    Base class for validation configuration errors.

    Attributes:
        identifier: Offending rule or field name
    """

    def __init__(self, message: str, identifier: Optional[str] = None) -> None:
        super().__init__(message)
        self.identifier = identifier


class UnknownRule(ValidationConfigError):
    """Rule name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown validation rule: {name}", identifier=name)


class InvalidRuleShape(ValidationConfigError, TypeError):
    """Field rules are neither a string nor a mapping."""

    def __init__(self, field: str, value: Any = None) -> None:
        super().__init__(
            f"The rules should be a mapping or string (field: {field}, "
            f"got {type(value).__name__})",
            identifier=field,
        )


class UnsupportedRuleValue(ValidationConfigError, TypeError):
    """Rule body registered under a name is not a predicate."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unsupported validation rule: {name}", identifier=name)


class InvalidRuleOption(ValidationConfigError):
    """Rule options are missing or unusable (e.g. `min:3`, a broken regex)."""

    def __init__(self, name: str, detail: str) -> None:
        super().__init__(f"Invalid option for validation rule {name}: {detail}", identifier=name)
