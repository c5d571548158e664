"""
fieldrules Validation System
============================

Rule-based validation of submitted field values.

Features:
- Pipe-delimited string and structured mapping rule declarations
- Explicit, first-wins rule registry
- Gate rules (`if_exist`) and `cancel_on_fail`
- Ordered `{code, message, field}` error entries
- 422 JSON error bodies for HTTP layers
"""

from fieldrules.validation.exceptions import (
    InvalidRuleOption,
    InvalidRuleShape,
    UnknownRule,
    UnsupportedRuleValue,
    ValidationConfigError,
)
from fieldrules.validation.parser import (
    FieldSpec,
    RuleOptions,
    RuleParser,
    RuleSpec,
)
from fieldrules.validation.registry import (
    RuleDefinition,
    RuleRegistry,
)
from fieldrules.validation.rules import (
    BUILTIN_RULES,
    CallableRule,
    Rule,
)
from fieldrules.validation.validator import (
    ErrorEntry,
    EvaluationContext,
    Validation,
    ValidationError,
    ValidationResult,
    validate,
    validate_or_fail,
)
from fieldrules.validation.http import (
    ValidationErrorResponse,
    error_body,
    error_response,
)

__all__ = [
    # Engine
    "Validation",
    "ValidationResult",
    "ValidationError",
    "ErrorEntry",
    "EvaluationContext",
    "validate",
    "validate_or_fail",
    # Registry
    "RuleRegistry",
    "RuleDefinition",
    # Rules
    "Rule",
    "CallableRule",
    "BUILTIN_RULES",
    # Parser
    "RuleParser",
    "RuleSpec",
    "FieldSpec",
    "RuleOptions",
    # Errors
    "ValidationConfigError",
    "UnknownRule",
    "InvalidRuleShape",
    "InvalidRuleOption",
    "UnsupportedRuleValue",
    # HTTP
    "ValidationErrorResponse",
    "error_body",
    "error_response",
]
