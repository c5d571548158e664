"""
fieldrules Validation Engine
============================

Core validation engine.

Evaluates parsed field rules against submitted data and collects
failures as ErrorEntry records. Field failures never raise; only
configuration mistakes (unknown rule, malformed rules) do.

Example:
    validation = Validation()

    result = validation.run(
        {"apple": "if_exist|length:min:3;max:5"},
        {"apple": "A"},
    )

    if result.fail():
        print(result.get_error_messages())
        # [{"code": 0, "message": "Field apple must be at least 3 characters long",
        #   "field": "apple"}]
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from fieldrules.utils.logger import Logger, get_logger
from fieldrules.validation.exceptions import InvalidRuleShape, ValidationConfigError
from fieldrules.validation.parser import FieldSpec, RuleOptions, RuleParser, RuleSpec
from fieldrules.validation.registry import RuleDefinition, RuleRegistry
from fieldrules.validation.rules import MessageTemplate, is_empty


DEFAULT_MESSAGE = "Field :field is invalid"

_PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")

_MISSING = object()


def get_value(data: Any, field_name: str) -> Any:
    """Get value from data, supporting dot notation."""
    if not isinstance(data, Mapping):
        return None

    value = data.get(field_name, _MISSING)
    if value is not _MISSING:
        return value
    if "." not in field_name:
        return None

    current: Any = data
    for part in field_name.split("."):
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, (list, tuple)) and part.isdigit():
            idx = int(part)
            current = current[idx] if idx < len(current) else None
        else:
            return None

    return current


class EvaluationContext:
    """
    State of one field's evaluation pass.

    Rules read the current value and options from here, may look up other
    fields of the submitted data, and may set `violation` / `params` to
    shape the rendered message.
    """

    def __init__(
        self,
        field: str,
        value: Any,
        data: Mapping,
        label: Optional[str] = None,
    ) -> None:
        self.field = field
        self.value = value
        self.data = data
        self.label = label or field
        self.rule: Optional[str] = None
        self.options: RuleOptions = RuleOptions()
        self.violation: Optional[str] = None
        self.params: Dict[str, Any] = {}

    def enter(self, spec: RuleSpec) -> None:
        """Reset per-rule state before running `spec`."""
        self.rule = spec.name
        self.options = spec.options
        self.violation = None
        self.params = {}

    def get_current_value(self) -> Any:
        return self.value

    def get_option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)

    def lookup(self, field_name: Optional[str]) -> Any:
        """Value of another field in the submitted data."""
        if not field_name:
            return None
        return get_value(self.data, field_name)


@dataclass(frozen=True)
class ErrorEntry:
    """One rule violation for one field."""

    code: int
    message: str
    field: str

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "field": self.field}


class ValidationError(Exception):
    """
    Validation failed exception.

    Raised only by `validate_or_fail` and `ValidationResult.raise_if_invalid`.
    """

    def __init__(
        self,
        result: "ValidationResult",
        message: str = "Validation failed",
    ) -> None:
        super().__init__(message)
        self.result = result

    @property
    def errors(self) -> Dict[str, List[str]]:
        return self.result.to_dict()

    def __str__(self) -> str:
        if not self.result.errors:
            return "Validation failed"
        lines = [f"  - {entry.field}: {entry.message}" for entry in self.result.errors]
        return "Validation failed:\n" + "\n".join(lines)


@dataclass
class ValidationResult:
    """
    Result of a validation run.

    Owns the ordered error entries and the values of the fields that
    passed all their rules.
    """

    errors: List[ErrorEntry] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)

    def passes(self) -> bool:
        """True if no rule failed."""
        return not self.errors

    pass_ = passes

    def fail(self) -> bool:
        """True if any rule failed."""
        return not self.passes()

    def __bool__(self) -> bool:
        return self.passes()

    def __len__(self) -> int:
        return len(self.errors)

    def add(self, entry: ErrorEntry) -> None:
        self.errors.append(entry)

    def get_error_messages(self) -> List[Dict[str, Any]]:
        """Error entries as plain dicts, in evaluation order."""
        return [entry.to_dict() for entry in self.errors]

    def errors_for(self, field_name: str) -> List[ErrorEntry]:
        return [entry for entry in self.errors if entry.field == field_name]

    def has_error(self, field_name: str) -> bool:
        return any(entry.field == field_name for entry in self.errors)

    def first_error(self, field_name: Optional[str] = None) -> Optional[str]:
        """Get first error message, optionally for one field."""
        for entry in self.errors:
            if field_name is None or entry.field == field_name:
                return entry.message
        return None

    def to_dict(self) -> Dict[str, List[str]]:
        """Messages grouped by field."""
        grouped: Dict[str, List[str]] = {}
        for entry in self.errors:
            grouped.setdefault(entry.field, []).append(entry.message)
        return grouped

    def raise_if_invalid(self) -> None:
        """Raise ValidationError if invalid."""
        if self.fail():
            raise ValidationError(self)


RulesInput = Union[Mapping, Sequence[FieldSpec]]


class Validation:
    """
    Rule-based validation engine.

    Example:
        validation = Validation()
        validation.register_rules(
            {"step": lambda value, options, context: value % options.get_int("of", 5) == 0},
            {"step": "Field :field must be in step of 5"},
        )

        result = validation.run({"batch": "required|step"}, {"batch": 11})
        result.fail()  # True
    """

    def __init__(
        self,
        registry: Optional[RuleRegistry] = None,
        parser: Optional[RuleParser] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        """
        Initialize engine.

        Args:
            registry: Rule registry (a fresh default registry if omitted)
            parser: Rule parser
            logger: Logger (defaults to `fieldrules.validation`)
        """
        self.registry = registry if registry is not None else RuleRegistry.with_defaults()
        self.parser = parser or RuleParser()
        self.logger = logger or get_logger("fieldrules.validation")

    def register_rules(
        self,
        rules: Mapping[str, Any],
        messages: Optional[Mapping[str, MessageTemplate]] = None,
    ) -> "Validation":
        """Register many custom rules (first registration wins)."""
        self.registry.register_rules(rules, messages)
        return self

    def register(
        self,
        name: str,
        predicate: Any,
        message: Optional[MessageTemplate] = None,
    ) -> "Validation":
        """Register a custom rule (first registration wins)."""
        self.registry.register(name, predicate, message)
        return self

    def run(
        self,
        rules: RulesInput,
        data: Optional[Mapping] = None,
        labels: Optional[Mapping[str, str]] = None,
    ) -> ValidationResult:
        """
        Validate data against rules.

        Args:
            rules: Field name to rule declaration, or parsed FieldSpecs
            data: Submitted values; missing fields count as empty
            labels: Display names used for `:field` in messages

        Returns:
            ValidationResult with error entries

        Raises:
            ValidationConfigError: On unknown rules or malformed declarations
        """
        data = data if data is not None else {}
        labels = labels or {}

        try:
            plan = self._plan(rules)
        except ValidationConfigError as e:
            self.logger.error("Invalid validation rules", exception=e, identifier=e.identifier)
            raise

        result = ValidationResult()

        for field_spec, definitions in plan:
            value = get_value(data, field_spec.field)
            context = EvaluationContext(
                field=field_spec.field,
                value=value,
                data=data,
                label=labels.get(field_spec.field),
            )

            failed = self._validate_field(field_spec, definitions, context, result)
            if not failed and value is not None:
                result.data[field_spec.field] = value

        self.logger.debug(
            "Validation finished",
            fields=len(plan),
            errors=len(result.errors),
        )
        return result

    def _plan(
        self,
        rules: RulesInput,
    ) -> List[Tuple[FieldSpec, List[RuleDefinition]]]:
        """Parse and resolve every rule before anything is evaluated."""
        if isinstance(rules, Mapping):
            field_specs = self.parser.parse(rules)
        elif isinstance(rules, (list, tuple)) and all(isinstance(s, FieldSpec) for s in rules):
            field_specs = list(rules)
        else:
            raise InvalidRuleShape("*", rules)

        plan = []
        for spec in field_specs:
            definitions = [self.registry.get(rule.name) for rule in spec.rules]
            for rule_spec, definition in zip(spec.rules, definitions):
                definition.rule.check_options(rule_spec.name, rule_spec.options)
            plan.append((spec, definitions))
        return plan

    def _validate_field(
        self,
        field_spec: FieldSpec,
        definitions: List[RuleDefinition],
        context: EvaluationContext,
        result: ValidationResult,
    ) -> bool:
        """Run one field's rules in order. Returns True if any failed."""
        failed = False

        for spec, definition in zip(field_spec.rules, definitions):
            if definition.gate and is_empty(context.value):
                break

            context.enter(spec)
            if definition.rule.validate(context.value, spec.options, context):
                continue

            failed = True
            result.add(ErrorEntry(
                code=spec.options.get_int("code", 0),
                message=self._render_message(definition, context),
                field=field_spec.field,
            ))

            if spec.options.get_bool("cancel_on_fail"):
                break

        return failed

    def _render_message(
        self,
        definition: RuleDefinition,
        context: EvaluationContext,
    ) -> str:
        """Render message template with `:field` and option placeholders."""
        template = context.options.get("message")
        if not isinstance(template, str):
            template = definition.template_for(context.violation) or DEFAULT_MESSAGE

        values: Dict[str, Any] = {**context.options.to_dict(), **context.params}
        values["field"] = context.label

        def replace(match: "re.Match[str]") -> str:
            key = match.group(1)
            if key not in values:
                return match.group(0)
            value = values[key]
            if isinstance(value, (list, tuple)):
                return ", ".join(str(item) for item in value)
            return str(value)

        return _PLACEHOLDER.sub(replace, template)


# Convenience functions

def validate(
    data: Mapping,
    rules: RulesInput,
    registry: Optional[RuleRegistry] = None,
) -> ValidationResult:
    """
    Validate data with rules.

    Example:
        result = validate({"email": "a@b.co"}, {"email": "required|email"})
    """
    return Validation(registry=registry).run(rules, data)


def validate_or_fail(
    data: Mapping,
    rules: RulesInput,
    registry: Optional[RuleRegistry] = None,
) -> Dict[str, Any]:
    """
    Validate data and raise on failure.

    Returns the values of the validated fields.

    Raises:
        ValidationError: If any rule failed
    """
    result = validate(data, rules, registry)
    result.raise_if_invalid()
    return result.data
