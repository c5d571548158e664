"""
fieldrules Validation Rules
===========================

Collection of built-in validation rules.

Each rule implements the Rule interface: a single `validate` method over
the current value, the rule's options and the evaluation context. Custom
rules implement the same interface, or are plain callables wrapped in
CallableRule by the registry.
"""

from __future__ import annotations

import inspect
import json
import re
import uuid as uuid_module
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Pattern, Union

from fieldrules.validation.exceptions import InvalidRuleOption

if TYPE_CHECKING:
    from fieldrules.validation.parser import RuleOptions
    from fieldrules.validation.validator import EvaluationContext


MessageTemplate = Union[str, Mapping[str, str]]


def is_empty(value: Any) -> bool:
    """Check if a submitted value counts as absent."""
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, (list, tuple, dict, set)) and len(value) == 0:
        return True
    return False


def to_number(value: Any) -> Optional[float]:
    """Coerce ints, floats and numeric strings. Booleans are not numbers."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


class Rule(ABC):
    """
    Abstract validation rule.

    Implement `validate` to create custom rules. A rule may set
    `context.violation` to pick one variant of a mapping message, and
    `context.params` to add placeholders to the rendered message.

    Example:
        class IsPositive(Rule):
            message = "Field :field must be positive"

            def validate(self, value, options, context) -> bool:
                return isinstance(value, (int, float)) and value > 0
    """

    message: Optional[MessageTemplate] = "Field :field is invalid"
    gate: bool = False

    @abstractmethod
    def validate(
        self,
        value: Any,
        options: "RuleOptions",
        context: "EvaluationContext",
    ) -> bool:
        """
        Validate the value.

        Args:
            value: Current field value
            options: Options given to this rule
            context: Evaluation context of the field

        Returns:
            True if valid, False otherwise
        """
        ...

    def check_options(self, name: str, options: "RuleOptions") -> None:
        """
        Reject unusable options before any value is evaluated.

        Args:
            name: Name the rule was referenced by
            options: Options given to this rule

        Raises:
            InvalidRuleOption: If the options cannot drive this rule
        """

    def __call__(
        self,
        value: Any,
        options: "RuleOptions",
        context: "EvaluationContext",
    ) -> bool:
        """Allow rule to be called directly."""
        return self.validate(value, options, context)


def _positional_arity(func: Callable[..., Any]) -> int:
    """Number of leading (value, options, context) arguments func accepts."""
    try:
        params = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        return 3

    if any(p.kind is p.VAR_POSITIONAL for p in params):
        return 3
    positional = [p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
    return min(3, len(positional))


class CallableRule(Rule):
    """
    Rule wrapper for callable predicates.

    The callable receives as many of `(value, options, context)` as its
    signature takes, so `lambda value: value > 0` works too.
    """

    message = None

    def __init__(self, func: Callable[..., Any]) -> None:
        self.func = func
        self._arity = _positional_arity(func)

    def validate(self, value: Any, options: "RuleOptions", context: "EvaluationContext") -> bool:
        args = (value, options, context)[:self._arity]
        try:
            return bool(self.func(*args))
        except (TypeError, ValueError, ArithmeticError):
            return False

    def __repr__(self) -> str:
        return f"CallableRule({getattr(self.func, '__name__', self.func)!r})"


class Required(Rule):
    """Require field to be present and not empty."""

    message = "Field :field is required"

    def validate(self, value, options, context) -> bool:
        return not is_empty(value)


class IfExist(Rule):
    """Gate: remaining rules run only when the field has a value."""

    message = None
    gate = True

    def validate(self, value, options, context) -> bool:
        return True


class Length(Rule):
    """String (or collection) length within inclusive bounds."""

    message = {
        "min": "Field :field must be at least :min characters long",
        "max": "Field :field must not exceed :max characters long",
    }

    def validate(self, value, options, context) -> bool:
        if value is None:
            length = 0
        elif isinstance(value, (str, list, tuple, dict)):
            length = len(value)
        else:
            length = len(str(value))

        min_length = options.get_int("min")
        max_length = options.get_int("max")

        if min_length is not None and length < min_length:
            context.violation = "min"
            return False
        if max_length is not None and length > max_length:
            context.violation = "max"
            return False
        return True


def _require_number(name: str, options: "RuleOptions", key: str) -> None:
    if options.get_float(key) is None:
        raise InvalidRuleOption(name, f"option `{key}` must be a number (got {options.get(key)!r})")


class Between(Rule):
    """Numeric value within inclusive range."""

    message = "Field :field must be within the range of :min to :max"

    def check_options(self, name, options) -> None:
        bounds = [key for key in ("min", "max") if key in options]
        if not bounds:
            raise InvalidRuleOption(name, "option `min` or `max` is required")
        for key in bounds:
            _require_number(name, options, key)

    def validate(self, value, options, context) -> bool:
        number = to_number(value)
        if number is None:
            return False

        minimum = options.get_float("min")
        maximum = options.get_float("max")

        if minimum is not None and number < minimum:
            return False
        if maximum is not None and number > maximum:
            return False
        return True


class Min(Rule):
    """Minimum numeric value (option `value`)."""

    message = "Field :field must be at least :value"

    def check_options(self, name, options) -> None:
        _require_number(name, options, "value")

    def validate(self, value, options, context) -> bool:
        number = to_number(value)
        minimum = options.get_float("value")
        if number is None or minimum is None:
            return False
        return number >= minimum


class Max(Rule):
    """Maximum numeric value (option `value`)."""

    message = "Field :field must not exceed :value"

    def check_options(self, name, options) -> None:
        _require_number(name, options, "value")

    def validate(self, value, options, context) -> bool:
        number = to_number(value)
        maximum = options.get_float("value")
        if number is None or maximum is None:
            return False
        return number <= maximum


class Numeric(Rule):
    """Value must be numeric."""

    message = "Field :field does not have a valid numeric format"

    def validate(self, value, options, context) -> bool:
        return to_number(value) is not None


class Integer(Rule):
    """Value must be an integer or a string of digits."""

    message = "Field :field must be numeric"

    def validate(self, value, options, context) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, int):
            return True
        if isinstance(value, str):
            return value.isascii() and value.isdigit()
        return False


class Alpha(Rule):
    """Value must contain only letters."""

    message = "Field :field must contain only letters"

    def validate(self, value, options, context) -> bool:
        return isinstance(value, str) and value.isalpha()


class AlphaNumeric(Rule):
    """Value must contain only letters and numbers."""

    message = "Field :field must contain only letters and numbers"

    def validate(self, value, options, context) -> bool:
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        return isinstance(value, str) and value.isalnum()


class Email(Rule):
    """Validate email format."""

    message = "Field :field must be an email address"

    _pattern: Pattern = re.compile(
        r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    )

    def validate(self, value, options, context) -> bool:
        if not isinstance(value, str):
            return False
        return bool(self._pattern.match(value))


class Url(Rule):
    """Validate URL format."""

    message = "Field :field must be a url"

    _pattern: Pattern = re.compile(
        r"^https?://"
        r"(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,6}\.?|"
        r"localhost|"
        r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})"
        r"(?::\d+)?"
        r"(?:/?|[/?]\S+)$",
        re.IGNORECASE,
    )

    def validate(self, value, options, context) -> bool:
        if not isinstance(value, str):
            return False
        return bool(self._pattern.match(value))


class Regex(Rule):
    """Match regular expression (option `pattern`, or `value`)."""

    message = "Field :field does not match the required format"

    def _compile(self, name: str, options: "RuleOptions") -> Pattern:
        pattern = options.get("pattern", options.get("value"))
        # the string grammar splits on commas, e.g. `^\d{1,3}$`
        if isinstance(pattern, (list, tuple)):
            pattern = ",".join(str(part) for part in pattern)
        if not isinstance(pattern, str) or not pattern:
            raise InvalidRuleOption(name, "option `pattern` is required")
        try:
            return re.compile(pattern)
        except re.error as e:
            raise InvalidRuleOption(name, f"bad pattern {pattern!r} ({e})") from e

    def check_options(self, name, options) -> None:
        self._compile(name, options)

    def validate(self, value, options, context) -> bool:
        if not isinstance(value, str):
            return False
        return self._compile(getattr(context, "rule", None) or "regex", options).search(value) is not None


class In(Rule):
    """
    Value must be in the `domain` list.

    Comparison is done on string forms unless the `strict` flag is set,
    since values from the string grammar are always strings.
    """

    message = "Field :field must be a part of list: :domain"

    def _contains(self, value: Any, options: "RuleOptions") -> bool:
        domain = options.get_list("domain", options.get_list("value"))
        if options.get_bool("strict"):
            return value in domain
        return str(value) in [str(item) for item in domain]

    def validate(self, value, options, context) -> bool:
        return self._contains(value, options)


class NotIn(In):
    """Value must not be in the `domain` list."""

    message = "Field :field must not be a part of list: :domain"

    def validate(self, value, options, context) -> bool:
        return not self._contains(value, options)


class Confirmed(Rule):
    """Value must match the `with` field (default `<field>_confirmation`)."""

    message = "Field :field must be the same as :with"

    def validate(self, value, options, context) -> bool:
        other = options.get("with") or f"{context.field}_confirmation"
        context.params["with"] = other
        return value == context.lookup(other)


class Same(Rule):
    """Value must match the `other` field."""

    message = "Field :field must match :other"

    def check_options(self, name, options) -> None:
        other = options.get("other", options.get("value"))
        if not isinstance(other, str) or not other:
            raise InvalidRuleOption(name, "option `other` must name a field")

    def validate(self, value, options, context) -> bool:
        other = options.get("other", options.get("value"))
        context.params["other"] = other
        return value == context.lookup(other)


class Different(Same):
    """Value must be different from the `other` field."""

    message = "Field :field must be different from :other"

    def validate(self, value, options, context) -> bool:
        other = options.get("other", options.get("value"))
        context.params["other"] = other
        return value != context.lookup(other)


class Date(Rule):
    """Value must be a valid date (option `format`, default %Y-%m-%d)."""

    message = "Field :field is not a valid date"

    def validate(self, value, options, context) -> bool:
        if isinstance(value, (date, datetime)):
            return True
        if isinstance(value, str):
            try:
                datetime.strptime(value, options.get("format", "%Y-%m-%d"))
                return True
            except ValueError:
                return False
        return False


class UUID(Rule):
    """Value must be a valid UUID (optional `version`)."""

    message = "Field :field must be a valid UUID"

    def validate(self, value, options, context) -> bool:
        try:
            parsed = uuid_module.UUID(str(value))
        except (ValueError, AttributeError):
            return False
        version = options.get_int("version")
        if version:
            return parsed.version == version
        return True


class JSON(Rule):
    """Value must be valid JSON."""

    message = "Field :field must be valid JSON"

    def validate(self, value, options, context) -> bool:
        if isinstance(value, (dict, list)):
            return True
        if isinstance(value, str):
            try:
                json.loads(value)
                return True
            except json.JSONDecodeError:
                return False
        return False


class Boolean(Rule):
    """Value must be a boolean."""

    message = "Field :field must be true or false"

    _accepted = (True, False, 1, 0, "1", "0", "true", "false", "yes", "no", "on", "off")

    def validate(self, value, options, context) -> bool:
        if isinstance(value, str):
            value = value.lower()
        return value in self._accepted


class Array(Rule):
    """Value must be an array/list."""

    message = "Field :field must be an array"

    def validate(self, value, options, context) -> bool:
        return isinstance(value, (list, tuple))


BUILTIN_RULES: Dict[str, type] = {
    "required": Required,
    "if_exist": IfExist,
    "length": Length,
    "between": Between,
    "min": Min,
    "max": Max,
    "numeric": Numeric,
    "integer": Integer,
    "digit": Integer,
    "alpha": Alpha,
    "alnum": AlphaNumeric,
    "email": Email,
    "url": Url,
    "regex": Regex,
    "in": In,
    "not_in": NotIn,
    "confirmed": Confirmed,
    "same": Same,
    "different": Different,
    "date": Date,
    "uuid": UUID,
    "json": JSON,
    "boolean": Boolean,
    "array": Array,
}
