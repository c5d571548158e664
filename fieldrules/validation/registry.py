"""
fieldrules Rule Registry
========================

Maps rule names to rule definitions (predicate + default message).

A registry is an explicit value: build one, register rules on it at
start-up, and hand it to the Validation engine. Registration is
first-wins so built-in rules can never be shadowed by accident.

Example:
    registry = RuleRegistry.with_defaults()

    registry.register(
        "step",
        lambda value, options, context: value % options.get_int("of", 5) == 0,
        "Field :field must be in step of 5",
    )

    @registry.rule("even", "Field :field must be even")
    def even(value, options, context):
        return value % 2 == 0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from fieldrules.utils.logger import Logger, get_logger
from fieldrules.validation.exceptions import UnknownRule, UnsupportedRuleValue
from fieldrules.validation.rules import BUILTIN_RULES, CallableRule, MessageTemplate, Rule


@dataclass
class RuleDefinition:
    """
    Registered rule.

    Attributes:
        name: Rule name
        rule: Predicate capability
        message: Default message template (or one template per violation)
        gate: Skip remaining field rules when the value is empty
    """

    name: str
    rule: Rule
    message: Optional[MessageTemplate] = None
    gate: bool = False

    def template_for(self, violation: Optional[str] = None) -> Optional[str]:
        """Pick the message template for a violation kind."""
        if self.message is None or isinstance(self.message, str):
            return self.message
        if violation and violation in self.message:
            return self.message[violation]
        return self.message.get("default")


class RuleRegistry:
    """
    Registry of validation rules.

    Lookups are read-only; registration is expected to happen during
    start-up before validations run concurrently.
    """

    def __init__(
        self,
        rules: Optional[Mapping[str, Any]] = None,
        messages: Optional[Mapping[str, MessageTemplate]] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        """
        Initialize registry.

        Args:
            rules: Initial rule name to predicate mapping
            messages: Initial rule name to message template mapping
            logger: Logger (defaults to `fieldrules.registry`)
        """
        self._definitions: Dict[str, RuleDefinition] = {}
        self.logger = logger or get_logger("fieldrules.registry")

        if rules:
            self.register_rules(rules, messages)

    @classmethod
    def with_defaults(
        cls,
        messages: Optional[Mapping[str, MessageTemplate]] = None,
        logger: Optional[Logger] = None,
    ) -> "RuleRegistry":
        """
        Create registry seeded with the built-in rules.

        Args:
            messages: Template overrides applied over the built-in messages
            logger: Registry logger
        """
        registry = cls(logger=logger)
        registry.register_rules(BUILTIN_RULES)

        for name, template in (messages or {}).items():
            registry.set_message(name, template)

        return registry

    def register_rules(
        self,
        rules: Mapping[str, Any],
        messages: Optional[Mapping[str, MessageTemplate]] = None,
    ) -> "RuleRegistry":
        """
        Register many rules at once.

        Args:
            rules: Rule name to predicate
            messages: Rule name to message template

        Returns:
            Self for chaining
        """
        messages = messages or {}

        for name, predicate in rules.items():
            self.register(name, predicate, messages.get(name))

        return self

    def register(
        self,
        name: str,
        predicate: Any,
        message: Optional[MessageTemplate] = None,
        gate: Optional[bool] = None,
    ) -> "RuleRegistry":
        """
        Register a single rule.

        An existing rule keeps its predicate; the message is only attached
        when the existing rule has none.

        Args:
            name: Rule name
            predicate: Rule instance, Rule subclass or callable
                `(value, options, context) -> bool`
            message: Default message template
            gate: Mark as gate rule (defaults to the rule's own flag)

        Raises:
            UnsupportedRuleValue: If predicate is not a rule or callable
        """
        rule = self._make_rule(name, predicate)

        existing = self._definitions.get(name)
        if existing is not None:
            if existing.message is None and message is not None:
                existing.message = message
                self.logger.debug("Message attached to existing rule", rule=name)
            else:
                self.logger.warning("Rule already registered, keeping original", rule=name)
            return self

        self._definitions[name] = RuleDefinition(
            name=name,
            rule=rule,
            message=message if message is not None else rule.message,
            gate=rule.gate if gate is None else gate,
        )
        self.logger.debug("Rule registered", rule=name)
        return self

    def rule(
        self,
        name: str,
        message: Optional[MessageTemplate] = None,
        gate: Optional[bool] = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of `register`."""
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(name, func, message, gate)
            return func
        return decorator

    def _make_rule(self, name: str, predicate: Any) -> Rule:
        if isinstance(predicate, Rule):
            return predicate
        if isinstance(predicate, type):
            if issubclass(predicate, Rule):
                return predicate()
            raise UnsupportedRuleValue(name)
        if callable(predicate):
            return CallableRule(predicate)
        raise UnsupportedRuleValue(name)

    def set_message(self, name: str, template: MessageTemplate) -> None:
        """
        Replace the message template of a registered rule.

        Raises:
            UnknownRule: If the rule is not registered
        """
        self.get(name).message = template

    def get(self, name: str) -> RuleDefinition:
        """
        Look up a rule definition.

        Raises:
            UnknownRule: If the rule is not registered
        """
        try:
            return self._definitions[name]
        except KeyError:
            raise UnknownRule(name) from None

    def has(self, name: str) -> bool:
        return name in self._definitions

    def names(self) -> List[str]:
        """Registered rule names in registration order."""
        return list(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[RuleDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"RuleRegistry({len(self)} rules)"
