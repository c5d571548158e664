"""
fieldrules Rule Parser
======================

Turns per-field rule declarations into an ordered list of RuleSpec.

Two surface syntaxes normalize to the same representation:

    # Pipe-delimited string
    "if_exist|length:min:3;max:5|in:domain:m,f"

    # Structured mapping
    {"required": True, "length": {"min": 3, "max": 5}}

Grammar of the string form:
    rules   := rule ("|" rule)*
    rule    := name [":" group (";" group)*]
    group   := option [":" value ("," value)*]

A group without a value is a flag set to True. A value containing commas
becomes a list of strings. Declaration order is preserved exactly, since
gate rules such as `if_exist` only affect the rules that follow them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from fieldrules.validation.exceptions import InvalidRuleShape


RULE_SEPARATOR = "|"
OPTION_START = ":"
GROUP_SEPARATOR = ";"
VALUE_SEPARATOR = ","


class RuleOptions(Mapping):
    """
    Read-only, ordered option mapping for one rule.

    Example:
        options = RuleOptions({"min": "3", "max": "5"})
        options.get_int("min")        # 3
        options.get("missing", 10)    # 10
    """

    def __init__(self, values: Optional[Dict[str, Any]] = None) -> None:
        self._values: Dict[str, Any] = dict(values or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RuleOptions):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple((key, repr(value)) for key, value in self._values.items()))

    def __repr__(self) -> str:
        return f"RuleOptions({self._values!r})"

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        """Get option as integer."""
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def get_float(self, key: str, default: Optional[float] = None) -> Optional[float]:
        """Get option as float."""
        value = self.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        """Get option as boolean."""
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "yes", "1", "on")
        return bool(value)

    def get_list(self, key: str, default: Optional[List[Any]] = None) -> List[Any]:
        """Get option as list. Scalars are wrapped."""
        value = self.get(key, default)
        if value is None:
            return list(default or [])
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    def to_dict(self) -> Dict[str, Any]:
        """Plain copy of the options."""
        return dict(self._values)


@dataclass(frozen=True)
class RuleSpec:
    """A rule reference by name with its options."""

    name: str
    options: RuleOptions = field(default_factory=RuleOptions)

    def __str__(self) -> str:
        if not self.options:
            return self.name
        groups = []
        for key, value in self.options.items():
            if value is True:
                groups.append(key)
            elif isinstance(value, (list, tuple)):
                groups.append(f"{key}:{VALUE_SEPARATOR.join(map(str, value))}")
            else:
                groups.append(f"{key}:{value}")
        return f"{self.name}:{GROUP_SEPARATOR.join(groups)}"


@dataclass(frozen=True)
class FieldSpec:
    """A field name with the rules to apply, in declaration order."""

    field: str
    rules: Tuple[RuleSpec, ...] = ()

    @property
    def rule_names(self) -> List[str]:
        return [spec.name for spec in self.rules]


RuleDeclaration = Union[str, Mapping, List[Union[str, Mapping]], Tuple[Union[str, Mapping], ...]]


class RuleParser:
    """
    Parses rule declarations into FieldSpec objects.

    Example:
        parser = RuleParser()
        specs = parser.parse({
            "apple": "if_exist|length:min:3;max:5",
            "ball": {"required": True, "length": {"min": 3, "max": 5}},
        })
    """

    def parse(self, rules: Mapping) -> List[FieldSpec]:
        """
        Parse rules for every field.

        Args:
            rules: Field name to rule declaration

        Returns:
            FieldSpec list in the mapping's order

        Raises:
            InvalidRuleShape: If a declaration is neither string nor mapping
        """
        if not isinstance(rules, Mapping):
            raise InvalidRuleShape("*", rules)

        return [self.parse_field(name, spec) for name, spec in rules.items()]

    def parse_field(self, field_name: str, spec: RuleDeclaration) -> FieldSpec:
        """Parse the rule declaration of a single field."""
        return FieldSpec(field=field_name, rules=tuple(self._parse_declaration(field_name, spec)))

    def _parse_declaration(self, field_name: str, spec: Any) -> List[RuleSpec]:
        if isinstance(spec, str):
            return self.parse_string(spec)

        if isinstance(spec, Mapping):
            return self.parse_mapping(spec)

        if isinstance(spec, (list, tuple)):
            rules: List[RuleSpec] = []
            for item in spec:
                if not isinstance(item, (str, Mapping)):
                    raise InvalidRuleShape(field_name, item)
                rules.extend(self._parse_declaration(field_name, item))
            return rules

        raise InvalidRuleShape(field_name, spec)

    def parse_string(self, rule_string: str) -> List[RuleSpec]:
        """
        Parse pipe-separated rule string.

        Example: "required|length:min:3;max:5"
        """
        rules = []

        for part in rule_string.split(RULE_SEPARATOR):
            part = part.strip()
            if not part:
                continue

            if OPTION_START in part:
                name, option_string = part.split(OPTION_START, 1)
                options = self._parse_option_string(option_string)
            else:
                name, options = part, {}

            rules.append(RuleSpec(name=name.strip(), options=RuleOptions(options)))

        return rules

    def _parse_option_string(self, option_string: str) -> Dict[str, Any]:
        options: Dict[str, Any] = {}

        for group in option_string.split(GROUP_SEPARATOR):
            group = group.strip()
            if not group:
                continue

            if OPTION_START not in group:
                options[group] = True
                continue

            key, raw = group.split(OPTION_START, 1)
            if VALUE_SEPARATOR in raw:
                options[key.strip()] = [item.strip() for item in raw.split(VALUE_SEPARATOR)]
            else:
                options[key.strip()] = raw.strip()

        return options

    def parse_mapping(self, rule_map: Mapping) -> List[RuleSpec]:
        """
        Parse structured rule mapping.

        Example: {"required": True, "length": {"min": 3, "max": 5}}
        """
        rules = []

        for name, value in rule_map.items():
            if value is None or value is False:
                continue

            if value is True:
                options: Dict[str, Any] = {}
            elif isinstance(value, Mapping):
                options = dict(value)
            else:
                options = {"value": value}

            rules.append(RuleSpec(name=str(name).strip(), options=RuleOptions(options)))

        return rules
