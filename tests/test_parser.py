"""
Tests for the rule parser.
"""

import pytest

from fieldrules.validation import InvalidRuleShape, RuleOptions, RuleParser, RuleSpec


@pytest.fixture
def parser() -> RuleParser:
    return RuleParser()


def test_parse_plain_names(parser):
    """Names without options parse to empty options."""
    rules = parser.parse_string("required|email")

    assert [r.name for r in rules] == ["required", "email"]
    assert all(len(r.options) == 0 for r in rules)


def test_parse_option_groups(parser):
    """Semicolons separate option groups."""
    (rule,) = parser.parse_string("length:min:3;max:5")

    assert rule.name == "length"
    assert rule.options.to_dict() == {"min": "3", "max": "5"}
    assert rule.options.get_int("min") == 3


def test_parse_list_values(parser):
    """Commas split a value into a list."""
    (rule,) = parser.parse_string("in:domain:m,f")

    assert rule.options["domain"] == ["m", "f"]


def test_parse_flag_group(parser):
    """Groups without a value are flags."""
    (rule,) = parser.parse_string("in:domain:a,b;strict")

    assert rule.options["strict"] is True


def test_value_keeps_extra_colons(parser):
    """Only the first colon of a group splits name and value."""
    (rule,) = parser.parse_string("date:format:%H:%M")

    assert rule.options["format"] == "%H:%M"


def test_blank_segments_are_ignored(parser):
    rules = parser.parse_string(" required || email ")

    assert [r.name for r in rules] == ["required", "email"]


def test_parse_mapping(parser):
    """Mappings accept flags, option mappings and scalars."""
    rules = parser.parse_mapping({
        "required": True,
        "length": {"min": 3, "max": 5},
        "regex": "^a",
        "email": False,
    })

    assert rules == [
        RuleSpec("required", RuleOptions()),
        RuleSpec("length", RuleOptions({"min": 3, "max": 5})),
        RuleSpec("regex", RuleOptions({"value": "^a"})),
    ]


def test_string_and_mapping_forms_agree(parser):
    """Both surface syntaxes produce the same rule names in order."""
    from_string = parser.parse_field("apple", "required|length:min:3;max:5")
    from_mapping = parser.parse_field("apple", {"required": True, "length": {"min": "3", "max": "5"}})

    assert from_string == from_mapping


def test_declaration_order_is_kept(parser):
    """Rules are never reordered."""
    spec = parser.parse_field("x", "length:max:5|if_exist|required")

    assert spec.rule_names == ["length", "if_exist", "required"]


def test_parse_list_declaration(parser):
    """Lists of strings and mappings are flattened in order."""
    spec = parser.parse_field("x", ["required", {"length": {"max": 2}}, "email|url"])

    assert spec.rule_names == ["required", "length", "email", "url"]


def test_parse_keeps_field_order(parser):
    specs = parser.parse({"b": "required", "a": "email"})

    assert [s.field for s in specs] == ["b", "a"]


@pytest.mark.parametrize("bad", [1, 1.5, None, object(), ["required", 3]])
def test_invalid_shapes(parser, bad):
    with pytest.raises(InvalidRuleShape, match="The rules should be a mapping or string"):
        parser.parse({"field": bad})


def test_rules_must_be_mapping(parser):
    with pytest.raises(InvalidRuleShape):
        parser.parse("required")


def test_rule_spec_str(parser):
    """RuleSpec renders back to the string grammar."""
    (rule,) = parser.parse_string("in:domain:m,f;strict")

    assert str(rule) == "in:domain:m,f;strict"
    assert str(RuleSpec("required")) == "required"


def test_rule_options_accessors():
    options = RuleOptions({"min": "3", "ratio": "0.5", "flag": "yes", "one": "x", "bad": "abc"})

    assert options.get_int("min") == 3
    assert options.get_float("ratio") == 0.5
    assert options.get_bool("flag") is True
    assert options.get_bool("missing") is False
    assert options.get_list("one") == ["x"]
    assert options.get_list("missing") == []
    assert options.get_int("bad", 7) == 7
    assert options == {"min": "3", "ratio": "0.5", "flag": "yes", "one": "x", "bad": "abc"}
