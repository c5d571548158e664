"""
Tests for the validation engine.
"""

import pytest

from fieldrules.validation import (
    ErrorEntry,
    FieldSpec,
    InvalidRuleShape,
    RuleOptions,
    RuleSpec,
    UnknownRule,
    UnsupportedRuleValue,
    Validation,
    ValidationError,
    validate,
    validate_or_fail,
)


def test_string_rules_with_gate(validation):
    """Absent gated field passes; short value reports the min message."""
    rules = {"apple": "if_exist|length:min:3;max:5"}

    result = validation.run(rules, {})
    assert result.passes()
    assert not result.fail()
    assert result.get_error_messages() == []

    result = validation.run(rules, {"apple": "A"})
    assert not result.passes()
    assert result.fail()
    assert result.get_error_messages()[0] == {
        "code": 0,
        "message": "Field apple must be at least 3 characters long",
        "field": "apple",
    }


def test_mapping_rules(validation):
    """Structured rules report the max length message."""
    rules = {"ball": {"required": True, "length": {"min": 3, "max": 5}}}
    result = validation.run(rules, {"ball": "ABCDEF"})

    assert result.get_error_messages()[0]["message"] == (
        "Field ball must not exceed 5 characters long"
    )
    assert len(result) == 1


def test_unknown_rule_is_configuration_error(validation):
    """Unregistered rule names abort the run."""
    with pytest.raises(UnknownRule, match="Unknown validation rule: asdf"):
        validation.run({"a": "asdf"}, {})


def test_unknown_rule_aborts_before_evaluation(validation):
    """No partial result is produced when a later field is misconfigured."""
    with pytest.raises(UnknownRule) as excinfo:
        validation.run({"name": "required", "other": "required|nope"}, {})

    assert excinfo.value.identifier == "nope"


def test_invalid_rule_shape(validation):
    """Non-string, non-mapping rules are rejected."""
    with pytest.raises(InvalidRuleShape, match="The rules should be a mapping or string"):
        validation.run({"gender": "in:domain:m,f", "cat": 1}, {"cat": None})


def test_invalid_rule_shape_names_field(validation):
    """The offending field is named in the error."""
    with pytest.raises(InvalidRuleShape) as excinfo:
        validation.run({"cat": 1.5}, {})

    assert excinfo.value.identifier == "cat"
    assert "cat" in str(excinfo.value)


def test_custom_rules(validation):
    """Custom rules register once; later registrations do not override."""
    validation.register_rules(
        {"step": lambda value, options, context: value % options.get_int("of", 5) == 0},
        {"step": "Field :field must be in step of 5"},
    )
    validation.register(
        "step",
        lambda value, options, context: True,
        "This is never registered as rule `step` is already there",
    )

    rules = {"batch": "required|step"}

    result = validation.run(rules, {"batch": 11})
    assert not result.passes()
    assert result.get_error_messages()[0]["message"] == "Field batch must be in step of 5"

    result = validation.run(rules, {"batch": 10})
    assert result.passes()

    with pytest.raises(UnsupportedRuleValue, match="Unsupported validation rule: abc"):
        validation.register("abc", "invalid rule")


def test_custom_rule_option_from_string(validation):
    """Custom rules read options from the string grammar."""
    validation.register(
        "step",
        lambda value, options, context: value % options.get_int("of", 5) == 0,
        "Field :field must be in step of :of",
    )

    result = validation.run({"batch": "step:of:3"}, {"batch": 10})

    assert result.first_error("batch") == "Field batch must be in step of 3"
    assert validation.run({"batch": "step:of:3"}, {"batch": 9}).passes()


def test_custom_rule_uses_context(validation):
    """Callables can read the current value and options from the context."""
    validation.register(
        "step",
        lambda value, options, context: context.get_current_value() % context.get_option("of", 5) == 0,
        "Field :field must be in step of 5",
    )

    assert validation.run({"batch": "step"}, {"batch": 15}).passes()
    assert validation.run({"batch": "step"}, {"batch": 16}).fail()


def test_custom_rule_type_error_is_failure(validation):
    """A predicate raising TypeError on odd input counts as failed."""
    validation.register("step", lambda value, options, context: value % 5 == 0)

    result = validation.run({"batch": "step"}, {"batch": "abc"})

    assert result.first_error() == "Field batch is invalid"


def test_all_violations_are_reported(validation):
    """Ordinary failures do not short-circuit the field."""
    result = validation.run({"code": "required|length:min:3|alpha"}, {"code": ""})

    messages = [entry["message"] for entry in result.get_error_messages()]
    assert messages == [
        "Field code is required",
        "Field code must be at least 3 characters long",
        "Field code must contain only letters",
    ]


def test_errors_keep_evaluation_order(validation):
    """Entries follow field then rule declaration order."""
    result = validation.run(
        {"b": "required", "a": "email|length:max:2"},
        {"a": "not-an-email"},
    )

    assert [(e.field, e.message) for e in result.errors] == [
        ("b", "Field b is required"),
        ("a", "Field a must be an email address"),
        ("a", "Field a must not exceed 2 characters long"),
    ]


def test_gate_after_other_rules(validation):
    """A gate only skips the rules declared after it."""
    result = validation.run({"name": "required|if_exist|length:min:3"}, {})

    assert [e.message for e in result.errors] == ["Field name is required"]


def test_gate_with_empty_string(validation):
    """Empty strings count as absent for gates."""
    assert validation.run({"name": "if_exist|email"}, {"name": ""}).passes()


def test_gate_with_present_value(validation):
    """Present values run the gated rules."""
    result = validation.run({"name": "if_exist|email"}, {"name": "nope"})

    assert result.errors == [ErrorEntry(code=0, message="Field name must be an email address", field="name")]


@pytest.mark.parametrize(
    "value,expected",
    [
        ("ab", ["Field word must be at least 3 characters long"]),
        ("abc", []),
        ("abcde", []),
        ("abcdef", ["Field word must not exceed 5 characters long"]),
    ],
)
def test_length_bounds_are_inclusive(validation, value, expected):
    """Length bounds include both ends and report one entry."""
    result = validation.run({"word": "length:min:3;max:5"}, {"word": value})

    assert [e.message for e in result.errors] == expected


def test_cancel_on_fail(validation):
    """cancel_on_fail stops the remaining rules of the field."""
    rules = {"code": {"required": {"cancel_on_fail": True}, "length": {"min": 3}}}
    result = validation.run(rules, {})

    assert [e.message for e in result.errors] == ["Field code is required"]


def test_cancel_on_fail_flag_in_string(validation):
    """A bare option group acts as a flag."""
    result = validation.run({"code": "required:cancel_on_fail|length:min:3"}, {"code": None})

    assert len(result) == 1


def test_message_and_code_options(validation):
    """`message` and `code` options override the defaults."""
    rules = {"age": {"required": {"message": "Tell us :field", "code": 42}}}
    result = validation.run(rules, {})

    assert result.get_error_messages() == [{"code": 42, "message": "Tell us age", "field": "age"}]


def test_labels_replace_field_placeholder(validation):
    """Labels are used for `:field` but entries keep the field name."""
    result = validation.run({"first_name": "required"}, {}, labels={"first_name": "First name"})

    assert result.errors[0].message == "Field First name is required"
    assert result.errors[0].field == "first_name"


def test_list_options_are_joined(validation):
    """List option values render comma-separated."""
    result = validation.run({"gender": "in:domain:m,f"}, {"gender": "x"})

    assert result.first_error() == "Field gender must be a part of list: m, f"


def test_unknown_placeholders_are_kept(validation):
    """Placeholders without a value stay as written."""
    result = validation.run({"a": {"required": {"message": "Field :field :unknown"}}}, {})

    assert result.first_error() == "Field a :unknown"


def test_dotted_field_lookup(validation):
    """Dotted names read nested mappings and list items."""
    data = {"user": {"emails": ["a@b.co", "bad"]}}

    assert validation.run({"user.emails.0": "email"}, data).passes()
    assert validation.run({"user.emails.1": "email"}, data).fail()
    assert validation.run({"user.emails.5": "if_exist|email"}, data).passes()


def test_validated_data_holds_passing_fields(validation):
    """Only fields without errors are kept in the result data."""
    result = validation.run(
        {"name": "required", "email": "required|email"},
        {"name": "Ann", "email": "nope"},
    )

    assert result.data == {"name": "Ann"}
    assert result.to_dict() == {"email": ["Field email must be an email address"]}
    assert result.has_error("email")
    assert not result.has_error("name")


def test_run_accepts_parsed_field_specs(validation):
    """Pre-parsed FieldSpecs skip the parser."""
    spec = FieldSpec(
        field="apple",
        rules=(RuleSpec("length", RuleOptions({"min": 3})),),
    )

    result = validation.run([spec], {"apple": "A"})

    assert result.first_error("apple") == "Field apple must be at least 3 characters long"


def test_isolated_registries():
    """Rules registered on one engine are invisible to another."""
    first = Validation()
    second = Validation()
    first.register("always", lambda value, options, context: True)

    assert first.run({"x": "always"}, {}).passes()
    with pytest.raises(UnknownRule):
        second.run({"x": "always"}, {})


def test_validate_helper():
    """Module-level validate uses a default registry."""
    result = validate({"email": "a@b.co"}, {"email": "required|email"})

    assert result.passes()
    assert bool(result) is True


def test_validate_or_fail():
    """validate_or_fail returns data or raises ValidationError."""
    assert validate_or_fail({"name": "Ann"}, {"name": "required"}) == {"name": "Ann"}

    with pytest.raises(ValidationError) as excinfo:
        validate_or_fail({}, {"name": "required"})

    assert excinfo.value.errors == {"name": ["Field name is required"]}
    assert "name: Field name is required" in str(excinfo.value)


def test_run_logs_summary(validation, log_stream):
    """A debug summary is logged per run."""
    validation.run({"name": "required"}, {})

    assert "Validation finished" in log_stream.getvalue()
    assert "errors=1" in log_stream.getvalue()


def test_configuration_errors_are_logged(validation, log_stream):
    """Configuration errors are logged before propagating."""
    with pytest.raises(UnknownRule):
        validation.run({"a": "asdf"}, {})

    assert "Invalid validation rules" in log_stream.getvalue()
    assert "identifier=asdf" in log_stream.getvalue()


def test_single_argument_predicates(validation):
    """Callables may take only the value."""
    validation.register("positive", lambda value: value > 0, "Field :field must be positive")

    assert validation.run({"n": "positive"}, {"n": 3}).passes()
    assert validation.run({"n": "positive"}, {"n": -3}).first_error() == "Field n must be positive"


@pytest.mark.parametrize("rules", ["required", 5, ["required"]])
def test_run_rejects_other_rule_containers(validation, rules):
    with pytest.raises(InvalidRuleShape):
        validation.run(rules, {})
