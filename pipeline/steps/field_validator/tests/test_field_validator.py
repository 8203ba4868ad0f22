"""
Test suite for Field Validator Step

Run with:
    pytest pipeline/steps/field_validator/tests/test_field_validator.py -v
"""

import pytest

from pipeline.core.exceptions import FieldValidationError
from pipeline.models.core import ComposeData
from pipeline.steps.field_validator import FieldOptions, FieldValidatorStep, validate_fields
from pipeline.steps.field_validator.utils import parse_flag, split_list, validate_name


@pytest.fixture
def options():
    return FieldOptions(
        styles=["formal", "casual"],
        lengths=["short", "medium", "long"],
        creativities=["low", "medium", "high"],
        languages=["English", "German"],
        structural_cap=200,
    )


@pytest.fixture
def form():
    return {
        "sender_name": "Alice",
        "recipient_name": "Bob",
        "style": "formal",
        "length": "short",
        "creativity": "low",
        "language": "English",
        "instruction": "Ask for a meeting next week",
    }


def codes_for(form, options):
    with pytest.raises(FieldValidationError) as exc_info:
        validate_fields(form, options)
    return exc_info.value.codes


# ===================================================================
# VALID FORMS
# ===================================================================

def test_valid_form_builds_request(form, options):
    request = validate_fields(form, options)

    assert request.sender_name == "Alice"
    assert request.recipient_names == ("Bob",)
    assert request.language == "English"
    assert request.is_fix is False
    assert request.signature_present is False


def test_recipient_list_drops_blank_segments(form, options):
    form["recipient_name"] = "John, , Ana"

    request = validate_fields(form, options)

    assert request.recipient_names == ("John", "Ana")
    assert request.recipient_name == "John, Ana"


def test_all_blank_recipient_is_empty(form, options):
    form["recipient_name"] = " , , "

    request = validate_fields(form, options)

    assert request.recipient_names == ()
    assert request.recipient_name == ""


def test_language_first_letter_is_capitalized(form, options):
    form["language"] = "german"

    assert validate_fields(form, options).language == "German"


def test_fix_text_replaces_instruction(form, options):
    form["instruction"] = None
    form["fix_text"] = "see you soon"
    form["previous_generated_email"] = "Dear Bob, see you soon."

    request = validate_fields(form, options)

    assert request.is_fix is True
    assert request.instruction == ""


def test_emails_are_split_and_kept(form, options):
    form["recipient_email"] = "bob@example.com, ana@example.org"
    form["sender_email"] = "alice@example.com"

    request = validate_fields(form, options)

    assert request.recipient_emails == ("bob@example.com", "ana@example.org")
    assert request.sender_email == "alice@example.com"


def test_unicode_names_are_accepted(form, options):
    form["sender_name"] = "Željko"
    form["recipient_name"] = "Åsa"

    request = validate_fields(form, options)

    assert request.recipient_names == ("Åsa",)


# ===================================================================
# ERRORS
# ===================================================================

def test_sender_name_is_mandatory(form, options):
    form["sender_name"] = None

    assert codes_for(form, options) == ["sender_name_mandatory"]


@pytest.mark.parametrize("name,role,expected", [
    ("Al", "sender", ["not_enough_characters_sender_name"]),
    ("1234", "sender", ["invalid_sender_name_text"]),
    ("12", "recipient", ["invalid_recipient_name_text", "not_enough_characters_recipient_name"]),
    ("X", "recipient", ["not_enough_characters_recipient_name"]),
    ("Bob", "recipient", []),
    ("", "recipient", []),
])
def test_validate_name(name, role, expected):
    assert validate_name(name, role) == expected


def test_each_recipient_is_validated(form, options):
    form["recipient_name"] = "John, Al"

    assert codes_for(form, options) == ["not_enough_characters_recipient_name"]


def test_errors_accumulate_in_order_without_duplicates(form, options):
    form.update({
        "sender_name": "Al",
        "recipient_name": "Jo, Ed",
        "style": "rude",
        "language": "Klingon",
        "recipient_email": "nope",
        "sender_email": "also nope",
        "subject": "1234",
        "instruction": "",
    })

    assert codes_for(form, options) == [
        "not_enough_characters_sender_name",
        "not_enough_characters_recipient_name",
        "invalid_style",
        "invalid_language",
        "invalid_recipient_email_address",
        "invalid_sender_email_address",
        "invalid_input_subject",
        "not_enough_characters_instruction",
    ]


@pytest.mark.parametrize("field_name", ["style", "length", "creativity", "language"])
def test_option_sets_are_closed(form, options, field_name):
    form[field_name] = "unknown"

    assert codes_for(form, options) == [f"invalid_{field_name}"]


def test_option_match_is_exact(form, options):
    form["style"] = "Formal"

    assert codes_for(form, options) == ["invalid_style"]


def test_fix_text_requires_previous_email(form, options):
    form["fix_text"] = "see you soon"

    assert codes_for(form, options) == ["missing_previous_generated_email"]


def test_structural_cap(form, options):
    form["previous_conversation"] = "x" * 201

    assert "input_too_long" in codes_for(form, options)


# ===================================================================
# HELPERS
# ===================================================================

@pytest.mark.parametrize("value,expected", [
    ("true", True),
    ("TRUE", True),
    ("1", True),
    ("yes", True),
    ("on", True),
    ("false", False),
    ("0", False),
    ("", False),
    (None, False),
])
def test_parse_flag(value, expected):
    assert parse_flag(value) is expected


def test_split_list():
    assert split_list(" a , ,b,") == ["a", "b"]
    assert split_list(None) == []


def test_empty_option_set_is_rejected():
    with pytest.raises(ValueError):
        FieldOptions(styles=[" "], lengths=["short"], creativities=["low"], languages=["English"])


# ===================================================================
# STEP
# ===================================================================

@pytest.mark.asyncio
async def test_step_sets_request(form, options):
    compose_data = ComposeData(request_id="r", caller_identity="c", form=form)

    result = await FieldValidatorStep(options).execute(compose_data)

    assert result.success is True
    assert compose_data.request.sender_name == "Alice"


@pytest.mark.asyncio
async def test_step_propagates_field_errors(form, options):
    form["style"] = "rude"
    compose_data = ComposeData(request_id="r", caller_identity="c", form=form)

    with pytest.raises(FieldValidationError) as exc_info:
        await FieldValidatorStep(options).execute(compose_data)

    assert exc_info.value.codes == ["invalid_style"]
    assert compose_data.request is None
