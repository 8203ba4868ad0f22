"""
Field Validator Utilities

Per-field validation rules. Each validator returns error codes instead of
raising so that every problem in a form is reported at once.
"""

from typing import Dict, List, Optional, Tuple

import email_validator

from pipeline.models.core import ComposeRequest
from pipeline.core.exceptions import FieldValidationError
from .models import FieldOptions


TRUE_VALUES = {"true", "1", "yes", "on"}

MIN_NAME_LENGTH = 3


def has_letters(value: str) -> bool:
    return any(char.isalpha() for char in value)


def split_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated field, trimming and dropping blank segments."""
    return [part.strip() for part in (value or "").split(",") if part.strip()]


def parse_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in TRUE_VALUES


def capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def validate_name(name: str, role: str) -> List[str]:
    """
    Validate a single sender or recipient name.

    Args:
        name: Trimmed name (may be empty)
        role: "sender" or "recipient"

    Returns:
        Error codes, empty when valid
    """
    codes: List[str] = []

    if not name:
        if role == "sender":
            codes.append("sender_name_mandatory")
        return codes

    if len(name) > 1 and not has_letters(name):
        codes.append(f"invalid_{role}_name_text")

    if len(name) < MIN_NAME_LENGTH:
        codes.append(f"not_enough_characters_{role}_name")

    return codes


def validate_recipient_names(value: Optional[str]) -> Tuple[Tuple[str, ...], List[str]]:
    """
    Split recipient names on commas and validate each segment.

    An all-blank field yields an explicitly empty recipient, not an error.
    """
    names = split_list(value)
    codes: List[str] = []
    for name in names:
        codes.extend(validate_name(name, "recipient"))
    return tuple(names), codes


def validate_option(value: Optional[str], options: List[str], field_name: str) -> Tuple[str, List[str]]:
    """
    Check an enumerated field against its option set.

    Language is compared after capitalizing its first letter.
    """
    candidate = value or ""
    if field_name == "language":
        candidate = capitalize_first(candidate)

    if candidate not in options:
        return candidate, [f"invalid_{field_name}"]
    return candidate, []


def is_valid_email(address: str) -> bool:
    """Address syntax check only; no DNS lookups."""
    try:
        email_validator.validate_email(address, check_deliverability=False)
    except email_validator.EmailNotValidError:
        return False
    return True


def validate_emails(value: Optional[str], participant: str, multiple: bool = False) -> Tuple[Tuple[str, ...], List[str]]:
    """
    Validate recipient (comma-separated) or sender email addresses.

    Empty values are accepted; both fields are optional.
    """
    addresses = split_list(value) if multiple else [v for v in [(value or "").strip()] if v]

    codes: List[str] = []
    for address in addresses:
        if not is_valid_email(address):
            codes.append(f"invalid_{participant}_email_address")
    return tuple(addresses), codes


def validate_subject(subject: str) -> List[str]:
    if subject and not has_letters(subject):
        return ["invalid_input_subject"]
    return []


def check_structural_caps(form: Dict[str, Optional[str]], cap: int) -> List[str]:
    """Any field above the hard cap is rejected, never truncated."""
    for value in form.values():
        if value is not None and len(value) > cap:
            return ["input_too_long"]
    return []


def validate_fields(form: Dict[str, Optional[str]], options: FieldOptions) -> ComposeRequest:
    """
    Validate raw form fields and build a ComposeRequest.

    All validators run independently and their codes are merged in order,
    without duplicates.

    Args:
        form: Raw fields keyed by snake_case name (missing or blank -> None)
        options: Option sets for the enumerated fields

    Returns:
        ComposeRequest ready for the injection guard

    Raises:
        FieldValidationError: With every accumulated code
    """
    codes: List[str] = []

    def merge(new_codes: List[str]) -> None:
        for code in new_codes:
            if code not in codes:
                codes.append(code)

    merge(check_structural_caps(form, options.structural_cap))

    sender_name = (form.get("sender_name") or "").strip()
    merge(validate_name(sender_name, "sender"))

    recipient_names, recipient_codes = validate_recipient_names(form.get("recipient_name"))
    merge(recipient_codes)

    style, style_codes = validate_option(form.get("style"), options.styles, "style")
    merge(style_codes)
    length, length_codes = validate_option(form.get("length"), options.lengths, "length")
    merge(length_codes)
    creativity, creativity_codes = validate_option(form.get("creativity"), options.creativities, "creativity")
    merge(creativity_codes)
    language, language_codes = validate_option(form.get("language"), options.languages, "language")
    merge(language_codes)

    recipient_emails, recipient_email_codes = validate_emails(form.get("recipient_email"), "recipient", multiple=True)
    merge(recipient_email_codes)
    sender_emails, sender_email_codes = validate_emails(form.get("sender_email"), "sender")
    merge(sender_email_codes)

    subject = (form.get("subject") or "").strip()
    merge(validate_subject(subject))

    instruction = (form.get("instruction") or "").strip()
    fix_text = (form.get("fix_text") or "").strip()
    previous_generated_email = (form.get("previous_generated_email") or "").strip()

    if not instruction and not fix_text:
        merge(["not_enough_characters_instruction"])
    if fix_text and not previous_generated_email:
        merge(["missing_previous_generated_email"])

    if codes:
        raise FieldValidationError(codes)

    return ComposeRequest(
        sender_name=sender_name,
        recipient_names=recipient_names,
        style=style,
        length=length,
        creativity=creativity,
        language=language,
        recipient_emails=recipient_emails,
        sender_email=sender_emails[0] if sender_emails else "",
        subject=subject,
        instruction=instruction,
        previous_conversation=(form.get("previous_conversation") or "").strip(),
        fix_text=fix_text,
        previous_generated_email=previous_generated_email,
        signature_present=parse_flag(form.get("signature_present")),
        multiple_recipients=parse_flag(form.get("multiple_recipients")),
    )
