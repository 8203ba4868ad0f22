"""
English messages for validation error codes.

Localized labels are owned by the mail client; this catalog is the
fallback the API returns when no translation layer sits in front of it.
"""

from typing import Dict, Iterable, List


ERROR_MESSAGES: Dict[str, str] = {
    "sender_name_mandatory": "Sender name is mandatory.",
    "invalid_sender_name_text": "Sender name must contain letters.",
    "invalid_recipient_name_text": "Recipient name must contain letters.",
    "not_enough_characters_sender_name": "Sender name must be at least 3 characters long.",
    "not_enough_characters_recipient_name": "Recipient name must be at least 3 characters long.",
    "invalid_style": "Selected style is not available.",
    "invalid_length": "Selected length is not available.",
    "invalid_creativity": "Selected creativity is not available.",
    "invalid_language": "Selected language is not available.",
    "invalid_recipient_email_address": "Recipient email address is invalid.",
    "invalid_sender_email_address": "Sender email address is invalid.",
    "invalid_input_subject": "Subject must contain letters.",
    "not_enough_characters_instruction": "Instruction cannot be empty.",
    "missing_previous_generated_email": "A previously generated email is required to apply a fix.",
    "input_too_long": "Input is too long.",
    "malicious_content_detected": "Your input contains potentially malicious content and was rejected.",
    "rate_limit_exceeded": "Too many requests. Please try again later.",
    "ai_request_error": "The email could not be generated. Please try again later.",
    "predefined_invalid_input": "Instruction title and content are required.",
}


def describe(code: str) -> str:
    """Return the message for a code, falling back to the code itself."""
    return ERROR_MESSAGES.get(code, code)


def describe_all(codes: Iterable[str]) -> List[str]:
    return [describe(code) for code in codes]
