"""
Prompt Builder Prompts

Templates for the two generation branches: composing a new email and
refining a snippet of a previously generated one.
"""

from typing import Dict


SYSTEM_PROMPT = "You are a helpful personal assistant."


LENGTH_WORDS: Dict[str, str] = {
    "short": "between 50 and 100",
    "medium": "between 100 and 200",
    "long": "between 200 and 300",
}

PLURAL_ADDRESS = " Address the recipient in plural form."

EMAIL_FORMAT = "The format should be as follows:\nGreeting\n\nContent\n\nClosing Greeting\n"

NO_SIGNATURE_RULE = (
    'CRUCIAL: "Write an email without signing it or including any identifying information '
    "after the greeting, including no names or titles. Only include the message and greeting, "
    'but leave the signature and closing blank."'
)


def length_words(length: str) -> str:
    """Word-count target for a configured length option."""
    return LENGTH_WORDS.get(length.lower(), f"appropriate for a {length} email")


def previous_conversation_section(previous_conversation: str) -> str:
    if not previous_conversation:
        return ""
    return f" Previous conversation: {previous_conversation}."


def create_fix_prompt(
    previous_generated_email: str,
    fix_text: str,
    instruction: str,
    previous_conversation: str = ""
) -> str:
    """
    Create the prompt that rewrites one snippet of an existing email.

    Args:
        previous_generated_email: Email to reproduce
        fix_text: Snippet of that email to change
        instruction: How to change the snippet
        previous_conversation: Optional thread context

    Returns:
        Formatted user prompt
    """
    return (
        f" Write an identical email as this {previous_generated_email}, in the same language, "
        f"but change only this text snippet from that same email: {fix_text} "
        f"based on this instruction {instruction}."
        + previous_conversation_section(previous_conversation)
    )


def create_compose_prompt(
    style: str,
    subject: str,
    recipient_name: str,
    sender_name: str,
    language: str,
    length: str,
    instruction: str,
    multiple_recipients: bool = False,
    previous_conversation: str = "",
    signature_present: bool = False
) -> str:
    """
    Create the prompt for a new email.

    Empty recipient_name omits the recipient line entirely; an empty
    subject is stated explicitly.
    """
    subject_line = f" Subject: {subject}" if subject else " Without a subject"
    recipient_line = f" *Recipient: {recipient_name}" if recipient_name else ""

    prompt = (
        f"Create a {style} email with the following specifications:"
        f"{subject_line}"
        f"{recipient_line}"
        f" *Sender: {sender_name}"
        f" *Language: {language}"
        f" *Length: {length}."
        + (PLURAL_ADDRESS if multiple_recipients else "")
        + f" Compose a well-structured email based on this instruction: {instruction}."
        f" The instruction should be rewritten in the tone and format of a {style} email to a reader. "
        " If the instruction contains pronouns (like 'he', 'she', 'they', etc.), "
        "assume they refer to the recipient unless specified otherwise."
        f" The number of words should be {length_words(length)}. "
        "Do not write the subject if provided, it is only there for your context. "
        "Only greet the recipient, never the sender. "
        + EMAIL_FORMAT
        + previous_conversation_section(previous_conversation)
        + (NO_SIGNATURE_RULE if signature_present else "")
    )

    return prompt
