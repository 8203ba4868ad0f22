"""
Injection Guard Rules

Ordered, appendable rule table. Each rule is evaluated independently;
adding detection means adding a row here, not a branch in the scanner.
"""

import re
from dataclasses import dataclass
from typing import List, Pattern

from pipeline.models.core import InjectionCategory


FILTERED_PLACEHOLDER = "[FILTERED]"


@dataclass(frozen=True)
class InjectionRule:
    """One detection rule: a named pattern in a behavioral category."""

    name: str
    category: InjectionCategory
    pattern: Pattern[str]
    action: str = "filter"
    """"filter" replaces matched spans with the placeholder in sanitize mode; "strip" removes them."""


def _rule(name: str, category: InjectionCategory, pattern: str, flags: int = re.IGNORECASE, action: str = "filter") -> InjectionRule:
    return InjectionRule(name=name, category=category, pattern=re.compile(pattern, flags), action=action)


_OVERRIDE = InjectionCategory.INSTRUCTION_OVERRIDE
_ROLE = InjectionCategory.ROLE_SWITCH
_EXTRACTION = InjectionCategory.EXTRACTION_JAILBREAK
_PAYLOAD = InjectionCategory.PAYLOAD


INJECTION_RULES: List[InjectionRule] = [
    # a. Instruction override
    _rule(
        "ignore_previous_instructions",
        _OVERRIDE,
        r"\b(?:ignore|disregard|skip)\s+(?:all\s+)?(?:(?:your|the|my|any|these|those)\s+)?"
        r"(?:previous|prior|above|earlier|system|all)\s+(?:instructions?|prompts?|rules?|guidelines?|directions?)",
    ),
    _rule("forget_everything", _OVERRIDE, r"\bforget\s+(?:everything|all|previous|your\s+instructions?)"),
    _rule(
        "bypass_rules",
        _OVERRIDE,
        r"\bbypass\s+(?:all\s+)?(?:your\s+|the\s+)?(?:instructions?|rules?|restrictions?|filters?|safety)",
    ),
    _rule(
        "override_programming",
        _OVERRIDE,
        r"\boverride\s+(?:all\s+)?(?:your\s+|the\s+)?(?:programming|instructions?|rules?|system)",
    ),
    _rule(
        "disregard_guidelines",
        _OVERRIDE,
        r"\bdisregard\s+(?:all\s+)?(?:your\s+|the\s+)?(?:instructions?|guidelines?|rules?)",
    ),
    _rule("respond_only_with", _OVERRIDE, r"\brespond\s+(?:only|just)\s+with\b"),
    _rule("output_only_the", _OVERRIDE, r"\boutput\s+(?:only|just)\s+the\b"),
    _rule("return_only_the", _OVERRIDE, r"\breturn\s+(?:only|just)\s+the\b"),

    # b. Role / context switching
    _rule("you_are_now", _ROLE, r"\byou\s+are\s+now\s+"),
    _rule(
        "act_as_different",
        _ROLE,
        r"\bact\s+as\s+(?:if\s+you\s+(?:are|were)\b|(?:an?\s+)?(?:different|new)\s+)",
    ),
    _rule("pretend_you_are", _ROLE, r"\b(?:hypothetically|imagine|pretend)\s+(?:that\s+)?(?:you\s+)?(?:are|were)\b"),
    _rule("from_now_on", _ROLE, r"\bfrom\s+now\s+on,?\s+you\s+(?:are|will|must)\b"),
    _rule("system_marker", _ROLE, r"\bsystem\s*:"),
    _rule("role_marker", _ROLE, r"\brole\s*:"),
    _rule("double_braces", _ROLE, r"\{\{.*?\}\}", flags=re.DOTALL),
    _rule("double_brackets", _ROLE, r"\[\[.*?\]\]", flags=re.DOTALL),
    _rule("double_angles", _ROLE, r"<<.*?>>", flags=re.DOTALL),
    _rule("fenced_block", _ROLE, r"```.*?```", flags=re.DOTALL),
    _rule("banner_line", _ROLE, r"^[ \t]*(?:-{3,}|={3,})[ \t]*$", flags=re.MULTILINE),
    _rule(
        "banner_section",
        _ROLE,
        r"(?:-{3,}|={3,})\s*(?:begin|end|new|system)?\s*(?:system|instructions?|prompt)\b",
    ),

    # c. Information extraction / jailbreak
    _rule(
        "reveal_instructions",
        _EXTRACTION,
        r"\b(?:reveal|print|repeat|show\s+me|tell\s+me(?:\s+about)?|what\s+(?:is|are))\s+"
        r"(?:your\s+(?:system\s+|initial\s+|hidden\s+|original\s+)?(?:instructions?|prompts?|programming|rules|configuration)"
        r"|the\s+(?:system|hidden|initial|original)\s+(?:prompts?|instructions?))",
    ),
    _rule("jailbreak", _EXTRACTION, r"\bjail\s*break"),
    _rule("dan_mode", _EXTRACTION, r"\bDAN\b", flags=0),
    _rule("do_anything_now", _EXTRACTION, r"\bdo\s+anything\s+now\b"),
    _rule("developer_mode", _EXTRACTION, r"\bdeveloper\s+mode\b"),

    # d. Payload / control characters
    _rule("script_tag", _PAYLOAD, r"<\s*/?\s*(?:script|iframe|object|embed)\b"),
    _rule("event_handler", _PAYLOAD, r"\bon(?:load|error|click|mouseover|focus|blur|change|submit)\s*="),
    _rule("php_open_tag", _PAYLOAD, r"<\?(?:php|=)"),
    _rule("code_call", _PAYLOAD, r"\b(?:function|class|if|for|while)\s*\([^)]*\)\s*\{"),
    _rule("script_scheme", _PAYLOAD, r"\b(?:javascript|vbscript)\s*:"),
    _rule("data_html_uri", _PAYLOAD, r"\bdata\s*:\s*text/html"),
    _rule(
        "control_characters",
        _PAYLOAD,
        r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F\u200b-\u200f\u202a-\u202e\u2066-\u2069\ufeff]",
        flags=0,
        action="strip",
    ),
    _rule("repeated_character", _PAYLOAD, r"(\S)\1{49,}", flags=0),
    _rule("repeated_substring", _PAYLOAD, r"(\S.{1,19}?)\1{19,}", flags=re.DOTALL),
]


# Coarse secondary check. Word boundaries keep "keyboard" or "ecosystem" out.
SENSITIVE_KEYWORDS: List[str] = [
    "admin", "administrator", "root", "system", "debug",
    "password", "passwd", "token", "secret", "api_key", "apikey",
    "execute", "eval", "shell", "cmd", "sudo",
    "hack", "exploit", "bypass", "override", "inject",
]

SENSITIVE_KEYWORD_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(word) for word in SENSITIVE_KEYWORDS) + r")\b",
    re.IGNORECASE,
)


# Narrower persona check kept for callers that only care about role switches
ROLE_INJECTION_PATTERNS: List[Pattern[str]] = [
    re.compile(r"\byou\s+are\s+(?:now\s+)?(?:a\s+)?(?:different|new)\b", re.IGNORECASE),
    re.compile(r"\bact\s+as\s+if\s+you\s+(?:are|were)\b", re.IGNORECASE),
    re.compile(r"\bpretend\s+(?:that\s+)?you\s+are\b", re.IGNORECASE),
    re.compile(r"\bimagine\s+(?:that\s+)?you\s+are\b", re.IGNORECASE),
    re.compile(r"\bfrom\s+now\s+on\s+you\s+are\b", re.IGNORECASE),
]


# Letters, digits, whitespace and this fixed symbol set are "printable"
ALLOWED_SYMBOLS = frozenset(".,?!;:-()[]{}\"'/@#%&*+=<>~`|\\")


# Delimiters that could open a new instruction context inside the prompt
PROMPT_DELIMITER_ESCAPES = [
    ("```", "\\`\\`\\`"),
    ("{{", "\\{\\{"),
    ("}}", "\\}\\}"),
    ("[[", "\\[\\["),
    ("]]", "\\]\\]"),
]
