"""
Injection Guard Scanner

Evaluates free text against the rule table in one of two modes:
strict (any rule or keyword match blocks) or sanitize (matched spans are
filtered out, keywords only flagged).
Length capping and the character-set check apply in both modes.
"""

import hashlib
import unicodedata
from typing import List, Optional

from pipeline.models.core import InjectionCategory, InjectionVerdict

from .rules import (
    ALLOWED_SYMBOLS,
    FILTERED_PLACEHOLDER,
    INJECTION_RULES,
    PROMPT_DELIMITER_ESCAPES,
    ROLE_INJECTION_PATTERNS,
    SENSITIVE_KEYWORD_PATTERN,
    InjectionRule,
)


TRUNCATION_MARKER = "... [TRUNCATED]"

WARNING_EMPTY = "Input cannot be empty"
WARNING_BLOCKED = "Input contains potentially malicious content"
WARNING_SANITIZED = "Input was sanitized for security reasons"
WARNING_KEYWORDS = "Input contains sensitive keywords"
WARNING_TOO_LONG = "Input is too long and will be truncated"
WARNING_UNUSUAL = "Input contains unusual characters"


def is_printable_char(char: str) -> bool:
    """Letters, digits, combining marks, whitespace or an allowed symbol."""
    if char.isspace() or char in ALLOWED_SYMBOLS:
        return True
    return unicodedata.category(char)[0] in ("L", "N", "M")


def escape_for_prompt(text: str) -> str:
    """Escape delimiters that could open a new instruction context."""
    for delimiter, escaped in PROMPT_DELIMITER_ESCAPES:
        text = text.replace(delimiter, escaped)
    return text


def fingerprint(text: str) -> str:
    """Stable hash of the normalized text, logged in place of the content."""
    return hashlib.sha256(text.strip().lower().encode("utf-8")).hexdigest()


def is_role_injection(text: str) -> bool:
    return any(pattern.search(text) for pattern in ROLE_INJECTION_PATTERNS)


class InjectionGuard:
    """
    Rule-table scanner for user free text.

    Stateless apart from its configuration, so one instance can be shared
    across requests.
    """

    def __init__(self, content_cap: int = 2000, rules: Optional[List[InjectionRule]] = None):
        self.content_cap = content_cap
        self.rules = list(rules) if rules is not None else list(INJECTION_RULES)

    def match_rules(self, text: str) -> List[InjectionRule]:
        """Every rule whose pattern occurs in text, in table order."""
        return [rule for rule in self.rules if rule.pattern.search(text)]

    def contains_injection(self, text: str) -> bool:
        return bool(self.match_rules(text)) or self.contains_keywords(text)

    @staticmethod
    def contains_keywords(text: str) -> bool:
        """Word-bounded, case-insensitive sensitive keyword check."""
        return SENSITIVE_KEYWORD_PATTERN.search(text) is not None

    def sanitize(self, text: str, matched: Optional[List[InjectionRule]] = None) -> str:
        """Replace (or strip) the spans of every matched rule."""
        matched = self.match_rules(text) if matched is None else matched
        for rule in matched:
            replacement = "" if rule.action == "strip" else FILTERED_PLACEHOLDER
            text = rule.pattern.sub(replacement, text)
        return text

    def truncate(self, text: str) -> str:
        if len(text) <= self.content_cap:
            return text
        return text[:self.content_cap] + TRUNCATION_MARKER

    def scan(self, text: Optional[str], strict: bool = True) -> InjectionVerdict:
        """
        Scan one free-text value.

        Args:
            text: Raw user text
            strict: Block on any rule or keyword match instead of filtering

        Returns:
            InjectionVerdict. Blocked verdicts carry no sanitized text.
        """
        if text is None or not text.strip():
            return InjectionVerdict(valid=False, blocked=False, sanitized_text="", warnings=[WARNING_EMPTY])

        matched = self.match_rules(text)
        categories: List[InjectionCategory] = []
        for rule in matched:
            if rule.category not in categories:
                categories.append(rule.category)

        has_keywords = self.contains_keywords(text)
        if has_keywords:
            categories.append(InjectionCategory.SENSITIVE_KEYWORD)

        if strict and (matched or has_keywords):
            return InjectionVerdict(
                valid=False,
                blocked=True,
                sanitized_text="",
                warnings=[WARNING_BLOCKED],
                categories=categories,
            )

        warnings: List[str] = []
        sanitized = text

        if matched:
            sanitized = self.sanitize(text, matched).strip()
            warnings.append(WARNING_SANITIZED)

        # Keywords are not filtered in sanitize mode, only flagged
        if self.contains_keywords(sanitized):
            warnings.append(WARNING_KEYWORDS)

        if len(sanitized) > self.content_cap:
            sanitized = self.truncate(sanitized)
            warnings.append(WARNING_TOO_LONG)

        if not all(is_printable_char(char) for char in sanitized):
            warnings.append(WARNING_UNUSUAL)

        return InjectionVerdict(
            valid=True,
            blocked=False,
            sanitized_text=sanitized,
            warnings=warnings,
            categories=categories,
        )
