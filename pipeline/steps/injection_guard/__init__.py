"""
Injection Guard Step

Rule-table prompt-injection scanner with strict and sanitize modes.
"""

from .main import InjectionGuardStep
from .scanner import InjectionGuard, escape_for_prompt, fingerprint, is_role_injection

__all__ = [
    "InjectionGuardStep",
    "InjectionGuard",
    "escape_for_prompt",
    "fingerprint",
    "is_role_injection",
]
