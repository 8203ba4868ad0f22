"""
Models package for pipeline models

NOTE: request-scoped dataclasses, not API schemas
"""

from .core import (
    # Enums
    ActionClass,
    RateLimitReason,
    InjectionCategory,
    PromptBranch,

    # Core data models
    ComposeRequest,
    RenderedPrompt,
    InjectionVerdict,
    RateLimitPolicy,
    RateDecision,
    ComposeData,
    StepResult,
)

__all__ = [
    # Enums
    "ActionClass",
    "RateLimitReason",
    "InjectionCategory",
    "PromptBranch",

    # Core data models
    "ComposeRequest",
    "RenderedPrompt",
    "InjectionVerdict",
    "RateLimitPolicy",
    "RateDecision",
    "ComposeData",
    "StepResult",
]
