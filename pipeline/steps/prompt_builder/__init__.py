"""
Prompt Builder Step

Deterministic rendering of the compose and fix prompt templates.
"""

from .main import PromptBuilderStep, build_prompt
from .prompts import SYSTEM_PROMPT, length_words

__all__ = ["PromptBuilderStep", "build_prompt", "SYSTEM_PROMPT", "length_words"]
