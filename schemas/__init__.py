"""
Pydantic schemas for request/response validation.
"""

from schemas.compose import (
    ComposeForm,
    ComposeResponse,
    InstructionResponse,
)

__all__ = [
    # Compose schemas
    "ComposeForm",
    "ComposeResponse",

    # Predefined instruction schemas
    "InstructionResponse",
]
