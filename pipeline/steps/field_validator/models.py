"""
Field Validator Step Models

Option sets the enumerated form fields are checked against.
"""

from typing import List
from pydantic import BaseModel, Field, field_validator


class FieldOptions(BaseModel):
    """
    Closed option sets for the selectable compose fields.

    Owned by configuration; the validator only reads them.
    """

    styles: List[str] = Field(min_length=1)
    lengths: List[str] = Field(min_length=1)
    creativities: List[str] = Field(min_length=1)
    languages: List[str] = Field(min_length=1)

    structural_cap: int = Field(default=10_000, ge=1, description="Max characters for any raw field")

    @field_validator("styles", "lengths", "creativities", "languages")
    @classmethod
    def strip_options(cls, v: List[str]) -> List[str]:
        """Drop blank entries and surrounding whitespace"""
        cleaned = [option.strip() for option in v if option.strip()]
        if not cleaned:
            raise ValueError("Option set cannot be empty")
        return cleaned

    @classmethod
    def from_settings(cls, settings) -> "FieldOptions":
        return cls(
            styles=settings.styles,
            lengths=settings.lengths,
            creativities=settings.creativities,
            languages=settings.languages,
            structural_cap=settings.structural_cap,
        )
