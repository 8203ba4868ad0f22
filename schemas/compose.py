"""Compose-related Pydantic schemas for the email generation API."""

from typing import Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ComposeForm(BaseModel):
    """
    Form fields for POST /api/compose/generate.

    Field names follow the mail client's camelCase keys. Every field is
    optional here; presence and content rules live in the field validator.
    """

    sender_name: Optional[str] = Field(default=None, alias="senderName")
    recipient_name: Optional[str] = Field(
        default=None,
        alias="recipientName",
        description="One or more names, comma-separated"
    )
    instruction: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("instructions", "instruction"),
        description="What the email should say"
    )
    style: Optional[str] = None
    length: Optional[str] = None
    creativity: Optional[str] = None
    language: Optional[str] = None
    recipient_email: Optional[str] = Field(
        default=None,
        alias="recipientEmail",
        description="One or more addresses, comma-separated"
    )
    sender_email: Optional[str] = Field(default=None, alias="senderEmail")
    subject: Optional[str] = None
    previous_conversation: Optional[str] = Field(default=None, alias="previousConversation")
    fix_text: Optional[str] = Field(
        default=None,
        alias="fixText",
        description="Snippet of a previously generated email to rewrite"
    )
    previous_generated_email: Optional[str] = Field(default=None, alias="previousGeneratedEmailText")
    signature_present: Optional[str] = Field(default=None, alias="signaturePresent")
    multiple_recipients: Optional[str] = Field(default=None, alias="multipleRecipients")

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "senderName": "Alice Martin",
                "recipientName": "Bob",
                "instructions": "Ask for a meeting next week",
                "style": "formal",
                "length": "short",
                "creativity": "low",
                "language": "English",
            }
        }
    )

    def to_form(self) -> Dict[str, Optional[str]]:
        """Raw fields keyed by snake_case name, blank values as None."""
        return {
            name: (value if value is not None and value.strip() != "" else None)
            for name, value in self.model_dump().items()
        }


class ComposeResponse(BaseModel):
    """
    Response envelope for every compose outcome.

    All string content is HTML-entity encoded before it is placed here.
    """

    status: str = Field(..., description="success or error")
    respond: str = Field(..., description="Generated email, or a user-facing error message")
    errors: Optional[List[str]] = Field(default=None, description="Validation error codes")
    retry_after: Optional[int] = Field(default=None, description="Seconds until the caller may retry")
    debug: Optional[str] = Field(default=None, description="Raw error text, debug mode only")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "success",
                "respond": "Dear Bob,\n\nCould we meet next week?\n\nBest regards,\nAlice"
            }
        }
    )


class InstructionResponse(BaseModel):
    """Sanitized predefined instruction, ready for the settings store."""

    status: str
    respond: str
    name: Optional[str] = None
    text: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)
    retry_after: Optional[int] = None
