"""Core data models for the compose pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, List, Tuple
from datetime import datetime, timezone


class ActionClass(str, Enum):
    """Rate-limited action classes, each with its own policy."""
    GENERATION = "generation"
    INSTRUCTION_SAVE = "instruction_save"
    GENERAL = "general"


class RateLimitReason(str, Enum):
    """Why a rate-limit check allowed or denied a call."""
    OK = "ok"
    BLOCKED = "blocked"
    LIMIT_EXCEEDED = "limit_exceeded"


class InjectionCategory(str, Enum):
    """Behavioral categories recognized by the injection guard."""
    INSTRUCTION_OVERRIDE = "instruction_override"
    ROLE_SWITCH = "role_switch"
    EXTRACTION_JAILBREAK = "extraction_jailbreak"
    PAYLOAD = "payload"
    SENSITIVE_KEYWORD = "sensitive_keyword"


class PromptBranch(str, Enum):
    """Template branch selected by the prompt builder."""
    COMPOSE = "compose"
    FIX = "fix"


# ===================================================================
# REQUEST
# ===================================================================

@dataclass(frozen=True)
class ComposeRequest:
    """
    Validated, typed representation of one generation attempt.

    Built fresh per call by the field validator and never persisted.
    """

    sender_name: str
    style: str
    length: str
    creativity: str
    language: str
    instruction: str = ""

    recipient_names: Tuple[str, ...] = ()
    """Recipient names split on commas, blanks dropped. Empty means no recipient name."""

    recipient_emails: Tuple[str, ...] = ()
    sender_email: str = ""
    subject: str = ""

    previous_conversation: str = ""
    fix_text: str = ""
    """Present only when refining a previously generated email."""

    previous_generated_email: str = ""
    signature_present: bool = False
    multiple_recipients: bool = False

    @property
    def recipient_name(self) -> str:
        return ", ".join(self.recipient_names)

    @property
    def is_fix(self) -> bool:
        return bool(self.fix_text)


@dataclass(frozen=True)
class RenderedPrompt:
    """Prompt text built once per request and handed to the provider by value."""

    text: str
    branch: PromptBranch


# ===================================================================
# VERDICTS
# ===================================================================

@dataclass
class InjectionVerdict:
    """
    Result of scanning one free-text value.

    blocked=True means the request must be rejected outright.
    valid=True with warnings means sanitized_text replaces the original.
    """

    valid: bool
    blocked: bool
    sanitized_text: str
    warnings: List[str] = field(default_factory=list)
    categories: List[InjectionCategory] = field(default_factory=list)
    """Matched categories, for logs only. Never echoed to the caller."""


@dataclass(frozen=True)
class RateLimitPolicy:
    """Ceiling, sliding window and block duration for one action class (seconds)."""

    requests: int
    window: int
    block_duration: int


@dataclass(frozen=True)
class RateDecision:
    """Outcome of a rate-limit admission check."""

    allowed: bool
    reason: RateLimitReason
    retry_after: int
    remaining: int
    limit: int
    reset_at: int
    """Epoch seconds at which the window or block resets."""


# ===================================================================
# PIPELINE STATE
# ===================================================================

@dataclass
class ComposeData:
    """
    In-memory state passed between pipeline steps. Not persisted.
    """

    request_id: str
    """Correlation id used in Logfire spans"""

    caller_identity: str
    """Derived rate-limit key for the calling client"""

    form: Dict[str, Optional[str]]
    """Raw form fields keyed by their snake_case names"""

    action: ActionClass = ActionClass.GENERATION

    # FieldValidator output
    request: Optional[ComposeRequest] = None

    # RateLimiter output
    rate_decision: Optional[RateDecision] = None

    # InjectionGuard output
    warnings: List[str] = field(default_factory=list)
    """Sanitization warnings collected across scanned fields"""

    # PromptBuilder output
    prompt: Optional[RenderedPrompt] = None

    # ProviderGateway output
    generated_text: str = ""

    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    step_timings: Dict[str, float] = field(default_factory=dict)
    """Duration of each step in seconds."""

    errors: List[str] = field(default_factory=list)

    def total_duration(self) -> float:
        """Calculate total pipeline execution time in seconds"""
        return (datetime.now(timezone.utc) - self.started_at).total_seconds()

    def add_timing(self, step_name: str, duration: float) -> None:
        """Record step timing"""
        self.step_timings[step_name] = duration

    def add_error(self, step_name: str, error_message: str) -> None:
        """Record step failure"""
        self.errors.append(f"{step_name}: {error_message}")


# ===================================================================
# STEP RESULT
# ===================================================================

@dataclass
class StepResult:
    """
    Result of a pipeline step execution.

    Returned by BasePipelineStep.execute() to indicate success/failure.
    """

    success: bool
    step_name: str
    error: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    warnings: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validation: if success=False, error must be set"""
        if not self.success and not self.error:
            raise ValueError("StepResult with success=False must have error message")
