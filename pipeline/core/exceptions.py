"""
Custom exceptions for compose pipeline execution.

Every failure is terminal for the current request. Domain errors carry the
data the API layer needs to build a structured response; they pass through
the runner unchanged, anything else is wrapped in StepExecutionError.
"""

from typing import List, Optional

from pipeline.models.core import RateDecision


class PipelineExecutionError(Exception):
    """
    Base exception for pipeline execution failures.

    All step-specific exceptions inherit from this.
    """
    pass


class StepExecutionError(PipelineExecutionError):
    """
    Raised when a pipeline step fails unexpectedly.

    Attributes:
        step_name: Name of the failed step
        original_error: The underlying exception
    """

    def __init__(self, step_name: str, original_error: Exception):
        self.step_name = step_name
        self.original_error = original_error
        error_message = f"Step '{step_name}' failed: {str(original_error)}"
        super().__init__(error_message)


class FieldValidationError(PipelineExecutionError):
    """
    Raised when one or more form fields are invalid.

    All field-level codes are accumulated and reported together.
    """

    def __init__(self, codes: List[str]):
        self.codes = list(codes)
        super().__init__(f"Field validation failed: {', '.join(self.codes)}")


class InjectionBlockedError(PipelineExecutionError):
    """
    Raised when a strictly scanned field matches an injection rule.

    The offending text is deliberately not stored on the exception.
    """

    code = "malicious_content_detected"

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Malicious content detected in '{field_name}'")


class RateLimitExceededError(PipelineExecutionError):
    """Raised when the caller is blocked or over its ceiling."""

    def __init__(self, decision: RateDecision):
        self.decision = decision
        super().__init__(
            f"Rate limit {decision.reason.value}: retry after {decision.retry_after}s"
        )


class ProviderError(PipelineExecutionError):
    """
    Raised for any transport or vendor-side failure of the model call.

    Attributes:
        reason: "transport", "vendor" or "empty_content"
        status_code: HTTP status returned by the vendor, if any
    """

    TRANSPORT = "transport"
    VENDOR = "vendor"
    EMPTY_CONTENT = "empty_content"

    def __init__(self, message: str, reason: str, status_code: Optional[int] = None):
        self.reason = reason
        self.status_code = status_code
        super().__init__(message)
