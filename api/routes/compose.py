"""Email composition API endpoints."""

from typing import Dict, List, Optional
from uuid import uuid4

import logfire
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from api.dependencies import get_caller_identity, get_compose_pipeline
from config.settings import Settings, get_settings
from pipeline.core.exceptions import (
    FieldValidationError,
    InjectionBlockedError,
    PipelineExecutionError,
    ProviderError,
    RateLimitExceededError,
)
from pipeline.core.runner import PipelineRunner
from pipeline.models.core import ActionClass, ComposeData
from pipeline.steps.rate_limiter import rate_limit_headers
from schemas.compose import ComposeForm, ComposeResponse
from utils.messages import describe, describe_all
from utils.output_encoder import encode_for_transport, encode_messages


router = APIRouter(prefix="/api/compose", tags=["Compose"])

HTTP_422_UNPROCESSABLE = 422


async def get_compose_form(request: Request) -> ComposeForm:
    """Read the form-encoded body; file parts are ignored."""
    form = await request.form()
    return ComposeForm.model_validate(
        {key: value for key, value in form.items() if isinstance(value, str)}
    )


def compose_response(
    status_code: int,
    respond: str,
    headers: Optional[Dict[str, str]] = None,
    errors: Optional[List[str]] = None,
    retry_after: Optional[int] = None,
    debug: Optional[str] = None,
) -> JSONResponse:
    """
    Build the JSON envelope.

    Every string passed in must already be encoded for transport.
    """
    body = ComposeResponse(
        status="success" if status_code == status.HTTP_200_OK else "error",
        respond=respond,
        errors=errors,
        retry_after=retry_after,
        debug=debug,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def debug_text(settings: Settings, error: Exception) -> Optional[str]:
    if not settings.expose_debug:
        return None
    return encode_for_transport(str(error))


@router.post("/generate", response_model=ComposeResponse, response_model_exclude_none=True)
async def generate_email(
    form: ComposeForm = Depends(get_compose_form),
    identity: str = Depends(get_caller_identity),
    runner: PipelineRunner = Depends(get_compose_pipeline),
    settings: Settings = Depends(get_settings),
):
    """
    Generate an email from the compose form.

    Returns:
        ComposeResponse with the HTML-encoded email body

    Error envelopes:
        422: Field validation errors (all codes reported together)
        400: Malicious content detected
        429: Rate limited (X-RateLimit-* and Retry-After headers)
        502: Provider failure
        500: Unexpected failure
    """
    request_id = str(uuid4())
    compose_data = ComposeData(
        request_id=request_id,
        caller_identity=identity,
        form=form.to_form(),
        action=ActionClass.GENERATION,
    )

    with logfire.span("api.generate_email", request_id=request_id):
        headers = None
        try:
            email = await runner.run(compose_data)

        except FieldValidationError as e:
            logfire.info("Compose form rejected", request_id=request_id, codes=e.codes)
            return compose_response(
                HTTP_422_UNPROCESSABLE,
                ", ".join(encode_messages(describe_all(e.codes))),
                errors=encode_messages(e.codes),
            )

        except RateLimitExceededError as e:
            return compose_response(
                status.HTTP_429_TOO_MANY_REQUESTS,
                encode_for_transport(describe("rate_limit_exceeded")),
                headers=rate_limit_headers(e.decision),
                retry_after=e.decision.retry_after,
            )

        except InjectionBlockedError as e:
            if compose_data.rate_decision is not None:
                headers = rate_limit_headers(compose_data.rate_decision)
            return compose_response(
                status.HTTP_400_BAD_REQUEST,
                encode_for_transport(describe(e.code)),
                headers=headers,
            )

        except ProviderError as e:
            logfire.error(
                "Email generation failed at provider",
                request_id=request_id,
                reason=e.reason,
                status_code=e.status_code
            )
            if compose_data.rate_decision is not None:
                headers = rate_limit_headers(compose_data.rate_decision)
            return compose_response(
                status.HTTP_502_BAD_GATEWAY,
                encode_for_transport(describe("ai_request_error")),
                headers=headers,
                debug=debug_text(settings, e),
            )

        except PipelineExecutionError as e:
            logfire.error(
                "Email generation failed",
                request_id=request_id,
                error=str(e),
                error_type=type(e).__name__
            )
            return compose_response(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                encode_for_transport(describe("ai_request_error")),
                debug=debug_text(settings, e),
            )

        logfire.info(
            "Email generated successfully",
            request_id=request_id,
            total_duration=compose_data.total_duration(),
            warnings=compose_data.warnings
        )

        if compose_data.rate_decision is not None:
            headers = rate_limit_headers(compose_data.rate_decision)

        return compose_response(status.HTTP_200_OK, encode_for_transport(email), headers=headers)
