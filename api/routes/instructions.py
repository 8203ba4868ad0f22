"""Predefined instruction endpoints."""

from typing import Optional

import logfire
from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import JSONResponse

from api.dependencies import get_caller_identity, get_injection_guard, get_rate_limiter
from pipeline.models.core import ActionClass
from pipeline.steps.injection_guard import InjectionGuard, fingerprint
from pipeline.steps.rate_limiter import RateLimiter, rate_limit_headers
from schemas.compose import InstructionResponse
from utils.messages import describe
from utils.output_encoder import encode_for_transport, encode_messages


router = APIRouter(prefix="/api/instructions", tags=["Instructions"])

HTTP_422_UNPROCESSABLE = 422


@router.post("/validate", response_model=InstructionResponse, response_model_exclude_none=True)
async def validate_instruction(
    name: Optional[str] = Form(default=None),
    text: Optional[str] = Form(default=None),
    identity: str = Depends(get_caller_identity),
    limiter: RateLimiter = Depends(get_rate_limiter),
    guard: InjectionGuard = Depends(get_injection_guard),
):
    """
    Validate and sanitize a predefined instruction before it is saved.

    Persistence belongs to the settings store; this endpoint only returns
    the encoded values it should keep.

    Returns:
        InstructionResponse with sanitized name and text
    """
    with logfire.span("api.validate_instruction"):
        decision = limiter.check(identity, ActionClass.INSTRUCTION_SAVE)
        headers = rate_limit_headers(decision)

        if not decision.allowed:
            body = InstructionResponse(
                status="error",
                respond=encode_for_transport(describe("rate_limit_exceeded")),
                retry_after=decision.retry_after,
            )
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content=body.model_dump(exclude_none=True),
                headers=headers,
            )

        name = (name or "").strip()
        text = (text or "").strip()

        if not name or not text:
            body = InstructionResponse(
                status="error",
                respond=encode_for_transport(describe("predefined_invalid_input")),
            )
            return JSONResponse(
                status_code=HTTP_422_UNPROCESSABLE,
                content=body.model_dump(exclude_none=True),
                headers=headers,
            )

        name_verdict = guard.scan(name, strict=False)
        text_verdict = guard.scan(text, strict=False)

        warnings = list(text_verdict.warnings)
        for warning in name_verdict.warnings:
            if warning not in warnings:
                warnings.append(warning)

        if text_verdict.categories or name_verdict.categories:
            logfire.info(
                "Predefined instruction sanitized",
                fingerprint=fingerprint(text),
                categories=[c.value for c in text_verdict.categories + name_verdict.categories]
            )

        body = InstructionResponse(
            status="success",
            respond=encode_for_transport("Instruction is valid."),
            name=encode_for_transport(name_verdict.sanitized_text),
            text=encode_for_transport(text_verdict.sanitized_text),
            warnings=encode_messages(warnings),
        )
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=body.model_dump(exclude_none=True),
            headers=headers,
        )
