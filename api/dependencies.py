"""Shared dependencies: settings-backed singletons and caller identity."""

from functools import lru_cache

from fastapi import Depends, Request

from config.rate_limit_config import rate_limit_settings
from config.settings import Settings, get_settings
from pipeline import create_compose_pipeline
from pipeline.core.runner import PipelineRunner
from pipeline.steps.injection_guard import InjectionGuard
from pipeline.steps.provider_gateway import ChatCompletionProvider
from pipeline.steps.rate_limiter import RateLimiter, caller_identity


@lru_cache
def get_rate_limiter() -> RateLimiter:
    """
    Process-wide rate limiter.

    Buckets must outlive individual requests, so one instance is shared.
    """
    return RateLimiter(
        rate_limit_settings.policies(),
        max_buckets=rate_limit_settings.max_buckets
    )


@lru_cache
def get_provider() -> ChatCompletionProvider:
    settings = get_settings()
    return ChatCompletionProvider(
        api_key=settings.openai_api_key,
        api_url=settings.openai_api_url,
        model=settings.openai_model,
        max_tokens=settings.max_tokens,
        default_creativity=settings.default_creativity,
        timeout=settings.provider_timeout
    )


def get_injection_guard(settings: Settings = Depends(get_settings)) -> InjectionGuard:
    return InjectionGuard(content_cap=settings.content_cap)


def get_compose_pipeline(
    settings: Settings = Depends(get_settings),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    provider: ChatCompletionProvider = Depends(get_provider),
) -> PipelineRunner:
    return create_compose_pipeline(settings, rate_limiter, provider)


def get_caller_identity(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """
    Derive the rate-limit key from the connection and request headers.

    Forwarding headers only count when TRUST_FORWARDED_HEADERS is enabled.
    """
    return caller_identity(
        remote_addr=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        forwarded_for=request.headers.get("x-forwarded-for"),
        real_ip=request.headers.get("x-real-ip"),
        trust_forwarded=settings.trust_forwarded_headers
    )
