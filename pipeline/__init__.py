"""
Pipeline factory function.

This module provides create_compose_pipeline() which instantiates
all pipeline steps in the correct order.
"""

from pipeline.core.runner import PipelineRunner


def create_compose_pipeline(settings, rate_limiter, provider) -> PipelineRunner:
    """
    Factory function to create a fully configured compose pipeline.

    Steps are registered in execution order:
    1. FieldValidator: Raw form fields -> ComposeRequest
    2. RateLimiter: Admission per caller identity and action class
    3. InjectionGuard: Block or sanitize free text, escape prompt delimiters
    4. PromptBuilder: Render the compose or fix template
    5. ProviderGateway: One chat-completion call

    Args:
        settings: Application settings (option sets, caps, scan policy)
        rate_limiter: Shared RateLimiter (process-wide state)
        provider: ChatCompletionProvider or any object with the same generate()

    Returns:
        PipelineRunner with all steps registered and ready to execute

    Example:
        ```python
        runner = create_compose_pipeline(settings, limiter, provider)
        compose_data = ComposeData(request_id="abc-123", caller_identity=identity, form=form)
        email = await runner.run(compose_data)
        ```
    """
    runner = PipelineRunner()

    # Import step classes lazily to avoid circular dependencies at package import time
    from pipeline.steps.field_validator import FieldOptions, FieldValidatorStep
    from pipeline.steps.injection_guard import InjectionGuard, InjectionGuardStep
    from pipeline.steps.prompt_builder import PromptBuilderStep
    from pipeline.steps.provider_gateway import ProviderGatewayStep
    from pipeline.steps.rate_limiter import RateLimitStep

    runner.register_step(FieldValidatorStep(FieldOptions.from_settings(settings)))
    runner.register_step(RateLimitStep(rate_limiter))
    runner.register_step(InjectionGuardStep(
        InjectionGuard(content_cap=settings.content_cap),
        strict_free_text=settings.strict_free_text
    ))
    runner.register_step(PromptBuilderStep())
    runner.register_step(ProviderGatewayStep(provider))

    return runner
