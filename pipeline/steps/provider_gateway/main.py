"""
Provider Gateway Step - the only awaited I/O in the pipeline.
"""

import logfire

from pipeline.core.runner import BasePipelineStep
from pipeline.models.core import ComposeData, StepResult

from .client import ChatCompletionProvider


class ProviderGatewayStep(BasePipelineStep):
    """
    Step 5: Send the rendered prompt to the model provider.

    Updates ComposeData fields:
    - generated_text: Raw (unencoded) email text
    """

    def __init__(self, provider: ChatCompletionProvider):
        super().__init__(step_name="provider_gateway")
        self.provider = provider

    async def _validate_input(self, compose_data: ComposeData):
        if compose_data.prompt is None:
            return "prompt missing (prompt_builder must run first)"
        return None

    async def _execute_step(self, compose_data: ComposeData) -> StepResult:
        compose_data.generated_text = await self.provider.generate(
            compose_data.prompt.text,
            compose_data.request.creativity
        )

        logfire.info(
            "Email generated",
            request_id=compose_data.request_id,
            branch=compose_data.prompt.branch.value,
            email_length=len(compose_data.generated_text)
        )

        return StepResult(
            success=True,
            step_name=self.step_name,
            metadata={"email_length": len(compose_data.generated_text)}
        )
