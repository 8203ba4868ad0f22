"""
Prompt Builder Step - renders the validated, sanitized request into a prompt.

Rendering is pure: the same ComposeRequest always yields the same text.
"""

import logfire

from pipeline.core.runner import BasePipelineStep
from pipeline.models.core import ComposeData, ComposeRequest, PromptBranch, RenderedPrompt, StepResult

from .prompts import create_compose_prompt, create_fix_prompt


def build_prompt(request: ComposeRequest) -> RenderedPrompt:
    """
    Select the template branch and render it.

    The fix branch is taken whenever fix_text is present.
    """
    if request.is_fix:
        text = create_fix_prompt(
            previous_generated_email=request.previous_generated_email,
            fix_text=request.fix_text,
            instruction=request.instruction,
            previous_conversation=request.previous_conversation,
        )
        return RenderedPrompt(text=text, branch=PromptBranch.FIX)

    text = create_compose_prompt(
        style=request.style,
        subject=request.subject,
        recipient_name=request.recipient_name,
        sender_name=request.sender_name,
        language=request.language,
        length=request.length,
        instruction=request.instruction,
        multiple_recipients=request.multiple_recipients,
        previous_conversation=request.previous_conversation,
        signature_present=request.signature_present,
    )
    return RenderedPrompt(text=text, branch=PromptBranch.COMPOSE)


class PromptBuilderStep(BasePipelineStep):
    """
    Step 4: Render the prompt.

    Updates ComposeData fields:
    - prompt: RenderedPrompt
    """

    def __init__(self):
        super().__init__(step_name="prompt_builder")

    async def _validate_input(self, compose_data: ComposeData):
        if compose_data.request is None:
            return "request missing (field_validator must run first)"
        return None

    async def _execute_step(self, compose_data: ComposeData) -> StepResult:
        compose_data.prompt = build_prompt(compose_data.request)

        logfire.info(
            "Prompt rendered",
            request_id=compose_data.request_id,
            branch=compose_data.prompt.branch.value,
            prompt_length=len(compose_data.prompt.text)
        )

        return StepResult(
            success=True,
            step_name=self.step_name,
            metadata={"branch": compose_data.prompt.branch.value}
        )
