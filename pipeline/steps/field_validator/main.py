"""
Field Validator Step - first pipeline step.

Turns the raw form fields into a typed ComposeRequest, or fails the request
with every accumulated field error. Content is never rewritten here.
"""

import logfire

from pipeline.core.runner import BasePipelineStep
from pipeline.models.core import ComposeData, StepResult

from .models import FieldOptions
from .utils import validate_fields


class FieldValidatorStep(BasePipelineStep):
    """
    Step 1: Validate and normalize raw form fields.

    Updates ComposeData fields:
    - request: ComposeRequest
    """

    def __init__(self, options: FieldOptions):
        super().__init__(step_name="field_validator")
        self.options = options

    async def _execute_step(self, compose_data: ComposeData) -> StepResult:
        compose_data.request = validate_fields(compose_data.form, self.options)

        logfire.info(
            "Form fields validated",
            request_id=compose_data.request_id,
            recipients=len(compose_data.request.recipient_names),
            is_fix=compose_data.request.is_fix,
            style=compose_data.request.style,
            language=compose_data.request.language
        )

        return StepResult(success=True, step_name=self.step_name)
