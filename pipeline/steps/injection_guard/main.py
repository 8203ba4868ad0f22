"""
Injection Guard Step - scans user free text before prompt assembly.

The instruction is always scanned strictly. The subject and the longer
free-text fields are sanitized unless strict scanning is configured for them
too. Every surviving value, and every name, is escaped for the prompt.
"""

import dataclasses
from typing import Dict

import logfire

from pipeline.core.exceptions import InjectionBlockedError
from pipeline.core.runner import BasePipelineStep
from pipeline.models.core import ComposeData, StepResult

from .scanner import InjectionGuard, escape_for_prompt, fingerprint


STRICT_FIELDS = ("instruction",)
FREE_TEXT_FIELDS = ("subject", "fix_text", "previous_conversation", "previous_generated_email")


class InjectionGuardStep(BasePipelineStep):
    """
    Step 3: Block or sanitize free text.

    Updates ComposeData fields:
    - request: ComposeRequest with sanitized, prompt-escaped free text
    - warnings: Sanitization warnings
    """

    def __init__(self, guard: InjectionGuard, strict_free_text: bool = False):
        super().__init__(step_name="injection_guard")
        self.guard = guard
        self.strict_free_text = strict_free_text

    async def _validate_input(self, compose_data: ComposeData):
        if compose_data.request is None:
            return "request missing (field_validator must run first)"
        return None

    async def _execute_step(self, compose_data: ComposeData) -> StepResult:
        request = compose_data.request
        policy: Dict[str, bool] = {name: True for name in STRICT_FIELDS}
        policy.update({name: self.strict_free_text for name in FREE_TEXT_FIELDS})

        replacements: Dict[str, object] = {}
        warnings = []
        scanned = 0

        for field_name, strict in policy.items():
            value = getattr(request, field_name)
            if not value:
                continue

            verdict = self.guard.scan(value, strict=strict)
            scanned += 1

            if verdict.blocked:
                logfire.warning(
                    "Injection attempt blocked",
                    request_id=compose_data.request_id,
                    caller=compose_data.caller_identity,
                    field=field_name,
                    fingerprint=fingerprint(value),
                    categories=[category.value for category in verdict.categories]
                )
                raise InjectionBlockedError(field_name)

            if verdict.categories:
                logfire.info(
                    "Free text sanitized",
                    request_id=compose_data.request_id,
                    field=field_name,
                    fingerprint=fingerprint(value),
                    categories=[category.value for category in verdict.categories]
                )

            for warning in verdict.warnings:
                if warning not in warnings:
                    warnings.append(warning)

            replacements[field_name] = escape_for_prompt(verdict.sanitized_text)

        # Names are validated upstream but still end up inside the prompt
        replacements["sender_name"] = escape_for_prompt(request.sender_name)
        replacements["recipient_names"] = tuple(escape_for_prompt(name) for name in request.recipient_names)

        compose_data.request = dataclasses.replace(request, **replacements)
        compose_data.warnings.extend(warnings)

        return StepResult(
            success=True,
            step_name=self.step_name,
            metadata={"fields_scanned": scanned},
            warnings=warnings
        )
