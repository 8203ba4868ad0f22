"""
Rate Limiter Step - admission control per caller and action class.
"""

import logfire

from pipeline.core.exceptions import RateLimitExceededError
from pipeline.core.runner import BasePipelineStep
from pipeline.models.core import ComposeData, StepResult

from .limiter import RateLimiter


class RateLimitStep(BasePipelineStep):
    """
    Step 2: Admit or reject the caller.

    Updates ComposeData fields:
    - rate_decision: RateDecision (also set on rejection, for response headers)
    """

    def __init__(self, limiter: RateLimiter):
        super().__init__(step_name="rate_limiter")
        self.limiter = limiter

    async def _execute_step(self, compose_data: ComposeData) -> StepResult:
        decision = self.limiter.check(compose_data.caller_identity, compose_data.action)
        compose_data.rate_decision = decision

        if not decision.allowed:
            raise RateLimitExceededError(decision)

        logfire.debug(
            "Request admitted",
            request_id=compose_data.request_id,
            action=compose_data.action.value,
            remaining=decision.remaining
        )

        return StepResult(
            success=True,
            step_name=self.step_name,
            metadata={"remaining": decision.remaining}
        )
