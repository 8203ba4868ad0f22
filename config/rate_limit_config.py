"""
Rate limit configuration for the in-process limiter.

Each action class gets a request ceiling, a sliding window and a block
duration. Values can be overridden per environment, e.g.
RATE_LIMIT_GENERATION_REQUESTS=5.
"""
from typing import Dict

from pydantic_settings import BaseSettings, SettingsConfigDict

from pipeline.models.core import ActionClass, RateLimitPolicy


class RateLimitSettings(BaseSettings):
    """Rate limit configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    generation_requests: int = 10
    generation_window: int = 60
    generation_block_duration: int = 300

    instruction_save_requests: int = 20
    instruction_save_window: int = 60
    instruction_save_block_duration: int = 120

    general_requests: int = 100
    general_window: int = 60
    general_block_duration: int = 60

    # Upper bound on tracked (identity, action) buckets
    max_buckets: int = 10_000

    def policies(self) -> Dict[ActionClass, RateLimitPolicy]:
        """
        Build the per-action policy table.
        """
        return {
            ActionClass.GENERATION: RateLimitPolicy(
                requests=self.generation_requests,
                window=self.generation_window,
                block_duration=self.generation_block_duration,
            ),
            ActionClass.INSTRUCTION_SAVE: RateLimitPolicy(
                requests=self.instruction_save_requests,
                window=self.instruction_save_window,
                block_duration=self.instruction_save_block_duration,
            ),
            ActionClass.GENERAL: RateLimitPolicy(
                requests=self.general_requests,
                window=self.general_window,
                block_duration=self.general_block_duration,
            ),
        }


# Global instance
rate_limit_settings = RateLimitSettings()
