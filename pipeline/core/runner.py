"""
Core pipeline infrastructure - base classes for all steps.

BasePipelineStep: Abstract base class for pipeline steps
PipelineRunner: Orchestrates sequential step execution
"""

from abc import ABC, abstractmethod
from typing import Optional, List
import time
import logfire

from pipeline.models.core import ComposeData, StepResult
from pipeline.core.exceptions import PipelineExecutionError, StepExecutionError


class BasePipelineStep(ABC):
    """
    Abstract base class for all pipeline steps.

    Each step must implement:
    - _execute_step(): Core business logic
    - Optionally: _validate_input(): Input validation

    The execute() method wraps step execution with:
    - Logfire observability spans
    - Error handling and logging
    - Timing metrics
    """

    def __init__(self, step_name: str):
        """
        Initialize pipeline step.

        Args:
            step_name: Unique identifier for this step (used in logs)
        """
        self.step_name = step_name

    async def execute(self, compose_data: ComposeData) -> StepResult:
        """
        Execute the pipeline step with full observability.

        Args:
            compose_data: Shared request state (modified in-place)

        Returns:
            StepResult indicating success

        Raises:
            PipelineExecutionError: Domain failures, re-raised unchanged
            StepExecutionError: Any other failure, wrapped
        """
        start_time = time.perf_counter()

        with logfire.span(
            f"pipeline.{self.step_name}",
            request_id=compose_data.request_id,
            step=self.step_name
        ):
            try:
                validation_error = await self._validate_input(compose_data)
                if validation_error:
                    raise RuntimeError(f"Input validation failed: {validation_error}")

                result = await self._execute_step(compose_data)

                duration = time.perf_counter() - start_time
                compose_data.add_timing(self.step_name, duration)

                if result.metadata is None:
                    result.metadata = {}
                result.metadata["duration"] = duration

                logfire.info(
                    f"{self.step_name} completed",
                    request_id=compose_data.request_id,
                    duration=duration,
                    warnings=len(result.warnings)
                )

                return result

            except PipelineExecutionError as e:
                duration = time.perf_counter() - start_time
                compose_data.add_error(self.step_name, type(e).__name__)

                # Expected rejections: no stack trace, message only
                logfire.warning(
                    f"{self.step_name} rejected request",
                    request_id=compose_data.request_id,
                    error_type=type(e).__name__,
                    duration=duration
                )
                raise

            except Exception as e:
                duration = time.perf_counter() - start_time

                logfire.error(
                    f"{self.step_name} failed",
                    request_id=compose_data.request_id,
                    error=str(e),
                    error_type=type(e).__name__,
                    duration=duration,
                    exc_info=True
                )

                compose_data.add_error(self.step_name, str(e))

                raise StepExecutionError(self.step_name, e) from e

    async def _validate_input(self, compose_data: ComposeData) -> Optional[str]:
        """
        Validate that prerequisites for this step are met.

        Returns:
            Error message if validation fails, None if valid
        """
        return None

    @abstractmethod
    async def _execute_step(self, compose_data: ComposeData) -> StepResult:
        """
        Execute step-specific business logic.

        MUST BE IMPLEMENTED by each step.
        """
        pass


class PipelineRunner:
    """
    Orchestrates sequential execution of all pipeline steps.

    Steps run in registration order; the first failure is terminal.
    """

    def __init__(self, steps: Optional[List[BasePipelineStep]] = None):
        self.steps = steps or []

    def register_step(self, step: BasePipelineStep) -> None:
        """
        Add a step to the pipeline.

        Steps execute in the order they are registered.
        """
        self.steps.append(step)

    async def run(self, compose_data: ComposeData) -> str:
        """
        Execute all steps sequentially.

        Args:
            compose_data: Request state with raw form fields populated

        Returns:
            Generated email text (unencoded; the API layer encodes it)

        Raises:
            PipelineExecutionError: If any step fails
        """
        with logfire.span(
            "pipeline.run",
            request_id=compose_data.request_id,
            action=compose_data.action.value,
            total_steps=len(self.steps)
        ):
            for step in self.steps:
                await step.execute(compose_data)

            logfire.info(
                "Pipeline completed",
                request_id=compose_data.request_id,
                total_duration=compose_data.total_duration(),
                step_timings=compose_data.step_timings
            )

            return compose_data.generated_text
