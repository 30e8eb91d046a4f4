import functools
from typing import Any, Callable, Dict

from pydantic import BaseModel, ValidationError

from ...core.llm import LLMInvocationError
from ...core.loader import DocumentExtractionError
from ...core.services import PipelineServices
from ...graph.stages import StageId, stage_info
from ...graph.state import AnalysisState, add_error

StageUpdate = Dict[str, Any]
StageExecutor = Callable[[AnalysisState, PipelineServices], StageUpdate]


def guarded(stage: StageId) -> Callable[[StageExecutor], StageExecutor]:
    """
    Turn the expected failure modes of a stage into one recoverable error record:
    - collaborator failures (model call, PDF extraction)
    - model output that does not fit the artifact schema
    Anything else propagates to the runner.
    """
    def decorator(executor: StageExecutor) -> StageExecutor:
        @functools.wraps(executor)
        def wrapper(state: AnalysisState, services: PipelineServices) -> StageUpdate:
            try:
                return executor(state, services)
            except (LLMInvocationError, DocumentExtractionError) as e:
                return add_error(stage, str(e), recoverable=True, timestamp=services.clock())
            except ValidationError as e:
                message = f"Malformed model output for {e.title}: {e.error_count()} invalid field(s)"
                return add_error(stage, message, recoverable=True, timestamp=services.clock())

        wrapper.stage = stage
        return wrapper
    return decorator


def ask(state: AnalysisState, services: PipelineServices, stage: StageId, **variables) -> Dict[str, Any]:
    """Render the stage's prompt and return the model's JSON object."""
    system_prompt, prompt = services.prompts.render(stage, **variables)
    return services.llm.invoke(
        stage_info(stage).task,
        prompt,
        system_prompt=system_prompt,
        provider=state.get("llm_config"),
    )


def completed(stage: StageId, **artifacts) -> StageUpdate:
    return {**artifacts, "current_node": stage.value}


def as_json(model: BaseModel, exclude: set | None = None) -> str:
    return model.model_dump_json(indent=2, exclude=exclude)


def sub_dict(value: Any, key: str) -> Dict[str, Any]:
    """Model output sometimes flattens an object to a bare string; lift it back under `key`."""
    if isinstance(value, dict):
        return value
    if isinstance(value, str) and value:
        return {key: value}
    return {}
