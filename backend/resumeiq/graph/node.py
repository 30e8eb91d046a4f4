import time
import traceback
from typing import Any, Dict

from langgraph.config import get_stream_writer

from ..core.services import PipelineServices
from .events import ProgressEvent
from .retry import retry_count
from .stages import GENERATION_STAGE, StageId, stage_info
from .state import AnalysisState, add_error

REGENERATED_STAGES = (
    StageId.REWRITE_RESUME,
    StageId.GENERATE_COVER_LETTER,
    StageId.VALIDATE_OUTPUT,
)


class StageNode:
    """
    Graph node around one stage executor.
    - Emits a progress event on the custom stream before the stage runs
    - Skips the stage once the run has completed
    - Times and logs each invocation
    - Unexpected exceptions become a single non-recoverable error for this stage
    """
    def __init__(
            self,
            stage: StageId,
            executor,
            services: PipelineServices
        ):
        self.stage = StageId(stage)
        self.executor = executor
        self.services = services
        self.logger = services.logger
        self.info = stage_info(self.stage)

    def progress_message(self, state: AnalysisState) -> str:
        if self.stage in REGENERATED_STAGES:
            revision = retry_count(state, GENERATION_STAGE)
            if revision:
                return f"{self.info.message} (revision {revision + 1})"
        return self.info.message

    def __call__(self, state: AnalysisState) -> Dict[str, Any]:
        run_id = state.get("run_id", "")

        if state.get("completed_at"):
            if self.logger:
                self.logger.log_stage_skipped(run_id, self.stage.value, reason="run already completed")
            return {}

        writer = get_stream_writer()
        writer(ProgressEvent(
            stage=self.info.group,
            stage_id=self.stage.value,
            percent=self.info.percent,
            message=self.progress_message(state),
        ))

        print(f'{"="*60}\nStage called: {self.stage.value}\n{"="*60}')
        start_time = time.time()
        try:
            update = self.executor(state, self.services) or {}
        except Exception as e:
            tb_str = traceback.format_exc()
            if self.logger:
                self.logger.log_pipeline_error(
                    run_id=run_id,
                    stage=self.stage.value,
                    error_message=str(e),
                    traceback=tb_str,
                )
            print(f"{'='*60}\nError whilst running stage {self.stage.value}: {e}\n{'='*60}")
            update = add_error(
                self.stage,
                f"Unexpected error in {self.stage.value}: {e}",
                recoverable=False,
                timestamp=self.services.clock(),
            )
        elapsed_time = time.time() - start_time

        errors = update.get("errors") or []
        print(f"\t* Stage took {elapsed_time:.2f} seconds")
        for error in errors:
            kind = "recoverable" if error.recoverable else "fatal"
            print(f"\t* [{kind}] {error.message}")

        if self.logger:
            self.logger.log_stage_invocation(
                run_id=run_id,
                stage=self.stage.value,
                duration=elapsed_time,
                produced=[key for key in update if key not in ("errors", "current_node")],
                errors=errors,
            )
        return update
