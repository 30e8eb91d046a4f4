# Assembles the stage executors into the analysis pipeline and exposes run/stream entry points
import os
import traceback
from typing import Callable, Iterator, List, Optional, Tuple, Union

from langgraph.graph import END, StateGraph

from ..core.services import PipelineServices
from ..spec.models import JdSource, LLMProviderConfig, UserOptions
from ..workflows.registry import STAGE_EXECUTORS
from .edges import FakeJdDecision, ValidationDecision, fake_jd_decision, validation_decision
from .events import AnalysisResult, CompleteEvent, ErrorEvent, PipelineEvent, ProgressEvent
from .node import StageNode
from .retry import increment_retry
from .stages import GENERATION_STAGE, PIPELINE_ORDER, StageId
from .state import AnalysisState, add_error, create_initial_state, has_fatal_errors, merge_state

FLAG_QUALITY_WARNING = "flag_quality_warning"
HALT = "halt"
RETRY_GENERATION = "retry_generation"
FINALIZE = "finalize"

# Stages chained unconditionally apart from the fatal-error guard
LINEAR_CHAIN = [
    StageId.SPLIT_MULTI_ROLE,
    StageId.MATCH_RESUME_JD,
    StageId.SCORE_ATS_CONSERVATIVE,
    StageId.SCORE_ATS_AGGRESSIVE,
    StageId.ANALYZE_RISKS,
    StageId.REWRITE_RESUME,
    StageId.GENERATE_COVER_LETTER,
    StageId.VALIDATE_OUTPUT,
]

Step = Tuple[str, Union[ProgressEvent, AnalysisState]]
ProgressCallback = Callable[[PipelineEvent], None]


class PipelineGraph:
    """
    Fixed-order analysis pipeline on a langgraph StateGraph.
    - Every stage edge stops the run on a non-recoverable error
    - The fake-JD check can continue, flag a quality warning, or halt the run
    - Failed validation loops back through a regeneration step while the retry budget lasts
    Holds no per-run state; one instance can serve concurrent requests.
    """
    def __init__(self, services: PipelineServices):
        self.services = services
        self.config = services.config
        self.logger = services.logger
        self.max_retries = services.config.retry_budget

        self.graph = StateGraph(AnalysisState)

        for stage in PIPELINE_ORDER:
            self.graph.add_node(stage.value, StageNode(stage, STAGE_EXECUTORS[stage], services))
        self.graph.add_node(FLAG_QUALITY_WARNING, self.flag_quality_warning)
        self.graph.add_node(HALT, self.halt)
        self.graph.add_node(RETRY_GENERATION, self.retry_generation)
        self.graph.add_node(FINALIZE, self.finalize)

        self.graph.set_entry_point(StageId.PARSE_RESUME.value)

        self.add_edges()
        self.graph = self.graph.compile()

    # =====================================================================
    # CONTROL NODES
    # =====================================================================

    def flag_quality_warning(self, state: AnalysisState):
        return {"jd_quality_warning": True}

    def halt(self, state: AnalysisState):
        print(f'{"="*60}\nJob posting flagged as fraudulent, halting analysis\n{"="*60}')
        return {"halted": True, "completed_at": self.services.clock()}

    def retry_generation(self, state: AnalysisState):
        return increment_retry(state, GENERATION_STAGE)

    def finalize(self, state: AnalysisState):
        return {"completed_at": self.services.clock()}

    # =====================================================================
    # EDGES
    # =====================================================================

    def add_edges(self):
        """Wire the fixed stage order, the fake-JD branch and the validation loop"""
        self._add_guarded_edge(
            StageId.PARSE_RESUME.value,
            [StageId.PARSE_COVER_LETTER.value, StageId.INGEST_JD.value],
            choose=self._after_parse_resume,
        )
        self._add_guarded_edge(StageId.PARSE_COVER_LETTER.value, [StageId.INGEST_JD.value])
        self._add_guarded_edge(StageId.INGEST_JD.value, [StageId.DETECT_FAKE_JD.value])

        self._add_guarded_edge(
            StageId.DETECT_FAKE_JD.value,
            [StageId.SPLIT_MULTI_ROLE.value, FLAG_QUALITY_WARNING, HALT],
            choose=self._after_fake_jd_check,
        )
        self.graph.add_edge(FLAG_QUALITY_WARNING, StageId.SPLIT_MULTI_ROLE.value)
        self.graph.add_edge(HALT, END)

        for source, target in zip(LINEAR_CHAIN, LINEAR_CHAIN[1:]):
            self._add_guarded_edge(source.value, [target.value])

        self._add_guarded_edge(
            StageId.VALIDATE_OUTPUT.value,
            [FINALIZE, RETRY_GENERATION],
            choose=self._after_validation,
        )
        self.graph.add_edge(RETRY_GENERATION, GENERATION_STAGE.value)
        self.graph.add_edge(FINALIZE, END)

    def _add_guarded_edge(self, source: str, targets: List[str], choose=None):
        """Conditional edge to END on a fatal error, otherwise to `choose(state)` or the single target"""
        def route(state: AnalysisState) -> str:
            if has_fatal_errors(state):
                pathway = END
            else:
                pathway = choose(state) if choose else targets[0]
            self._log_decision(state, source, pathway)
            return pathway

        route.__name__ = f"route_after_{source}"
        routing_dict = {target: target for target in targets} | {END: END}
        self.graph.add_conditional_edges(source, route, routing_dict)

    def _after_parse_resume(self, state: AnalysisState) -> str:
        if state.get("cover_letter_bytes"):
            return StageId.PARSE_COVER_LETTER.value
        return StageId.INGEST_JD.value

    def _after_fake_jd_check(self, state: AnalysisState) -> str:
        decision = fake_jd_decision(state)
        self._log_decision(state, "fake_jd_decision", decision.value)
        if decision == FakeJdDecision.HALT:
            return HALT
        if decision == FakeJdDecision.WARN:
            return FLAG_QUALITY_WARNING
        return StageId.SPLIT_MULTI_ROLE.value

    def _after_validation(self, state: AnalysisState) -> str:
        decision = validation_decision(state, max_retries=self.max_retries)
        self._log_decision(state, "validation_decision", decision.value)
        if decision == ValidationDecision.RETRY:
            return RETRY_GENERATION
        # valid and fail both end the loop; a failed result stays on the state
        return FINALIZE

    def _log_decision(self, state: AnalysisState, edge: str, decision: str):
        if self.logger:
            self.logger.log_routing_decision(
                run_id=state.get("run_id", ""),
                edge=edge,
                decision="end" if decision == END else decision,
            )

    # =====================================================================
    # EXECUTION
    # =====================================================================

    def _steps(self, state: AnalysisState) -> Iterator[Step]:
        """
        Yield ("progress", ProgressEvent) as stages start and ("state", state) after every step.
        Failures outside a stage are folded into the last state as one non-recoverable error.
        """
        last_state = state
        last_stage: Optional[str] = None
        try:
            for mode, chunk in self.graph.stream(
                state,
                config={"recursion_limit": self.config.recursion_limit},
                stream_mode=["custom", "values"],
            ):
                if mode == "custom":
                    if isinstance(chunk, ProgressEvent):
                        last_stage = chunk.stage_id
                        yield "progress", chunk
                else:
                    last_state = chunk
                    yield "state", chunk
        except Exception as e:
            run_id = last_state.get("run_id", "")
            stage = last_stage or last_state.get("current_node") or StageId.PARSE_RESUME.value
            if self.logger:
                self.logger.log_pipeline_error(
                    run_id=run_id,
                    stage=stage,
                    error_message=str(e),
                    traceback=traceback.format_exc(),
                )
            print(f"{'='*60}\nPipeline failed during {stage}: {e}\n{'='*60}")
            last_state = merge_state(
                last_state,
                add_error(stage, f"Pipeline failure: {e}", recoverable=False, timestamp=self.services.clock()),
            )
            yield "state", last_state

    def _events(self, state: AnalysisState) -> Iterator[Step]:
        """Progress events with non-decreasing percentages, then the terminal event, then the final state."""
        percent = 0
        final_state = state
        for kind, item in self._steps(state):
            if kind == "progress":
                percent = max(percent, item.percent)
                yield "event", item.model_copy(update={"percent": percent})
            else:
                final_state = item

        yield "event", self.terminal_event(final_state, percent)
        self._log_summary(final_state)
        yield "state", final_state

    def terminal_event(self, state: AnalysisState, percent: int = 0) -> Union[CompleteEvent, ErrorEvent]:
        stage_id = state.get("current_node")
        if state.get("completed_at"):
            if state.get("halted"):
                message = "Analysis halted: the job posting appears to be fraudulent"
            elif validation_decision(state, max_retries=self.max_retries) == ValidationDecision.FAIL:
                message = "Analysis complete, generated content did not pass validation"
            else:
                message = "Analysis complete"
            return CompleteEvent(stage_id=stage_id, message=message, results=AnalysisResult.from_state(state))

        errors = list(state.get("errors") or [])
        fatal = [error for error in errors if not error.recoverable]
        message = fatal[-1].message if fatal else "Analysis stopped before completion"
        stage_id = fatal[-1].stage if fatal else stage_id
        return ErrorEvent(stage_id=stage_id, percent=percent, message=message, errors=errors)

    def _log_summary(self, state: AnalysisState):
        if not self.logger:
            return
        errors = state.get("errors") or []
        self.logger.log_run_summary(state.get("run_id", ""), {
            "completed": bool(state.get("completed_at")),
            "halted": bool(state.get("halted")),
            "jd_quality_warning": bool(state.get("jd_quality_warning")),
            "last_stage": state.get("current_node"),
            "retry_count": state.get("retry_count") or {},
            "error_count": len(errors),
            "fatal_error_count": sum(1 for error in errors if not error.recoverable),
        })

    def initial_state(
        self,
        resume_bytes: Optional[bytes],
        jd_source: Optional[JdSource],
        options: UserOptions | None = None,
        llm_config: LLMProviderConfig | None = None,
        cover_letter_bytes: Optional[bytes] = None,
        run_id: str | None = None,
    ) -> AnalysisState:
        return create_initial_state(
            resume_bytes=resume_bytes,
            jd_source=jd_source,
            user_options=options,
            llm_config=llm_config,
            cover_letter_bytes=cover_letter_bytes,
            run_id=run_id,
            started_at=self.services.clock(),
        )

    def stream(
        self,
        resume_bytes: Optional[bytes],
        jd_source: Optional[JdSource],
        options: UserOptions | None = None,
        llm_config: LLMProviderConfig | None = None,
        cover_letter_bytes: Optional[bytes] = None,
        run_id: str | None = None,
    ) -> Iterator[PipelineEvent]:
        """Progress events for one run, ending with exactly one complete or error event."""
        state = self.initial_state(resume_bytes, jd_source, options, llm_config, cover_letter_bytes, run_id)
        for kind, item in self._events(state):
            if kind == "event":
                yield item

    def run(
        self,
        resume_bytes: Optional[bytes],
        jd_source: Optional[JdSource],
        options: UserOptions | None = None,
        llm_config: LLMProviderConfig | None = None,
        cover_letter_bytes: Optional[bytes] = None,
        on_progress: Optional[ProgressCallback] = None,
        run_id: str | None = None,
    ) -> AnalysisState:
        """Run to completion and return the final state. Progress goes to `on_progress` if given."""
        state = self.initial_state(resume_bytes, jd_source, options, llm_config, cover_letter_bytes, run_id)
        final_state = state
        for kind, item in self._events(state):
            if kind == "event":
                if on_progress is not None:
                    on_progress(item)
            else:
                final_state = item
        return final_state

    def draw(self, output_file_path: str = "img/graph.png"):
        """Creates a mermaid image of the graph and saves it"""
        output_dir = os.path.dirname(output_file_path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        self.graph.get_graph().draw_mermaid_png(output_file_path=output_file_path)

    def invoke(self, state: AnalysisState) -> AnalysisState:
        """Run a prepared state through the compiled graph without progress reporting"""
        return self.graph.invoke(state, config={"recursion_limit": self.config.recursion_limit})
