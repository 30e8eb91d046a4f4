import operator
import uuid
from typing import Annotated, Any, Dict, List, Optional, TypedDict, get_type_hints

from pydantic import BaseModel, ConfigDict

from ..spec.analysis import AtsScores, MatchingAnalysis, RiskAnalysis
from ..spec.documents import (
    JdQualityAssessment,
    MultiRoleAnalysis,
    ParsedCoverLetter,
    ParsedJobDescription,
    ParsedResume,
)
from ..spec.models import JdSource, LLMProviderConfig, UserOptions
from ..spec.output_models import GeneratedCoverLetter, GeneratedResume, ValidationResult
from ..utils.timestamp import utc_now


class GraphError(BaseModel):
    model_config = ConfigDict(frozen=True)

    stage: str
    message: str
    timestamp: str
    recoverable: bool = True


# =====================================================================
# REDUCERS
# =====================================================================

def latest(old: Any, new: Any) -> Any:
    """Later non-null values win."""
    return new if new is not None else old


def merge_retry_counts(old: Dict[str, int] | None, new: Dict[str, int] | None) -> Dict[str, int]:
    """Union of both maps; a count never goes down."""
    merged = dict(old or {})
    for stage, count in (new or {}).items():
        merged[stage] = max(merged.get(stage, 0), count)
    return merged


class AnalysisState(TypedDict, total=False):
    # Inputs, set once by create_initial_state
    run_id: str
    resume_bytes: Optional[bytes]
    cover_letter_bytes: Optional[bytes]
    jd_source: Optional[JdSource]
    user_options: UserOptions
    llm_config: LLMProviderConfig
    started_at: str

    # Parsed documents
    parsed_resume: Annotated[Optional[ParsedResume], latest]
    parsed_cover_letter: Annotated[Optional[ParsedCoverLetter], latest]
    parsed_jd: Annotated[Optional[ParsedJobDescription], latest]

    # Analysis artifacts
    jd_quality_assessment: Annotated[Optional[JdQualityAssessment], latest]
    multi_role_analysis: Annotated[Optional[MultiRoleAnalysis], latest]
    matching_analysis: Annotated[Optional[MatchingAnalysis], latest]
    ats_scores: Annotated[Optional[AtsScores], latest]
    risk_analysis: Annotated[Optional[RiskAnalysis], latest]

    # Generated artifacts
    generated_resume: Annotated[Optional[GeneratedResume], latest]
    generated_cover_letter: Annotated[Optional[GeneratedCoverLetter], latest]
    validation_result: Annotated[Optional[ValidationResult], latest]

    # Bookkeeping
    jd_quality_warning: Annotated[bool, latest]
    halted: Annotated[bool, latest]
    current_node: Annotated[Optional[str], latest]
    errors: Annotated[List[GraphError], operator.add]
    retry_count: Annotated[Dict[str, int], merge_retry_counts]
    completed_at: Annotated[Optional[str], latest]


ARTIFACT_KEYS = (
    "parsed_resume",
    "parsed_cover_letter",
    "parsed_jd",
    "jd_quality_assessment",
    "multi_role_analysis",
    "matching_analysis",
    "ats_scores",
    "risk_analysis",
    "generated_resume",
    "generated_cover_letter",
    "validation_result",
)


def _reducers() -> Dict[str, Any]:
    hints = get_type_hints(AnalysisState, include_extras=True)
    reducers = {}
    for key, hint in hints.items():
        metadata = getattr(hint, "__metadata__", ())
        if metadata and callable(metadata[-1]):
            reducers[key] = metadata[-1]
    return reducers


REDUCERS = _reducers()


def merge_state(state: AnalysisState, update: Dict[str, Any] | None) -> AnalysisState:
    """Fold a stage update into state using the same reducers the graph uses."""
    merged = dict(state)
    for key, value in (update or {}).items():
        reducer = REDUCERS.get(key)
        if reducer is None or key not in merged:
            merged[key] = value
        else:
            merged[key] = reducer(merged[key], value)
    return merged


def create_initial_state(
    resume_bytes: Optional[bytes],
    jd_source: Optional[JdSource],
    user_options: UserOptions | None = None,
    llm_config: LLMProviderConfig | None = None,
    cover_letter_bytes: Optional[bytes] = None,
    run_id: str | None = None,
    started_at: str | None = None,
) -> AnalysisState:
    state: AnalysisState = {
        "run_id": run_id or uuid.uuid4().hex,
        "resume_bytes": resume_bytes,
        "cover_letter_bytes": cover_letter_bytes,
        "jd_source": jd_source,
        "user_options": user_options or UserOptions(),
        "llm_config": llm_config or LLMProviderConfig(),
        "started_at": started_at or utc_now(),
        "jd_quality_warning": False,
        "halted": False,
        "current_node": None,
        "errors": [],
        "retry_count": {},
        "completed_at": None,
    }
    for key in ARTIFACT_KEYS:
        state[key] = None
    return state


# =====================================================================
# ERROR HELPERS
# =====================================================================

def add_error(stage: str, message: str, recoverable: bool = True, timestamp: str | None = None) -> Dict[str, Any]:
    """Update appending a single error record. Sets no artifact."""
    error = GraphError(
        stage=str(getattr(stage, "value", stage)),
        message=message,
        timestamp=timestamp or utc_now(),
        recoverable=recoverable,
    )
    return {"errors": [error]}


def missing_prerequisite(stage: str, artifact: str, timestamp: str | None = None) -> Dict[str, Any]:
    return add_error(stage, f"No {artifact} available", recoverable=False, timestamp=timestamp)


def has_fatal_errors(state: AnalysisState) -> bool:
    return any(not error.recoverable for error in state.get("errors") or [])



def current_validation(state: AnalysisState) -> Optional[ValidationResult]:
    """The validation result for the current generated resume. A verdict on an earlier draft counts as none."""
    result = state.get("validation_result")
    generated = state.get("generated_resume")
    if result is None or generated is None or result.validated_version != generated.version:
        return None
    return result
