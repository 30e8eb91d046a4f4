from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..spec.analysis import AtsScores, MatchingAnalysis, RiskAnalysis
from ..spec.documents import (
    JdQualityAssessment,
    MultiRoleAnalysis,
    ParsedCoverLetter,
    ParsedJobDescription,
    ParsedResume,
)
from ..spec.output_models import GeneratedCoverLetter, GeneratedResume, ValidationResult
from .stages import StageGroup
from .state import ARTIFACT_KEYS, AnalysisState, GraphError, current_validation


class AnalysisResult(BaseModel):
    """Artifact fields of a finished run plus its bookkeeping. Inputs are not echoed back."""
    model_config = ConfigDict(frozen=True)

    run_id: str = ""
    parsed_resume: Optional[ParsedResume] = None
    parsed_cover_letter: Optional[ParsedCoverLetter] = None
    parsed_jd: Optional[ParsedJobDescription] = None
    jd_quality_assessment: Optional[JdQualityAssessment] = None
    multi_role_analysis: Optional[MultiRoleAnalysis] = None
    matching_analysis: Optional[MatchingAnalysis] = None
    ats_scores: Optional[AtsScores] = None
    risk_analysis: Optional[RiskAnalysis] = None
    generated_resume: Optional[GeneratedResume] = None
    generated_cover_letter: Optional[GeneratedCoverLetter] = None
    validation_result: Optional[ValidationResult] = None

    jd_quality_warning: bool = False
    halted: bool = False
    errors: List[GraphError] = Field(default_factory=list)
    retry_count: Dict[str, int] = Field(default_factory=dict)
    started_at: Optional[str] = None
    completed_at: Optional[str] = None

    @classmethod
    def from_state(cls, state: AnalysisState) -> 'AnalysisResult':
        fields = {key: state.get(key) for key in ARTIFACT_KEYS}
        fields["validation_result"] = current_validation(state)
        return cls(
            run_id=state.get("run_id", ""),
            jd_quality_warning=bool(state.get("jd_quality_warning")),
            halted=bool(state.get("halted")),
            errors=list(state.get("errors") or []),
            retry_count=dict(state.get("retry_count") or {}),
            started_at=state.get("started_at"),
            completed_at=state.get("completed_at"),
            **fields,
        )


class ProgressEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["progress"] = "progress"
    stage: StageGroup
    stage_id: str
    percent: int
    message: str


class CompleteEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["complete"] = "complete"
    stage: Literal[StageGroup.COMPLETE] = StageGroup.COMPLETE
    stage_id: Optional[str] = None
    percent: Literal[100] = 100
    message: str = "Analysis complete"
    results: AnalysisResult


class ErrorEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["error"] = "error"
    stage: Literal[StageGroup.ERROR] = StageGroup.ERROR
    stage_id: Optional[str] = None
    percent: int = 0
    message: str
    error: Literal[True] = True
    errors: List[GraphError] = Field(default_factory=list)


PipelineEvent = Annotated[
    Union[ProgressEvent, CompleteEvent, ErrorEvent],
    Field(discriminator="kind"),
]
