import re
from typing import List

from ...ats.rules import profile_for_system
from ...ats.scoring import score_resume
from ...core.services import PipelineServices
from ...graph.stages import StageId
from ...graph.state import AnalysisState, missing_prerequisite
from ...spec.analysis import AtsScoreResult, AtsScores
from ...spec.documents import ParsedJobDescription
from .common import StageUpdate, completed, guarded

CAPITALIZED_PHRASE = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\b")


def extract_keywords(jd: ParsedJobDescription) -> List[str]:
    """Requirement skills plus capitalized phrases from responsibilities, de-duplicated in order."""
    keywords = [skill for requirement in jd.requirements.all() for skill in requirement.skills]
    for responsibility in jd.responsibilities:
        keywords.extend(CAPITALIZED_PHRASE.findall(responsibility))
    return [keyword for keyword in dict.fromkeys(keywords) if len(keyword) > 2]


def score_text(text: str, jd: ParsedJobDescription, profile: str, ats_system: str) -> AtsScoreResult:
    result = score_resume(
        text,
        extract_keywords(jd),
        jd.responsibilities,
        jd.required_education(),
        profile=profile,
        ats_system=ats_system,
    )
    return AtsScoreResult.from_score(result)


def _score_profile(state: AnalysisState, services: PipelineServices, stage: StageId, profile: str) -> StageUpdate:
    resume = state.get("parsed_resume")
    if resume is None:
        return missing_prerequisite(stage, "parsed resume", services.clock())
    jd = state.get("parsed_jd")
    if jd is None:
        return missing_prerequisite(stage, "parsed JD", services.clock())

    target_ats = state["user_options"].target_ats
    result = score_text(resume.raw_text, jd, profile, target_ats)

    existing = state.get("ats_scores") or AtsScores()
    update = {profile: result}
    if profile == profile_for_system(target_ats):
        update["target_system"] = result
        if existing.before_rewrite is None:
            update["before_rewrite"] = result

    return completed(stage, ats_scores=existing.model_copy(update=update))


@guarded(StageId.SCORE_ATS_CONSERVATIVE)
def score_ats_conservative(state: AnalysisState, services: PipelineServices) -> StageUpdate:
    return _score_profile(state, services, StageId.SCORE_ATS_CONSERVATIVE, "conservative")


@guarded(StageId.SCORE_ATS_AGGRESSIVE)
def score_ats_aggressive(state: AnalysisState, services: PipelineServices) -> StageUpdate:
    return _score_profile(state, services, StageId.SCORE_ATS_AGGRESSIVE, "aggressive")
