from ...core.services import PipelineServices
from ...graph.stages import StageId
from ...graph.state import AnalysisState, missing_prerequisite
from ...spec.analysis import MatchingAnalysis, RiskAnalysis
from ...spec.documents import JdQualityAssessment, MultiRoleAnalysis, MultiRoleDetection
from .common import StageUpdate, as_json, ask, completed, guarded, sub_dict


@guarded(StageId.DETECT_FAKE_JD)
def detect_fake_jd(state: AnalysisState, services: PipelineServices) -> StageUpdate:
    stage = StageId.DETECT_FAKE_JD
    jd = state.get("parsed_jd")
    if jd is None:
        return missing_prerequisite(stage, "parsed JD", services.clock())

    result = ask(state, services, stage, jd_text=jd.raw_text, source=jd.metadata.source_url or jd.metadata.source)
    assessment = JdQualityAssessment.model_validate(result)

    return completed(
        stage,
        jd_quality_assessment=assessment,
        parsed_jd=jd.model_copy(update={"quality_assessment": assessment}),
    )


@guarded(StageId.SPLIT_MULTI_ROLE)
def split_multi_role(state: AnalysisState, services: PipelineServices) -> StageUpdate:
    stage = StageId.SPLIT_MULTI_ROLE
    jd = state.get("parsed_jd")
    if jd is None:
        return missing_prerequisite(stage, "parsed JD", services.clock())

    result = ask(state, services, stage, jd_text=jd.raw_text)
    primary_role = result.get("primary_role") or jd.title
    detection = MultiRoleDetection.model_validate({**result, "primary_role": primary_role})
    analysis = MultiRoleAnalysis(**detection.model_dump(), selected_role=primary_role)

    return completed(
        stage,
        multi_role_analysis=analysis,
        parsed_jd=jd.model_copy(update={"multi_role_detection": detection}),
    )


@guarded(StageId.MATCH_RESUME_JD)
def match_resume_jd(state: AnalysisState, services: PipelineServices) -> StageUpdate:
    stage = StageId.MATCH_RESUME_JD
    resume = state.get("parsed_resume")
    if resume is None:
        return missing_prerequisite(stage, "parsed resume", services.clock())
    jd = state.get("parsed_jd")
    if jd is None:
        return missing_prerequisite(stage, "parsed JD", services.clock())

    result = ask(state, services, stage, resume_json=as_json(resume), jd_json=as_json(jd))

    # Role alignment falls back to what the documents themselves say
    alignment = sub_dict(result.get("role_alignment"), "")
    title_match = {
        "jd_title": jd.title,
        "resume_title": resume.experience[0].title if resume.experience else "",
        **{k: v for k, v in sub_dict(alignment.get("title_match"), "").items() if v is not None},
    }
    seniority_match = {
        "jd_level": jd.seniority.level,
        **{k: v for k, v in sub_dict(alignment.get("seniority_match"), "").items() if v is not None},
    }
    analysis = MatchingAnalysis.model_validate({
        **result,
        "role_alignment": {"title_match": title_match, "seniority_match": seniority_match},
    })
    return completed(stage, matching_analysis=analysis)


@guarded(StageId.ANALYZE_RISKS)
def analyze_risks(state: AnalysisState, services: PipelineServices) -> StageUpdate:
    stage = StageId.ANALYZE_RISKS
    resume = state.get("parsed_resume")
    if resume is None:
        return missing_prerequisite(stage, "parsed resume", services.clock())
    jd = state.get("parsed_jd")
    if jd is None:
        return missing_prerequisite(stage, "parsed JD", services.clock())
    matching = state.get("matching_analysis")
    if matching is None:
        return missing_prerequisite(stage, "matching analysis", services.clock())

    result = ask(
        state,
        services,
        stage,
        resume_json=as_json(resume),
        jd_json=as_json(jd),
        matching_json=as_json(matching),
    )
    return completed(stage, risk_analysis=RiskAnalysis.model_validate(result))
