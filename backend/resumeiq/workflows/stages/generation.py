from ...core.services import PipelineServices
from ...graph.retry import retry_count
from ...graph.stages import GENERATION_STAGE, StageId
from ...graph.state import AnalysisState, missing_prerequisite
from ...spec.documents import ParsedResume
from ...spec.output_models import GeneratedCoverLetter, GeneratedResume, ValidationResult
from .common import StageUpdate, as_json, ask, completed, guarded
from .scoring import score_text

COVER_LETTER_WORDS = {
    "short": "150-200",
    "medium": "250-300",
    "long": "350-400",
}


def _attempt(state: AnalysisState) -> int:
    return retry_count(state, GENERATION_STAGE) + 1


def revision_feedback(state: AnalysisState) -> str:
    previous = state.get("validation_result")
    if _attempt(state) == 1 or previous is None:
        return "None. This is the first draft."
    notes = previous.feedback()
    if not notes:
        return "The previous draft failed validation. Stay strictly within the facts of the original resume."
    lines = ["The previous draft failed validation. Fix every finding below:"]
    lines += [f"- {note}" for note in notes]
    return "\n".join(lines)


def explain_score_change(before, after) -> str:
    delta = after.score - before.score
    if delta == 0:
        trend = "unchanged"
    else:
        trend = "up" if delta > 0 else "down"
    return (
        f"Target-system score {trend}: {before.score} -> {after.score} ({delta:+d}) "
        f"under the {after.model} profile for {after.system}."
    )


@guarded(StageId.REWRITE_RESUME)
def rewrite_resume(state: AnalysisState, services: PipelineServices) -> StageUpdate:
    stage = StageId.REWRITE_RESUME
    resume = state.get("parsed_resume")
    if resume is None:
        return missing_prerequisite(stage, "parsed resume", services.clock())
    jd = state.get("parsed_jd")
    if jd is None:
        return missing_prerequisite(stage, "parsed JD", services.clock())
    matching = state.get("matching_analysis")
    if matching is None:
        return missing_prerequisite(stage, "matching analysis", services.clock())

    options = state["user_options"]
    scores = state.get("ats_scores")
    result = ask(
        state,
        services,
        stage,
        resume_json=as_json(resume),
        jd_json=as_json(jd),
        matching_json=as_json(matching),
        ats_json=as_json(scores) if scores is not None else "{}",
        resume_format=options.resume_format,
        target_ats=options.target_ats,
        region=options.region,
        revision_feedback=revision_feedback(state),
    )

    attempt = _attempt(state)
    content = result.get("content")
    generated = GeneratedResume.model_validate({
        **result,
        "id": f"resume-v{attempt}",
        "version": attempt,
        "format": result.get("format") or options.resume_format,
        "content": ParsedResume.model_validate(content) if isinstance(content, dict) else resume,
    })
    update = completed(stage, generated_resume=generated)

    if scores is not None and scores.target_system is not None:
        after = score_text(generated.content.to_text(), jd, scores.target_system.model, options.target_ats)
        before = scores.before_rewrite or scores.target_system
        update["ats_scores"] = scores.model_copy(update={
            "after_rewrite": after,
            "score_change_explanation": explain_score_change(before, after),
        })
    return update


@guarded(StageId.GENERATE_COVER_LETTER)
def generate_cover_letter(state: AnalysisState, services: PipelineServices) -> StageUpdate:
    stage = StageId.GENERATE_COVER_LETTER
    resume = state.get("parsed_resume")
    if resume is None:
        return missing_prerequisite(stage, "parsed resume", services.clock())
    jd = state.get("parsed_jd")
    if jd is None:
        return missing_prerequisite(stage, "parsed JD", services.clock())
    matching = state.get("matching_analysis")
    if matching is None:
        return missing_prerequisite(stage, "matching analysis", services.clock())

    options = state["user_options"]
    original = state.get("parsed_cover_letter")
    result = ask(
        state,
        services,
        stage,
        resume_json=as_json(resume),
        jd_json=as_json(jd),
        matching_json=as_json(matching),
        length=options.cover_letter_length,
        target_words=COVER_LETTER_WORDS[options.cover_letter_length],
        region=options.region,
        original_cover_letter=original.content if original is not None else "None provided.",
    )

    attempt = _attempt(state)
    content = result.get("content") or ""
    cover_letter = GeneratedCoverLetter.model_validate({
        **result,
        "id": f"cover-letter-v{attempt}",
        "version": attempt,
        "content": content,
        "word_count": len(content.split()),
    })
    return completed(stage, generated_cover_letter=cover_letter)


@guarded(StageId.VALIDATE_OUTPUT)
def validate_output(state: AnalysisState, services: PipelineServices) -> StageUpdate:
    stage = StageId.VALIDATE_OUTPUT
    resume = state.get("parsed_resume")
    if resume is None:
        return missing_prerequisite(stage, "parsed resume", services.clock())
    generated = state.get("generated_resume")
    if generated is None:
        return missing_prerequisite(stage, "generated resume", services.clock())

    cover_letter = state.get("generated_cover_letter")
    result = ask(
        state,
        services,
        stage,
        resume_json=as_json(resume),
        generated_resume_json=as_json(generated),
        generated_cover_letter_json=as_json(cover_letter) if cover_letter is not None else "No cover letter generated",
        region=state["user_options"].region,
    )

    hallucinations = result.get("hallucination_check")
    if not isinstance(hallucinations, dict):
        hallucinations = {}
    issues = [
        issue for issue in hallucinations.get("issues") or []
        if isinstance(issue, dict) and str(issue.get("severity", "")).strip().lower() != "info"
    ]
    validation = ValidationResult.model_validate({
        **result,
        "hallucination_check": {**hallucinations, "issues": issues},
        "validated_version": generated.version,
    })
    return completed(stage, validation_result=validation)
