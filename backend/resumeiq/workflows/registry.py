from typing import Dict

from ..graph.stages import StageId
from .stages.analysis import analyze_risks, detect_fake_jd, match_resume_jd, split_multi_role
from .stages.common import StageExecutor
from .stages.generation import generate_cover_letter, rewrite_resume, validate_output
from .stages.parsing import ingest_jd, parse_cover_letter, parse_resume
from .stages.scoring import score_ats_aggressive, score_ats_conservative

STAGE_EXECUTORS: Dict[StageId, StageExecutor] = {
    StageId.PARSE_RESUME: parse_resume,
    StageId.PARSE_COVER_LETTER: parse_cover_letter,
    StageId.INGEST_JD: ingest_jd,
    StageId.DETECT_FAKE_JD: detect_fake_jd,
    StageId.SPLIT_MULTI_ROLE: split_multi_role,
    StageId.MATCH_RESUME_JD: match_resume_jd,
    StageId.SCORE_ATS_CONSERVATIVE: score_ats_conservative,
    StageId.SCORE_ATS_AGGRESSIVE: score_ats_aggressive,
    StageId.ANALYZE_RISKS: analyze_risks,
    StageId.REWRITE_RESUME: rewrite_resume,
    StageId.GENERATE_COVER_LETTER: generate_cover_letter,
    StageId.VALIDATE_OUTPUT: validate_output,
}

_unbound = set(StageId) - set(STAGE_EXECUTORS)
if _unbound:
    raise RuntimeError(f"Stages without an executor: {sorted(s.value for s in _unbound)}")
