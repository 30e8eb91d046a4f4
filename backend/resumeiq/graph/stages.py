from enum import Enum
from typing import Dict, List, NamedTuple, Optional

from ..spec.models import TaskKind


class StageId(str, Enum):
    """Closed set of pipeline stages. Executors are bound to these ids, never to free strings."""
    PARSE_RESUME = "parse_resume"
    PARSE_COVER_LETTER = "parse_cover_letter"
    INGEST_JD = "ingest_jd"
    DETECT_FAKE_JD = "detect_fake_jd"
    SPLIT_MULTI_ROLE = "split_multi_role"
    MATCH_RESUME_JD = "match_resume_jd"
    SCORE_ATS_CONSERVATIVE = "score_ats_conservative"
    SCORE_ATS_AGGRESSIVE = "score_ats_aggressive"
    ANALYZE_RISKS = "analyze_risks"
    REWRITE_RESUME = "rewrite_resume"
    GENERATE_COVER_LETTER = "generate_cover_letter"
    VALIDATE_OUTPUT = "validate_output"


class StageGroup(str, Enum):
    PARSING = "parsing"
    ANALYSIS = "analysis"
    MATCHING = "matching"
    SCORING = "scoring"
    RISKS = "risks"
    GENERATION = "generation"
    VALIDATION = "validation"
    COMPLETE = "complete"
    ERROR = "error"


class StageInfo(NamedTuple):
    group: StageGroup
    percent: int
    task: TaskKind
    message: str


STAGES: Dict[StageId, StageInfo] = {
    StageId.PARSE_RESUME: StageInfo(StageGroup.PARSING, 0, TaskKind.PARSING, "Parsing resume..."),
    StageId.PARSE_COVER_LETTER: StageInfo(StageGroup.PARSING, 25, TaskKind.PARSING, "Parsing cover letter..."),
    StageId.INGEST_JD: StageInfo(StageGroup.PARSING, 50, TaskKind.PARSING, "Ingesting job description..."),
    StageId.DETECT_FAKE_JD: StageInfo(StageGroup.ANALYSIS, 60, TaskKind.ANALYSIS, "Checking job posting quality..."),
    StageId.SPLIT_MULTI_ROLE: StageInfo(StageGroup.ANALYSIS, 65, TaskKind.ANALYSIS, "Detecting multiple roles..."),
    StageId.MATCH_RESUME_JD: StageInfo(StageGroup.MATCHING, 70, TaskKind.MATCHING, "Matching resume to job..."),
    StageId.SCORE_ATS_CONSERVATIVE: StageInfo(StageGroup.SCORING, 75, TaskKind.SCORING, "Calculating conservative ATS score..."),
    StageId.SCORE_ATS_AGGRESSIVE: StageInfo(StageGroup.SCORING, 80, TaskKind.SCORING, "Calculating aggressive ATS score..."),
    StageId.ANALYZE_RISKS: StageInfo(StageGroup.RISKS, 85, TaskKind.ANALYSIS, "Analyzing strengths, gaps and risks..."),
    StageId.REWRITE_RESUME: StageInfo(StageGroup.GENERATION, 90, TaskKind.GENERATION, "Optimizing resume..."),
    StageId.GENERATE_COVER_LETTER: StageInfo(StageGroup.GENERATION, 93, TaskKind.GENERATION, "Generating cover letter..."),
    StageId.VALIDATE_OUTPUT: StageInfo(StageGroup.VALIDATION, 95, TaskKind.VALIDATION, "Validating generated content..."),
}

PIPELINE_ORDER: List[StageId] = list(STAGES)

PIPELINE_STAGES: Dict[StageGroup, List[StageId]] = {}
for _stage, _info in STAGES.items():
    PIPELINE_STAGES.setdefault(_info.group, []).append(_stage)

# The generation stage whose retry counter governs the regeneration loop
GENERATION_STAGE = StageId.REWRITE_RESUME


def stage_info(stage: StageId | str) -> StageInfo:
    return STAGES[StageId(stage)]


def calculate_progress(current_node: Optional[str], completed: bool = False) -> int:
    """Percent complete for the stage that last produced output."""
    if completed:
        return 100
    if not current_node:
        return 0
    try:
        return stage_info(current_node).percent
    except ValueError:
        return 0


def current_group(current_node: Optional[str]) -> Optional[StageGroup]:
    for group, stages in PIPELINE_STAGES.items():
        if current_node in stages:
            return group
    return None
