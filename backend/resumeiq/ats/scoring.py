"""Deterministic ATS compatibility scoring.

All functions operate on plain text and structured requirement lists. No I/O,
no model calls: identical inputs always give identical results.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .rules import (
    DEGREE_LADDER,
    SKILL_SYNONYMS,
    AtsSystemRules,
    ScoringProfile,
    get_profile,
    get_system_rules,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

PROBLEMATIC_PATTERNS = (
    re.compile(r"\t{2,}"),
    re.compile(r"[│├└┐┌]"),
    re.compile(r"[★☆●○◆◇]"),
)

SECTION_PATTERNS = (
    ("contact", re.compile(r"@|email|phone|\d{3}[-.]?\d{3}[-.]?\d{4}", re.IGNORECASE)),
    ("experience", re.compile(r"experience|employment|work history", re.IGNORECASE)),
    ("education", re.compile(r"education|degree|university|college", re.IGNORECASE)),
    ("skills", re.compile(r"skills|technologies|proficiencies", re.IGNORECASE)),
)

DEFAULT_EXPERIENCE_SCORE = 70
RESPONSIBILITY_MATCH_RATIO = 0.3


@dataclass
class ScoreBreakdown:
    keyword_match: float
    format_compliance: float
    section_completeness: float
    experience_relevance: float
    education_match: float

    def as_dict(self) -> dict:
        return {
            "keyword_match": self.keyword_match,
            "format_compliance": self.format_compliance,
            "section_completeness": self.section_completeness,
            "experience_relevance": self.experience_relevance,
            "education_match": self.education_match,
        }


@dataclass
class ScoreResult:
    """Structured result from ATS scoring."""

    score: int
    profile: str
    system: str
    breakdown: ScoreBreakdown
    passes_threshold: bool
    threshold: int
    recommendations: List[str] = field(default_factory=list)
    keywords_found: List[str] = field(default_factory=list)
    keywords_missing: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def score_resume(
    resume_text: str,
    jd_keywords: Sequence[str],
    jd_responsibilities: Sequence[str],
    required_education: Optional[str],
    profile: str = "conservative",
    ats_system: str = "generic",
) -> ScoreResult:
    """Score *resume_text* against a job's keywords, duties and education bar.

    *profile* picks the weighting and pass threshold, *ats_system* the
    keyword multiplier, required headers and formatting penalty.
    """
    config = get_profile(profile)
    rules = get_system_rules(ats_system)

    breakdown, found, missing = calculate_breakdown(
        resume_text, jd_keywords, jd_responsibilities, required_education, rules
    )
    score = calculate_final_score(breakdown, config)

    return ScoreResult(
        score=score,
        profile=config.name,
        system=rules.name,
        breakdown=breakdown,
        passes_threshold=score >= config.pass_threshold,
        threshold=config.pass_threshold,
        recommendations=generate_recommendations(breakdown, missing, rules),
        keywords_found=found,
        keywords_missing=missing,
    )


def calculate_breakdown(
    resume_text: str,
    jd_keywords: Sequence[str],
    jd_responsibilities: Sequence[str],
    required_education: Optional[str],
    rules: AtsSystemRules,
) -> Tuple[ScoreBreakdown, List[str], List[str]]:
    keyword_score, found, missing = calculate_keyword_match(resume_text, jd_keywords)
    keyword_score = min(100, round_half_up(keyword_score * rules.keyword_density_multiplier))

    breakdown = ScoreBreakdown(
        keyword_match=keyword_score,
        format_compliance=calculate_format_compliance(resume_text, rules),
        section_completeness=calculate_section_completeness(resume_text),
        experience_relevance=calculate_experience_relevance(resume_text, jd_responsibilities),
        education_match=calculate_education_match(resume_text, required_education),
    )
    return breakdown, found, missing


def calculate_final_score(breakdown: ScoreBreakdown, config: ScoringProfile) -> int:
    weighted = sum(
        getattr(breakdown, name) * weight for name, weight in config.weights.items()
    )
    return max(0, min(100, round_half_up(weighted)))


# ---------------------------------------------------------------------------
# Sub-scores
# ---------------------------------------------------------------------------


def calculate_keyword_match(
    resume_text: str, jd_keywords: Sequence[str]
) -> Tuple[int, List[str], List[str]]:
    """Return (score, found, missing) before the ATS multiplier is applied."""
    normalized_resume = resume_text.lower()
    found: List[str] = []
    missing: List[str] = []

    for keyword in jd_keywords:
        if _keyword_present(keyword.lower(), normalized_resume):
            found.append(keyword)
        else:
            missing.append(keyword)

    if not jd_keywords:
        return 0, found, missing
    return round_half_up(len(found) / len(jd_keywords) * 100), found, missing


def _keyword_present(keyword: str, normalized_resume: str) -> bool:
    if keyword in normalized_resume:
        return True

    for canonical, synonyms in SKILL_SYNONYMS.items():
        if keyword == canonical or keyword in synonyms:
            # first synonym group that claims the keyword decides
            return any(form in normalized_resume for form in (canonical, *synonyms))
    return False


def calculate_format_compliance(resume_text: str, rules: AtsSystemRules) -> float:
    score = 100.0

    for header in rules.header_requirements:
        if not re.search(rf"\b{re.escape(header)}\b", resume_text, re.IGNORECASE):
            score -= 10

    for pattern in PROBLEMATIC_PATTERNS:
        if pattern.search(resume_text):
            score -= rules.penalty_for_creative_formatting / 3

    return max(0.0, min(100.0, score))


def calculate_section_completeness(resume_text: str) -> int:
    found = sum(1 for _, pattern in SECTION_PATTERNS if pattern.search(resume_text))
    return round_half_up(found / len(SECTION_PATTERNS) * 100)


def calculate_experience_relevance(
    resume_text: str, jd_responsibilities: Sequence[str]
) -> int:
    if not jd_responsibilities:
        return DEFAULT_EXPERIENCE_SCORE

    normalized_resume = resume_text.lower()
    matches = 0

    for responsibility in jd_responsibilities:
        tokens = [word for word in responsibility.lower().split() if len(word) > 4]
        hits = sum(1 for token in tokens if token in normalized_resume)
        if hits >= len(tokens) * RESPONSIBILITY_MATCH_RATIO:
            matches += 1

    return round_half_up(matches / len(jd_responsibilities) * 100)


def degree_rank(text: str) -> int:
    """Index into DEGREE_LADDER of the highest degree mentioned, or -1."""
    normalized = text.lower()
    for rank, (_, patterns) in enumerate(DEGREE_LADDER):
        if any(pattern in normalized for pattern in patterns):
            return rank
    return -1


def calculate_education_match(resume_text: str, required_education: Optional[str]) -> int:
    if not required_education:
        return 100

    required_rank = degree_rank(required_education)
    candidate_rank = degree_rank(resume_text)

    if required_rank == -1:
        return 100
    if candidate_rank == -1:
        return 50
    # lower rank index means a higher degree
    if candidate_rank <= required_rank:
        return 100
    if candidate_rank == required_rank + 1:
        return 70
    return 50


def generate_recommendations(
    breakdown: ScoreBreakdown, keywords_missing: Sequence[str], rules: AtsSystemRules
) -> List[str]:
    recommendations: List[str] = []

    if breakdown.keyword_match < 70 and keywords_missing:
        recommendations.append(f"Add missing keywords: {', '.join(keywords_missing[:5])}")

    if breakdown.format_compliance < 80:
        recommendations.append(
            "Simplify formatting - avoid tables, graphics, and special characters"
        )

    if breakdown.section_completeness < 80:
        recommendations.append(
            f"Ensure your resume has clear section headers: {', '.join(rules.header_requirements)}"
        )

    if breakdown.experience_relevance < 70:
        recommendations.append(
            "Align your experience descriptions more closely with the job requirements"
        )

    if breakdown.education_match < 70:
        recommendations.append(
            "Highlight relevant education, certifications, or equivalent experience"
        )

    return recommendations


def round_half_up(value: float) -> int:
    """Round half up, so 74.5 -> 75 rather than Python's banker's 74."""
    return int(math.floor(value + 0.5))
