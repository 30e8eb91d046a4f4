"""Scoring profiles, ATS system rule sets and the skill synonym table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Literal, Tuple

ProfileName = Literal["conservative", "aggressive"]
AtsSystemName = Literal["workday", "greenhouse", "lever", "generic"]


@dataclass(frozen=True)
class ScoringProfile:
    """
    Weighting and pass threshold for one scoring view. Weights sum to 1.0.
    synonym_tolerance is descriptive metadata: keyword matching counts any synonym form as a full match.
    """

    name: str
    keyword_match_weight: float
    format_compliance_weight: float
    section_completeness_weight: float
    experience_relevance_weight: float
    education_match_weight: float
    pass_threshold: int
    synonym_tolerance: float

    @property
    def weights(self) -> Dict[str, float]:
        return {
            "keyword_match": self.keyword_match_weight,
            "format_compliance": self.format_compliance_weight,
            "section_completeness": self.section_completeness_weight,
            "experience_relevance": self.experience_relevance_weight,
            "education_match": self.education_match_weight,
        }


@dataclass(frozen=True)
class AtsSystemRules:
    name: str
    keyword_density_multiplier: float
    format_strictness: Literal["high", "medium", "low"]
    preferred_format: Literal["chronological", "any"]
    header_requirements: Tuple[str, ...]
    penalty_for_creative_formatting: float
    max_pages: int


SCORING_PROFILES: Dict[str, ScoringProfile] = {
    "conservative": ScoringProfile(
        name="conservative",
        keyword_match_weight=0.35,
        format_compliance_weight=0.25,
        section_completeness_weight=0.15,
        experience_relevance_weight=0.15,
        education_match_weight=0.10,
        pass_threshold=75,
        synonym_tolerance=0.5,
    ),
    "aggressive": ScoringProfile(
        name="aggressive",
        keyword_match_weight=0.30,
        format_compliance_weight=0.15,
        section_completeness_weight=0.15,
        experience_relevance_weight=0.25,
        education_match_weight=0.15,
        pass_threshold=60,
        synonym_tolerance=0.85,
    ),
}

ATS_SYSTEM_RULES: Dict[str, AtsSystemRules] = {
    "workday": AtsSystemRules(
        name="workday",
        keyword_density_multiplier=1.2,
        format_strictness="high",
        preferred_format="chronological",
        header_requirements=("Experience", "Education", "Skills"),
        penalty_for_creative_formatting=15,
        max_pages=2,
    ),
    "greenhouse": AtsSystemRules(
        name="greenhouse",
        keyword_density_multiplier=1.0,
        format_strictness="medium",
        preferred_format="any",
        header_requirements=("Experience", "Skills"),
        penalty_for_creative_formatting=5,
        max_pages=3,
    ),
    "lever": AtsSystemRules(
        name="lever",
        keyword_density_multiplier=0.9,
        format_strictness="low",
        preferred_format="any",
        header_requirements=("Experience",),
        penalty_for_creative_formatting=0,
        max_pages=3,
    ),
    "generic": AtsSystemRules(
        name="generic",
        keyword_density_multiplier=1.0,
        format_strictness="medium",
        preferred_format="chronological",
        header_requirements=("Experience", "Education", "Skills"),
        penalty_for_creative_formatting=10,
        max_pages=2,
    ),
}

# canonical name -> alternative spellings, all lowercase
SKILL_SYNONYMS: Dict[str, List[str]] = {
    "javascript": ["js", "ecmascript", "es6", "es2015"],
    "typescript": ["ts"],
    "react": ["reactjs", "react.js"],
    "node": ["nodejs", "node.js"],
    "python": ["py", "python3"],
    "kubernetes": ["k8s"],
    "postgresql": ["postgres", "psql"],
    "mongodb": ["mongo"],
    "aws": ["amazon web services"],
    "gcp": ["google cloud", "google cloud platform"],
    "azure": ["microsoft azure"],
    "ci_cd": ["ci/cd", "cicd", "continuous integration", "continuous deployment"],
    "api": ["rest api", "restful api", "web api"],
    "graphql": ["gql"],
    "docker": ["containerization", "containers"],
    "agile": ["scrum", "kanban"],
    "git": ["github", "gitlab", "version control"],
}

# Ordered highest first; index is the ladder rank.
DEGREE_LADDER = (
    ("phd", ("ph.d", "phd", "doctorate", "doctoral")),
    ("masters", ("master", "m.s.", "m.a.", "mba", "ms ", "ma ")),
    ("bachelors", ("bachelor", "b.s.", "b.a.", "bs ", "ba ", "undergraduate")),
    ("associate", ("associate", "a.s.", "a.a.")),
)


def get_profile(name: str) -> ScoringProfile:
    try:
        return SCORING_PROFILES[name]
    except KeyError:
        raise ValueError(f"Unknown scoring profile: {name}") from None


def get_system_rules(name: str) -> AtsSystemRules:
    try:
        return ATS_SYSTEM_RULES[name]
    except KeyError:
        raise ValueError(f"Unknown ATS system: {name}") from None


def profile_for_system(name: str) -> str:
    """Scoring view that best models a given ATS: strict parsers get the conservative view."""
    rules = get_system_rules(name)
    return "aggressive" if rules.format_strictness == "low" else "conservative"
