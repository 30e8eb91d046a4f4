import re
from typing import Any, List, Literal, Optional, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field, model_validator

LEADING_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")


def _literal_choices(annotation) -> Optional[tuple]:
    if get_origin(annotation) is Literal:
        return get_args(annotation)
    if get_origin(annotation) is Union:
        for arg in get_args(annotation):
            choices = _literal_choices(arg)
            if choices:
                return choices
    return None


def _numeric_type(annotation) -> Optional[type]:
    if annotation in (int, float):
        return annotation
    if get_origin(annotation) is Union:
        for arg in get_args(annotation):
            if arg in (int, float):
                return arg
    return None


def coerce_choice(value: Any, choices: tuple) -> Any:
    """Case and separator insensitive match against a Literal's values. None when nothing matches."""
    if value in choices:
        return value
    if isinstance(value, str):
        normalised = re.sub(r"[\s\-]+", "_", value.strip().lower())
        if normalised in choices:
            return normalised
    return None


def coerce_number(value: Any, kind: type) -> Any:
    """Leading number of a string such as '5+' or '3-5 years'. Fractions are truncated for int fields."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and kind is int:
        return int(value)
    if not isinstance(value, str):
        return value
    match = LEADING_NUMBER.search(value.replace(",", ""))
    if match is None:
        return None
    number = float(match.group())
    return int(number) if kind is int else number


class Artifact(BaseModel):
    """
    Base for every structured document the pipeline produces.
    - Frozen: stages replace artifacts wholesale, never edit them
    - Null values are dropped before validation so every field falls back to its default
    - Enum values are matched case-insensitively, unknown ones fall back to the default
    - Numeric strings such as '5+' keep their leading number, others fall back to the default
    - Unknown keys from model output are ignored
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def normalise_model_output(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for key, value in data.items():
            field = cls.model_fields.get(key)
            if field is not None and value is not None:
                choices = _literal_choices(field.annotation)
                if choices:
                    value = coerce_choice(value, choices)
                else:
                    kind = _numeric_type(field.annotation)
                    if kind is not None:
                        value = coerce_number(value, kind)
            if value is not None:
                cleaned[key] = value
        return cleaned


# =====================================================================
# RESUME
# =====================================================================

class ResumeMetadata(Artifact):
    file_name: str = "resume.pdf"
    page_count: int = 0
    parsed_at: str = ""
    confidence: float = 0.8


class ContactInfo(Artifact):
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None


class ExtractedMetric(Artifact):
    value: str = ""
    type: str = "number"
    context: str = ""
    is_inferred: bool = False


class BulletPoint(Artifact):
    id: str = ""
    original: str = ""
    metrics: List[ExtractedMetric] = Field(default_factory=list)
    action_verb: Optional[str] = None
    impact_level: Literal["high", "medium", "low"] = "medium"


class WorkExperience(Artifact):
    id: str = ""
    company: str = ""
    title: str = ""
    location: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    current: bool = False
    bullets: List[BulletPoint] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)


class Education(Artifact):
    id: str = ""
    institution: str = ""
    degree: str = ""
    field: Optional[str] = None
    gpa: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    honors: List[str] = Field(default_factory=list)


class Skill(Artifact):
    name: str = ""
    proficiency: Optional[str] = None
    years_of_experience: Optional[float] = None
    last_used: Optional[str] = None


class SkillCategory(Artifact):
    category: str = ""
    skills: List[Skill] = Field(default_factory=list)


class Certification(Artifact):
    name: str = ""
    issuer: str = ""
    date: Optional[str] = None
    expiration_date: Optional[str] = None
    credential_id: Optional[str] = None


class Project(Artifact):
    id: str = ""
    name: str = ""
    description: str = ""
    technologies: List[str] = Field(default_factory=list)
    url: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class Award(Artifact):
    name: str = ""
    issuer: str = ""
    date: Optional[str] = None
    description: Optional[str] = None


class Language(Artifact):
    language: str = ""
    proficiency: str = "professional"


class ParsedResume(Artifact):
    metadata: ResumeMetadata = Field(default_factory=ResumeMetadata)
    contact: ContactInfo = Field(default_factory=ContactInfo)
    summary: Optional[str] = None
    experience: List[WorkExperience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    skills: List[SkillCategory] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    awards: List[Award] = Field(default_factory=list)
    languages: List[Language] = Field(default_factory=list)
    raw_text: str = ""

    def to_text(self) -> str:
        """Render the structured resume as plain text with standard section headers."""
        lines: List[str] = []
        contact = self.contact
        if contact.name:
            lines.append(contact.name)
        details = [v for v in (contact.email, contact.phone, contact.location, contact.linkedin, contact.github) if v]
        if details:
            lines.append(" | ".join(details))

        if self.summary:
            lines += ["", "Summary", self.summary]

        if self.experience:
            lines += ["", "Experience"]
            for job in self.experience:
                end = "Present" if job.current else (job.end_date or "")
                dates = " - ".join(d for d in (job.start_date, end) if d)
                lines.append(f"{job.title}, {job.company}" + (f" ({dates})" if dates else ""))
                lines += [f"- {bullet.original}" for bullet in job.bullets if bullet.original]
                if job.technologies:
                    lines.append("Technologies: " + ", ".join(job.technologies))

        if self.education:
            lines += ["", "Education"]
            for school in self.education:
                degree = f"{school.degree} in {school.field}" if school.field else school.degree
                lines.append(f"{degree}, {school.institution}")

        if self.skills:
            lines += ["", "Skills"]
            for category in self.skills:
                names = ", ".join(skill.name for skill in category.skills if skill.name)
                lines.append(f"{category.category}: {names}" if category.category else names)

        if self.certifications:
            lines += ["", "Certifications"]
            lines += [f"{cert.name}, {cert.issuer}".rstrip(", ") for cert in self.certifications]

        if self.projects:
            lines += ["", "Projects"]
            for project in self.projects:
                lines.append(f"{project.name}: {project.description}".rstrip(": "))

        return "\n".join(lines).strip()


# =====================================================================
# COVER LETTER
# =====================================================================

ParagraphType = Literal["opening", "body", "closing"]
Tone = Literal["formal", "professional", "casual"]


class CoverLetterMetadata(Artifact):
    file_name: str = "cover_letter.pdf"
    parsed_at: str = ""
    word_count: int = 0
    confidence: float = 0.9


class Paragraph(Artifact):
    type: ParagraphType = "body"
    content: str = ""


class ParsedCoverLetter(Artifact):
    metadata: CoverLetterMetadata = Field(default_factory=CoverLetterMetadata)
    content: str = ""
    paragraphs: List[Paragraph] = Field(default_factory=list)
    tone: Tone = "professional"
    raw_text: str = ""


# =====================================================================
# JOB DESCRIPTION
# =====================================================================

class JdMetadata(Artifact):
    source: Literal["url", "pdf"] = "pdf"
    source_url: Optional[str] = None
    scraped_at: str = ""
    company: str = ""
    confidence: float = 0.8


class CompanyInfo(Artifact):
    name: str = "Unknown"
    industry: Optional[str] = None
    size: Optional[str] = None
    description: Optional[str] = None


class LocationInfo(Artifact):
    type: str = "not_specified"
    primary: Optional[str] = None
    additional_locations: List[str] = Field(default_factory=list)
    relocation_offered: Optional[bool] = None
    visa_sponsorship: Optional[bool] = None


class SeniorityInfo(Artifact):
    level: str = "mid"
    years_experience_min: Optional[float] = None
    years_experience_max: Optional[float] = None


class CompensationInfo(Artifact):
    specified: bool = False
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    currency: Optional[str] = None
    type: Optional[str] = None
    equity: Optional[bool] = None
    bonus: Optional[bool] = None


class Requirement(Artifact):
    id: str = ""
    text: str = ""
    category: str = "other"
    skills: List[str] = Field(default_factory=list)
    years_required: Optional[float] = None


class RequirementsInfo(Artifact):
    required: List[Requirement] = Field(default_factory=list)
    preferred: List[Requirement] = Field(default_factory=list)
    nice_to_have: List[Requirement] = Field(default_factory=list)

    def all(self) -> List[Requirement]:
        return [*self.required, *self.preferred, *self.nice_to_have]


class JdQualityAssessment(Artifact):
    is_fake: bool = False
    fake_confidence: float = 0.0
    fake_indicators: List[str] = Field(default_factory=list)
    quality_score: float = 70
    quality_issues: List[str] = Field(default_factory=list)
    red_flags: List[str] = Field(default_factory=list)


class DetectedRole(Artifact):
    title: str = ""
    confidence: float = 0.0
    matching_requirements: List[str] = Field(default_factory=list)


class MultiRoleDetection(Artifact):
    is_multi_role: bool = False
    roles: List[DetectedRole] = Field(default_factory=list)
    primary_role: Optional[str] = None


class MultiRoleAnalysis(MultiRoleDetection):
    selected_role: Optional[str] = None


class ParsedJobDescription(Artifact):
    metadata: JdMetadata = Field(default_factory=JdMetadata)
    title: str = "Unknown Position"
    company: CompanyInfo = Field(default_factory=CompanyInfo)
    location: LocationInfo = Field(default_factory=LocationInfo)
    seniority: SeniorityInfo = Field(default_factory=SeniorityInfo)
    compensation: CompensationInfo = Field(default_factory=CompensationInfo)
    requirements: RequirementsInfo = Field(default_factory=RequirementsInfo)
    responsibilities: List[str] = Field(default_factory=list)
    benefits: List[str] = Field(default_factory=list)
    application_deadline: Optional[str] = None
    quality_assessment: JdQualityAssessment = Field(default_factory=JdQualityAssessment)
    multi_role_detection: MultiRoleDetection = Field(default_factory=MultiRoleDetection)
    raw_text: str = ""

    def required_education(self) -> Optional[str]:
        for requirement in self.requirements.required:
            if requirement.category == "education":
                return requirement.text
        return None
