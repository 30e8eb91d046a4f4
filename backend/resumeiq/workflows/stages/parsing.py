import re
from typing import List

from ...core.loader import clean_extracted_text
from ...core.services import PipelineServices
from ...graph.stages import StageId
from ...graph.state import AnalysisState, add_error
from ...spec.documents import (
    CompanyInfo,
    CoverLetterMetadata,
    JdMetadata,
    LocationInfo,
    MultiRoleDetection,
    Paragraph,
    ParsedCoverLetter,
    ParsedJobDescription,
    ParsedResume,
    ResumeMetadata,
)
from .common import StageUpdate, ask, completed, guarded, sub_dict

MIN_RESUME_CHARS = 100
MIN_COVER_LETTER_CHARS = 50
MIN_JD_CHARS = 50

FORMAL_INDICATORS = ("sincerely", "regards", "respectfully", "dear", "position")
CASUAL_INDICATORS = ("hey", "hi!", "thanks!", "cheers")


@guarded(StageId.PARSE_RESUME)
def parse_resume(state: AnalysisState, services: PipelineServices) -> StageUpdate:
    stage = StageId.PARSE_RESUME
    data = state.get("resume_bytes")
    if not data:
        return add_error(stage, "No resume PDF provided", recoverable=False, timestamp=services.clock())

    document = services.extractor.extract_text(data)
    text = clean_extracted_text(document.text)
    if len(text) < MIN_RESUME_CHARS:
        return add_error(
            stage,
            "Resume text too short - PDF may be image-based or corrupted",
            recoverable=False,
            timestamp=services.clock(),
        )

    parsed = ask(state, services, stage, resume_text=text)
    resume = ParsedResume.model_validate({
        **parsed,
        "metadata": ResumeMetadata(page_count=document.page_count, parsed_at=services.clock()),
        "raw_text": text,
    })
    return completed(stage, parsed_resume=resume)


def split_paragraphs(text: str) -> List[Paragraph]:
    blocks = [block.strip() for block in re.split(r"\n\s*\n+", text) if block.strip()]
    paragraphs = []
    for index, block in enumerate(blocks):
        if index == 0:
            kind = "opening"
        elif index == len(blocks) - 1:
            kind = "closing"
        else:
            kind = "body"
        paragraphs.append(Paragraph(type=kind, content=block))
    return paragraphs


def detect_tone(text: str) -> str:
    lowered = text.lower()
    formal = sum(1 for word in FORMAL_INDICATORS if word in lowered)
    casual = sum(1 for word in CASUAL_INDICATORS if word in lowered)
    if formal > casual + 1:
        return "formal"
    if casual > formal:
        return "casual"
    return "professional"


@guarded(StageId.PARSE_COVER_LETTER)
def parse_cover_letter(state: AnalysisState, services: PipelineServices) -> StageUpdate:
    stage = StageId.PARSE_COVER_LETTER
    data = state.get("cover_letter_bytes")
    if not data:
        # optional input
        return completed(stage, parsed_cover_letter=None)

    document = services.extractor.extract_text(data)
    text = clean_extracted_text(document.text)
    if len(text) < MIN_COVER_LETTER_CHARS:
        return add_error(stage, "Cover letter text too short", recoverable=True, timestamp=services.clock())

    cover_letter = ParsedCoverLetter(
        metadata=CoverLetterMetadata(parsed_at=services.clock(), word_count=len(text.split())),
        content=text,
        paragraphs=split_paragraphs(text),
        tone=detect_tone(text),
        raw_text=text,
    )
    return completed(stage, parsed_cover_letter=cover_letter)


@guarded(StageId.INGEST_JD)
def ingest_jd(state: AnalysisState, services: PipelineServices) -> StageUpdate:
    stage = StageId.INGEST_JD
    source = state.get("jd_source")
    if source is None:
        return add_error(stage, "No job description source provided", recoverable=False, timestamp=services.clock())

    scraped_title = scraped_company = scraped_location = source_url = None
    if source.kind == "url":
        source_url = source.value
        result = services.scraper.scrape(source.value)
        if not result.success:
            return add_error(stage, f"Failed to scrape JD: {result.error}", recoverable=True, timestamp=services.clock())
        text = result.text.strip()
        scraped_title, scraped_company, scraped_location = result.title, result.company, result.location
    else:
        document = services.extractor.extract_text(source.data)
        text = clean_extracted_text(document.text)

    if len(text) < MIN_JD_CHARS:
        return add_error(stage, "Job description text too short", recoverable=False, timestamp=services.clock())

    parsed = ask(state, services, stage, jd_text=text, source=source.kind, source_url=source_url or "n/a")

    title = parsed.get("title") or scraped_title or "Unknown Position"
    company = CompanyInfo.model_validate(sub_dict(parsed.get("company"), "name"))
    if not company.name or company.name == "Unknown":
        company = company.model_copy(update={"name": scraped_company or "Unknown"})
    location = LocationInfo.model_validate(sub_dict(parsed.get("location"), "primary"))
    if location.primary is None and scraped_location:
        location = location.model_copy(update={"primary": scraped_location})

    jd = ParsedJobDescription.model_validate({
        **parsed,
        "metadata": JdMetadata(
            source=source.kind,
            source_url=source_url,
            scraped_at=services.clock(),
            company=company.name,
        ),
        "title": title,
        "company": company,
        "location": location,
        "multi_role_detection": MultiRoleDetection(primary_role=title),
        "raw_text": text,
    })
    return completed(stage, parsed_jd=jd)
