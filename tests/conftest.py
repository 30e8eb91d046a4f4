import copy

import pytest

from resumeiq.core.loader import DocumentExtractionError, ExtractedDocument
from resumeiq.core.scraper import ScrapeResult
from resumeiq.core.services import PipelineServices
from resumeiq.factories.prompt_factory import PromptFactory
from resumeiq.graph.graph import PipelineGraph
from resumeiq.graph.state import create_initial_state
from resumeiq.spec.models import LLMProviderConfig, PdfSource, PipelineConfig, TaskKind, UserOptions

FIXED_TIME = "2024-01-01T00:00:00+00:00"

RESUME_TEXT = """Jane Smith
jane.smith@example.com | 555-123-4567 | Berlin

Summary
Backend engineer with seven years of experience building distributed services.

Experience
Senior Software Engineer, Acme Corp (2019 - Present)
- Designed scalable backend services in Python serving 2M requests per day
- Operated Kubernetes clusters in production across three regions
- Introduced Docker based CI/CD pipelines, cutting release time by 40%

Education
B.S. in Computer Science, State University

Skills
Languages: Python, Go
Infrastructure: Docker, Kubernetes, PostgreSQL
"""

JD_TEXT = """Senior Backend Engineer - Globex
Globex is hiring a senior backend engineer to design scalable backend services.
Requirements: 5+ years of Python, Kubernetes in production, Bachelor's degree in Computer Science.
Nice to have: Go, Terraform.
Responsibilities: Design scalable backend services. Operate Kubernetes clusters in production.
"""

PARSED_RESUME = {
    "contact": {"name": "Jane Smith", "email": "jane.smith@example.com", "phone": "555-123-4567"},
    "summary": "Backend engineer with seven years of experience building distributed services.",
    "experience": [
        {
            "id": "exp-1",
            "company": "Acme Corp",
            "title": "Senior Software Engineer",
            "start_date": "2019",
            "current": True,
            "bullets": [
                {"id": "exp-1-b1", "original": "Designed scalable backend services in Python serving 2M requests per day"},
                {"id": "exp-1-b2", "original": "Operated Kubernetes clusters in production across three regions"},
            ],
            "technologies": ["Python", "Kubernetes", "Docker"],
        }
    ],
    "education": [
        {"id": "edu-1", "institution": "State University", "degree": "B.S.", "field": "Computer Science"}
    ],
    "skills": [
        {"category": "Languages", "skills": [{"name": "Python"}, {"name": "Go"}]},
        {"category": "Infrastructure", "skills": [{"name": "Docker"}, {"name": "Kubernetes"}, {"name": "PostgreSQL"}]},
    ],
}

PARSED_JD = {
    "title": "Senior Backend Engineer",
    "company": {"name": "Globex", "industry": "Software"},
    "location": {"type": "hybrid", "primary": "Berlin"},
    "seniority": {"level": "senior", "years_experience_min": 5},
    "requirements": {
        "required": [
            {"id": "req-1", "text": "5+ years of Python", "category": "technical", "skills": ["Python"]},
            {"id": "req-2", "text": "Kubernetes in production", "category": "technical", "skills": ["Kubernetes"]},
            {"id": "req-3", "text": "Bachelor's degree in Computer Science", "category": "education", "skills": []},
        ],
        "preferred": [],
        "nice_to_have": [
            {"id": "req-4", "text": "Go or Terraform", "category": "technical", "skills": ["Go", "Terraform"]},
        ],
    },
    "responsibilities": [
        "Design scalable backend services",
        "Operate Kubernetes clusters in production",
    ],
    "benefits": ["Remote budget"],
}

COVER_LETTER = (
    "Dear Hiring Manager,\n\n"
    "I am excited to apply for the Senior Backend Engineer position at Globex. "
    "At Acme Corp I designed scalable backend services in Python.\n\n"
    "I have operated Kubernetes clusters in production across three regions.\n\n"
    "Sincerely,\nJane Smith"
)

VALID_RESULT = {
    "is_valid": True,
    "hallucination_check": {"passed": True, "issues": []},
    "factuality_check": {"passed": True, "fabricated_items": []},
    "compliance_check": {"passed": True, "violations": []},
    "recommendation": "pass",
}

CRITICAL_RESULT = {
    "is_valid": False,
    "hallucination_check": {
        "passed": False,
        "issues": [
            {
                "location": "experience[0].bullets[0]",
                "type": "fabricated_metric",
                "generated": "serving 20M requests per day",
                "severity": "critical",
            }
        ],
    },
    "factuality_check": {"passed": False, "fabricated_items": ["20M requests per day"]},
    "compliance_check": {"passed": True, "violations": []},
    "recommendation": "fix_and_retry",
}


def default_responses():
    return {
        "Resume Parsing": PARSED_RESUME,
        "Job Description Parsing": PARSED_JD,
        "Job Posting Authenticity Check": {
            "is_fake": False,
            "fake_confidence": 0.05,
            "quality_score": 85,
            "quality_issues": [],
        },
        "Multi-Role Detection": {"is_multi_role": False, "roles": [], "primary_role": None},
        "Resume to Job Matching": {
            "overall_score": 82,
            "explanation": "Strong backend match",
            "skill_match": {
                "matched_skills": [
                    {"skill": "Python", "jd_requirement": "5+ years of Python",
                     "resume_evidence": "Designed scalable backend services in Python", "strength": "strong"},
                ],
                "missing_skills": [
                    {"skill": "Terraform", "jd_requirement": "Go or Terraform", "importance": "nice_to_have"},
                ],
                "total_required": 2,
                "total_matched": 2,
                "match_percentage": 100,
            },
            "experience_match": {"years_required": 5, "years_candidate": 7, "match_status": "exceeds"},
            "education_match": {"required": "Bachelor's", "candidate": "B.S.", "match_status": "meets"},
            "role_alignment": {"title_match": {"alignment_score": 90, "is_lateral_move": True}},
        },
        "Strengths, Gaps and Risks": {
            "strengths": [{"title": "Kubernetes", "description": "Production clusters", "impact": "high"}],
            "gaps": [{"title": "Terraform", "severity": "minor"}],
            "risks": [],
            "overall_risk_level": "low",
        },
        "Resume Rewrite": {
            "format": "chronological",
            "content": PARSED_RESUME,
            "changes": [{"section": "summary", "type": "reword", "reason": "Mirror JD wording"}],
        },
        "Cover Letter Generation": {
            "content": COVER_LETTER,
            "paragraphs": [{"type": "opening", "content": "I am excited to apply.", "purpose": "hook"}],
        },
        "Output Validation": VALID_RESULT,
    }


class FakeLLM:
    """
    Deterministic stand-in for the structured completion collaborator.
    Responses are keyed by the prompt's first-line header; a list is consumed in order
    and its last item repeats. Exceptions in place of a response are raised.
    """
    def __init__(self, responses=None):
        self.responses = default_responses()
        self.responses.update(responses or {})
        self.calls = []

    def headers(self):
        return [header for _, header, _ in self.calls]

    def invoke(self, task, prompt, *, system_prompt=None, provider=None):
        header = prompt.splitlines()[0].lstrip("#").strip()
        self.calls.append((TaskKind(task).value, header, prompt))

        response = self.responses.get(header, {})
        if isinstance(response, list):
            response = response.pop(0) if len(response) > 1 else response[0]
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)


class FakeExtractor:
    """Decodes bytes as UTF-8 text; a b"BAD" prefix simulates an unreadable PDF."""
    def extract_text(self, data):
        if data.startswith(b"BAD"):
            raise DocumentExtractionError("Invalid PDF file")
        return ExtractedDocument(text=data.decode("utf-8"), page_count=1)


class FakeScraper:
    def __init__(self, result=None):
        self.result = result or ScrapeResult(
            success=True,
            text=JD_TEXT,
            title="Senior Backend Engineer",
            company="Globex",
            location="Berlin",
            source="greenhouse",
        )
        self.urls = []

    def scrape(self, url):
        self.urls.append(url)
        return self.result


def fixed_clock():
    return FIXED_TIME


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fake_scraper():
    return FakeScraper()


@pytest.fixture
def services(fake_llm, fake_scraper):
    return PipelineServices(
        llm=fake_llm,
        extractor=FakeExtractor(),
        scraper=fake_scraper,
        prompts=PromptFactory(),
        config=PipelineConfig(),
        logger=None,
        clock=fixed_clock,
    )


@pytest.fixture
def pipeline(services):
    return PipelineGraph(services)


@pytest.fixture
def provider():
    return LLMProviderConfig(base_url="http://llm.test/v1", api_key="test-key", model_name="test-model")


@pytest.fixture
def make_state(provider):
    def _make_state(**overrides):
        state = create_initial_state(
            resume_bytes=RESUME_TEXT.encode(),
            jd_source=PdfSource(data=JD_TEXT.encode()),
            user_options=UserOptions(),
            llm_config=provider,
            run_id="test-run",
            started_at=FIXED_TIME,
        )
        state.update(overrides)
        return state
    return _make_state
