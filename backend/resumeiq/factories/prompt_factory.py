from typing import Dict, Tuple

from langchain_core.prompts import(
    ChatPromptTemplate,
    HumanMessagePromptTemplate,
    SystemMessagePromptTemplate
)

from ..graph.stages import StageId
from ..workflows.prompts.analysis_prompts import *
from ..workflows.prompts.generation_prompts import *
from ..workflows.prompts.parsing_prompts import *
from ..workflows.prompts.system_prompts import *


def _template(system: str, human: str) -> ChatPromptTemplate:
    return ChatPromptTemplate(
        messages=[
            SystemMessagePromptTemplate.from_template(system),
            HumanMessagePromptTemplate.from_template(human),
        ]
    )


class PromptFactory:
    """Builds one chat template per model-backed stage and renders it to (system_prompt, prompt)."""

    def __init__(self):
        self._cache: Dict[StageId, ChatPromptTemplate] = {}

    def create_prompt(self, stage: StageId) -> ChatPromptTemplate:
        prompt = None

        # PARSING
        if stage == StageId.PARSE_RESUME:
            prompt = _template(ParserSystemPrompt, ResumeParsingPrompt)

        elif stage == StageId.INGEST_JD:
            prompt = _template(ParserSystemPrompt, JobDescriptionParsingPrompt)

        # ANALYSIS
        elif stage == StageId.DETECT_FAKE_JD:
            prompt = _template(AnalystSystemPrompt, FakeJobDetectionPrompt)

        elif stage == StageId.SPLIT_MULTI_ROLE:
            prompt = _template(AnalystSystemPrompt, MultiRolePrompt)

        elif stage == StageId.MATCH_RESUME_JD:
            prompt = _template(AnalystSystemPrompt, MatchAnalysisPrompt)

        elif stage == StageId.ANALYZE_RISKS:
            prompt = _template(AnalystSystemPrompt, RiskAnalysisPrompt)

        # GENERATION
        elif stage == StageId.REWRITE_RESUME:
            prompt = _template(WriterSystemPrompt, ResumeRewritePrompt)

        elif stage == StageId.GENERATE_COVER_LETTER:
            prompt = _template(WriterSystemPrompt, CoverLetterPrompt)

        elif stage == StageId.VALIDATE_OUTPUT:
            prompt = _template(ValidatorSystemPrompt, ValidationPrompt)

        if prompt is None:
            raise ValueError(f"No prompt defined for stage: {stage}")

        return prompt

    def get(self, stage: StageId) -> ChatPromptTemplate:
        stage = StageId(stage)
        if stage not in self._cache:
            self._cache[stage] = self.create_prompt(stage)
        return self._cache[stage]

    def render(self, stage: StageId, **variables) -> Tuple[str, str]:
        system_message, human_message = self.get(stage).format_messages(**variables)
        return system_message.content, human_message.content
