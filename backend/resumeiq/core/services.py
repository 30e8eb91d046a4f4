from dataclasses import dataclass, field
from typing import Callable, Optional

from ..factories.prompt_factory import PromptFactory
from ..spec.models import PipelineConfig
from ..utils.logger import JSONLLogger
from ..utils.timestamp import utc_now
from .llm import StructuredCompletion
from .loader import DocumentExtractor
from .scraper import JobPostFetcher


@dataclass
class PipelineServices:
    """Collaborators handed to every stage. Stateless across runs; safe to share between requests."""
    llm: StructuredCompletion
    extractor: DocumentExtractor
    scraper: JobPostFetcher
    prompts: PromptFactory = field(default_factory=PromptFactory)
    config: PipelineConfig = field(default_factory=PipelineConfig)
    logger: Optional[JSONLLogger] = None
    clock: Callable[[], str] = utc_now
