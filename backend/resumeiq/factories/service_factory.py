from ..core.llm import StructuredLLM
from ..core.loader import PdfTextExtractor
from ..core.scraper import JobPostScraper
from ..core.services import PipelineServices
from ..factories.prompt_factory import PromptFactory
from ..spec.models import LLMProviderConfig, PipelineConfig
from ..utils.logger import JSONLLogger


def build_services(
    config: PipelineConfig | None = None,
    logger: JSONLLogger | None = None,
    default_provider: LLMProviderConfig | None = None,
) -> PipelineServices:
    """Wire the production collaborators: OpenAI-compatible LLM, pypdf extraction, httpx scraping."""
    config = config or PipelineConfig()
    if logger is None and config.log_path:
        logger = JSONLLogger(log_path=config.log_path)

    return PipelineServices(
        llm=StructuredLLM(config=config, default_provider=default_provider),
        extractor=PdfTextExtractor(),
        scraper=JobPostScraper(),
        prompts=PromptFactory(),
        config=config,
        logger=logger,
    )
