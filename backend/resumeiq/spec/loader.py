from pathlib import Path

from .models import LLMProviderConfig, PipelineConfig

DEFAULT_CONFIG_PATH = "config/pipeline.yml"


def load_pipeline_config(path: str | Path | None = DEFAULT_CONFIG_PATH) -> PipelineConfig:
    """
    Load pipeline configuration. With no path, or the default path absent on disk, the built-in defaults apply.
    An explicitly named file that is missing still raises FileNotFoundError.
    """
    if path is None:
        return PipelineConfig()
    if str(path) == DEFAULT_CONFIG_PATH and not Path(path).exists():
        return PipelineConfig()
    return PipelineConfig.from_yaml(path)


def load_provider_config() -> LLMProviderConfig:
    """Provider settings from the environment (call after load_dotenv)."""
    return LLMProviderConfig.from_env()
