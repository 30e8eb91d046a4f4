import threading
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.output_parsers import JsonOutputParser
from langchain_openai import ChatOpenAI

from ..spec.models import LLMProviderConfig, PipelineConfig, TaskKind

ClientFactory = Callable[[LLMProviderConfig, PipelineConfig], BaseChatModel]


class LLMInvocationError(Exception):
    """Any failure to obtain a JSON object from the model: transport, timeout, refusal or unparseable output."""


class StructuredCompletion(Protocol):
    def invoke(
        self,
        task: TaskKind | str,
        prompt: str,
        *,
        system_prompt: Optional[str] = None,
        provider: Optional[LLMProviderConfig] = None,
    ) -> Dict[str, Any]: ...


def openai_client(provider: LLMProviderConfig, config: PipelineConfig) -> BaseChatModel:
    return ChatOpenAI(
        model=provider.model_name,
        base_url=provider.base_url,
        api_key=provider.api_key or "not-set",
        max_retries=config.llm_max_retries,
    )


class StructuredLLM:
    """
    Ask an OpenAI-compatible chat model for a JSON object.
    - Temperature, output size and timeout come from the task kind
    - Rate-limit retries with exponential backoff are left to the OpenAI client (max_retries)
    - JsonOutputParser strips code fences and surrounding prose
    - Clients are cached per (base_url, api_key, model)
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        default_provider: LLMProviderConfig | None = None,
        client_factory: ClientFactory = openai_client,
    ):
        self.config = config or PipelineConfig()
        self.default_provider = default_provider
        self.client_factory = client_factory
        self.parser = JsonOutputParser()
        self._clients: Dict[Tuple[str, str, str], BaseChatModel] = {}
        self._lock = threading.Lock()

    def client(self, provider: LLMProviderConfig) -> BaseChatModel:
        key = (provider.base_url, provider.api_key, provider.model_name)
        with self._lock:
            if key not in self._clients:
                self._clients[key] = self.client_factory(provider, self.config)
            return self._clients[key]

    def invoke(
        self,
        task: TaskKind | str,
        prompt: str,
        *,
        system_prompt: Optional[str] = None,
        provider: Optional[LLMProviderConfig] = None,
    ) -> Dict[str, Any]:
        provider = provider or self.default_provider
        if provider is None:
            raise LLMInvocationError("No LLM provider configured")

        task_config = self.config.task(task)
        messages = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.append(HumanMessage(content=prompt))

        chain = self.client(provider).bind(
            temperature=task_config.temperature,
            max_tokens=task_config.max_tokens,
            timeout=task_config.timeout,
            response_format={"type": "json_object"},
        ) | self.parser

        try:
            result = chain.invoke(messages)
        except Exception as e:
            raise LLMInvocationError(f"{TaskKind(task).value} request failed: {e}") from e

        if not isinstance(result, dict):
            raise LLMInvocationError(
                f"{TaskKind(task).value} request returned {type(result).__name__}, expected a JSON object"
            )
        return result
