import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from resumeiq.core.llm import LLMInvocationError, StructuredLLM, openai_client
from resumeiq.spec.models import LLMProviderConfig, PipelineConfig


def factory_for(responses, created):
    def factory(provider, config):
        created.append(provider)
        return FakeListChatModel(responses=list(responses))
    return factory


def test_returns_json_object(provider):
    llm = StructuredLLM(client_factory=factory_for(['{"title": "Engineer"}'], []))
    assert llm.invoke("parsing", "prompt", provider=provider) == {"title": "Engineer"}


def test_extracts_json_from_code_fence(provider):
    response = 'Here you go:\n```json\n{"is_fake": false, "quality_score": 80}\n```'
    llm = StructuredLLM(client_factory=factory_for([response], []))
    assert llm.invoke("analysis", "prompt", system_prompt="system", provider=provider) == {
        "is_fake": False,
        "quality_score": 80,
    }


def test_unparseable_output_raises(provider):
    llm = StructuredLLM(client_factory=factory_for(["I cannot help with that"], []))
    with pytest.raises(LLMInvocationError, match="parsing request failed"):
        llm.invoke("parsing", "prompt", provider=provider)


def test_non_object_output_raises(provider):
    llm = StructuredLLM(client_factory=factory_for(["[1, 2, 3]"], []))
    with pytest.raises(LLMInvocationError, match="expected a JSON object"):
        llm.invoke("scoring", "prompt", provider=provider)


def test_missing_provider_raises():
    llm = StructuredLLM(client_factory=factory_for(["{}"], []))
    with pytest.raises(LLMInvocationError, match="No LLM provider"):
        llm.invoke("parsing", "prompt")


def test_default_provider_is_used(provider):
    created = []
    llm = StructuredLLM(default_provider=provider, client_factory=factory_for(["{}"], created))
    llm.invoke("parsing", "prompt")
    assert created == [provider]


def test_clients_cached_per_endpoint_and_credentials(provider):
    created = []
    llm = StructuredLLM(client_factory=factory_for(["{}"], created))
    other = LLMProviderConfig(base_url=provider.base_url, api_key="other-key", model_name=provider.model_name)

    llm.invoke("parsing", "prompt", provider=provider)
    llm.invoke("analysis", "prompt", provider=provider)
    llm.invoke("parsing", "prompt", provider=other)

    assert created == [provider, other]


def test_openai_client_uses_provider_settings(provider):
    client = openai_client(provider, PipelineConfig(llm_max_retries=5))
    assert client.model_name == "test-model"
    assert client.max_retries == 5
