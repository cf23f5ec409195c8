import pytest
from pydantic_ai import Agent

from adaptscrape.llm_config import (
    DEFAULT_MODELS,
    PROVIDER_FACTORIES,
    LLMConfig,
    config_from_env,
    create_agent,
    create_model,
    groq,
    openai,
)


@pytest.fixture(autouse=True)
def clear_keys(monkeypatch):
    for name in ('GROQ_KEY', 'GEMINI_KEY', 'OPENAI_KEY'):
        monkeypatch.delenv(name, raising=False)


def test_config_requires_api_key():
    with pytest.raises(ValueError, match='API key required'):
        LLMConfig(provider='groq', model_name='llama-3.3-70b-versatile', api_key='')


def test_config_requires_model_name():
    with pytest.raises(ValueError, match='Model name required'):
        LLMConfig(provider='groq', model_name='', api_key='key')


def test_model_settings():
    assert groq('m', 'key').model_settings() == {'temperature': 0.2}
    assert openai('m', 'key', temperature=0.0, max_tokens=512).model_settings() == {
        'temperature': 0.0,
        'max_tokens': 512,
    }


def test_create_model_rejects_unknown_provider():
    with pytest.raises(ValueError, match='Unknown provider'):
        create_model(LLMConfig(provider='mystery', model_name='m', api_key='key'))


def test_create_model_uses_provider_factory(mocker, mock_llm_config):
    factory = mocker.Mock(return_value='model')
    mocker.patch.dict(PROVIDER_FACTORIES, {'groq': factory})

    assert create_model(mock_llm_config) == 'model'
    factory.assert_called_once_with(mock_llm_config)


def test_create_agent(mocker, mock_llm_config):
    mocker.patch('adaptscrape.llm_config.create_model', return_value='test')

    agent = create_agent(mock_llm_config, 'You are a test.')

    assert isinstance(agent, Agent)


def test_config_from_env_picks_first_available(monkeypatch):
    monkeypatch.setenv('GEMINI_KEY', 'gemini-key')
    monkeypatch.setenv('OPENAI_KEY', 'openai-key')

    config = config_from_env()

    assert config.provider == 'gemini'
    assert config.model_name == DEFAULT_MODELS['gemini']
    assert config.api_key == 'gemini-key'


def test_config_from_env_with_provider_and_model(monkeypatch):
    monkeypatch.setenv('OPENAI_KEY', 'openai-key')

    config = config_from_env('OpenAI', 'gpt-4o')

    assert config.provider == 'openai'
    assert config.model_name == 'gpt-4o'


def test_config_from_env_without_keys():
    assert config_from_env() is None
    assert config_from_env('groq') is None


def test_config_from_env_unknown_provider():
    with pytest.raises(ValueError, match='Unknown provider'):
        config_from_env('anthropic')
