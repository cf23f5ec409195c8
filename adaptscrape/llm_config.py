"""LLM configuration and pydantic-ai model factories.

Supports Groq, Gemini and OpenAI out of the box; add a provider by
registering a factory in PROVIDER_FACTORIES.
"""

import os
from dataclasses import dataclass
from typing import Any

from pydantic_ai import Agent
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.groq import GroqModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.providers.groq import GroqProvider
from pydantic_ai.providers.openai import OpenAIProvider

DEFAULT_MODELS = {
    'groq': 'llama-3.3-70b-versatile',
    'gemini': 'gemini-2.0-flash',
    'openai': 'gpt-4o-mini',
}

API_KEY_ENV_VARS = {
    'groq': 'GROQ_KEY',
    'gemini': 'GEMINI_KEY',
    'openai': 'OPENAI_KEY',
}


@dataclass
class LLMConfig:
    """Configuration for one LLM provider and model.

    Attributes:
        provider: Provider name ('groq', 'gemini' or 'openai')
        model_name: Model identifier string
        api_key: API key for authentication
        temperature: Sampling temperature (0.0-2.0). Defaults to 0.2.
        max_tokens: Maximum tokens for generation. Defaults to None.

    """

    provider: str
    model_name: str
    api_key: str
    temperature: float = 0.2
    max_tokens: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises:
            ValueError: If API key or model name is missing.

        """
        if not self.api_key:
            raise ValueError(f'API key required for {self.provider}')
        if not self.model_name:
            raise ValueError(f'Model name required for {self.provider}')

    def model_settings(self) -> dict[str, Any]:
        """Settings passed to every agent run."""
        settings: dict[str, Any] = {'temperature': self.temperature}
        if self.max_tokens:
            settings['max_tokens'] = self.max_tokens
        return settings


def create_groq_model(config: LLMConfig) -> GroqModel:
    """Create a Groq model from configuration."""
    return GroqModel(config.model_name, provider=GroqProvider(api_key=config.api_key))


def create_gemini_model(config: LLMConfig) -> GoogleModel:
    """Create a Gemini (Google) model from configuration."""
    return GoogleModel(config.model_name, provider=GoogleProvider(api_key=config.api_key))


def create_openai_model(config: LLMConfig) -> OpenAIChatModel:
    """Create an OpenAI chat model from configuration."""
    return OpenAIChatModel(config.model_name, provider=OpenAIProvider(api_key=config.api_key))


PROVIDER_FACTORIES = {
    'groq': create_groq_model,
    'gemini': create_gemini_model,
    'google': create_gemini_model,  # Alias
    'openai': create_openai_model,
}


def create_model(config: LLMConfig) -> Any:
    """Create a pydantic-ai model from configuration.

    Args:
        config: LLMConfig specifying the provider and parameters

    Returns:
        Model instance (GroqModel, GoogleModel or OpenAIChatModel)

    Raises:
        ValueError: If provider is not supported

    Example:
        >>> config = LLMConfig(provider='groq', model_name='llama-3.3-70b-versatile', api_key='your-key')
        >>> model = create_model(config)

    """
    provider_name = config.provider.lower()

    if provider_name not in PROVIDER_FACTORIES:
        available = ', '.join(PROVIDER_FACTORIES.keys())
        raise ValueError(f'Unknown provider: {provider_name}. Available: {available}')

    return PROVIDER_FACTORIES[provider_name](config)


def create_agent(config: LLMConfig, system_prompt: str, output_type: Any = str) -> Agent:
    """Create a pydantic-ai agent from configuration.

    Args:
        config: LLMConfig specifying the provider and parameters
        system_prompt: System prompt for the agent
        output_type: Structured output type. Defaults to plain text.

    Returns:
        Configured pydantic-ai Agent

    """
    return Agent(
        create_model(config),
        output_type=output_type,
        system_prompt=system_prompt,
        model_settings=config.model_settings(),
    )


def groq(model_name: str, api_key: str, **kwargs) -> LLMConfig:
    """Quick config for Groq."""
    return LLMConfig(provider='groq', model_name=model_name, api_key=api_key, **kwargs)


def gemini(model_name: str, api_key: str, **kwargs) -> LLMConfig:
    """Quick config for Gemini."""
    return LLMConfig(provider='gemini', model_name=model_name, api_key=api_key, **kwargs)


def openai(model_name: str, api_key: str, **kwargs) -> LLMConfig:
    """Quick config for OpenAI."""
    return LLMConfig(provider='openai', model_name=model_name, api_key=api_key, **kwargs)


def config_from_env(provider: str | None = None, model_name: str | None = None) -> LLMConfig | None:
    """Build an LLMConfig from environment variables.

    With no provider given, the first provider whose key is set wins, in
    the order groq, gemini, openai.

    Args:
        provider: Provider to use. Defaults to None (auto-detect).
        model_name: Model to use. Defaults to the provider's default model.

    Returns:
        LLMConfig, or None if no matching API key is set

    Raises:
        ValueError: If provider is not supported

    """
    if provider is not None:
        provider = provider.lower()
        if provider not in API_KEY_ENV_VARS:
            raise ValueError(f'Unknown provider: {provider}. Available: {", ".join(API_KEY_ENV_VARS)}')
        candidates = [provider]
    else:
        candidates = list(API_KEY_ENV_VARS)

    for name in candidates:
        api_key = os.getenv(API_KEY_ENV_VARS[name])
        if api_key:
            return LLMConfig(provider=name, model_name=model_name or DEFAULT_MODELS[name], api_key=api_key)

    return None
