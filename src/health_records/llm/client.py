# ============================================================================
# src/health_records/llm/client.py
# ============================================================================
"""
LLM Client Factory

Builds the one client the process uses, from llm_settings:
- azure: needs AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_API_KEY
- ollama: needs OLLAMA_MODEL
- none: always unconfigured

Missing credentials select UnconfiguredLLMClient rather than failing, so
the analyzer and matcher run on their heuristic fallbacks.

Usage:
    from health_records.llm.client import create_client

    client = create_client()
    text = await client.complete(system_prompt, user_prompt)
"""

import logging
from typing import Any, Dict, Optional

from ..config import LLMSettings, llm_settings
from ..utils.exceptions import ConfigurationError
from .azure_client import AzureOpenAILLMClient
from .base import BaseLLMClient, UnconfiguredLLMClient
from .ollama_client import OllamaLLMClient

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("azure", "ollama", "none")


def _config_from_settings(settings: LLMSettings) -> Dict[str, Any]:
    return {
        'timeout': settings.LLM_TIMEOUT,
        'temperature': settings.LLM_TEMPERATURE,
        'max_tokens': settings.LLM_MAX_TOKENS,
        'azure_endpoint': settings.AZURE_OPENAI_ENDPOINT,
        'azure_api_key': settings.AZURE_OPENAI_API_KEY,
        'azure_deployment': settings.AZURE_OPENAI_DEPLOYMENT,
        'azure_api_version': settings.AZURE_OPENAI_API_VERSION,
        'ollama_host': settings.OLLAMA_HOST,
        'ollama_model': settings.OLLAMA_MODEL,
    }


def create_client(settings: Optional[LLMSettings] = None) -> BaseLLMClient:
    """
    Create the LLM client for the configured backend.

    Raises:
        ConfigurationError: LLM_BACKEND names an unknown backend
    """
    settings = settings or llm_settings
    backend = settings.LLM_BACKEND.lower()
    config = _config_from_settings(settings)

    if backend == "azure":
        if not (config['azure_endpoint'] and config['azure_api_key']):
            logger.warning("AZURE_OPENAI_ENDPOINT / AZURE_OPENAI_API_KEY not set - AI analysis will be disabled")
            return UnconfiguredLLMClient("Azure OpenAI credentials not configured")
        return AzureOpenAILLMClient(config)

    if backend == "ollama":
        if not config['ollama_model']:
            logger.warning("OLLAMA_MODEL not set - AI analysis will be disabled")
            return UnconfiguredLLMClient("Ollama model not configured")
        return OllamaLLMClient(config)

    if backend == "none":
        logger.info("LLM backend disabled - using heuristic fallbacks")
        return UnconfiguredLLMClient("LLM backend disabled")

    raise ConfigurationError(
        f"Unknown LLM backend: {backend}. Supported backends: {', '.join(SUPPORTED_BACKENDS)}"
    )
