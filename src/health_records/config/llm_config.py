# ============================================================================
# src/health_records/config/llm_config.py
# ============================================================================
"""
LLM Configuration
- Backend selection (azure | ollama | none)
- Credentials / host per backend
- Sampling and timeout
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    LLM_BACKEND: str = Field(
        default="azure",
        description="Model backend: 'azure', 'ollama' or 'none' (heuristic fallbacks only)"
    )
    LLM_TIMEOUT: float = Field(
        default=60.0,
        description="Maximum time for one model call (seconds)"
    )
    LLM_TEMPERATURE: float = Field(
        default=0.1,
        description="Sampling temperature (0.1 = very deterministic)"
    )
    LLM_MAX_TOKENS: int = Field(
        default=2000,
        description="Maximum tokens for a single completion"
    )

    # Azure OpenAI
    AZURE_OPENAI_ENDPOINT: Optional[str] = Field(
        default=None,
        description="Azure OpenAI resource endpoint"
    )
    AZURE_OPENAI_API_KEY: Optional[str] = Field(
        default=None,
        description="Azure OpenAI API key"
    )
    AZURE_OPENAI_DEPLOYMENT: str = Field(
        default="gpt-4o",
        description="Azure OpenAI deployment name"
    )
    AZURE_OPENAI_API_VERSION: str = Field(
        default="2024-08-01-preview",
        description="Azure OpenAI API version (must support json_schema output)"
    )

    # Ollama
    OLLAMA_HOST: str = Field(
        default="http://localhost:11434",
        description="Ollama server URL"
    )
    OLLAMA_MODEL: Optional[str] = Field(
        default=None,
        description="Ollama model name; the ollama backend is unconfigured without one"
    )


llm_settings = LLMSettings()
