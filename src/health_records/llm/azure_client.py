# ============================================================================
# src/health_records/llm/azure_client.py
# ============================================================================
"""
Azure OpenAI LLM Client

Chat completions against an Azure OpenAI deployment. Schema calls use the
`json_schema` response format in strict mode, so the service rejects any
output that does not match.
"""

from typing import Any, Dict, Optional

import openai
from openai import AsyncAzureOpenAI

from ..utils.exceptions import AnalysisUnavailable
from .base import BackendType, BaseLLMClient


class AzureOpenAILLMClient(BaseLLMClient):
    """
    Config options:
        azure_endpoint, azure_api_key: credentials (both required)
        azure_deployment: deployment name (default: gpt-4o)
        azure_api_version: API version
        max_tokens, temperature, timeout: generation defaults
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.endpoint = self.config['azure_endpoint']
        self.api_key = self.config['azure_api_key']
        self.deployment = self.config.get('azure_deployment', 'gpt-4o')
        self.api_version = self.config.get('azure_api_version', '2024-08-01-preview')
        self._client: Optional[AsyncAzureOpenAI] = None

        self.logger.info(f"Initialized Azure OpenAI client: {self.endpoint} / {self.deployment}")

    @property
    def backend_type(self) -> BackendType:
        return BackendType.AZURE

    @property
    def model_name(self) -> str:
        return self.deployment

    @property
    def client(self) -> AsyncAzureOpenAI:
        """Lazy-initialize the Azure OpenAI client."""
        if self._client is None:
            self._client = AsyncAzureOpenAI(
                azure_endpoint=self.endpoint,
                api_key=self.api_key,
                api_version=self.api_version,
                max_retries=1,
            )
        return self._client

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        output_schema: Optional[Dict[str, Any]] = None,
    ) -> str:
        kwargs: Dict[str, Any] = {
            "model": self.deployment,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if output_schema is not None:
            schema = {k: v for k, v in output_schema.items() if k != "title"}
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": output_schema.get("title", "response"),
                    "schema": schema,
                    "strict": True,
                },
            }

        try:
            response = await self.client.chat.completions.create(**kwargs)
        except openai.OpenAIError as e:
            raise AnalysisUnavailable(f"Azure OpenAI request failed: {e}") from e

        choice = response.choices[0]
        if choice.finish_reason == "length":
            raise AnalysisUnavailable("Azure OpenAI response truncated (max_tokens reached)")
        return choice.message.content or ""

    async def health_check(self) -> Dict[str, Any]:
        # Listing deployments needs management-plane rights, so only
        # configuration is checked here.
        return {
            "healthy": True,
            "backend": "azure",
            "model": self.deployment,
            "details": f"Configured for {self.endpoint}",
        }

    async def close(self):
        if self._client is not None:
            await self._client.close()
            self._client = None
