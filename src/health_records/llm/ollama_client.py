# ============================================================================
# src/health_records/llm/ollama_client.py
# ============================================================================
"""
Ollama LLM Client

Local inference through the Ollama HTTP API. Schema-constrained output is
requested by passing the JSON schema as the `format` field of
/api/generate, which Ollama enforces during decoding.

Setup:
    1. Install Ollama: https://ollama.ai
    2. Pull a model: ollama pull <model>
    3. Set LLM_BACKEND=ollama and OLLAMA_MODEL=<model>
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp

from ..utils.exceptions import AnalysisUnavailable
from .base import BackendType, BaseLLMClient


class OllamaLLMClient(BaseLLMClient):
    """
    Ollama-based client.

    Config options:
        ollama_host: Ollama server URL (default: http://localhost:11434)
        ollama_model: Model name (required)
        max_tokens, temperature, timeout: generation defaults
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)

        self.host = self.config.get('ollama_host', 'http://localhost:11434').rstrip('/')
        self._model_name = self.config['ollama_model']

        # HTTP session (created lazily, tied to event loop)
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_loop: Optional[asyncio.AbstractEventLoop] = None

        self.logger.info(f"Initialized Ollama client: {self.host} / {self._model_name}")

    @property
    def backend_type(self) -> BackendType:
        return BackendType.OLLAMA

    @property
    def model_name(self) -> str:
        return self._model_name

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session for current event loop."""
        current_loop = asyncio.get_running_loop()

        needs_new_session = (
            self._session is None
            or self._session.closed
            or self._session_loop is not current_loop
        )

        if needs_new_session:
            if self._session is not None and not self._session.closed:
                await self._session.close()

            # Overall bound comes from BaseLLMClient.complete()
            timeout = aiohttp.ClientTimeout(total=None, sock_connect=30)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._session_loop = current_loop

        return self._session

    async def close(self):
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._session_loop = None

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        output_schema: Optional[Dict[str, Any]] = None,
    ) -> str:
        payload: Dict[str, Any] = {
            "model": self._model_name,
            "system": system_prompt,
            "prompt": user_prompt,
            "stream": False,
            "options": {
                "num_predict": self.max_tokens,
                "temperature": self.temperature,
            },
        }
        if output_schema is not None:
            payload["format"] = output_schema

        try:
            session = await self._get_session()
            async with session.post(f"{self.host}/api/generate", json=payload) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise AnalysisUnavailable(f"Ollama error ({response.status}): {error_text}")
                data = await response.json()
        except aiohttp.ClientConnectorError as e:
            raise AnalysisUnavailable(
                f"Cannot connect to Ollama at {self.host}. Make sure Ollama is running: ollama serve"
            ) from e
        except aiohttp.ClientError as e:
            raise AnalysisUnavailable(f"Ollama request failed: {e}") from e

        return data.get('response', '')

    async def health_check(self) -> Dict[str, Any]:
        """Check if Ollama server is running and model is available."""
        try:
            session = await self._get_session()
            async with session.get(f"{self.host}/api/tags") as response:
                if response.status != 200:
                    return {
                        "healthy": False,
                        "backend": "ollama",
                        "model": self._model_name,
                        "details": f"Ollama server returned status {response.status}"
                    }
                data = await response.json()

            models = [m.get('name', '') for m in data.get('models', [])]
            if not any(self._model_name in m for m in models):
                return {
                    "healthy": False,
                    "backend": "ollama",
                    "model": self._model_name,
                    "details": f"Model not found. Available: {models}. Run: ollama pull {self._model_name}"
                }

            return {
                "healthy": True,
                "backend": "ollama",
                "model": self._model_name,
                "details": "Ollama server running and model available"
            }

        except aiohttp.ClientError as e:
            return {
                "healthy": False,
                "backend": "ollama",
                "model": self._model_name,
                "details": f"Cannot reach Ollama at {self.host}: {e}"
            }
