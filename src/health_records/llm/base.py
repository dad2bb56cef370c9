# ============================================================================
# src/health_records/llm/base.py
# ============================================================================
"""
Base LLM Client Interface

Text in, text or schema-constrained JSON out. Supported backends:
- azure: Azure OpenAI chat completions with json_schema response format
- ollama: Ollama server with a JSON schema passed as `format`
- none: explicit unconfigured variant; every call raises AnalysisUnavailable

The backend is chosen once at startup (see client.create_client) and passed
into the analyzer and matcher. Nothing else checks for a missing key.
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..utils.exceptions import AnalysisUnavailable, LLMResponseError, LLMTimeoutError


class BackendType(Enum):
    """Supported inference backends."""
    AZURE = "azure"      # Azure OpenAI
    OLLAMA = "ollama"    # Ollama server
    NONE = "none"        # Not configured


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM clients.

    Backends implement _complete() and health_check(); complete() adds the
    timeout, strict JSON parsing for schema calls and statistics.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.logger = logging.getLogger(self.__class__.__name__)

        self.timeout = self.config.get('timeout', 60.0)
        self.temperature = self.config.get('temperature', 0.1)
        self.max_tokens = self.config.get('max_tokens', 2000)

        self._call_count = 0
        self._failure_count = 0
        self._total_call_time = 0.0

    @property
    @abstractmethod
    def backend_type(self) -> BackendType:
        """Return the backend type."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier."""
        pass

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        output_schema: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Run one completion and return the raw response text.

        Backends raise AnalysisUnavailable (or a subclass) on any failure.
        """
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """
        Check if the backend is available and ready.

        Returns:
            {"healthy": bool, "backend": str, "model": str, "details": str}
        """
        pass

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        output_schema: Optional[Dict[str, Any]] = None,
    ) -> Union[str, Dict[str, Any]]:
        """
        Run a completion bounded by the configured timeout.

        Args:
            system_prompt: Instruction for the model
            user_prompt: The request, including the document text
            output_schema: JSON schema the response must follow. When given,
                the parsed object is returned instead of text.

        Raises:
            LLMTimeoutError: The call exceeded the timeout
            LLMResponseError: Schema call returned something that isn't a JSON object
            AnalysisUnavailable: Backend not configured or call failed
        """
        start = time.perf_counter()
        try:
            text = await asyncio.wait_for(
                self._complete(system_prompt, user_prompt, output_schema),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            self._failure_count += 1
            self.logger.error(f"LLM request timed out after {self.timeout}s (model={self.model_name})")
            raise LLMTimeoutError(f"LLM request timed out after {self.timeout}s")
        except AnalysisUnavailable:
            self._failure_count += 1
            raise

        elapsed = time.perf_counter() - start
        self._call_count += 1
        self._total_call_time += elapsed
        self.logger.info(f"Completion from {self.model_name} in {elapsed:.2f}s ({len(text)} chars)")

        if output_schema is None:
            return text.strip()
        return self.parse_json(text)

    def parse_json(self, response_text: str) -> Dict[str, Any]:
        """
        Parse a schema-constrained response.

        No repair or brace-hunting: the backend was asked for JSON matching
        a schema, so anything else is a failed call.
        """
        try:
            parsed = json.loads(response_text)
        except (TypeError, json.JSONDecodeError) as e:
            raise LLMResponseError(f"Model returned malformed JSON: {e}", raw_text=response_text) from e

        if not isinstance(parsed, dict):
            raise LLMResponseError(
                f"Expected a JSON object, got {type(parsed).__name__}",
                raw_text=response_text,
            )
        return parsed

    def get_statistics(self) -> Dict[str, Any]:
        avg_time = (
            self._total_call_time / self._call_count
            if self._call_count > 0
            else 0.0
        )
        return {
            "backend": self.backend_type.value,
            "model": self.model_name,
            "call_count": self._call_count,
            "failure_count": self._failure_count,
            "total_call_time": self._total_call_time,
            "average_call_time": avg_time,
        }

    async def close(self):
        """Release network resources. No-op by default."""
        pass


class UnconfiguredLLMClient(BaseLLMClient):
    """Selected when no backend is configured. Callers fall back to heuristics."""

    def __init__(self, reason: str = "No LLM backend configured"):
        super().__init__({})
        self.reason = reason

    @property
    def backend_type(self) -> BackendType:
        return BackendType.NONE

    @property
    def model_name(self) -> str:
        return "none"

    @property
    def is_configured(self) -> bool:
        return False

    async def _complete(self, system_prompt, user_prompt, output_schema=None) -> str:
        raise AnalysisUnavailable(self.reason)

    async def health_check(self) -> Dict[str, Any]:
        return {
            "healthy": False,
            "backend": "none",
            "model": "none",
            "details": self.reason,
        }
