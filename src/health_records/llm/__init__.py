# ============================================================================
# src/health_records/llm/__init__.py
# ============================================================================
"""
LLM client abstraction: one interface, several backends, chosen at startup.
"""

from .base import BaseLLMClient, BackendType, UnconfiguredLLMClient
from .client import create_client
from .schemas import MEDICAL_ANALYSIS_SCHEMA, MEDICATION_LIST_SCHEMA
