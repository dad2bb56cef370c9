# ============================================================================
# src/health_records/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .base_config import base_settings, BaseSettingsConfig
from .llm_config import llm_settings, LLMSettings
from .extraction_config import extraction_settings, ExtractionSettings
from .assignment_config import assignment_settings, AssignmentSettings
from .logging_config import logging_settings, LoggingSettings
