# ============================================================================
# src/health_records/config/assignment_config.py
# ============================================================================
"""
Doctor Assignment & Sharing Settings
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AssignmentSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ASSIGNMENT_EXPIRY_DAYS: int = Field(
        default=90,
        description="Lifetime of an AI-assigned doctor relationship"
    )
    DEFAULT_SHARE_EXPIRY_DAYS: int = Field(
        default=7,
        description="Lifetime of a manual share link when none is requested"
    )
    DEFAULT_SPECIALIZATION: str = Field(
        default="General Physician",
        description="Specialization used when detection is empty, fails or is ambiguous"
    )


assignment_settings = AssignmentSettings()
