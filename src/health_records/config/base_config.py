# ============================================================================
# src/health_records/config/base_config.py
# ============================================================================
"""
Base Configuration
- Project root
- Data directory, SQLite document store, uploaded file storage
- CORS origins for the web client, plus an optional origin pattern
"""

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseSettingsConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Root project directory
    PROJECT_ROOT: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent.parent.parent,
        description="Root directory of the project"
    )

    DATA_DIR: Path = Field(
        default=Path("data"),
        description="Directory holding the database and uploaded files"
    )

    DATABASE_PATH: Path = Field(
        default=Path("data/health_records.db"),
        description="SQLite database backing the document store"
    )

    UPLOADS_DIR: Path = Field(
        default=Path("data/uploads"),
        description="Local blob storage for uploaded report files"
    )

    CORS_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ],
        description="Origins allowed to call the API from a browser"
    )
    CORS_ORIGIN_REGEX: Optional[str] = Field(
        default=None,
        description="Regex for additional allowed origins, e.g. devices on a LAN"
    )

    def create_directories(self):
        """Create all necessary directories if they don't exist"""
        for directory in (self.DATA_DIR, self.UPLOADS_DIR, self.DATABASE_PATH.parent):
            directory.mkdir(parents=True, exist_ok=True)


# Global instance
base_settings = BaseSettingsConfig()
