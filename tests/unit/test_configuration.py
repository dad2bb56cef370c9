# ============================================================================
# FILE: tests/unit/test_configuration.py
# ============================================================================
"""
Unit tests for settings and logging setup
"""

import json
import logging

import pytest

from health_records.config import (
    AssignmentSettings,
    BaseSettingsConfig,
    ExtractionSettings,
    LLMSettings,
    LoggingSettings,
)
from health_records.utils.logging import JsonFormatter, log_performance, log_stage, setup_logging


# ============================================================================
# SETTINGS
# ============================================================================

def test_defaults():
    """Test that configuration loads with the documented defaults"""
    extraction = ExtractionSettings(_env_file=None)
    assignment = AssignmentSettings(_env_file=None)
    llm = LLMSettings(_env_file=None)

    assert extraction.MIN_ANALYSIS_CHARS == 50
    assert extraction.PDF_MIN_TEXT_CHARS == 50
    assert extraction.PDF_OCR_MAX_PAGES == 10
    assert extraction.MAX_UPLOAD_BYTES == 10 * 1024 * 1024
    assert "application/pdf" in extraction.ALLOWED_MIME_TYPES
    assert assignment.ASSIGNMENT_EXPIRY_DAYS == 90
    assert assignment.DEFAULT_SHARE_EXPIRY_DAYS == 7
    assert assignment.DEFAULT_SPECIALIZATION == "General Physician"
    assert llm.LLM_TIMEOUT == 60.0


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ASSIGNMENT_EXPIRY_DAYS", "30")
    monkeypatch.setenv("LLM_BACKEND", "ollama")
    monkeypatch.setenv("OCR_TIMEOUT_SECONDS", "5.5")
    monkeypatch.setenv("LOG_FORMAT_JSON", "true")

    assert AssignmentSettings(_env_file=None).ASSIGNMENT_EXPIRY_DAYS == 30
    assert LLMSettings(_env_file=None).LLM_BACKEND == "ollama"
    assert ExtractionSettings(_env_file=None).OCR_TIMEOUT_SECONDS == 5.5
    assert LoggingSettings(_env_file=None).LOG_FORMAT_JSON is True


def test_cors_origin_pattern_is_opt_in(monkeypatch):
    assert BaseSettingsConfig(_env_file=None).CORS_ORIGIN_REGEX is None

    monkeypatch.setenv("CORS_ORIGIN_REGEX", r"http://10\.0\.0\.\d+:\d+")

    assert BaseSettingsConfig(_env_file=None).CORS_ORIGIN_REGEX == r"http://10\.0\.0\.\d+:\d+"


def test_create_directories(tmp_path):
    settings = BaseSettingsConfig(
        _env_file=None,
        DATA_DIR=tmp_path / "data",
        UPLOADS_DIR=tmp_path / "data" / "uploads",
        DATABASE_PATH=tmp_path / "db" / "health_records.db",
    )

    settings.create_directories()

    assert (tmp_path / "data" / "uploads").is_dir()
    assert (tmp_path / "db").is_dir()


# ============================================================================
# LOGGING
# ============================================================================

@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_setup_logging_with_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "service.log"

    setup_logging(level="debug", log_file=log_file, format_json=True)
    logging.getLogger("health_records.test").info("written to file")
    for handler in restore_root_logger.handlers:
        handler.flush()

    assert restore_root_logger.level == logging.DEBUG
    line = log_file.read_text().strip().splitlines()[-1]
    assert json.loads(line)["message"] == "written to file"


def test_json_formatter_includes_report_id():
    record = logging.LogRecord("health_records.pipeline", logging.INFO, __file__, 10, "done", None, None)
    record.report_id = "r-1"

    data = json.loads(JsonFormatter().format(record))

    assert data["level"] == "INFO"
    assert data["logger"] == "health_records.pipeline"
    assert data["message"] == "done"
    assert data["report_id"] == "r-1"


def test_log_stage_logs_failure_and_reraises(caplog):
    logger = logging.getLogger("health_records.test")

    with caplog.at_level(logging.INFO, logger="health_records.test"):
        with log_stage(logger, "text extraction"):
            pass
        with pytest.raises(ValueError):
            with log_stage(logger, "analysis"):
                raise ValueError("boom")

    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("text extraction completed in") for m in messages)
    assert any(m.startswith("analysis failed after") and m.endswith("boom") for m in messages)


@pytest.mark.asyncio
async def test_log_performance_wraps_sync_and_async(caplog):
    logger = logging.getLogger("health_records.test")

    @log_performance(logger, "sync op")
    def add(a, b):
        return a + b

    @log_performance(logger, "async op")
    async def double(x):
        return x * 2

    with caplog.at_level(logging.INFO, logger="health_records.test"):
        assert add(1, 2) == 3
        assert await double(4) == 8

    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("sync op completed") for m in messages)
    assert any(m.startswith("async op completed") for m in messages)
    assert double.__name__ == "double"
