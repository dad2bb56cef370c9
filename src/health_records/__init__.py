# ============================================================================
# src/health_records/__init__.py
# ============================================================================
"""
Health records service: report ingestion, AI analysis and doctor matching.
"""

__version__ = "1.0.0"
