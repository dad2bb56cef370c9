# ============================================================================
# src/health_records/api/__init__.py
# ============================================================================
"""
HTTP surface (FastAPI).
"""

from .app import create_app
