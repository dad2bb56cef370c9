# ============================================================================
# src/health_records/api/routers/__init__.py
# ============================================================================
"""
One APIRouter per resource.
"""
