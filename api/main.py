# ============================================================================
# api/main.py
# ============================================================================
"""
Entry point for the Health Records API.

    uvicorn api.main:app --reload
or
    python api/main.py
"""

from dotenv import load_dotenv

# Settings classes read .env themselves; this also exposes it to
# libraries that only look at os.environ (e.g. TESSDATA_PREFIX)
load_dotenv()

from health_records.api import create_app

app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
