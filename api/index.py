"""Vercel serverless entry point — re-exports the FastAPI app."""

import sys
from pathlib import Path

# src/ and the project root hold the loading_insights and config packages
_root = Path(__file__).resolve().parent.parent
for p in [str(_root / "src"), str(_root)]:
    if p not in sys.path:
        sys.path.insert(0, p)

from loading_insights.action.api import app  # noqa: E402, F401

handler = app
