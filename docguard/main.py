"""ASGI entry point for the reference collector.

Run with:
    uvicorn docguard.main:app --port 8000
"""

from docguard.collector import create_app
from docguard.core.config import settings

app = create_app(settings)
