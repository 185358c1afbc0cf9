"""
Lesson viewer UI package.

Modules:
    - app: Streamlit application orchestrator (streamlit_app).
    - header: Global header (lesson picker, data, theme and cache preferences).

Usage:
    from app.ui import streamlit_app
    streamlit_app(default_lesson="graphics")
"""

from __future__ import annotations

from .app import streamlit_app
from .header import render_header

__all__ = [
    "streamlit_app",
    "render_header",
]
