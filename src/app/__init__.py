"""
Top-level Streamlit app package.

This package hosts the interactive lesson viewer (Streamlit), kept apart from the
tidylab.* library modules. Lessons, datasets and charts come from tidylab; the page
layout and caching live here.

CLI entrypoint (configured in pyproject.toml):
    tidylab-app = app.main:main
"""

from __future__ import annotations
