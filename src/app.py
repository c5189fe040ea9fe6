"""Dispatch FastAPI application.

Web server that processes dispatch commands synchronously via HTTP. Every
request runs inside the dispatch domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay and the default log level.
from dispatch.domain import dispatch

dispatch.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
from dispatch.api.application import create_app  # noqa: E402

app = create_app()
