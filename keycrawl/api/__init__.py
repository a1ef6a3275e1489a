"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from keycrawl.api import app

    uvicorn keycrawl.api:app --reload
"""

from keycrawl.api.app import app

__all__ = ["app"]
