"""Database layer package.

Public re-exports so callers can write::

    from keycrawl.db import get_connection, init_db
    from keycrawl.db import reports
"""

from keycrawl.db.connection import get_connection
from keycrawl.db.migrations import init_db
from keycrawl.db import reports

__all__ = ["get_connection", "init_db", "reports"]
