"""Database initialisation.

``init_db(conn)`` creates the ``reports`` table from ``schema.sql`` and stamps
the schema version.  It is idempotent and safe to call on every startup.
"""

from __future__ import annotations

import sqlite3

from keycrawl.config import settings

# Bump together with a change to schema.sql.
SCHEMA_VERSION = 1


def init_db(conn: sqlite3.Connection) -> None:
    """Create the reports table, its indexes and the version stamp."""
    sql = settings.schema_path.read_text(encoding="utf-8")
    # executescript() issues an implicit COMMIT first, which is fine for a
    # DDL-only script.
    conn.executescript(sql)
    with conn:
        conn.execute(
            "INSERT OR IGNORE INTO schema_version(version) VALUES (?)",
            (SCHEMA_VERSION,),
        )


def current_version(conn: sqlite3.Connection) -> int:
    """Return the schema version stamped on *conn* (0 for an empty database)."""
    try:
        row = conn.execute(
            "SELECT COALESCE(MAX(version), 0) FROM schema_version"
        ).fetchone()
    except sqlite3.OperationalError:
        return 0
    return row[0] if row else 0
