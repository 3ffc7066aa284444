"""
schema.py - Schema creation helpers
Single responsibility: define and apply database schema.
"""
import logging
from issuemap.database.connection import get_connection

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS issues (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    title       TEXT    NOT NULL,
    description TEXT    DEFAULT '',
    type        TEXT    NOT NULL DEFAULT 'task',
    status      TEXT    NOT NULL DEFAULT 'open',
    priority    TEXT    NOT NULL DEFAULT 'medium',
    assignee    TEXT    DEFAULT '',
    branch      TEXT    DEFAULT '',
    created_at  TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL,
    closed_at   TEXT
);

CREATE INDEX IF NOT EXISTS idx_issues_status
    ON issues(status);
CREATE INDEX IF NOT EXISTS idx_issues_created_at
    ON issues(created_at DESC);

CREATE TABLE IF NOT EXISTS labels (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE NOT NULL
);

CREATE TABLE IF NOT EXISTS issue_labels (
    issue_id INTEGER NOT NULL REFERENCES issues(id) ON DELETE CASCADE,
    label_id INTEGER NOT NULL REFERENCES labels(id) ON DELETE CASCADE,
    PRIMARY KEY (issue_id, label_id)
);
CREATE INDEX IF NOT EXISTS idx_issue_labels_issue_id
    ON issue_labels(issue_id);
CREATE INDEX IF NOT EXISTS idx_issue_labels_label_id
    ON issue_labels(label_id);
"""


def initialize_schema(db_path: str) -> None:
    """Create tables and indexes if missing."""
    try:
        with get_connection(db_path) as conn:
            conn.executescript(SCHEMA_SQL)
    except Exception as e:
        logger.error("Failed to initialize database schema: %s", e)
        raise
