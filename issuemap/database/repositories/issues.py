"""
issues.py - Issue repository
Single responsibility: persistence for issues and label relations.
"""

from issuemap.database.connection import get_connection
from issuemap.database.repositories.labels import ensure_labels, normalize_labels
from issuemap.domain.models import CLOSED_STATUSES, Issue
from issuemap.utils.time import now_iso, parse_iso, to_iso

# Columns update_issue may touch
UPDATABLE_FIELDS = ("title", "description", "type", "priority", "assignee", "branch")


def _set_issue_labels(conn, issue_id: int, labels: list[str]) -> None:
    labels = normalize_labels(labels)
    conn.execute("DELETE FROM issue_labels WHERE issue_id = ?", (issue_id,))
    if not labels:
        return
    ids = ensure_labels(conn, labels)
    for lid in ids:
        conn.execute(
            "INSERT OR IGNORE INTO issue_labels (issue_id, label_id) VALUES (?, ?)",
            (issue_id, lid),
        )


def _row_to_issue(row, labels: list[str]) -> Issue:
    return Issue(
        id=row["id"],
        title=row["title"],
        description=row["description"] or "",
        type=row["type"],
        status=row["status"],
        priority=row["priority"],
        assignee=row["assignee"] or "",
        branch=row["branch"] or "",
        labels=labels,
        created_at=parse_iso(row["created_at"]),
        updated_at=parse_iso(row["updated_at"]),
        closed_at=parse_iso(row["closed_at"]),
    )


def _labels_by_issue(conn, issue_ids: list[int]) -> dict[int, list[str]]:
    result: dict[int, list[str]] = {iid: [] for iid in issue_ids}
    if not issue_ids:
        return result
    placeholders = ",".join(["?"] * len(issue_ids))
    query = f"""
        SELECT il.issue_id, l.name
        FROM issue_labels il
        JOIN labels l ON l.id = il.label_id
        WHERE il.issue_id IN ({placeholders})
        ORDER BY l.name
    """
    for row in conn.execute(query, issue_ids).fetchall():
        result.setdefault(row["issue_id"], []).append(row["name"])
    return result


def list_all(db_path: str) -> list[Issue]:
    """Full working set, oldest first. Search filters it in memory."""
    with get_connection(db_path) as conn:
        rows = conn.execute("SELECT * FROM issues ORDER BY id").fetchall()
        labels = _labels_by_issue(conn, [r["id"] for r in rows])
        return [_row_to_issue(r, labels.get(r["id"], [])) for r in rows]


def get_issue(db_path: str, issue_id: int) -> Issue | None:
    with get_connection(db_path) as conn:
        row = conn.execute("SELECT * FROM issues WHERE id = ?", (issue_id,)).fetchone()
        if not row:
            return None
        labels = _labels_by_issue(conn, [issue_id])
        return _row_to_issue(row, labels[issue_id])


def create_issue(db_path: str, issue: Issue) -> int:
    created = to_iso(issue.created_at) or now_iso()
    with get_connection(db_path) as conn:
        cur = conn.execute(
            "INSERT INTO issues (title, description, type, status, priority, assignee, branch,"
            " created_at, updated_at, closed_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                issue.title,
                issue.description or "",
                issue.type,
                issue.status,
                issue.priority,
                issue.assignee or "",
                issue.branch or "",
                created,
                to_iso(issue.updated_at) or created,
                to_iso(issue.closed_at),
            ),
        )
        iid = cur.lastrowid
        if iid is None:
            raise RuntimeError("Failed to insert issue")
        _set_issue_labels(conn, iid, issue.labels)
        return iid


def update_issue(db_path: str, issue_id: int, labels: list[str] | None = None, **fields) -> None:
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    assignments = [f"{name} = ?" for name in fields]
    params = list(fields.values())
    assignments.append("updated_at = ?")
    params.append(now_iso())
    params.append(issue_id)
    with get_connection(db_path) as conn:
        conn.execute(
            f"UPDATE issues SET {', '.join(assignments)} WHERE id = ?", params
        )
        if labels is not None:
            _set_issue_labels(conn, issue_id, labels)


def set_status(db_path: str, issue_id: int, status: str) -> str:
    """Change status, stamping or clearing closed_at. Returns the previous status."""
    with get_connection(db_path) as conn:
        row = conn.execute(
            "SELECT status, closed_at FROM issues WHERE id = ?", (issue_id,)
        ).fetchone()
        if row is None:
            raise ValueError(f"Issue {issue_id} not found")
        stamp = now_iso()
        if status in CLOSED_STATUSES:
            closed_at = row["closed_at"] or stamp
        else:
            closed_at = None
        conn.execute(
            "UPDATE issues SET status = ?, closed_at = ?, updated_at = ? WHERE id = ?",
            (status, closed_at, stamp, issue_id),
        )
        return row["status"]


def delete_issue(db_path: str, issue_id: int) -> bool:
    with get_connection(db_path) as conn:
        cur = conn.execute("DELETE FROM issues WHERE id = ?", (issue_id,))
        return cur.rowcount > 0
