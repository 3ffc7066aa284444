"""
views.py - Terminal rendering
Single responsibility: turn issues, search results and parsed queries into
rich tables or JSON.
"""
import json

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from issuemap.cli.helpers import format_datetime, priority_style, status_style
from issuemap.config import COLOR_PRIMARY, COLOR_TEXT_MUTED, COLOR_WARNING
from issuemap.domain.models import Issue
from issuemap.domain.query import SearchQuery, SearchResult
from issuemap.utils.time import to_iso


def issue_to_dict(issue: Issue) -> dict:
    return {
        "id": issue.id,
        "title": issue.title,
        "description": issue.description,
        "type": issue.type,
        "status": issue.status,
        "priority": issue.priority,
        "assignee": issue.assignee,
        "branch": issue.branch,
        "labels": list(issue.labels),
        "created_at": to_iso(issue.created_at),
        "updated_at": to_iso(issue.updated_at),
        "closed_at": to_iso(issue.closed_at),
    }


def print_json(payload) -> None:
    # Plain echo keeps the output machine-readable (no markup, no wrapping)
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def render_issue_table(console: Console, issues: list[Issue] | tuple[Issue, ...], title: str | None = None) -> None:
    table = Table(title=title, header_style=COLOR_PRIMARY)
    table.add_column("ID", justify="right", no_wrap=True)
    table.add_column("Title")
    table.add_column("Type", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Priority", no_wrap=True)
    table.add_column("Assignee")
    table.add_column("Labels")
    table.add_column("Updated", no_wrap=True)

    for issue in issues:
        table.add_row(
            f"#{issue.id}",
            escape(issue.title),
            issue.type,
            f"[{status_style(issue.status)}]{issue.status}[/]",
            f"[{priority_style(issue.priority)}]{issue.priority}[/]",
            escape(issue.assignee or "-"),
            escape(", ".join(issue.labels)),
            format_datetime(issue.updated_at),
        )
    console.print(table)


def render_issue_detail(console: Console, issue: Issue) -> None:
    lines = [
        f"[bold]Type:[/] {issue.type}",
        f"[bold]Status:[/] [{status_style(issue.status)}]{issue.status}[/]",
        f"[bold]Priority:[/] [{priority_style(issue.priority)}]{issue.priority}[/]",
        f"[bold]Assignee:[/] {escape(issue.assignee or '-')}",
        f"[bold]Branch:[/] {escape(issue.branch or '-')}",
        f"[bold]Labels:[/] {escape(', '.join(issue.labels) or '-')}",
        f"[bold]Created:[/] {format_datetime(issue.created_at)}",
        f"[bold]Updated:[/] {format_datetime(issue.updated_at)}",
    ]
    if issue.closed_at:
        lines.append(f"[bold]Closed:[/] {format_datetime(issue.closed_at)}")
    if issue.description:
        lines.extend(["", escape(issue.description)])
    console.print(Panel("\n".join(lines), title=f"#{issue.id} {escape(issue.title)}", expand=False))


def render_search_result(console: Console, result: SearchResult) -> None:
    if not result.issues:
        console.print("No issues found matching your query.")
        console.print("Try:")
        console.print("  - Broadening your search terms")
        console.print("  - Removing some filters")
        console.print("  - Using 'OR' instead of 'AND'")
        console.print("  - Checking spelling of field values")
        return

    shown = f"showing {result.count}" if result.count < result.total else "showing all"
    console.print(
        f"Found {result.total} issue(s), {shown} "
        f"[{COLOR_TEXT_MUTED}](in {result.duration * 1000:.1f}ms)[/]"
    )
    render_issue_table(console, result.issues)


def search_result_to_dict(raw: str, result: SearchResult) -> dict:
    return {
        "query": raw,
        "total": result.total,
        "count": result.count,
        "duration": result.duration,
        "issues": [issue_to_dict(i) for i in result.issues],
    }


def render_explain(console: Console, query: SearchQuery) -> None:
    table = Table(title="Search Query Explanation", show_header=False, header_style=COLOR_PRIMARY)
    table.add_column("Part", style="bold")
    table.add_column("Value")

    table.add_row("Text search", escape(f'"{query.text}"') if query.text else "(none)")

    if query.filters:
        filters = "\n".join(
            f"{'NOT ' if field in query.negated else ''}{field} = {escape(' | '.join(values))}"
            for field, values in query.filters.items()
        )
    else:
        filters = "(none)"
    table.add_row("Filters", filters)

    if query.date_filters:
        date_lines = "\n".join(
            f"{'NOT ' if field in query.negated else ''}{field} {bound.describe()}"
            for field, bounds in query.date_filters.items()
            for bound in bounds
        )
    else:
        date_lines = "(none)"
    table.add_row("Date filters", date_lines)

    table.add_row("Boolean operator", query.bool_operator)
    if query.sort_by:
        table.add_row("Sort", f"{query.sort_by} ({query.sort_order})")
    if query.limit is None:
        limit = "(default)"
    elif query.limit == 0:
        limit = "0 (unbounded)"
    else:
        limit = str(query.limit)
    table.add_row("Limit", limit)
    console.print(table)


def render_saved_searches(console: Console, searches: dict[str, str]) -> None:
    if not searches:
        console.print("No saved searches found.")
        console.print(f"[{COLOR_WARNING}]Save one with: issuemap saved save NAME \"QUERY\"[/]")
        return

    table = Table(title=f"Saved Searches ({len(searches)})", header_style=COLOR_PRIMARY)
    table.add_column("Name", no_wrap=True)
    table.add_column("Query")
    for name in sorted(searches):
        table.add_row(escape(name), escape(searches[name]))
    console.print(table)
