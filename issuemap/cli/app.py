"""
app.py - issuemap command line application
Single responsibility: wire typer commands to the service layer.
"""
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from issuemap.cli import search as search_commands
from issuemap.cli import views
from issuemap.cli.helpers import (
    CliContext,
    current_user,
    fail,
    parse_labels,
    resolve_project_dir,
)
from issuemap.config import (
    APP_VERSION,
    COLOR_SUCCESS,
    LOG_LEVEL_ENV,
    init_target_dir,
    project_paths,
)
from issuemap.database.repositories import config as config_repo
from issuemap.database.schema import initialize_schema
from issuemap.domain.errors import ConfigError, IssueNotFoundError
from issuemap.domain.models import CLOSED_STATUSES, DEFAULT_PRIORITY, DEFAULT_TYPE, ProjectConfig
from issuemap.services import issue_service

app = typer.Typer(
    help="issuemap - issue tracking for Git projects with a search query language",
    no_args_is_help=True,
)
app.command("search")(search_commands.search)
app.add_typer(search_commands.saved_app, name="saved")


def _version_callback(value: bool):
    if value:
        typer.echo(f"issuemap {APP_VERSION}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    project_dir: Optional[Path] = typer.Option(
        None, "--dir", help="Path to the .issuemap directory (default: search upward from cwd)"
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    resolved = resolve_project_dir(project_dir)
    if resolved is not None and resolved.is_dir() and not no_color:
        try:
            no_color = not config_repo.load_config(project_paths(resolved).config_path).colors
        except ConfigError as e:
            fail(Console(color_system=None), str(e))
    console = Console(
        no_color=no_color,
        color_system=None if no_color else "auto",
        highlight=False,
    )
    ctx.obj = CliContext(
        project_dir=resolved,
        console=console,
        requested_dir=project_dir,
    )


# ---------------------------------------------------------------------------
# Project setup
# ---------------------------------------------------------------------------


@app.command()
def init(
    ctx: typer.Context,
    name: str = typer.Option("", "--name", "-n", help="Project name"),
):
    """Create the .issuemap directory, database and config."""
    obj: CliContext = ctx.obj
    target = init_target_dir(obj.requested_dir)
    target.mkdir(parents=True, exist_ok=True)
    paths = project_paths(target)

    initialize_schema(paths.db_path)
    if not Path(paths.config_path).exists():
        config = ProjectConfig()
        if name:
            config.name = name
        config_repo.save_config(paths.config_path, config)

    obj.console.print(f"[{COLOR_SUCCESS}]issuemap repository initialized[/] in {target}")


# ---------------------------------------------------------------------------
# Issues CRUD
# ---------------------------------------------------------------------------


@app.command()
def create(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Issue title"),
    description: str = typer.Option("", "--description", "-d", help="Issue description"),
    issue_type: str = typer.Option(DEFAULT_TYPE, "--type", "-t", help="bug, feature, task, epic, improvement"),
    priority: str = typer.Option(DEFAULT_PRIORITY, "--priority", "-p", help="low, medium, high, critical"),
    assignee: str = typer.Option("", "--assignee", "-a", help="Assignee username"),
    assign_me: bool = typer.Option(False, "--me", help="Assign to the current user"),
    branch: str = typer.Option("", "--branch", "-b", help="Linked branch"),
    labels: Optional[str] = typer.Option(None, "--labels", "-l", help="Comma-separated labels"),
):
    """Create a new issue."""
    obj: CliContext = ctx.obj
    paths = obj.paths()
    try:
        issue_id = issue_service.create_issue(
            paths.db_path,
            title,
            description=description,
            issue_type=issue_type,
            priority=priority,
            assignee=current_user() if assign_me else assignee,
            branch=branch,
            labels=parse_labels(labels),
        )
    except ValueError as e:
        fail(obj.console, str(e))
    issue = issue_service.get_issue(paths.db_path, issue_id)
    obj.console.print(
        f"[{COLOR_SUCCESS}]Created[/] #{issue.id}: {escape(issue.title)} "
        f"\\[{issue.type}, {issue.priority}]"
    )


@app.command("list")
def list_issues(
    ctx: typer.Context,
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Only issues with this status"),
    show_all: bool = typer.Option(False, "--all", help="Include done and closed issues"),
    output_format: str = typer.Option("table", "--format", "-f", help="table or json"),
):
    """List issues (open work by default)."""
    obj: CliContext = ctx.obj
    paths = obj.paths()
    try:
        issues = issue_service.list_issues(paths.db_path, status=status)
    except ValueError as e:
        fail(obj.console, str(e))
    if not status and not show_all:
        issues = [i for i in issues if i.status not in CLOSED_STATUSES]

    if output_format == "json":
        views.print_json([views.issue_to_dict(i) for i in issues])
        return
    if output_format != "table":
        fail(obj.console, f"unsupported format: {output_format}")
    if not issues:
        obj.console.print("No issues found.")
        return
    views.render_issue_table(obj.console, issues)


@app.command("labels")
def list_labels(
    ctx: typer.Context,
    output_format: str = typer.Option("table", "--format", "-f", help="table or json"),
):
    """List labels in use, for labels:a,b searches."""
    obj: CliContext = ctx.obj
    labels = issue_service.list_labels(obj.paths().db_path)
    if output_format == "json":
        views.print_json(labels)
        return
    if output_format != "table":
        fail(obj.console, f"unsupported format: {output_format}")
    if not labels:
        obj.console.print("No labels in use.")
        return
    obj.console.print(", ".join(escape(label) for label in labels))


@app.command()
def show(
    ctx: typer.Context,
    issue_id: int = typer.Argument(..., help="Issue ID"),
    output_format: str = typer.Option("table", "--format", "-f", help="table or json"),
):
    """Show one issue."""
    obj: CliContext = ctx.obj
    paths = obj.paths()
    try:
        issue = issue_service.get_issue(paths.db_path, issue_id)
    except IssueNotFoundError as e:
        fail(obj.console, str(e))
    if output_format == "json":
        views.print_json(views.issue_to_dict(issue))
        return
    views.render_issue_detail(obj.console, issue)


@app.command()
def edit(
    ctx: typer.Context,
    issue_id: int = typer.Argument(..., help="Issue ID"),
    title: Optional[str] = typer.Option(None, "--title", help="New title"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New description"),
    issue_type: Optional[str] = typer.Option(None, "--type", "-t", help="New type"),
    priority: Optional[str] = typer.Option(None, "--priority", "-p", help="New priority"),
    assignee: Optional[str] = typer.Option(None, "--assignee", "-a", help="New assignee (empty to clear)"),
    branch: Optional[str] = typer.Option(None, "--branch", "-b", help="New branch (empty to clear)"),
    labels: Optional[str] = typer.Option(None, "--labels", "-l", help="Replace labels (comma-separated)"),
):
    """Edit fields of an issue."""
    obj: CliContext = ctx.obj
    paths = obj.paths()
    try:
        issue = issue_service.update_issue(
            paths.db_path,
            issue_id,
            title=title,
            description=description,
            issue_type=issue_type,
            priority=priority,
            assignee=assignee,
            branch=branch,
            labels=parse_labels(labels),
        )
    except (IssueNotFoundError, ValueError) as e:
        fail(obj.console, str(e))
    obj.console.print(f"[{COLOR_SUCCESS}]Updated[/] #{issue.id}")


@app.command("status")
def set_status(
    ctx: typer.Context,
    issue_id: int = typer.Argument(..., help="Issue ID"),
    status: str = typer.Argument(..., help="open, in-progress, review, done, closed"),
):
    """Move an issue to another status."""
    obj: CliContext = ctx.obj
    paths = obj.paths()
    try:
        issue = issue_service.set_status(paths.db_path, issue_id, status)
    except (IssueNotFoundError, ValueError) as e:
        fail(obj.console, str(e))
    obj.console.print(f"#{issue.id} is now {issue.status}")


@app.command()
def close(ctx: typer.Context, issue_id: int = typer.Argument(..., help="Issue ID")):
    """Close an issue."""
    obj: CliContext = ctx.obj
    try:
        issue = issue_service.close_issue(obj.paths().db_path, issue_id)
    except IssueNotFoundError as e:
        fail(obj.console, str(e))
    obj.console.print(f"[{COLOR_SUCCESS}]Closed[/] #{issue.id}")


@app.command()
def reopen(ctx: typer.Context, issue_id: int = typer.Argument(..., help="Issue ID")):
    """Reopen a closed issue."""
    obj: CliContext = ctx.obj
    try:
        issue = issue_service.reopen_issue(obj.paths().db_path, issue_id)
    except IssueNotFoundError as e:
        fail(obj.console, str(e))
    obj.console.print(f"[{COLOR_SUCCESS}]Reopened[/] #{issue.id}")


@app.command()
def delete(
    ctx: typer.Context,
    issue_id: int = typer.Argument(..., help="Issue ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete an issue permanently."""
    obj: CliContext = ctx.obj
    paths = obj.paths()
    if not yes:
        typer.confirm(f"Delete issue #{issue_id}?", abort=True)
    try:
        issue_service.delete_issue(paths.db_path, issue_id)
    except IssueNotFoundError as e:
        fail(obj.console, str(e))
    obj.console.print(f"[{COLOR_SUCCESS}]Deleted[/] #{issue_id}")


def main() -> None:
    logging.basicConfig(
        level=os.environ.get(LOG_LEVEL_ENV, "WARNING").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app()
