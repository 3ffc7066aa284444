"""
search.py - Search commands
Single responsibility: the `search` command and the `saved` sub-commands
that manage named queries.
"""
from typing import Optional

import typer
from rich.markup import escape

from issuemap.cli import views
from issuemap.cli.helpers import CliContext, fail
from issuemap.config import COLOR_SUCCESS, COLOR_TEXT_MUTED, COLOR_WARNING
from issuemap.database.repositories import config as config_repo
from issuemap.domain.errors import ConfigError, SavedSearchNotFoundError, SearchQueryError
from issuemap.services import saved_search_service, search_service

saved_app = typer.Typer(help="Manage saved searches", no_args_is_help=True)


def _default_limit(obj: CliContext, config_path: str, limit: Optional[int]) -> int:
    if limit is not None:
        return limit
    try:
        return config_repo.load_config(config_path).default_limit
    except ConfigError as e:
        fail(obj.console, str(e))


def _show_result(obj: CliContext, raw: str, result, output_format: str) -> None:
    if output_format == "json":
        views.print_json(views.search_result_to_dict(raw, result))
        return
    views.render_search_result(obj.console, result)


def _check_format(obj: CliContext, output_format: str) -> None:
    if output_format not in ("table", "json"):
        fail(obj.console, f"unsupported format: {output_format}")


def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Search query"),
    save_as: Optional[str] = typer.Option(None, "--save", help="Save this search under a name"),
    explain: bool = typer.Option(False, "--explain", help="Show how the query was parsed and exit"),
    output_format: str = typer.Option("table", "--format", "-f", help="table or json"),
    limit: Optional[int] = typer.Option(
        None, "--limit", min=0, help="Default result limit when the query has no limit:N (0 = unbounded)"
    ),
):
    """Search issues using the query language:

    \b
      type:bug  status:open  priority:high  assignee:jane  branch:feature-123
      labels:urgent,bug        any of the listed labels
      created:>2024-01-01      created after a date
      updated:<7d              updated less than 7 days ago (d, w, m, y)
      NOT status:closed        invert a field filter
      AND / OR                 how filters combine (default AND)
      "login error"  fix login free text over title and description
      sort:created:desc        sort by a field (asc by default)
      limit:10                 at most 10 results
    """
    obj: CliContext = ctx.obj
    _check_format(obj, output_format)
    try:
        parsed = search_service.parse_search_query(query)
    except SearchQueryError as e:
        fail(obj.console, f"Invalid query: {escape(str(e))}", code=2)

    if explain:
        if output_format == "json":
            views.print_json(parsed.to_dict())
        else:
            views.render_explain(obj.console, parsed)
        return

    paths = obj.paths()
    result = search_service.execute_search(
        paths.db_path,
        parsed,
        default_limit=_default_limit(obj, paths.config_path, limit),
    )
    if parsed.is_empty and output_format == "table":
        obj.console.print(f"[{COLOR_TEXT_MUTED}]Empty query: every issue matches.[/]")
    _show_result(obj, query, result, output_format)

    if save_as:
        try:
            saved_search_service.save(paths.config_path, save_as, query)
        except (ValueError, ConfigError, OSError) as e:
            obj.console.print(f"[{COLOR_WARNING}]Failed to save search: {escape(str(e))}[/]")
        else:
            obj.console.print(f"Search saved as '{escape(save_as)}'")


@saved_app.command("save")
def save_search(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name for the search"),
    query: str = typer.Argument(..., help="Query string to store"),
):
    """Save a search query for later use."""
    obj: CliContext = ctx.obj
    paths = obj.paths()
    # Reject queries that could never run; the raw string is stored untouched
    try:
        search_service.parse_search_query(query)
    except SearchQueryError as e:
        fail(obj.console, f"Invalid query: {escape(str(e))}", code=2)
    try:
        saved_search_service.save(paths.config_path, name, query)
    except (ValueError, ConfigError) as e:
        fail(obj.console, escape(str(e)))
    obj.console.print(f"[{COLOR_SUCCESS}]Search query saved as '{escape(name)}'[/]")
    obj.console.print(f"Run with: issuemap saved run \"{escape(name)}\"")


@saved_app.command("run")
def run_search(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Saved search name"),
    output_format: str = typer.Option("table", "--format", "-f", help="table or json"),
    limit: Optional[int] = typer.Option(None, "--limit", min=0, help="Default result limit"),
):
    """Run a saved search query."""
    obj: CliContext = ctx.obj
    _check_format(obj, output_format)
    paths = obj.paths()
    try:
        raw, result = search_service.run_saved_search(
            paths.db_path,
            paths.config_path,
            name,
            default_limit=_default_limit(obj, paths.config_path, limit),
        )
    except SavedSearchNotFoundError as e:
        fail(obj.console, escape(str(e)))
    except SearchQueryError as e:
        fail(obj.console, f"Saved search '{escape(name)}' is invalid: {escape(str(e))}", code=2)
    except ConfigError as e:
        fail(obj.console, escape(str(e)))

    if output_format == "table":
        obj.console.print(f"Running saved search '{escape(name)}': {escape(raw)}\n")
    _show_result(obj, raw, result, output_format)


@saved_app.command("list")
def list_searches(
    ctx: typer.Context,
    output_format: str = typer.Option("table", "--format", "-f", help="table or json"),
):
    """List saved search queries."""
    obj: CliContext = ctx.obj
    _check_format(obj, output_format)
    paths = obj.paths()
    try:
        searches = saved_search_service.list_all(paths.config_path)
    except ConfigError as e:
        fail(obj.console, escape(str(e)))
    if output_format == "json":
        views.print_json(searches)
        return
    views.render_saved_searches(obj.console, searches)


@saved_app.command("delete")
def delete_search(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Saved search name"),
):
    """Delete a saved search."""
    obj: CliContext = ctx.obj
    paths = obj.paths()
    try:
        saved_search_service.delete(paths.config_path, name)
    except (SavedSearchNotFoundError, ConfigError) as e:
        fail(obj.console, escape(str(e)))
    obj.console.print(f"[{COLOR_SUCCESS}]Deleted saved search '{escape(name)}'[/]")
