"""knowsys CLI - Query and update the context index of a knowledge root."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import click

from knowsys import facade
from knowsys.config import AppConfig, load_config, load_env_overrides, resolve_path, resolve_root
from knowsys.errors import KnowsysError, NotFoundError
from knowsys.log import setup_logging
from knowsys.mutation import UpdateRequest


@dataclass
class CliContext:
    root: Path
    config: AppConfig
    json_output: bool = False


def _emit(ctx: CliContext, data: dict, render) -> None:
    if ctx.json_output:
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        render(data)


def _fail(ctx: CliContext, error: KnowsysError) -> None:
    if ctx.json_output:
        click.echo(json.dumps(error.to_dict(), indent=2, ensure_ascii=False))
        raise click.exceptions.Exit(1)
    click.echo(f"✗ {error.message}", err=True)
    if isinstance(error, NotFoundError) and error.suggestions:
        for suggestion in error.suggestions:
            click.echo(f"  - {suggestion}", err=True)
    raise click.Abort()


@click.group()
@click.option("--root", "-r", default=None, help="Knowledge root (default: from config)")
@click.option("--config", "-c", "config_path", default=None, help="Configuration file path")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON")
@click.pass_context
def cli(ctx: click.Context, root: str | None, config_path: str | None, verbose: bool, json_output: bool):
    """knowsys - Context index for session, plan and learned markdown files."""
    try:
        cfg = load_env_overrides(load_config(config_path))
    except (FileNotFoundError, ValueError) as e:
        click.echo(f"✗ Configuration error: {e}", err=True)
        raise click.Abort()

    setup_logging("DEBUG" if verbose else cfg.logging.level)
    knowledge_root = resolve_path(root) if root else resolve_root(cfg)
    ctx.obj = CliContext(root=knowledge_root, config=cfg, json_output=json_output)


@cli.command()
@click.pass_obj
def scan(ctx: CliContext):
    """Scan the knowledge root and classify its files."""
    data = facade.scan_root(ctx.root, ctx.config)

    def render(result: dict) -> None:
        click.echo(
            f"✓ Found {result['total']} files: {len(result['sessions'])} sessions, "
            f"{len(result['plans'])} plans, {len(result['learned'])} learned"
        )
        for error in result["errors"]:
            click.echo(f"  ! {error}")

    _emit(ctx, data, render)


@cli.command("rebuild-index")
@click.pass_obj
def rebuild_index(ctx: CliContext):
    """Rebuild the context index from scratch."""
    data = facade.rebuild_index(ctx.root, ctx.config)

    def render(stats: dict) -> None:
        click.echo(
            f"✓ Index rebuilt: {stats['plans']} plans, {stats['sessions']} sessions, "
            f"{stats['learned']} learned ({stats['duration']:.3f}s)"
        )
        for error in stats["errors"]:
            click.echo(f"  ! {error}")

    _emit(ctx, data, render)


@cli.command("query-plans")
@click.option("--status", default=None, help="ACTIVE, PAUSED, PLANNED, COMPLETE or CANCELLED")
@click.option("--author", default=None, help="Plan author (fuzzy)")
@click.option("--topic", default=None, help="Topic or title fragment (fuzzy)")
@click.option("--updated-after", default=None, help="YYYY-MM-DD (exclusive)")
@click.option("--updated-before", default=None, help="YYYY-MM-DD (exclusive)")
@click.pass_obj
def query_plans(ctx: CliContext, status, author, topic, updated_after, updated_before):
    """List plans matching all given filters."""
    try:
        data = facade.query_plans(
            ctx.root,
            status=status,
            author=author,
            topic=topic,
            updated_after=updated_after,
            updated_before=updated_before,
            config=ctx.config,
        )
    except KnowsysError as e:
        _fail(ctx, e)

    def render(result: dict) -> None:
        click.echo(f"✓ {result['count']} plan(s)")
        for plan in result["plans"]:
            click.echo(f"  {plan['id']} [{plan['status']}] {plan['title']} ({plan['author']})")

    _emit(ctx, data, render)


@cli.command("query-sessions")
@click.option("--date", default=None, help="Exact date YYYY-MM-DD")
@click.option("--date-after", default=None, help="YYYY-MM-DD (exclusive)")
@click.option("--date-before", default=None, help="YYYY-MM-DD (exclusive)")
@click.option("--topic", default=None, help="Topic or title fragment (fuzzy)")
@click.option("--plan", default=None, help="Linked plan id")
@click.option("--days", type=int, default=None, help="Sessions from the last N days")
@click.pass_obj
def query_sessions(ctx: CliContext, date, date_after, date_before, topic, plan, days):
    """List sessions, newest first."""
    try:
        data = facade.query_sessions(
            ctx.root,
            date=date,
            date_after=date_after,
            date_before=date_before,
            topic=topic,
            plan=plan,
            days=days,
            config=ctx.config,
        )
    except KnowsysError as e:
        _fail(ctx, e)

    def render(result: dict) -> None:
        click.echo(f"✓ {result['count']} session(s)")
        for session in result["sessions"]:
            click.echo(f"  {session['date']} {session['title']} [{session['status']}]")

    _emit(ctx, data, render)


@cli.command()
@click.argument("query")
@click.option("--scope", default="all", help="all, plans, sessions or learned")
@click.option("--limit", type=int, default=None, help="Maximum number of matches")
@click.pass_obj
def search(ctx: CliContext, query: str, scope: str, limit: int | None):
    """Full-text search ranked by relevance."""
    try:
        data = facade.search_context(ctx.root, query, scope=scope, limit=limit, config=ctx.config)
    except KnowsysError as e:
        _fail(ctx, e)

    def render(result: dict) -> None:
        click.echo(f"✓ {result['count']} match(es) for \"{result['query']}\"")
        for match in result["matches"]:
            click.echo(f"  {match['score']:.1f}  {match['file']}:{match['line']}  {match['snippet']}")

    _emit(ctx, data, render)


def update_options(func):
    """Options shared by update-session and update-plan."""
    options = [
        click.option("--add-topic", default=None, help="Add a topic (idempotent)"),
        click.option("--add-file", default=None, help="Add a file reference (idempotent)"),
        click.option("--set-status", default=None, help="New status"),
        click.option("--content", default=None, help="Content to insert"),
        click.option("--append-section", default=None, help="Append a section with this heading"),
        click.option("--prepend-section", default=None, help="Prepend a section with this heading"),
        click.option("--insert-after", default=None, help="Insert at the end of the section containing this text"),
        click.option("--insert-before", default=None, help="Insert before the line containing this text"),
        click.option("--append-file", default=None, help="Append the contents of a file"),
        click.option("--done", is_flag=True, help="Shortcut for the complete status"),
        click.option("--wip", is_flag=True, help="Shortcut for the in-progress/active status"),
        click.option("--append", default=None, help="Shortcut: append content or a file"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _render_mutation(result: dict) -> None:
    click.echo(f"✓ {result['message']}")
    for change in result["changes"]:
        click.echo(f"  - {change}")


@cli.command("update-session")
@click.option("--date", default=None, help="Session date (default: today)")
@update_options
@click.pass_obj
def update_session(ctx: CliContext, date: str | None, **options):
    """Update a session's frontmatter and body."""
    try:
        result = facade.update_session(ctx.root, UpdateRequest(**options), date=date, config=ctx.config)
    except KnowsysError as e:
        _fail(ctx, e)
    _emit(ctx, result.to_dict(), _render_mutation)


@cli.command("update-plan")
@click.argument("plan_id")
@update_options
@click.pass_obj
def update_plan(ctx: CliContext, plan_id: str, **options):
    """Update a plan's frontmatter and body."""
    try:
        result = facade.update_plan(ctx.root, plan_id, UpdateRequest(**options), config=ctx.config)
    except KnowsysError as e:
        _fail(ctx, e)
    _emit(ctx, result.to_dict(), _render_mutation)


def _render_created(result: dict) -> None:
    mark = "✓" if result["created"] else "!"
    click.echo(f"{mark} {result['message']}: {result['filePath']}")


@cli.command("create-session")
@click.argument("title")
@click.option("--topic", "topics", multiple=True, help="Topic (repeatable)")
@click.option("--plan", default=None, help="Linked plan id")
@click.option("--date", default=None, help="Session date (default: today)")
@click.pass_obj
def create_session(ctx: CliContext, title: str, topics: tuple[str, ...], plan: str | None, date: str | None):
    """Create a new session file."""
    try:
        result = facade.create_session(
            ctx.root, title, topics=list(topics), plan=plan, date=date, config=ctx.config
        )
    except KnowsysError as e:
        _fail(ctx, e)
    _emit(ctx, result.to_dict(), _render_created)


@cli.command("create-plan")
@click.argument("title")
@click.option("--author", default=None, help="Plan author (default: $USER)")
@click.option("--topic", "topics", multiple=True, help="Topic (repeatable)")
@click.option("--status", default="PLANNED", help="Initial status")
@click.option("--id", "plan_id", default=None, help="Plan id (default: from title)")
@click.pass_obj
def create_plan(ctx: CliContext, title: str, author, topics, status: str, plan_id):
    """Create a new plan file."""
    try:
        result = facade.create_plan(
            ctx.root,
            title,
            author=author,
            topics=list(topics),
            status=status,
            plan_id=plan_id,
            config=ctx.config,
        )
    except KnowsysError as e:
        _fail(ctx, e)
    _emit(ctx, result.to_dict(), _render_created)


def main():
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
