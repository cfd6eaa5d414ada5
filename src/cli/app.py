"""Typer CLI entrypoint for Convex visual reports."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import get_args

import typer

from convex_visual import __version__
from core.config import get_settings
from core.logging import configure_logging
from schemas.internal.reports import THEMES, KanbanMode

app = typer.Typer(
    help="Visual reports for Convex deployments.",
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
    add_completion=False,
)

THEME_HELP = f"Theme: {'|'.join(THEMES)}. Defaults to DEFAULT_THEME."
KANBAN_MODES = get_args(KanbanMode)


@app.callback()
def root(
    ctx: typer.Context,
    version_flag: bool = typer.Option(
        False,
        "-v",
        "--version",
        help="Print the version and exit.",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Override LOG_LEVEL.",
    ),
) -> None:
    if version_flag:
        typer.echo(__version__)
        raise typer.Exit()
    configure_logging(log_level or get_settings().log_level)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command(help="Run the tool server on stdio.")
def serve() -> None:
    from tools.server import run_stdio

    run_stdio(get_settings())


@app.command(help="Check the deployment connection and list tables.")
def test(
    json_out: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    from cli.common import emit_json
    from client.convex import ConvexClient

    result = asyncio.run(ConvexClient(get_settings()).test_connection())
    if json_out:
        emit_json(result.model_dump(mode="json"))
    elif result.success:
        typer.echo(f"Connected to {result.deployment_url}")
        typer.echo(f"{result.table_count} tables: {', '.join(result.tables)}")
    else:
        typer.echo(f"Connection failed: {result.error}", err=True)
    if not result.success:
        raise typer.Exit(code=1)


@app.command(help="Realtime dashboard of table metrics.")
def dashboard(
    metrics_file: Path | None = typer.Option(
        None, "--metrics-file", help="JSON/YAML file with metric specs."
    ),
    charts_file: Path | None = typer.Option(
        None, "--charts-file", help="JSON/YAML file with chart specs."
    ),
    refresh_interval: float = typer.Option(5, "--refresh-interval"),
    no_browser: bool = typer.Option(False, "--no-browser"),
    theme: str | None = typer.Option(None, "--theme", help=THEME_HELP),
    html_out: Path | None = typer.Option(None, "--html-out"),
    wait: bool = typer.Option(True, "--wait/--no-wait"),
) -> None:
    from cli.common import load_list_file
    from client.convex import ConvexClient
    from services import handle_dashboard

    settings = get_settings()
    args = {
        "metrics": load_list_file(metrics_file, "metrics"),
        "charts": load_list_file(charts_file, "charts"),
        "refreshInterval": refresh_interval,
        "noBrowser": no_browser,
    }
    args = _with_theme(args, theme)
    client = ConvexClient(settings)
    _finish(
        lambda registry: handle_dashboard(
            client, args, registry=registry, html_out=html_out
        ),
        no_browser=no_browser,
        wait=wait,
    )


@app.command(help="Declared vs inferred schema fields per table.")
def drift(
    max_tables: int = typer.Option(80, "--max-tables"),
    no_browser: bool = typer.Option(False, "--no-browser"),
    theme: str | None = typer.Option(None, "--theme", help=THEME_HELP),
    html_out: Path | None = typer.Option(None, "--html-out"),
    wait: bool = typer.Option(True, "--wait/--no-wait"),
) -> None:
    from client.convex import ConvexClient
    from services import handle_schema_drift

    args = {"maxTables": max_tables, "noBrowser": no_browser}
    args = _with_theme(args, theme)
    client = ConvexClient(get_settings())
    _finish(
        lambda registry: handle_schema_drift(
            client, args, registry=registry, html_out=html_out
        ),
        no_browser=no_browser,
        wait=wait,
    )


@app.command(help="Recent writes per minute for each table.")
def heatmap(
    window_minutes: float = typer.Option(1, "--window-minutes"),
    max_docs_per_table: int = typer.Option(1500, "--max-docs-per-table"),
    max_tables: int = typer.Option(60, "--max-tables"),
    no_browser: bool = typer.Option(False, "--no-browser"),
    theme: str | None = typer.Option(None, "--theme", help=THEME_HELP),
    html_out: Path | None = typer.Option(None, "--html-out"),
    wait: bool = typer.Option(True, "--wait/--no-wait"),
) -> None:
    from client.convex import ConvexClient
    from services import handle_table_heatmap

    args = {
        "windowMinutes": window_minutes,
        "maxDocsPerTable": max_docs_per_table,
        "maxTables": max_tables,
        "noBrowser": no_browser,
    }
    args = _with_theme(args, theme)
    client = ConvexClient(get_settings())
    _finish(
        lambda registry: handle_table_heatmap(
            client, args, registry=registry, html_out=html_out
        ),
        no_browser=no_browser,
        wait=wait,
    )


@app.command(name="conflicts", help="Write conflicts grouped from an exported log file.")
def conflicts(
    log_file: Path | None = typer.Option(None, "--log-file"),
    since_minutes: float = typer.Option(60, "--since-minutes"),
    max_lines: int = typer.Option(5000, "--max-lines"),
    no_browser: bool = typer.Option(False, "--no-browser"),
    theme: str | None = typer.Option(None, "--theme", help=THEME_HELP),
    html_out: Path | None = typer.Option(None, "--html-out"),
    wait: bool = typer.Option(True, "--wait/--no-wait"),
) -> None:
    from services import handle_write_conflict_report

    args = {
        "logFile": str(log_file) if log_file else None,
        "sinceMinutes": since_minutes,
        "maxLines": max_lines,
        "noBrowser": no_browser,
    }
    args = _with_theme(args, theme)
    _finish(
        lambda registry: handle_write_conflict_report(
            args, registry=registry, html_out=html_out
        ),
        no_browser=no_browser,
        wait=wait,
    )

@app.command(help="Tables, declared and inferred schemas and sample documents.")
def browser(
    table: str | None = typer.Option(None, "--table", help="Show one table in detail."),
    show_inferred: bool = typer.Option(True, "--show-inferred/--hide-inferred"),
    page_size: int = typer.Option(50, "--page-size"),
    no_browser: bool = typer.Option(False, "--no-browser"),
    theme: str | None = typer.Option(None, "--theme", help=THEME_HELP),
    html_out: Path | None = typer.Option(None, "--html-out"),
    wait: bool = typer.Option(True, "--wait/--no-wait"),
) -> None:
    from client.convex import ConvexClient
    from services import handle_schema_browser

    args = {
        "table": table,
        "showInferred": show_inferred,
        "pageSize": page_size,
        "noBrowser": no_browser,
    }
    args = _with_theme(args, theme)
    client = ConvexClient(get_settings())
    _finish(
        lambda registry: handle_schema_browser(
            client, args, registry=registry, html_out=html_out
        ),
        no_browser=no_browser,
        wait=wait,
    )


@app.command(help="Scheduled functions, cron jobs and agent threads as a kanban board.")
def kanban(
    mode: str = typer.Option("auto", "--mode", help="jobs|agents|auto"),
    no_browser: bool = typer.Option(False, "--no-browser"),
    theme: str | None = typer.Option(None, "--theme", help=THEME_HELP),
    html_out: Path | None = typer.Option(None, "--html-out"),
    wait: bool = typer.Option(True, "--wait/--no-wait"),
) -> None:
    from client.convex import ConvexClient
    from services import handle_kanban_board

    if mode not in KANBAN_MODES:
        raise typer.BadParameter(f"Unknown mode: {mode}", param_hint="--mode")
    args = _with_theme({"mode": mode, "noBrowser": no_browser}, theme)
    client = ConvexClient(get_settings())
    _finish(
        lambda registry: handle_kanban_board(
            client, args, registry=registry, html_out=html_out
        ),
        no_browser=no_browser,
        wait=wait,
    )


@app.command(help="Mermaid ER diagram of table relationships.")
def diagram(
    tables: list[str] | None = typer.Option(
        None, "--table", help="Include only this table; repeat for more."
    ),
    ascii_only: bool = typer.Option(False, "--ascii", help="ASCII box drawing."),
    no_browser: bool = typer.Option(False, "--no-browser"),
    theme: str | None = typer.Option(None, "--theme", help=THEME_HELP),
    html_out: Path | None = typer.Option(None, "--html-out"),
    wait: bool = typer.Option(True, "--wait/--no-wait"),
) -> None:
    from client.convex import ConvexClient
    from services import handle_schema_diagram

    args = {
        "tables": tables or None,
        "ascii": ascii_only,
        "noBrowser": no_browser,
    }
    args = _with_theme(args, theme)
    client = ConvexClient(get_settings())
    _finish(
        lambda registry: handle_schema_diagram(
            client, args, registry=registry, html_out=html_out
        ),
        no_browser=no_browser,
        wait=wait,
    )


def _with_theme(args: dict, theme: str | None) -> dict:
    """Unset means the tool falls back to DEFAULT_THEME."""
    if theme is None:
        return args
    if theme not in THEMES:
        raise typer.BadParameter(f"Unknown theme: {theme}", param_hint="--theme")
    return {**args, "theme": theme}


def _finish(handler, *, no_browser: bool, wait: bool) -> None:
    from cli.common import run_report

    response = run_report(
        handler,
        get_settings(),
        open_browser=not no_browser,
        wait=wait,
    )
    if response.is_error:
        raise typer.Exit(code=1)


def main() -> None:
    app()


__all__ = ["app", "main"]
