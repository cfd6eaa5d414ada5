"""Shared helpers for CLI commands."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable

import typer

from core.config import Settings
from preview.server import PreviewRegistry
from schemas.responses import ToolResponse

Handler = Callable[[PreviewRegistry], Awaitable[ToolResponse]]


def load_list_file(path: Path | None, key: str) -> list[Any]:
    """Read a JSON/YAML file holding a list, or an object with that list under ``key``."""
    if path is None:
        return []
    if not path.exists():
        raise typer.BadParameter(f"File not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in {".yaml", ".yml"}:
        import yaml

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise typer.BadParameter(f"Invalid YAML in {path}: {exc}") from exc
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"Invalid JSON in {path}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get(key, [])
    if data is None:
        return []
    if not isinstance(data, list):
        raise typer.BadParameter(f"{path} must contain a list of {key}.")
    return data


def emit_json(data: Any) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


def run_report(
    handler: Handler,
    settings: Settings,
    *,
    open_browser: bool,
    wait: bool,
) -> ToolResponse:
    """Run one handler in a fresh event loop, keeping its preview alive if asked."""
    registry = PreviewRegistry(settings, open_browser=open_browser)

    async def _run() -> ToolResponse:
        response = await handler(registry)
        typer.echo(response.joined_text)
        sessions = list(registry.sessions.values())
        if wait and sessions:
            typer.echo(
                "\nPreview running at "
                + ", ".join(s.url for s in sessions)
                + " (Ctrl+C to stop)",
                err=True,
            )
            await asyncio.gather(*(s.wait_closed() for s in sessions))
        registry.close_all()
        return response

    try:
        return asyncio.run(_run())
    except KeyboardInterrupt:
        registry.close_all()
        raise typer.Exit(code=130)
