"""ASGI app serving one preview document plus built static assets."""

from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from preview.content import content_type_for, resolve_asset

INDEX_PATHS = {"/", "/index.html"}


def create_preview_app(html: str, assets_dir: Path) -> FastAPI:
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/{path:path}", include_in_schema=False)
    async def serve(path: str) -> Response:
        request_path = f"/{path}"
        if request_path in INDEX_PATHS:
            return HTMLResponse(html, headers={"Cache-Control": "no-cache"})

        asset = resolve_asset(assets_dir, request_path)
        if asset is not None:
            try:
                content = await asyncio.to_thread(asset.read_bytes)
            except OSError:
                content = None
            if content is not None:
                return Response(
                    content,
                    media_type=content_type_for(asset),
                    headers={"Cache-Control": "public, max-age=31536000"},
                )

        return PlainTextResponse("Not found", status_code=404)

    return app


__all__ = ["create_preview_app"]
