"""Reader endpoints.

Routes
------
GET  /          Usage text
POST /          Body: {"url": "..."}, url=... or the URL as plain text
GET  /{URL}     The raw request path (minus the leading "/") is the target
"""

from __future__ import annotations

import json
import logging
from urllib.parse import parse_qs

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from ...core import Reader, ensure_trailing_newline

logger = logging.getLogger(__name__)

router = APIRouter()

USAGE = 'Usage: GET /{URL} or POST / with {"url":"..."}'


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def client_id(request: Request, trust_forwarded_for: bool = False) -> str:
    """Identify the caller for rate limiting."""
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


def raw_target(request: Request) -> str:
    """Return the request path without the leading "/", still percent-encoded."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    path = path.split("?", 1)[0]
    target = path[1:] if path.startswith("/") else path
    query = request.scope.get("query_string", b"").decode("latin-1")
    if query:
        target = f"{target}?{query}"
    return target


def url_from_body(body: bytes, content_type: str) -> str:
    """Pull the target URL out of a POST body; empty string when absent."""
    text = body.decode("utf-8", errors="replace").strip()
    if not text:
        return ""

    media_type = content_type.split(";")[0].strip().lower()
    if media_type == "application/json":
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            return ""
        if isinstance(payload, dict):
            url = payload.get("url")
            return url if isinstance(url, str) else ""
        return payload if isinstance(payload, str) else ""

    if media_type == "application/x-www-form-urlencoded":
        values = parse_qs(text).get("url")
        return values[0] if values else ""

    return text


def _reader(request: Request) -> Reader:
    return request.app.state.reader


async def _convert(request: Request, raw: str) -> PlainTextResponse:
    reader = _reader(request)
    caller = client_id(request, reader.config.server.trust_forwarded_for)
    markdown = await reader.convert(raw, client_id=caller)
    return PlainTextResponse(ensure_trailing_newline(markdown))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/", response_class=PlainTextResponse)
async def usage() -> PlainTextResponse:
    """Describe how to call the service."""
    return PlainTextResponse(ensure_trailing_newline(USAGE))


@router.post("/", response_class=PlainTextResponse)
async def convert_posted(request: Request) -> PlainTextResponse:
    """Convert the URL given in the request body."""
    body = await request.body()
    raw = url_from_body(body, request.headers.get("content-type", ""))
    return await _convert(request, raw)


@router.get("/{target:path}", response_class=PlainTextResponse)
async def convert_path(target: str, request: Request) -> PlainTextResponse:
    """Convert the URL given as the request path."""
    return await _convert(request, raw_target(request))
