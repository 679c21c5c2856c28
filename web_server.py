"""
web_server.py — HTTP surface for the upload page.

Runs as an aiohttp web server. Each browser gets its own BagSession, keyed
by the `bag_session` cookie. Only a successful upload creates a session,
and at most MAX_SESSIONS are kept (least recently used evicted first).

Endpoints:
  GET  /health        → plain-text health check
  POST /api/upload    → multipart field "image"; stores it as the current photo
  POST /api/analyze   → Cloud Vision labels / text / colours / objects / brand info
  POST /api/identify  → Gemini bag name / brand / price guess

Errors always come back as JSON {"error": "..."}:
  400  no photo yet (no session cookie) / not an image
  413  upload larger than MAX_UPLOAD_BYTES
  409  request already running, or a newer photo made this result stale
  502  upstream API failed (transport, error payload, unparseable reply)
  503  API key not configured
"""
from __future__ import annotations

import logging
import secrets
from collections import OrderedDict
from typing import Optional

from aiohttp import web

import config
from errors import (
    ApiError,
    BagFinderError,
    ConfigurationError,
    InvalidImageError,
    ParseError,
    RequestInProgressError,
    TransportError,
)
from session import BagSession

logger = logging.getLogger(__name__)

SESSION_COOKIE = "bag_session"
SESSIONS_KEY   = web.AppKey("sessions", OrderedDict)
NO_PHOTO_MESSAGE = "Upload a bag photo first"

_STATUS_BY_ERROR: list[tuple[type[BagFinderError], int]] = [
    (InvalidImageError,      400),
    (RequestInProgressError, 409),
    (ConfigurationError,     503),
    (TransportError,         502),
    (ApiError,               502),
    (ParseError,             502),
]


# ── Helpers ────────────────────────────────────────────────────────────────────

def _find_session(request: web.Request) -> Optional[BagSession]:
    """Session named by the cookie, or None. A hit becomes most recently used."""
    sessions: OrderedDict[str, BagSession] = request.app[SESSIONS_KEY]
    session_id = request.cookies.get(SESSION_COOKIE)
    if not session_id or session_id not in sessions:
        return None
    sessions.move_to_end(session_id)
    return sessions[session_id]


def _store_session(app: web.Application, session: BagSession) -> None:
    """Keep at most MAX_SESSIONS; the least recently used one is dropped first."""
    sessions: OrderedDict[str, BagSession] = app[SESSIONS_KEY]
    sessions[session.session_id] = session
    while len(sessions) > config.MAX_SESSIONS:
        evicted_id, _ = sessions.popitem(last=False)
        logger.info("Evicted idle session %s", evicted_id)


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


def _error_status(exc: BagFinderError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


# ── Request handlers ───────────────────────────────────────────────────────────

async def handle_health(request: web.Request) -> web.Response:
    """Health check — returns 200 OK. Use with uptime monitors."""
    return web.Response(text="OK", content_type="text/plain")


async def handle_upload(request: web.Request) -> web.Response:
    """The only handler that creates a session, and only for a valid image."""
    try:
        form = await request.post()
    except web.HTTPRequestEntityTooLarge:
        return _error("Image is too large", 413)
    field = form.get("image")
    if not isinstance(field, web.FileField):
        return _error("Please upload an image file", 400)

    session = _find_session(request)
    is_new = session is None
    if is_new:
        session = BagSession(secrets.token_urlsafe(16))

    try:
        image = session.upload(
            field.file.read(),
            filename=field.filename or "",
            content_type=field.content_type,
        )
    except InvalidImageError as exc:
        return _error(str(exc), 400)

    resp = web.json_response({
        "generation":  image.generation,
        "filename":    image.filename,
        "contentType": image.content_type,
        "preview":     image.preview,
    })
    if is_new:
        _store_session(request.app, session)
        resp.set_cookie(SESSION_COOKIE, session.session_id, httponly=True, samesite="Lax")
    return resp


async def handle_analyze(request: web.Request) -> web.Response:
    session = _find_session(request)
    if session is None:
        return _error(NO_PHOTO_MESSAGE, 400)
    try:
        result = await session.analyze()
    except BagFinderError as exc:
        return _error(str(exc), _error_status(exc))
    if result is None:
        return _error("A newer photo was uploaded — analyze it instead", 409)
    return web.json_response(result.to_dict())


async def handle_identify(request: web.Request) -> web.Response:
    session = _find_session(request)
    if session is None:
        return _error(NO_PHOTO_MESSAGE, 400)
    try:
        result = await session.identify()
    except BagFinderError as exc:
        return _error(str(exc), _error_status(exc))
    if result is None:
        return _error("A newer photo was uploaded — identify it instead", 409)
    return web.json_response(result.to_dict())


# ── App factory ────────────────────────────────────────────────────────────────

def build_web_app() -> web.Application:
    app = web.Application(client_max_size=config.MAX_UPLOAD_BYTES)
    app[SESSIONS_KEY] = OrderedDict()
    app.router.add_get("/health",        handle_health)
    app.router.add_post("/api/upload",   handle_upload)
    app.router.add_post("/api/analyze",  handle_analyze)
    app.router.add_post("/api/identify", handle_identify)
    return app


async def start_web_server() -> web.AppRunner:
    """Start the web server. Returns runner so caller can shut it down cleanly."""
    app    = build_web_app()
    runner = web.AppRunner(app, access_log=logger)
    await runner.setup()
    site = web.TCPSite(runner, config.WEB_HOST, config.WEB_PORT)
    await site.start()
    logger.info("👜 Find the Bags listening on %s:%d", config.WEB_HOST, config.WEB_PORT)
    if not config.GOOGLE_VISION_API_KEY:
        logger.warning("GOOGLE_VISION_API_KEY is not set — /api/analyze will fail")
    if not config.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set — /api/identify will fail")
    return runner
