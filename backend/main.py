"""
Todo Tree Backend - FastAPI + Socket.io entry point.
Serves the canvas front end, the board command API, and pushes tree-update events.
Run with any ASGI server against `main:asgi_app`.
"""

from pathlib import Path

import socketio
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from api import register_routes
from api import state as api_state

# Socket.io
sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins="*")
app = FastAPI(title="Todo Tree Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Disable cache for static files (dev: always fetch latest)
NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class NoCacheMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        path = request.url.path
        if path == "/" or path.endswith((".html", ".css", ".js")):
            for k, v in NO_CACHE_HEADERS.items():
                response.headers[k] = v
        return response


app.add_middleware(NoCacheMiddleware)

register_routes(app, sio)

# Frontend static files - MUST come after all API routes
FRONTEND_DIR = Path(__file__).parent.parent / "frontend"
if FRONTEND_DIR.exists():
    app.mount("/", StaticFiles(directory=str(FRONTEND_DIR), html=True), name="static")


# Socket.io events
@sio.event
async def connect(sid, environ, auth):
    """Send the current board so a (re)connecting client can render immediately."""
    logger.info("Client connected: {}", sid)
    board_id = (auth.get("boardId") if isinstance(auth, dict) else None) or "default"
    try:
        board = await api_state.get_board_session(board_id)
    except ValueError as e:
        logger.warning("Rejected board id {}: {}", board_id, e)
        return
    await sio.emit("tree-update", {"boardId": board_id, **board.view()}, to=sid)


@sio.event
def disconnect(sid):
    logger.info("Client disconnected: {}", sid)


# ASGI app for uvicorn (Socket.io + FastAPI)
asgi_app = socketio.ASGIApp(sio, app)
