"""API route modules."""

from fastapi import FastAPI

from . import backup, board, boards, db, nodes, settings
from ..state import init_api_state


def register_routes(app: FastAPI, sio):
    """Register all API routers. Call after app and sio are created."""
    init_api_state(sio)

    app.include_router(board.router, prefix="/api/board", tags=["board"])
    app.include_router(nodes.router, prefix="/api/nodes", tags=["nodes"])
    app.include_router(backup.router, prefix="/api/backup", tags=["backup"])
    app.include_router(boards.router, prefix="/api/boards", tags=["boards"])
    app.include_router(db.router, prefix="/api/db", tags=["db"])
    app.include_router(settings.router, prefix="/api/settings", tags=["settings"])
