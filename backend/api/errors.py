"""Map controller and persistence errors to JSON responses."""

from fastapi.responses import JSONResponse
from loguru import logger

from board import ConfirmationRequired
from db import BackupConflict
from tasks import NodeNotFound


def error_response(e: Exception, fallback: str) -> JSONResponse:
    if isinstance(e, NodeNotFound):
        return JSONResponse(status_code=404, content={"error": f"Node {e.args[0]} not found"})
    if isinstance(e, ConfirmationRequired):
        logger.info("Confirmation required: {}", e.title)
        return JSONResponse(status_code=409, content={"error": e.message, "confirm": e.to_dict()})
    if isinstance(e, BackupConflict):
        return JSONResponse(
            status_code=409,
            content={
                "error": str(e),
                "confirm": {
                    "title": "Older Backup Detected",
                    "message": "The file you are uploading is older than your current list. "
                               "Overwriting will cause you to lose recent changes.",
                    "button": "Overwrite Anyway",
                },
            },
        )
    if isinstance(e, IndexError):
        return JSONResponse(status_code=404, content={"error": str(e)})
    if isinstance(e, ValueError):
        return JSONResponse(status_code=400, content={"error": str(e)})
    logger.exception(fallback)
    return JSONResponse(status_code=500, content={"error": str(e) or fallback})
