"""Backup API - download the board as a file, upload a file to replace it."""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from loguru import logger

from db import backup_filename, export_backup, import_backup, parse_json_bytes

from ..errors import error_response
from ..schemas import BackupUploadRequest
from .. import state as api_state

router = APIRouter()


@router.get("")
async def download_backup(board_id: str = Query("default", alias="boardId")):
    """Live board (not the stored file) with a fresh timestamp, as an attachment."""
    try:
        board = await api_state.get_board_session(board_id)
        data = export_backup(board.to_dict())
        headers = {"Content-Disposition": f'attachment; filename="{backup_filename()}"'}
        return JSONResponse(content=data, headers=headers)
    except Exception as e:
        return error_response(e, "Failed to build backup")


@router.post("")
async def upload_backup(body: BackupUploadRequest, board_id: str = Query("default", alias="boardId")):
    """Replace the board. Older backups answer 409 until overwrite=true."""
    try:
        uploaded = body.backup
        if uploaded is None and body.content is not None:
            uploaded = parse_json_bytes(body.content.encode("utf-8"), "uploaded backup")
        if not isinstance(uploaded, dict):
            raise ValueError("Invalid backup file.")
        data = await import_backup(uploaded, board_id, overwrite=body.overwrite)
        board = await api_state.get_board_session(board_id)
        board.load(data)
        logger.info("Restored board {} from backup ({} nodes)", board_id, len(board.forest))
        return await api_state.commit(board_id, board)
    except Exception as e:
        return error_response(e, "Failed to restore backup")
