"""Boards API - GET /api/boards, DELETE /api/boards/{board_id}."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from loguru import logger

from db import delete_board, get_board_lock, list_board_ids

from ..errors import error_response
from .. import state as api_state

router = APIRouter()


@router.get("")
async def list_boards():
    """List board IDs (newest first)."""
    ids = await list_board_ids()
    return {"boardIds": ids}


@router.delete("/{board_id}")
async def remove_board(board_id: str):
    """Delete a stored board and drop its loaded controller."""
    try:
        async with get_board_lock(board_id):
            removed = await delete_board(board_id)
            api_state.boards.pop(board_id, None)
        if not removed:
            return JSONResponse(status_code=404, content={"error": f"Board {board_id} not found"})
        logger.info("Deleted board {}", board_id)
        return {"success": True, "boardId": board_id}
    except Exception as e:
        return error_response(e, "Failed to delete board")
