"""
Shared API state - sio and the per-board controllers.
Initialized by main.py after creating app and services.
"""

from typing import Any, Dict, Mapping

from loguru import logger

from board import TodoBoard
from db import get_board, get_board_lock, get_layout_settings, save_board

# Set by main.py
sio: Any = None

# board_id -> loaded controller; one logical actor per board
boards: Dict[str, TodoBoard] = {}


def init_api_state(sio_instance):
    global sio
    sio = sio_instance


async def get_board_session(board_id: str) -> TodoBoard:
    """Return the cached controller, loading it from db (or seeding a starter task) on first use."""
    board = boards.get(board_id)
    if board is not None:
        return board
    async with get_board_lock(board_id):
        if board_id in boards:
            return boards[board_id]
        data = await get_board(board_id)
        board = TodoBoard(await get_layout_settings())
        if data:
            board.load(data)
            logger.info("Loaded board {} ({} nodes)", board_id, len(board.forest))
        else:
            board.spawn_default_task()
            logger.info("Seeded new board {}", board_id)
        boards[board_id] = board
        return board


async def commit(board_id: str, board: TodoBoard) -> dict:
    """Persist board, broadcast tree-update, return the view payload."""
    async with get_board_lock(board_id):
        await save_board(board.to_dict(), board_id)
    payload = {"boardId": board_id, **board.view()}
    if sio is not None:
        await sio.emit("tree-update", payload)
    return payload


def apply_layout_settings(options: Mapping[str, float]) -> None:
    """Push new spacing to every loaded board and re-lay it out."""
    for board in boards.values():
        board.layout_options = dict(options)
        board.relayout()


def reset_boards() -> None:
    boards.clear()
