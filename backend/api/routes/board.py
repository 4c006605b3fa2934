"""Board API - view, renderer heights, selection, clear."""

from fastapi import APIRouter, Query

from ..errors import error_response
from ..schemas import HeightsRequest, NavigateRequest, SelectRequest
from .. import state as api_state

router = APIRouter()


@router.get("")
async def get_board_route(board_id: str = Query("default", alias="boardId")):
    try:
        board = await api_state.get_board_session(board_id)
        return {"boardId": board_id, **board.view()}
    except Exception as e:
        return error_response(e, "Failed to load board")


@router.post("/heights")
async def report_heights(body: HeightsRequest, board_id: str = Query("default", alias="boardId")):
    """Renderer reports measured card heights; positions are recomputed. Not persisted."""
    try:
        board = await api_state.get_board_session(board_id)
        board.report_heights(body.heights)
        return {"boardId": board_id, **board.view()}
    except Exception as e:
        return error_response(e, "Failed to update heights")


@router.post("/clear")
async def clear_board(board_id: str = Query("default", alias="boardId")):
    """Wipe the board and seed the starter task."""
    try:
        board = await api_state.get_board_session(board_id)
        board.clear()
        return await api_state.commit(board_id, board)
    except Exception as e:
        return error_response(e, "Failed to clear board")


@router.post("/select")
async def select_node(body: SelectRequest, board_id: str = Query("default", alias="boardId")):
    try:
        board = await api_state.get_board_session(board_id)
        board.set_active(body.node_id)
        return {"activeNodeId": board.active_id}
    except Exception as e:
        return error_response(e, "Failed to select node")


@router.post("/navigate")
async def navigate(body: NavigateRequest, board_id: str = Query("default", alias="boardId")):
    """Arrow-key navigation; may expand a collapsed node (then the layout changes)."""
    try:
        board = await api_state.get_board_session(board_id)
        before = board.last_layout
        node = board.navigate(body.direction)
        if board.last_layout is not before:
            await api_state.commit(board_id, board)
        if node is None:
            return {"activeNodeId": None, "x": 0, "y": 0, "layout": board.last_layout}
        return {"activeNodeId": node.id, "x": node.x, "y": node.y, "layout": board.last_layout}
    except Exception as e:
        return error_response(e, "Failed to navigate")


@router.get("/focus")
async def focus(board_id: str = Query("default", alias="boardId")):
    """Recenter target: first incomplete task, else the first root."""
    try:
        board = await api_state.get_board_session(board_id)
        node = board.focus_target()
        if node is None:
            return {"activeNodeId": None, "x": 0, "y": 0}
        return {"activeNodeId": node.id, "x": node.x, "y": node.y}
    except Exception as e:
        return error_response(e, "Failed to compute focus target")
