"""Node API - create, edit, complete, expand, links, delete."""

from fastapi import APIRouter, Query

from ..errors import error_response
from ..schemas import CompleteRequest, ExpandRequest, LinkRequest, NodeCreateRequest, NodeUpdateRequest
from .. import state as api_state

router = APIRouter()


@router.post("")
async def create_node(body: NodeCreateRequest, board_id: str = Query("default", alias="boardId")):
    """Create a root task, or a subtask when parentId is set. The new node becomes active."""
    try:
        board = await api_state.get_board_session(board_id)
        node = board.create_node(body.title, body.parent_id, body.x, body.y)
        payload = await api_state.commit(board_id, board)
        return {"nodeId": node.id, **payload}
    except Exception as e:
        return error_response(e, "Failed to create node")


@router.patch("/{node_id}")
async def update_node(node_id: str, body: NodeUpdateRequest, board_id: str = Query("default", alias="boardId")):
    try:
        board = await api_state.get_board_session(board_id)
        board.forest.get(node_id)
        if body.title is not None:
            board.set_title(node_id, body.title)
        if body.description is not None:
            board.set_description(node_id, body.description)
        if body.due_date is not None:
            board.set_due_date(node_id, body.due_date)
        return await api_state.commit(board_id, board)
    except Exception as e:
        return error_response(e, "Failed to update node")


@router.delete("/{node_id}")
async def delete_node(node_id: str, confirm: bool = Query(False), board_id: str = Query("default", alias="boardId")):
    """Delete node and its subtree. Edited nodes answer 409 until confirm=true."""
    try:
        board = await api_state.get_board_session(board_id)
        board.remove_node(node_id, confirm=confirm)
        return await api_state.commit(board_id, board)
    except Exception as e:
        return error_response(e, "Failed to delete node")


@router.post("/{node_id}/complete")
async def complete_node(node_id: str, body: CompleteRequest, board_id: str = Query("default", alias="boardId")):
    """Toggle completion. Checking a parent with open subtasks answers 409 until confirm=true."""
    try:
        board = await api_state.get_board_session(board_id)
        updates = board.set_completed(node_id, body.completed, confirm=body.confirm)
        payload = await api_state.commit(board_id, board)
        return {
            "updates": [{"id": nid, "progress": p, "isCompleted": c} for nid, p, c in updates],
            **payload,
        }
    except Exception as e:
        return error_response(e, "Failed to update completion")


@router.post("/{node_id}/expand")
async def expand_node(node_id: str, body: ExpandRequest, board_id: str = Query("default", alias="boardId")):
    try:
        board = await api_state.get_board_session(board_id)
        if body.expanded is None:
            board.toggle_expanded(node_id)
        else:
            board.set_expanded(node_id, body.expanded)
        return await api_state.commit(board_id, board)
    except Exception as e:
        return error_response(e, "Failed to update expansion")


@router.post("/{node_id}/links")
async def add_link(node_id: str, body: LinkRequest, board_id: str = Query("default", alias="boardId")):
    try:
        board = await api_state.get_board_session(board_id)
        link = board.add_link(node_id, body.url, body.text)
        payload = await api_state.commit(board_id, board)
        return {"link": link, **payload}
    except Exception as e:
        return error_response(e, "Failed to add link")


@router.delete("/{node_id}/links/{index}")
async def remove_link(node_id: str, index: int, board_id: str = Query("default", alias="boardId")):
    try:
        board = await api_state.get_board_session(board_id)
        board.remove_link(node_id, index)
        return await api_state.commit(board_id, board)
    except Exception as e:
        return error_response(e, "Failed to remove link")
