"""DB API routes."""

from fastapi import APIRouter

from db import clear_db

from .. import state as api_state

router = APIRouter()


@router.post("/clear")
async def clear():
    """Clear DB: remove all board folders and drop loaded boards."""
    result = await clear_db()
    api_state.reset_boards()
    return result
