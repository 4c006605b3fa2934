"""Settings API routes. Backend maintains settings.json; frontend fetches and overwrites on save."""

from fastapi import APIRouter, Body

from db import get_layout_settings, get_settings, save_settings

from .. import state as api_state

router = APIRouter()


@router.get("")
async def get_settings_route():
    """Return settings.json contents plus the effective layout spacing."""
    settings = await get_settings()
    return {"settings": settings, "layout": await get_layout_settings()}


@router.post("")
async def save_settings_route(body: dict = Body(...)):
    """Overwrite settings.json with request body; loaded boards pick up new spacing."""
    await save_settings(body)
    layout = await get_layout_settings()
    api_state.apply_layout_settings(layout)
    return {"success": True, "layout": layout}
