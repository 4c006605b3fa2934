"""
Database Module
File-based storage: db/{board_id}/board.json holds one serialized task forest; db/settings.json
holds user settings. Uses orjson for encoding and json_repair as the fallback for corrupted files.
"""

import asyncio
import math
import re
import shutil
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles
import json_repair
import orjson
from loguru import logger

from layout.constants import (
    DEFAULT_NODE_HEIGHT,
    HORIZONTAL_SPACING,
    NODE_WIDTH,
    ROOT_GAP,
    VERTICAL_GAP,
)

DB_DIR = Path(__file__).parent
DEFAULT_BOARD_ID = "default"
BOARD_FILE = "board.json"
SETTINGS_FILE = "settings.json"

# settings.json "layout" key -> layout_forest keyword
LAYOUT_SETTING_KEYS = {
    "horizontalSpacing": ("horizontal_spacing", HORIZONTAL_SPACING),
    "verticalGap": ("vertical_gap", VERTICAL_GAP),
    "rootGap": ("root_gap", ROOT_GAP),
    "defaultNodeHeight": ("default_height", DEFAULT_NODE_HEIGHT),
    "nodeWidth": ("node_width", NODE_WIDTH),
}


class BackupConflict(Exception):
    """Uploaded backup is older than the stored board."""

    def __init__(self, uploaded: Optional[int], current: Optional[int]):
        super().__init__("The file you are uploading is older than your current list.")
        self.uploaded = uploaded
        self.current = current


def _validate_board_id(board_id: str) -> None:
    """Reject path traversal and invalid board_id."""
    if not board_id or not isinstance(board_id, str):
        raise ValueError("board_id must be a non-empty string")
    if ".." in board_id or "/" in board_id or "\\" in board_id:
        raise ValueError("board_id must not contain path separators")
    if not re.match(r"^[a-zA-Z0-9_-]+$", board_id):
        raise ValueError("board_id must contain only letters, digits, dashes, and underscores")


def _get_board_dir(board_id: str = DEFAULT_BOARD_ID) -> Path:
    return DB_DIR / board_id


def _get_file_path(board_id: str, filename: str) -> Path:
    return _get_board_dir(board_id) / filename


async def _ensure_board_dir(board_id: str = DEFAULT_BOARD_ID) -> None:
    _validate_board_id(board_id)
    _get_board_dir(board_id).mkdir(parents=True, exist_ok=True)


def parse_json_bytes(raw: bytes, source: Any = "<input>") -> Optional[Any]:
    """orjson first, json_repair for damaged content. None when nothing usable remains."""
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        pass
    try:
        data = json_repair.loads(raw.decode("utf-8", errors="replace"))
    except Exception as e:
        logger.warning("Unreadable JSON in {}: {}", source, e)
        return None
    logger.warning("Repaired corrupted JSON in {}", source)
    return data if data != "" else None


async def _read_json_path(file_path: Path) -> Optional[Any]:
    try:
        async with aiofiles.open(file_path, "rb") as f:
            raw = await f.read()
    except FileNotFoundError:
        return None
    return parse_json_bytes(raw, file_path)


async def _write_json_path(file_path: Path, data: Any) -> None:
    """Atomic write: write to .tmp then rename to avoid partial/corrupt files."""
    tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
    content = orjson.dumps(data, option=orjson.OPT_INDENT_2).decode("utf-8")
    async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
        await f.write(content)
    tmp_path.replace(file_path)


# Board persistence - serialized per board_id

_board_save_locks: Dict[str, asyncio.Lock] = {}


def get_board_lock(board_id: str) -> asyncio.Lock:
    if board_id not in _board_save_locks:
        _board_save_locks[board_id] = asyncio.Lock()
    return _board_save_locks[board_id]


async def get_board(board_id: str = DEFAULT_BOARD_ID) -> Optional[Dict[str, Any]]:
    """Get serialized board {timestamp, roots}, or None if missing/unreadable."""
    await _ensure_board_dir(board_id)
    data = await _read_json_path(_get_file_path(board_id, BOARD_FILE))
    if data is not None and not isinstance(data, dict):
        logger.warning("Ignoring non-object board data for {}", board_id)
        return None
    return data


async def save_board(board: Dict[str, Any], board_id: str = DEFAULT_BOARD_ID) -> dict:
    """Save serialized board."""
    await _ensure_board_dir(board_id)
    await _write_json_path(_get_file_path(board_id, BOARD_FILE), board)
    return {"success": True}


async def delete_board(board_id: str) -> bool:
    """Remove db/{board_id}/. Returns True if removed."""
    _validate_board_id(board_id)
    board_dir = _get_board_dir(board_id)
    if not board_dir.exists():
        return False
    try:
        shutil.rmtree(board_dir)
        return True
    except OSError as e:
        logger.warning("Failed to remove {}: {}", board_dir, e)
        return False


async def list_board_ids() -> list:
    """List board IDs from db/, sorted by board.json mtime (newest first)."""
    if not DB_DIR.exists():
        return []
    result = []
    for p in DB_DIR.iterdir():
        if p.is_dir() and not p.name.startswith("."):
            board_file = p / BOARD_FILE
            if board_file.exists():
                try:
                    mtime = board_file.stat().st_mtime
                    result.append((p.name, mtime))
                except OSError:
                    result.append((p.name, 0))
    result.sort(key=lambda x: x[1], reverse=True)
    return [bid for bid, _ in result]


async def clear_db() -> dict:
    """Clear DB: remove all board folders. Settings are kept."""
    if not DB_DIR.exists():
        return {"success": True, "removed": []}
    removed = []
    for p in DB_DIR.iterdir():
        if not p.is_dir() or p.name.startswith(".") or p.name == "__pycache__":
            continue
        try:
            shutil.rmtree(p)
            removed.append(p.name)
        except OSError as e:
            logger.warning("Failed to remove {}: {}", p, e)
    return {"success": True, "removed": removed}


# Backups - download / upload of a whole board

def backup_filename(now: Optional[datetime] = None) -> str:
    """todo-backup-2023-10-27T14-30-00.json"""
    stamp = (now or datetime.now()).isoformat()[:19].replace(":", "-").replace(".", "-")
    return f"todo-backup-{stamp}.json"


def export_backup(board: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of the serialized board with a fresh timestamp."""
    return {**board, "timestamp": int(time.time() * 1000)}


async def import_backup(uploaded: Any, board_id: str = DEFAULT_BOARD_ID, overwrite: bool = False) -> Dict[str, Any]:
    """
    Validate an uploaded backup against the stored board.
    Raises BackupConflict if the upload is older and overwrite is False. Returns the upload.
    """
    if not isinstance(uploaded, dict):
        raise ValueError("Invalid backup file.")
    current = await get_board(board_id)
    current_ts = current.get("timestamp") if current else None
    uploaded_ts = uploaded.get("timestamp")
    # An upload without a usable timestamp is never treated as older
    if not overwrite and isinstance(current_ts, (int, float)) and current_ts:
        if isinstance(uploaded_ts, (int, float)) and not isinstance(uploaded_ts, bool) and uploaded_ts < current_ts:
            raise BackupConflict(uploaded_ts, current_ts)
    return uploaded


# Settings

async def get_settings() -> dict:
    """Get full settings from db/settings.json."""
    data = await _read_json_path(DB_DIR / SETTINGS_FILE)
    return data if isinstance(data, dict) else {}


async def save_settings(settings: dict) -> dict:
    """Save settings to db/settings.json. Atomic write to avoid corruption."""
    DB_DIR.mkdir(parents=True, exist_ok=True)
    await _write_json_path(DB_DIR / SETTINGS_FILE, settings or {})
    return {"success": True}


def _resolve_layout_settings(raw: dict) -> Dict[str, float]:
    """Map settings["layout"] to layout_forest kwargs. Unusable values fall back to defaults."""
    section = (raw or {}).get("layout") or {}
    if not isinstance(section, dict):
        section = {}
    resolved: Dict[str, float] = {}
    for key, (kwarg, default) in LAYOUT_SETTING_KEYS.items():
        value = section.get(key)
        try:
            number = float(value) if value is not None and not isinstance(value, bool) else None
        except (TypeError, ValueError):
            number = None
        # Spacing and gaps may be 0; heights and widths must be positive
        if number is None or not math.isfinite(number) or number < 0 \
                or (kwarg in ("default_height", "node_width") and number == 0):
            number = default
        resolved[kwarg] = number
    return resolved


async def get_layout_settings() -> Dict[str, float]:
    """Effective layout kwargs from settings.json."""
    raw = await get_settings()
    return _resolve_layout_settings(raw)
