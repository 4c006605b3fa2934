"""Shared fixtures: an empty forest and an isolated db directory."""

import pytest

from tasks.node import Forest


@pytest.fixture
def forest():
    return Forest()


@pytest.fixture
def db_dir(tmp_path, monkeypatch):
    """Point the db module at a temp dir and drop cached locks and boards."""
    import db
    from api import state as api_state

    monkeypatch.setattr(db, "DB_DIR", tmp_path)
    db._board_save_locks.clear()
    api_state.reset_boards()
    yield tmp_path
    api_state.reset_boards()
