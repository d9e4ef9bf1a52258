"""In-memory game store with per-game async locking so events apply in arrival order."""
from __future__ import annotations

import asyncio
from typing import Optional

from zipgame.session import GameSession

_games: dict[str, GameSession] = {}

# One asyncio.Lock per game, created on first access
_locks: dict[str, asyncio.Lock] = {}


def lock_for(game_id: str) -> asyncio.Lock:
    if game_id not in _locks:
        _locks[game_id] = asyncio.Lock()
    return _locks[game_id]


# ── Games ─────────────────────────────────────────────────────────────────────

def save_game(session: GameSession) -> None:
    _games[session.game_id] = session


def load_game(game_id: str) -> Optional[GameSession]:
    return _games.get(game_id)


def delete_game(game_id: str) -> bool:
    _locks.pop(game_id, None)
    return _games.pop(game_id, None) is not None


def list_game_ids() -> list[str]:
    return list(_games)


def clear_games() -> int:
    """Drop every game. Returns the number removed."""
    count = len(_games)
    _games.clear()
    _locks.clear()
    return count


def prune_idle_games(max_idle_s: float) -> int:
    """Delete games idle for longer than max_idle_s, skipping any mid-update."""
    removed = 0
    for game_id, session in list(_games.items()):
        lock = _locks.get(game_id)
        if lock is not None and lock.locked():
            continue
        if session.idle_seconds() > max_idle_s:
            delete_game(game_id)
            removed += 1
    return removed
