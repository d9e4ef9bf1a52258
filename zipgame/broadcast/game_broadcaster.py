"""
Latest-snapshot fan-out for live games.

game_id → list of asyncio.Queue, one per connected WebSocket client. Each
snapshot carries the whole game, so a queue holds at most one message: a
new snapshot replaces any the client has not picked up yet.
"""
from __future__ import annotations

import asyncio
from collections import defaultdict

from zipgame.models import GameSnapshot


def state_message(snapshot: GameSnapshot) -> dict:
    return {"type": "state", "state": snapshot.model_dump(mode="json")}


class GameBroadcaster:
    def __init__(self) -> None:
        self._queues: dict[str, list[asyncio.Queue]] = defaultdict(list)

    def subscribe(self, game_id: str) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue(maxsize=1)
        self._queues[game_id].append(q)
        return q

    def unsubscribe(self, game_id: str, q: asyncio.Queue) -> None:
        try:
            self._queues[game_id].remove(q)
        except ValueError:
            pass
        if not self._queues[game_id]:
            del self._queues[game_id]

    async def broadcast(self, game_id: str, snapshot: GameSnapshot) -> None:
        message = state_message(snapshot)
        for q in self._queues.get(game_id, []):
            # drop the stale snapshot, keep the newest
            try:
                q.get_nowait()
            except asyncio.QueueEmpty:
                pass
            q.put_nowait(message)

    def subscriber_count(self, game_id: str) -> int:
        return len(self._queues.get(game_id, []))


# Singleton, imported directly by main.py
broadcaster = GameBroadcaster()
