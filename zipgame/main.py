"""
FastAPI application entry point.

Routes:
  GET    /api/difficulties

  POST   /api/games
  GET    /api/games/{game_id}
  DELETE /api/games/{game_id}

  POST   /api/games/{game_id}/events
  POST   /api/games/{game_id}/reset
  POST   /api/games/{game_id}/restart
  PUT    /api/games/{game_id}/settings
  GET    /api/games/{game_id}/hint

  WS     /ws/games/{game_id}

Every route that changes a game returns its new snapshot and pushes the same
snapshot to the game's WebSocket subscribers.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, ValidationError

from zipgame.broadcast.game_broadcaster import broadcaster, state_message
from zipgame.config import (
    CORS_ORIGINS, DEFAULT_DIFFICULTY, DIFFICULTY_NAMES, DIFFICULTY_PRESETS,
    MAX_BOARD_SIZE, MIN_BOARD_SIZE, WS_KEEPALIVE_S,
)
from zipgame.models import GameSnapshot, Hint, PointerEvent
from zipgame.scheduler.jobs import setup_scheduler
from zipgame.session import GameSession
from zipgame.storage import delete_game, load_game, lock_for, save_game

log = logging.getLogger("uvicorn.error")

# ── Lifespan ──────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.scheduler = await setup_scheduler()
    yield
    app.state.scheduler.shutdown()


app = FastAPI(title="ZipGame", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _get_game(game_id: str) -> GameSession:
    session = load_game(game_id)
    if not session:
        raise HTTPException(404, "Game not found")
    return session


async def _publish(session: GameSession) -> GameSnapshot:
    snapshot = session.snapshot()
    await broadcaster.broadcast(session.game_id, snapshot)
    return snapshot


async def _apply_event(session: GameSession, event: PointerEvent) -> GameSnapshot:
    async with lock_for(session.game_id):
        session.handle(event)
        return await _publish(session)


# ── Difficulties ──────────────────────────────────────────────────────────────

@app.get("/api/difficulties")
async def get_difficulties():
    return [
        {"key": key, "name": DIFFICULTY_NAMES[key], **preset}
        for key, preset in DIFFICULTY_PRESETS.items()
    ]


# ── Games ─────────────────────────────────────────────────────────────────────

class NewGameBody(BaseModel):
    difficulty: str = DEFAULT_DIFFICULTY
    board_size: Optional[int] = Field(None, ge=MIN_BOARD_SIZE, le=MAX_BOARD_SIZE)
    seed: Optional[int] = None


class SettingsBody(BaseModel):
    difficulty: Optional[str] = None
    board_size: Optional[int] = Field(None, ge=MIN_BOARD_SIZE, le=MAX_BOARD_SIZE)


@app.post("/api/games", status_code=status.HTTP_201_CREATED)
async def create_game(body: NewGameBody) -> GameSnapshot:
    try:
        session = await asyncio.to_thread(
            GameSession, difficulty=body.difficulty, board_size=body.board_size, seed=body.seed,
        )
    except ValueError as exc:
        raise HTTPException(400, str(exc))
    save_game(session)
    return session.snapshot()


@app.get("/api/games/{game_id}")
async def get_game(game_id: str) -> GameSnapshot:
    return _get_game(game_id).snapshot()


@app.delete("/api/games/{game_id}")
async def remove_game(game_id: str):
    _get_game(game_id)
    async with lock_for(game_id):
        delete_game(game_id)
    return {"deleted": True, "game_id": game_id}


@app.post("/api/games/{game_id}/events")
async def post_event(game_id: str, event: PointerEvent) -> GameSnapshot:
    return await _apply_event(_get_game(game_id), event)


@app.post("/api/games/{game_id}/reset")
async def reset_path(game_id: str) -> GameSnapshot:
    session = _get_game(game_id)
    async with lock_for(game_id):
        session.reset_path()
        return await _publish(session)


@app.post("/api/games/{game_id}/restart")
async def restart_game(game_id: str) -> GameSnapshot:
    session = _get_game(game_id)
    async with lock_for(game_id):
        await asyncio.to_thread(session.restart)
        return await _publish(session)


@app.put("/api/games/{game_id}/settings")
async def update_settings(game_id: str, body: SettingsBody) -> GameSnapshot:
    """A new difficulty resets board size to its default unless board_size is also given."""
    session = _get_game(game_id)
    if body.difficulty is None and body.board_size is None:
        raise HTTPException(400, "Nothing to change")

    async with lock_for(game_id):
        try:
            await asyncio.to_thread(session.apply_settings, body.difficulty, body.board_size)
        except ValueError as exc:
            raise HTTPException(400, str(exc))
        return await _publish(session)


@app.get("/api/games/{game_id}/hint")
async def get_hint(game_id: str) -> Hint:
    session = _get_game(game_id)
    async with lock_for(game_id):
        return session.hint()


# ── WebSocket live game ───────────────────────────────────────────────────────

async def _receive_events(websocket: WebSocket, game_id: str) -> None:
    while True:
        text = await websocket.receive_text()
        try:
            event = PointerEvent.model_validate_json(text)
        except ValidationError:
            await websocket.send_json({"type": "error", "detail": "Invalid event"})
            continue
        session = load_game(game_id)
        if not session:
            await websocket.send_json({"type": "error", "detail": "Game not found"})
            return
        await _apply_event(session, event)


async def _forward_messages(websocket: WebSocket, q: asyncio.Queue) -> None:
    while True:
        try:
            msg = await asyncio.wait_for(q.get(), timeout=WS_KEEPALIVE_S)
        except asyncio.TimeoutError:
            await websocket.send_json({"type": "ping"})
            continue
        await websocket.send_json(msg)


@app.websocket("/ws/games/{game_id}")
async def ws_game(websocket: WebSocket, game_id: str):
    await websocket.accept()

    session = load_game(game_id)
    if not session:
        await websocket.send_json({"type": "error", "detail": "Game not found"})
        await websocket.close()
        return

    # Current state first, then one message per applied event
    await websocket.send_json(state_message(session.snapshot()))

    q = broadcaster.subscribe(game_id)
    tasks = {
        asyncio.create_task(_receive_events(websocket, game_id)),
        asyncio.create_task(_forward_messages(websocket, q)),
    }
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                log.error("WebSocket error for game %s", game_id, exc_info=exc)
    finally:
        broadcaster.unsubscribe(game_id, q)
