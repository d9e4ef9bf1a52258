"""
Game housekeeping jobs.

Games live only in memory, so abandoned ones are dropped once they have been
idle for GAME_IDLE_TTL_MIN minutes:
  every PRUNE_INTERVAL_MIN → prune_idle_games_job()
"""
from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from zipgame.config import GAME_IDLE_TTL_MIN, PRUNE_INTERVAL_MIN
from zipgame.storage import list_game_ids, prune_idle_games

log = logging.getLogger(__name__)


async def prune_idle_games_job() -> int:
    """Remove idle games. Returns the number removed."""
    removed = prune_idle_games(GAME_IDLE_TTL_MIN * 60)
    if removed:
        log.info("Pruned %d idle games, %d remain", removed, len(list_game_ids()))
    return removed


async def setup_scheduler() -> AsyncIOScheduler:
    """Initialise and start the scheduler with the pruning job registered."""
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        prune_idle_games_job,
        "interval",
        minutes=PRUNE_INTERVAL_MIN,
        id="prune_idle_games",
        replace_existing=True,
    )
    scheduler.start()
    log.info("Scheduler started, pruning idle games every %d min", PRUNE_INTERVAL_MIN)
    return scheduler
