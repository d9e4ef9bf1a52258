"""
Waypoint placement along a solution path.

Decides which path indices become numbered cells: how many (board size
clamped by difficulty), where (jittered spacing, looser at high complexity),
and retries placements whose spacing is too even to make an interesting
puzzle.
"""
from __future__ import annotations

import logging
import math
import random
import statistics
from typing import Sequence

from zipgame.config import (
    BOARD_MAX_WAYPOINT_RATIO,
    BOARD_MIN_WAYPOINT_RATIO,
    BOARD_MIN_WAYPOINTS,
    CELLS_PER_WAYPOINT,
    HIGH_COMPLEXITY_JITTER,
    HIGH_COMPLEXITY_TAIL_MARGIN,
    HIGH_COMPLEXITY_THRESHOLD,
    LOW_COMPLEXITY_JITTER,
    LOW_COMPLEXITY_TAIL_MARGIN,
    PLACEMENT_MAX_ATTEMPTS,
    SEQUENTIAL_STDDEV_RATIO,
)
from zipgame.models import DifficultySettings, NumberedCell

log = logging.getLogger(__name__)


def waypoint_count(grid_size: int, settings: DifficultySettings) -> int:
    """Number of waypoints for a board: scaled with area, clamped by size then difficulty."""
    total = grid_size * grid_size
    board_min = max(BOARD_MIN_WAYPOINTS, int(grid_size * BOARD_MIN_WAYPOINT_RATIO))
    board_max = int(grid_size * BOARD_MAX_WAYPOINT_RATIO)

    count = max(board_min, min(board_max, total // CELLS_PER_WAYPOINT))
    count = max(settings.min_waypoints, min(settings.max_waypoints, count))
    # tiny boards cannot hold more waypoints than cells
    return min(count, total)


# ── Position generation ───────────────────────────────────────────────────────

def _jitter(spread: int, rng: random.Random) -> int:
    return int(rng.random() * spread * 2) - spread


def _upper_bound(path_len: int, count: int, tail_margin: int) -> int:
    """Highest index a non-final waypoint may take.

    Keeps tail_margin cells clear before the end when the path is long enough
    to fit the other waypoints below that; otherwise anything before the end.
    """
    bound = path_len - tail_margin
    if bound >= count - 2:
        return bound
    return path_len - 2


def _strictly_ascending(positions: list[int], last: int) -> list[int]:
    """Nudge sorted indices apart so they strictly increase and finish at last."""
    out = sorted(positions)
    for i in range(1, len(out)):
        out[i] = max(out[i], out[i - 1] + 1)
    out[-1] = last
    for i in range(len(out) - 2, -1, -1):
        out[i] = min(out[i], out[i + 1] - 1)
    return out


def generate_waypoint_positions(
    path_len: int,
    count: int,
    complexity: float,
    rng: random.Random,
) -> list[int]:
    """One candidate set of waypoint indices, ascending, ending at path_len - 1."""
    last = path_len - 1
    if count <= 1:
        return [last]

    step = path_len // count
    if complexity > HIGH_COMPLEXITY_THRESHOLD:
        spread = int(step * HIGH_COMPLEXITY_JITTER)
        upper = _upper_bound(path_len, count, HIGH_COMPLEXITY_TAIL_MARGIN)
        positions = [
            max(0, min(upper, i * step + _jitter(spread, rng)))
            for i in range(count - 1)
        ]
        # NOTE: the sort below undoes the shuffle's ordering; only the rng draw order changes
        rng.shuffle(positions)
    else:
        spread = int(step * LOW_COMPLEXITY_JITTER)
        upper = _upper_bound(path_len, count, LOW_COMPLEXITY_TAIL_MARGIN)
        positions = [
            max(0, min(upper, i * step + _jitter(spread, rng)))
            for i in range(count - 1)
        ]

    positions.append(last)
    return _strictly_ascending(positions, last)


def is_sequential_pattern(positions: Sequence[int]) -> bool:
    """True when the gaps between waypoints are too even (std dev < 20% of mean)."""
    if len(positions) < 3:
        return False
    gaps = [b - a for a, b in zip(positions, positions[1:])]
    mean = statistics.fmean(gaps)
    return statistics.pstdev(gaps) < mean * SEQUENTIAL_STDDEV_RATIO


# ── Main entry point ──────────────────────────────────────────────────────────

def place_waypoints(
    path: Sequence,
    settings: DifficultySettings,
    rng: random.Random,
) -> list[int]:
    """Choose waypoint indices along path, retrying evenly spaced placements."""
    grid_size = math.isqrt(len(path))
    count = waypoint_count(grid_size, settings)

    positions: list[int] = []
    for _ in range(PLACEMENT_MAX_ATTEMPTS):
        positions = generate_waypoint_positions(len(path), count, settings.path_complexity, rng)
        if not is_sequential_pattern(positions):
            break
    else:
        log.debug("Keeping evenly spaced waypoints after %d attempts", PLACEMENT_MAX_ATTEMPTS)

    return positions


def number_cells(path: Sequence[tuple[int, int]], indices: Sequence[int]) -> list[NumberedCell]:
    """Label the cells at the given path indices 1, 2, 3, ... in index order."""
    return [
        NumberedCell(row=path[i][0], col=path[i][1], number=number)
        for number, i in enumerate(indices, start=1)
    ]
