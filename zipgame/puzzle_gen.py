"""Puzzle generation: solution path, waypoints and grid in one stateless call."""
from __future__ import annotations

import logging
import random
import time
from typing import Optional, Sequence

from zipgame.config import (
    DEFAULT_DIFFICULTY,
    DIFFICULTY_PRESETS,
    MAX_BOARD_SIZE,
    MIN_BOARD_SIZE,
)
from zipgame.models import Cell, DifficultySettings, GridCell, NumberedCell, Puzzle
from zipgame.path_gen import Clock, generate_path, is_valid_solution_path, snake_pattern
from zipgame.waypoints import number_cells, place_waypoints

log = logging.getLogger(__name__)


def difficulty_settings(key: Optional[str]) -> DifficultySettings:
    """Preset for key; unknown keys fall back to the default difficulty."""
    if key not in DIFFICULTY_PRESETS:
        log.debug("Unknown difficulty %r, using %s", key, DEFAULT_DIFFICULTY)
        key = DEFAULT_DIFFICULTY
    return DifficultySettings(key=key, **DIFFICULTY_PRESETS[key])


def validate_board_size(size: int) -> int:
    if isinstance(size, bool) or not isinstance(size, int):
        raise ValueError(f"Board size must be an integer, got {size!r}")
    if not MIN_BOARD_SIZE <= size <= MAX_BOARD_SIZE:
        raise ValueError(f"Board size must be between {MIN_BOARD_SIZE} and {MAX_BOARD_SIZE}, got {size}")
    return size


def build_grid(n: int, numbered: Sequence[NumberedCell]) -> tuple[tuple[GridCell, ...], ...]:
    numbers = {(c.row, c.col): c.number for c in numbered}
    return tuple(
        tuple(GridCell(row=r, col=c, number=numbers.get((r, c))) for c in range(n))
        for r in range(n)
    )


def generate_puzzle(
    grid_size: Optional[int] = None,
    difficulty: str = DEFAULT_DIFFICULTY,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
    clock: Clock = time.monotonic,
) -> Puzzle:
    """Generate a fresh puzzle.

    grid_size defaults to the difficulty's board size. Pass rng (or seed) for
    reproducible puzzles and clock to control the search deadline.
    """
    settings = difficulty_settings(difficulty)
    n = validate_board_size(grid_size if grid_size is not None else settings.default_board_size)
    rng = rng or random.Random(seed)

    path = generate_path(n, rng, clock)
    if not is_valid_solution_path(path, n):
        log.error("Generated path failed validation on %dx%d board, using snake", n, n)
        path = snake_pattern(n, rng)

    indices = place_waypoints(path, settings, rng)
    numbered = number_cells(path, indices)

    return Puzzle(
        grid_size=n,
        difficulty=settings.key,
        grid=build_grid(n, numbered),
        numbered_cells=tuple(numbered),
        solution_path=tuple(Cell(row=r, col=c) for r, c in path),
    )
