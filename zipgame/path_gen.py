"""
Full-coverage path generation.

Algorithm:
1. Boards below SEARCH_SHORT_SIZE: one randomized backtracking search from a
   random corner, bounded by SEARCH_FULL_BUDGET_MS of wall-clock time.
2. Boards below SEARCH_SKIP_SIZE: up to SEARCH_SHORT_ATTEMPTS searches from
   random cells, SEARCH_SHORT_BUDGET_MS each.
3. Larger boards, or when every search gives up: a randomly chosen pattern
   (spiral / zigzag / mixed / random walk).

Every result visits each of the n×n cells exactly once, stepping between
orthogonal neighbours. Cells are plain (row, col) tuples here; the puzzle
generator converts them to Cell models.
"""
from __future__ import annotations

import logging
import random
import time
from enum import Enum
from typing import Callable, Iterator, Optional

from zipgame.config import (
    MIXED_DETOUR_CHANCE,
    MIXED_DETOUR_MAX,
    MIXED_TAIL_GUARD,
    RANDOM_WALK_MOVE_FACTOR,
    SEARCH_FULL_BUDGET_MS,
    SEARCH_SHORT_ATTEMPTS,
    SEARCH_SHORT_BUDGET_MS,
    SEARCH_SHORT_SIZE,
    SEARCH_SKIP_SIZE,
)

log = logging.getLogger(__name__)

Coord = tuple[int, int]
Clock = Callable[[], float]

# up, down, left, right
_STEPS: list[Coord] = [(-1, 0), (1, 0), (0, -1), (0, 1)]


class SearchBudget:
    """Wall-clock deadline for one search attempt.

    The clock is any zero-argument callable returning seconds (time.monotonic
    by default) so tests can advance time without sleeping.
    """

    def __init__(self, limit_ms: float, clock: Clock = time.monotonic) -> None:
        self.limit_ms = limit_ms
        self._clock = clock
        self._started = clock()

    def expired(self) -> bool:
        return (self._clock() - self._started) * 1000.0 > self.limit_ms


# ── Helpers ───────────────────────────────────────────────────────────────────

def _in_bounds(n: int, row: int, col: int) -> bool:
    return 0 <= row < n and 0 <= col < n


def _neighbours(cell: Coord, n: int) -> list[Coord]:
    r, c = cell
    return [(r + dr, c + dc) for dr, dc in _STEPS if _in_bounds(n, r + dr, c + dc)]


def _shuffled_steps(cell: Coord, rng: random.Random) -> Iterator[Coord]:
    steps = _STEPS[:]
    rng.shuffle(steps)
    r, c = cell
    return iter([(r + dr, c + dc) for dr, dc in steps])


def is_valid_solution_path(path: list[Coord], n: int) -> bool:
    """True if path covers all n×n cells once each with orthogonal steps."""
    if len(path) != n * n or len(set(path)) != len(path):
        return False
    if any(not _in_bounds(n, r, c) for r, c in path):
        return False
    return all(abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1 for a, b in zip(path, path[1:]))


# ── Backtracking search ───────────────────────────────────────────────────────

def find_hamiltonian_path(
    n: int,
    start: Coord,
    rng: random.Random,
    budget: SearchBudget,
) -> Optional[list[Coord]]:
    """Randomized depth-first search for a path through all n×n cells.

    frames[i] holds the untried steps out of path[i], in an order shuffled
    when the cell was entered. An exhausted frame is undone: its cell is
    unmarked and popped. The budget is checked before every step and its
    expiry abandons the whole search.
    """
    total = n * n
    if budget.expired() or not _in_bounds(n, *start):
        return None

    visited: set[Coord] = {start}
    path = [start]
    if total == 1:
        return path

    frames = [_shuffled_steps(start, rng)]
    while frames:
        if budget.expired():
            return None

        nxt = next(frames[-1], None)
        if nxt is None:
            frames.pop()
            visited.discard(path.pop())
            continue
        if not _in_bounds(n, *nxt) or nxt in visited:
            continue

        visited.add(nxt)
        path.append(nxt)
        if len(path) == total:
            return path
        frames.append(_shuffled_steps(nxt, rng))

    return None


# ── Pattern generators ────────────────────────────────────────────────────────

def _boustrophedon(n: int, vertical: bool, forward_on_even: bool) -> list[Coord]:
    """Row-by-row (or column-by-column) sweep, alternating direction."""
    path: list[Coord] = []
    for line in range(n):
        forward = (line % 2 == 0) == forward_on_even
        span = range(n) if forward else range(n - 1, -1, -1)
        if vertical:
            path.extend((i, line) for i in span)
        else:
            path.extend((line, i) for i in span)
    return path


def snake_pattern(n: int, rng: random.Random) -> list[Coord]:
    start_near = rng.random() < 0.5
    vertical = rng.random() < 0.5
    path = _boustrophedon(n, vertical, start_near)
    if rng.random() < 0.5:
        path.reverse()
    return path


def spiral_pattern(n: int, rng: random.Random) -> list[Coord]:
    """Clockwise inward spiral from (0, 0). Deterministic; rng is unused."""
    # right, down, left, up
    turns = [(0, 1), (1, 0), (0, -1), (-1, 0)]
    path: list[Coord] = []
    seen: set[Coord] = set()
    row = col = heading = 0

    for _ in range(n * n):
        path.append((row, col))
        seen.add((row, col))
        nr, nc = row + turns[heading][0], col + turns[heading][1]
        if not _in_bounds(n, nr, nc) or (nr, nc) in seen:
            heading = (heading + 1) % 4
        row += turns[heading][0]
        col += turns[heading][1]

    return path


def zigzag_pattern(n: int, rng: random.Random) -> list[Coord]:
    vertical = rng.random() < 0.5
    reverse = rng.random() < 0.5
    return _boustrophedon(n, vertical, not reverse)


def _backbite(path: list[Coord], n: int, rng: random.Random) -> bool:
    """Rewire the path end onto a random orthogonal neighbour already on the path.

    With that neighbour at path[j], the segment after j is reversed so that
    path[j] now steps to the old end and path[j+1] becomes the new end. The
    set of cells and every step's adjacency are unchanged.
    """
    if len(path) < 3:
        return False
    index_of = {cell: i for i, cell in enumerate(path)}
    end, before_end = path[-1], path[-2]
    options = [nb for nb in _neighbours(end, n) if nb in index_of and nb != before_end]
    if not options:
        return False
    j = index_of[rng.choice(options)]
    path[j + 1:] = path[:j:-1]
    return True


def mixed_pattern(n: int, rng: random.Random) -> list[Coord]:
    """Snake with short random detours along the way."""
    path = snake_pattern(n, rng)
    for _ in range(max(0, len(path) - MIXED_TAIL_GUARD)):
        if rng.random() >= MIXED_DETOUR_CHANCE:
            continue
        # detour from either end of the path
        if rng.random() < 0.5:
            path.reverse()
        for _ in range(rng.randint(1, MIXED_DETOUR_MAX)):
            _backbite(path, n, rng)
    return path


def random_walk_pattern(n: int, rng: random.Random) -> list[Coord]:
    """Greedy random walk; backbite moves free the end whenever it is boxed in."""
    total = n * n
    start = (rng.randrange(n), rng.randrange(n))
    visited: set[Coord] = {start}
    path = [start]
    moves_left = RANDOM_WALK_MOVE_FACTOR * total

    while len(path) < total:
        free = [nb for nb in _neighbours(path[-1], n) if nb not in visited]
        if free:
            nxt = rng.choice(free)
            visited.add(nxt)
            path.append(nxt)
            continue
        if moves_left <= 0 or not _backbite(path, n, rng):
            log.debug("Random walk stalled at %d/%d cells; using snake", len(path), total)
            return snake_pattern(n, rng)
        moves_left -= 1

    return path


class PatternKind(str, Enum):
    SNAKE = "snake"
    SPIRAL = "spiral"
    ZIGZAG = "zigzag"
    MIXED = "mixed"
    RANDOM_WALK = "random_walk"


PATTERN_BUILDERS: dict[PatternKind, Callable[[int, random.Random], list[Coord]]] = {
    PatternKind.SNAKE: snake_pattern,
    PatternKind.SPIRAL: spiral_pattern,
    PatternKind.ZIGZAG: zigzag_pattern,
    PatternKind.MIXED: mixed_pattern,
    PatternKind.RANDOM_WALK: random_walk_pattern,
}

COMPLEX_PATTERNS = (
    PatternKind.SPIRAL,
    PatternKind.ZIGZAG,
    PatternKind.MIXED,
    PatternKind.RANDOM_WALK,
)


def generate_pattern(kind: PatternKind, n: int, rng: random.Random) -> list[Coord]:
    return PATTERN_BUILDERS[kind](n, rng)


def generate_complex_pattern(n: int, rng: random.Random) -> list[Coord]:
    kind = rng.choice(COMPLEX_PATTERNS)
    log.debug("Using %s pattern for %dx%d board", kind.value, n, n)
    return generate_pattern(kind, n, rng)


# ── Main entry point ──────────────────────────────────────────────────────────

def generate_path(
    n: int,
    rng: Optional[random.Random] = None,
    clock: Clock = time.monotonic,
) -> list[Coord]:
    """Return a full-coverage path for an n×n board. Never fails."""
    rng = rng or random.Random()

    if n >= SEARCH_SKIP_SIZE:
        return generate_complex_pattern(n, rng)

    if n >= SEARCH_SHORT_SIZE:
        for _ in range(SEARCH_SHORT_ATTEMPTS):
            start = (rng.randrange(n), rng.randrange(n))
            path = find_hamiltonian_path(n, start, rng, SearchBudget(SEARCH_SHORT_BUDGET_MS, clock))
            if path:
                return path
        log.debug("Search gave up after %d attempts on %dx%d board", SEARCH_SHORT_ATTEMPTS, n, n)
        return generate_complex_pattern(n, rng)

    corners = [(0, 0), (0, n - 1), (n - 1, 0), (n - 1, n - 1)]
    path = find_hamiltonian_path(n, rng.choice(corners), rng, SearchBudget(SEARCH_FULL_BUDGET_MS, clock))
    if path:
        return path
    log.debug("Search gave up on %dx%d board", n, n)
    return generate_complex_pattern(n, rng)
