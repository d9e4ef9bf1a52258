import random

import pytest

from zipgame import storage
from zipgame.models import Cell, GridCell, NumberedCell, Puzzle


class TickClock:
    """Fake monotonic clock. Each call returns the current time, then moves it on by step_s."""

    def __init__(self, step_s: float = 0.0, start: float = 1000.0) -> None:
        self.now = start
        self.step_s = step_s

    def __call__(self) -> float:
        current = self.now
        self.now += self.step_s
        return current

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def frozen_clock():
    return TickClock(step_s=0.0)


@pytest.fixture
def expiring_clock():
    # every budget check sees two more seconds gone
    return TickClock(step_s=2.0)


@pytest.fixture
def make_puzzle():
    def _make(n: int, numbers: dict, path=None, difficulty: str = "medium") -> Puzzle:
        numbered = sorted(
            (NumberedCell(row=r, col=c, number=num) for (r, c), num in numbers.items()),
            key=lambda nc: nc.number,
        )
        grid = tuple(
            tuple(GridCell(row=r, col=c, number=numbers.get((r, c))) for c in range(n))
            for r in range(n)
        )
        return Puzzle(
            grid_size=n,
            difficulty=difficulty,
            grid=grid,
            numbered_cells=tuple(numbered),
            solution_path=tuple(Cell(row=r, col=c) for r, c in (path or [])),
        )
    return _make


@pytest.fixture(autouse=True)
def _empty_store():
    storage.clear_games()
    yield
    storage.clear_games()
