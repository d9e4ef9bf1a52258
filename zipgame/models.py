"""Pydantic models for puzzles, path state and the renderer-facing snapshot."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

EventType = Literal["down", "move", "up"]
GameStatus = Literal["empty", "drawing", "won"]
HintKind = Literal["start", "route", "target", "moves", "none"]


# ── Grid ──────────────────────────────────────────────────────────────────────

class Cell(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: int = Field(ge=0)
    col: int = Field(ge=0)

    def as_tuple(self) -> tuple[int, int]:
        return self.row, self.col

    def is_adjacent(self, other: Cell) -> bool:
        """Orthogonal neighbour: exactly one coordinate differs, by one."""
        return abs(self.row - other.row) + abs(self.col - other.col) == 1


class GridCell(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: int
    col: int
    number: Optional[int] = Field(None, gt=0)
    visited: bool = False  # generation scratch flag, never game state


class NumberedCell(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: int
    col: int
    number: int = Field(gt=0)

    @property
    def cell(self) -> Cell:
        return Cell(row=self.row, col=self.col)


class DifficultySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    default_board_size: int = Field(ge=2)
    min_waypoints: int = Field(ge=1)
    max_waypoints: int = Field(ge=1)
    path_complexity: float = Field(ge=0.0, le=1.0)


# ── Puzzle ────────────────────────────────────────────────────────────────────

class Puzzle(BaseModel):
    """A generated board. Immutable; a new game gets a new Puzzle."""
    model_config = ConfigDict(frozen=True)

    grid_size: int = Field(ge=2)
    difficulty: str
    grid: tuple[tuple[GridCell, ...], ...]
    numbered_cells: tuple[NumberedCell, ...]   # ordered by number
    solution_path: tuple[Cell, ...]

    @property
    def total_cells(self) -> int:
        return self.grid_size * self.grid_size

    @property
    def max_number(self) -> int:
        return max((n.number for n in self.numbered_cells), default=0)

    def in_bounds(self, cell: Cell) -> bool:
        return 0 <= cell.row < self.grid_size and 0 <= cell.col < self.grid_size

    def number_at(self, cell: Cell) -> Optional[int]:
        return self.grid[cell.row][cell.col].number

    def cell_for_number(self, number: int) -> Optional[Cell]:
        for n in self.numbered_cells:
            if n.number == number:
                return n.cell
        return None


class PuzzleView(BaseModel):
    """What the renderer sees of a puzzle; no solution."""
    grid_size: int
    difficulty: str
    numbered_cells: list[NumberedCell]


# ── Interaction ───────────────────────────────────────────────────────────────

class PathState(BaseModel):
    """The player's in-progress path. Mutated only by InteractionEngine."""
    path: list[Cell] = Field(default_factory=list)
    visited: set[Cell] = Field(default_factory=set)
    current_number: int = Field(1, ge=1)
    move_count: int = Field(0, ge=0)
    won: bool = False

    @property
    def tail(self) -> Optional[Cell]:
        return self.path[-1] if self.path else None


class PointerEvent(BaseModel):
    type: EventType
    cell: Optional[Cell] = None  # None when the pointer is outside the grid


class Hint(BaseModel):
    kind: HintKind
    cells: list[Cell] = Field(default_factory=list)
    number: Optional[int] = None  # the waypoint the hint leads to


# ── Session ───────────────────────────────────────────────────────────────────

class GameSnapshot(BaseModel):
    game_id: str
    difficulty: str
    difficulty_name: str
    board_size: int
    status: GameStatus
    puzzle: PuzzleView
    path: list[Cell]
    visited: list[Cell]   # row-major order
    current_number: int
    move_count: int
    won: bool
    elapsed_seconds: float
