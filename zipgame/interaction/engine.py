"""
Interaction engine. No I/O, no side-effects outside the PathState it is given.

Consumes pointer events against a Puzzle and keeps the player's path legal:
orthogonal steps, no revisits, waypoints in ascending order, backtracking
only over the last few steps. Illegal input is ignored rather than raised;
every mutating call returns whether the path state changed.
"""
from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Optional

from zipgame.config import BACKTRACK_MIN_STEPS, BACKTRACK_PATH_RATIO, HINT_ROUTE_CELLS
from zipgame.models import Cell, Hint, PathState, PointerEvent, Puzzle

# up, down, left, right
_STEPS = [(-1, 0), (1, 0), (0, -1), (0, 1)]


class EngineStatus(str, Enum):
    EMPTY = "empty"
    DRAWING = "drawing"
    WON = "won"


class InteractionEngine:
    def __init__(self, puzzle: Puzzle, state: Optional[PathState] = None) -> None:
        self.puzzle = puzzle
        self.state = state if state is not None else PathState()
        self.dragging = False

    @property
    def status(self) -> EngineStatus:
        if self.state.won:
            return EngineStatus.WON
        return EngineStatus.DRAWING if self.state.path else EngineStatus.EMPTY

    # ── Queries ───────────────────────────────────────────────────────────────

    def _neighbours(self, cell: Cell) -> list[Cell]:
        n = self.puzzle.grid_size
        return [
            Cell(row=cell.row + dr, col=cell.col + dc)
            for dr, dc in _STEPS
            if 0 <= cell.row + dr < n and 0 <= cell.col + dc < n
        ]

    def path_index(self, cell: Cell) -> int:
        if cell not in self.state.visited:
            return -1
        return self.state.path.index(cell)

    def can_extend_path(self, cell: Cell) -> bool:
        state = self.state
        if not self.puzzle.in_bounds(cell):
            return False
        tail = state.tail
        if tail is not None and cell == tail:
            return False
        if cell in state.visited:
            return False
        if tail is not None and not tail.is_adjacent(cell):
            return False
        number = self.puzzle.number_at(cell)
        if number is not None:
            return number == state.current_number
        return True

    def can_start_or_continue_path(self, cell: Cell) -> bool:
        if not self.state.path:
            return self.puzzle.number_at(cell) in (None, 1)
        if cell == self.state.tail:
            return True
        return self.can_extend_path(cell)

    def can_backtrack_to_index(self, index: int) -> bool:
        length = len(self.state.path)
        if not 0 <= index < length:
            return False
        steps_from_end = length - 1 - index
        window = max(BACKTRACK_MIN_STEPS, int(length * BACKTRACK_PATH_RATIO))
        return steps_from_end <= window

    def valid_adjacent_moves(self, cell: Cell) -> list[Cell]:
        return [nb for nb in self._neighbours(cell) if self.can_extend_path(nb)]

    def _matched_number(self) -> int:
        """Next waypoint number after replaying the current path from scratch."""
        expected = 1
        for cell in self.state.path:
            if self.puzzle.number_at(cell) == expected:
                expected += 1
        return expected

    # ── Mutations ─────────────────────────────────────────────────────────────

    def start_or_continue_path(self, cell: Cell) -> bool:
        state = self.state
        if not state.path:
            state.path = [cell]
            state.visited = {cell}
            if self.puzzle.number_at(cell) == 1:
                state.current_number = 2
            state.move_count += 1
            return True
        if cell == state.tail:
            return False
        if self.can_extend_path(cell):
            return self.extend_path(cell)
        return False

    def extend_path(self, cell: Cell) -> bool:
        state = self.state
        state.path.append(cell)
        state.visited.add(cell)
        if self.puzzle.number_at(cell) == state.current_number:
            state.current_number += 1
        self.check_win_condition()
        return True

    def backtrack_to_index(self, index: int) -> bool:
        state = self.state
        removed = state.path[index + 1:]
        if not removed:
            return False
        del state.path[index + 1:]
        state.visited.difference_update(removed)
        state.current_number = self._matched_number()
        return True

    def check_win_condition(self) -> bool:
        state = self.state
        if (
            state.current_number > self.puzzle.max_number
            and len(state.visited) == self.puzzle.total_cells
        ):
            state.won = True
            self.dragging = False
        return state.won

    def reset_path(self) -> bool:
        """Clear the path; keeps move_count and the puzzle. Ignored once won."""
        state = self.state
        self.dragging = False
        if state.won or not state.path:
            return False
        state.path = []
        state.visited = set()
        state.current_number = 1
        return True

    # ── Pointer events ────────────────────────────────────────────────────────

    def _playable(self, cell: Optional[Cell]) -> bool:
        return not self.state.won and cell is not None and self.puzzle.in_bounds(cell)

    def pointer_down(self, cell: Optional[Cell]) -> bool:
        if not self._playable(cell):
            return False

        index = self.path_index(cell)
        if index != -1:
            if not self.can_backtrack_to_index(index):
                return False
            self.dragging = True
            return self.backtrack_to_index(index)

        if not self.can_start_or_continue_path(cell):
            return False
        self.dragging = True
        return self.start_or_continue_path(cell)

    def pointer_move(self, cell: Optional[Cell]) -> bool:
        if not self.dragging or not self._playable(cell):
            return False

        index = self.path_index(cell)
        if index != -1:
            if index < len(self.state.path) - 1 and self.can_backtrack_to_index(index):
                return self.backtrack_to_index(index)
            return False

        if self.can_extend_path(cell):
            return self.extend_path(cell)
        return False

    def pointer_up(self) -> bool:
        self.dragging = False
        return False

    def handle(self, event: PointerEvent) -> bool:
        if event.type == "down":
            return self.pointer_down(event.cell)
        if event.type == "move":
            return self.pointer_move(event.cell)
        return self.pointer_up()

    # ── Hints ─────────────────────────────────────────────────────────────────

    def _route_to(self, start: Cell, target: Cell) -> Optional[list[Cell]]:
        """Shortest route from start to target through unvisited cells (BFS)."""
        queue = deque([start])
        parent: dict[Cell, Optional[Cell]] = {start: None}
        while queue:
            cur = queue.popleft()
            if cur == target:
                route = []
                node: Optional[Cell] = cur
                while node is not None:
                    route.append(node)
                    node = parent[node]
                route.reverse()
                return route
            for nb in self._neighbours(cur):
                if nb not in parent and nb not in self.state.visited:
                    parent[nb] = cur
                    queue.append(nb)
        return None

    def hint(self) -> Hint:
        state = self.state
        if state.won:
            return Hint(kind="none")

        if not state.path:
            start = self.puzzle.cell_for_number(1)
            if start is None:
                return Hint(kind="none")
            return Hint(kind="start", cells=[start], number=1)

        target = self.puzzle.cell_for_number(state.current_number)
        if target is not None:
            route = self._route_to(state.tail, target)
            if route and len(route) > 1:
                return Hint(kind="route", cells=route[1:1 + HINT_ROUTE_CELLS], number=state.current_number)
            return Hint(kind="target", cells=[target], number=state.current_number)

        moves = self.valid_adjacent_moves(state.tail)
        if moves:
            return Hint(kind="moves", cells=moves)
        return Hint(kind="none")
