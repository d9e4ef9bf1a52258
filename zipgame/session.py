"""
A running game: one Puzzle, its PathState and the engine driving it.

All three are replaced together on new game, restart and settings changes;
nothing about the previous game carries over except the settings.
"""
from __future__ import annotations

import logging
import random
import time
import uuid
from typing import Optional

from zipgame.config import DEFAULT_DIFFICULTY, DIFFICULTY_NAMES
from zipgame.interaction.engine import InteractionEngine
from zipgame.models import DifficultySettings, GameSnapshot, Hint, PathState, PointerEvent, Puzzle, PuzzleView
from zipgame.path_gen import Clock
from zipgame.puzzle_gen import difficulty_settings, generate_puzzle, validate_board_size

log = logging.getLogger(__name__)


class GameSession:
    puzzle: Puzzle
    state: PathState
    engine: InteractionEngine

    def __init__(
        self,
        difficulty: str = DEFAULT_DIFFICULTY,
        board_size: Optional[int] = None,
        seed: Optional[int] = None,
        game_id: Optional[str] = None,
        clock: Clock = time.monotonic,
        search_clock: Clock = time.monotonic,
    ) -> None:
        self.game_id = game_id or str(uuid.uuid4())
        self.settings: DifficultySettings = difficulty_settings(difficulty)
        self.board_size = validate_board_size(
            board_size if board_size is not None else self.settings.default_board_size
        )
        self._rng = random.Random(seed)
        self._clock = clock
        self._search_clock = search_clock
        self.started_at = 0.0
        self.finished_at: Optional[float] = None
        self.last_active = clock()
        self.new_game()

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def new_game(self) -> None:
        self.puzzle = generate_puzzle(
            self.board_size, self.settings.key, rng=self._rng, clock=self._search_clock,
        )
        self.state = PathState()
        self.engine = InteractionEngine(self.puzzle, self.state)
        self.started_at = self._clock()
        self.finished_at = None
        self.touch()
        log.info(
            "Game %s: new %dx%d %s puzzle with %d waypoints",
            self.game_id, self.board_size, self.board_size, self.settings.key,
            len(self.puzzle.numbered_cells),
        )

    def restart(self) -> None:
        self.new_game()

    def apply_settings(self, difficulty: Optional[str] = None, board_size: Optional[int] = None) -> None:
        """Change difficulty and/or board size, then generate one new puzzle.

        A new difficulty brings its default board size unless board_size is
        given too. Nothing changes if the board size is invalid.
        """
        settings = difficulty_settings(difficulty) if difficulty is not None else self.settings
        if board_size is None:
            size = settings.default_board_size if difficulty is not None else self.board_size
        else:
            size = validate_board_size(board_size)
        self.settings = settings
        self.board_size = size
        self.new_game()

    def set_difficulty(self, key: str) -> None:
        """Switch difficulty; board size returns to that difficulty's default."""
        self.apply_settings(difficulty=key)

    def set_board_size(self, size: int) -> None:
        self.apply_settings(board_size=size)

    # ── Play ──────────────────────────────────────────────────────────────────

    def handle(self, event: PointerEvent) -> bool:
        self.touch()
        changed = self.engine.handle(event)
        if self.state.won and self.finished_at is None:
            self.finished_at = self._clock()
            log.info(
                "Game %s won in %.1fs (%d moves)",
                self.game_id, self.elapsed_seconds, self.state.move_count,
            )
        return changed

    def reset_path(self) -> bool:
        self.touch()
        return self.engine.reset_path()

    def hint(self) -> Hint:
        self.touch()
        return self.engine.hint()

    # ── Bookkeeping ───────────────────────────────────────────────────────────

    def touch(self) -> None:
        self.last_active = self._clock()

    def idle_seconds(self) -> float:
        return self._clock() - self.last_active

    @property
    def elapsed_seconds(self) -> float:
        """Time since the game started, frozen once it is won."""
        end = self.finished_at if self.finished_at is not None else self._clock()
        return max(0.0, end - self.started_at)

    def snapshot(self) -> GameSnapshot:
        state = self.state
        return GameSnapshot(
            game_id=self.game_id,
            difficulty=self.settings.key,
            difficulty_name=DIFFICULTY_NAMES[self.settings.key],
            board_size=self.puzzle.grid_size,
            status=self.engine.status.value,
            puzzle=PuzzleView(
                grid_size=self.puzzle.grid_size,
                difficulty=self.puzzle.difficulty,
                numbered_cells=list(self.puzzle.numbered_cells),
            ),
            path=list(state.path),
            visited=sorted(state.visited, key=lambda c: (c.row, c.col)),
            current_number=state.current_number,
            move_count=state.move_count,
            won=state.won,
            elapsed_seconds=round(self.elapsed_seconds, 3),
        )
