import pytest

from zipgame.models import PointerEvent
from zipgame import session as session_module
from zipgame.session import GameSession

from conftest import TickClock


@pytest.fixture
def clock():
    return TickClock()


def make_session(clock, expiring_clock, **kwargs):
    kwargs.setdefault("difficulty", "easy")
    kwargs.setdefault("board_size", 4)
    kwargs.setdefault("seed", 7)
    return GameSession(clock=clock, search_clock=expiring_clock, **kwargs)


def play_solution(session):
    for i, cell in enumerate(session.puzzle.solution_path):
        session.handle(PointerEvent(type="down" if i == 0 else "move", cell=cell))
    session.handle(PointerEvent(type="up"))


def test_new_session_uses_the_requested_settings(clock, expiring_clock):
    session = make_session(clock, expiring_clock, difficulty="hard", board_size=5)
    assert session.settings.key == "hard"
    assert session.puzzle.grid_size == 5
    assert session.state.path == []
    assert session.engine.puzzle is session.puzzle


def test_board_size_defaults_to_the_difficulty(clock, expiring_clock):
    session = make_session(clock, expiring_clock, difficulty="extra-hard", board_size=None)
    assert session.board_size == 8


@pytest.mark.parametrize("size", [0, 1, 13])
def test_invalid_board_size_is_rejected(clock, expiring_clock, size):
    with pytest.raises(ValueError):
        make_session(clock, expiring_clock, board_size=size)


def test_restart_replaces_puzzle_and_resets_moves(clock, expiring_clock):
    session = make_session(clock, expiring_clock)
    first = session.puzzle.solution_path[0]
    session.handle(PointerEvent(type="down", cell=first))
    assert session.state.move_count == 1

    old_puzzle = session.puzzle
    session.restart()
    assert session.puzzle is not old_puzzle
    assert session.state.move_count == 0
    assert session.state.path == []
    assert session.engine.state is session.state


def test_reset_path_keeps_moves(clock, expiring_clock):
    session = make_session(clock, expiring_clock)
    session.handle(PointerEvent(type="down", cell=session.puzzle.solution_path[0]))
    assert session.reset_path()
    assert session.state.move_count == 1
    assert session.state.path == []


def test_set_difficulty_resets_the_board_size(clock, expiring_clock):
    session = make_session(clock, expiring_clock, board_size=10)
    session.set_difficulty("hard")
    assert session.settings.key == "hard"
    assert session.board_size == 7
    assert session.puzzle.grid_size == 7


def test_set_board_size(clock, expiring_clock):
    session = make_session(clock, expiring_clock)
    session.set_board_size(3)
    assert session.puzzle.grid_size == 3
    with pytest.raises(ValueError):
        session.set_board_size(20)
    assert session.puzzle.grid_size == 3


def test_apply_settings_generates_one_puzzle(monkeypatch, clock, expiring_clock):
    session = make_session(clock, expiring_clock)
    sizes = []
    real_generate = session_module.generate_puzzle

    def counting_generate(grid_size, difficulty, **kwargs):
        sizes.append((grid_size, difficulty))
        return real_generate(grid_size, difficulty, **kwargs)

    monkeypatch.setattr(session_module, "generate_puzzle", counting_generate)
    session.apply_settings("hard", 5)
    assert sizes == [(5, "hard")]
    assert session.settings.key == "hard"
    assert session.puzzle.grid_size == 5


def test_apply_settings_keeps_unchanged_values(clock, expiring_clock):
    session = make_session(clock, expiring_clock, board_size=5)
    session.apply_settings(board_size=3)
    assert session.settings.key == "easy"
    assert session.board_size == 3
    session.apply_settings(difficulty="hard")
    assert session.board_size == 7


def test_apply_settings_rejects_bad_size_without_changes(clock, expiring_clock):
    session = make_session(clock, expiring_clock)
    puzzle = session.puzzle
    with pytest.raises(ValueError):
        session.apply_settings("hard", 1)
    assert session.settings.key == "easy"
    assert session.board_size == 4
    assert session.puzzle is puzzle


def test_elapsed_time_freezes_on_win(clock, expiring_clock):
    session = make_session(clock, expiring_clock)
    clock.advance(12.5)
    play_solution(session)
    assert session.state.won
    assert session.elapsed_seconds == pytest.approx(12.5)
    clock.advance(100)
    assert session.elapsed_seconds == pytest.approx(12.5)


def test_idle_time_tracks_the_last_action(clock, expiring_clock):
    session = make_session(clock, expiring_clock)
    clock.advance(30)
    assert session.idle_seconds() == pytest.approx(30)
    session.hint()
    assert session.idle_seconds() == pytest.approx(0)


def test_snapshot_hides_the_solution(clock, expiring_clock):
    session = make_session(clock, expiring_clock, game_id="g1")
    session.handle(PointerEvent(type="down", cell=session.puzzle.solution_path[0]))
    snap = session.snapshot()
    assert snap.game_id == "g1"
    assert snap.status == "drawing"
    assert snap.difficulty_name == "Easy"
    assert snap.board_size == 4
    assert snap.path == [session.puzzle.solution_path[0]]
    assert len(snap.puzzle.numbered_cells) == len(session.puzzle.numbered_cells)
    assert "solution_path" not in snap.model_dump()["puzzle"]


def test_snapshot_after_win(clock, expiring_clock):
    session = make_session(clock, expiring_clock)
    play_solution(session)
    snap = session.snapshot()
    assert snap.won
    assert snap.status == "won"
    assert len(snap.visited) == 16
    assert [(c.row, c.col) for c in snap.visited] == sorted((c.row, c.col) for c in snap.visited)
