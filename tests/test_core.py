import numpy as np
import pytest

from blockfall.game import (
    Action,
    EngineState,
    GameConfig,
    GameEngine,
    HighScoreStore,
    ScoringRules,
    TetrominoType,
)


def prefill_two_rows_around_center(engine: GameEngine) -> None:
    # Rows 18 and 19 full except columns 4-5, where an O piece fits
    engine.board.grid[18:20, :4] = 1
    engine.board.grid[18:20, 6:] = 1


def test_spawn_position_is_top_center(make_engine):
    engine = make_engine(TetrominoType.I)
    assert engine.state is EngineState.FALLING
    assert engine.current_piece.kind is TetrominoType.I
    assert (engine.current_x, engine.current_y) == (3, 0)

    engine = make_engine(TetrominoType.T)
    assert (engine.current_x, engine.current_y) == (4, 0)


def test_hard_drop_o_piece_end_to_end(make_engine):
    engine = make_engine(TetrominoType.O)
    assert (engine.current_x, engine.current_y) == (4, 0)

    result = engine.hard_drop()

    assert result.locked and result.moved
    assert result.lines_cleared == 0
    expected = np.zeros((20, 10), dtype=np.int8)
    expected[18:20, 4:6] = 2
    np.testing.assert_array_equal(engine.board.grid, expected)
    assert engine.current_piece is not None
    assert (engine.current_x, engine.current_y) == (4, 0)
    assert engine.state is EngineState.FALLING
    assert engine.score == 0


def test_move_down_with_space_moves_one_row(make_engine):
    engine = make_engine(TetrominoType.Z)
    result = engine.move_down()
    assert result.moved and not result.locked
    assert engine.current_y == 1
    assert engine.tick().moved
    assert engine.current_y == 2


def test_horizontal_moves_stop_at_walls(make_engine):
    engine = make_engine(TetrominoType.O)
    for expected_x in (3, 2, 1, 0):
        assert engine.move_left().moved
        assert engine.current_x == expected_x
    assert not engine.move_left().moved
    assert engine.current_x == 0

    for _ in range(8):
        engine.move_right()
    assert engine.current_x == 8
    assert not engine.move_right().moved


def test_move_blocked_by_locked_cells(make_engine):
    engine = make_engine(TetrominoType.O)
    engine.board.grid[0:2, 3] = 5
    assert not engine.move_left().moved
    assert engine.current_x == 4
    assert not engine.is_feasible(Action.LEFT)
    assert engine.is_feasible(Action.RIGHT)


def test_rotation_without_wall_kick(make_engine):
    engine = make_engine(TetrominoType.I)
    assert engine.rotate().moved
    assert (engine.current_piece.width, engine.current_piece.height) == (1, 4)

    while engine.move_right().moved:
        pass
    assert engine.current_x == 9
    # Horizontal I would stick out of the board: rejected, orientation kept
    assert not engine.rotate().moved
    assert (engine.current_piece.width, engine.current_piece.height) == (1, 4)
    assert engine.current_x == 9


def test_rotation_blocked_by_locked_cells(make_engine):
    engine = make_engine(TetrominoType.T)
    engine.board.grid[2, 4] = 1
    before = engine.current_piece
    assert not engine.rotate().moved
    assert engine.current_piece is before


def test_blocked_spawn_is_game_over_without_touching_board(make_engine):
    engine = make_engine(TetrominoType.O, config=GameConfig(auto_restart=False))
    engine.board.grid[0, :] = 3
    before = engine.board.clone_state()

    assert engine.spawn() is False

    assert engine.state is EngineState.GAME_OVER
    assert engine.game_over
    assert engine.current_piece is None
    np.testing.assert_array_equal(engine.board.grid, before)


def test_stack_to_top_without_restart(make_engine):
    engine = make_engine(TetrominoType.O, config=GameConfig(auto_restart=False))
    results = [engine.hard_drop() for _ in range(10)]

    assert all(r.game_over is None for r in results[:9])
    report = results[9].game_over
    assert report is not None
    assert report.score == 0
    assert not report.is_new_high_score
    assert engine.game_over

    frozen = engine.board.clone_state()
    for action in Action:
        assert engine.step(action).moved is False
    assert not engine.tick().locked
    np.testing.assert_array_equal(engine.board.grid, frozen)

    engine.reset()
    assert engine.state is EngineState.FALLING
    assert not engine.board.grid.any()


def test_game_over_restarts_automatically(make_engine):
    engine = make_engine(TetrominoType.O)
    for _ in range(9):
        assert engine.hard_drop().game_over is None
    result = engine.hard_drop()

    assert result.game_over is not None
    assert engine.state is EngineState.FALLING
    assert not engine.board.grid.any()
    assert engine.current_piece is not None
    assert (engine.score, engine.level, engine.lines_cleared) == (0, 1, 0)
    assert engine.interval_ms == 500


def test_line_clear_scores_and_new_high_score_saved(make_engine, tmp_path):
    store = HighScoreStore(tmp_path / "highscore.txt")
    engine = make_engine(TetrominoType.O, store=store)
    prefill_two_rows_around_center(engine)

    result = engine.hard_drop()
    assert result.lines_cleared == 2
    assert result.points == 300
    assert engine.score == 300
    assert not engine.board.grid.any()

    report = None
    while report is None:
        report = engine.hard_drop().game_over
    assert report.score == 300
    assert report.lines_cleared == 2
    assert report.is_new_high_score
    assert report.high_score == 300
    assert engine.high_score == 300
    assert store.load() == 300
    assert engine.score == 0


def test_existing_high_score_kept(make_engine, tmp_path):
    path = tmp_path / "highscore.txt"
    path.write_text("500")
    engine = make_engine(TetrominoType.O, store=HighScoreStore(path))
    assert engine.high_score == 500
    prefill_two_rows_around_center(engine)
    engine.hard_drop()

    report = None
    while report is None:
        report = engine.hard_drop().game_over
    assert report.score == 300
    assert not report.is_new_high_score
    assert report.high_score == 500
    assert path.read_text() == "500"


def test_level_up_enters_announce_until_resume(make_engine):
    rules = ScoringRules(lines_per_level=2)
    engine = make_engine(TetrominoType.O, rules=rules)
    prefill_two_rows_around_center(engine)

    result = engine.hard_drop()

    assert result.level_up == 2
    assert engine.state is EngineState.LEVEL_ANNOUNCE
    assert engine.interval_ms == 460
    y, x = engine.current_y, engine.current_x
    for action in (Action.LEFT, Action.RIGHT, Action.ROTATE, Action.SOFT_DROP, Action.HARD_DROP):
        assert not engine.is_feasible(action)
        assert not engine.step(action).moved
    assert not engine.tick().moved
    assert (engine.current_x, engine.current_y) == (x, y)

    assert engine.resume() is True
    assert engine.state is EngineState.FALLING
    assert engine.resume() is False
    assert engine.tick().moved
    assert engine.current_y == y + 1


def test_step_dispatches_actions(make_engine):
    engine = make_engine(TetrominoType.O)
    engine.step(Action.LEFT)
    assert engine.current_x == 3
    engine.step(Action.RIGHT)
    engine.step(Action.RIGHT)
    assert engine.current_x == 5
    engine.step(Action.SOFT_DROP)
    assert engine.current_y == 1
    assert engine.step(Action.NONE).moved is False
    assert engine.step(Action.HARD_DROP).locked


def test_get_state_overlays_falling_piece(make_engine):
    engine = make_engine(TetrominoType.O)
    engine.board.grid[19, 0] = 6
    state = engine.get_state()
    assert state[0, 4] == state[1, 5] == -2
    assert state[19, 0] == 6
    assert not engine.board.grid[0:2].any()


def test_snapshot(make_engine):
    engine = make_engine(TetrominoType.L)
    snap = engine.snapshot()
    assert snap.piece.kind is TetrominoType.L
    assert (snap.x, snap.y) == (engine.current_x, engine.current_y)
    assert (snap.score, snap.level, snap.high_score) == (0, 1, 0)
    assert snap.state is EngineState.FALLING
    assert snap.interval_ms == 500
    snap.board[0, 0] = 1
    assert engine.board.grid[0, 0] == 0


def test_seeded_engines_spawn_same_sequence():
    kinds = []
    for _ in range(2):
        engine = GameEngine(GameConfig(random_seed=123))
        seq = []
        for _ in range(6):
            seq.append(engine.current_piece.kind)
            engine.hard_drop()
        kinds.append(seq)
    assert kinds[0] == kinds[1]


def test_board_too_small_rejected():
    with pytest.raises(ValueError):
        GameEngine(GameConfig(width=3))


@pytest.mark.parametrize("auto_restart", [True, False])
def test_game_over_wins_over_level_up_on_same_lock(make_engine, auto_restart):
    engine = make_engine(
        TetrominoType.O,
        config=GameConfig(auto_restart=auto_restart),
        rules=ScoringRules(lines_per_level=1),
    )
    # Bottom row full except the two left columns, and a tower in column 5
    # that still covers the spawn area once the cleared row shifts it down
    engine.board.grid[19, 2:] = 1
    engine.board.grid[0:19, 5] = 4
    engine.current_x = 0

    result = engine.hard_drop()

    assert result.locked
    assert result.lines_cleared == 1
    assert result.game_over is not None
    assert result.game_over.level == 2
    assert result.level_up is None
    assert engine.state is not EngineState.LEVEL_ANNOUNCE
    if auto_restart:
        assert engine.state is EngineState.FALLING
        assert engine.interval_ms == 500
        assert engine.level == 1
    else:
        assert engine.state is EngineState.GAME_OVER


def test_lock_without_active_piece_is_noop(make_engine):
    engine = make_engine(TetrominoType.O, config=GameConfig(auto_restart=False))
    engine.board.grid[0, :] = 3
    engine.spawn()
    before = engine.board.clone_state()

    result = engine._lock_piece()

    assert not result.locked
    np.testing.assert_array_equal(engine.board.grid, before)
