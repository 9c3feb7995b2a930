from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

import numpy as np

from .grid import Board, print_grid
from .persistence import HighScoreStore
from .pieces import BASE_SHAPES, Piece
from .rules import ScoreKeeper, ScoringRules

logger = logging.getLogger(__name__)


class Action(IntEnum):
    LEFT = 0
    RIGHT = 1
    ROTATE = 2
    SOFT_DROP = 3
    HARD_DROP = 4
    NONE = 5


class EngineState(Enum):
    SPAWNING = "spawning"
    FALLING = "falling"
    LOCKING = "locking"
    LINE_CLEARING = "line_clearing"
    LEVEL_ANNOUNCE = "level_announce"
    GAME_OVER = "game_over"


@dataclass
class GameConfig:
    width: int = 10
    height: int = 20
    random_seed: Optional[int] = None
    spawn_y: int = 0
    auto_restart: bool = True


@dataclass
class GameOverReport:
    score: int
    level: int
    lines_cleared: int
    high_score: int
    is_new_high_score: bool


@dataclass
class StepResult:
    """What a single engine call did, for the caller to render or announce."""

    moved: bool = False
    locked: bool = False
    lines_cleared: int = 0
    points: int = 0
    level_up: Optional[int] = None
    game_over: Optional[GameOverReport] = None


@dataclass
class GameSnapshot:
    board: np.ndarray
    piece: Optional[Piece]
    x: int
    y: int
    score: int
    level: int
    lines_cleared: int
    high_score: int
    state: EngineState
    interval_ms: int


class GameEngine:
    """Falling-block game state machine.

    Every public call completes synchronously. A lock that raises the level leaves the
    engine in ``LEVEL_ANNOUNCE``, where gravity and movement are ignored until the
    caller has shown the notice and calls :meth:`resume`.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        rng: Optional[random.Random] = None,
        high_score_store: Optional[HighScoreStore] = None,
    ) -> None:
        self.config = config or GameConfig()
        longest = max(max(s.shape) for s in BASE_SHAPES)
        if self.config.width < longest or self.config.height < longest:
            raise ValueError(
                f"board {self.config.width}x{self.config.height} is too small for a {longest}-cell piece"
            )
        self.rng = rng if rng is not None else random.Random(self.config.random_seed)
        self.board = Board(self.config.width, self.config.height)
        self.scores = ScoreKeeper(rules)
        self.store = high_score_store
        self.high_score = self.store.load() if self.store is not None else 0
        self.state = EngineState.SPAWNING
        self.current_piece: Optional[Piece] = None
        self.current_x = 0
        self.current_y = 0
        self.reset()

    @property
    def score(self) -> int:
        return self.scores.score

    @property
    def level(self) -> int:
        return self.scores.level

    @property
    def lines_cleared(self) -> int:
        return self.scores.lines_cleared

    @property
    def interval_ms(self) -> int:
        return self.scores.interval_ms

    @property
    def game_over(self) -> bool:
        return self.state is EngineState.GAME_OVER

    def reset(self) -> None:
        self.board.reset()
        self.scores.reset()
        self.spawn()

    def _random_index(self) -> int:
        return self.rng.randrange(len(BASE_SHAPES))

    def spawn(self, index: Optional[int] = None) -> bool:
        """Put a new piece at the top center; False (and GAME_OVER) if it does not fit."""
        self.state = EngineState.SPAWNING
        if index is None:
            index = self._random_index()
        piece = Piece.from_type(index)
        x = self.board.width // 2 - piece.width // 2
        y = self.config.spawn_y
        if not self.can_move(piece, x, y):
            self.current_piece = None
            self.state = EngineState.GAME_OVER
            return False
        self.current_piece = piece
        self.current_x = x
        self.current_y = y
        self.state = EngineState.FALLING
        return True

    def can_move(self, piece: Optional[Piece], x: int, y: int) -> bool:
        if piece is None:
            return False
        return self.board.can_place(piece.cells_at(x, y))

    def _accepts_input(self) -> bool:
        return self.state is EngineState.FALLING and self.current_piece is not None

    def _shift(self, dx: int) -> StepResult:
        if not self._accepts_input():
            return StepResult()
        new_x = self.current_x + dx
        if not self.can_move(self.current_piece, new_x, self.current_y):
            return StepResult()
        self.current_x = new_x
        return StepResult(moved=True)

    def move_left(self) -> StepResult:
        return self._shift(-1)

    def move_right(self) -> StepResult:
        return self._shift(1)

    def rotate(self) -> StepResult:
        if not self._accepts_input():
            return StepResult()
        rotated = self.current_piece.rotate()
        if not self.can_move(rotated, self.current_x, self.current_y):
            return StepResult()
        self.current_piece = rotated
        return StepResult(moved=True)

    def move_down(self) -> StepResult:
        """Soft drop: one row down, or lock, clear and spawn when blocked."""
        if not self._accepts_input():
            return StepResult()
        next_y = self.current_y + 1
        if self.can_move(self.current_piece, self.current_x, next_y):
            self.current_y = next_y
            return StepResult(moved=True)
        return self._lock_piece()

    def tick(self) -> StepResult:
        """Gravity. Suspended outside FALLING."""
        return self.move_down()

    def hard_drop(self) -> StepResult:
        if not self._accepts_input():
            return StepResult()
        dropped = False
        while self.can_move(self.current_piece, self.current_x, self.current_y + 1):
            self.current_y += 1
            dropped = True
        result = self.move_down()
        result.moved = dropped
        return result

    def resume(self) -> bool:
        if self.state is not EngineState.LEVEL_ANNOUNCE:
            return False
        self.state = EngineState.FALLING
        return True

    def step(self, action: Action) -> StepResult:
        if action == Action.LEFT:
            return self.move_left()
        if action == Action.RIGHT:
            return self.move_right()
        if action == Action.ROTATE:
            return self.rotate()
        if action == Action.SOFT_DROP:
            return self.move_down()
        if action == Action.HARD_DROP:
            return self.hard_drop()
        return StepResult()

    def is_feasible(self, action: Action) -> bool:
        """Whether ``action`` would currently change the game."""
        if action == Action.NONE:
            return True
        if not self._accepts_input():
            return False
        piece, x, y = self.current_piece, self.current_x, self.current_y
        if action == Action.LEFT:
            return self.can_move(piece, x - 1, y)
        if action == Action.RIGHT:
            return self.can_move(piece, x + 1, y)
        if action == Action.ROTATE:
            return self.can_move(piece.rotate(), x, y)
        # Drops always either move or lock
        return True

    def _lock_piece(self) -> StepResult:
        piece = self.current_piece
        if piece is None:
            return StepResult()
        self.state = EngineState.LOCKING
        self.board.lock(piece, self.current_x, self.current_y)
        self.current_piece = None

        self.state = EngineState.LINE_CLEARING
        lines = self.board.clear_full_lines()
        update = self.scores.register_clear(lines)
        logger.debug(
            "Locked %s at (%d, %d); cleared %d line(s) for %d points",
            piece.kind.name, self.current_x, self.current_y, lines, update.points,
        )
        result = StepResult(locked=True, lines_cleared=lines, points=update.points)
        if update.leveled_up:
            logger.info("Level %d reached, gravity interval %d ms", update.level, self.interval_ms)

        if not self.spawn():
            result.game_over = self._finish_game()
            return result
        if update.leveled_up:
            result.level_up = update.level
            self.state = EngineState.LEVEL_ANNOUNCE
        return result

    def _finish_game(self) -> GameOverReport:
        score = self.scores.score
        is_new = score > self.high_score
        if is_new:
            self.high_score = score
            if self.store is not None:
                self.store.save(score)
        report = GameOverReport(
            score=score,
            level=self.scores.level,
            lines_cleared=self.scores.lines_cleared,
            high_score=self.high_score,
            is_new_high_score=is_new,
        )
        logger.info(
            "Game over: score=%d level=%d lines=%d high=%d%s",
            report.score, report.level, report.lines_cleared, report.high_score,
            " (new high score)" if is_new else "",
        )
        if self.config.auto_restart:
            self.reset()
        return report

    def get_state(self) -> np.ndarray:
        # Overlay current piece on a copy of the grid for observation
        state = self.board.clone_state()
        if self.current_piece is not None and not self.game_over:
            for x, y in self.current_piece.cells_at(self.current_x, self.current_y):
                if self.board.is_inside(y, x):
                    # Use negative to indicate falling piece overlay
                    state[y, x] = -self.current_piece.value
        return state

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            board=self.board.clone_state(),
            piece=self.current_piece,
            x=self.current_x,
            y=self.current_y,
            score=self.score,
            level=self.level,
            lines_cleared=self.lines_cleared,
            high_score=self.high_score,
            state=self.state,
            interval_ms=self.interval_ms,
        )


def run_game_demo(seed: int = 0) -> None:  # pragma: no cover
    engine = GameEngine(GameConfig(random_seed=seed))
    print("=== Blockfall Demo ===")
    drops = 0
    while drops < 12:
        result = engine.hard_drop()
        drops += 1
        if result.lines_cleared:
            print(f"Cleared {result.lines_cleared} line(s), score {engine.score}")
        if result.game_over is not None:
            print(f"Game over with score {result.game_over.score}")
            break
    print_grid(engine.get_state())
    print(f"Score: {engine.score}  Level: {engine.level}  Lines: {engine.lines_cleared}")


if __name__ == "__main__":  # pragma: no cover
    run_game_demo()
