"""Game module for Blockfall.

Exports the core falling-block engine and supporting classes:
- Board: Grid of locked cells and line clearing
- Piece: Colored piece mask with clockwise rotation
- TetrominoType: Enum of the seven piece variants
- ScoringRules / ScoreKeeper: Score table, level pacing and gravity curve
- HighScoreStore: Best-effort high score file
- GameEngine: Spawn, gravity, movement, locking, level announce and game over
"""

from .grid import Board, format_grid, print_grid
from .pieces import BASE_SHAPES, PIECE_COLORS, Piece, TetrominoType, color_for_value
from .rules import ScoreKeeper, ScoreUpdate, ScoringRules
from .persistence import HighScoreStore
from .core import (
    Action,
    EngineState,
    GameConfig,
    GameEngine,
    GameOverReport,
    GameSnapshot,
    StepResult,
)

__all__ = [
    "Board",
    "format_grid",
    "print_grid",
    "BASE_SHAPES",
    "PIECE_COLORS",
    "Piece",
    "TetrominoType",
    "color_for_value",
    "ScoreKeeper",
    "ScoreUpdate",
    "ScoringRules",
    "HighScoreStore",
    "Action",
    "EngineState",
    "GameConfig",
    "GameEngine",
    "GameOverReport",
    "GameSnapshot",
    "StepResult",
]
