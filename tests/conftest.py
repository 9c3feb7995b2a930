from __future__ import annotations

import random
from typing import Optional

import pytest

from blockfall.game import GameConfig, GameEngine, HighScoreStore, ScoringRules


class FixedRandom(random.Random):
    """Always spawns the same piece variant."""

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(0)

    def randrange(self, *args, **kwargs) -> int:
        return self.index


@pytest.fixture
def make_engine():
    def _make(index: int = 1, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None,
              store: Optional[HighScoreStore] = None) -> GameEngine:
        return GameEngine(config, rules, rng=FixedRandom(index), high_score_store=store)

    return _make


@pytest.fixture
def fixed_rng():
    return FixedRandom
