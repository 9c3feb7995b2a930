from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int, int] = (0, 100, 300, 500, 800)
    lines_per_level: int = 10
    base_interval_ms: int = 500
    interval_step_ms: int = 40
    min_interval_ms: int = 50

    def score_for_lines(self, lines: int, level: int = 1) -> int:
        if lines <= 0:
            return 0
        return self.line_clear_scores[min(lines, len(self.line_clear_scores) - 1)] * level

    def level_for_lines(self, lines: int) -> int:
        return 1 + lines // self.lines_per_level

    def interval_for_level(self, level: int) -> int:
        return max(self.base_interval_ms - (level - 1) * self.interval_step_ms, self.min_interval_ms)


@dataclass
class ScoreUpdate:
    points: int
    leveled_up: bool
    level: int


class ScoreKeeper:
    """Score, cleared-line count, level and gravity interval for one game."""

    def __init__(self, rules: ScoringRules | None = None) -> None:
        self.rules = rules or ScoringRules()
        self.score = 0
        self.lines_cleared = 0
        self.level = 1
        self.interval_ms = self.rules.base_interval_ms

    def reset(self) -> None:
        self.score = 0
        self.lines_cleared = 0
        self.level = 1
        self.interval_ms = self.rules.base_interval_ms

    def register_clear(self, lines: int) -> ScoreUpdate:
        points = self.rules.score_for_lines(lines, self.level)
        self.score += points
        self.lines_cleared += max(0, lines)
        new_level = self.rules.level_for_lines(self.lines_cleared)
        leveled_up = new_level > self.level
        if leveled_up:
            self.level = new_level
            self.interval_ms = self.rules.interval_for_level(new_level)
        return ScoreUpdate(points=points, leveled_up=leveled_up, level=self.level)
