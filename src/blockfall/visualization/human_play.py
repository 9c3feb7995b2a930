from __future__ import annotations

import argparse
import logging
from typing import Dict, List, Optional

import pygame

from blockfall.game import Action, EngineState, GameConfig, GameEngine, HighScoreStore, StepResult
from .renderer import Renderer

logger = logging.getLogger(__name__)


KEY_TO_ACTION: Dict[int, Action] = {
    pygame.K_LEFT: Action.LEFT,
    pygame.K_RIGHT: Action.RIGHT,
    pygame.K_UP: Action.ROTATE,
    pygame.K_DOWN: Action.SOFT_DROP,
    pygame.K_SPACE: Action.HARD_DROP,
}

LEVEL_BANNER_MS = 1500
GAME_OVER_BANNER_MS = 2500


def game_over_lines(result: StepResult) -> List[str]:
    report = result.game_over
    if report is None:
        return []
    if report.is_new_high_score:
        return ["Game Over!", f"NEW HIGH SCORE: {report.score}", f"Level: {report.level}"]
    return [
        "Game Over!",
        f"Score: {report.score}",
        f"Level: {report.level}",
        f"High Score: {report.high_score}",
    ]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Blockfall with the keyboard")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--highscore-file", type=str, default="highscore.txt")
    p.add_argument("--cell-size", type=int, default=28)
    p.add_argument("--log-level", type=str, default="INFO")
    return p


def run(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    pygame.init()
    try:
        clock = pygame.time.Clock()
        engine = GameEngine(
            GameConfig(random_seed=args.seed),
            high_score_store=HighScoreStore(args.highscore_file),
        )
        renderer = Renderer(cell_size=args.cell_size)
        screen = pygame.display.set_mode(renderer.window_size(engine.board.height, engine.board.width))
        pygame.display.set_caption("Blockfall")

        last_fall = pygame.time.get_ticks()
        banner: Optional[List[str]] = None
        banner_until = 0

        def handle(result: StepResult) -> None:
            nonlocal banner, banner_until
            now = pygame.time.get_ticks()
            if result.game_over is not None:
                banner = game_over_lines(result)
                banner_until = now + GAME_OVER_BANNER_MS
            elif result.level_up is not None:
                banner = [f"Level {result.level_up}!"]
                banner_until = now + LEVEL_BANNER_MS

        running = True
        while running:
            now = pygame.time.get_ticks()
            paused = banner is not None

            # Input handling
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif not paused:
                        action = KEY_TO_ACTION.get(event.key)
                        if action is not None:
                            handle(engine.step(action))

            # Announcement finished: let the engine fall again
            if banner is not None and now >= banner_until:
                banner = None
                if engine.state is EngineState.LEVEL_ANNOUNCE:
                    engine.resume()
                last_fall = now

            # Gravity at whatever interval the engine currently asks for
            if banner is None and now - last_fall >= engine.interval_ms:
                handle(engine.tick())
                last_fall = now

            renderer.draw(screen, engine.snapshot(), banner)
            clock.tick(60)
    finally:
        pygame.quit()


if __name__ == "__main__":  # pragma: no cover
    run()
