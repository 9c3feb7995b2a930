from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from blockfall.game import Action, EngineState, GameConfig, GameEngine, ScoringRules, color_for_value


def compute_action_mask(engine: GameEngine) -> np.ndarray:
    return np.array([engine.is_feasible(a) for a in Action], dtype=np.bool_)


class BlockfallEnv(gym.Env):
    """Falling-block game as a gymnasium environment.

    Each step applies one command and then one gravity tick, unless the command
    already locked the piece. The episode terminates on game over.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None,
                 render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 max_episode_steps: int = 10000,
                 terminal_penalty: float = 0.0) -> None:
        super().__init__()
        # The episode ends on game over instead of restarting in place
        config = replace(config or GameConfig(), auto_restart=False)
        self.game = GameEngine(config, rules)
        self.render_mode = render_mode
        self.max_episode_steps = int(max_episode_steps)
        self.terminal_penalty = float(terminal_penalty)
        self.reward_weights: Dict[str, float] = {
            # Positive components
            "points": 0.01,          # engine score gained
            "lines": 1.0,            # reward per line cleared
            # Negative components (penalize increases)
            "holes": 0.1,
            "bumpiness": 0.01,
            "height": 0.02,
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        h, w = self.game.board.height, self.game.board.width
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=-7, high=7, shape=(h, w), dtype=np.int8),
                "level": spaces.Discrete(100),
            }
        )
        self.action_space = spaces.Discrete(len(Action))

        self._last_obs: Optional[Dict[str, Any]] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        return {
            "grid": self.game.get_state().astype(np.int8),
            "level": min(self.game.level, 99),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": compute_action_mask(self.game),
            "score": self.game.score,
            "lines_cleared": self.game.lines_cleared,
            "level": self.game.level,
            "steps": self._steps,
        }

    def get_action_mask(self) -> np.ndarray:
        return compute_action_mask(self.game)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.rng.seed(seed)
        self.game.reset()
        self._steps = 0
        obs = self._get_obs()
        self._last_obs = obs
        return obs, self._get_info()

    def _board_features(self) -> Dict[str, int]:
        board = self.game.board
        return {
            "holes": board.count_holes(),
            "bumpiness": board.bumpiness(),
            "height": board.get_max_height(),
        }

    def step(self, action: int):
        before = self._board_features()

        result = self.game.step(Action(int(action)))
        if not result.locked:
            result = self.game.tick()
        points, lines = result.points, result.lines_cleared
        # Agents do not watch announcements
        if self.game.state is EngineState.LEVEL_ANNOUNCE:
            self.game.resume()

        after = self._board_features()
        reward_components: Dict[str, float] = {
            "points": self.reward_weights["points"] * float(points),
            "lines": self.reward_weights["lines"] * float(lines),
        }
        for key in ("holes", "bumpiness", "height"):
            reward_components[key] = -self.reward_weights[key] * float(max(0, after[key] - before[key]))

        terminated = bool(self.game.game_over)
        if terminated:
            reward_components["terminal"] = self.terminal_penalty
        self._steps += 1
        truncated = self._steps >= self.max_episode_steps

        reward = float(sum(reward_components.values()))
        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        info["engine_score_delta"] = points
        if result.game_over is not None:
            info["game_over"] = result.game_over
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            grid = self._last_obs["grid"] if self._last_obs is not None else self.game.get_state()
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color_for_value(int(grid[y, x]))
            return img
        return None

    def close(self) -> None:
        pass
