from __future__ import annotations

import gymnasium as gym
import numpy as np

import blockfall.env  # noqa: F401  ensure registration


def run_random(steps: int = 500, seed: int | None = None) -> float:
    env = gym.make("Blockfall-20x10-v0")
    rng = np.random.default_rng(seed)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    for _ in range(steps):
        # Prefer commands that change the game
        valid = np.flatnonzero(info["action_mask"])
        action = int(rng.choice(valid)) if valid.size else env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            obs, info = env.reset()
    env.close()
    print(f"Random agent total reward: {total_reward:.2f}")
    return total_reward


if __name__ == "__main__":  # pragma: no cover
    run_random()
