from __future__ import annotations

import argparse
import logging
import os

import gymnasium as gym

# Ensure envs are registered
import blockfall.env  # noqa: F401
from blockfall.env.wrappers import ResampleInvalidActionWrapper

logger = logging.getLogger(__name__)

ENV_ID = "Blockfall-20x10-v0"


def make_env(seed: int | None = None, resample: bool = True) -> gym.Env:
    env = gym.make(ENV_ID)
    # Resample dead commands for vanilla PPO; also exposes get_action_mask
    if resample:
        env = ResampleInvalidActionWrapper(env)
    if seed is not None:
        env.reset(seed=seed)
    return env


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--algo", choices=["ppo", "maskable"], default="ppo")
    p.add_argument("--timesteps", type=int, default=200_000)
    p.add_argument("--logdir", type=str, default="./logs/ppo")
    p.add_argument("--save_path", type=str, default="./models/ppo_blockfall.zip")
    p.add_argument("--n_envs", type=int, default=4)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--log-level", type=str, default="INFO")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    from stable_baselines3.common.vec_env import SubprocVecEnv, VecMonitor

    if args.algo == "maskable":
        # sb3-contrib MaskablePPO
        from sb3_contrib import MaskablePPO
        from sb3_contrib.common.wrappers import ActionMasker

        def mask_fn(env):
            return env.unwrapped.get_action_mask()

        def make_env_idx(i: int):
            def thunk():
                seed = None if args.seed is None else args.seed + i
                return ActionMasker(make_env(seed, resample=False), mask_fn)
            return thunk

        vec_env = VecMonitor(SubprocVecEnv([make_env_idx(i) for i in range(args.n_envs)]))
        model = MaskablePPO(
            policy="MultiInputPolicy",
            env=vec_env,
            verbose=1,
            tensorboard_log=args.logdir,
        )
    else:
        # Vanilla PPO with resampling wrapper
        from stable_baselines3 import PPO

        def make_env_idx(i: int):
            def thunk():
                seed = None if args.seed is None else args.seed + i
                return make_env(seed)
            return thunk

        vec_env = VecMonitor(SubprocVecEnv([make_env_idx(i) for i in range(args.n_envs)]))
        model = PPO(
            policy="MultiInputPolicy",
            env=vec_env,
            verbose=1,
            tensorboard_log=args.logdir,
        )

    logger.info("Training %s on %s for %d timesteps", args.algo, ENV_ID, args.timesteps)
    save_dir = os.path.dirname(args.save_path)
    if save_dir:
        os.makedirs(save_dir, exist_ok=True)
    model.learn(total_timesteps=args.timesteps)
    model.save(args.save_path)
    logger.info("Saved model to %s", args.save_path)


if __name__ == "__main__":  # pragma: no cover
    main()
