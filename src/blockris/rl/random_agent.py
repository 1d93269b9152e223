from __future__ import annotations

import argparse
import logging
import random
from typing import Dict, List, Optional

import gymnasium as gym

import blockris.env  # noqa: F401  ensure registration
from blockris.game import GameConfig

logger = logging.getLogger("blockris.random_agent")


def run_episode(env: gym.Env, rng: random.Random, seed: Optional[int] = None) -> Dict[str, float]:
    """Play one episode picking uniformly among valid moves."""
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    steps = 0
    terminated = truncated = False
    while not (terminated or truncated):
        valid = info.get("valid_actions", [])
        if not valid:
            # pieces that only fit at 180/270 degrees keep the game alive but are unplayable
            logger.debug("No playable move at step %d, ending episode", steps)
            break
        action = rng.choice(valid)
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        steps += 1
        if info.get("unique_solution"):
            logger.debug("Unique-solution round dealt at step %d", steps)
    return {
        "score": float(info["score"]),
        "reward": total_reward,
        "steps": float(steps),
        "rounds": float(info["completed_rounds"]),
        "unique_solutions": float(info["unique_solutions"]),
    }


def run_random(episodes: int = 5, seed: Optional[int] = None, max_steps: int = 10000) -> List[Dict[str, float]]:
    config = GameConfig(max_episode_steps=max_steps, random_seed=seed)
    env = gym.make("Blockris-8x8-v0", config=config)
    rng = random.Random(seed)
    results: List[Dict[str, float]] = []
    try:
        for episode in range(episodes):
            episode_seed = None if seed is None else seed + episode
            stats = run_episode(env, rng, episode_seed)
            logger.info(
                "Episode %d: score=%d steps=%d rounds=%d unique=%d",
                episode,
                stats["score"],
                stats["steps"],
                stats["rounds"],
                stats["unique_solutions"],
            )
            results.append(stats)
    finally:
        env.close()
    if results:
        mean_score = sum(r["score"] for r in results) / len(results)
        logger.info("Random agent mean score over %d episodes: %.1f", len(results), mean_score)
    return results


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play blockris with a uniformly random agent")
    p.add_argument("--episodes", type=int, default=5)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--max-steps", type=int, default=10000)
    p.add_argument("--verbose", action="store_true", help="log generator and session details")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(message)s",
    )
    run_random(episodes=args.episodes, seed=args.seed, max_steps=args.max_steps)


if __name__ == "__main__":  # pragma: no cover
    main()
