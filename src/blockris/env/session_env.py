from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from blockris.game import PIECE_TYPES, ROTATE_SLOT, BlockrisGame, GameConfig, SessionEvent


def _compute_action_mask(game: BlockrisGame) -> np.ndarray:
    rows, cols = game.config.rows, game.config.cols
    slots = len(game.state.pieces) + 1
    mask = np.zeros((slots, rows, cols, 2), dtype=np.bool_)
    for slot, row, col, hold in game.get_valid_actions():
        mask[slot, row, col, hold] = True
    return mask


class BlockrisEnv(gym.Env):
    """Headless blockris session.

    Action: (source, row, col, hold). Sources 0-2 are the bar slots and 3 the
    rotate slot. With ``hold=1`` the bar piece is first moved into the empty
    rotate slot, which turns it 90 degrees, and placed from there.

    Reward is the score gained by the move, bonuses included. Invalid moves
    leave the game untouched and cost ``invalid_action_penalty``.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 invalid_action_penalty: float = -1.0,
                 terminal_penalty: float = 0.0) -> None:
        super().__init__()
        self.game = BlockrisGame(config)
        self.render_mode = render_mode
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)

        rows, cols = self.game.config.rows, self.game.config.cols
        slots = len(self.game.state.pieces) + 1

        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(rows, cols), dtype=np.int8),
                "pieces": spaces.Box(low=-1, high=len(PIECE_TYPES) - 1, shape=(slots,), dtype=np.int8),
                "combo": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(1,), dtype=np.int32),
            }
        )
        self.action_space = spaces.MultiDiscrete((slots, rows, cols, 2))

        self._last_obs: Optional[Dict[str, Any]] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        state = self.game.state
        return {
            "grid": state.grid.astype(np.int8),
            "pieces": np.array(self.game.piece_codes(), dtype=np.int8),
            "combo": np.array([state.combo], dtype=np.int32),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.game),
            "valid_actions": self.game.get_valid_actions(),
            "score": self.game.score,
            "completed_rounds": self.game.state.completed_rounds,
            "unique_solutions": self.game.unique_solutions,
            "steps": self.game.step_count,
        }

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.game)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.game.reset(seed)
        self._steps = 0
        obs = self._get_obs()
        self._last_obs = obs
        info = self._get_info()
        info["no_valid_move"] = not info["valid_actions"]
        return obs, info

    def step(self, action: np.ndarray | Tuple[int, int, int, int]):
        slot, row, col, hold = map(int, action)
        if self.game.game_over or not self.game.get_valid_actions():
            info = self._get_info()
            info["no_valid_move"] = not info["valid_actions"]
            info.update(events=[], unique_solution=False, engine_score_delta=0.0)
            return self._get_obs(), 0.0, True, False, info

        source = ROTATE_SLOT if slot == len(self.game.state.pieces) else slot
        step = self.game.play(source, row, col, hold=bool(hold))

        obs = self._get_obs()
        info = self._get_info()
        # the session only ends on game over, but a piece that fits solely at
        # 180 or 270 degrees leaves no legal action
        no_valid = not info["valid_actions"]
        info["no_valid_move"] = no_valid

        reward = float(step.points) if step.accepted else self.invalid_action_penalty
        terminated = bool(self.game.game_over) or no_valid
        if terminated:
            reward += self.terminal_penalty
        self._steps += 1
        truncated = self._steps >= self.game.config.max_episode_steps

        info["events"] = [event.value for event in step.events]
        info["unique_solution"] = SessionEvent.UNIQUE_SOLUTION in step.events
        info["engine_score_delta"] = float(step.points)
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            grid = self._last_obs["grid"] if self._last_obs is not None else self.game.state.grid
            cell = 12
            h, w = grid.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    color = (102, 126, 234) if grid[y, x] else (30, 30, 36)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        return None

    def close(self) -> None:
        pass
