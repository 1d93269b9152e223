"""Gymnasium environments for Blockris."""

from __future__ import annotations

from gymnasium.envs.registration import register

from .session_env import BlockrisEnv
from .wrappers import FlattenDiscreteActionWrapper, ResampleInvalidActionWrapper

register(
    id="Blockris-8x8-v0",
    entry_point="blockris.env.session_env:BlockrisEnv",
)

__all__ = [
    "BlockrisEnv",
    "FlattenDiscreteActionWrapper",
    "ResampleInvalidActionWrapper",
]
