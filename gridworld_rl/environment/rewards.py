"""
Reward model.

Rewards are attributed to the destination of a transition, never to its
origin. Terminal rewards are returned unscaled; discounting is applied by
the engines only to continuation values.
"""

from __future__ import annotations

import math

from ..core.exceptions import ConfigurationError
from ..core.types import Position
from .grid import Gridworld


class RewardModel:
    """Reward and terminal classification over a ``Gridworld``."""

    def __init__(self, grid: Gridworld, step_reward: float = 0.0) -> None:
        if not math.isfinite(step_reward):
            raise ConfigurationError(f"step_reward must be finite, got {step_reward}")
        self.grid = grid
        self.step_reward = float(step_reward)

    def reward(self, destination: Position) -> float:
        """Reward for entering ``destination``."""
        return self.grid.reward_at(destination, self.step_reward)

    def is_terminal(self, pos: Position) -> bool:
        return self.grid.is_terminal(pos)
