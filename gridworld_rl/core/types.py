"""
Value Types for the Gridworld Domain.

Core Idea (核心思想)
====================
位置使用不可变的frozen dataclass，经验使用NamedTuple，
保证存入回放缓冲区的(s_t, a_t, s_{t+1})三元组不会被后续步骤修改。

Mathematical Definition (数学定义)
==================================
An experience records one step of the agent:

    e_t = (s_t, a_t, s_{t+1})

The reward is not stored: it is attributed to the destination s_{t+1}
and recovered from the grid whenever a TD target is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NamedTuple, Tuple

import numpy as np
from numpy.typing import NDArray

from .enums import Action


FloatArray = NDArray[np.floating[Any]]
"""Float-valued NumPy array for encoded states, Q-values and targets."""


@dataclass(frozen=True, order=True)
class Position:
    """
    Integer grid coordinate ``(x, y)``.

    Adding a displacement never wraps around: bounds are checked by the
    grid, not here.

    Examples
    --------
    >>> Position(1, 2) + (0, -1)
    Position(x=1, y=1)
    >>> Position(0, 3) + Action.EAST
    Position(x=1, y=3)
    """

    x: int
    y: int

    def __add__(self, other: Any) -> "Position":
        if isinstance(other, Action):
            other = other.delta
        if isinstance(other, Position):
            other = (other.x, other.y)
        try:
            dx, dy = other
        except (TypeError, ValueError):
            return NotImplemented
        return Position(self.x + int(dx), self.y + int(dy))

    def __iter__(self):
        yield self.x
        yield self.y

    def __str__(self) -> str:
        return f"({self.x},{self.y})"

    def to_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)


class Experience(NamedTuple):
    """
    Single transition stored in the replay buffer.

    Attributes
    ----------
    state_t : Position
        Agent position before the step
    action : Action
        Action chosen by the policy (before move-noise resolution)
    state_t_prim : Position
        Agent position after the step (equal to ``state_t`` if blocked)
    """

    state_t: Position
    action: Action
    state_t_prim: Position


class ExperienceSample(NamedTuple):
    """
    Experience drawn from the buffer together with an independent copy of
    its target vector.

    Attributes
    ----------
    experience : Experience
        The stored transition
    targets : FloatArray
        Target vector of shape ``(4,)``; entries that were not set when the
        experience was stored are NaN and must be filled before training
    """

    experience: Experience
    targets: FloatArray
