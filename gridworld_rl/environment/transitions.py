"""
Move-Noise Transition Model

Core Idea:
    An intended action may slip. With probability ``1 - p`` the intended
    direction is executed; with total probability ``p`` the move goes to
    one of the two orthogonal directions, each with ``p / 2``. The reverse
    direction is never executed.

Mathematical Theory:
    .. math::
        P(a_{exec} | a) = \\begin{cases}
            1 - p & a_{exec} = a \\\\
            p / 2 & a_{exec} \\perp a \\\\
            0     & \\text{otherwise}
        \\end{cases}

    A destination that is a wall or lies outside the grid turns the move
    into a no-op: the agent stays where it is.

Summary:
    ``outcomes`` yields the full distribution for Bellman expectations;
    ``step`` draws one realized outcome for the learning engine.
"""

from __future__ import annotations

from typing import List, NamedTuple, Tuple

import numpy as np

from ..core.enums import Action
from ..core.exceptions import ConfigurationError
from ..core.types import Position
from .grid import Gridworld


class StepOutcome(NamedTuple):
    """
    Result of executing one action.

    Attributes
    ----------
    executed_action : Action
        Direction actually taken after resolution and move noise
    destination : Position
        Resulting agent position (unchanged if the move was blocked)
    moved : bool
        False if the destination was a wall or outside the grid
    """

    executed_action: Action
    destination: Position
    moved: bool


class TransitionModel:
    """
    Stochastic dynamics shared by value iteration and Deep Q-learning.

    Parameters
    ----------
    grid : Gridworld
        Grid resolving boundaries and walls
    move_noise : float
        Slip probability p ∈ [0, 1]
    rng : np.random.Generator
        Shared random source for ``RANDOM`` resolution and slips

    Examples
    --------
    >>> model = TransitionModel(grid, move_noise=0.0, rng=np.random.default_rng(0))
    >>> model.outcomes(Position(0, 3), Action.NORTH)
    [(Position(x=0, y=2), 1.0)]
    """

    def __init__(
        self,
        grid: Gridworld,
        move_noise: float,
        rng: np.random.Generator,
    ) -> None:
        if not np.isfinite(move_noise) or not 0.0 <= move_noise <= 1.0:
            raise ConfigurationError(f"move_noise must be in [0, 1], got {move_noise}")
        self.grid = grid
        self.move_noise = float(move_noise)
        self.rng = rng

    def resolve_random(self, action: Action) -> Action:
        """Replace ``RANDOM`` by a uniformly drawn direction."""
        if action is Action.RANDOM:
            return Action.directions()[int(self.rng.integers(len(Action.directions())))]
        return action

    def direction_distribution(self, action: Action) -> List[Tuple[Action, float]]:
        """Executed-direction probabilities for a directional ``action``."""
        p = self.move_noise
        left, right = action.orthogonal
        distribution = [(action, 1.0 - p), (left, p / 2.0), (right, p / 2.0)]
        return [(a, prob) for a, prob in distribution if prob > 0.0]

    def sample_direction(self, action: Action) -> Action:
        """Draw the executed direction under move noise."""
        action = self.resolve_random(action)
        u = self.rng.random()
        if u < 1.0 - self.move_noise:
            return action
        left, right = action.orthogonal
        return left if u < 1.0 - self.move_noise / 2.0 else right

    def destination(self, pos: Position, direction: Action) -> Position:
        """One step from ``pos``; blocked moves stay in place."""
        target = pos + direction.delta
        return target if self.grid.is_allowed(target) else pos

    def outcomes(self, pos: Position, action: Action) -> List[Tuple[Position, float]]:
        """
        Distribution over at most three resulting positions.

        Outcomes landing on the same cell (e.g. two blocked directions) are
        merged, so positions are unique and probabilities sum to 1.
        """
        merged: List[Tuple[Position, float]] = []
        for direction, prob in self.direction_distribution(action):
            dest = self.destination(pos, direction)
            for i, (existing, existing_prob) in enumerate(merged):
                if existing == dest:
                    merged[i] = (existing, existing_prob + prob)
                    break
            else:
                merged.append((dest, prob))
        return merged

    def step(self, action: Action) -> StepOutcome:
        """Execute one realized move of the grid's agent."""
        origin = self.grid.agent_position
        direction = self.sample_direction(action)
        target = origin + direction.delta
        if not self.grid.is_allowed(target):
            return StepOutcome(direction, origin, False)
        self.grid.move_player(target)
        return StepOutcome(direction, target, True)
