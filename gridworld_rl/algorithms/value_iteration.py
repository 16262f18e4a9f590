"""
Value Iteration over a Gridworld

Core Idea:
    Iterate the Bellman optimality backup over every non-terminal, non-wall
    cell until the state-value table stops changing. The model is known
    exactly (``TransitionModel`` + ``RewardModel``), so no sampling is
    involved.

Mathematical Theory:
    **Q-value under move noise**:

    .. math::
        Q(s, a) = \\sum_{s'} P(s'|s,a) \\left[ R(s') + \\gamma V(s') \\right]

    where the continuation term :math:`\\gamma V(s')` is dropped for terminal
    :math:`s'`, which makes pits and goals absorbing.

    **Synchronous sweep**:

    .. math::
        V_{k+1}(s) = \\max_{a \\in \\mathcal{A}(s)} Q_k(s, a)

    with :math:`\\mathcal{A}(s)` the actions whose destination is allowed.
    Walls and boundaries are excluded from the max, never scored as zero.

    **Convergence**: the sweep tracks

    .. math::
        \\Delta_k = \\sum_s |V_{k+1}(s) - V_k(s)|

    and stops once :math:`\\Delta_k` falls below the tolerance. For
    :math:`\\gamma < 1` the backup is a γ-contraction, so this happens in
    :math:`O(\\log(1/\\theta) / (1-\\gamma))` sweeps.

Comparison:
    - Value iteration: cheap sweeps, no explicit policy until convergence
    - Deep Q-learning: no model needed, approximate values from samples

Complexity:
    - Per sweep: O(W × H × |A| × 3) with at most three outcomes per action
    - Space: O(W × H) for the value table

Summary:
    The converged table is read-only afterwards and can back a greedy policy
    directly or through ``ValueTableQSource``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from ..core.config import ValueIterationConfig
from ..core.enums import Action
from ..core.exceptions import ConfigurationError, DivergenceError
from ..core.types import FloatArray, Position
from ..environment.grid import Gridworld
from ..environment.rewards import RewardModel
from ..environment.transitions import TransitionModel

logger = logging.getLogger(__name__)


@dataclass
class ValueIterationResult:
    """
    Outcome of a converged run.

    Attributes:
        state_value_table: Converged ``height × width`` value table
        sweeps: Number of sweeps performed
        running_delta: Σ|ΔV| of the final sweep
    """
    state_value_table: FloatArray
    sweeps: int
    running_delta: float


class ValueIterationEngine:
    """
    Exact Bellman backups over the whole grid.

    Attributes:
        grid: Gridworld being solved
        transitions: Move-noise dynamics
        rewards: Destination rewards
        discount_rate: Discount factor γ ∈ [0, 1]
        state_value_table: Current ``height × width`` value estimates

    Example:
        >>> grid = Gridworld.generate(GridLayout.EXEMPLARY)
        >>> engine = ValueIterationEngine(
        ...     grid,
        ...     TransitionModel(grid, 0.0, np.random.default_rng(0)),
        ...     RewardModel(grid, step_reward=0.0),
        ...     discount_rate=0.9,
        ... )
        >>> result = engine.run()
        >>> engine.greedy_action(Position(0, 3))
        <Action.NORTH: 0>
    """

    def __init__(
        self,
        grid: Gridworld,
        transitions: TransitionModel,
        rewards: RewardModel,
        discount_rate: float,
        config: Optional[ValueIterationConfig] = None,
    ):
        """
        Args:
            grid: Gridworld to solve
            transitions: Dynamics bound to the same grid
            rewards: Reward model bound to the same grid
            discount_rate: γ ∈ [0, 1]
            config: Stopping criteria. Uses defaults if None.

        Raises:
            ConfigurationError: If γ is not a finite value in [0, 1].
        """
        if not math.isfinite(discount_rate) or not 0.0 <= discount_rate <= 1.0:
            raise ConfigurationError(
                f"discount_rate must be in [0, 1], got {discount_rate}"
            )

        self.grid = grid
        self.transitions = transitions
        self.rewards = rewards
        self.discount_rate = float(discount_rate)
        self.config = config or ValueIterationConfig()
        self.state_value_table = np.zeros((grid.height, grid.width), dtype=np.float64)

    # =========================================================================
    # Bellman backups
    # =========================================================================

    def value(self, pos: Position, values: Optional[FloatArray] = None) -> float:
        table = self.state_value_table if values is None else values
        return float(table[pos.y, pos.x])

    def compute_q_value(
        self,
        pos: Position,
        action: Action,
        values: Optional[FloatArray] = None,
    ) -> float:
        """
        Expected reward plus discounted successor value of ``action`` at ``pos``.

        Terminal successors contribute only their reward.
        """
        q_value = 0.0
        for next_pos, prob in self.transitions.outcomes(pos, action):
            reward = self.rewards.reward(next_pos)
            if self.rewards.is_terminal(next_pos):
                q_value += prob * reward
            else:
                q_value += prob * (
                    reward + self.discount_rate * self.value(next_pos, values)
                )
        return q_value

    def compute_best_value(
        self,
        pos: Position,
        values: Optional[FloatArray] = None,
    ) -> float:
        """Max Q-value over allowed actions; ``-inf`` if none is allowed."""
        best = -math.inf
        for action in self.grid.allowed_actions(pos):
            best = max(best, self.compute_q_value(pos, action, values))
        return best

    def _updatable(self, pos: Position) -> bool:
        return self.grid.is_allowed(pos) and not self.grid.is_terminal(pos)

    def sweep(self) -> float:
        """
        One synchronous sweep over all non-terminal, non-wall cells.

        Returns:
            running_delta = Σ |V_new - V_old|
        """
        old_values = self.state_value_table.copy()
        new_values = old_values.copy()
        running_delta = 0.0

        for pos in self.grid.positions():
            if not self._updatable(pos):
                continue
            best = self.compute_best_value(pos, old_values)
            if not math.isfinite(best):
                continue
            new_values[pos.y, pos.x] = best
            running_delta += abs(best - old_values[pos.y, pos.x])

        self.state_value_table = new_values
        return running_delta

    def run(self) -> ValueIterationResult:
        """
        Sweep until ``running_delta < tolerance``.

        Raises:
            DivergenceError: If the sweep cap is reached first. The table is
                reset to zeros; partial results are discarded.
        """
        tolerance = self.config.tolerance
        running_delta = math.inf

        for sweep in range(1, self.config.max_sweeps + 1):
            running_delta = self.sweep()
            logger.debug(f"Sweep {sweep}: running_delta = {running_delta:.6g}")

            if running_delta < tolerance:
                logger.info(
                    f"Value iteration converged in {sweep} sweeps "
                    f"(running_delta = {running_delta:.3g})"
                )
                return ValueIterationResult(
                    state_value_table=self.state_value_table.copy(),
                    sweeps=sweep,
                    running_delta=running_delta,
                )

        self.state_value_table = np.zeros_like(self.state_value_table)
        raise DivergenceError(self.config.max_sweeps, running_delta, tolerance)

    # =========================================================================
    # Policy extraction
    # =========================================================================

    def q_values(self, pos: Position) -> FloatArray:
        """Q-values of the four directions at ``pos`` (blocked ones included)."""
        return np.array(
            [self.compute_q_value(pos, a) for a in Action.directions()],
            dtype=np.float64,
        )

    def greedy_action(self, pos: Position) -> Optional[Action]:
        """
        Argmax over allowed actions, ties broken North, East, South, West.

        Returns None for walls, terminal cells and fully enclosed cells.
        """
        if not self._updatable(pos):
            return None
        best_action = None
        best_value = -math.inf
        for action in self.grid.allowed_actions(pos):
            q_value = self.compute_q_value(pos, action)
            if q_value > best_value:
                best_value = q_value
                best_action = action
        return best_action

    def extract_policy(self) -> Dict[Position, Action]:
        """Greedy action for every cell that has one."""
        policy = {}
        for pos in self.grid.positions():
            action = self.greedy_action(pos)
            if action is not None:
                policy[pos] = action
        return policy

    def greedy_path(
        self,
        start: Optional[Position] = None,
        max_steps: Optional[int] = None,
    ) -> List[Position]:
        """
        Follow the greedy policy along the most probable outcome.

        Stops at a terminal cell, on revisiting a cell, or after
        ``max_steps`` (default: number of cells).
        """
        pos = self.grid.start if start is None else start
        path = [pos]
        visited = {pos}
        limit = self.grid.width * self.grid.height if max_steps is None else max_steps

        for _ in range(limit):
            action = self.greedy_action(pos)
            if action is None:
                break
            pos = max(self.transitions.outcomes(pos, action), key=lambda o: o[1])[0]
            if pos in visited:
                break
            visited.add(pos)
            path.append(pos)

        return path
