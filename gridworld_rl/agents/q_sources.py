"""
Q-Value Sources.

``EpisodeController`` asks a ``QSource`` for the four directional Q-values
of a position and, when the source is trainable, hands it mini-batches of
TD targets. Two implementations exist:

- ``ApproximatorQSource``: a trainable function approximator over encoded
  grid states
- ``ValueTableQSource``: one-step lookahead over a converged value table
  (fixed, never trained)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from ..algorithms.value_iteration import ValueIterationEngine
from ..core.enums import EncodingMode
from ..core.types import FloatArray, Position
from ..environment.grid import Gridworld
from ..networks.approximator import QApproximator


class QSource(ABC):
    """Strategy interface: ``estimate(grid, position) -> Q[4]``."""

    @property
    def trainable(self) -> bool:
        return False

    @abstractmethod
    def estimate(self, grid: Gridworld, position: Position) -> FloatArray:
        """Fresh array of four Q-values, indexed by ``Action``."""

    def estimate_batch(
        self, grid: Gridworld, positions: Sequence[Position]
    ) -> FloatArray:
        return np.stack([self.estimate(grid, pos) for pos in positions])

    def fit(
        self,
        grid: Gridworld,
        positions: Sequence[Position],
        targets: FloatArray,
    ) -> float:
        """Train towards ``targets`` (shape (n, 4)); returns the loss."""
        raise NotImplementedError(f"{type(self).__name__} is not trainable")


class ApproximatorQSource(QSource):
    """
    Q-values from a ``QApproximator`` evaluated on encoded grid states.

    The grid is encoded with the agent placed at the queried position, so
    estimates for hypothetical positions never move the real agent.
    """

    def __init__(
        self,
        approximator: QApproximator,
        encoding: EncodingMode = EncodingMode.CHANNELS,
        learning_rate: float = 5e-3,
        weight_decay: float = 0.0,
    ) -> None:
        self.approximator = approximator
        self.encoding = encoding
        self.learning_rate = learning_rate
        self.weight_decay = weight_decay

    @property
    def trainable(self) -> bool:
        return True

    def encode(self, grid: Gridworld, position: Position) -> FloatArray:
        return grid.encode(self.encoding, agent_position=position)

    def estimate(self, grid: Gridworld, position: Position) -> FloatArray:
        return np.array(
            self.approximator.forward(self.encode(grid, position)), dtype=np.float64
        )

    def estimate_batch(
        self, grid: Gridworld, positions: Sequence[Position]
    ) -> FloatArray:
        states = np.stack([self.encode(grid, pos) for pos in positions])
        return np.array(self.approximator.forward(states), dtype=np.float64)

    def fit(
        self,
        grid: Gridworld,
        positions: Sequence[Position],
        targets: FloatArray,
    ) -> float:
        states = np.stack([self.encode(grid, pos) for pos in positions])
        return self.approximator.train(
            states, targets, self.learning_rate, self.weight_decay
        )


class ValueTableQSource(QSource):
    """
    Q-values by one-step lookahead over a ``ValueIterationEngine`` table.

    The table belongs to the engine's grid, so the ``grid`` argument of
    ``estimate`` is not consulted. ``EpisodeController`` rejects this source
    when grids are regenerated per episode.
    """

    def __init__(self, engine: ValueIterationEngine) -> None:
        self.engine = engine

    def estimate(self, grid: Gridworld, position: Position) -> FloatArray:
        return self.engine.q_values(position)
