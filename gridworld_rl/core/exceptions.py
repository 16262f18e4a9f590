"""
Exception hierarchy for gridworld reinforcement learning.

Only genuine contract violations are raised. Blocked moves, slips and
terminal cells are ordinary control flow and never reach this module.
"""

from __future__ import annotations


class GridworldError(Exception):
    """Base class for all errors raised by ``gridworld_rl``."""


class ConfigurationError(GridworldError, ValueError):
    """Invalid grid dimensions, layout or hyperparameter value."""


class EmptyBufferError(GridworldError, IndexError):
    """Sampling was attempted on an empty experience replay buffer."""


class DivergenceError(GridworldError, RuntimeError):
    """
    Value iteration did not reach its tolerance within the sweep cap.

    Attributes
    ----------
    sweeps : int
        Number of sweeps performed before giving up
    running_delta : float
        Sum of absolute value changes in the last sweep
    """

    def __init__(self, sweeps: int, running_delta: float, tolerance: float) -> None:
        super().__init__(
            f"value iteration did not converge after {sweeps} sweeps "
            f"(running_delta={running_delta:.6g}, tolerance={tolerance:.6g})"
        )
        self.sweeps = sweeps
        self.running_delta = running_delta
        self.tolerance = tolerance
