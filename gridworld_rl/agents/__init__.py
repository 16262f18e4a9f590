"""
Agents Module - Q-Sources and the Episode Controller.

    - QSource: estimate(grid, position) -> Q[4] strategy interface
    - ApproximatorQSource: trainable, backed by a QApproximator
    - ValueTableQSource: fixed, backed by a converged value table
    - EpisodeController: ε-greedy Deep Q-learning episodes
"""

from .controller import EpisodeController, EpisodePhase, EpisodeSummary
from .q_sources import ApproximatorQSource, QSource, ValueTableQSource

__all__ = [
    "EpisodeController",
    "EpisodePhase",
    "EpisodeSummary",
    "ApproximatorQSource",
    "QSource",
    "ValueTableQSource",
]
