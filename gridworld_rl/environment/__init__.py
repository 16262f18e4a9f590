"""
Environment Module - Gridworld, Dynamics and Rewards.

    - Gridworld: grid geometry, agent position, encodings
    - TransitionModel: move-noise resolution against walls and boundaries
    - RewardModel: destination-attributed rewards and terminal classification
    - LAYOUTS: the named classic layouts
"""

from .grid import Gridworld
from .layouts import LAYOUTS, layout_size, parse_layout
from .rewards import RewardModel
from .transitions import StepOutcome, TransitionModel

__all__ = [
    "Gridworld",
    "LAYOUTS",
    "layout_size",
    "parse_layout",
    "RewardModel",
    "StepOutcome",
    "TransitionModel",
]
