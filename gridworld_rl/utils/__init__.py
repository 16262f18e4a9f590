"""
Utilities Module.

    - StatisticsCollector: per-episode named scalar series
    - set_seed: shared random generator plus PyTorch seeding
    - render_*: text renderings for log output
"""

from .common import print_separator, set_seed
from .rendering import render_policy, render_q_table, render_values
from .statistics import (
    AVERAGE_COLLECTED_REWARD,
    AVERAGE_NUMBER_OF_STEPS,
    COLLECTED_REWARD,
    EPISODE_SERIES,
    NUMBER_OF_STEPS,
    StatisticsCollector,
)

__all__ = [
    "print_separator",
    "set_seed",
    "render_policy",
    "render_q_table",
    "render_values",
    "AVERAGE_COLLECTED_REWARD",
    "AVERAGE_NUMBER_OF_STEPS",
    "COLLECTED_REWARD",
    "EPISODE_SERIES",
    "NUMBER_OF_STEPS",
    "StatisticsCollector",
]
