"""
Core Module - Configuration, Enumerations and Value Types.

This module provides foundational components shared by both engines:
    - GridworldConfig / ValueIterationConfig / DeepQLearningConfig
    - Action, CellKind, GridChannel, GridLayout, EncodingMode
    - Position, Experience, ExperienceSample
    - ConfigurationError, EmptyBufferError, DivergenceError

Example:
    >>> from gridworld_rl.core import GridworldConfig, Action
    >>> config = GridworldConfig(layout=0, move_noise=0.0)
    >>> Action.NORTH.delta
    (0, -1)
"""

from .config import DeepQLearningConfig, GridworldConfig, ValueIterationConfig
from .enums import (
    NUM_ACTIONS,
    Action,
    CellKind,
    EncodingMode,
    GridChannel,
    GridLayout,
)
from .exceptions import (
    ConfigurationError,
    DivergenceError,
    EmptyBufferError,
    GridworldError,
)
from .types import Experience, ExperienceSample, FloatArray, Position

__all__ = [
    "GridworldConfig",
    "ValueIterationConfig",
    "DeepQLearningConfig",
    "NUM_ACTIONS",
    "Action",
    "CellKind",
    "EncodingMode",
    "GridChannel",
    "GridLayout",
    "GridworldError",
    "ConfigurationError",
    "EmptyBufferError",
    "DivergenceError",
    "Experience",
    "ExperienceSample",
    "FloatArray",
    "Position",
]
