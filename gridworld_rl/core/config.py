"""
Configuration for Gridworld Experiments.

This module provides centralized hyperparameter management with validation.

Core Idea (核心思想)
====================
使用dataclass集中管理所有超参数，通过__post_init__进行验证，
确保参数在有效范围内。配置在初始化时提供一次，运行期间视为不可变。

Hyperparameter Categories (超参数分类)
======================================
1. **Environment**: layout, width, height, step_reward, move_noise
2. **Dynamic programming**: discount_rate, tolerance, max_sweeps
3. **Learning**: learning_rate, weight_decay, hidden_dims, encoding
4. **Exploration**: epsilon (negative selects annealing)
5. **Replay**: buffer_size, batch_size, use_experience_replay
6. **Persistence**: checkpoint_path, save_checkpoint, load_checkpoint

Example:
    >>> config = GridworldConfig(layout="cliff", move_noise=0.0)
    >>> config.grid_layout
    <GridLayout.CLIFF: 1>
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple, Union

import torch

from .enums import EncodingMode, GridLayout
from .exceptions import ConfigurationError


def _check_probability(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ConfigurationError(f"{name} must be a finite number, got {value!r}")
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be in [0, 1], got {value}")


def _check_finite(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ConfigurationError(f"{name} must be a finite number, got {value!r}")


@dataclass(frozen=True)
class GridworldConfig:
    """
    Environment configuration shared by both engines.

    Attributes
    ----------
    layout : int or str, default=0
        Named layout (0 exemplary, 1 cliff, 2 discount, 3 bridge, 4 book,
        5 maze) or any other value for a randomly generated grid
    width : Optional[int], default=None
        Requested width; required for random grids. Named layouts keep
        their native size and reject a smaller request
    height : Optional[int], default=None
        Requested height; same semantics as ``width``
    step_reward : float, default=0.0
        Reward for entering any non-terminal cell (typically <= 0)
    discount_rate : float, default=0.9
        Discount factor γ ∈ [0, 1]
    move_noise : float, default=0.2
        Probability p that an action slips to one of its two orthogonal
        directions
    goal_reward : float, default=10.0
        Goal reward used by random grids
    pit_reward : float, default=-10.0
        Pit reward used by random grids
    seed : Optional[int], default=None
        Seed of the shared random generator

    Raises
    ------
    ConfigurationError
        If a parameter is outside its valid range
    """

    layout: Union[int, str] = 0
    width: Optional[int] = None
    height: Optional[int] = None
    step_reward: float = 0.0
    discount_rate: float = 0.9
    move_noise: float = 0.2
    goal_reward: float = 10.0
    pit_reward: float = -10.0
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        _check_probability("discount_rate", self.discount_rate)
        _check_probability("move_noise", self.move_noise)
        _check_finite("step_reward", self.step_reward)
        _check_finite("goal_reward", self.goal_reward)
        _check_finite("pit_reward", self.pit_reward)

        for name in ("width", "height"):
            value = getattr(self, name)
            if value is not None and (not isinstance(value, int) or value <= 0):
                raise ConfigurationError(
                    f"{name} must be a positive integer, got {value!r}"
                )

        if self.grid_layout is GridLayout.RANDOM and (
            self.width is None or self.height is None
        ):
            raise ConfigurationError(
                "width and height are required for a randomly generated grid"
            )

    @property
    def grid_layout(self) -> GridLayout:
        return GridLayout.from_value(self.layout)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "GridworldConfig":
        return cls(**config_dict)


@dataclass(frozen=True)
class ValueIterationConfig:
    """
    Stopping criteria for value iteration.

    Attributes
    ----------
    tolerance : float, default=1e-4
        Sweeps stop once Σ|V_new - V_old| falls below this value
    max_sweeps : int, default=1000
        Sweep cap; exceeding it raises ``DivergenceError``
    """

    tolerance: float = 1e-4
    max_sweeps: int = 1000

    def __post_init__(self) -> None:
        _check_finite("tolerance", self.tolerance)
        if self.tolerance <= 0:
            raise ConfigurationError(
                f"tolerance must be positive, got {self.tolerance}"
            )
        if not isinstance(self.max_sweeps, int) or self.max_sweeps <= 0:
            raise ConfigurationError(
                f"max_sweeps must be a positive integer, got {self.max_sweeps!r}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "ValueIterationConfig":
        return cls(**config_dict)


@dataclass(frozen=True)
class DeepQLearningConfig:
    """
    Configuration of the Deep Q-learning episode controller.

    Mathematical Foundation (数学基础)
    ----------------------------------
    - **ε (epsilon)**: exploration probability. A negative value selects
      the annealing schedule ε_k = max(0.1, 1 / (1 + √k)) over episodes k.
    - **α (learning_rate)**: optimizer step size passed to every
      ``train`` call of the approximator.
    - **C, b (buffer_size, batch_size)**: replay capacity and the
      minimum fill (and mini-batch size) before training starts.

    Attributes
    ----------
    learning_rate : float, default=5e-3
    weight_decay : float, default=0.0
    epsilon : float, default=0.1
    buffer_size : int, default=100
    batch_size : int, default=1
    use_experience_replay : bool, default=True
        False trains on the current transition only
    hidden_dims : Tuple[int, ...], default=(250, 100)
    encoding : str, default="channels"
        ``"channels"`` or ``"agent"`` (see ``EncodingMode``)
    regenerate_grid : bool, default=False
        Regenerate the whole grid at every episode start instead of only
        moving the agent back to the start cell
    max_steps_per_episode : Optional[int], default=100
        External step cap; None lets episodes run to a terminal cell
    checkpoint_path : Optional[str], default=None
    save_checkpoint : bool, default=False
    load_checkpoint : bool, default=False
    device : str, default="cpu"
    """

    learning_rate: float = 5e-3
    weight_decay: float = 0.0
    epsilon: float = 0.1
    buffer_size: int = 100
    batch_size: int = 1
    use_experience_replay: bool = True
    hidden_dims: Tuple[int, ...] = (250, 100)
    encoding: str = EncodingMode.CHANNELS.value
    regenerate_grid: bool = False
    max_steps_per_episode: Optional[int] = 100
    checkpoint_path: Optional[str] = None
    save_checkpoint: bool = False
    load_checkpoint: bool = False
    device: str = "cpu"

    def __post_init__(self) -> None:
        _check_finite("learning_rate", self.learning_rate)
        if not 0 < self.learning_rate <= 1:
            raise ConfigurationError(
                f"learning_rate must be in (0, 1], got {self.learning_rate}"
            )
        _check_finite("weight_decay", self.weight_decay)
        if self.weight_decay < 0:
            raise ConfigurationError(
                f"weight_decay must be non-negative, got {self.weight_decay}"
            )
        _check_finite("epsilon", self.epsilon)
        if self.epsilon > 1:
            raise ConfigurationError(
                f"epsilon must be <= 1 (negative selects annealing), got {self.epsilon}"
            )

        if not isinstance(self.buffer_size, int) or self.buffer_size <= 0:
            raise ConfigurationError(
                f"buffer_size must be a positive integer, got {self.buffer_size!r}"
            )
        if not isinstance(self.batch_size, int) or self.batch_size <= 0:
            raise ConfigurationError(
                f"batch_size must be a positive integer, got {self.batch_size!r}"
            )
        if self.batch_size > self.buffer_size:
            raise ConfigurationError(
                f"batch_size ({self.batch_size}) must not exceed "
                f"buffer_size ({self.buffer_size})"
            )

        if not self.hidden_dims or any(
            not isinstance(d, int) or d <= 0 for d in self.hidden_dims
        ):
            raise ConfigurationError(
                f"hidden_dims must be positive integers, got {self.hidden_dims!r}"
            )
        try:
            EncodingMode(self.encoding)
        except ValueError:
            raise ConfigurationError(
                f"encoding must be one of {[m.value for m in EncodingMode]}, "
                f"got {self.encoding!r}"
            ) from None

        if self.max_steps_per_episode is not None and self.max_steps_per_episode <= 0:
            raise ConfigurationError(
                f"max_steps_per_episode must be positive, got {self.max_steps_per_episode}"
            )
        if (self.save_checkpoint or self.load_checkpoint) and not self.checkpoint_path:
            raise ConfigurationError(
                "checkpoint_path is required when saving or loading checkpoints"
            )
        if torch.device(self.device).type != "cpu":
            raise ConfigurationError(
                f"only CPU execution is supported, got device={self.device!r}"
            )

    @property
    def encoding_mode(self) -> EncodingMode:
        return EncodingMode(self.encoding)

    @property
    def anneals_epsilon(self) -> bool:
        return self.epsilon < 0

    def get_device(self) -> torch.device:
        return torch.device(self.device)

    def to_dict(self) -> Dict[str, Any]:
        config = asdict(self)
        config["hidden_dims"] = list(self.hidden_dims)
        return config

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "DeepQLearningConfig":
        config_dict = dict(config_dict)
        if "hidden_dims" in config_dict:
            config_dict["hidden_dims"] = tuple(config_dict["hidden_dims"])
        return cls(**config_dict)
