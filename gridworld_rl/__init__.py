"""
Gridworld Reinforcement Learning.

Value iteration and Deep Q-learning with experience replay over small
discrete gridworlds with move noise, walls, pits and goals.

Algorithms Implemented (已实现算法)
===================================
+--------------------+------------------------------------------------+
| Engine             | Key Idea                                       |
+====================+================================================+
| Value iteration    | Exact synchronous Bellman backups              |
+--------------------+------------------------------------------------+
| Deep Q-learning    | ε-greedy TD targets, MLP approximator          |
+--------------------+------------------------------------------------+
| + replay           | Uniform sampling from a FIFO experience buffer |
+--------------------+------------------------------------------------+

Module Structure (模块结构)
===========================
::

    gridworld_rl/
    ├── core/           Configuration, enums, value types, exceptions
    ├── environment/    Gridworld, layouts, TransitionModel, RewardModel
    ├── algorithms/     ValueIterationEngine
    ├── buffers/        ExperienceReplayBuffer
    ├── networks/       QApproximator, TorchQApproximator, QNetwork
    ├── agents/         Q-sources, EpisodeController
    ├── utils/          Statistics, seeding, text rendering
    └── main.py         Command-line entry point

Quick Start (快速开始)
======================
>>> from gridworld_rl import Gridworld, GridLayout, TransitionModel, RewardModel
>>> from gridworld_rl import ValueIterationEngine, set_seed
>>> rng = set_seed(0)
>>> grid = Gridworld.generate(GridLayout.EXEMPLARY)
>>> engine = ValueIterationEngine(
...     grid, TransitionModel(grid, 0.0, rng), RewardModel(grid), discount_rate=0.9
... )
>>> result = engine.run()
>>> engine.greedy_path()[-1]
Position(x=3, y=0)
"""

from .agents import (
    ApproximatorQSource,
    EpisodeController,
    EpisodePhase,
    EpisodeSummary,
    QSource,
    ValueTableQSource,
)
from .algorithms import ValueIterationEngine, ValueIterationResult
from .buffers import ExperienceReplayBuffer
from .core import (
    NUM_ACTIONS,
    Action,
    CellKind,
    ConfigurationError,
    DeepQLearningConfig,
    DivergenceError,
    EmptyBufferError,
    EncodingMode,
    Experience,
    ExperienceSample,
    GridChannel,
    GridLayout,
    GridworldConfig,
    GridworldError,
    Position,
    ValueIterationConfig,
)
from .environment import Gridworld, RewardModel, StepOutcome, TransitionModel
from .networks import QApproximator, QNetwork, TorchQApproximator
from .utils import StatisticsCollector, set_seed

__version__ = "1.0.0"

__all__ = [
    "ApproximatorQSource",
    "EpisodeController",
    "EpisodePhase",
    "EpisodeSummary",
    "QSource",
    "ValueTableQSource",
    "ValueIterationEngine",
    "ValueIterationResult",
    "ExperienceReplayBuffer",
    "NUM_ACTIONS",
    "Action",
    "CellKind",
    "ConfigurationError",
    "DeepQLearningConfig",
    "DivergenceError",
    "EmptyBufferError",
    "EncodingMode",
    "Experience",
    "ExperienceSample",
    "GridChannel",
    "GridLayout",
    "GridworldConfig",
    "GridworldError",
    "Position",
    "ValueIterationConfig",
    "Gridworld",
    "RewardModel",
    "StepOutcome",
    "TransitionModel",
    "QApproximator",
    "QNetwork",
    "TorchQApproximator",
    "StatisticsCollector",
    "set_seed",
]
