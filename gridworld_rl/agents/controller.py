"""
Deep Q-Learning Episode Controller

Core Idea:
    Drive one agent through episodes, learning Q-values online. Each step
    takes an ε-greedy action from a snapshot of the current Q-estimates,
    executes it through the noisy transition model, builds a TD target for
    the chosen action only, stores the experience, and trains the Q-source
    on replayed (or current) experience.

Mathematical Theory:
    **TD target of the chosen action a at state s, landing in s'**:

    .. math::
        y_a = \\begin{cases}
            r_{step}                                    & \\text{move blocked} \\\\
            R(s')                                       & s' \\text{ terminal} \\\\
            r_{step}                                    & s' = s_{t-1} \\\\
            r_{step} + \\gamma \\max_{a' \\in \\mathcal{A}(s')} Q(s', a') & \\text{otherwise}
        \\end{cases}

    The other three rows are filled with the current estimate Q(s, ·), so
    training only moves the chosen action's value.

    **Exploration schedule** (negative ε configured):

    .. math::
        \\varepsilon_k = \\max\\left(0.1, \\frac{1}{1 + \\sqrt{k}}\\right)

State Machine:
    EPISODE_START → STEPPING (repeated until terminal or step cap)
    → EPISODE_END → EPISODE_START

Summary:
    The controller owns only episode-scoped state (step counter, previous
    position) and running totals for reporting. Learning state lives in the
    Q-source and the replay buffer.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

import numpy as np

from ..buffers.replay import ExperienceReplayBuffer
from ..core.config import DeepQLearningConfig
from ..core.enums import Action, NUM_ACTIONS
from ..core.exceptions import ConfigurationError
from ..core.types import Experience, FloatArray, Position
from ..environment.grid import Gridworld
from ..environment.rewards import RewardModel
from ..environment.transitions import TransitionModel
from ..utils.statistics import (
    AVERAGE_COLLECTED_REWARD,
    AVERAGE_NUMBER_OF_STEPS,
    COLLECTED_REWARD,
    NUMBER_OF_STEPS,
    StatisticsCollector,
)
from .q_sources import ApproximatorQSource, QSource, ValueTableQSource

logger = logging.getLogger(__name__)

MIN_ANNEALED_EPSILON = 0.1


class EpisodePhase(Enum):
    EPISODE_START = "episode_start"
    STEPPING = "stepping"
    EPISODE_END = "episode_end"


@dataclass
class EpisodeSummary:
    """
    Bookkeeping of one finished episode.

    Attributes:
        episode: 1-based episode number
        steps: Steps taken in the episode
        collected_reward: Reward of the final position
        terminal: Whether the episode ended in a terminal cell
        epsilon: Exploration rate used during the episode
    """
    episode: int
    steps: int
    collected_reward: float
    terminal: bool
    epsilon: float


class EpisodeController:
    """
    ε-greedy Deep Q-learning over a ``Gridworld``.

    Attributes:
        grid: Current grid (replaced on regeneration)
        transitions: Noisy dynamics bound to ``grid``
        rewards: Reward model bound to ``grid``
        q_source: Estimator backing the policy
        buffer: Replay buffer, None for the non-replay variant
        statistics: Sink receiving the per-episode series
        phase: Current ``EpisodePhase``
        episode: Number of finished episodes
        iteration: Steps taken in the current episode
        last_loss: Loss of the most recent training call, None if none yet

    Example:
        >>> rng = np.random.default_rng(0)
        >>> grid = Gridworld.generate(GridLayout.EXEMPLARY)
        >>> source = ApproximatorQSource(TorchQApproximator(64))
        >>> controller = EpisodeController(
        ...     grid,
        ...     TransitionModel(grid, 0.0, rng),
        ...     RewardModel(grid),
        ...     source,
        ...     DeepQLearningConfig(),
        ...     discount_rate=0.9,
        ...     rng=rng,
        ... )
        >>> summaries = controller.train(num_episodes=10)
    """

    def __init__(
        self,
        grid: Gridworld,
        transitions: TransitionModel,
        rewards: RewardModel,
        q_source: QSource,
        config: DeepQLearningConfig,
        discount_rate: float,
        rng: np.random.Generator,
        buffer: Optional[ExperienceReplayBuffer] = None,
        statistics: Optional[StatisticsCollector] = None,
        grid_factory: Optional[Callable[[], Gridworld]] = None,
    ):
        """
        Args:
            grid: Environment the agent moves in
            transitions: Dynamics bound to ``grid``
            rewards: Reward model bound to ``grid``
            q_source: Policy estimator; trained only if ``trainable``
            config: Learning hyperparameters
            discount_rate: γ ∈ [0, 1]
            rng: Shared random source (ε draws and random actions)
            buffer: Replay buffer. Created from ``config`` when replay is
                enabled and None is given.
            statistics: Statistics sink. A fresh one is created if None.
            grid_factory: Builds a new grid at every episode start when
                ``config.regenerate_grid`` is set

        Raises:
            ConfigurationError: If γ is out of range, or grid regeneration is
                requested without a factory or with a ``ValueTableQSource``.
        """
        if not math.isfinite(discount_rate) or not 0.0 <= discount_rate <= 1.0:
            raise ConfigurationError(
                f"discount_rate must be in [0, 1], got {discount_rate}"
            )
        if config.regenerate_grid and grid_factory is None:
            raise ConfigurationError("regenerate_grid requires a grid_factory")
        if config.regenerate_grid and isinstance(q_source, ValueTableQSource):
            raise ConfigurationError(
                "a value-table Q-source is bound to one grid and cannot be "
                "combined with regenerate_grid"
            )

        self.grid = grid
        self.transitions = transitions
        self.rewards = rewards
        self.q_source = q_source
        self.config = config
        self.discount_rate = float(discount_rate)
        self.rng = rng
        self.grid_factory = grid_factory

        if buffer is None and config.use_experience_replay:
            buffer = ExperienceReplayBuffer(config.buffer_size, config.batch_size, rng)
        self.buffer = buffer if config.use_experience_replay else None
        self.statistics = statistics if statistics is not None else StatisticsCollector()

        self.phase = EpisodePhase.EPISODE_START
        self.episode = 0
        self.iteration = 0
        self.sum_of_iterations = 0
        self.sum_of_rewards = 0.0
        self.last_loss: Optional[float] = None
        self._previous_position: Optional[Position] = None

        if config.load_checkpoint and isinstance(q_source, ApproximatorQSource):
            q_source.approximator.load(config.checkpoint_path)

    # =========================================================================
    # Exploration
    # =========================================================================

    @property
    def epsilon(self) -> float:
        """Exploration rate of the current episode."""
        if self.config.anneals_epsilon:
            # episodes are numbered from 1 while running
            running = self.episode + 1
            return max(MIN_ANNEALED_EPSILON, 1.0 / (1.0 + math.sqrt(running)))
        return self.config.epsilon

    def best_allowed_action(
        self, q_values: FloatArray, position: Position
    ) -> Optional[Action]:
        """Argmax of ``q_values`` over allowed actions, ties in N, E, S, W order."""
        best_action = None
        best_value = -math.inf
        for action in self.grid.allowed_actions(position):
            if q_values[action] > best_value:
                best_value = q_values[action]
                best_action = action
        return best_action

    def select_action(self, q_snapshot: FloatArray, position: Position) -> Action:
        """
        ε-greedy selection on a private Q snapshot.

        A random choice ignores allowance: blocked directions are resolved by
        the transition model as no-op moves.
        """
        if self.rng.random() > self.epsilon:
            action = self.best_allowed_action(q_snapshot, position)
            if action is not None:
                return action
        return self.transitions.resolve_random(Action.RANDOM)

    def compute_best_value(self, position: Position) -> float:
        """Max Q-estimate over allowed actions at ``position``; -inf if none."""
        q_values = self.q_source.estimate(self.grid, position)
        allowed = self.grid.allowed_actions(position)
        if not allowed:
            return -math.inf
        return float(max(q_values[a] for a in allowed))

    # =========================================================================
    # Episode state machine
    # =========================================================================

    def _bind_grid(self, grid: Gridworld) -> None:
        self.grid = grid
        self.transitions.grid = grid
        self.rewards.grid = grid

    def start_episode(self) -> None:
        if self.config.regenerate_grid:
            self._bind_grid(self.grid_factory())
        else:
            self.grid.reset()
        self.iteration = 0
        self._previous_position = None
        self.phase = EpisodePhase.STEPPING
        logger.info(
            f"Episode {self.episode + 1} started at {self.grid.agent_position} "
            f"(epsilon = {self.epsilon:.3f})"
        )

    def perform_single_step(self) -> bool:
        """
        One ε-greedy step with TD-target construction and training.

        Returns:
            True if the agent reached a terminal cell.
        """
        if self.phase is not EpisodePhase.STEPPING:
            self.start_episode()

        state_t = self.grid.agent_position
        q_snapshot = np.array(
            self.q_source.estimate(self.grid, state_t), dtype=np.float64
        )

        action = self.select_action(q_snapshot, state_t)
        outcome = self.transitions.step(action)
        state_t_prim = outcome.destination
        step_reward = self.rewards.step_reward

        terminal = False
        if not outcome.moved:
            target_value = step_reward
        elif self.rewards.is_terminal(state_t_prim):
            target_value = self.rewards.reward(state_t_prim)
            terminal = True
        elif state_t_prim == self._previous_position:
            target_value = step_reward
        else:
            best_next = self.compute_best_value(state_t_prim)
            target_value = step_reward
            if math.isfinite(best_next):
                target_value += self.discount_rate * best_next

        targets = np.full(NUM_ACTIONS, np.nan, dtype=np.float64)
        targets[action] = target_value
        experience = Experience(state_t, action, state_t_prim)

        logger.debug(
            f"Step {self.iteration + 1}: {state_t} --{action.name}"
            f"[{outcome.executed_action.name}]--> {state_t_prim}, "
            f"target = {target_value:.4f}"
        )

        if self.buffer is not None:
            self.buffer.add(experience, targets)
            self._train_from_buffer()
        else:
            current = np.where(np.isnan(targets), q_snapshot, targets)
            self._fit([state_t], current[np.newaxis, :])

        self._previous_position = state_t
        self.iteration += 1
        if terminal:
            self.phase = EpisodePhase.EPISODE_END
        return terminal

    def _train_from_buffer(self) -> None:
        if not self.buffer.is_ready():
            return
        samples = self.buffer.sample_batch()
        positions = [s.experience.state_t for s in samples]
        stored = np.stack([s.targets for s in samples])
        live = self.q_source.estimate_batch(self.grid, positions)
        self._fit(positions, np.where(np.isnan(stored), live, stored))

    def _fit(self, positions: List[Position], targets: FloatArray) -> None:
        if not self.q_source.trainable:
            return
        self.last_loss = self.q_source.fit(self.grid, positions, targets)
        logger.debug(f"Training loss: {self.last_loss:.6f}")

    def finish_episode(self) -> EpisodeSummary:
        """Accumulate totals, append the statistics series, save a checkpoint."""
        final_position = self.grid.agent_position
        terminal = self.rewards.is_terminal(final_position)
        collected_reward = self.rewards.reward(final_position)
        epsilon = self.epsilon

        self.episode += 1
        self.sum_of_iterations += self.iteration
        self.sum_of_rewards += collected_reward

        self.statistics.add_many({
            NUMBER_OF_STEPS: self.iteration,
            AVERAGE_NUMBER_OF_STEPS: self.sum_of_iterations / self.episode,
            COLLECTED_REWARD: collected_reward,
            AVERAGE_COLLECTED_REWARD: self.sum_of_rewards / self.episode,
        })

        summary = EpisodeSummary(
            episode=self.episode,
            steps=self.iteration,
            collected_reward=collected_reward,
            terminal=terminal,
            epsilon=epsilon,
        )
        logger.info(
            f"Episode {self.episode} finished after {self.iteration} steps "
            f"at {final_position} (reward = {collected_reward:+.2f})"
        )

        if self.config.save_checkpoint and isinstance(self.q_source, ApproximatorQSource):
            self.q_source.approximator.save(self.config.checkpoint_path)

        self.phase = EpisodePhase.EPISODE_START
        return summary

    def run_episode(self, max_steps: Optional[int] = None) -> EpisodeSummary:
        """
        Run one episode to a terminal cell or the step cap.

        Args:
            max_steps: Step cap; defaults to ``config.max_steps_per_episode``
                (None means no cap)
        """
        limit = self.config.max_steps_per_episode if max_steps is None else max_steps
        self.start_episode()
        while limit is None or self.iteration < limit:
            if self.perform_single_step():
                break
        return self.finish_episode()

    def train(self, num_episodes: int) -> List[EpisodeSummary]:
        return [self.run_episode() for _ in range(num_episodes)]
