"""
Gridworld Model

Core Idea:
    Holds the immutable geometry of a gridworld (walls, pits, goals, start)
    plus the single mutable field of the environment: the agent position.
    Answers the geometric queries both engines need.

Mathematical Theory:
    State space: :math:`\\mathcal{S} = \\{(x, y) : 0 \\leq x < W, 0 \\leq y < H\\}`

    Allowed states exclude walls. Terminal states are pits and goals, which
    are absorbing: reaching one ends the episode and yields its reward.

    .. math::
        R(s') = \\begin{cases}
            r_{goal}(s') & s' \\in \\text{goals} \\\\
            r_{pit}(s')  & s' \\in \\text{pits} \\\\
            r_{step}     & \\text{otherwise}
        \\end{cases}

Problem Statement:
    Both value iteration (which sweeps the whole grid) and Deep Q-learning
    (which moves one agent) must agree on what a cell is, where the
    boundaries are, and how a state is presented to a function approximator.

Complexity:
    - Queries: O(1)
    - Encoding: O(W × H)
    - Random generation: O(k × W × H) for k placement attempts

Summary:
    ``Gridworld`` is the single source of truth for the environment. It is
    mutated only through ``move_player`` and ``reset``.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Union

import numpy as np

from ..core.config import GridworldConfig
from ..core.enums import Action, CellKind, EncodingMode, GridChannel, GridLayout
from ..core.exceptions import ConfigurationError
from ..core.types import FloatArray, Position
from .layouts import LAYOUTS, layout_size, parse_layout

logger = logging.getLogger(__name__)

MAX_PLACEMENT_ATTEMPTS = 100
"""Attempts at placing a random grid whose goal is reachable from the start."""


class Gridworld:
    """
    Grid of typed cells plus the current agent position.

    Attributes:
        width: Number of columns
        height: Number of rows
        start: Start cell the agent returns to on ``reset``
        agent_position: Current agent position

    Example:
        >>> grid = Gridworld.generate(GridLayout.EXEMPLARY)
        >>> grid.agent_position
        Position(x=0, y=3)
        >>> grid.is_allowed(Position(2, 2))
        False
        >>> grid.reward_at(Position(3, 0), step_reward=0.0)
        10.0
    """

    def __init__(
        self,
        cells: Sequence[Sequence[Union[CellKind, int]]],
        rewards: Mapping[Position, float],
        start: Position,
    ):
        """
        Args:
            cells: Cell kinds indexed ``cells[y][x]``
            rewards: Reward of every goal and pit cell
            start: Start position

        Raises:
            ConfigurationError: If the grid is empty, the start is not a free
                cell, or a terminal cell has no reward.
        """
        self._cells = np.asarray(cells, dtype=np.int8)
        if self._cells.ndim != 2 or self._cells.size == 0:
            raise ConfigurationError("grid must be a non-empty 2-D array of cells")

        self._height, self._width = self._cells.shape
        self._rewards: Dict[Position, float] = {
            Position(*pos): float(r) for pos, r in rewards.items()
        }
        self._start = Position(*start)

        if not self.in_bounds(self._start) or self.cell(self._start) in (
            CellKind.WALL, CellKind.PIT, CellKind.GOAL
        ):
            raise ConfigurationError(f"start {self._start} must be a free in-bounds cell")

        for pos in self.positions():
            if self.cell(pos) in (CellKind.PIT, CellKind.GOAL) and pos not in self._rewards:
                raise ConfigurationError(f"terminal cell {pos} has no reward")

        self._agent = self._start

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def generate(
        cls,
        layout: Union[GridLayout, int, str] = GridLayout.EXEMPLARY,
        width: Optional[int] = None,
        height: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
        goal_reward: float = 10.0,
        pit_reward: float = -10.0,
    ) -> "Gridworld":
        """
        Build a named layout or a random grid.

        Named layouts keep their native size; a requested width or height
        smaller than the native one is a configuration error. Any
        unrecognized or negative ``layout`` produces a random grid of the
        requested size.

        Raises:
            ConfigurationError: If the requested size cannot hold the layout.
        """
        kind = GridLayout.from_value(layout)

        if kind is GridLayout.RANDOM:
            if width is None or height is None:
                raise ConfigurationError("random grids need an explicit width and height")
            return cls._generate_random(
                width, height, rng or np.random.default_rng(), goal_reward, pit_reward
            )

        native_width, native_height = layout_size(kind)
        if (width is not None and width < native_width) or (
            height is not None and height < native_height
        ):
            raise ConfigurationError(
                f"layout {kind.name} needs at least {native_width}x{native_height}, "
                f"got {width}x{height}"
            )

        cells, rewards, start = parse_layout(LAYOUTS[kind])
        logger.debug(f"Generated {kind.name} grid {native_width}x{native_height}")
        return cls(cells, rewards, start)

    @classmethod
    def from_config(
        cls,
        config: GridworldConfig,
        rng: Optional[np.random.Generator] = None,
    ) -> "Gridworld":
        """Build the grid described by a ``GridworldConfig``."""
        return cls.generate(
            config.grid_layout,
            config.width,
            config.height,
            rng=rng,
            goal_reward=config.goal_reward,
            pit_reward=config.pit_reward,
        )

    @classmethod
    def _generate_random(
        cls,
        width: int,
        height: int,
        rng: np.random.Generator,
        goal_reward: float,
        pit_reward: float,
    ) -> "Gridworld":
        """
        Place one wall, goal, pit and start on distinct random cells.

        Placement is retried until the goal is reachable from the start; after
        ``MAX_PLACEMENT_ATTEMPTS`` the last grid is accepted as is.
        """
        if width < 2 or height < 2:
            raise ConfigurationError(
                f"random grids must be at least 2x2, got {width}x{height}"
            )

        grid = None
        for attempt in range(1, MAX_PLACEMENT_ATTEMPTS + 1):
            wall, goal, pit, start = (
                Position(int(i % width), int(i // width))
                for i in rng.choice(width * height, size=4, replace=False)
            )
            cells = [[CellKind.EMPTY] * width for _ in range(height)]
            cells[wall.y][wall.x] = CellKind.WALL
            cells[goal.y][goal.x] = CellKind.GOAL
            cells[pit.y][pit.x] = CellKind.PIT
            cells[start.y][start.x] = CellKind.START

            grid = cls(cells, {goal: goal_reward, pit: pit_reward}, start)
            if grid.is_reachable(goal):
                logger.debug(f"Random grid placed after {attempt} attempt(s)")
                return grid

        logger.warning(
            f"Goal unreachable in random {width}x{height} grid after "
            f"{MAX_PLACEMENT_ATTEMPTS} attempts, keeping last placement"
        )
        return grid

    def copy(self) -> "Gridworld":
        """Independent copy including the agent position."""
        clone = Gridworld(self._cells.copy(), self._rewards, self._start)
        clone._agent = self._agent
        return clone

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def start(self) -> Position:
        return self._start

    @property
    def agent_position(self) -> Position:
        return self._agent

    @property
    def terminal_rewards(self) -> Dict[Position, float]:
        return dict(self._rewards)

    def positions(self) -> Iterator[Position]:
        """All cells in row-major order."""
        for y in range(self._height):
            for x in range(self._width):
                yield Position(x, y)

    # =========================================================================
    # Queries
    # =========================================================================

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self._width and 0 <= pos.y < self._height

    def cell(self, pos: Position) -> CellKind:
        if not self.in_bounds(pos):
            raise IndexError(f"position {pos} outside {self._width}x{self._height} grid")
        return CellKind(int(self._cells[pos.y, pos.x]))

    def is_allowed(self, pos: Position) -> bool:
        """True iff ``pos`` is inside the grid and not a wall."""
        return self.in_bounds(pos) and self._cells[pos.y, pos.x] != CellKind.WALL

    def is_terminal(self, pos: Position) -> bool:
        """True iff ``pos`` is a pit or a goal."""
        return self.in_bounds(pos) and self._cells[pos.y, pos.x] in (
            CellKind.PIT, CellKind.GOAL
        )

    def is_action_allowed(self, action: Action, pos: Optional[Position] = None) -> bool:
        """True iff one step in ``action``'s direction lands on an allowed cell."""
        origin = self._agent if pos is None else pos
        return self.is_allowed(origin + action.delta)

    def allowed_actions(self, pos: Optional[Position] = None) -> List[Action]:
        return [a for a in Action.directions() if self.is_action_allowed(a, pos)]

    def reward_at(self, pos: Position, step_reward: float) -> float:
        """Designed reward of a pit/goal, ``step_reward`` anywhere else."""
        return self._rewards.get(pos, step_reward) if self.is_terminal(pos) else step_reward

    def is_reachable(self, target: Position, origin: Optional[Position] = None) -> bool:
        """Breadth-first search through allowed, non-terminal cells."""
        origin = self._start if origin is None else origin
        frontier = deque([origin])
        visited = {origin}
        while frontier:
            pos = frontier.popleft()
            if pos == target:
                return True
            if self.is_terminal(pos):
                continue
            for action in Action.directions():
                nxt = pos + action.delta
                if nxt not in visited and self.is_allowed(nxt):
                    visited.add(nxt)
                    frontier.append(nxt)
        return False

    # =========================================================================
    # Mutation
    # =========================================================================

    def move_player(self, pos: Position) -> None:
        """Unconditional relocation; callers validate with ``is_allowed``."""
        self._agent = pos

    def reset(self) -> None:
        """Move the agent back to the start cell."""
        self._agent = self._start

    # =========================================================================
    # Encoding and rendering
    # =========================================================================

    def encode(
        self,
        mode: EncodingMode = EncodingMode.CHANNELS,
        agent_position: Optional[Position] = None,
    ) -> FloatArray:
        """
        Flatten the grid into approximator input.

        ``CHANNELS`` stacks goal, pit, wall and player one-hot planes
        (``GridChannel`` order), each plane row-major; ``AGENT`` returns the
        player plane alone. ``agent_position`` encodes a hypothetical agent
        position without moving the agent.
        """
        agent = self._agent if agent_position is None else agent_position
        player = np.zeros((self._height, self._width), dtype=np.float32)
        player[agent.y, agent.x] = 1.0

        if mode is EncodingMode.AGENT:
            return player.reshape(-1)

        planes = np.zeros((len(GridChannel), self._height, self._width), dtype=np.float32)
        planes[GridChannel.GOAL] = self._cells == CellKind.GOAL
        planes[GridChannel.PIT] = self._cells == CellKind.PIT
        planes[GridChannel.WALL] = self._cells == CellKind.WALL
        planes[GridChannel.PLAYER] = player
        return planes.reshape(-1)

    def to_string(self) -> str:
        """Character rendering with the agent shown as ``@``."""
        lines = []
        for y in range(self._height):
            row = []
            for x in range(self._width):
                pos = Position(x, y)
                row.append("@" if pos == self._agent else self.cell(pos).symbol)
            lines.append("| " + " | ".join(row) + " |")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Gridworld({self._width}x{self._height}, agent={self._agent})"
