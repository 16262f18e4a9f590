"""
Enumerations for the gridworld domain.

Core Idea (核心思想)
====================
动作、格子类型、地图布局和状态编码方式都是有限集合，用枚举表示，
使得Q值向量的行索引、网格张量的通道顺序在训练与推理之间保持一致。

Action Layout (动作布局)
========================
+---------+-------+------------+--------------------+
| Action  | Index | Delta      | Orthogonal         |
+=========+=======+============+====================+
| NORTH   | 0     | (0, -1)    | WEST, EAST         |
+---------+-------+------------+--------------------+
| EAST    | 1     | (1, 0)     | NORTH, SOUTH       |
+---------+-------+------------+--------------------+
| SOUTH   | 2     | (0, 1)     | EAST, WEST         |
+---------+-------+------------+--------------------+
| WEST    | 3     | (-1, 0)    | SOUTH, NORTH       |
+---------+-------+------------+--------------------+
| RANDOM  | 4     | resolved   | -                  |
+---------+-------+------------+--------------------+

``y`` grows southward, so row 0 is the top row of a rendered grid.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Tuple, Union


class Action(IntEnum):
    """
    Agent actions.

    The integer value of a directional action is its row in every Q-value
    vector. ``RANDOM`` is never executed as such: it is resolved to one of
    the four directions by a uniform draw at selection time.

    Examples
    --------
    >>> Action.NORTH.delta
    (0, -1)
    >>> Action.EAST.orthogonal
    (<Action.NORTH: 0>, <Action.SOUTH: 2>)
    """

    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3
    RANDOM = 4

    def __str__(self) -> str:
        return self.name[0] if self.is_directional else "R"

    @classmethod
    def directions(cls) -> Tuple["Action", ...]:
        """The four executable directions in tie-breaking order."""
        return (cls.NORTH, cls.EAST, cls.SOUTH, cls.WEST)

    @property
    def is_directional(self) -> bool:
        return self is not Action.RANDOM

    @property
    def delta(self) -> Tuple[int, int]:
        """Displacement ``(dx, dy)`` of one step in this direction."""
        if self is Action.RANDOM:
            raise ValueError("RANDOM has no displacement until it is resolved")
        return _DELTAS[self]

    @property
    def orthogonal(self) -> Tuple["Action", "Action"]:
        """The two directions perpendicular to this one (never the reverse)."""
        if self is Action.RANDOM:
            raise ValueError("RANDOM has no orthogonal directions")
        return _ORTHOGONAL[self]

    @property
    def arrow(self) -> str:
        return _ARROWS.get(self, "?")


_DELTAS = {
    Action.NORTH: (0, -1),
    Action.EAST: (1, 0),
    Action.SOUTH: (0, 1),
    Action.WEST: (-1, 0),
}

_ORTHOGONAL = {
    Action.NORTH: (Action.WEST, Action.EAST),
    Action.EAST: (Action.NORTH, Action.SOUTH),
    Action.SOUTH: (Action.EAST, Action.WEST),
    Action.WEST: (Action.SOUTH, Action.NORTH),
}

_ARROWS = {
    Action.NORTH: "↑",
    Action.EAST: "→",
    Action.SOUTH: "↓",
    Action.WEST: "←",
}

NUM_ACTIONS = 4
"""Number of executable directions, i.e. length of every Q-value vector."""


class CellKind(IntEnum):
    """Static type of a grid cell."""

    EMPTY = 0
    WALL = 1
    PIT = 2
    GOAL = 3
    START = 4

    @property
    def symbol(self) -> str:
        return _CELL_SYMBOLS[self]


_CELL_SYMBOLS = {
    CellKind.EMPTY: " ",
    CellKind.WALL: "#",
    CellKind.PIT: "-",
    CellKind.GOAL: "+",
    CellKind.START: "S",
}


class GridChannel(IntEnum):
    """
    Channel order of the channel-encoded grid.

    The flattened encoding is channel-major: entry
    ``channel * (height * width) + y * width + x``.
    """

    GOAL = 0
    PIT = 1
    WALL = 2
    PLAYER = 3


class GridLayout(IntEnum):
    """
    Named gridworld layouts.

    Any unrecognized or negative value maps to ``RANDOM``.

    Examples
    --------
    >>> GridLayout.from_value(3)
    <GridLayout.BRIDGE: 3>
    >>> GridLayout.from_value(42)
    <GridLayout.RANDOM: -1>
    >>> GridLayout.from_value("maze")
    <GridLayout.MAZE: 5>
    """

    RANDOM = -1
    EXEMPLARY = 0
    CLIFF = 1
    DISCOUNT = 2
    BRIDGE = 3
    BOOK = 4
    MAZE = 5

    @classmethod
    def from_value(cls, value: Union[int, str, "GridLayout"]) -> "GridLayout":
        if isinstance(value, GridLayout):
            return value
        if isinstance(value, str):
            name = value.strip().upper()
            if name in cls.__members__:
                return cls[name]
            try:
                value = int(name)
            except ValueError:
                return cls.RANDOM
        try:
            return cls(int(value))
        except ValueError:
            return cls.RANDOM


class EncodingMode(Enum):
    """
    How a grid state is flattened into approximator input.

    - ``CHANNELS``: goal/pit/wall/player one-hot planes, length ``4 * w * h``
    - ``AGENT``: single ``w * h`` plane with a one at the agent's cell
    """

    CHANNELS = "channels"
    AGENT = "agent"

    def input_size(self, width: int, height: int) -> int:
        if self is EncodingMode.CHANNELS:
            return len(GridChannel) * width * height
        return width * height
