"""
Named gridworld layouts.

Each layout is a list of rows, top row first. Tokens:

    " "     empty cell
    "#"     wall
    "S"     start cell
    number  terminal cell; positive is a goal, negative a pit, and the
            number is the reward collected on entering it

Layouts:

    EXEMPLARY (4x4)          CLIFF (5x3)
    ┌────┬────┬────┬────┐    . . . . .
    │    │    │    │+10 │    S . . . +10
    │    │-10 │    │    │    -100 x 5
    │    │    │ #  │    │
    │ S  │    │    │    │
    └────┴────┴────┴────┘

    DISCOUNT (5x5), BRIDGE (7x3), BOOK (4x3) and MAZE (4x5) are the
    classic gridworlds from the Berkeley AI course and Sutton & Barto.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple, Union

from ..core.enums import CellKind, GridLayout
from ..core.types import Position

Token = Union[str, int, float]
Layout = Sequence[Sequence[Token]]


LAYOUTS: Dict[GridLayout, Layout] = {
    GridLayout.EXEMPLARY: [
        [" ", " ", " ", 10],
        [" ", -10, " ", " "],
        [" ", " ", "#", " "],
        ["S", " ", " ", " "],
    ],
    GridLayout.CLIFF: [
        [" ", " ", " ", " ", " "],
        ["S", " ", " ", " ", 10],
        [-100, -100, -100, -100, -100],
    ],
    GridLayout.DISCOUNT: [
        [" ", " ", " ", " ", " "],
        [" ", "#", " ", " ", " "],
        [" ", "#", 1, "#", 10],
        ["S", " ", " ", " ", " "],
        [-10, -10, -10, -10, -10],
    ],
    GridLayout.BRIDGE: [
        ["#", -100, -100, -100, -100, -100, "#"],
        [1, "S", " ", " ", " ", " ", 10],
        ["#", -100, -100, -100, -100, -100, "#"],
    ],
    GridLayout.BOOK: [
        [" ", " ", " ", 1],
        [" ", "#", " ", -1],
        ["S", " ", " ", " "],
    ],
    GridLayout.MAZE: [
        [" ", " ", " ", 1],
        ["#", "#", " ", "#"],
        [" ", "#", " ", " "],
        [" ", "#", "#", " "],
        ["S", " ", " ", " "],
    ],
}


def layout_size(layout: GridLayout) -> Tuple[int, int]:
    """Native ``(width, height)`` of a named layout."""
    rows = LAYOUTS[layout]
    return len(rows[0]), len(rows)


def parse_layout(
    rows: Layout,
) -> Tuple[List[List[CellKind]], Dict[Position, float], Position]:
    """
    Convert a token layout into cell kinds, terminal rewards and start.

    Returns
    -------
    cells : List[List[CellKind]]
        ``cells[y][x]``
    rewards : Dict[Position, float]
        Reward of every goal and pit
    start : Position

    Raises
    ------
    ValueError
        If rows are ragged, a token is unknown, or there is not exactly
        one start cell
    """
    width = len(rows[0])
    cells: List[List[CellKind]] = []
    rewards: Dict[Position, float] = {}
    starts: List[Position] = []

    for y, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(f"row {y} has {len(row)} cells, expected {width}")
        cell_row = []
        for x, token in enumerate(row):
            if isinstance(token, (int, float)):
                if token == 0:
                    raise ValueError(f"terminal cell ({x},{y}) needs a non-zero reward")
                cell_row.append(CellKind.GOAL if token > 0 else CellKind.PIT)
                rewards[Position(x, y)] = float(token)
            elif token == " ":
                cell_row.append(CellKind.EMPTY)
            elif token == "#":
                cell_row.append(CellKind.WALL)
            elif token == "S":
                cell_row.append(CellKind.START)
                starts.append(Position(x, y))
            else:
                raise ValueError(f"unknown layout token {token!r} at ({x},{y})")
        cells.append(cell_row)

    if len(starts) != 1:
        raise ValueError(f"layout needs exactly one start cell, found {len(starts)}")

    return cells, rewards, starts[0]
