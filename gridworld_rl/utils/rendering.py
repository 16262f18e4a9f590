"""
Text renderings of grids, value tables, policies and Q-responses.

All functions return strings; callers decide whether to log or print them.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional

import numpy as np

from ..core.enums import Action, CellKind
from ..core.types import FloatArray, Position
from ..environment.grid import Gridworld


def _cell_label(grid: Gridworld, pos: Position) -> Optional[str]:
    """Fixed label for walls and terminal cells, None for free cells."""
    kind = grid.cell(pos)
    if kind is CellKind.WALL:
        return "#"
    if grid.is_terminal(pos):
        return f"{grid.reward_at(pos, 0.0):+g}"
    return None


def _table(rows, width: int) -> str:
    lines = []
    for row in rows:
        lines.append(" ".join(cell.rjust(width) for cell in row))
    return "\n".join(lines)


def render_values(grid: Gridworld, values: FloatArray, precision: int = 2) -> str:
    """State-value table, walls as ``#`` and terminals as their reward."""
    rows = []
    for y in range(grid.height):
        row = []
        for x in range(grid.width):
            pos = Position(x, y)
            label = _cell_label(grid, pos)
            row.append(label if label is not None else f"{values[y, x]:.{precision}f}")
        rows.append(row)
    return _table(rows, precision + 5)


def render_policy(grid: Gridworld, policy: Mapping[Position, Action]) -> str:
    """Greedy action arrows; ``S`` marks a start cell without a policy entry."""
    rows = []
    for y in range(grid.height):
        row = []
        for x in range(grid.width):
            pos = Position(x, y)
            label = _cell_label(grid, pos)
            if label is None:
                action = policy.get(pos)
                label = action.arrow if action is not None else "."
            row.append(label)
        rows.append(row)
    return _table(rows, 5)


def render_q_table(
    grid: Gridworld,
    estimate: Callable[[Position], FloatArray],
    precision: int = 2,
) -> str:
    """
    Q-response of an estimator over every free cell.

    Each cell prints ``N/E/S/W`` values on one line, e.g.
    ``(0,3) N=+1.23 E=+0.98 S=-0.10 W=-0.10``.
    """
    lines = []
    for pos in grid.positions():
        if _cell_label(grid, pos) is not None:
            continue
        q_values = np.asarray(estimate(pos), dtype=np.float64)
        entries = " ".join(
            f"{action!s}={q_values[action]:+.{precision}f}"
            for action in Action.directions()
        )
        lines.append(f"{pos} {entries}")
    return "\n".join(lines)
