"""
Unit Tests for the Gridworld Model and Reward Model.

Tests layouts, geometric queries, encodings and random generation.
"""

from __future__ import annotations

import unittest
from unittest import mock

import numpy as np

from gridworld_rl.core import (
    Action,
    CellKind,
    ConfigurationError,
    EncodingMode,
    GridChannel,
    GridLayout,
    GridworldConfig,
    Position,
)
from gridworld_rl.environment import (
    LAYOUTS,
    Gridworld,
    RewardModel,
    layout_size,
    parse_layout,
)


class TestLayouts(unittest.TestCase):
    """Test cases for the named layouts."""

    def test_native_sizes(self):
        """Test native layout dimensions."""
        self.assertEqual(layout_size(GridLayout.EXEMPLARY), (4, 4))
        self.assertEqual(layout_size(GridLayout.CLIFF), (5, 3))
        self.assertEqual(layout_size(GridLayout.DISCOUNT), (5, 5))
        self.assertEqual(layout_size(GridLayout.BRIDGE), (7, 3))
        self.assertEqual(layout_size(GridLayout.BOOK), (4, 3))
        self.assertEqual(layout_size(GridLayout.MAZE), (4, 5))

    def test_all_layouts_build(self):
        """Test every named layout produces a valid grid."""
        for layout in LAYOUTS:
            grid = Gridworld.generate(layout)
            self.assertEqual((grid.width, grid.height), layout_size(layout))
            self.assertTrue(grid.is_allowed(grid.start))
            self.assertFalse(grid.is_terminal(grid.start))

    def test_parse_layout(self):
        """Test token parsing into cells, rewards and start."""
        cells, rewards, start = parse_layout([["S", "#"], [5, -2]])
        self.assertEqual(cells[0][1], CellKind.WALL)
        self.assertEqual(cells[1][0], CellKind.GOAL)
        self.assertEqual(cells[1][1], CellKind.PIT)
        self.assertEqual(rewards, {Position(0, 1): 5.0, Position(1, 1): -2.0})
        self.assertEqual(start, Position(0, 0))

    def test_parse_layout_invalid(self):
        """Test malformed layouts are rejected."""
        with self.assertRaises(ValueError):
            parse_layout([["S", " "], [" "]])
        with self.assertRaises(ValueError):
            parse_layout([[" ", " "]])
        with self.assertRaises(ValueError):
            parse_layout([["S", "x"]])

    def test_layout_from_name(self):
        """Test layout lookup by name and unknown values."""
        self.assertIs(GridLayout.from_value("cliff"), GridLayout.CLIFF)
        self.assertIs(GridLayout.from_value(5), GridLayout.MAZE)
        self.assertIs(GridLayout.from_value(-1), GridLayout.RANDOM)
        self.assertIs(GridLayout.from_value(17), GridLayout.RANDOM)
        self.assertIs(GridLayout.from_value("-1"), GridLayout.RANDOM)


class TestGridworld(unittest.TestCase):
    """Test cases for Gridworld queries on the exemplary layout."""

    def setUp(self):
        """Set up the exemplary 4x4 grid."""
        self.grid = Gridworld.generate(GridLayout.EXEMPLARY)

    def test_exemplary_geometry(self):
        """Test start, goal, pit and wall positions."""
        self.assertEqual(self.grid.start, Position(0, 3))
        self.assertEqual(self.grid.agent_position, Position(0, 3))
        self.assertEqual(self.grid.cell(Position(3, 0)), CellKind.GOAL)
        self.assertEqual(self.grid.cell(Position(1, 1)), CellKind.PIT)
        self.assertEqual(self.grid.cell(Position(2, 2)), CellKind.WALL)

    def test_is_allowed(self):
        """Test walls and out-of-bounds cells are not allowed, others are."""
        for pos in self.grid.positions():
            expected = self.grid.cell(pos) is not CellKind.WALL
            self.assertEqual(self.grid.is_allowed(pos), expected)
        self.assertFalse(self.grid.is_allowed(Position(-1, 0)))
        self.assertFalse(self.grid.is_allowed(Position(0, 4)))
        self.assertFalse(self.grid.is_allowed(Position(4, 0)))

    def test_is_terminal(self):
        """Test pits and goals are terminal."""
        self.assertTrue(self.grid.is_terminal(Position(3, 0)))
        self.assertTrue(self.grid.is_terminal(Position(1, 1)))
        self.assertFalse(self.grid.is_terminal(Position(0, 0)))
        self.assertFalse(self.grid.is_terminal(Position(2, 2)))

    def test_reward_at(self):
        """Test terminal rewards and the shared step reward."""
        self.assertEqual(self.grid.reward_at(Position(3, 0), -0.1), 10.0)
        self.assertEqual(self.grid.reward_at(Position(1, 1), -0.1), -10.0)
        self.assertEqual(self.grid.reward_at(Position(0, 0), -0.1), -0.1)

    def test_allowed_actions(self):
        """Test allowed actions at a corner and next to the wall."""
        self.assertEqual(
            self.grid.allowed_actions(Position(0, 3)), [Action.NORTH, Action.EAST]
        )
        self.assertEqual(
            self.grid.allowed_actions(Position(2, 3)),
            [Action.EAST, Action.WEST],
        )

    def test_move_player_and_reset(self):
        """Test agent relocation and reset to start."""
        self.grid.move_player(Position(1, 3))
        self.assertEqual(self.grid.agent_position, Position(1, 3))
        self.grid.move_player(Position(1, 3))
        self.assertEqual(self.grid.agent_position, Position(1, 3))
        self.grid.reset()
        self.assertEqual(self.grid.agent_position, self.grid.start)

    def test_copy_is_independent(self):
        """Test copies do not share the agent position."""
        clone = self.grid.copy()
        clone.move_player(Position(1, 3))
        self.assertEqual(self.grid.agent_position, Position(0, 3))

    def test_reachability(self):
        """Test goal reachability by breadth-first search."""
        self.assertTrue(self.grid.is_reachable(Position(3, 0)))

    def test_size_too_small(self):
        """Test requesting a size below the native layout size."""
        with self.assertRaises(ConfigurationError):
            Gridworld.generate(GridLayout.EXEMPLARY, width=3, height=4)

    def test_size_larger_ignored(self):
        """Test a larger requested size keeps the native layout."""
        grid = Gridworld.generate(GridLayout.EXEMPLARY, width=8, height=8)
        self.assertEqual((grid.width, grid.height), (4, 4))

    def test_rendering(self):
        """Test the character rendering shows agent and walls."""
        text = self.grid.to_string()
        lines = text.splitlines()
        self.assertEqual(len(lines), 4)
        self.assertIn("@", lines[3])
        self.assertIn("#", lines[2])


class TestEncoding(unittest.TestCase):
    """Test cases for approximator input encodings."""

    def setUp(self):
        """Set up the exemplary grid."""
        self.grid = Gridworld.generate(GridLayout.EXEMPLARY)
        self.cells = self.grid.width * self.grid.height

    def test_channel_encoding_layout(self):
        """Test channel-major one-hot planes."""
        encoded = self.grid.encode(EncodingMode.CHANNELS)
        self.assertEqual(encoded.shape, (4 * self.cells,))
        planes = encoded.reshape(4, self.grid.height, self.grid.width)
        self.assertEqual(planes[GridChannel.GOAL, 0, 3], 1.0)
        self.assertEqual(planes[GridChannel.PIT, 1, 1], 1.0)
        self.assertEqual(planes[GridChannel.WALL, 2, 2], 1.0)
        self.assertEqual(planes[GridChannel.PLAYER, 3, 0], 1.0)
        self.assertEqual(planes.sum(), 4.0)

    def test_agent_encoding(self):
        """Test agent-only plane."""
        encoded = self.grid.encode(EncodingMode.AGENT)
        self.assertEqual(encoded.shape, (self.cells,))
        self.assertEqual(encoded.sum(), 1.0)
        self.assertEqual(encoded[3 * self.grid.width + 0], 1.0)

    def test_hypothetical_agent_position(self):
        """Test encoding another position does not move the agent."""
        encoded = self.grid.encode(EncodingMode.AGENT, agent_position=Position(1, 0))
        self.assertEqual(encoded[1], 1.0)
        self.assertEqual(self.grid.agent_position, Position(0, 3))

    def test_deterministic(self):
        """Test identical grid state gives identical encodings."""
        np.testing.assert_array_equal(self.grid.encode(), self.grid.encode())

    def test_input_size(self):
        """Test EncodingMode input sizes match encodings."""
        self.assertEqual(
            EncodingMode.CHANNELS.input_size(4, 4), self.grid.encode().size
        )
        self.assertEqual(
            EncodingMode.AGENT.input_size(4, 4),
            self.grid.encode(EncodingMode.AGENT).size,
        )


class TestRandomGrid(unittest.TestCase):
    """Test cases for randomly generated grids."""

    def test_random_grid_contents(self):
        """Test one wall, goal, pit and start on distinct cells."""
        rng = np.random.default_rng(3)
        for _ in range(20):
            grid = Gridworld.generate(GridLayout.RANDOM, 5, 4, rng=rng)
            kinds = [grid.cell(pos) for pos in grid.positions()]
            self.assertEqual(kinds.count(CellKind.WALL), 1)
            self.assertEqual(kinds.count(CellKind.GOAL), 1)
            self.assertEqual(kinds.count(CellKind.PIT), 1)
            self.assertEqual(kinds.count(CellKind.START), 1)
            goal = next(p for p in grid.positions() if grid.cell(p) is CellKind.GOAL)
            self.assertTrue(grid.is_reachable(goal))

    def test_random_grid_seeded(self):
        """Test the same seed reproduces the same grid."""
        a = Gridworld.generate(-1, 4, 4, rng=np.random.default_rng(11))
        b = Gridworld.generate(-1, 4, 4, rng=np.random.default_rng(11))
        self.assertEqual(a.to_string(), b.to_string())

    def test_unreachable_goal_keeps_last_placement(self):
        """Test exhausted placement retries warn and return the last grid."""
        with mock.patch("gridworld_rl.environment.grid.MAX_PLACEMENT_ATTEMPTS", 3), \
                mock.patch.object(Gridworld, "is_reachable", return_value=False) as reachable:
            with self.assertLogs("gridworld_rl.environment.grid", level="WARNING") as logs:
                grid = Gridworld.generate(
                    GridLayout.RANDOM, 2, 2, rng=np.random.default_rng(0)
                )
        self.assertEqual(reachable.call_count, 3)
        self.assertIn("after 3 attempts", logs.output[0])
        kinds = sorted(grid.cell(pos).name for pos in grid.positions())
        self.assertEqual(kinds, ["GOAL", "PIT", "START", "WALL"])

    def test_random_grid_requires_size(self):
        """Test random grids need width and height."""
        with self.assertRaises(ConfigurationError):
            Gridworld.generate(GridLayout.RANDOM)
        with self.assertRaises(ConfigurationError):
            Gridworld.generate(GridLayout.RANDOM, 1, 4)

    def test_from_config(self):
        """Test building from a GridworldConfig."""
        config = GridworldConfig(layout="bridge")
        grid = Gridworld.from_config(config)
        self.assertEqual((grid.width, grid.height), (7, 3))
        self.assertEqual(grid.start, Position(1, 1))


class TestRewardModel(unittest.TestCase):
    """Test cases for destination-attributed rewards."""

    def setUp(self):
        """Set up a reward model with a negative step reward."""
        self.grid = Gridworld.generate(GridLayout.EXEMPLARY)
        self.rewards = RewardModel(self.grid, step_reward=-0.04)

    def test_destination_rewards(self):
        """Test goal, pit and step rewards."""
        self.assertEqual(self.rewards.reward(Position(3, 0)), 10.0)
        self.assertEqual(self.rewards.reward(Position(1, 1)), -10.0)
        self.assertAlmostEqual(self.rewards.reward(Position(0, 2)), -0.04)

    def test_terminal_classification(self):
        """Test terminal queries delegate to the grid."""
        self.assertTrue(self.rewards.is_terminal(Position(3, 0)))
        self.assertFalse(self.rewards.is_terminal(Position(0, 3)))

    def test_non_finite_step_reward(self):
        """Test a non-finite step reward is rejected."""
        with self.assertRaises(ConfigurationError):
            RewardModel(self.grid, step_reward=float("nan"))


if __name__ == "__main__":
    unittest.main()
