"""
Unit Tests for the Move-Noise Transition Model.
"""

from __future__ import annotations

import unittest
from collections import Counter

import numpy as np

from gridworld_rl.core import Action, ConfigurationError, GridLayout, Position
from gridworld_rl.environment import Gridworld, TransitionModel


class TestDirectionSampling(unittest.TestCase):
    """Test cases for executed-direction sampling."""

    def setUp(self):
        """Set up the exemplary grid and a seeded generator."""
        self.grid = Gridworld.generate(GridLayout.EXEMPLARY)
        self.rng = np.random.default_rng(0)

    def test_zero_noise_is_deterministic(self):
        """Test p=0 always executes the intended direction."""
        model = TransitionModel(self.grid, 0.0, self.rng)
        for action in Action.directions():
            for _ in range(200):
                self.assertIs(model.sample_direction(action), action)

    def test_full_noise_never_intended(self):
        """Test p=1 only executes the two orthogonal directions."""
        model = TransitionModel(self.grid, 1.0, self.rng)
        counts = Counter(model.sample_direction(Action.NORTH) for _ in range(4000))
        self.assertNotIn(Action.NORTH, counts)
        self.assertNotIn(Action.SOUTH, counts)
        self.assertAlmostEqual(counts[Action.WEST] / 4000, 0.5, delta=0.05)
        self.assertAlmostEqual(counts[Action.EAST] / 4000, 0.5, delta=0.05)

    def test_partial_noise_frequencies(self):
        """Test empirical slip frequencies match 1-p and p/2."""
        model = TransitionModel(self.grid, 0.2, self.rng)
        n = 20000
        counts = Counter(model.sample_direction(Action.EAST) for _ in range(n))
        self.assertNotIn(Action.WEST, counts)
        self.assertAlmostEqual(counts[Action.EAST] / n, 0.8, delta=0.02)
        self.assertAlmostEqual(counts[Action.NORTH] / n, 0.1, delta=0.02)
        self.assertAlmostEqual(counts[Action.SOUTH] / n, 0.1, delta=0.02)

    def test_random_resolves_to_direction(self):
        """Test RANDOM is resolved uniformly to the four directions."""
        model = TransitionModel(self.grid, 0.0, self.rng)
        counts = Counter(model.resolve_random(Action.RANDOM) for _ in range(4000))
        self.assertEqual(set(counts), set(Action.directions()))
        for action in Action.directions():
            self.assertAlmostEqual(counts[action] / 4000, 0.25, delta=0.05)

    def test_invalid_noise(self):
        """Test noise outside [0, 1] is rejected."""
        with self.assertRaises(ConfigurationError):
            TransitionModel(self.grid, 1.5, self.rng)
        with self.assertRaises(ConfigurationError):
            TransitionModel(self.grid, float("nan"), self.rng)


class TestOutcomes(unittest.TestCase):
    """Test cases for outcome distributions used by value iteration."""

    def setUp(self):
        """Set up the exemplary grid."""
        self.grid = Gridworld.generate(GridLayout.EXEMPLARY)
        self.rng = np.random.default_rng(0)

    def test_distribution_sums_to_one(self):
        """Test outcome probabilities sum to one everywhere."""
        model = TransitionModel(self.grid, 0.3, self.rng)
        for pos in self.grid.positions():
            if not self.grid.is_allowed(pos):
                continue
            for action in Action.directions():
                outcomes = model.outcomes(pos, action)
                self.assertLessEqual(len(outcomes), 3)
                self.assertAlmostEqual(sum(p for _, p in outcomes), 1.0)
                self.assertEqual(len({d for d, _ in outcomes}), len(outcomes))

    def test_blocked_moves_stay(self):
        """Test wall and boundary moves leave the agent in place."""
        model = TransitionModel(self.grid, 0.0, self.rng)
        self.assertEqual(
            model.outcomes(Position(0, 3), Action.SOUTH), [(Position(0, 3), 1.0)]
        )
        self.assertEqual(
            model.outcomes(Position(2, 3), Action.NORTH), [(Position(2, 3), 1.0)]
        )

    def test_blocked_slips_merge(self):
        """Test a corner merges the two blocked outcomes."""
        model = TransitionModel(self.grid, 0.2, self.rng)
        outcomes = dict(model.outcomes(Position(0, 3), Action.SOUTH))
        # South and West are blocked, East slips to (1,3)
        self.assertAlmostEqual(outcomes[Position(0, 3)], 0.9)
        self.assertAlmostEqual(outcomes[Position(1, 3)], 0.1)

    def test_zero_noise_single_outcome(self):
        """Test p=0 yields exactly the intended destination."""
        model = TransitionModel(self.grid, 0.0, self.rng)
        self.assertEqual(
            model.outcomes(Position(0, 3), Action.NORTH), [(Position(0, 2), 1.0)]
        )


class TestStep(unittest.TestCase):
    """Test cases for realized steps of the grid's agent."""

    def setUp(self):
        """Set up a deterministic model."""
        self.grid = Gridworld.generate(GridLayout.EXEMPLARY)
        self.model = TransitionModel(self.grid, 0.0, np.random.default_rng(0))

    def test_successful_step(self):
        """Test a free move relocates the agent."""
        outcome = self.model.step(Action.NORTH)
        self.assertTrue(outcome.moved)
        self.assertEqual(outcome.destination, Position(0, 2))
        self.assertEqual(self.grid.agent_position, Position(0, 2))

    def test_blocked_step(self):
        """Test a boundary move is a no-op, not an error."""
        outcome = self.model.step(Action.WEST)
        self.assertFalse(outcome.moved)
        self.assertEqual(outcome.destination, Position(0, 3))
        self.assertEqual(self.grid.agent_position, Position(0, 3))

    def test_wall_step(self):
        """Test moving into a wall is a no-op."""
        self.grid.move_player(Position(2, 3))
        outcome = self.model.step(Action.NORTH)
        self.assertFalse(outcome.moved)
        self.assertEqual(self.grid.agent_position, Position(2, 3))


if __name__ == "__main__":
    unittest.main()
