"""
Unit Tests for the Experience Replay Buffer.
"""

from __future__ import annotations

import unittest
from collections import Counter

import numpy as np

from gridworld_rl.buffers import ExperienceReplayBuffer
from gridworld_rl.core import (
    Action,
    ConfigurationError,
    EmptyBufferError,
    Experience,
    Position,
)


def make_experience(i: int) -> Experience:
    return Experience(Position(i, 0), Action.EAST, Position(i + 1, 0))


class TestExperienceReplayBuffer(unittest.TestCase):
    """Test cases for ExperienceReplayBuffer."""

    def setUp(self):
        """Set up a small buffer with a seeded generator."""
        self.capacity = 5
        self.buffer = ExperienceReplayBuffer(
            self.capacity, batch_size=2, rng=np.random.default_rng(0)
        )

    def test_init(self):
        """Test buffer initialization."""
        self.assertEqual(self.buffer.size(), 0)
        self.assertEqual(len(self.buffer), 0)
        self.assertEqual(self.buffer.capacity, self.capacity)
        self.assertEqual(self.buffer.batch_size, 2)

    def test_invalid_parameters(self):
        """Test invalid capacity and batch size raise errors."""
        with self.assertRaises(ConfigurationError):
            ExperienceReplayBuffer(0)
        with self.assertRaises(ConfigurationError):
            ExperienceReplayBuffer(3, batch_size=4)
        with self.assertRaises(ValueError):
            ExperienceReplayBuffer(3, batch_size=0)

    def test_sample_empty(self):
        """Test sampling an empty buffer raises EmptyBufferError."""
        with self.assertRaises(EmptyBufferError):
            self.buffer.sample()

    def test_fifo_eviction(self):
        """Test C+1 insertions keep exactly the most recent C experiences."""
        for i in range(self.capacity + 1):
            self.buffer.add(make_experience(i))
            self.assertLessEqual(self.buffer.size(), self.capacity)
        self.assertEqual(self.buffer.size(), self.capacity)

        seen = {self.buffer.sample().experience for _ in range(500)}
        expected = {make_experience(i) for i in range(1, self.capacity + 1)}
        self.assertEqual(seen, expected)

    def test_uniform_sampling(self):
        """Test every stored experience is drawn with similar frequency."""
        for i in range(self.capacity):
            self.buffer.add(make_experience(i))
        n = 10000
        counts = Counter(self.buffer.sample().experience.state_t.x for _ in range(n))
        for i in range(self.capacity):
            self.assertAlmostEqual(counts[i] / n, 1 / self.capacity, delta=0.02)

    def test_default_targets_are_nan(self):
        """Test targets default to NaN for later filling."""
        self.buffer.add(make_experience(0))
        targets = self.buffer.sample().targets
        self.assertEqual(targets.shape, (4,))
        self.assertTrue(np.isnan(targets).all())

    def test_sample_is_independent_copy(self):
        """Test mutating a sampled target does not change the stored one."""
        targets = np.array([np.nan, 1.5, np.nan, np.nan])
        self.buffer.add(make_experience(0), targets)
        targets[1] = 99.0

        first = self.buffer.sample()
        self.assertEqual(first.targets[1], 1.5)
        first.targets[:] = 0.0

        second = self.buffer.sample()
        self.assertEqual(second.targets[1], 1.5)
        self.assertTrue(np.isnan(second.targets[0]))

    def test_is_ready(self):
        """Test the readiness gate follows batch_size."""
        self.assertFalse(self.buffer.is_ready())
        self.buffer.add(make_experience(0))
        self.assertFalse(self.buffer.is_ready())
        self.buffer.add(make_experience(1))
        self.assertTrue(self.buffer.is_ready())

    def test_sample_batch(self):
        """Test batch sampling returns batch_size draws by default."""
        self.buffer.add(make_experience(0))
        self.assertEqual(len(self.buffer.sample_batch()), 2)
        self.assertEqual(len(self.buffer.sample_batch(7)), 7)

    def test_clear(self):
        """Test buffer clearing."""
        self.buffer.add(make_experience(0))
        self.buffer.clear()
        self.assertEqual(self.buffer.size(), 0)


if __name__ == "__main__":
    unittest.main()
