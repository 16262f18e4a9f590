"""
Experience Replay Buffer with Target Vectors.

Core Idea (核心思想)
====================
经验回放通过存储和随机采样历史交互数据，打破样本间的时序相关性。
每条经验 (s_t, a_t, s_{t+1}) 附带一个目标向量：被选动作的那一行在插入时
写入TD目标，其余行保持NaN，在采样时由当前近似器的预测补全。

Mathematical Foundation (数学基础)
==================================
Uniform sampling probability:
    P(i) = 1/|D|, ∀i ∈ D

Target vector for experience e = (s, a, s'):
    y_a   = TD target built when e was stored
    y_a'  = Q(s, a'; θ_now)   for a' ≠ a   (filled at sample time)

Complexity Analysis (复杂度分析)
================================
+------------+------------+----------------------------------+
| Operation  | Complexity | Notes                            |
+============+============+==================================+
| add()      | O(1)       | FIFO eviction via deque maxlen   |
+------------+------------+----------------------------------+
| sample()   | O(1)       | One uniform draw with replacement|
+------------+------------+----------------------------------+
| size()     | O(1)       | Cached by deque                  |
+------------+------------+----------------------------------+
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional, Tuple

import numpy as np

from ..core.enums import NUM_ACTIONS
from ..core.exceptions import ConfigurationError, EmptyBufferError
from ..core.types import Experience, ExperienceSample, FloatArray


class ExperienceReplayBuffer:
    """
    Fixed-capacity FIFO store of experiences and their target vectors.

    Parameters
    ----------
    capacity : int
        Maximum number of stored experiences C. When full, the oldest
        experience is evicted before inserting a new one.
    batch_size : int
        Minimum fill b before training may start; also the number of draws
        per training step. Must satisfy ``1 <= b <= C``.
    rng : np.random.Generator
        Shared random source used for uniform sampling

    Raises
    ------
    ConfigurationError
        If capacity or batch size are not positive integers or ``b > C``

    Examples
    --------
    >>> buffer = ExperienceReplayBuffer(capacity=3, batch_size=1,
    ...                                 rng=np.random.default_rng(0))
    >>> buffer.add(Experience(Position(0, 3), Action.NORTH, Position(0, 2)))
    >>> buffer.size()
    1
    >>> sample = buffer.sample()
    >>> sample.targets.shape
    (4,)

    Notes
    -----
    The readiness gate (``is_ready``) is advisory: ``sample`` only refuses an
    empty buffer. Deciding when to train belongs to the episode controller.
    """

    __slots__ = ("_capacity", "_batch_size", "_buffer", "_rng")

    def __init__(
        self,
        capacity: int,
        batch_size: int = 1,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        if not isinstance(capacity, int) or capacity <= 0:
            raise ConfigurationError(
                f"capacity must be a positive integer, got {capacity!r} "
                f"(type: {type(capacity).__name__})"
            )
        if not isinstance(batch_size, int) or not 0 < batch_size <= capacity:
            raise ConfigurationError(
                f"batch_size must be in [1, {capacity}], got {batch_size!r}"
            )
        self._capacity = capacity
        self._batch_size = batch_size
        self._buffer: Deque[Tuple[Experience, FloatArray]] = deque(maxlen=capacity)
        self._rng = rng if rng is not None else np.random.default_rng()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def __len__(self) -> int:
        return len(self._buffer)

    def size(self) -> int:
        """Current occupancy n, ``0 <= n <= capacity``."""
        return len(self._buffer)

    def add(self, experience: Experience, targets: Optional[FloatArray] = None) -> None:
        """
        Store an experience, evicting the oldest one if the buffer is full.

        Parameters
        ----------
        experience : Experience
            ``(state_t, action, state_t_prim)`` triple
        targets : Optional[FloatArray]
            Target vector of shape (4,). Missing entries (or the whole
            vector when None) are NaN and get filled at sample time.
        """
        if targets is None:
            stored = np.full(NUM_ACTIONS, np.nan, dtype=np.float64)
        else:
            stored = np.array(targets, dtype=np.float64).reshape(NUM_ACTIONS)
        self._buffer.append((experience, stored))

    def sample(self) -> ExperienceSample:
        """
        Draw one stored experience uniformly at random.

        Returns
        -------
        ExperienceSample
            The experience and an independent copy of its target vector;
            modifying the copy never affects the stored one

        Raises
        ------
        EmptyBufferError
            If the buffer is empty
        """
        if not self._buffer:
            raise EmptyBufferError("cannot sample from an empty replay buffer")
        index = int(self._rng.integers(len(self._buffer)))
        experience, targets = self._buffer[index]
        return ExperienceSample(experience, targets.copy())

    def sample_batch(self, n: Optional[int] = None) -> List[ExperienceSample]:
        """``n`` independent draws (default: ``batch_size``), with replacement."""
        count = self._batch_size if n is None else n
        return [self.sample() for _ in range(count)]

    def is_ready(self) -> bool:
        """True once ``size() >= batch_size``."""
        return len(self._buffer) >= self._batch_size

    def clear(self) -> None:
        self._buffer.clear()
