"""
Buffers Module - Experience Replay.

    - ExperienceReplayBuffer: FIFO store of (s_t, a_t, s_{t+1}) with target
      vectors, sampled uniformly with replacement
"""

from .replay import ExperienceReplayBuffer

__all__ = ["ExperienceReplayBuffer"]
