"""
Episode Statistics.

Core Idea (核心思想)
====================
控制循环每个episode结束时追加一组命名标量序列（步数、平均步数、收集奖励、
平均收集奖励）。统计只用于外部报告，不影响学习过程。

外部读取方（可视化、导出）可能与控制循环并发读取序列，
因此提供 ``lock`` 作为调用方持有的互斥区。
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

NUMBER_OF_STEPS = "number_of_steps"
AVERAGE_NUMBER_OF_STEPS = "average_number_of_steps"
COLLECTED_REWARD = "collected_reward"
AVERAGE_COLLECTED_REWARD = "average_collected_reward"

EPISODE_SERIES = (
    NUMBER_OF_STEPS,
    AVERAGE_NUMBER_OF_STEPS,
    COLLECTED_REWARD,
    AVERAGE_COLLECTED_REWARD,
)


@dataclass
class StatisticsCollector:
    """
    Named scalar series appended once per episode.

    Attributes
    ----------
    series : Dict[str, List[float]]
        Recorded values per series name
    window_size : int
        Window of the moving average reported by ``summary``
    lock : threading.RLock
        Mutual-exclusion scope for readers on other threads

    Examples
    --------
    >>> stats = StatisticsCollector()
    >>> stats.add("number_of_steps", 6)
    >>> stats.latest("number_of_steps")
    6.0
    >>> with stats.lock:
    ...     values = stats.get("number_of_steps")
    """

    window_size: int = 100
    series: Dict[str, List[float]] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def add(self, name: str, value: float) -> None:
        with self.lock:
            self.series.setdefault(name, []).append(float(value))

    def add_many(self, values: Dict[str, float]) -> None:
        """Append one value to several series atomically."""
        with self.lock:
            for name, value in values.items():
                self.series.setdefault(name, []).append(float(value))

    def get(self, name: str) -> List[float]:
        """Copy of a series (empty if never recorded)."""
        with self.lock:
            return list(self.series.get(name, []))

    def latest(self, name: str) -> Optional[float]:
        with self.lock:
            values = self.series.get(name)
            return values[-1] if values else None

    def __len__(self) -> int:
        with self.lock:
            return max((len(v) for v in self.series.values()), default=0)

    def snapshot(self) -> Dict[str, List[float]]:
        """Deep copy of all series."""
        with self.lock:
            return {name: list(values) for name, values in self.series.items()}

    def summary(self) -> Dict[str, float]:
        """Latest value and windowed mean of every series."""
        with self.lock:
            result: Dict[str, float] = {}
            for name, values in self.series.items():
                if not values:
                    continue
                result[name] = values[-1]
                result[f"{name}_window_mean"] = float(
                    np.mean(values[-self.window_size:])
                )
            return result

    def clear(self) -> None:
        with self.lock:
            self.series.clear()
