"""
Algorithms Module - Exact Dynamic Programming.

    - ValueIterationEngine: synchronous Bellman backups over the whole grid
    - ValueIterationResult: converged table plus sweep statistics
"""

from .value_iteration import ValueIterationEngine, ValueIterationResult

__all__ = ["ValueIterationEngine", "ValueIterationResult"]
