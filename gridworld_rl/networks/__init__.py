"""
Networks Module - Q-Function Approximators.

    - QApproximator: forward/train/save/load contract
    - TorchQApproximator: PyTorch MLP trained with Adam
    - QNetwork: the MLP itself, orthogonally initialized
"""

from .approximator import QApproximator, TorchQApproximator
from .base import QNetwork, init_weights

__all__ = [
    "QApproximator",
    "TorchQApproximator",
    "QNetwork",
    "init_weights",
]
