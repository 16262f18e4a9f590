"""
Q-Network for Gridworld States.

Core Idea (核心思想)
====================
多层感知机将编码后的网格状态映射到四个方向动作的Q值：

    f_θ: ℝ^d → ℝ^4,   d = 4·W·H (channels) 或 W·H (agent)

使用正交初始化提高训练稳定性，ReLU激活函数引入非线性。

Mathematical Foundation (数学基础)
==================================
Forward computation:
    h_1 = ReLU(W_1 x + b_1)
    h_l = ReLU(W_l h_{l-1} + b_l)
    Q(s,·) = W_out h_L + b_out

The output layer is linear: Q-values are unbounded and may be negative.
"""

from __future__ import annotations

import math
from typing import List, Sequence

import torch.nn as nn
from torch import Tensor

from ..core.enums import NUM_ACTIONS


def init_weights(module: nn.Module, gain: float = math.sqrt(2)) -> None:
    """
    Orthogonal initialization of linear layers, zero biases.

    Parameters
    ----------
    module : nn.Module
        Module to initialize (non-linear modules are left untouched)
    gain : float, default=sqrt(2)
        Scaling factor suited to ReLU
    """
    if isinstance(module, nn.Linear):
        nn.init.orthogonal_(module.weight, gain=gain)
        if module.bias is not None:
            nn.init.zeros_(module.bias)


class QNetwork(nn.Module):
    """
    Fully connected Q-network with one output per direction.

    Parameters
    ----------
    input_dim : int
        Length of the encoded grid vector
    hidden_dims : Sequence[int], default=(250, 100)
        Sizes of the hidden layers
    output_dim : int, default=4
        Number of directional actions

    Examples
    --------
    >>> net = QNetwork(input_dim=64)
    >>> net(torch.zeros(1, 64)).shape
    torch.Size([1, 4])
    """

    def __init__(
        self,
        input_dim: int,
        hidden_dims: Sequence[int] = (250, 100),
        output_dim: int = NUM_ACTIONS,
    ) -> None:
        super().__init__()

        self.input_dim = input_dim
        self.output_dim = output_dim

        layers: List[nn.Module] = []
        prev_dim = input_dim
        for hidden_dim in hidden_dims:
            layers.extend([
                nn.Linear(prev_dim, hidden_dim),
                nn.ReLU(inplace=True),
            ])
            prev_dim = hidden_dim
        layers.append(nn.Linear(prev_dim, output_dim))

        self.network = nn.Sequential(*layers)
        self.apply(init_weights)
        # Small output weights keep initial Q-values near zero
        init_weights(self.network[-1], gain=0.01)

    def forward(self, state: Tensor) -> Tensor:
        return self.network(state)
