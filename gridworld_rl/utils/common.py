"""
通用工具模块 - 随机种子与输出辅助函数

使用方法:
    from gridworld_rl.utils.common import set_seed, print_separator
"""

import logging
from typing import Optional

import numpy as np
import torch

logger = logging.getLogger(__name__)


def set_seed(seed: Optional[int] = None) -> np.random.Generator:
    """
    创建共享随机数生成器并设置 PyTorch 随机种子

    网格生成、转移噪声、ε-贪心和回放采样都从返回的生成器抽样，
    不使用全局随机状态。

    Args:
        seed: 随机种子值，None 表示使用系统熵

    Returns:
        np.random.Generator: 共享随机数生成器

    Example:
        >>> rng = set_seed(42)
        >>> rng.integers(4)
    """
    if seed is not None:
        torch.manual_seed(seed)
        logger.info(f"Random seed set to {seed}")
    return np.random.default_rng(seed)


def print_separator(title: str = '', char: str = '=', length: int = 60) -> None:
    """
    打印分隔线

    Args:
        title: 标题文字
        char: 分隔字符
        length: 总长度
    """
    if title:
        padding = (length - len(title) - 2) // 2
        print(f"{char * padding} {title} {char * padding}")
    else:
        print(char * length)
