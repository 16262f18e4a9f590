"""
Q-Function Approximators.

The episode controller only relies on the ``QApproximator`` contract:
``forward`` returns four Q-values for an encoded state and ``train`` takes
one optimizer step towards a full target vector. ``TorchQApproximator``
backs the contract with a PyTorch MLP trained by Adam on a squared error.
"""

from __future__ import annotations

import logging
import pickle
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence, Union

import numpy as np
import torch
import torch.nn.functional as F
import torch.optim as optim

from ..core.enums import NUM_ACTIONS
from ..core.types import FloatArray
from .base import QNetwork

logger = logging.getLogger(__name__)


class QApproximator(ABC):
    """Function approximator contract: ``forward``, ``train``, ``save``, ``load``."""

    @abstractmethod
    def forward(self, encoded_state: FloatArray) -> FloatArray:
        """
        Q-values of the four directions.

        Returns a fresh array of shape (4,) for a single state, or
        (batch, 4) for a batch; callers may mutate it freely.
        """

    @abstractmethod
    def train(
        self,
        encoded_state: FloatArray,
        target: FloatArray,
        learning_rate: float,
        weight_decay: float = 0.0,
    ) -> float:
        """One optimization step towards ``target``; returns the loss."""

    def save(self, path: Union[str, Path]) -> bool:
        return False

    def load(self, path: Union[str, Path]) -> bool:
        return False


class TorchQApproximator(QApproximator):
    """
    MLP approximator trained with Adam on the mean squared TD error.

    Parameters
    ----------
    input_dim : int
        Length of the encoded state vector
    hidden_dims : Sequence[int], default=(250, 100)
        Hidden layer sizes of the ``QNetwork``
    device : str or torch.device, default="cpu"
        Execution device

    Attributes
    ----------
    q_network : QNetwork
        The trained network
    optimizer : torch.optim.Adam
        Optimizer whose learning rate and weight decay are set per call

    Examples
    --------
    >>> approximator = TorchQApproximator(input_dim=64)
    >>> q = approximator.forward(np.zeros(64, dtype=np.float32))
    >>> q.shape
    (4,)
    >>> loss = approximator.train(np.zeros(64), np.ones(4), learning_rate=1e-2)
    """

    def __init__(
        self,
        input_dim: int,
        hidden_dims: Sequence[int] = (250, 100),
        device: Union[str, torch.device] = "cpu",
    ) -> None:
        self.input_dim = input_dim
        self.device = torch.device(device)
        self.q_network = QNetwork(input_dim, hidden_dims).to(self.device)
        self.optimizer = optim.Adam(self.q_network.parameters(), lr=1e-3)
        self._train_steps = 0

    @property
    def train_steps(self) -> int:
        return self._train_steps

    def _to_tensor(self, array: FloatArray) -> torch.Tensor:
        tensor = torch.as_tensor(np.asarray(array, dtype=np.float32), device=self.device)
        return tensor.unsqueeze(0) if tensor.dim() == 1 else tensor

    def forward(self, encoded_state: FloatArray) -> FloatArray:
        single = np.ndim(encoded_state) == 1
        self.q_network.eval()
        with torch.no_grad():
            q_values = self.q_network(self._to_tensor(encoded_state))
        q_values = q_values.cpu().numpy().astype(np.float64)
        return q_values[0] if single else q_values

    def train(
        self,
        encoded_state: FloatArray,
        target: FloatArray,
        learning_rate: float,
        weight_decay: float = 0.0,
    ) -> float:
        """
        One Adam step on ``MSE(Q(s, ·), target)``.

        Parameters
        ----------
        encoded_state : FloatArray
            Shape (d,) or (batch, d)
        target : FloatArray
            Shape (4,) or (batch, 4); every entry must be finite
        learning_rate : float
            Step size applied to this update
        weight_decay : float, default=0.0
            L2 penalty applied to this update

        Returns
        -------
        float
            Loss before the update

        Raises
        ------
        ValueError
            If the target contains NaN/inf or its shape does not match
        """
        states = self._to_tensor(encoded_state)
        targets = self._to_tensor(target)
        if targets.shape != (states.shape[0], NUM_ACTIONS):
            raise ValueError(
                f"target shape {tuple(targets.shape)} does not match "
                f"({states.shape[0]}, {NUM_ACTIONS})"
            )
        if not torch.isfinite(targets).all():
            raise ValueError("target contains non-finite values")

        for group in self.optimizer.param_groups:
            group["lr"] = learning_rate
            group["weight_decay"] = weight_decay

        self.q_network.train()
        loss = F.mse_loss(self.q_network(states), targets)
        self.optimizer.zero_grad()
        loss.backward()
        self.optimizer.step()

        self._train_steps += 1
        return loss.item()

    def save(self, path: Union[str, Path]) -> bool:
        checkpoint = {
            "input_dim": self.input_dim,
            "q_network": self.q_network.state_dict(),
            "optimizer": self.optimizer.state_dict(),
            "train_steps": self._train_steps,
        }
        try:
            path = Path(path)
            path.parent.mkdir(parents=True, exist_ok=True)
            torch.save(checkpoint, path)
        except OSError as exc:
            logger.warning(f"Could not save approximator to {path}: {exc}")
            return False
        logger.info(f"Saved approximator to {path}")
        return True

    def load(self, path: Union[str, Path]) -> bool:
        """Restore network and optimizer state; False if the file is unusable."""
        path = Path(path)
        if not path.is_file():
            logger.warning(f"No approximator checkpoint at {path}")
            return False
        try:
            checkpoint = torch.load(path, map_location=self.device, weights_only=False)
            self.q_network.load_state_dict(checkpoint["q_network"])
            self.optimizer.load_state_dict(checkpoint["optimizer"])
        except (OSError, EOFError, KeyError, RuntimeError, pickle.UnpicklingError) as exc:
            logger.warning(f"Could not load approximator from {path}: {exc}")
            return False
        self._train_steps = checkpoint.get("train_steps", 0)
        logger.info(f"Loaded approximator from {path}")
        return True
