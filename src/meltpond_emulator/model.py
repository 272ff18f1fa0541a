"""Torch rendition of the melt pond network.

Important:
- The layer stack MUST match the published weight tables: 18 -> 18 -> 4 with
  SELU after both dense layers.
- Linear layers accumulate input by input (no matmul) so every element sees the
  same rounding sequence as the numpy path.
- Runs in float64; the checkpoint is loaded as a regular ``state_dict``.
"""

from __future__ import annotations

from typing import Dict

import numpy as np
import torch
import torch.nn as nn

from .layers import SELU_ALPHA, SELU_SCALE
from .tables import WeightTable

__all__ = [
    "OrderedLinear",
    "ReferenceSELU",
    "PondMLP",
    "state_dict_from_table",
    "table_from_state_dict",
]


class OrderedLinear(nn.Linear):
    """``nn.Linear`` with a fixed left-to-right accumulation over inputs."""

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        acc = x.new_zeros(x.shape[:-1] + (self.out_features,))
        for i in range(self.in_features):
            acc = acc + self.weight[:, i] * x[..., i : i + 1]
        return self.bias + acc


class ReferenceSELU(nn.Module):
    """SELU that passes 0.0 and NaN through unscaled."""

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        neg = SELU_SCALE * SELU_ALPHA * (torch.exp(x) - 1.0)
        return torch.where(x > 0, SELU_SCALE * x, torch.where(x < 0, neg, x))


class PondMLP(nn.Module):
    """Two dense layers, each followed by SELU, in standardized space."""

    def __init__(self, input_dim: int = 18, hidden_dim: int = 18, output_dim: int = 4):
        super().__init__()

        for name, dim in (("input_dim", input_dim), ("hidden_dim", hidden_dim), ("output_dim", output_dim)):
            if dim <= 0:
                raise ValueError(f"{name} must be positive, got {dim}")

        # NOTE: keep this stack in sync with state_dict_from_table.
        self.net = nn.Sequential(
            OrderedLinear(input_dim, hidden_dim, dtype=torch.float64),
            ReferenceSELU(),
            OrderedLinear(hidden_dim, output_dim, dtype=torch.float64),
            ReferenceSELU(),
        )

    @classmethod
    def from_table(cls, table: WeightTable) -> "PondMLP":
        model = cls(table.n_inputs, table.n_hidden, table.n_outputs)
        model.load_state_dict(state_dict_from_table(table))
        return model

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """Forward pass.

        Args:
            x: standardized features, shape (N, input_dim), float64.

        Returns:
            Tensor of shape (N, output_dim) in standardized target space.
        """
        return self.net(x)


def state_dict_from_table(table: WeightTable) -> Dict[str, torch.Tensor]:
    """Torch weights are (out, in); the tables are input-major."""
    return {
        "net.0.weight": torch.tensor(table.layer_1_kernel.T.copy(), dtype=torch.float64),
        "net.0.bias": torch.tensor(table.layer_1_bias.copy(), dtype=torch.float64),
        "net.2.weight": torch.tensor(table.layer_2_kernel.T.copy(), dtype=torch.float64),
        "net.2.bias": torch.tensor(table.layer_2_bias.copy(), dtype=torch.float64),
    }


def table_from_state_dict(state: Dict[str, torch.Tensor]) -> WeightTable:
    missing = [k for k in ("net.0.weight", "net.0.bias", "net.2.weight", "net.2.bias") if k not in state]
    if missing:
        raise KeyError(f"Checkpoint is missing tensors {missing}")

    def _np(key: str) -> np.ndarray:
        return state[key].detach().cpu().to(torch.float64).numpy()

    return WeightTable(
        layer_1_kernel=_np("net.0.weight").T,
        layer_1_bias=_np("net.0.bias"),
        layer_2_kernel=_np("net.2.weight").T,
        layer_2_bias=_np("net.2.bias"),
    )
