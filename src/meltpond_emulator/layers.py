"""Numeric building blocks of the forward pass (numpy, float64).

Every operator here reproduces the trained pipeline bit-for-bit:

- dense layers accumulate ``kernel[i, j] * x[i]`` from a zero accumulator in
  input order and add the bias last (no BLAS reduction),
- SELU uses libm ``exp`` and leaves an exact zero (and NaN) untouched,
- the standardizer maps zero-variance features to 0.0 and pins hi_min.

All operators accept a single vector ``(n,)`` or a batch ``(..., n)``; batches
are evaluated element-wise, so each row gets the same bits as a single call.
"""

from __future__ import annotations

import math
from typing import Mapping, Optional

import numpy as np

from .tables import HI_MIN_INDEX, HI_MIN_SCALED

__all__ = [
    "SELU_SCALE",
    "SELU_ALPHA",
    "selu",
    "DenseLayer",
    "Standardizer",
    "InverseScaler",
]

SELU_SCALE = 1.05070098
SELU_ALPHA = 1.67326324

# libm exp, element by element; numpy's vectorised exp can differ by an ulp.
_exp = np.frompyfunc(math.exp, 1, 1)


def selu(x):
    """Scaled exponential linear unit with the reference branch structure.

    ``x > 0`` -> ``scale * x``; ``x < 0`` -> ``scale * alpha * (exp(x) - 1)``.
    Anything else (0.0, -0.0, NaN) is returned unchanged.
    """
    x = np.asarray(x, dtype=np.float64)
    scalar = x.ndim == 0
    x = np.atleast_1d(x)
    out = np.array(x, copy=True)

    pos = x > 0.0
    neg = x < 0.0
    out[pos] = SELU_SCALE * x[pos]
    out[neg] = SELU_SCALE * SELU_ALPHA * (_exp(x[neg]).astype(np.float64) - 1.0)

    if scalar:
        return float(out[0])
    return out


class DenseLayer:
    """Affine operator ``out[j] = bias[j] + sum_i kernel[i, j] * x[i]``.

    Args:
        kernel: array of shape (n_inputs, n_units), input-major.
        bias: array of shape (n_units,).
    """

    def __init__(self, kernel, bias):
        kernel = np.asarray(kernel, dtype=np.float64)
        bias = np.asarray(bias, dtype=np.float64)

        if kernel.ndim != 2:
            raise ValueError(f"kernel must be 2-D (n_inputs, n_units), got {kernel.shape}")
        if bias.shape != (kernel.shape[1],):
            raise ValueError(f"bias must have shape ({kernel.shape[1]},), got {bias.shape}")

        self.kernel = kernel
        self.bias = bias

    @property
    def n_inputs(self) -> int:
        return int(self.kernel.shape[0])

    @property
    def n_units(self) -> int:
        return int(self.kernel.shape[1])

    def __call__(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        if x.shape[-1:] != (self.n_inputs,):
            raise ValueError(f"expected trailing dimension {self.n_inputs}, got shape {x.shape}")

        acc = np.zeros(x.shape[:-1] + (self.n_units,), dtype=np.float64)
        for i in range(self.n_inputs):
            acc = acc + self.kernel[i] * x[..., i, None]
        return self.bias + acc


class Standardizer:
    """Per-feature z-score with a zero-variance guard and pinned features.

    ``overrides`` maps a 0-based feature index to the value written after
    scaling. The published network pins hi_min.
    """

    def __init__(self, means, stds, overrides: Optional[Mapping[int, float]] = None):
        means = np.asarray(means, dtype=np.float64)
        stds = np.asarray(stds, dtype=np.float64)
        if means.ndim != 1 or means.shape != stds.shape:
            raise ValueError(f"means/stds must be matching 1-D tables, got {means.shape} and {stds.shape}")

        if overrides is None:
            overrides = {HI_MIN_INDEX: HI_MIN_SCALED}
        for idx in overrides:
            if not 0 <= idx < means.shape[0]:
                raise ValueError(f"override index {idx} outside 0..{means.shape[0] - 1}")

        self.means = means
        self.stds = stds
        self.overrides = dict(overrides)
        self._nonzero = stds != 0.0

    def __call__(self, x: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        if x.shape[-1:] != self.means.shape:
            raise ValueError(f"expected trailing dimension {self.means.shape[0]}, got shape {x.shape}")

        z = np.zeros(x.shape, dtype=np.float64)
        np.divide(x - self.means, self.stds, out=z, where=self._nonzero)
        for idx, value in self.overrides.items():
            z[..., idx] = value
        return z


class InverseScaler:
    """Map network outputs back to physical units: ``y * std + mean``."""

    def __init__(self, means, stds):
        means = np.asarray(means, dtype=np.float64)
        stds = np.asarray(stds, dtype=np.float64)
        if means.ndim != 1 or means.shape != stds.shape:
            raise ValueError(f"means/stds must be matching 1-D tables, got {means.shape} and {stds.shape}")
        self.means = means
        self.stds = stds

    def __call__(self, y: np.ndarray) -> np.ndarray:
        y = np.asarray(y, dtype=np.float64)
        return y * self.stds + self.means
