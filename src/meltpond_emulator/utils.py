from __future__ import annotations

import numpy as np
import torch


def select_device(device: str | None = None) -> torch.device:
    if device:
        return torch.device(device)

    if torch.cuda.is_available():
        return torch.device("cuda")
    # Apple Silicon has no float64 support on mps; stay on cpu there.
    return torch.device("cpu")


def clamp_pond_state(y: np.ndarray) -> np.ndarray:
    """Bound outputs (apnd, hpnd, ipnd, ffrac) to their physical ranges.

    Fractions go to [0, 1], depth and thickness to >= 0. NaN stays NaN.
    Only used when the host asks for it; the network itself never clamps.
    """
    y = np.array(y, dtype=np.float64, copy=True)
    if y.shape[-1:] != (4,):
        raise ValueError(f"expected trailing dimension 4 (apnd, hpnd, ipnd, ffrac), got shape {y.shape}")

    y[..., 0] = np.clip(y[..., 0], 0.0, 1.0)
    y[..., 1] = np.maximum(y[..., 1], 0.0)
    y[..., 2] = np.maximum(y[..., 2], 0.0)
    y[..., 3] = np.clip(y[..., 3], 0.0, 1.0)
    return y
