from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

import joblib
import numpy as np
import torch

from .config import artifact_names
from .model import state_dict_from_table, table_from_state_dict
from .tables import PUBLISHED_SCALER, PUBLISHED_WEIGHTS, ScalerStats, WeightTable

logger = logging.getLogger(__name__)

_SCALER_KEYS = ("input_means", "input_stds", "output_means", "output_stds")


# -----------------------------
# Path resolution
# -----------------------------

def resolve_model_dir(model_dir: Optional[Union[str, Path]]) -> Optional[Path]:
    """Resolve the directory that holds the checkpoint + scaler pair.

    ``None`` means "use the tables compiled into the package".
    """
    if model_dir is None:
        return None
    return Path(model_dir).expanduser()


def assert_artifacts_exist(model_dir: Path, tag: str) -> None:
    """Raise a friendly error if required artifacts are missing."""
    ckpt, scaler = artifact_names(tag)
    ckpt_fp = model_dir / ckpt
    scaler_fp = model_dir / scaler

    missing: list[str] = []
    if not ckpt_fp.exists():
        missing.append(str(ckpt_fp))
    if not scaler_fp.exists():
        missing.append(str(scaler_fp))

    if missing:
        msg = (
            "Missing required model artifacts. Expected files at:\n"
            + "\n".join(f" - {p}" for p in missing)
            + "\n\n"
            + "Tip: confirm the artifacts directory contains files like\n"
            + f"  pond_mlp_checkpoint_{tag}.pt\n"
            + f"  pond_scaler_checkpoint_{tag}.joblib\n"
            + "or leave it unset to use the published tables."
        )
        raise FileNotFoundError(msg)


# -----------------------------
# Writers
# -----------------------------

def save_artifacts(
    model_dir: Union[str, Path],
    tag: str,
    weights: WeightTable = PUBLISHED_WEIGHTS,
    scaler: ScalerStats = PUBLISHED_SCALER,
) -> tuple[Path, Path]:
    """Write a weight table (torch state_dict) and scaler stats (joblib)."""
    md = Path(model_dir).expanduser()
    md.mkdir(parents=True, exist_ok=True)

    ckpt_name, scaler_name = artifact_names(tag)
    ckpt_fp = md / ckpt_name
    scaler_fp = md / scaler_name

    torch.save(state_dict_from_table(weights), ckpt_fp)
    joblib.dump({k: np.array(getattr(scaler, k)) for k in _SCALER_KEYS}, scaler_fp)

    logger.info("Wrote melt pond artifacts %s and %s", ckpt_fp, scaler_fp)
    return ckpt_fp, scaler_fp


# -----------------------------
# Loaders (with caching)
# -----------------------------

@lru_cache(maxsize=16)
def load_scaler(model_dir: Path, tag: str) -> ScalerStats:
    """Load (and cache) the scaler statistics for the given tag."""
    _, scaler_name = artifact_names(tag)
    scaler_fp = model_dir / scaler_name
    logger.debug("Loading scaler stats from %s", scaler_fp)

    stats = joblib.load(scaler_fp)
    missing = [k for k in _SCALER_KEYS if k not in stats]
    if missing:
        raise KeyError(f"{scaler_fp} is missing scaler tables {missing}")
    return ScalerStats(**{k: stats[k] for k in _SCALER_KEYS})


@lru_cache(maxsize=16)
def load_weight_table(model_dir: Path, tag: str) -> WeightTable:
    """Load (and cache) the torch state_dict for the given tag as a WeightTable."""
    ckpt_name, _ = artifact_names(tag)
    ckpt_fp = model_dir / ckpt_name
    logger.debug("Loading checkpoint from %s", ckpt_fp)

    state = torch.load(ckpt_fp, map_location="cpu")
    return table_from_state_dict(state)


def load_artifacts(
    model_dir: Optional[Union[str, Path]],
    tag: str,
) -> tuple[ScalerStats, WeightTable]:
    """Convenience helper: resolve dir, verify, then load scaler + weights.

    Falls back to the published tables when ``model_dir`` is None.
    """
    md = resolve_model_dir(model_dir)
    if md is None:
        logger.debug("No artifacts directory configured; using published tables")
        return PUBLISHED_SCALER, PUBLISHED_WEIGHTS

    assert_artifacts_exist(md, tag=tag)
    scaler = load_scaler(md, tag=tag)
    weights = load_weight_table(md, tag=tag)
    return scaler, weights
