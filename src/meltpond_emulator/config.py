from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional, Union

Backend = Literal["numpy", "torch"]

BACKENDS: tuple[str, ...] = ("numpy", "torch")


def artifact_names(tag: str) -> tuple[str, str]:
    """Return (checkpoint_filename, scaler_filename) for a checkpoint tag."""
    ckpt = f"pond_mlp_checkpoint_{tag}.pt"
    scaler = f"pond_scaler_checkpoint_{tag}.joblib"
    return ckpt, scaler


@dataclass(frozen=True)
class EmulatorConfig:
    """
    Configuration for the melt pond emulator.

    With ``artifacts_dir=None`` the tables compiled into the package are used;
    otherwise a checkpoint + scaler pair is loaded from that directory.
    """
    backend: Backend = "numpy"

    artifacts_dir: Optional[Union[str, Path]] = None

    # Filenames are "pond_mlp_checkpoint_<tag>.pt" / "pond_scaler_checkpoint_<tag>.joblib"
    checkpoint_tag: str = "published"

    # Optional override for the torch backend: "cpu", "cuda", "cuda:1". mps is rejected (no float64).
    device: Optional[str] = None

    # Clip fractions to [0, 1] and depths to >= 0. Off to match the validated outputs.
    clamp_outputs: bool = False

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(f"backend must be one of {BACKENDS}, got {self.backend!r}")
        if self.device is not None and str(self.device).startswith("mps"):
            raise ValueError("device 'mps' has no float64 support; use 'cpu' or 'cuda'")

    def resolved_artifacts_dir(self) -> Optional[Path]:
        """
        Returns an absolute, expanded path to the artifacts directory, or None
        when the compiled-in tables are used.
        """
        if self.artifacts_dir is None:
            return None
        p = Path(self.artifacts_dir).expanduser()
        return p if p.is_absolute() else (Path.cwd() / p).resolve()

    def model_path(self) -> Optional[Path]:
        base = self.resolved_artifacts_dir()
        if base is None:
            return None
        return base / artifact_names(self.checkpoint_tag)[0]

    def scaler_path(self) -> Optional[Path]:
        base = self.resolved_artifacts_dir()
        if base is None:
            return None
        return base / artifact_names(self.checkpoint_tag)[1]
