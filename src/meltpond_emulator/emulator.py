from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Mapping, Sequence, Union

import numpy as np
import torch
import xarray as xr

from .config import EmulatorConfig
from .features import FEATURE_LONG_NAMES, FEATURE_VARS, OUTPUT_VARS, assemble_features
from .io import load_artifacts
from .layers import InverseScaler, Standardizer
from .model import PondMLP
from .network import PondNetwork, PondState
from .utils import clamp_pond_state, select_device

logger = logging.getLogger(__name__)

Number = Union[int, float]


class PondEmulator:
    """Deployment wrapper around the melt pond network.

    Public API:
        - predict_one(feature_dict) -> PondState
        - predict_many(list_of_dicts) -> list[PondState]
        - predict_matrix(X) -> np.ndarray (N, 4)
        - predict_dataframe(df) -> pandas.DataFrame | np.ndarray
        - predict_dataset(ds) -> xarray.Dataset

    Notes:
        - Requires all FEATURE_VARS for prediction (long names accepted in dicts).
        - Extra keys / columns / variables are ignored.
        - Outputs are only clamped when ``config.clamp_outputs`` is set.
    """

    def __init__(self, config: EmulatorConfig = EmulatorConfig()):
        self.config = config

        self.scaler, self.weights = load_artifacts(
            model_dir=self.config.resolved_artifacts_dir(),
            tag=str(self.config.checkpoint_tag),
        )

        if self.weights.n_inputs != len(FEATURE_VARS) or self.weights.n_outputs != len(OUTPUT_VARS):
            raise ValueError(
                f"Network maps {self.weights.n_inputs} -> {self.weights.n_outputs}, "
                f"expected {len(FEATURE_VARS)} -> {len(OUTPUT_VARS)}"
            )

        if self.config.backend == "torch":
            self.device = select_device(self.config.device)
            self.standardize = Standardizer(self.scaler.input_means, self.scaler.input_stds)
            self.unscale = InverseScaler(self.scaler.output_means, self.scaler.output_stds)
            self.model = PondMLP.from_table(self.weights)
            self.model.to(self.device)
            self.model.eval()
        else:
            self.device = None
            self.network = PondNetwork(self.weights, self.scaler)

        logger.info(
            "Melt pond emulator ready (backend=%s, artifacts=%s, hidden=%d)",
            self.config.backend,
            self.config.artifacts_dir or "published",
            self.weights.n_hidden,
        )

    def with_backend(self, backend: str) -> "PondEmulator":
        """Return a new PondEmulator with the same tables on another backend."""
        new_cfg = replace(self.config, backend=backend)  # type: ignore
        return PondEmulator(new_cfg)

    def predict_one(self, features: Mapping[str, Number]) -> PondState:
        """Predict the updated pond state for a single feature dict."""
        return self.predict_many([features])[0]

    def predict_many(self, rows: Sequence[Mapping[str, Number]], batch_size: int = 65536) -> List[PondState]:
        """Predict the updated pond state for multiple feature dicts."""
        if len(rows) == 0:
            return []

        X = self._rows_to_matrix(rows)
        Y = self.predict_matrix(X, batch_size=batch_size)
        return [PondState(*(float(v) for v in y)) for y in Y]

    def predict_matrix(self, X: np.ndarray, batch_size: int = 65536) -> np.ndarray:
        """Predict (apnd, hpnd, ipnd, ffrac) from a feature matrix.

        X must be shape (N, len(FEATURE_VARS)) in correct feature order.
        Returns np.ndarray shape (N, 4), float64.
        """
        X = np.asarray(X, dtype=np.float64)

        if X.ndim != 2 or X.shape[1] != len(FEATURE_VARS):
            raise ValueError(f"X must be shape (N, {len(FEATURE_VARS)}). Got {X.shape}.")

        logger.debug("Predicting %d rows (backend=%s)", X.shape[0], self.config.backend)

        chunks: list[np.ndarray] = []
        for start in range(0, X.shape[0], batch_size):
            chunks.append(self._forward(X[start : start + batch_size]))

        if chunks:
            Y = np.concatenate(chunks, axis=0)
        else:
            Y = np.zeros((0, len(OUTPUT_VARS)), dtype=np.float64)

        if self.config.clamp_outputs:
            Y = clamp_pond_state(Y)
        return Y

    def predict_dataframe(self, df, batch_size: int = 65536, return_frame: bool = True):
        """Predict the pond state from a pandas DataFrame.

        Requirements:
            - df must contain all FEATURE_VARS columns.
            - extra columns are ignored.

        Returns:
            - If return_frame=True (default): DataFrame with OUTPUT_VARS columns aligned to df.index.
            - Else: np.ndarray shape (N, 4).
        """
        try:
            import pandas as pd  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError("predict_dataframe requires pandas. Install it via `pip install pandas`.") from e

        if df is None:
            raise ValueError("df cannot be None")

        missing = [c for c in FEATURE_VARS if c not in df.columns]
        if missing:
            raise KeyError(f"Missing required columns in df: {missing}")

        X = df.loc[:, list(FEATURE_VARS)].to_numpy(dtype=np.float64)
        Y = self.predict_matrix(X, batch_size=batch_size)

        if not return_frame:
            return Y
        return pd.DataFrame(Y, index=df.index, columns=list(OUTPUT_VARS))

    def predict_dataset(self, ds: xr.Dataset, batch_size: int = 65536) -> xr.Dataset:
        """Predict the pond state over gridded fields held in an xarray Dataset.

        Each feature is looked up as a variable/coordinate (short or long name)
        and then as a dataset attribute, so per-run scalars such as ``dt`` or
        ``nilyr`` may live in ``ds.attrs``. All features are broadcast against
        each other, e.g. to ``(nj, ni, ncat)``.

        Returns:
            xarray.Dataset with one variable per OUTPUT_VARS entry.
        """
        fields = [self._dataset_feature(ds, short, long) for short, long in zip(FEATURE_VARS, FEATURE_LONG_NAMES)]
        fields = xr.broadcast(*fields)
        template = fields[0]

        X = np.stack([np.asarray(f.values, dtype=np.float64) for f in fields], axis=-1)
        Y = self.predict_matrix(X.reshape(-1, len(FEATURE_VARS)), batch_size=batch_size)
        Y = Y.reshape(template.shape + (len(OUTPUT_VARS),))

        out = xr.Dataset(
            {
                name: xr.DataArray(Y[..., k], dims=template.dims, coords=template.coords)
                for k, name in enumerate(OUTPUT_VARS)
            }
        )
        out.attrs["clamped"] = int(self.config.clamp_outputs)
        return out

    def _forward(self, X: np.ndarray) -> np.ndarray:
        if self.config.backend != "torch":
            return self.network(X)

        Xs = self.standardize(X)
        with torch.no_grad():
            xb = torch.tensor(Xs, dtype=torch.float64, device=self.device)
            yb = self.model(xb).detach().cpu().numpy()
        return self.unscale(yb)

    @staticmethod
    def _dataset_feature(ds, short: str, long: str):
        for name in (short, long):
            if name in ds.variables:
                return ds[name].astype("float64")
        for name in (short, long):
            if name in ds.attrs:
                return xr.DataArray(np.float64(ds.attrs[name]))
        raise KeyError(f"Feature '{short}' not found in dataset variables or attrs")

    def _rows_to_matrix(self, rows: Sequence[Mapping[str, Number]]) -> np.ndarray:
        """Convert list of feature dicts to a matrix aligned with FEATURE_VARS.

        Requires all FEATURE_VARS to exist; extra keys are ignored.
        """
        X = np.zeros((len(rows), len(FEATURE_VARS)), dtype=np.float64)

        for i, r in enumerate(rows):
            try:
                X[i, :] = assemble_features(r)
            except KeyError as e:
                raise KeyError(f"Row {i}: {e.args[0]}") from e

        return X
