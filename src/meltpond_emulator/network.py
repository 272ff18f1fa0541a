"""Forward pass of the level-ice melt pond emulator.

``infer`` is the drop-in replacement for the physics-based pond update: it
takes the 18 column-model quantities and returns the new pond area fraction,
pond depth, pond ice thickness and the fraction of the surface flux used to
melt pond ice. No clamping is applied to the result.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

from .features import feature_vector
from .layers import DenseLayer, InverseScaler, Standardizer, selu
from .tables import PUBLISHED_SCALER, PUBLISHED_WEIGHTS, ScalerStats, WeightTable

__all__ = ["PondState", "PondNetwork", "published_network", "infer"]


class PondState(NamedTuple):
    """Updated pond state of one ice category."""

    apnd: float
    hpnd: float
    ipnd: float
    ffrac: float


class PondNetwork:
    """Standardize -> dense + SELU -> dense + SELU -> inverse scaling."""

    def __init__(
        self,
        weights: WeightTable = PUBLISHED_WEIGHTS,
        scaler: ScalerStats = PUBLISHED_SCALER,
    ):
        if scaler.n_inputs != weights.n_inputs:
            raise ValueError(
                f"scaler has {scaler.n_inputs} input features, weights expect {weights.n_inputs}"
            )
        if scaler.n_outputs != weights.n_outputs:
            raise ValueError(
                f"scaler has {scaler.n_outputs} outputs, weights produce {weights.n_outputs}"
            )

        self.weights = weights
        self.scaler = scaler
        self.standardize = Standardizer(scaler.input_means, scaler.input_stds)
        self.hidden = DenseLayer(weights.layer_1_kernel, weights.layer_1_bias)
        self.output = DenseLayer(weights.layer_2_kernel, weights.layer_2_bias)
        self.unscale = InverseScaler(scaler.output_means, scaler.output_stds)

    @property
    def n_inputs(self) -> int:
        return self.weights.n_inputs

    @property
    def n_outputs(self) -> int:
        return self.weights.n_outputs

    def activations(self, x: np.ndarray) -> np.ndarray:
        """Network output before inverse scaling (standardized target space)."""
        z = self.standardize(x)
        h = selu(self.hidden(z))
        return selu(self.output(h))

    def forward(self, x: np.ndarray) -> np.ndarray:
        """Evaluate one FeatureVector ``(n,)`` or a batch ``(..., n)``."""
        return self.unscale(self.activations(x))

    __call__ = forward


_PUBLISHED = PondNetwork()


def published_network() -> PondNetwork:
    """The network built from the compiled-in tables (shared, read-only)."""
    return _PUBLISHED


def infer(
    dt: float,
    n_ice_layers: int,
    min_ice_thickness: float,
    water_retain_fraction: float,
    top_melt_rate: float,
    snow_melt_rate: float,
    rain_rate: float,
    air_temperature: float,
    surface_heat_flux: float,
    snow_ice_depth_diff: float,
    ice_area_fraction: float,
    ice_volume: float,
    snow_volume: float,
    surface_temperature: float,
    level_ice_fraction: float,
    pond_area_fraction_in: float,
    pond_depth_in: float,
    pond_ice_thickness_in: float,
) -> PondState:
    """Predict the updated pond state of one ice category in one grid cell.

    Units follow the column model: dt (s), min_ice_thickness (m), melt rates
    (m/s), rain rate (kg/m2/s), air temperature (K), surface heat flux (W/m2),
    surface temperature (C), ice/snow volume (m), pond depth/ice (m).

    Returns:
        PondState(apnd, hpnd, ipnd, ffrac): pond area fraction, pond depth,
        pond ice thickness and the fraction of the surface heat flux over the
        pond used to melt pond ice.
    """
    x = feature_vector(
        dt,
        n_ice_layers,
        min_ice_thickness,
        water_retain_fraction,
        top_melt_rate,
        snow_melt_rate,
        rain_rate,
        air_temperature,
        surface_heat_flux,
        snow_ice_depth_diff,
        ice_area_fraction,
        ice_volume,
        snow_volume,
        surface_temperature,
        level_ice_fraction,
        pond_area_fraction_in,
        pond_depth_in,
        pond_ice_thickness_in,
    )
    y = published_network()(x)
    return PondState(*(float(v) for v in y))
