"""Shared fixtures: the reference column state and its expected pond update."""

import pytest

from meltpond_emulator.features import FEATURE_LONG_NAMES, FEATURE_VARS

# Reference column: cold, snow-covered level ice with no pond.
REFERENCE_STATE = {
    "dt": 3600.0,
    "n_ice_layers": 7,
    "min_ice_thickness": 0.01,
    "water_retain_fraction": 0.5,
    "top_melt_rate": 0.0,
    "snow_melt_rate": 0.0,
    "rain_rate": 0.0,
    "air_temperature": 260.0,
    "surface_heat_flux": 0.0,
    "snow_ice_depth_diff": 0.0,
    "ice_area_fraction": 0.5,
    "ice_volume": 1.0,
    "snow_volume": 0.1,
    "surface_temperature": -5.0,
    "level_ice_fraction": 1.0,
    "pond_area_fraction_in": 0.0,
    "pond_depth_in": 0.0,
    "pond_ice_thickness_in": 0.0,
}

# apnd, hpnd, ipnd, ffrac from the reference evaluation of the published tables.
REFERENCE_OUTPUT = (
    0.031848501655539249,
    0.001763323750454879,
    0.0010821918480771191,
    -0.053500271375914628,
)


@pytest.fixture
def reference_inputs():
    """Keyword arguments for `infer` (long names)."""
    return dict(REFERENCE_STATE)


@pytest.fixture
def reference_features():
    """The same state keyed by the short column-model names."""
    long_to_short = dict(zip(FEATURE_LONG_NAMES, FEATURE_VARS))
    return {long_to_short[k]: v for k, v in REFERENCE_STATE.items()}


@pytest.fixture
def reference_row():
    """The same state as a positional row in feature order."""
    return [float(REFERENCE_STATE[k]) for k in FEATURE_LONG_NAMES]


@pytest.fixture
def reference_output():
    return REFERENCE_OUTPUT
