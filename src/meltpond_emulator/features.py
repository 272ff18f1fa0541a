"""Feature and target naming for the melt pond network.

The order of FEATURE_VARS is the order the network was trained on and MUST NOT
change. Short names follow the column model's variable names; every feature
also has a descriptive long name accepted wherever a mapping is read.
"""

from __future__ import annotations

from typing import Mapping, Union

import numpy as np

__all__ = [
    "FEATURE_VARS",
    "FEATURE_LONG_NAMES",
    "OUTPUT_VARS",
    "OUTPUT_LONG_NAMES",
    "assemble_features",
    "feature_vector",
]

Number = Union[int, float]

FEATURE_VARS: tuple[str, ...] = (
    "dt",
    "nilyr",
    "hi_min",
    "rfrac",
    "meltt",
    "melts",
    "frain",
    "Tair",
    "fsurfn",
    "dhs",
    "aicen",
    "vicen",
    "vsnon",
    "Tsfcn",
    "alvl",
    "apnd",
    "hpnd",
    "ipnd",
)

# Same order as FEATURE_VARS; these are the keyword names of `infer`.
FEATURE_LONG_NAMES: tuple[str, ...] = (
    "dt",
    "n_ice_layers",
    "min_ice_thickness",
    "water_retain_fraction",
    "top_melt_rate",
    "snow_melt_rate",
    "rain_rate",
    "air_temperature",
    "surface_heat_flux",
    "snow_ice_depth_diff",
    "ice_area_fraction",
    "ice_volume",
    "snow_volume",
    "surface_temperature",
    "level_ice_fraction",
    "pond_area_fraction_in",
    "pond_depth_in",
    "pond_ice_thickness_in",
)

OUTPUT_VARS: tuple[str, ...] = ("apnd", "hpnd", "ipnd", "ffrac")

OUTPUT_LONG_NAMES: tuple[str, ...] = (
    "pond_area_fraction_out",
    "pond_depth_out",
    "pond_ice_thickness_out",
    "flux_fraction_out",
)

_LONG_TO_SHORT = dict(zip(FEATURE_LONG_NAMES, FEATURE_VARS))


def feature_vector(*values: Number) -> np.ndarray:
    """Pack the 18 inputs, given positionally in FEATURE_VARS order.

    No range checks: NaN/Inf are carried through unchanged.
    """
    if len(values) != len(FEATURE_VARS):
        raise ValueError(f"Expected {len(FEATURE_VARS)} features, got {len(values)}")

    x = np.array([float(v) for v in values], dtype=np.float64)
    x.setflags(write=False)
    return x


def assemble_features(features: Mapping[str, Number]) -> np.ndarray:
    """Build a FeatureVector from a mapping keyed by short or long names.

    Extra keys are ignored. Raises KeyError listing every missing feature.
    """
    resolved: dict[str, Number] = {}
    for key, value in features.items():
        short = _LONG_TO_SHORT.get(key, key)
        resolved[short] = value

    missing = [name for name in FEATURE_VARS if name not in resolved]
    if missing:
        raise KeyError(f"Missing features {missing}")

    return feature_vector(*(resolved[name] for name in FEATURE_VARS))
