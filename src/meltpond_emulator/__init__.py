"""meltpond-emulator

Neural-network emulator of the level-ice melt pond parametrisation of a
sea-ice column model. Given the per-category thermodynamic state it predicts
the new pond area fraction, pond depth, pond ice thickness and the fraction of
the surface heat flux used to melt pond ice.

Public API
----------
- `infer(...)`: the 18-argument drop-in call, returns `PondState`.
- `EmulatorConfig`: configuration (backend, artifact paths, clamping).
- `PondEmulator`: predictor with convenience helpers:
  - `predict_one(feature_dict)`
  - `predict_many(list_of_dicts)`
  - `predict_matrix(matrix)`
  - `predict_dataframe(df)`
  - `predict_dataset(ds)`

Quick start
-----------
```python
from meltpond_emulator import PondEmulator, infer

state = infer(3600.0, 7, 0.01, 0.5, 0.0, 0.0, 0.0, 260.0, 0.0, 0.0,
              0.5, 1.0, 0.1, -5.0, 1.0, 0.0, 0.0, 0.0)
state.apnd, state.hpnd, state.ipnd, state.ffrac

# Gridded fields (xarray), e.g. dims (nj, ni, ncat)
ponds = PondEmulator().predict_dataset(ds)
```
"""

from .config import EmulatorConfig
from .emulator import PondEmulator
from .features import FEATURE_VARS, OUTPUT_VARS
from .network import PondNetwork, PondState, infer

__all__ = [
    "EmulatorConfig",
    "PondEmulator",
    "PondNetwork",
    "PondState",
    "FEATURE_VARS",
    "OUTPUT_VARS",
    "infer",
]

__version__ = "0.1.0"
