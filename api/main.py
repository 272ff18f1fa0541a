"""FastAPI wrapper for the meltpond-emulator package.

Run (from project root):
    uvicorn api.main:app --reload

Env vars (optional):
    MELTPOND_BACKEND=numpy|torch          (default: load both)
    MELTPOND_ARTIFACTS_DIR=./models/pond  (default: published tables)
    MELTPOND_CHECKPOINT_TAG=published
    MELTPOND_DEVICE=cpu|cuda
    MELTPOND_CLAMP=0|1
"""

from __future__ import annotations

import logging
import math
import os
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from meltpond_emulator import EmulatorConfig, PondEmulator, PondState
from meltpond_emulator.config import BACKENDS
from meltpond_emulator.features import FEATURE_LONG_NAMES, FEATURE_VARS, OUTPUT_VARS

logger = logging.getLogger(__name__)


def _env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v not in (None, "") else default


def _env_bool(name: str, default: bool) -> bool:
    v = _env_str(name)
    if v is None:
        return default
    if v.lower() in ("1", "true", "yes", "on"):
        return True
    if v.lower() in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean (0/1/true/false), got: {v!r}")


def _validate_backend(backend: str) -> str:
    if backend not in BACKENDS:
        raise HTTPException(status_code=422, detail=f"backend must be one of {list(BACKENDS)}")
    return backend


def _build_config(backend: str) -> EmulatorConfig:
    backend = _validate_backend(backend)
    artifacts_dir = _env_str("MELTPOND_ARTIFACTS_DIR", None)
    checkpoint_tag = _env_str("MELTPOND_CHECKPOINT_TAG", "published")
    device = _env_str("MELTPOND_DEVICE", None)
    clamp = _env_bool("MELTPOND_CLAMP", False)

    return EmulatorConfig(
        backend=backend,  # type: ignore[arg-type]
        artifacts_dir=artifacts_dir,
        checkpoint_tag=checkpoint_tag,
        device=device,
        clamp_outputs=clamp,
    )


class PredictOneRequest(BaseModel):
    # A single row of features. Extra keys are allowed/ignored by the package.
    features: Dict[str, float] = Field(
        ..., description=f"Feature dict with required keys: {', '.join(FEATURE_VARS)}"
    )


class PredictManyRequest(BaseModel):
    rows: List[Dict[str, float]] = Field(
        ..., description="List of feature dict rows (each must contain all required features)."
    )


class PondPrediction(BaseModel):
    """One pond update. NaN or infinite values are sent as null."""

    apnd: Optional[float]
    hpnd: Optional[float]
    ipnd: Optional[float]
    ffrac: Optional[float]


class PredictResponse(BaseModel):
    backend: str
    clamped: bool
    predictions: List[PondPrediction]


class HealthResponse(BaseModel):
    status: str
    backends_loaded: List[str]
    feature_count: int


app = FastAPI(
    title="Melt Pond Emulator API",
    version="0.1.0",
    description="Thin FastAPI wrapper around the meltpond-emulator Python package.",
)


# We keep one PondEmulator per backend in memory.
app.state.emulators: Dict[str, PondEmulator] = {}


@app.on_event("startup")
def _startup() -> None:
    """Load emulators once at process start.

    Default behavior: load BOTH backends so the API can serve either.
    If you want only one, set MELTPOND_BACKEND to numpy or torch.
    """
    backend_env = _env_str("MELTPOND_BACKEND", None)
    if backend_env in BACKENDS:
        backends = [backend_env]
    else:
        backends = list(BACKENDS)

    loaded: Dict[str, PondEmulator] = {}
    for b in backends:
        loaded[b] = PondEmulator(_build_config(b))

    app.state.emulators = loaded
    logger.info("Loaded melt pond emulators: %s", sorted(loaded))


def _get_emulator(backend: str) -> PondEmulator:
    e = app.state.emulators.get(backend)
    if e is None:
        raise HTTPException(
            status_code=400,
            detail=f"Backend {backend!r} is not loaded. Loaded: {sorted(app.state.emulators.keys())}",
        )
    return e


def _to_prediction(state: PondState) -> PondPrediction:
    return PondPrediction(**{k: (v if math.isfinite(v) else None) for k, v in state._asdict().items()})


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        backends_loaded=sorted(app.state.emulators.keys()),
        feature_count=len(FEATURE_VARS),
    )


@app.get("/metadata")
def metadata() -> Dict[str, Any]:
    """Expose basic info for clients (features + target names)."""
    return {
        "features": list(FEATURE_VARS),
        "feature_long_names": dict(zip(FEATURE_VARS, FEATURE_LONG_NAMES)),
        "targets": list(OUTPUT_VARS),
        "backends_loaded": sorted(app.state.emulators.keys()),
    }


@app.post("/predict", response_model=PredictResponse)
def predict(
    payload: PredictOneRequest,
    backend: str = "numpy",
) -> PredictResponse:
    """Predict one row.

    Query param `backend` chooses the evaluator (numpy or torch).
    """
    backend = _validate_backend(backend)
    e = _get_emulator(backend)

    try:
        y = e.predict_one(payload.features)
    except KeyError as err:
        # Missing required feature(s)
        raise HTTPException(status_code=422, detail=str(err)) from err
    except Exception as err:
        logger.exception("Prediction failed")
        raise HTTPException(status_code=500, detail=f"Prediction failed: {err}") from err

    return PredictResponse(
        backend=backend,
        clamped=e.config.clamp_outputs,
        predictions=[_to_prediction(y)],
    )


@app.post("/predict_many", response_model=PredictResponse)
def predict_many(
    payload: PredictManyRequest,
    backend: str = "numpy",
) -> PredictResponse:
    """Predict many rows (list-of-dicts)."""
    backend = _validate_backend(backend)
    e = _get_emulator(backend)

    try:
        ys = e.predict_many(payload.rows)
    except KeyError as err:
        raise HTTPException(status_code=422, detail=str(err)) from err
    except Exception as err:
        logger.exception("Prediction failed")
        raise HTTPException(status_code=500, detail=f"Prediction failed: {err}") from err

    return PredictResponse(
        backend=backend,
        clamped=e.config.clamp_outputs,
        predictions=[_to_prediction(y) for y in ys],
    )
