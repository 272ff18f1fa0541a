"""
Tests for checkpoint/scaler artifacts and re-trained networks.
"""

import numpy as np
import pytest

from meltpond_emulator import EmulatorConfig, PondEmulator
from meltpond_emulator.config import artifact_names
from meltpond_emulator.io import load_artifacts, save_artifacts
from meltpond_emulator.model import PondMLP, state_dict_from_table, table_from_state_dict
from meltpond_emulator.network import PondNetwork
from meltpond_emulator.tables import PUBLISHED_SCALER, PUBLISHED_WEIGHTS, WeightTable


def _retrained(hidden: int, seed: int = 0) -> WeightTable:
    rng = np.random.default_rng(seed)
    return WeightTable(
        layer_1_kernel=rng.normal(scale=0.3, size=(18, hidden)),
        layer_1_bias=rng.normal(scale=0.1, size=hidden),
        layer_2_kernel=rng.normal(scale=0.3, size=(hidden, 4)),
        layer_2_bias=rng.normal(scale=0.1, size=4),
    )


class TestArtifacts:

    def test_published_tables_without_directory(self):
        scaler, weights = load_artifacts(None, "published")
        assert scaler is PUBLISHED_SCALER
        assert weights is PUBLISHED_WEIGHTS

    def test_round_trip(self, tmp_path):
        ckpt, scaler_fp = save_artifacts(tmp_path, "rt")

        assert (ckpt.name, scaler_fp.name) == artifact_names("rt")
        scaler, weights = load_artifacts(tmp_path, "rt")
        assert np.array_equal(weights.layer_1_kernel, PUBLISHED_WEIGHTS.layer_1_kernel)
        assert np.array_equal(weights.layer_2_kernel, PUBLISHED_WEIGHTS.layer_2_kernel)
        assert np.array_equal(weights.layer_2_bias, PUBLISHED_WEIGHTS.layer_2_bias)
        assert np.array_equal(scaler.input_stds, PUBLISHED_SCALER.input_stds)
        assert np.array_equal(scaler.output_means, PUBLISHED_SCALER.output_means)

    def test_emulator_from_artifacts(self, tmp_path, reference_features):
        save_artifacts(tmp_path, "v1")
        loaded = PondEmulator(EmulatorConfig(artifacts_dir=tmp_path, checkpoint_tag="v1"))
        assert loaded.predict_one(reference_features) == PondEmulator().predict_one(reference_features)

    def test_missing_artifacts(self, tmp_path):
        with pytest.raises(FileNotFoundError) as exc:
            load_artifacts(tmp_path, "nope")
        assert "pond_mlp_checkpoint_nope.pt" in str(exc.value)

    def test_config_paths(self, tmp_path):
        cfg = EmulatorConfig(artifacts_dir=tmp_path, checkpoint_tag="x")
        assert cfg.model_path() == tmp_path / "pond_mlp_checkpoint_x.pt"
        assert cfg.scaler_path() == tmp_path / "pond_scaler_checkpoint_x.joblib"
        assert EmulatorConfig().model_path() is None


class TestRetrainedWidth:
    """Dense layers are generic: a different hidden width needs no code change."""

    def test_state_dict_round_trip(self):
        table = _retrained(hidden=9)
        back = table_from_state_dict(state_dict_from_table(table))
        assert back.n_hidden == 9
        assert np.array_equal(back.layer_1_kernel, table.layer_1_kernel)

    def test_emulator_loads_other_width(self, tmp_path, reference_row):
        table = _retrained(hidden=5, seed=2)
        save_artifacts(tmp_path, "w5", weights=table)

        em = PondEmulator(EmulatorConfig(artifacts_dir=tmp_path, checkpoint_tag="w5"))
        X = np.array([reference_row])
        expected = PondNetwork(table, PUBLISHED_SCALER)(X)

        assert em.weights.n_hidden == 5
        assert np.array_equal(em.predict_matrix(X), expected)

        torch_em = em.with_backend("torch")
        assert torch_em.predict_matrix(X) == pytest.approx(expected, rel=1e-10, abs=1e-14)

    def test_torch_module_shape(self):
        model = PondMLP.from_table(_retrained(hidden=3))
        assert model.net[0].out_features == 3
        assert model.net[2].in_features == 3
