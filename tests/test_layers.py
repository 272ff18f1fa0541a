"""
Tests for the numeric building blocks: SELU, dense layers, scalers.
"""

import math

import numpy as np
import pytest

from meltpond_emulator.layers import (
    SELU_ALPHA,
    SELU_SCALE,
    DenseLayer,
    InverseScaler,
    Standardizer,
    selu,
)
from meltpond_emulator.tables import HI_MIN_INDEX, HI_MIN_SCALED, PUBLISHED_SCALER


class TestSelu:
    """Branch structure of the activation."""

    def test_positive_branch(self):
        assert selu(2.0) == SELU_SCALE * 2.0
        assert selu(1e-300) == SELU_SCALE * 1e-300

    def test_negative_branch(self):
        expected = 1.05070098 * 1.67326324 * (math.exp(-1.0) - 1.0)
        assert selu(-1.0) == expected

    def test_large_negative_saturates(self):
        assert selu(-800.0) == pytest.approx(-SELU_SCALE * SELU_ALPHA, rel=1e-15)

    def test_zero_passes_through_unscaled(self):
        """Neither branch fires on an exact zero (reference quirk)."""
        assert selu(0.0) == 0.0
        out = selu(-0.0)
        assert out == 0.0
        assert math.copysign(1.0, out) == -1.0, "-0.0 must come back unmodified"

    def test_nan_passes_through(self):
        assert math.isnan(selu(float("nan")))

    def test_elementwise_on_arrays(self):
        x = np.array([[-2.0, 0.0, 3.0], [0.5, -0.5, 0.0]])
        y = selu(x)

        assert y.shape == x.shape
        assert y[0, 1] == 0.0 and y[1, 2] == 0.0
        assert y[0, 2] == SELU_SCALE * 3.0
        assert y[1, 0] == SELU_SCALE * 0.5
        assert y[0, 0] == pytest.approx(SELU_SCALE * SELU_ALPHA * (math.exp(-2.0) - 1.0), rel=1e-14)

    def test_input_not_modified(self):
        x = np.array([-1.0, 1.0])
        selu(x)
        assert x.tolist() == [-1.0, 1.0]


class TestDenseLayer:
    """Affine operator with fixed accumulation order."""

    def test_zero_kernel_returns_bias(self):
        """All-zero weights reduce the layer to its bias exactly."""
        bias = np.array([0.25, -1.5, 3.0, 1e-12])
        layer = DenseLayer(np.zeros((18, 4)), bias)
        x = np.linspace(-50.0, 50.0, 18)

        assert np.array_equal(layer(x), bias)

    def test_matches_left_to_right_loop(self):
        rng = np.random.default_rng(7)
        kernel = rng.normal(size=(18, 18))
        bias = rng.normal(size=18)
        x = rng.normal(size=18) * 10.0

        out = DenseLayer(kernel, bias)(x)

        for j in range(18):
            acc = 0.0
            for i in range(18):
                acc = acc + kernel[i, j] * x[i]
            assert out[j] == bias[j] + acc

    def test_summation_order_is_input_order(self):
        """1e16 + 1 rounds back to 1e16, so the 1.0 is lost left to right."""
        layer = DenseLayer(np.ones((3, 1)), np.zeros(1))
        assert layer(np.array([1e16, 1.0, -1e16]))[0] == 0.0
        assert layer(np.array([1e16, -1e16, 1.0]))[0] == 1.0

    def test_batch_rows_match_single_calls(self):
        rng = np.random.default_rng(3)
        layer = DenseLayer(rng.normal(size=(18, 4)), rng.normal(size=4))
        X = rng.normal(size=(5, 18))

        Y = layer(X)
        assert Y.shape == (5, 4)
        for r in range(5):
            assert np.array_equal(Y[r], layer(X[r]))

    def test_generic_dimensions(self):
        layer = DenseLayer(np.ones((3, 7)), np.arange(7.0))
        assert layer.n_inputs == 3
        assert layer.n_units == 7
        assert layer(np.array([1.0, 2.0, 3.0])).tolist() == [6.0 + j for j in range(7)]

    def test_bad_shapes_rejected_at_construction(self):
        with pytest.raises(ValueError):
            DenseLayer(np.zeros(18), np.zeros(18))
        with pytest.raises(ValueError):
            DenseLayer(np.zeros((18, 4)), np.zeros(18))

    def test_wrong_input_width(self):
        layer = DenseLayer(np.zeros((18, 4)), np.zeros(4))
        with pytest.raises(ValueError):
            layer(np.zeros(17))


class TestStandardizer:
    """Z-score with the zero-variance guard and the pinned hi_min."""

    @pytest.fixture
    def standardizer(self):
        return Standardizer(PUBLISHED_SCALER.input_means, PUBLISHED_SCALER.input_stds)

    def test_zero_variance_features_are_zero(self, standardizer):
        for raw in (0.0, 3600.0, -1e30, float("nan"), float("inf"), float("-inf")):
            x = np.full(18, 1.0)
            x[:2] = raw
            z = standardizer(x)
            assert z[0] == 0.0
            assert z[1] == 0.0

    def test_hi_min_is_pinned(self, standardizer):
        for raw in (0.01, 0.0, 5.0, float("nan")):
            x = np.ones(18)
            x[HI_MIN_INDEX] = raw
            assert standardizer(x)[HI_MIN_INDEX] == 1.301043e-16
        assert HI_MIN_SCALED == 1.301043e-16

    def test_regular_features(self, standardizer):
        x = np.arange(18, dtype=np.float64)
        z = standardizer(x)
        means, stds = PUBLISHED_SCALER.input_means, PUBLISHED_SCALER.input_stds
        for i in range(3, 18):
            assert z[i] == (x[i] - means[i]) / stds[i]

    def test_nan_propagates_for_nonzero_std(self, standardizer):
        x = np.ones(18)
        x[7] = float("nan")
        z = standardizer(x)
        assert math.isnan(z[7])
        assert np.isfinite(np.delete(z, 7)).all()

    def test_without_overrides(self):
        s = Standardizer([1.0, 2.0], [0.0, 4.0], overrides={})
        assert s(np.array([10.0, 10.0])).tolist() == [0.0, 2.0]

    def test_batch(self, standardizer):
        X = np.ones((4, 18))
        Z = standardizer(X)
        assert Z.shape == (4, 18)
        assert (Z[:, HI_MIN_INDEX] == HI_MIN_SCALED).all()

    def test_invalid_override_index(self):
        with pytest.raises(ValueError):
            Standardizer([0.0, 0.0], [1.0, 1.0], overrides={5: 0.0})


class TestInverseScaler:

    def test_destandardize(self):
        inv = InverseScaler(PUBLISHED_SCALER.output_means, PUBLISHED_SCALER.output_stds)
        y = np.array([1.0, -1.0, 0.0, 2.0])
        out = inv(y)
        m, s = PUBLISHED_SCALER.output_means, PUBLISHED_SCALER.output_stds
        assert out.tolist() == [y[k] * s[k] + m[k] for k in range(4)]

    def test_no_clamping(self):
        inv = InverseScaler([0.5], [1.0])
        assert inv(np.array([-10.0]))[0] == -9.5
