"""Unit tests for image export.

Tests cover:
- Gamma encoding and clamping
- 8-bit quantization
- PNG save/load via Pillow
- RMSE comparison
"""

from pathlib import Path

import numpy as np
import pytest

from tiletrace.preview.export import apply_gamma, compute_rmse, load_png, save_png, to_uint8


class TestApplyGamma:
    """Tests for apply_gamma."""

    def test_gamma_1_only_clamps(self):
        image = np.array([[[-0.5, 0.25, 1.5]]], dtype=np.float32)

        np.testing.assert_allclose(apply_gamma(image, 1.0), [[[0.0, 0.25, 1.0]]])

    def test_default_gamma_is_square_root(self):
        image = np.array([[[0.25, 0.04, 0.81]]], dtype=np.float32)

        np.testing.assert_allclose(apply_gamma(image), [[[0.5, 0.2, 0.9]]], atol=1e-6)

    def test_preserves_black_and_white(self):
        image = np.array([[[0.0, 1.0, 0.0]]], dtype=np.float32)

        np.testing.assert_allclose(apply_gamma(image, 2.2), image)

    @pytest.mark.parametrize("gamma", [0.0, -2.0])
    def test_invalid_gamma_raises(self, gamma):
        with pytest.raises(ValueError):
            apply_gamma(np.zeros((1, 1, 3), dtype=np.float32), gamma)


class TestToUint8:
    def test_quantization(self):
        image = np.array([[[0.0, 0.25, 1.0], [4.0, -1.0, 1.0]]], dtype=np.float32)

        result = to_uint8(image)
        assert result.dtype == np.uint8
        np.testing.assert_array_equal(result, [[[0, 127, 255], [255, 0, 255]]])

    def test_linear_output(self):
        image = np.full((2, 2, 3), 0.5, dtype=np.float32)

        assert np.all(to_uint8(image, gamma=1.0) == 127)


class TestPng:
    def test_save_and_load(self, tmp_path: Path):
        rng = np.random.default_rng(0)
        image = rng.random((9, 16, 3)).astype(np.float32)
        path = tmp_path / "out.png"

        save_png(image, path)

        assert path.exists()
        loaded = load_png(path)
        assert loaded.shape == (9, 16, 3)
        np.testing.assert_array_equal(loaded, to_uint8(image))

    def test_top_row_is_first_row(self, tmp_path: Path):
        image = np.zeros((4, 4, 3), dtype=np.float32)
        image[0, :, 0] = 1.0

        save_png(image, tmp_path / "top.png", gamma=1.0)
        loaded = load_png(tmp_path / "top.png")

        assert np.all(loaded[0, :, 0] == 255)
        assert np.all(loaded[1:, :, 0] == 0)

    @pytest.mark.parametrize("shape", [(4, 4), (4, 4, 4), (4,)])
    def test_bad_shape_raises(self, tmp_path: Path, shape):
        with pytest.raises(ValueError):
            save_png(np.zeros(shape, dtype=np.float32), tmp_path / "bad.png")

    def test_unwritable_path_raises(self, tmp_path: Path):
        with pytest.raises(OSError):
            save_png(np.zeros((2, 2, 3), dtype=np.float32), tmp_path / "missing" / "out.png")


class TestComputeRmse:
    def test_identical_images(self):
        image = np.random.default_rng(1).random((4, 4, 3))

        assert compute_rmse(image, image) == 0.0

    def test_known_value(self):
        a = np.zeros((2, 2, 3))
        b = np.full((2, 2, 3), 0.5)

        assert abs(compute_rmse(a, b) - 0.5) < 1e-12

    def test_shape_mismatch_raises(self):
        with pytest.raises(ValueError):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))
