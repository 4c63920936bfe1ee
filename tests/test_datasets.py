"""Tests for image and MNIST CSV input handling."""

import numpy as np
import pytest
from PIL import Image

from shave.datasets import (
    input_from_image,
    load_mnist_csv,
    one_hot,
    pixels_to_input,
    scale_pixels,
    split_dataset,
)


class TestPixelMapping:
    def test_image_pixels_are_inverted_and_bounded(self):
        out = pixels_to_input(np.array([0, 255, 51], dtype=np.uint8))
        assert out[0] == pytest.approx(1.0)
        assert out[1] == pytest.approx(0.001)
        assert out[2] == pytest.approx((255 - 51) / 255 * 0.999 + 0.001)

    def test_csv_pixels_are_not_inverted(self):
        out = scale_pixels([0, 255])
        assert out[0] == pytest.approx(0.001)
        assert out[1] == pytest.approx(1.0)

    def test_values_stay_inside_unit_interval(self):
        out = pixels_to_input(np.arange(256, dtype=np.uint8))
        assert np.all(out > 0.0)
        assert np.all(out <= 1.0)


class TestImages:
    def test_grayscale_png_flattened_row_major(self, tmp_path):
        pixels = np.full((28, 28), 255, dtype=np.uint8)
        pixels[2, 5] = 0
        path = tmp_path / "digit.png"
        Image.fromarray(pixels).save(path)

        inputs = input_from_image(path)

        assert inputs.shape == (784,)
        assert inputs[2 * 28 + 5] == pytest.approx(1.0)
        assert inputs[5 * 28 + 2] == pytest.approx(0.001)

    def test_color_png_converted_to_grayscale(self, tmp_path):
        rgb = np.zeros((4, 3, 3), dtype=np.uint8)
        path = tmp_path / "black.png"
        Image.fromarray(rgb).save(path)

        inputs = input_from_image(path)

        assert inputs.shape == (12,)
        np.testing.assert_allclose(inputs, 1.0)

    def test_missing_image_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            input_from_image(tmp_path / "nope.png")


class TestMnistCsv:
    @pytest.fixture
    def csv_path(self, tmp_path):
        path = tmp_path / "mnist.csv"
        path.write_text("5,0,255,0,128\n0,255,255,0,0\n7,0,0,0,0\n")
        return path

    def test_load(self, csv_path):
        X, y = load_mnist_csv(csv_path)
        assert X.shape == (3, 4)
        np.testing.assert_array_equal(y, [5, 0, 7])
        assert X[0, 1] == pytest.approx(1.0)
        assert X[0, 0] == pytest.approx(0.001)
        assert X[0, 3] == pytest.approx(128 / 255 * 0.999 + 0.001)

    def test_limit(self, csv_path):
        X, y = load_mnist_csv(csv_path, limit=2)
        assert X.shape == (2, 4)
        np.testing.assert_array_equal(y, [5, 0])

    def test_label_only_rows_rejected(self, tmp_path):
        path = tmp_path / "labels.csv"
        path.write_text("1\n2\n")
        with pytest.raises(ValueError):
            load_mnist_csv(path)


class TestTargets:
    def test_one_hot_defaults(self):
        t = one_hot(3)
        assert t.shape == (10,)
        assert t[3] == 0.9
        assert np.count_nonzero(t == 0.1) == 9

    def test_one_hot_custom_values(self):
        np.testing.assert_array_equal(one_hot(1, 3, on=1.0, off=0.0), [0.0, 1.0, 0.0])

    def test_one_hot_out_of_range(self):
        with pytest.raises(ValueError):
            one_hot(10)

    def test_split_sizes(self):
        X = np.arange(20, dtype=float).reshape(10, 2)
        y = np.array([0, 1] * 5)
        X_train, X_test, y_train, y_test = split_dataset(X, y, test_size=0.2, random_state=0)
        assert len(X_train) == 8 and len(y_train) == 8
        assert len(X_test) == 2 and len(y_test) == 2
