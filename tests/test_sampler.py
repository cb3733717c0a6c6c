"""Tests for block sampling."""

import numpy as np
import pytest
from PIL import Image

from ascii_cam.rendering.sampler import (
    BlockSize,
    as_pixels,
    compute_block_size,
    sample_block,
    sample_frame,
)

# --- Fixtures ---


@pytest.fixture
def noisy_frame():
    rng = np.random.default_rng(7)
    return rng.integers(0, 256, size=(23, 37, 3), dtype=np.uint8)


def uniform(h, w, color):
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[...] = color
    return arr


# --- Tests ---


class TestComputeBlockSize:
    def test_typical_camera_frame(self):
        assert compute_block_size(640, 100) == BlockSize(6, 12)

    def test_height_is_twice_width(self):
        size = compute_block_size(1000, 100)
        assert size.height == 2 * size.width

    def test_rounds_half_up(self):
        assert compute_block_size(150, 100) == BlockSize(2, 4)

    def test_never_below_one(self):
        assert compute_block_size(1, 500) == BlockSize(1, 2)

    def test_always_positive(self):
        for w in range(1, 2000, 37):
            for t in range(1, 600, 13):
                size = compute_block_size(w, t)
                assert size.width >= 1 and size.height >= 1

    def test_rejects_non_positive_target(self):
        with pytest.raises(ValueError):
            compute_block_size(640, 0)

    def test_block_size_invariant(self):
        with pytest.raises(ValueError):
            BlockSize(0, 2)


class TestSampleBlock:
    def test_uniform_block_returns_exact_color(self):
        sample = sample_block(uniform(4, 4, (100, 150, 200)), 0, 0, 4, 4)
        assert (sample.r, sample.g, sample.b) == (100, 150, 200)
        assert sample.luminance == pytest.approx(0.299 * 100 + 0.587 * 150 + 0.114 * 200)

    def test_mean_truncates(self):
        arr = np.array([[[0, 0, 0], [255, 255, 255]]], dtype=np.uint8)
        sample = sample_block(arr, 0, 0, 2, 1)
        assert (sample.r, sample.g, sample.b) == (127, 127, 127)

    def test_clipped_at_edges(self):
        arr = uniform(3, 3, (10, 20, 30))
        arr[2, 2] = (200, 100, 50)
        sample = sample_block(arr, 2, 2, 4, 4)
        assert (sample.r, sample.g, sample.b) == (200, 100, 50)

    def test_block_larger_than_image(self):
        sample = sample_block(uniform(2, 2, (9, 9, 9)), 0, 0, 50, 100)
        assert (sample.r, sample.g, sample.b) == (9, 9, 9)
        assert sample.luminance == pytest.approx(9.0)

    def test_outside_buffer_raises(self):
        with pytest.raises(ValueError):
            sample_block(uniform(2, 2, (0, 0, 0)), 5, 5, 2, 2)

    def test_white_luminance_is_in_range(self):
        sample = sample_block(uniform(1, 1, (255, 255, 255)), 0, 0, 1, 1)
        assert 254.99 <= sample.luminance <= 255.0


class TestSampleFrame:
    def test_matches_per_block_sampling(self, noisy_frame):
        size = BlockSize(4, 8)
        grid = sample_frame(noisy_frame, size)
        for y in range(grid.rows):
            for x in range(grid.cols):
                sample = grid.sample(x, y)
                expected = sample_block(noisy_frame, x * size.width, y * size.height, size.width, size.height)
                assert (sample.r, sample.g, sample.b) == (expected.r, expected.g, expected.b)
                assert sample.luminance == pytest.approx(expected.luminance)

    def test_partial_blocks_are_clipped_not_padded(self):
        grid = sample_frame(uniform(5, 5, (1, 2, 3)), BlockSize(2, 4))
        assert (grid.rows, grid.cols) == (2, 3)
        corner = grid.sample(2, 1)
        assert (corner.r, corner.g, corner.b) == (1, 2, 3)

    def test_row_major_order(self):
        arr = uniform(2, 2, (0, 0, 0))
        arr[0, 1] = (255, 0, 0)
        arr[1, 0] = (0, 255, 0)
        grid = sample_frame(arr, BlockSize(1, 1))
        assert (grid.sample(1, 0).r, grid.sample(0, 1).g) == (255, 255)

    def test_empty_buffer_gives_empty_grid(self):
        grid = sample_frame(np.zeros((0, 0, 3), dtype=np.uint8), BlockSize(1, 2))
        assert grid.is_empty()
        assert (grid.rows, grid.cols) == (0, 0)

    def test_rgba_alpha_is_ignored(self):
        arr = np.zeros((2, 2, 4), dtype=np.uint8)
        arr[..., :3] = (50, 60, 70)
        arr[..., 3] = 0
        grid = sample_frame(arr, BlockSize(2, 2))
        assert grid.sample(0, 0).r == 50


class TestAsPixels:
    def test_pillow_image(self):
        img = Image.new("RGB", (3, 2), (5, 6, 7))
        assert as_pixels(img).shape == (2, 3, 3)

    def test_grayscale_array_expands(self):
        arr = np.full((2, 2), 80, dtype=np.uint8)
        assert as_pixels(arr)[0, 0].tolist() == [80, 80, 80]

    def test_none_is_empty(self):
        assert as_pixels(None).size == 0

    def test_bad_shape_raises(self):
        with pytest.raises(ValueError):
            as_pixels(np.zeros((2, 2, 2), dtype=np.uint8))
