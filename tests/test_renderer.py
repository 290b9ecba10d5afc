"""
Unit tests for the RGBA frame renderer.

Tests verify:
- Color mapping of crests, troughs, near-zero and non-finite values
- Wall, probe column and source marker overlays
- Size mismatch handling and buffer reuse
"""

import math

import numpy as np
import pytest

from slit_fdtd import FieldGrid, FrameRenderer
from slit_fdtd.render.renderer import PROBE_COLOR, SOURCE_COLOR, WALL_COLOR


@pytest.fixture
def grid():
    return FieldGrid(width=30, height=20)


@pytest.fixture
def renderer():
    return FrameRenderer(width=30, height=20)


def expected_level(u):
    return math.floor(abs(math.tanh(25 * u)) ** 0.6 * 255)


# =============================================================================
# Color Mapping Tests
# =============================================================================


class TestColorMapping:
    def test_zero_field_is_black(self, grid, renderer):
        assert renderer.draw(grid, source_position=None)
        assert np.all(renderer.pixels[..., :3] == 0)
        assert np.all(renderer.pixels[..., 3] == 255)

    def test_positive_is_cyan(self, grid, renderer):
        grid.current[5, 5] = 0.01
        renderer.draw(grid, source_position=None)

        level = expected_level(0.01)
        assert level == 109
        assert tuple(renderer.pixels[5, 5]) == (0, level, level, 255)

    def test_negative_is_red(self, grid, renderer):
        grid.current[5, 5] = -0.01
        renderer.draw(grid, source_position=None)

        level = expected_level(0.01)
        assert tuple(renderer.pixels[5, 5]) == (level, 0, 0, 255)

    def test_saturates_at_full_brightness(self, grid, renderer):
        grid.current[5, 5] = 1.0
        grid.current[6, 5] = -50.0
        renderer.draw(grid, source_position=None)

        assert tuple(renderer.pixels[5, 5]) == (0, 255, 255, 255)
        assert tuple(renderer.pixels[6, 5]) == (255, 0, 0, 255)

    def test_below_threshold_is_black(self, grid, renderer):
        grid.current[5, 5] = 1e-4
        grid.current[6, 5] = -1e-4
        renderer.draw(grid, source_position=None)

        assert tuple(renderer.pixels[5, 5]) == (0, 0, 0, 255)
        assert tuple(renderer.pixels[6, 5]) == (0, 0, 0, 255)

    @pytest.mark.parametrize("value", [np.nan, np.inf, -np.inf])
    def test_non_finite_drawn_as_zero(self, grid, renderer, value):
        grid.current[5, 5] = value
        grid.current[5, 6] = 0.01
        renderer.draw(grid, source_position=None)

        assert tuple(renderer.pixels[5, 5]) == (0, 0, 0, 255)
        # Neighbouring pixels are unaffected
        assert renderer.pixels[5, 6, 1] == expected_level(0.01)

    def test_wall_color_overrides_field(self):
        grid = FieldGrid(width=40, height=60)
        grid.set_slits(gap=20, slit_width=6, wall_x=20)
        renderer = FrameRenderer(40, 60)

        # Stale value stored inside a wall cell
        grid.current[30, 20] = 1.0
        renderer.draw(grid, source_position=None)

        assert tuple(renderer.pixels[30, 20]) == WALL_COLOR
        solid = grid.walls == 0
        assert np.all(renderer.pixels[solid] == WALL_COLOR)
        # Aperture cells are drawn from the field
        assert tuple(renderer.pixels[20, 20]) == (0, 0, 0, 255)


# =============================================================================
# Overlay Tests
# =============================================================================


class TestOverlays:
    def test_probe_column_dotted(self, grid, renderer):
        renderer.draw(grid, source_position=None, probe_column_percent=50)

        column = renderer.pixels[:, 15]
        for y in range(grid.height):
            if y % 4 < 2:
                assert tuple(column[y]) == PROBE_COLOR
            else:
                assert tuple(column[y]) == (0, 0, 0, 255)
        assert not np.any(np.all(renderer.pixels[:, 14] == PROBE_COLOR, axis=-1))

    @pytest.mark.parametrize("percent", [100, 150, -10])
    def test_probe_outside_grid_skipped(self, grid, renderer, percent):
        renderer.draw(grid, source_position=None, probe_column_percent=percent)
        assert np.all(renderer.pixels[..., :3] == 0)

    def test_probe_at_left_edge(self, grid, renderer):
        renderer.draw(grid, source_position=None, probe_column_percent=0)
        assert tuple(renderer.pixels[0, 0]) == PROBE_COLOR

    def test_source_marker_square(self, grid, renderer):
        renderer.draw(grid, source_position=(10.6, 8.2))

        marker = np.all(renderer.pixels == SOURCE_COLOR, axis=-1)
        expected = np.zeros(grid.shape, dtype=bool)
        expected[6:11, 8:13] = True
        np.testing.assert_array_equal(marker, expected)

    def test_source_marker_clipped(self, grid, renderer):
        renderer.draw(grid, source_position=(0, 0))

        marker = np.all(renderer.pixels == SOURCE_COLOR, axis=-1)
        assert marker.sum() == 9
        assert np.all(marker[:3, :3])

    def test_source_drawn_over_probe(self):
        grid = FieldGrid(width=40, height=20)
        renderer = FrameRenderer(40, 20)

        renderer.draw(grid, source_position=(10, 8), probe_column_percent=25)

        assert tuple(renderer.pixels[8, 10]) == SOURCE_COLOR
        assert tuple(renderer.pixels[0, 10]) == PROBE_COLOR

    def test_source_drawn_over_wall(self):
        grid = FieldGrid(width=40, height=60)
        grid.set_slits(gap=20, slit_width=6, wall_x=20)
        renderer = FrameRenderer(40, 60)

        renderer.draw(grid, source_position=(20, 30))

        assert tuple(renderer.pixels[30, 20]) == SOURCE_COLOR


# =============================================================================
# Buffer Tests
# =============================================================================


class TestBuffer:
    def test_size_mismatch_is_noop(self, renderer):
        renderer.pixels[0, 0] = (1, 2, 3, 4)
        other = FieldGrid(width=40, height=20)
        other.current[:] = 1.0

        assert renderer.draw(other, source_position=(5, 5)) is False

        assert tuple(renderer.pixels[0, 0]) == (1, 2, 3, 4)
        assert np.all(renderer.pixels[1:, :, :3] == 0)

    def test_resize(self, renderer):
        renderer.resize(40, 20)
        assert renderer.pixels.shape == (20, 40, 4)
        assert renderer.draw(FieldGrid(width=40, height=20), source_position=None)

    def test_resize_same_size_keeps_buffer(self, renderer):
        pixels = renderer.pixels
        renderer.resize(30, 20)
        assert renderer.pixels is pixels

    def test_full_redraw_each_frame(self, grid, renderer):
        """Nothing from a previous frame survives the next draw."""
        grid.current[5, 5] = 1.0
        renderer.draw(grid, source_position=(20, 10), probe_column_percent=50)

        grid.current[5, 5] = 0.0
        renderer.draw(grid, source_position=None)

        assert np.all(renderer.pixels[..., :3] == 0)

    def test_deterministic(self, grid, renderer):
        rng = np.random.default_rng(3)
        grid.current[:] = rng.normal(0, 0.05, grid.shape)

        renderer.draw(grid, source_position=(7, 7), probe_column_percent=60)
        first = renderer.pixels.copy()
        renderer.draw(grid, source_position=(7, 7), probe_column_percent=60)

        np.testing.assert_array_equal(renderer.pixels, first)

    def test_grid_not_modified(self, grid, renderer):
        rng = np.random.default_rng(4)
        grid.current[:] = rng.normal(0, 0.05, grid.shape)
        before = grid.current.copy()
        walls_before = grid.walls.copy()

        renderer.draw(grid, source_position=(7, 7), probe_column_percent=60)

        np.testing.assert_array_equal(grid.current, before)
        np.testing.assert_array_equal(grid.walls, walls_before)

    def test_to_bytes(self, grid, renderer):
        renderer.draw(grid, source_position=None)
        data = renderer.to_bytes()
        assert len(data) == 30 * 20 * 4
        assert data[:4] == bytes([0, 0, 0, 255])

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-1, 5)])
    def test_invalid_size_rejected(self, width, height):
        with pytest.raises(ValueError, match="positive"):
            FrameRenderer(width, height)
