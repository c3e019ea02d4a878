"""Tests for noise maps and the plane builder."""

import numpy as np
import pytest
from py_tileworld.core.fractal import Perlin
from py_tileworld.core.noise_map import NoiseMap, NoiseMapBuilderPlane, Plane


class ConstantSource:
    """Noise source returning x + 10 * z, to check sample positions."""

    def get_value(self, x, y, z):
        return x + 10.0 * z


class TestNoiseMap:
    """Test the noise map container."""

    def test_size_and_zero_fill(self):
        noise_map = NoiseMap(4, 3)
        assert noise_map.width == 4
        assert noise_map.height == 3
        assert noise_map.values.shape == (12,)
        assert np.all(noise_map.values == 0)

    def test_invalid_size(self):
        with pytest.raises(ValueError, match="Width"):
            NoiseMap(0, 3)
        with pytest.raises(ValueError, match="Height"):
            NoiseMap(3, -1)

    def test_row_major_access(self):
        noise_map = NoiseMap(3, 2)
        noise_map.set_value(2, 1, 5.0)
        noise_map.add_value(2, 1, 1.5)
        noise_map.subtract_value(2, 1, 0.5)
        assert noise_map.values[1 * 3 + 2] == 6.0
        assert noise_map.get_value(2, 1) == 6.0
        assert noise_map.as_array()[1, 2] == 6.0

    def test_out_of_bounds(self):
        with pytest.raises(IndexError):
            NoiseMap(2, 2).get_value(2, 0)

    def test_resize_resets(self):
        noise_map = NoiseMap(2, 2)
        noise_map.set_value(0, 0, 1.0)
        noise_map.set_size(3, 3)
        assert noise_map.values.shape == (9,)
        assert noise_map.get_value(0, 0) == 0.0


class TestPlane:
    """Test the planar adapter."""

    def test_maps_y_to_z(self):
        assert Plane(ConstantSource()).get_value(0.5, 0.25) == pytest.approx(3.0)

    def test_missing_module(self):
        with pytest.raises(ValueError):
            Plane().get_value(0.0, 0.0)


class TestNoiseMapBuilderPlane:
    """Test the plane builder."""

    def test_sample_positions(self):
        """Test that cells step by extent / size from the lower bounds."""
        builder = NoiseMapBuilderPlane(ConstantSource(), 4, 2)
        values = builder.build().as_array()
        np.testing.assert_allclose(values[0], [0.0, 0.25, 0.5, 0.75])
        np.testing.assert_allclose(values[1], [5.0, 5.25, 5.5, 5.75])

    def test_custom_bounds(self):
        builder = NoiseMapBuilderPlane(ConstantSource(), 2, 1)
        builder.set_bounds(2.0, 1.0, 4.0, 3.0)
        values = builder.build().values
        np.testing.assert_allclose(values, [12.0, 13.0])

    def test_invalid_bounds(self):
        builder = NoiseMapBuilderPlane(ConstantSource(), 2, 2)
        builder.set_bounds(1.0, 0.0, 0.0, 1.0)
        with pytest.raises(ValueError, match="bounds"):
            builder.build()

    def test_seamless_zero_extent(self):
        builder = NoiseMapBuilderPlane(ConstantSource(), 2, 2, seamless=True)
        builder.set_bounds(0.0, 0.0, 0.0, 1.0)
        with pytest.raises(ValueError):
            builder.build()

    def test_missing_module(self):
        with pytest.raises(ValueError, match="module"):
            NoiseMapBuilderPlane(None, 2, 2).build()

    @pytest.mark.parametrize("width,height", [(0, 4), (4, 0), (-2, 4)])
    def test_non_positive_size(self, width, height):
        """Test that a zero or negative size is rejected, not replaced by a default."""
        with pytest.raises(ValueError):
            NoiseMapBuilderPlane(Perlin(seed=1), width, height)

    def test_seamless_first_cell(self):
        """Test that the first cell takes the sample one extent further on."""
        source = Perlin(seed=3)
        builder = NoiseMapBuilderPlane(source, 8, 8, seamless=True)
        builder.set_bounds(0.25, 0.25, 1.25, 1.5)
        seamless = builder.build()
        assert seamless.get_value(0, 0) == pytest.approx(source.get_value(1.25, 0.0, 1.5))

    def test_seamless_wraps(self):
        """Test that blended edges continue into the opposite edge."""
        source = Perlin(seed=17, octaves=2)
        builder = NoiseMapBuilderPlane(source, 32, 32, seamless=True)
        values = builder.build().as_array()
        # A step past the last column lands near the first column.
        assert abs(values[5, -1] - values[5, 0]) < 0.5

    def test_deterministic(self):
        a = NoiseMapBuilderPlane(Perlin(seed=8), 5, 5).build().values.copy()
        b = NoiseMapBuilderPlane(Perlin(seed=8), 5, 5).build().values.copy()
        np.testing.assert_array_equal(a, b)
