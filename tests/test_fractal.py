"""Tests for fractal noise sources."""

import pytest
from py_tileworld.core.fractal import PERLIN_MAX_OCTAVE, RIDGED_MAX_OCTAVE, Perlin, RidgedMulti
from py_tileworld.core.noise_gen import NoiseQuality, gradient_coherent_noise_3d


class TestPerlin:
    """Test Perlin fractal noise."""

    def test_defaults(self):
        perlin = Perlin()
        assert perlin.frequency == 1.0
        assert perlin.lacunarity == 2.0
        assert perlin.octaves == 6
        assert perlin.persistence == 0.5
        assert perlin.seed == 0
        assert perlin.quality == NoiseQuality.STANDARD

    def test_zero_arguments_take_defaults(self):
        perlin = Perlin(frequency=0, lacunarity=0, octaves=0, persistence=0)
        assert perlin.frequency == 1.0
        assert perlin.octaves == 6

    def test_deterministic(self):
        """Test that identical parameters give identical values."""
        a = Perlin(seed=1234, lacunarity=2.0)
        b = Perlin(seed=1234, lacunarity=2.0)
        for x, y, z in [(0.1, 0.0, 0.2), (0.77, 0.0, 0.33), (12.5, -3.25, 8.0)]:
            assert a.get_value(x, y, z) == b.get_value(x, y, z)

    def test_seed_changes_output(self):
        a = Perlin(seed=1).get_value(0.37, 0.0, 0.61)
        b = Perlin(seed=2).get_value(0.37, 0.0, 0.61)
        assert a != b

    def test_single_octave_is_coherent_noise(self):
        """Test that one octave equals a single gradient noise sample."""
        perlin = Perlin(frequency=1.5, octaves=1, seed=7)
        expected = gradient_coherent_noise_3d(0.3, 0.6, 0.9, 7, NoiseQuality.STANDARD)
        assert perlin.get_value(0.2, 0.4, 0.6) == pytest.approx(expected)

    def test_octave_bounds(self):
        with pytest.raises(ValueError):
            Perlin(octaves=PERLIN_MAX_OCTAVE + 1)
        with pytest.raises(ValueError):
            Perlin().octaves = -1

    def test_bounded_output(self):
        perlin = Perlin(seed=99)
        for i in range(50):
            value = perlin.get_value(i * 0.13, 0.0, i * 0.07)
            assert -4.0 < value < 4.0


class TestRidgedMulti:
    """Test ridged multifractal noise."""

    def test_defaults(self):
        ridged = RidgedMulti()
        assert ridged.offset == 1.0
        assert ridged.gain == 2.0
        assert ridged.octaves == 6
        assert len(ridged.weights) == RIDGED_MAX_OCTAVE

    def test_spectral_weights(self):
        """Test that weight i is lacunarity ** -i."""
        ridged = RidgedMulti(lacunarity=2.0)
        assert ridged.weights[0] == 1.0
        assert ridged.weights[1] == pytest.approx(0.5)
        assert ridged.weights[3] == pytest.approx(0.125)

    def test_lacunarity_rebuilds_weights(self):
        ridged = RidgedMulti(lacunarity=2.0)
        ridged.lacunarity = 3.0
        assert ridged.weights[1] == pytest.approx(1 / 3)
        assert ridged.weights[2] == pytest.approx(1 / 9)

    def test_deterministic(self):
        a = RidgedMulti(seed=555)
        b = RidgedMulti(seed=555)
        assert a.get_value(0.4, 0.0, 0.8) == b.get_value(0.4, 0.0, 0.8)

    def test_value_at_origin(self):
        """Test the fold at a point where every octave's signal is 0."""
        ridged = RidgedMulti(octaves=1)
        # signal = offset - 0 = 1, squared 1, weight 1
        assert ridged.get_value(0.0, 0.0, 0.0) == pytest.approx(0.25)

    def test_octave_bounds(self):
        with pytest.raises(ValueError):
            RidgedMulti(octaves=RIDGED_MAX_OCTAVE + 1)
