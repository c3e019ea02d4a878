"""
Multi-octave fractal noise sources.

Two generators share the same octave loop over gradient coherent noise:
- Perlin: amplitudes decay by a persistence factor each octave
- RidgedMulti: each octave is folded, inverted and squared, then weighted by
  the previous octave to form sharp ridgelines

Both are deterministic for fixed parameters and expose get_value(x, y, z).
"""

from typing import List, Optional

from .noise_gen import (
    NoiseQuality,
    clamp_value,
    gradient_coherent_noise_3d,
    make_int32_range,
)

PERLIN_MAX_OCTAVE = 30
RIDGED_MAX_OCTAVE = 30


def _check_octaves(octaves: int, maximum: int) -> int:
    octaves = int(octaves)
    if octaves < 1 or octaves > maximum:
        raise ValueError(f"Octave count must be between 1 and {maximum}, got {octaves}")
    return octaves


class Perlin:
    """
    Standard fractal (Perlin) noise.

    Each octave samples gradient coherent noise at a frequency multiplied by
    lacunarity and weights it by an amplitude multiplied by persistence.
    Arguments left as None (or 0) take the class defaults.
    """

    DEFAULT_FREQUENCY = 1.0
    DEFAULT_LACUNARITY = 2.0
    DEFAULT_OCTAVE_COUNT = 6
    DEFAULT_PERSISTENCE = 0.5
    DEFAULT_SEED = 0

    def __init__(
        self,
        frequency: Optional[float] = None,
        lacunarity: Optional[float] = None,
        octaves: Optional[int] = None,
        persistence: Optional[float] = None,
        seed: Optional[int] = None,
        quality: Optional[NoiseQuality] = None,
    ):
        self.frequency = frequency or self.DEFAULT_FREQUENCY
        self.lacunarity = lacunarity or self.DEFAULT_LACUNARITY
        self.octaves = octaves or self.DEFAULT_OCTAVE_COUNT
        self.persistence = persistence or self.DEFAULT_PERSISTENCE
        self.seed = seed or self.DEFAULT_SEED
        self.quality = NoiseQuality(quality) if quality is not None else NoiseQuality.STANDARD

    @property
    def octaves(self) -> int:
        return self._octaves

    @octaves.setter
    def octaves(self, value: int) -> None:
        self._octaves = _check_octaves(value, PERLIN_MAX_OCTAVE)

    def get_value(self, x: float, y: float, z: float) -> float:
        value = 0.0
        persist = 1.0

        x *= self.frequency
        y *= self.frequency
        z *= self.frequency

        for octave in range(self._octaves):
            # Keep coordinates within 32-bit integer range for the lattice.
            nx = make_int32_range(x)
            ny = make_int32_range(y)
            nz = make_int32_range(z)

            seed = (int(self.seed) + octave) & 0xFFF
            signal = gradient_coherent_noise_3d(nx, ny, nz, seed, self.quality)
            value += signal * persist

            x *= self.lacunarity
            y *= self.lacunarity
            z *= self.lacunarity
            persist *= self.persistence

        return value


class RidgedMulti:
    """
    Ridged multifractal noise.

    Produces ridge-like maxima by folding each octave with |signal|. The
    per-octave spectral weights depend on lacunarity and are rebuilt whenever
    lacunarity is assigned.
    """

    DEFAULT_FREQUENCY = 1.0
    DEFAULT_LACUNARITY = 2.0
    DEFAULT_OCTAVE_COUNT = 6
    DEFAULT_SEED = 0
    DEFAULT_OFFSET = 1.0
    DEFAULT_GAIN = 2.0

    def __init__(
        self,
        frequency: Optional[float] = None,
        lacunarity: Optional[float] = None,
        octaves: Optional[int] = None,
        seed: Optional[int] = None,
        quality: Optional[NoiseQuality] = None,
        offset: Optional[float] = None,
        gain: Optional[float] = None,
    ):
        self.weights: List[float] = []
        self.frequency = frequency or self.DEFAULT_FREQUENCY
        self.lacunarity = lacunarity or self.DEFAULT_LACUNARITY
        self.octaves = octaves or self.DEFAULT_OCTAVE_COUNT
        self.seed = seed or self.DEFAULT_SEED
        self.quality = NoiseQuality(quality) if quality is not None else NoiseQuality.STANDARD
        self.offset = offset or self.DEFAULT_OFFSET
        self.gain = gain or self.DEFAULT_GAIN

    @property
    def lacunarity(self) -> float:
        return self._lacunarity

    @lacunarity.setter
    def lacunarity(self, value: float) -> None:
        self._lacunarity = value
        self._calc_spectral_weights()

    @property
    def octaves(self) -> int:
        return self._octaves

    @octaves.setter
    def octaves(self, value: int) -> None:
        self._octaves = _check_octaves(value, RIDGED_MAX_OCTAVE)

    def _calc_spectral_weights(self) -> None:
        """Weight of octave i is frequency_i ** -1, frequency growing by lacunarity."""
        h = 1.0
        frequency = 1.0
        weights = []
        for _ in range(RIDGED_MAX_OCTAVE):
            weights.append(frequency ** -h)
            frequency *= self._lacunarity
        self.weights = weights

    def get_value(self, x: float, y: float, z: float) -> float:
        value = 0.0
        weight = 1.0

        x *= self.frequency
        y *= self.frequency
        z *= self.frequency

        for octave in range(self._octaves):
            nx = make_int32_range(x)
            ny = make_int32_range(y)
            nz = make_int32_range(z)

            seed = (int(self.seed) + octave) & 0x7FFFFFFF
            signal = gradient_coherent_noise_3d(nx, ny, nz, seed, self.quality)

            # Make the ridges, then square to sharpen them.
            signal = self.offset - abs(signal)
            signal *= signal

            # Weight by the previous octave so ridges get sharper peaks.
            signal *= weight
            weight = clamp_value(signal * self.gain, 0.0, 1.0)

            value += signal * self.weights[octave]

            x *= self.lacunarity
            y *= self.lacunarity
            z *= self.lacunarity

        return (value * 1.25) - 1.0
