"""
Coherent noise generation.

This module implements the lattice noise primitives used by the fractal
generators:
- A 31-bit integer hash over 3D lattice coordinates and a seed
- Value noise (hash mapped to [-1, 1])
- Gradient noise (dot product with a unit vector picked by the hash)
- Coherent noise: trilinear blending of the 8 corners of the unit lattice cube
  surrounding a point, eased by the selected quality curve

All hashing is done with Python integers and explicit masks so results are
identical on every platform.
"""

import math
from enum import IntEnum
from typing import Callable, Optional

from .interpolation import cubic_s_curve, linear, quintic_s_curve
from .vector_table import VECTORS

# Lattice hash multipliers. All constants are primes and must stay prime.
X_NOISE_GEN = 1619
Y_NOISE_GEN = 31337
Z_NOISE_GEN = 6971
SEED_NOISE_GEN = 1013
SHIFT_NOISE_GEN = 8

INT32_HALF_RANGE = 1073741824.0  # 2^30

Kernel = Callable[[float, float, float, int, int, int, int], float]


class NoiseQuality(IntEnum):
    """Easing curve applied to fractional lattice offsets."""

    # Linear offsets; visible creasing at integer boundaries.
    FAST = 0
    # Cubic S-curve; second derivative discontinuous at integer boundaries.
    STANDARD = 1
    # Quintic S-curve; first and second derivatives continuous.
    BEST = 2


def int_value_noise_3d(ix: int, iy: int, iz: int, seed: int) -> int:
    """
    Hash lattice coordinates and a seed into a 31-bit integer.

    Python integers do not overflow, so masking the exact product yields the
    same low 31 bits as 32-bit wrap-around arithmetic.

    Returns:
        Integer in [0, 2^31)
    """
    n = (
        X_NOISE_GEN * int(ix)
        + Y_NOISE_GEN * int(iy)
        + Z_NOISE_GEN * int(iz)
        + SEED_NOISE_GEN * int(seed)
    ) & 0x7FFFFFFF
    n = (n >> 13) ^ n
    return (n * (n * n * 60493 + 19990303) + 1376312589) & 0x7FFFFFFF


def value_noise_3d(ix: int, iy: int, iz: int, seed: int) -> float:
    """Value noise at a lattice point, in [-1, 1]."""
    return 1.0 - (int_value_noise_3d(ix, iy, iz, seed) / INT32_HALF_RANGE)


def gradient_noise_3d(
    fx: float, fy: float, fz: float, ix: int, iy: int, iz: int, seed: int
) -> float:
    """
    Gradient noise contribution of lattice point (ix, iy, iz) at (fx, fy, fz).

    A unit gradient is picked from the vector table by hashing the lattice
    point, then dotted with the displacement from that point.
    """
    if not seed:
        seed = 1

    vector_index = (
        X_NOISE_GEN * int(ix)
        + Y_NOISE_GEN * int(iy)
        + Z_NOISE_GEN * int(iz)
        + SEED_NOISE_GEN * int(seed)
    ) & 0xFFFFFFFF
    vector_index ^= vector_index >> SHIFT_NOISE_GEN
    vector_index &= 0xFF

    xv, yv, zv = VECTORS[vector_index]

    # Scale so the output ranges roughly over [-1, 1].
    return ((xv * (fx - ix)) + (yv * (fy - iy)) + (zv * (fz - iz))) * 2.12


def _lattice_origin(n: float) -> int:
    """Lower lattice coordinate: truncate, then step down for n <= 0."""
    return int(n) if n > 0.0 else int(n) - 1


def _value_kernel(fx, fy, fz, ix, iy, iz, seed):
    return value_noise_3d(ix, iy, iz, seed)


def coherent_noise_3d(
    x: float,
    y: float,
    z: float,
    seed: int = 0,
    quality: Optional[NoiseQuality] = None,
    kernel: Optional[Kernel] = None,
) -> float:
    """
    Trilinearly blend a per-corner noise kernel over the unit lattice cube
    surrounding (x, y, z).

    Args:
        x, y, z: Sample coordinates
        seed: Noise seed; 0 selects the default seed 1
        quality: Easing quality, STANDARD when omitted
        kernel: Corner evaluator called as kernel(x, y, z, ix, iy, iz, seed)

    Returns:
        Blended noise value

    Raises:
        ValueError: If no kernel is given
    """
    if kernel is None:
        raise ValueError("Must provide proper interpolation function!")

    if not seed:
        seed = 1

    if quality is None:
        quality = NoiseQuality.STANDARD

    # Unit-length cube aligned along an integer boundary around the point.
    x0 = _lattice_origin(x)
    y0 = _lattice_origin(y)
    z0 = _lattice_origin(z)
    x1 = x0 + 1
    y1 = y0 + 1
    z1 = z0 + 1

    if quality == NoiseQuality.BEST:
        xs = quintic_s_curve(x - x0)
        ys = quintic_s_curve(y - y0)
        zs = quintic_s_curve(z - z0)
    elif quality == NoiseQuality.STANDARD:
        xs = cubic_s_curve(x - x0)
        ys = cubic_s_curve(y - y0)
        zs = cubic_s_curve(z - z0)
    else:
        xs = x - x0
        ys = y - y0
        zs = z - z0

    ix0 = linear(kernel(x, y, z, x0, y0, z0, seed), kernel(x, y, z, x1, y0, z0, seed), xs)
    ix1 = linear(kernel(x, y, z, x0, y1, z0, seed), kernel(x, y, z, x1, y1, z0, seed), xs)
    iy0 = linear(ix0, ix1, ys)
    ix0 = linear(kernel(x, y, z, x0, y0, z1, seed), kernel(x, y, z, x1, y0, z1, seed), xs)
    ix1 = linear(kernel(x, y, z, x0, y1, z1, seed), kernel(x, y, z, x1, y1, z1, seed), xs)
    iy1 = linear(ix0, ix1, ys)

    return linear(iy0, iy1, zs)


def value_coherent_noise_3d(
    x: float, y: float, z: float, seed: int = 0, quality: Optional[NoiseQuality] = None
) -> float:
    """Trilinearly interpolated value noise at (x, y, z)."""
    return coherent_noise_3d(x, y, z, seed, quality, _value_kernel)


def gradient_coherent_noise_3d(
    x: float, y: float, z: float, seed: int = 0, quality: Optional[NoiseQuality] = None
) -> float:
    """Trilinearly interpolated gradient noise at (x, y, z)."""
    return coherent_noise_3d(x, y, z, seed, quality, gradient_noise_3d)


def make_int32_range(n: float) -> float:
    """
    Fold a coordinate into the range a signed 32-bit integer can hold.

    Values with |n| < 2^30 are returned unchanged.
    """
    if n >= INT32_HALF_RANGE:
        return (2.0 * math.fmod(n, INT32_HALF_RANGE)) - INT32_HALF_RANGE
    elif n <= -INT32_HALF_RANGE:
        return (2.0 * math.fmod(n, INT32_HALF_RANGE)) + INT32_HALF_RANGE
    return n


def clamp_value(value: float, lower_bound: float, upper_bound: float) -> float:
    """Clamp value into [lower_bound, upper_bound]."""
    if value < lower_bound:
        return lower_bound
    elif value > upper_bound:
        return upper_bound
    return value
