"""Utility helpers: seeded randomness and logging setup."""

from .random import AleaPRNG, make_prng

__all__ = ["AleaPRNG", "make_prng"]
