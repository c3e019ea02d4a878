"""
Noise maps and the planar noise map builder.

A NoiseMap is a dense 2D grid of elevations stored row-major in a flat NumPy
array. NoiseMapBuilderPlane samples a noise source over a rectangle of the
z = 0 plane and fills a NoiseMap, optionally blending the far edges so the
result tiles against itself.
"""

import numpy as np
import structlog

from .interpolation import linear

logger = structlog.get_logger()


class NoiseMap:
    """Dense width x height grid of float64 values, row-major."""

    def __init__(self, width: int = 1, height: int = 1):
        self._width = 0
        self._height = 0
        self.map = np.zeros(0, dtype=np.float64)
        self.set_size(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def values(self) -> np.ndarray:
        """Flat row-major array of length width * height."""
        return self.map

    def set_size(self, width: int, height: int) -> None:
        """Resize the map. All cells are reset to 0."""
        if width <= 0:
            raise ValueError("Width must be greater than zero.")
        if height <= 0:
            raise ValueError("Height must be greater than zero.")

        self._width = int(width)
        self._height = int(height)
        self.map = np.zeros(self._width * self._height, dtype=np.float64)

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"Cell ({x}, {y}) outside {self._width}x{self._height} map")
        return y * self._width + x

    def get_value(self, x: int, y: int) -> float:
        return float(self.map[self._index(x, y)])

    def set_value(self, x: int, y: int, value: float) -> None:
        self.map[self._index(x, y)] = value

    def add_value(self, x: int, y: int, value: float) -> None:
        self.map[self._index(x, y)] += value

    def subtract_value(self, x: int, y: int, value: float) -> None:
        self.map[self._index(x, y)] -= value

    def as_array(self) -> np.ndarray:
        """View of the map shaped (height, width)."""
        return self.map.reshape(self._height, self._width)


class Plane:
    """Samples a 3D noise source on the z = 0 plane (map y -> source z)."""

    def __init__(self, source_module=None):
        self.source_module = source_module

    def get_value(self, x: float, y: float) -> float:
        if self.source_module is None:
            raise ValueError("Invalid or missing module!")
        return self.source_module.get_value(x, 0.0, y)


class NoiseMapBuilderPlane:
    """
    Builds a NoiseMap by sampling a noise source over a rectangle.

    The rectangle defaults to [0, 1] x [0, 1] and is stepped in
    extent / size increments starting at the lower bounds, so the upper
    bounds themselves are never sampled.
    """

    def __init__(self, source_module=None, width: int = 256, height: int = 256, seamless: bool = False):
        self.source_module = source_module
        if width <= 0:
            raise ValueError("Width must be greater than zero.")
        if height <= 0:
            raise ValueError("Height must be greater than zero.")

        self.width = width
        self.height = height
        self.seamless = seamless

        self.lower_x_bound = 0.0
        self.lower_y_bound = 0.0
        self.upper_x_bound = 1.0
        self.upper_y_bound = 1.0

        self.noise_map = NoiseMap(self.width, self.height)

    def set_bounds(
        self, lower_x_bound: float, lower_y_bound: float, upper_x_bound: float, upper_y_bound: float
    ) -> None:
        """Set the sampled rectangle. Bounds are validated by build()."""
        self.lower_x_bound = lower_x_bound
        self.lower_y_bound = lower_y_bound
        self.upper_x_bound = upper_x_bound
        self.upper_y_bound = upper_y_bound

    def build(self) -> NoiseMap:
        """
        Fill the noise map from the source.

        Returns:
            The builder's NoiseMap

        Raises:
            ValueError: If an upper bound is below its lower bound, or no
                source module is set
        """
        x_extent = self.upper_x_bound - self.lower_x_bound
        y_extent = self.upper_y_bound - self.lower_y_bound

        if x_extent < 0 or y_extent < 0:
            raise ValueError("Invalid bounds!")

        # Seamless blending divides by the extents.
        if self.seamless and (x_extent == 0 or y_extent == 0):
            raise ValueError("Invalid bounds!")

        if self.source_module is None:
            raise ValueError("Invalid or missing module!")

        if self.noise_map.width != self.width or self.noise_map.height != self.height:
            self.noise_map.set_size(self.width, self.height)

        plane = Plane(self.source_module)
        x_delta = x_extent / self.width
        y_delta = y_extent / self.height
        cur_y = self.lower_y_bound

        for y in range(self.height):
            cur_x = self.lower_x_bound

            for x in range(self.width):
                if not self.seamless:
                    value = plane.get_value(cur_x, cur_y)
                else:
                    x_blend = 1.0 - ((cur_x - self.lower_x_bound) / x_extent)
                    y_blend = 1.0 - ((cur_y - self.lower_y_bound) / y_extent)
                    value = linear(
                        linear(
                            plane.get_value(cur_x, cur_y),
                            plane.get_value(cur_x + x_extent, cur_y),
                            x_blend,
                        ),
                        linear(
                            plane.get_value(cur_x, cur_y + y_extent),
                            plane.get_value(cur_x + x_extent, cur_y + y_extent),
                            x_blend,
                        ),
                        y_blend,
                    )

                self.noise_map.set_value(x, y, value)
                cur_x += x_delta

            cur_y += y_delta

        logger.debug(
            "Noise map built",
            width=self.width,
            height=self.height,
            seamless=self.seamless,
        )
        return self.noise_map
