"""
Heightmap generation module for tile terrain.

This module turns fractal noise into raw per-tile heightmaps. Each terrain
type has a profile (Mountain, Ocean, Base) and a face count derived from the
map and water quality knobs. Heightmaps are flat float64 arrays of length
(faces + 1) ** 2, row-major over the vertex grid with row 0 on the top edge.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import structlog

from .fractal import Perlin, RidgedMulti
from .noise_gen import NoiseQuality
from .noise_map import NoiseMapBuilderPlane
from .tile_types import Neighbor, TileType

logger = structlog.get_logger()

MOUNTAIN_NOISE_KINDS = ("perlin", "ridged")


def get_face_count(tile_type: TileType, map_quality: int, water_quality: int) -> int:
    """
    Get the per-axis face count for a terrain type.

    Args:
        tile_type: Terrain type of the tile
        map_quality: Map resolution knob (>= 1)
        water_quality: Water resolution knob (>= 1)

    Returns:
        Face count (>= 1)
    """
    if tile_type in (TileType.PLAINS, TileType.SNOW):
        return max(1, map_quality - 3)
    elif tile_type == TileType.MOUNTAINS:
        return 2 ** map_quality
    elif tile_type == TileType.OCEAN:
        return 2 ** water_quality
    raise ValueError(f"No face count for tile type {tile_type!r}")


@dataclass
class HeightmapConfig:
    """Configuration for tile heightmap generation."""

    map_quality: int = 1
    water_quality: int = 1
    mountain_noise: str = "perlin"

    def __post_init__(self):
        if self.map_quality < 1:
            raise ValueError(f"map_quality must be >= 1, got {self.map_quality}")
        if self.water_quality < 1:
            raise ValueError(f"water_quality must be >= 1, got {self.water_quality}")
        if self.mountain_noise not in MOUNTAIN_NOISE_KINDS:
            raise ValueError(
                f"mountain_noise must be one of {MOUNTAIN_NOISE_KINDS}, got {self.mountain_noise!r}"
            )

    @classmethod
    def from_settings(cls, settings) -> "HeightmapConfig":
        """Build a config from application settings."""
        return cls(
            map_quality=settings.map_quality,
            water_quality=settings.water_quality,
            mountain_noise=settings.mountain_noise,
        )


class HeightmapGenerator:
    """
    Generates raw tile heightmaps from fractal noise.

    The generator is stateless apart from its configuration; every call
    builds a fresh noise source from the seed it is given.
    """

    def __init__(self, config: Optional[HeightmapConfig] = None):
        self.config = config or HeightmapConfig()

    def face_count(self, tile_type: TileType) -> int:
        """Face count for a terrain type under this generator's quality knobs."""
        return get_face_count(tile_type, self.config.map_quality, self.config.water_quality)

    def _sample(self, source, faces: int) -> np.ndarray:
        """Sample a noise source on a (faces + 1) x (faces + 1) unit square."""
        builder = NoiseMapBuilderPlane(source, faces + 1, faces + 1)
        return builder.build().values.copy()

    def mountain(self, seed: int) -> np.ndarray:
        """
        Mountain profile: positive noise scaled up, negative noise folded into
        shallow bumps.
        """
        faces = self.face_count(TileType.MOUNTAINS)

        if self.config.mountain_noise == "ridged":
            source = RidgedMulti(lacunarity=2.0, seed=seed)
        else:
            source = Perlin(lacunarity=2.0, seed=seed)

        noise = self._sample(source, faces)
        return np.where(noise > 0, noise * 0.3, noise * -0.1)

    def base(self, seed: int) -> np.ndarray:
        """Plains and snow profile: gentle positive relief, flat elsewhere."""
        faces = self.face_count(TileType.PLAINS)

        source = Perlin(seed=seed, quality=NoiseQuality.FAST)

        noise = self._sample(source, faces)
        return np.where(noise > 0, noise * 0.1, 0.0)

    def ocean(self, seed: int, neighbor_types: Sequence[TileType]) -> np.ndarray:
        """
        Ocean profile: a basin that deepens toward the tile centre and opens
        into neighboring ocean tiles.

        Border vertices shared with a non-ocean neighbor stay at 0 so the
        coastline meets the land tile. Interior vertices add a little noise.

        Args:
            seed: Noise seed
            neighbor_types: The 8 neighbor terrain types in slot order

        Returns:
            Flat heightmap array
        """
        faces = self.face_count(TileType.OCEAN)
        side = faces + 1
        noise = self._sample(Perlin(seed=seed), faces)
        heightmap = np.zeros(side * side, dtype=np.float64)

        def is_ocean(slot: Neighbor) -> bool:
            return neighbor_types[slot] == TileType.OCEAN

        half = faces / 2

        for x in range(side):
            for y in range(side):
                # Corners check the diagonal first, then the edges.
                if x == 0 and y == 0 and not is_ocean(Neighbor.TOP_LEFT):
                    continue
                if x == faces and y == 0 and not is_ocean(Neighbor.TOP_RIGHT):
                    continue
                if x == faces and y == faces and not is_ocean(Neighbor.BOTTOM_RIGHT):
                    continue
                if x == 0 and y == faces and not is_ocean(Neighbor.BOTTOM_LEFT):
                    continue
                if y == 0 and not is_ocean(Neighbor.TOP):
                    continue
                if x == faces and not is_ocean(Neighbor.RIGHT):
                    continue
                if y == faces and not is_ocean(Neighbor.BOTTOM):
                    continue
                if x == 0 and not is_ocean(Neighbor.LEFT):
                    continue

                if (y <= half and is_ocean(Neighbor.TOP)) or (y >= half and is_ocean(Neighbor.BOTTOM)):
                    # Open toward the top or bottom
                    if x <= half and is_ocean(Neighbor.LEFT):
                        distance = 0.5
                    elif x >= half and is_ocean(Neighbor.RIGHT):
                        distance = 0.5
                    else:
                        distance = 0.5 - abs((x / faces) - 0.5)
                elif (x <= half and is_ocean(Neighbor.LEFT)) or (x >= half and is_ocean(Neighbor.RIGHT)):
                    # Open toward the left or right
                    if y <= half and is_ocean(Neighbor.TOP):
                        distance = 0.5
                    elif y >= half and is_ocean(Neighbor.BOTTOM):
                        distance = 0.5
                    else:
                        distance = 0.5 - abs((y / faces) - 0.5)
                else:
                    # Enclosed basin: radial distance from the tile centre
                    distance = 0.5 - math.sqrt((0.5 - x / faces) ** 2 + (0.5 - y / faces) ** 2)

                height = distance * -0.4
                on_border = y == 0 or x == faces or y == faces or x == 0
                if not on_border:
                    # The noise map is read transposed.
                    height += noise[y + side * x] * 0.2
                if height > 0.0:
                    height *= 0.05

                heightmap[x + side * y] = height

        return heightmap

    def generate(
        self,
        tile_type: TileType,
        seed: int,
        neighbor_types: Optional[Sequence[TileType]] = None,
    ) -> np.ndarray:
        """
        Generate the raw heightmap for a tile.

        Args:
            tile_type: Terrain type of the tile
            seed: Per-tile noise seed
            neighbor_types: The 8 neighbor terrain types; only oceans use them

        Returns:
            Flat float64 heightmap of length (faces + 1) ** 2
        """
        if neighbor_types is None:
            neighbor_types = (TileType.NONE,) * 8

        if tile_type == TileType.MOUNTAINS:
            heightmap = self.mountain(seed)
        elif tile_type == TileType.OCEAN:
            heightmap = self.ocean(seed, neighbor_types)
        elif tile_type in (TileType.PLAINS, TileType.SNOW):
            heightmap = self.base(seed)
        else:
            raise ValueError(f"Cannot generate terrain for tile type {tile_type!r}")

        logger.debug(
            "Heightmap generated",
            tile_type=TileType(tile_type).name,
            faces=self.face_count(tile_type),
            seed=seed,
        )
        return heightmap
