"""
Core terrain generation functionality.
"""

from .noise_gen import NoiseQuality
from .fractal import Perlin, RidgedMulti
from .noise_map import NoiseMap, NoiseMapBuilderPlane, Plane
from .tile_types import Neighbor, TileState, TileType
from .heightmap_generator import HeightmapConfig, HeightmapGenerator, get_face_count
from .stitching import HeightmapStitcher, NeighborDescriptor, merge_edge
from .world import Tile, TileShaderParameters, World

__all__ = ['NoiseQuality', 'Perlin', 'RidgedMulti', 'NoiseMap', 'NoiseMapBuilderPlane', 'Plane',
           'Neighbor', 'TileState', 'TileType', 'HeightmapConfig', 'HeightmapGenerator',
           'get_face_count', 'HeightmapStitcher', 'NeighborDescriptor', 'merge_edge',
           'Tile', 'TileShaderParameters', 'World']
