"""
Tile world: the grid of tiles and the reveal/hide lifecycle.

The World owns every Tile and resolves neighbors by grid coordinate, so tiles
never hold references to one another. Revealing a tile generates its raw
heightmap once and then stitches its boundary against whatever neighbors are
finalized at that moment. Hiding keeps the heightmap; revealing again only
restitches, picking up neighbors that appeared in the meantime.
"""

import threading
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import structlog

from ..config import settings
from ..utils.random import make_prng
from .heightmap_generator import HeightmapConfig, HeightmapGenerator
from .stitching import HeightmapStitcher, NeighborDescriptor, grid_side
from .tile_types import NEIGHBOR_OFFSETS, Neighbor, TileState, TileType

logger = structlog.get_logger()

# Exclusive upper bound of per-tile seeds.
TILE_SEED_RANGE = 100000

# Terrain types a world draws from when no explicit layout is given.
DRAWN_TILE_TYPES = (TileType.PLAINS, TileType.MOUNTAINS, TileType.SNOW, TileType.OCEAN)

Coordinate = Tuple[int, int]


@dataclass(frozen=True)
class TileShaderParameters:
    """Per-tile values handed to the renderer's terrain shader."""

    seed: int
    tile_type: TileType
    hidden: bool
    neighbor_types: Tuple[TileType, ...]


class Tile:
    """
    One cell of the world grid.

    The raw heightmap is generated at most once. Afterwards only restitch()
    writes to it, and only to boundary vertices. All mutation happens under
    the tile's own lock.
    """

    def __init__(
        self,
        x: int,
        y: int,
        tile_type: TileType,
        seed: int,
        neighbors: Sequence[Optional[Coordinate]],
    ):
        if tile_type == TileType.NONE:
            raise ValueError(f"Tile ({x}, {y}) cannot have type NONE")

        self.x = x
        self.y = y
        self.tile_type = TileType(tile_type)
        self.seed = seed
        self.neighbors = tuple(neighbors)
        self.state = TileState.ABSENT
        self.hidden = False
        self.heightmap: Optional[np.ndarray] = None
        self.lock = threading.RLock()

    def __repr__(self) -> str:
        return (
            f"Tile(x={self.x}, y={self.y}, type={self.tile_type.name}, "
            f"state={self.state.name}, hidden={self.hidden})"
        )

    @property
    def coordinates(self) -> Coordinate:
        return (self.x, self.y)

    @property
    def is_finalized(self) -> bool:
        return self.state > TileState.ABSENT

    @property
    def faces(self) -> Optional[int]:
        """Face count of the cached heightmap, None before generation."""
        if self.heightmap is None:
            return None
        return grid_side(self.heightmap) - 1

    def ensure_generated(
        self, generator: HeightmapGenerator, neighbor_types: Sequence[TileType]
    ) -> np.ndarray:
        """Generate and cache the raw heightmap unless one is already cached."""
        with self.lock:
            if self.heightmap is None:
                self.heightmap = generator.generate(self.tile_type, self.seed, neighbor_types)
            return self.heightmap

    def restitch(
        self, stitcher: HeightmapStitcher, neighbors: Sequence[NeighborDescriptor]
    ) -> np.ndarray:
        """Reconcile the cached heightmap's boundary with neighbor snapshots."""
        with self.lock:
            if self.heightmap is None:
                raise ValueError(f"Tile ({self.x}, {self.y}) has no heightmap to stitch")
            return stitcher.stitch(self.heightmap, neighbors)

    def snapshot(self) -> NeighborDescriptor:
        """Descriptor of this tile as seen by a neighbor, with a copied heightmap."""
        with self.lock:
            heightmap = None
            if self.is_finalized and self.heightmap is not None:
                heightmap = self.heightmap.copy()
            return NeighborDescriptor(self.tile_type, self.state, heightmap)

    def vertex_grid(self) -> np.ndarray:
        """The heightmap as a (faces + 1, faces + 1) view, row 0 on the top edge."""
        if self.heightmap is None:
            raise ValueError(f"Tile ({self.x}, {self.y}) has not been generated")
        side = grid_side(self.heightmap)
        return self.heightmap.reshape(side, side)

    def shader_parameters(self, neighbor_types: Sequence[TileType]) -> TileShaderParameters:
        if len(neighbor_types) != len(Neighbor):
            raise ValueError(f"Expected {len(Neighbor)} neighbor types, got {len(neighbor_types)}")
        return TileShaderParameters(
            seed=self.seed,
            tile_type=self.tile_type,
            hidden=self.hidden,
            neighbor_types=tuple(TileType(t) for t in neighbor_types),
        )


class World:
    """
    Tile grid with lazy terrain generation and seam stitching.

    Args:
        width: Grid width in tiles (default: settings.plots_x)
        height: Grid height in tiles (default: settings.plots_y)
        config: Heightmap configuration (default: from settings)
        seed: World PRNG seed (default: settings.world_seed)
        tile_types: Optional explicit terrain layout indexed [y][x]
    """

    def __init__(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        config: Optional[HeightmapConfig] = None,
        seed=None,
        tile_types: Optional[Sequence[Sequence[TileType]]] = None,
    ):
        self.width = width if width is not None else settings.plots_x
        self.height = height if height is not None else settings.plots_y
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"World size must be positive, got {self.width}x{self.height}")

        self.config = config or HeightmapConfig.from_settings(settings)
        self.seed = seed if seed is not None else settings.world_seed
        self.generator = HeightmapGenerator(self.config)
        self.stitcher = HeightmapStitcher(self.generator.face_count)

        if tile_types is not None:
            self._check_layout(tile_types)

        # Draw everything up front so the layout does not depend on reveal order.
        prng = make_prng(self.seed)
        self._tiles: List[List[Tile]] = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                if tile_types is not None:
                    tile_type = TileType(tile_types[y][x])
                else:
                    tile_type = prng.choice(DRAWN_TILE_TYPES)
                tile_seed = prng.randint(TILE_SEED_RANGE)
                row.append(Tile(x, y, tile_type, tile_seed, self.neighbor_coordinates(x, y)))
            self._tiles.append(row)

        self._visible: List[Tile] = []
        self._lock = threading.RLock()

        logger.info(
            "World created",
            width=self.width,
            height=self.height,
            seed=self.seed,
            map_quality=self.config.map_quality,
            water_quality=self.config.water_quality,
        )

    def _check_layout(self, tile_types: Sequence[Sequence[TileType]]) -> None:
        if len(tile_types) != self.height:
            raise ValueError(f"Tile layout has {len(tile_types)} rows, expected {self.height}")
        for y, row in enumerate(tile_types):
            if len(row) != self.width:
                raise ValueError(f"Tile layout row {y} has {len(row)} tiles, expected {self.width}")
            if any(TileType(t) == TileType.NONE for t in row):
                raise ValueError(f"Tile layout row {y} contains TileType.NONE")

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def tile(self, x: int, y: int) -> Tile:
        if not self.in_bounds(x, y):
            raise IndexError(f"Tile ({x}, {y}) outside {self.width}x{self.height} world")
        return self._tiles[y][x]

    def tiles(self):
        """Iterate over every tile, row by row."""
        for row in self._tiles:
            yield from row

    def neighbor_coordinates(self, x: int, y: int) -> Tuple[Optional[Coordinate], ...]:
        """The 8 neighbor coordinates in slot order, None beyond the grid."""
        coordinates = []
        for dx, dy in NEIGHBOR_OFFSETS:
            nx, ny = x + dx, y + dy
            coordinates.append((nx, ny) if self.in_bounds(nx, ny) else None)
        return tuple(coordinates)

    def neighbor_types(self, tile: Tile) -> Tuple[TileType, ...]:
        return tuple(
            TileType.NONE if coord is None else self.tile(*coord).tile_type
            for coord in tile.neighbors
        )

    def neighbor_descriptors(self, tile: Tile) -> Tuple[NeighborDescriptor, ...]:
        """Snapshot the 8 neighbors. Each neighbor is locked only while copied."""
        return tuple(
            NeighborDescriptor.off_world() if coord is None else self.tile(*coord).snapshot()
            for coord in tile.neighbors
        )

    def shader_parameters(self, x: int, y: int) -> TileShaderParameters:
        tile = self.tile(x, y)
        return tile.shader_parameters(self.neighbor_types(tile))

    def reveal(self, x: int, y: int) -> Optional[Tile]:
        """
        Make a tile visible, generating and stitching it as needed.

        Off-grid coordinates are ignored. Reveals are serialized by the world
        lock, so a tile revealed concurrently with a neighbor always sees that
        neighbor either absent or fully stitched.

        Returns:
            The revealed tile, or None when off-grid
        """
        if not self.in_bounds(x, y):
            return None

        tile = self.tile(x, y)

        with self._lock:
            if tile.state == TileState.VISIBLE:
                with tile.lock:
                    tile.hidden = False
                return tile

            previous = tile.state
            if previous == TileState.ABSENT:
                tile.ensure_generated(self.generator, self.neighbor_types(tile))

            # Neighbor snapshots are taken before this tile's lock is held.
            neighbors = self.neighbor_descriptors(tile)
            tile.restitch(self.stitcher, neighbors)

            with tile.lock:
                tile.state = TileState.VISIBLE
                tile.hidden = False

            self._visible.append(tile)

        logger.info(
            "Tile revealed",
            x=x,
            y=y,
            tile_type=tile.tile_type.name,
            faces=tile.faces,
            previous_state=previous.name,
        )
        return tile

    def hide(self, x: int, y: int) -> Optional[Tile]:
        """Move a visible tile to EXPLORED, keeping its heightmap."""
        if not self.in_bounds(x, y):
            return None

        tile = self.tile(x, y)

        with self._lock:
            if tile.state != TileState.VISIBLE:
                return tile

            with tile.lock:
                tile.state = TileState.EXPLORED

            self._visible.remove(tile)

        logger.debug("Tile hidden", x=x, y=y)
        return tile

    def fogify(self) -> None:
        """Mark every visible tile as hidden under fog."""
        with self._lock:
            visible = list(self._visible)
            for tile in visible:
                with tile.lock:
                    tile.hidden = True

        logger.debug("World fogified", tiles=len(visible))

    @property
    def visible_tiles(self) -> List[Tile]:
        """Currently visible tiles in reveal order."""
        with self._lock:
            return list(self._visible)
