"""
Heightmap edge and corner reconciliation between neighboring tiles.

A freshly generated tile heightmap knows nothing about its neighbors. The
stitcher rewrites its boundary vertices so they agree with neighbors that are
already finalized, resampling a neighbor's boundary when the two tiles use
different face counts. When a neighbor does not exist yet but will be coarser,
the boundary is pre-smoothed to the coarser resolution so that the later
neighbor joins without a seam whichever tile is generated first.

Heightmaps are flat row-major arrays over a square vertex grid. Neighbors are
passed as 8 NeighborDescriptor views in slot order: top, right, bottom, left,
top-left, top-right, bottom-right, bottom-left.
"""

import math
from dataclasses import dataclass
from typing import Callable, MutableSequence, Optional, Sequence, Tuple

import numpy as np
import structlog

from .tile_types import CARDINAL_NEIGHBORS, DIAGONAL_NEIGHBORS, Neighbor, TileState, TileType

logger = structlog.get_logger()

# Vertex grid corners as (row, column), -1 meaning the last row/column.
TOP_LEFT = (0, 0)
TOP_RIGHT = (0, -1)
BOTTOM_RIGHT = (-1, -1)
BOTTOM_LEFT = (-1, 0)

# Corner copies for each neighbor slot: (my corner, neighbor corner) pairs.
CORNER_SOURCES = {
    Neighbor.TOP: ((TOP_LEFT, BOTTOM_LEFT), (TOP_RIGHT, BOTTOM_RIGHT)),
    Neighbor.RIGHT: ((TOP_RIGHT, TOP_LEFT), (BOTTOM_RIGHT, BOTTOM_LEFT)),
    Neighbor.BOTTOM: ((BOTTOM_LEFT, TOP_LEFT), (BOTTOM_RIGHT, TOP_RIGHT)),
    Neighbor.LEFT: ((TOP_LEFT, TOP_RIGHT), (BOTTOM_LEFT, BOTTOM_RIGHT)),
    Neighbor.TOP_LEFT: ((TOP_LEFT, BOTTOM_RIGHT),),
    Neighbor.TOP_RIGHT: ((TOP_RIGHT, BOTTOM_LEFT),),
    Neighbor.BOTTOM_RIGHT: ((BOTTOM_RIGHT, TOP_LEFT),),
    Neighbor.BOTTOM_LEFT: ((BOTTOM_LEFT, TOP_RIGHT),),
}

# The side of the neighbor's grid that touches each of my sides.
OPPOSITE_SIDE = {
    Neighbor.TOP: Neighbor.BOTTOM,
    Neighbor.RIGHT: Neighbor.LEFT,
    Neighbor.BOTTOM: Neighbor.TOP,
    Neighbor.LEFT: Neighbor.RIGHT,
}


@dataclass(frozen=True)
class NeighborDescriptor:
    """Read-only view of an adjacent tile as seen by the stitcher."""

    tile_type: TileType = TileType.NONE
    state: TileState = TileState.ABSENT
    heightmap: Optional[np.ndarray] = None

    @classmethod
    def off_world(cls) -> "NeighborDescriptor":
        """Descriptor for a slot beyond the edge of the world grid."""
        return cls()

    @property
    def is_off_world(self) -> bool:
        return self.tile_type == TileType.NONE

    @property
    def is_finalized(self) -> bool:
        return not self.is_off_world and self.state > TileState.ABSENT

    @property
    def is_unknown(self) -> bool:
        return not self.is_off_world and self.state == TileState.ABSENT


def merge_edge(edge: MutableSequence[float], to: Sequence[float]) -> MutableSequence[float]:
    """
    Resample `to` onto `edge` in place by piecewise-linear interpolation.

    Each of the len(edge) targets is mapped to a fractional position along
    `to` and interpolated between the two bracketing samples. The first and
    last targets take the first and last source values exactly, and equal
    lengths copy `to` unchanged.

    Args:
        edge: Output edge, overwritten; its length sets the resolution
        to: Source edge values

    Returns:
        `edge`, for chaining
    """
    if len(edge) < 2 or len(to) < 2:
        raise ValueError(
            f"Edges need at least 2 vertices, got {len(edge)} and {len(to)}"
        )

    last = len(edge) - 1
    vertex_step = (len(to) - 1) / last

    for i in range(last):
        edge_position = vertex_step * i
        vertex_index = math.floor(edge_position)
        vertex_offset = edge_position - vertex_index

        if vertex_offset == 0:
            edge[i] = to[vertex_index]
        else:
            height_delta = to[vertex_index] - to[vertex_index + 1]
            edge[i] = to[vertex_index] - (height_delta * vertex_offset)

    # No extrapolation past the source edge.
    edge[last] = to[len(to) - 1]
    return edge


def grid_side(heightmap: np.ndarray) -> int:
    """Side length of the square vertex grid stored in a flat heightmap."""
    side = math.isqrt(len(heightmap))
    if side * side != len(heightmap) or side < 2:
        raise ValueError(f"Heightmap of length {len(heightmap)} is not a square grid of side >= 2")
    return side


def _side_view(grid: np.ndarray, side: Neighbor) -> np.ndarray:
    """View of one boundary row/column of a 2D vertex grid, in reading order."""
    if side == Neighbor.TOP:
        return grid[0, :]
    elif side == Neighbor.RIGHT:
        return grid[:, -1]
    elif side == Neighbor.BOTTOM:
        return grid[-1, :]
    elif side == Neighbor.LEFT:
        return grid[:, 0]
    raise ValueError(f"{side!r} is not a cardinal side")


class HeightmapStitcher:
    """
    Reconciles a tile's boundary with its 8 neighbors.

    Args:
        face_count: Maps a terrain type to its face count; used to learn the
            resolution of neighbors that have not been generated yet
    """

    def __init__(self, face_count: Callable[[TileType], int]):
        self.face_count = face_count

    def _neighbor_grid(self, slot: Neighbor, neighbor: NeighborDescriptor) -> np.ndarray:
        if neighbor.heightmap is None:
            raise ValueError(f"Finalized {slot.name.lower()} neighbor has no heightmap")

        side = grid_side(neighbor.heightmap)
        expected = self.face_count(neighbor.tile_type) + 1
        if side != expected:
            raise ValueError(
                f"{slot.name.lower()} neighbor heightmap side {side} does not match "
                f"{TileType(neighbor.tile_type).name} side {expected}"
            )
        return np.asarray(neighbor.heightmap).reshape(side, side)

    def _reconcile_corners(
        self, grid: np.ndarray, neighbors: Sequence[NeighborDescriptor]
    ) -> int:
        """Copy corner heights from finalized neighbors; diagonals go last and win."""
        copied = 0
        for slot in CARDINAL_NEIGHBORS + DIAGONAL_NEIGHBORS:
            neighbor = neighbors[slot]
            if not neighbor.is_finalized:
                continue

            neighbor_grid = self._neighbor_grid(slot, neighbor)
            for mine, theirs in CORNER_SOURCES[slot]:
                grid[mine] = neighbor_grid[theirs]
                copied += 1
        return copied

    def _reconcile_edge(
        self, grid: np.ndarray, slot: Neighbor, neighbor: NeighborDescriptor
    ) -> Optional[str]:
        """Match one side against a neighbor. Returns the action taken, if any."""
        if neighbor.is_off_world:
            return None

        my_faces = grid.shape[0] - 1
        neighbor_faces = self.face_count(neighbor.tile_type)
        my_edge = _side_view(grid, slot).copy()

        if neighbor.is_finalized:
            neighbor_grid = self._neighbor_grid(slot, neighbor)
            neighbor_edge = _side_view(neighbor_grid, OPPOSITE_SIDE[slot])
            merge_edge(my_edge, neighbor_edge)
            _side_view(grid, slot)[:] = my_edge
            return "merged"

        if neighbor.is_unknown and my_faces > neighbor_faces:
            # Collapse to the neighbor's coarser resolution and expand back so a
            # later coarse neighbor lands exactly on our vertices.
            coarse = merge_edge(np.zeros(neighbor_faces + 1, dtype=np.float64), my_edge)
            merge_edge(my_edge, coarse)
            _side_view(grid, slot)[:] = my_edge
            return "pre-smoothed"

        return None

    def stitch(
        self, heightmap: np.ndarray, neighbors: Sequence[NeighborDescriptor]
    ) -> np.ndarray:
        """
        Reconcile a heightmap's corners and edges with its neighbors.

        Corners are corrected first because the edge pass reads them.

        Args:
            heightmap: Flat float heightmap, mutated in place
            neighbors: Exactly 8 descriptors in slot order

        Returns:
            The same heightmap array
        """
        if len(neighbors) != len(Neighbor):
            raise ValueError(f"Expected {len(Neighbor)} neighbor descriptors, got {len(neighbors)}")

        side = grid_side(heightmap)
        grid = heightmap.reshape(side, side)
        if not np.shares_memory(grid, heightmap):
            raise ValueError("Heightmap must be a contiguous array so it can be stitched in place")

        corners = self._reconcile_corners(grid, neighbors)

        actions = {}
        for slot in CARDINAL_NEIGHBORS:
            action = self._reconcile_edge(grid, slot, neighbors[slot])
            if action:
                actions[slot.name.lower()] = action

        logger.debug("Heightmap stitched", faces=side - 1, corners=corners, edges=actions)
        return heightmap


def edge_values(heightmap: np.ndarray, side: Neighbor) -> np.ndarray:
    """Copy of one boundary row/column of a flat heightmap, in reading order."""
    n = grid_side(heightmap)
    return _side_view(np.asarray(heightmap).reshape(n, n), side).copy()


def corner_value(heightmap: np.ndarray, corner: Tuple[int, int]) -> float:
    """Height at one of the grid corners (TOP_LEFT, TOP_RIGHT, ...)."""
    n = grid_side(heightmap)
    return float(np.asarray(heightmap).reshape(n, n)[corner])
