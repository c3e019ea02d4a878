#!/usr/bin/env python3
"""
Demo script revealing a patch of tile world and plotting the stitched terrain.
"""

import numpy as np
import matplotlib.pyplot as plt
from py_tileworld.core import HeightmapConfig, World
from py_tileworld.utils.logging import configure_logging

CELL = 33  # pixels per tile edge in the mosaic


def resample(grid: np.ndarray, size: int) -> np.ndarray:
    """Bilinearly resample a square vertex grid to size x size."""
    source = np.linspace(0.0, 1.0, grid.shape[0])
    target = np.linspace(0.0, 1.0, size)
    rows = np.array([np.interp(target, source, row) for row in grid])
    return np.array([np.interp(target, source, col) for col in rows.T]).T


def mosaic(world: World) -> np.ndarray:
    """Lay revealed tiles side by side; shared edges overlap by one vertex."""
    step = CELL - 1
    image = np.full((world.height * step + 1, world.width * step + 1), np.nan)
    for tile in world.visible_tiles:
        top, left = tile.y * step, tile.x * step
        image[top:top + CELL, left:left + CELL] = resample(tile.vertex_grid(), CELL)
    return image


def main():
    """Reveal a small world in a spiral and show the result."""
    configure_logging("INFO", "console")

    print("Py-Tileworld Stitching Demo")
    print("=" * 40)

    world = World(6, 6, config=HeightmapConfig(map_quality=5, water_quality=3), seed="demo123")

    for y in range(world.height):
        print(" ".join(world.tile(x, y).tile_type.name[0] for x in range(world.width)))

    # Reveal from the centre outwards so neighbors finalize in mixed order.
    order = sorted(
        ((x, y) for y in range(world.height) for x in range(world.width)),
        key=lambda c: abs(c[0] - 2.5) + abs(c[1] - 2.5),
    )
    for x, y in order:
        world.reveal(x, y)

    plt.figure(figsize=(10, 10))
    plt.imshow(mosaic(world), cmap='terrain')
    plt.colorbar(label='Height')
    plt.title('Stitched tile heightmaps')
    plt.xlabel('X')
    plt.ylabel('Y')
    plt.tight_layout()
    plt.savefig('tileworld_demo.png', dpi=120)
    print("\nSaved tileworld_demo.png")
    plt.show()


if __name__ == "__main__":
    main()
