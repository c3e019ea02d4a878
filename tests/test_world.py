"""
Tests for the tile world: reveal lifecycle, neighbors and seams.
"""

import dataclasses
import threading
import time

import numpy as np
import pytest
from py_tileworld.config import settings
from py_tileworld.core.heightmap_generator import HeightmapConfig
from py_tileworld.core.stitching import edge_values
from py_tileworld.core.tile_types import Neighbor, TileState, TileType
from py_tileworld.core.world import TILE_SEED_RANGE, World

P = TileType.PLAINS
M = TileType.MOUNTAINS


def uniform_layout(width, height, tile_type=P):
    return [[tile_type] * width for _ in range(height)]


class TestWorldConstruction:
    """Test world layout and seeding."""

    def test_default_size(self):
        world = World()
        assert world.width == settings.plots_x
        assert world.height == settings.plots_y

    def test_deterministic_layout(self):
        """Test that the same seed draws the same types and tile seeds."""
        a = World(6, 4, seed="alpha")
        b = World(6, 4, seed="alpha")
        for tile_a, tile_b in zip(a.tiles(), b.tiles()):
            assert tile_a.tile_type == tile_b.tile_type
            assert tile_a.seed == tile_b.seed

    def test_seed_changes_layout(self):
        a = [(t.tile_type, t.seed) for t in World(6, 4, seed="alpha").tiles()]
        b = [(t.tile_type, t.seed) for t in World(6, 4, seed="beta").tiles()]
        assert a != b

    def test_drawn_values_in_range(self):
        world = World(8, 8, seed=12345)
        for tile in world.tiles():
            assert tile.tile_type in (TileType.PLAINS, TileType.MOUNTAINS, TileType.SNOW, TileType.OCEAN)
            assert 0 <= tile.seed < TILE_SEED_RANGE
            assert tile.state == TileState.ABSENT
            assert tile.heightmap is None

    def test_explicit_layout(self):
        layout = [[P, M, P], [TileType.OCEAN, TileType.SNOW, P]]
        world = World(3, 2, seed=1, tile_types=layout)
        assert world.tile(1, 0).tile_type == M
        assert world.tile(0, 1).tile_type == TileType.OCEAN

    def test_invalid_layout(self):
        with pytest.raises(ValueError):
            World(3, 2, tile_types=uniform_layout(3, 3))
        with pytest.raises(ValueError):
            World(2, 1, tile_types=[[P, TileType.NONE]])

    @pytest.mark.parametrize("width,height", [(-1, 3), (0, 3), (3, 0)])
    def test_invalid_size(self, width, height):
        """Test that zero is rejected rather than falling back to the settings size."""
        with pytest.raises(ValueError):
            World(width, height)


class TestNeighbors:
    """Test neighbor lookup by coordinate."""

    @pytest.fixture
    def world(self):
        return World(5, 5, seed="neighbors", tile_types=uniform_layout(5, 5))

    def test_slot_order(self, world):
        coords = world.neighbor_coordinates(2, 2)
        assert coords[Neighbor.TOP] == (2, 1)
        assert coords[Neighbor.RIGHT] == (3, 2)
        assert coords[Neighbor.BOTTOM] == (2, 3)
        assert coords[Neighbor.LEFT] == (1, 2)
        assert coords[Neighbor.TOP_LEFT] == (1, 1)
        assert coords[Neighbor.TOP_RIGHT] == (3, 1)
        assert coords[Neighbor.BOTTOM_RIGHT] == (3, 3)
        assert coords[Neighbor.BOTTOM_LEFT] == (1, 3)

    @pytest.mark.parametrize(
        "x,y,count",
        [(0, 0, 3), (4, 0, 3), (4, 4, 3), (0, 4, 3), (2, 0, 5), (0, 2, 5), (2, 2, 8)],
    )
    def test_in_world_counts(self, world, x, y, count):
        coords = world.neighbor_coordinates(x, y)
        assert len(coords) == 8
        assert sum(c is not None for c in coords) == count

    def test_neighbor_types_mark_off_world(self, world):
        types = world.neighbor_types(world.tile(0, 0))
        assert types[Neighbor.TOP] == TileType.NONE
        assert types[Neighbor.RIGHT] == P
        assert types[Neighbor.TOP_LEFT] == TileType.NONE

    def test_descriptors_are_copies(self, world):
        """Test that descriptors never alias a neighbor's heightmap."""
        world.reveal(1, 0)
        descriptors = world.neighbor_descriptors(world.tile(0, 0))
        right = descriptors[Neighbor.RIGHT]
        assert right.is_finalized
        assert right.heightmap is not world.tile(1, 0).heightmap
        np.testing.assert_array_equal(right.heightmap, world.tile(1, 0).heightmap)
        assert descriptors[Neighbor.BOTTOM].is_unknown
        assert descriptors[Neighbor.TOP].is_off_world


class TestRevealLifecycle:
    """Test reveal, hide and fog."""

    @pytest.fixture
    def world(self):
        layout = [[P, M, P], [M, TileType.OCEAN, TileType.SNOW], [P, P, M]]
        return World(3, 3, config=HeightmapConfig(map_quality=4, water_quality=2), seed="life", tile_types=layout)

    def test_reveal_off_grid(self, world):
        assert world.reveal(-1, 0) is None
        assert world.reveal(3, 3) is None
        assert world.hide(5, 5) is None

    def test_reveal_generates(self, world):
        tile = world.reveal(1, 0)
        assert tile.state == TileState.VISIBLE
        assert not tile.hidden
        assert tile.faces == 16
        assert tile.vertex_grid().shape == (17, 17)
        assert world.visible_tiles == [tile]

    def test_reveal_visible_is_noop(self, world):
        tile = world.reveal(0, 0)
        heightmap = tile.heightmap
        snapshot = heightmap.copy()
        assert world.reveal(0, 0) is tile
        assert tile.heightmap is heightmap
        np.testing.assert_array_equal(heightmap, snapshot)
        assert world.visible_tiles == [tile]

    def test_hide_keeps_heightmap(self, world):
        tile = world.reveal(2, 2)
        heightmap = tile.heightmap
        world.hide(2, 2)
        assert tile.state == TileState.EXPLORED
        assert tile.heightmap is heightmap
        assert world.visible_tiles == []

        world.reveal(2, 2)
        assert tile.state == TileState.VISIBLE
        assert tile.heightmap is heightmap

    def test_hide_absent_tile(self, world):
        tile = world.hide(1, 1)
        assert tile.state == TileState.ABSENT

    def test_fogify(self, world):
        a = world.reveal(0, 0)
        b = world.reveal(1, 1)
        world.fogify()
        assert a.hidden and b.hidden
        assert world.tile(2, 2).hidden is False

        world.reveal(0, 0)
        assert not a.hidden
        assert b.hidden

    def test_reveal_order(self, world):
        order = [(2, 1), (0, 2), (1, 1)]
        for x, y in order:
            world.reveal(x, y)
        assert [t.coordinates for t in world.visible_tiles] == order

    def test_reveal_everything(self, world):
        for tile in world.tiles():
            world.reveal(tile.x, tile.y)
        assert len(world.visible_tiles) == 9

    def test_unrevealed_tile_has_no_grid(self, world):
        tile = world.tile(0, 1)
        with pytest.raises(ValueError):
            tile.vertex_grid()
        with pytest.raises(ValueError):
            tile.restitch(world.stitcher, world.neighbor_descriptors(tile))

    def test_shader_parameters(self, world):
        world.reveal(0, 0)
        world.fogify()
        params = world.shader_parameters(0, 0)
        tile = world.tile(0, 0)
        assert params.seed == tile.seed
        assert params.tile_type == P
        assert params.hidden is True
        assert params.neighbor_types[Neighbor.TOP] == TileType.NONE
        assert params.neighbor_types[Neighbor.BOTTOM_RIGHT] == TileType.OCEAN
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.seed = 1

    def test_shader_parameters_needs_eight_types(self, world):
        with pytest.raises(ValueError):
            world.tile(0, 0).shader_parameters([P] * 3)


class TestSeams:
    """Test that revealed neighbors join without seams."""

    def test_plains_world_row_major(self):
        """Test that every internal edge matches after a row-major reveal."""
        world = World(5, 5, config=HeightmapConfig(map_quality=6), seed="seams", tile_types=uniform_layout(5, 5))
        for y in range(5):
            for x in range(5):
                world.reveal(x, y)

        for y in range(5):
            for x in range(5):
                tile = world.tile(x, y)
                if x + 1 < 5:
                    np.testing.assert_array_equal(
                        edge_values(tile.heightmap, Neighbor.RIGHT),
                        edge_values(world.tile(x + 1, y).heightmap, Neighbor.LEFT),
                    )
                if y + 1 < 5:
                    np.testing.assert_array_equal(
                        edge_values(tile.heightmap, Neighbor.BOTTOM),
                        edge_values(world.tile(x, y + 1).heightmap, Neighbor.TOP),
                    )

    def test_restitch_is_idempotent(self):
        world = World(3, 3, config=HeightmapConfig(map_quality=5), seed="idem", tile_types=uniform_layout(3, 3, M))
        for tile in list(world.tiles()):
            world.reveal(tile.x, tile.y)

        center = world.tile(1, 1)
        before = center.heightmap.copy()
        world.hide(1, 1)
        world.reveal(1, 1)
        np.testing.assert_array_equal(center.heightmap, before)

    def test_mountains_next_to_plains(self):
        """Test a fine mountain edge against a coarse plains edge revealed later."""
        world = World(2, 1, config=HeightmapConfig(map_quality=5), seed="asym", tile_types=[[M, P]])

        mountain = world.reveal(0, 0)
        assert mountain.faces == 32
        smoothed = edge_values(mountain.heightmap, Neighbor.RIGHT)

        plains = world.reveal(1, 0)
        assert plains.faces == 2
        plains_edge = edge_values(plains.heightmap, Neighbor.LEFT)

        world.hide(0, 0)
        world.reveal(0, 0)
        mountain_edge = edge_values(mountain.heightmap, Neighbor.RIGHT)

        np.testing.assert_array_equal(mountain_edge, smoothed)
        np.testing.assert_array_equal(mountain_edge[[0, 16, 32]], plains_edge)
        expected = np.interp(np.arange(33) / 16.0, [0.0, 1.0, 2.0], plains_edge)
        np.testing.assert_allclose(mountain_edge, expected)

    def test_divisible_ratio_is_stable(self):
        """Test that repeated hide/reveal cycles leave both tiles untouched."""
        world = World(2, 1, config=HeightmapConfig(map_quality=5), seed="cycles", tile_types=[[M, P]])
        fine = world.generator.face_count(M)
        coarse = world.generator.face_count(P)
        assert fine % coarse == 0

        mountain = world.reveal(0, 0)
        plains = world.reveal(1, 0)
        mountain_before = mountain.heightmap.copy()
        plains_before = plains.heightmap.copy()

        for _ in range(3):
            for x in (0, 1):
                world.hide(x, 0)
                world.reveal(x, 0)

        np.testing.assert_array_equal(mountain.heightmap, mountain_before)
        np.testing.assert_array_equal(plains.heightmap, plains_before)


class TestConcurrentReveal:
    """Test reveals issued from several threads."""

    def test_concurrent_reveals_are_serialized(self, monkeypatch):
        """Test that racing reveals neither duplicate a tile nor skip a merge."""
        world = World(2, 1, config=HeightmapConfig(map_quality=6), seed="threads", tile_types=uniform_layout(2, 1))
        generate = world.generator.generate

        def slow_generate(*args, **kwargs):
            time.sleep(0.05)
            return generate(*args, **kwargs)

        monkeypatch.setattr(world.generator, "generate", slow_generate)

        threads = [threading.Thread(target=world.reveal, args=coords) for coords in [(0, 0), (1, 0), (0, 0)]]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        coordinates = [tile.coordinates for tile in world.visible_tiles]
        assert sorted(coordinates) == [(0, 0), (1, 0)]
        np.testing.assert_array_equal(
            edge_values(world.tile(0, 0).heightmap, Neighbor.RIGHT),
            edge_values(world.tile(1, 0).heightmap, Neighbor.LEFT),
        )

    def test_concurrent_hide_and_fogify(self):
        world = World(3, 1, seed="fog", tile_types=uniform_layout(3, 1))
        for x in range(3):
            world.reveal(x, 0)

        threads = [threading.Thread(target=world.hide, args=(1, 0)) for _ in range(4)]
        threads.append(threading.Thread(target=world.fogify))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert [t.coordinates for t in world.visible_tiles] == [(0, 0), (2, 0)]
        assert world.tile(1, 0).state == TileState.EXPLORED
