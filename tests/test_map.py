"""Tests for the map scene and click navigation."""

import pytest

from conftest import build_castle
from dsvedit.levels.models import Map, MapTile
from dsvedit.maps import (
    MAP_SCENE_HEIGHT,
    MAP_SCENE_WIDTH,
    MapCompositor,
    MapNavigator,
    MapUnit,
)


@pytest.fixture
def navigator() -> MapNavigator:
    return MapNavigator()


@pytest.fixture
def clicks(navigator: MapNavigator) -> list[tuple[int, int]]:
    events: list[tuple[int, int]] = []
    navigator.room_clicked.connect(lambda sector, room: events.append((sector, room)))
    return events


class TestMapUnit:
    """Unit geometry on the 4 pixel grid."""

    def test_bounding_rect(self) -> None:
        """Units sit on a 4 px grid and are 5 px square."""
        unit = MapUnit(MapTile(3, 2))
        assert unit.bounding_rect == (12, 8, 5, 5)

    def test_contains_is_half_open(self) -> None:
        """Hit boxes include the left and top edges only."""
        unit = MapUnit(MapTile(1, 1))
        assert unit.contains(4, 4)
        assert unit.contains(8, 8)
        assert not unit.contains(9, 4)
        assert not unit.contains(3, 4)


class TestMapCompositor:
    """Scene construction from the renderer's raster."""

    def test_scene_has_one_unit_per_tile(self, renderer) -> None:
        """The scene holds one unit per map tile over the rendered background."""
        area = build_castle()
        scene = MapCompositor(renderer).build(area.map)

        assert len(scene.units) == 3
        assert len(scene.interactive_units()) == 2
        assert scene.background.mode == "RGBA"
        assert scene.background.size == (MAP_SCENE_WIDTH, MAP_SCENE_HEIGHT)
        assert scene.size == (257, 193)
        assert renderer.map_calls == [area.map]


class TestMapNavigator:
    """Blank units never navigate, others emit their stored values."""

    def test_press_emits_stored_indexes(self, navigator, clicks) -> None:
        """Pressing a unit reports its stored sector and room."""
        assert navigator.press(MapUnit(MapTile(0, 0, sector_index=4, room_index=7)))
        assert clicks == [(4, 7)]

    def test_blank_unit_never_emits(self, navigator, clicks) -> None:
        """Blank units never navigate."""
        assert not navigator.press(MapUnit(MapTile(0, 0, sector_index=4, room_index=7, is_blank=True)))
        assert clicks == []

    def test_press_at_hits_topmost_unit(self, renderer, navigator, clicks) -> None:
        """Where units overlap, the later one wins."""
        area_map = Map(
            area_index=0,
            tiles=[
                MapTile(0, 0, sector_index=0, room_index=0),
                MapTile(1, 0, sector_index=0, room_index=1),
            ],
        )
        navigator.set_scene(MapCompositor(renderer).build(area_map))

        # x=4 lies in both units, the later one is on top
        assert navigator.press_at(4, 2)
        assert navigator.press_at(1, 1)
        assert clicks == [(0, 1), (0, 0)]

    def test_press_at_skips_blank_units(self, renderer, navigator, clicks) -> None:
        """Blank units are transparent to clicks."""
        area_map = Map(
            area_index=0,
            tiles=[
                MapTile(0, 0, sector_index=2, room_index=3),
                MapTile(1, 0, is_blank=True),
            ],
        )
        navigator.set_scene(MapCompositor(renderer).build(area_map))

        assert navigator.press_at(4, 2)
        assert not navigator.press_at(7, 2)
        assert clicks == [(2, 3)]

    def test_no_scene(self, navigator, clicks) -> None:
        """Without a scene nothing can be pressed."""
        assert navigator.unit_at(0, 0) is None
        assert not navigator.press_at(0, 0)
        assert clicks == []

    def test_navigate_callback_is_called_directly(self) -> None:
        """The navigate callback runs inside press, so its errors propagate."""
        calls: list[tuple[int, int]] = []

        def navigate(sector_index: int, room_index: int) -> None:
            calls.append((sector_index, room_index))
            raise RuntimeError("room failed")

        navigator = MapNavigator(navigate=navigate)
        with pytest.raises(RuntimeError):
            navigator.press(MapUnit(MapTile(0, 0, sector_index=1, room_index=2)))
        assert calls == [(1, 2)]
