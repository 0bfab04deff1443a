"""
test_space_schema.py - Tests for space and door models

Tests for:
- Wall and shape parsing
- Door geometry and overlap
- Legacy field normalization
- Space identity and serialization
- SpaceIndex resolution
"""

import pytest

from floorweave.interior.schema.space import (
    Door,
    Space,
    SpaceIndex,
    SpaceShape,
    Wall,
    WallSettings,
    is_sentinel,
    normalize_door_fields,
)


# =============================================================================
# ENUM TESTS
# =============================================================================

class TestWall:
    """Tests for Wall enum."""

    def test_opposites(self):
        assert Wall.NORTH.opposite == Wall.SOUTH
        assert Wall.SOUTH.opposite == Wall.NORTH
        assert Wall.EAST.opposite == Wall.WEST
        assert Wall.WEST.opposite == Wall.EAST

    def test_parse_is_case_insensitive(self):
        assert Wall.parse(" East ") == Wall.EAST
        assert Wall.parse(Wall.WEST) == Wall.WEST

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            Wall.parse("up")

    def test_horizontal_walls(self):
        assert Wall.NORTH.is_horizontal
        assert not Wall.EAST.is_horizontal


class TestSpaceShape:
    """Tests for SpaceShape parsing."""

    def test_hyphenated_l_shape(self):
        assert SpaceShape.parse("L-shape") == SpaceShape.L_SHAPE

    def test_missing_and_unknown_fall_back_to_rectangle(self):
        assert SpaceShape.parse(None) == SpaceShape.RECTANGLE
        assert SpaceShape.parse("hexagon") == SpaceShape.RECTANGLE


def test_sentinels():
    assert is_sentinel("")
    assert is_sentinel(None)
    assert is_sentinel("Pending")
    assert is_sentinel("Outside (courtyard)")
    assert not is_sentinel("Kitchen")


# =============================================================================
# DOOR TESTS
# =============================================================================

class TestDoor:
    """Tests for Door geometry."""

    def test_edges(self, make_door):
        door = make_door("north", 10.0, "B", width=4.0)
        assert door.left_edge == 8.0
        assert door.right_edge == 12.0

    def test_touching_doors_do_not_conflict(self, make_door):
        a = make_door("north", 10.0, "B", width=4.0)
        b = make_door("north", 14.0, "C", width=4.0)
        assert not a.conflicts_with(b)

    def test_overlapping_doors_conflict(self, make_door):
        a = make_door("north", 10.0, "B", width=4.0)
        b = make_door("north", 13.0, "C", width=4.0)
        assert a.conflicts_with(b)
        assert b.conflicts_with(a)

    def test_different_walls_never_conflict(self, make_door):
        a = make_door("north", 10.0, "B")
        b = make_door("south", 10.0, "C")
        assert not a.conflicts_with(b)

    def test_round_trip_keeps_decorations_and_extras(self):
        raw = {
            "wall": "west",
            "position_on_wall_ft": 6,
            "width_ft": 3,
            "leads_to": "Vault",
            "style": "iron",
            "state": "locked",
            "secret": True,
        }
        door = Door.from_dict(raw)
        assert door.style == "iron"
        assert door.extras == {"secret": True}
        assert not door.is_reciprocal

        data = door.to_dict()
        assert data["secret"] is True
        assert data["state"] == "locked"
        assert "is_reciprocal" not in data

    def test_missing_width_is_rejected(self):
        with pytest.raises(ValueError):
            Door.from_dict({"wall": "north", "position_on_wall_ft": 5, "leads_to": "X"})

    def test_non_object_is_rejected(self):
        with pytest.raises(ValueError, match="must be objects"):
            Door.from_dict("north")


class TestNormalizeDoorFields:
    """Tests for legacy door key migration."""

    def test_relative_position_is_scaled(self):
        data = normalize_door_fields({"wall": "north", "position": 0.25, "width": 4}, wall_length=40)
        assert data["position_on_wall_ft"] == 10.0
        assert data["width_ft"] == 4
        assert "position" not in data
        assert "width" not in data

    def test_absolute_legacy_position_is_kept(self):
        data = normalize_door_fields({"position": 12, "width_ft": 4}, wall_length=40)
        assert data["position_on_wall_ft"] == 12.0

    def test_missing_position_defaults_to_wall_center(self):
        data = normalize_door_fields({"width_ft": 4}, wall_length=30)
        assert data["position_on_wall_ft"] == 15.0

    def test_current_keys_win_over_legacy(self):
        data = normalize_door_fields({"width_ft": 5, "width": 9, "position_on_wall_ft": 3, "position": 0.5}, 20)
        assert data["width_ft"] == 5
        assert data["position_on_wall_ft"] == 3

    def test_input_not_modified(self):
        raw = {"position": 0.5, "width": 4}
        normalize_door_fields(raw, 20)
        assert raw == {"position": 0.5, "width": 4}


# =============================================================================
# SPACE TESTS
# =============================================================================

class TestSpace:
    """Tests for Space model."""

    def test_identity_prefers_code(self, make_space):
        assert make_space("Great Hall").space_id == "Great Hall"
        assert make_space("Great Hall", code="GH").space_id == "GH"

    def test_wall_length(self, make_space):
        space = make_space("A", 30, 20)
        assert space.wall_length(Wall.NORTH) == 30
        assert space.wall_length(Wall.EAST) == 20

    def test_effective_wall_thickness(self, make_space):
        settings = WallSettings(thickness_ft=10)
        assert make_space("A").effective_wall_thickness(settings) == 10
        assert make_space("A", wall_thickness_ft=4).effective_wall_thickness(settings) == 4
        assert make_space("A", wall_thickness_ft=0).effective_wall_thickness(settings) == 10
        assert make_space("A", wall_thickness_ft=float("nan")).effective_wall_thickness(settings) == 10

    def test_effective_wall_material(self, make_space):
        settings = WallSettings(material="stone")
        assert make_space("A").effective_wall_material(settings) == "stone"
        assert make_space("A", wall_material="wood").effective_wall_material(settings) == "wood"

    def test_anchored_requires_position(self, make_space):
        assert not make_space("A", locked=True).is_anchored
        assert make_space("A", locked=True, position=(0, 0)).is_anchored
        assert not make_space("A", position=(0, 0)).is_anchored

    def test_answers_to(self, make_space):
        space = make_space("Guard Room", code="GR")
        assert space.answers_to("Guard Room")
        assert space.answers_to("GR")
        assert space.answers_to("guard room")
        assert not space.answers_to("Guard")
        assert not space.answers_to("")

    def test_from_dict_accepts_legacy_dimensions(self):
        space = Space.from_dict({
            "name": "Cellar",
            "dimensions": {"width": 40, "height": 20},
            "doors": [{"wall": "north", "position": 0.5, "width": 4, "leads_to": "Hall"}],
            "shape": "circle",
            "lighting": "dim",
        })
        assert space.size.width == 40
        assert space.doors[0].position_on_wall_ft == 20.0
        assert space.shape == SpaceShape.CIRCLE
        assert space.extras == {"lighting": "dim"}

    def test_east_wall_relative_position_uses_height(self):
        space = Space.from_dict({
            "name": "Cellar",
            "size_ft": {"width": 40, "height": 20},
            "doors": [{"wall": "east", "position": 0.5, "width_ft": 4, "leads_to": "Hall"}],
        })
        assert space.doors[0].position_on_wall_ft == 10.0

    def test_missing_size_is_rejected(self):
        with pytest.raises(ValueError):
            Space.from_dict({"name": "Nowhere"})

    def test_non_object_door_is_rejected(self):
        with pytest.raises(ValueError, match="must be objects"):
            Space.from_dict({"name": "A", "size_ft": {"width": 20, "height": 20}, "doors": ["east"]})

    def test_round_trip(self, make_space, make_door):
        space = make_space(
            "Hall", 30, 20,
            doors=[make_door("east", 10, "Kitchen", style="arched")],
            position=(10, 15),
            locked=True,
            code="H1",
            access_point=True,
        )
        restored = Space.from_dict(space.to_dict())
        assert restored == space


# =============================================================================
# INDEX TESTS
# =============================================================================

class TestSpaceIndex:
    """Tests for reference resolution."""

    def test_lookup_order(self, make_space):
        spaces = [make_space("Hall", code="H"), make_space("Kitchen")]
        index = SpaceIndex(spaces)
        assert index.position_of("H") == 0
        assert index.position_of("Hall") == 0
        assert index.position_of("kitchen") == 1
        assert index.position_of("Attic") is None

    def test_sentinels_never_resolve(self, make_space):
        index = SpaceIndex([make_space("Pending"), make_space("Outside")])
        assert index.position_of("Pending") is None
        assert index.position_of("Outside") is None

    def test_resolve_target_ignores_self(self, make_space, make_door):
        hall = make_space("Hall", doors=[make_door("east", 10, "Hall")])
        index = SpaceIndex([hall])
        assert index.resolve_target(hall, hall.doors[0]) is None

    def test_duplicate_ids(self, make_space):
        index = SpaceIndex([make_space("A"), make_space("A"), make_space("B")])
        assert index.duplicate_ids() == ["A"]
