"""
test_editor_scenarios.py - End-to-end editor command flows

Tests for:
- Layout recalculation and aborts
- Door command rejection and reciprocal maintenance
- Space commands (delete, rename, resize, lock)
- Undo/redo and snapshot restore
"""

import pytest

from floorweave.bootstrap.config import EngineConfig
from floorweave.errors import (
    ErrorCode,
    ErrorSeverity,
    FloorweaveError,
    HistoryError,
    LayoutInfeasibleError,
    SpaceNotFoundError,
    StructuralInvalidError,
)
from floorweave.interior.integration import (
    EditorState,
    LocationEditor,
    command_from_dict,
)
from floorweave.interior.schema.space import Position, SpaceSize, Wall, WallSettings
from floorweave.interior.schema.validation import IssueType


def _positions(spaces):
    return {s.name: (s.position.x, s.position.y) if s.position else None for s in spaces}


def _doors(space):
    return [(d.wall.value, d.position_on_wall_ft, d.leads_to, d.is_reciprocal) for d in space.doors]


@pytest.fixture
def editor(two_rooms):
    return LocationEditor(two_rooms)


# =============================================================================
# LOAD AND LAYOUT
# =============================================================================

class TestLoadAndLayout:
    """Loading and layout recalculation."""

    def test_load_synchronizes_reciprocals(self, editor):
        assert _doors(editor.get_space("B")) == [("west", 10.0, "A", True)]
        assert len(editor.history) == 1
        assert not editor.history.can_undo

    def test_load_does_not_place(self, editor):
        assert all(s.position is None for s in editor.spaces)

    def test_load_rejects_duplicate_names(self, make_space):
        with pytest.raises(StructuralInvalidError) as exc_info:
            LocationEditor([make_space("A"), make_space("a", code="A")])
        assert exc_info.value.issues[0].code == ErrorCode.STR_DUPLICATE_IDENTITY

    def test_load_rejects_bad_size(self, make_space):
        with pytest.raises(StructuralInvalidError):
            LocationEditor([make_space("A", 0, 10)])

    def test_recalculate_two_rooms(self, editor):
        result = editor.recalculate_layout()
        assert result.success
        assert result.label == "Recalculated layout"
        assert _positions(result.spaces) == {"A": (50, 50), "B": (90, 50)}
        assert result.can_undo

    def test_recalculate_aborts_on_unreachable_space(self, two_rooms, make_space):
        editor = LocationEditor(two_rooms + [make_space("C", 15, 15)])
        before = editor.spaces

        with pytest.raises(LayoutInfeasibleError) as exc_info:
            editor.recalculate_layout()

        assert "C" in exc_info.value.message
        assert exc_info.value.message.startswith("Cannot calculate room layout:\n1.")
        assert [i.space_id for i in exc_info.value.issues] == ["C"]
        assert editor.spaces == before
        assert len(editor.history) == 1

    def test_locked_space_without_position_does_not_block(self, two_rooms, make_space):
        editor = LocationEditor(two_rooms + [make_space("Vault", 15, 15, locked=True)])
        result = editor.recalculate_layout()
        assert result.success
        assert _positions(result.spaces)["Vault"] == (500, 10)

    def test_recalculate_repeatable(self, three_room_chain):
        editor = LocationEditor(three_room_chain)
        first = _positions(editor.recalculate_layout().spaces)
        second = _positions(editor.recalculate_layout().spaces)
        assert first == second
        assert first["Hall"] == (50, 50)

    def test_wall_settings_relayout(self, editor):
        editor.recalculate_layout()
        result = editor.set_wall_settings(WallSettings(thickness_ft=2, material="wood"))
        assert result.wall_settings == WallSettings(2, "wood")
        assert _positions(result.spaces) == {"A": (50, 50), "B": (75, 50)}

    def test_wall_settings_skip_relayout_when_all_anchored(self, make_space):
        editor = LocationEditor([make_space("A", position=(0, 0), locked=True)])
        result = editor.set_wall_settings(WallSettings(thickness_ft=3))
        assert _positions(result.spaces) == {"A": (0, 0)}

    def test_wall_settings_skip_relayout_when_all_locked(self, make_space):
        editor = LocationEditor([
            make_space("A", position=(0, 0), locked=True),
            make_space("Vault", locked=True),
        ])
        result = editor.set_wall_settings(WallSettings(thickness_ft=3))
        assert _positions(result.spaces) == {"A": (0, 0), "Vault": None}

    def test_invalid_wall_settings(self, editor):
        with pytest.raises(StructuralInvalidError) as exc_info:
            editor.set_wall_settings(WallSettings(thickness_ft=0))
        assert exc_info.value.issues[0].code == ErrorCode.STR_INVALID_SETTINGS
        assert editor.wall_settings.thickness_ft == 10.0


# =============================================================================
# DOORS
# =============================================================================

class TestDoorCommands:
    """Door add/remove/update."""

    def test_overlapping_door_rejected(self, editor, make_door):
        before = editor.get_space("A").doors

        with pytest.raises(StructuralInvalidError) as exc_info:
            editor.add_door("A", make_door("east", 10, "C", width=6))

        error = exc_info.value
        assert [i.code for i in error.issues] == [ErrorCode.STR_OVERLAP]
        assert "Door conflicts with existing door(s) on east wall: B at 10ft" in error.message
        assert error.issues[0].door_index == 1
        assert editor.get_space("A").doors == before
        assert len(editor.history) == 1

    def test_out_of_bounds_door_rejected(self, editor, make_door):
        with pytest.raises(StructuralInvalidError) as exc_info:
            editor.add_door("A", make_door("north", 19, "B"))
        assert "Valid range: 2.0ft - 18.0ft" in exc_info.value.message

    def test_add_door_creates_mirror(self, editor, make_door):
        result = editor.add_door("A", make_door("south", 5, "B"))
        assert result.label == "Added door A -> B"
        assert ("north", 5.0, "A", True) in _doors(editor.get_space("B"))

    def test_add_door_skip_reciprocal(self, editor, make_door):
        editor.add_door("A", make_door("south", 5, "B"), skip_reciprocal=True)
        assert len(editor.get_space("B").doors) == 1

    def test_pending_door_has_no_mirror(self, editor, make_door):
        result = editor.add_door("B", make_door("south", 10, "Pending"))
        assert len(editor.get_space("A").doors) == 1
        assert any(v.type == IssueType.PENDING for v in result.validation_errors)

    def test_remove_door_drops_mirror_and_warns(self, editor):
        result = editor.remove_door("A", 0)
        assert editor.get_space("A").doors == []
        assert editor.get_space("B").doors == []
        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert warning.severity == ErrorSeverity.WARNING
        assert 'leaves "A" with no access' in warning.message

    def test_remove_last_door_of_locked_space_does_not_warn(self, make_space, make_door):
        editor = LocationEditor([
            make_space("A", doors=[make_door("east", 10, "B")], locked=True),
            make_space("B"),
        ])
        result = editor.remove_door("A", 0)
        assert editor.get_space("A").doors == []
        assert result.warnings == []

    def test_remove_mirror_drops_parent(self, editor):
        editor.remove_door("B", 0)
        assert editor.get_space("A").doors == []

    def test_remove_unknown_door(self, editor):
        with pytest.raises(SpaceNotFoundError, match="Door index 4 not found in room 'A'"):
            editor.remove_door("A", 4)

    def test_update_door_moves_mirror(self, editor):
        editor.update_door("A", 0, {"position_on_wall_ft": 15})
        assert _doors(editor.get_space("A")) == [("east", 15.0, "B", False)]
        assert _doors(editor.get_space("B")) == [("west", 15.0, "A", True)]

    def test_update_door_legacy_width(self, editor):
        editor.update_door("A", 0, {"width": 6})
        assert editor.get_space("A").doors[0].width_ft == 6.0
        assert editor.get_space("B").doors[0].width_ft == 6.0

    def test_update_door_decoration_keeps_mirror(self, editor):
        editor.update_door("A", 0, {"style": "arched"})
        assert editor.get_space("A").doors[0].style == "arched"
        assert _doors(editor.get_space("B")) == [("west", 10.0, "A", True)]

    def test_update_door_rejects_invalid(self, editor):
        with pytest.raises(StructuralInvalidError):
            editor.update_door("A", 0, {"width_ft": 30})
        assert editor.get_space("A").doors[0].width_ft == 4.0


# =============================================================================
# SPACES
# =============================================================================

class TestSpaceCommands:
    """Space add/update/delete/move/resize/lock."""

    def test_add_space(self, editor, make_space, make_door):
        result = editor.add_space(make_space("C", doors=[make_door("south", 10, "A")]))
        assert result.label == "Added C"
        assert ("north", 10.0, "C", True) in _doors(editor.get_space("A"))

    def test_add_duplicate_space(self, editor, make_space):
        with pytest.raises(StructuralInvalidError):
            editor.add_space(make_space("b"))

    def test_add_space_with_bad_door(self, editor, make_space, make_door):
        with pytest.raises(StructuralInvalidError):
            editor.add_space(make_space("C", doors=[make_door("south", 1, "A")]))
        assert [s.name for s in editor.spaces] == ["A", "B"]

    def test_delete_keeps_parent_doors(self, editor):
        result = editor.delete_space("B")
        assert _doors(editor.get_space("A")) == [("east", 10.0, "B", False)]
        broken = [v for v in result.validation_errors if v.type == IssueType.BROKEN_CONNECTION]
        assert [v.id for v in broken] == ["A-door-0-broken"]

    def test_delete_removes_mirrors(self, editor):
        editor.delete_space("A")
        assert editor.get_space("B").doors == []

    def test_delete_unknown(self, editor):
        with pytest.raises(SpaceNotFoundError):
            editor.delete_space("Attic")

    def test_rename_retargets_doors(self, editor):
        editor.update_space("B", {"name": "Bedroom"})
        assert editor.get_space("A").doors[0].leads_to == "Bedroom"
        assert editor.get_space("Bedroom").doors[0].leads_to == "A"

    def test_update_space_dimensions_alias(self, editor):
        editor.update_space("B", {"dimensions": {"width": 30, "height": 40}})
        assert editor.get_space("B").size == SpaceSize(30, 40)

    def test_update_space_malformed(self, editor):
        with pytest.raises(StructuralInvalidError) as exc_info:
            editor.update_space("B", {"size_ft": {"width": 10}})
        assert exc_info.value.issues[0].code == ErrorCode.STR_MALFORMED_PAYLOAD

    def test_move_locks(self, editor):
        result = editor.move_space("A", Position(30, 40))
        space = editor.get_space("A")
        assert space.position == Position(30, 40)
        assert space.position_locked
        assert result.label == "Moved A"

    def test_locked_space_survives_recalculate(self, editor):
        editor.move_space("A", Position(100, 200))
        result = editor.recalculate_layout()
        assert _positions(result.spaces)["A"] == (100, 200)

    def test_neighbour_attaches_to_moved_space(self, editor):
        editor.move_space("A", Position(300, 300))
        result = editor.recalculate_layout()
        assert _positions(result.spaces) == {"A": (300, 300), "B": (340, 300)}

    def test_unlock_triggers_relayout(self, editor):
        editor.move_space("A", Position(100, 200))
        result = editor.toggle_position_lock("A")
        assert not editor.get_space("A").position_locked
        assert _positions(result.spaces) == {"A": (100, 200), "B": (140, 200)}

    def test_resize_shrinks_mirror_out(self, editor):
        # B's west wall becomes 8ft; the mirror at 10ft no longer fits
        result = editor.resize_space("B", SpaceSize(20, 8))
        mirror = editor.get_space("B").doors[0]
        assert mirror.is_reciprocal
        assert mirror.position_on_wall_ft == 4.0
        assert result.validation_errors == []

    def test_resize_rejects_parent_door(self, editor):
        with pytest.raises(StructuralInvalidError):
            editor.resize_space("A", SpaceSize(20, 10))
        assert editor.get_space("A").size == SpaceSize(20, 20)


# =============================================================================
# HISTORY
# =============================================================================

class TestHistory:
    """Undo/redo and snapshot restore."""

    def test_undo_redo_round_trip(self, editor, make_space, make_door):
        states = [editor.spaces]
        editor.add_space(make_space("Stairs", 10, 10, access_point=True))
        states.append(editor.spaces)
        editor.add_door("B", make_door("south", 10, "Stairs"))
        states.append(editor.spaces)
        editor.recalculate_layout()
        states.append(editor.spaces)

        for expected in reversed(states[:-1]):
            assert editor.undo().spaces == expected
        assert not editor.history.can_undo

        for expected in states[1:]:
            assert editor.redo().spaces == expected
        assert not editor.history.can_redo

    def test_undo_labels(self, editor):
        editor.move_space("A", Position(0, 0))
        result = editor.undo()
        assert result.label == "Undo: Loaded 2 space(s)"
        assert editor.redo().label == "Redo: Moved A"

    def test_undo_restores_wall_settings(self, editor):
        editor.set_wall_settings(WallSettings(thickness_ft=4))
        editor.undo()
        assert editor.wall_settings.thickness_ft == 10.0

    def test_command_after_undo_truncates(self, editor):
        editor.move_space("A", Position(0, 0))
        editor.undo()
        editor.move_space("B", Position(0, 0))
        assert not editor.history.can_redo
        assert editor.history.state().labels == ["Loaded 2 space(s)", "Moved B"]

    def test_empty_history(self, editor):
        with pytest.raises(HistoryError):
            editor.undo()
        with pytest.raises(HistoryError):
            editor.redo()

    def test_restore_snapshot(self, editor):
        editor.move_space("A", Position(0, 0))
        editor.move_space("A", Position(50, 50))
        result = editor.restore_snapshot(1)
        assert result.label == "Restored: Moved A"
        assert editor.get_space("A").position == Position(0, 0)

    def test_history_limit(self, two_rooms):
        editor = LocationEditor(two_rooms, config=EngineConfig(history_limit=3))
        for x in range(5):
            editor.move_space("A", Position(x, 0))
        assert len(editor.history) == 3


# =============================================================================
# DISPATCH
# =============================================================================

class TestDispatch:
    """Wire commands through dispatch."""

    def test_dispatch_add_door(self, editor):
        command = command_from_dict({
            "type": "add_door",
            "payload": {
                "space_id": "A",
                "door": {"wall": "south", "position_on_wall_ft": 10, "width_ft": 4, "leads_to": "B"},
            },
        })
        editor.dispatch(command)
        assert ("north", 10.0, "A", True) in _doors(editor.get_space("B"))

    def test_dispatch_load(self, editor):
        command = command_from_dict({
            "type": "load_spaces",
            "payload": {"spaces": [{"name": "Solo", "size_ft": {"width": 10, "height": 10}}]},
        })
        result = editor.dispatch(command)
        assert [s.name for s in result.spaces] == ["Solo"]
        assert len(editor.history) == 1

    def test_dispatch_unknown(self, editor):
        with pytest.raises(FloorweaveError):
            editor.dispatch(object())

    def test_state_round_trip(self, editor):
        editor.recalculate_layout()
        state = EditorState.from_dict(editor.state.to_dict())
        restored = LocationEditor.from_state(state)
        assert restored.spaces == editor.spaces
        assert restored.get_space("A").doors[0].wall == Wall.EAST
