"""
commands.py - Editor command set v1.0

The closed set of operations accepted by ``LocationEditor``. Each command is a
small dataclass carrying its typed payload; ``command_from_dict`` builds one
from the ``{"type": ..., "payload": {...}}`` wire shape.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type
from enum import Enum
import logging

from floorweave.errors import ErrorCode, FloorweaveError, StructuralInvalidError, create_state_error, create_structural_error
from floorweave.interior.schema.space import Door, Position, Space, SpaceSize, WallSettings

__all__ = [
    'CommandType',
    'Command',
    'LoadSpaces',
    'AddSpace',
    'UpdateSpace',
    'DeleteSpace',
    'MoveSpace',
    'ResizeSpace',
    'AddDoor',
    'RemoveDoor',
    'UpdateDoor',
    'TogglePositionLock',
    'SetWallSettings',
    'RecalculateLayout',
    'Undo',
    'Redo',
    'RestoreSnapshot',
    'command_from_dict',
]

logger = logging.getLogger(__name__)


class CommandType(Enum):
    """Wire names of editor commands."""

    LOAD_SPACES = "load_spaces"
    ADD_SPACE = "add_space"
    UPDATE_SPACE = "update_space"
    DELETE_SPACE = "delete_space"
    MOVE_SPACE = "move_space"
    RESIZE_SPACE = "resize_space"
    ADD_DOOR = "add_door"
    REMOVE_DOOR = "remove_door"
    UPDATE_DOOR = "update_door"
    TOGGLE_POSITION_LOCK = "toggle_position_lock"
    SET_WALL_SETTINGS = "set_wall_settings"
    RECALCULATE_LAYOUT = "recalculate_layout"
    UNDO = "undo"
    REDO = "redo"
    RESTORE_SNAPSHOT = "restore_snapshot"


class Command:
    """Base for all editor commands."""

    command_type: CommandType

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Command":
        return cls()


# =============================================================================
# SPACE COMMANDS
# =============================================================================

@dataclass
class LoadSpaces(Command):
    """Replace the whole layout; reciprocals are synchronized on load."""

    spaces: List[Space] = field(default_factory=list)
    wall_settings: Optional[WallSettings] = None
    command_type = CommandType.LOAD_SPACES

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "LoadSpaces":
        settings = payload.get("wall_settings")
        return cls(
            spaces=[Space.from_dict(s) for s in payload.get("spaces", [])],
            wall_settings=WallSettings.from_dict(settings) if settings else None,
        )


@dataclass
class AddSpace(Command):
    space: Space = None
    command_type = CommandType.ADD_SPACE

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "AddSpace":
        return cls(space=Space.from_dict(payload.get("space", payload)))


@dataclass
class UpdateSpace(Command):
    """Merge ``updates`` (wire field names) into a space."""

    space_id: str = ""
    updates: Dict[str, Any] = field(default_factory=dict)
    command_type = CommandType.UPDATE_SPACE

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "UpdateSpace":
        return cls(space_id=payload["space_id"], updates=dict(payload.get("updates", {})))


@dataclass
class DeleteSpace(Command):
    space_id: str = ""
    command_type = CommandType.DELETE_SPACE

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "DeleteSpace":
        return cls(space_id=payload["space_id"])


@dataclass
class MoveSpace(Command):
    """Place a space directly; the space becomes locked."""

    space_id: str = ""
    position: Position = None
    command_type = CommandType.MOVE_SPACE

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "MoveSpace":
        return cls(space_id=payload["space_id"], position=Position.from_dict(payload["position"]))


@dataclass
class ResizeSpace(Command):
    space_id: str = ""
    size: SpaceSize = None
    command_type = CommandType.RESIZE_SPACE

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ResizeSpace":
        return cls(space_id=payload["space_id"], size=SpaceSize.from_dict(payload["size"]))


@dataclass
class TogglePositionLock(Command):
    space_id: str = ""
    command_type = CommandType.TOGGLE_POSITION_LOCK

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "TogglePositionLock":
        return cls(space_id=payload["space_id"])


# =============================================================================
# DOOR COMMANDS
# =============================================================================

@dataclass
class AddDoor(Command):
    space_id: str = ""
    door: Door = None
    skip_reciprocal: bool = False
    command_type = CommandType.ADD_DOOR

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "AddDoor":
        return cls(
            space_id=payload["space_id"],
            door=Door.from_dict(payload["door"]),
            skip_reciprocal=bool(payload.get("skip_reciprocal", False)),
        )


@dataclass
class RemoveDoor(Command):
    space_id: str = ""
    door_index: int = 0
    skip_reciprocal: bool = False
    command_type = CommandType.REMOVE_DOOR

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "RemoveDoor":
        return cls(
            space_id=payload["space_id"],
            door_index=int(payload["door_index"]),
            skip_reciprocal=bool(payload.get("skip_reciprocal", False)),
        )


@dataclass
class UpdateDoor(Command):
    """Merge ``updates`` (wire field names) into one door."""

    space_id: str = ""
    door_index: int = 0
    updates: Dict[str, Any] = field(default_factory=dict)
    command_type = CommandType.UPDATE_DOOR

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "UpdateDoor":
        return cls(
            space_id=payload["space_id"],
            door_index=int(payload["door_index"]),
            updates=dict(payload.get("updates", {})),
        )


# =============================================================================
# LAYOUT AND HISTORY COMMANDS
# =============================================================================

@dataclass
class SetWallSettings(Command):
    settings: WallSettings = field(default_factory=WallSettings)
    command_type = CommandType.SET_WALL_SETTINGS

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SetWallSettings":
        return cls(settings=WallSettings.from_dict(payload.get("settings", payload)))


@dataclass
class RecalculateLayout(Command):
    command_type = CommandType.RECALCULATE_LAYOUT


@dataclass
class Undo(Command):
    command_type = CommandType.UNDO


@dataclass
class Redo(Command):
    command_type = CommandType.REDO


@dataclass
class RestoreSnapshot(Command):
    position: int = 0
    command_type = CommandType.RESTORE_SNAPSHOT

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "RestoreSnapshot":
        return cls(position=int(payload["position"]))


_COMMANDS: Dict[CommandType, Type[Command]] = {
    CommandType.LOAD_SPACES: LoadSpaces,
    CommandType.ADD_SPACE: AddSpace,
    CommandType.UPDATE_SPACE: UpdateSpace,
    CommandType.DELETE_SPACE: DeleteSpace,
    CommandType.MOVE_SPACE: MoveSpace,
    CommandType.RESIZE_SPACE: ResizeSpace,
    CommandType.ADD_DOOR: AddDoor,
    CommandType.REMOVE_DOOR: RemoveDoor,
    CommandType.UPDATE_DOOR: UpdateDoor,
    CommandType.TOGGLE_POSITION_LOCK: TogglePositionLock,
    CommandType.SET_WALL_SETTINGS: SetWallSettings,
    CommandType.RECALCULATE_LAYOUT: RecalculateLayout,
    CommandType.UNDO: Undo,
    CommandType.REDO: Redo,
    CommandType.RESTORE_SNAPSHOT: RestoreSnapshot,
}


def command_from_dict(data: Dict[str, Any]) -> Command:
    """
    Build a command from ``{"type": ..., "payload": {...}}``.

    Raises:
        FloorweaveError: unknown command type
        StructuralInvalidError: payload is missing fields or malformed
    """
    raw_type = data.get("type")
    try:
        command_type = CommandType(str(raw_type).lower())
    except ValueError:
        message = f"Unknown command type '{raw_type}'"
        raise FloorweaveError(message, [create_state_error(ErrorCode.STA_UNKNOWN_COMMAND, message)])

    payload = data.get("payload") or {}
    try:
        return _COMMANDS[command_type].from_payload(payload)
    except (KeyError, TypeError, ValueError) as e:
        message = f"Malformed {command_type.value} payload: {e}"
        logger.debug(message)
        raise StructuralInvalidError(message, [create_structural_error(ErrorCode.STR_MALFORMED_PAYLOAD, message, source="commands")])
