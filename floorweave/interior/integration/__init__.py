"""
interior/integration - Editor command orchestration package.

Applies the closed command set to an owned layout state and records
snapshots for undo/redo.
"""

from floorweave.interior.integration.commands import (
    CommandType,
    Command,
    LoadSpaces,
    AddSpace,
    UpdateSpace,
    DeleteSpace,
    MoveSpace,
    ResizeSpace,
    AddDoor,
    RemoveDoor,
    UpdateDoor,
    TogglePositionLock,
    SetWallSettings,
    RecalculateLayout,
    Undo,
    Redo,
    RestoreSnapshot,
    command_from_dict,
)
from floorweave.interior.integration.editor import (
    EditorState,
    CommandResult,
    LocationEditor,
)

__all__ = [
    # Commands
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
    # Editor
    'EditorState',
    'CommandResult',
    'LocationEditor',
]
