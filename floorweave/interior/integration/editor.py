"""
editor.py - Location editor command orchestration v1.0

``LocationEditor`` owns one layout (``EditorState``) and its snapshot history.
Every mutating command runs against a deep copy of the state; the copy is
committed and snapshotted only when the command finishes without raising, so
a rejected command leaves the editor exactly as it was.
"""

from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional
import copy
import logging
import math

from floorweave.bootstrap.config import EngineConfig
from floorweave.errors import (
    EngineIssue,
    ErrorCode,
    ErrorSeverity,
    FloorweaveError,
    LayoutInfeasibleError,
    SpaceNotFoundError,
    StructuralInvalidError,
    create_layout_error,
    create_state_error,
    create_structural_error,
)
from floorweave.history import SnapshotHistory, HistoryState
from floorweave.interior.doors.synchronization import (
    ensure_reciprocal,
    remove_counterpart,
    synchronize_reciprocal_doors,
)
from floorweave.interior.generator.layout_generator import LayoutConfig, LayoutGenerator
from floorweave.interior.integration.commands import (
    AddDoor, AddSpace, Command, DeleteSpace, LoadSpaces, MoveSpace, RecalculateLayout,
    Redo, RemoveDoor, ResizeSpace, RestoreSnapshot, SetWallSettings, TogglePositionLock,
    Undo, UpdateDoor, UpdateSpace,
)
from floorweave.interior.schema.space import (
    Door, Position, Space, SpaceIndex, SpaceSize, WallSettings, normalize_door_fields,
)
from floorweave.interior.schema.validation import (
    DoorValidationResult,
    ValidationIssue,
    collect_validation_issues,
    validate_door,
)

__all__ = [
    'EditorState',
    'CommandResult',
    'LocationEditor',
]

logger = logging.getLogger(__name__)

_DOOR_GEOMETRY = ("wall", "position_on_wall_ft", "width_ft", "leads_to")


# =============================================================================
# STATE AND RESULTS
# =============================================================================

@dataclass
class EditorState:
    """The owned, serializable editor state."""

    spaces: List[Space] = field(default_factory=list)
    wall_settings: WallSettings = field(default_factory=WallSettings)
    grid_size_ft: float = 5.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spaces": [s.to_dict() for s in self.spaces],
            "wall_settings": self.wall_settings.to_dict(),
            "grid_size_ft": self.grid_size_ft,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorState":
        settings = data.get("wall_settings")
        return cls(
            spaces=[Space.from_dict(s) for s in data.get("spaces", [])],
            wall_settings=WallSettings.from_dict(settings) if settings else WallSettings(),
            grid_size_ft=float(data.get("grid_size_ft", 5.0)),
        )


@dataclass
class CommandResult:
    """What a caller sees after each command."""

    success: bool
    label: str
    spaces: List[Space] = field(default_factory=list)
    wall_settings: WallSettings = field(default_factory=WallSettings)
    validation_errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[EngineIssue] = field(default_factory=list)
    history: HistoryState = field(default_factory=HistoryState)

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "label": self.label,
            "spaces": [s.to_dict() for s in self.spaces],
            "wall_settings": self.wall_settings.to_dict(),
            "validation_errors": [v.to_dict() for v in self.validation_errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "history": self.history.to_dict(),
        }


@dataclass
class _Working:
    state: EditorState
    warnings: List[EngineIssue] = field(default_factory=list)


# =============================================================================
# EDITOR
# =============================================================================

class LocationEditor:
    """
    Single-writer command processor for one location layout.

    Not thread-safe: a host serving several callers must serialize access
    (one lock or queue per editor).
    """

    def __init__(
        self,
        spaces: Optional[List[Space]] = None,
        wall_settings: Optional[WallSettings] = None,
        config: Optional[EngineConfig] = None,
    ):
        self._config = config or EngineConfig()
        self._generator = LayoutGenerator(LayoutConfig(
            grid_size_ft=self._config.grid_size_ft,
            seed_offset_units=self._config.seed_offset_units,
            padding_units=self._config.padding_units,
            fallback_origin_x_ft=self._config.fallback_origin_x_ft,
            fallback_cell_ft=self._config.fallback_cell_ft,
        ))
        self._history = SnapshotHistory(limit=self._config.history_limit)
        self._state = EditorState(
            wall_settings=wall_settings or WallSettings(
                thickness_ft=self._config.default_wall_thickness_ft,
                material=self._config.default_wall_material,
            ),
            grid_size_ft=self._config.grid_size_ft,
        )
        self.load_spaces(spaces or [])

    @classmethod
    def from_state(cls, state: EditorState, config: Optional[EngineConfig] = None) -> "LocationEditor":
        return cls(spaces=state.spaces, wall_settings=state.wall_settings, config=config)

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def state(self) -> EditorState:
        """Deep copy of the current state."""
        return copy.deepcopy(self._state)

    @property
    def spaces(self) -> List[Space]:
        return copy.deepcopy(self._state.spaces)

    @property
    def wall_settings(self) -> WallSettings:
        return copy.deepcopy(self._state.wall_settings)

    @property
    def history(self) -> SnapshotHistory:
        return self._history

    def get_space(self, space_id: str) -> Space:
        return copy.deepcopy(self._state.spaces[self._locate(self._state.spaces, space_id)])

    def validation_errors(self) -> List[ValidationIssue]:
        """Live list of outstanding door and connectivity issues."""
        return collect_validation_issues(self._state.spaces)

    # -------------------------------------------------------------------------
    # Command plumbing
    # -------------------------------------------------------------------------

    @contextmanager
    def _command(self, label: str) -> Iterator[_Working]:
        """Run a command on a copy; commit and snapshot only on success."""
        working = _Working(state=copy.deepcopy(self._state))
        try:
            yield working
        except FloorweaveError as e:
            logger.info(f"Command '{label}' rejected: {e.message}")
            raise
        self._state = working.state
        self._history.push(self._state.spaces, label, self._state.wall_settings)
        logger.debug(f"Command '{label}' committed")

    def _result(self, label: str, warnings: Optional[List[EngineIssue]] = None) -> CommandResult:
        return CommandResult(
            success=True,
            label=label,
            spaces=copy.deepcopy(self._state.spaces),
            wall_settings=copy.deepcopy(self._state.wall_settings),
            validation_errors=self.validation_errors(),
            warnings=list(warnings or []),
            history=self._history.state(),
        )

    def _run(self, label: str, apply) -> CommandResult:
        with self._command(label) as working:
            apply(working)
        return self._result(label, working.warnings)

    @staticmethod
    def _locate(spaces: List[Space], space_id: str) -> int:
        idx = SpaceIndex(spaces).position_of(space_id)
        if idx is None:
            message = f"Space '{space_id}' not found"
            raise SpaceNotFoundError(message, [create_state_error(ErrorCode.STA_UNKNOWN_SPACE, message, space_id=space_id)])
        return idx

    @staticmethod
    def _door_at(space: Space, door_index: int) -> Door:
        if not 0 <= door_index < len(space.doors):
            message = f"Door index {door_index} not found in room '{space.name}'"
            raise SpaceNotFoundError(message, [create_state_error(
                ErrorCode.STA_UNKNOWN_DOOR, message, space_id=space.space_id, door_index=door_index,
            )])
        return space.doors[door_index]

    @staticmethod
    def _reject_door(space: Space, door_index: int, validation: DoorValidationResult) -> None:
        issues = [
            create_structural_error(v.code, v.message, space_id=space.space_id, door_index=door_index, source="editor")
            for v in validation.errors
        ]
        raise StructuralInvalidError(f"Invalid door in '{space.name}': " + "; ".join(validation.messages), issues)

    @staticmethod
    def _reject(code: ErrorCode, message: str, space_id: str = None) -> None:
        raise StructuralInvalidError(message, [create_structural_error(code, message, space_id=space_id, source="editor")])

    def _check_size(self, size: SpaceSize, space_id: str) -> None:
        for value in (size.width, size.height):
            if not math.isfinite(value) or value <= 0:
                self._reject(
                    ErrorCode.STR_INVALID_SIZE,
                    f"Space '{space_id}' must have positive width and height (got {size.width:g}x{size.height:g})",
                    space_id,
                )

    def _check_unique(self, spaces: List[Space], candidate: Space, skip: Optional[int] = None) -> None:
        for i, other in enumerate(spaces):
            if i == skip:
                continue
            if other.answers_to(candidate.space_id) or other.answers_to(candidate.name):
                self._reject(
                    ErrorCode.STR_DUPLICATE_IDENTITY,
                    f"A space named '{candidate.space_id}' already exists",
                    candidate.space_id,
                )

    def _sync(self, working: _Working) -> None:
        result = synchronize_reciprocal_doors(
            working.state.spaces,
            tolerance=self._config.position_tolerance_ft,
            search_step=self._config.search_step_ft,
        )
        working.state.spaces = result.spaces
        working.warnings.extend(result.warnings)

    def _layout(self, working: _Working, strict: bool) -> None:
        """
        Re-run auto-layout on the working copy.

        Args:
            strict: Raise LayoutInfeasibleError on a failed precondition;
                otherwise report the failure as warnings and keep positions
        """
        result = self._generator.generate(working.state.spaces, working.state.wall_settings)
        working.warnings.extend(result.warnings)
        if result.success:
            working.state.spaces = result.spaces
            return
        if strict:
            raise LayoutInfeasibleError(
                f"Cannot calculate room layout:\n{result.report.itemized()}",
                result.errors,
            )
        working.warnings.extend(result.errors)

    # -------------------------------------------------------------------------
    # Space commands
    # -------------------------------------------------------------------------

    def load_spaces(
        self,
        spaces: List[Space],
        wall_settings: Optional[WallSettings] = None,
    ) -> CommandResult:
        """
        Replace the layout, synchronize reciprocals, and restart history.

        Invalid doors in the loaded data are reported, not rejected.
        """
        spaces = copy.deepcopy(spaces)
        for i, space in enumerate(spaces):
            self._check_size(space.size, space.space_id)
            self._check_unique(spaces[:i], space)

        working = _Working(state=EditorState(
            spaces=spaces,
            wall_settings=copy.deepcopy(wall_settings) if wall_settings else self._state.wall_settings,
            grid_size_ft=self._config.grid_size_ft,
        ))
        self._sync(working)
        self._state = working.state

        label = f"Loaded {len(spaces)} space(s)"
        self._history.reset(self._state.spaces, label, self._state.wall_settings)
        logger.info(f"{label}; {len(self.validation_errors())} validation issue(s)")
        return self._result(label, working.warnings)

    def add_space(self, space: Space) -> CommandResult:
        def apply(working: _Working) -> None:
            spaces = working.state.spaces
            new_space = copy.deepcopy(space)
            self._check_size(new_space.size, new_space.space_id)
            self._check_unique(spaces, new_space)
            for idx, door in enumerate(new_space.doors):
                validation = validate_door(new_space, door, exclude_index=idx)
                if not validation.valid:
                    self._reject_door(new_space, idx, validation)
            spaces.append(new_space)
            self._sync(working)

        return self._run(f"Added {space.name}", apply)

    def update_space(self, space_id: str, updates: Dict[str, Any]) -> CommandResult:
        """
        Merge wire-format ``updates`` into a space.

        Renames retarget every door that referred to the old identifiers.
        Size or door changes are validated like a resize; unlocking triggers
        a relayout.
        """
        def apply(working: _Working) -> None:
            spaces = working.state.spaces
            idx = self._locate(spaces, space_id)
            old = spaces[idx]

            merged = old.to_dict()
            merged.update(updates)
            if "dimensions" in updates and "size_ft" not in updates:
                merged["size_ft"] = updates["dimensions"]
            try:
                new = Space.from_dict(merged)
            except (KeyError, TypeError, ValueError) as e:
                self._reject(ErrorCode.STR_MALFORMED_PAYLOAD, f"Invalid update for '{space_id}': {e}", space_id)
            self._check_size(new.size, new.space_id)
            self._check_unique(spaces, new, skip=idx)
            spaces[idx] = new

            if new.name != old.name or new.code != old.code:
                self._retarget(spaces, old, new)

            if new.size != old.size or "doors" in updates:
                self._revalidate_geometry(working, idx)

            if old.position_locked and not new.position_locked:
                self._sync(working)
                self._layout(working, strict=False)

        return self._run(f"Updated {space_id}", apply)

    @staticmethod
    def _retarget(spaces: List[Space], old: Space, new: Space) -> None:
        for space in spaces:
            if space is new:
                continue
            for door in space.doors:
                if old.answers_to(door.leads_to):
                    use_code = bool(old.code and door.leads_to == old.code and new.code)
                    door.leads_to = new.code if use_code else new.name
        logger.info(f"Retargeted doors from '{old.space_id}' to '{new.space_id}'")

    def _revalidate_geometry(self, working: _Working, idx: int) -> None:
        """Drop mirrors that no longer fit, re-sync, then reject bad parent doors."""
        space = working.state.spaces[idx]
        space.doors = [
            d for i, d in enumerate(space.doors)
            if not d.is_reciprocal or validate_door(space, d, exclude_index=i).valid
        ]
        self._sync(working)

        space = working.state.spaces[idx]
        for i, door in enumerate(space.doors):
            if door.is_reciprocal:
                continue
            validation = validate_door(space, door, exclude_index=i)
            if not validation.valid:
                self._reject_door(space, i, validation)

    def delete_space(self, space_id: str) -> CommandResult:
        """
        Remove a space and every mirror door pointing at it. Parent doors that
        pointed at it stay and surface as broken connections.
        """
        def apply(working: _Working) -> None:
            spaces = working.state.spaces
            idx = self._locate(spaces, space_id)
            removed = spaces.pop(idx)
            for space in spaces:
                space.doors = [
                    d for d in space.doors
                    if not (d.is_reciprocal and removed.answers_to(d.leads_to))
                ]

        return self._run(f"Deleted {space_id}", apply)

    def move_space(self, space_id: str, position: Position) -> CommandResult:
        """Place a space directly. Moving implies locking."""
        def apply(working: _Working) -> None:
            space = working.state.spaces[self._locate(working.state.spaces, space_id)]
            space.position = Position(x=position.x, y=position.y)
            space.position_locked = True

        return self._run(f"Moved {space_id}", apply)

    def resize_space(self, space_id: str, size: SpaceSize) -> CommandResult:
        def apply(working: _Working) -> None:
            idx = self._locate(working.state.spaces, space_id)
            self._check_size(size, space_id)
            working.state.spaces[idx].size = SpaceSize(width=size.width, height=size.height)
            self._revalidate_geometry(working, idx)

        return self._run(f"Resized {space_id}", apply)

    def toggle_position_lock(self, space_id: str) -> CommandResult:
        """Flip the lock. Unlocking recomputes the layout."""
        def apply(working: _Working) -> None:
            space = working.state.spaces[self._locate(working.state.spaces, space_id)]
            space.position_locked = not space.position_locked
            if not space.position_locked:
                self._sync(working)
                self._layout(working, strict=False)

        return self._run(f"Toggled lock on {space_id}", apply)

    # -------------------------------------------------------------------------
    # Door commands
    # -------------------------------------------------------------------------

    def add_door(self, space_id: str, door: Door, skip_reciprocal: bool = False) -> CommandResult:
        """
        Add a door after checking width, bounds, and overlap.

        Raises:
            StructuralInvalidError: the door does not fit; nothing changes
        """
        def apply(working: _Working) -> None:
            spaces = working.state.spaces
            idx = self._locate(spaces, space_id)
            space = spaces[idx]
            new_door = copy.deepcopy(door)

            validation = validate_door(space, new_door)
            if not validation.valid:
                self._reject_door(space, len(space.doors), validation)

            space.doors.append(new_door)
            if not skip_reciprocal:
                warning = ensure_reciprocal(
                    spaces, idx, new_door,
                    tolerance=self._config.position_tolerance_ft,
                    search_step=self._config.search_step_ft,
                )
                if warning:
                    working.warnings.append(warning)

        return self._run(f"Added door {space_id} -> {door.leads_to}", apply)

    def remove_door(self, space_id: str, door_index: int, skip_reciprocal: bool = False) -> CommandResult:
        """Remove a door and, unless skipped, the door at the other end."""
        def apply(working: _Working) -> None:
            spaces = working.state.spaces
            idx = self._locate(spaces, space_id)
            space = spaces[idx]
            door = self._door_at(space, door_index)
            space.doors = [d for i, d in enumerate(space.doors) if i != door_index]

            if not space.doors and not space.access_point and not space.position_locked:
                working.warnings.append(create_layout_error(
                    f'Removing this door leaves "{space.name}" with no access. Add an access_point '
                    f"or lock the room's position before recalculating the layout.",
                    space_id=space.space_id,
                    severity=ErrorSeverity.WARNING,
                ))

            if not skip_reciprocal:
                remove_counterpart(spaces, idx, door, tolerance=self._config.position_tolerance_ft)

        return self._run(f"Removed door {door_index} from {space_id}", apply)

    def update_door(self, space_id: str, door_index: int, updates: Dict[str, Any]) -> CommandResult:
        """
        Merge wire-format ``updates`` into a door.

        A parent door whose wall, position, width, or target changes has its
        old mirror removed and a new one created. Mirror doors and decorative
        changes are applied in place.

        Raises:
            StructuralInvalidError: the updated door does not fit; nothing changes
        """
        def apply(working: _Working) -> None:
            spaces = working.state.spaces
            idx = self._locate(spaces, space_id)
            space = spaces[idx]
            old = self._door_at(space, door_index)

            merged = old.to_dict()
            merged.update(normalize_door_fields(updates))
            try:
                new = Door.from_dict(merged)
            except (KeyError, TypeError, ValueError) as e:
                self._reject(ErrorCode.STR_MALFORMED_PAYLOAD, f"Invalid door update: {e}", space.space_id)

            validation = validate_door(space, new, exclude_index=door_index)
            if not validation.valid:
                self._reject_door(space, door_index, validation)

            moved = any(getattr(new, key) != getattr(old, key) for key in _DOOR_GEOMETRY)
            if moved and not old.is_reciprocal:
                remove_counterpart(spaces, idx, old, tolerance=self._config.position_tolerance_ft)
            space.doors[door_index] = new
            if moved and not new.is_reciprocal:
                warning = ensure_reciprocal(
                    spaces, idx, new,
                    tolerance=self._config.position_tolerance_ft,
                    search_step=self._config.search_step_ft,
                )
                if warning:
                    working.warnings.append(warning)

        return self._run(f"Updated door {door_index} in {space_id}", apply)

    # -------------------------------------------------------------------------
    # Layout commands
    # -------------------------------------------------------------------------

    def set_wall_settings(self, settings: WallSettings) -> CommandResult:
        """Change global wall defaults; relayout only if something can move."""
        def apply(working: _Working) -> None:
            if not math.isfinite(settings.thickness_ft) or settings.thickness_ft <= 0:
                self._reject(
                    ErrorCode.STR_INVALID_SETTINGS,
                    f"Wall thickness must be > 0 (got {settings.thickness_ft:g})",
                )
            working.state.wall_settings = WallSettings(settings.thickness_ft, settings.material)
            if any(not s.position_locked for s in working.state.spaces):
                self._sync(working)
                self._layout(working, strict=False)

        return self._run(f"Wall settings: {settings.thickness_ft:g}ft {settings.material}", apply)

    def recalculate_layout(self) -> CommandResult:
        """
        Synchronize reciprocals and recompute every unlocked position.

        Raises:
            LayoutInfeasibleError: an unlocked space has no door or access
                point; the itemized issues are attached and nothing changes
        """
        def apply(working: _Working) -> None:
            self._sync(working)
            self._layout(working, strict=True)

        return self._run("Recalculated layout", apply)

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def _apply_snapshot(self, snapshot, label: str) -> CommandResult:
        self._state.spaces = snapshot.spaces
        if snapshot.wall_settings is not None:
            self._state.wall_settings = snapshot.wall_settings
        return self._result(label)

    def undo(self) -> CommandResult:
        """Restore the previous snapshot verbatim."""
        snapshot = self._history.undo()
        return self._apply_snapshot(snapshot, f"Undo: {snapshot.label}")

    def redo(self) -> CommandResult:
        """Restore the next snapshot verbatim."""
        snapshot = self._history.redo()
        return self._apply_snapshot(snapshot, f"Redo: {snapshot.label}")

    def restore_snapshot(self, position: int) -> CommandResult:
        snapshot = self._history.restore(position)
        return self._apply_snapshot(snapshot, f"Restored: {snapshot.label}")

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def dispatch(self, command: Command) -> CommandResult:
        """Apply one command object."""
        if isinstance(command, LoadSpaces):
            return self.load_spaces(command.spaces, command.wall_settings)
        if isinstance(command, AddSpace):
            return self.add_space(command.space)
        if isinstance(command, UpdateSpace):
            return self.update_space(command.space_id, command.updates)
        if isinstance(command, DeleteSpace):
            return self.delete_space(command.space_id)
        if isinstance(command, MoveSpace):
            return self.move_space(command.space_id, command.position)
        if isinstance(command, ResizeSpace):
            return self.resize_space(command.space_id, command.size)
        if isinstance(command, AddDoor):
            return self.add_door(command.space_id, command.door, command.skip_reciprocal)
        if isinstance(command, RemoveDoor):
            return self.remove_door(command.space_id, command.door_index, command.skip_reciprocal)
        if isinstance(command, UpdateDoor):
            return self.update_door(command.space_id, command.door_index, command.updates)
        if isinstance(command, TogglePositionLock):
            return self.toggle_position_lock(command.space_id)
        if isinstance(command, SetWallSettings):
            return self.set_wall_settings(command.settings)
        if isinstance(command, RecalculateLayout):
            return self.recalculate_layout()
        if isinstance(command, Undo):
            return self.undo()
        if isinstance(command, Redo):
            return self.redo()
        if isinstance(command, RestoreSnapshot):
            return self.restore_snapshot(command.position)

        message = f"Unsupported command {type(command).__name__}"
        raise FloorweaveError(message, [create_state_error(ErrorCode.STA_UNKNOWN_COMMAND, message)])
