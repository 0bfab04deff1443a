"""
validation.py - Door and layout validation v1.0

Pure checks over spaces and doors. Nothing here mutates its input or raises
for an invalid layout; results are returned as structured records and the
command layer decides whether to reject.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Tuple
from enum import Enum
import logging
import math

from floorweave.errors import ErrorCode
from floorweave.interior.graph.connectivity import build_door_graph, connected_groups
from floorweave.interior.schema.space import (
    Space, Door, Wall, SpaceIndex, PENDING, EPSILON, fmt_ft,
)

__all__ = [
    'ValidationSeverity',
    'IssueType',
    'DoorViolation',
    'DoorValidationResult',
    'DoorValidationEntry',
    'ValidationIssue',
    'validate_door',
    'validate_all_doors',
    'to_validation_issues',
    'validate_connectivity',
    'validate_incoming_space',
    'collect_validation_issues',
]

logger = logging.getLogger(__name__)


# =============================================================================
# ENUMS
# =============================================================================

class ValidationSeverity(Enum):
    """Severity levels for validation issues."""

    ERROR = "error"
    WARNING = "warning"


class IssueType(Enum):
    """Flat issue classification reported to editor clients."""

    OVERLAP = "overlap"
    OUT_OF_BOUNDS = "out-of-bounds"
    INVALID_DOOR = "invalid-door"
    BROKEN_CONNECTION = "broken-connection"
    PENDING = "pending"
    DISCONNECTED = "disconnected"


_TYPE_BY_CODE = {
    ErrorCode.STR_OVERLAP: IssueType.OVERLAP,
    ErrorCode.STR_OUT_OF_BOUNDS: IssueType.OUT_OF_BOUNDS,
    ErrorCode.STR_WIDTH_EXCEEDS_WALL: IssueType.OUT_OF_BOUNDS,
}


# =============================================================================
# DOOR RESULTS
# =============================================================================

@dataclass
class DoorViolation:
    """One reason a door is invalid."""

    code: ErrorCode
    message: str


@dataclass
class DoorValidationResult:
    """
    Result of validating a single door.

    Attributes:
        valid: False once any error is added
        errors: Ordered violations
        warnings: Advisory messages
    """

    valid: bool = True
    errors: List[DoorViolation] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, code: ErrorCode, message: str) -> None:
        self.errors.append(DoorViolation(code=code, message=message))
        self.valid = False

    def has_code(self, code: ErrorCode) -> bool:
        return any(e.code == code for e in self.errors)

    @property
    def messages(self) -> List[str]:
        return [e.message for e in self.errors]


@dataclass
class DoorValidationEntry:
    """An invalid door located within the layout."""

    space_id: str
    door_index: int
    door: Door
    validation: DoorValidationResult


@dataclass
class ValidationIssue:
    """Flat issue record for the live validation list."""

    id: str
    room_id: str
    type: IssueType
    message: str
    severity: ValidationSeverity = ValidationSeverity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "room_id": self.room_id,
            "type": self.type.value,
            "message": self.message,
            "severity": self.severity.value,
        }


# =============================================================================
# DOOR CHECKS
# =============================================================================

def validate_door(
    space: Space,
    door: Door,
    exclude_index: Optional[int] = None,
) -> DoorValidationResult:
    """
    Check a door against its space's walls and the other doors on that wall.

    Args:
        space: Space the door belongs (or would belong) to
        door: Door to check
        exclude_index: Index in ``space.doors`` to skip when checking overlap,
            used when the door is already part of the list

    Returns:
        DoorValidationResult with ordered violations
    """
    result = DoorValidationResult()
    wall = door.wall.value
    length = space.wall_length(door.wall)

    if door.width_ft <= 0 or not math.isfinite(door.width_ft):
        result.add_error(
            ErrorCode.STR_INVALID_DOOR,
            f"Door width must be a positive number (got {door.width_ft}ft)",
        )
        return result

    if door.width_ft > length + EPSILON:
        result.add_error(
            ErrorCode.STR_WIDTH_EXCEEDS_WALL,
            f"Door width ({fmt_ft(door.width_ft)}ft) exceeds {wall} wall length ({fmt_ft(length)}ft)",
        )

    if door.left_edge < -EPSILON or door.right_edge > length + EPSILON:
        half = door.width_ft / 2
        result.add_error(
            ErrorCode.STR_OUT_OF_BOUNDS,
            f"Door position ({fmt_ft(door.position_on_wall_ft)}ft) extends beyond {wall} wall bounds. "
            f"Valid range: {half:.1f}ft - {length - half:.1f}ft",
        )

    conflicts = [
        other for i, other in enumerate(space.doors)
        if other is not door and i != exclude_index and other.conflicts_with(door)
    ]
    if conflicts:
        desc = ", ".join(f"{d.leads_to} at {fmt_ft(d.position_on_wall_ft)}ft" for d in conflicts)
        result.add_error(
            ErrorCode.STR_OVERLAP,
            f"Door conflicts with existing door(s) on {wall} wall: {desc}",
        )

    return result


def validate_all_doors(spaces: List[Space]) -> List[DoorValidationEntry]:
    """One entry per invalid door, in space then door order."""
    entries = []
    for space in spaces:
        for idx, door in enumerate(space.doors):
            validation = validate_door(space, door, exclude_index=idx)
            if not validation.valid:
                entries.append(DoorValidationEntry(
                    space_id=space.space_id,
                    door_index=idx,
                    door=door,
                    validation=validation,
                ))
    return entries


def to_validation_issues(entries: List[DoorValidationEntry]) -> List[ValidationIssue]:
    """Flatten per-door results into issues keyed ``<space>-door-<index>``."""
    issues = []
    for entry in entries:
        issue_id = f"{entry.space_id}-door-{entry.door_index}"
        for violation in entry.validation.errors:
            issues.append(ValidationIssue(
                id=issue_id,
                room_id=entry.space_id,
                type=_TYPE_BY_CODE.get(violation.code, IssueType.INVALID_DOOR),
                message=violation.message,
            ))
        for warning in entry.validation.warnings:
            issues.append(ValidationIssue(
                id=f"{issue_id}-warning",
                room_id=entry.space_id,
                type=IssueType.INVALID_DOOR,
                message=warning,
                severity=ValidationSeverity.WARNING,
            ))
    return issues


# =============================================================================
# CONNECTIVITY
# =============================================================================

def validate_connectivity(spaces: List[Space]) -> List[ValidationIssue]:
    """
    Report doors whose targets do not resolve, doors still pending, and
    disconnected groups of spaces.
    """
    index = SpaceIndex(spaces)
    issues: List[ValidationIssue] = []

    for space in spaces:
        for idx, door in enumerate(space.doors):
            issue_id = f"{space.space_id}-door-{idx}"
            if door.leads_to == PENDING:
                issues.append(ValidationIssue(
                    id=f"{issue_id}-pending",
                    room_id=space.space_id,
                    type=IssueType.PENDING,
                    message=f"Door on {door.wall.value} wall of {space.name} still leads to Pending",
                    severity=ValidationSeverity.WARNING,
                ))
            elif not door.targets_sentinel and index.position_of(door.leads_to) is None:
                issues.append(ValidationIssue(
                    id=f"{issue_id}-broken",
                    room_id=space.space_id,
                    type=IssueType.BROKEN_CONNECTION,
                    message=f"Door on {door.wall.value} wall of {space.name} leads to unknown space '{door.leads_to}'",
                ))

    groups = connected_groups(build_door_graph(spaces))
    if len(groups) > 1:
        listing = "; ".join(", ".join(group) for group in groups)
        issues.append(ValidationIssue(
            id="layout-disconnected",
            room_id=groups[1][0],
            type=IssueType.DISCONNECTED,
            message=f"Layout has {len(groups)} disconnected groups: {listing}",
            severity=ValidationSeverity.WARNING,
        ))

    return issues


def collect_validation_issues(spaces: List[Space]) -> List[ValidationIssue]:
    """Door issues followed by connectivity issues."""
    return to_validation_issues(validate_all_doors(spaces)) + validate_connectivity(spaces)


# =============================================================================
# INCOMING PAYLOADS
# =============================================================================

def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def _room_size(payload: Dict[str, Any], issues: List[Tuple[str, str]]) -> Optional[Tuple[float, float]]:
    for key in ("size_ft", "dimensions"):
        size = payload.get(key)
        if isinstance(size, dict):
            w, h = _number(size.get("width")), _number(size.get("height"))
            if w is not None and h is not None:
                return w, h
            issues.append((key, f"Expected {key} to be {{width:number, height:number}} (got {size!r})"))
            return None
    issues.append(("size_ft", "Missing size_ft. Provide size_ft {width, height} in feet."))
    return None


def _check_door_payload(idx: int, door: Any, issues: List[Tuple[str, str]]) -> None:
    path = f"doors[{idx}]"
    if not isinstance(door, dict):
        issues.append((path, "Door must be an object."))
        return

    if door.get("wall") not in {w.value for w in Wall}:
        issues.append((f"{path}.wall", "wall must be one of: north|south|east|west."))
    if "position" in door:
        issues.append((f"{path}.position", "Do not use `position`. Use `position_on_wall_ft` (door center, feet from wall start)."))
    if "width" in door:
        issues.append((f"{path}.width", "Do not use `width`. Use `width_ft` (feet)."))

    style = door.get("style") or door.get("door_type")
    if not isinstance(style, str) or not style.strip():
        issues.append((f"{path}.style", 'Door must have "style" or "door_type".'))

    pos = _number(door.get("position_on_wall_ft"))
    if pos is None:
        issues.append((f"{path}.position_on_wall_ft", "position_on_wall_ft is required and must be a number."))
    elif pos < 0:
        issues.append((f"{path}.position_on_wall_ft", f"position_on_wall_ft cannot be negative (got {fmt_ft(pos)}ft)."))

    width = _number(door.get("width_ft"))
    if width is None:
        issues.append((f"{path}.width_ft", "width_ft is required and must be a number."))
    elif width <= 0:
        issues.append((f"{path}.width_ft", f"width_ft must be > 0 (got {fmt_ft(width)}ft)."))

    leads_to = door.get("leads_to")
    if not isinstance(leads_to, str) or not leads_to.strip():
        issues.append((f"{path}.leads_to", 'leads_to is required and must be a non-empty string (or "Pending").'))


def _check_feature_payload(
    idx: int,
    feature: Any,
    room: Optional[Tuple[float, float]],
    issues: List[Tuple[str, str]],
) -> None:
    path = f"features[{idx}]"
    if not isinstance(feature, dict):
        issues.append((path, "Feature must be an object."))
        return

    anchor = feature.get("position_anchor")
    if anchor is not None and anchor != "center":
        issues.append((f"{path}.position_anchor", 'If provided, position_anchor must be "center".'))

    pos = feature.get("position")
    if not isinstance(pos, dict):
        issues.append((f"{path}.position", "position is required and must be {x:number, y:number} in feet."))
        return
    x, y = _number(pos.get("x")), _number(pos.get("y"))
    if x is None or y is None:
        issues.append((f"{path}.position", f"position.x and position.y must be finite numbers (got {pos!r})."))
        return

    if room and (x < 0 or x > room[0] or y < 0 or y > room[1]):
        issues.append((
            f"{path}.position",
            f"Feature center must be within room bounds: x in [0,{fmt_ft(room[0])}], "
            f"y in [0,{fmt_ft(room[1])}] (got x={fmt_ft(x)}, y={fmt_ft(y)}).",
        ))

    shape = feature.get("shape")
    if shape == "circle":
        radius = _number(feature.get("radius"))
        if radius is None:
            issues.append((f"{path}.radius", "Circle features must include radius (feet)."))
        elif room and (x - radius < 0 or x + radius > room[0] or y - radius < 0 or y + radius > room[1]):
            issues.append((path, f"Circle must fit inside room (r={fmt_ft(radius)}, x={fmt_ft(x)}, y={fmt_ft(y)})."))
    elif shape == "rectangle":
        w, h = _number(feature.get("width")), _number(feature.get("height"))
        if w is None or h is None:
            issues.append((path, "Rectangle features must include width and height (feet)."))
        elif room and (x - w / 2 < 0 or x + w / 2 > room[0] or y - h / 2 < 0 or y + h / 2 > room[1]):
            issues.append((path, f"Rectangle must fit inside room when center-anchored (w={fmt_ft(w)}, h={fmt_ft(h)}, x={fmt_ft(x)}, y={fmt_ft(y)})."))
    else:
        issues.append((f"{path}.shape", 'shape is required and must be "rectangle" or "circle".'))


def validate_incoming_space(payload: Any) -> Tuple[bool, str]:
    """
    Strictly check a raw space dict before it enters the editor.

    Returns:
        (ok, message); the message itemizes every problem found
    """
    if not isinstance(payload, dict):
        return False, f"Invalid space: expected a JSON object but got {type(payload).__name__}."

    issues: List[Tuple[str, str]] = []

    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        issues.append(("name", "Name is required and must be a non-empty string."))

    room = _room_size(payload, issues)

    doors = payload.get("doors")
    if doors is not None:
        if not isinstance(doors, list):
            issues.append(("doors", "Doors must be an array."))
        else:
            for idx, door in enumerate(doors):
                _check_door_payload(idx, door, issues)

    features = payload.get("features")
    if features is not None:
        if not isinstance(features, list):
            issues.append(("features", "Features must be an array."))
        else:
            for idx, feature in enumerate(features):
                _check_feature_payload(idx, feature, room, issues)

    if not issues:
        return True, ""

    lines = ["Incoming space failed strict validation:", ""]
    lines.extend(f"- {path}: {message}" for path, message in issues)
    logger.debug(f"Rejected incoming space '{name}': {len(issues)} issue(s)")
    return False, "\n".join(lines)
