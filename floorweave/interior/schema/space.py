"""
space.py - Space and door definition schema v1.0

Defines spaces (rooms sized in feet), wall-mounted doors that connect them, and
the global wall defaults used when a space carries no override.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any, Iterable
from enum import Enum
import logging
import math

__all__ = [
    'Wall',
    'SpaceShape',
    'SpaceSize',
    'Position',
    'WallSettings',
    'Door',
    'Space',
    'SpaceIndex',
    'PENDING',
    'is_sentinel',
    'normalize_door_fields',
]

logger = logging.getLogger(__name__)

PENDING = "Pending"
OUTSIDE = "Outside"

# Float slack for geometry comparisons
EPSILON = 1e-6


def is_sentinel(leads_to: Optional[str]) -> bool:
    """True for door targets that never resolve to a space."""
    if not leads_to:
        return True
    return leads_to == PENDING or OUTSIDE in leads_to


def fmt_ft(value: float) -> str:
    """Render a foot value without a trailing .0."""
    return f"{value:g}"


# =============================================================================
# ENUMS
# =============================================================================

class Wall(Enum):
    """Cardinal walls of a space's footprint."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def opposite(self) -> "Wall":
        return _OPPOSITE_WALLS[self]

    @property
    def is_horizontal(self) -> bool:
        """North/south walls run along the space's width."""
        return self in (Wall.NORTH, Wall.SOUTH)

    @classmethod
    def parse(cls, value: Any) -> "Wall":
        if isinstance(value, Wall):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Invalid wall '{value}' (expected north, south, east or west)")


_OPPOSITE_WALLS = {
    Wall.NORTH: Wall.SOUTH,
    Wall.SOUTH: Wall.NORTH,
    Wall.EAST: Wall.WEST,
    Wall.WEST: Wall.EAST,
}


class SpaceShape(Enum):
    """Footprint shapes. Walls are always taken from the bounding box."""

    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    L_SHAPE = "l_shape"

    @classmethod
    def parse(cls, value: Any) -> "SpaceShape":
        if isinstance(value, SpaceShape):
            return value
        if not value:
            return cls.RECTANGLE
        key = str(value).strip().lower().replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            logger.warning(f"Unknown shape '{value}', treating as rectangle")
            return cls.RECTANGLE


# =============================================================================
# GEOMETRY VALUES
# =============================================================================

@dataclass
class SpaceSize:
    """Footprint size in feet."""

    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpaceSize":
        return cls(width=float(data["width"]), height=float(data["height"]))


@dataclass
class Position:
    """Top-left corner of a space, in feet. Y grows southward."""

    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Position":
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass
class WallSettings:
    """Global wall defaults applied when a space has no override."""

    thickness_ft: float = 10.0
    material: str = "stone"

    def to_dict(self) -> Dict[str, Any]:
        return {"thickness_ft": self.thickness_ft, "material": self.material}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WallSettings":
        return cls(
            thickness_ft=float(data.get("thickness_ft", 10.0)),
            material=data.get("material", "stone"),
        )


# =============================================================================
# DOOR
# =============================================================================

_DOOR_KEYS = {
    "wall", "position_on_wall_ft", "width_ft", "leads_to", "is_reciprocal",
    "style", "door_type", "material", "state", "color",
}


@dataclass
class Door:
    """
    A wall-mounted connector referencing a target space.

    Attributes:
        wall: Wall the door sits on
        position_on_wall_ft: Distance of the door's center from the wall start
        width_ft: Door width
        leads_to: Target space identity, or a sentinel (Pending/Outside)
        is_reciprocal: True only for auto-created mirror doors
        style/door_type/material/state/color: Decorative pass-through
        extras: Unknown keys preserved through serialization
    """

    wall: Wall
    position_on_wall_ft: float
    width_ft: float
    leads_to: str
    is_reciprocal: bool = False

    # Decorative
    style: Optional[str] = None
    door_type: Optional[str] = None
    material: Optional[str] = None
    state: Optional[str] = None
    color: Optional[str] = None

    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def left_edge(self) -> float:
        return self.position_on_wall_ft - self.width_ft / 2

    @property
    def right_edge(self) -> float:
        return self.position_on_wall_ft + self.width_ft / 2

    @property
    def targets_sentinel(self) -> bool:
        return is_sentinel(self.leads_to)

    def conflicts_with(self, other: "Door") -> bool:
        """Same wall and overlapping intervals. Touching edges do not conflict."""
        if self.wall != other.wall:
            return False
        overlap = min(self.right_edge, other.right_edge) - max(self.left_edge, other.left_edge)
        return overlap > EPSILON

    def decorations(self) -> Dict[str, Optional[str]]:
        return {
            "style": self.style,
            "door_type": self.door_type,
            "material": self.material,
            "state": self.state,
            "color": self.color,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        data = dict(self.extras)
        data.update({
            "wall": self.wall.value,
            "position_on_wall_ft": self.position_on_wall_ft,
            "width_ft": self.width_ft,
            "leads_to": self.leads_to,
        })
        for key, value in self.decorations().items():
            if value is not None:
                data[key] = value
        if self.is_reciprocal:
            data["is_reciprocal"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], wall_length: Optional[float] = None) -> "Door":
        """
        Deserialize from dictionary.

        Legacy ``width``/``position`` keys are normalized first; ``wall_length`` is
        needed to resolve relative positions and default the position to wall center.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Door entries must be objects (got {data!r})")
        data = normalize_door_fields(data, wall_length)
        if "position_on_wall_ft" not in data:
            raise ValueError("Door is missing position_on_wall_ft")
        if "width_ft" not in data:
            raise ValueError("Door is missing width_ft")

        return cls(
            wall=Wall.parse(data.get("wall")),
            position_on_wall_ft=float(data["position_on_wall_ft"]),
            width_ft=float(data["width_ft"]),
            leads_to=str(data.get("leads_to") or ""),
            is_reciprocal=bool(data.get("is_reciprocal", False)),
            style=data.get("style"),
            door_type=data.get("door_type"),
            material=data.get("material"),
            state=data.get("state"),
            color=data.get("color"),
            extras={k: v for k, v in data.items() if k not in _DOOR_KEYS},
        )


def normalize_door_fields(raw: Dict[str, Any], wall_length: Optional[float] = None) -> Dict[str, Any]:
    """
    Rewrite legacy door keys into the current field names.

    - ``width`` becomes ``width_ft``
    - ``position`` becomes ``position_on_wall_ft``; values in [0, 1] are relative
      to the wall and scaled by ``wall_length``, larger values are already feet
    - a missing position defaults to the wall center when the length is known

    Returns a new dict; the input is not modified.
    """
    data = dict(raw)

    if "width_ft" not in data and "width" in data:
        data["width_ft"] = data["width"]
    data.pop("width", None)

    if "position_on_wall_ft" not in data and "position" in data:
        legacy = float(data["position"])
        if 0 <= legacy <= 1 and wall_length is not None:
            data["position_on_wall_ft"] = legacy * wall_length
        else:
            data["position_on_wall_ft"] = legacy
    data.pop("position", None)

    if "position_on_wall_ft" not in data and wall_length is not None:
        data["position_on_wall_ft"] = wall_length / 2

    return data


# =============================================================================
# SPACE
# =============================================================================

_SPACE_KEYS = {
    "name", "code", "size_ft", "dimensions", "position", "position_locked",
    "wall_thickness_ft", "wall_material", "doors", "access_point", "shape",
    "l_cutout_corner", "space_type", "level", "index", "purpose", "description",
    "features",
}


@dataclass
class Space:
    """
    A placeable room with a size, optional position, and doors.

    Attributes:
        name: Display name (identity when no code is set)
        size: Footprint in feet
        code: Optional short identifier, preferred as identity
        position: Top-left corner in feet, absent until placed
        position_locked: Exempt from auto-layout when True
        wall_thickness_ft: Per-space override of the global wall thickness
        wall_material: Per-space override of the global wall material
        doors: Ordered door list (order is display-only)
        access_point: Marks an entry space that needs no door
    """

    name: str
    size: SpaceSize
    code: Optional[str] = None

    # Placement
    position: Optional[Position] = None
    position_locked: bool = False

    # Walls
    wall_thickness_ft: Optional[float] = None
    wall_material: Optional[str] = None

    doors: List[Door] = field(default_factory=list)
    access_point: bool = False

    # Footprint
    shape: SpaceShape = SpaceShape.RECTANGLE
    l_cutout_corner: Optional[str] = None

    # Metadata (opaque to the engine)
    space_type: str = "room"
    level: int = 0
    index: Optional[int] = None
    purpose: Optional[str] = None
    description: Optional[str] = None
    features: List[Any] = field(default_factory=list)
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def space_id(self) -> str:
        """Identity key: code if present, else name."""
        return self.code or self.name

    @property
    def is_placed(self) -> bool:
        return self.position is not None

    @property
    def is_anchored(self) -> bool:
        """Locked with a position; layout must not move it."""
        return self.position_locked and self.position is not None

    def wall_length(self, wall: Wall) -> float:
        """Width for north/south walls, height for east/west walls."""
        return self.size.width if wall.is_horizontal else self.size.height

    def effective_wall_thickness(self, settings: WallSettings) -> float:
        thickness = self.wall_thickness_ft
        if thickness is not None and math.isfinite(thickness) and thickness > 0:
            return thickness
        return settings.thickness_ft

    def effective_wall_material(self, settings: WallSettings) -> str:
        return self.wall_material or settings.material

    def answers_to(self, ref: Optional[str]) -> bool:
        """Whether a door target or command id names this space."""
        if not ref:
            return False
        if ref == self.name or (self.code and ref == self.code):
            return True
        folded = ref.casefold()
        return folded == self.name.casefold() or bool(self.code and folded == self.code.casefold())

    def doors_on(self, wall: Wall) -> List[Door]:
        return [d for d in self.doors if d.wall == wall]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        data = dict(self.extras)
        data.update({
            "name": self.name,
            "size_ft": self.size.to_dict(),
            "position_locked": self.position_locked,
            "doors": [d.to_dict() for d in self.doors],
            "space_type": self.space_type,
            "level": self.level,
            "shape": self.shape.value,
        })
        if self.code is not None:
            data["code"] = self.code
        if self.position is not None:
            data["position"] = self.position.to_dict()
        if self.wall_thickness_ft is not None:
            data["wall_thickness_ft"] = self.wall_thickness_ft
        if self.wall_material is not None:
            data["wall_material"] = self.wall_material
        if self.access_point:
            data["access_point"] = True
        if self.l_cutout_corner is not None:
            data["l_cutout_corner"] = self.l_cutout_corner
        if self.index is not None:
            data["index"] = self.index
        if self.purpose is not None:
            data["purpose"] = self.purpose
        if self.description is not None:
            data["description"] = self.description
        if self.features:
            data["features"] = list(self.features)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Space":
        """Deserialize from dictionary, accepting legacy ``dimensions`` and door keys."""
        size_data = data.get("size_ft") or data.get("dimensions")
        if not size_data:
            raise ValueError(f"Space '{data.get('name')}' is missing size_ft")
        size = SpaceSize.from_dict(size_data)

        doors = []
        for raw in data.get("doors") or []:
            if not isinstance(raw, dict):
                raise ValueError(f"Door entries must be objects (got {raw!r})")
            wall = Wall.parse(raw.get("wall"))
            length = size.width if wall.is_horizontal else size.height
            doors.append(Door.from_dict(raw, wall_length=length))

        position = data.get("position")
        thickness = data.get("wall_thickness_ft")

        return cls(
            name=str(data["name"]),
            size=size,
            code=data.get("code") or None,
            position=Position.from_dict(position) if position else None,
            position_locked=bool(data.get("position_locked", False)),
            wall_thickness_ft=float(thickness) if thickness is not None else None,
            wall_material=data.get("wall_material"),
            doors=doors,
            access_point=bool(data.get("access_point", False)),
            shape=SpaceShape.parse(data.get("shape")),
            l_cutout_corner=data.get("l_cutout_corner"),
            space_type=data.get("space_type", "room"),
            level=int(data.get("level", 0)),
            index=data.get("index"),
            purpose=data.get("purpose"),
            description=data.get("description"),
            features=list(data.get("features") or []),
            extras={k: v for k, v in data.items() if k not in _SPACE_KEYS},
        )


# =============================================================================
# SPACE INDEX
# =============================================================================

class SpaceIndex:
    """
    Resolves door targets and command ids to positions in a space list.

    Lookup order: exact identity, exact name, exact code, then a
    case-insensitive match on identity or name.
    """

    def __init__(self, spaces: Iterable[Space]):
        self._spaces: List[Space] = list(spaces)
        self._by_id: Dict[str, int] = {}
        self._by_name: Dict[str, int] = {}
        self._by_code: Dict[str, int] = {}
        self._folded: Dict[str, int] = {}

        for i, space in enumerate(self._spaces):
            self._by_id.setdefault(space.space_id, i)
            self._by_name.setdefault(space.name, i)
            if space.code:
                self._by_code.setdefault(space.code, i)
            self._folded.setdefault(space.space_id.casefold(), i)
            self._folded.setdefault(space.name.casefold(), i)

    def __len__(self) -> int:
        return len(self._spaces)

    def position_of(self, ref: Optional[str]) -> Optional[int]:
        """List position of the referenced space, or None."""
        if not ref or is_sentinel(ref):
            return None
        for table in (self._by_id, self._by_name, self._by_code):
            if ref in table:
                return table[ref]
        return self._folded.get(ref.casefold())

    def resolve(self, ref: Optional[str]) -> Optional[Space]:
        idx = self.position_of(ref)
        return self._spaces[idx] if idx is not None else None

    def resolve_target(self, source: Space, door: Door) -> Optional[int]:
        """Position of a door's target, ignoring self-references."""
        idx = self.position_of(door.leads_to)
        if idx is None or self._spaces[idx] is source:
            return None
        return idx

    def duplicate_ids(self) -> List[str]:
        """Identity keys used by more than one space."""
        seen: Dict[str, int] = {}
        for space in self._spaces:
            seen[space.space_id] = seen.get(space.space_id, 0) + 1
        return [sid for sid, count in seen.items() if count > 1]
