"""
Floorweave Test Configuration and Fixtures

Provides small builders for spaces and doors plus the standard scenarios
used across unit and integration tests.
"""

import pytest
from typing import Callable, List, Optional

from floorweave.bootstrap.config import EngineConfig, reset_config
from floorweave.interior.schema.space import Door, Position, Space, SpaceSize, Wall, WallSettings


def build_door(
    wall: str,
    position: float,
    leads_to: str,
    width: float = 4.0,
    **extra,
) -> Door:
    """Door on ``wall`` centred at ``position`` feet."""
    return Door(
        wall=Wall(wall),
        position_on_wall_ft=position,
        width_ft=width,
        leads_to=leads_to,
        **extra,
    )


def build_space(
    name: str,
    width: float = 20.0,
    height: float = 20.0,
    doors: Optional[List[Door]] = None,
    position: Optional[tuple] = None,
    locked: bool = False,
    **extra,
) -> Space:
    """Space of ``width`` x ``height`` feet."""
    return Space(
        name=name,
        size=SpaceSize(width=width, height=height),
        doors=list(doors or []),
        position=Position(*position) if position is not None else None,
        position_locked=locked,
        **extra,
    )


@pytest.fixture
def make_space() -> Callable[..., Space]:
    return build_space


@pytest.fixture
def make_door() -> Callable[..., Door]:
    return build_door


@pytest.fixture
def wall_settings() -> WallSettings:
    return WallSettings(thickness_ft=10.0, material="stone")


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def two_rooms() -> List[Space]:
    """A (east door at 10ft -> B) and an empty B, both 20x20."""
    return [
        build_space("A", doors=[build_door("east", 10.0, "B")]),
        build_space("B"),
    ]


@pytest.fixture
def three_room_chain() -> List[Space]:
    """Hall in the middle, Kitchen east of it, Cellar south of it."""
    return [
        build_space("Kitchen", 20, 20),
        build_space(
            "Hall", 30, 20,
            doors=[
                build_door("east", 10.0, "Kitchen"),
                build_door("south", 15.0, "Cellar"),
            ],
        ),
        build_space("Cellar", 30, 10),
    ]


@pytest.fixture(autouse=True)
def _fresh_config():
    """Never leak a loaded global config between tests."""
    reset_config()
    yield
    reset_config()
