"""Shared pytest fixtures for slabframe tests."""

import pytest

from slabframe.config import (
    EngineConfig,
    FloorSpec,
    LoopSpec,
    OpeningSpec,
    RoomSpec,
    SceneSpec,
    WallSpec,
)
from slabframe.settings import Settings


def rect(x0, y0, x1, y1, z=0.0):
    """Rectangle corners in counter-clockwise order."""
    return [(x0, y0, z), (x1, y0, z), (x1, y1, z), (x0, y1, z)]


@pytest.fixture
def settings():
    """Default settings instance."""
    return Settings()


@pytest.fixture
def config():
    """Default engine configuration."""
    return EngineConfig()


@pytest.fixture
def two_room_scene():
    """Two 4 x 3 rooms either side of a 0.2 thick wall along X, sharing one door.

    The wall centerline is y = 0; room A spans y 0.1..3.1 and room B
    spans y -3.1..-0.1. The door sits at x = 2 and faces +Y (room A).
    """
    return SceneSpec(
        floor_types=["Generic 150mm", "Concrete 300"],
        rooms=[
            RoomSpec(id="A", boundary=[LoopSpec(points=rect(0, 0.1, 4, 3.1))]),
            RoomSpec(id="B", boundary=[LoopSpec(points=rect(0, -3.1, 4, -0.1))]),
        ],
        walls=[
            WallSpec(
                id="W1",
                start=(-1.0, 0.0, 0.0),
                end=(9.0, 0.0, 0.0),
                width=0.2,
                height=3.0,
                openings=[
                    OpeningSpec(id="D1", kind="door", position=3.0, width=0.9, height=2.1),
                ],
            )
        ],
    )


@pytest.fixture
def floor_a():
    """Existing 0.3 thick floor under room A."""
    return FloorSpec(
        id="F1",
        boundary=[LoopSpec(points=rect(0, 0.1, 4, 3.1))],
        thickness=0.3,
        floor_type="Concrete 300",
        mark="M-1",
    )


@pytest.fixture
def plain_wall():
    """6 long, 0.2 thick, 3 high wall along X with no openings."""
    return WallSpec(
        id="W",
        start=(0.0, 0.0, 0.0),
        end=(6.0, 0.0, 0.0),
        width=0.2,
        height=3.0,
    )
