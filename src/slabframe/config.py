"""Pydantic models for engine configuration, scene input, and API responses."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, model_validator

Vector = tuple[float, float, float]


class EngineConfig(BaseModel):
    """Tunable constants for the threshold and framing passes.

    All lengths are in model units (the host's internal length unit).
    Every entry point takes one of these explicitly; nothing reads
    module-level defaults.
    """

    # Floors
    floor_thickness: float = 0.15  # used when no existing floor is found
    floor_probe_depth: float = 10.0
    default_floor_type: str = "Generic 150mm"
    isolate_threshold_failures: bool = True

    # Framing
    stud_spacing: float = 2.0
    stud_thickness: float = 0.15
    stud_trim_length: float | None = None  # None trims by half the stud_thickness
    stud_probe_half_length: float = 100.0
    stud_end_tolerance: float = 0.01
    bottom_edge_height: float = 1.0
    bottom_edge_tolerance: float = 0.01

    # Faces
    normal_tolerance: float = 0.01

    @model_validator(mode="after")
    def check_positive(self):
        """Reject non-positive lengths."""
        for name in (
            "floor_thickness",
            "floor_probe_depth",
            "stud_spacing",
            "stud_thickness",
            "stud_probe_half_length",
        ):
            value = getattr(self, name)
            if value <= 0:
                from slabframe.errors import InvalidParamsError
                raise InvalidParamsError(f"{name} must be positive, got {value}")
        return self

    @model_validator(mode="after")
    def check_tolerances(self):
        """Reject negative tolerances and trim lengths."""
        for name in (
            "stud_trim_length",
            "stud_end_tolerance",
            "bottom_edge_tolerance",
            "normal_tolerance",
        ):
            value = getattr(self, name)
            if value is not None and value < 0:
                from slabframe.errors import InvalidParamsError
                raise InvalidParamsError(f"{name} must be non-negative, got {value}")
        return self

    @property
    def trim_length(self) -> float:
        """Length trimmed from each end of a probed stud centerline."""
        if self.stud_trim_length is None:
            return self.stud_thickness / 2.0
        return self.stud_trim_length


# --- Scene input ---


class CurveSpec(BaseModel):
    """A line, or an arc running counter-clockwise about `normal`."""

    kind: Literal["line", "arc"] = "line"
    start: Vector
    end: Vector
    center: Vector | None = None
    normal: Vector = (0.0, 0.0, 1.0)

    @model_validator(mode="after")
    def check_arc_center(self):
        if self.kind == "arc" and self.center is None:
            from slabframe.errors import InvalidParamsError
            raise InvalidParamsError("arc curves need a center")
        return self


class LoopSpec(BaseModel):
    """A closed loop given either as polygon vertices or as explicit curves."""

    points: list[Vector] | None = None
    curves: list[CurveSpec] | None = None

    @model_validator(mode="after")
    def check_one_form(self):
        if (self.points is None) == (self.curves is None):
            from slabframe.errors import InvalidParamsError
            raise InvalidParamsError("a loop needs exactly one of 'points' or 'curves'")
        return self


class RoomSpec(BaseModel):
    """Room boundary (outer loop first) and its reference point."""

    id: str
    boundary: list[LoopSpec]
    location: Vector | None = None
    level: str = "Level 1"


class OpeningSpec(BaseModel):
    """Door or window cut through a wall, positioned along its centerline."""

    id: str
    kind: Literal["door", "window"] = "door"
    position: float  # distance from wall start to the opening centre
    width: float
    height: float
    sill_height: float = 0.0
    flip_facing: bool = False

    @model_validator(mode="after")
    def check_size(self):
        if self.width <= 0 or self.height <= 0:
            from slabframe.errors import InvalidParamsError
            raise InvalidParamsError(
                f"opening '{self.id}' needs positive width and height"
            )
        return self


class WallSpec(BaseModel):
    """Straight wall given by its base centerline, thickness and height."""

    id: str
    start: Vector
    end: Vector
    width: float
    height: float
    openings: list[OpeningSpec] = []

    @model_validator(mode="after")
    def check_size(self):
        if self.width <= 0 or self.height <= 0:
            from slabframe.errors import InvalidParamsError
            raise InvalidParamsError(
                f"wall '{self.id}' needs positive width and height"
            )
        return self


class FloorSpec(BaseModel):
    """Existing floor: boundary at level height, extruded down by thickness."""

    id: str
    boundary: list[LoopSpec]
    thickness: float = 0.15
    elevation_offset: float = 0.0
    floor_type: str = "Generic 150mm"
    level: str = "Level 1"
    mark: str | None = None


class SceneSpec(BaseModel):
    """A self-contained host model for the in-memory adapter."""

    view_type: str = "floor_plan"
    floor_types: list[str] = ["Generic 150mm"]
    rooms: list[RoomSpec] = []
    walls: list[WallSpec] = []
    floors: list[FloorSpec] = []


class FloorRequest(BaseModel):
    """Request body for the room-floor pass."""

    scene: SceneSpec
    config: EngineConfig | None = None


class FramingRequest(BaseModel):
    """Request body for the wall-framing pass."""

    scene: SceneSpec
    wall_id: str
    config: EngineConfig | None = None


# --- API responses ---


class ThresholdInfo(BaseModel):
    """Threshold descriptor returned for traceability."""

    room_id: str
    door_id: str
    location: Vector
    facing: Vector
    wall_direction: Vector
    width: float
    depth: float


class FloorInfo(BaseModel):
    """One synthesized room floor."""

    room_id: str
    floor_id: str | None
    replaced_floor_id: str | None
    floor_type: str
    elevation_offset: float
    floor_thickness: float
    volume: float
    top_loops: list[list[Vector]]
    thresholds: list[ThresholdInfo]
    failed_thresholds: list[str] = []


class FloorPassResponse(BaseModel):
    """Result of the room-floor pass."""

    floors: list[FloorInfo]
    skipped_rooms: list[str] = []


class MemberInfo(BaseModel):
    """One framing member as two polylines."""

    kind: str
    first: list[Vector]
    second: list[Vector]


class FramingResponse(BaseModel):
    """Result of the wall-framing pass."""

    wall_id: str
    members: list[MemberInfo]
    curve_count: int
    skipped_points: list[float] = []


class ErrorResponse(BaseModel):
    """Error response body."""

    error_type: str
    message: str
    detail: str | None = None
