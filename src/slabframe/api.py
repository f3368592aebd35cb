"""FastAPI application exposing the floor and framing passes."""

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from slabframe.commands.room_floors import CreatedFloor, FloorPassResult, RoomFloorCommand
from slabframe.commands.wall_framing import WallFramingCommand
from slabframe.config import (
    EngineConfig,
    ErrorResponse,
    FloorInfo,
    FloorPassResponse,
    FloorRequest,
    FramingRequest,
    FramingResponse,
    MemberInfo,
    ThresholdInfo,
)
from slabframe.errors import (
    GeometryError,
    InvalidParamsError,
    PreconditionError,
    SlabFrameError,
)
from slabframe.export.stl import export_stl_bytes
from slabframe.geometry.booleans import union_all
from slabframe.host.memory import InMemoryHost
from slabframe.settings import Settings

logger = logging.getLogger(__name__)

# Create app
app = FastAPI(title="slabframe", version="0.1.0")

# Settings
settings = Settings()

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error handlers
@app.exception_handler(InvalidParamsError)
async def invalid_params_handler(request: Request, exc: InvalidParamsError):
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error_type="InvalidParamsError",
            message=str(exc),
        ).model_dump(),
    )


@app.exception_handler(PreconditionError)
async def precondition_handler(request: Request, exc: PreconditionError):
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error_type="PreconditionError",
            message=str(exc),
        ).model_dump(),
    )


@app.exception_handler(GeometryError)
async def geometry_error_handler(request: Request, exc: GeometryError):
    logger.exception("Geometry error during synthesis")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error_type="GeometryError",
            message=str(exc),
        ).model_dump(),
    )


@app.exception_handler(SlabFrameError)
async def general_error_handler(request: Request, exc: SlabFrameError):
    logger.exception("slabframe error")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error_type=type(exc).__name__,
            message=str(exc),
        ).model_dump(),
    )


# Dependency injection
def get_config() -> EngineConfig:
    """Default engine configuration. Overridable in tests."""
    return settings.engine_config()


def _floor_info(created: CreatedFloor) -> FloorInfo:
    plan = created.result
    return FloorInfo(
        room_id=plan.room_id,
        floor_id=created.floor_id,
        replaced_floor_id=created.replaced_floor_id,
        floor_type=created.floor_type,
        elevation_offset=plan.elevation_offset,
        floor_thickness=plan.floor_thickness,
        volume=plan.solid.volume(),
        top_loops=[list(loop.points()) for loop in plan.top_loops],
        thresholds=[
            ThresholdInfo(
                room_id=t.room_id,
                door_id=t.door_id,
                location=t.location,
                facing=t.facing,
                wall_direction=t.wall_direction,
                width=t.width,
                depth=t.depth,
            )
            for t in plan.thresholds
        ],
        failed_thresholds=[t.door_id for t in plan.failed_thresholds],
    )


def _run_floors(request: FloorRequest, config: EngineConfig) -> FloorPassResult:
    host = InMemoryHost.from_scene(request.scene)
    return RoomFloorCommand(host, request.config or config).run()


# API routes (sync def for CPU-bound work)
@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/config")
def get_default_config(config: EngineConfig = Depends(get_config)):
    """Engine defaults applied when a request carries no config."""
    return config.model_dump()


@app.post("/floors/synthesize", response_model=FloorPassResponse)
def floors_synthesize(request: FloorRequest, config: EngineConfig = Depends(get_config)):
    """Extend every room's floor under its door thresholds."""
    result = _run_floors(request, config)
    return FloorPassResponse(
        floors=[_floor_info(created) for created in result.floors],
        skipped_rooms=result.skipped_rooms,
    )


@app.post("/floors/export/stl")
def floors_export_stl(request: FloorRequest, config: EngineConfig = Depends(get_config)):
    """Synthesize room floors and return them as one binary STL."""
    result = _run_floors(request, config)
    solid = union_all([created.result.solid for created in result.floors])
    return Response(
        content=export_stl_bytes(solid),
        media_type="application/octet-stream",
        headers={"Content-Disposition": 'attachment; filename="room_floors.stl"'},
    )


@app.post("/framing", response_model=FramingResponse)
def framing(request: FramingRequest, config: EngineConfig = Depends(get_config)):
    """Lay out stud framing for one wall."""
    host = InMemoryHost.from_scene(request.scene)
    result = WallFramingCommand(host, request.config or config).run(request.wall_id)
    return FramingResponse(
        wall_id=request.wall_id,
        members=[
            MemberInfo(
                kind=member.kind.value,
                first=member.first.tessellate(),
                second=member.second.tessellate(),
            )
            for member in result.layout.members
        ],
        curve_count=len(result.curve_ids),
        skipped_points=result.layout.skipped_points,
    )
