"""RoomFloorCommand: the room-floor batch pass and its result."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from slabframe.config import EngineConfig
from slabframe.errors import GeometryError, HostOperationError, PreconditionError
from slabframe.floors.synthesizer import FloorSynthesizer, RoomFloorResult
from slabframe.host.ports import FloorGeometry, HostModel, RoomGeometry

logger = logging.getLogger(__name__)

MARK = "Mark"


@dataclass
class CreatedFloor:
    """A synthesized room floor and the element that now holds it."""

    result: RoomFloorResult
    floor_id: str
    floor_type: str
    replaced_floor_id: str | None = None


@dataclass
class FloorPassResult:
    """Outcome of one room-floor pass."""

    floors: list[CreatedFloor] = field(default_factory=list)
    skipped_rooms: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


class RoomFloorCommand:
    """Extends every room's floor under its door thresholds.

    Responsibility: check preconditions, snapshot existing floors,
    synthesize every room, then create floors and retire the ones they
    replace, all in one transaction. Geometry lives in FloorSynthesizer.
    """

    def __init__(self, host: HostModel, config: EngineConfig) -> None:
        self.host = host
        self.config = config
        self.synthesizer = FloorSynthesizer(config)

    def run(self) -> FloorPassResult:
        """Run the pass.

        Raises PreconditionError (nothing is changed) when the active view
        is not a floor plan, there are no rooms, or no floor types exist.
        Rooms that fail are skipped and listed in the result.
        """
        start_time = time.time()

        if not self.host.is_floor_plan_view():
            raise PreconditionError("Run this command in a floor plan view.")
        rooms = [room for room in self.host.rooms() if room.area > 0]
        if not rooms:
            raise PreconditionError("No rooms found in the document.")
        floor_types = self.host.floor_types()
        if not floor_types:
            raise PreconditionError("No floor types found in the document.")

        result = FloorPassResult()
        with self.host.transaction("Rooms Thresholds"):
            # Detection must only ever see floors that existed before the pass
            existing = list(self.host.floors())
            plans = []
            for room in rooms:
                plan = self._plan_room(room, existing)
                if plan is None:
                    result.skipped_rooms.append(room.id)
                else:
                    plans.append(plan)

            replaced_marks: dict[str, Any] = {}
            for plan in plans:
                created = self._create_floor(plan, floor_types, replaced_marks)
                if created is None:
                    result.skipped_rooms.append(plan.room_id)
                else:
                    result.floors.append(created)

        elapsed = time.time() - start_time
        result.metadata = {
            "rooms": len(rooms),
            "floors_created": len(result.floors),
            "thresholds": sum(len(f.result.thresholds) for f in result.floors),
            "generation_time_ms": round(elapsed * 1000),
        }
        logger.info(
            "Room floors: %d created, %d rooms skipped",
            len(result.floors), len(result.skipped_rooms),
        )
        return result

    def _plan_room(
        self, room: RoomGeometry, existing: list[FloorGeometry]
    ) -> RoomFloorResult | None:
        if not room.boundary:
            logger.info("Room %s has no boundary; skipped", room.id)
            return None
        try:
            doors = self.host.doors_near(room)
            return self.synthesizer.synthesize(room, doors, existing)
        except PreconditionError:
            raise
        except (GeometryError, HostOperationError) as exc:
            logger.warning("Skipping room %s: %s", room.id, exc)
            return None

    def _create_floor(
        self,
        plan: RoomFloorResult,
        floor_types: list[str],
        replaced_marks: dict[str, Any],
    ) -> CreatedFloor | None:
        floor_type = plan.floor_type_name
        if floor_type not in floor_types:
            floor_type = floor_types[0]

        old_id = plan.existing_floor_id
        try:
            floor_id = self.host.create_floor(
                plan.top_loops,
                floor_type,
                plan.level,
                plan.elevation_offset,
                plan.floor_thickness,
            )
        except PreconditionError:
            raise
        except HostOperationError as exc:
            logger.warning("Could not create floor for room %s: %s", plan.room_id, exc)
            return None

        try:
            if old_id is not None:
                if old_id not in replaced_marks:
                    replaced_marks[old_id] = self.host.get_parameter(old_id, MARK)
                    self.host.delete(old_id)
                mark = replaced_marks[old_id]
                if mark is not None:
                    self.host.set_parameter(floor_id, MARK, mark)
        except PreconditionError:
            raise
        except HostOperationError as exc:
            logger.warning("Could not replace floor %s for room %s: %s", old_id, plan.room_id, exc)
            try:
                self.host.delete(floor_id)
            except HostOperationError as cleanup_exc:
                # The new floor stays in the model, so report it
                logger.warning("Could not remove floor %s: %s", floor_id, cleanup_exc)
                return CreatedFloor(plan, floor_id, floor_type, None)
            return None

        return CreatedFloor(plan, floor_id, floor_type, old_id)
