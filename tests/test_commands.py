"""Tests for the room-floor and wall-framing commands against the in-memory host."""

import pytest

import slabframe.floors.synthesizer as synthesizer_module
from slabframe.commands.room_floors import RoomFloorCommand
from slabframe.commands.wall_framing import WallFramingCommand
from slabframe.config import EngineConfig, FloorSpec, LoopSpec, RoomSpec
from slabframe.errors import GeometryError, HostOperationError, PreconditionError
from slabframe.host.memory import InMemoryHost

from conftest import rect


def host_for(scene, **changes):
    return InMemoryHost.from_scene(scene.model_copy(update=changes))


class TestRoomFloorCommand:
    def test_two_rooms(self, config, two_room_scene):
        host = InMemoryHost.from_scene(two_room_scene)
        result = RoomFloorCommand(host, config).run()
        assert [f.result.room_id for f in result.floors] == ["A", "B"]
        assert result.skipped_rooms == []
        assert host.committed == ["Rooms Thresholds"]
        assert len(host.floors()) == 2
        for created in result.floors:
            assert [t.door_id for t in created.result.thresholds] == ["D1"]
            assert created.replaced_floor_id is None
            assert created.floor_type == "Generic 150mm"

    def test_created_floor_geometry(self, config, two_room_scene):
        host = InMemoryHost.from_scene(two_room_scene)
        result = RoomFloorCommand(host, config).run()
        floors = {f.id: f for f in host.floors()}
        created = floors[result.floors[0].floor_id]
        assert created.thickness == 0.15
        assert abs(created.solid.volume() - 1.8135) < 1e-3

    def test_metadata(self, config, two_room_scene):
        host = InMemoryHost.from_scene(two_room_scene)
        meta = RoomFloorCommand(host, config).run().metadata
        assert meta["rooms"] == 2
        assert meta["floors_created"] == 2
        assert meta["thresholds"] == 2
        assert "generation_time_ms" in meta

    def test_replaces_existing_floor(self, config, two_room_scene, floor_a):
        host = host_for(two_room_scene, floors=[floor_a])
        result = RoomFloorCommand(host, config).run()
        by_room = {f.result.room_id: f for f in result.floors}

        a = by_room["A"]
        assert a.replaced_floor_id == "F1"
        assert a.floor_type == "Concrete 300"
        assert a.result.floor_thickness == 0.3
        assert host.get_parameter(a.floor_id, "Mark") == "M-1"
        assert "F1" not in [f.id for f in host.floors()]

        b = by_room["B"]
        assert b.replaced_floor_id is None
        assert b.floor_type == "Generic 150mm"

    def test_floor_type_fallback(self, config, two_room_scene):
        host = host_for(two_room_scene, floor_types=["Timber", "Concrete"])
        result = RoomFloorCommand(host, config).run()
        assert {f.floor_type for f in result.floors} == {"Timber"}

    def test_shared_floor_deleted_once(self, config, two_room_scene):
        big = FloorSpec(
            id="F9",
            boundary=[LoopSpec(points=rect(0, -3.1, 4, 3.1))],
            thickness=0.2,
            mark="BIG",
        )
        host = host_for(two_room_scene, floors=[big])
        result = RoomFloorCommand(host, config).run()
        assert result.skipped_rooms == []
        assert [f.replaced_floor_id for f in result.floors] == ["F9", "F9"]
        for created in result.floors:
            assert host.get_parameter(created.floor_id, "Mark") == "BIG"
        assert "F9" not in [f.id for f in host.floors()]
        assert len(host.floors()) == 2

    def test_failed_replacement_removes_new_floor(self, config, two_room_scene, floor_a, monkeypatch):
        host = host_for(two_room_scene, floors=[floor_a])

        def broken(element_id, name):
            raise HostOperationError("parameter unavailable")

        monkeypatch.setattr(host, "get_parameter", broken)
        result = RoomFloorCommand(host, config).run()
        assert result.skipped_rooms == ["A"]
        assert [f.result.room_id for f in result.floors] == ["B"]
        ids = [f.id for f in host.floors()]
        assert len(ids) == 2
        assert "F1" in ids
        assert result.floors[0].floor_id in ids

    def test_unremovable_floor_reported(self, config, two_room_scene, floor_a, monkeypatch):
        host = host_for(two_room_scene, floors=[floor_a])

        def broken(*args):
            raise HostOperationError("host refused")

        monkeypatch.setattr(host, "get_parameter", broken)
        monkeypatch.setattr(host, "delete", broken)
        result = RoomFloorCommand(host, config).run()
        assert result.skipped_rooms == []
        by_room = {f.result.room_id: f for f in result.floors}
        assert by_room["A"].replaced_floor_id is None
        assert len(host.floors()) == 3

    def test_not_floor_plan(self, config, two_room_scene):
        host = host_for(two_room_scene, view_type="section")
        with pytest.raises(PreconditionError):
            RoomFloorCommand(host, config).run()
        assert host.committed == []

    def test_no_rooms(self, config, two_room_scene):
        host = host_for(two_room_scene, rooms=[])
        with pytest.raises(PreconditionError):
            RoomFloorCommand(host, config).run()
        assert host.committed == []

    def test_no_floor_types(self, config, two_room_scene):
        host = host_for(two_room_scene, floor_types=[])
        with pytest.raises(PreconditionError):
            RoomFloorCommand(host, config).run()
        assert host.committed == []
        assert host.floors() == []

    def test_precondition_is_host_error(self):
        assert issubclass(PreconditionError, HostOperationError)

    def test_bad_room_skipped(self, config, two_room_scene):
        warped = RoomSpec(
            id="C",
            boundary=[LoopSpec(points=[(10, 0, 0), (14, 0, 0), (14, 3, 1), (10, 3, 0)])],
        )
        host = host_for(two_room_scene, rooms=list(two_room_scene.rooms) + [warped])
        result = RoomFloorCommand(host, config).run()
        assert result.skipped_rooms == ["C"]
        assert len(result.floors) == 2

    def test_threshold_failure_isolated(self, config, two_room_scene, monkeypatch):
        def broken(*args, **kwargs):
            raise GeometryError("boom")

        monkeypatch.setattr(synthesizer_module, "threshold_solid", broken)
        host = InMemoryHost.from_scene(two_room_scene)
        result = RoomFloorCommand(host, config).run()
        assert len(result.floors) == 2
        assert all(f.result.failed_thresholds for f in result.floors)

    def test_threshold_failure_skips_room_when_not_isolated(self, two_room_scene, monkeypatch):
        def broken(*args, **kwargs):
            raise GeometryError("boom")

        monkeypatch.setattr(synthesizer_module, "threshold_solid", broken)
        host = InMemoryHost.from_scene(two_room_scene)
        config = EngineConfig(isolate_threshold_failures=False)
        result = RoomFloorCommand(host, config).run()
        assert result.floors == []
        assert result.skipped_rooms == ["A", "B"]


class TestInMemoryHost:
    def test_mutation_outside_transaction(self, two_room_scene, floor_a):
        host = host_for(two_room_scene, floors=[floor_a])
        with pytest.raises(HostOperationError):
            host.delete("F1")

    def test_rollback(self, two_room_scene, floor_a):
        host = host_for(two_room_scene, floors=[floor_a])
        with pytest.raises(RuntimeError):
            with host.transaction("t"):
                host.delete("F1")
                raise RuntimeError("abort")
        assert [f.id for f in host.floors()] == ["F1"]
        assert host.get_parameter("F1", "Mark") == "M-1"
        assert host.committed == []

    def test_unknown_floor_type(self, two_room_scene):
        host = InMemoryHost.from_scene(two_room_scene)
        room = host.rooms()[0]
        with host.transaction("t"):
            with pytest.raises(HostOperationError):
                host.create_floor(room.boundary, "Nope", "Level 1", 0.0, 0.15)

    def test_doors_near(self, two_room_scene):
        host = InMemoryHost.from_scene(two_room_scene)
        for room in host.rooms():
            assert [d.id for d in host.doors_near(room)] == ["D1"]


class TestWallFramingCommand:
    def test_curves_created(self, config, plain_wall, two_room_scene):
        host = host_for(two_room_scene, walls=[plain_wall])
        result = WallFramingCommand(host, config).run("W")
        assert len(result.curve_ids) == 2 * len(result.layout.members)
        assert len(host.model_curves) == len(result.curve_ids)
        assert host.committed == ["Framing Wall"]
        assert result.metadata["members"] == 6

    def test_curve_plane_is_wall_face(self, config, plain_wall, two_room_scene):
        host = host_for(two_room_scene, walls=[plain_wall])
        result = WallFramingCommand(host, config).run("W")
        curve, normal, origin = host.model_curves[result.curve_ids[0]]
        assert normal == result.layout.normal
        assert origin == curve.start

    def test_missing_wall(self, config, two_room_scene):
        host = InMemoryHost.from_scene(two_room_scene)
        with pytest.raises(PreconditionError, match="Failed to get geometry"):
            WallFramingCommand(host, config).run("nope")
        assert host.committed == []
