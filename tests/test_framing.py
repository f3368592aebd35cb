"""Tests for wall stud framing layout."""

from dataclasses import replace

import pytest

import slabframe.framing.layout as layout_module
from slabframe.config import EngineConfig, OpeningSpec, WallSpec
from slabframe.errors import GeometryError
from slabframe.framing.layout import (
    FramingLayout,
    is_bottom_edge,
    lowest_edge_index,
    stud_positions,
)
from slabframe.framing.members import MemberKind, stud_pair
from slabframe.geometry.curves import Curve
from slabframe.geometry.loops import CurveLoop
from slabframe.host.memory import wall_from_spec


def make_wall(length=6.0, openings=()):
    wall, _ = wall_from_spec(WallSpec(
        id="W",
        start=(0, 0, 0),
        end=(length, 0, 0),
        width=0.2,
        height=3.0,
        openings=list(openings),
    ))
    return wall


def window(position=3.0, width=2.4, sill=1.0, height=1.0, opening_id="WIN"):
    return OpeningSpec(
        id=opening_id, kind="window", position=position,
        width=width, height=height, sill_height=sill,
    )


def door(position=3.0, width=0.9, sill=0.0, height=2.1, opening_id="D"):
    return OpeningSpec(
        id=opening_id, kind="door", position=position,
        width=width, height=height, sill_height=sill,
    )


class TestStudPositions:
    def test_six_metre_wall(self):
        assert stud_positions(6.0, 2.0) == [2.0, 4.0]

    def test_partial_bay(self):
        assert stud_positions(7.0, 2.0) == [2.0, 4.0, 6.0]

    def test_end_within_tolerance_skipped(self):
        assert stud_positions(6.005, 2.0) == [2.0, 4.0]

    def test_short_wall(self):
        assert stud_positions(1.5, 2.0) == []

    def test_non_positive_spacing_raises(self):
        with pytest.raises(GeometryError):
            stud_positions(6.0, 0.0)


class TestBottomEdge:
    def test_low_horizontal(self):
        assert is_bottom_edge(Curve.line((0, 0, 0.3), (1, 0, 0.31)))

    def test_sloped(self):
        assert not is_bottom_edge(Curve.line((0, 0, 0.3), (1, 0, 0.35)))

    def test_slope_just_beyond_tolerance(self):
        assert not is_bottom_edge(Curve.line((0, 0, 0.3), (1, 0, 0.33)))

    def test_high_horizontal(self):
        assert not is_bottom_edge(Curve.line((0, 0, 1.5), (1, 0, 1.5)))

    def test_height_limit_is_exclusive(self):
        assert not is_bottom_edge(Curve.line((0, 0, 1.0), (1, 0, 1.0)))

    def test_lowest_edge_index(self):
        loop = CurveLoop.from_points([(0, 0, 2), (0, 0, 1), (1, 0, 1), (1, 0, 2)])
        assert lowest_edge_index(loop) == 1


class TestStudPair:
    def test_offset_direction(self):
        member = stud_pair(
            Curve.line((0, 0.1, 0), (0, 0.1, 3)), (0, 1, 0), 0.15, MemberKind.BOUNDARY_STUD
        )
        # normal x up = +X
        assert abs(member.second.start[0] - 0.15) < 1e-9
        assert member.first.start == (0.0, 0.1, 0.0)
        assert member.normal == (0.0, 1.0, 0.0)


class TestPlainWall:
    def test_member_counts(self, config):
        result = FramingLayout(config).layout(make_wall())
        assert len(result.of_kind(MemberKind.VERTICAL_STUD)) == 2
        assert len(result.of_kind(MemberKind.BASEPLATE)) == 1
        assert len(result.of_kind(MemberKind.BOUNDARY_STUD)) == 3
        assert len(result.of_kind(MemberKind.OPENING_STUD)) == 0
        assert len(result.members) == 6
        assert result.skipped_points == []

    def test_member_order(self, config):
        kinds = [m.kind for m in FramingLayout(config).layout(make_wall()).members]
        assert kinds == [
            MemberKind.VERTICAL_STUD,
            MemberKind.VERTICAL_STUD,
            MemberKind.BASEPLATE,
            MemberKind.BOUNDARY_STUD,
            MemberKind.BOUNDARY_STUD,
            MemberKind.BOUNDARY_STUD,
        ]

    def test_vertical_stud_geometry(self, config):
        result = FramingLayout(config).layout(make_wall())
        stud = result.of_kind(MemberKind.VERTICAL_STUD)[0]
        zs = sorted([stud.first.start[2], stud.first.end[2]])
        assert abs(zs[0] - 0.075) < 1e-4
        assert abs(zs[1] - 2.925) < 1e-4
        assert abs(abs(stud.first.start[1]) - 0.1) < 1e-4
        xs = sorted([stud.first.start[0], stud.second.start[0]])
        assert abs(xs[0] - 1.925) < 1e-4
        assert abs(xs[1] - 2.075) < 1e-4

    def test_baseplate(self, config):
        result = FramingLayout(config).layout(make_wall())
        plate = result.of_kind(MemberKind.BASEPLATE)[0]
        assert abs(plate.first.start[2]) < 1e-9
        assert abs(plate.second.start[2] - 0.15) < 1e-9
        assert abs(abs(plate.first.start[1]) - 0.1) < 1e-9
        assert abs(plate.first.length - 6.0) < 1e-9

    def test_offsets_use_translate(self, config, monkeypatch):
        calls = []
        original = layout_module.translate

        def recording(item, direction, distance):
            calls.append(distance)
            return original(item, direction, distance)

        monkeypatch.setattr(layout_module, "translate", recording)
        FramingLayout(config).layout(make_wall())
        # two studs: face offset and both halves; baseplate: face offset and raise
        assert sorted(calls) == [-0.075, -0.075, 0.075, 0.075, 0.1, 0.1, 0.1, 0.15]

    def test_trim_length_override(self):
        config = EngineConfig(stud_trim_length=0.5)
        stud = FramingLayout(config).layout(make_wall()).of_kind(MemberKind.VERTICAL_STUD)[0]
        assert abs(stud.first.length - 2.0) < 1e-4

    def test_spacing_override(self):
        config = EngineConfig(stud_spacing=1.0)
        result = FramingLayout(config).layout(make_wall())
        assert len(result.of_kind(MemberKind.VERTICAL_STUD)) == 5


class TestOpenings:
    def test_window(self, config):
        result = FramingLayout(config).layout(make_wall(openings=[window()]))
        # studs at 2 and 4 are both split by the window
        assert len(result.of_kind(MemberKind.VERTICAL_STUD)) == 4
        assert len(result.of_kind(MemberKind.BOUNDARY_STUD)) == 3
        assert len(result.of_kind(MemberKind.OPENING_STUD)) == 4
        assert len(result.members) == 12

    def test_floor_level_door_notches_outer_loop(self, config):
        result = FramingLayout(config).layout(make_wall(openings=[door()]))
        assert len(result.of_kind(MemberKind.BOUNDARY_STUD)) == 6
        assert len(result.of_kind(MemberKind.OPENING_STUD)) == 0
        assert len(result.of_kind(MemberKind.VERTICAL_STUD)) == 2

    def test_elevated_door_skips_threshold_edge(self, config):
        elevated = door(width=2.4, sill=1.2, height=1.0)
        result = FramingLayout(config).layout(make_wall(openings=[elevated]))
        assert len(result.of_kind(MemberKind.OPENING_STUD)) == 3

    def test_same_opening_as_window(self, config):
        same = window(sill=1.2)
        result = FramingLayout(config).layout(make_wall(openings=[same]))
        assert len(result.of_kind(MemberKind.OPENING_STUD)) == 4

    def test_door_only_affects_its_own_loop(self, config):
        wall = make_wall(length=10.0, openings=[
            window(position=2.0, width=1.0),
            door(position=7.0, width=1.0, sill=1.2, height=1.0),
        ])
        layout = FramingLayout(config)
        loops, _ = layout.face(wall)
        assert len(loops) == 3
        flags = sorted(layout.is_door_loop(wall, loop) for loop in loops[1:])
        assert flags == [False, True]
        result = layout.layout(wall)
        assert len(result.of_kind(MemberKind.OPENING_STUD)) == 7


class TestFaceSelection:
    def test_explicit_face(self, config):
        wall = make_wall()
        face = CurveLoop.from_points([(0, 0.1, 0), (6, 0.1, 0), (6, 0.1, 3), (0, 0.1, 3)])
        wall = replace(wall, face_loops=(face,), face_normal=(0, 1, 0))
        result = FramingLayout(config).layout(wall)
        assert result.normal == (0.0, 1.0, 0.0)
        stud = result.of_kind(MemberKind.VERTICAL_STUD)[0]
        assert abs(stud.first.start[1] - 0.1) < 1e-6
        assert len(result.of_kind(MemberKind.BOUNDARY_STUD)) == 3

    def test_empty_wall_raises(self, config):
        from manifold3d import Manifold

        wall = replace(make_wall(), solid=Manifold())
        with pytest.raises(GeometryError):
            FramingLayout(config).layout(wall)


class TestStudFailures:
    def test_failed_point_skipped(self, config, monkeypatch):
        original = layout_module.intersect_line

        def flaky(solid, start, end, options=None):
            if abs(start[0] - 2.0) < 1e-9:
                raise GeometryError("probe failed")
            return original(solid, start, end, options)

        monkeypatch.setattr(layout_module, "intersect_line", flaky)
        result = FramingLayout(config).layout(make_wall())
        assert result.skipped_points == [2.0]
        assert len(result.of_kind(MemberKind.VERTICAL_STUD)) == 1
        assert len(result.of_kind(MemberKind.BOUNDARY_STUD)) == 3
