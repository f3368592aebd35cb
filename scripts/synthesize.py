#!/usr/bin/env python3
"""
Run the room-floor or wall-framing pass on a JSON scene file.

Usage:
    python scripts/synthesize.py scene.json --task floors
    python scripts/synthesize.py scene.json --task floors --stl floors.stl
    python scripts/synthesize.py scene.json --task framing --wall W1
"""
import argparse
import json
import sys
from pathlib import Path

from slabframe.commands.room_floors import RoomFloorCommand
from slabframe.commands.wall_framing import WallFramingCommand
from slabframe.config import SceneSpec
from slabframe.errors import PreconditionError, SlabFrameError
from slabframe.export.stl import export_stl_bytes
from slabframe.geometry.booleans import union_all
from slabframe.host.memory import InMemoryHost
from slabframe.settings import Settings


def run_floors(host: InMemoryHost, config, stl_path: str | None) -> dict:
    result = RoomFloorCommand(host, config).run()
    if stl_path:
        solid = union_all([f.result.solid for f in result.floors])
        Path(stl_path).write_bytes(export_stl_bytes(solid))
    return {
        "floors": [
            {
                "room_id": f.result.room_id,
                "floor_id": f.floor_id,
                "replaced_floor_id": f.replaced_floor_id,
                "floor_type": f.floor_type,
                "volume": round(f.result.solid.volume(), 6),
                "thresholds": [t.door_id for t in f.result.thresholds],
                "failed_thresholds": [t.door_id for t in f.result.failed_thresholds],
            }
            for f in result.floors
        ],
        "skipped_rooms": result.skipped_rooms,
        "metadata": result.metadata,
    }


def run_framing(host: InMemoryHost, config, wall_id: str) -> dict:
    result = WallFramingCommand(host, config).run(wall_id)
    counts: dict[str, int] = {}
    for member in result.layout.members:
        counts[member.kind.value] = counts.get(member.kind.value, 0) + 1
    return {
        "wall_id": wall_id,
        "members": counts,
        "curves": len(result.curve_ids),
        "skipped_points": result.layout.skipped_points,
        "metadata": result.metadata,
    }


def main():
    parser = argparse.ArgumentParser(description="slabframe scene runner")
    parser.add_argument("scene", help="Path to a JSON scene file")
    parser.add_argument("--task", choices=["floors", "framing"], default="floors")
    parser.add_argument("--wall", help="Wall id (framing task)")
    parser.add_argument("--stl", help="Write synthesized floors to this STL file")
    args = parser.parse_args()

    scene = SceneSpec.model_validate_json(Path(args.scene).read_text())
    host = InMemoryHost.from_scene(scene)
    config = Settings().engine_config()

    try:
        if args.task == "floors":
            output = run_floors(host, config, args.stl)
        else:
            if not args.wall:
                parser.error("--wall is required for the framing task")
            output = run_framing(host, config, args.wall)
    except PreconditionError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    except SlabFrameError as exc:
        print(f"FAILED: {type(exc).__name__}: {exc}", file=sys.stderr)
        sys.exit(2)

    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
