"""WallFramingCommand: frames one wall and draws its members as model curves."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from slabframe.config import EngineConfig
from slabframe.errors import PreconditionError
from slabframe.framing.layout import FramingLayout, FramingLayoutResult
from slabframe.host.ports import HostModel

logger = logging.getLogger(__name__)


@dataclass
class FramingPassResult:
    """Framing layout of a wall and the ids of the curves created for it."""

    layout: FramingLayoutResult
    curve_ids: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)


class WallFramingCommand:
    """Lays out framing for a wall and hands the curve pairs to the host."""

    def __init__(self, host: HostModel, config: EngineConfig) -> None:
        self.host = host
        self.config = config
        self.layout = FramingLayout(config)

    def run(self, wall_id: str) -> FramingPassResult:
        start_time = time.time()

        wall = self.host.wall(wall_id)
        if wall is None or wall.solid.is_empty() or wall.solid.volume() <= 0:
            raise PreconditionError(f"Failed to get geometry of wall '{wall_id}'.")

        layout = self.layout.layout(wall)

        curve_ids = []
        with self.host.transaction("Framing Wall"):
            for member in layout.members:
                for curve in member.curves:
                    curve_ids.append(
                        self.host.create_model_curve(curve, member.normal, curve.start)
                    )

        elapsed = time.time() - start_time
        logger.info("Framed wall %s with %d curves", wall_id, len(curve_ids))
        return FramingPassResult(
            layout=layout,
            curve_ids=curve_ids,
            metadata={
                "members": len(layout.members),
                "generation_time_ms": round(elapsed * 1000),
            },
        )
