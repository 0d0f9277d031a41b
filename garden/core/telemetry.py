"""Frame statistics snapshots for monitoring the frame loop.

This module captures frame timing and population metrics from a running
GardenEngine.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from garden.core.engine import GardenEngine

logger = structlog.get_logger()


@dataclass
class FrameSnapshot:
    """Snapshot of the garden at a specific frame.

    Attributes:
        frame: Number of frames rendered so far
        entity_count: Number of entities in the store
        onscreen_count: Entities whose sprite overlaps the screen
        avg_frame_ms: Mean duration of the recent frames, in milliseconds
        max_frame_ms: Slowest of the recent frames, in milliseconds
        timestamp: Unix timestamp when the snapshot was collected
    """

    frame: int
    entity_count: int
    onscreen_count: int
    avg_frame_ms: float
    max_frame_ms: float
    timestamp: float


def collect_snapshot(engine: GardenEngine) -> FrameSnapshot:
    """Collect a snapshot of the current frame loop state.

    Args:
        engine: The GardenEngine instance to collect data from

    Returns:
        FrameSnapshot with current metrics

    Note:
        Entities without ``get_is_onscreen()`` are counted as onscreen.
    """
    entities = list(engine.store.iter_entities())

    onscreen_count = 0
    for entity in entities:
        is_onscreen = getattr(entity, "get_is_onscreen", None)
        if is_onscreen is None or is_onscreen():
            onscreen_count += 1

    frame_times = list(engine.frame_times)
    avg_frame_ms = 0.0
    max_frame_ms = 0.0
    if frame_times:
        avg_frame_ms = sum(frame_times) / len(frame_times) * 1000
        max_frame_ms = max(frame_times) * 1000

    snapshot = FrameSnapshot(
        frame=engine.frame_counter,
        entity_count=len(entities),
        onscreen_count=onscreen_count,
        avg_frame_ms=round(avg_frame_ms, 3),
        max_frame_ms=round(max_frame_ms, 3),
        timestamp=time.time(),
    )
    logger.debug(
        "frame_snapshot_collected",
        frame=snapshot.frame,
        entities=snapshot.entity_count,
        samples=len(frame_times),
    )
    return snapshot


def snapshot_to_dict(snapshot: FrameSnapshot) -> dict[str, Any]:
    """Convert a snapshot to a plain dict (e.g. for JSON output)."""
    return asdict(snapshot)
