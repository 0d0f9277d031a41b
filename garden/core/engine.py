"""Frame driver that boots the garden and runs one store traversal per frame.

This module provides the GardenEngine class which plays the role of the
console's frame callback: clear the screen, draw the static overlay, then
update and draw every stored entity.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Optional

import structlog

from garden.config import Settings
from garden.core.entity_store import EntityStore
from garden.core.host import Host
from garden.core.telemetry import collect_snapshot
from garden.core.variants import Plant

logger = structlog.get_logger()


class GardenEngine:
    """Owns the entity store and drives it once per frame.

    Coordinates:
    - Boot-time population
    - Screen clear and overlay
    - The store traversal
    - Frame timing statistics
    """

    def __init__(self, store: EntityStore, settings: Settings) -> None:
        """Initialize the engine.

        Args:
            store: Entity store to traverse each frame. Its host is also
                used for the screen clear and overlay.
            settings: Application settings.
        """
        self.store = store
        self.settings = settings

        self.frame_counter = 0
        self.frame_times: deque[float] = deque(maxlen=settings.frame_time_history)
        self.last_frame_end_time = 0.0

        self.running = False

    @property
    def host(self) -> Host:
        return self.store.host

    def boot(self) -> None:
        """Populate the store once at startup."""
        self.store.add("plants/row1", Plant(sprite_id=0))
        logger.info("garden_booted", entities=self.store.count())

    def tick(self) -> float:
        """Render one frame.

        Returns:
            Wall-clock duration of the frame in seconds.
        """
        frame_start = time.perf_counter()

        self.host.clear_screen(self.settings.background_color)
        if self.settings.banner_text:
            self.host.draw_text(
                self.settings.banner_text,
                self.settings.banner_x,
                self.settings.banner_y,
            )
        self.store.update_and_draw()

        self.frame_counter += 1
        self.last_frame_end_time = time.perf_counter()
        duration = self.last_frame_end_time - frame_start
        self.frame_times.append(duration)
        return duration

    def run(self, max_frames: Optional[int] = None) -> None:
        """Main frame loop.

        Runs until stopped or until ``max_frames`` frames have been drawn
        (``settings.max_frames`` when omitted, 0 meaning no limit). Sleeps
        between frames to hold ``settings.frame_rate``.
        """
        if max_frames is None:
            max_frames = self.settings.max_frames
        budget = self.settings.frame_budget_sec

        self.running = True
        logger.info("engine_starting", frame_rate=self.settings.frame_rate, max_frames=max_frames)

        while self.running:
            if max_frames and self.frame_counter >= max_frames:
                break

            frame_start = time.perf_counter()
            try:
                duration = self.tick()
            except Exception as exc:
                # A broken entity must not kill the render loop
                logger.error(
                    "frame_error",
                    frame=self.frame_counter,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                self.frame_counter += 1
                duration = time.perf_counter() - frame_start

            if duration > budget:
                logger.warning(
                    "frame_overrun",
                    frame=self.frame_counter,
                    duration_ms=duration * 1000,
                    budget_ms=budget * 1000,
                )

            if self.frame_counter % self.settings.stats_interval_frames == 0:
                self._log_statistics()

            time.sleep(max(0.0, budget - duration))

        self.running = False
        logger.info("engine_stopped", frame=self.frame_counter)

    def _log_statistics(self) -> None:
        snapshot = collect_snapshot(self)
        logger.info(
            "frame_stats",
            frame=snapshot.frame,
            entities=snapshot.entity_count,
            onscreen=snapshot.onscreen_count,
            avg_frame_ms=snapshot.avg_frame_ms,
            max_frame_ms=snapshot.max_frame_ms,
        )

    def stop(self) -> None:
        """Stop the frame loop after the current frame."""
        logger.info("engine_stopping", frame=self.frame_counter)
        self.running = False
