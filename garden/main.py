"""Headless entry point for the garden frame loop.

This module wires the settings, a headless host, the entity store and the
frame driver together, then runs the frame loop.

Can be run directly via `python -m garden.main`.
"""

from __future__ import annotations

import json
import signal
from typing import Optional

import structlog

from garden.config import Settings
from garden.core.engine import GardenEngine
from garden.core.entity_store import EntityStore
from garden.core.host import HeadlessHost
from garden.core.telemetry import collect_snapshot, snapshot_to_dict


def configure_logging(level: str = "info") -> None:
    """Configure structured logging for the process."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level=level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


logger = structlog.get_logger()


class GardenRunner:
    """Manages the garden lifecycle and graceful shutdown."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.engine: Optional[GardenEngine] = None

    def build(self) -> GardenEngine:
        """Create the host, store and engine, and boot the garden."""
        host = HeadlessHost(seed=self.settings.random_seed)
        logger.info("host_initialized", host=type(host).__name__, seed=self.settings.random_seed)

        store = EntityStore.with_garden_layout(host)
        logger.info("entity_store_initialized")

        self.engine = GardenEngine(store=store, settings=self.settings)
        self.engine.boot()
        return self.engine

    def run(self) -> None:
        engine = self.engine or self.build()

        def handle_shutdown(sig: int, _frame: object) -> None:
            logger.info("shutdown_signal_received", signal=sig)
            engine.stop()

        previous_handler = signal.signal(signal.SIGTERM, handle_shutdown)

        try:
            engine.run()
        finally:
            signal.signal(signal.SIGTERM, previous_handler)
            snapshot = collect_snapshot(engine)
            logger.info("final_snapshot", snapshot=json.dumps(snapshot_to_dict(snapshot)))


def main() -> None:
    """Main entry point."""
    settings = Settings()
    configure_logging(settings.log_level)
    logger.info("garden_starting", version="0.1.0")

    runner = GardenRunner(settings)
    try:
        runner.run()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt_received")
    except Exception as exc:
        logger.error("fatal_error", error=str(exc), error_type=type(exc).__name__)
        raise


if __name__ == "__main__":
    main()
