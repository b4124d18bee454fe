"""Runtime orchestration for sensor ingestion -> session recording -> history.

Boundary note for maintainers:
- Keep this module focused on wiring, not algorithm details.
- Detection and aggregation math belongs in ``swingtrack_core``.
- API schemas belong in ``api_models.py``.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from .config import AppConfig, load_config
from .domain_models import SessionPhase
from .history_store import HistoryStore
from .kv_store import open_store
from .routes import create_router
from .sensors import SensorHub
from .session_service import SessionService

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RuntimeState:
    config: AppConfig
    hub: SensorHub
    history: HistoryStore
    sessions: SessionService
    tasks: list[asyncio.Task] = field(default_factory=list)


def build_runtime(config: AppConfig) -> RuntimeState:
    store = open_store(config.storage.backend, config.storage.path)
    history = HistoryStore(store, key=config.storage.history_key)
    hub = SensorHub()
    sessions = SessionService(
        hub=hub,
        history=history,
        threshold=config.detection.threshold,
        debounce_ms=config.detection.debounce_ms,
        heart_rate_enabled=config.sensors.heart_rate_enabled,
    )
    return RuntimeState(config=config, hub=hub, history=history, sessions=sessions)


def create_app(config_path: Path | None = None) -> FastAPI:
    config = load_config(config_path)
    runtime = build_runtime(config)

    async def start_runtime() -> None:
        runtime.tasks = [
            asyncio.create_task(
                runtime.sessions.run(config.recording.tick_interval_s),
                name="frequency-tick",
            ),
        ]

    async def stop_runtime() -> None:
        for task in runtime.tasks:
            task.cancel()
        await asyncio.gather(*runtime.tasks, return_exceptions=True)
        runtime.tasks.clear()

        if runtime.sessions.phase is SessionPhase.running:
            LOGGER.info("Stopping the running session on shutdown")
            try:
                await asyncio.to_thread(runtime.sessions.stop)
            except Exception:
                LOGGER.warning("Could not persist the running session on shutdown", exc_info=True)
        try:
            runtime.history.close()
        except Exception:
            LOGGER.warning("Error closing history store", exc_info=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await start_runtime()
        try:
            yield
        finally:
            await stop_runtime()

    app = FastAPI(title="SwingTrack", lifespan=lifespan)
    app.state.runtime = runtime
    app.include_router(create_router(runtime))
    return app


app: FastAPI | None = (
    create_app()
    if __name__ != "__main__" and os.getenv("SWINGTRACK_DISABLE_AUTO_APP", "0") != "1"
    else None
)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the SwingTrack session server")
    parser.add_argument("--config", type=Path, default=None, help="Path to config YAML")
    args = parser.parse_args()

    runtime_app = create_app(config_path=args.config)
    runtime: RuntimeState = runtime_app.state.runtime
    uvicorn.run(
        runtime_app,
        host=runtime.config.server.host,
        port=runtime.config.server.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
