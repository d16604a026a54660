#!/usr/bin/env python3
"""
FastAPI application factory for meterdash
"""

import logging
from contextlib import asynccontextmanager
from typing import Callable, Dict, Optional

from fastapi import FastAPI

from . import __version__
from .api.meter_client import MeterClient
from .api.routes.dashboard_routes import create_dashboard_routes
from .core.config import DashboardConfig
from .dashboard.controller import DashboardSession

logger = logging.getLogger("meterdash.server")


def create_app(config: DashboardConfig, client_factory: Optional[Callable[[], MeterClient]] = None) -> FastAPI:
    """Create the app; every session gets a client from client_factory."""
    if client_factory is None:
        def client_factory():
            return MeterClient(config.api_key, config.base_url, config.request_timeout)

    sessions: Dict[str, DashboardSession] = {}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Tear down sessions the renderer never closed
        for session in sessions.values():
            session.deactivate()
        sessions.clear()
        logger.info("all sessions closed")

    app = FastAPI(title="meterdash", version=__version__, lifespan=lifespan)
    app.state.sessions = sessions
    app.include_router(create_dashboard_routes(config, client_factory, sessions))

    @app.get("/health")
    async def health():
        return {"status": "healthy", "sessions": len(sessions)}

    return app
