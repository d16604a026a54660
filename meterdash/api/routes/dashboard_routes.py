#!/usr/bin/env python3
"""
Dashboard Routes - session endpoints consumed by the renderer
"""

import logging
import uuid
from typing import Callable, Dict

from fastapi import APIRouter, HTTPException, Response

from ...core.config import DashboardConfig
from ...dashboard.controller import DashboardKind, DashboardSession
from ..meter_client import MeterClient
from ..schemas import (
    PinchRequest,
    PinchResponse,
    RangeRequest,
    ScaleRequest,
    SessionCreateRequest,
    SessionCreateResponse,
)

logger = logging.getLogger("meterdash.server")


def create_dashboard_routes(
    config: DashboardConfig,
    client_factory: Callable[[], MeterClient],
    sessions: Dict[str, DashboardSession],
) -> APIRouter:
    """Create session routes backed by an in-memory session registry."""
    router = APIRouter(prefix="/api/sessions")

    def get_session(session_id: str) -> DashboardSession:
        session = sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"unknown session {session_id}")
        return session

    @router.post("", response_model=SessionCreateResponse, status_code=201)
    async def create_session(body: SessionCreateRequest):
        """Create and activate a dashboard session."""
        session_id = uuid.uuid4().hex
        try:
            client = client_factory()
        except ValueError as e:
            logger.error(f"cannot create metering client: {e}")
            raise HTTPException(status_code=503, detail=str(e))
        session = DashboardSession(client, body.channels, DashboardKind(body.kind), config)
        session.activate()
        sessions[session_id] = session
        logger.info(f"created session {session_id} ({body.kind}, {len(body.channels)} channels)")
        return SessionCreateResponse(session_id=session_id)

    @router.get("/{session_id}")
    async def get_session_data(session_id: str):
        return get_session(session_id).get_dashboard_data()

    @router.put("/{session_id}/range")
    async def set_range(session_id: str, body: RangeRequest):
        session = get_session(session_id)
        try:
            session.set_range(body.label)
        except KeyError as e:
            raise HTTPException(status_code=400, detail=str(e.args[0]))
        return {"active_range": session.active_range.label}

    @router.put("/{session_id}/scale")
    async def set_scale(session_id: str, body: ScaleRequest):
        session = get_session(session_id)
        try:
            session.set_scale_mode(body.mode)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"scale_mode": str(session.scale_mode)}

    @router.post("/{session_id}/pinch", response_model=PinchResponse)
    async def pinch(session_id: str, body: PinchRequest):
        session = get_session(session_id)
        if not session.has_channel(body.channel_id):
            raise HTTPException(status_code=404, detail=f"unknown channel {body.channel_id}")
        if body.end:
            zoom = session.pinch_end(body.channel_id)
        else:
            zoom = session.pinch_update(body.channel_id, body.scale)
        return PinchResponse(channel_id=body.channel_id, zoom=zoom)

    @router.delete("/{session_id}", status_code=204)
    async def delete_session(session_id: str):
        session = get_session(session_id)
        session.deactivate()
        del sessions[session_id]
        logger.info(f"closed session {session_id}")
        return Response(status_code=204)

    return router
