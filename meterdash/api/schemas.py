#!/usr/bin/env python3
"""
meterdash API Schemas - Pydantic Models for Request/Response Validation
"""

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


class Channel(BaseModel):
    """One monitored feed, supplied by the navigation layer."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str


class SessionCreateRequest(BaseModel):
    channels: List[Channel]
    kind: Literal["timeseries", "balance"] = "timeseries"


class SessionCreateResponse(BaseModel):
    session_id: str


class RangeRequest(BaseModel):
    label: str


class ScaleRequest(BaseModel):
    mode: str = Field(..., description='"auto" or one of 0.1, 0.3, 0.5, 1')


class PinchRequest(BaseModel):
    channel_id: str
    scale: float = Field(1.0, gt=0)
    end: bool = False


class PinchResponse(BaseModel):
    channel_id: str
    zoom: float
