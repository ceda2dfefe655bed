"""
Fanclub-related Pydantic schemas shared between server and clients.

Covers: fanclub create request, detail and list responses.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class FanclubCreateRequest(BaseModel):
    # Presence of name/purpose is checked by the registry so that every caller
    # gets the same ValidationError, not only HTTP clients.
    name: Optional[str] = Field(None, max_length=100, description="Fanclub display name")
    description: Optional[str] = Field(None, max_length=2000)
    monthly_fee: int = Field(0, description="Monthly fee in minor currency units")
    purpose: Optional[str] = Field(None, max_length=2000)
    cover_image_url: Optional[str] = Field(None, description="Opaque reference to a stored cover image")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class FanclubResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    monthly_fee: int
    purpose: Optional[str] = None
    cover_image_url: Optional[str] = None
    owner_id: uuid.UUID
    owner_name: Optional[str] = None
    member_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FanclubCreatedResponse(BaseModel):
    id: uuid.UUID
    message: str = "Fanclub created"


class FanclubListResponse(BaseModel):
    data: list[FanclubResponse]
