from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from typing import Literal
from uuid import UUID
from datetime import datetime

CacheSize = Literal["micro", "small", "regular", "large"]
CacheStatus = Literal["pending", "approved", "rejected", "archived"]


class CacheCreate(BaseModel):
    """Untrusted submission body. Field order is the order violations are reported in."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(min_length=5, max_length=100)
    description: str = Field(min_length=20, max_length=5000)
    hint: str | None = Field(default=None, max_length=500)
    # ratings come in half steps, as stored in Numeric(2, 1)
    difficulty: float = Field(ge=1, le=5, multiple_of=0.5, allow_inf_nan=False)
    terrain: float = Field(ge=1, le=5, multiple_of=0.5, allow_inf_nan=False)
    size: CacheSize
    lat: float = Field(ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(ge=-180, le=180, allow_inf_nan=False)
    safety_checked: StrictBool = Field(alias="safetyChecked")

    @field_validator("difficulty", "terrain", "lat", "lng", mode="before")
    @classmethod
    def json_number(cls, v):
        # JSON numbers only: no booleans, no numeric strings
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("must be a number")
        return v

    @field_validator("safety_checked")
    @classmethod
    def acknowledged(cls, v: bool):
        if v is not True:
            raise ValueError("safety checklist must be acknowledged")
        return v


class CacheCandidate(BaseModel):
    """Validated, normalized submission ready for the geofence check."""
    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    hint: str | None = None
    difficulty: float
    terrain: float
    size: CacheSize
    lat: float
    lng: float


class CacheRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    title: str
    description: str
    hint: str | None = None
    difficulty: float
    terrain: float
    size: CacheSize
    lat: float
    lng: float
    status: CacheStatus
    created_at: datetime


class CacheOwnerView(CacheRecord):
    """Returned to the submitting owner: exact coordinates, plain hint."""


class CachePublic(CacheRecord):
    # 🔒 coordinates rounded, hint ROT13-encoded
    pass
