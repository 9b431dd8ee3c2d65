"""Pydantic request/response models for territory endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..models.domain import Hold, Territory


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TerritoryRequest(CamelModel):
    """Body for lock (POST) and hold (PUT).

    Every field is optional here so missing values surface as a 400 from the
    service rather than a 422 from request parsing.
    """

    lat: Optional[float] = Field(default=None, allow_inf_nan=False, description="Center latitude in degrees.")
    lng: Optional[float] = Field(default=None, allow_inf_nan=False, description="Center longitude in degrees.")
    radius: Optional[float] = Field(default=None, allow_inf_nan=False, description="Radius in miles.")
    practice: Optional[str] = None
    practice_address: Optional[str] = None
    rep: Optional[str] = None
    rep_email: Optional[str] = None


class ReleaseRequest(CamelModel):
    territory_id: Optional[str] = None
    hold_id: Optional[str] = None
    reason: Optional[str] = None


class TerritoryModel(CamelModel):
    id: str
    lat: float
    lng: float
    radius: float
    practice: str
    practice_address: Optional[str] = None
    rep: str
    rep_email: Optional[str] = None
    lock_date: datetime
    locked: bool
    status: str
    released_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, territory: Territory) -> "TerritoryModel":
        return cls(
            id=territory.id,
            lat=territory.lat,
            lng=territory.lng,
            radius=territory.radius,
            practice=territory.practice,
            practice_address=territory.practice_address,
            rep=territory.rep,
            rep_email=territory.rep_email,
            lock_date=territory.lock_date,
            locked=territory.locked,
            status=territory.status,
            released_at=territory.released_at,
        )


class HoldModel(CamelModel):
    id: str
    lat: float
    lng: float
    radius: float
    practice: str
    practice_address: Optional[str] = None
    rep: str
    rep_email: Optional[str] = None
    hold_date: datetime
    expires_at: datetime
    status: str

    @classmethod
    def from_domain(cls, hold: Hold) -> "HoldModel":
        return cls(
            id=hold.id,
            lat=hold.lat,
            lng=hold.lng,
            radius=hold.radius,
            practice=hold.practice,
            practice_address=hold.practice_address,
            rep=hold.rep,
            rep_email=hold.rep_email,
            hold_date=hold.hold_date,
            expires_at=hold.expires_at,
            status=hold.status,
        )


class TerritoryListResponse(CamelModel):
    success: bool = True
    locked: list[TerritoryModel]
    held: list[HoldModel]
    available_count: int
    timestamp: datetime


class LockResponse(CamelModel):
    success: bool = True
    territory: TerritoryModel
    message: str
    lock_date: datetime


class HoldResponse(CamelModel):
    success: bool = True
    hold: HoldModel
    message: str
    expires_at: datetime
    time_remaining: str


class ReleaseResponse(CamelModel):
    success: bool = True
    message: str
    released: bool
    territory: Optional[TerritoryModel] = None


class OverlayFeature(BaseModel):
    type: Literal["Feature"] = "Feature"
    geometry: dict
    properties: dict


class OverlayCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: list[OverlayFeature]
