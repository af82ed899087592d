"""
API request / response schemas
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AdminAdd(BaseModel):
    address: str


class OwnershipTransfer(BaseModel):
    new_owner: str


class OwnerResponse(BaseModel):
    owner: str


class AdminStatusResponse(BaseModel):
    address: str
    is_admin: bool


class GameCreate(BaseModel):
    commitment: str = Field(..., description="0x + 64 hex chars")
    value: int


class GameCreateResponse(BaseModel):
    game_id: int


class GameAccept(BaseModel):
    value: int


class GameFinalize(BaseModel):
    winner: str
    outcome_data: str = ""


class GameResponse(BaseModel):
    id: int
    stake: int
    initiator: str
    responder: Optional[str] = None
    commitment: str
    winner: Optional[str] = None
    outcome_data: str
    exists: bool
    status: str


class OwnerGamesResponse(BaseModel):
    address: str
    count: int
    game_ids: List[int]


class AccountResponse(BaseModel):
    address: str
    balance: int


class EventResponse(BaseModel):
    id: int
    event_type: str
    data: Dict[str, Any]
    created_at: datetime


class StatusResponse(BaseModel):
    status: str
