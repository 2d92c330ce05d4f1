"""Pydantic request models for the ChinaTrack API."""

from typing import List

from pydantic import BaseModel, Field

from ..constants import DEFAULT_CARRIER


class CredentialsRequest(BaseModel):
    email: str
    password: str


class AddShipmentRequest(BaseModel):
    tracking_number: str = Field(..., min_length=1)
    carrier_code: str = DEFAULT_CARRIER


class RestoreRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)
