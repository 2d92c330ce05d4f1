"""
ChinaTrack - package tracking for Chinese carriers

Users register and sign in, add tracking numbers for a fixed set of
carriers, and ChinaTrack polls the TrackingMore API for their status.
Shipments move between an active list and a trash; admins manage users
and can close self-registration.

Quick Start:
    from chinatrack import ChinaTrack

    app = ChinaTrack("config.yaml")
    await app.initialize()

    await app.users.login("admin@test.com", "admin")
    await app.shipments.add_shipment("SF1234567890", "sf-express")
    await app.shipments.refresh_all()

HTTP API:
    chinatrack-server --port 8000
"""

from .app import ChinaTrack
from .errors import (
    ChinaTrackError,
    DuplicateActiveError,
    DuplicateTrashedError,
    EmailExistsError,
    InvalidCredentialsError,
    RegistrationDisabledError,
    TrackingLookupError,
)
from .models import Session, Shipment, ShipmentStatus, StatusUpdate, TrackingEvent, User, UserRole

__version__ = "0.1.0"

__all__ = [
    "ChinaTrack",
    "ChinaTrackError",
    "DuplicateActiveError",
    "DuplicateTrashedError",
    "EmailExistsError",
    "InvalidCredentialsError",
    "RegistrationDisabledError",
    "TrackingLookupError",
    "Session",
    "Shipment",
    "ShipmentStatus",
    "StatusUpdate",
    "TrackingEvent",
    "User",
    "UserRole",
]
