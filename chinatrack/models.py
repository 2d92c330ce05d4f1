"""ChinaTrack data models: users, shipments and tracking events as dataclasses.

Stored values keep the camelCase keys of the browser-era records
(``trackingNumber``, ``addedAt``...) so existing exports load unchanged.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .constants import CHINA_CARRIERS


def now_ms() -> int:
    return int(time.time() * 1000)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"

    def flipped(self) -> "UserRole":
        return UserRole.USER if self is UserRole.ADMIN else UserRole.ADMIN


@dataclass
class User:
    id: str
    email: str
    role: UserRole = UserRole.USER
    password_hash: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"id": self.id, "email": self.email, "role": self.role.value}
        if self.password_hash:
            d["passwordHash"] = self.password_hash
        return d

    def to_public_dict(self) -> Dict[str, Any]:
        """Same as to_dict without the password hash."""
        return {"id": self.id, "email": self.email, "role": self.role.value}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "User":
        return cls(
            id=str(d["id"]),
            email=d.get("email", ""),
            role=UserRole(d.get("role", UserRole.USER.value)),
            password_hash=d.get("passwordHash", d.get("password_hash")),
        )


@dataclass(frozen=True)
class Session:
    """A signed-in user and the bearer token that proves it."""
    user: User
    token: str

    def to_dict(self) -> Dict[str, Any]:
        return {"user": self.user.to_public_dict(), "token": self.token}


# ---------------------------------------------------------------------------
# Shipments
# ---------------------------------------------------------------------------

class ShipmentStatus(str, Enum):
    PENDING = "pending"
    INFO_RECEIVED = "info_received"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    DELIVERY_FAILURE = "delivery_failure"
    EXCEPTION = "exception"
    EXPIRED = "expired"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def priority(self) -> int:
        """Display sort key, lower first."""
        return STATUS_PRIORITY.get(self, 4)


STATUS_LABELS: Dict[ShipmentStatus, str] = {
    ShipmentStatus.PENDING: "Pending",
    ShipmentStatus.INFO_RECEIVED: "Info Received",
    ShipmentStatus.IN_TRANSIT: "In Transit",
    ShipmentStatus.OUT_FOR_DELIVERY: "Out for Delivery",
    ShipmentStatus.DELIVERED: "Delivered",
    ShipmentStatus.DELIVERY_FAILURE: "Failed Attempt",
    ShipmentStatus.EXCEPTION: "Exception",
    ShipmentStatus.EXPIRED: "Expired",
}

STATUS_PRIORITY: Dict[ShipmentStatus, int] = {
    ShipmentStatus.EXCEPTION: 0,
    ShipmentStatus.IN_TRANSIT: 1,
    ShipmentStatus.PENDING: 2,
    ShipmentStatus.DELIVERED: 3,
}


@dataclass(frozen=True)
class TrackingEvent:
    """One carrier checkpoint. Immutable once attached to a shipment."""
    date: str = ""
    status: str = ""
    detail: str = ""
    location: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "status": self.status,
            "detail": self.detail,
            "location": self.location,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrackingEvent":
        return cls(
            date=d.get("date") or "",
            status=d.get("status") or "",
            detail=d.get("detail") or "",
            location=d.get("location") or "",
        )


@dataclass(frozen=True)
class StatusUpdate:
    """Normalized result of a tracking lookup."""
    status: ShipmentStatus
    last_update: str
    description: str
    events: Tuple[TrackingEvent, ...] = ()


@dataclass
class Shipment:
    id: str
    tracking_number: str
    carrier_code: str
    status: ShipmentStatus = ShipmentStatus.PENDING
    last_update: str = ""
    description: str = ""
    events: Tuple[TrackingEvent, ...] = ()
    added_at: int = field(default_factory=now_ms)
    deleted_at: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    @property
    def is_trashed(self) -> bool:
        return self.deleted_at is not None

    @classmethod
    def create(cls, tracking_number: str, carrier_code: str, update: StatusUpdate) -> "Shipment":
        return cls(
            id=new_id(),
            tracking_number=tracking_number,
            carrier_code=carrier_code,
            status=update.status,
            last_update=update.last_update or now_iso(),
            description=update.description or "Tracking initialized",
            events=tuple(update.events),
        )

    def with_update(self, update: StatusUpdate) -> "Shipment":
        """Return a copy carrying the looked-up status, description and events."""
        return replace(
            self,
            status=update.status,
            last_update=update.last_update or self.last_update,
            description=update.description or self.description,
            events=tuple(update.events),
        )

    def trashed(self, at: Optional[int] = None) -> "Shipment":
        return replace(self, deleted_at=at if at is not None else now_ms())

    def restored(self) -> "Shipment":
        return replace(self, deleted_at=None)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "trackingNumber": self.tracking_number,
            "carrierCode": self.carrier_code,
            "status": self.status.value,
            "lastUpdate": self.last_update,
            "description": self.description,
            "addedAt": self.added_at,
            "events": [e.to_dict() for e in self.events],
        }
        if self.deleted_at is not None:
            d["deletedAt"] = self.deleted_at
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Shipment":
        try:
            status = ShipmentStatus(d.get("status", "pending"))
        except ValueError:
            status = ShipmentStatus.PENDING
        return cls(
            id=str(d["id"]),
            tracking_number=d.get("trackingNumber", d.get("tracking_number", "")),
            carrier_code=d.get("carrierCode", d.get("carrier_code", "")),
            status=status,
            last_update=d.get("lastUpdate", d.get("last_update", "")) or "",
            description=d.get("description") or "",
            events=tuple(TrackingEvent.from_dict(e) for e in d.get("events") or []),
            added_at=int(d.get("addedAt", d.get("added_at", 0)) or 0),
            deleted_at=d.get("deletedAt", d.get("deleted_at")),
        )


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclass
class Settings:
    registration_enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"registrationEnabled": self.registration_enabled}

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "Settings":
        d = d or {}
        # Anything but an explicit false counts as enabled
        return cls(registration_enabled=d.get("registrationEnabled") is not False)


@dataclass(frozen=True)
class Carrier:
    code: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "name": self.name}


def carrier_list() -> List[Carrier]:
    return [Carrier(code=code, name=name) for code, name in CHINA_CARRIERS.items()]
