"""
TrackingMore v4 response shapes.

Payloads are loosely typed JSON; each known shape is parsed once into a
dataclass here so the client never walks raw dicts. Absent or mistyped
fields become empty values, never KeyError.

Known shapes:
- envelope:  {"meta": {"code", "message"}, "data": ...}
- realtime:  data = {delivery_status, updated_at, latest_event, items: [checkpoint]}
- get:       data = [{carrier_code, delivery_status, updated_at, latest_event,
                      origin_info: {trackinfo: [checkpoint]},
                      destination_info: {trackinfo: [checkpoint]}}]
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..models import StatusUpdate, TrackingEvent, now_iso
from .status import map_status


class EventSource(str, Enum):
    """Where a record's checkpoints were found."""
    ITEMS = "items"
    ORIGIN = "origin_info"
    DESTINATION = "destination_info"
    NONE = "none"


@dataclass
class ApiMeta:
    code: Optional[int] = None
    message: str = ""

    @classmethod
    def from_body(cls, body: Any) -> "ApiMeta":
        meta = body.get("meta") if isinstance(body, dict) else None
        if not isinstance(meta, dict):
            return cls()
        code = meta.get("code")
        return cls(
            code=code if isinstance(code, int) else None,
            message=meta.get("message") or "",
        )


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _parse_checkpoints(raw: List[Any]) -> List[TrackingEvent]:
    events = []
    for cp in raw:
        if not isinstance(cp, dict):
            continue
        events.append(TrackingEvent(
            date=cp.get("checkpoint_date") or "",
            status=cp.get("checkpoint_delivery_status") or "",
            detail=cp.get("tracking_detail") or "",
            location=cp.get("location") or "",
        ))
    return events


def _event_timestamp(event: TrackingEvent) -> float:
    """Sort key for checkpoint dates; unparseable dates sort oldest."""
    if not event.date:
        return float("-inf")
    try:
        return datetime.fromisoformat(event.date.replace("Z", "+00:00")).timestamp()
    except ValueError:
        return float("-inf")


def sort_events_desc(events: List[TrackingEvent]) -> List[TrackingEvent]:
    return sorted(events, key=_event_timestamp, reverse=True)


@dataclass
class TrackingRecord:
    """One tracking record, from either the realtime or the get endpoint."""
    delivery_status: str = ""
    updated_at: str = ""
    latest_event: str = ""
    carrier_code: str = ""
    events: List[TrackingEvent] = field(default_factory=list)
    event_source: EventSource = EventSource.NONE

    @classmethod
    def from_realtime(cls, data: Dict[str, Any]) -> "TrackingRecord":
        items = _parse_checkpoints(_as_list(data.get("items")))
        return cls(
            delivery_status=data.get("delivery_status") or "",
            updated_at=data.get("updated_at") or "",
            latest_event=data.get("latest_event") or "",
            carrier_code=data.get("carrier_code") or "",
            events=items,
            event_source=EventSource.ITEMS if items else EventSource.NONE,
        )

    @classmethod
    def from_get(cls, data: Dict[str, Any]) -> "TrackingRecord":
        # origin_info is populated for most domestic Chinese shipments
        origin = _parse_checkpoints(_as_list(_as_dict(data.get("origin_info")).get("trackinfo")))
        destination = _parse_checkpoints(
            _as_list(_as_dict(data.get("destination_info")).get("trackinfo"))
        )
        if origin:
            events, source = origin, EventSource.ORIGIN
        elif destination:
            events, source = destination, EventSource.DESTINATION
        else:
            events, source = [], EventSource.NONE
        return cls(
            delivery_status=data.get("delivery_status") or "",
            updated_at=data.get("updated_at") or "",
            latest_event=data.get("latest_event") or "",
            carrier_code=data.get("carrier_code") or "",
            events=sort_events_desc(events),
            event_source=source,
        )

    def to_status_update(self) -> StatusUpdate:
        return StatusUpdate(
            status=map_status(self.delivery_status),
            last_update=self.updated_at or now_iso(),
            description=self.latest_event or f"Status: {self.delivery_status or 'unknown'}",
            events=tuple(self.events),
        )


@dataclass
class RealtimeResponse:
    meta: ApiMeta
    record: Optional[TrackingRecord] = None

    @property
    def ok(self) -> bool:
        return self.meta.code == 200 and self.record is not None

    @classmethod
    def from_body(cls, body: Any) -> "RealtimeResponse":
        meta = ApiMeta.from_body(body)
        data = body.get("data") if isinstance(body, dict) else None
        record = TrackingRecord.from_realtime(data) if isinstance(data, dict) and data else None
        return cls(meta=meta, record=record)


@dataclass
class GetResponse:
    meta: ApiMeta
    records: List[TrackingRecord] = field(default_factory=list)

    @classmethod
    def from_body(cls, body: Any) -> "GetResponse":
        meta = ApiMeta.from_body(body)
        data = body.get("data") if isinstance(body, dict) else None
        records = [TrackingRecord.from_get(d) for d in _as_list(data) if isinstance(d, dict)]
        return cls(meta=meta, records=records)

    def select(self, carrier_code: str) -> Optional[TrackingRecord]:
        """Record matching carrier_code, else the first record, else None."""
        for record in self.records:
            if record.carrier_code == carrier_code:
                return record
        return self.records[0] if self.records else None
