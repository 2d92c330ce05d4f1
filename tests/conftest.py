"""Shared fixtures: in-memory storage, scripted tracking client, TrackingMore payloads."""

from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest

from chinatrack.models import ShipmentStatus, StatusUpdate, TrackingEvent
from chinatrack.shipments import ShipmentManager
from chinatrack.store import MemoryStore, StorageService
from chinatrack.tracking import TrackingClient
from chinatrack.users import UserManager


def make_update(
    status: ShipmentStatus = ShipmentStatus.IN_TRANSIT,
    description: str = "Departed Shenzhen hub",
    last_update: str = "2025-01-15T10:00:00Z",
    events: Tuple[TrackingEvent, ...] = (),
) -> StatusUpdate:
    return StatusUpdate(status=status, last_update=last_update, description=description, events=events)


class FakeTrackingClient:
    """Stands in for TrackingClient. Results are keyed by tracking number.

    A result may be a StatusUpdate, an exception instance (raised), or an
    async callable (awaited, for slow or hanging lookups).
    """

    def __init__(self, results: Optional[Dict[str, Any]] = None, default: Any = None):
        self.results: Dict[str, Any] = dict(results or {})
        self.default = default if default is not None else make_update()
        self.calls: List[Tuple[str, str]] = []

    async def fetch_status(self, tracking_number: str, carrier_code: str) -> StatusUpdate:
        self.calls.append((tracking_number, carrier_code))
        result = self.results.get(tracking_number, self.default)
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return await result()
        return result


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def storage(store):
    return StorageService(store)


@pytest.fixture
def fake_client():
    return FakeTrackingClient()


@pytest.fixture
def manager(storage, fake_client):
    return ShipmentManager(storage, fake_client, max_concurrency=3, refresh_timeout=0.5)


@pytest.fixture
def users(storage):
    return UserManager(storage)


# ---------------------------------------------------------------------------
# TrackingMore HTTP fakes
# ---------------------------------------------------------------------------

Handler = Callable[[httpx.Request], httpx.Response]


def checkpoint(date: str, detail: str, status: str = "transit", location: str = "Shenzhen") -> Dict[str, Any]:
    return {
        "checkpoint_date": date,
        "checkpoint_delivery_status": status,
        "tracking_detail": detail,
        "location": location,
    }


def envelope(code: int = 200, message: str = "Request response is successful", data: Any = None) -> Dict[str, Any]:
    return {"meta": {"code": code, "message": message}, "data": data}


class RouteHandler:
    """Dispatches MockTransport requests by path suffix and records them."""

    def __init__(self, routes: Dict[str, Union[httpx.Response, Exception, Handler]]):
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for suffix, result in self.routes.items():
            if request.url.path.endswith(suffix):
                if isinstance(result, Exception):
                    raise result
                if callable(result):
                    return result(request)
                return result
        return httpx.Response(404, json=envelope(404, "Page does not exist"))

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]


def make_tracking_client(routes: Dict[str, Any]) -> Tuple[TrackingClient, RouteHandler]:
    handler = RouteHandler(routes)
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TrackingClient(api_key="test-key", http_client=http, timeout=1.0), handler
