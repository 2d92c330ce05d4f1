"""Active shipment routes: list, add, refresh, move to trash."""

from typing import Optional

from fastapi import APIRouter, Depends

from ...app import ChinaTrack
from ...errors import ValidationError
from ...models import ShipmentStatus, carrier_list
from ..app import require_app, require_user
from ..models import AddShipmentRequest

router = APIRouter(dependencies=[Depends(require_user)])


def _parse_status(status: Optional[str]) -> Optional[ShipmentStatus]:
    if not status or status == "all":
        return None
    try:
        return ShipmentStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown status filter: {status}")


@router.get("/api/carriers")
async def list_carriers():
    return [c.to_dict() for c in carrier_list()]


@router.get("/api/shipments")
async def list_shipments(status: Optional[str] = None, app: ChinaTrack = Depends(require_app)):
    shipments = await app.shipments.list_active(_parse_status(status))
    return [s.to_dict() for s in shipments]


@router.post("/api/shipments", status_code=201)
async def add_shipment(req: AddShipmentRequest, app: ChinaTrack = Depends(require_app)):
    shipment = await app.shipments.add_shipment(req.tracking_number, req.carrier_code)
    return shipment.to_dict()


@router.post("/api/shipments/refresh")
async def refresh_all(app: ChinaTrack = Depends(require_app)):
    await app.shipments.refresh_all()
    return [s.to_dict() for s in await app.shipments.list_active()]


@router.post("/api/shipments/{shipment_id}/refresh")
async def refresh_one(shipment_id: str, app: ChinaTrack = Depends(require_app)):
    shipment = await app.shipments.refresh_one(shipment_id)
    return shipment.to_dict()


@router.delete("/api/shipments/{shipment_id}")
async def soft_delete(shipment_id: str, app: ChinaTrack = Depends(require_app)):
    shipment = await app.shipments.soft_delete(shipment_id)
    return shipment.to_dict()
