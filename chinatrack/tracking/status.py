"""TrackingMore delivery_status vocabulary -> internal ShipmentStatus."""

from typing import Optional

from ..models import ShipmentStatus

STATUS_MAP = {
    "transit": ShipmentStatus.IN_TRANSIT,
    "pickup": ShipmentStatus.OUT_FOR_DELIVERY,
    "delivered": ShipmentStatus.DELIVERED,
    "undelivered": ShipmentStatus.DELIVERY_FAILURE,
    "exception": ShipmentStatus.EXCEPTION,
    "expired": ShipmentStatus.EXPIRED,
    "info_received": ShipmentStatus.INFO_RECEIVED,
    "notfound": ShipmentStatus.PENDING,
}


def map_status(delivery_status: Optional[str]) -> ShipmentStatus:
    """Map a TrackingMore delivery status; unknown or missing values are pending."""
    if not delivery_status:
        return ShipmentStatus.PENDING
    return STATUS_MAP.get(delivery_status, ShipmentStatus.PENDING)
