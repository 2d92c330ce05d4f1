"""
Shipment lifecycle management.

A shipment is Active (no ``deleted_at``), Trashed (``deleted_at`` set) or
Purged (gone from the store). Transitions:

    add ------------> Active
    Active  --soft_delete------> Trashed
    Trashed --restore----------> Active
    Trashed --permanent_delete-> Purged

Every operation reads the whole shipment list from storage, changes it and
writes it back whole.

Usage:
    manager = ShipmentManager(storage, client)
    shipment = await manager.add_shipment("SF123", "sf-express")
    await manager.soft_delete(shipment.id)
    await manager.restore(shipment.id)
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Union

from .constants import CHINA_CARRIERS, DEFAULT_MAX_CONCURRENCY, DEFAULT_REFRESH_TIMEOUT
from .errors import (
    DuplicateActiveError,
    DuplicateTrashedError,
    ShipmentNotFoundError,
    UnknownCarrierError,
    ValidationError,
)
from .models import Shipment, ShipmentStatus, StatusUpdate
from .store import StorageService
from .tracking import TrackingClient

logger = logging.getLogger(__name__)


class TrashSelection:
    """Ids picked in the trash view for bulk restore/delete."""

    def __init__(self):
        self._ids: Dict[str, None] = {}

    def __contains__(self, shipment_id: str) -> bool:
        return shipment_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def ids(self) -> List[str]:
        return list(self._ids)

    def add(self, shipment_id: str) -> None:
        self._ids[shipment_id] = None

    def discard(self, shipment_ids: Iterable[str]) -> None:
        for shipment_id in shipment_ids:
            self._ids.pop(shipment_id, None)

    def retain(self, valid_ids: Iterable[str]) -> None:
        """Drop every id not in valid_ids."""
        valid = set(valid_ids)
        self._ids = {i: None for i in self._ids if i in valid}

    def clear(self) -> None:
        self._ids.clear()


class ShipmentManager:
    """
    Add, refresh, trash, restore and purge shipments.

    Args:
        storage: StorageService holding the shipment list
        client: TrackingClient used for status lookups
        max_concurrency: Upper bound on parallel lookups in refresh_all()
        refresh_timeout: Seconds before one shipment's whole lookup (all
            fallback requests included) is abandoned
    """

    def __init__(
        self,
        storage: StorageService,
        client: TrackingClient,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        refresh_timeout: float = DEFAULT_REFRESH_TIMEOUT,
    ):
        self._storage = storage
        self._client = client
        self.max_concurrency = max(1, max_concurrency)
        self.refresh_timeout = refresh_timeout
        self.selection = TrashSelection()

    # ----- reads -----

    async def list_all(self) -> List[Shipment]:
        return await self._storage.get_trackings()

    async def list_active(self, status: Optional[ShipmentStatus] = None) -> List[Shipment]:
        """Active shipments, optionally filtered by status, sorted by display priority."""
        active = [s for s in await self._storage.get_trackings() if s.is_active]
        if status is not None:
            active = [s for s in active if s.status == status]
        return sorted(active, key=lambda s: s.status.priority)

    async def list_trash(self) -> List[Shipment]:
        """Trashed shipments, most recently deleted first."""
        trashed = [s for s in await self._storage.get_trackings() if s.is_trashed]
        return sorted(trashed, key=lambda s: s.deleted_at, reverse=True)

    async def get(self, shipment_id: str) -> Optional[Shipment]:
        for s in await self._storage.get_trackings():
            if s.id == shipment_id:
                return s
        return None

    # ----- add / refresh -----

    async def add_shipment(self, tracking_number: str, carrier_code: str) -> Shipment:
        """
        Look up a new tracking number and prepend it as an active shipment.

        Raises:
            ValidationError: empty tracking number
            UnknownCarrierError: carrier not in the catalogue
            DuplicateActiveError: number already tracked
            DuplicateTrashedError: number sits in the trash
            TrackingLookupError: lookup failed; nothing is stored
        """
        number = (tracking_number or "").strip()
        carrier = (carrier_code or "").strip()
        if not number:
            raise ValidationError("Tracking number is required.")
        if carrier not in CHINA_CARRIERS:
            raise UnknownCarrierError(carrier)

        for s in await self._storage.get_trackings():
            if s.tracking_number != number:
                continue
            if s.is_active:
                raise DuplicateActiveError(number)
            raise DuplicateTrashedError(number)

        update = await self._client.fetch_status(number, carrier)
        shipment = Shipment.create(number, carrier, update)

        # Re-read so a concurrent change made during the lookup is not lost
        trackings = await self._storage.get_trackings()
        if any(s.tracking_number == number and s.is_active for s in trackings):
            raise DuplicateActiveError(number)
        await self._storage.save_trackings([shipment] + trackings)
        logger.info(f"Added shipment {number} ({carrier}) as {shipment.status.value}")
        return shipment

    async def refresh_one(self, shipment_id: str) -> Shipment:
        """Refresh a single active shipment. Lookup errors propagate."""
        shipment = await self.get(shipment_id)
        if shipment is None or not shipment.is_active:
            raise ShipmentNotFoundError(shipment_id)

        update = await self._client.fetch_status(shipment.tracking_number, shipment.carrier_code)
        merged = await self._merge_updates({shipment_id: update})
        refreshed = next((s for s in merged if s.id == shipment_id), None)
        if refreshed is None:
            # Purged while the lookup was in flight
            raise ShipmentNotFoundError(shipment_id)
        return refreshed

    async def refresh_all(self) -> List[Shipment]:
        """
        Re-query every active shipment concurrently.

        Trashed shipments are never queried. A failed or timed-out lookup
        leaves that shipment unchanged; it never aborts the batch.

        Returns:
            The full shipment list after merging
        """
        active = [s for s in await self._storage.get_trackings() if s.is_active]
        if not active:
            return await self._storage.get_trackings()

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def lookup(shipment: Shipment) -> Optional[StatusUpdate]:
            async with semaphore:
                try:
                    return await asyncio.wait_for(
                        self._client.fetch_status(shipment.tracking_number, shipment.carrier_code),
                        timeout=self.refresh_timeout,
                    )
                except asyncio.TimeoutError:
                    logger.warning(
                        f"Refresh of {shipment.tracking_number} timed out after {self.refresh_timeout}s"
                    )
                except Exception as e:
                    logger.error(f"Failed to refresh {shipment.tracking_number}: {e}")
                return None

        results = await asyncio.gather(*[lookup(s) for s in active])
        updates = {s.id: u for s, u in zip(active, results) if u is not None}
        logger.info(f"Refreshed {len(updates)}/{len(active)} active shipments")
        return await self._merge_updates(updates)

    async def _merge_updates(self, updates: Dict[str, StatusUpdate]) -> List[Shipment]:
        """Apply updates by id to the latest stored list; only active records change."""
        trackings = await self._storage.get_trackings()
        merged = [
            s.with_update(updates[s.id]) if s.id in updates and s.is_active else s
            for s in trackings
        ]
        await self._storage.save_trackings(merged)
        return merged

    # ----- trash lifecycle -----

    async def soft_delete(self, shipment_id: str) -> Shipment:
        """Move an active shipment to the trash."""
        trackings = await self._storage.get_trackings()
        for i, s in enumerate(trackings):
            if s.id == shipment_id and s.is_active:
                trackings[i] = s.trashed()
                await self._storage.save_trackings(trackings)
                logger.info(f"Moved shipment {s.tracking_number} to trash")
                return trackings[i]
        raise ShipmentNotFoundError(shipment_id)

    async def restore(self, shipment_ids: Union[str, Iterable[str]]) -> List[Shipment]:
        """
        Restore one or many trashed shipments.

        Ids that are not in the trash are ignored.

        Raises:
            DuplicateActiveError: a restored number would clash with an active
                shipment; nothing is restored
        """
        ids = {shipment_ids} if isinstance(shipment_ids, str) else set(shipment_ids)
        trackings = await self._storage.get_trackings()

        active_numbers = {s.tracking_number for s in trackings if s.is_active}
        to_restore = [s for s in trackings if s.id in ids and s.is_trashed]
        for s in to_restore:
            if s.tracking_number in active_numbers:
                raise DuplicateActiveError(s.tracking_number)
            active_numbers.add(s.tracking_number)

        if not to_restore:
            return []

        restored_ids = {s.id for s in to_restore}
        trackings = [s.restored() if s.id in restored_ids else s for s in trackings]
        await self._storage.save_trackings(trackings)
        self.selection.discard(restored_ids)
        logger.info(f"Restored {len(restored_ids)} shipment(s) from trash")
        return [s for s in trackings if s.id in restored_ids]

    async def permanent_delete(self, shipment_id: str) -> None:
        """Purge a trashed shipment. Active shipments must be trashed first."""
        trackings = await self._storage.get_trackings()
        remaining = [s for s in trackings if not (s.id == shipment_id and s.is_trashed)]
        if len(remaining) == len(trackings):
            raise ShipmentNotFoundError(shipment_id)
        await self._storage.save_trackings(remaining)
        self.selection.discard([shipment_id])
        logger.info(f"Permanently deleted shipment {shipment_id}")

    async def empty_trash(self) -> int:
        """Purge every trashed shipment. Returns how many were removed."""
        trackings = await self._storage.get_trackings()
        purged = {s.id for s in trackings if s.is_trashed}
        if not purged:
            return 0
        await self._storage.save_trackings([s for s in trackings if s.id not in purged])
        self.selection.discard(purged)
        logger.info(f"Emptied trash ({len(purged)} shipment(s))")
        return len(purged)

    # ----- trash selection -----

    async def _trashed_ids(self) -> List[str]:
        return [s.id for s in await self._storage.get_trackings() if s.is_trashed]

    async def select(self, shipment_id: str) -> List[str]:
        if shipment_id not in await self._trashed_ids():
            raise ShipmentNotFoundError(shipment_id)
        self.selection.add(shipment_id)
        return self.selection.ids()

    async def toggle_selection(self, shipment_id: str) -> List[str]:
        if shipment_id in self.selection:
            self.selection.discard([shipment_id])
            return self.selection.ids()
        return await self.select(shipment_id)

    async def select_all(self) -> List[str]:
        for shipment_id in await self._trashed_ids():
            self.selection.add(shipment_id)
        return self.selection.ids()

    def clear_selection(self) -> None:
        self.selection.clear()

    async def selected(self) -> List[str]:
        """Selected ids that are still in the trash."""
        self.selection.retain(await self._trashed_ids())
        return self.selection.ids()

    async def restore_selected(self) -> List[Shipment]:
        return await self.restore(await self.selected())

    async def delete_selected(self) -> int:
        ids = set(await self.selected())
        if not ids:
            return 0
        trackings = await self._storage.get_trackings()
        await self._storage.save_trackings([s for s in trackings if s.id not in ids])
        self.selection.discard(ids)
        logger.info(f"Permanently deleted {len(ids)} selected shipment(s)")
        return len(ids)
