"""Trash routes: list, restore, purge and bulk selection."""

from fastapi import APIRouter, Depends

from ...app import ChinaTrack
from ..app import require_app, require_user
from ..models import RestoreRequest

router = APIRouter(dependencies=[Depends(require_user)])


@router.get("/api/trash")
async def list_trash(app: ChinaTrack = Depends(require_app)):
    return [s.to_dict() for s in await app.shipments.list_trash()]


@router.post("/api/trash/restore")
async def restore(req: RestoreRequest, app: ChinaTrack = Depends(require_app)):
    restored = await app.shipments.restore(req.ids)
    return [s.to_dict() for s in restored]


@router.delete("/api/trash")
async def empty_trash(app: ChinaTrack = Depends(require_app)):
    return {"deleted": await app.shipments.empty_trash()}


# Selection routes are registered before /api/trash/{shipment_id}

@router.get("/api/trash/selection")
async def get_selection(app: ChinaTrack = Depends(require_app)):
    return {"ids": await app.shipments.selected()}


@router.post("/api/trash/selection/all")
async def select_all(app: ChinaTrack = Depends(require_app)):
    return {"ids": await app.shipments.select_all()}


@router.post("/api/trash/selection/restore")
async def restore_selected(app: ChinaTrack = Depends(require_app)):
    restored = await app.shipments.restore_selected()
    return [s.to_dict() for s in restored]


@router.post("/api/trash/selection/delete")
async def delete_selected(app: ChinaTrack = Depends(require_app)):
    return {"deleted": await app.shipments.delete_selected()}


@router.post("/api/trash/selection/{shipment_id}")
async def toggle_selection(shipment_id: str, app: ChinaTrack = Depends(require_app)):
    return {"ids": await app.shipments.toggle_selection(shipment_id)}


@router.delete("/api/trash/selection")
async def clear_selection(app: ChinaTrack = Depends(require_app)):
    app.shipments.clear_selection()
    return {"ids": []}


@router.delete("/api/trash/{shipment_id}")
async def permanent_delete(shipment_id: str, app: ChinaTrack = Depends(require_app)):
    await app.shipments.permanent_delete(shipment_id)
    return {"deleted": True}
