"""Admin routes: user management and registration setting."""

from fastapi import APIRouter, Depends

from ...app import ChinaTrack
from ..app import require_admin, require_app

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/api/admin/users")
async def list_users(app: ChinaTrack = Depends(require_app)):
    return [u.to_public_dict() for u in await app.users.list_users()]


@router.post("/api/admin/users/{user_id}/role")
async def toggle_role(user_id: str, app: ChinaTrack = Depends(require_app)):
    user = await app.users.toggle_role(user_id)
    return {"changed": user is not None, "user": user.to_public_dict() if user else None}


@router.delete("/api/admin/users/{user_id}")
async def delete_user(user_id: str, app: ChinaTrack = Depends(require_app)):
    return {"deleted": await app.users.delete_user(user_id)}


@router.get("/api/admin/settings")
async def get_settings(app: ChinaTrack = Depends(require_app)):
    return {"registration_enabled": await app.users.registration_enabled()}


@router.post("/api/admin/settings/registration")
async def toggle_registration(app: ChinaTrack = Depends(require_app)):
    return {"registration_enabled": await app.users.toggle_registration()}
