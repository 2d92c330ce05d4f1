"""Registration, login and session routes.

Register and login return ``{"user": ..., "token": ...}``; every other
protected route expects ``Authorization: Bearer <token>``.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from ...app import ChinaTrack
from ..app import bearer_token, require_app, require_user
from ..models import CredentialsRequest

router = APIRouter()


@router.post("/api/auth/register", status_code=201)
async def register(req: CredentialsRequest, app: ChinaTrack = Depends(require_app)):
    session = await app.users.sign_up(req.email, req.password)
    return session.to_dict()


@router.post("/api/auth/login")
async def login(req: CredentialsRequest, app: ChinaTrack = Depends(require_app)):
    session = await app.users.sign_in(req.email, req.password)
    return session.to_dict()


@router.post("/api/auth/logout", dependencies=[Depends(require_user)])
async def logout(app: ChinaTrack = Depends(require_app)):
    await app.users.logout()
    return {"ok": True}


@router.get("/api/auth/me")
async def me(
    app: ChinaTrack = Depends(require_app),
    token: Optional[str] = Depends(bearer_token),
):
    """Session user for this token plus whether sign-up is open (for the login screen)."""
    user = await app.users.session_user(token)
    return {
        "user": user.to_public_dict() if user else None,
        "registration_enabled": await app.users.registration_enabled(),
    }
