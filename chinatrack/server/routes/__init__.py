"""Route registration for the ChinaTrack API."""

from fastapi import FastAPI

from .admin import router as admin_router
from .auth import router as auth_router
from .shipments import router as shipments_router
from .trash import router as trash_router


def register_routes(app: FastAPI):
    app.include_router(auth_router)
    app.include_router(shipments_router)
    app.include_router(trash_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health():
        return {"ok": True}
