from fastapi import APIRouter, FastAPI

from .auth import router as auth_router
from .entitlement import router as entitlement_router
from .match import router as match_router
from .profile import router as profile_router


def include_modular_routers(app: FastAPI) -> None:
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(profile_router, prefix="/api", tags=["profiles"])
    app.include_router(match_router, prefix="/api", tags=["matches"])
    app.include_router(entitlement_router, prefix="/api", tags=["entitlement"])


__all__ = ["include_modular_routers", "APIRouter"]
