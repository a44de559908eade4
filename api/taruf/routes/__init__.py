from fastapi import APIRouter, FastAPI

from .auth import router as auth_router, scaffold_router as auth_scaffold_router
from .candidates import router as candidates_router, scaffold_router as candidates_scaffold_router
from .selections import router as selections_router, scaffold_router as selections_scaffold_router
from .slots import router as slots_router, scaffold_router as slots_scaffold_router


def include_modular_routers(app: FastAPI) -> None:
    app.include_router(auth_router, tags=["auth"])
    app.include_router(candidates_router, tags=["candidates"])
    app.include_router(slots_router, tags=["slots"])
    app.include_router(selections_router, tags=["selections"])

    app.include_router(auth_scaffold_router, prefix="/_scaffold/auth", tags=["scaffold-auth"])
    app.include_router(candidates_scaffold_router, prefix="/_scaffold/candidates", tags=["scaffold-candidates"])
    app.include_router(selections_scaffold_router, prefix="/_scaffold/selections", tags=["scaffold-selections"])
    app.include_router(slots_scaffold_router, prefix="/_scaffold/slots", tags=["scaffold-slots"])


__all__ = ["include_modular_routers", "APIRouter"]
