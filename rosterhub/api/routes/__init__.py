from fastapi import FastAPI

from . import attendance, auth, events, health, roles, volunteers


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(events.router)
    app.include_router(roles.router)
    app.include_router(volunteers.router)
    app.include_router(attendance.router)
