"""FastAPI entry point for the Pulley Lab backend."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pulley_lab import __version__
from pulley_lab.models.settings import settings
from pulley_lab.routers import rig

app = FastAPI(title="Pulley Lab API", version=__version__)

# CORS middleware - must be added before routes
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS or ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,  # Cache preflight for 1 hour
)

app.include_router(rig.router)


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    """Basic health-check endpoint."""
    return {"status": "ok", "env": settings.APP_ENV}
