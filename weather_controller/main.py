"""FastAPI application setup for the weather controller."""

from fastapi import FastAPI

from weather_controller.api import router as api_router
from weather_controller.config import settings

app = FastAPI(title="Weather Controller")


@app.get("/healthz")
def healthz():
    """Liveness probe."""
    return {"status": "ok", "state_store": settings.state_store}


# API routes
app.include_router(api_router, prefix="/v1")
