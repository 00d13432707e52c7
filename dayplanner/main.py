"""FastAPI application - day planner API."""

from fastapi import FastAPI

from dayplanner.api.routes.day_plans import router as day_plans_router
from dayplanner.api.routes.health import router as health_router
from dayplanner.api.routes.metrics import router as metrics_router
from dayplanner.config import get_settings
from dayplanner.utils.logging import configure_logging

configure_logging(get_settings().log_level)

app = FastAPI(title="Day Planner API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(day_plans_router, tags=["day-plans"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Day Planner API", "version": "0.1.0"}
