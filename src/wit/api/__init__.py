"""
Wit Climate Control API
"""
from typing import Optional
from fastapi import FastAPI

from wit.config import Settings

# Global reference to daemon (set by main.py)
_daemon_instance: Optional[object] = None


def set_daemon_instance(daemon):
    """Set the global daemon instance for API access"""
    global _daemon_instance
    _daemon_instance = daemon


def get_daemon_instance():
    """Get the global daemon instance"""
    return _daemon_instance


def create_app(settings: Settings) -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
# Wit Climate Control API

Switches an IR-controlled heating/cooling unit on and off from a weekly
schedule, with manual overrides.

- `GET /wit/display` - current state
- `POST /wit/on`, `POST /wit/off` - switch now (locks out the schedule for the rest of the day)
- `POST /wit/togglelock` - set or clear the lock
- `POST /wit/calibrate` - flip the recorded running flag without transmitting
- `POST /wit/schedule` - form fields `opmode`, `manual`, `sched`

Schedule lines are `minute hour weekday|weekend on|off`.
        """,
        docs_url="/docs" if settings.api_docs_enabled else None,
        redoc_url="/redoc" if settings.api_docs_enabled else None,
        openapi_tags=[
            {
                "name": "system",
                "description": "Health and status endpoints.",
            },
            {
                "name": "control",
                "description": "State display and actions.",
            },
        ],
    )

    @app.get(
        "/health",
        summary="Health Check",
        description="Check if the daemon is running.",
        tags=["system"],
    )
    async def health_check():
        """Health check endpoint for monitoring"""
        return {
            "status": "healthy",
            "version": settings.api_version,
            "service": "wit-daemon",
        }

    @app.get(
        "/status",
        summary="System Status",
        description="Scheduler, controller, state store and transmitter statistics.",
        tags=["system"],
    )
    async def get_status():
        """Get daemon status"""
        daemon = get_daemon_instance()

        response = {
            "status": "running",
            "version": settings.api_version,
            "service": "wit-daemon",
        }

        if daemon and daemon.scheduler:
            response["scheduler"] = daemon.scheduler.get_statistics()

        if daemon and daemon.controller:
            response["controller"] = daemon.controller.get_statistics()

        if daemon and daemon.store:
            response["state_store"] = daemon.store.get_statistics()

        if daemon and daemon.actuator:
            response["actuator"] = daemon.actuator.get_statistics()

        return response

    from wit.api.routes import control

    app.include_router(control.router, prefix="/wit", tags=["control"])

    return app
