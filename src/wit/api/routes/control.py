"""
Control API Routes - State display and actions
"""
from datetime import datetime

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import RedirectResponse

from wit.api import get_daemon_instance
from wit.api.schemas import StateDisplay
from wit.control.controller import Action, ScheduleForm
from wit.errors import (
    ActionRequestError,
    ActuatorError,
    ScheduleParseError,
    StateIOError,
)

router = APIRouter()

DISPLAY = "display"


def _require_daemon():
    daemon = get_daemon_instance()
    if not daemon or not daemon.controller:
        raise HTTPException(status_code=503, detail="Controller not available")
    return daemon


async def _display(daemon) -> StateDisplay:
    try:
        state = await daemon.store.get()
    except StateIOError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return_url = daemon.settings.home_url
    return StateDisplay(
        running=state.running,
        system=state.op_mode,
        manual=state.manual,
        override=state.override,
        schedule=state.schedule,
        time=datetime.now().strftime("%Y-%m-%dT%H:%M:%S"),
        build=daemon.settings.api_version,
        operation_modes=daemon.settings.operation_modes,
        has_return=bool(return_url),
        return_to=return_url,
    )


@router.get("/", response_model=StateDisplay)
async def show_state():
    """Current controller state"""
    return await _display(_require_daemon())


@router.get("/{action}", response_model=StateDisplay)
async def show_state_for(action: str):
    """
    Current controller state

    Only POST performs actions; a GET for any action name just displays.
    """
    return await _display(_require_daemon())


@router.post("/{action}")
async def perform_action(action: str, request: Request):
    """Apply an action, then redirect to the display"""
    daemon = _require_daemon()

    if action != DISPLAY:
        form = None
        if action == Action.SCHEDULE.value:
            data = await request.form()
            form = ScheduleForm.from_multi({key: data.getlist(key) for key in data.keys()})

        try:
            await daemon.controller.act(action, authoritative=True, form=form)
        except (ScheduleParseError, ActionRequestError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        except ActuatorError as e:
            raise HTTPException(status_code=502, detail=str(e))
        except StateIOError as e:
            raise HTTPException(status_code=500, detail=str(e))

    return RedirectResponse(url=f"/wit/{DISPLAY}", status_code=303)
