"""
Climate Controller - Applies actions to the persisted state

Every action runs as one store transaction: read the state, decide, call
the actuator if the unit has to change, write the state once. Concurrent
callers (HTTP handlers and the scheduler daemon) are serialised by the
store lock, so two ``on`` requests cannot both decide to transmit.

Lock policy: while ``override`` is set, autonomous calls never actuate.
Authoritative (interactive) calls always may.
"""
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, Mapping, Optional, Union

import structlog
from pydantic import BaseModel, Field

from wit.control.state_store import StateStore
from wit.errors import ActionRequestError, UnknownActionError
from wit.hardware.base import Actuator
from wit.logic.schedule import validate_schedule
from wit.models.state import State

logger = structlog.get_logger(__name__)

NOOP_OPMODE = "noop"


class Action(str, Enum):
    """Actions a caller can request"""
    CALIBRATE = "calibrate"  # flip running without transmitting
    ON = "on"
    OFF = "off"
    TOGGLE_LOCK = "togglelock"
    SCHEDULE = "schedule"  # update opmode, manual flag and schedule text

    @classmethod
    def parse(cls, name: Union[str, "Action"]) -> "Action":
        """
        Resolve an action name

        Raises:
            UnknownActionError: If the name is not a known action
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise UnknownActionError(str(name)) from None


class ScheduleForm(BaseModel):
    """Form fields accompanying a ``schedule`` action"""
    opmode: Optional[str] = Field(default=None, description="Selected operating mode")
    manual: bool = Field(default=False, description="Disable the scheduler")
    sched: str = Field(default="", description="Raw schedule text")

    @classmethod
    def from_multi(cls, fields: Mapping[str, Iterable[str]]) -> "ScheduleForm":
        """
        Build from multi-valued form fields

        ``opmode`` values are joined and stripped, ``manual`` is true when
        present at all, ``sched`` values are joined with newlines.
        """
        opmode = None
        if "opmode" in fields:
            opmode = "".join(fields["opmode"]).strip()
        return cls(
            opmode=opmode,
            manual="manual" in fields,
            sched="\n".join(fields.get("sched", [])),
        )


def mode_token(op_mode: str, start: bool) -> str:
    """Compose the token sent to the actuator, e.g. ``HEAT72STOP``"""
    return f"{op_mode}{'START' if start else 'STOP'}"


Handler = Callable[[Action, State, bool, Optional[ScheduleForm]], Awaitable[bool]]


class ClimateController:
    """
    Actuation state machine

    Owns no state of its own beyond statistics; the record lives in the
    injected StateStore.
    """

    def __init__(self, store: StateStore, actuator: Actuator):
        """
        Args:
            store: Where the state record is persisted
            actuator: What switches the unit
        """
        self.store = store
        self.actuator = actuator

        self._handlers: Dict[Action, Handler] = {
            Action.CALIBRATE: self._calibrate,
            Action.ON: self._switch,
            Action.OFF: self._switch,
            Action.TOGGLE_LOCK: self._toggle_lock,
            Action.SCHEDULE: self._schedule,
        }

        self.actions_applied = 0
        self.actuations = 0
        self.failures = 0
        self.unknown_actions = 0
        self.last_action: Optional[str] = None

        logger.info("climate_controller_initialized", actuator=actuator.name)

    async def act(
        self,
        action: Union[str, Action],
        authoritative: bool,
        form: Optional[ScheduleForm] = None,
    ) -> State:
        """
        Apply an action to the current state

        Args:
            action: Action name or member
            authoritative: True for interactive/API requests, False for
                the scheduler
            form: Form fields, required for ``schedule``

        Returns:
            The state after the action

        Raises:
            StateIOError: If the state cannot be read or written
            ScheduleParseError: If a submitted schedule does not parse
            ActuatorError: If the transmitter failed (nothing is persisted)
            ActionRequestError: If ``schedule`` is called without a form
        """
        try:
            parsed = Action.parse(action)
        except UnknownActionError as e:
            self.unknown_actions += 1
            logger.warning("unknown_action", action=e.action, authoritative=authoritative)
            return await self.store.get()

        async with self.store.transaction() as tx:
            state = await tx.get()
            try:
                changed = await self._handlers[parsed](parsed, state, authoritative, form)
            except Exception as e:
                self.failures += 1
                logger.error(
                    "action_failed",
                    action=parsed.value,
                    authoritative=authoritative,
                    error=str(e),
                )
                raise

            if changed:
                await tx.set(state)

        self.actions_applied += 1
        self.last_action = parsed.value
        logger.info(
            "action_applied",
            action=parsed.value,
            authoritative=authoritative,
            changed=changed,
            running=state.running,
            override=state.override,
        )
        return state

    async def _calibrate(
        self,
        action: Action,
        state: State,
        authoritative: bool,
        form: Optional[ScheduleForm],
    ) -> bool:
        state.running = not state.running
        logger.info("running_calibrated", running=state.running)
        return True

    async def _switch(
        self,
        action: Action,
        state: State,
        authoritative: bool,
        form: Optional[ScheduleForm],
    ) -> bool:
        turn_on = action is Action.ON
        can_change = authoritative or not state.override
        changed = False

        # An interactive on/off locks out the schedule
        if not state.manual and authoritative and not state.override:
            state.override = True
            changed = True

        if not can_change:
            logger.debug("actuation_suppressed_by_lock", action=action.value)
            return changed

        if turn_on == state.running:
            return changed

        await self.actuator.transmit(mode_token(state.op_mode, turn_on))
        self.actuations += 1
        state.running = not state.running
        return True

    async def _toggle_lock(
        self,
        action: Action,
        state: State,
        authoritative: bool,
        form: Optional[ScheduleForm],
    ) -> bool:
        state.override = not state.override
        return True

    async def _schedule(
        self,
        action: Action,
        state: State,
        authoritative: bool,
        form: Optional[ScheduleForm],
    ) -> bool:
        if form is None:
            raise ActionRequestError("schedule action requires form fields")

        validate_schedule(form.sched)

        if form.opmode and form.opmode != NOOP_OPMODE:
            state.op_mode = form.opmode
        state.manual = form.manual
        state.schedule = form.sched.strip()
        return True

    def get_statistics(self) -> dict:
        return {
            "actions_applied": self.actions_applied,
            "actuations": self.actuations,
            "failures": self.failures,
            "unknown_actions": self.unknown_actions,
            "last_action": self.last_action,
        }
