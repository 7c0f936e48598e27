"""
Scheduler Daemon - Drives the unit from the stored schedule

Every few seconds:
- expire the override lock when the calendar day changes (or at once
  while in manual mode)
- unless in manual mode, evaluate the schedule and hand the result to the
  controller as an autonomous action

Failures are logged and the cycle skipped; the loop keeps going until
stop() is called.
"""
import asyncio
from datetime import date, datetime
from typing import Callable, Optional
import structlog

from wit.control.controller import ClimateController
from wit.control.state_store import StateStore
from wit.logic.schedule import ScheduleAction, TimeOrdering, evaluate

logger = structlog.get_logger(__name__)


class SchedulerDaemon:
    """
    Periodic schedule evaluation

    Runs as a background asyncio task. Tests can call run_cycle()
    directly or run(max_cycles=N) for a bounded number of cycles.
    """

    def __init__(
        self,
        store: StateStore,
        controller: ClimateController,
        interval_seconds: float = 5.0,
        ordering: TimeOrdering = TimeOrdering.LEGACY,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the scheduler daemon

        Args:
            store: State store shared with the controller
            controller: Controller that applies scheduled actions
            interval_seconds: Pause between cycles
            ordering: Time comparison used when evaluating the schedule
            clock: Source of the current local time
        """
        self.store = store
        self.controller = controller
        self.interval = interval_seconds
        self.ordering = ordering
        self.clock = clock

        self.running = False
        self.task: Optional[asyncio.Task] = None
        self.today: Optional[date] = None

        # Statistics
        self.cycle_count = 0
        self.error_count = 0
        self.overrides_expired = 0
        self.last_action: Optional[ScheduleAction] = None
        self.last_cycle: Optional[datetime] = None

        logger.info(
            "scheduler_daemon_initialized",
            interval_s=interval_seconds,
            ordering=ordering.value,
        )

    async def _expire_override(self, now: datetime) -> bool:
        """
        Clear the override lock on a new day or under manual mode

        Returns:
            True if the state is in manual mode
        """
        new_day = self.today is not None and now.date() != self.today

        async with self.store.transaction() as tx:
            state = await tx.get()
            if (new_day or state.manual) and state.override:
                state.override = False
                await tx.set(state)
                self.overrides_expired += 1
                logger.info(
                    "override_expired",
                    reason="new_day" if new_day else "manual",
                )
            return state.manual

    async def _apply_schedule(self, now: datetime) -> None:
        state = await self.store.get()
        action = evaluate(state.schedule, now, self.ordering)
        self.last_action = action

        if action is ScheduleAction.NONE:
            logger.debug("schedule_no_action")
            return

        await self.controller.act(action.value, authoritative=False)

    async def run_cycle(self, now: Optional[datetime] = None) -> None:
        """
        Run one scheduler cycle

        Never raises; failures are logged and counted.

        Args:
            now: Time to evaluate at (defaults to the clock)
        """
        now = now or self.clock()
        if self.today is None:
            self.today = now.date()

        try:
            manual = await self._expire_override(now)
            if not manual:
                await self._apply_schedule(now)
        except Exception as e:
            self.error_count += 1
            logger.error("scheduler_cycle_failed", error=str(e), exc_info=True)

        self.today = now.date()
        self.last_cycle = now
        self.cycle_count += 1

    async def run(self, max_cycles: Optional[int] = None) -> None:
        """
        Run cycles until stop() is called

        Args:
            max_cycles: Stop after this many cycles (None runs forever)
        """
        self.running = True
        self.today = self.clock().date()
        logger.info("scheduler_daemon_started", interval_s=self.interval)

        cycles = 0
        try:
            while self.running:
                await asyncio.sleep(self.interval)
                await self.run_cycle()
                cycles += 1
                if max_cycles is not None and cycles >= max_cycles:
                    break

        except asyncio.CancelledError:
            logger.info("scheduler_daemon_cancelled")
            raise
        finally:
            self.running = False
            logger.info("scheduler_daemon_stopped", cycles=self.cycle_count)

    def start(self) -> asyncio.Task:
        """
        Start the daemon as a background task

        Returns:
            The asyncio Task running the loop
        """
        if self.task and not self.task.done():
            logger.warning("scheduler_daemon_already_running")
            return self.task

        self.task = asyncio.create_task(self.run())
        return self.task

    async def stop(self) -> None:
        """Stop the daemon"""
        logger.info("scheduler_daemon_stopping")
        self.running = False

        if self.task and not self.task.done():
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass

    def get_statistics(self) -> dict:
        return {
            "cycles": self.cycle_count,
            "errors": self.error_count,
            "overrides_expired": self.overrides_expired,
            "last_action": self.last_action.value if self.last_action else None,
            "last_cycle": self.last_cycle.isoformat() if self.last_cycle else None,
            "interval_s": self.interval,
            "running": self.running,
        }
