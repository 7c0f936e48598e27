"""
Wit Control System - State storage, actuation and scheduling
"""

from wit.control.state_store import StateStore, JsonFileStateStore, MemoryStateStore
from wit.control.controller import Action, ClimateController, ScheduleForm
from wit.control.scheduler import SchedulerDaemon

__all__ = [
    "StateStore",
    "JsonFileStateStore",
    "MemoryStateStore",
    "Action",
    "ClimateController",
    "ScheduleForm",
    "SchedulerDaemon",
]
