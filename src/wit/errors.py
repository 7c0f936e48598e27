"""
Wit Errors - Exception hierarchy for the actuation controller

All errors raised by ``act`` surface synchronously to its caller. The
scheduler daemon logs them and carries on; the HTTP layer maps them to
status codes.
"""
from typing import Optional


class WitError(Exception):
    """Base class for all wit errors"""


class StateIOError(WitError, OSError):
    """State storage exists but cannot be read or written"""


class MalformedStateError(StateIOError):
    """State storage is present but does not hold a valid state record"""


class ScheduleParseError(WitError, ValueError):
    """A schedule line failed a grammar or range check"""

    def __init__(self, line_number: int, line: str, reason: str):
        """
        Args:
            line_number: 1-based line number within the schedule text
            line: The offending line (stripped)
            reason: Which constraint the line violated
        """
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"schedule line {line_number} ({line!r}): {reason}")


class ActuatorError(WitError):
    """The external transmit command failed"""

    def __init__(
        self,
        mode: str,
        reason: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        self.mode = mode
        self.reason = reason
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"unable to transmit {mode}: {reason}")


class UnknownActionError(WitError, ValueError):
    """Action name is not one the controller understands"""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"unknown action: {action}")


class ActionRequestError(WitError, ValueError):
    """Action request is missing data it requires"""
