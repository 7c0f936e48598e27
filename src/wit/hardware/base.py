"""
Hardware Base Classes - Abstract interface for actuators

Allows swapping between the real IR transmitter and a mock.
"""
from abc import ABC, abstractmethod
from typing import Optional
import structlog

logger = structlog.get_logger(__name__)


class Actuator(ABC):
    """
    Base class for anything that can switch the climate unit

    A transmit either succeeds or raises ActuatorError. There is no
    feedback from the unit itself.
    """

    def __init__(self, name: str):
        """
        Initialize actuator

        Args:
            name: Human-readable actuator name
        """
        self.name = name
        self.transmit_count = 0
        self.error_count = 0
        self.last_mode: Optional[str] = None

    @abstractmethod
    async def transmit(self, mode: str) -> None:
        """
        Send a mode token (e.g. ``COOL74START``) to the unit

        Args:
            mode: Composed mode token

        Raises:
            ActuatorError: If the transmit failed
        """
        pass

    def get_statistics(self) -> dict:
        """
        Get actuator statistics

        Returns:
            Dictionary with statistics
        """
        return {
            "name": self.name,
            "transmit_count": self.transmit_count,
            "error_count": self.error_count,
            "last_mode": self.last_mode,
        }
