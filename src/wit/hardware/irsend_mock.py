"""
IrSend Mock - Simulated transmitter for development and testing

Records every mode token instead of running irsend.
"""
import asyncio
from typing import List

import structlog

from wit.errors import ActuatorError
from wit.hardware.base import Actuator

logger = structlog.get_logger(__name__)


class IrSendMock(Actuator):
    """
    Mock actuator

    Set ``fail_next`` to make the following transmit raise ActuatorError,
    as a failed irsend would.
    """

    def __init__(self):
        super().__init__("irsend-mock")
        self.sent: List[str] = []
        self.fail_next = False
        logger.info("irsend_mock_initialized")

    async def transmit(self, mode: str) -> None:
        await asyncio.sleep(0)  # yield like a real subprocess call

        if self.fail_next:
            self.fail_next = False
            self.error_count += 1
            logger.warning("irsend_mock_simulated_failure", mode=mode)
            raise ActuatorError(mode, "simulated failure", returncode=1)

        self.sent.append(mode)
        self.transmit_count += 1
        self.last_mode = mode
        logger.info("irsend_mock_transmitted", mode=mode)

    def reset(self) -> None:
        """Forget recorded transmits (for testing)"""
        self.sent.clear()
        self.fail_next = False
        self.transmit_count = 0
        self.error_count = 0
        self.last_mode = None
