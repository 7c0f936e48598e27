"""
Wit Hardware Interface - IR transmitter drivers

Real (irsend) and mock implementations share the Actuator interface.
"""

from wit.hardware.base import Actuator
from wit.hardware.irsend import IrSendActuator
from wit.hardware.irsend_mock import IrSendMock

__all__ = [
    "Actuator",
    "IrSendActuator",
    "IrSendMock",
]
