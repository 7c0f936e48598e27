"""
IrSend Actuator - Drives the unit through LIRC's irsend

Runs ``irsend --device=<socket> SEND_ONCE <remote> <mode>`` for every
transmit. The command is not given a timeout; a hung irsend stalls the
caller until it returns.
"""
import asyncio
from contextlib import suppress
from typing import List

import structlog

from wit.errors import ActuatorError
from wit.hardware.base import Actuator

logger = structlog.get_logger(__name__)


class IrSendActuator(Actuator):
    """Actuator backed by the irsend command line tool"""

    def __init__(self, irsend: str, device: str, remote: str):
        """
        Initialize irsend actuator

        Args:
            irsend: Path to the irsend executable
            device: lircd socket to talk to
            remote: Remote name from the lircd configuration
        """
        super().__init__("irsend")
        self.irsend = irsend
        self.device = device
        self.remote = remote

        logger.info(
            "irsend_actuator_initialized",
            irsend=irsend,
            device=device,
            remote=remote,
        )

    def command(self, mode: str) -> List[str]:
        """Build the argument vector for a transmit"""
        return [
            self.irsend,
            f"--device={self.device}",
            "SEND_ONCE",
            self.remote,
            mode,
        ]

    async def transmit(self, mode: str) -> None:
        args = self.command(mode)
        logger.info("irsend_transmitting", mode=mode)

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            self.error_count += 1
            logger.error("irsend_exec_failed", mode=mode, error=str(e))
            raise ActuatorError(mode, f"cannot run {self.irsend}: {e}") from e

        try:
            _, stderr = await process.communicate()
        except asyncio.CancelledError:
            # Don't leave the child running or unreaped
            with suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            logger.warning("irsend_cancelled", mode=mode)
            raise
        except OSError as e:
            self.error_count += 1
            logger.error("irsend_exec_failed", mode=mode, error=str(e))
            raise ActuatorError(mode, f"cannot run {self.irsend}: {e}") from e

        if process.returncode != 0:
            self.error_count += 1
            message = stderr.decode(errors="replace").strip()
            logger.error(
                "irsend_failed",
                mode=mode,
                returncode=process.returncode,
                stderr=message,
            )
            raise ActuatorError(
                mode,
                f"irsend exited with status {process.returncode}",
                returncode=process.returncode,
                stderr=message,
            )

        self.transmit_count += 1
        self.last_mode = mode
        logger.info("irsend_transmitted", mode=mode)

    def get_statistics(self) -> dict:
        stats = super().get_statistics()
        stats["device"] = self.device
        stats["remote"] = self.remote
        return stats
