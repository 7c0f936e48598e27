"""
Wit Climate Control Daemon - Main Entry Point
"""
import asyncio
import signal
import sys
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI

from wit.api import create_app, set_daemon_instance
from wit.config import Settings, get_settings
from wit.control.controller import ClimateController
from wit.control.scheduler import SchedulerDaemon
from wit.control.state_store import JsonFileStateStore, StateStore
from wit.hardware import Actuator, IrSendActuator, IrSendMock
from wit.logging_config import setup_logging

logger = structlog.get_logger(__name__)


def build_actuator(settings: Settings) -> Actuator:
    """Pick the real or mock transmitter"""
    if settings.irsend_mock:
        return IrSendMock()
    return IrSendActuator(
        irsend=settings.irsend_path,
        device=settings.device,
        remote=settings.lirc_config,
    )


class WitDaemon:
    """Main daemon controller for the wit climate system"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.app: Optional[FastAPI] = None
        self.store: Optional[StateStore] = None
        self.actuator: Optional[Actuator] = None
        self.controller: Optional[ClimateController] = None
        self.scheduler: Optional[SchedulerDaemon] = None
        self.should_exit = False

    async def startup(self):
        """Initialize all daemon components"""
        logger.info("wit_daemon_starting", version=self.settings.api_version)

        self.store = JsonFileStateStore(self.settings.state_file)

        logger.info("initializing_actuator", mock_mode=self.settings.irsend_mock)
        self.actuator = build_actuator(self.settings)

        self.controller = ClimateController(self.store, self.actuator)
        self.scheduler = SchedulerDaemon(
            self.store,
            self.controller,
            interval_seconds=self.settings.scheduler_interval_seconds,
            ordering=self.settings.schedule_ordering,
        )

        set_daemon_instance(self)
        self.app = create_app(self.settings)

        logger.info("starting_scheduler")
        self.scheduler.start()

        logger.info("wit_daemon_ready", host=self.settings.host, port=self.settings.port)

    async def shutdown(self):
        """Gracefully shutdown all components"""
        logger.info("wit_daemon_shutting_down")

        if self.scheduler:
            await self.scheduler.stop()

        set_daemon_instance(None)
        logger.info("wit_daemon_stopped")

    def handle_signal(self, signum, frame):
        """Handle shutdown signals"""
        logger.info("signal_received", signal=signal.Signals(signum).name)
        self.should_exit = True


async def main_async():
    """Async main function"""
    daemon = WitDaemon()

    signal.signal(signal.SIGINT, daemon.handle_signal)
    signal.signal(signal.SIGTERM, daemon.handle_signal)

    try:
        await daemon.startup()

        config = uvicorn.Config(
            daemon.app,
            host=daemon.settings.host,
            port=daemon.settings.port,
            log_level=daemon.settings.log_level.lower(),
            access_log=True,
        )
        server = uvicorn.Server(config)
        await server.serve()

    except Exception as e:
        logger.error("daemon_error", error=str(e), exc_info=True)
        sys.exit(1)
    finally:
        await daemon.shutdown()


def main():
    """Entry point for the daemon"""
    settings = get_settings()
    setup_logging(
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        log_file=settings.log_file,
    )

    try:
        asyncio.run(main_async())
    except KeyboardInterrupt:
        logger.info("interrupted_by_user")
        sys.exit(0)


if __name__ == "__main__":
    main()
