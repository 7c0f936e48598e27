"""
Tests for the irsend actuator and its mock
"""
import asyncio
import shutil
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from wit.errors import ActuatorError
from wit.hardware.irsend import IrSendActuator
from wit.hardware.irsend_mock import IrSendMock


def fake_process(returncode: int, stderr: bytes = b"") -> MagicMock:
    process = MagicMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(b"", stderr))
    return process


@pytest.fixture
def actuator() -> IrSendActuator:
    return IrSendActuator(irsend="/usr/bin/irsend", device="/run/lirc/lircd", remote="BRYANT")


class TestIrSendActuator:
    """Tests for IrSendActuator."""

    def test_command(self, actuator):
        assert actuator.command("COOL74START") == [
            "/usr/bin/irsend",
            "--device=/run/lirc/lircd",
            "SEND_ONCE",
            "BRYANT",
            "COOL74START",
        ]

    @pytest.mark.asyncio
    async def test_transmit_success(self, actuator):
        with patch(
            "wit.hardware.irsend.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=fake_process(0)),
        ) as mock_exec:
            await actuator.transmit("HEAT72STOP")

        args = mock_exec.call_args.args
        assert args == (
            "/usr/bin/irsend",
            "--device=/run/lirc/lircd",
            "SEND_ONCE",
            "BRYANT",
            "HEAT72STOP",
        )
        assert actuator.transmit_count == 1
        assert actuator.last_mode == "HEAT72STOP"

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, actuator):
        with patch(
            "wit.hardware.irsend.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=fake_process(1, b"irsend: unknown remote\n")),
        ):
            with pytest.raises(ActuatorError) as exc_info:
                await actuator.transmit("COOL74START")

        assert exc_info.value.mode == "COOL74START"
        assert exc_info.value.returncode == 1
        assert exc_info.value.stderr == "irsend: unknown remote"
        assert actuator.error_count == 1
        assert actuator.transmit_count == 0

    @pytest.mark.asyncio
    async def test_missing_executable(self, actuator):
        with patch(
            "wit.hardware.irsend.asyncio.create_subprocess_exec",
            new=AsyncMock(side_effect=FileNotFoundError("no such file")),
        ):
            with pytest.raises(ActuatorError) as exc_info:
                await actuator.transmit("COOL74START")

        assert exc_info.value.returncode is None
        assert actuator.error_count == 1

    @pytest.mark.asyncio
    async def test_cancel_kills_and_reaps_child(self, actuator):
        process = fake_process(0)
        process.communicate = AsyncMock(side_effect=asyncio.Event().wait)
        process.wait = AsyncMock(return_value=-9)

        with patch(
            "wit.hardware.irsend.asyncio.create_subprocess_exec",
            new=AsyncMock(return_value=process),
        ):
            task = asyncio.create_task(actuator.transmit("COOL74START"))
            await asyncio.sleep(0.01)
            task.cancel()

            with pytest.raises(asyncio.CancelledError):
                await task

        process.kill.assert_called_once()
        process.wait.assert_awaited_once()
        assert actuator.transmit_count == 0

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("true") is None, reason="needs true(1)")
    async def test_real_process_success(self):
        actuator = IrSendActuator(irsend=shutil.which("true"), device="dev", remote="REMOTE")

        await actuator.transmit("COOL74START")

        assert actuator.transmit_count == 1

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("false") is None, reason="needs false(1)")
    async def test_real_process_failure(self):
        actuator = IrSendActuator(irsend=shutil.which("false"), device="dev", remote="REMOTE")

        with pytest.raises(ActuatorError) as exc_info:
            await actuator.transmit("COOL74START")

        assert exc_info.value.returncode != 0

    def test_statistics(self, actuator):
        stats = actuator.get_statistics()

        assert stats["name"] == "irsend"
        assert stats["device"] == "/run/lirc/lircd"
        assert stats["remote"] == "BRYANT"
        assert stats["transmit_count"] == 0


class TestIrSendMock:
    """Tests for IrSendMock."""

    @pytest.mark.asyncio
    async def test_records_modes(self):
        mock = IrSendMock()

        await mock.transmit("COOL74START")
        await mock.transmit("COOL74STOP")

        assert mock.sent == ["COOL74START", "COOL74STOP"]
        assert mock.last_mode == "COOL74STOP"

    @pytest.mark.asyncio
    async def test_fail_next(self):
        mock = IrSendMock()
        mock.fail_next = True

        with pytest.raises(ActuatorError):
            await mock.transmit("COOL74START")

        await mock.transmit("COOL74START")
        assert mock.sent == ["COOL74START"]
        assert mock.error_count == 1

    @pytest.mark.asyncio
    async def test_reset(self):
        mock = IrSendMock()
        await mock.transmit("HEAT72START")

        mock.reset()

        assert mock.sent == []
        assert mock.get_statistics()["transmit_count"] == 0
