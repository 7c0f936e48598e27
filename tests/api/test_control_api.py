"""
API tests for the control endpoints

Runs the FastAPI app over httpx against a memory store and the mock
transmitter.
"""
import pytest

from wit.api import set_daemon_instance
from wit.models.state import State


class TestSystemEndpoints:
    """Tests for /health and /status."""

    @pytest.mark.asyncio
    async def test_health(self, async_client):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_status(self, async_client):
        response = await async_client.get("/status")

        data = response.json()
        assert response.status_code == 200
        assert data["state_store"]["name"] == "memory"
        assert data["actuator"]["name"] == "irsend-mock"
        assert "controller" in data
        assert "scheduler" in data


class TestDisplay:
    """Tests for GET /wit/..."""

    @pytest.mark.asyncio
    async def test_display_initial_state(self, async_client):
        response = await async_client.get("/wit/display")

        data = response.json()
        assert response.status_code == 200
        assert data["running"] is False
        assert data["override"] is False
        assert data["system"] == ""
        assert data["operation_modes"] == ["COOL74", "HEAT72"]
        assert data["has_return"] is True
        assert data["return_to"] == "http://home.local/"

    @pytest.mark.asyncio
    async def test_get_does_not_act(self, async_client, mock_actuator, memory_store):
        response = await async_client.get("/wit/on")

        assert response.status_code == 200
        assert mock_actuator.sent == []
        assert memory_store.writes == 0

    @pytest.mark.asyncio
    async def test_unreadable_state(self, async_client, memory_store):
        memory_store.data = b"{"

        response = await async_client.get("/wit/display")

        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_no_daemon(self, async_client):
        set_daemon_instance(None)

        response = await async_client.get("/wit/display")

        assert response.status_code == 503


class TestActions:
    """Tests for POST /wit/{action}."""

    @pytest.mark.asyncio
    async def test_on_redirects_to_display(self, async_client, memory_store, mock_actuator):
        await memory_store.set(State(op_mode="COOL74"))

        response = await async_client.post("/wit/on")

        assert response.status_code == 303
        assert response.headers["location"] == "/wit/display"
        assert mock_actuator.sent == ["COOL74START"]
        state = await memory_store.get()
        assert state.running is True
        assert state.override is True

    @pytest.mark.asyncio
    async def test_togglelock(self, async_client, memory_store):
        response = await async_client.post("/wit/togglelock")

        assert response.status_code == 303
        assert (await memory_store.get()).override is True

    @pytest.mark.asyncio
    async def test_schedule_form(self, async_client, memory_store):
        response = await async_client.post(
            "/wit/schedule",
            data={"opmode": "HEAT72", "manual": "on", "sched": "0 8 weekday on\r\n0 18 weekday off"},
        )

        assert response.status_code == 303
        state = await memory_store.get()
        assert state.op_mode == "HEAT72"
        assert state.manual is True
        assert state.schedule.splitlines() == ["0 8 weekday on", "0 18 weekday off"]

    @pytest.mark.asyncio
    async def test_schedule_without_manual_flag(self, async_client, memory_store):
        await memory_store.set(State(op_mode="COOL74", manual=True))

        response = await async_client.post(
            "/wit/schedule", data={"opmode": "noop", "sched": "0 9 weekend on"}
        )

        assert response.status_code == 303
        state = await memory_store.get()
        assert state.op_mode == "COOL74"
        assert state.manual is False
        assert state.schedule == "0 9 weekend on"

    @pytest.mark.asyncio
    async def test_invalid_schedule(self, async_client, memory_store):
        response = await async_client.post(
            "/wit/schedule", data={"sched": "70 8 weekday on"}
        )

        assert response.status_code == 400
        assert "minute" in response.json()["detail"]
        assert memory_store.writes == 0

    @pytest.mark.asyncio
    async def test_actuator_failure(self, async_client, memory_store, mock_actuator):
        mock_actuator.fail_next = True

        response = await async_client.post("/wit/on")

        assert response.status_code == 502
        assert (await memory_store.get()).running is False

    @pytest.mark.asyncio
    async def test_unknown_action_ignored(self, async_client, memory_store):
        response = await async_client.post("/wit/explode")

        assert response.status_code == 303
        assert memory_store.writes == 0

    @pytest.mark.asyncio
    async def test_post_display_does_nothing(self, async_client, memory_store):
        response = await async_client.post("/wit/display")

        assert response.status_code == 303
        assert memory_store.writes == 0
