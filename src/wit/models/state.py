"""
State Model - The single persisted controller record

Serialised as a JSON object with capitalised keys (``OpMode``,
``Schedule``, ``Manual``, ``Override``, ``Running``) so existing
``state.json`` files keep loading.
"""
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wit.errors import MalformedStateError


class State(BaseModel):
    """
    State - Current controller state

    ``running`` tracks the last successful actuation, not the physical
    unit. It drifts if the transmitter fails silently; ``calibrate``
    exists to resync it.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    op_mode: str = Field(default="", alias="OpMode")
    schedule: str = Field(default="", alias="Schedule")
    manual: bool = Field(default=False, alias="Manual")
    override: bool = Field(default=False, alias="Override")
    running: bool = Field(default=False, alias="Running")

    def to_json(self) -> bytes:
        """Serialise using the persisted key names"""
        return self.model_dump_json(by_alias=True).encode("utf-8")

    @classmethod
    def from_json(cls, data: bytes) -> "State":
        """
        Parse a persisted record

        Raises:
            MalformedStateError: If data is not a JSON object of state fields
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise MalformedStateError(f"invalid state record: {e}") from e
