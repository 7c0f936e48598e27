"""
API Schemas - Pydantic models for responses
"""
from typing import List
from pydantic import BaseModel, Field


class StateDisplay(BaseModel):
    """What the display page shows"""
    running: bool
    system: str = Field(..., description="Selected operating mode")
    manual: bool
    override: bool
    schedule: str
    time: str = Field(..., description="Local time, ISO 8601 to the second")
    build: str
    operation_modes: List[str]
    has_return: bool
    return_to: str
