"""
Wit Models - Persisted data shapes
"""

from wit.models.state import State

__all__ = [
    "State",
]
