"""
API Routes Package
"""
from wit.api.routes import control

__all__ = [
    "control",
]
