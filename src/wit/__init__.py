"""
Wit - IR climate unit controller

Turns a stored schedule and manual overrides into on/off commands for an
IR-controlled heating/cooling unit.
"""

__version__ = "0.1.0"
