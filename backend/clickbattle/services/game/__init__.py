"""Game domain services: catalog, stat aggregation and the game engine.

This package contains pure(ish) domain logic that should be imported by
HTTP routes and socket handlers, keeping transport concerns separated
from core game mechanics.
"""

from .engine import GameService
from .results import ErrorCode, Result

__all__ = ['GameService', 'ErrorCode', 'Result']
