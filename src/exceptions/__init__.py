"""Exports all exceptions to make them easier to import"""

from exceptions.game_exceptions import (
    CellOccupiedError,
    GameAlreadyOverError,
    OutOfRangeIndexError,
)
from exceptions.general_exceptions import (
    MalformedSnapshotError,
    SessionNotFound,
    TransportError,
)
