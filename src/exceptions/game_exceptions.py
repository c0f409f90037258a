"""Exceptions raised by the board and game state when a move breaks the rules"""

from typing import Any


class CellOccupiedError(Exception):
    """Raised when a move targets a cell that already holds a mark.

    Attributes:
        index: position of the occupied cell.
    """

    def __init__(self, index: Any, *args: object) -> None:
        """Initializes the exception with the occupied position.

        Args:
            index (CellIndex): Position that was already marked.
        """

        self.index = index
        super().__init__(*args)

    def __str__(self) -> str:
        return f"Cell {getattr(self.index, 'name', self.index)} is already occupied"


class GameAlreadyOverError(Exception):
    """Raised when a move is attempted after the game has been won or drawn.

    Attributes:
        outcome: terminal outcome of the game.
    """

    def __init__(self, outcome: Any, *args: object) -> None:
        self.outcome = outcome
        super().__init__(*args)

    def __str__(self) -> str:
        return f"Game is already over ({self.outcome})"


class OutOfRangeIndexError(ValueError):
    """Raised when a linear offset does not name one of the 9 board positions.

    Validated input sources never produce one of these, so seeing it means the
    caller broke its contract.

    Attributes:
        offset: offending offset.
    """

    def __init__(self, offset: Any, *args: object) -> None:
        self.offset = offset
        super().__init__(*args)

    def __str__(self) -> str:
        return f"Offset {self.offset!r} is outside the board range 0-8"
