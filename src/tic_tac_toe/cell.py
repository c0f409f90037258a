"""Contains the Cell and CellIndex types that make up a board"""

from enum import Enum, IntEnum

from exceptions import OutOfRangeIndexError


class Cell(Enum):
    """Mark held by one board position.

    X always moves first.
    """

    EMPTY = ""
    X = "X"
    O = "O"

    @property
    def glyph(self) -> str:
        """Character a renderer should draw for this cell"""

        match self:
            case Cell.EMPTY:
                return " "
            case Cell.X:
                return "X"
            case Cell.O:
                return "O"

    @property
    def token(self) -> str:
        """Value used for this cell in snapshots"""

        return self.value

    def opponent(self) -> "Cell":
        """Returns the other player's mark.

        Raises:
            ValueError: Raised if called on an empty cell.
        """

        match self:
            case Cell.X:
                return Cell.O
            case Cell.O:
                return Cell.X
            case Cell.EMPTY:
                raise ValueError("An empty cell has no opponent")


class CellIndex(IntEnum):
    """The 9 board positions in row-major order"""

    TOP_LEFT = 0
    TOP_MIDDLE = 1
    TOP_RIGHT = 2
    MIDDLE_LEFT = 3
    CENTER = 4
    MIDDLE_RIGHT = 5
    BOTTOM_LEFT = 6
    BOTTOM_MIDDLE = 7
    BOTTOM_RIGHT = 8

    @property
    def row(self) -> int:
        return self.value // 3

    @property
    def column(self) -> int:
        return self.value % 3

    @property
    def offset(self) -> int:
        return self.value

    @staticmethod
    def from_offset(offset: int) -> "CellIndex":
        """Converts a linear offset into a board position.

        Args:
            offset (int): Offset between 0 and 8.

        Raises:
            OutOfRangeIndexError: Raised if offset is not an int in [0, 8].
                Offsets are never clamped or wrapped.

        Returns:
            CellIndex: Position at that offset.
        """

        # bool is an int subclass but True is not a position
        if isinstance(offset, bool) or not isinstance(offset, int):
            raise OutOfRangeIndexError(offset)
        if not 0 <= offset <= 8:
            raise OutOfRangeIndexError(offset)
        return CellIndex(offset)

    @staticmethod
    def from_row_column(row: int, column: int) -> "CellIndex":
        """Converts a (row, column) pair into a board position.

        Raises:
            OutOfRangeIndexError: Raised if either coordinate is outside 0-2.
        """

        if not (0 <= row <= 2 and 0 <= column <= 2):
            raise OutOfRangeIndexError((row, column))
        return CellIndex.from_offset(row * 3 + column)

    @staticmethod
    def from_key(key: str) -> "CellIndex":
        """Converts a number key "1" to "9" into a board position.

        Key 1 is the top left cell and key 9 the bottom right one.

        Raises:
            OutOfRangeIndexError: Raised if key is not one of "1" to "9".
        """

        if len(key) != 1 or key not in "123456789":
            raise OutOfRangeIndexError(key)
        return CellIndex.from_offset(int(key) - 1)
