"""Contains the Board class which holds the 9 cells of a game"""

from typing import Iterable, Iterator, List, Optional, Tuple

from exceptions import CellOccupiedError

from .cell import Cell, CellIndex

# Every line that wins the game. The order here is the tie-break used by
# Board.winning_mark: rows top to bottom, columns left to right, then the
# diagonal and anti-diagonal.
LINES: Tuple[Tuple[CellIndex, CellIndex, CellIndex], ...] = (
    (CellIndex.TOP_LEFT, CellIndex.TOP_MIDDLE, CellIndex.TOP_RIGHT),
    (CellIndex.MIDDLE_LEFT, CellIndex.CENTER, CellIndex.MIDDLE_RIGHT),
    (CellIndex.BOTTOM_LEFT, CellIndex.BOTTOM_MIDDLE, CellIndex.BOTTOM_RIGHT),
    (CellIndex.TOP_LEFT, CellIndex.MIDDLE_LEFT, CellIndex.BOTTOM_LEFT),
    (CellIndex.TOP_MIDDLE, CellIndex.CENTER, CellIndex.BOTTOM_MIDDLE),
    (CellIndex.TOP_RIGHT, CellIndex.MIDDLE_RIGHT, CellIndex.BOTTOM_RIGHT),
    (CellIndex.TOP_LEFT, CellIndex.CENTER, CellIndex.BOTTOM_RIGHT),
    (CellIndex.TOP_RIGHT, CellIndex.CENTER, CellIndex.BOTTOM_LEFT),
)

BOARD_SIZE = 9


class Board:
    """Fixed size container of the 9 cells of a tic tac toe board.

    The board always holds exactly 9 cells. Cells are only ever written while
    empty, a marked cell can not be overwritten.
    """

    __slots__ = ("__cells",)

    def __init__(self) -> None:
        self.__cells: List[Cell] = [Cell.EMPTY] * BOARD_SIZE

    @classmethod
    def from_cells(cls, cells: Iterable[Cell]) -> "Board":
        """Builds a board from 9 cells given in row-major order.

        Raises:
            ValueError: Raised if there are not exactly 9 cells or one of them
                is not a Cell.
        """

        cell_list = list(cells)
        if len(cell_list) != BOARD_SIZE:
            raise ValueError(f"A board needs {BOARD_SIZE} cells, got {len(cell_list)}")
        if not all(isinstance(cell, Cell) for cell in cell_list):
            raise ValueError("Board cells must all be Cell values")

        board = cls()
        board.__cells[:] = cell_list
        return board

    @property
    def cells(self) -> Tuple[Cell, ...]:
        """Read only view of the cells in row-major order"""

        return tuple(self.__cells)

    def get(self, index: CellIndex) -> Cell:
        return self.__cells[index]

    def set_cell(self, index: CellIndex, value: Cell) -> None:
        """Writes a mark into an empty cell.

        Args:
            index (CellIndex): Position to write to.
            value (Cell): Mark to write.

        Raises:
            CellOccupiedError: Raised if the cell already holds a mark. The
                board is left unchanged.
        """

        if self.__cells[index] is not Cell.EMPTY:
            raise CellOccupiedError(index)
        self.__cells[index] = value

    def iter_positions(self) -> Iterator[Tuple[CellIndex, Cell]]:
        """Yields every (position, cell) pair in row-major order.

        A new iterator is returned each call so the traversal can be restarted.
        """

        return ((index, self.__cells[index]) for index in CellIndex)

    def winning_mark(self) -> Optional[Cell]:
        """Returns the mark of the first complete line or None if there is none.

        If more than one line is complete the first one in LINES order is
        reported. That can't happen in a legal game but the result is still
        deterministic.
        """

        for first, second, third in LINES:
            mark = self.__cells[first]
            if mark is not Cell.EMPTY and mark == self.__cells[second] == self.__cells[third]:
                return mark
        return None

    def is_full(self) -> bool:
        return Cell.EMPTY not in self.__cells

    def count(self, value: Cell) -> int:
        return self.__cells.count(value)

    def copy(self) -> "Board":
        return Board.from_cells(self.__cells)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.__cells == other.__cells

    def __repr__(self) -> str:
        rows = [
            "".join(cell.glyph for cell in self.__cells[start : start + 3])
            for start in range(0, BOARD_SIZE, 3)
        ]
        return f"Board({'|'.join(rows)!r})"
