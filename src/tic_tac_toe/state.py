"""Contains the GameState class which runs the rules of a game"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple

from exceptions import GameAlreadyOverError

from .board import Board
from .cell import Cell, CellIndex

logger = logging.getLogger(__name__)


class OutcomeKind(Enum):
    """Tag of an Outcome"""

    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAW = "draw"


@dataclass(frozen=True)
class Outcome:
    """Result of a game so far.

    Attributes:
        kind (OutcomeKind): Whether the game is in progress, won, or drawn.
        winner (Optional[Cell]): Winning mark. Only set when kind is WON.
    """

    kind: OutcomeKind
    winner: Optional[Cell] = None

    def __post_init__(self) -> None:
        if self.kind is OutcomeKind.WON:
            if self.winner not in (Cell.X, Cell.O):
                raise ValueError("A won outcome needs X or O as the winner")
        elif self.winner is not None:
            raise ValueError(f"A {self.kind.value} outcome can not have a winner")

    @staticmethod
    def in_progress() -> "Outcome":
        return Outcome(OutcomeKind.IN_PROGRESS)

    @staticmethod
    def won(mark: Cell) -> "Outcome":
        return Outcome(OutcomeKind.WON, mark)

    @staticmethod
    def draw() -> "Outcome":
        return Outcome(OutcomeKind.DRAW)

    @property
    def is_terminal(self) -> bool:
        return self.kind is not OutcomeKind.IN_PROGRESS

    def __str__(self) -> str:
        match self.kind:
            case OutcomeKind.IN_PROGRESS:
                return "in progress"
            case OutcomeKind.WON:
                return f"won by {self.winner.value}"
            case OutcomeKind.DRAW:
                return "draw"


class GameState:
    """Board, whose turn it is, and the outcome of one game.

    All changes go through apply_move and reset so the board, active mark and
    outcome can never disagree with each other. X always moves first.
    """

    def __init__(
        self,
        board: Optional[Board] = None,
        active_mark: Cell = Cell.X,
        outcome: Optional[Outcome] = None,
    ) -> None:
        if active_mark not in (Cell.X, Cell.O):
            raise ValueError("The active mark must be X or O")

        self.__board = board if board is not None else Board()
        self.__active_mark = active_mark
        self.__outcome = outcome if outcome is not None else Outcome.in_progress()

    @classmethod
    def new(cls) -> "GameState":
        """Returns a fresh game with an empty board and X to move"""

        return cls()

    @property
    def board(self) -> Board:
        """A copy of the board. Changing it does not change the game."""

        return self.__board.copy()

    @property
    def active_mark(self) -> Cell:
        return self.__active_mark

    @property
    def outcome(self) -> Outcome:
        return self.__outcome

    @property
    def is_over(self) -> bool:
        return self.__outcome.is_terminal

    @property
    def move_count(self) -> int:
        return self.__board.count(Cell.X) + self.__board.count(Cell.O)

    def iter_positions(self) -> Iterator[Tuple[CellIndex, Cell]]:
        return self.__board.iter_positions()

    def apply_move(self, index: CellIndex) -> Outcome:
        """Places the active player's mark and moves the game forward.

        Args:
            index (CellIndex): Position to mark.

        Raises:
            GameAlreadyOverError: Raised if the game was already won or drawn.
            CellOccupiedError: Raised if the position already holds a mark.
                The turn does not change.

        Returns:
            Outcome: Outcome after the move.
        """

        if self.__outcome.is_terminal:
            raise GameAlreadyOverError(self.__outcome)

        # Raises CellOccupiedError before anything else changes
        self.__board.set_cell(index, self.__active_mark)

        if (winner := self.__board.winning_mark()) is not None:
            self.__outcome = Outcome.won(winner)
        elif self.__board.is_full():
            self.__outcome = Outcome.draw()
        else:
            self.__active_mark = self.__active_mark.opponent()

        logger.debug(
            "Placed %s at %s, outcome is %s", self.__board.get(index).value, index.name, self.__outcome
        )
        return self.__outcome

    def reset(self) -> None:
        """Starts a new game no matter what state this one is in"""

        self.__board = Board()
        self.__active_mark = Cell.X
        self.__outcome = Outcome.in_progress()

    def is_consistent(self) -> bool:
        """Checks the mark counts could come from a legal game.

        X moves first so there are either as many X marks as O marks or one
        more X.
        """

        return self.__board.count(Cell.X) - self.__board.count(Cell.O) in (0, 1)

    def copy(self) -> "GameState":
        return GameState(self.__board.copy(), self.__active_mark, self.__outcome)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameState):
            return NotImplemented
        return (
            self.__board == other.__board
            and self.__active_mark == other.__active_mark
            and self.__outcome == other.__outcome
        )

    def __repr__(self) -> str:
        return (
            f"GameState(board={self.__board!r}, active_mark={self.__active_mark.name}, "
            f"outcome={self.__outcome})"
        )
