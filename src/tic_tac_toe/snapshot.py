"""Converts game states to and from the snapshot form sent over the wire.

A snapshot carries exactly the 9 cell tokens in row-major order, the active
mark, the outcome tag, and the winner for won games:

    {
        "cells": ["X", "", "O", "", "", "", "", "", ""],
        "active_mark": "X",
        "outcome": "in_progress",
        "winner": null
    }
"""

import json
from dataclasses import asdict, dataclass
from typing import Any, List, Mapping, Optional

from exceptions import MalformedSnapshotError

from .board import BOARD_SIZE, Board
from .cell import Cell
from .state import GameState, Outcome, OutcomeKind

SNAPSHOT_FIELDS = ("cells", "active_mark", "outcome", "winner")


@dataclass
class Snapshot:
    """Plain data copy of a game state.

    Attributes:
        cells (List[str]): 9 cell tokens ("", "X" or "O") in row-major order.
        active_mark (str): "X" or "O".
        outcome (str): "in_progress", "won" or "draw".
        winner (Optional[str]): "X" or "O" for won games, otherwise None.
    """

    cells: List[str]
    active_mark: str
    outcome: str
    winner: Optional[str] = None

    @staticmethod
    def from_state(state: GameState) -> "Snapshot":
        winner = state.outcome.winner
        return Snapshot(
            cells=[cell.token for _, cell in state.iter_positions()],
            active_mark=state.active_mark.token,
            outcome=state.outcome.kind.value,
            winner=winner.token if winner is not None else None,
        )

    @staticmethod
    def from_dict(data: Any) -> "Snapshot":
        """Builds a snapshot from decoded json.

        Raises:
            MalformedSnapshotError: Raised if data is not a mapping with
                exactly the snapshot fields.
        """

        if not isinstance(data, Mapping):
            raise MalformedSnapshotError("snapshot must be an object")
        if missing := [name for name in SNAPSHOT_FIELDS if name not in data]:
            raise MalformedSnapshotError(f"missing fields {missing}")
        if extra := [name for name in data if name not in SNAPSHOT_FIELDS]:
            raise MalformedSnapshotError(f"unknown fields {extra}")
        if not isinstance(data["cells"], list):
            raise MalformedSnapshotError("cells must be a list")

        return Snapshot(
            cells=list(data["cells"]),
            active_mark=data["active_mark"],
            outcome=data["outcome"],
            winner=data["winner"],
        )

    def to_dict(self) -> dict:
        return asdict(self)

    def to_state(self) -> GameState:
        """Rebuilds the game state this snapshot describes.

        Raises:
            MalformedSnapshotError: Raised if any field holds an unknown value
                or the fields contradict each other.
        """

        if len(self.cells) != BOARD_SIZE:
            raise MalformedSnapshotError(f"expected {BOARD_SIZE} cells, got {len(self.cells)}")

        cells = [_parse_cell(token, "cells") for token in self.cells]
        active_mark = _parse_cell(self.active_mark, "active_mark")
        if active_mark is Cell.EMPTY:
            raise MalformedSnapshotError("active_mark can not be empty")

        try:
            kind = OutcomeKind(self.outcome)
        except ValueError:
            raise MalformedSnapshotError(f"unknown outcome {self.outcome!r}")

        winner = None if self.winner is None else _parse_cell(self.winner, "winner")
        try:
            outcome = Outcome(kind, winner)
        except ValueError as e:
            raise MalformedSnapshotError(str(e))

        board = Board.from_cells(cells)
        state = GameState(board, active_mark, outcome)
        if not state.is_consistent():
            raise MalformedSnapshotError("mark counts can not come from a legal game")

        match kind:
            case OutcomeKind.WON:
                if board.winning_mark() is not winner:
                    raise MalformedSnapshotError("winner does not match the board")
            case OutcomeKind.DRAW:
                if board.winning_mark() is not None or not board.is_full():
                    raise MalformedSnapshotError("draw outcome does not match the board")
            case OutcomeKind.IN_PROGRESS:
                if board.winning_mark() is not None or board.is_full():
                    raise MalformedSnapshotError("finished board marked as in progress")
                expected = Cell.X if board.count(Cell.X) == board.count(Cell.O) else Cell.O
                if active_mark is not expected:
                    raise MalformedSnapshotError("active_mark does not match the board")

        return state


def _parse_cell(token: Any, field_name: str) -> Cell:
    if not isinstance(token, str):
        raise MalformedSnapshotError(f"{field_name} holds a non string value {token!r}")
    try:
        return Cell(token)
    except ValueError:
        raise MalformedSnapshotError(f"{field_name} holds an unknown mark {token!r}")


def dumps(state: GameState) -> str:
    """Serializes a game state to snapshot json"""

    return json.dumps(Snapshot.from_state(state).to_dict())


def loads(payload: str | bytes) -> GameState:
    """Deserializes snapshot json into a new game state.

    Raises:
        MalformedSnapshotError: Raised if payload is not valid snapshot json.
    """

    try:
        data = json.loads(payload)
    except (TypeError, ValueError) as e:
        raise MalformedSnapshotError(f"invalid json ({e})")
    return Snapshot.from_dict(data).to_state()
