"""Request and response bodies of the session api"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from data_types import RejectionReason, SessionId
from tic_tac_toe import GameState, Snapshot


class MoveRequest(BaseModel):
    """Body of a move proposal"""

    cell_index: int = Field(ge=0, le=8, description="Row-major offset of the cell to mark")


class SnapshotModel(BaseModel):
    """Game state as sent to clients"""

    cells: List[Literal["", "X", "O"]] = Field(min_length=9, max_length=9)
    active_mark: Literal["X", "O"]
    outcome: Literal["in_progress", "won", "draw"]
    winner: Optional[Literal["X", "O"]] = None

    @staticmethod
    def from_state(state: GameState) -> "SnapshotModel":
        return SnapshotModel(**Snapshot.from_state(state).to_dict())


class CreatedSession(BaseModel):
    session_id: SessionId
    snapshot: SnapshotModel


class Rejection(BaseModel):
    """Body of every error response.

    outcome and winner are only set for game_already_over rejections so the
    client learns how the game ended even if its own copy is behind.
    """

    reason: RejectionReason
    detail: str
    outcome: Optional[Literal["in_progress", "won", "draw"]] = None
    winner: Optional[Literal["X", "O"]] = None
