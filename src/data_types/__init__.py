"""Contains data types used throughout program"""

from enum import Enum

# Type aliases
SessionId = str


class RejectionReason(str, Enum):
    """Reasons the authority gives for refusing a request.

    Sent in the "reason" field of error responses so clients can raise the
    matching exception again on their side.
    """

    CELL_OCCUPIED = "cell_occupied"
    GAME_ALREADY_OVER = "game_already_over"
    SESSION_NOT_FOUND = "session_not_found"
    INVALID_REQUEST = "invalid_request"
