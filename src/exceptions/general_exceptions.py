"""Exceptions raised while hosting or syncing game sessions"""

from data_types import SessionId


class SessionNotFound(Exception):
    """Raised when a session id is not known to the authority.

    Attributes:
        session_id: session id that was not found.
    """

    def __init__(self, session_id: SessionId, *args: object) -> None:
        """Initializes the exception with the session id.

        Args:
            session_id (SessionId): Id of the session that was not found.
        """

        self.session_id = session_id
        super().__init__(*args)

    def __str__(self) -> str:
        return f"Session with id {self.session_id} not found"


class TransportError(Exception):
    """Raised when a request to the authority could not be completed"""

    def __init__(self, reason: str, *args: object) -> None:
        self.reason = reason
        super().__init__(*args)

    def __str__(self) -> str:
        return f"Could not reach the game server: {self.reason}"


class MalformedSnapshotError(Exception):
    """Raised when a snapshot payload can not be turned back into a game state"""

    def __init__(self, reason: str, *args: object) -> None:
        self.reason = reason
        super().__init__(*args)

    def __str__(self) -> str:
        return f"Malformed snapshot: {self.reason}"
