"""Contains the RemoteGame class which plays a game hosted by the server"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from config import Settings
from data_types import RejectionReason, SessionId
from exceptions import (
    CellOccupiedError,
    GameAlreadyOverError,
    MalformedSnapshotError,
    SessionNotFound,
    TransportError,
)
from tic_tac_toe import Cell, CellIndex, GameState, Outcome, OutcomeKind, Snapshot

from .utils import status_line

logger = logging.getLogger(__name__)


class RemoteGame:
    """Client side copy of a game session owned by the server.

    The server is the only one that decides if a move is legal. This class
    never changes its copy of the game on its own, it only replaces it with
    snapshots the server sends back. When a request fails the last snapshot is
    kept so there is always something to render.

    Only one move proposal is sent at a time. A response to a request sent
    before one whose snapshot is already held is dropped, so a slow poll can
    not undo a confirmed move. Once closed nothing changes the snapshot
    anymore, even requests that were still in flight.

    Attributes:
        session_id (Optional[SessionId]): Id of the session being played.
        snapshot (Optional[GameState]): Last game state received from the
            server. None until the first successful request.
        poll_interval (float): Seconds between fetches while polling.
    """

    def __init__(
        self,
        base_url: str,
        session_id: Optional[SessionId] = None,
        poll_interval: float = 1.0,
        timeout: float = 5.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.session_id = session_id
        self.snapshot: Optional[GameState] = None
        self.poll_interval = poll_interval

        self.__owns_http = http_client is None
        self.__http = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self.__move_lock = asyncio.Lock()
        self.__poll_task: Optional[asyncio.Task] = None
        self.__closed = False
        # Requests are numbered in send order
        self.__sent_requests = 0
        self.__adopted_request = 0

    @classmethod
    def from_settings(
        cls, settings: Settings, session_id: Optional[SessionId] = None
    ) -> "RemoteGame":
        return cls(
            f"http://{settings.server_host}:{settings.server_port}",
            session_id,
            poll_interval=settings.client_poll_interval,
            timeout=settings.client_timeout,
        )

    async def __aenter__(self) -> "RemoteGame":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self.__closed

    @property
    def status(self) -> str:
        if self.snapshot is None:
            return "Waiting for the server..."
        return status_line(self.snapshot)

    def __session_path(self) -> str:
        if self.session_id is None:
            raise SessionNotFound("<none>")
        return f"/sessions/{self.session_id}"

    async def __request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Sends a request turning every httpx failure into a TransportError"""

        try:
            return await self.__http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__) from e

    def __check_response(
        self, response: httpx.Response, index: Optional[CellIndex] = None
    ) -> None:
        """Raises the exception matching an error response.

        Raises:
            CellOccupiedError: Server rejected the move cause the cell is marked.
            GameAlreadyOverError: Server rejected the move cause the game ended.
            SessionNotFound: Server does not know the session.
            TransportError: Any other unsuccessful response.
        """

        if response.is_success:
            return

        try:
            body = response.json()
            reason = RejectionReason(body["reason"])
        except (ValueError, KeyError, TypeError):
            body, reason = {}, None

        match reason:
            case RejectionReason.CELL_OCCUPIED:
                raise CellOccupiedError(index)
            case RejectionReason.GAME_ALREADY_OVER:
                raise GameAlreadyOverError(RemoteGame.__read_outcome(body))
            case RejectionReason.SESSION_NOT_FOUND:
                raise SessionNotFound(self.session_id)
            case _:
                raise TransportError(f"server answered {response.status_code}")

    @staticmethod
    def __read_outcome(body: dict) -> Any:
        """Outcome sent with a game_already_over rejection.

        Falls back to the rejection detail if the outcome fields are missing
        or invalid.
        """

        try:
            winner = body.get("winner")
            return Outcome(
                OutcomeKind(body["outcome"]), Cell(winner) if winner is not None else None
            )
        except (ValueError, KeyError, TypeError):
            return body.get("detail") or "unknown outcome"

    @staticmethod
    def __read_snapshot(data: Any) -> GameState:
        return Snapshot.from_dict(data).to_state()

    @staticmethod
    def __json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedSnapshotError(f"response is not json ({e})")

    def __next_request(self) -> int:
        self.__sent_requests += 1
        return self.__sent_requests

    def __adopt(self, game_state: GameState, request_number: int) -> bool:
        """Replaces the snapshot unless the response is stale.

        Returns:
            bool: True if the snapshot was replaced.
        """

        if self.__closed:
            logger.debug("Dropped snapshot that arrived after closing")
            return False
        if request_number < self.__adopted_request:
            logger.debug(
                "Dropped snapshot of request %d, request %d was already adopted",
                request_number,
                self.__adopted_request,
            )
            return False
        self.__adopted_request = request_number
        self.snapshot = game_state
        return True

    async def create_session(self) -> GameState:
        """Asks the server for a new session and switches to it.

        Raises:
            TransportError: Raised if the server could not be reached.
            MalformedSnapshotError: Raised if the response is not a snapshot.
        """

        request_number = self.__next_request()
        response = await self.__request("POST", "/sessions")
        self.__check_response(response)

        data = RemoteGame.__json(response)
        if not isinstance(data, dict) or "session_id" not in data:
            raise MalformedSnapshotError("missing session_id")
        game_state = RemoteGame.__read_snapshot(data.get("snapshot"))

        if self.__adopt(game_state, request_number):
            self.session_id = data["session_id"]
        return game_state

    async def fetch_snapshot(self) -> GameState:
        """Fetches the current game state from the server.

        Raises:
            TransportError: Raised if the server could not be reached.
            MalformedSnapshotError: Raised if the response is not a snapshot.
            SessionNotFound: Raised if the server does not know the session.

        Returns:
            GameState: Fetched game state.
        """

        request_number = self.__next_request()
        response = await self.__request("GET", self.__session_path())
        self.__check_response(response)

        game_state = RemoteGame.__read_snapshot(RemoteGame.__json(response))
        self.__adopt(game_state, request_number)
        return game_state

    async def refresh(self) -> bool:
        """Fetches the game state, keeping the last snapshot if that fails.

        Returns:
            bool: True if a new snapshot was received.
        """

        try:
            await self.fetch_snapshot()
        except (TransportError, MalformedSnapshotError, SessionNotFound) as e:
            logger.warning("Could not refresh session %s: %s", self.session_id, e)
            return False
        return True

    async def propose_move(self, index: CellIndex) -> GameState:
        """Asks the server to play a move.

        Waits for any other proposal from this client to finish first.

        Raises:
            CellOccupiedError: Raised if the cell is already marked.
            GameAlreadyOverError: Raised if the game has ended.
            SessionNotFound: Raised if the server does not know the session.
            TransportError: Raised if the server could not be reached.
            MalformedSnapshotError: Raised if the response is not a snapshot.

        Returns:
            GameState: Game state after the move.
        """

        async with self.__move_lock:
            request_number = self.__next_request()
            response = await self.__request(
                "PUT", self.__session_path(), json={"cell_index": index.offset}
            )
            self.__check_response(response, index)

            game_state = RemoteGame.__read_snapshot(RemoteGame.__json(response))
            self.__adopt(game_state, request_number)
            return game_state

    async def handle_input(self, index: CellIndex) -> bool:
        """Proposes a move, ignoring any recoverable failure.

        Returns:
            bool: True if the server accepted the move.
        """

        try:
            await self.propose_move(index)
        except (CellOccupiedError, GameAlreadyOverError) as e:
            logger.info("Move at %s rejected: %s", index.name, e)
            return False
        except (TransportError, MalformedSnapshotError, SessionNotFound) as e:
            logger.warning("Move at %s could not be sent: %s", index.name, e)
            return False
        return True

    async def reset(self) -> GameState:
        """Asks the server to start a new game in this session.

        Raises:
            SessionNotFound: Raised if the server does not know the session.
            TransportError: Raised if the server could not be reached.
            MalformedSnapshotError: Raised if the response is not a snapshot.
        """

        request_number = self.__next_request()
        response = await self.__request("POST", f"{self.__session_path()}/reset")
        self.__check_response(response)

        game_state = RemoteGame.__read_snapshot(RemoteGame.__json(response))
        self.__adopt(game_state, request_number)
        return game_state

    def start_polling(self) -> None:
        """Starts refreshing the snapshot in the background"""

        if self.__closed:
            raise RuntimeError("Can't poll a closed game")
        if self.__poll_task is None or self.__poll_task.done():
            self.__poll_task = asyncio.create_task(self.__poll())

    async def __poll(self) -> None:
        while not self.__closed:
            await self.refresh()
            await asyncio.sleep(self.poll_interval)

    async def close(self) -> None:
        """Stops polling and drops any request still in flight"""

        if self.__closed:
            return
        self.__closed = True

        if self.__poll_task is not None:
            self.__poll_task.cancel()
            try:
                await self.__poll_task
            except asyncio.CancelledError:
                pass
            self.__poll_task = None

        if self.__owns_http:
            await self.__http.aclose()
