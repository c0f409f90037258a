"""Contains the GameSessions class which holds the authoritative game states"""

import logging
import random
import string
from datetime import timedelta

import redis.asyncio as redis_sync
import redis.asyncio.client as redis_async_client

from data_types import SessionId
from exceptions import SessionNotFound
from tic_tac_toe import CellIndex, GameState, snapshot

from .utils import pipeline_watch

logger = logging.getLogger(__name__)

KEY_PREFIX = "tictactoe:session:"


def session_key(session_id: SessionId) -> str:
    """Returns the db key a session is stored under"""

    return f"{KEY_PREFIX}{session_id}"


class GameSessions:
    """API wrapper for db which holds the game state of every session.

    All data in the db is in the key:value form:
        tictactoe:session:<SessionId>: snapshot json

    This is the only place game states of hosted sessions are changed. Moves
    are checked against the stored state inside a watched transaction so two
    moves on the same session can never both be applied to the same turn.

    Every write resets the expiry of the session so sessions without a move for
    the expire time are dropped by redis.
    """

    def __init__(self, pool: redis_sync.Redis, expire_time: timedelta) -> None:
        self.pool = pool
        self.expire_time = expire_time

    @staticmethod
    def __create_session_id() -> SessionId:
        """Returns a random session id"""

        return "".join(random.choices(string.ascii_letters + string.digits, k=16))

    async def create(self) -> SessionId:
        """Stores a fresh game under a new session id.

        Returns:
            SessionId: Id of the new session.
        """

        new_state = snapshot.dumps(GameState.new())

        # Only sets the key if it is unused so an id collision can't clobber
        # another session
        while True:
            session_id = GameSessions.__create_session_id()
            if await self.pool.set(
                session_key(session_id), new_state, ex=self.expire_time, nx=True
            ):
                break

        logger.info("Created session %s", session_id)
        return session_id

    async def get(self, session_id: SessionId) -> GameState:
        """Gets the game state of a session.

        Args:
            session_id (SessionId): Id of session to get the state of.

        Raises:
            SessionNotFound: Raised if session_id is not found in db.

        Returns:
            GameState: Copy of the stored game state.
        """

        if (stored := await self.pool.get(session_key(session_id))) is not None:
            return snapshot.loads(stored)
        raise SessionNotFound(session_id)

    @pipeline_watch("session_id", session_key, SessionNotFound)
    async def apply_move(
        self,
        pipe: redis_async_client.Pipeline,
        session_id: SessionId,
        index: CellIndex,
    ) -> GameState:
        """Plays the move of whoever's turn it is in a session.

        Args:
            session_id (SessionId): Id of session to play the move in.
            index (CellIndex): Position to mark.

        Raises:
            SessionNotFound: Raised if session_id is not found in db.
            CellOccupiedError: Raised if the position is already marked.
                Nothing is written.
            GameAlreadyOverError: Raised if the game has ended. Nothing is
                written.

        Returns:
            GameState: Game state after the move.
        """

        key = session_key(session_id)
        stored = await pipe.get(key)
        # The key can expire between the existence check and this read
        if stored is None:
            raise SessionNotFound(session_id)
        game_state = snapshot.loads(stored)

        # Rule violations raise here before the transaction starts
        game_state.apply_move(index)

        pipe.multi()
        pipe.set(key, snapshot.dumps(game_state), ex=self.expire_time)
        await pipe.execute()

        logger.info(
            "Session %s: move at %s accepted, outcome is %s",
            session_id,
            index.name,
            game_state.outcome,
        )
        return game_state

    @pipeline_watch("session_id", session_key, SessionNotFound)
    async def reset(
        self, pipe: redis_async_client.Pipeline, session_id: SessionId
    ) -> GameState:
        """Replaces the game in a session with a fresh one.

        Raises:
            SessionNotFound: Raised if session_id is not found in db.
        """

        game_state = GameState.new()

        pipe.multi()
        pipe.set(session_key(session_id), snapshot.dumps(game_state), ex=self.expire_time)
        await pipe.execute()

        logger.info("Session %s reset", session_id)
        return game_state

    async def delete(self, session_id: SessionId) -> None:
        """Deletes a session from db.

        Won't do anything if session_id is not found in db.
        """

        if not await self.pool.delete(session_key(session_id)):
            logger.debug("Session %s was already gone", session_id)
