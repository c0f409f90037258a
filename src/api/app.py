"""FastAPI app that hosts game sessions and acts as the authority for them"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config import Settings, load_settings
from data_types import RejectionReason, SessionId
from data_wrappers import GameSessions
from data_wrappers.utils import create_pool
from exceptions import CellOccupiedError, GameAlreadyOverError, SessionNotFound
from tic_tac_toe import CellIndex, Outcome

from .schemas import CreatedSession, MoveRequest, Rejection, SnapshotModel

logger = logging.getLogger(__name__)


def _rejection(
    status_code: int,
    reason: RejectionReason,
    detail: str,
    outcome: Optional[Outcome] = None,
) -> JSONResponse:
    rejection = Rejection(reason=reason, detail=detail)
    if outcome is not None:
        rejection.outcome = outcome.kind.value
        rejection.winner = outcome.winner.token if outcome.winner is not None else None
    return JSONResponse(
        status_code=status_code,
        content=rejection.model_dump(mode="json"),
    )


def _get_sessions(request: Request) -> GameSessions:
    return request.app.state.sessions


def create_app(
    settings: Optional[Settings] = None, sessions: Optional[GameSessions] = None
) -> FastAPI:
    """Builds the session api.

    Args:
        settings (Settings, optional): Settings to use. Loaded from the
            environment if not given.
        sessions (GameSessions, optional): Session store to use. If not given
            one is created on startup from settings.redis_url and closed on
            shutdown.
    """

    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if sessions is not None:
            app.state.sessions = sessions
            yield
            return

        pool = create_pool(settings.redis_url)
        app.state.sessions = GameSessions(pool, settings.session_expiry)
        try:
            yield
        finally:
            await pool.aclose()

    app = FastAPI(
        title="Tic Tac Toe Sync",
        description="Hosts tic tac toe sessions that clients fetch and play moves on",
        lifespan=lifespan,
    )
    if sessions is not None:
        # Set right away so the app works without running the lifespan
        app.state.sessions = sessions

    @app.exception_handler(SessionNotFound)
    async def session_not_found(_request: Request, exc: SessionNotFound) -> JSONResponse:
        return _rejection(status.HTTP_404_NOT_FOUND, RejectionReason.SESSION_NOT_FOUND, str(exc))

    @app.exception_handler(CellOccupiedError)
    async def cell_occupied(_request: Request, exc: CellOccupiedError) -> JSONResponse:
        return _rejection(status.HTTP_409_CONFLICT, RejectionReason.CELL_OCCUPIED, str(exc))

    @app.exception_handler(GameAlreadyOverError)
    async def game_already_over(_request: Request, exc: GameAlreadyOverError) -> JSONResponse:
        outcome = exc.outcome if isinstance(exc.outcome, Outcome) else None
        return _rejection(
            status.HTTP_409_CONFLICT, RejectionReason.GAME_ALREADY_OVER, str(exc), outcome
        )

    @app.exception_handler(RequestValidationError)
    async def invalid_request(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return _rejection(
            422, RejectionReason.INVALID_REQUEST, str(exc.errors())
        )

    @app.post("/sessions", status_code=status.HTTP_201_CREATED)
    async def create_session(request: Request) -> CreatedSession:
        game_sessions = _get_sessions(request)
        session_id = await game_sessions.create()
        game_state = await game_sessions.get(session_id)
        return CreatedSession(session_id=session_id, snapshot=SnapshotModel.from_state(game_state))

    @app.get("/sessions/{session_id}")
    async def get_session(session_id: SessionId, request: Request) -> SnapshotModel:
        game_state = await _get_sessions(request).get(session_id)
        return SnapshotModel.from_state(game_state)

    @app.put("/sessions/{session_id}")
    async def play_move(
        session_id: SessionId, move: MoveRequest, request: Request
    ) -> SnapshotModel:
        index = CellIndex.from_offset(move.cell_index)
        try:
            game_state = await _get_sessions(request).apply_move(session_id, index)
        except (CellOccupiedError, GameAlreadyOverError) as e:
            logger.info("Session %s: rejected move at %s (%s)", session_id, index.name, e)
            raise
        return SnapshotModel.from_state(game_state)

    @app.post("/sessions/{session_id}/reset")
    async def reset_session(session_id: SessionId, request: Request) -> SnapshotModel:
        game_state = await _get_sessions(request).reset(session_id)
        return SnapshotModel.from_state(game_state)

    @app.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_session(session_id: SessionId, request: Request) -> Response:
        await _get_sessions(request).delete(session_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app
