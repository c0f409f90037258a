import asyncio
import json

import httpx
import pytest
import pytest_mock

from exceptions import (
    CellOccupiedError,
    GameAlreadyOverError,
    MalformedSnapshotError,
    SessionNotFound,
    TransportError,
)
from game_handling import RemoteGame
from tests.testing_data.data_generation import (
    TOP_ROW_WIN,
    app,
    game_sessions,
    play,
    redis_pool,
)
from tic_tac_toe import Cell, CellIndex, GameState, Outcome, Snapshot

pytestmark = pytest.mark.asyncio

BASE_URL = "http://test"


@pytest.fixture
def remote_game(app):
    """Remote game talking to the app in process"""

    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=BASE_URL)
    return RemoteGame(BASE_URL, http_client=client)


def mock_game(handler, session_id="abc") -> RemoteGame:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return RemoteGame(BASE_URL, session_id, http_client=client)


def snapshot_response(game_state: GameState) -> httpx.Response:
    return httpx.Response(200, json=Snapshot.from_state(game_state).to_dict())


async def test_create_and_fetch(remote_game):
    created = await remote_game.create_session()

    assert remote_game.session_id is not None
    assert created == GameState.new()
    assert await remote_game.fetch_snapshot() == GameState.new()
    assert remote_game.status == "Player X's turn"


async def test_propose_move_adopts_server_snapshot(remote_game):
    await remote_game.create_session()

    game_state = await remote_game.propose_move(CellIndex.CENTER)

    assert game_state.board.get(CellIndex.CENTER) is Cell.X
    assert remote_game.snapshot == game_state


async def test_same_move_twice(remote_game):
    await remote_game.create_session()
    await remote_game.propose_move(CellIndex.CENTER)

    with pytest.raises(CellOccupiedError) as exc_info:
        await remote_game.propose_move(CellIndex.CENTER)

    assert exc_info.value.index is CellIndex.CENTER
    assert remote_game.snapshot.move_count == 1


async def test_game_over_rejection(remote_game):
    await remote_game.create_session()
    for offset in TOP_ROW_WIN:
        assert await remote_game.handle_input(CellIndex.from_offset(offset))

    assert remote_game.snapshot.outcome == Outcome.won(Cell.X)

    with pytest.raises(GameAlreadyOverError):
        await remote_game.propose_move(CellIndex.BOTTOM_LEFT)
    assert not await remote_game.handle_input(CellIndex.BOTTOM_LEFT)


async def test_reset(remote_game):
    await remote_game.create_session()
    await remote_game.propose_move(CellIndex.CENTER)

    assert await remote_game.reset() == GameState.new()
    assert remote_game.snapshot == GameState.new()


async def test_unknown_session(remote_game):
    remote_game.session_id = "unknown"

    with pytest.raises(SessionNotFound):
        await remote_game.fetch_snapshot()
    assert not await remote_game.refresh()


async def test_refresh_keeps_snapshot_on_transport_error():
    known = play([0, 4])
    fail = False

    def handler(request: httpx.Request) -> httpx.Response:
        if fail:
            raise httpx.ConnectError("connection refused", request=request)
        return snapshot_response(known)

    remote_game = mock_game(handler)
    assert await remote_game.refresh()

    fail = True
    with pytest.raises(TransportError):
        await remote_game.fetch_snapshot()
    assert not await remote_game.refresh()

    assert remote_game.snapshot == known


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"cells": []}),
        httpx.Response(200, json={"cells": ["X"] * 9, "active_mark": "O", "outcome": "won", "winner": "X"}),
    ],
)
async def test_refresh_keeps_snapshot_on_malformed_payload(response):
    known = play([0])
    responses = [snapshot_response(known), response]

    remote_game = mock_game(lambda request: responses.pop(0))
    await remote_game.refresh()

    with pytest.raises(MalformedSnapshotError):
        await remote_game.fetch_snapshot()

    assert remote_game.snapshot == known
    assert remote_game.snapshot.outcome == Outcome.in_progress()


async def test_server_error_is_transport_error():
    remote_game = mock_game(lambda request: httpx.Response(500, text="oops"))

    with pytest.raises(TransportError):
        await remote_game.propose_move(CellIndex.CENTER)
    assert not await remote_game.handle_input(CellIndex.CENTER)
    assert remote_game.snapshot is None


async def test_proposals_are_serialized():
    in_flight = 0
    max_in_flight = 0
    game_state = GameState.new()

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, max_in_flight
        in_flight += 1
        max_in_flight = max(max_in_flight, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1

        offset = json.loads(request.content)["cell_index"]
        game_state.apply_move(CellIndex.from_offset(offset))
        return snapshot_response(game_state)

    remote_game = mock_game(handler)

    await asyncio.gather(*[remote_game.propose_move(CellIndex.from_offset(i)) for i in range(3)])

    assert max_in_flight == 1
    assert remote_game.snapshot.move_count == 3


async def test_polling_refreshes_until_closed(mocker: pytest_mock.MockFixture):
    remote_game = mock_game(lambda request: snapshot_response(play([4])))
    remote_game.poll_interval = 0.01
    refresh = mocker.spy(remote_game, "refresh")

    remote_game.start_polling()
    await asyncio.sleep(0.05)
    await remote_game.close()
    calls_at_close = refresh.call_count
    await asyncio.sleep(0.03)

    assert calls_at_close >= 2
    assert refresh.call_count == calls_at_close
    assert remote_game.snapshot == play([4])
    assert remote_game.closed

    with pytest.raises(RuntimeError):
        remote_game.start_polling()


async def test_response_after_close_is_dropped():
    release = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        await release.wait()
        return snapshot_response(play([4]))

    remote_game = mock_game(handler)
    pending = asyncio.create_task(remote_game.propose_move(CellIndex.CENTER))
    await asyncio.sleep(0)

    await remote_game.close()
    release.set()
    await pending

    assert remote_game.snapshot is None


async def test_stale_poll_does_not_undo_confirmed_move():
    release_get = asyncio.Event()
    after_move = play([4])

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            # Answered with the board from before the move, but only later
            await release_get.wait()
            return snapshot_response(GameState.new())
        return snapshot_response(after_move)

    remote_game = mock_game(handler)
    pending_refresh = asyncio.create_task(remote_game.refresh())
    await asyncio.sleep(0)

    await remote_game.propose_move(CellIndex.CENTER)
    release_get.set()
    assert await pending_refresh

    assert remote_game.snapshot == after_move
    assert remote_game.snapshot.move_count == 1


async def test_newer_poll_replaces_older_move_response():
    release_put = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PUT":
            await release_put.wait()
            return snapshot_response(play([4]))
        return snapshot_response(play([4, 0]))

    remote_game = mock_game(handler)
    pending_move = asyncio.create_task(remote_game.propose_move(CellIndex.CENTER))
    await asyncio.sleep(0)

    assert await remote_game.refresh()
    release_put.set()
    await pending_move

    assert remote_game.snapshot == play([4, 0])


async def test_game_over_rejection_uses_server_outcome(remote_game):
    await remote_game.create_session()
    for offset in TOP_ROW_WIN:
        await remote_game.propose_move(CellIndex.from_offset(offset))
    # Client copy is behind the server
    remote_game.snapshot = GameState.new()

    with pytest.raises(GameAlreadyOverError) as exc_info:
        await remote_game.propose_move(CellIndex.BOTTOM_LEFT)

    assert exc_info.value.outcome == Outcome.won(Cell.X)
    assert str(exc_info.value) == "Game is already over (won by X)"


async def test_game_over_rejection_without_outcome_uses_detail():
    remote_game = mock_game(
        lambda request: httpx.Response(
            409, json={"reason": "game_already_over", "detail": "Game is already over (draw)"}
        )
    )

    with pytest.raises(GameAlreadyOverError) as exc_info:
        await remote_game.propose_move(CellIndex.CENTER)

    assert exc_info.value.outcome == "Game is already over (draw)"
