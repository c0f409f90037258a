"""Contains fixtures and helpers for generating test data"""

import random
import string
from datetime import timedelta
from typing import Iterable

import fakeredis
import httpx
import pytest
import pytest_asyncio

from api import create_app
from config import Settings
from data_wrappers import GameSessions
from tic_tac_toe import CellIndex, GameState

# Moves where X completes the top row on the fifth move
TOP_ROW_WIN = [0, 4, 1, 5, 2]

# Moves that fill the board without anyone completing a line
#   X O X
#   X O O
#   O X X
DRAW_GAME = [0, 1, 2, 4, 3, 5, 7, 6, 8]


@pytest.fixture
def session_id():
    """Generates a random session id"""

    return gen_session_id()


def gen_session_id():
    """Generates a random session id"""

    return "".join(random.choices(string.ascii_letters + string.digits, k=16))


def play(offsets: Iterable[int], game_state: GameState | None = None) -> GameState:
    """Plays each offset in order on a new or given game state"""

    game_state = game_state or GameState.new()
    for offset in offsets:
        game_state.apply_move(CellIndex.from_offset(offset))
    return game_state


@pytest_asyncio.fixture
async def redis_pool():
    """Redis client backed by its own in memory server"""

    pool = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())
    yield pool
    await pool.flushall()
    await pool.aclose()


@pytest.fixture
def game_sessions(redis_pool):
    return GameSessions(redis_pool, timedelta(minutes=15))


@pytest.fixture
def app(game_sessions):
    return create_app(Settings(), game_sessions)


@pytest_asyncio.fixture
async def http_client(app):
    """Http client that sends requests straight to the app"""

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
