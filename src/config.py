"""Loads settings from the environment and an optional .env file"""

import os
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Settings shared by the game server and clients.

    Attributes:
        redis_url (str): Url of the redis instance holding sessions.
        session_expiry (timedelta): Time without a move before a session is
            dropped.
        server_host (str): Interface the http server binds to.
        server_port (int): Port the http server binds to.
        client_poll_interval (float): Seconds between snapshot fetches.
        client_timeout (float): Seconds before a request to the server fails.
        debug (bool): Enables debug logging.
    """

    redis_url: str = "redis://localhost:6379/0"
    session_expiry: timedelta = timedelta(days=2)
    server_host: str = "127.0.0.1"
    server_port: int = 8000
    client_poll_interval: float = 1.0
    client_timeout: float = 5.0
    debug: bool = False


def load_settings() -> Settings:
    """Builds settings from env variables, falling back to the defaults"""

    load_dotenv()
    defaults = Settings()

    expiry_minutes = os.getenv("SESSION_EXPIRY_MINUTES")

    return Settings(
        redis_url=os.getenv("REDIS_URL", defaults.redis_url),
        session_expiry=(
            timedelta(minutes=int(expiry_minutes))
            if expiry_minutes
            else defaults.session_expiry
        ),
        server_host=os.getenv("SERVER_HOST", defaults.server_host),
        server_port=int(os.getenv("SERVER_PORT", defaults.server_port)),
        client_poll_interval=float(
            os.getenv("CLIENT_POLL_INTERVAL", defaults.client_poll_interval)
        ),
        client_timeout=float(os.getenv("CLIENT_TIMEOUT", defaults.client_timeout)),
        debug=os.getenv("DEBUG") == "True",
    )
