"""Used to run the game server"""

import logging

import uvicorn

from api import create_app
from config import load_settings


def main():
    settings = load_settings()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uvicorn.run(
        create_app(settings),
        host=settings.server_host,
        port=settings.server_port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
