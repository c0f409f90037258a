"""Contains the LocalGame class which runs a game played on one machine"""

import logging
from typing import Optional

from exceptions import CellOccupiedError, GameAlreadyOverError
from tic_tac_toe import CellIndex, GameState

from .utils import GAME_OVER_PROMPT, status_line

logger = logging.getLogger(__name__)

RESTART_KEY = " "
EXIT_KEY = "escape"
BOARD_KEYS = frozenset("123456789")


class LocalGame:
    """Input handling for a game where both players share one machine.

    Meant to be driven once per frame by whatever polls the keyboard or mouse.
    Moves that break the rules are ignored and leave the game unchanged.

    Attributes:
        game_state (GameState): State of the current game.
        exited (bool): Set once a player chose to exit after a game ended.
    """

    def __init__(self) -> None:
        self.game_state = GameState.new()
        self.exited = False

    @property
    def prompt(self) -> Optional[str]:
        """End of game prompt, or None while the game is still going"""

        return GAME_OVER_PROMPT if self.game_state.is_over else None

    @property
    def status(self) -> str:
        return status_line(self.game_state)

    def handle_input(self, index: CellIndex) -> bool:
        """Plays a move for whoever's turn it is.

        Returns:
            bool: True if the move was played, False if it was ignored.
        """

        try:
            self.game_state.apply_move(index)
        except (CellOccupiedError, GameAlreadyOverError) as e:
            logger.debug("Ignored move at %s: %s", index.name, e)
            return False
        return True

    def handle_key(self, key: str) -> bool:
        """Handles one key press.

        While the game is going keys "1" to "9" play a move. Once it is over
        space starts a new game and escape exits. Every other key is ignored.

        Returns:
            bool: True if the key changed anything.
        """

        if self.game_state.is_over:
            if key == RESTART_KEY:
                self.restart()
                return True
            if key == EXIT_KEY:
                self.exited = True
                return True
            return False

        if key not in BOARD_KEYS:
            return False
        return self.handle_input(CellIndex.from_key(key))

    def restart(self) -> None:
        self.game_state.reset()
        logger.info("Started a new local game")
