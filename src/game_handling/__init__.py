"""Input handling for local and networked games"""

from game_handling.local_game import LocalGame
from game_handling.remote_game import RemoteGame
