"""Exports all data wrapper classes to make them easier to import"""

from data_wrappers.game_sessions import GameSessions
