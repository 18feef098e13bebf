"""
Per-game extraction parameters: arity, numeric domain, special-tag presence, session codes
and the expected pane layout of the source document.
"""

from .registry import FOUR_A_DAY, MIDDAY_EVENING, GameSpec, UnknownGameError, get_game, list_games

__all__ = ["GameSpec", "UnknownGameError", "get_game", "list_games", "MIDDAY_EVENING", "FOUR_A_DAY"]
