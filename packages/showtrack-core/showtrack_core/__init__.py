"""
Core foundation layer for the game show result tracker.

Provides models, database connection, configuration and outcome interpretation.
"""

from showtrack_core.api_models import ParsedResult, parse_raw_result
from showtrack_core.config import Settings, get_settings
from showtrack_core.exceptions import FetchError, ParseError, PersistenceError, ShowTrackError
from showtrack_core.models import Game, GameResult

__all__ = [
    # Models
    "Game",
    "GameResult",
    # Config
    "Settings",
    "get_settings",
    # API Models
    "ParsedResult",
    "parse_raw_result",
    # Errors
    "ShowTrackError",
    "FetchError",
    "ParseError",
    "PersistenceError",
]
