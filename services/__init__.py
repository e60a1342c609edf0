"""
Marathon Scoreboard Services Package
Scoring, leaderboard, export, authentication and admin workflows
"""

from .errors import AuthError, PersistenceError, ScoreboardError, ValidationError
from .scoring import BOOK_CATEGORIES, BOOK_EQUIV, BOOK_VALUES, DerivedStats, calculate_stats
from .leaderboard import TeamStanding, ViewState, rank_teams
from .export import export_csv, export_filename

__all__ = [
    'AuthError', 'PersistenceError', 'ScoreboardError', 'ValidationError',
    'BOOK_CATEGORIES', 'BOOK_EQUIV', 'BOOK_VALUES', 'DerivedStats', 'calculate_stats',
    'TeamStanding', 'ViewState', 'rank_teams',
    'export_csv', 'export_filename',
]
