"""
Marathon Scoreboard - CSV Export
"""

from datetime import date
from typing import Optional, Sequence

from .leaderboard import TeamStanding, standings_frame
from .scoring import format_books, format_points

EXPORT_PREFIX = "marathon-scoreboard"


def export_frame(standings: Sequence[TeamStanding]):
    """Leaderboard table with totals formatted for the file"""
    df = standings_frame(standings)
    df["Total Books"] = df["Total Books"].map(format_books)
    df["Total Points"] = df["Total Points"].map(format_points)
    return df


def export_csv(standings: Sequence[TeamStanding]) -> str:
    """
    Ranked standings as CSV text.

    Rank is the position after filtering and sorting. Quoting follows
    RFC 4180: a field is quoted only when it contains a comma, quote or
    newline, so ordinary rows are plain comma-joined values.
    """
    return export_frame(standings).to_csv(index=False, lineterminator="\n")


def export_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"{EXPORT_PREFIX}-{day.isoformat()}.csv"
