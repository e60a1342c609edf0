"""
Marathon Scoreboard - Leaderboard Service
Filtering, ranking and chart summaries over the team collection
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd

from .scoring import (
    BOOK_CATEGORIES,
    BOOK_EQUIV,
    DerivedStats,
    calculate_stats,
    entries_for_date,
    normalize_book_data,
    read_book_data,
    sum_counts,
)

SORT_KEYS = ("points", "books")
ALL_LEADERS = "all"
CHART_TEAMS = 10
CHART_NAME_LENGTH = 15


@dataclass(frozen=True)
class ViewState:
    """Current dashboard filters. Passed explicitly, never held globally."""
    search_term: str = ""
    leader_filter: str = ALL_LEADERS
    sort_key: str = "points"
    date_filter: Optional[str] = None

    def __post_init__(self):
        if self.sort_key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key '{self.sort_key}', expected one of {SORT_KEYS}")


@dataclass
class TeamStanding:
    rank: int
    team: object
    counts: Dict[str, int]
    stats: DerivedStats

    @property
    def total_books(self) -> float:
        return self.stats.total_books

    @property
    def total_points(self) -> float:
        return self.stats.total_points


def today() -> str:
    return date.today().isoformat()


def team_books(team, date_filter: Optional[str] = None, current_date: Optional[str] = None,
               equivalence: Optional[Mapping[str, float]] = BOOK_EQUIV):
    """Counts and stats for one team under a date filter"""
    # Legacy flat books are treated as recorded on the day being viewed
    current_date = current_date or date_filter or today()
    raw = read_book_data(team.to_document())
    normalized = normalize_book_data(raw, current_date, current=team.books)
    entries = entries_for_date(normalized.history, date_filter)
    return sum_counts(entries), calculate_stats(entries, equivalence)


def filter_by_name(teams: Sequence, search_term: str) -> List:
    if not search_term:
        return list(teams)
    needle = search_term.lower()
    return [team for team in teams if needle in team.name.lower()]


def filter_by_leader(teams: Sequence, leader_filter: str) -> List:
    if not leader_filter or leader_filter == ALL_LEADERS:
        return list(teams)
    return [team for team in teams if team.leader == leader_filter]


def sort_standings(standings: Sequence[TeamStanding], sort_key: str) -> List[TeamStanding]:
    """Descending by points or books. Ties keep their incoming order."""
    if sort_key == "points":
        key = lambda standing: standing.stats.total_points
    elif sort_key == "books":
        key = lambda standing: standing.stats.total_books
    else:
        raise ValueError(f"Unknown sort key '{sort_key}'")
    return sorted(standings, key=key, reverse=True)


def rank_teams(teams: Sequence, view: ViewState, current_date: Optional[str] = None,
               equivalence: Optional[Mapping[str, float]] = BOOK_EQUIV) -> List[TeamStanding]:
    """
    Apply search, leader filter, date-filtered stats and sort, then number
    the result 1..n. Ranks are positional and recomputed on every call.
    """
    filtered = filter_by_name(teams, view.search_term)
    filtered = filter_by_leader(filtered, view.leader_filter)

    standings = []
    for team in filtered:
        counts, stats = team_books(team, view.date_filter, current_date, equivalence)
        standings.append(TeamStanding(rank=0, team=team, counts=counts, stats=stats))

    ranked = sort_standings(standings, view.sort_key)
    for position, standing in enumerate(ranked, start=1):
        standing.rank = position
    return ranked


def top_teams(standings: Sequence[TeamStanding], limit: int = CHART_TEAMS) -> List[TeamStanding]:
    """First `limit` standings, in the order already applied"""
    return list(standings[:limit])


def short_name(name: str, length: int = CHART_NAME_LENGTH) -> str:
    return name[:length] + "..." if len(name) > length else name


def chart_rows(standings: Sequence[TeamStanding], limit: int = CHART_TEAMS) -> pd.DataFrame:
    """Top-N bar chart data"""
    rows = [
        {
            "name": short_name(standing.team.name),
            "points": standing.total_points,
            "books": standing.total_books,
        }
        for standing in top_teams(standings, limit)
    ]
    return pd.DataFrame(rows, columns=["name", "points", "books"])


def book_distribution(standings: Sequence[TeamStanding]) -> pd.DataFrame:
    """Books per category across standings; empty categories are dropped"""
    totals = {category: 0 for category in BOOK_CATEGORIES}
    for standing in standings:
        for category in BOOK_CATEGORIES:
            totals[category] += standing.counts.get(category, 0)

    rows = [{"name": category, "value": value} for category, value in totals.items() if value > 0]
    return pd.DataFrame(rows, columns=["name", "value"])


def summarize(teams: Sequence, date_filter: Optional[str] = None,
              current_date: Optional[str] = None,
              equivalence: Optional[Mapping[str, float]] = BOOK_EQUIV) -> Dict[str, float]:
    """Campaign totals over every team, ignoring search and leader filters"""
    total_books = 0
    total_points = 0
    for team in teams:
        _, stats = team_books(team, date_filter, current_date, equivalence)
        total_books += stats.total_books
        total_points += stats.total_points
    return {
        "total_teams": len(teams),
        "total_books": total_books,
        "total_points": total_points,
    }


def standings_frame(standings: Sequence[TeamStanding]) -> pd.DataFrame:
    """Leaderboard table, one row per standing"""
    columns = ["Rank", "Team Name", "BV Leader"] + BOOK_CATEGORIES + ["Total Books", "Total Points"]
    rows = []
    for standing in standings:
        row = {
            "Rank": standing.rank,
            "Team Name": standing.team.name,
            "BV Leader": standing.team.leader,
        }
        for category in BOOK_CATEGORIES:
            row[category] = int(standing.counts.get(category, 0))
        row["Total Books"] = standing.total_books
        row["Total Points"] = standing.total_points
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)
