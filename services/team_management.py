"""
Marathon Scoreboard - Team Management Service
Admin workflows: teams, book counts, dated score updates and the leader roster
"""

from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd
from loguru import logger

from database import Leader, Team
from .errors import ValidationError
from .leaderboard import today
from .scoring import (
    BOOK_CATEGORIES,
    DatedEntry,
    clean_counts,
    coerce_count,
    upsert_history_entry,
)
from .state import ScoreboardState


def validate_team(name: str, leader: str) -> None:
    if not (name or "").strip():
        raise ValidationError("Please enter a team name")
    if not (leader or "").strip():
        raise ValidationError("Please select a BV Leader")


def parse_count(value) -> int:
    """Count typed by an admin; must be a whole number >= 0. Blank cells are 0."""
    if value is None or value == "" or pd.isna(value):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{value}' is not a whole number")
    if not number.is_integer():
        raise ValidationError(f"'{value}' is not a whole number")
    count = int(number)
    if count < 0:
        raise ValidationError("Book counts cannot be negative")
    return count


def parse_counts(raw: Mapping) -> Dict[str, int]:
    return {category: parse_count(raw.get(category)) for category in BOOK_CATEGORIES}


class TeamManagementService:
    """Admin operations against the document store.

    Every call is a single request with no retry. Bulk operations run one
    team at a time and stop at the first failure; earlier writes stay.
    """

    def __init__(self, state: ScoreboardState):
        self.state = state
        self.store = state.store

    # ================== TEAMS ==================

    def save_team(self, name: str, leader: str, books: Mapping,
                  team_id: Optional[str] = None) -> str:
        """Create a team, or fully replace name/leader/books of an existing one"""
        validate_team(name, leader)
        fields = {
            "name": name.strip(),
            "leader": leader.strip(),
            "books": parse_counts(books),
        }

        if team_id:
            self.store.update_team(team_id, fields)
            return team_id
        return self.store.create_team(fields)

    def delete_team(self, team_id: str) -> None:
        self.store.delete_team(team_id)

    def adjust_book_count(self, team_id: str, category: str, delta: int) -> Optional[int]:
        """
        Step one category of the flat snapshot up or down, never below 0.

        The local cache is updated before the store call. If the call fails
        the error propagates and the cache keeps the new value until the next
        team snapshot arrives.
        """
        if category not in BOOK_CATEGORIES:
            raise ValidationError(f"Unknown book category '{category}'")

        team = self.state.find_team(team_id)
        if team is None:
            return None

        books = dict(team.books or {})
        new_count = max(0, coerce_count(books.get(category)) + delta)
        books[category] = new_count

        self.state.replace_team(replace(team, books=books))
        self.store.update_team(team_id, {"books": books})
        return new_count

    def bulk_edit_books(self, edits: Mapping[str, Mapping]) -> int:
        """Overwrite the flat snapshot of several teams; every row is validated before any write"""
        pending = {team_id: parse_counts(counts) for team_id, counts in edits.items()}

        updated = 0
        for team_id, counts in pending.items():
            if self.state.find_team(team_id) is None:
                continue
            self.store.update_team(team_id, {"books": counts})
            updated += 1
        logger.info(f"Bulk edit saved books for {updated} teams")
        return updated

    def update_scores_by_date(self, day: str, updates: Mapping[str, Mapping]) -> int:
        """
        Record counts for one date in each team's history.

        Teams whose counts are all zero are skipped. A team still in the flat
        shape with non-zero counts is first converted to a one-entry history
        dated today. The entry for `day` is replaced if present, otherwise
        appended, and the flat snapshot is set to the same counts.
        """
        pending = {}
        for team_id, counts in updates.items():
            parsed = parse_counts(counts)
            if any(value > 0 for value in parsed.values()):
                pending[team_id] = parsed

        if not pending:
            raise ValidationError("Please enter at least one book count for any team")

        updated = 0
        for team_id, counts in pending.items():
            team = self.state.find_team(team_id)
            if team is None:
                continue

            history = self._history_of(team)
            history = upsert_history_entry(history, day, counts)
            self.store.update_team(team_id, {
                "booksHistory": [entry.to_document() for entry in history],
                "books": counts,
            })
            updated += 1

        logger.info(f"Recorded scores for {updated} teams on {day}")
        return updated

    @staticmethod
    def _history_of(team: Team) -> List[DatedEntry]:
        if isinstance(team.books_history, list):
            return [DatedEntry.from_document(entry) for entry in team.books_history]
        legacy = clean_counts(team.books)
        if any(legacy.values()):
            return [DatedEntry(date=today(), counts=legacy)]
        return []

    # ================== LEADERS ==================

    def add_leader(self, name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Please enter a leader name")
        if name in self.state.leader_names:
            raise ValidationError(f"'{name}' is already on the roster")

        leader_id = self.store.create_leader(name)
        self.state.set_leaders(self.state.leaders + [Leader(id=leader_id, name=name)])
        return leader_id

    def delete_leader(self, name: str) -> bool:
        """Remove a leader by name, matching against a fresh roster fetch"""
        leaders = self.store.fetch_leaders()
        match = next((leader for leader in leaders if leader.name == name), None)
        if match is None:
            logger.warning(f"Leader '{name}' not found on roster")
            self.state.set_leaders(leaders)
            return False

        self.store.delete_leader(match.id)
        self.state.set_leaders([leader for leader in leaders if leader.id != match.id])
        return True

    def orphaned_teams(self) -> List[Team]:
        """Teams whose leader name has no roster entry"""
        return find_orphaned_teams(self.state.teams, self.state.leader_names)


def find_orphaned_teams(teams: Sequence[Team], leader_names: Sequence[str]) -> List[Team]:
    roster = set(leader_names)
    return [team for team in teams if team.leader not in roster]
