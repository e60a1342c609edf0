"""
Marathon Scoreboard - Dashboard State
Single-writer cell holding the latest team snapshot and leader roster
"""

import threading
from typing import Callable, List, Optional

from loguru import logger

from database import DocumentStore, Leader, Team


class ScoreboardState:
    """
    Read-through cache fed by subscriptions.

    Team snapshots arrive from the store subscription. The roster is loaded
    once and only re-fetched on demand, so leaders added by other sessions
    appear after the next fetch.
    """

    def __init__(self, store: DocumentStore):
        self.store = store
        self._teams: List[Team] = []
        self._leaders: List[Leader] = []
        self._lock = threading.Lock()
        self._unsubscribers: List[Callable[[], None]] = []
        self.version = 0

    # ---------- subscription callbacks ----------

    def apply_teams(self, teams: List[Team]) -> None:
        with self._lock:
            self._teams = list(teams)
            self.version += 1
        logger.debug(f"Team snapshot received ({len(teams)} teams)")

    def watch_teams(self) -> None:
        self._unsubscribers.append(self.store.subscribe_teams(self.apply_teams))

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    # ---------- roster ----------

    def load_leaders(self) -> List[Leader]:
        """One-shot roster fetch"""
        leaders = self.store.fetch_leaders()
        with self._lock:
            self._leaders = leaders
        return leaders

    def set_leaders(self, leaders: List[Leader]) -> None:
        with self._lock:
            self._leaders = list(leaders)

    # ---------- reads ----------

    @property
    def teams(self) -> List[Team]:
        with self._lock:
            return list(self._teams)

    @property
    def leaders(self) -> List[Leader]:
        with self._lock:
            return list(self._leaders)

    @property
    def leader_names(self) -> List[str]:
        return [leader.name for leader in self.leaders]

    def find_team(self, team_id: str) -> Optional[Team]:
        for team in self.teams:
            if team.id == team_id:
                return team
        return None

    def replace_team(self, team: Team) -> None:
        """Local write used for optimistic updates"""
        with self._lock:
            self._teams = [team if existing.id == team.id else existing for existing in self._teams]
