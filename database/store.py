"""
Marathon Scoreboard - Document Store
Collection-based CRUD with change subscriptions for teams and leaders
"""

import copy
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Tuple

from loguru import logger

from services.errors import PersistenceError, ScoreboardError
from .schema import LEADERS_COLLECTION, TEAMS_COLLECTION, Leader, Team, utc_timestamp

TeamsCallback = Callable[[List[Team]], None]
Unsubscribe = Callable[[], None]


class DocumentStore(ABC):
    """
    Base class for the hosted store.

    Subclasses provide raw collection access; this class stamps timestamps,
    converts documents to Team/Leader and turns backend failures into
    PersistenceError. Writes are last-write-wins with no concurrency token.
    """

    # ---------- raw collection access ----------

    @abstractmethod
    def _list(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        """All (id, data) pairs in retrieval order"""

    @abstractmethod
    def _create(self, collection: str, data: Dict[str, Any]) -> str:
        """Insert a document and return its new id"""

    @abstractmethod
    def _update(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Merge data into an existing document"""

    @abstractmethod
    def _delete(self, collection: str, doc_id: str) -> None:
        """Remove a document"""

    @abstractmethod
    def subscribe_teams(self, callback: TeamsCallback) -> Unsubscribe:
        """Push the team list to callback now and after every change"""

    def close(self) -> None:
        """Release background resources"""

    # ---------- helpers ----------

    def _call(self, action: str, func, *args):
        try:
            return func(*args)
        except ScoreboardError:
            raise
        except Exception as e:
            logger.exception(f"Error {action}: {e}")
            raise PersistenceError(action, str(e)) from e

    @staticmethod
    def _teams_from_rows(rows: List[Tuple[str, Dict[str, Any]]]) -> List[Team]:
        return [Team.from_document(doc_id, data) for doc_id, data in rows]

    # ---------- teams ----------

    def list_teams(self) -> List[Team]:
        rows = self._call("loading teams", self._list, TEAMS_COLLECTION)
        return self._teams_from_rows(rows)

    def create_team(self, fields: Dict[str, Any]) -> str:
        data = {**fields, "lastUpdated": utc_timestamp()}
        team_id = self._call("saving team", self._create, TEAMS_COLLECTION, data)
        logger.info(f"Created team '{fields.get('name')}' ({team_id})")
        return team_id

    def update_team(self, team_id: str, fields: Dict[str, Any]) -> None:
        data = {**fields, "lastUpdated": utc_timestamp()}
        self._call("updating team", self._update, TEAMS_COLLECTION, team_id, data)
        logger.debug(f"Updated team {team_id}: {sorted(fields)}")

    def delete_team(self, team_id: str) -> None:
        self._call("deleting team", self._delete, TEAMS_COLLECTION, team_id)
        logger.info(f"Deleted team {team_id}")

    # ---------- leaders ----------

    def fetch_leaders(self) -> List[Leader]:
        rows = self._call("loading leaders", self._list, LEADERS_COLLECTION)
        return [Leader.from_document(doc_id, data) for doc_id, data in rows]

    def create_leader(self, name: str) -> str:
        data = {"name": name, "createdAt": utc_timestamp()}
        leader_id = self._call("adding leader", self._create, LEADERS_COLLECTION, data)
        logger.info(f"Added leader '{name}' ({leader_id})")
        return leader_id

    def delete_leader(self, leader_id: str) -> None:
        self._call("deleting leader", self._delete, LEADERS_COLLECTION, leader_id)
        logger.info(f"Deleted leader {leader_id}")


class InMemoryDocumentStore(DocumentStore):
    """Process-local store; pushes team snapshots synchronously after each write"""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {
            TEAMS_COLLECTION: {},
            LEADERS_COLLECTION: {},
        }
        self._subscribers: Dict[int, TeamsCallback] = {}
        self._next_token = 0
        self._lock = threading.Lock()

    def _list(self, collection):
        with self._lock:
            return [(doc_id, copy.deepcopy(data)) for doc_id, data in self._collections[collection].items()]

    def _create(self, collection, data):
        doc_id = uuid.uuid4().hex
        with self._lock:
            self._collections[collection][doc_id] = copy.deepcopy(data)
        self._changed(collection)
        return doc_id

    def _update(self, collection, doc_id, data):
        with self._lock:
            docs = self._collections[collection]
            if doc_id not in docs:
                raise KeyError(f"No document {doc_id} in {collection}")
            docs[doc_id].update(copy.deepcopy(data))
        self._changed(collection)

    def _delete(self, collection, doc_id):
        with self._lock:
            docs = self._collections[collection]
            if doc_id not in docs:
                raise KeyError(f"No document {doc_id} in {collection}")
            del docs[doc_id]
        self._changed(collection)

    def _changed(self, collection: str) -> None:
        if collection != TEAMS_COLLECTION:
            return
        with self._lock:
            callbacks = list(self._subscribers.values())
        if not callbacks:
            return
        teams = self.list_teams()
        for callback in callbacks:
            callback(copy.deepcopy(teams))

    def subscribe_teams(self, callback):
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback

        def unsubscribe():
            with self._lock:
                self._subscribers.pop(token, None)

        callback(self.list_teams())
        return unsubscribe

    def close(self):
        with self._lock:
            self._subscribers.clear()
