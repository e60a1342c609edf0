"""
Marathon Scoreboard - Document Schema
Team and leader documents as stored in the teams/leaders collections
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

TEAMS_COLLECTION = "teams"
LEADERS_COLLECTION = "leaders"

# Field names as persisted in the store
TEAM_FIELDS = ["name", "leader", "books", "booksHistory", "lastUpdated"]
LEADER_FIELDS = ["name", "createdAt"]


def utc_timestamp() -> str:
    """ISO-8601 timestamp stamped on every write"""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Team:
    """A campaign team. Book data is kept in its raw persisted form."""
    id: str
    name: str
    leader: str = ""
    books: Dict[str, Any] = field(default_factory=dict)
    books_history: Optional[List[Dict[str, Any]]] = None
    last_updated: Optional[str] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "Team":
        history = data.get("booksHistory")
        return cls(
            id=doc_id,
            name=str(data.get("name") or ""),
            leader=str(data.get("leader") or ""),
            books=dict(data.get("books") or {}),
            books_history=list(history) if history else None,
            last_updated=data.get("lastUpdated"),
        )

    def to_document(self) -> Dict[str, Any]:
        doc = {
            "name": self.name,
            "leader": self.leader,
            "books": dict(self.books),
            "lastUpdated": self.last_updated,
        }
        if self.books_history is not None:
            doc["booksHistory"] = [dict(entry) for entry in self.books_history]
        return doc


@dataclass
class Leader:
    """A BV leader on the roster"""
    id: str
    name: str
    created_at: Optional[str] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "Leader":
        return cls(id=doc_id, name=str(data.get("name") or ""), created_at=data.get("createdAt"))

    def to_document(self) -> Dict[str, Any]:
        return {"name": self.name, "createdAt": self.created_at}
