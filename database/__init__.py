"""
Marathon Scoreboard Database Package
Team/leader documents and the stores that hold them
"""

from .schema import Leader, Team
from .store import DocumentStore, InMemoryDocumentStore
from .sheets import SheetsDocumentStore

__all__ = ['Team', 'Leader', 'DocumentStore', 'InMemoryDocumentStore', 'SheetsDocumentStore']
