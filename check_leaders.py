#!/usr/bin/env python3
"""
Check that every team's BV leader is on the roster.
Team.leader is a plain name, so renaming or deleting a leader leaves teams
pointing at a name that no longer exists. This lists them; it changes nothing.
"""

import sys

from database import SheetsDocumentStore
from services.errors import PersistenceError
from services.logging_setup import setup_logging
from services.settings import load_settings
from services.team_management import find_orphaned_teams


def check_leaders(store) -> int:
    """Print orphaned teams and return how many were found"""
    teams = store.list_teams()
    leaders = store.fetch_leaders()

    print(f"📋 {len(teams)} teams, {len(leaders)} leaders on roster")

    orphaned = find_orphaned_teams(teams, [leader.name for leader in leaders])
    if not orphaned:
        print("✅ Every team's leader is on the roster")
        return 0

    print(f"⚠️ {len(orphaned)} teams reference a leader missing from the roster:")
    for team in orphaned:
        print(f"  - {team.name}: '{team.leader}'")
    return len(orphaned)


if __name__ == "__main__":
    settings = load_settings()
    setup_logging(settings.log_level)
    try:
        found = check_leaders(SheetsDocumentStore.from_settings(settings))
    except PersistenceError as e:
        print(f"❌ {e}")
        sys.exit(2)
    sys.exit(1 if found else 0)
