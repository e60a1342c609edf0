"""
Marathon Scoreboard - Error Types
Failures surfaced to the dashboard: authentication, persistence and validation
"""


class ScoreboardError(Exception):
    """Base class for scoreboard failures"""


class AuthError(ScoreboardError):
    """Credential verification failed. Never says why."""

    MESSAGE = "Invalid credentials. Please try again."

    def __init__(self):
        super().__init__(self.MESSAGE)


class PersistenceError(ScoreboardError):
    """A create/update/delete/fetch against the document store failed"""

    def __init__(self, action: str, detail: str = ""):
        self.action = action
        self.detail = detail
        message = f"Error {action}. Please try again."
        super().__init__(message)


class ValidationError(ScoreboardError):
    """Client-side input problem, raised before any remote call"""
