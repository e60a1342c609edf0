"""
Marathon Scoreboard - Settings
Read from Streamlit secrets (.streamlit/secrets.toml):

    [scoreboard]
    backend = "sheets"            # or "memory"
    spreadsheet_key = "..."
    poll_interval = 5
    log_level = "INFO"

    [admins]
    "admin@example.org" = "<sha256 hex of password>"

    [google]
    # service account json fields
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

BACKENDS = ("sheets", "memory")


@dataclass
class Settings:
    backend: str = "sheets"
    spreadsheet_key: str = ""
    teams_worksheet: str = "teams"
    leaders_worksheet: str = "leaders"
    poll_interval: float = 5.0
    log_level: str = "INFO"
    admins: Dict[str, str] = field(default_factory=dict)
    google: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_secrets(cls, secrets: Mapping[str, Any]) -> "Settings":
        section = dict(secrets.get("scoreboard", {}))
        backend = str(section.get("backend", "sheets")).lower()
        if backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{backend}', expected one of {BACKENDS}")

        settings = cls(
            backend=backend,
            spreadsheet_key=str(section.get("spreadsheet_key", "")),
            teams_worksheet=str(section.get("teams_worksheet", "teams")),
            leaders_worksheet=str(section.get("leaders_worksheet", "leaders")),
            poll_interval=float(section.get("poll_interval", 5.0)),
            log_level=str(section.get("log_level", "INFO")).upper(),
            admins={str(k): str(v) for k, v in dict(secrets.get("admins", {})).items()},
            google=dict(secrets.get("google", {})),
        )

        if backend == "sheets":
            if not settings.spreadsheet_key:
                raise KeyError("scoreboard.spreadsheet_key")
            if not settings.google:
                raise KeyError("google")
        return settings


def load_settings() -> Settings:
    """Settings from st.secrets"""
    import streamlit as st
    return Settings.from_secrets(st.secrets)
