"""
Marathon Scoreboard - Google Sheets Document Store
Each collection is a worksheet; each document is a row keyed by its id column
"""

import json
import threading
import uuid
from typing import Any, Dict, List, Mapping, Tuple

import gspread
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from loguru import logger

from services.errors import PersistenceError
from .schema import LEADER_FIELDS, LEADERS_COLLECTION, TEAM_FIELDS, TEAMS_COLLECTION
from .store import DocumentStore

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

# Columns holding nested data, stored as JSON text
JSON_FIELDS = {"books", "booksHistory"}


def authorize(service_account_info: Mapping[str, Any]) -> gspread.Client:
    """Google Sheets client from service account info (st.secrets["google"])"""
    credentials = Credentials.from_service_account_info(dict(service_account_info), scopes=SCOPES)
    return gspread.authorize(credentials)


def encode_cell(name: str, value: Any) -> Any:
    if name in JSON_FIELDS:
        return "" if value is None else json.dumps(value)
    return "" if value is None else value


def decode_cell(name: str, value: Any) -> Any:
    if name in JSON_FIELDS:
        if value in ("", None):
            return None
        return json.loads(value)
    return None if value == "" else value


class SheetsDocumentStore(DocumentStore):
    """
    Document store on a Google spreadsheet.

    Sheets has no change feed, so subscribe_teams runs a watcher thread that
    re-reads the teams worksheet every poll_interval seconds and pushes the
    snapshot whenever it differs from the last one delivered.
    """

    def __init__(self, spreadsheet: gspread.Spreadsheet,
                 teams_worksheet: str = TEAMS_COLLECTION,
                 leaders_worksheet: str = LEADERS_COLLECTION,
                 poll_interval: float = 5.0):
        self.spreadsheet = spreadsheet
        self.poll_interval = poll_interval
        self._columns = {
            TEAMS_COLLECTION: ["id"] + TEAM_FIELDS,
            LEADERS_COLLECTION: ["id"] + LEADER_FIELDS,
        }
        self._titles = {
            TEAMS_COLLECTION: teams_worksheet,
            LEADERS_COLLECTION: leaders_worksheet,
        }
        self._worksheets: Dict[str, gspread.Worksheet] = {}
        self._watchers: List[threading.Event] = []

    @classmethod
    def from_settings(cls, settings) -> "SheetsDocumentStore":
        client = authorize(settings.google)
        spreadsheet = client.open_by_key(settings.spreadsheet_key)
        logger.info(f"Opened spreadsheet '{spreadsheet.title}'")
        return cls(
            spreadsheet,
            teams_worksheet=settings.teams_worksheet,
            leaders_worksheet=settings.leaders_worksheet,
            poll_interval=settings.poll_interval,
        )

    def _worksheet(self, collection: str) -> gspread.Worksheet:
        if collection in self._worksheets:
            return self._worksheets[collection]

        title = self._titles[collection]
        columns = self._columns[collection]
        try:
            worksheet = self.spreadsheet.worksheet(title)
        except gspread.exceptions.WorksheetNotFound:
            logger.warning(f"Worksheet '{title}' missing, creating it")
            worksheet = self.spreadsheet.add_worksheet(title=title, rows=100, cols=len(columns))
            worksheet.append_row(columns)

        self._worksheets[collection] = worksheet
        return worksheet

    def _row_number(self, worksheet: gspread.Worksheet, doc_id: str) -> int:
        cell = worksheet.find(doc_id, in_column=1)
        if cell is None:
            raise KeyError(f"No document {doc_id} in {worksheet.title}")
        return cell.row

    def _range(self, collection: str, row: int) -> str:
        last_column = rowcol_to_a1(row, len(self._columns[collection]))
        return f"A{row}:{last_column}"

    # ---------- raw collection access ----------

    def _list(self, collection):
        columns = self._columns[collection]
        rows: List[Tuple[str, Dict[str, Any]]] = []
        for record in self._worksheet(collection).get_all_records(numericise_ignore=["all"]):
            doc_id = str(record.get("id", ""))
            if not doc_id:
                continue
            data = {name: decode_cell(name, record.get(name, "")) for name in columns[1:]}
            rows.append((doc_id, data))
        return rows

    def _create(self, collection, data):
        doc_id = uuid.uuid4().hex
        columns = self._columns[collection]
        values = [doc_id] + [encode_cell(name, data.get(name)) for name in columns[1:]]
        self._worksheet(collection).append_row(values, value_input_option="RAW")
        return doc_id

    def _update(self, collection, doc_id, data):
        worksheet = self._worksheet(collection)
        columns = self._columns[collection]
        row = self._row_number(worksheet, doc_id)

        current = worksheet.row_values(row)
        current += [""] * (len(columns) - len(current))
        merged = dict(zip(columns, current))
        for name, value in data.items():
            if name in merged:
                merged[name] = encode_cell(name, value)

        worksheet.update(
            range_name=self._range(collection, row),
            values=[[merged[name] for name in columns]],
            value_input_option="RAW",
        )

    def _delete(self, collection, doc_id):
        worksheet = self._worksheet(collection)
        worksheet.delete_rows(self._row_number(worksheet, doc_id))

    # ---------- subscriptions ----------

    def subscribe_teams(self, callback):
        stop = threading.Event()
        self._watchers.append(stop)

        teams = self.list_teams()
        callback(teams)
        last_seen = [{**team.to_document(), "id": team.id} for team in teams]

        def watch():
            nonlocal last_seen
            while not stop.wait(self.poll_interval):
                try:
                    teams = self.list_teams()
                except PersistenceError as e:
                    # Logged by list_teams; keep the last good snapshot
                    logger.warning(f"Team watcher poll failed: {e}")
                    continue
                snapshot = [{**team.to_document(), "id": team.id} for team in teams]
                if snapshot != last_seen:
                    last_seen = snapshot
                    callback(teams)
            logger.debug("Team watcher stopped")

        thread = threading.Thread(target=watch, name="teams-watcher", daemon=True)
        thread.start()

        def unsubscribe():
            stop.set()

        return unsubscribe

    def close(self):
        for stop in self._watchers:
            stop.set()
        self._watchers.clear()
