import pytest

from check_leaders import check_leaders
from export_scoreboard import export_scoreboard, parse_args
from services.leaderboard import ViewState


def test_check_leaders_reports_orphans(store, capsys):
    store.create_leader("Ram")
    store.create_team({"name": "Alpha", "leader": "Ram", "books": {}})
    store.create_team({"name": "Beta", "leader": "Gone", "books": {}})

    assert check_leaders(store) == 1
    out = capsys.readouterr().out
    assert "Beta: 'Gone'" in out
    assert "Alpha" not in out


def test_check_leaders_all_good(store, capsys):
    store.create_leader("Ram")
    store.create_team({"name": "Alpha", "leader": "Ram", "books": {}})

    assert check_leaders(store) == 0
    assert "Every team's leader is on the roster" in capsys.readouterr().out


def test_export_scoreboard_writes_filtered_csv(store, tmp_path):
    store.create_team({"name": "Alpha", "leader": "Ram", "books": {"BB": 2}})
    store.create_team({"name": "Beta", "leader": "Shyam", "books": {"CC": 1}})
    output = tmp_path / "scoreboard.csv"

    assert export_scoreboard(store, ViewState(leader_filter="Ram"), output) == 1
    lines = output.read_text(encoding="utf-8").splitlines()
    assert lines[1] == "1,Alpha,Ram,0,0,0,2,0,0,2,2.00"
    assert len(lines) == 2


def test_parse_args_defaults():
    args = parse_args([])
    assert args.sort == "points"
    assert args.leader == "all"
    assert args.date_filter is None


def test_parse_args_rejects_unknown_sort():
    with pytest.raises(SystemExit):
        parse_args(["--sort", "name"])


def test_parse_args_accepts_iso_date():
    assert parse_args(["--date", "2024-12-01"]).date_filter == "2024-12-01"


def test_parse_args_rejects_malformed_date(capsys):
    with pytest.raises(SystemExit) as exc:
        parse_args(["--date", "12/01/2024"])
    assert exc.value.code == 2
    assert "invalid date '12/01/2024'" in capsys.readouterr().err
