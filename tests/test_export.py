from datetime import date

from services.export import export_csv, export_filename
from services.leaderboard import ViewState, rank_teams
from tests.factories import make_team

HEADER = "Rank,Team Name,BV Leader,Bhagavatam,CC,MBB,BB,MB,SB,Total Books,Total Points"


def test_header_and_rows():
    teams = [
        make_team("Beta Team", leader="Shyam", books={"CC": 1}),
        make_team("Alpha Squad", leader="Ram", books={"Bhagavatam": 1, "MBB": 3}),
    ]
    lines = export_csv(rank_teams(teams, ViewState())).splitlines()

    assert lines[0] == HEADER
    assert lines[1] == "1,Alpha Squad,Ram,1,0,3,0,0,0,21,78.00"
    assert lines[2] == "2,Beta Team,Shyam,0,1,0,0,0,0,9,36.00"


def test_row_count_and_positional_rank():
    teams = [make_team(f"Team {i}", leader="Ram" if i % 2 else "Shyam", books={"BB": i}) for i in range(7)]
    standings = rank_teams(teams, ViewState(leader_filter="Ram"))
    lines = export_csv(standings).splitlines()

    assert len(lines) == len(standings) + 1
    for position, line in enumerate(lines[1:], start=1):
        assert line.split(",")[0] == str(position)


def test_points_always_two_decimals():
    standings = rank_teams([make_team("Quarter", books={"SB": 1})], ViewState())
    row = export_csv(standings).splitlines()[1]
    assert row.endswith(",1,0.25")


def test_missing_categories_render_as_zero():
    standings = rank_teams([make_team("Empty")], ViewState())
    row = export_csv(standings).splitlines()[1]
    assert row == "1,Empty,Ram,0,0,0,0,0,0,0,0.00"


def test_empty_standings_is_header_only():
    assert export_csv([]).splitlines() == [HEADER]


def test_filename_uses_iso_date():
    assert export_filename(date(2024, 12, 25)) == "marathon-scoreboard-2024-12-25.csv"


def test_names_with_commas_are_quoted():
    standings = rank_teams([make_team("Smith, Jones & Co", books={"BB": 1})], ViewState())
    row = export_csv(standings).splitlines()[1]
    assert row == '1,"Smith, Jones & Co",Ram,0,0,0,1,0,0,1,1.00'
