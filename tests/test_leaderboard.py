from datetime import date

import pytest

from services.leaderboard import (
    ViewState,
    book_distribution,
    chart_rows,
    rank_teams,
    sort_standings,
    standings_frame,
    summarize,
    top_teams,
)
from tests.factories import make_team


@pytest.fixture
def teams():
    return [
        make_team("Alpha Squad", leader="Ram", books={"Bhagavatam": 1, "MBB": 3}),
        make_team("Beta Team", leader="Shyam", books={"CC": 1}),
        make_team("Gamma Group", leader="Ram", books={"BB": 10}),
        make_team("alpha juniors", leader="Shyam", books={"SB": 4}),
    ]


def names(standings):
    return [standing.team.name for standing in standings]


def test_search_keeps_matching_names():
    teams = [make_team("Alpha Squad"), make_team("Beta Team")]
    standings = rank_teams(teams, ViewState(search_term="Alpha"))
    assert names(standings) == ["Alpha Squad"]


def test_search_is_case_insensitive(teams):
    standings = rank_teams(teams, ViewState(search_term="ALPHA"))
    assert sorted(names(standings)) == ["Alpha Squad", "alpha juniors"]


def test_all_leaders_excludes_nobody(teams):
    teams.append(make_team("No Leader", leader=""))
    standings = rank_teams(teams, ViewState(leader_filter="all"))
    assert len(standings) == len(teams)


def test_leader_filter_is_exact(teams):
    standings = rank_teams(teams, ViewState(leader_filter="Ram"))
    assert sorted(names(standings)) == ["Alpha Squad", "Gamma Group"]


def test_search_and_leader_filters_commute(teams):
    both = rank_teams(teams, ViewState(search_term="alpha", leader_filter="Shyam"))

    leader_first = rank_teams(teams, ViewState(leader_filter="Shyam"))
    then_search = rank_teams([s.team for s in leader_first], ViewState(search_term="alpha"))

    assert names(both) == names(then_search) == ["alpha juniors"]


def test_sorted_descending_by_points(teams):
    standings = rank_teams(teams, ViewState(sort_key="points"))
    assert names(standings) == ["Alpha Squad", "Beta Team", "Gamma Group", "alpha juniors"]
    points = [s.total_points for s in standings]
    assert points == sorted(points, reverse=True)


def test_sorted_descending_by_books(teams):
    standings = rank_teams(teams, ViewState(sort_key="books"))
    # Bhagavatam counts as 18 books, CC as 9
    assert names(standings) == ["Alpha Squad", "Gamma Group", "Beta Team", "alpha juniors"]


def test_resorting_is_idempotent(teams):
    standings = rank_teams(teams, ViewState(sort_key="points"))
    assert sort_standings(standings, "points") == standings


def test_ties_keep_input_order():
    first = make_team("First", books={"BB": 2})
    second = make_team("Second", books={"MBB": 1})
    assert names(rank_teams([first, second], ViewState())) == ["First", "Second"]
    assert names(rank_teams([second, first], ViewState())) == ["Second", "First"]


def test_ranks_are_positional_after_filtering(teams):
    standings = rank_teams(teams, ViewState(leader_filter="Shyam"))
    assert [s.rank for s in standings] == [1, 2]
    assert standings[0].team.name == "Beta Team"


def test_unknown_sort_key_rejected():
    with pytest.raises(ValueError):
        ViewState(sort_key="name")


def test_date_filter_on_history_teams():
    history = [
        {"date": "2024-12-01", "BB": 5},
        {"date": "2024-12-02", "CC": 1},
    ]
    team = make_team("Dated", history=history)

    day_one = rank_teams([team], ViewState(date_filter="2024-12-01"))[0]
    assert day_one.total_points == 5
    assert day_one.counts["BB"] == 5
    assert day_one.counts["CC"] == 0

    missing = rank_teams([team], ViewState(date_filter="2024-12-25"))[0]
    assert missing.total_points == 0
    assert missing.total_books == 0

    cumulative = rank_teams([team], ViewState())[0]
    assert cumulative.total_points == 5 + 36


def test_legacy_books_count_on_any_selected_day():
    team = make_team("Legacy", books={"BB": 3})
    standing = rank_teams([team], ViewState(date_filter="2024-12-25"))[0]
    assert standing.total_points == 3


def test_top_teams_truncates_without_resorting(teams):
    standings = rank_teams(teams, ViewState(sort_key="books"))
    top = top_teams(standings, 2)
    assert names(top) == ["Alpha Squad", "Gamma Group"]


def test_chart_rows_shorten_long_names():
    team = make_team("The Very Long Team Name Indeed", books={"BB": 1})
    rows = chart_rows(rank_teams([team], ViewState()))
    assert rows.loc[0, "name"] == "The Very Long T..."
    assert rows.loc[0, "points"] == 1


def test_chart_rows_limit_to_ten():
    teams = [make_team(f"Team {i}", books={"BB": i}) for i in range(15)]
    rows = chart_rows(rank_teams(teams, ViewState()))
    assert len(rows) == 10
    assert rows.loc[0, "name"] == "Team 14"


def test_book_distribution_drops_empty_categories(teams):
    distribution = book_distribution(rank_teams(teams, ViewState()))
    assert set(distribution["name"]) == {"Bhagavatam", "CC", "MBB", "BB", "SB"}
    assert distribution.set_index("name").loc["BB", "value"] == 10


def test_summarize_ignores_search_and_leader(teams):
    totals = summarize(teams)
    assert totals["total_teams"] == 4
    assert totals["total_points"] == 78 + 36 + 10 + 1


def test_standings_frame_columns(teams):
    df = standings_frame(rank_teams(teams, ViewState()))
    assert list(df.columns) == [
        "Rank", "Team Name", "BV Leader", "Bhagavatam", "CC", "MBB", "BB", "MB", "SB",
        "Total Books", "Total Points",
    ]
    assert df.loc[0, "Team Name"] == "Alpha Squad"


def test_default_current_date_is_today():
    team = make_team("Legacy", books={"BB": 3})
    today = date.today().isoformat()
    assert rank_teams([team], ViewState(date_filter=today))[0].total_points == 3
