from database import Team


def make_team(name, leader="Ram", books=None, history=None, team_id=None):
    return Team(
        id=team_id or name.lower().replace(" ", "-"),
        name=name,
        leader=leader,
        books=dict(books or {}),
        books_history=history,
    )
