"""
Marathon Scoreboard Dashboard
Book distribution campaign leaderboard backed by a hosted document store
"""

from datetime import date

import pandas as pd
import plotly.express as px
import streamlit as st
from loguru import logger

from database import InMemoryDocumentStore, SheetsDocumentStore
from services.auth import SecretsIdentityProvider
from services.errors import AuthError, PersistenceError, ValidationError
from services.export import export_csv, export_filename
from services.leaderboard import (
    ALL_LEADERS,
    ViewState,
    book_distribution,
    chart_rows,
    rank_teams,
    standings_frame,
    summarize,
)
from services.logging_setup import setup_logging
from services.scoring import BOOK_CATEGORIES, BOOK_VALUES, clean_counts, format_books, format_points
from services.settings import load_settings
from services.state import ScoreboardState
from services.team_management import TeamManagementService

COLORS = ['#f97316', '#3b82f6', '#10b981', '#f59e0b', '#8b5cf6', '#ec4899']


@st.cache_resource
def get_scoreboard(_settings) -> ScoreboardState:
    """Store, team subscription and roster shared by every browser session"""
    if _settings.backend == "memory":
        store = InMemoryDocumentStore()
    else:
        store = SheetsDocumentStore.from_settings(_settings)

    state = ScoreboardState(store)
    state.watch_teams()
    try:
        state.load_leaders()
    except PersistenceError:
        logger.warning("Leader roster unavailable at startup; use Refresh Leaders to retry")
    return state


def get_identity(settings) -> SecretsIdentityProvider:
    """Per-browser-session identity provider, subscribed once"""
    if "identity" not in st.session_state:
        provider = SecretsIdentityProvider(settings.admins)
        st.session_state["identity"] = provider
        st.session_state["auth_unsubscribe"] = provider.subscribe_to_session_changes(on_session_change)
    return st.session_state["identity"]


def on_session_change(session):
    st.session_state["auth"] = session


def is_admin() -> bool:
    session = st.session_state.get("auth")
    return bool(session and session.is_admin)


def run_action(action, success_message=None):
    """Run an admin action, reporting validation and store failures"""
    try:
        result = action()
    except ValidationError as e:
        st.warning(str(e))
        return None
    except PersistenceError as e:
        st.error(f"❌ {e}")
        return None
    if success_message:
        st.success(success_message)
    return result


def main():
    st.set_page_config(
        page_title="Marathon Scoreboard",
        page_icon="📚",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    settings = load_settings()
    setup_logging(settings.log_level)

    state = get_scoreboard(settings)
    provider = get_identity(settings)
    service = TeamManagementService(state)

    # Header
    st.markdown("""
    <div style="text-align: center; margin-bottom: 30px;">
        <h1>📚 Marathon Scoreboard</h1>
        <p style="color: #666;">ISKCON Book Distribution Campaign</p>
    </div>
    """, unsafe_allow_html=True)

    view = show_sidebar(state, provider, settings)

    tab1, tab2, tab3 = st.tabs([
        "🏆 Leaderboard",
        "📊 Charts",
        "⚙️ Admin Panel"
    ])

    # Re-render from the latest team snapshot while the page is open
    live = st.fragment(run_every=settings.poll_interval)

    with tab1:
        live(show_leaderboard)(state, view)

    with tab2:
        live(show_charts)(state, view)

    with tab3:
        show_admin_panel(state, service, provider)


# ================== SIDEBAR ==================

def show_sidebar(state: ScoreboardState, provider, settings) -> ViewState:
    """Filters, campaign totals and login status; returns the active view"""
    with st.sidebar:
        st.markdown("### Filters")
        search_term = st.text_input("🔍 Search teams", placeholder="Search by team name...")

        leader_options = [ALL_LEADERS] + sorted(state.leader_names)
        leader_filter = st.selectbox(
            "BV Leader",
            leader_options,
            format_func=lambda name: "All Leaders" if name == ALL_LEADERS else name,
        )

        sort_key = st.radio(
            "Sort by",
            ["points", "books"],
            format_func=lambda key: "Total Points" if key == "points" else "Total Books",
            horizontal=True,
        )

        date_filter = None
        if st.checkbox("📅 Show a single day"):
            selected = st.date_input("Date", date.today())
            date_filter = selected.isoformat()

        view = ViewState(
            search_term=search_term,
            leader_filter=leader_filter,
            sort_key=sort_key,
            date_filter=date_filter,
        )

        st.markdown("### Campaign Totals")
        totals = summarize(state.teams, date_filter)
        st.metric("Teams", totals["total_teams"])
        st.metric("Total Books", format_books(totals["total_books"]))
        st.metric("Total Points", format_points(totals["total_points"]))

        st.markdown("### Quick Actions")
        if st.button("🔄 Refresh Leaders"):
            try:
                state.load_leaders()
            except PersistenceError as e:
                st.error(f"❌ {e}")
            st.rerun()

        st.markdown("### Status")
        if is_admin():
            st.success(f"✅ Signed in as {provider.session.identifier}")
        else:
            st.info("Viewing as guest")

        if settings.backend == "memory":
            st.warning("In-memory store: data is lost on restart")

    return view


# ================== LEADERBOARD ==================

def show_leaderboard(state: ScoreboardState, view: ViewState):
    """Ranked table with CSV download"""
    st.subheader("🏆 Team Leaderboard")

    teams = state.teams
    if len(teams) == 0:
        st.warning("No teams yet")
        return

    standings = rank_teams(teams, view)

    if view.search_term or view.leader_filter != ALL_LEADERS:
        st.info(f"Showing {len(standings)} of {len(teams)} teams")
    if view.date_filter:
        st.caption(f"Books recorded on {view.date_filter}")

    display_df = standings_frame(standings)
    styled_df = display_df.style.format({
        "Total Books": format_books,
        "Total Points": "{:.2f}",
    })
    st.dataframe(styled_df, use_container_width=True, hide_index=True)

    st.download_button(
        label="📥 Export CSV",
        data=export_csv(standings),
        file_name=export_filename(),
        mime="text/csv"
    )

    with st.expander("Point values"):
        st.dataframe(
            pd.DataFrame({"Book": list(BOOK_VALUES), "Points": list(BOOK_VALUES.values())}),
            hide_index=True,
        )


def show_charts(state: ScoreboardState, view: ViewState):
    """Top-10 bar chart and category breakdown"""
    st.subheader("📊 Campaign Charts")

    standings = rank_teams(state.teams, view)
    if len(standings) == 0:
        st.warning("No teams match the current filters")
        return

    metric = view.sort_key
    label = "Points" if metric == "points" else "Books"

    col1, col2 = st.columns(2)

    with col1:
        top = chart_rows(standings)
        fig = px.bar(
            top,
            x="name",
            y=metric,
            title=f"Top {len(top)} Teams by {label}",
            labels={"name": "Team", metric: label},
            color_discrete_sequence=COLORS,
        )
        st.plotly_chart(fig, use_container_width=True)

    with col2:
        distribution = book_distribution(standings)
        if len(distribution) == 0:
            st.info("No books recorded yet")
        else:
            fig = px.pie(
                distribution,
                names="name",
                values="value",
                title="Books by Category",
                color_discrete_sequence=COLORS,
            )
            st.plotly_chart(fig, use_container_width=True)


# ================== ADMIN PANEL ==================

def show_admin_panel(state: ScoreboardState, service: TeamManagementService, provider):
    """Login gate and admin tools"""
    st.subheader("⚙️ Admin Panel")

    if not is_admin():
        show_login(provider)
        return

    if st.button("🚪 Logout"):
        provider.end_session()
        st.rerun()

    orphaned = service.orphaned_teams()
    if orphaned:
        names = ", ".join(f"{team.name} ({team.leader or 'no leader'})" for team in orphaned)
        st.warning(f"⚠️ Teams whose leader is not on the roster: {names}")

    st.markdown("---")
    show_add_team(state, service)
    show_edit_team(state, service)
    show_quick_adjust(state, service)
    show_bulk_edit(state, service)
    show_update_by_date(state, service)
    show_leader_manager(state, service)


def show_login(provider):
    with st.form("admin_login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        if st.form_submit_button("Admin Login", type="primary"):
            try:
                provider.authenticate(email, password)
            except AuthError as e:
                st.error(str(e))
                return
            st.rerun()

    st.info("Sign in to manage teams, scores and leaders")


def book_inputs(prefix: str, counts=None):
    """Six number inputs, one per category"""
    counts = clean_counts(counts)
    values = {}
    columns = st.columns(len(BOOK_CATEGORIES))
    for column, category in zip(columns, BOOK_CATEGORIES):
        with column:
            values[category] = st.number_input(
                f"{category} ({BOOK_VALUES[category]} pts)",
                min_value=0,
                step=1,
                value=counts[category],
                key=f"{prefix}_{category}",
            )
    return values


def show_add_team(state: ScoreboardState, service: TeamManagementService):
    with st.expander("➕ Add Team"):
        with st.form("add_team_form", clear_on_submit=True):
            name = st.text_input("Team Name*")
            leaders = state.leader_names
            leader = st.selectbox("BV Leader*", leaders, index=0 if leaders else None)
            books = book_inputs("add_team")

            if st.form_submit_button("Add Team", type="primary"):
                run_action(
                    lambda: service.save_team(name, leader or "", books),
                    f"✅ Team '{name.strip()}' added",
                )


def team_options(state: ScoreboardState):
    teams = sorted(state.teams, key=lambda team: team.name.lower())
    return {team.id: team for team in teams}


def show_edit_team(state: ScoreboardState, service: TeamManagementService):
    with st.expander("✏️ Edit or Delete Team"):
        options = team_options(state)
        if not options:
            st.info("No teams yet")
            return

        team_id = st.selectbox("Team", list(options), format_func=lambda tid: options[tid].name,
                               key="edit_team_select")
        team = options[team_id]

        with st.form("edit_team_form"):
            name = st.text_input("Team Name*", value=team.name)
            leaders = state.leader_names
            if team.leader and team.leader not in leaders:
                leaders = [team.leader] + leaders
            leader = st.selectbox("BV Leader*", leaders,
                                  index=leaders.index(team.leader) if team.leader in leaders else 0)
            books = book_inputs(f"edit_{team_id}", team.books)

            if st.form_submit_button("Update Team", type="primary"):
                run_action(
                    lambda: service.save_team(name, leader or "", books, team_id=team_id),
                    f"✅ Team '{name.strip()}' updated",
                )

        confirm = st.checkbox(f"Yes, delete '{team.name}'", key=f"confirm_delete_{team_id}")
        if st.button("🗑️ Delete Team", disabled=not confirm):
            run_action(lambda: service.delete_team(team_id), f"Team '{team.name}' deleted")


def show_quick_adjust(state: ScoreboardState, service: TeamManagementService):
    with st.expander("🔢 Quick Adjust"):
        options = team_options(state)
        if not options:
            st.info("No teams yet")
            return

        team_id = st.selectbox("Team", list(options), format_func=lambda tid: options[tid].name,
                               key="adjust_team_select")
        team = state.find_team(team_id)
        counts = clean_counts(team.books)

        for category in BOOK_CATEGORIES:
            col1, col2, col3 = st.columns([2, 1, 1])
            with col1:
                st.write(f"**{category}**: {counts[category]}")
            with col2:
                if st.button("➖", key=f"dec_{team_id}_{category}"):
                    if run_action(lambda: service.adjust_book_count(team_id, category, -1)) is not None:
                        st.rerun()
            with col3:
                if st.button("➕", key=f"inc_{team_id}_{category}"):
                    if run_action(lambda: service.adjust_book_count(team_id, category, 1)) is not None:
                        st.rerun()


def books_editor_frame(teams, counts_for):
    rows = []
    for team in teams:
        row = {"Team": team.name}
        row.update(counts_for(team))
        rows.append(row)
    return pd.DataFrame(rows, index=[team.id for team in teams], columns=["Team"] + BOOK_CATEGORIES)


def edited_counts(edited: pd.DataFrame):
    return {
        team_id: {category: row[category] for category in BOOK_CATEGORIES}
        for team_id, row in edited.iterrows()
    }


def show_bulk_edit(state: ScoreboardState, service: TeamManagementService):
    with st.expander("📝 Edit All Teams"):
        teams = list(team_options(state).values())
        if not teams:
            st.info("No teams yet")
            return

        frame = books_editor_frame(teams, lambda team: clean_counts(team.books))
        edited = st.data_editor(frame, disabled=["Team"], hide_index=True, key="bulk_edit_editor")

        if st.button("Update All Teams", type="primary"):
            run_action(
                lambda: service.bulk_edit_books(edited_counts(edited)),
                "✅ Teams updated",
            )


def show_update_by_date(state: ScoreboardState, service: TeamManagementService):
    with st.expander("📅 Update Scores by Date"):
        teams = list(team_options(state).values())
        if not teams:
            st.info("No teams yet")
            return

        day = st.date_input("Score date", date.today(), key="score_date").isoformat()
        frame = books_editor_frame(teams, lambda team: clean_counts({}))
        edited = st.data_editor(frame, disabled=["Team"], hide_index=True, key="score_date_editor")

        if st.button(f"Update Scores for {day}", type="primary"):
            updated = run_action(lambda: service.update_scores_by_date(day, edited_counts(edited)))
            if updated is not None:
                st.success(f"✅ Scores recorded for {updated} teams on {day}")


def show_leader_manager(state: ScoreboardState, service: TeamManagementService):
    with st.expander("👥 Manage Leaders"):
        with st.form("add_leader_form", clear_on_submit=True):
            new_leader = st.text_input("Leader name")
            if st.form_submit_button("Add Leader"):
                run_action(lambda: service.add_leader(new_leader), f"✅ Leader '{new_leader.strip()}' added")

        leaders = state.leader_names
        if not leaders:
            st.info("No leaders on the roster")
            return

        for leader in leaders:
            col1, col2 = st.columns([4, 1])
            with col1:
                st.write(leader)
            with col2:
                if st.button("Remove", key=f"remove_leader_{leader}"):
                    removed = run_action(lambda: service.delete_leader(leader))
                    if removed is False:
                        st.warning(f"'{leader}' was already removed")
                    elif removed:
                        logger.info(f"Leader '{leader}' removed from dashboard")
                        st.rerun()


if __name__ == "__main__":
    main()
