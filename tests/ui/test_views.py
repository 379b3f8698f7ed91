"""Tests for the pure view renderers."""

from dataclasses import replace
from datetime import timedelta

from rich.console import Console

from tests.fakes import CREATED, TRANSITIONS, make_comment, make_issue
from tickit.model.issue import User
from tickit.state import AppState, View
from tickit.ui.views import render, status_line


def plain(renderable) -> str:
    console = Console(width=120, record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


def _listed(issues) -> AppState:
    state = AppState()
    state.issues.set_items(issues)
    return state


def test_list_loading():
    """An empty list that is loading says so."""
    state = AppState(list_loading=True)
    assert "Loading tickets..." in plain(render(state))


def test_list_empty():
    """An empty list that is not loading says there is nothing."""
    assert "No tickets" in plain(render(AppState()))


def test_list_rows(issues):
    """Each issue renders as a row with key, status and summary."""
    out = plain(render(_listed(issues)))
    assert "PROJ-1" in out
    assert "Fix login redirect" in out
    assert "In Progress" in out
    assert "Unassigned" in out


def test_list_marks_selected(issues):
    """Selected rows carry a star."""
    state = _listed(issues)
    state.issues.selected = {1}
    lines = plain(render(state)).splitlines()
    row = next(line for line in lines if "PROJ-2" in line)
    assert row.lstrip().startswith("*")
    assert "*" not in next(line for line in lines if "PROJ-1" in line)


def test_list_loading_keeps_rows(issues):
    """Refreshing a loaded list keeps showing the old rows."""
    state = _listed(issues)
    state.list_loading = True
    assert "PROJ-1" in plain(render(state))


def test_detail(issues):
    """Detail shows the header, description and comments."""
    state = AppState(view=View.DETAIL, detail_issue=issues[0])
    state.comments = [make_comment("1", "First!", User("u1", "Ada"))]
    out = plain(render(state))
    assert "PROJ-1" in out
    assert "Status: To Do" in out
    assert "No description" in out
    assert "Comments (1)" in out
    assert "Ada" in out
    assert "First!" in out


def test_detail_edited_comment(issues):
    """Comments updated after creation are marked edited."""
    comment = replace(make_comment("1", "Changed"), updated=CREATED + timedelta(hours=1))
    state = AppState(view=View.DETAIL, detail_issue=issues[0], comments=[comment])
    assert "(edited)" in plain(render(state))


def test_detail_loading_and_empty(issues):
    """Comments say loading until they arrive, then none."""
    state = AppState(view=View.DETAIL, detail_issue=issues[0], detail_loading=True)
    assert "Loading comments..." in plain(render(state))
    state.detail_loading = False
    assert "No comments" in plain(render(state))


def test_detail_without_issue():
    """Detail with nothing open does not crash."""
    assert "No ticket selected" in plain(render(AppState(view=View.DETAIL)))


def test_transitions():
    """Transitions list with a pointer on the focused one."""
    state = AppState(view=View.TRANSITIONS, detail_issue=make_issue("PROJ-1"))
    state.transitions.set_items(TRANSITIONS)
    out = plain(render(state))
    assert "Move PROJ-1 to:" in out
    assert "> 1. Start Progress" in out
    assert "→ In Progress" in out
    assert "  2. Done" in out


def test_transitions_loading_and_empty():
    """The transitions view says when it is loading or empty."""
    state = AppState(view=View.TRANSITIONS, detail_issue=make_issue("PROJ-1"))
    state.transitions_loading = True
    assert "Loading transitions..." in plain(render(state))
    state.transitions_loading = False
    assert "No transitions available" in plain(render(state))


def test_create_placeholder():
    """The create view points at the CLI."""
    assert "tickit issue create" in plain(render(AppState(view=View.CREATE_TICKET)))


def test_status_line_priority():
    """Errors beat status messages, which beat hints."""
    state = AppState()
    assert "q quit" in status_line(state).plain
    state.status_message = "Saved"
    assert status_line(state).plain == "Saved"
    state.error = "Boom"
    assert status_line(state).plain == "Boom"
