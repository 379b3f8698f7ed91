"""Tests for the Textual app."""

import pytest

from tickit.state import View
from tickit.ui import CommentScreen, TickitApp


@pytest.fixture
def app(tracker):
    return TickitApp(tracker, jql="project = PROJ", page_size=10, instance="example.atlassian.net")


async def settle(app, pilot):
    """Let queued events run to completion."""
    await pilot.pause()
    await app.workers.wait_for_complete()
    await pilot.pause()


@pytest.mark.asyncio
async def test_loads_list_on_mount(app, tracker):
    """Mounting the app searches with the configured query."""
    async with app.run_test() as pilot:
        await settle(app, pilot)
        assert [i.key for i in app.app_state.issues.items] == ["PROJ-1", "PROJ-2", "PROJ-3"]
        assert tracker.called("search")[0] == ("search", "project = PROJ", 0, 10)


@pytest.mark.asyncio
async def test_navigate_and_open(app):
    """j moves down and enter opens the focused issue."""
    async with app.run_test() as pilot:
        await settle(app, pilot)
        await pilot.press("j")
        await settle(app, pilot)
        await pilot.press("enter")
        await settle(app, pilot)
        assert app.app_state.view is View.DETAIL
        assert app.app_state.detail_issue.key == "PROJ-2"


@pytest.mark.asyncio
async def test_escape_goes_back(app):
    """Escape returns from detail to the list."""
    async with app.run_test() as pilot:
        await settle(app, pilot)
        await pilot.press("enter")
        await settle(app, pilot)
        await pilot.press("escape")
        await settle(app, pilot)
        assert app.app_state.view is View.LIST
        assert app.app_state.detail_issue is None


@pytest.mark.asyncio
async def test_transition_from_keyboard(app, tracker):
    """t lists transitions and enter applies the focused one."""
    async with app.run_test() as pilot:
        await settle(app, pilot)
        await pilot.press("enter")
        await settle(app, pilot)
        await pilot.press("t")
        await settle(app, pilot)
        assert app.app_state.view is View.TRANSITIONS
        await pilot.press("enter")
        await settle(app, pilot)
        assert app.app_state.view is View.DETAIL
        assert app.app_state.detail_issue.status.name == "In Progress"
        assert tracker.called("execute_transition")[0][2] == "11"


@pytest.mark.asyncio
async def test_comment_modal(app, tracker):
    """c opens the comment modal and enter posts the comment."""
    async with app.run_test() as pilot:
        await settle(app, pilot)
        await pilot.press("enter")
        await settle(app, pilot)
        await pilot.press("c")
        await pilot.pause()
        assert isinstance(app.screen, CommentScreen)
        await pilot.press(*"hello")
        await pilot.press("enter")
        await settle(app, pilot)
        assert not isinstance(app.screen, CommentScreen)
        assert tracker.called("add_comment") == [("add_comment", "PROJ-1", "hello")]
        assert app.app_state.comments[-1].body == "hello"


@pytest.mark.asyncio
async def test_comment_modal_cancel(app, tracker):
    """Escape in the comment modal posts nothing."""
    async with app.run_test() as pilot:
        await settle(app, pilot)
        await pilot.press("enter")
        await settle(app, pilot)
        await pilot.press("c")
        await pilot.pause()
        await pilot.press("escape")
        await settle(app, pilot)
        assert not isinstance(app.screen, CommentScreen)
        assert app.app_state.view is View.DETAIL
        assert tracker.called("add_comment") == []


@pytest.mark.asyncio
async def test_comment_needs_detail(app):
    """c does nothing from the list."""
    async with app.run_test() as pilot:
        await settle(app, pilot)
        await pilot.press("c")
        await pilot.pause()
        assert not isinstance(app.screen, CommentScreen)


@pytest.mark.asyncio
async def test_open_browser(app, monkeypatch):
    """o opens the focused issue in a browser."""
    opened = []
    monkeypatch.setattr("tickit.ui.app.webbrowser.open", opened.append)
    async with app.run_test() as pilot:
        await settle(app, pilot)
        await pilot.press("o")
        assert opened == ["https://example.atlassian.net/browse/PROJ-1"]


@pytest.mark.asyncio
async def test_closes_tracker_on_exit(app, tracker):
    """Quitting the app closes the tracker."""
    async with app.run_test() as pilot:
        await settle(app, pilot)
        await pilot.press("q")
    assert tracker.closed
