"""Main Textual application for tickit."""

from __future__ import annotations

import webbrowser

from textual.app import App, ComposeResult
from textual.containers import Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Footer, Input, Static

from tickit.api.client import IssueTracker
from tickit.config import TICKIT_DEFAULTS
from tickit.state import AppState, Context, Dispatcher, Event, View, browse_url
from tickit.ui.views import render, status_line


class CommentScreen(ModalScreen[str | None]):
    """Modal asking for the text of a new comment."""

    CSS = """
    CommentScreen {
        align: center middle;
    }
    #dialog {
        width: 80;
        height: auto;
        border: thick $primary;
        background: $surface;
        padding: 1 2;
    }
    #message {
        margin-bottom: 1;
    }
    """

    BINDINGS = [("escape", "cancel", "Cancel")]

    def __init__(self, key: str):
        super().__init__()
        self.key = key

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog"):
            yield Static(f"Comment on {self.key} (enter to send, esc to cancel)", id="message")
            yield Input(placeholder="Write a comment...", id="comment")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip() or None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class TickitApp(App):
    """Keyboard-driven issue browser."""

    CSS = """
    #status {
        height: 1;
        padding: 0 1;
    }
    #content {
        padding: 0 1;
    }
    """

    TITLE = "tickit"
    BINDINGS = [
        ("q", "quit", "Quit"),
        ("ctrl+c", "quit", "Quit"),
        ("escape", "back", "Back"),
        ("k,up", "up", "Up"),
        ("j,down", "down", "Down"),
        ("enter", "select", "Open"),
        ("space", "toggle", "Select"),
        ("r", "refresh", "Refresh"),
        ("t", "transitions", "Transitions"),
        ("p", "start_progress", "Start"),
        ("x", "resolve", "Resolve"),
        ("a", "assign", "Assign to me"),
        ("c", "comment", "Comment"),
        ("n", "new_ticket", "New"),
        ("o", "open_browser", "Browser"),
    ]

    def __init__(
        self,
        tracker: IssueTracker,
        *,
        jql: str = TICKIT_DEFAULTS["jql"],
        page_size: int = TICKIT_DEFAULTS["page-size"],
        instance: str = "",
    ):
        super().__init__()
        self.app_state = AppState()
        self.dispatcher = Dispatcher(
            Context(self.app_state, tracker, jql=jql, page_size=page_size, instance=instance),
            on_change=self.refresh_view,
        )
        self.tracker = tracker
        self.instance = instance

    def compose(self) -> ComposeResult:
        # Kept by reference so repaints work while a modal is on top
        self.status_view = Static(id="status")
        self.content_view = Static(id="content")
        yield self.status_view
        # Unfocusable, so arrow keys reach the app instead of scrolling
        with VerticalScroll(can_focus=False):
            yield self.content_view
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = self.instance
        self.refresh_view()
        self.run_event(Event.REFRESH)

    async def action_quit(self) -> None:
        """Stop pending requests, close the tracker and quit."""
        self.workers.cancel_group(self, "events")
        await self.tracker.aclose()
        self.exit()

    def refresh_view(self) -> None:
        """Repaint from the current state."""
        self.status_view.update(status_line(self.app_state))
        self.content_view.update(render(self.app_state))

    def run_event(self, event: Event, text: str | None = None) -> None:
        """Hand an event to the dispatcher without blocking the UI."""
        self.run_worker(self.dispatcher.dispatch(event, text), group="events")

    def action_back(self) -> None:
        self.run_event(Event.BACK)

    def action_up(self) -> None:
        self.run_event(Event.MOVE_UP)

    def action_down(self) -> None:
        self.run_event(Event.MOVE_DOWN)

    def action_select(self) -> None:
        self.run_event(Event.SELECT)

    def action_toggle(self) -> None:
        self.run_event(Event.TOGGLE_SELECTION)

    def action_refresh(self) -> None:
        self.run_event(Event.REFRESH)

    def action_transitions(self) -> None:
        self.run_event(Event.SHOW_TRANSITIONS)

    def action_start_progress(self) -> None:
        self.run_event(Event.START_PROGRESS)

    def action_resolve(self) -> None:
        self.run_event(Event.RESOLVE)

    def action_assign(self) -> None:
        self.run_event(Event.ASSIGN_TO_ME)

    def action_new_ticket(self) -> None:
        self.run_event(Event.CREATE_TICKET)

    def action_comment(self) -> None:
        issue = self.app_state.detail_issue
        if self.app_state.view is not View.DETAIL or issue is None:
            return
        self.push_screen(CommentScreen(issue.key), self._on_comment)

    def _on_comment(self, text: str | None) -> None:
        if text:
            self.run_event(Event.ADD_COMMENT, text)

    def action_open_browser(self) -> None:
        issue = self.app_state.detail_issue or self.app_state.issues.focused_item
        if issue is None or not self.instance:
            return
        webbrowser.open(browse_url(self.instance, issue.key))
