"""Application state and the event handlers that drive it.

All state lives in one AppState, reached only through the Context each
handler is given. The Dispatcher runs one handler at a time; a handler that
needs several requests awaits them together before touching state, so no
result can land in a view it was not fetched for.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Generic, TypeVar

from tickit.api.client import IssueTracker
from tickit.config import TICKIT_DEFAULTS
from tickit.errors import InternalError, TrackerError
from tickit.model.issue import Comment, Issue, Transition, UpdateIssueData

logger = logging.getLogger(__name__)

T = TypeVar("T")


class View(Enum):
    LIST = auto()
    DETAIL = auto()
    TRANSITIONS = auto()
    CREATE_TICKET = auto()


@dataclass
class SelectableList(Generic[T]):
    """Rows with a focus cursor and a set of selected indices."""

    items: list[T] = field(default_factory=list)
    focused: int | None = None
    selected: set[int] = field(default_factory=set)

    def set_items(self, items: Iterable[T]) -> None:
        """Replace all rows; focus moves to the first one and selection resets."""
        self.items = list(items)
        self.selected = set()
        self.focused = 0 if self.items else None

    def clear(self) -> None:
        self.set_items([])

    def move_up(self) -> None:
        if not self.items:
            return
        self.focused = 0 if self.focused is None else max(0, self.focused - 1)

    def move_down(self) -> None:
        if not self.items:
            return
        if self.focused is None:
            self.focused = 0
        else:
            self.focused = min(len(self.items) - 1, self.focused + 1)

    def toggle_selection(self) -> None:
        if self.focused is not None:
            self.selected ^= {self.focused}

    @property
    def focused_item(self) -> T | None:
        if self.focused is None or self.focused >= len(self.items):
            return None
        return self.items[self.focused]


@dataclass
class AppState:
    view: View = View.LIST
    issues: SelectableList[Issue] = field(default_factory=SelectableList)
    detail_issue: Issue | None = None
    comments: list[Comment] = field(default_factory=list)
    transitions: SelectableList[Transition] = field(default_factory=SelectableList)
    list_loading: bool = False
    detail_loading: bool = False
    transitions_loading: bool = False
    error: str | None = None
    status_message: str | None = None

    def clear_detail(self) -> None:
        """Forget everything tied to the issue that was open."""
        self.detail_issue = None
        self.comments = []
        self.transitions.clear()
        self.detail_loading = False
        self.transitions_loading = False


@dataclass
class Context:
    """What every handler gets: the state plus the means to change it."""

    state: AppState
    tracker: IssueTracker
    jql: str = TICKIT_DEFAULTS["jql"]
    page_size: int = TICKIT_DEFAULTS["page-size"]
    instance: str = ""
    on_change: Callable[[], None] | None = None

    def changed(self) -> None:
        if self.on_change is not None:
            self.on_change()


class Event(Enum):
    MOVE_UP = auto()
    MOVE_DOWN = auto()
    SELECT = auto()
    BACK = auto()
    TOGGLE_SELECTION = auto()
    REFRESH = auto()
    SHOW_TRANSITIONS = auto()
    START_PROGRESS = auto()
    RESOLVE = auto()
    ASSIGN_TO_ME = auto()
    ADD_COMMENT = auto()
    CREATE_TICKET = auto()


def browse_url(instance: str, key: str) -> str:
    return f"https://{instance}/browse/{key}"


def _or_fallback(result, fallback, what: str):
    """Unwrap one result of a gather(return_exceptions=True)."""
    if isinstance(result, TrackerError):
        logger.warning("%s failed: %s", what, result)
        return fallback
    if isinstance(result, BaseException):
        raise result
    return result


# --- List ---


async def refresh(ctx: Context, text: str | None = None) -> None:
    """Reload the issue list. Focus and selection start over."""
    state = ctx.state
    state.list_loading = True
    ctx.changed()
    try:
        result = await ctx.tracker.search(ctx.jql, 0, ctx.page_size)
    except TrackerError as exc:
        logger.warning("loading tickets failed: %s", exc)
        state.error = f"Failed to load tickets: {exc}"
    else:
        state.issues.set_items(result.issues)
        state.error = None
    finally:
        state.list_loading = False


def _cursor_list(state: AppState) -> SelectableList | None:
    if state.view is View.LIST:
        return state.issues
    if state.view is View.TRANSITIONS:
        return state.transitions
    return None


async def move_up(ctx: Context, text: str | None = None) -> None:
    rows = _cursor_list(ctx.state)
    if rows is not None:
        rows.move_up()


async def move_down(ctx: Context, text: str | None = None) -> None:
    rows = _cursor_list(ctx.state)
    if rows is not None:
        rows.move_down()


async def toggle_selection(ctx: Context, text: str | None = None) -> None:
    if ctx.state.view is View.LIST:
        ctx.state.issues.toggle_selection()


async def create_ticket(ctx: Context, text: str | None = None) -> None:
    state = ctx.state
    if state.view is not View.LIST:
        return
    state.view = View.CREATE_TICKET
    state.status_message = str(InternalError("ticket creation form is not implemented"))


# --- Detail ---


async def open_detail(ctx: Context) -> None:
    """Show the focused issue, fetching it and its comments side by side.

    The list row stands in if the issue cannot be fetched, and comments
    default to none.
    """
    state = ctx.state
    row = state.issues.focused_item
    if row is None:
        return
    state.clear_detail()
    state.view = View.DETAIL
    state.detail_issue = row
    state.detail_loading = True
    state.error = None
    ctx.changed()
    try:
        issue, comments = await asyncio.gather(
            ctx.tracker.get_issue(row.key),
            ctx.tracker.list_comments(row.key),
            return_exceptions=True,
        )
        state.detail_issue = _or_fallback(issue, row, f"fetching {row.key}")
        state.comments = _or_fallback(comments, [], f"fetching comments for {row.key}")
    finally:
        state.detail_loading = False


async def back(ctx: Context, text: str | None = None) -> None:
    state = ctx.state
    if state.view is View.LIST:
        return
    state.view = View.LIST
    state.error = None
    state.clear_detail()


async def _refetch_issue(ctx: Context, key: str) -> None:
    """Replace the open issue with a fresh copy; keep the old one on failure."""
    try:
        ctx.state.detail_issue = await ctx.tracker.get_issue(key)
    except TrackerError as exc:
        logger.warning("refetching %s failed: %s", key, exc)


async def assign_to_me(ctx: Context, text: str | None = None) -> None:
    state = ctx.state
    if state.view is not View.DETAIL or state.detail_issue is None:
        return
    key = state.detail_issue.key
    try:
        me = await ctx.tracker.get_myself()
        await ctx.tracker.update_issue(
            key, UpdateIssueData({"assignee": {"accountId": me.account_id}})
        )
    except TrackerError as exc:
        state.error = f"Assign failed: {exc}"
        return
    state.error = None
    state.status_message = f"Assigned {key} to {me.display_name}"
    await _refetch_issue(ctx, key)


async def add_comment(ctx: Context, text: str | None = None) -> None:
    state = ctx.state
    if state.view is not View.DETAIL or state.detail_issue is None or not text:
        return
    key = state.detail_issue.key
    try:
        comment = await ctx.tracker.add_comment(key, text)
    except TrackerError as exc:
        state.error = f"Comment failed: {exc}"
        return
    state.error = None
    state.status_message = f"Commented on {key}"
    try:
        state.comments = await ctx.tracker.list_comments(key)
    except TrackerError as exc:
        logger.warning("reloading comments for %s failed: %s", key, exc)
        state.comments = [*state.comments, comment]


# --- Transitions ---


async def show_transitions(ctx: Context, text: str | None = None) -> None:
    state = ctx.state
    if state.view is not View.DETAIL or state.detail_issue is None:
        return
    key = state.detail_issue.key
    state.view = View.TRANSITIONS
    state.transitions.clear()
    state.transitions_loading = True
    ctx.changed()
    try:
        state.transitions.set_items(await ctx.tracker.list_transitions(key))
    except TrackerError as exc:
        logger.warning("loading transitions for %s failed: %s", key, exc)
        state.error = f"Failed to load transitions: {exc}"
    finally:
        state.transitions_loading = False


async def _after_transition(ctx: Context, key: str, transition: Transition) -> None:
    state = ctx.state
    state.view = View.DETAIL
    state.transitions.clear()
    state.error = None
    state.status_message = f"{key} moved to {transition.to_status or transition.name}"
    await _refetch_issue(ctx, key)
    await refresh(ctx)


async def confirm_transition(ctx: Context) -> None:
    """Run the focused transition. On failure nothing but the error changes."""
    state = ctx.state
    transition = state.transitions.focused_item
    if transition is None or state.detail_issue is None:
        return
    key = state.detail_issue.key
    try:
        await ctx.tracker.execute_transition(key, transition.id)
    except TrackerError as exc:
        logger.warning("transition %s on %s failed: %s", transition.name, key, exc)
        state.error = f"Transition failed: {exc}"
        return
    await _after_transition(ctx, key, transition)


def _starts_progress(t: Transition) -> bool:
    return "start" in t.name.lower() or "progress" in t.to_status.lower()


def _resolves(t: Transition) -> bool:
    name = t.name.lower()
    return "resolve" in name or "done" in name or "done" in t.to_status.lower()


async def _quick_transition(ctx: Context, matches: Callable[[Transition], bool]) -> None:
    """Find the first offered transition that matches and run it."""
    state = ctx.state
    if state.view is not View.DETAIL or state.detail_issue is None:
        return
    key = state.detail_issue.key
    try:
        offered = await ctx.tracker.list_transitions(key)
        transition = next((t for t in offered if matches(t)), None)
        if transition is None:
            state.error = f"No matching transition for {key}"
            return
        await ctx.tracker.execute_transition(key, transition.id)
    except TrackerError as exc:
        state.error = f"Transition failed: {exc}"
        return
    await _after_transition(ctx, key, transition)


async def start_progress(ctx: Context, text: str | None = None) -> None:
    await _quick_transition(ctx, _starts_progress)


async def resolve(ctx: Context, text: str | None = None) -> None:
    await _quick_transition(ctx, _resolves)


async def select(ctx: Context, text: str | None = None) -> None:
    if ctx.state.view is View.LIST:
        await open_detail(ctx)
    elif ctx.state.view is View.TRANSITIONS:
        await confirm_transition(ctx)


HANDLERS: dict[Event, Callable[[Context, str | None], Awaitable[None]]] = {
    Event.MOVE_UP: move_up,
    Event.MOVE_DOWN: move_down,
    Event.SELECT: select,
    Event.BACK: back,
    Event.TOGGLE_SELECTION: toggle_selection,
    Event.REFRESH: refresh,
    Event.SHOW_TRANSITIONS: show_transitions,
    Event.START_PROGRESS: start_progress,
    Event.RESOLVE: resolve,
    Event.ASSIGN_TO_ME: assign_to_me,
    Event.ADD_COMMENT: add_comment,
    Event.CREATE_TICKET: create_ticket,
}


class Dispatcher:
    """Runs handlers one at a time.

    Events that arrive while a handler is still awaiting the tracker are
    dropped rather than queued.
    """

    def __init__(self, ctx: Context, on_change: Callable[[], None] | None = None):
        self.ctx = ctx
        if on_change is not None:
            ctx.on_change = on_change
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def dispatch(self, event: Event, text: str | None = None) -> bool:
        """Handle one event. Returns False if it was dropped."""
        if self._busy:
            logger.debug("busy, dropping %s", event.name)
            return False
        self._busy = True
        self.ctx.state.status_message = None
        try:
            await HANDLERS[event](self.ctx, text)
        finally:
            self._busy = False
            self.ctx.changed()
        return True
