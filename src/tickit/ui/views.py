"""Pure functions rendering AppState as rich renderables."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from tickit.model.issue import Comment, Issue, Priority, StatusCategory
from tickit.state import AppState, View

CATEGORY_STYLES = {
    StatusCategory.TODO: "blue",
    StatusCategory.IN_PROGRESS: "yellow",
    StatusCategory.DONE: "green",
}

PRIORITY_STYLES = {
    Priority.LOWEST: "dim",
    Priority.LOW: "dim",
    Priority.MEDIUM: "",
    Priority.HIGH: "bold",
    Priority.HIGHEST: "bold red",
    Priority.CRITICAL: "bold reverse red",
}

TIME_FORMAT = "%Y-%m-%d %H:%M"

HINTS = {
    View.LIST: "enter open  space select  r refresh  n new  q quit",
    View.DETAIL: "t transitions  p start  x resolve  a assign  c comment  o browser  esc back",
    View.TRANSITIONS: "enter apply  esc back",
    View.CREATE_TICKET: "esc back",
}


def status_text(issue: Issue) -> Text:
    return Text(issue.status.name, style=CATEGORY_STYLES[issue.status.category])


def assignee_name(issue: Issue) -> str:
    return issue.assignee.display_name if issue.assignee else "Unassigned"


def render_list(state: AppState) -> RenderableType:
    if state.list_loading and not state.issues.items:
        return Text("Loading tickets...", style="dim")
    if not state.issues.items:
        return Text("No tickets", style="dim")

    table = Table(expand=True, box=None, show_edge=False, pad_edge=False)
    table.add_column("", width=1)
    table.add_column("Key", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Priority", no_wrap=True)
    table.add_column("Assignee", no_wrap=True)
    table.add_column("Summary", ratio=1)
    for i, issue in enumerate(state.issues.items):
        table.add_row(
            "*" if i in state.issues.selected else "",
            issue.key,
            status_text(issue),
            Text(issue.priority.label, style=PRIORITY_STYLES[issue.priority]),
            assignee_name(issue),
            issue.summary,
            style="reverse" if i == state.issues.focused else None,
        )
    return table


def _comment(comment: Comment) -> Text:
    text = Text()
    text.append(comment.author.display_name, style="bold")
    text.append(f"  {comment.created.strftime(TIME_FORMAT)}", style="dim")
    if comment.updated and comment.updated != comment.created:
        text.append(" (edited)", style="dim")
    text.append("\n")
    text.append(comment.body or "(empty)")
    return text


def render_detail(state: AppState) -> RenderableType:
    issue = state.detail_issue
    if issue is None:
        return Text("No ticket selected", style="dim")

    header = Text()
    header.append(issue.key, style="bold")
    header.append(f"  {issue.summary}\n")
    header.append("Status: ")
    header.append_text(status_text(issue))
    header.append(f"   Priority: {issue.priority.label}")
    header.append(f"   Type: {issue.issue_type}")
    header.append(f"   Assignee: {assignee_name(issue)}\n")
    header.append(
        f"Created {issue.created.strftime(TIME_FORMAT)}   "
        f"Updated {issue.updated.strftime(TIME_FORMAT)}",
        style="dim",
    )

    parts: list[RenderableType] = [header, Text()]
    if issue.description:
        parts.append(Text(issue.description))
    else:
        parts.append(Text("No description", style="dim"))
    parts.append(Text())
    if state.detail_loading:
        parts.append(Text("Loading comments...", style="dim"))
    elif not state.comments:
        parts.append(Text("No comments", style="dim"))
    else:
        parts.append(Text(f"Comments ({len(state.comments)})", style="bold underline"))
        for comment in state.comments:
            parts.append(_comment(comment))
    return Group(*parts)


def render_transitions(state: AppState) -> RenderableType:
    key = state.detail_issue.key if state.detail_issue else ""
    lines = [Text(f"Move {key} to:", style="bold")]
    if state.transitions_loading:
        lines.append(Text("Loading transitions...", style="dim"))
    elif not state.transitions.items:
        lines.append(Text("No transitions available", style="dim"))
    for i, transition in enumerate(state.transitions.items):
        focused = i == state.transitions.focused
        line = Text(f"{'>' if focused else ' '} {i + 1}. {transition.name}")
        if transition.to_status and transition.to_status != transition.name:
            line.append(f"  → {transition.to_status}", style="dim")
        if focused:
            line.stylize("reverse")
        lines.append(line)
    return Group(*lines)


def render_create(state: AppState) -> RenderableType:
    return Text("Creating tickets from here is not available yet. Use `tickit issue create`.")


RENDERERS = {
    View.LIST: render_list,
    View.DETAIL: render_detail,
    View.TRANSITIONS: render_transitions,
    View.CREATE_TICKET: render_create,
}


def render(state: AppState) -> RenderableType:
    return RENDERERS[state.view](state)


def status_line(state: AppState) -> Text:
    """Error first, then the last status message, else key hints."""
    if state.error:
        return Text(state.error, style="bold red")
    if state.status_message:
        return Text(state.status_message, style="green")
    return Text(HINTS[state.view], style="dim")
