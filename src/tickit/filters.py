"""Client-side filtering of loaded issues."""

from __future__ import annotations

from tickit.model.issue import Issue, StatusCategory


def by_status_category(issues: list[Issue], category: StatusCategory) -> list[Issue]:
    return [i for i in issues if i.status.category is category]


def by_assignee(issues: list[Issue], who: str) -> list[Issue]:
    """Match an exact account id, or a display name ignoring case."""
    needle = who.lower()
    return [
        i
        for i in issues
        if i.assignee is not None
        and (i.assignee.account_id == who or needle in i.assignee.display_name.lower())
    ]


def by_text(issues: list[Issue], query: str) -> list[Issue]:
    """Case-insensitive substring match on summary or key."""
    needle = query.lower()
    return [i for i in issues if needle in i.summary.lower() or needle in i.key.lower()]
