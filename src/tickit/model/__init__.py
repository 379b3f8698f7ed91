"""Domain model for tickit."""

from tickit.model.issue import (
    Comment,
    CreateIssueData,
    Issue,
    Priority,
    SearchResult,
    Status,
    StatusCategory,
    Transition,
    UpdateIssueData,
    User,
)

__all__ = [
    "Comment",
    "CreateIssueData",
    "Issue",
    "Priority",
    "SearchResult",
    "Status",
    "StatusCategory",
    "Transition",
    "UpdateIssueData",
    "User",
]
