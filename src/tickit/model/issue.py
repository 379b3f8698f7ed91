"""Domain types for issues, comments and search pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any


class Priority(IntEnum):
    """Issue priority, ordered from least to most urgent."""

    LOWEST = 1
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    HIGHEST = 5
    CRITICAL = 6

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def from_name(cls, name: str) -> Priority | None:
        """Match a priority by its display name, ignoring case."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            return None

    @classmethod
    def from_id(cls, priority_id: str | int | None) -> Priority:
        """Map the tracker's numeric priority ids; unknown ids are MEDIUM."""
        return _PRIORITY_IDS.get(str(priority_id), cls.MEDIUM)


_PRIORITY_IDS = {
    "1": Priority.LOWEST,
    "2": Priority.LOW,
    "3": Priority.MEDIUM,
    "4": Priority.HIGH,
    "5": Priority.HIGHEST,
}


class StatusCategory(Enum):
    TODO = "new"
    IN_PROGRESS = "indeterminate"
    DONE = "done"

    @property
    def label(self) -> str:
        return {"new": "To Do", "indeterminate": "In Progress", "done": "Done"}[self.value]

    @classmethod
    def from_key(cls, key: str) -> StatusCategory | None:
        try:
            return cls(key)
        except ValueError:
            return None


@dataclass(frozen=True)
class Status:
    id: str
    name: str
    category: StatusCategory


@dataclass(frozen=True)
class User:
    account_id: str
    display_name: str
    email: str | None = None


@dataclass(frozen=True)
class Issue:
    """Snapshot of an issue as last fetched. Refetching replaces it."""

    id: str
    key: str
    summary: str
    status: Status
    priority: Priority
    issue_type: str
    project_key: str
    created: datetime
    updated: datetime
    assignee: User | None = None
    description: str | None = None


@dataclass(frozen=True)
class Comment:
    id: str
    author: User
    body: str
    created: datetime
    updated: datetime | None = None


@dataclass(frozen=True)
class Transition:
    """A workflow edge the server currently offers for an issue."""

    id: str
    name: str
    to_status: str = ""


@dataclass
class SearchResult:
    """One page of search results.

    ``total`` comes from the server and is only a hint. ``skipped`` counts
    entries the server sent that could not be turned into issues, so paging
    still advances past them.
    """

    start_at: int
    max_results: int
    total: int
    issues: list[Issue] = field(default_factory=list)
    skipped: int = 0

    def next_start_at(self) -> int:
        return self.start_at + len(self.issues) + self.skipped

    def has_more(self) -> bool:
        return self.next_start_at() < self.total


@dataclass
class CreateIssueData:
    project_key: str
    issue_type: str
    summary: str
    description: str | None = None
    assignee: str | None = None
    priority: Priority | None = None


@dataclass
class UpdateIssueData:
    fields: dict[str, Any] = field(default_factory=dict)
