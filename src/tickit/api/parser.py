"""Turn decoded JSON responses into domain objects.

Single-object parsers raise ParseError naming the first missing field.
Batch parsers (comments, transitions, search pages) skip bad entries with a
warning so one malformed record never costs the whole page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from tickit.errors import ParseError
from tickit.model import adf
from tickit.model.issue import (
    Comment,
    Issue,
    Priority,
    SearchResult,
    Status,
    StatusCategory,
    Transition,
    User,
)

logger = logging.getLogger(__name__)

_DATETIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S.%f",
)


def _require(data: Any, key: str, path: str) -> Any:
    if not isinstance(data, dict) or data.get(key) is None:
        raise ParseError(path)
    return data[key]


def _require_str(data: Any, key: str, path: str) -> str:
    value = _require(data, key, path)
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ParseError(path)
    return str(value)


def parse_datetime(value: Any, field: str) -> datetime:
    """Parse a tracker timestamp into an aware UTC datetime.

    Tries the offset-bearing format first, then the same without an offset
    (taken as UTC), then anything ``fromisoformat`` accepts.
    """
    if not isinstance(value, str):
        raise ParseError(field, f"Failed to parse {field} datetime '{value}'", str(value))
    for fmt in _DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
            break
        except ValueError:
            continue
    else:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            raise ParseError(field, f"Failed to parse {field} datetime '{value}'", value) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_rich_text(value: Any) -> str | None:
    """Flatten a description or comment body. Plain strings pass through."""
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    return adf.flatten(adf.parse_node(value)) or None


def parse_user(data: Any, path: str = "user") -> User:
    account_id = _require_str(data, "accountId", f"{path}.accountId")
    email = data.get("emailAddress")
    return User(
        account_id=account_id,
        display_name=data.get("displayName") or "Unknown",
        email=email if isinstance(email, str) else None,
    )


def parse_status(data: Any) -> Status:
    status_id = _require_str(data, "id", "fields.status.id")
    name = _require_str(data, "name", "fields.status.name")
    category = _require(data, "statusCategory", "fields.status.statusCategory")
    key = _require_str(category, "key", "fields.status.statusCategory.key")
    resolved = StatusCategory.from_key(key)
    if resolved is None:
        raise ParseError(
            "fields.status.statusCategory.key", f"Unknown status category '{key}'", key
        )
    return Status(id=status_id, name=name, category=resolved)


def parse_priority(data: Any) -> Priority:
    """Absent priority is MEDIUM; unknown names fall back to the numeric id."""
    if not isinstance(data, dict):
        return Priority.MEDIUM
    name = data.get("name")
    if isinstance(name, str):
        priority = Priority.from_name(name)
        if priority is not None:
            return priority
    return Priority.from_id(data.get("id"))


def parse_issue(data: Any) -> Issue:
    issue_id = _require_str(data, "id", "id")
    key = _require_str(data, "key", "key")
    fields = _require(data, "fields", "fields")
    if not isinstance(fields, dict):
        raise ParseError("fields")

    assignee = fields.get("assignee")
    return Issue(
        id=issue_id,
        key=key,
        summary=_require_str(fields, "summary", "fields.summary"),
        status=parse_status(_require(fields, "status", "fields.status")),
        priority=parse_priority(fields.get("priority")),
        issue_type=_require_str(
            _require(fields, "issuetype", "fields.issuetype"), "name", "fields.issuetype.name"
        ),
        project_key=_require_str(
            _require(fields, "project", "fields.project"), "key", "fields.project.key"
        ),
        created=parse_datetime(_require(fields, "created", "fields.created"), "created"),
        updated=parse_datetime(_require(fields, "updated", "fields.updated"), "updated"),
        assignee=parse_user(assignee, "fields.assignee") if assignee is not None else None,
        description=parse_rich_text(fields.get("description")),
    )


def parse_comment(data: Any) -> Comment:
    comment_id = _require_str(data, "id", "id")
    author = parse_user(_require(data, "author", "author"), "author")
    updated = None
    if data.get("updated") is not None:
        try:
            updated = parse_datetime(data["updated"], "updated")
        except ParseError:
            logger.debug("comment %s has unparseable updated time", comment_id)
    return Comment(
        id=comment_id,
        author=author,
        body=parse_rich_text(data.get("body")) or "",
        created=parse_datetime(_require(data, "created", "created"), "created"),
        updated=updated,
    )


def _entries(data: Any, key: str) -> list:
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get(key), list):
        return data[key]
    available = ", ".join(sorted(data)) if isinstance(data, dict) else type(data).__name__
    raise ParseError(key, f"Expected a list of {key}, got: {available}")


def parse_comments(data: Any) -> list[Comment]:
    """Accepts a bare list or ``{"comments": [...]}``."""
    comments = []
    for i, entry in enumerate(_entries(data, "comments")):
        try:
            comments.append(parse_comment(entry))
        except ParseError as exc:
            logger.warning("skipping comment %d: %s", i, exc)
    return comments


def parse_transitions(data: Any) -> list[Transition]:
    transitions = []
    for i, entry in enumerate(_entries(data, "transitions")):
        try:
            to = entry.get("to") if isinstance(entry, dict) else None
            to_status = to.get("name") if isinstance(to, dict) else None
            transitions.append(
                Transition(
                    id=_require_str(entry, "id", "id"),
                    name=_require_str(entry, "name", "name"),
                    to_status=to_status if isinstance(to_status, str) else "",
                )
            )
        except ParseError as exc:
            logger.warning("skipping transition %d: %s", i, exc)
    return transitions


def _int_or(data: dict, key: str, default: int) -> int:
    value = data.get(key)
    return value if isinstance(value, int) and not isinstance(value, bool) else default


def _search_entries(data: Any) -> list:
    if isinstance(data, dict):
        for key in ("issues", "values"):
            if isinstance(data.get(key), list):
                return data[key]
    raise ParseError("issues", "Search response has no issues or values list")


def parse_search_results(data: Any, start_at: int = 0, max_results: int = 50) -> SearchResult:
    """Parse a page that carries full issue bodies.

    Paging fields default to the request's own values; a missing total is
    taken as the end of what this page reached.
    """
    entries = _search_entries(data)
    result_start = _int_or(data, "startAt", start_at)
    issues = []
    skipped = 0
    for i, entry in enumerate(entries):
        try:
            issues.append(parse_issue(entry))
        except ParseError as exc:
            skipped += 1
            key = entry.get("key") if isinstance(entry, dict) else None
            logger.warning("skipping search result %s: %s", key or i, exc)
    return SearchResult(
        start_at=result_start,
        max_results=_int_or(data, "maxResults", max_results),
        # Without a total, assume this page is the last one
        total=_int_or(data, "total", result_start + len(entries)),
        issues=issues,
        skipped=skipped,
    )


@dataclass
class IdPage:
    """A page from the id-only search endpoint."""

    entries: list[dict]
    count: int
    is_last: bool
    total: int | None = None


def parse_search_ids(data: Any) -> IdPage:
    """Parse a page whose entries may carry only an issue id.

    ``count`` is how many entries the server sent, usable or not.
    """
    raw = _search_entries(data)
    entries = []
    for i, entry in enumerate(raw):
        if isinstance(entry, dict) and entry.get("id") is not None:
            entries.append(entry)
        else:
            logger.warning("skipping search result %d: no id", i)
    is_last = data.get("isLast")
    if not isinstance(is_last, bool):
        is_last = data.get("nextPageToken") is None
    total = data.get("total")
    if isinstance(total, bool) or not isinstance(total, int):
        total = None
    return IdPage(entries, len(raw), is_last, total)


def parse_created_key(data: Any) -> str:
    """Key of a newly created issue."""
    return _require_str(data, "key", "key")
