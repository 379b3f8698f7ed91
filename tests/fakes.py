"""Builders for sample payloads and an in-memory tracker."""

from dataclasses import replace
from datetime import datetime, timezone

from tickit.errors import ApiError, ValidationError
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

CREATED = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def issue_json(key="PROJ-123", issue_id="10001", **fields) -> dict:
    """A well-formed issue payload; keyword args override fields."""
    data = {
        "summary": "Fix bug in authentication",
        "status": {
            "id": "3",
            "name": "In Progress",
            "statusCategory": {"key": "indeterminate"},
        },
        "priority": {"id": "2", "name": "High"},
        "assignee": {
            "accountId": "123456",
            "displayName": "John Doe",
            "emailAddress": "john.doe@example.com",
        },
        "issuetype": {"name": "Bug"},
        "project": {"key": "PROJ"},
        "created": "2024-01-15T10:30:00.000+0000",
        "updated": "2024-01-15T14:45:00.000+0000",
        "description": {
            "type": "doc",
            "version": 1,
            "content": [
                {"type": "paragraph", "content": [{"type": "text", "text": "Login fails."}]}
            ],
        },
    }
    data.update(fields)
    return {"id": issue_id, "key": key, "fields": data}


def comment_json(comment_id="1", text="Looks good", **overrides) -> dict:
    data = {
        "id": comment_id,
        "author": {"accountId": "123456", "displayName": "John Doe"},
        "body": {
            "type": "doc",
            "version": 1,
            "content": [{"type": "paragraph", "content": [{"type": "text", "text": text}]}],
        },
        "created": "2024-01-16T09:00:00.000+0000",
    }
    data.update(overrides)
    return data


def make_issue(
    key="PROJ-1",
    summary="Sample issue",
    category=StatusCategory.TODO,
    status_name="To Do",
    assignee=None,
    priority=Priority.MEDIUM,
) -> Issue:
    return Issue(
        id=str(10000 + int(key.rsplit("-", 1)[1])),
        key=key,
        summary=summary,
        status=Status("1", status_name, category),
        priority=priority,
        issue_type="Task",
        project_key=key.split("-")[0],
        created=CREATED,
        updated=CREATED,
        assignee=assignee,
    )


def make_comment(comment_id="1", body="A comment", author=None) -> Comment:
    return Comment(
        id=comment_id,
        author=author or User("123456", "John Doe"),
        body=body,
        created=CREATED,
    )


def _category_for(status_name: str) -> StatusCategory:
    lowered = status_name.lower()
    if "done" in lowered:
        return StatusCategory.DONE
    if "progress" in lowered:
        return StatusCategory.IN_PROGRESS
    return StatusCategory.TODO


class FakeTracker:
    """IssueTracker held in memory.

    Put an exception in ``failures[method_name]`` to make that method raise.
    Every call is recorded in ``calls``.
    """

    def __init__(self, issues=(), comments=None, transitions=None, myself=None):
        self.issues = {i.key: i for i in issues}
        self.comments = {k: list(v) for k, v in (comments or {}).items()}
        self.transitions = {k: list(v) for k, v in (transitions or {}).items()}
        self.myself = myself or User("me-1", "Me Myself")
        self.failures: dict[str, Exception] = {}
        self.calls: list[tuple] = []
        self.closed = False

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.failures:
            raise self.failures[name]

    def called(self, name) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    def _issue(self, key) -> Issue:
        if key not in self.issues:
            raise ApiError(404, f"Issue {key} does not exist")
        return self.issues[key]

    async def get_issue(self, key):
        self._record("get_issue", key)
        return self._issue(key)

    async def search(self, jql, start_at=0, max_results=50):
        self._record("search", jql, start_at, max_results)
        rows = list(self.issues.values())
        return SearchResult(
            start_at=start_at,
            max_results=max_results,
            total=len(rows),
            issues=rows[start_at : start_at + max_results],
        )

    async def create_issue(self, data):
        self._record("create_issue", data)
        if not data.summary.strip():
            raise ValidationError("Summary cannot be empty")
        key = f"{data.project_key}-{len(self.issues) + 1}"
        issue = make_issue(key, data.summary, priority=data.priority or Priority.MEDIUM)
        self.issues[key] = issue
        return issue

    async def update_issue(self, key, data):
        self._record("update_issue", key, data)
        issue = self._issue(key)
        if "assignee" in data.fields:
            self.issues[key] = replace(issue, assignee=self.myself)

    async def list_transitions(self, key):
        self._record("list_transitions", key)
        self._issue(key)
        return list(self.transitions.get(key, []))

    async def execute_transition(self, key, transition_id, comment=None):
        self._record("execute_transition", key, transition_id, comment)
        issue = self._issue(key)
        match = next((t for t in self.transitions.get(key, []) if t.id == transition_id), None)
        if match is None:
            raise ApiError(400, f"Transition {transition_id} is not valid")
        status = Status(transition_id, match.to_status, _category_for(match.to_status))
        self.issues[key] = replace(issue, status=status)

    async def add_comment(self, key, text):
        self._record("add_comment", key, text)
        self._issue(key)
        comments = self.comments.setdefault(key, [])
        comment = make_comment(str(len(comments) + 1), text, self.myself)
        comments.append(comment)
        return comment

    async def list_comments(self, key):
        self._record("list_comments", key)
        self._issue(key)
        return list(self.comments.get(key, []))

    async def get_myself(self):
        self._record("get_myself")
        return self.myself

    async def aclose(self):
        self.closed = True


TRANSITIONS = [
    Transition("11", "Start Progress", "In Progress"),
    Transition("31", "Done", "Done"),
]
