"""Shared fixtures for tickit tests."""

import pytest

from tests.fakes import TRANSITIONS, FakeTracker, make_comment, make_issue
from tickit.model.issue import StatusCategory


@pytest.fixture
def issues():
    """Three issues, one per status category."""
    return [
        make_issue("PROJ-1", "Fix login redirect"),
        make_issue("PROJ-2", "Add audit log", StatusCategory.IN_PROGRESS, "In Progress"),
        make_issue("PROJ-3", "Upgrade database", StatusCategory.DONE, "Done"),
    ]


@pytest.fixture
def tracker(issues):
    """FakeTracker with comments and transitions on PROJ-1."""
    return FakeTracker(
        issues,
        comments={"PROJ-1": [make_comment("1", "First"), make_comment("2", "Second")]},
        transitions={"PROJ-1": TRANSITIONS},
    )
