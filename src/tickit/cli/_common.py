"""Shared helpers for CLI command handlers."""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

from tickit.api.client import IssueTracker, JiraClient
from tickit.api.connection import validate_config
from tickit.config import Config, load_config
from tickit.errors import TrackerError
from tickit.logs import setup_cli_logging
from tickit.model.issue import Comment, Issue, Transition, User


def load_config_or_die(path: str | None, json_mode: bool) -> Config:
    """Load and validate config. Exit 1 with message if unusable."""
    try:
        config = load_config(Path(path) if path else None)
        validate_config(config)
    except TrackerError as e:
        error(str(e), json_mode)
    return config


def make_client(config: Config) -> IssueTracker:
    return JiraClient.from_config(config)


def run(args, operation: Callable[[IssueTracker, Config], Awaitable[int]]) -> int:
    """Run one async operation against a client built from config."""
    setup_cli_logging(args.verbose)
    config = load_config_or_die(args.config, args.json)

    async def main() -> int:
        client = make_client(config)
        try:
            return await operation(client, config)
        finally:
            await client.aclose()

    try:
        return asyncio.run(main())
    except TrackerError as e:
        error(str(e), args.json)


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2))


def output_result(data: dict | list, text: str, json_mode: bool) -> None:
    """Output result as JSON or plain text."""
    if json_mode:
        output_json(data)
    else:
        print(text)


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)


def user_to_dict(user: User | None) -> dict | None:
    if user is None:
        return None
    return {"account_id": user.account_id, "name": user.display_name, "email": user.email}


def issue_to_dict(issue: Issue) -> dict:
    return {
        "id": issue.id,
        "key": issue.key,
        "summary": issue.summary,
        "status": {
            "id": issue.status.id,
            "name": issue.status.name,
            "category": issue.status.category.label,
        },
        "priority": issue.priority.label,
        "type": issue.issue_type,
        "project": issue.project_key,
        "assignee": user_to_dict(issue.assignee),
        "description": issue.description,
        "created": issue.created.isoformat(),
        "updated": issue.updated.isoformat(),
    }


def comment_to_dict(comment: Comment) -> dict:
    return {
        "id": comment.id,
        "author": user_to_dict(comment.author),
        "body": comment.body,
        "created": comment.created.isoformat(),
        "updated": comment.updated.isoformat() if comment.updated else None,
    }


def transition_to_dict(transition: Transition) -> dict:
    return {"id": transition.id, "name": transition.name, "to": transition.to_status}


def format_issue_line(issue: Issue) -> str:
    """Format an issue as one line of a listing."""
    return (
        f"{issue.key:<10} {issue.status.name:<14} {issue.priority.label:<8} "
        f"{issue.summary}"
    )
