"""CLI argument parser and dispatch for tickit."""

import argparse

from tickit.cli.check import check
from tickit.cli.issue import (
    STATUS_CHOICES,
    issue_assign,
    issue_comment,
    issue_comments,
    issue_create,
    issue_get,
    issue_list,
    issue_transition,
    issue_transitions,
)


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="Path to tickit config.yaml")
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    common.add_argument(
        "-v", "--verbose", action="count", default=0, help="Log to stderr (-vv for debug)"
    )

    parser = argparse.ArgumentParser(
        prog="tickit",
        description="Terminal client for Jira issues",
        parents=[common],
    )

    nouns = parser.add_subparsers(dest="noun")

    # --- check ---
    check_p = nouns.add_parser("check", help="Check config and connection", parents=[common])
    check_p.set_defaults(func=check)

    # --- issue ---
    issue_p = nouns.add_parser("issue", help="Issue operations", parents=[common])
    issue_verbs = issue_p.add_subparsers(dest="verb")

    list_p = issue_verbs.add_parser("list", help="List issues", parents=[common])
    list_p.add_argument("--jql", help="JQL query (default: from config)")
    list_p.add_argument("--limit", type=int, help="Page size (default: from config)")
    list_p.add_argument("--start", type=int, default=0, help="Offset of the first result")
    list_p.add_argument("--status", choices=sorted(STATUS_CHOICES), help="Status category")
    list_p.add_argument("--assignee", help="Account id or part of a display name")
    list_p.add_argument("--grep", help="Text to find in key or summary")
    list_p.set_defaults(func=issue_list)

    get_p = issue_verbs.add_parser("get", help="Show an issue", parents=[common])
    get_p.add_argument("key", help="Issue key or id")
    get_p.set_defaults(func=issue_get)

    comments_p = issue_verbs.add_parser("comments", help="List comments", parents=[common])
    comments_p.add_argument("key", help="Issue key or id")
    comments_p.set_defaults(func=issue_comments)

    comment_p = issue_verbs.add_parser("comment", help="Add a comment", parents=[common])
    comment_p.add_argument("key", help="Issue key or id")
    comment_p.add_argument("text", help="Comment text, or - to read stdin")
    comment_p.set_defaults(func=issue_comment)

    transitions_p = issue_verbs.add_parser(
        "transitions", help="List available transitions", parents=[common]
    )
    transitions_p.add_argument("key", help="Issue key or id")
    transitions_p.set_defaults(func=issue_transitions)

    transition_p = issue_verbs.add_parser(
        "transition", help="Transition an issue", parents=[common]
    )
    transition_p.add_argument("key", help="Issue key or id")
    transition_p.add_argument("transition", help="Transition id or name")
    transition_p.add_argument("--comment", help="Comment to attach")
    transition_p.set_defaults(func=issue_transition)

    create_p = issue_verbs.add_parser("create", help="Create an issue", parents=[common])
    create_p.add_argument("--project", required=True, help="Project key")
    create_p.add_argument("--type", default="Task", help="Issue type (default: Task)")
    create_p.add_argument("--summary", required=True, help="Summary line")
    create_p.add_argument("--description", help="Description (markdown)")
    create_p.add_argument("--priority", help="Priority name")
    create_p.add_argument("--assignee", help="Assignee account id")
    create_p.set_defaults(func=issue_create)

    assign_p = issue_verbs.add_parser(
        "assign", help="Assign an issue to yourself", parents=[common]
    )
    assign_p.add_argument("key", help="Issue key or id")
    assign_p.set_defaults(func=issue_assign)

    return parser
