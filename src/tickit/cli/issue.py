"""Handlers for 'tickit issue' commands."""

import sys

from tickit import filters
from tickit.cli._common import (
    comment_to_dict,
    error,
    format_issue_line,
    issue_to_dict,
    output_json,
    output_result,
    run,
    transition_to_dict,
)
from tickit.model.issue import (
    CreateIssueData,
    Priority,
    StatusCategory,
    UpdateIssueData,
)

STATUS_CHOICES = {
    "todo": StatusCategory.TODO,
    "in-progress": StatusCategory.IN_PROGRESS,
    "done": StatusCategory.DONE,
}


def issue_list(args) -> int:
    """List issues matching a JQL query."""

    async def op(client, config):
        jql = args.jql or config.settings["jql"]
        limit = args.limit or config.settings["page_size"]
        result = await client.search(jql, args.start, limit)

        issues = result.issues
        if args.status:
            issues = filters.by_status_category(issues, STATUS_CHOICES[args.status])
        if args.assignee:
            issues = filters.by_assignee(issues, args.assignee)
        if args.grep:
            issues = filters.by_text(issues, args.grep)

        if args.json:
            output_json(
                {
                    "start_at": result.start_at,
                    "total": result.total,
                    "has_more": result.has_more(),
                    "issues": [issue_to_dict(i) for i in issues],
                }
            )
        else:
            for issue in issues:
                print(format_issue_line(issue))
            if result.has_more():
                print(f"... more from --start {result.next_start_at()}")
        return 0

    return run(args, op)


def issue_get(args) -> int:
    """Show one issue."""

    async def op(client, config):
        issue = await client.get_issue(args.key)
        if args.json:
            output_json(issue_to_dict(issue))
            return 0
        assignee = issue.assignee.display_name if issue.assignee else "Unassigned"
        print(f"{issue.key}  {issue.summary}")
        print(f"  Status:   {issue.status.name} ({issue.status.category.label})")
        print(f"  Priority: {issue.priority.label}")
        print(f"  Type:     {issue.issue_type}")
        print(f"  Assignee: {assignee}")
        print(f"  Updated:  {issue.updated:%Y-%m-%d %H:%M}")
        if issue.description:
            print()
            print(issue.description)
        return 0

    return run(args, op)


def issue_comments(args) -> int:
    """List comments on an issue."""

    async def op(client, config):
        comments = await client.list_comments(args.key)
        if args.json:
            output_json([comment_to_dict(c) for c in comments])
            return 0
        for comment in comments:
            print(f"{comment.author.display_name}  {comment.created:%Y-%m-%d %H:%M}")
            for line in comment.body.splitlines():
                print(f"  {line}")
        return 0

    return run(args, op)


def issue_comment(args) -> int:
    """Add a comment; '-' reads the text from stdin."""
    text = sys.stdin.read() if args.text == "-" else args.text

    async def op(client, config):
        comment = await client.add_comment(args.key, text)
        output_result(comment_to_dict(comment), f"Commented on {args.key}", args.json)
        return 0

    return run(args, op)


def issue_transitions(args) -> int:
    """List the transitions currently available for an issue."""

    async def op(client, config):
        transitions = await client.list_transitions(args.key)
        if args.json:
            output_json([transition_to_dict(t) for t in transitions])
            return 0
        for t in transitions:
            print(f"{t.id:<6} {t.name:<20} → {t.to_status}")
        return 0

    return run(args, op)


def issue_transition(args) -> int:
    """Move an issue along a transition given by id or name."""

    async def op(client, config):
        transitions = await client.list_transitions(args.key)
        wanted = args.transition.lower()
        match = next(
            (t for t in transitions if t.id == args.transition or t.name.lower() == wanted),
            None,
        )
        if match is None:
            available = [f"  {t.id}  {t.name}" for t in transitions]
            error(
                f"Transition '{args.transition}' not available. Available:\n"
                + "\n".join(available),
                args.json,
            )
        await client.execute_transition(args.key, match.id, args.comment)
        issue = await client.get_issue(args.key)
        output_result(
            issue_to_dict(issue), f"{issue.key} is now {issue.status.name}", args.json
        )
        return 0

    return run(args, op)


def issue_create(args) -> int:
    """Create an issue."""
    priority = None
    if args.priority:
        priority = Priority.from_name(args.priority)
        if priority is None:
            error(f"Unknown priority '{args.priority}'", args.json)

    data = CreateIssueData(
        project_key=args.project,
        issue_type=args.type,
        summary=args.summary,
        description=args.description,
        assignee=args.assignee,
        priority=priority,
    )

    async def op(client, config):
        issue = await client.create_issue(data)
        output_result(issue_to_dict(issue), f"Created {issue.key}", args.json)
        return 0

    return run(args, op)


def issue_assign(args) -> int:
    """Assign an issue to the configured user."""

    async def op(client, config):
        me = await client.get_myself()
        await client.update_issue(
            args.key, UpdateIssueData({"assignee": {"accountId": me.account_id}})
        )
        output_result(
            {"key": args.key, "assignee": me.account_id},
            f"Assigned {args.key} to {me.display_name}",
            args.json,
        )
        return 0

    return run(args, op)
