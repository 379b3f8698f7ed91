"""Checks on user-supplied input before it reaches the tracker."""

import re

from tickit.errors import ValidationError

_KEY_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*-\d+$")


def validate_instance(instance: str) -> str:
    """Instance must look like a hostname, e.g. example.atlassian.net."""
    instance = instance.strip()
    if not instance:
        raise ValidationError("Instance cannot be empty")
    if "." not in instance:
        raise ValidationError(f"Invalid instance '{instance}'")
    return instance


def validate_issue_key(key: str) -> str:
    """Accept a human key (PROJ-123) or a numeric issue id."""
    key = key.strip()
    if not key:
        raise ValidationError("Issue key cannot be empty")
    if not (key.isdigit() or _KEY_RE.match(key)):
        raise ValidationError(f"Invalid issue key '{key}'")
    return key
