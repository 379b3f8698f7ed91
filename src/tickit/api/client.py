"""Issue tracker API: the capability interface and its HTTP implementation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol

import httpx

from tickit.api.parser import (
    parse_comment,
    parse_comments,
    parse_created_key,
    parse_issue,
    parse_search_ids,
    parse_search_results,
    parse_transitions,
    parse_user,
)
from tickit.api.ratelimit import RateLimiter
from tickit.api.retry import RetryConfig, retry
from tickit.errors import (
    ApiError,
    AuthenticationError,
    ConfigError,
    IoError,
    NetworkError,
    ParseError,
    TrackerError,
    ValidationError,
)
from tickit.model import adf
from tickit.model.issue import (
    Comment,
    CreateIssueData,
    Issue,
    SearchResult,
    Transition,
    UpdateIssueData,
    User,
)
from tickit.validators import validate_issue_key

if TYPE_CHECKING:
    from tickit.config import Config

logger = logging.getLogger(__name__)

SEARCH_APIS = ("jql", "legacy")


class IssueTracker(Protocol):
    """Everything the app needs from an issue tracker."""

    async def get_issue(self, key: str) -> Issue: ...

    async def search(self, jql: str, start_at: int = 0, max_results: int = 50) -> SearchResult: ...

    async def create_issue(self, data: CreateIssueData) -> Issue: ...

    async def update_issue(self, key: str, data: UpdateIssueData) -> None: ...

    async def list_transitions(self, key: str) -> list[Transition]: ...

    async def execute_transition(
        self, key: str, transition_id: str, comment: str | None = None
    ) -> None: ...

    async def add_comment(self, key: str, text: str) -> Comment: ...

    async def list_comments(self, key: str) -> list[Comment]: ...

    async def get_myself(self) -> User: ...

    async def aclose(self) -> None: ...


def _document(text: str) -> dict[str, Any]:
    return adf.to_json(adf.from_text(text))


class JiraClient:
    """IssueTracker over the Jira Cloud REST API v3.

    Each call takes a token from the rate limiter, then sends the request
    and decodes the response under the retry policy. A 429 answer costs a
    fixed penalty sleep before it is raised as a retryable error.
    """

    def __init__(
        self,
        instance: str,
        username: str,
        token: str,
        *,
        auth_type: str = "api-token",
        search_api: str = "jql",
        limiter: RateLimiter | None = None,
        retry_config: RetryConfig | None = None,
        rate_limit_penalty: float = 1.0,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if auth_type != "api-token":
            raise AuthenticationError(f"Unsupported auth type '{auth_type}'")
        if search_api not in SEARCH_APIS:
            raise ConfigError(f"search-api must be one of {', '.join(SEARCH_APIS)}")
        self.instance = instance
        self.search_api = search_api
        self.limiter = limiter or RateLimiter.for_jira_cloud()
        self.retry_config = retry_config or RetryConfig()
        self.rate_limit_penalty = rate_limit_penalty
        self._sleep = sleep
        self._http = httpx.AsyncClient(
            base_url=f"https://{instance}/rest/api/3/",
            auth=httpx.BasicAuth(username, token),
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> JiraClient:
        settings = config.settings
        rate_limit = settings["rate_limit"]
        kwargs.setdefault(
            "limiter", RateLimiter(rate_limit, float(settings["rate_interval"]), rate_limit)
        )
        kwargs.setdefault("retry_config", RetryConfig(max_retries=settings["max_retries"]))
        return cls(
            config.instance,
            config.username,
            config.token,
            auth_type=config.auth_type,
            search_api=settings["search_api"],
            **kwargs,
        )

    async def __aenter__(self) -> JiraClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # --- Transport ---

    async def _send(self, method: str, path: str, params=None, json=None) -> Any:
        try:
            response = await self._http.request(method, path, params=params, json=json)
        except httpx.TransportError as exc:
            raise NetworkError(str(exc) or type(exc).__name__) from exc
        except OSError as exc:
            raise IoError(str(exc)) from exc

        status = response.status_code
        if status == 401:
            raise AuthenticationError("Unauthorized")
        if status == 403:
            raise AuthenticationError("Forbidden")
        if status == 429:
            logger.warning(
                "%s %s rate limited, backing off %.1fs", method, path, self.rate_limit_penalty
            )
            await self._sleep(self.rate_limit_penalty)
            raise ApiError(status, response.text)
        if not response.is_success:
            raise ApiError(status, response.text)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ParseError("body", f"Invalid JSON in response: {exc}") from exc

    async def _call(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json: Any = None,
        parse: Callable[[Any], Any] | None = None,
    ) -> Any:
        await self.limiter.acquire()

        async def attempt():
            data = await self._send(method, path, params=params, json=json)
            return parse(data) if parse is not None else data

        return await retry(self.retry_config, attempt)

    # --- Issues ---

    async def get_issue(self, key: str) -> Issue:
        key = validate_issue_key(key)
        return await self._call("GET", f"issue/{key}", parse=parse_issue)

    async def search(self, jql: str, start_at: int = 0, max_results: int = 50) -> SearchResult:
        params = {"jql": jql, "startAt": start_at, "maxResults": max_results}
        if self.search_api == "legacy":
            return await self._call(
                "GET",
                "search",
                params=params,
                parse=lambda data: parse_search_results(data, start_at, max_results),
            )

        page = await self._call("GET", "search/jql", params=params, parse=parse_search_ids)
        results = await asyncio.gather(
            *(self._materialize(entry) for entry in page.entries), return_exceptions=True
        )
        issues = []
        for entry, result in zip(page.entries, results):
            if isinstance(result, TrackerError):
                logger.warning("skipping issue %s: %s", entry.get("key") or entry["id"], result)
            elif isinstance(result, BaseException):
                raise result
            else:
                issues.append(result)

        total = page.total
        if total is None:
            total = start_at + page.count + (0 if page.is_last else 1)
        return SearchResult(
            start_at=start_at,
            max_results=max_results,
            total=total,
            issues=issues,
            skipped=page.count - len(issues),
        )

    async def _materialize(self, entry: dict) -> Issue:
        """Use the entry as-is when it carries fields, else fetch it by id."""
        if isinstance(entry.get("fields"), dict):
            return parse_issue(entry)
        return await self.get_issue(str(entry["id"]))

    async def create_issue(self, data: CreateIssueData) -> Issue:
        if not data.summary.strip():
            raise ValidationError("Summary cannot be empty")
        if not data.project_key.strip():
            raise ValidationError("Project key cannot be empty")
        if not data.issue_type.strip():
            raise ValidationError("Issue type cannot be empty")

        fields: dict[str, Any] = {
            "project": {"key": data.project_key.strip()},
            "issuetype": {"name": data.issue_type.strip()},
            "summary": data.summary.strip(),
        }
        if data.description:
            fields["description"] = _document(data.description)
        if data.assignee:
            fields["assignee"] = {"accountId": data.assignee}
        if data.priority is not None:
            fields["priority"] = {"name": data.priority.label}

        key = await self._call("POST", "issue", json={"fields": fields}, parse=parse_created_key)
        logger.info("created %s", key)
        return await self.get_issue(key)

    async def update_issue(self, key: str, data: UpdateIssueData) -> None:
        key = validate_issue_key(key)
        if not data.fields:
            raise ValidationError("Nothing to update")
        await self._call("PUT", f"issue/{key}", json={"fields": data.fields})

    # --- Workflow ---

    async def list_transitions(self, key: str) -> list[Transition]:
        key = validate_issue_key(key)
        return await self._call("GET", f"issue/{key}/transitions", parse=parse_transitions)

    async def execute_transition(
        self, key: str, transition_id: str, comment: str | None = None
    ) -> None:
        key = validate_issue_key(key)
        body: dict[str, Any] = {"transition": {"id": transition_id}}
        if comment and comment.strip():
            body["update"] = {"comment": [{"add": {"body": _document(comment)}}]}
        await self._call("POST", f"issue/{key}/transitions", json=body)

    # --- Comments ---

    async def add_comment(self, key: str, text: str) -> Comment:
        key = validate_issue_key(key)
        if not text.strip():
            raise ValidationError("Comment cannot be empty")
        return await self._call(
            "POST", f"issue/{key}/comment", json={"body": _document(text)}, parse=parse_comment
        )

    async def list_comments(self, key: str) -> list[Comment]:
        key = validate_issue_key(key)
        return await self._call("GET", f"issue/{key}/comment", parse=parse_comments)

    # --- Users ---

    async def get_myself(self) -> User:
        return await self._call("GET", "myself", parse=parse_user)
