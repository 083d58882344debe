"""Linear GraphQL API client."""

from __future__ import annotations

import logging
import re
import time
from typing import Any

import httpx

from ..models import IssueRecord, Viewer, WorkflowState
from . import queries

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.linear.app/graphql"


class LinearClientError(Exception):
    """Base exception for Linear client errors."""

    pass


class LinearAuthError(LinearClientError):
    """Authentication failed."""

    pass


class LinearNotFoundError(LinearClientError):
    """Resource not found."""

    pass


class LinearForbiddenError(LinearClientError):
    """Permission denied."""

    pass


class LinearRateLimitError(LinearClientError):
    """Rate limit exceeded."""

    pass


class LinearMutationError(LinearClientError):
    """The API executed a mutation but reported it unsuccessful."""

    pass


class LinearClient:
    """Linear GraphQL API client.

    Provides a thin wrapper around the Linear GraphQL API with:
    - API key authentication
    - Error mapping to typed exceptions
    - Cursor pagination for issue listings
    - Typed return values validated from the GraphQL payload
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        page_size: int = 100,
    ):
        """Initialize the Linear client.

        Args:
            api_key: Linear personal API key
            api_url: GraphQL endpoint
            timeout: Request timeout in seconds
            page_size: Issues requested per page when listing
        """
        self.api_key = api_key
        self.api_url = api_url
        self.page_size = page_size
        # Personal API keys are sent as-is, without a "Bearer" prefix
        self._client = httpx.Client(
            headers={
                "Authorization": api_key,
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> LinearClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL query or mutation.

        Args:
            query: GraphQL query/mutation string
            variables: Query variables

        Returns:
            Response data (the 'data' field from GraphQL response)

        Raises:
            LinearAuthError: Authentication failed
            LinearNotFoundError: Resource not found
            LinearForbiddenError: Permission denied
            LinearRateLimitError: Rate limit exceeded
            LinearClientError: Other errors
        """
        # Extract operation name for logging (e.g. "query GetIssue" -> "GetIssue")
        op_match = re.search(r"(?:query|mutation)\s+(\w+)", query)
        op_name = op_match.group(1) if op_match else "anonymous"

        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        # Log variables at DEBUG only
        logger.debug("GraphQL %s: variables=%s", op_name, variables)

        start_time = time.monotonic()
        try:
            response = self._client.post(self.api_url, json=payload)
        except httpx.RequestError as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error("GraphQL %s failed after %.0fms: %s", op_name, elapsed_ms, e)
            raise LinearClientError(f"Request failed: {e}") from e

        elapsed_ms = (time.monotonic() - start_time) * 1000

        # Handle HTTP errors
        if response.status_code == 401:
            logger.error("GraphQL %s: 401 Unauthorized (%.0fms)", op_name, elapsed_ms)
            raise LinearAuthError("Authentication failed. Check your LINEAR_API_KEY.")
        if response.status_code == 403:
            logger.error("GraphQL %s: 403 Forbidden (%.0fms)", op_name, elapsed_ms)
            raise LinearForbiddenError("Permission denied for this Linear resource")
        if response.status_code == 429:
            logger.error("GraphQL %s: 429 Rate Limited (%.0fms)", op_name, elapsed_ms)
            raise LinearRateLimitError("Linear API rate limit exceeded. Try again later.")
        if response.status_code == 404:
            logger.error("GraphQL %s: 404 Not Found (%.0fms)", op_name, elapsed_ms)
            raise LinearNotFoundError("Resource not found")

        # Linear reports GraphQL errors with HTTP 400, so parse before the generic check
        try:
            result = response.json()
        except ValueError as e:
            if response.status_code >= 400:
                logger.error(
                    "GraphQL %s: HTTP %d (%.0fms)", op_name, response.status_code, elapsed_ms
                )
                raise LinearClientError(f"HTTP {response.status_code}: {response.text}") from e
            logger.error("GraphQL %s: Invalid JSON response (%.0fms)", op_name, elapsed_ms)
            raise LinearClientError(f"Invalid JSON response: {e}") from e

        # Check for GraphQL errors
        errors = result.get("errors") if isinstance(result, dict) else None
        if errors:
            self._raise_for_errors(op_name, errors, elapsed_ms)

        if response.status_code >= 400:
            logger.error("GraphQL %s: HTTP %d (%.0fms)", op_name, response.status_code, elapsed_ms)
            raise LinearClientError(f"HTTP {response.status_code}: {response.text}")

        # Success
        logger.info("GraphQL %s: %d OK (%.0fms)", op_name, response.status_code, elapsed_ms)
        return result.get("data") or {}

    def _raise_for_errors(self, op_name: str, errors: list[dict], elapsed_ms: float) -> None:
        """Map GraphQL error entries to a typed exception."""
        for error in errors:
            # Match on the extension code first, then on the message text
            message = error.get("message", "")
            code = (error.get("extensions") or {}).get("code", "")
            lowered = message.lower()

            if code == "AUTHENTICATION_ERROR" or "authentication" in lowered:
                logger.error(
                    "GraphQL %s: Unauthenticated - %s (%.0fms)", op_name, message, elapsed_ms
                )
                raise LinearAuthError(message)
            if code == "RATELIMITED" or "rate limit" in lowered:
                logger.error("GraphQL %s: Rate Limited - %s (%.0fms)", op_name, message, elapsed_ms)
                raise LinearRateLimitError(message)
            if code == "FORBIDDEN" or "permission" in lowered:
                logger.error("GraphQL %s: Forbidden - %s (%.0fms)", op_name, message, elapsed_ms)
                raise LinearForbiddenError(message)
            if "not found" in lowered or code == "NOT_FOUND":
                logger.error("GraphQL %s: Not Found - %s (%.0fms)", op_name, message, elapsed_ms)
                raise LinearNotFoundError(message)

        error_messages = [e.get("message", str(e)) for e in errors]
        logger.error("GraphQL %s: errors=%s (%.0fms)", op_name, error_messages, elapsed_ms)
        raise LinearClientError(f"GraphQL errors: {'; '.join(error_messages)}")

    def query(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL query (alias for execute)."""
        return self.execute(query, variables)

    def mutate(self, mutation: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL mutation (alias for execute)."""
        return self.execute(mutation, variables)

    # --- Typed operations ---

    def get_viewer(self) -> Viewer:
        """Get the authenticated user. Fails if the key is not valid."""
        data = self.query(queries.GET_VIEWER)
        viewer = data.get("viewer")
        if not viewer:
            raise LinearAuthError("No authenticated viewer returned")
        return Viewer.model_validate(viewer)

    def get_team_states(self, team_id: str) -> list[WorkflowState]:
        """Get the workflow states configured for a team."""
        data = self.query(queries.GET_TEAM_STATES, {"id": team_id})
        team = data.get("team")
        if not team:
            raise LinearNotFoundError(f"Team not found: {team_id}")
        nodes = (team.get("states") or {}).get("nodes") or []
        return [WorkflowState.model_validate(node) for node in nodes]

    def get_issues_by_label(self, project_id: str, label_name: str) -> list[IssueRecord]:
        """Get all issues in a project that carry a label."""
        return self._paginate_issues(
            queries.GET_ISSUES_BY_LABEL,
            {"projectId": project_id, "labelName": label_name},
        )

    def get_epics(self, project_id: str) -> list[IssueRecord]:
        """Get all issues in a project labelled as epics."""
        return self._paginate_issues(queries.GET_EPICS, {"projectId": project_id})

    def get_issue(self, issue_id: str) -> IssueRecord:
        """Get a single issue by id or identifier."""
        data = self.query(queries.GET_ISSUE, {"id": issue_id})
        issue = data.get("issue")
        if not issue:
            raise LinearNotFoundError(f"Issue not found: {issue_id}")
        return IssueRecord.model_validate(issue)

    def update_issue(
        self,
        issue_id: str,
        *,
        state_id: str | None = None,
        assignee_id: str | None = None,
        label_ids: list[str] | None = None,
        description: str | None = None,
    ) -> IssueRecord:
        """Update an issue in a single mutation.

        Only the fields that are passed are sent; the rest are left unchanged.

        Raises:
            LinearMutationError: The API reported ``success: false``
        """
        update_input: dict[str, Any] = {}
        if state_id is not None:
            update_input["stateId"] = state_id
        if assignee_id is not None:
            update_input["assigneeId"] = assignee_id
        if label_ids is not None:
            update_input["labelIds"] = label_ids
        if description is not None:
            update_input["description"] = description

        data = self.mutate(queries.UPDATE_ISSUE, {"id": issue_id, "input": update_input})
        payload = data.get("issueUpdate") or {}
        if not payload.get("success") or not payload.get("issue"):
            raise LinearMutationError(f"Failed to update issue {issue_id}")
        return IssueRecord.model_validate(payload["issue"])

    def add_comment(self, issue_id: str, body: str) -> None:
        """Add a comment to an issue."""
        data = self.mutate(queries.CREATE_COMMENT, {"issueId": issue_id, "body": body})
        if not (data.get("commentCreate") or {}).get("success"):
            raise LinearMutationError(f"Failed to add comment to issue {issue_id}")

    def _paginate_issues(self, query: str, variables: dict[str, Any]) -> list[IssueRecord]:
        """Follow cursor pagination until every page has been fetched."""
        issues: list[IssueRecord] = []
        cursor: str | None = None
        page_count = 0

        while True:
            page_count += 1
            # Linear caps "first" at 250 per page
            data = self.query(query, {**variables, "first": self.page_size, "after": cursor})
            connection = data.get("issues") or {}
            nodes = connection.get("nodes") or []

            logger.debug("Page %d: fetched %d issues", page_count, len(nodes))
            issues.extend(IssueRecord.model_validate(node) for node in nodes)

            page_info = connection.get("pageInfo") or {}
            if page_info.get("hasNextPage") and page_info.get("endCursor"):
                cursor = page_info["endCursor"]
            else:
                break

        logger.info("Fetched %d issues in %d page(s)", len(issues), page_count)
        return issues
