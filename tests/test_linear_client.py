"""Tests for Linear GraphQL client."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from linear_tracker.linear.client import (
    DEFAULT_API_URL,
    LinearAuthError,
    LinearClient,
    LinearClientError,
    LinearForbiddenError,
    LinearMutationError,
    LinearNotFoundError,
    LinearRateLimitError,
)


def _response(data=None, status_code: int = 200, errors=None) -> MagicMock:
    """Create a mock httpx response carrying a GraphQL body."""
    response = MagicMock()
    response.status_code = status_code
    body = {}
    if data is not None:
        body["data"] = data
    if errors is not None:
        body["errors"] = errors
    response.json.return_value = body
    response.text = str(body)
    return response


def _issue_node(issue_id: str = "issue-1", identifier: str = "ENG-1") -> dict:
    return {
        "id": issue_id,
        "identifier": identifier,
        "title": "Task",
        "priority": 2,
        "state": {"id": "s1", "name": "Todo", "type": "unstarted"},
        "labels": {"nodes": [{"id": "l1", "name": "ralph-tui"}]},
        "updatedAt": "2024-01-01T00:00:00.000Z",
    }


@pytest.fixture
def client():
    """Create a test client."""
    client = LinearClient("lin_api_test", page_size=2)
    yield client
    client.close()


class TestLinearClientInit:
    """Tests for LinearClient initialization."""

    def test_init_defaults(self, client):
        """Client sends the raw key as the Authorization header."""
        assert client.api_url == DEFAULT_API_URL
        assert client._client.headers["Authorization"] == "lin_api_test"

    def test_context_manager(self):
        with LinearClient("lin_api_test") as client:
            assert client.api_key == "lin_api_test"


class TestLinearClientExecute:
    """Tests for LinearClient.execute."""

    def test_execute_success(self, client):
        """Execute returns the data field."""
        with patch.object(client._client, "post", return_value=_response({"ok": True})) as post:
            result = client.execute("query Test($id: String!) { ok }", {"id": "1"})

        assert result == {"ok": True}
        assert post.call_args.kwargs["json"]["variables"] == {"id": "1"}

    @pytest.mark.parametrize(
        ("status_code", "exc_type"),
        [
            (401, LinearAuthError),
            (403, LinearForbiddenError),
            (404, LinearNotFoundError),
            (429, LinearRateLimitError),
        ],
    )
    def test_http_status_mapping(self, client, status_code, exc_type):
        """HTTP error statuses map to typed exceptions."""
        with (
            patch.object(client._client, "post", return_value=_response(status_code=status_code)),
            pytest.raises(exc_type),
        ):
            client.execute("query Test { ok }")

    @pytest.mark.parametrize(
        ("error", "exc_type"),
        [
            (
                {"message": "Bad key", "extensions": {"code": "AUTHENTICATION_ERROR"}},
                LinearAuthError,
            ),
            ({"message": "Slow down", "extensions": {"code": "RATELIMITED"}}, LinearRateLimitError),
            ({"message": "You lack permission"}, LinearForbiddenError),
            ({"message": "Entity not found"}, LinearNotFoundError),
        ],
    )
    def test_graphql_error_mapping(self, client, error, exc_type):
        """GraphQL error entries map to typed exceptions."""
        response = _response(status_code=400, errors=[error])
        with (
            patch.object(client._client, "post", return_value=response),
            pytest.raises(exc_type),
        ):
            client.execute("query Test { ok }")

    def test_other_graphql_errors(self, client):
        response = _response(errors=[{"message": "Field 'foo' doesn't exist"}])
        with patch.object(client._client, "post", return_value=response):
            with pytest.raises(LinearClientError) as exc_info:
                client.execute("query Test { foo }")
            assert "foo" in str(exc_info.value)

    def test_request_error_wrapped(self, client):
        """Network failures surface as LinearClientError."""
        with (
            patch.object(client._client, "post", side_effect=httpx.ConnectError("refused")),
            pytest.raises(LinearClientError, match="Request failed"),
        ):
            client.execute("query Test { ok }")

    def test_invalid_json(self, client):
        response = _response()
        response.json.side_effect = ValueError("Expecting value")
        with (
            patch.object(client._client, "post", return_value=response),
            pytest.raises(LinearClientError, match="Invalid JSON"),
        ):
            client.execute("query Test { ok }")


class TestLinearClientOperations:
    """Tests for the typed operations."""

    def test_get_viewer(self, client):
        data = {"viewer": {"id": "user-1", "name": "Ada", "email": "ada@example.com"}}
        with patch.object(client._client, "post", return_value=_response(data)):
            viewer = client.get_viewer()
        assert viewer.email == "ada@example.com"

    def test_get_viewer_missing(self, client):
        with (
            patch.object(client._client, "post", return_value=_response({"viewer": None})),
            pytest.raises(LinearAuthError),
        ):
            client.get_viewer()

    def test_get_team_states(self, client):
        data = {
            "team": {
                "states": {
                    "nodes": [
                        {"id": "s1", "name": "Todo", "type": "unstarted"},
                        {"id": "s2", "name": "Triage", "type": "triage"},
                    ]
                }
            }
        }
        with patch.object(client._client, "post", return_value=_response(data)):
            states = client.get_team_states("team-1")
        assert [s.type for s in states] == ["unstarted", "triage"]

    def test_get_team_states_unknown_team(self, client):
        with (
            patch.object(client._client, "post", return_value=_response({"team": None})),
            pytest.raises(LinearNotFoundError),
        ):
            client.get_team_states("nope")

    def test_get_issues_follows_pages(self, client):
        """Listing requests pages until hasNextPage is false."""
        pages = [
            _response(
                {
                    "issues": {
                        "nodes": [_issue_node("i1", "ENG-1"), _issue_node("i2", "ENG-2")],
                        "pageInfo": {"hasNextPage": True, "endCursor": "c1"},
                    }
                }
            ),
            _response(
                {
                    "issues": {
                        "nodes": [_issue_node("i3", "ENG-3")],
                        "pageInfo": {"hasNextPage": False, "endCursor": None},
                    }
                }
            ),
        ]
        with patch.object(client._client, "post", side_effect=pages) as post:
            issues = client.get_issues_by_label("proj-1", "ralph-tui")

        assert [i.id for i in issues] == ["i1", "i2", "i3"]
        first_vars = post.call_args_list[0].kwargs["json"]["variables"]
        second_vars = post.call_args_list[1].kwargs["json"]["variables"]
        assert first_vars["projectId"] == "proj-1"
        assert first_vars["labelName"] == "ralph-tui"
        assert first_vars["first"] == 2
        assert first_vars["after"] is None
        assert second_vars["after"] == "c1"

    def test_get_issue_missing(self, client):
        with (
            patch.object(client._client, "post", return_value=_response({"issue": None})),
            pytest.raises(LinearNotFoundError),
        ):
            client.get_issue("nope")

    def test_update_issue_sends_only_given_fields(self, client):
        data = {"issueUpdate": {"success": True, "issue": _issue_node()}}
        with patch.object(client._client, "post", return_value=_response(data)) as post:
            issue = client.update_issue("issue-1", state_id="s2", assignee_id="user-1")

        variables = post.call_args.kwargs["json"]["variables"]
        assert variables == {"id": "issue-1", "input": {"stateId": "s2", "assigneeId": "user-1"}}
        assert issue.identifier == "ENG-1"

    def test_update_issue_rejected(self, client):
        data = {"issueUpdate": {"success": False, "issue": None}}
        with (
            patch.object(client._client, "post", return_value=_response(data)),
            pytest.raises(LinearMutationError),
        ):
            client.update_issue("issue-1", state_id="s2")

    def test_add_comment(self, client):
        data = {"commentCreate": {"success": True}}
        with patch.object(client._client, "post", return_value=_response(data)) as post:
            client.add_comment("issue-1", "Task completed: done")

        variables = post.call_args.kwargs["json"]["variables"]
        assert variables == {"issueId": "issue-1", "body": "Task completed: done"}

    def test_add_comment_rejected(self, client):
        data = {"commentCreate": {"success": False}}
        with (
            patch.object(client._client, "post", return_value=_response(data)),
            pytest.raises(LinearMutationError),
        ):
            client.add_comment("issue-1", "note")
