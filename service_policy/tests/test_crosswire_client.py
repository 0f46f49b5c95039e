"""
Unit tests for the Crosswire API client.
"""

import json

import pytest
import httpx

from service_policy.app.adapters.crosswire_client import CrosswireClient
from service_policy.app.policy.models import Condition, Entitlement, Policy, Quantifier
from shared.errors import (
    ConfigurationError, DecodeError, MalformedResponseError, MultipleResultsError, TransportError
)
from shared.test_helpers import (
    TEST_HOST, TEST_TOKEN, FakeCrosswireAPI, json_response, make_policy_doc
)


class TestCrosswireClient:
    """Test cases for CrosswireClient."""

    @pytest.fixture
    def api(self):
        """Create fake Crosswire API."""
        return FakeCrosswireAPI()

    @pytest.fixture
    def client(self, api):
        """Create CrosswireClient bound to the fake API."""
        return CrosswireClient(TEST_HOST, TEST_TOKEN, http_client=api.client())

    @pytest.fixture
    def policy(self):
        """Create a policy ready for submission."""
        return Policy(
            owner="user@company.com",
            name="db-readers",
            entitlements=[Entitlement("AWS", "ROLE", "db-reader")],
            condition=Condition(Quantifier.ANY, [Entitlement("OKTA", "GROUP", "engineering")]),
            user_approvers=["approver@company.com"],
            ttl=3600,
        )

    def test_validate_credentials_success(self, client, api):
        """Test successful credential validation."""
        assert client.validate_credentials() is True

        request = api.requests[0]
        assert request.method == "GET"
        assert str(request.url) == f"{TEST_HOST}/integrations/crosswire_terraform/validate"
        assert request.headers["Token"] == TEST_TOKEN

    def test_validate_credentials_false(self, client, api):
        """Test a false success flag."""
        api.overrides["GET /validate"] = lambda r: json_response(200, {"success": False})

        assert client.validate_credentials() is False

    def test_validate_credentials_non_bool(self, client, api):
        """Test a non-boolean success flag counts as failure."""
        api.overrides["GET /validate"] = lambda r: json_response(200, {"success": "yes"})

        assert client.validate_credentials() is False

    def test_validate_credentials_malformed(self, client, api):
        """Test a body without success includes the trace id."""
        api.overrides["GET /validate"] = lambda r: json_response(200, {"status": "ok"}, "trace-789")

        with pytest.raises(MalformedResponseError) as exc_info:
            client.validate_credentials()

        assert "trace-789" in str(exc_info.value)
        assert exc_info.value.trace_id == "trace-789"

    def test_validate_credentials_without_token(self, api):
        """Test a missing token fails before any request."""
        client = CrosswireClient(TEST_HOST, None, http_client=api.client())

        with pytest.raises(ConfigurationError):
            client.validate_credentials()

        assert api.requests == []

    def test_token_override(self, client, api):
        """Test a per-call token replaces the configured one."""
        api.overrides["GET /validate"] = lambda r: json_response(200, {"success": True})

        client.validate_credentials(auth_token="other-token")

        assert api.requests[0].headers["Token"] == "other-token"

    def test_create_policy(self, client, api, policy):
        """Test policy creation round trip."""
        created = client.create_policy(policy)

        request = api.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/integrations/crosswire_terraform/policy"
        body = json.loads(request.content)
        assert body["Name"] == "db-readers"
        assert body["Ttl"] == 3600

        assert created.id in api.policies
        assert created.state == "ACTIVE"
        assert created.name == policy.name
        assert created.condition == policy.condition
        assert created.ttl == 3600

    def test_create_policy_error_status(self, client, api, policy):
        """Test non-success responses carry status, trace id and body."""
        api.overrides["POST /policy"] = lambda r: json_response(400, "owner does not exist", "trace-400")

        with pytest.raises(TransportError) as exc_info:
            client.create_policy(policy)

        error = exc_info.value
        assert error.status_code == 400
        assert error.trace_id == "trace-400"
        assert error.body == "owner does not exist"
        assert "HTTP Response Code: 400" in str(error)
        assert "Trace ID: trace-400" in str(error)
        assert "Details: owner does not exist" in str(error)

    def test_error_without_singular_trace_header(self, client, api, policy):
        """Test repeated X-Request-Id headers are ignored."""
        api.overrides["POST /policy"] = lambda r: httpx.Response(
            500, content="boom", headers=[("X-Request-Id", "a"), ("X-Request-Id", "b")]
        )

        with pytest.raises(TransportError) as exc_info:
            client.create_policy(policy)

        assert exc_info.value.trace_id is None
        assert "Trace ID" not in str(exc_info.value)

    def test_invalid_json_body(self, client, api, policy):
        """Test unparseable bodies raise DecodeError with the raw text."""
        api.overrides["POST /policy"] = lambda r: json_response(200, "<html>oops</html>")

        with pytest.raises(DecodeError) as exc_info:
            client.create_policy(policy)

        assert exc_info.value.details["body"] == "<html>oops</html>"
        assert "parse_error" in exc_info.value.details

    def test_network_failure(self, client, api, policy):
        """Test transport failures are wrapped and not retried."""
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        api.overrides["POST /policy"] = fail

        with pytest.raises(TransportError):
            client.create_policy(policy)

        assert len(api.requests) == 1

    def test_trace_id_injected(self, client, api):
        """Test successful bodies gain the traceId key."""
        body = client._do_request("GET", f"{TEST_HOST}/integrations/crosswire_terraform/validate")

        assert body["traceId"] == "trace-123"

    def test_get_policy_by_name(self, client, api):
        """Test lookup escapes the label."""
        doc = make_policy_doc(policy_id="pol-1", name="db readers & admins")
        api.policies["pol-1"] = doc

        policy = client.get_policy_by_name("db readers & admins")

        assert policy is not None
        assert policy.id == "pol-1"
        request = api.requests[0]
        assert request.url.params["label"] == "db readers & admins"
        assert b"&" not in request.url.query

    def test_get_policy_not_found(self, client, api):
        """Test an empty lookup is not an error."""
        assert client.get_policy_by_name("missing") is None

    def test_get_policy_multiple_results(self, client, api):
        """Test ambiguous lookups fail."""
        api.overrides["GET /policy"] = lambda r: json_response(200, {"policies": {
            "pol-1": make_policy_doc(policy_id="pol-1"),
            "pol-2": make_policy_doc(policy_id="pol-2"),
        }})

        with pytest.raises(MultipleResultsError):
            client.get_policy_by_name("engineering-admins")
