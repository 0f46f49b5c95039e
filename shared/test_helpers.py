"""
Test helper functions and factory methods for the Crosswire policy provider.
"""

import json
import uuid
from typing import Dict, Any, Optional, List, Callable
from dataclasses import dataclass, field

import httpx

TEST_HOST = "https://crosswire.test"
TEST_TOKEN = "test-token"


def make_entitlement_doc(provider: str = "CROSSWIRE", subject: str = "READ",
                         object: str = "POLICY") -> Dict[str, str]:
    """Create an entitlement document in wire format."""
    return {"Provider": provider, "Subject": subject, "Object": object}


def make_condition_doc(quantifier: Optional[str] = "ANY",
                       entitlements: Optional[List[Dict[str, str]]] = None,
                       subconditions: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """Create a condition document in wire format."""
    return {
        "Quantifier": quantifier,
        "Entitlements": entitlements if entitlements is not None else [],
        "Subconditions": subconditions if subconditions is not None else [],
    }


def make_policy_doc(policy_id: Optional[str] = None, name: str = "engineering-admins",
                    state: Optional[str] = "ACTIVE", **overrides) -> Dict[str, Any]:
    """Create a policy document as the Crosswire API returns it."""
    doc = {
        "Id": policy_id if policy_id is not None else str(uuid.uuid4()),
        "Owner": "user@company.com",
        "Name": name,
        "State": state,
        "Entitlements": [
            make_entitlement_doc("CROSSWIRE", "CREATE", "ENTITLEMENT"),
            make_entitlement_doc("CROSSWIRE", "CREATE", "PROPOSAL"),
        ],
        "Condition": make_condition_doc(
            "ANY",
            [make_entitlement_doc("CROSSWIRE", "ROLE", "ADMIN")],
            [make_condition_doc("ALL", [
                make_entitlement_doc("CROSSWIRE", "READ", "POLICY"),
                make_entitlement_doc("CROSSWIRE", "CREATE", "POLICY"),
                make_entitlement_doc("CROSSWIRE", "READ", "ENTITLEMENT"),
            ])]
        ),
        "SpecialApprover": "NONE",
        "ApprovalBehavior": "ANY",
        "UserApprovers": ["approver@company.com"],
        "EntitlementApprovers": [make_entitlement_doc("CROSSWIRE", "APPROVE", "PROPOSAL")],
        "Ttl": None,
    }
    doc.update(overrides)
    return doc


def make_policy_config(name: str = "engineering-admins", **overrides) -> Dict[str, Any]:
    """Create ``crosswire_policy`` resource configuration."""
    config = {
        "owner": {"email_address": "user@company.com"},
        "name": name,
        "entitlements": [
            {"provider": "CROSSWIRE", "subject": "CREATE", "object": "ENTITLEMENT"},
            {"provider": "CROSSWIRE", "subject": "CREATE", "object": "PROPOSAL"},
        ],
        "condition": {
            "quantifier": "ANY",
            "entitlements": [{"provider": "CROSSWIRE", "subject": "ROLE", "object": "ADMIN"}],
            "subconditions": [
                {
                    "quantifier": "ALL",
                    "entitlements": [
                        {"provider": "CROSSWIRE", "subject": "READ", "object": "POLICY"},
                        {"provider": "CROSSWIRE", "subject": "CREATE", "object": "POLICY"},
                        {"provider": "CROSSWIRE", "subject": "READ", "object": "ENTITLEMENT"},
                    ],
                }
            ],
        },
        "user_approvers": [{"email_address": "approver@company.com"}],
        "entitlement_approvers": [{"provider": "CROSSWIRE", "subject": "APPROVE", "object": "PROPOSAL"}],
        "approval_behavior": "ANY",
    }
    config.update(overrides)
    return config


def json_response(status_code: int, body: Any, trace_id: Optional[str] = None) -> httpx.Response:
    """Build a JSON response, optionally carrying an X-Request-Id header."""
    headers = {"X-Request-Id": trace_id} if trace_id else {}
    content = body if isinstance(body, (str, bytes)) else json.dumps(body)
    return httpx.Response(status_code, content=content, headers=headers)


@dataclass
class FakeCrosswireAPI:
    """In-memory stand-in for the Crosswire integrations API.

    Mount it with ``httpx.Client(transport=api.transport())``. Every
    request is recorded; ``overrides`` maps ``"METHOD /path"`` to a
    handler returning a canned response.
    """
    token: str = TEST_TOKEN
    policies: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    requests: List[httpx.Request] = field(default_factory=list)
    overrides: Dict[str, Callable[[httpx.Request], httpx.Response]] = field(default_factory=dict)
    trace_id: Optional[str] = "trace-123"

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=self.transport())

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.replace("/integrations/crosswire_terraform", "", 1)
        key = f"{request.method} {path}"
        if key in self.overrides:
            return self.overrides[key](request)

        if request.headers.get("Token") != self.token:
            return json_response(401, "invalid token", self.trace_id)

        if key == "GET /validate":
            return json_response(200, {"success": True}, self.trace_id)
        if key == "POST /policy":
            return self._create(request)
        if key == "GET /policy":
            return self._lookup(request.url.params.get("label", ""))
        return json_response(404, "not found", self.trace_id)

    def _create(self, request: httpx.Request) -> httpx.Response:
        doc = json.loads(request.content)
        doc["Id"] = str(uuid.uuid4())
        doc["State"] = "ACTIVE"
        self.policies[doc["Id"]] = doc
        return json_response(200, doc, self.trace_id)

    def _lookup(self, label: str) -> httpx.Response:
        matches = {
            policy_id: doc for policy_id, doc in self.policies.items()
            if label in (policy_id, doc.get("Name"))
        }
        return json_response(200, {"policies": matches}, self.trace_id)
