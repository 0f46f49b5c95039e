"""
Crosswire API client for the policy provider.
"""

import json
import httpx
from typing import Dict, Any, Optional

from shared.config import DEFAULT_HOST
from shared.logging import get_logger, set_trace_id
from shared.errors import (
    ConfigurationError, DecodeError, MalformedResponseError, TransportError
)

from ..policy.codec import decode_policy, decode_policy_lookup, encode_policy
from ..policy.models import Policy

API_PREFIX = "/integrations/crosswire_terraform"
TOKEN_HEADER = "Token"
TRACE_HEADER = "X-Request-Id"


class CrosswireClient:
    """Client for communicating with the Crosswire integrations API.

    Each call is one blocking request. Nothing is retried: a failed
    ``create_policy`` may still have created the policy server-side.
    """

    def __init__(self, host_url: str = DEFAULT_HOST, token: Optional[str] = None,
                 timeout: float = 10.0, http_client: Optional[httpx.Client] = None):
        self.host_url = host_url.rstrip("/")
        self.token = token
        self.http_client = http_client or httpx.Client(timeout=timeout)
        self.logger = get_logger("provider.crosswire_client")

    def close(self) -> None:
        self.http_client.close()

    def _url(self, path: str) -> str:
        return f"{self.host_url}{API_PREFIX}{path}"

    def _require_token(self) -> None:
        if not self.token:
            raise ConfigurationError("please enter a token", config_key="api_token")

    def validate_credentials(self, auth_token: Optional[str] = None) -> bool:
        """Check the configured token against the validation endpoint."""
        self._require_token()

        body = self._do_request("GET", self._url("/validate"), auth_token=auth_token)

        if "success" not in body:
            message = f"Received invalid response body: {body}"
            trace_id = body.get("traceId")
            if trace_id:
                message = f"{message}\nPlease use reference ID {trace_id} when requesting support."
            raise MalformedResponseError(message, trace_id=trace_id, body=body)

        success = body["success"]
        return success if isinstance(success, bool) else False

    def create_policy(self, policy: Policy, auth_token: Optional[str] = None) -> Policy:
        """Submit a policy and return the server's canonical copy."""
        self._require_token()

        body = self._do_request(
            "POST", self._url("/policy"), payload=encode_policy(policy), auth_token=auth_token
        )
        created = decode_policy(body)
        self.logger.info("Policy created", policy_id=created.id, name=created.name, state=created.state)
        return created

    def get_policy_by_name(self, name: str, auth_token: Optional[str] = None) -> Optional[Policy]:
        """Look up a policy by label; ``None`` when no policy matches."""
        self._require_token()

        body = self._do_request(
            "GET", self._url("/policy"), params={"label": name}, auth_token=auth_token
        )
        policy = decode_policy_lookup(body)
        if policy is None:
            self.logger.info("Policy not found", label=name)
        return policy

    def _do_request(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None,
                    params: Optional[Dict[str, str]] = None,
                    auth_token: Optional[str] = None) -> Dict[str, Any]:
        headers = {TOKEN_HEADER: auth_token if auth_token is not None else (self.token or "")}

        try:
            response = self.http_client.request(
                method, url, json=payload, params=params, headers=headers
            )
        except httpx.HTTPError as e:
            self.logger.error("Crosswire API HTTP error", method=method, url=url, error=str(e))
            raise TransportError(
                f"Crosswire API request failed: {e}",
                details={"http_error": str(e)}
            ) from e

        trace_ids = response.headers.get_list(TRACE_HEADER)
        trace_id = trace_ids[0] if len(trace_ids) == 1 else None
        set_trace_id(trace_id)
        text = response.text

        if not response.is_success:
            self.logger.error(
                "Crosswire API error response",
                method=method, url=url, status_code=response.status_code
            )
            raise TransportError(
                _describe(response.status_code, trace_id, text),
                status_code=response.status_code,
                trace_id=trace_id,
                body=text
            )

        try:
            data = json.loads(text)
        except ValueError as e:
            raise DecodeError(
                _describe(response.status_code, trace_id, text, error=str(e)),
                details={"body": text, "parse_error": str(e), "trace_id": trace_id}
            ) from e

        if not isinstance(data, dict):
            raise DecodeError(
                _describe(response.status_code, trace_id, text, error="expected a JSON object"),
                details={"body": text, "trace_id": trace_id}
            )

        if trace_id:
            data["traceId"] = trace_id
        return data


def _describe(status_code: int, trace_id: Optional[str], body: str, error: Optional[str] = None) -> str:
    lines = [f"HTTP Response Code: {status_code}"]
    if trace_id:
        lines.append(f"Trace ID: {trace_id}")
    if error:
        lines.append(f"Error: {error}")
    lines.append(f"Details: {body}")
    return "\n".join(lines)
