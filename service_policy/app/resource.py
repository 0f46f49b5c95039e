"""
Lifecycle operations for the ``crosswire_policy`` resource.

``PolicyResource`` is the capability surface a front-end drives:
validate_config, create, read and import_state talk to Crosswire, while
update and delete are answered locally with fixed diagnostics because the
API does not support them yet.
"""

from datetime import datetime, timezone
from typing import Optional
from dataclasses import dataclass, field

from pydantic import ValidationError as SchemaValidationError

from shared.logging import get_logger
from shared.errors import DecodeError, ProviderException

from .adapters.crosswire_client import CrosswireClient
from .policy.models import Policy
from .policy.validation import Diagnostics, validate_policy
from .schema import PolicyResourceModel

UNSUPPORTED_DETAIL = "Please contact customer support for additional information."
UPDATE_UNSUPPORTED = "Update is not yet supported"
DELETE_UNSUPPORTED = "Delete is not yet supported"

# RFC 850 timestamp, e.g. "Monday, 02-Jan-06 15:04:05 UTC"
LAST_UPDATED_FORMAT = "%A, %d-%b-%y %H:%M:%S %Z"


@dataclass
class LifecycleResult:
    """Outcome of a lifecycle operation.

    ``state`` is ``None`` when the operation produced no resource state,
    e.g. a read that found nothing or a blocked create.
    """
    state: Optional[PolicyResourceModel] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime(LAST_UPDATED_FORMAT)


class PolicyResource:
    """Policy resource bound to a configured Crosswire client."""

    def __init__(self, client: CrosswireClient):
        self.client = client
        self.logger = get_logger("provider.policy_resource")

    def validate_config(self, config: PolicyResourceModel) -> Diagnostics:
        """Run the policy validation rules against resource configuration."""
        return validate_policy(config.to_policy())

    def create(self, plan: PolicyResourceModel) -> LifecycleResult:
        """Validate and create the planned policy."""
        result = LifecycleResult()
        policy = plan.to_policy()

        result.diagnostics.extend(validate_policy(policy))
        if result.diagnostics.has_error():
            self.logger.warning("Policy create blocked by validation", name=plan.name)
            return result

        try:
            created = self.client.create_policy(policy)
            result.state = PolicyResourceModel.from_policy(
                created, previous=plan, last_updated=_timestamp()
            )
        except (ProviderException, SchemaValidationError) as e:
            self.logger.error("Error creating policy", name=plan.name, error=str(e))
            result.diagnostics.add_error(
                "Error creating policy",
                f"Could not create policy, unexpected error: {e}"
            )
            return result

        self.logger.info("Created policy resource", policy_id=result.state.id, name=result.state.name)
        return result

    def read(self, state: PolicyResourceModel) -> LifecycleResult:
        """Refresh state from Crosswire.

        Looks the policy up by id, or by name when no id is recorded. A
        policy that no longer exists yields ``state=None`` with no
        diagnostics.
        """
        return self._refresh(state.id or state.name, previous=state)

    def import_state(self, policy_id: str) -> LifecycleResult:
        """Build state for an existing policy from its id."""
        return self._refresh(policy_id, previous=None)

    def update(self, plan: PolicyResourceModel, state: PolicyResourceModel) -> LifecycleResult:
        result = LifecycleResult(state=state)
        result.diagnostics.add_error(UPDATE_UNSUPPORTED, UNSUPPORTED_DETAIL)
        return result

    def delete(self, state: Optional[PolicyResourceModel] = None) -> LifecycleResult:
        # The policy stays on the server; the warning tells the caller so
        result = LifecycleResult()
        result.diagnostics.add_warning(DELETE_UNSUPPORTED, UNSUPPORTED_DETAIL)
        return result

    def _refresh(self, label: str, previous: Optional[PolicyResourceModel]) -> LifecycleResult:
        result = LifecycleResult()
        try:
            policy = self.client.get_policy_by_name(label)
            if policy is None:
                self.logger.info("Policy no longer exists", label=label)
                return result
            _require_approval_settings(policy)
            result.state = PolicyResourceModel.from_policy(
                policy, previous=previous,
                last_updated=None if previous else _timestamp()
            )
        except (ProviderException, SchemaValidationError) as e:
            self.logger.error("Error reading policy", label=label, error=str(e))
            result.diagnostics.add_error(
                "Error Reading Policies",
                f"Could not read policies, unexpected error: {e}"
            )
        return result


def _require_approval_settings(policy: Policy) -> None:
    # Stored policies always carry both settings; a gap means a bad response
    if policy.special_approver is None:
        raise DecodeError("SpecialApprover: missing from stored policy", field="SpecialApprover")
    if policy.approval_behavior is None:
        raise DecodeError("ApprovalBehavior: missing from stored policy", field="ApprovalBehavior")
