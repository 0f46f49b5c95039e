"""
Declarative resource models for the ``crosswire_policy`` resource.

Configuration input is validated strictly. State built from server
responses goes through ``model_validate`` with ``STATE_CONTEXT``, which
accepts whatever the codec decoded (e.g. a condition without a
quantifier) so a policy that exists remotely always lands in state.
"""

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator

from .policy.models import (
    ApprovalBehavior, Condition, Entitlement, Policy, Quantifier, SpecialApprover
)

RESOURCE_TYPE = "crosswire_policy"

# Deepest condition nesting the schema accepts
MAX_CONDITION_DEPTH = 3

STATE_CONTEXT = {"state": True}

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


def _upper(value: Any) -> Any:
    return value.upper() if isinstance(value, str) else value


def _is_state(info: ValidationInfo) -> bool:
    return bool(info.context and info.context.get("state"))


class UserModel(BaseModel):
    """A Crosswire user identified by email address."""
    email_address: str = Field(..., description="Email address of the user")

    @field_validator("email_address")
    @classmethod
    def _valid_email(cls, value: str, info: ValidationInfo) -> str:
        if not _is_state(info) and not EMAIL_PATTERN.match(value):
            raise ValueError("must be a valid email address")
        return value


class EntitlementModel(BaseModel):
    """Provider-subject-object tuple."""
    provider: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1)
    object: str = Field(..., min_length=1)

    def to_entitlement(self) -> Entitlement:
        return Entitlement(provider=self.provider, subject=self.subject, object=self.object)

    @classmethod
    def from_entitlement(cls, entitlement: Entitlement) -> "EntitlementModel":
        return cls(provider=entitlement.provider, subject=entitlement.subject, object=entitlement.object)


def _entitlements_from(models: Optional[List[EntitlementModel]]) -> List[Entitlement]:
    return [model.to_entitlement() for model in models or []]


def _entitlement_models(entitlements: List[Entitlement]) -> Optional[List[EntitlementModel]]:
    if not entitlements:
        return None
    return [EntitlementModel.from_entitlement(e) for e in entitlements]


class ConditionModel(BaseModel):
    """Condition block of a policy."""
    quantifier: Optional[Quantifier] = Field(
        ...,
        description="ANY only requires one of the entitlements or subconditions to be `true` in order "
                    "for this condition block to be true while ALL requires all of them to be true."
    )
    entitlements: Optional[List[EntitlementModel]] = Field(
        None,
        description="Set of provider-subject-object tuples governing the truth value of this condition block."
    )
    subconditions: Optional[List["ConditionModel"]] = Field(
        None,
        description="Set of subconditions governing the truth value of this condition block. If you need "
                    "more than 3 levels of subconditions, please contact someone at Crosswire for assistance."
    )

    @field_validator("quantifier", mode="before")
    @classmethod
    def _normalize_quantifier(cls, value: Any) -> Any:
        return _upper(value)

    @field_validator("quantifier")
    @classmethod
    def _require_quantifier(cls, value: Optional[Quantifier], info: ValidationInfo) -> Optional[Quantifier]:
        if value is None and not _is_state(info):
            raise ValueError("quantifier is required")
        return value

    def depth(self) -> int:
        if not self.subconditions:
            return 1
        return 1 + max(sub.depth() for sub in self.subconditions)

    def to_condition(self) -> Condition:
        return Condition(
            quantifier=self.quantifier,
            entitlements=_entitlements_from(self.entitlements),
            subconditions=[sub.to_condition() for sub in self.subconditions or []],
        )

    @classmethod
    def from_condition(cls, condition: Condition) -> "ConditionModel":
        return cls.model_validate(_condition_data(condition), context=STATE_CONTEXT)


def _condition_data(condition: Condition) -> Dict[str, Any]:
    return {
        "quantifier": condition.quantifier,
        "entitlements": _entitlement_models(condition.entitlements),
        "subconditions": [_condition_data(sub) for sub in condition.subconditions] or None,
    }


ConditionModel.model_rebuild()


class PolicyResourceModel(BaseModel):
    """Configuration and state of one ``crosswire_policy`` resource."""
    owner: UserModel = Field(
        ...,
        description="Email address of user creating the policy. This email address should exist within Crosswire."
    )
    name: str = Field(
        ..., min_length=1,
        description="Name of the policy. This is what users will see when requesting access."
    )
    entitlements: List[EntitlementModel] = Field(
        ...,
        description="Set of Provider-Subject-Object tuples corresponding to what access users will "
                    "receive upon getting access to the policy."
    )
    condition: ConditionModel = Field(..., description="Conditions necessary to become eligible for this policy.")
    special_approver: SpecialApprover = Field(
        SpecialApprover.NONE,
        description="AUTO will automatically grant the policy if eligible. SELF will grant the policy once "
                    "requested. MANAGER requires the subject's manager to approve access. If this is set to "
                    "anything besides NONE, don't set user_approvers or entitlement_approvers."
    )
    approval_behavior: ApprovalBehavior = Field(
        ApprovalBehavior.ANY,
        description="ANY requires only one approval from the set of approvers specified. ALL requires "
                    "approvals from every approver in order to gain access."
    )
    user_approvers: Optional[List[UserModel]] = Field(
        None, description="Set of users (email addresses) who will be approving requests to this policy."
    )
    entitlement_approvers: Optional[List[EntitlementModel]] = Field(
        None,
        description="Set of provider-subject-object tuples whose users will be approving requests to this "
                    "policy. Typically these would be group memberships rather than application access."
    )
    ttl: Optional[int] = Field(
        None, ge=0,
        description="Maximum number of seconds a user can hold the policy any given time"
    )

    # Computed
    id: Optional[str] = Field(None, description="Crosswire policy id")
    state: Optional[str] = Field(None, description="Current state of the policy")
    last_updated: Optional[str] = Field(
        None, description="Timestamp the provider received the policy's latest update"
    )

    @field_validator("special_approver", "approval_behavior", mode="before")
    @classmethod
    def _normalize_enums(cls, value: Any) -> Any:
        return _upper(value)

    @model_validator(mode="after")
    def _limit_condition_depth(self, info: ValidationInfo) -> "PolicyResourceModel":
        if not _is_state(info) and self.condition.depth() > MAX_CONDITION_DEPTH:
            raise ValueError(
                f"condition nests {self.condition.depth()} levels deep; at most {MAX_CONDITION_DEPTH} "
                "are supported. Please contact someone at Crosswire for assistance."
            )
        return self

    def to_policy(self) -> Policy:
        return Policy(
            owner=self.owner.email_address,
            name=self.name,
            entitlements=_entitlements_from(self.entitlements),
            condition=self.condition.to_condition(),
            special_approver=self.special_approver,
            approval_behavior=self.approval_behavior,
            user_approvers=[user.email_address for user in self.user_approvers or []],
            entitlement_approvers=_entitlements_from(self.entitlement_approvers),
            ttl=self.ttl,
            id=self.id,
            state=self.state,
        )

    @classmethod
    def from_policy(cls, policy: Policy, previous: Optional["PolicyResourceModel"] = None,
                    last_updated: Optional[str] = None) -> "PolicyResourceModel":
        """Build resource state from a policy returned by the server.

        Optional fields the server left unset keep their value from
        ``previous`` when one is given.
        """
        special_approver = policy.special_approver
        approval_behavior = policy.approval_behavior
        ttl = policy.ttl
        if previous is not None:
            special_approver = special_approver or previous.special_approver
            approval_behavior = approval_behavior or previous.approval_behavior
            ttl = ttl if ttl is not None else previous.ttl
            last_updated = last_updated or previous.last_updated

        return cls.model_validate({
            "owner": {"email_address": policy.owner},
            "name": policy.name,
            "entitlements": [EntitlementModel.from_entitlement(e) for e in policy.entitlements],
            "condition": _condition_data(policy.condition),
            "special_approver": special_approver or SpecialApprover.NONE,
            "approval_behavior": approval_behavior or ApprovalBehavior.ANY,
            "user_approvers": [{"email_address": u} for u in policy.user_approvers] or None,
            "entitlement_approvers": _entitlement_models(policy.entitlement_approvers),
            "ttl": ttl,
            "id": policy.id,
            "state": policy.state,
            "last_updated": last_updated,
        }, context=STATE_CONTEXT)
