"""
Wire codec between policy models and Crosswire JSON documents.

The remote API speaks PascalCase keys. Encoding is plain structural
serialization. Decoding checks the type of every field it reads and
raises a DecodeError (usually TypeMismatchError) naming the offending
field path instead of trusting the document's shape.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar
from enum import Enum

from shared.errors import DecodeError, MultipleResultsError, TypeMismatchError, MISSING

from .models import (
    ApprovalBehavior, Condition, Entitlement, Policy, Quantifier, SpecialApprover
)

E = TypeVar("E", bound=Enum)

JSONDict = Dict[str, Any]


def encode_entitlement(entitlement: Entitlement) -> JSONDict:
    return {
        "Provider": entitlement.provider,
        "Subject": entitlement.subject,
        "Object": entitlement.object,
    }


def encode_condition(condition: Condition) -> JSONDict:
    return {
        "Quantifier": condition.quantifier.value if condition.quantifier else None,
        "Entitlements": [encode_entitlement(e) for e in condition.entitlements],
        "Subconditions": [encode_condition(c) for c in condition.subconditions],
    }


def encode_policy(policy: Policy) -> JSONDict:
    """Serialize every policy field; unset optionals become ``None``."""
    return {
        "Owner": policy.owner,
        "Name": policy.name,
        "Entitlements": [encode_entitlement(e) for e in policy.entitlements],
        "Condition": encode_condition(policy.condition),
        "SpecialApprover": policy.special_approver.value if policy.special_approver else None,
        "ApprovalBehavior": policy.approval_behavior.value if policy.approval_behavior else None,
        "UserApprovers": list(policy.user_approvers),
        "EntitlementApprovers": [encode_entitlement(e) for e in policy.entitlement_approvers],
        "Ttl": policy.ttl,
        "Id": policy.id,
        "State": policy.state,
    }


def _path(parent: str, key: Any) -> str:
    if isinstance(key, int):
        return f"{parent}[{key}]"
    return f"{parent}.{key}" if parent else key


def _mapping(value: Any, path: str) -> JSONDict:
    if not isinstance(value, dict):
        raise TypeMismatchError(path, "object", value)
    return value


def _required_string(doc: JSONDict, key: str, path: str) -> str:
    value = doc.get(key, MISSING)
    if not isinstance(value, str):
        raise TypeMismatchError(_path(path, key), "string", value)
    return value


def _optional_string(doc: JSONDict, key: str, path: str) -> Optional[str]:
    value = doc.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise TypeMismatchError(_path(path, key), "string", value)
    return value


def _optional_list(doc: JSONDict, key: str, path: str) -> List[Any]:
    value = doc.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeMismatchError(_path(path, key), "array", value)
    return value


def _optional_enum(doc: JSONDict, key: str, path: str, enum_type: Type[E]) -> Optional[E]:
    # Absent, null and "" all mean unset
    raw = _optional_string(doc, key, path)
    if not raw:
        return None
    try:
        return enum_type(raw.upper())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise DecodeError(
            f"{_path(path, key)}: unknown value {raw!r}, expected one of {allowed}",
            field=_path(path, key)
        )


def _optional_ttl(doc: JSONDict, key: str, path: str) -> Optional[int]:
    value = doc.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeMismatchError(_path(path, key), "integer", value)
    if isinstance(value, float):
        if not value.is_integer():
            raise TypeMismatchError(_path(path, key), "integer", value)
        value = int(value)
    # Zero and negative values mean "no TTL"
    return value if value > 0 else None


def decode_entitlement(value: Any, path: str = "Entitlement") -> Entitlement:
    doc = _mapping(value, path)
    return Entitlement(
        provider=_required_string(doc, "Provider", path),
        subject=_required_string(doc, "Subject", path),
        object=_required_string(doc, "Object", path),
    )


def _decode_entitlements(items: List[Any], path: str) -> List[Entitlement]:
    return [decode_entitlement(item, _path(path, i)) for i, item in enumerate(items)]


def decode_condition(value: Any, path: str = "Condition") -> Condition:
    """Decode a condition tree to any depth.

    Missing ``Quantifier``, ``Entitlements`` and ``Subconditions`` keys
    leave the zero value in place.
    """
    doc = _mapping(value, path)
    condition = Condition(quantifier=_optional_enum(doc, "Quantifier", path, Quantifier))

    entitlements_path = _path(path, "Entitlements")
    condition.entitlements = _decode_entitlements(
        _optional_list(doc, "Entitlements", path), entitlements_path
    )

    subconditions_path = _path(path, "Subconditions")
    condition.subconditions = [
        decode_condition(item, _path(subconditions_path, i))
        for i, item in enumerate(_optional_list(doc, "Subconditions", path))
    ]
    return condition


def decode_policy(value: Any, path: str = "") -> Policy:
    """Decode a policy document returned by the Crosswire API."""
    doc = _mapping(value, path or "Policy")

    if "Entitlements" not in doc:
        raise TypeMismatchError(_path(path, "Entitlements"), "array", MISSING)
    if "Condition" not in doc:
        raise TypeMismatchError(_path(path, "Condition"), "object", MISSING)

    user_approvers = []
    approvers_path = _path(path, "UserApprovers")
    for i, item in enumerate(_optional_list(doc, "UserApprovers", path)):
        if not isinstance(item, str):
            raise TypeMismatchError(_path(approvers_path, i), "string", item)
        user_approvers.append(item)

    return Policy(
        owner=_required_string(doc, "Owner", path),
        name=_required_string(doc, "Name", path),
        entitlements=_decode_entitlements(
            _optional_list(doc, "Entitlements", path), _path(path, "Entitlements")
        ),
        condition=decode_condition(doc["Condition"], _path(path, "Condition")),
        special_approver=_optional_enum(doc, "SpecialApprover", path, SpecialApprover),
        approval_behavior=_optional_enum(doc, "ApprovalBehavior", path, ApprovalBehavior),
        user_approvers=user_approvers,
        entitlement_approvers=_decode_entitlements(
            _optional_list(doc, "EntitlementApprovers", path), _path(path, "EntitlementApprovers")
        ),
        ttl=_optional_ttl(doc, "Ttl", path),
        id=_optional_string(doc, "Id", path),
        state=_optional_string(doc, "State", path),
    )


def decode_policy_lookup(body: Any) -> Optional[Policy]:
    """Decode a ``{"policies": {<id>: <policy>}}`` lookup response.

    Returns ``None`` when nothing matched. More than one entry raises
    MultipleResultsError; an entry filed under a key other than its own
    ``Id`` raises DecodeError.
    """
    doc = _mapping(body, "response")
    policies = doc.get("policies")
    if policies is None:
        return None
    policies = _mapping(policies, "policies")

    if len(policies) > 1:
        raise MultipleResultsError(len(policies))

    for policy_id, raw in policies.items():
        path = _path("policies", policy_id)
        entry = _mapping(raw, path)
        inner_id = _required_string(entry, "Id", path)
        if inner_id != policy_id:
            raise DecodeError(
                f"{path}: policy filed under {policy_id!r} reports Id {inner_id!r}",
                field=_path(path, "Id"),
                details={"key": policy_id, "id": inner_id}
            )
        return decode_policy(entry, path)

    return None
