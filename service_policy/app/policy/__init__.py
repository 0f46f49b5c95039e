"""
Policy domain package.

Defines the policy data model and the logic that moves it across the
wire. Policies are plain values; the codec and validation rules are
pure functions over them.

Modules of interest:
- models: Entitlement, Condition and Policy value types plus enums.
- codec: Encoding to and decoding from the remote JSON documents.
- validation: Cross-field rules reported as diagnostics.
"""

from .models import (
    Entitlement, Condition, Policy,
    Quantifier, SpecialApprover, ApprovalBehavior
)
from .codec import (
    encode_entitlement, encode_condition, encode_policy,
    decode_entitlement, decode_condition, decode_policy, decode_policy_lookup
)
from .validation import Severity, Diagnostic, Diagnostics, validate_policy

__all__ = [
    "Entitlement",
    "Condition",
    "Policy",
    "Quantifier",
    "SpecialApprover",
    "ApprovalBehavior",
    "encode_entitlement",
    "encode_condition",
    "encode_policy",
    "decode_entitlement",
    "decode_condition",
    "decode_policy",
    "decode_policy_lookup",
    "Severity",
    "Diagnostic",
    "Diagnostics",
    "validate_policy",
]
