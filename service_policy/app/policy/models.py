"""
Policy data models for the Crosswire policy provider.
"""

from typing import List, Optional
from dataclasses import dataclass, field
from enum import Enum


class Quantifier(str, Enum):
    """How a condition combines its entitlements and subconditions."""
    ANY = "ANY"
    ALL = "ALL"


class SpecialApprover(str, Enum):
    """Approval shortcuts that replace explicit approvers."""
    NONE = "NONE"
    AUTO = "AUTO"
    SELF = "SELF"
    MANAGER = "MANAGER"


class ApprovalBehavior(str, Enum):
    """How many approvers must sign off on a request."""
    ANY = "ANY"
    ALL = "ALL"


@dataclass(frozen=True)
class Entitlement:
    """Provider-subject-object grant tuple."""
    provider: str
    subject: str
    object: str


@dataclass
class Condition:
    """Eligibility tree.

    ANY is satisfied by one held entitlement or one satisfied
    subcondition; ALL needs every entitlement and every subcondition.
    Evaluation happens server-side. ``quantifier`` is ``None`` only when a
    decoded document omitted it.
    """
    quantifier: Optional[Quantifier] = None
    entitlements: List[Entitlement] = field(default_factory=list)
    subconditions: List["Condition"] = field(default_factory=list)

    def depth(self) -> int:
        """Number of condition levels, counting this one."""
        if not self.subconditions:
            return 1
        return 1 + max(sub.depth() for sub in self.subconditions)


@dataclass
class Policy:
    """Access-control rule managed on the Crosswire service."""
    owner: str
    name: str
    entitlements: List[Entitlement] = field(default_factory=list)
    condition: Condition = field(default_factory=Condition)
    special_approver: Optional[SpecialApprover] = SpecialApprover.NONE
    approval_behavior: Optional[ApprovalBehavior] = ApprovalBehavior.ANY
    user_approvers: List[str] = field(default_factory=list)
    entitlement_approvers: List[Entitlement] = field(default_factory=list)
    ttl: Optional[int] = None

    # Assigned by the server
    id: Optional[str] = None
    state: Optional[str] = None

    @property
    def has_ttl(self) -> bool:
        return self.ttl is not None and self.ttl > 0

    @property
    def has_approvers(self) -> bool:
        return bool(self.user_approvers) or bool(self.entitlement_approvers)
