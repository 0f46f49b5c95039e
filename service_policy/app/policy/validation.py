"""
Policy validation rules and diagnostics.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass
from enum import Enum

from shared.errors import ValidationError
from shared.logging import get_logger

from .models import Policy, SpecialApprover

logger = get_logger("policy.validation")


class Severity(str, Enum):
    """Diagnostic severity levels."""
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A single finding reported to the caller."""
    severity: Severity
    summary: str
    detail: str
    attribute: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "summary": self.summary,
            "detail": self.detail,
            "attribute": self.attribute,
        }


class Diagnostics(list):
    """Ordered collection of findings."""

    def add_error(self, summary: str, detail: str) -> None:
        self.append(Diagnostic(Severity.ERROR, summary, detail))

    def add_attribute_error(self, attribute: str, summary: str, detail: str) -> None:
        self.append(Diagnostic(Severity.ERROR, summary, detail, attribute))

    def add_warning(self, summary: str, detail: str) -> None:
        self.append(Diagnostic(Severity.WARNING, summary, detail))

    def has_error(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self if d.severity is Severity.WARNING]

    def to_list(self) -> List[Dict[str, Any]]:
        return [d.to_dict() for d in self]

    def raise_for_errors(self) -> None:
        """Raise ValidationError carrying every finding if any is an error."""
        if self.has_error():
            raise ValidationError(
                f"{len(self.errors)} error(s) reported",
                findings=self.to_list()
            )


def validate_policy(policy: Policy) -> Diagnostics:
    """Check cross-field rules before a policy is submitted.

    Every rule runs; findings are returned together rather than stopping
    at the first violation.
    """
    diagnostics = Diagnostics()

    if policy.has_ttl and policy.special_approver is SpecialApprover.AUTO:
        diagnostics.add_error(
            "Auto policies cannot have a TTL",
            "Because users are granted access automatically, TTL is redundant as it would "
            "continue to be regranted until the user no longer qualifies, at which time, the "
            "user would lose access immediately regardless of time remaining."
        )

    special_approver = policy.special_approver or SpecialApprover.NONE
    if special_approver is SpecialApprover.NONE and not policy.has_approvers:
        diagnostics.add_error(
            "No approvers selected",
            "At least one approver needs to be set to approve policy requests"
        )

    if not policy.entitlements:
        diagnostics.add_attribute_error(
            "entitlements",
            "No entitlements selected",
            "At least one entitlement needs to be set for the policy to function"
        )

    if diagnostics:
        logger.info("Policy validation findings", name=policy.name, findings=len(diagnostics))

    return diagnostics
