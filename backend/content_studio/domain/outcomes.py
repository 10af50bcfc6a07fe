"""Outcome value objects for the generation transaction.

Negative outcomes are returned as ``Rejection`` values, never raised, so the
route layer decides how each kind is surfaced.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from content_studio.db.models.artifact import Artifact


class RejectionKind(StrEnum):
    MISSING_IDENTITY = "missing_identity"
    INVALID_REQUEST = "invalid_request"
    UNKNOWN_ACCOUNT = "unknown_account"
    INSUFFICIENT_BALANCE = "insufficient_balance"
    GENERATION_FAILED = "generation_failed"
    PERSISTENCE_FAILED = "persistence_failed"
    NOT_FOUND_OR_UNAUTHORIZED = "not_found_or_unauthorized"


# HTTP status per rejection kind
REJECTION_STATUS_CODES: dict[RejectionKind, int] = {
    RejectionKind.MISSING_IDENTITY: 400,
    RejectionKind.INVALID_REQUEST: 400,
    RejectionKind.UNKNOWN_ACCOUNT: 404,
    RejectionKind.INSUFFICIENT_BALANCE: 400,
    RejectionKind.GENERATION_FAILED: 500,
    RejectionKind.PERSISTENCE_FAILED: 500,
    RejectionKind.NOT_FOUND_OR_UNAUTHORIZED: 404,
}


@dataclass(frozen=True)
class Rejection:
    """A named, non-exceptional negative outcome."""

    kind: RejectionKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return REJECTION_STATUS_CODES[self.kind]

    def to_detail(self) -> dict[str, Any]:
        """Serialize for an HTTP error body."""
        return {"code": self.kind.value, "message": self.message, **self.details}


@dataclass(frozen=True)
class GenerationRequest:
    """Transient input to one generation transaction."""

    content_type: str | None
    topic: str | None
    tone: str | None
    length: str | None
    additional_context: str | None = None

    def missing_fields(self) -> list[str]:
        """Return the names of required fields that are absent or blank."""
        required = {
            "content_type": self.content_type,
            "topic": self.topic,
            "tone": self.tone,
            "length": self.length,
        }
        return [name for name, value in required.items() if value is None or not str(value).strip()]

    def metadata(self) -> dict[str, Any]:
        return {
            "tone": self.tone,
            "length": self.length,
            "additional_context": self.additional_context,
        }


@dataclass(frozen=True)
class GenerationSuccess:
    """A generated, persisted artifact.

    ``billing_consistent`` is False for the debit-failed outcome: the artifact
    exists and is usable but the balance was not decremented, so it needs
    reconciliation. ``remaining_credits`` is then the last known balance.
    """

    artifact: Artifact
    cost: int
    remaining_credits: int
    billing_consistent: bool = True
    warning: str | None = None

    @property
    def debit_failed(self) -> bool:
        return not self.billing_consistent


def missing_identity() -> Rejection:
    return Rejection(RejectionKind.MISSING_IDENTITY, "User ID required")


def not_found_or_unauthorized() -> Rejection:
    return Rejection(RejectionKind.NOT_FOUND_OR_UNAUTHORIZED, "Content not found or unauthorized")


def unknown_account() -> Rejection:
    return Rejection(RejectionKind.UNKNOWN_ACCOUNT, "User not found")


def insufficient_balance(required: int, available: int) -> Rejection:
    return Rejection(
        RejectionKind.INSUFFICIENT_BALANCE,
        f"Insufficient credits. You need {required} credits, but you have {available}.",
        {"required": required, "available": available},
    )
