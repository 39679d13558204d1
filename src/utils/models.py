"""
Data model shared by the resolvers and the provider directories.

Candidates are read-only snapshots fetched fresh for one resolution pass.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple


class CertificateStatus(str, Enum):
    """ACM certificate status, collapsed to the values the resolver cares about."""

    PENDING_VALIDATION = "PENDING_VALIDATION"
    ISSUED = "ISSUED"
    INACTIVE = "INACTIVE"
    OTHER = "OTHER"

    @classmethod
    def from_provider(cls, value: Optional[str]) -> "CertificateStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


# Statuses requested from ACM when listing candidates
LISTED_CERTIFICATE_STATUSES: Tuple[CertificateStatus, ...] = (
    CertificateStatus.PENDING_VALIDATION,
    CertificateStatus.ISSUED,
    CertificateStatus.INACTIVE,
)


@dataclass(frozen=True)
class CertificateCandidate:
    """One ACM certificate returned by the certificate directory."""

    domain_name: str
    identifier: str
    status: CertificateStatus
    not_after: Optional[datetime]


@dataclass(frozen=True)
class ZoneCandidate:
    """One Route53 hosted zone returned by the zone directory."""

    name: str  # dot-terminated, case preserved
    identifier: str  # raw provider id, e.g. /hostedzone/Z123
    is_private: bool


@dataclass(frozen=True)
class ResolutionRequest:
    """What the caller knows about the resource it wants resolved."""

    explicit_override: Optional[str] = None
    target_domain: Optional[str] = None
    name_hint: Optional[str] = None
    zone_filter: Optional[bool] = None


class Outcome(str, Enum):
    """Result of an opportunistic post-deploy step."""

    SKIPPED = "skipped"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    CANCELLED = "cancelled"


class InvalidationStatus(str, Enum):
    SUBMITTED = "Submitted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    FAILED = "Failed"


# Paths purged by every invalidation
INVALIDATION_PATHS: Tuple[str, ...] = ("/*",)


@dataclass
class InvalidationJob:
    """
    A submitted CloudFront invalidation and its locally observed status.

    Mutated only by polling reads; discarded once a terminal status is seen
    or the caller stops waiting.
    """

    distribution_id: str
    caller_reference: str
    paths: Tuple[str, ...] = INVALIDATION_PATHS
    invalidation_id: Optional[str] = None
    status: InvalidationStatus = InvalidationStatus.SUBMITTED
    history: List[InvalidationStatus] = field(default_factory=list)
    polls: int = 0

    def transition(self, status: InvalidationStatus) -> None:
        self.status = status
        self.history.append(status)


@dataclass
class ReconcileResult:
    """What the info hook reports back to its host."""

    records: Outcome
    invalidation: Outcome
    invalidation_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def outcome(self) -> Outcome:
        """Overall outcome; record failures raise, so the invalidation decides."""
        return self.invalidation
