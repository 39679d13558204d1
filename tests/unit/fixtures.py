"""
Test data builders and in-memory provider directories.

Use these instead of boto3 clients when a test only cares about resolver
behavior, not about the shape of the AWS responses.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from src.utils.errors import ProviderUnavailableError
from src.utils.models import CertificateCandidate, CertificateStatus, ZoneCandidate

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
PAST = NOW - timedelta(days=30)
FUTURE = NOW + timedelta(days=300)


def make_certificate(
    domain_name: str,
    arn: Optional[str] = None,
    status: CertificateStatus = CertificateStatus.ISSUED,
    not_after: Optional[datetime] = FUTURE,
) -> CertificateCandidate:
    """Build a certificate candidate.

    Args:
        domain_name: Certificate domain, may start with '*.'
        arn: Certificate ARN; derived from the domain when omitted
        status: ACM status
        not_after: Expiry, in the future by default
    """
    return CertificateCandidate(
        domain_name=domain_name,
        identifier=arn or f"arn:aws:acm:us-east-1:123456789012:certificate/{domain_name}",
        status=status,
        not_after=not_after,
    )


def make_zone(name: str, zone_id: str, private: bool = False) -> ZoneCandidate:
    """Build a hosted zone candidate with a Route53-style raw id."""
    return ZoneCandidate(name=name, identifier=f"/hostedzone/{zone_id}", is_private=private)


class FakeCertificateDirectory:
    def __init__(self, certificates: Sequence[CertificateCandidate] = (), error: Optional[Exception] = None):
        self.certificates = list(certificates)
        self.error = error
        self.calls: List[Tuple[Any, ...]] = []

    def list_certificates(self, statuses: Iterable[CertificateStatus]) -> List[CertificateCandidate]:
        self.calls.append(tuple(statuses))
        if self.error:
            raise self.error
        return list(self.certificates)


class FakeZoneDirectory:
    """Keeps alias records keyed by (zone, name, type), like Route53 does."""

    def __init__(self, zones: Sequence[ZoneCandidate] = (), change_error: Optional[Exception] = None):
        self.zones = list(zones)
        self.change_error = change_error
        self.records: Dict[Tuple[str, str, str], Dict[str, Any]] = {}
        self.list_calls = 0
        self.batches: List[Tuple[str, List[Dict[str, Any]], str]] = []

    def list_zones(self) -> List[ZoneCandidate]:
        self.list_calls += 1
        return list(self.zones)

    def change_alias_records(self, zone_id: str, changes: Sequence[Dict[str, Any]], comment: str) -> None:
        if self.change_error:
            raise self.change_error
        self.batches.append((zone_id, list(changes), comment))
        for change in changes:
            record = change["ResourceRecordSet"]
            key = (zone_id, record["Name"], record["Type"])
            if change["Action"] == "UPSERT":
                self.records[key] = record
            else:
                self.records.pop(key)


class FakeDistributionDirectory:
    """Returns scripted invalidation statuses; an Exception entry is raised."""

    def __init__(
        self,
        distribution_id: Optional[str] = "E2EXAMPLE",
        statuses: Sequence[Union[str, Exception]] = ("Completed",),
        create_error: Optional[Exception] = None,
    ):
        self.distribution_id = distribution_id
        self.statuses = list(statuses)
        self.create_error = create_error
        self.created: List[Tuple[str, Tuple[str, ...], str]] = []
        self.reads = 0

    def find_distribution_id(self, stack_name: str) -> Optional[str]:
        return self.distribution_id

    def create_invalidation(self, distribution_id: str, paths: Sequence[str], caller_reference: str) -> str:
        if self.create_error:
            raise self.create_error
        self.created.append((distribution_id, tuple(paths), caller_reference))
        return "I2EXAMPLE"

    def get_invalidation_status(self, distribution_id: str, invalidation_id: str) -> str:
        status = self.statuses[min(self.reads, len(self.statuses) - 1)]
        self.reads += 1
        if isinstance(status, Exception):
            raise status
        return status


class FakeClock:
    """Monotonic clock advanced only by wait()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.waits: List[float] = []

    def __call__(self) -> float:
        return self.now

    def wait(self, seconds: float) -> bool:
        self.waits.append(seconds)
        self.now += seconds
        return False


def unavailable(message: str = "throttled") -> ProviderUnavailableError:
    return ProviderUnavailableError(message, {"operation": "GetInvalidation"})
