"""Viewer certificate resolution against ACM."""

from datetime import datetime, timezone
from typing import Optional, Sequence

from ..utils.clients import CertificateDirectory
from ..utils.domains import is_enclosing, specificity
from ..utils.errors import NotFoundError
from ..utils.logging import StructuredLogger, get_logger
from ..utils.models import LISTED_CERTIFICATE_STATUSES, CertificateCandidate

logger = get_logger(__name__)


def _is_expired(candidate: CertificateCandidate, now: datetime) -> bool:
    if candidate.not_after is None:
        return False
    not_after = candidate.not_after
    if not_after.tzinfo is None:
        not_after = not_after.replace(tzinfo=timezone.utc)
    return not_after <= now


def resolve_certificate(
    candidates: Sequence[CertificateCandidate],
    *,
    explicit_certificate: Optional[str] = None,
    certificate_name: Optional[str] = None,
    domain_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """
    Pick the certificate ARN to attach to the distribution.

    Args:
        candidates: Certificates in the order the provider listed them
        explicit_certificate: ARN given by the user, returned as is
        certificate_name: Exact certificate domain name to look for
        domain_name: Custom domain to find the most specific certificate for
        now: Reference time for the expiry check (defaults to current UTC time)

    Returns:
        Certificate ARN, or None when there is nothing to resolve and the
        distribution should use the CloudFront default certificate

    Raises:
        NotFoundError: If no candidate matches the hint or the domain
    """
    if explicit_certificate:
        return explicit_certificate
    if not certificate_name and not domain_name:
        return None

    if certificate_name:
        for candidate in candidates:
            if candidate.domain_name == certificate_name:
                return candidate.identifier
        raise NotFoundError(
            f"Could not find the certificate {certificate_name}",
            {"certificateName": certificate_name},
        )

    assert domain_name is not None
    now = now or datetime.now(timezone.utc)
    best: Optional[CertificateCandidate] = None
    for candidate in candidates:
        # ACM keeps reporting ISSUED for some certificates past NotAfter
        if _is_expired(candidate, now):
            continue
        if not is_enclosing(candidate.domain_name, domain_name):
            continue
        # Strictly greater keeps the first one seen on ties
        if best is None or specificity(candidate.domain_name) > specificity(best.domain_name):
            best = candidate

    if best is None:
        raise NotFoundError(
            f"Could not find a certificate for {domain_name}",
            {"domainName": domain_name},
        )
    return best.identifier


class CertificateResolver:
    """Fetches fresh candidates from ACM and resolves a certificate."""

    def __init__(self, directory: CertificateDirectory, log: Optional[StructuredLogger] = None) -> None:
        self._directory = directory
        self._log = log or logger

    def resolve(
        self,
        *,
        explicit_certificate: Optional[str] = None,
        certificate_name: Optional[str] = None,
        domain_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[str]:
        if explicit_certificate:
            self._log.info("Using configured certificate", certificateArn=explicit_certificate)
            return explicit_certificate
        if not certificate_name and not domain_name:
            self._log.info("No certificate requested, using CloudFront default certificate")
            return None

        candidates = self._directory.list_certificates(LISTED_CERTIFICATE_STATUSES)
        self._log.debug("Listed certificates", count=len(candidates))

        certificate_arn = resolve_certificate(
            candidates,
            certificate_name=certificate_name,
            domain_name=domain_name,
            now=now,
        )
        self._log.info(
            "Resolved certificate",
            certificateArn=certificate_arn,
            certificateName=certificate_name,
            domainName=domain_name,
        )
        return certificate_arn
