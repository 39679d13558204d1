"""Route53 hosted zone resolution."""

from typing import Optional, Sequence

from ..utils.clients import ZoneDirectory
from ..utils.domains import is_enclosing
from ..utils.errors import InvalidArgumentError, NotFoundError, ProviderUnavailableError
from ..utils.logging import StructuredLogger, get_logger
from ..utils.models import ZoneCandidate

logger = get_logger(__name__)

# Route53 ids look like /hostedzone/Z123; the usable id follows this marker
ZONE_ID_MARKER = "e/"


def normalize_zone_name(name: str) -> str:
    """Strip one trailing dot from a zone name."""
    return name[:-1] if name.endswith(".") else name


def extract_zone_id(raw_id: str) -> str:
    """
    Extract the usable hosted zone id from a Route53 zone id.

    Examples:
        >>> extract_zone_id("/hostedzone/Z1D633PJN98FT9")
        'Z1D633PJN98FT9'

    Raises:
        ProviderUnavailableError: If the id does not contain the marker
    """
    position = raw_id.find(ZONE_ID_MARKER)
    if position < 0:
        raise ProviderUnavailableError(
            f"Unexpected hosted zone id format: {raw_id}", {"hostedZoneId": raw_id}
        )
    return raw_id[position + len(ZONE_ID_MARKER) :]


def select_hosted_zone(
    candidates: Sequence[ZoneCandidate],
    domain_name: str,
    *,
    private: Optional[bool] = None,
) -> ZoneCandidate:
    """
    Pick the most specific zone enclosing a domain.

    Args:
        candidates: Zones in the order the provider listed them
        domain_name: Domain the records will be created for
        private: Only consider private (True) or public (False) zones

    Returns:
        The zone with the longest name; the first one listed wins on ties

    Raises:
        NotFoundError: If no zone encloses the domain
    """
    eligible = [
        zone
        for zone in candidates
        if (private is None or zone.is_private == private)
        and is_enclosing(normalize_zone_name(zone.name), domain_name)
    ]
    if not eligible:
        raise NotFoundError(
            f'Could not find hosted zone "{domain_name}"', {"domainName": domain_name}
        )
    # max() returns the first maximal element
    return max(eligible, key=lambda zone: len(normalize_zone_name(zone.name)))


class HostedZoneResolver:
    """Fetches fresh zones from Route53 and resolves the zone id for a domain."""

    def __init__(self, directory: ZoneDirectory, log: Optional[StructuredLogger] = None) -> None:
        self._directory = directory
        self._log = log or logger

    def resolve(
        self,
        domain_name: Optional[str],
        *,
        explicit_zone_id: Optional[str] = None,
        private: Optional[bool] = None,
    ) -> str:
        if explicit_zone_id:
            self._log.info("Selected specific hostedZoneId", hostedZoneId=explicit_zone_id)
            return explicit_zone_id
        if not domain_name:
            raise InvalidArgumentError("A domain name is required to look up a hosted zone")

        if private is True:
            self._log.info("Filtering to only private zones.")
        elif private is False:
            self._log.info("Filtering to only public zones.")

        zone = select_hosted_zone(self._directory.list_zones(), domain_name, private=private)
        zone_id = extract_zone_id(zone.identifier)
        self._log.info("Resolved hosted zone", domainName=domain_name, zoneName=zone.name, hostedZoneId=zone_id)
        return zone_id
