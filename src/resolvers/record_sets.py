"""Route53 alias records pointing the custom domain at the distribution."""

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..utils.clients import ZoneDirectory
from ..utils.errors import InvalidArgumentError, ProviderUnavailableError
from ..utils.logging import StructuredLogger, get_logger
from ..utils.models import Outcome
from .hosted_zones import HostedZoneResolver

logger = get_logger(__name__)

# CloudFront's hosted zone id is the same for every distribution
CLOUDFRONT_HOSTED_ZONE_ID = "Z2FDTNDATAQYW2"

RECORD_COMMENT = "Record created by appsync-cloudfront"

# IPv4 and IPv6 alias records
ALIAS_RECORD_TYPES = ("A", "AAAA")


class RecordAction(str, Enum):
    UPSERT = "UPSERT"
    DELETE = "DELETE"


def parse_action(action: Union[str, RecordAction]) -> RecordAction:
    """
    Validate a record change action.

    Raises:
        InvalidArgumentError: If the action is not UPSERT or DELETE
    """
    try:
        return RecordAction(action)
    except ValueError:
        raise InvalidArgumentError(
            f'Invalid action "{action}" when changing Route53 Record. '
            "Action must be either UPSERT or DELETE.",
            {"action": str(action)},
        ) from None


def build_alias_changes(
    action: RecordAction, record_name: str, distribution_domain: str
) -> List[Dict[str, Any]]:
    """Build the A and AAAA alias changes for one record name."""
    return [
        {
            "Action": action.value,
            "ResourceRecordSet": {
                "Name": record_name,
                "Type": record_type,
                "AliasTarget": {
                    "DNSName": distribution_domain,
                    "EvaluateTargetHealth": False,
                    "HostedZoneId": CLOUDFRONT_HOSTED_ZONE_ID,
                },
            },
        }
        for record_type in ALIAS_RECORD_TYPES
    ]


class RecordSetReconciler:
    """Upserts or deletes the alias records for the custom domain."""

    def __init__(
        self,
        zone_resolver: HostedZoneResolver,
        directory: ZoneDirectory,
        log: Optional[StructuredLogger] = None,
    ) -> None:
        self._zone_resolver = zone_resolver
        self._directory = directory
        self._log = log or logger

    def reconcile(
        self,
        action: Union[str, RecordAction],
        distribution_domain: str,
        record_name: str,
        *,
        skip_creation: bool = False,
        explicit_zone_id: Optional[str] = None,
        private: Optional[bool] = None,
    ) -> Outcome:
        """
        Submit one change batch for the alias records.

        Args:
            action: UPSERT or DELETE
            distribution_domain: CloudFront domain the records point at
            record_name: Custom domain the records are created for
            skip_creation: Do nothing and report the step as skipped
            explicit_zone_id: Hosted zone id that skips zone lookup
            private: Private/public filter for zone lookup

        Returns:
            Outcome.SKIPPED or Outcome.COMPLETED

        Raises:
            InvalidArgumentError: If the action is not UPSERT or DELETE
            NotFoundError: If no hosted zone encloses the record name
            ProviderUnavailableError: If Route53 rejects or fails the change
        """
        record_action = parse_action(action)

        if skip_creation:
            self._log.info("Skipping creation of Route53 record.", recordName=record_name)
            return Outcome.SKIPPED

        zone_id = self._zone_resolver.resolve(
            record_name, explicit_zone_id=explicit_zone_id, private=private
        )
        changes = build_alias_changes(record_action, record_name, distribution_domain)

        try:
            self._directory.change_alias_records(zone_id, changes, RECORD_COMMENT)
        except ProviderUnavailableError as e:
            raise ProviderUnavailableError(
                f"Failed to {record_action.value} A Alias for {record_name}",
                {
                    **e.details,
                    "action": record_action.value,
                    "recordName": record_name,
                    "cause": e.message,
                },
            ) from e

        self._log.info(
            "Changed alias records",
            action=record_action.value,
            recordName=record_name,
            hostedZoneId=zone_id,
            target=distribution_domain,
        )
        return Outcome.COMPLETED
