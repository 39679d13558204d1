"""
Provider directories backed by boto3.

Each capability the resolvers need (certificate listing, hosted zone listing
and record changes, distribution lookup and invalidation) is exposed as a
small directory object wrapping one boto3 client. Clients are created once
per hook invocation by ProviderClients.from_session and passed in explicitly.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import CERTIFICATE_REGION, get_region
from .errors import ProviderUnavailableError
from .models import CertificateCandidate, CertificateStatus, ZoneCandidate

# Logical id of the distribution in the generated template
DISTRIBUTION_LOGICAL_ID = "AppSyncApiDistribution"


class CertificateDirectory(Protocol):
    def list_certificates(self, statuses: Iterable[CertificateStatus]) -> List[CertificateCandidate]:
        ...


class ZoneDirectory(Protocol):
    def list_zones(self) -> List[ZoneCandidate]:
        ...

    def change_alias_records(
        self, zone_id: str, changes: Sequence[Dict[str, Any]], comment: str
    ) -> None:
        ...


class DistributionDirectory(Protocol):
    def find_distribution_id(self, stack_name: str) -> Optional[str]:
        ...

    def create_invalidation(
        self, distribution_id: str, paths: Sequence[str], caller_reference: str
    ) -> str:
        ...

    def get_invalidation_status(self, distribution_id: str, invalidation_id: str) -> str:
        ...


def _unavailable(operation: str, error: Exception, **details: Any) -> ProviderUnavailableError:
    return ProviderUnavailableError(
        f"{operation} failed: {error}", {"operation": operation, **details}
    )


class AcmCertificateDirectory:
    """Lists ACM certificates as resolution candidates."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def list_certificates(self, statuses: Iterable[CertificateStatus]) -> List[CertificateCandidate]:
        status_filter = [CertificateStatus(s).value for s in statuses]
        candidates: List[CertificateCandidate] = []
        try:
            paginator = self._client.get_paginator("list_certificates")
            for page in paginator.paginate(CertificateStatuses=status_filter):
                for cert in page.get("CertificateSummaryList", []):
                    candidates.append(
                        CertificateCandidate(
                            domain_name=cert["DomainName"],
                            identifier=cert["CertificateArn"],
                            status=CertificateStatus.from_provider(cert.get("Status")),
                            not_after=cert.get("NotAfter") or self._describe_not_after(cert["CertificateArn"]),
                        )
                    )
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("ListCertificates", e) from e
        except KeyError as e:
            raise ProviderUnavailableError(
                "ListCertificates returned a certificate without " + str(e),
                {"operation": "ListCertificates"},
            ) from e
        return candidates

    def _describe_not_after(self, certificate_arn: str) -> Optional[datetime]:
        # Older summaries omit NotAfter; expired certificates may still report ISSUED
        detail = self._client.describe_certificate(CertificateArn=certificate_arn)
        return detail.get("Certificate", {}).get("NotAfter")


class Route53ZoneDirectory:
    """Lists hosted zones and writes alias records."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def list_zones(self) -> List[ZoneCandidate]:
        zones: List[ZoneCandidate] = []
        try:
            paginator = self._client.get_paginator("list_hosted_zones")
            for page in paginator.paginate():
                for zone in page.get("HostedZones", []):
                    zones.append(
                        ZoneCandidate(
                            name=zone["Name"],
                            identifier=zone["Id"],
                            is_private=bool(zone.get("Config", {}).get("PrivateZone", False)),
                        )
                    )
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("ListHostedZones", e) from e
        except KeyError as e:
            raise ProviderUnavailableError(
                "ListHostedZones returned a zone without " + str(e),
                {"operation": "ListHostedZones"},
            ) from e
        return zones

    def change_alias_records(
        self, zone_id: str, changes: Sequence[Dict[str, Any]], comment: str
    ) -> None:
        try:
            self._client.change_resource_record_sets(
                HostedZoneId=zone_id,
                ChangeBatch={"Changes": list(changes), "Comment": comment},
            )
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("ChangeResourceRecordSets", e, hostedZoneId=zone_id) from e


class CloudFrontDistributionDirectory:
    """Finds the stack's distribution and manages its invalidations."""

    def __init__(
        self,
        cloudfront_client: Any,
        cloudformation_client: Any,
        logical_id: str = DISTRIBUTION_LOGICAL_ID,
    ) -> None:
        self._cloudfront = cloudfront_client
        self._cloudformation = cloudformation_client
        self._logical_id = logical_id

    def find_distribution_id(self, stack_name: str) -> Optional[str]:
        try:
            response = self._cloudformation.describe_stack_resource(
                StackName=stack_name, LogicalResourceId=self._logical_id
            )
        except ClientError as e:
            # Missing stack or resource
            if e.response.get("Error", {}).get("Code") == "ValidationError":
                return None
            raise _unavailable("DescribeStackResource", e, stackName=stack_name) from e
        except BotoCoreError as e:
            raise _unavailable("DescribeStackResource", e, stackName=stack_name) from e
        return response.get("StackResourceDetail", {}).get("PhysicalResourceId") or None

    def create_invalidation(
        self, distribution_id: str, paths: Sequence[str], caller_reference: str
    ) -> str:
        try:
            response = self._cloudfront.create_invalidation(
                DistributionId=distribution_id,
                InvalidationBatch={
                    "Paths": {"Quantity": len(paths), "Items": list(paths)},
                    "CallerReference": caller_reference,
                },
            )
            return response["Invalidation"]["Id"]
        except (ClientError, BotoCoreError) as e:
            raise _unavailable("CreateInvalidation", e, distributionId=distribution_id) from e
        except KeyError as e:
            raise ProviderUnavailableError(
                "CreateInvalidation returned no invalidation id",
                {"operation": "CreateInvalidation", "distributionId": distribution_id},
            ) from e

    def get_invalidation_status(self, distribution_id: str, invalidation_id: str) -> str:
        try:
            response = self._cloudfront.get_invalidation(
                DistributionId=distribution_id, Id=invalidation_id
            )
            return response["Invalidation"]["Status"]
        except (ClientError, BotoCoreError) as e:
            raise _unavailable(
                "GetInvalidation", e, distributionId=distribution_id, invalidationId=invalidation_id
            ) from e
        except KeyError as e:
            raise ProviderUnavailableError(
                "GetInvalidation returned no status",
                {"operation": "GetInvalidation", "invalidationId": invalidation_id},
            ) from e


@dataclass
class ProviderClients:
    """One handle per provider capability, built once at startup."""

    certificates: CertificateDirectory
    zones: ZoneDirectory
    distributions: DistributionDirectory

    @classmethod
    def from_session(
        cls, session: Optional[boto3.Session] = None, region: Optional[str] = None
    ) -> "ProviderClients":
        """
        Create the boto3 clients for every directory.

        Args:
            session: boto3 session carrying the deploy credentials
            region: Stack region; defaults to the environment

        Returns:
            ProviderClients ready to inject into the plugin
        """
        session = session or boto3.Session()
        region = region or get_region()
        return cls(
            certificates=AcmCertificateDirectory(
                session.client("acm", region_name=CERTIFICATE_REGION)
            ),
            zones=Route53ZoneDirectory(session.client("route53")),
            distributions=CloudFrontDistributionDirectory(
                session.client("cloudfront"),
                session.client("cloudformation", region_name=region),
            ),
        )
