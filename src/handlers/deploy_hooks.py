"""
Lifecycle hooks called by the deploy tool.

- create_deployment_artifacts: adds the CloudFront distribution to the
  compiled template and resolves its viewer certificate
- print_summary: after deploy, points the custom domain at the distribution
  and invalidates its cache
- remove_records: deletes the alias records created by print_summary
"""

from typing import Any, Callable, Dict, List, Mapping, Optional

import boto3

from ..resolvers.certificates import CertificateResolver
from ..resolvers.hosted_zones import HostedZoneResolver
from ..resolvers.invalidation import InvalidationCoordinator, run_invalidation
from ..resolvers.record_sets import RecordAction, RecordSetReconciler
from ..utils.clients import DISTRIBUTION_LOGICAL_ID, ProviderClients
from ..utils.config import CloudFrontOptions, options_summary
from ..utils.errors import (
    InvalidationCancelledError,
    InvalidationTimeoutError,
    ProviderUnavailableError,
)
from ..utils.logging import StructuredLogger, get_logger, new_correlation_id
from ..utils.models import Outcome, ReconcileResult, ResolutionRequest
from .distribution_config import distribution_resources, merge_template, prepare_distribution_config

CoordinatorFactory = Callable[[CloudFrontOptions], InvalidationCoordinator]


def distribution_domain_from_outputs(outputs: Optional[List[Mapping[str, Any]]]) -> Optional[str]:
    """Find the distribution domain among the deployed stack outputs."""
    for output in outputs or []:
        if output.get("OutputKey") == DISTRIBUTION_LOGICAL_ID:
            return output.get("OutputValue") or None
    return None


class CloudFrontPlugin:
    """Entry points for the host deploy tool.

    Provider clients are passed in at construction; nothing is looked up
    from the host at runtime.
    """

    def __init__(
        self,
        options: CloudFrontOptions,
        clients: ProviderClients,
        *,
        stack_name: str,
        service_name: str,
        logger: Optional[StructuredLogger] = None,
        coordinator_factory: Optional[CoordinatorFactory] = None,
    ) -> None:
        self.options = options
        self.clients = clients
        self.stack_name = stack_name
        self.service_name = service_name
        self.logger = logger or get_logger(__name__, new_correlation_id(stack_name))
        self.certificates = CertificateResolver(clients.certificates, self.logger)
        self.zones = HostedZoneResolver(clients.zones, self.logger)
        self.records = RecordSetReconciler(self.zones, clients.zones, self.logger)
        self._coordinator_factory = coordinator_factory or self._default_coordinator
        self.coordinator: Optional[InvalidationCoordinator] = None

    @classmethod
    def from_service(
        cls,
        custom: Optional[Mapping[str, Any]],
        *,
        stack_name: str,
        service_name: str,
        session: Optional[boto3.Session] = None,
        region: Optional[str] = None,
    ) -> "CloudFrontPlugin":
        """Build the plugin from the ``custom.appSyncCloudFront`` block."""
        options = CloudFrontOptions.from_custom(custom)
        return cls(
            options,
            ProviderClients.from_session(session, region),
            stack_name=stack_name,
            service_name=service_name,
        )

    def _default_coordinator(self, options: CloudFrontOptions) -> InvalidationCoordinator:
        return InvalidationCoordinator(
            self.clients.distributions,
            poll_interval=options.poll_interval,
            deadline=options.invalidation_timeout,
            log=self.logger,
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_certificate(self, request: Optional[ResolutionRequest] = None) -> Optional[str]:
        """Resolve the viewer certificate ARN; None means the CloudFront default."""
        if request is None:
            request = ResolutionRequest(
                explicit_override=self.options.certificate,
                name_hint=self.options.certificate_name,
                target_domain=self.options.domain_name,
            )
        return self.certificates.resolve(
            explicit_certificate=request.explicit_override,
            certificate_name=request.name_hint,
            domain_name=request.target_domain,
        )

    def resolve_hosted_zone(self, request: Optional[ResolutionRequest] = None) -> str:
        """Resolve the hosted zone id for the custom domain."""
        if request is None:
            request = ResolutionRequest(
                explicit_override=self.options.hosted_zone_id,
                target_domain=self.options.domain_name,
                zone_filter=self.options.hosted_zone_private,
            )
        return self.zones.resolve(
            request.target_domain,
            explicit_zone_id=request.explicit_override,
            private=request.zone_filter,
        )

    # ------------------------------------------------------------------
    # Post-deploy reconciliation
    # ------------------------------------------------------------------

    def reconcile_and_invalidate(
        self, distribution_domain: str, options: Optional[CloudFrontOptions] = None
    ) -> ReconcileResult:
        """
        Upsert the alias records, then invalidate the distribution.

        Record failures propagate. Invalidation is opportunistic: its
        failures are logged and reported in the result instead.
        """
        options = options or self.options
        # Exists before the records change; cancel_invalidation() targets it
        self.coordinator = self._coordinator_factory(options) if options.invalidate else None

        if options.domain_name:
            records = self.records.reconcile(
                RecordAction.UPSERT,
                distribution_domain,
                options.domain_name,
                skip_creation=not options.create_route53_record,
                explicit_zone_id=options.hosted_zone_id,
                private=options.hosted_zone_private,
            )
        else:
            records = Outcome.SKIPPED

        if self.coordinator is None:
            self.logger.info("Invalidation disabled, skipping")
            return ReconcileResult(records=records, invalidation=Outcome.SKIPPED)

        try:
            outcome, job = run_invalidation(
                self.clients.distributions, self.stack_name, self.coordinator, self.logger
            )
        except InvalidationTimeoutError as e:
            self.logger.error("Invalidation timed out", errorCode=e.error_code, error=e.message, **e.details)
            return self._failed_result(records, Outcome.TIMED_OUT, e.details, e.message)
        except InvalidationCancelledError as e:
            return self._failed_result(records, Outcome.CANCELLED, e.details, e.message)
        except ProviderUnavailableError as e:
            self.logger.error("Invalidation failed", errorCode=e.error_code, error=e.message, **e.details)
            return self._failed_result(records, Outcome.FAILED, e.details, e.message)

        return ReconcileResult(
            records=records,
            invalidation=outcome,
            invalidation_id=job.invalidation_id if job else None,
        )

    def cancel_invalidation(self) -> None:
        """Stop waiting for a running invalidation."""
        if self.coordinator is not None:
            self.coordinator.cancel()

    @staticmethod
    def _failed_result(
        records: Outcome, outcome: Outcome, details: Dict[str, Any], message: str
    ) -> ReconcileResult:
        return ReconcileResult(
            records=records,
            invalidation=outcome,
            invalidation_id=details.get("invalidationId"),
            error=message,
        )

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def create_deployment_artifacts(self, compiled_template: Dict[str, Any]) -> Dict[str, Any]:
        """Add the prepared distribution to the compiled template."""
        if not self.options.enabled:
            self.logger.info("appSyncCloudFront disabled, template left unchanged")
            return compiled_template

        self.logger.info("Preparing CloudFront distribution", **options_summary(self.options))
        resources = distribution_resources()
        distribution_config = resources["Resources"][DISTRIBUTION_LOGICAL_ID]["Properties"][
            "DistributionConfig"
        ]
        prepare_distribution_config(
            distribution_config,
            self.options,
            certificate_arn=self.resolve_certificate(),
            api_name=self.service_name,
        )
        return merge_template(compiled_template, resources)

    def print_summary(self, stack_outputs: Optional[List[Mapping[str, Any]]]) -> Optional[ReconcileResult]:
        """Report the distribution domain and reconcile DNS and cache."""
        distribution_domain = distribution_domain_from_outputs(stack_outputs)
        if not distribution_domain:
            return None

        self.logger.info(
            "CloudFront domain name",
            distributionDomain=distribution_domain,
            cname=self.options.domain_name or "-",
        )
        if self.options.domain_name:
            self.logger.info(f"Creating Route53 records for {self.options.domain_name}...")
        result = self.reconcile_and_invalidate(distribution_domain)
        self.logger.info(
            "Post-deploy reconciliation finished",
            records=result.records.value,
            invalidation=result.invalidation.value,
            invalidationId=result.invalidation_id,
        )
        return result

    def remove_records(self, stack_outputs: Optional[List[Mapping[str, Any]]]) -> Outcome:
        """Delete the alias records before the stack is removed."""
        distribution_domain = distribution_domain_from_outputs(stack_outputs)
        if not distribution_domain or not self.options.domain_name:
            return Outcome.SKIPPED
        return self.records.reconcile(
            RecordAction.DELETE,
            distribution_domain,
            self.options.domain_name,
            skip_creation=not self.options.create_route53_record,
            explicit_zone_id=self.options.hosted_zone_id,
            private=self.options.hosted_zone_private,
        )
