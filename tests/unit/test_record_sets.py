"""Tests for the alias record reconciler."""

import pytest

from src.resolvers.hosted_zones import HostedZoneResolver
from src.resolvers.record_sets import (
    CLOUDFRONT_HOSTED_ZONE_ID,
    RECORD_COMMENT,
    RecordAction,
    RecordSetReconciler,
    build_alias_changes,
    parse_action,
)
from src.utils.clients import Route53ZoneDirectory
from src.utils.errors import InvalidArgumentError, NotFoundError, ProviderUnavailableError
from src.utils.models import Outcome
from tests.unit.fixtures import FakeZoneDirectory, make_zone

DISTRIBUTION_DOMAIN = "d111111abcdef8.cloudfront.net"


def make_reconciler(directory: FakeZoneDirectory) -> RecordSetReconciler:
    return RecordSetReconciler(HostedZoneResolver(directory), directory)


class TestParseAction:
    """Tests for parse_action."""

    def test_accepts_both_actions(self) -> None:
        assert parse_action("UPSERT") is RecordAction.UPSERT
        assert parse_action(RecordAction.DELETE) is RecordAction.DELETE

    def test_rejects_other_actions(self) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_action("CREATE")

        assert exc_info.value.details == {"action": "CREATE"}


class TestBuildAliasChanges:
    """Tests for build_alias_changes."""

    def test_builds_ipv4_and_ipv6_aliases(self) -> None:
        changes = build_alias_changes(RecordAction.UPSERT, "api.example.com", DISTRIBUTION_DOMAIN)

        assert [c["ResourceRecordSet"]["Type"] for c in changes] == ["A", "AAAA"]
        for change in changes:
            assert change["Action"] == "UPSERT"
            assert change["ResourceRecordSet"]["Name"] == "api.example.com"
            assert change["ResourceRecordSet"]["AliasTarget"] == {
                "DNSName": DISTRIBUTION_DOMAIN,
                "EvaluateTargetHealth": False,
                "HostedZoneId": CLOUDFRONT_HOSTED_ZONE_ID,
            }


class TestRecordSetReconciler:
    """Tests for RecordSetReconciler."""

    def test_skip_creation_is_a_noop(self) -> None:
        directory = FakeZoneDirectory([make_zone("example.com.", "Z1")])

        outcome = make_reconciler(directory).reconcile(
            "UPSERT", DISTRIBUTION_DOMAIN, "api.example.com", skip_creation=True
        )

        assert outcome is Outcome.SKIPPED
        assert directory.list_calls == 0
        assert directory.batches == []

    def test_invalid_action_fails_before_provider_calls(self) -> None:
        directory = FakeZoneDirectory([make_zone("example.com.", "Z1")])

        with pytest.raises(InvalidArgumentError):
            make_reconciler(directory).reconcile("REPLACE", DISTRIBUTION_DOMAIN, "api.example.com")

        assert directory.list_calls == 0

    def test_upsert_submits_single_batch(self) -> None:
        directory = FakeZoneDirectory([make_zone("example.com.", "Z1")])

        outcome = make_reconciler(directory).reconcile("UPSERT", DISTRIBUTION_DOMAIN, "api.example.com")

        assert outcome is Outcome.COMPLETED
        assert len(directory.batches) == 1
        zone_id, changes, comment = directory.batches[0]
        assert zone_id == "Z1"
        assert len(changes) == 2
        assert comment == RECORD_COMMENT

    def test_upsert_twice_is_idempotent(self) -> None:
        directory = FakeZoneDirectory([make_zone("example.com.", "Z1")])
        reconciler = make_reconciler(directory)

        reconciler.reconcile("UPSERT", DISTRIBUTION_DOMAIN, "api.example.com")
        state_after_first = dict(directory.records)
        outcome = reconciler.reconcile("UPSERT", DISTRIBUTION_DOMAIN, "api.example.com")

        assert outcome is Outcome.COMPLETED
        assert directory.records == state_after_first
        assert len(directory.records) == 2

    def test_delete_removes_records(self) -> None:
        directory = FakeZoneDirectory([make_zone("example.com.", "Z1")])
        reconciler = make_reconciler(directory)

        reconciler.reconcile("UPSERT", DISTRIBUTION_DOMAIN, "api.example.com")
        reconciler.reconcile(RecordAction.DELETE, DISTRIBUTION_DOMAIN, "api.example.com")

        assert directory.records == {}

    def test_explicit_zone_id(self) -> None:
        directory = FakeZoneDirectory()

        make_reconciler(directory).reconcile(
            "UPSERT", DISTRIBUTION_DOMAIN, "api.example.com", explicit_zone_id="ZEXPLICIT"
        )

        assert directory.batches[0][0] == "ZEXPLICIT"

    def test_zone_not_found_propagates(self) -> None:
        directory = FakeZoneDirectory([make_zone("other.com.", "Z1")])

        with pytest.raises(NotFoundError):
            make_reconciler(directory).reconcile("UPSERT", DISTRIBUTION_DOMAIN, "api.example.com")

    def test_submission_failure_names_action_and_record(self) -> None:
        directory = FakeZoneDirectory(
            [make_zone("example.com.", "Z1")],
            change_error=ProviderUnavailableError("denied", {"operation": "ChangeResourceRecordSets"}),
        )

        with pytest.raises(ProviderUnavailableError) as exc_info:
            make_reconciler(directory).reconcile("UPSERT", DISTRIBUTION_DOMAIN, "api.example.com")

        error = exc_info.value
        assert error.message == "Failed to UPSERT A Alias for api.example.com"
        assert error.details["action"] == "UPSERT"
        assert error.details["recordName"] == "api.example.com"
        assert error.details["operation"] == "ChangeResourceRecordSets"


class TestRecordSetReconcilerRoute53:
    """Round trips against mocked Route53."""

    def test_upsert_twice_against_route53(self, route53_client) -> None:
        route53_client.create_hosted_zone(Name="example.com", CallerReference="zone-1")
        directory = Route53ZoneDirectory(route53_client)
        reconciler = RecordSetReconciler(HostedZoneResolver(directory), directory)

        reconciler.reconcile("UPSERT", DISTRIBUTION_DOMAIN, "api.example.com")
        reconciler.reconcile("UPSERT", DISTRIBUTION_DOMAIN, "api.example.com")

        zone_id = HostedZoneResolver(directory).resolve("api.example.com")
        record_sets = route53_client.list_resource_record_sets(HostedZoneId=zone_id)["ResourceRecordSets"]
        aliases = [r for r in record_sets if r["Type"] in ("A", "AAAA")]
        assert sorted(r["Type"] for r in aliases) == ["A", "AAAA"]
