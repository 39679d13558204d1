"""Tests for the hosted zone resolver."""

import pytest

from src.resolvers.hosted_zones import (
    HostedZoneResolver,
    extract_zone_id,
    normalize_zone_name,
    select_hosted_zone,
)
from src.utils.errors import InvalidArgumentError, NotFoundError, ProviderUnavailableError
from tests.unit.fixtures import FakeZoneDirectory, make_zone


class TestExtractZoneId:
    """Tests for extract_zone_id."""

    def test_returns_suffix_after_marker(self) -> None:
        assert extract_zone_id("/hostedzone/ABCDEF") == "ABCDEF"

    def test_missing_marker_is_provider_error(self) -> None:
        with pytest.raises(ProviderUnavailableError) as exc_info:
            extract_zone_id("ABCDEF")

        assert exc_info.value.details == {"hostedZoneId": "ABCDEF"}


class TestNormalizeZoneName:
    """Tests for normalize_zone_name."""

    def test_strips_one_trailing_dot(self) -> None:
        assert normalize_zone_name("example.com.") == "example.com"
        assert normalize_zone_name("example.com") == "example.com"


class TestSelectHostedZone:
    """Tests for select_hosted_zone."""

    def test_picks_most_specific_zone(self) -> None:
        zones = [make_zone("example.com.", "APEX"), make_zone("api.example.com.", "API")]

        assert select_hosted_zone(zones, "api.example.com").identifier == "/hostedzone/API"

    def test_parent_zone_for_subdomain(self) -> None:
        zones = [make_zone("other.com.", "OTHER"), make_zone("example.com.", "APEX")]

        assert select_hosted_zone(zones, "www.api.example.com").identifier == "/hostedzone/APEX"

    def test_ties_keep_first_seen(self) -> None:
        zones = [make_zone("example.com.", "PUBLIC"), make_zone("example.com.", "PRIVATE", private=True)]

        assert select_hosted_zone(zones, "api.example.com").identifier == "/hostedzone/PUBLIC"

    def test_private_filter(self) -> None:
        zones = [make_zone("example.com.", "PUBLIC"), make_zone("example.com.", "PRIVATE", private=True)]

        assert select_hosted_zone(zones, "api.example.com", private=True).identifier == "/hostedzone/PRIVATE"
        assert select_hosted_zone(zones, "api.example.com", private=False).identifier == "/hostedzone/PUBLIC"

    def test_zone_more_specific_than_domain_is_rejected(self) -> None:
        zones = [make_zone("api.example.com.", "API")]

        with pytest.raises(NotFoundError) as exc_info:
            select_hosted_zone(zones, "example.com")

        assert exc_info.value.details == {"domainName": "example.com"}

    def test_single_label_domain_is_root_case(self) -> None:
        zones = [make_zone("corp.internal.", "CORP", private=True)]

        assert select_hosted_zone(zones, "internal").identifier == "/hostedzone/CORP"

    def test_no_zones(self) -> None:
        with pytest.raises(NotFoundError):
            select_hosted_zone([], "example.com")


class TestHostedZoneResolver:
    """Tests for HostedZoneResolver."""

    def test_explicit_zone_skips_listing(self) -> None:
        directory = FakeZoneDirectory()

        assert HostedZoneResolver(directory).resolve("example.com", explicit_zone_id="Z123") == "Z123"
        assert directory.list_calls == 0

    def test_resolves_and_extracts_id(self) -> None:
        directory = FakeZoneDirectory([make_zone("example.com.", "Z1D633PJN98FT9")])

        assert HostedZoneResolver(directory).resolve("api.example.com") == "Z1D633PJN98FT9"
        assert directory.list_calls == 1

    def test_missing_domain_is_invalid(self) -> None:
        with pytest.raises(InvalidArgumentError):
            HostedZoneResolver(FakeZoneDirectory()).resolve(None)

    def test_logs_private_filter(self, capsys) -> None:
        directory = FakeZoneDirectory([make_zone("example.com.", "PRIVATE", private=True)])

        HostedZoneResolver(directory).resolve("api.example.com", private=True)

        assert "Filtering to only private zones." in capsys.readouterr().out
