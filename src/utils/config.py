"""
Plugin configuration.

Reads the ``custom.appSyncCloudFront`` block of the service definition into a
typed options object. Every recognized option is listed on CloudFrontOptions
with its default; anything else is rejected.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple, Union

from .errors import InvalidArgumentError

# CloudFront only accepts ACM certificates from this region
CERTIFICATE_REGION = "us-east-1"

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_INVALIDATION_TIMEOUT = 600.0

ForwardSetting = Union[str, List[str]]


def get_region() -> str:
    """Get the AWS region from environment variables or default to us-east-1."""
    return os.getenv("AWS_REGION") or os.getenv("CDK_DEFAULT_REGION") or "us-east-1"


@dataclass(frozen=True)
class CloudFrontOptions:
    """Typed view of ``custom.appSyncCloudFront``.

    Attributes:
        enabled: When False the package hook leaves the template untouched.
        domain_names: Distribution aliases. The first one is the primary
            domain used for certificate, zone and record resolution.
        certificate: Explicit ACM certificate ARN; skips certificate lookup.
        certificate_name: Exact certificate domain name to look up.
        hosted_zone_id: Explicit Route53 zone id; skips zone lookup.
        hosted_zone_private: Restrict zone lookup to private (True) or public
            (False) zones. None considers both.
        create_route53_record: When False no alias records are written.
        logging_bucket: Access log bucket; logging is removed when unset.
        logging_prefix: Access log key prefix.
        price_class: CloudFront price class.
        cookies: "all", "none" or a whitelist of cookie names.
        headers: "none", "all" or a list of header names.
        querystring: "all", "none" or a list of query string cache keys.
        waf: Web ACL id attached to the distribution.
        compress: Enable automatic compression.
        minimum_protocol_version: Viewer TLS policy, left at the template
            default when unset.
        invalidate: Invalidate the whole distribution after deploy.
        poll_interval: Seconds between invalidation status reads.
        invalidation_timeout: Seconds to wait for the invalidation to
            complete. None waits without bound.
    """

    enabled: bool = True
    domain_names: Tuple[str, ...] = ()
    certificate: Optional[str] = None
    certificate_name: Optional[str] = None
    hosted_zone_id: Optional[str] = None
    hosted_zone_private: Optional[bool] = None
    create_route53_record: bool = True
    logging_bucket: Optional[str] = None
    logging_prefix: str = ""
    price_class: str = "PriceClass_All"
    cookies: ForwardSetting = "all"
    headers: ForwardSetting = "none"
    querystring: ForwardSetting = "all"
    waf: Optional[str] = None
    compress: bool = False
    minimum_protocol_version: Optional[str] = None
    invalidate: bool = True
    poll_interval: float = DEFAULT_POLL_INTERVAL
    invalidation_timeout: Optional[float] = field(default=DEFAULT_INVALIDATION_TIMEOUT)

    @property
    def domain_name(self) -> Optional[str]:
        """Primary custom domain, if any."""
        return self.domain_names[0] if self.domain_names else None

    @classmethod
    def from_custom(cls, custom: Optional[Mapping[str, Any]]) -> "CloudFrontOptions":
        """
        Build options from the ``custom.appSyncCloudFront`` mapping.

        Args:
            custom: Mapping with camelCase keys as written in the service file

        Returns:
            CloudFrontOptions with defaults applied

        Raises:
            InvalidArgumentError: If a key is unknown or a value has the wrong type
        """
        if not custom:
            return cls()

        unknown = sorted(set(custom) - _KNOWN_KEYS)
        if unknown:
            raise InvalidArgumentError(
                "Unknown appSyncCloudFront options", {"unknownOptions": unknown}
            )

        logging_block = _mapping(custom, "logging", _LOGGING_KEYS)
        invalidation_block = _mapping(custom, "invalidation", _INVALIDATION_KEYS)

        timeout = _number(invalidation_block, "timeout", DEFAULT_INVALIDATION_TIMEOUT, "invalidation.")
        poll_interval = _number(invalidation_block, "pollInterval", DEFAULT_POLL_INTERVAL, "invalidation.")
        if poll_interval is None or poll_interval <= 0:
            raise InvalidArgumentError(
                "invalidation.pollInterval must be a positive number",
                {"pollInterval": poll_interval},
            )

        return cls(
            enabled=_flag(custom, "enabled", True),
            domain_names=_domain_names(custom.get("domainName")),
            certificate=_text(custom, "certificate"),
            certificate_name=_text(custom, "certificateName"),
            hosted_zone_id=_text(custom, "hostedZoneId"),
            hosted_zone_private=_optional_flag(custom, "hostedZonePrivate"),
            create_route53_record=_flag(custom, "createRoute53Record", True),
            logging_bucket=_text(logging_block, "bucket", "logging."),
            logging_prefix=_text(logging_block, "prefix", "logging.") or "",
            price_class=_text(custom, "priceClass") or "PriceClass_All",
            cookies=_forward(custom, "cookies", "all"),
            headers=_forward(custom, "headers", "none"),
            querystring=_forward(custom, "querystring", "all"),
            waf=_text(custom, "waf"),
            compress=_flag(custom, "compress", False),
            minimum_protocol_version=_text(custom, "minimumProtocolVersion"),
            invalidate=_flag(invalidation_block, "enabled", True, "invalidation."),
            poll_interval=poll_interval,
            # 0 or null means wait without bound
            invalidation_timeout=timeout or None,
        )


_KNOWN_KEYS = {
    "enabled",
    "domainName",
    "certificate",
    "certificateName",
    "hostedZoneId",
    "hostedZonePrivate",
    "createRoute53Record",
    "logging",
    "priceClass",
    "cookies",
    "headers",
    "querystring",
    "waf",
    "compress",
    "minimumProtocolVersion",
    "invalidation",
}

_LOGGING_KEYS = {"bucket", "prefix"}
_INVALIDATION_KEYS = {"enabled", "pollInterval", "timeout"}


def _invalid(key: str, expected: str, value: Any) -> InvalidArgumentError:
    return InvalidArgumentError(
        f"Option {key} must be {expected}", {"option": key, "value": repr(value)}
    )


def _mapping(custom: Mapping[str, Any], key: str, known: Set[str]) -> Mapping[str, Any]:
    value = custom.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise _invalid(key, "a mapping", value)
    unknown = sorted(f"{key}.{name}" for name in set(value) - known)
    if unknown:
        raise InvalidArgumentError(
            "Unknown appSyncCloudFront options", {"unknownOptions": unknown}
        )
    return value


def _text(custom: Mapping[str, Any], key: str, prefix: str = "") -> Optional[str]:
    value = custom.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise _invalid(prefix + key, "a string", value)
    return value


def _flag(custom: Mapping[str, Any], key: str, default: bool, prefix: str = "") -> bool:
    value = custom.get(key, default)
    if not isinstance(value, bool):
        raise _invalid(prefix + key, "true or false", value)
    return value


def _optional_flag(custom: Mapping[str, Any], key: str) -> Optional[bool]:
    if custom.get(key) is None:
        return None
    return _flag(custom, key, False)


def _number(
    custom: Mapping[str, Any], key: str, default: Optional[float], prefix: str = ""
) -> Optional[float]:
    if key not in custom:
        return default
    value = custom[key]
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise _invalid(prefix + key, "a non-negative number", value)
    return float(value)


def _forward(custom: Mapping[str, Any], key: str, default: str) -> ForwardSetting:
    value = custom.get(key, default)
    if isinstance(value, str):
        return value
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise _invalid(key, "a string or a list of strings", value)


def _domain_names(value: Any) -> Tuple[str, ...]:
    if value is None or value == "":
        return ()
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and value and all(isinstance(item, str) and item for item in value):
        return tuple(value)
    raise _invalid("domainName", "a string or a non-empty list of strings", value)


def options_summary(options: CloudFrontOptions) -> Dict[str, Any]:
    """Options worth logging at the start of a hook."""
    return {
        "domainNames": list(options.domain_names),
        "certificate": options.certificate,
        "certificateName": options.certificate_name,
        "hostedZoneId": options.hosted_zone_id,
        "hostedZonePrivate": options.hosted_zone_private,
        "createRoute53Record": options.create_route53_record,
        "invalidate": options.invalidate,
    }
