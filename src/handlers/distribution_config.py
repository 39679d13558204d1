"""
CloudFront distribution resources for the compiled CloudFormation template.

This module provides:
- The static distribution resources added in front of the AppSync API
- Option-driven preparation of the DistributionConfig
- A deep merge of the prepared resources into the compiled template
"""

import copy
from typing import Any, Dict, Optional

from ..utils.clients import DISTRIBUTION_LOGICAL_ID
from ..utils.config import CloudFrontOptions

ORIGIN_ID = "AppSyncApiOrigin"


def distribution_resources() -> Dict[str, Any]:
    """Return a fresh copy of the static distribution resources."""
    return {
        "Resources": {
            DISTRIBUTION_LOGICAL_ID: {
                "Type": "AWS::CloudFront::Distribution",
                "Properties": {
                    "DistributionConfig": {
                        "Enabled": True,
                        "HttpVersion": "http2",
                        "Comment": "",
                        "Aliases": [],
                        "PriceClass": "PriceClass_All",
                        "Origins": [
                            {
                                "Id": ORIGIN_ID,
                                # https://<id>.appsync-api.<region>.amazonaws.com/graphql -> host
                                "DomainName": {
                                    "Fn::Select": [
                                        2,
                                        {"Fn::Split": ["/", {"Fn::GetAtt": ["GraphQlApi", "GraphQLUrl"]}]},
                                    ]
                                },
                                "CustomOriginConfig": {
                                    "HTTPSPort": 443,
                                    "OriginProtocolPolicy": "https-only",
                                },
                            }
                        ],
                        "DefaultCacheBehavior": {
                            "TargetOriginId": ORIGIN_ID,
                            "ViewerProtocolPolicy": "redirect-to-https",
                            "AllowedMethods": ["DELETE", "GET", "HEAD", "OPTIONS", "PATCH", "POST", "PUT"],
                            "CachedMethods": ["GET", "HEAD", "OPTIONS"],
                            "Compress": False,
                            "MinTTL": 0,
                            "DefaultTTL": 0,
                            "ForwardedValues": {
                                "QueryString": True,
                                "Headers": [],
                                "Cookies": {"Forward": "all"},
                            },
                        },
                        "ViewerCertificate": {
                            "AcmCertificateArn": "",
                            "SslSupportMethod": "sni-only",
                        },
                        "Logging": {"IncludeCookies": False, "Bucket": "", "Prefix": ""},
                        "WebACLId": "",
                    }
                },
            }
        },
        "Outputs": {
            DISTRIBUTION_LOGICAL_ID: {
                "Value": {"Fn::GetAtt": [DISTRIBUTION_LOGICAL_ID, "DomainName"]},
            }
        },
    }


def prepare_distribution_config(
    config: Dict[str, Any],
    options: CloudFrontOptions,
    *,
    certificate_arn: Optional[str],
    api_name: str,
) -> Dict[str, Any]:
    """Apply the plugin options to a DistributionConfig in place.

    Args:
        config: DistributionConfig taken from distribution_resources()
        options: Plugin options
        certificate_arn: Resolved viewer certificate, None for the
            CloudFront default certificate
        api_name: API name used in the distribution comment

    Returns:
        The same config, for chaining
    """
    _prepare_logging(config, options)
    _prepare_domain(config, options)
    config["PriceClass"] = options.price_class
    _prepare_cookies(config, options)
    _prepare_headers(config, options)
    _prepare_query_string(config, options)
    config["Comment"] = f"Serverless Managed {api_name}"
    _prepare_certificate(config, certificate_arn)
    _prepare_waf(config, options)
    config["DefaultCacheBehavior"]["Compress"] = options.compress
    if options.minimum_protocol_version:
        config["ViewerCertificate"]["MinimumProtocolVersion"] = options.minimum_protocol_version
    return config


def _prepare_logging(config: Dict[str, Any], options: CloudFrontOptions) -> None:
    if options.logging_bucket:
        config["Logging"]["Bucket"] = options.logging_bucket
        config["Logging"]["Prefix"] = options.logging_prefix
    else:
        config.pop("Logging", None)


def _prepare_domain(config: Dict[str, Any], options: CloudFrontOptions) -> None:
    if options.domain_names:
        config["Aliases"] = list(options.domain_names)
    else:
        config.pop("Aliases", None)


def _prepare_cookies(config: Dict[str, Any], options: CloudFrontOptions) -> None:
    cookies = config["DefaultCacheBehavior"]["ForwardedValues"]["Cookies"]
    if isinstance(options.cookies, list):
        cookies["Forward"] = "whitelist"
        cookies["WhitelistedNames"] = list(options.cookies)
    else:
        cookies["Forward"] = options.cookies


def _prepare_headers(config: Dict[str, Any], options: CloudFrontOptions) -> None:
    forwarded = config["DefaultCacheBehavior"]["ForwardedValues"]
    if isinstance(options.headers, list):
        forwarded["Headers"] = list(options.headers)
    else:
        forwarded["Headers"] = [] if options.headers == "none" else ["*"]


def _prepare_query_string(config: Dict[str, Any], options: CloudFrontOptions) -> None:
    forwarded = config["DefaultCacheBehavior"]["ForwardedValues"]
    if isinstance(options.querystring, list):
        forwarded["QueryString"] = True
        forwarded["QueryStringCacheKeys"] = list(options.querystring)
    else:
        forwarded["QueryString"] = options.querystring == "all"


def _prepare_certificate(config: Dict[str, Any], certificate_arn: Optional[str]) -> None:
    viewer_certificate = config["ViewerCertificate"]
    if certificate_arn:
        viewer_certificate["AcmCertificateArn"] = certificate_arn
    else:
        viewer_certificate.pop("AcmCertificateArn", None)
        viewer_certificate.pop("SslSupportMethod", None)
        viewer_certificate["CloudFrontDefaultCertificate"] = True


def _prepare_waf(config: Dict[str, Any], options: CloudFrontOptions) -> None:
    if options.waf:
        config["WebACLId"] = options.waf
    else:
        config.pop("WebACLId", None)


def merge_template(base: Dict[str, Any], resources: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep-merge resources into a compiled template.

    Nested mappings are merged key by key; any other value in ``resources``
    replaces the one in ``base``. ``base`` is modified in place and returned.
    """
    for key, value in resources.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merge_template(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
    return base
