"""
Shared pytest fixtures.

Provides fake AWS credentials for moto and the in-memory directories from
fixtures.py.
"""

import os
from typing import Any, Generator

import boto3
import pytest
from moto import mock_aws

from tests.unit.fixtures import FakeClock


@pytest.fixture
def aws_credentials() -> None:
    """Set fake AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def route53_client(aws_credentials: None) -> Generator[Any, None, None]:
    """Mocked Route53 client."""
    with mock_aws():
        yield boto3.client("route53", region_name="us-east-1")


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
