"""boto3 client construction shared by the AWS-backed collaborators."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config

from newman_load_tester.configuration.runtime_settings import AwsSettings


def create_aws_client(service_name: str, settings: AwsSettings) -> Any:
    """Create a boto3 client with adaptive retries for the configured region."""
    return boto3.client(
        service_name,
        region_name=settings.region,
        config=Config(retries={"max_attempts": settings.max_attempts, "mode": "adaptive"}),
    )
