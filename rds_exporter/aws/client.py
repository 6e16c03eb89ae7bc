"""boto3 client factory with retry configuration."""

import boto3
from botocore.config import Config

DEFAULT_MAX_ATTEMPTS = 3


def build_retry_config(max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> Config:
    """Build the botocore config shared by every exporter client.

    The collector never retries a page itself; retries happen inside
    botocore's standard mode.

    Args:
        max_attempts: Total attempts per API call, including the first

    Returns:
        botocore Config with standard retries and connect/read timeouts
    """
    return Config(
        retries={
            "total_max_attempts": max_attempts,
            "mode": "standard",
        },
        connect_timeout=5,
        read_timeout=10,
    )


RETRY_CONFIG = build_retry_config()


def get_client(service: str, region: str = "us-east-1", config: Config | None = None):
    """Create a boto3 client with standard retry configuration.

    Args:
        service: AWS service name (e.g., 'rds')
        region: AWS region name
        config: Optional botocore Config, defaults to RETRY_CONFIG

    Returns:
        boto3 client for the specified service
    """
    return boto3.client(service, region_name=region, config=config or RETRY_CONFIG)
