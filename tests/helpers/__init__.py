"""Shared helpers for the test suite."""

from typing import Optional

from botocore.exceptions import ClientError

from dynamodb_access import StorageConfig


def make_config(**overrides) -> StorageConfig:
    """StorageConfig with every environment-backed field set explicitly."""
    settings = dict(
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        aws_session_token=None,
        region_name="us-east-1",
        endpoint_url=None,  # Use default AWS endpoint for moto
        environment="test",
        table_prefix="unit",
        read_capacity_units=None,
        write_capacity_units=None,
        max_attempts=3,
        backoff_base_seconds=0.01,
        backoff_max_seconds=0.05,
        provision_timeout_seconds=5.0,
        provision_poll_seconds=0.01,
        provision_poll_max_seconds=0.05,
        enable_debug_logging=False,
    )
    settings.update(overrides)
    return StorageConfig(**settings)


def create_client_error(error_code: str, message: str = "Test error", operation: str = "TestOperation",
                        status_code: Optional[int] = None) -> ClientError:
    """Helper to create ClientError for testing."""
    response = {
        'Error': {
            'Code': error_code,
            'Message': message
        }
    }
    if status_code is not None:
        response['ResponseMetadata'] = {'HTTPStatusCode': status_code}
    return ClientError(error_response=response, operation_name=operation)


__all__ = ["make_config", "create_client_error"]
