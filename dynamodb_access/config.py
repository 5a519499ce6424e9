import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Load environment variables from .env file if it exists
load_dotenv()


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


class StorageConfig(BaseModel):
    """Connection and behaviour settings for one StorageClient.

    Read-only once constructed. Build a second instance to talk to a second
    endpoint (e.g. a local backend in tests alongside production).
    """

    aws_access_key_id: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_ACCESS_KEY_ID"),
        description="AWS access key ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_SECRET_ACCESS_KEY"),
        description="AWS secret access key"
    )

    aws_session_token: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_SESSION_TOKEN"),
        description="AWS session token for temporary credentials"
    )

    region_name: str = Field(
        default_factory=lambda: os.getenv("AWS_REGION", "us-east-1"),
        description="AWS region name"
    )

    # DynamoDB specific settings
    endpoint_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("DYNAMODB_ENDPOINT_URL"),
        description="DynamoDB endpoint URL (for local development)"
    )

    # Table naming
    table_prefix: str = Field(
        default_factory=lambda: os.getenv("DYNAMODB_TABLE_PREFIX", ""),
        description="Prefix to add to all table names"
    )

    environment: str = Field(
        default_factory=lambda: os.getenv("ENVIRONMENT", "dev"),
        description="Current environment (dev, test, staging, prod)"
    )

    # Throughput hints, only used for PROVISIONED billing
    read_capacity_units: Optional[int] = Field(
        default_factory=lambda: _env_int("DYNAMODB_READ_CAPACITY"),
        description="Provisioned read capacity for created tables and indexes"
    )

    write_capacity_units: Optional[int] = Field(
        default_factory=lambda: _env_int("DYNAMODB_WRITE_CAPACITY"),
        description="Provisioned write capacity for created tables and indexes"
    )

    # Connection settings
    max_pool_connections: int = Field(
        default=50,
        description="Maximum number of connections in the connection pool"
    )

    retries: int = Field(
        default=3,
        description="Number of botocore-level retry attempts for failed requests"
    )

    timeout_seconds: float = Field(
        default=30.0,
        description="Socket connect/read timeout in seconds"
    )

    # Retry policy applied on top of botocore for transient and throttling errors
    max_attempts: int = Field(
        default=4,
        description="Maximum attempts per operation for retryable errors"
    )

    backoff_base_seconds: float = Field(
        default=0.1,
        description="Initial retry delay, doubled after each attempt"
    )

    backoff_max_seconds: float = Field(
        default=5.0,
        description="Upper bound for a single retry delay"
    )

    default_call_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Deadline applied to calls that do not pass one explicitly"
    )

    # Table provisioning
    provision_timeout_seconds: float = Field(
        default=300.0,
        description="Maximum time ensure_table waits for a table to become ACTIVE"
    )

    provision_poll_seconds: float = Field(
        default=1.0,
        description="First delay between DescribeTable polls"
    )

    provision_poll_max_seconds: float = Field(
        default=20.0,
        description="Upper bound for the delay between DescribeTable polls"
    )

    # Logging settings
    enable_debug_logging: bool = Field(
        default_factory=lambda: os.getenv("DYNAMODB_DEBUG_LOGGING", "false").lower() == "true",
        description="Enable debug logging for DynamoDB operations"
    )

    @field_validator('region_name')
    @classmethod
    def validate_region(cls, v):
        """Validate AWS region name."""
        if not v:
            raise ValueError("AWS region name is required")
        return v

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        valid_environments = ['dev', 'test', 'staging', 'prod']
        if v not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v

    @field_validator('max_attempts')
    @classmethod
    def validate_max_attempts(cls, v):
        if v < 1:
            raise ValueError("max_attempts must be at least 1")
        return v

    @field_validator('read_capacity_units', 'write_capacity_units')
    @classmethod
    def validate_capacity(cls, v):
        if v is not None and v < 1:
            raise ValueError("Capacity units must be positive")
        return v

    @model_validator(mode='after')
    def validate_backoff(self):
        if self.backoff_base_seconds > self.backoff_max_seconds:
            raise ValueError("backoff_base_seconds must not exceed backoff_max_seconds")
        if self.provision_poll_seconds > self.provision_poll_max_seconds:
            raise ValueError("provision_poll_seconds must not exceed provision_poll_max_seconds")
        return self

    @property
    def billing_mode(self) -> str:
        """PROVISIONED when both capacity hints are set, PAY_PER_REQUEST otherwise."""
        if self.read_capacity_units and self.write_capacity_units:
            return "PROVISIONED"
        return "PAY_PER_REQUEST"

    def provisioned_throughput(self) -> Optional[dict]:
        """Return the ProvisionedThroughput block, or None for on-demand billing."""
        if self.billing_mode != "PROVISIONED":
            return None
        return {
            'ReadCapacityUnits': self.read_capacity_units,
            'WriteCapacityUnits': self.write_capacity_units,
        }

    def get_table_name(self, base_name: str) -> str:
        """Get the full table name with prefix and environment.

        Args:
            base_name: Base table name

        Returns:
            Full table name with prefix and environment
        """
        parts = []

        if self.table_prefix:
            parts.append(self.table_prefix)

        if self.environment != "prod":
            parts.append(self.environment)

        parts.append(base_name)

        return "_".join(parts)

    @classmethod
    def from_env(cls) -> 'StorageConfig':
        """Create configuration from environment variables.

        Returns:
            StorageConfig instance
        """
        return cls()

    @classmethod
    def for_local_development(cls, endpoint_url: str = "http://localhost:8000") -> 'StorageConfig':
        """Create configuration for a local DynamoDB endpoint.

        Returns:
            StorageConfig instance configured for local development
        """
        return cls(
            aws_access_key_id="local",
            aws_secret_access_key="local",
            region_name="us-east-1",
            endpoint_url=endpoint_url,
            environment="dev",
            provision_timeout_seconds=30.0,
            enable_debug_logging=True
        )

    model_config = ConfigDict(
        frozen=True,
        use_enum_values=True
    )
