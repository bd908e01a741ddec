"""
Configuration for the E-commerce API stack
Settings come from CDK context (cdk.json or `cdk deploy -c key=value`)
"""
from typing import Any, Optional

from aws_cdk import RemovalPolicy


VALID_ENVIRONMENTS = ("development", "staging", "production")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class StackConfig:
    """Deployment settings for the E-commerce API stack"""

    def __init__(
        self,
        environment: str = "development",
        api_name: str = "product-items-api",
        handler_memory_size: int = 1024,
        handler_timeout_seconds: int = 30,
        api_key_expiry_days: int = 365,
        log_level: str = "INFO"
    ):
        if environment not in VALID_ENVIRONMENTS:
            raise ValueError(
                f"Environment must be one of {', '.join(VALID_ENVIRONMENTS)}, got '{environment}'"
            )

        if log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Log level must be one of {', '.join(VALID_LOG_LEVELS)}, got '{log_level}'"
            )

        self.environment = environment
        self.api_name = api_name
        self.handler_memory_size = int(handler_memory_size)
        self.handler_timeout_seconds = int(handler_timeout_seconds)
        self.api_key_expiry_days = int(api_key_expiry_days)
        self.log_level = log_level.upper()

    @classmethod
    def from_context(cls, node) -> "StackConfig":
        """Build config from a construct node's context, falling back to defaults"""
        defaults = cls()

        def context_value(key: str, default: Any) -> Any:
            value: Optional[Any] = node.try_get_context(key)
            return default if value is None else value

        return cls(
            environment=context_value("environment", defaults.environment),
            api_name=context_value("api_name", defaults.api_name),
            handler_memory_size=context_value("handler_memory_size", defaults.handler_memory_size),
            handler_timeout_seconds=context_value("handler_timeout_seconds", defaults.handler_timeout_seconds),
            api_key_expiry_days=context_value("api_key_expiry_days", defaults.api_key_expiry_days),
            log_level=context_value("log_level", defaults.log_level)
        )

    def is_development(self) -> bool:
        """Check if deploying a development environment"""
        return self.environment == "development"

    def is_production(self) -> bool:
        """Check if deploying a production environment"""
        return self.environment == "production"

    @property
    def removal_policy(self) -> RemovalPolicy:
        # Keep user data outside development
        return RemovalPolicy.DESTROY if self.is_development() else RemovalPolicy.RETAIN
