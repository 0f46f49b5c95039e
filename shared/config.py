"""
Shared configuration management for the Crosswire policy provider.
"""

from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ConfigurationError

# Default API endpoint
DEFAULT_HOST = "https://webhook.crosswire.io"


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="CROSSWIRE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")


class ProviderConfig(BaseConfig):
    """Connection settings for the Crosswire API.

    Explicit keyword arguments win over ``CROSSWIRE_API_HOST`` /
    ``CROSSWIRE_API_TOKEN``, which win over the built-in default host.
    The token has no default.
    """

    api_host: str = Field(default=DEFAULT_HOST)
    api_token: Optional[SecretStr] = Field(default=None)
    request_timeout: float = Field(default=10.0, gt=0)

    @field_validator("api_host")
    @classmethod
    def _default_empty_host(cls, value: str) -> str:
        value = value.strip()
        return value.rstrip("/") if value else DEFAULT_HOST

    @property
    def token(self) -> Optional[str]:
        if self.api_token is None:
            return None
        return self.api_token.get_secret_value() or None


class ServiceConfig(BaseConfig):
    """Settings for the HTTP front-end service."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_provider_config(host: Optional[str] = None, api_token: Optional[str] = None,
                        **overrides) -> ProviderConfig:
    """Resolve provider configuration.

    Arguments left as ``None`` fall through to the environment and then to
    the defaults. Raises ConfigurationError when no token can be found.
    """
    explicit = dict(overrides)
    if host is not None:
        explicit["api_host"] = host
    if api_token is not None:
        explicit["api_token"] = api_token

    config = ProviderConfig(**explicit)
    if not config.token:
        raise ConfigurationError(
            "Missing Crosswire API Secret Token. The provider cannot create the Crosswire API client "
            "as there is a missing or empty value for the Crosswire API token. Set the token value "
            "in the configuration or use the CROSSWIRE_API_TOKEN environment variable. "
            "If one is already set, ensure the value is not empty.",
            config_key="api_token"
        )
    return config


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port)
