"""
Provider configuration: resolve host and token, then build a client.
"""

from typing import Optional

import httpx

from shared.config import ProviderConfig, get_provider_config
from shared.errors import AuthenticationError
from shared.logging import get_logger

from .adapters.crosswire_client import CrosswireClient
from .resource import PolicyResource
from .schema import RESOURCE_TYPE

logger = get_logger("provider.configure")


def configure_provider(host: Optional[str] = None, api_token: Optional[str] = None,
                       config: Optional[ProviderConfig] = None,
                       http_client: Optional[httpx.Client] = None) -> CrosswireClient:
    """Create a Crosswire client whose credentials have been checked.

    ``host`` and ``api_token`` override ``CROSSWIRE_API_HOST`` and
    ``CROSSWIRE_API_TOKEN``; a ready ``config`` skips resolution. Raises
    ConfigurationError without a token and AuthenticationError when the
    service rejects it.
    """
    logger.info("Configuring Crosswire client")
    if config is None:
        config = get_provider_config(host=host, api_token=api_token)

    logger.debug("Resolved Crosswire settings", crosswire_host=config.api_host,
                 crosswire_api_token=config.token)

    client = CrosswireClient(
        host_url=config.api_host,
        token=config.token,
        timeout=config.request_timeout,
        http_client=http_client
    )

    if not client.validate_credentials():
        client.close()
        raise AuthenticationError(
            "client validation failed",
            details={"host": config.api_host}
        )

    logger.info("Configured Crosswire client", success=True, crosswire_host=config.api_host)
    return client


def resources(client: CrosswireClient) -> dict:
    """Resource types served by this provider, keyed by type name."""
    return {RESOURCE_TYPE: PolicyResource(client)}
