"""
Beanstalk provider package.

Exposes the Beanstalk REST API (repositories, users, teams, code-review
settings, integrations) as declarative resources.
"""

from beanstalk_provider.client import ApiClient, BeanstalkClient
from beanstalk_provider.config import ProviderConfig, load_provider_config
from beanstalk_provider.errors import (
    BeanstalkError,
    ConfigError,
    HTTPStatusError,
    MalformedPayloadError,
    NotFoundError,
    PayloadMissingError,
    UnsupportedOperationError,
)
from beanstalk_provider.provider import Provider

__all__ = [
    "ApiClient",
    "BeanstalkClient",
    "ProviderConfig",
    "load_provider_config",
    "BeanstalkError",
    "ConfigError",
    "HTTPStatusError",
    "MalformedPayloadError",
    "NotFoundError",
    "PayloadMissingError",
    "UnsupportedOperationError",
    "Provider",
]
