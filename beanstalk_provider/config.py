"""
Beanstalk provider configuration loading.

Loads provider configuration from YAML with environment variable expansion.
Credentials fall back to BEANSTALK_USERNAME / BEANSTALK_ACCESS_TOKEN.
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from beanstalk_provider.errors import ConfigError

USERNAME_ENV = "BEANSTALK_USERNAME"
ACCESS_TOKEN_ENV = "BEANSTALK_ACCESS_TOKEN"
DEFAULT_API_DOMAIN = "beanstalkapp.com"
DEFAULT_TIMEOUT_S = 30


@dataclass(frozen=True)
class ProviderConfig:
    """
    Connection settings for one Beanstalk account.

    Attributes:
        account_name: Account subdomain (e.g. "acme" for acme.beanstalkapp.com)
        username: Login used for HTTP Basic auth
        access_token: API access token (sensitive, masked in repr)
        api_domain: Domain the account subdomain lives under
        timeout_s: Per-request timeout passed to requests
    """
    account_name: str
    username: str
    access_token: str = field(repr=False)
    api_domain: str = DEFAULT_API_DOMAIN
    timeout_s: float = DEFAULT_TIMEOUT_S

    @property
    def base_url(self) -> str:
        return f"https://{self.account_name}.{self.api_domain}/api/"


# ${NAME} or bare $NAME; unset variables expand to an empty string
ENV_REFERENCE = re.compile(r"\$\{(?P<braced>[^}]+)\}|\$(?P<bare>[A-Z_][A-Z0-9_]*)")


def _env_value(match: re.Match) -> str:
    return os.environ.get(match.group("braced") or match.group("bare"), "")


def expand_env_vars(value: Any) -> Any:
    """Expand environment references in every string of a loaded config tree."""
    if isinstance(value, dict):
        return {key: expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    if isinstance(value, str):
        return ENV_REFERENCE.sub(_env_value, value)
    return value


def load_config_file(config_path: str | Path | None = None) -> dict:
    """
    Load raw provider settings from a YAML file.

    Looks for config in this order:
    1. Explicitly provided path
    2. config/beanstalk.yaml relative to project root
    3. Returns an empty mapping (settings then come from the environment)

    Args:
        config_path: Optional path to config file

    Returns:
        Dict of provider settings with env vars expanded
    """
    if config_path is None:
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config" / "beanstalk.yaml"
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    # Accept either a flat mapping or one nested under "provider"
    settings = raw.get("provider", raw)
    return expand_env_vars(settings)


def build_provider_config(settings: dict) -> ProviderConfig:
    """
    Validate settings and apply environment fallbacks.

    Args:
        settings: Raw settings (account_name, username, access_token, ...)

    Returns:
        ProviderConfig

    Raises:
        ConfigError: If a required setting is missing or invalid
    """
    account_name = settings.get("account_name") or ""
    username = settings.get("username") or os.environ.get(USERNAME_ENV, "")
    access_token = settings.get("access_token") or os.environ.get(ACCESS_TOKEN_ENV, "")

    missing = [
        name for name, value in (
            ("account_name", account_name),
            ("username", username),
            ("access_token", access_token),
        )
        if not value
    ]
    if missing:
        raise ConfigError(
            f"Beanstalk config missing required fields: {', '.join(missing)}"
        )

    try:
        timeout_s = float(settings.get("timeout_s", DEFAULT_TIMEOUT_S))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid timeout_s: {settings.get('timeout_s')!r}") from e

    return ProviderConfig(
        account_name=account_name,
        username=username,
        access_token=access_token,
        api_domain=settings.get("api_domain") or DEFAULT_API_DOMAIN,
        timeout_s=timeout_s,
    )


def load_provider_config(config_path: str | Path | None = None) -> ProviderConfig:
    """Load, expand and validate provider configuration."""
    return build_provider_config(load_config_file(config_path))
