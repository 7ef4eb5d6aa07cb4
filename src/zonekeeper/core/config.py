"""Configuration with environment variable support.

All settings can be configured via environment variables with the ZONEKEEPER_ prefix.
Example: ZONEKEEPER_PENDING_INTERVAL=600 checks pending domains every 10 minutes.

The Cloudflare API token is also read from the plain CLOUDFLARE_API_TOKEN variable.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_NAMESERVERS = ["ian.ns.cloudflare.com", "vera.ns.cloudflare.com"]


def load_config_from_file(path: str | Path) -> dict[str, Any]:
    """Load configuration from a YAML or TOML file.

    Args:
        path: Path to the configuration file (.yaml, .yml, or .toml)

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config file has encoding errors, invalid syntax, or unsupported format
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"Config file encoding error in {path}: {e}") from e

    try:
        if path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(content) or {}
        elif path.suffix == ".toml":
            return tomllib.loads(content)
        else:
            raise ValueError(f"Unsupported config format: {path.suffix}")
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e


class ZonekeeperConfig(BaseSettings):
    """Service configuration.

    Example:
        config = get_config()
        print(config.resolver_address)
        print(config.expected_nameservers)
    """

    model_config = SettingsConfigDict(
        env_prefix="ZONEKEEPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    bind: str = Field(
        default="0.0.0.0:8080",
        description="HTTP listener bind address.",
    )

    # Storage
    active_path: str = Field(
        default="domains.json",
        description="JSON file holding active domain records.",
    )
    pending_path: str = Field(
        default="pending_domains.txt",
        description="Line-delimited file of submitted domains awaiting delegation.",
    )
    removed_path: str = Field(
        default="removed_domains.txt",
        description="Line-delimited file of domains that lost delegation.",
    )
    record_set_path: str = Field(
        default="master.zone",
        description="CSV record set applied to every newly onboarded zone.",
    )

    # DNS verification
    resolver_address: str = Field(
        default="1.1.1.1",
        description="Resolver queried for NS records.",
    )
    expected_nameservers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_NAMESERVERS),
        description="Nameservers a domain must delegate to, in order.",
    )
    dns_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Resolver query timeout (seconds).",
    )

    # Reconciliation
    active_interval: float = Field(
        default=3 * 3600.0,
        gt=0,
        description="Seconds between active domain re-verification passes.",
    )
    pending_interval: float = Field(
        default=3600.0,
        gt=0,
        description="Seconds between pending domain onboarding passes.",
    )

    # Cloudflare
    cloudflare_api_token: str | None = Field(
        default=None,
        repr=False,
        validation_alias=AliasChoices(
            "ZONEKEEPER_CLOUDFLARE_API_TOKEN",
            "CLOUDFLARE_API_TOKEN",
            "cloudflare_api_token",
        ),
        description="API token used to create zones and records.",
    )
    cloudflare_account_id: str | None = Field(
        default=None,
        description="Account that owns new zones. Omit to let the token's default account apply.",
    )
    cloudflare_api_url: str = Field(
        default="https://api.cloudflare.com/client/v4",
        description="Cloudflare v4 API base URL.",
    )
    provider_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for Cloudflare API calls (seconds).",
    )

    log_level: str = Field(
        default="info",
        description="Log level (debug, info, warning, error).",
    )

    def to_display_dict(self) -> dict[str, Any]:
        """Export current configuration for display, with the API token masked."""
        data = self.model_dump()
        if data.get("cloudflare_api_token"):
            data["cloudflare_api_token"] = "****"
        return data


_config: ZonekeeperConfig | None = None


def get_config() -> ZonekeeperConfig:
    """Get the global configuration instance.

    Returns a cached instance of ZonekeeperConfig that reads from environment variables.
    To reload config (e.g., in tests), call clear_config() first.
    """
    global _config
    if _config is None:
        _config = ZonekeeperConfig()
    return _config


def clear_config() -> None:
    """Clear the cached configuration.

    Call this to force reloading of environment variables on next get_config() call.
    """
    global _config
    _config = None
