"""Configuration for virgo-articles."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find project root (where .env is located)
# This module is in src/virgo_articles/config/base.py
# Project root is 3 levels up
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


class Settings(BaseSettings):
    """Global settings, loaded from environment variables or .env"""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_prefix="ARTICLES_",
        case_sensitive=False,
    )

    # Provider selection
    provider: str = Field(
        default="ebsco",
        description="Active article provider (ebsco, primo or summon)",
    )
    request_timeout: float = Field(
        default=10.0, description="Read timeout for every provider request (s)"
    )
    proxy_prefix: str = Field(
        default="",
        description="Off-campus proxy prefix prepended to provider links",
    )

    # EBSCO Discovery Service
    ebsco_url: str = Field(
        default="https://eds-api.ebscohost.com",
        description="Base URL of the EBSCO EDS API",
    )
    ebsco_profile: str = Field(default="edsapi", description="EDS API profile id")
    ebsco_auth_token: str | None = Field(
        default=None,
        description="Optional x-authenticationToken sent when creating sessions",
    )

    # Primo Central
    primo_url: str = Field(
        default="http://primo.hosted.exlibrisgroup.com",
        description="Base URL of the Primo X-services host",
    )
    primo_institution: str = Field(
        default="UVA", description="Primo institution code"
    )
    primo_on_campus: bool = Field(
        default=False, description="Report Primo requests as on-campus"
    )

    # Summon
    summon_url: str = Field(
        default="https://api.summon.serialssolutions.com",
        description="Base URL of the Summon API",
    )
    summon_access_id: str | None = Field(default=None)
    summon_secret_key: str | None = Field(default=None)

    # Server
    server_name: str = Field(
        default="Virgo Articles", description="Name of the MCP Server"
    )


# Singleton instance
settings = Settings()
