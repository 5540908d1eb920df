"""Provider connection configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from virgo_articles.config.base import Settings


class EbscoConfig(BaseModel):
    """Configuration for the EBSCO EDS REST API."""

    base_url: str = Field(description="Base URL of the EDS API host")
    profile: str = Field(default="edsapi", description="EDS API profile id")
    auth_token: str | None = Field(
        default=None, description="Optional authentication token for sessions"
    )
    proxy_prefix: str = Field(default="", description="Proxy prefix for PLinks")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")

    @classmethod
    def from_settings(cls, settings: Settings) -> EbscoConfig:
        """Factory using the global settings.

        Args:
            settings: Loaded application settings
        """
        return cls(
            base_url=settings.ebsco_url,
            profile=settings.ebsco_profile,
            auth_token=settings.ebsco_auth_token,
            proxy_prefix=settings.proxy_prefix,
            timeout=settings.request_timeout,
        )


class PrimoConfig(BaseModel):
    """Configuration for the Primo brief-search X-service."""

    base_url: str = Field(description="Base URL of the Primo host")
    institution: str = Field(default="UVA", description="Primo institution code")
    on_campus: bool = Field(default=False, description="Report requests as on-campus")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")

    @classmethod
    def from_settings(cls, settings: Settings) -> PrimoConfig:
        """Factory using the global settings."""
        return cls(
            base_url=settings.primo_url,
            institution=settings.primo_institution,
            on_campus=settings.primo_on_campus,
            timeout=settings.request_timeout,
        )


class SummonConfig(BaseModel):
    """Configuration for the signed Summon API."""

    base_url: str = Field(description="Base URL of the Summon API")
    access_id: str = Field(default="", description="Summon access id")
    secret_key: str = Field(default="", description="Summon secret key (HMAC)")
    timeout: float = Field(default=10.0, description="Request timeout in seconds")

    @classmethod
    def from_settings(cls, settings: Settings) -> SummonConfig:
        """Factory using the global settings."""
        return cls(
            base_url=settings.summon_url,
            access_id=settings.summon_access_id or "",
            secret_key=settings.summon_secret_key or "",
            timeout=settings.request_timeout,
        )
