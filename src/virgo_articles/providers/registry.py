"""Engine selection by provider."""

from __future__ import annotations

from typing import TYPE_CHECKING

from virgo_articles.config.base import settings as default_settings
from virgo_articles.providers.base import ArticleEngine, Provider
from virgo_articles.providers.ebsco.engine import EbscoEngine
from virgo_articles.providers.primo.engine import PrimoEngine
from virgo_articles.providers.summon.engine import SummonEngine

if TYPE_CHECKING:
    import httpx

    from virgo_articles.config.base import Settings

ENGINES: dict[Provider, type[ArticleEngine]] = {
    Provider.EBSCO: EbscoEngine,
    Provider.PRIMO: PrimoEngine,
    Provider.SUMMON: SummonEngine,
}


def get_engine_class(provider: Provider | str) -> type[ArticleEngine]:
    """Engine class for a provider.

    Raises:
        ValueError: If the provider is unknown
    """
    return ENGINES[Provider(provider)]


def create_engine(
    provider: Provider | str | None = None,
    settings: Settings | None = None,
    client: httpx.AsyncClient | None = None,
) -> ArticleEngine:
    """Create an engine configured from settings.

    Args:
        provider: Provider to use; the configured default if omitted
        settings: Settings to configure from; the global settings if omitted
        client: Optional shared HTTP client

    Raises:
        ValueError: If the provider is unknown
    """
    settings = settings or default_settings
    engine_class = get_engine_class(provider or settings.provider)
    return engine_class.from_settings(settings, client=client)
