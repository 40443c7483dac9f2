"""Factory functions to create components from configuration."""

from polarity_bot.api.polarity import PolarityClient
from polarity_bot.config.models import BotConfig, CacheSettings, PolaritySettings
from polarity_bot.integrations import IntegrationRegistry
from polarity_bot.payload_cache import PayloadCache
from polarity_bot.pipeline.coordinator import LookupCoordinator
from polarity_bot.slack.handlers import BotHandlers


def create_client(settings: PolaritySettings) -> PolarityClient:
    """Create the Polarity API client.

    Credentials missing from ``settings`` are read from the environment.
    """
    return PolarityClient(
        hostname=settings.hostname,
        ignore_tls_errors=settings.ignore_tls_errors,
        timeout=settings.request_timeout_seconds,
    )


def create_cache(settings: CacheSettings) -> PayloadCache:
    return PayloadCache(ttl_seconds=settings.ttl_seconds)


def create_coordinator(
    config: BotConfig,
    client: PolarityClient,
    registry: IntegrationRegistry,
    cache: PayloadCache,
) -> LookupCoordinator:
    """Create the search coordinator."""
    return LookupCoordinator(
        client,
        registry,
        cache,
        limits=config.render.limits(),
        max_message_blocks=config.slack.max_message_blocks,
        lookup_timeout=config.polarity.lookup_timeout_seconds,
        progress_width=config.slack.progress_width,
    )


def create_from_config(config: BotConfig) -> tuple[BotHandlers, IntegrationRegistry]:
    """Create every bot component from root config.

    The registry starts empty; call ``IntegrationRegistry.load`` before
    accepting commands.

    Args:
        config: Root configuration.

    Returns:
        Tuple of (handlers, registry).
    """
    client = create_client(config.polarity)
    registry = IntegrationRegistry(client)
    cache = create_cache(config.cache)
    coordinator = create_coordinator(config, client, registry, cache)
    handlers = BotHandlers(
        client,
        registry,
        cache,
        coordinator,
        limits=config.render.limits(),
    )
    return (handlers, registry)
