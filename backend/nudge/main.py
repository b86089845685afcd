"""Nudge API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Notification policy loaded once at startup; a missing or invalid policy
      aborts startup (ConfigurationMissingError / ConfigurationInvalidError)
    - The agent, its state store and the sweeper live for exactly one lifespan
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nudge.api.error_handlers import register_error_handlers
from nudge.api.routes import health, notifications
from nudge.config import get_settings
from nudge.core.boundary_protocols import ConfigProvider
from nudge.core.notification_config import NotificationConfig, load_notification_config
from nudge.infrastructure import database
from nudge.infrastructure.config_provider import YamlConfigProvider
from nudge.infrastructure.discord_client import DiscordMessagingClient
from nudge.infrastructure.event_log import SqlAlchemyEventRecorder
from nudge.infrastructure.observability import setup_logging
from nudge.services.builtin_steps import build_default_registry
from nudge.services.expiry_sweeper import ExpirySweeper
from nudge.services.notification_agent import NotificationAgent

logger = logging.getLogger(__name__)


def load_notification_policy(provider: ConfigProvider) -> NotificationConfig:
    """Read and validate the `notification` namespace. Raises on any gap."""
    config = load_notification_config(provider.get_config("notification"))
    logger.info(
        f"Notification config loaded from {provider.config_path}: "
        f"{len(config.triggers)} trigger(s)",
    )
    return config


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    config = load_notification_policy(YamlConfigProvider(settings.config_path))

    recorder = None
    if settings.audit_log_enabled:
        manager = database.init_db(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
        if settings.database_url.startswith("sqlite"):
            await manager.create_schema()
        recorder = SqlAlchemyEventRecorder(manager)

    messaging = DiscordMessagingClient(
        settings.discord_bot_token,
        base_url=settings.discord_api_base_url,
        timeout_seconds=settings.discord_timeout_seconds,
    )
    agent = NotificationAgent(config, messaging, recorder=recorder)
    agent.initialize(build_default_registry(config, messaging))
    sweeper = ExpirySweeper(agent, settings.sweep_interval_seconds)
    sweeper.start()

    app.state.agent = agent
    app.state.event_log = recorder
    logger.info("Nudge API started")
    yield
    logger.info("Nudge API shutting down")
    await sweeper.stop()
    agent.shutdown()
    await messaging.aclose()
    if database.db_manager is not None:
        await database.db_manager.dispose()
        database.db_manager = None


app = FastAPI(title="Nudge API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(notifications.router)

register_error_handlers(app)
