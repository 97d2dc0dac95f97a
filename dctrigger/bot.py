"""
dctrigger Discord bot
Forwards matching gateway events to a workflow webhook
"""

import asyncio
import logging

import discord
from discord.ext import commands
from pydantic import ValidationError

from .config import ConfigurationError, Settings, TriggerConfig, get_settings
from .core import HealthCheckServer, setup_logging
from .core.logging import LOGGER_NAME, RICH_AVAILABLE
from .events import (
    EnrichmentService,
    EventRouter,
    OutputSink,
    SubscriberEnumerator,
    build_sink,
    intents_for,
)

logger = logging.getLogger(LOGGER_NAME)


class TriggerBot(commands.Bot):
    """Gateway client hosting one event router"""

    def __init__(
        self,
        settings: Settings,
        trigger: TriggerConfig | None = None,
        sink: OutputSink | None = None,
    ):
        self.settings = settings
        self.trigger = trigger or settings.trigger

        intents = intents_for(
            self.trigger.trigger_type, role_filter=bool(self.trigger.criteria.roles)
        )
        application_id = settings.discord_application_id
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
            application_id=int(application_id) if application_id else None,
        )

        self.enrichment = EnrichmentService(self)
        self.subscribers = SubscriberEnumerator(
            settings.discord_bot_token, api_url=settings.discord_api_url
        )
        self.sink = sink or build_sink(settings.sink_url, settings.sink_secret or None)
        self.router = EventRouter(
            self, self.sink, self.enrichment, subscribers=self.subscribers
        )
        self.router.register(self.trigger)

        self.health_server: HealthCheckServer | None = None
        if settings.health_enabled:
            self.health_server = HealthCheckServer(
                self, self.router, host=settings.health_host, port=settings.port
            )

    async def setup_hook(self) -> None:
        """Attach listeners and start the health server before connecting"""
        self.router.start()
        if self.health_server:
            await self.health_server.start()

        if RICH_AVAILABLE:
            logger.info("[yellow]Connecting to Discord...[/yellow]")
        else:
            logger.info("Connecting to Discord...")

    async def on_ready(self) -> None:
        trigger = self.trigger
        if RICH_AVAILABLE:
            logger.info(
                f"[bold green]Bot ready:[/bold green] {self.user} [dim](ID: {self.user.id})[/dim]"
            )
            logger.info(
                f"[cyan]Connection:[/cyan] {len(self.guilds)} guilds "
                f"| discord.py {discord.__version__}"
            )
            logger.info(
                f"[cyan]Trigger:[/cyan] {trigger.trigger_type.value} / {trigger.event} "
                f"| pattern {trigger.pattern.value}"
            )
        else:
            logger.info(f"Bot ready: {self.user} (ID: {self.user.id})")
            logger.info(f"Connection: {len(self.guilds)} guilds | discord.py {discord.__version__}")
            logger.info(f"Trigger: {trigger.trigger_type.value} / {trigger.event}")

    async def close(self) -> None:
        """Stop routing first so in-flight records are discarded, then disconnect"""
        await self.router.close()
        if self.health_server:
            await self.health_server.stop()
        await self.subscribers.close()
        await self.sink.close()
        await super().close()

    async def run_trigger(self) -> None:
        """Log in and connect; a rejected token is a configuration error"""
        try:
            await self.start(self.settings.discord_bot_token)
        except discord.LoginFailure as e:
            raise ConfigurationError(f"Discord rejected the bot token: {e}") from e
        except discord.PrivilegedIntentsRequired as e:
            raise ConfigurationError(
                f"Privileged intents are not enabled for this application: {e}"
            ) from e


async def main(settings: Settings | None = None) -> int:
    """Bot entrypoint; returns the process exit code"""
    try:
        settings = settings or get_settings()
        setup_logging(settings.log_level)
        trigger = settings.trigger
    except ValidationError as e:
        setup_logging()
        logger.error(f"Invalid configuration:\n{e}")
        return 2

    async with TriggerBot(settings, trigger) as bot:
        try:
            await bot.run_trigger()
        except ConfigurationError as e:
            logger.error(f"{e}")
            return 2
        except (KeyboardInterrupt, asyncio.CancelledError):
            if not bot.is_closed():
                await bot.close()
    return 0
