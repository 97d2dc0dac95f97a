"""HTTP health check server"""

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from aiohttp import web

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..events.router import EventRouter

logger = logging.getLogger(__name__)

SERVICE_NAME = "dctrigger"


class HealthCheckServer:
    """HTTP health check server"""

    def __init__(
        self,
        bot: "Bot | None" = None,
        router: "EventRouter | None" = None,
        host: str = "0.0.0.0",
        port: int = 8080,
        heartbeat_interval: float = 300,
    ) -> None:
        self.bot: Any = bot
        self.router = router
        self.host = host
        self.port = port
        self.heartbeat_interval = heartbeat_interval
        self.app = web.Application()
        self.runner: web.AppRunner | None = None
        self._start_time: float = time.time()
        self._heartbeat_task: asyncio.Task | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Configure HTTP routes"""
        self.app.router.add_get("/", self.handle_root)
        self.app.router.add_get("/health", self.handle_health)
        self.app.router.add_get("/status", self.handle_status)
        self.app.router.add_get("/ping", self.handle_ping)

    def _ready(self) -> bool:
        return self.bot is not None and self.bot.is_ready()

    async def handle_root(self, request: web.Request) -> web.Response:
        """Root endpoint - minimal service info"""
        return web.json_response({"service": SERVICE_NAME, "status": "running"})

    async def handle_health(self, request: web.Request) -> web.Response:
        """Liveness check, always 200"""
        ready = self._ready()
        return web.json_response(
            {"status": "healthy" if ready else "starting", "ready": ready},
        )

    async def handle_status(self, request: web.Request) -> web.Response:
        """Connection details plus router counters"""
        ready = self._ready()
        router = self.router
        return web.json_response(
            {
                "service": SERVICE_NAME,
                "bot_id": str(self.bot.user.id) if ready and self.bot.user else None,
                "uptime_seconds": int(time.time() - self._start_time),
                "guilds": len(self.bot.guilds) if ready else 0,
                "triggers": [s.descriptor.name for s in router.subscriptions] if router else [],
                "router": router.stats.as_dict() if router else None,
                "tracked_entities": router.tracker.size if router else 0,
            }
        )

    async def handle_ping(self, request: web.Request) -> web.Response:
        """Ping endpoint"""
        return web.Response(text="pong")

    async def _heartbeat(self) -> None:
        """Periodic heartbeat: log uptime and delivery counters"""
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            uptime = int(time.time() - self._start_time)
            stats = self.router.stats if self.router else None
            logger.info(
                f"Heartbeat: uptime={uptime}s, ready={self._ready()}, "
                f"received={stats.received if stats else 0}, "
                f"emitted={stats.emitted if stats else 0}"
            )

    async def start(self) -> None:
        """Start health check server"""
        try:
            self.runner = web.AppRunner(self.app)
            await self.runner.setup()
            site = web.TCPSite(self.runner, self.host, self.port)
            await site.start()

            self._heartbeat_task = asyncio.create_task(self._heartbeat())

            logger.info(f"Health server started on {self.host}:{self.port}")
            logger.info(f"  GET http://{self.host}:{self.port}/health - Health check")
            logger.info(f"  GET http://{self.host}:{self.port}/status - Detailed status")
        except Exception as e:
            logger.exception(f"Failed to start health server: {e}")
            raise

    async def stop(self) -> None:
        """Stop health check server"""
        if self._heartbeat_task:
            self._heartbeat_task.cancel()
            self._heartbeat_task = None
        if self.runner:
            try:
                await self.runner.cleanup()
                logger.info("Health server stopped")
            except Exception as e:
                logger.exception(f"Error stopping health server: {e}")
            self.runner = None
