"""Gateway event routing

One listener per distinct discord.py dispatch name. Each delivery is checked
against the state tracker once, then fanned out to every trigger registered on
that dispatch name: gates, filters, pattern, normalization, sink.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, cast

from .catalog import EventDescriptor, Transition, TriggerType
from .enrichment import EnrichmentService
from .filters import EventIdentity, FilterChain
from .normalize import NormalizeContext, identify, normalize
from .patterns import PatternMatcher
from .sink import OutputSink
from .state import StateTracker
from .subscribers import SubscriberEnumerator

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..config import TriggerConfig

logger = logging.getLogger(__name__)

Listener = Callable[..., Coroutine[Any, Any, None]]


@dataclass
class RouterStats:
    """Delivery counters, exposed on /status"""

    received: int = 0
    emitted: int = 0
    rejected: int = 0
    failed: int = 0
    # Records finished after the router closed
    discarded: int = 0
    last_event_at: float | None = None
    per_event: dict[str, int] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "received": self.received,
            "emitted": self.emitted,
            "rejected": self.rejected,
            "failed": self.failed,
            "discarded": self.discarded,
            "last_event_at": self.last_event_at,
            "per_event": dict(self.per_event),
        }


@dataclass
class Subscription:
    descriptor: EventDescriptor
    filters: FilterChain
    matcher: PatternMatcher
    include_bot: bool = False
    direct_message: bool = False

    @classmethod
    def from_config(
        cls, trigger: TriggerConfig, enrichment: EnrichmentService | None = None
    ) -> Subscription:
        return cls(
            descriptor=trigger.descriptor,
            filters=FilterChain(trigger.criteria, enrichment),
            matcher=PatternMatcher(trigger.pattern_spec, enrichment),
            include_bot=trigger.include_bot,
            direct_message=trigger.direct_message,
        )

    async def accepts(
        self, identity: EventIdentity, args: tuple[Any, ...], bot_user_id: str | None
    ) -> bool:
        descriptor = self.descriptor

        if (
            descriptor.trigger_type == TriggerType.MESSAGE
            and not self.include_bot
            and identity.user_is_bot
        ):
            return False

        if descriptor.content_matched and identity.is_direct_message != self.direct_message:
            return False

        if not await self.filters.allows(identity):
            return False

        if descriptor.content_arg is not None:
            return await self.matcher.matches(args[descriptor.content_arg], bot_user_id)
        return True


class EventRouter:
    """Routes gateway deliveries to registered triggers and pushes records to the sink"""

    def __init__(
        self,
        bot: Bot,
        sink: OutputSink,
        enrichment: EnrichmentService,
        subscribers: SubscriberEnumerator | None = None,
        tracker: StateTracker | None = None,
    ):
        self.bot = bot
        self.sink = sink
        self.enrichment = enrichment
        self.subscribers = subscribers
        self.tracker = tracker or StateTracker()
        self.stats = RouterStats()

        self._subscriptions: dict[str, list[Subscription]] = {}
        self._listeners: dict[str, Listener] = {}
        self._started = False
        self._closed = False

    @property
    def subscriptions(self) -> list[Subscription]:
        return [s for subs in self._subscriptions.values() for s in subs]

    @property
    def gateway_events(self) -> list[str]:
        return list(self._subscriptions)

    def register(self, trigger: TriggerConfig) -> Subscription:
        subscription = Subscription.from_config(trigger, self.enrichment)
        self.add_subscription(subscription)
        return subscription

    def add_subscription(self, subscription: Subscription) -> None:
        gateway_event = subscription.descriptor.gateway_event
        self._subscriptions.setdefault(gateway_event, []).append(subscription)
        if self._started and gateway_event not in self._listeners:
            self._listen(gateway_event)

    def start(self) -> None:
        """Attach one listener per gateway event"""
        if self._started:
            return
        self._started = True
        for gateway_event in self._subscriptions:
            self._listen(gateway_event)
        names = ", ".join(s.descriptor.name for s in self.subscriptions)
        logger.info(f"Event router listening: {names or 'nothing'}")

    def _listen(self, gateway_event: str) -> None:
        async def listener(*args: Any) -> None:
            await self.dispatch(gateway_event, *args)

        listener.__name__ = f"on_{gateway_event}"
        self._listeners[gateway_event] = listener
        # commands.Bot provides add_listener; typed as Any for plain clients
        cast(Any, self.bot).add_listener(listener, f"on_{gateway_event}")

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        bot_any = cast(Any, self.bot)
        for gateway_event, listener in self._listeners.items():
            bot_any.remove_listener(listener, f"on_{gateway_event}")
        self._listeners.clear()
        self.tracker.clear()
        logger.info(f"Event router stopped: {self.stats.as_dict()}")

    @property
    def closed(self) -> bool:
        return self._closed

    # --- delivery ---

    async def dispatch(self, gateway_event: str, *args: Any) -> None:
        """Handle one gateway delivery; never raises"""
        if self._closed:
            return
        self.stats.received += 1
        self.stats.last_event_at = time.time()

        transition = await self._observe_state(gateway_event, args)

        for subscription in self._subscriptions.get(gateway_event, []):
            descriptor = subscription.descriptor
            if descriptor.synthetic and descriptor.transition != transition:
                continue
            # Exception isolation: one failing trigger must not affect the others
            try:
                await self._process(subscription, args, transition)
            except Exception as e:
                self.stats.failed += 1
                logger.exception(f"Failed to process {descriptor.name}: {e}")

    async def _observe_state(self, gateway_event: str, args: tuple[Any, ...]) -> Transition | None:
        try:
            if gateway_event == "scheduled_event_update":
                before, after = args
                return await self.tracker.observe(after.id, after.status, before.status)
            if gateway_event == "scheduled_event_create":
                (event,) = args
                await self.tracker.observe(event.id, event.status)
        except Exception as e:
            logger.exception(f"State tracking failed for {gateway_event}: {e}")
        return None

    async def _process(
        self,
        subscription: Subscription,
        args: tuple[Any, ...],
        transition: Transition | None,
    ) -> None:
        descriptor = subscription.descriptor
        bot_user_id = self.enrichment.bot_user_id
        identity = identify(descriptor, args)

        if not await subscription.accepts(identity, args, bot_user_id):
            self.stats.rejected += 1
            return

        context = NormalizeContext(
            descriptor=descriptor,
            enrichment=self.enrichment,
            subscribers=self.subscribers,
            bot_user_id=bot_user_id,
            transition=transition,
        )
        record = await normalize(args, context, identity)

        if self._closed:
            self.stats.discarded += 1
            logger.debug(f"Discarding {descriptor.name} record finished after shutdown")
            return

        await self.sink.push([record])
        self.stats.emitted += 1
        self.stats.per_event[descriptor.name] = self.stats.per_event.get(descriptor.name, 0) + 1
