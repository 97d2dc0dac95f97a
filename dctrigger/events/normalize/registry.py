"""Event name -> (identify, extract) registry"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from ..catalog import EventDescriptor, Transition
from ..enrichment import EnrichmentService
from ..filters import EventIdentity
from ..subscribers import SubscriberEnumerator
from .fields import plain, utcnow_iso

Record = dict[str, Any]

IDENTITY_KEYS = ("guild_id", "channel_id", "user_id")


@dataclass
class NormalizeContext:
    """Everything an extractor may need besides the event arguments"""

    descriptor: EventDescriptor
    enrichment: EnrichmentService
    subscribers: SubscriberEnumerator | None = None
    bot_user_id: str | None = None
    transition: Transition | None = None


Identify = Callable[[tuple[Any, ...]], EventIdentity]
Extract = Callable[[tuple[Any, ...], NormalizeContext], Awaitable[Record]]


@dataclass(frozen=True)
class KindHandler:
    identify: Identify
    extract: Extract


_REGISTRY: dict[str, KindHandler] = {}


def extractor(*names: str, identify: Identify) -> Callable[[Extract], Extract]:
    """Register ``func`` as the extractor for each event name"""

    def decorator(func: Extract) -> Extract:
        for name in names:
            if name in _REGISTRY:
                raise ValueError(f"Duplicate extractor for {name}")
            _REGISTRY[name] = KindHandler(identify=identify, extract=func)
        return func

    return decorator


def _no_identity(args: tuple[Any, ...]) -> EventIdentity:
    return EventIdentity()


async def _passthrough(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    return {"event_args": plain(list(args))}


PASSTHROUGH = KindHandler(identify=_no_identity, extract=_passthrough)


def handler_for(name: str) -> KindHandler:
    return _REGISTRY.get(name, PASSTHROUGH)


def registered_events() -> frozenset[str]:
    return frozenset(_REGISTRY)


def identify(descriptor: EventDescriptor, args: tuple[Any, ...]) -> EventIdentity:
    return handler_for(descriptor.name).identify(args)


async def normalize(
    args: tuple[Any, ...], ctx: NormalizeContext, identity: EventIdentity | None = None
) -> Record:
    """Build the output record: identifying keys, then the per-kind fragment"""
    handler = handler_for(ctx.descriptor.name)
    if identity is None:
        identity = handler.identify(args)

    record: Record = {
        "event": ctx.descriptor.name,
        "gateway_event": ctx.descriptor.gateway_event,
        "synthetic": ctx.descriptor.synthetic,
        "received_at": utcnow_iso(),
        "guild_id": identity.guild_id,
        "channel_id": identity.channel_id,
        "user_id": identity.user_id,
    }
    fragment = await handler.extract(args, ctx)
    # Fragments may only refine the identifying ids, never blank them
    for key in IDENTITY_KEYS:
        if fragment.get(key) is None:
            fragment.pop(key, None)
    record.update(fragment)
    return record
