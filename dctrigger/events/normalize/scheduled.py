"""Guild scheduled event extractors"""

from typing import Any

from ..enrichment import role_list
from ..filters import EventIdentity
from .fields import changes, iso, plain, snowflake, user_fields
from .registry import NormalizeContext, Record, extractor

EVENT_ATTRS = (
    "name",
    "description",
    "status",
    "start_time",
    "end_time",
    "location",
    "channel_id",
    "privacy_level",
    "entity_type",
)


def _identify_event(event: Any, user: Any = None) -> EventIdentity:
    return EventIdentity.of(
        guild=getattr(event, "guild", None),
        guild_id=event.guild_id,
        channel_id=event.channel_id,
        entity=event,
        user=user,
        user_id=event.creator_id if user is None else None,
    )


def _event_record(event: Any) -> Record:
    cover = getattr(event, "cover_image", None)
    return {
        "scheduled_event_id": snowflake(event),
        "scheduled_event_name": event.name,
        "description": event.description,
        "status": plain(event.status),
        "entity_type": plain(event.entity_type),
        "privacy_level": plain(getattr(event, "privacy_level", None)),
        "location": event.location,
        "start_time": iso(event.start_time),
        "end_time": iso(event.end_time),
        "creator_id": snowflake(event.creator_id),
        "url": getattr(event, "url", None),
        "cover_image_url": str(cover.url) if cover is not None else None,
        "user_count": getattr(event, "user_count", None),
    }


async def _subscribers(event: Any, ctx: NormalizeContext) -> Record:
    """Subscriber ids and count; partial when pagination stopped early"""
    if ctx.subscribers is None or event.guild_id is None:
        return {
            "subscriber_ids": [],
            "subscriber_count": getattr(event, "user_count", None),
            "subscribers_complete": False,
        }

    lookup = await ctx.subscribers.list_subscribers(event.guild_id, event.id)
    ids = lookup.value or []
    return {
        "subscriber_ids": ids,
        "subscriber_count": len(ids) if lookup.ok or ids else None,
        "subscribers_complete": lookup.ok,
    }


@extractor(
    "scheduled_event_create",
    "scheduled_event_delete",
    identify=lambda args: _identify_event(args[0]),
)
async def scheduled_event_lifecycle(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (event,) = args
    record = _event_record(event)
    record.update(await _subscribers(event, ctx))
    return record


@extractor(
    "scheduled_event_update",
    "scheduled_event_start",
    "scheduled_event_end",
    identify=lambda args: _identify_event(args[1]),
)
async def scheduled_event_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    before, after = args
    record = _event_record(after)
    record["changes"] = changes(before, after, EVENT_ATTRS)
    record["old_status"] = plain(before.status)
    record["new_status"] = plain(after.status)
    record["transition"] = ctx.transition.value if ctx.transition is not None else None
    record.update(await _subscribers(after, ctx))
    return record


@extractor(
    "scheduled_event_user_add",
    "scheduled_event_user_remove",
    identify=lambda args: _identify_event(args[0], user=args[1]),
)
async def scheduled_event_user(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    event, user = args
    record = _event_record(event)
    record.update(user_fields(user))

    if hasattr(user, "roles"):
        record["user_roles"] = role_list(user)
    else:
        lookup = await ctx.enrichment.member_roles(user.id, event.guild_id)
        record["user_roles"] = lookup.unwrap_or([])
    return record
