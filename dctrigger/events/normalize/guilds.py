"""Guild, channel, role, thread, stage, expression, integration and invite extractors"""

from typing import Any

from ..filters import EventIdentity
from .fields import (
    changes,
    channel_fields,
    guild_fields,
    iso,
    plain,
    role_fields,
    snowflake,
    user_fields,
)
from .registry import NormalizeContext, Record, extractor

CHANNEL_ATTRS = (
    "name",
    "topic",
    "position",
    "nsfw",
    "slowmode_delay",
    "category_id",
    "bitrate",
    "user_limit",
)
GUILD_ATTRS = (
    "name",
    "description",
    "icon",
    "owner_id",
    "verification_level",
    "afk_channel",
    "afk_timeout",
    "system_channel",
    "premium_tier",
    "preferred_locale",
)
ROLE_ATTRS = ("name", "colour", "hoist", "mentionable", "position", "permissions")
THREAD_ATTRS = ("name", "archived", "locked", "slowmode_delay", "auto_archive_duration")


# --- channels ---


def _identify_channel(channel: Any) -> EventIdentity:
    return EventIdentity.of(guild=getattr(channel, "guild", None), channel=channel)


def _channel_record(channel: Any) -> Record:
    record = channel_fields(channel)
    record.update(guild_fields(getattr(channel, "guild", None)))
    record["position"] = getattr(channel, "position", None)
    record["topic"] = getattr(channel, "topic", None)
    record["nsfw"] = getattr(channel, "nsfw", None)
    record["created_at"] = iso(getattr(channel, "created_at", None))
    return record


@extractor("channel_create", "channel_delete", identify=lambda args: _identify_channel(args[0]))
async def channel_lifecycle(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    return _channel_record(args[0])


@extractor("channel_update", identify=lambda args: _identify_channel(args[1]))
async def channel_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    before, after = args
    record = _channel_record(after)
    record["changes"] = changes(before, after, CHANNEL_ATTRS)
    return record


@extractor("channel_pins_update", identify=lambda args: _identify_channel(args[0]))
async def channel_pins_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    channel, last_pin = args
    record = channel_fields(channel)
    record["last_pin_at"] = iso(last_pin)

    pins = await ctx.enrichment.fetch_pins(channel)
    pinned = pins.value if pins.ok and pins.value is not None else []
    latest = pinned[0] if pinned else None
    record["pinned_count"] = len(pinned) if pins.ok else None
    record["latest_pinned_message_id"] = snowflake(latest)
    record["latest_pinned_content"] = getattr(latest, "content", None)
    record["latest_pinned_author_id"] = snowflake(getattr(latest, "author", None))
    return record


# --- guilds ---


def _identify_guild(guild: Any) -> EventIdentity:
    return EventIdentity.of(guild=guild)


def _guild_record(guild: Any) -> Record:
    record = guild_fields(guild)
    record["member_count"] = getattr(guild, "member_count", None)
    record["unavailable"] = getattr(guild, "unavailable", None)
    record["description"] = getattr(guild, "description", None)
    record["icon_url"] = str(guild.icon.url) if getattr(guild, "icon", None) else None
    record["created_at"] = iso(getattr(guild, "created_at", None))
    return record


@extractor("guild_available", "guild_create", identify=lambda args: _identify_guild(args[0]))
async def guild_joined(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (guild,) = args
    record = _guild_record(guild)
    record["channels"] = [
        {"id": snowflake(c), "name": c.name, "type": plain(c.type)} for c in guild.channels
    ]
    record["roles"] = [{"id": snowflake(r), "name": r.name} for r in guild.roles]

    owner = await ctx.enrichment.fetch_owner(guild)
    record.update(user_fields(owner.value if owner.ok else None, prefix="owner"))
    return record


@extractor("guild_delete", "guild_unavailable", identify=lambda args: _identify_guild(args[0]))
async def guild_gone(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    return _guild_record(args[0])


@extractor("guild_update", identify=lambda args: _identify_guild(args[1]))
async def guild_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    before, after = args
    record = _guild_record(after)
    record["changes"] = changes(before, after, GUILD_ATTRS)
    return record


@extractor("guild_integrations_update", identify=lambda args: _identify_guild(args[0]))
async def guild_integrations_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    return guild_fields(args[0])


# --- roles ---


def _identify_role(role: Any) -> EventIdentity:
    return EventIdentity.of(guild=role.guild)


@extractor("role_create", "role_delete", identify=lambda args: _identify_role(args[0]))
async def role_lifecycle(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (role,) = args
    record = role_fields(role)
    record.update(guild_fields(role.guild))
    return record


@extractor("role_update", identify=lambda args: _identify_role(args[1]))
async def role_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    before, after = args
    record = role_fields(after)
    record.update(guild_fields(after.guild))
    record["changes"] = changes(before, after, ROLE_ATTRS)
    return record


# --- stage instances ---


def _identify_stage(stage: Any) -> EventIdentity:
    return EventIdentity.of(guild=stage.guild, channel_id=stage.channel_id)


def _stage_record(stage: Any) -> Record:
    return {
        "stage_instance_id": snowflake(stage),
        "topic": stage.topic,
        "privacy_level": plain(stage.privacy_level),
        "scheduled_event_id": snowflake(getattr(stage, "scheduled_event_id", None)),
    }


@extractor(
    "stage_instance_create",
    "stage_instance_delete",
    identify=lambda args: _identify_stage(args[0]),
)
async def stage_instance_lifecycle(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    return _stage_record(args[0])


@extractor("stage_instance_update", identify=lambda args: _identify_stage(args[1]))
async def stage_instance_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    before, after = args
    record = _stage_record(after)
    record["changes"] = changes(before, after, ("topic", "privacy_level"))
    return record


# --- threads ---


def _identify_thread(thread: Any) -> EventIdentity:
    return EventIdentity.of(guild=thread.guild, channel=thread, user_id=thread.owner_id)


def _thread_record(thread: Any) -> Record:
    return {
        "thread_id": snowflake(thread),
        "thread_name": thread.name,
        "parent_id": snowflake(thread.parent_id),
        "owner_id": snowflake(thread.owner_id),
        "archived": thread.archived,
        "locked": thread.locked,
        "member_count": getattr(thread, "member_count", None),
        "message_count": getattr(thread, "message_count", None),
        "created_at": iso(getattr(thread, "created_at", None)),
    }


@extractor(
    "thread_create",
    "thread_delete",
    "thread_join",
    identify=lambda args: _identify_thread(args[0]),
)
async def thread_lifecycle(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    return _thread_record(args[0])


@extractor("thread_update", identify=lambda args: _identify_thread(args[1]))
async def thread_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    before, after = args
    record = _thread_record(after)
    record["changes"] = changes(before, after, THREAD_ATTRS)
    return record


def _identify_thread_member(args: tuple[Any, ...]) -> EventIdentity:
    member = args[0]
    thread = member.thread
    return EventIdentity.of(guild=thread.guild, channel=thread, user_id=member.id)


@extractor("thread_member_join", "thread_member_remove", identify=_identify_thread_member)
async def thread_member(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (member,) = args
    return {
        "thread_id": snowflake(member.thread_id),
        "thread_name": member.thread.name,
        "joined_at": iso(getattr(member, "joined_at", None)),
    }


# --- emojis & stickers ---


def _expression_diff(before: Any, after: Any) -> Record:
    old = {e.id: e for e in before}
    new = {e.id: e for e in after}
    return {
        "added": [{"id": snowflake(i), "name": new[i].name} for i in new if i not in old],
        "removed": [{"id": snowflake(i), "name": old[i].name} for i in old if i not in new],
        "renamed": [
            {"id": snowflake(i), "old_name": old[i].name, "new_name": new[i].name}
            for i in new
            if i in old and old[i].name != new[i].name
        ],
    }


@extractor("emojis_update", "stickers_update", identify=lambda args: _identify_guild(args[0]))
async def expressions_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    guild, before, after = args
    record = guild_fields(guild)
    record.update(_expression_diff(before, after))
    record["total"] = len(after)
    return record


# --- webhooks & integrations ---


@extractor("webhooks_update", identify=lambda args: _identify_channel(args[0]))
async def webhooks_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    return channel_fields(args[0])


def _identify_integration(args: tuple[Any, ...]) -> EventIdentity:
    integration = args[0]
    return EventIdentity.of(guild=integration.guild, user=getattr(integration, "user", None))


@extractor("integration_create", identify=_identify_integration)
async def integration_create(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (integration,) = args
    record: Record = {
        "integration_id": snowflake(integration),
        "integration_name": integration.name,
        "integration_type": integration.type,
        "enabled": getattr(integration, "enabled", None),
        "account_id": snowflake(getattr(integration.account, "id", None)),
        "account_name": getattr(integration.account, "name", None),
    }
    record.update(user_fields(getattr(integration, "user", None)))
    return record


# --- invites ---


def _identify_invite(args: tuple[Any, ...]) -> EventIdentity:
    invite = args[0]
    return EventIdentity.of(guild=invite.guild, channel=invite.channel, user=invite.inviter)


@extractor("invite_create", "invite_delete", identify=_identify_invite)
async def invite_lifecycle(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (invite,) = args
    record: Record = {
        "code": invite.code,
        "url": invite.url,
        "max_age": invite.max_age,
        "max_uses": invite.max_uses,
        "uses": invite.uses,
        "temporary": invite.temporary,
        "created_at": iso(invite.created_at),
        "expires_at": iso(invite.expires_at),
    }
    record.update(channel_fields(invite.channel))
    record.update(user_fields(invite.inviter, prefix="inviter"))
    return record
