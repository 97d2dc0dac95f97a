"""Message, reaction, typing and poll vote extractors"""

import re
from typing import Any

from ..enrichment import role_list
from ..filters import EventIdentity
from .fields import (
    attachment_list,
    channel_fields,
    emoji_fields,
    guild_fields,
    iso,
    plain,
    snowflake,
    user_fields,
)
from .registry import NormalizeContext, Record, extractor


def strip_bot_mention(content: str, bot_user_id: str | None) -> str:
    """Remove ``<@id>`` / ``<@!id>`` mentions of the bot"""
    if not content or bot_user_id is None:
        return content
    return re.sub(rf"<@!?{re.escape(bot_user_id)}>", "", content).strip()


def message_fields(message: Any) -> Record:
    channel = message.channel
    record: Record = {
        "message_id": snowflake(message),
        "content": message.content,
        "created_at": iso(message.created_at),
        "edited_at": iso(getattr(message, "edited_at", None)),
        "message_type": plain(getattr(message, "type", None)),
        "pinned": getattr(message, "pinned", False),
        "tts": getattr(message, "tts", False),
        "jump_url": getattr(message, "jump_url", None),
        "is_direct_message": message.guild is None,
        "attachments": attachment_list(message),
        "embeds": [embed.to_dict() for embed in getattr(message, "embeds", None) or []],
        "stickers": [
            {"id": snowflake(s), "name": getattr(s, "name", None)}
            for s in getattr(message, "stickers", None) or []
        ],
        "mention_user_ids": [snowflake(u) for u in getattr(message, "mentions", None) or []],
        "mention_role_ids": [snowflake(r) for r in getattr(message, "role_mentions", None) or []],
        "mention_everyone": getattr(message, "mention_everyone", False),
    }
    record.update(user_fields(message.author, prefix="author"))
    record.update(channel_fields(channel))
    record.update(guild_fields(message.guild))
    reference = getattr(message, "reference", None)
    record["reference_message_id"] = snowflake(getattr(reference, "message_id", None))
    return record


def _identify_message(message: Any) -> EventIdentity:
    return EventIdentity.of(guild=message.guild, channel=message.channel, user=message.author)


async def _author_roles(message: Any, ctx: NormalizeContext) -> list[dict[str, str]]:
    if message.guild is None:
        return []
    if hasattr(message.author, "roles"):
        return role_list(message.author)
    lookup = await ctx.enrichment.member_roles(message.author.id, message.guild.id)
    return lookup.unwrap_or([])


@extractor("message_create", identify=lambda args: _identify_message(args[0]))
async def message_create(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (message,) = args
    record = message_fields(message)
    record["content_stripped"] = strip_bot_mention(message.content, ctx.bot_user_id)
    record["author_roles"] = await _author_roles(message, ctx)

    replied: Any = None
    if message.reference is not None:
        lookup = await ctx.enrichment.fetch_referenced_message(message)
        replied = lookup.value if lookup.ok else None
    record["replied_message_id"] = snowflake(replied)
    record["replied_message_content"] = getattr(replied, "content", None)
    record["replied_message_author_id"] = snowflake(getattr(replied, "author", None))
    return record


@extractor("message_update", identify=lambda args: _identify_message(args[1]))
async def message_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    before, after = args
    record = message_fields(after)
    record["content_stripped"] = strip_bot_mention(after.content, ctx.bot_user_id)
    record["old_content"] = before.content
    record["changes"] = {}
    for attr in ("content", "pinned"):
        old, new = getattr(before, attr, None), getattr(after, attr, None)
        if old != new:
            record["changes"][attr] = {"old": old, "new": new}
    return record


def _identify_raw(args: tuple[Any, ...]) -> EventIdentity:
    payload = args[0]
    cached = getattr(payload, "cached_message", None)
    user = getattr(payload, "member", None) or getattr(payload, "user", None)
    if user is None and cached is not None:
        user = cached.author
    return EventIdentity.of(
        guild_id=payload.guild_id,
        channel_id=payload.channel_id,
        user=user,
        user_id=getattr(payload, "user_id", None),
    )


@extractor("message_delete", identify=_identify_raw)
async def message_delete(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (payload,) = args
    cached = payload.cached_message
    return {
        "message_id": snowflake(payload.message_id),
        "cached": cached is not None,
        "content": getattr(cached, "content", None),
        "author_id": snowflake(getattr(cached, "author", None)),
        "created_at": iso(getattr(cached, "created_at", None)),
    }


@extractor("message_delete_bulk", identify=_identify_raw)
async def message_delete_bulk(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (payload,) = args
    record: Record = {
        "message_ids": sorted(str(i) for i in payload.message_ids),
        "count": len(payload.message_ids),
        "deleted_messages": [
            {
                "id": snowflake(m),
                "content": m.content,
                "author_id": snowflake(m.author),
                "created_at": iso(m.created_at),
            }
            for m in payload.cached_messages
        ],
    }

    channel = await ctx.enrichment.resolve_channel(payload.channel_id)
    record.update(channel_fields(channel.value if channel.ok else None))
    record["channel_id"] = snowflake(payload.channel_id)
    record.setdefault("channel_name", None)

    record["guild_name"] = None
    if payload.guild_id is not None:
        guild = await ctx.enrichment.resolve_guild(payload.guild_id)
        record["guild_name"] = guild.value.name if guild.ok and guild.value else None
    return record


async def _reactor_roles(payload: Any, ctx: NormalizeContext) -> list[dict[str, str]]:
    if payload.guild_id is None:
        return []
    member = getattr(payload, "member", None)
    if member is not None:
        return role_list(member)
    lookup = await ctx.enrichment.member_roles(payload.user_id, payload.guild_id)
    return lookup.unwrap_or([])


@extractor("message_reaction_add", "message_reaction_remove", identify=_identify_raw)
async def message_reaction(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (payload,) = args
    record: Record = {
        "message_id": snowflake(payload.message_id),
        "reaction_type": plain(getattr(payload, "type", None)),
        "burst": getattr(payload, "burst", False),
        "user_roles": await _reactor_roles(payload, ctx),
    }
    record.update(emoji_fields(payload.emoji))

    message = await ctx.enrichment.fetch_message(payload.channel_id, payload.message_id)
    target = message.value if message.ok else None
    record["message_content"] = getattr(target, "content", None)
    record["message_author_id"] = snowflake(getattr(target, "author", None)) or snowflake(
        getattr(payload, "message_author_id", None)
    )
    return record


@extractor("message_reaction_remove_all", identify=_identify_raw)
async def message_reaction_remove_all(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (payload,) = args
    return {"message_id": snowflake(payload.message_id)}


@extractor("message_reaction_remove_emoji", identify=_identify_raw)
async def message_reaction_remove_emoji(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (payload,) = args
    record: Record = {"message_id": snowflake(payload.message_id)}
    record.update(emoji_fields(payload.emoji))
    return record


@extractor("typing_start", identify=_identify_raw)
async def typing_start(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (payload,) = args
    record: Record = {"started_at": iso(payload.timestamp)}
    record.update(user_fields(payload.user))

    roles: list[dict[str, str]] = []
    if payload.guild_id is not None:
        if hasattr(payload.user, "roles"):
            roles = role_list(payload.user)
        else:
            lookup = await ctx.enrichment.member_roles(payload.user_id, payload.guild_id)
            roles = lookup.unwrap_or([])
    record["user_roles"] = roles
    return record


@extractor("message_poll_vote_add", "message_poll_vote_remove", identify=_identify_raw)
async def message_poll_vote(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (payload,) = args
    return {
        "message_id": snowflake(payload.message_id),
        "answer_id": payload.answer_id,
    }
