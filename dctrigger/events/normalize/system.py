"""Interaction, command permission and bot lifecycle extractors"""

import math
from typing import Any

from ..enrichment import role_list
from ..filters import EventIdentity
from .fields import channel_fields, guild_fields, plain, snowflake, user_fields
from .registry import NormalizeContext, Record, extractor


def _identify_interaction(args: tuple[Any, ...]) -> EventIdentity:
    interaction = args[0]
    return EventIdentity.of(
        guild=interaction.guild,
        guild_id=interaction.guild_id,
        channel=interaction.channel,
        channel_id=interaction.channel_id,
        user=interaction.user,
    )


@extractor("interaction_create", identify=_identify_interaction)
async def interaction_create(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (interaction,) = args
    data = interaction.data or {}
    command = getattr(interaction, "command", None)
    record: Record = {
        "interaction_id": snowflake(interaction),
        "interaction_type": plain(interaction.type),
        # Needed by the host to respond to the interaction
        "token": interaction.token,
        "application_id": snowflake(interaction.application_id),
        "command_name": getattr(command, "name", None) or data.get("name"),
        "custom_id": data.get("custom_id"),
        "data": plain(data),
        "locale": plain(getattr(interaction, "locale", None)),
    }
    record.update(user_fields(interaction.user))
    record.update(channel_fields(interaction.channel))
    record.update(guild_fields(interaction.guild))

    roles: list[dict[str, str]] = []
    if interaction.guild_id is not None:
        if hasattr(interaction.user, "roles"):
            roles = role_list(interaction.user)
        else:
            lookup = await ctx.enrichment.member_roles(interaction.user.id, interaction.guild_id)
            roles = lookup.unwrap_or([])
    record["user_roles"] = roles
    return record


def _identify_permissions(args: tuple[Any, ...]) -> EventIdentity:
    payload = args[0]
    return EventIdentity.of(guild=payload.guild)


@extractor("application_command_permissions_update", identify=_identify_permissions)
async def app_command_permissions_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (payload,) = args
    return {
        "target_id": snowflake(payload.target_id),
        "application_id": snowflake(payload.application_id),
        "permissions": [
            {
                "id": snowflake(p.id),
                "type": plain(p.type),
                "permission": p.permission,
            }
            for p in payload.permissions
        ],
    }


def _bot_status(ctx: NormalizeContext) -> Record:
    client = ctx.enrichment.client
    latency = getattr(client, "latency", None)
    # discord.py reports nan before the first heartbeat
    if latency is not None and not math.isfinite(latency):
        latency = None
    return {
        "bot_user_id": ctx.bot_user_id,
        "guild_count": len(getattr(client, "guilds", None) or []),
        "latency_ms": round(latency * 1000) if latency is not None else None,
    }


@extractor(
    "ready",
    "resumed",
    "connect",
    "disconnect",
    identify=lambda args: EventIdentity(),
)
async def bot_lifecycle(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    return _bot_status(ctx)


@extractor(
    "shard_connect",
    "shard_disconnect",
    "shard_ready",
    "shard_resume",
    identify=lambda args: EventIdentity(),
)
async def shard_lifecycle(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (shard_id,) = args
    record = _bot_status(ctx)
    record["shard_id"] = shard_id
    return record
