"""Secondary lookups against the live Discord connection

Every method returns a :class:`Lookup`; nothing here raises for a failed
fetch. Cached objects are preferred and the REST API is the fallback.
"""

import asyncio
import logging
from typing import Any

import aiohttp
import discord

from .results import Lookup

logger = logging.getLogger(__name__)

LOOKUP_ERRORS = (discord.DiscordException, aiohttp.ClientError, asyncio.TimeoutError, ValueError)


def _failure(what: str, exc: BaseException) -> Lookup[Any]:
    logger.debug(f"Lookup failed ({what}): {type(exc).__name__}: {exc}")
    return Lookup.failure(f"{what}: {type(exc).__name__}")


class EnrichmentService:
    """Resolves members, channels, guilds, users and messages by id"""

    def __init__(self, client: discord.Client):
        self.client = client

    @property
    def bot_user_id(self) -> str | None:
        user = self.client.user
        return str(user.id) if user else None

    # --- guilds, channels, users ---

    async def resolve_guild(self, guild_id: str | int) -> Lookup[discord.Guild]:
        try:
            guild = self.client.get_guild(int(guild_id))
            if guild is None:
                guild = await self.client.fetch_guild(int(guild_id))
            return Lookup.success(guild)
        except LOOKUP_ERRORS as e:
            return _failure(f"guild {guild_id}", e)

    async def resolve_channel(self, channel_id: str | int) -> Lookup[Any]:
        try:
            channel = self.client.get_channel(int(channel_id))
            if channel is None:
                channel = await self.client.fetch_channel(int(channel_id))
            return Lookup.success(channel)
        except LOOKUP_ERRORS as e:
            return _failure(f"channel {channel_id}", e)

    async def fetch_user(self, user_id: str | int) -> Lookup[discord.User]:
        try:
            user = self.client.get_user(int(user_id))
            if user is None:
                user = await self.client.fetch_user(int(user_id))
            return Lookup.success(user)
        except LOOKUP_ERRORS as e:
            return _failure(f"user {user_id}", e)

    # --- members ---

    async def resolve_member(
        self, user_id: str | int, guild_id: str | int
    ) -> Lookup[discord.Member]:
        guild_lookup = await self.resolve_guild(guild_id)
        if not guild_lookup.ok or guild_lookup.value is None:
            return Lookup.failure(guild_lookup.error or "guild unavailable")
        guild = guild_lookup.value
        try:
            member = guild.get_member(int(user_id))
            if member is None:
                member = await guild.fetch_member(int(user_id))
            return Lookup.success(member)
        except LOOKUP_ERRORS as e:
            return _failure(f"member {user_id} in {guild_id}", e)

    async def member_roles(
        self, user_id: str | int, guild_id: str | int
    ) -> Lookup[list[dict[str, str]]]:
        """Role list ``[{id, name}]`` of a user in a guild"""
        member = await self.resolve_member(user_id, guild_id)
        if not member.ok or member.value is None:
            return Lookup.failure(member.error or "member unavailable", value=[])
        return Lookup.success(role_list(member.value))

    async def fetch_owner(self, guild: discord.Guild) -> Lookup[discord.Member]:
        if guild.owner is not None:
            return Lookup.success(guild.owner)
        if guild.owner_id is None:
            return Lookup.failure("guild has no owner id")
        return await self.resolve_member(guild.owner_id, guild.id)

    async def fetch_ban(self, guild: discord.Guild, user: discord.abc.Snowflake) -> Lookup[Any]:
        try:
            return Lookup.success(await guild.fetch_ban(user))
        except LOOKUP_ERRORS as e:
            return _failure(f"ban {user.id} in {guild.id}", e)

    # --- messages ---

    async def fetch_message(
        self, channel_id: str | int, message_id: str | int
    ) -> Lookup[discord.Message]:
        channel = await self.resolve_channel(channel_id)
        if not channel.ok or channel.value is None:
            return Lookup.failure(channel.error or "channel unavailable")
        try:
            return Lookup.success(await channel.value.fetch_message(int(message_id)))
        except (AttributeError, *LOOKUP_ERRORS) as e:
            return _failure(f"message {message_id}", e)

    async def fetch_referenced_message(self, message: discord.Message) -> Lookup[discord.Message]:
        """The message ``message`` replies to"""
        reference = message.reference
        if reference is None or reference.message_id is None:
            return Lookup.failure("not a reply")
        if isinstance(reference.resolved, discord.Message):
            return Lookup.success(reference.resolved)

        channel = message.channel
        if reference.channel_id is not None and reference.channel_id != channel.id:
            return await self.fetch_message(reference.channel_id, reference.message_id)
        try:
            return Lookup.success(await channel.fetch_message(reference.message_id))
        except LOOKUP_ERRORS as e:
            return _failure(f"referenced message {reference.message_id}", e)

    async def fetch_pins(self, channel: Any) -> Lookup[list[discord.Message]]:
        try:
            return Lookup.success(list(await channel.pins()))
        except (AttributeError, *LOOKUP_ERRORS) as e:
            return _failure(f"pins of {getattr(channel, 'id', None)}", e)


def role_list(member: Any) -> list[dict[str, str]]:
    return [{"id": str(role.id), "name": role.name} for role in getattr(member, "roles", [])]
