"""Server / channel / role / user / entity filtering"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any

import discord

from .enrichment import EnrichmentService

logger = logging.getLogger(__name__)

DM_CHANNEL_LABEL = "Direct Message"
UNKNOWN_CHANNEL_LABEL = "Unknown Channel"


def parse_tokens(value: str | Iterable[str] | None) -> frozenset[str]:
    """Split comma-separated filter input into trimmed, non-empty tokens"""
    if value is None:
        return frozenset()
    parts = value.split(",") if isinstance(value, str) else value
    return frozenset(p.strip() for p in parts if p and p.strip())


def channel_name(channel: Any) -> str | None:
    """Display name of a channel.

    DM channels have no name and get :data:`DM_CHANNEL_LABEL`; any other
    channel object without a string name gets :data:`UNKNOWN_CHANNEL_LABEL`.
    """
    if channel is None:
        return None
    if getattr(channel, "type", None) == discord.ChannelType.private:
        return DM_CHANNEL_LABEL
    name = getattr(channel, "name", None)
    if isinstance(name, str) and name:
        return name
    return UNKNOWN_CHANNEL_LABEL


def snowflake(value: Any) -> str | None:
    """Id as a string, from a raw id or anything with ``.id``"""
    if value is None:
        return None
    if isinstance(value, (str, int)):
        return str(value)
    inner = getattr(value, "id", None)
    return str(inner) if inner is not None else None


@dataclass(frozen=True)
class FilterCriteria:
    servers: frozenset[str] = frozenset()
    channels: frozenset[str] = frozenset()
    roles: frozenset[str] = frozenset()
    users: frozenset[str] = frozenset()
    entities: frozenset[str] = frozenset()

    @classmethod
    def from_tokens(
        cls,
        servers: str | Iterable[str] | None = None,
        channels: str | Iterable[str] | None = None,
        roles: str | Iterable[str] | None = None,
        users: str | Iterable[str] | None = None,
        entities: str | Iterable[str] | None = None,
    ) -> FilterCriteria:
        return cls(
            servers=parse_tokens(servers),
            channels=parse_tokens(channels),
            roles=parse_tokens(roles),
            users=parse_tokens(users),
            entities=parse_tokens(entities),
        )

    @property
    def unrestricted(self) -> bool:
        return not (self.servers or self.channels or self.roles or self.users or self.entities)


@dataclass
class EventIdentity:
    """Who and where an event is about"""

    guild_id: str | None = None
    guild_name: str | None = None
    channel_id: str | None = None
    channel_name: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    user_is_bot: bool | None = None
    member: Any = None
    entity_id: str | None = None
    entity_name: str | None = None
    is_direct_message: bool = False

    @classmethod
    def of(
        cls,
        *,
        guild: Any = None,
        channel: Any = None,
        user: Any = None,
        entity: Any = None,
        guild_id: Any = None,
        channel_id: Any = None,
        user_id: Any = None,
    ) -> EventIdentity:
        """Build an identity from whatever objects or raw ids an event carries"""
        if guild is None:
            guild = getattr(channel, "guild", None) or getattr(user, "guild", None)
        if user is not None and user_id is None:
            user_id = user.id
        # A Member carries roles; a plain User does not
        member = user if user is not None and hasattr(user, "roles") else None

        return cls(
            guild_id=snowflake(guild_id if guild_id is not None else guild),
            guild_name=getattr(guild, "name", None),
            channel_id=snowflake(channel_id if channel_id is not None else channel),
            channel_name=channel_name(channel),
            user_id=snowflake(user_id),
            user_name=getattr(user, "name", None),
            user_is_bot=getattr(user, "bot", None),
            member=member,
            entity_id=snowflake(entity),
            entity_name=getattr(entity, "name", None),
            is_direct_message=getattr(channel, "type", None) == discord.ChannelType.private,
        )


def matches_token(tokens: frozenset[str], ident: str | None, name: str | None) -> bool:
    """Exact id or case-insensitive name match against any token"""
    for token in tokens:
        if ident is not None and token == ident:
            return True
        if name is not None and token.lower() == name.lower():
            return True
    return False


NameResolver = Callable[[str], Awaitable[str | None]]


class FilterChain:
    """AND of every configured dimension"""

    def __init__(self, criteria: FilterCriteria, enrichment: EnrichmentService | None = None):
        self.criteria = criteria
        self.enrichment = enrichment

    async def allows(self, identity: EventIdentity) -> bool:
        c = self.criteria
        if c.unrestricted:
            return True

        if c.servers and not await self._dimension(
            c.servers, identity.guild_id, identity.guild_name, self._guild_name
        ):
            logger.debug(f"Rejected by server filter: {identity.guild_id}")
            return False

        if c.channels and not await self._dimension(
            c.channels, identity.channel_id, identity.channel_name, self._channel_name
        ):
            logger.debug(f"Rejected by channel filter: {identity.channel_id}")
            return False

        if c.users and not await self._dimension(
            c.users, identity.user_id, identity.user_name, self._user_name
        ):
            logger.debug(f"Rejected by user filter: {identity.user_id}")
            return False

        if c.entities and not await self._dimension(
            c.entities, identity.entity_id, identity.entity_name, None
        ):
            logger.debug(f"Rejected by entity filter: {identity.entity_id}")
            return False

        if c.roles and not await self._roles_allowed(identity):
            logger.debug(f"Rejected by role filter: {identity.user_id}")
            return False

        return True

    async def _dimension(
        self,
        tokens: frozenset[str],
        ident: str | None,
        name: str | None,
        resolve: NameResolver | None,
    ) -> bool:
        if ident is None:
            return False
        if matches_token(tokens, ident, name):
            return True
        # Raw events carry ids only; look the name up before giving up
        if name is None and resolve is not None:
            return matches_token(tokens, None, await resolve(ident))
        return False

    async def _roles_allowed(self, identity: EventIdentity) -> bool:
        if identity.guild_id is None or identity.user_id is None:
            return False

        member = identity.member
        if member is None:
            if self.enrichment is None:
                return False
            lookup = await self.enrichment.resolve_member(identity.user_id, identity.guild_id)
            if not lookup.ok:
                logger.debug(f"Member lookup failed for role filter: {lookup.error}")
                return False
            member = lookup.value

        return any(
            matches_token(self.criteria.roles, str(role.id), role.name)
            for role in getattr(member, "roles", [])
        )

    # --- live name resolution ---

    async def _guild_name(self, guild_id: str) -> str | None:
        if self.enrichment is None:
            return None
        lookup = await self.enrichment.resolve_guild(guild_id)
        return lookup.value.name if lookup.ok and lookup.value is not None else None

    async def _channel_name(self, channel_id: str) -> str | None:
        if self.enrichment is None:
            return None
        lookup = await self.enrichment.resolve_channel(channel_id)
        return channel_name(lookup.value) if lookup.ok else None

    async def _user_name(self, user_id: str) -> str | None:
        if self.enrichment is None:
            return None
        lookup = await self.enrichment.fetch_user(user_id)
        return lookup.value.name if lookup.ok and lookup.value is not None else None
