"""Filter chain and channel name resolution"""

from types import SimpleNamespace

import discord
import pytest

from dctrigger.events.filters import (
    DM_CHANNEL_LABEL,
    UNKNOWN_CHANNEL_LABEL,
    EventIdentity,
    FilterChain,
    FilterCriteria,
    channel_name,
    parse_tokens,
)

from .fakes import FakeGuild, make_channel, make_dm_channel, make_member, make_role


def identity(**kwargs) -> EventIdentity:
    return EventIdentity(**kwargs)


def test_parse_tokens_trims_and_drops_empty():
    assert parse_tokens(" 123 , General,,  ") == frozenset({"123", "General"})
    assert parse_tokens(None) == frozenset()
    assert parse_tokens(["a", " b "]) == frozenset({"a", "b"})


@pytest.mark.asyncio
async def test_empty_criteria_allow_everything():
    chain = FilterChain(FilterCriteria())
    assert await chain.allows(identity(guild_id="1", channel_id="2", user_id="3"))
    assert await chain.allows(identity())


@pytest.mark.asyncio
async def test_server_filter_matches_id_or_name():
    chain = FilterChain(FilterCriteria.from_tokens(servers="123, General"))
    assert await chain.allows(identity(guild_id="123", guild_name="Anything"))
    assert await chain.allows(identity(guild_id="555", guild_name="general"))
    assert not await chain.allows(identity(guild_id="999", guild_name="Other"))


@pytest.mark.asyncio
async def test_missing_identity_rejects_restricted_dimension():
    chain = FilterChain(FilterCriteria.from_tokens(channels="10"))
    assert not await chain.allows(identity(guild_id="123"))


@pytest.mark.asyncio
async def test_dimensions_combine_with_and():
    chain = FilterChain(FilterCriteria.from_tokens(servers="123", users="7"))
    assert await chain.allows(identity(guild_id="123", user_id="7"))
    assert not await chain.allows(identity(guild_id="123", user_id="8"))
    assert not await chain.allows(identity(guild_id="124", user_id="7"))


@pytest.mark.asyncio
async def test_entity_filter_matches_scheduled_event_name():
    chain = FilterChain(FilterCriteria.from_tokens(entities="launch party"))
    assert await chain.allows(identity(entity_id="77", entity_name="Launch Party"))
    assert not await chain.allows(identity(entity_id="78", entity_name="Standup"))


@pytest.mark.asyncio
async def test_channel_name_resolved_live_for_raw_events(client, enrichment, guild):
    chain = FilterChain(FilterCriteria.from_tokens(channels="GENERAL"), enrichment)
    # Raw payloads only carry the channel id
    assert await chain.allows(identity(guild_id="123", channel_id="10"))
    assert not await chain.allows(identity(guild_id="123", channel_id="11"))


@pytest.mark.asyncio
async def test_role_filter_uses_event_member():
    member = make_member(7, roles=[make_role(50, "Mods")])
    chain = FilterChain(FilterCriteria.from_tokens(roles="mods"))
    assert await chain.allows(identity(guild_id="123", user_id="7", member=member))
    chain = FilterChain(FilterCriteria.from_tokens(roles="50"))
    assert await chain.allows(identity(guild_id="123", user_id="7", member=member))
    chain = FilterChain(FilterCriteria.from_tokens(roles="Admins"))
    assert not await chain.allows(identity(guild_id="123", user_id="7", member=member))


@pytest.mark.asyncio
async def test_role_filter_resolves_member_live(enrichment, guild):
    chain = FilterChain(FilterCriteria.from_tokens(roles="Mods"), enrichment)
    assert await chain.allows(identity(guild_id="123", user_id="7"))


@pytest.mark.asyncio
async def test_role_filter_rejects_when_member_unresolvable(enrichment, guild):
    chain = FilterChain(FilterCriteria.from_tokens(roles="Mods"), enrichment)
    # User 8 is not cached and fetch_member fails
    assert not await chain.allows(identity(guild_id="123", user_id="8"))
    # Unknown guild
    assert not await chain.allows(identity(guild_id="456", user_id="7"))
    # Direct message: no guild at all
    assert not await chain.allows(identity(user_id="7", is_direct_message=True))


def test_event_identity_from_objects():
    guild = FakeGuild(123, "General")
    channel = make_channel(10, "general", guild)
    member = make_member(7, "alice", roles=[], guild=guild)
    ident = EventIdentity.of(channel=channel, user=member)
    assert ident.guild_id == "123"
    assert ident.guild_name == "General"
    assert ident.channel_name == "general"
    assert ident.user_id == "7"
    assert ident.member is member
    assert ident.user_is_bot is False
    assert not ident.is_direct_message


def test_event_identity_dm():
    ident = EventIdentity.of(channel=make_dm_channel(11), user=SimpleNamespace(id=7, bot=False))
    assert ident.is_direct_message
    assert ident.guild_id is None
    assert ident.member is None


def test_channel_name_sentinels():
    assert channel_name(make_dm_channel(1)) == DM_CHANNEL_LABEL
    unnamed = SimpleNamespace(id=2, type=discord.ChannelType.text)
    assert channel_name(unnamed) == UNKNOWN_CHANNEL_LABEL
    assert channel_name(SimpleNamespace(id=3, name=None)) == UNKNOWN_CHANNEL_LABEL
    assert channel_name(object()) == UNKNOWN_CHANNEL_LABEL
    assert channel_name(None) is None
    assert channel_name(make_channel(4, "news")) == "news"
