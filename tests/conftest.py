"""Shared fixtures"""

import pytest

from dctrigger.events import EnrichmentService

from .fakes import FakeClient, FakeGuild, RecordingSink, make_channel, make_member, make_role


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def enrichment(client: FakeClient) -> EnrichmentService:
    return EnrichmentService(client)  # type: ignore[arg-type]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def guild(client: FakeClient) -> FakeGuild:
    """Guild 123 "General" with one member (id 7) holding the Mods role"""
    guild = FakeGuild(123, "General")
    member = make_member(7, "alice", roles=[make_role(50, "Mods")], guild=guild)
    guild.members[member.id] = member
    guild.channels = [make_channel(10, "general", guild)]
    guild.roles = [make_role(50, "Mods")]
    client.add(guild, guild.channels[0])
    return guild
