"""JSON-safe value conversion"""

import json
from datetime import datetime, timezone
from types import SimpleNamespace

import discord

from dctrigger.events.catalog import TriggerType
from dctrigger.events.normalize.fields import changes, is_discord_enum, plain
from dctrigger.events.results import Lookup


def test_discord_enums_become_names():
    assert plain(discord.EventStatus.active) == "active"
    assert plain(discord.ChannelType.text) == "text"
    assert plain(discord.MessageType.default) == "default"
    assert plain([discord.EntityType.voice, discord.PrivacyLevel.guild_only]) == [
        "voice",
        "guild_only",
    ]
    assert is_discord_enum(discord.EventStatus.active)
    assert not is_discord_enum(("active", 2))


def test_stdlib_enum_and_tuples():
    assert plain(TriggerType.MESSAGE) == "message"
    assert plain(("a", 1)) == ["a", 1]


def test_colour_and_permissions():
    assert plain(discord.Colour(0x3498DB)) == 0x3498DB
    assert plain(discord.Permissions(8)) == "8"


def test_nested_values_are_json_safe():
    when = datetime(2024, 5, 1, tzinfo=timezone.utc)
    value = {
        1: {"status": discord.EventStatus.scheduled, "at": when},
        "users": (SimpleNamespace(id=7),),
    }

    result = plain(value)

    assert result == {
        "1": {"status": "scheduled", "at": when.isoformat()},
        "users": ["7"],
    }
    json.dumps(result)


def test_changes_reports_enum_names():
    before = SimpleNamespace(status=discord.EventStatus.scheduled, name="Launch")
    after = SimpleNamespace(status=discord.EventStatus.active, name="Launch")

    assert changes(before, after, ("status", "name")) == {
        "status": {"old": "scheduled", "new": "active"}
    }


def test_lookup_unwrap_or():
    assert Lookup.success(["a"]).unwrap_or([]) == ["a"]
    assert Lookup.success(None).unwrap_or([]) == []
    assert Lookup.failure("NotFound", ["partial"]).unwrap_or([]) == []
