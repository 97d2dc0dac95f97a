"""Minimal discord.py stand-ins for pipeline tests."""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import discord

CREATED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
BOT_ID = 999


def not_found(*args: Any, **kwargs: Any) -> Any:
    raise discord.DiscordException("not found")


def make_role(role_id: int, name: str) -> SimpleNamespace:
    return SimpleNamespace(id=role_id, name=name)


def make_user(user_id: int, name: str = "alice", bot: bool = False) -> SimpleNamespace:
    """A plain user: no roles, no guild"""
    return SimpleNamespace(
        id=user_id, name=name, global_name=None, display_name=name, bot=bot, display_avatar=None
    )


def make_member(
    user_id: int,
    name: str = "alice",
    roles: list[SimpleNamespace] | None = None,
    guild: Any = None,
    bot: bool = False,
) -> SimpleNamespace:
    member = make_user(user_id, name, bot)
    member.roles = roles or []
    member.guild = guild
    member.nick = None
    member.joined_at = CREATED
    member.pending = False
    return member


class FakeGuild:
    def __init__(self, guild_id: int, name: str = "General", members: list[Any] | None = None):
        self.id = guild_id
        self.name = name
        self.members = {m.id: m for m in members or []}
        self.owner = None
        self.owner_id = None
        self.channels: list[Any] = []
        self.roles: list[Any] = []
        self.member_count = len(self.members)
        self.unavailable = False
        self.description = None
        self.icon = None
        self.created_at = CREATED
        self.fetch_member = AsyncMock(side_effect=not_found)
        self.fetch_ban = AsyncMock(side_effect=not_found)

    def get_member(self, user_id: int) -> Any:
        return self.members.get(user_id)


def make_channel(
    channel_id: int,
    name: str | None = "general",
    guild: Any = None,
    channel_type: discord.ChannelType = discord.ChannelType.text,
) -> SimpleNamespace:
    return SimpleNamespace(
        id=channel_id,
        name=name,
        guild=guild,
        type=channel_type,
        category_id=None,
        fetch_message=AsyncMock(side_effect=not_found),
        pins=AsyncMock(return_value=[]),
    )


def make_dm_channel(channel_id: int) -> SimpleNamespace:
    return SimpleNamespace(
        id=channel_id,
        type=discord.ChannelType.private,
        recipient=None,
        fetch_message=AsyncMock(side_effect=not_found),
    )


def make_message(
    message_id: int,
    content: str,
    author: Any,
    channel: Any,
    guild: Any = None,
    mentions: list[Any] | None = None,
    reference: Any = None,
    attachments: list[Any] | None = None,
) -> SimpleNamespace:
    return SimpleNamespace(
        id=message_id,
        content=content,
        author=author,
        channel=channel,
        guild=guild,
        mentions=mentions or [],
        role_mentions=[],
        mention_everyone=False,
        reference=reference,
        attachments=attachments or [],
        embeds=[],
        stickers=[],
        created_at=CREATED,
        edited_at=None,
        type=discord.MessageType.default,
        pinned=False,
        tts=False,
        jump_url=f"https://discord.com/channels/@me/{message_id}",
    )


def make_reference(message_id: int, channel_id: int | None = None) -> SimpleNamespace:
    return SimpleNamespace(message_id=message_id, channel_id=channel_id, resolved=None)


def make_attachment(content_type: str | None, filename: str = "file.bin") -> SimpleNamespace:
    return SimpleNamespace(
        id=1, filename=filename, url="https://cdn/x", content_type=content_type, size=10
    )


def make_scheduled_event(
    event_id: int,
    status: discord.EventStatus,
    guild_id: int = 1,
    name: str = "Launch party",
) -> SimpleNamespace:
    return SimpleNamespace(
        id=event_id,
        name=name,
        description=None,
        status=status,
        entity_type=discord.EntityType.voice,
        privacy_level=discord.PrivacyLevel.guild_only,
        location=None,
        start_time=CREATED,
        end_time=None,
        creator_id=5,
        channel_id=20,
        guild_id=guild_id,
        guild=None,
        url=f"https://discord.com/events/{guild_id}/{event_id}",
        cover_image=None,
        user_count=3,
    )


class FakeClient:
    """Just enough of discord.Client / commands.Bot for enrichment and routing"""

    def __init__(self) -> None:
        self.user = SimpleNamespace(id=BOT_ID, name="trigger-bot")
        self.guild_map: dict[int, Any] = {}
        self.channel_map: dict[int, Any] = {}
        self.user_map: dict[int, Any] = {}
        self.listeners: dict[str, list[Any]] = {}
        self.latency = 0.05

    @property
    def guilds(self) -> list[Any]:
        return list(self.guild_map.values())

    def add(self, *objects: Any) -> None:
        for obj in objects:
            if isinstance(obj, FakeGuild):
                self.guild_map[obj.id] = obj
            elif hasattr(obj, "type"):
                self.channel_map[obj.id] = obj
            else:
                self.user_map[obj.id] = obj

    def get_guild(self, guild_id: int) -> Any:
        return self.guild_map.get(guild_id)

    async def fetch_guild(self, guild_id: int) -> Any:
        raise discord.DiscordException("unknown guild")

    def get_channel(self, channel_id: int) -> Any:
        return self.channel_map.get(channel_id)

    async def fetch_channel(self, channel_id: int) -> Any:
        raise discord.DiscordException("unknown channel")

    def get_user(self, user_id: int) -> Any:
        return self.user_map.get(user_id)

    async def fetch_user(self, user_id: int) -> Any:
        raise discord.DiscordException("unknown user")

    def add_listener(self, func: Any, name: str) -> None:
        self.listeners.setdefault(name, []).append(func)

    def remove_listener(self, func: Any, name: str) -> None:
        if func in self.listeners.get(name, []):
            self.listeners[name].remove(func)

    async def emit(self, name: str, *args: Any) -> None:
        """Call every listener registered for ``on_<name>``"""
        for func in list(self.listeners.get(f"on_{name}", [])):
            await func(*args)


class RecordingSink:
    def __init__(self) -> None:
        self.batches: list[list[dict[str, Any]]] = []
        self.closed = False

    @property
    def records(self) -> list[dict[str, Any]]:
        return [row for batch in self.batches for row in batch]

    async def push(self, rows: list[dict[str, Any]]) -> None:
        self.batches.append(rows)

    async def close(self) -> None:
        self.closed = True
