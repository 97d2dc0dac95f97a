"""Conversions from discord.py objects to JSON-safe record values"""

from collections.abc import Iterable
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import discord

from ..filters import channel_name, snowflake  # noqa: F401


def iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_discord_enum(value: Any) -> bool:
    """discord.py enum members are namedtuples tagged with their enum class"""
    return hasattr(type(value), "_actual_enum_cls_")


def plain(value: Any) -> Any:
    """Reduce a value to something ``json.dumps`` accepts"""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum) or is_discord_enum(value):
        return value.name
    if isinstance(value, discord.Colour):
        return value.value
    if isinstance(value, discord.Permissions):
        return str(value.value)
    if isinstance(value, dict):
        return {str(k): plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [plain(v) for v in value]
    if hasattr(value, "id"):
        return snowflake(value)
    return str(value)


def changes(before: Any, after: Any, attrs: Iterable[str]) -> dict[str, dict[str, Any]]:
    """``{attr: {old, new}}`` for every attribute that differs"""
    diff = {}
    for attr in attrs:
        old = plain(getattr(before, attr, None))
        new = plain(getattr(after, attr, None))
        if old != new:
            diff[attr] = {"old": old, "new": new}
    return diff


def user_fields(user: Any, prefix: str = "user") -> dict[str, Any]:
    if user is None:
        return {f"{prefix}_id": None}
    avatar = getattr(user, "display_avatar", None)
    return {
        f"{prefix}_id": snowflake(user),
        f"{prefix}_name": getattr(user, "name", None),
        f"{prefix}_global_name": getattr(user, "global_name", None),
        f"{prefix}_display_name": getattr(user, "display_name", None),
        f"{prefix}_bot": getattr(user, "bot", None),
        f"{prefix}_avatar_url": str(avatar.url) if avatar is not None else None,
    }


def channel_fields(channel: Any, prefix: str = "channel") -> dict[str, Any]:
    if channel is None:
        return {f"{prefix}_id": None}
    return {
        f"{prefix}_id": snowflake(channel),
        f"{prefix}_name": channel_name(channel),
        f"{prefix}_type": plain(getattr(channel, "type", None)),
        f"{prefix}_parent_id": snowflake(getattr(channel, "category_id", None)),
    }


def guild_fields(guild: Any, prefix: str = "guild") -> dict[str, Any]:
    if guild is None:
        return {f"{prefix}_id": None}
    return {
        f"{prefix}_id": snowflake(guild),
        f"{prefix}_name": getattr(guild, "name", None),
    }


def role_fields(role: Any) -> dict[str, Any]:
    return {
        "role_id": snowflake(role),
        "role_name": getattr(role, "name", None),
        "role_color": plain(getattr(role, "colour", None)),
        "role_position": getattr(role, "position", None),
        "role_hoist": getattr(role, "hoist", None),
        "role_mentionable": getattr(role, "mentionable", None),
        "role_managed": getattr(role, "managed", None),
        "role_permissions": plain(getattr(role, "permissions", None)),
    }


def emoji_fields(emoji: Any) -> dict[str, Any]:
    if emoji is None:
        return {"emoji_id": None, "emoji_name": None}
    return {
        "emoji_id": snowflake(getattr(emoji, "id", None)),
        "emoji_name": getattr(emoji, "name", None) or str(emoji),
        "emoji_animated": getattr(emoji, "animated", None),
    }


def attachment_list(message: Any) -> list[dict[str, Any]]:
    return [
        {
            "id": snowflake(a),
            "filename": getattr(a, "filename", None),
            "url": getattr(a, "url", None),
            "content_type": getattr(a, "content_type", None),
            "size": getattr(a, "size", None),
        }
        for a in getattr(message, "attachments", None) or []
    ]
