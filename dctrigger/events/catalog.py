"""Event catalog

Every event a trigger can subscribe to, the discord.py dispatch name it listens
on and the positional arguments discord.py hands to the listener.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import discord


class TriggerType(str, Enum):
    MESSAGE = "message"
    GUILD = "guild"
    MODERATION = "moderation"
    EMOJI_STICKER = "emoji_sticker"
    INTEGRATION_WEBHOOK = "integration_webhook"
    INVITE = "invite"
    VOICE = "voice"
    PRESENCE = "presence"
    SCHEDULED_EVENT = "scheduled_event"
    INTERACTION = "interaction"
    BOT_STATUS = "bot_status"
    USER = "user"
    AUTO_MODERATION = "auto_moderation"
    POLL = "poll"


class Transition(str, Enum):
    """Derived scheduled event transitions"""

    START = "start"
    END = "end"


@dataclass(frozen=True)
class EventDescriptor:
    name: str
    gateway_event: str
    trigger_type: TriggerType
    arguments: tuple[str, ...]
    synthetic: bool = False
    transition: Transition | None = None
    # Index of the discord.Message argument for content-matched kinds
    content_arg: int | None = None
    catalogued: bool = True

    @property
    def listener_name(self) -> str:
        return f"on_{self.gateway_event}"

    @property
    def content_matched(self) -> bool:
        return self.content_arg is not None


def _event(
    name: str,
    gateway_event: str,
    trigger_type: TriggerType,
    *arguments: str,
    **options,
) -> EventDescriptor:
    return EventDescriptor(name, gateway_event, trigger_type, tuple(arguments), **options)


_T = TriggerType

_DESCRIPTORS = [
    # Messages
    _event("message_create", "message", _T.MESSAGE, "message", content_arg=0),
    _event("message_update", "message_edit", _T.MESSAGE, "before", "after", content_arg=1),
    _event("message_delete", "raw_message_delete", _T.MESSAGE, "payload"),
    _event("message_delete_bulk", "raw_bulk_message_delete", _T.MESSAGE, "payload"),
    _event("message_reaction_add", "raw_reaction_add", _T.MESSAGE, "payload"),
    _event("message_reaction_remove", "raw_reaction_remove", _T.MESSAGE, "payload"),
    _event("message_reaction_remove_all", "raw_reaction_clear", _T.MESSAGE, "payload"),
    _event("message_reaction_remove_emoji", "raw_reaction_clear_emoji", _T.MESSAGE, "payload"),
    _event("typing_start", "raw_typing", _T.MESSAGE, "payload"),
    # Guild
    _event("channel_create", "guild_channel_create", _T.GUILD, "channel"),
    _event("channel_delete", "guild_channel_delete", _T.GUILD, "channel"),
    _event("channel_update", "guild_channel_update", _T.GUILD, "before", "after"),
    _event("channel_pins_update", "guild_channel_pins_update", _T.GUILD, "channel", "last_pin"),
    _event("guild_available", "guild_available", _T.GUILD, "guild"),
    _event("guild_create", "guild_join", _T.GUILD, "guild"),
    _event("guild_delete", "guild_remove", _T.GUILD, "guild"),
    _event("guild_unavailable", "guild_unavailable", _T.GUILD, "guild"),
    _event("guild_update", "guild_update", _T.GUILD, "before", "after"),
    _event("role_create", "guild_role_create", _T.GUILD, "role"),
    _event("role_delete", "guild_role_delete", _T.GUILD, "role"),
    _event("role_update", "guild_role_update", _T.GUILD, "before", "after"),
    _event("stage_instance_create", "stage_instance_create", _T.GUILD, "stage_instance"),
    _event("stage_instance_delete", "stage_instance_delete", _T.GUILD, "stage_instance"),
    _event("stage_instance_update", "stage_instance_update", _T.GUILD, "before", "after"),
    _event("thread_create", "thread_create", _T.GUILD, "thread"),
    _event("thread_delete", "thread_delete", _T.GUILD, "thread"),
    _event("thread_update", "thread_update", _T.GUILD, "before", "after"),
    _event("thread_join", "thread_join", _T.GUILD, "thread"),
    _event("thread_member_join", "thread_member_join", _T.GUILD, "member"),
    _event("thread_member_remove", "thread_member_remove", _T.GUILD, "member"),
    # Moderation
    _event("guild_ban_add", "member_ban", _T.MODERATION, "guild", "user"),
    _event("guild_ban_remove", "member_unban", _T.MODERATION, "guild", "user"),
    _event("guild_audit_log_entry_create", "audit_log_entry_create", _T.MODERATION, "entry"),
    # Emoji & stickers
    _event("emojis_update", "guild_emojis_update", _T.EMOJI_STICKER, "guild", "before", "after"),
    _event(
        "stickers_update", "guild_stickers_update", _T.EMOJI_STICKER, "guild", "before", "after"
    ),
    # Integrations & webhooks
    _event(
        "guild_integrations_update", "guild_integrations_update", _T.INTEGRATION_WEBHOOK, "guild"
    ),
    _event("webhooks_update", "webhooks_update", _T.INTEGRATION_WEBHOOK, "channel"),
    _event("integration_create", "integration_create", _T.INTEGRATION_WEBHOOK, "integration"),
    # Invites
    _event("invite_create", "invite_create", _T.INVITE, "invite"),
    _event("invite_delete", "invite_delete", _T.INVITE, "invite"),
    # Voice
    _event("voice_state_update", "voice_state_update", _T.VOICE, "member", "before", "after"),
    _event("voice_channel_effect_send", "voice_channel_effect", _T.VOICE, "effect"),
    # Presence
    _event("presence_update", "presence_update", _T.PRESENCE, "before", "after"),
    # Scheduled events
    _event("scheduled_event_create", "scheduled_event_create", _T.SCHEDULED_EVENT, "event"),
    _event("scheduled_event_delete", "scheduled_event_delete", _T.SCHEDULED_EVENT, "event"),
    _event(
        "scheduled_event_update", "scheduled_event_update", _T.SCHEDULED_EVENT, "before", "after"
    ),
    _event(
        "scheduled_event_user_add", "scheduled_event_user_add", _T.SCHEDULED_EVENT, "event", "user"
    ),
    _event(
        "scheduled_event_user_remove",
        "scheduled_event_user_remove",
        _T.SCHEDULED_EVENT,
        "event",
        "user",
    ),
    _event(
        "scheduled_event_start",
        "scheduled_event_update",
        _T.SCHEDULED_EVENT,
        "before",
        "after",
        synthetic=True,
        transition=Transition.START,
    ),
    _event(
        "scheduled_event_end",
        "scheduled_event_update",
        _T.SCHEDULED_EVENT,
        "before",
        "after",
        synthetic=True,
        transition=Transition.END,
    ),
    # Interactions
    _event("interaction_create", "interaction", _T.INTERACTION, "interaction"),
    _event(
        "application_command_permissions_update",
        "raw_app_command_permissions_update",
        _T.INTERACTION,
        "payload",
    ),
    # Bot status
    _event("ready", "ready", _T.BOT_STATUS),
    _event("resumed", "resumed", _T.BOT_STATUS),
    _event("connect", "connect", _T.BOT_STATUS),
    _event("disconnect", "disconnect", _T.BOT_STATUS),
    _event("shard_connect", "shard_connect", _T.BOT_STATUS, "shard_id"),
    _event("shard_disconnect", "shard_disconnect", _T.BOT_STATUS, "shard_id"),
    _event("shard_ready", "shard_ready", _T.BOT_STATUS, "shard_id"),
    _event("shard_resume", "shard_resumed", _T.BOT_STATUS, "shard_id"),
    # Users
    _event("user_update", "user_update", _T.USER, "before", "after"),
    _event("guild_member_add", "member_join", _T.USER, "member"),
    _event("guild_member_remove", "member_remove", _T.USER, "member"),
    _event("guild_member_update", "member_update", _T.USER, "before", "after"),
    # Auto moderation
    _event("auto_moderation_action_execution", "automod_action", _T.AUTO_MODERATION, "execution"),
    _event("auto_moderation_rule_create", "automod_rule_create", _T.AUTO_MODERATION, "rule"),
    _event("auto_moderation_rule_delete", "automod_rule_delete", _T.AUTO_MODERATION, "rule"),
    _event("auto_moderation_rule_update", "automod_rule_update", _T.AUTO_MODERATION, "rule"),
    # Polls
    _event("message_poll_vote_add", "raw_poll_vote_add", _T.POLL, "payload"),
    _event("message_poll_vote_remove", "raw_poll_vote_remove", _T.POLL, "payload"),
]

EVENTS: dict[str, EventDescriptor] = {d.name: d for d in _DESCRIPTORS}


def get_descriptor(name: str) -> EventDescriptor:
    """Look up an event by name.

    Names outside the catalog are treated as raw discord.py dispatch names and
    get a pass-through descriptor, so a new gateway event can be consumed
    before it has a dedicated extractor.
    """
    descriptor = EVENTS.get(name)
    if descriptor is not None:
        return descriptor
    return EventDescriptor(
        name=name,
        gateway_event=name.removeprefix("on_"),
        trigger_type=TriggerType.BOT_STATUS,
        arguments=("*args",),
        catalogued=False,
    )


def events_for(trigger_type: TriggerType) -> list[EventDescriptor]:
    return [d for d in _DESCRIPTORS if d.trigger_type == trigger_type]


def synthetic_variants(gateway_event: str) -> list[EventDescriptor]:
    """Derived events sharing one underlying gateway event"""
    return [d for d in _DESCRIPTORS if d.synthetic and d.gateway_event == gateway_event]


# Intent flags per trigger type, passed to discord.Intents
_INTENTS: dict[TriggerType, tuple[str, ...]] = {
    _T.MESSAGE: (
        "guild_messages",
        "dm_messages",
        "message_content",
        "guild_reactions",
        "dm_reactions",
        "members",
        "guild_typing",
        "dm_typing",
    ),
    _T.GUILD: ("members",),
    _T.MODERATION: ("moderation", "members"),
    _T.EMOJI_STICKER: ("emojis_and_stickers",),
    _T.INTEGRATION_WEBHOOK: ("integrations", "webhooks"),
    _T.INVITE: ("invites",),
    _T.VOICE: ("voice_states",),
    _T.PRESENCE: ("presences", "members"),
    _T.SCHEDULED_EVENT: ("guild_scheduled_events",),
    _T.INTERACTION: ("integrations",),
    _T.BOT_STATUS: (),
    _T.USER: ("members",),
    _T.AUTO_MODERATION: ("auto_moderation_configuration", "auto_moderation_execution"),
    _T.POLL: ("guild_messages", "guild_polls"),
}


def intents_for(trigger_type: TriggerType, *, role_filter: bool = False) -> discord.Intents:
    """Gateway intents a trigger needs.

    ``guilds`` is always on: discord.py relies on it to populate its caches.
    """
    intents = discord.Intents.none()
    intents.guilds = True
    for flag in _INTENTS[trigger_type]:
        setattr(intents, flag, True)
    if role_filter:
        intents.members = True
    return intents
