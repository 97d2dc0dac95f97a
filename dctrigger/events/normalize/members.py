"""Member, user, moderation, voice, presence and auto-moderation extractors"""

from typing import Any

from ..enrichment import role_list
from ..filters import EventIdentity
from .fields import (
    changes,
    channel_fields,
    emoji_fields,
    guild_fields,
    iso,
    plain,
    snowflake,
    user_fields,
)
from .registry import NormalizeContext, Record, extractor

USER_ATTRS = ("name", "global_name", "avatar", "discriminator")
MEMBER_ATTRS = ("nick", "pending", "timed_out_until", "guild_avatar")
VOICE_ATTRS = (
    "channel",
    "self_mute",
    "self_deaf",
    "mute",
    "deaf",
    "self_stream",
    "self_video",
    "suppress",
)


def _member_record(member: Any) -> Record:
    record = user_fields(member)
    record.update(guild_fields(member.guild))
    record["nick"] = getattr(member, "nick", None)
    record["joined_at"] = iso(getattr(member, "joined_at", None))
    record["pending"] = getattr(member, "pending", None)
    record["user_roles"] = role_list(member)
    return record


# --- membership ---


@extractor(
    "guild_member_add",
    "guild_member_remove",
    identify=lambda args: EventIdentity.of(user=args[0]),
)
async def member_lifecycle(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    return _member_record(args[0])


@extractor("guild_member_update", identify=lambda args: EventIdentity.of(user=args[1]))
async def member_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    before, after = args
    record = _member_record(after)
    record["changes"] = changes(before, after, MEMBER_ATTRS)

    old_roles = {r.id: r for r in before.roles}
    new_roles = {r.id: r for r in after.roles}
    record["roles_added"] = [
        {"id": snowflake(i), "name": new_roles[i].name} for i in new_roles if i not in old_roles
    ]
    record["roles_removed"] = [
        {"id": snowflake(i), "name": old_roles[i].name} for i in old_roles if i not in new_roles
    ]
    return record


@extractor("user_update", identify=lambda args: EventIdentity.of(user=args[1]))
async def user_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    before, after = args
    record = user_fields(after)
    record["changes"] = changes(before, after, USER_ATTRS)
    return record


# --- moderation ---


def _identify_ban(args: tuple[Any, ...]) -> EventIdentity:
    guild, user = args
    return EventIdentity.of(guild=guild, user=user)


@extractor("guild_ban_add", identify=_identify_ban)
async def guild_ban_add(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    guild, user = args
    record = user_fields(user)
    record.update(guild_fields(guild))
    ban = await ctx.enrichment.fetch_ban(guild, user)
    record["reason"] = getattr(ban.value, "reason", None) if ban.ok else None
    return record


@extractor("guild_ban_remove", identify=_identify_ban)
async def guild_ban_remove(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    guild, user = args
    record = user_fields(user)
    record.update(guild_fields(guild))
    return record


def _audit_diff(diff: Any) -> Record:
    try:
        return {str(attr): plain(value) for attr, value in diff}
    except TypeError:
        return {}


def _identify_audit(args: tuple[Any, ...]) -> EventIdentity:
    entry = args[0]
    return EventIdentity.of(guild=entry.guild, user_id=entry.user_id)


@extractor("guild_audit_log_entry_create", identify=_identify_audit)
async def audit_log_entry(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (entry,) = args
    record: Record = {
        "entry_id": snowflake(entry),
        "action": plain(entry.action),
        "target_id": snowflake(entry.target),
        "reason": entry.reason,
        "created_at": iso(entry.created_at),
        "before": _audit_diff(entry.before),
        "after": _audit_diff(entry.after),
        "extra": plain(entry.extra),
    }
    record.update(guild_fields(entry.guild))

    executor = entry.user
    if executor is None and entry.user_id is not None:
        lookup = await ctx.enrichment.fetch_user(entry.user_id)
        executor = lookup.value if lookup.ok else None
    record.update(user_fields(executor, prefix="executor"))
    record["executor_id"] = snowflake(entry.user_id)
    return record


# --- voice ---


def _identify_voice(args: tuple[Any, ...]) -> EventIdentity:
    member, before, after = args
    return EventIdentity.of(user=member, channel=after.channel or before.channel)


def _voice_action(before: Any, after: Any) -> str:
    if before.channel is None and after.channel is not None:
        return "joined"
    if before.channel is not None and after.channel is None:
        return "left"
    if before.channel is not None and after.channel is not None and before.channel != after.channel:
        return "moved"
    return "updated"


@extractor("voice_state_update", identify=_identify_voice)
async def voice_state_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    member, before, after = args
    record = user_fields(member)
    record.update(guild_fields(member.guild))
    record["action"] = _voice_action(before, after)
    record["old_channel_id"] = snowflake(before.channel)
    record["new_channel_id"] = snowflake(after.channel)
    for attr in VOICE_ATTRS[1:]:
        record[attr] = getattr(after, attr, None)
    record["changes"] = changes(before, after, VOICE_ATTRS)
    record["user_roles"] = role_list(member)
    return record


def _identify_effect(args: tuple[Any, ...]) -> EventIdentity:
    effect = args[0]
    return EventIdentity.of(channel=effect.channel, user=effect.user)


@extractor("voice_channel_effect_send", identify=_identify_effect)
async def voice_channel_effect(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (effect,) = args
    record = user_fields(effect.user)
    record.update(channel_fields(effect.channel))
    record.update(emoji_fields(effect.emoji))
    animation = getattr(effect, "animation", None)
    sound = getattr(effect, "sound", None)
    record["animation_type"] = plain(getattr(animation, "type", None))
    record["animation_id"] = getattr(animation, "id", None)
    record["sound_id"] = snowflake(sound)
    return record


# --- presence ---


@extractor("presence_update", identify=lambda args: EventIdentity.of(user=args[1]))
async def presence_update(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    before, after = args
    record = user_fields(after)
    record.update(guild_fields(after.guild))
    record["old_status"] = plain(before.status)
    record["new_status"] = plain(after.status)
    record["activities"] = [
        {"type": plain(getattr(a, "type", None)), "name": getattr(a, "name", None)}
        for a in after.activities
    ]
    record["desktop_status"] = plain(after.desktop_status)
    record["mobile_status"] = plain(after.mobile_status)
    record["web_status"] = plain(after.web_status)
    return record


# --- auto moderation ---


def _identify_automod_action(args: tuple[Any, ...]) -> EventIdentity:
    execution = args[0]
    return EventIdentity.of(
        guild=execution.guild,
        channel_id=execution.channel_id,
        user=execution.member,
        user_id=execution.user_id,
    )


@extractor("auto_moderation_action_execution", identify=_identify_automod_action)
async def automod_action(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (execution,) = args
    record: Record = {
        "rule_id": snowflake(execution.rule_id),
        "rule_trigger_type": plain(execution.rule_trigger_type),
        "action_type": plain(execution.action.type),
        "content": execution.content,
        "matched_keyword": execution.matched_keyword,
        "matched_content": execution.matched_content,
        "message_id": snowflake(execution.message_id),
        "alert_system_message_id": snowflake(execution.alert_system_message_id),
    }
    if execution.member is not None:
        record["user_roles"] = role_list(execution.member)
    else:
        lookup = await ctx.enrichment.member_roles(execution.user_id, execution.guild_id)
        record["user_roles"] = lookup.unwrap_or([])
    return record


def _identify_rule(args: tuple[Any, ...]) -> EventIdentity:
    rule = args[0]
    return EventIdentity.of(guild=rule.guild, user_id=rule.creator_id)


@extractor(
    "auto_moderation_rule_create",
    "auto_moderation_rule_delete",
    "auto_moderation_rule_update",
    identify=_identify_rule,
)
async def automod_rule(args: tuple[Any, ...], ctx: NormalizeContext) -> Record:
    (rule,) = args
    record: Record = {
        "rule_id": snowflake(rule),
        "rule_name": rule.name,
        "creator_id": snowflake(rule.creator_id),
        "enabled": rule.enabled,
        "event_type": plain(rule.event_type),
        "trigger_type": plain(rule.trigger.type),
        "actions": [plain(a.type) for a in rule.actions],
        "exempt_role_ids": [snowflake(i) for i in rule.exempt_role_ids],
        "exempt_channel_ids": [snowflake(i) for i in rule.exempt_channel_ids],
    }
    record.update(guild_fields(rule.guild))
    return record
