"""Settings and trigger configuration validation"""

import pytest
from pydantic import ValidationError

from dctrigger.config import Settings, TriggerConfig
from dctrigger.events.catalog import TriggerType
from dctrigger.events.patterns import PatternType


def settings(**kwargs) -> Settings:
    kwargs.setdefault("discord_bot_token", "abc.def")
    return Settings(_env_file=None, **kwargs)


def test_defaults():
    s = settings()
    assert s.trigger_type == TriggerType.MESSAGE
    assert s.trigger_event == "message_create"
    assert s.trigger_pattern == PatternType.BOT_MENTION
    assert s.port == 8080
    assert s.log_level == "INFO"
    assert s.trigger.criteria.unrestricted


def test_token_prefix_is_stripped():
    assert settings(discord_bot_token="Bot abc.def").discord_bot_token == "abc.def"
    assert settings(discord_bot_token="  abc.def ").discord_bot_token == "abc.def"


@pytest.mark.parametrize("token", ["", "   ", "Bot   "])
def test_empty_token_rejected(token):
    with pytest.raises(ValidationError):
        settings(discord_bot_token=token)


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "env-token")
    monkeypatch.setenv("TRIGGER_TYPE", "scheduled_event")
    monkeypatch.setenv("TRIGGER_EVENT", "scheduled_event_start")
    monkeypatch.setenv("TRIGGER_EVENT_IDS", "77, Launch party")

    s = Settings(_env_file=None)

    assert s.discord_bot_token == "env-token"
    assert s.trigger.descriptor.synthetic
    assert s.trigger.criteria.entities == frozenset({"77", "Launch party"})


def test_invalid_log_level_falls_back_to_info():
    assert settings(log_level="loud").log_level == "INFO"
    assert settings(log_level="debug").log_level == "DEBUG"


def test_trigger_type_must_match_event():
    s = settings(trigger_event="guild_member_add")
    with pytest.raises(ValidationError):
        _ = s.trigger

    s = settings(trigger_type=TriggerType.USER, trigger_event="guild_member_add")
    assert s.trigger.descriptor.gateway_event == "member_join"


def test_pattern_value_required_for_text_strategies():
    with pytest.raises(ValidationError):
        TriggerConfig(pattern=PatternType.CONTAINS)

    assert TriggerConfig(pattern=PatternType.EVERY).pattern_spec.value == ""
    # Only message content is pattern-matched
    TriggerConfig(
        trigger_type=TriggerType.SCHEDULED_EVENT,
        event="scheduled_event_start",
        pattern=PatternType.CONTAINS,
    )


def test_blank_event_rejected():
    with pytest.raises(ValidationError):
        TriggerConfig(event="  ")


def test_uncatalogued_event_is_accepted():
    trigger = TriggerConfig(trigger_type=TriggerType.BOT_STATUS, event="on_entitlement_create")
    assert trigger.descriptor.catalogued is False
    assert trigger.descriptor.gateway_event == "entitlement_create"


def test_filter_tokens_are_split_and_trimmed():
    trigger = TriggerConfig(
        server_ids="123, General ,",
        channel_ids="10",
        role_ids="Mods,50",
        user_ids=" 7 ",
    )
    criteria = trigger.criteria
    assert criteria.servers == frozenset({"123", "General"})
    assert criteria.channels == frozenset({"10"})
    assert criteria.roles == frozenset({"Mods", "50"})
    assert criteria.users == frozenset({"7"})
    assert not criteria.unrestricted
