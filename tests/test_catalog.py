"""Event catalog and intent mapping"""

from dctrigger.events.catalog import (
    EVENTS,
    Transition,
    TriggerType,
    events_for,
    get_descriptor,
    intents_for,
    synthetic_variants,
)
from dctrigger.events.normalize import PASSTHROUGH, handler_for, registered_events


def test_every_catalogued_event_has_an_extractor():
    missing = set(EVENTS) - registered_events()
    assert not missing


def test_catalog_covers_every_trigger_type():
    assert len(EVENTS) >= 45
    for trigger_type in TriggerType:
        assert events_for(trigger_type), trigger_type


def test_synthetic_variants_share_the_update_listener():
    variants = synthetic_variants("scheduled_event_update")
    assert {v.name for v in variants} == {"scheduled_event_start", "scheduled_event_end"}
    assert {v.transition for v in variants} == {Transition.START, Transition.END}
    assert EVENTS["scheduled_event_update"].listener_name == "on_scheduled_event_update"


def test_content_matched_events():
    matched = {name for name, d in EVENTS.items() if d.content_matched}
    assert matched == {"message_create", "message_update"}
    assert EVENTS["message_update"].content_arg == 1


def test_unknown_event_gets_passthrough_descriptor():
    descriptor = get_descriptor("on_entitlement_create")
    assert descriptor.gateway_event == "entitlement_create"
    assert not descriptor.catalogued
    assert handler_for(descriptor.name) is PASSTHROUGH


def test_message_intents():
    intents = intents_for(TriggerType.MESSAGE)
    assert intents.guilds
    assert intents.message_content
    assert intents.guild_messages
    assert intents.dm_messages


def test_bot_status_needs_only_guilds():
    intents = intents_for(TriggerType.BOT_STATUS)
    assert intents.guilds
    assert not intents.members
    assert not intents.message_content


def test_role_filter_enables_members_intent():
    assert not intents_for(TriggerType.VOICE).members
    assert intents_for(TriggerType.VOICE, role_filter=True).members
