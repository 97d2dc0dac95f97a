"""Scheduled event transition tracking"""

import asyncio

import discord
import pytest

from dctrigger.events.catalog import Transition
from dctrigger.events.state import StateTracker, detect_transition

S = discord.EventStatus


@pytest.mark.asyncio
async def test_scheduled_active_active_fires_start_once():
    tracker = StateTracker()
    fired = [await tracker.observe(1, status) for status in (S.scheduled, S.active, S.active)]
    assert fired == [None, Transition.START, None]


@pytest.mark.asyncio
async def test_scheduled_canceled_fires_nothing():
    tracker = StateTracker()
    fired = [await tracker.observe(1, status) for status in (S.scheduled, S.canceled)]
    assert fired == [None, None]


@pytest.mark.asyncio
async def test_active_to_completed_fires_end():
    tracker = StateTracker()
    await tracker.observe(1, S.active)
    assert await tracker.observe(1, S.completed) == Transition.END
    assert await tracker.observe(1, S.completed) is None


@pytest.mark.asyncio
async def test_first_observation_never_fires():
    tracker = StateTracker()
    assert await tracker.observe(1, S.active) is None
    assert await tracker.observe(2, S.completed) is None


@pytest.mark.asyncio
async def test_gateway_previous_status_used_when_untracked():
    tracker = StateTracker()
    assert await tracker.observe(1, S.active, previous=S.scheduled) == Transition.START


@pytest.mark.asyncio
async def test_tracked_snapshot_wins_over_gateway_previous():
    tracker = StateTracker()
    await tracker.observe(1, S.active)
    # Gateway cache claims it was scheduled; the table knows it already started
    assert await tracker.observe(1, S.active, previous=S.scheduled) is None


@pytest.mark.asyncio
async def test_snapshot_updated_without_transition():
    tracker = StateTracker()
    await tracker.observe("1", S.scheduled)
    await tracker.observe("1", S.canceled)
    snapshot = tracker.get(1)
    assert snapshot is not None
    assert snapshot.status == S.canceled
    assert tracker.size == 1


@pytest.mark.asyncio
async def test_entities_tracked_independently():
    tracker = StateTracker()
    await tracker.observe(1, S.scheduled)
    await tracker.observe(2, S.active)
    assert await tracker.observe(1, S.active) == Transition.START
    assert await tracker.observe(2, S.active) is None


@pytest.mark.asyncio
async def test_concurrent_updates_for_one_entity_fire_once():
    tracker = StateTracker()
    await tracker.observe(1, S.scheduled)
    results = await asyncio.gather(*(tracker.observe(1, S.active) for _ in range(5)))
    assert results.count(Transition.START) == 1


@pytest.mark.asyncio
async def test_clear_discards_snapshots():
    tracker = StateTracker()
    await tracker.observe(1, S.scheduled)
    tracker.clear()
    assert tracker.size == 0
    assert await tracker.observe(1, S.active) is None


@pytest.mark.asyncio
async def test_table_is_bounded():
    tracker = StateTracker(maxsize=2)
    for entity_id in range(5):
        await tracker.observe(entity_id, S.scheduled)
    assert tracker.size == 2
    assert tracker.get(4) is not None
    assert tracker.get(0) is None


@pytest.mark.asyncio
async def test_transition_fires_on_observation_that_prunes_locks():
    tracker = StateTracker(maxsize=2)
    # Fill the lock table to its pruning threshold
    for entity_id in range(4):
        await tracker.observe(entity_id, S.scheduled)

    assert await tracker.observe(99, S.active, previous=S.scheduled) == Transition.START
    snapshot = tracker.get(99)
    assert snapshot is not None
    assert snapshot.status == S.active
    assert await tracker.observe(99, S.completed) == Transition.END


def test_detect_transition_table():
    assert detect_transition(S.scheduled, S.active) == Transition.START
    assert detect_transition(S.active, S.completed) == Transition.END
    assert detect_transition(S.scheduled, S.completed) == Transition.END
    assert detect_transition(S.active, S.canceled) is None
    assert detect_transition(S.completed, S.completed) is None
