"""Scheduled event status tracking

Keeps the last observed status per scheduled event so start/end transitions
can be derived from ``scheduled_event_update`` deliveries.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

import discord
from cachetools import LRUCache  # type: ignore[import-untyped]

from .catalog import Transition

logger = logging.getLogger(__name__)


@dataclass
class EntityStateSnapshot:
    entity_id: str
    status: discord.EventStatus
    observed_at: float = field(default_factory=time.time)


class StateTracker:
    """Bounded id -> snapshot table with one writer per entity id.

    A transition fires only across a real boundary: the prior status is the
    tracked snapshot, falling back to the status the gateway reports as the
    previous one. With neither, the observation only seeds the table.
    """

    def __init__(self, maxsize: int = 1024):
        self._maxsize = maxsize
        self._snapshots: LRUCache = LRUCache(maxsize=maxsize)
        self._locks: dict[str, asyncio.Lock] = {}

    def _get_lock(self, entity_id: str) -> asyncio.Lock:
        if entity_id not in self._locks:
            # Prune locks whose snapshot was evicted before adding another
            if len(self._locks) >= self._maxsize * 2:
                for key in list(self._locks):
                    if key not in self._snapshots and not self._locks[key].locked():
                        del self._locks[key]
            self._locks[entity_id] = asyncio.Lock()
        return self._locks[entity_id]

    async def observe(
        self,
        entity_id: str | int,
        status: discord.EventStatus,
        previous: discord.EventStatus | None = None,
    ) -> Transition | None:
        """Record ``status`` for an entity and return the transition it crossed, if any"""
        key = str(entity_id)
        async with self._get_lock(key):
            snapshot: EntityStateSnapshot | None = self._snapshots.get(key)
            prior = snapshot.status if snapshot is not None else previous

            transition = None
            if prior is not None:
                transition = detect_transition(prior, status)

            self._snapshots[key] = EntityStateSnapshot(entity_id=key, status=status)

        if transition is not None:
            logger.debug(
                f"Scheduled event {key}: {prior.name} -> {status.name} ({transition.value})"
            )
        return transition

    def get(self, entity_id: str | int) -> EntityStateSnapshot | None:
        return self._snapshots.get(str(entity_id))

    def clear(self) -> None:
        self._snapshots.clear()
        self._locks.clear()

    @property
    def size(self) -> int:
        return len(self._snapshots)


def detect_transition(
    prior: discord.EventStatus, current: discord.EventStatus
) -> Transition | None:
    if current == discord.EventStatus.active and prior != discord.EventStatus.active:
        return Transition.START
    if current == discord.EventStatus.completed and prior != discord.EventStatus.completed:
        return Transition.END
    return None
