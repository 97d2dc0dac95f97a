"""Gateway event pipeline: catalog, tracking, filtering, matching, normalization."""

from .catalog import EVENTS, EventDescriptor, Transition, TriggerType, get_descriptor, intents_for
from .enrichment import EnrichmentService
from .filters import EventIdentity, FilterChain, FilterCriteria, channel_name
from .patterns import PatternMatcher, PatternSpec, PatternType
from .results import Lookup
from .router import EventRouter, RouterStats, Subscription
from .sink import LogSink, OutputSink, WebhookSink, build_sink
from .state import EntityStateSnapshot, StateTracker
from .subscribers import SubscriberEnumerator, SubscriberPage

__all__ = [
    # Catalog
    "EVENTS",
    "EventDescriptor",
    "Transition",
    "TriggerType",
    "get_descriptor",
    "intents_for",
    # Pipeline
    "EventRouter",
    "RouterStats",
    "Subscription",
    "FilterChain",
    "FilterCriteria",
    "EventIdentity",
    "channel_name",
    "PatternMatcher",
    "PatternSpec",
    "PatternType",
    "StateTracker",
    "EntityStateSnapshot",
    # Lookups
    "EnrichmentService",
    "SubscriberEnumerator",
    "SubscriberPage",
    "Lookup",
    # Output
    "OutputSink",
    "WebhookSink",
    "LogSink",
    "build_sink",
]
