"""Tests for EventBus infrastructure."""

import pytest
from slipway.domain.events.release_events import (
    ReleasePublishedEvent,
    ReleasesPrunedEvent,
)
from slipway.infrastructure.event_bus import EventBus


class TestEventBus:
    @pytest.mark.asyncio
    async def test_publish_to_subscriber(self):
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(ReleasePublishedEvent, handler)

        event = ReleasePublishedEvent(aggregate_id="/srv/app", release="r2", previous="r1")
        await bus.publish([event])

        assert received == [event]

    @pytest.mark.asyncio
    async def test_no_subscriber(self):
        bus = EventBus()
        await bus.publish([ReleasePublishedEvent(aggregate_id="/srv/app")])

    @pytest.mark.asyncio
    async def test_multiple_subscribers(self):
        bus = EventBus()
        received_a = []
        received_b = []

        async def handler_a(event):
            received_a.append(event)

        async def handler_b(event):
            received_b.append(event)

        bus.subscribe(ReleasesPrunedEvent, handler_a)
        bus.subscribe(ReleasesPrunedEvent, handler_b)

        await bus.publish([ReleasesPrunedEvent(aggregate_id="/srv/app", pruned=("r1",))])

        assert len(received_a) == 1
        assert len(received_b) == 1

    @pytest.mark.asyncio
    async def test_dispatch_by_type(self):
        bus = EventBus()
        received = []

        async def handler(event):
            received.append(event.event_type)

        bus.subscribe(ReleasesPrunedEvent, handler)

        await bus.publish([
            ReleasePublishedEvent(aggregate_id="/srv/app"),
            ReleasesPrunedEvent(aggregate_id="/srv/app"),
        ])

        assert received == ["ReleasesPrunedEvent"]

    def test_event_to_dict(self):
        event = ReleasePublishedEvent(aggregate_id="/srv/app", release="r2", previous="r1")
        data = event.to_dict()
        assert data["event_type"] == "ReleasePublishedEvent"
        assert data["release"] == "r2"
        assert data["previous"] == "r1"
        assert data["occurred_at"]
