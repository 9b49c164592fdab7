"""Tests for sentinel-driven paging."""

import asyncio

import pytest

from vip_admin.listing.controller import FetchStatus, ListQueryController
from vip_admin.listing.scroll import InfiniteScrollTrigger
from vip_admin.store.collections import VIP_NUMBERS


@pytest.fixture
async def controller(memory_store, vip_record):
    memory_store.load(VIP_NUMBERS, [vip_record(i) for i in range(25)])
    controller = ListQueryController(memory_store, VIP_NUMBERS, page_size=10)
    await controller.load_first_page()
    return controller


async def test_hidden_to_visible_transition_loads_next_page(controller, memory_store):
    trigger = InfiniteScrollTrigger(controller)

    assert await trigger.on_visibility(False) is None
    result = await trigger.on_visibility(True)

    assert result.status is FetchStatus.MERGED
    assert len(controller.records) == 20
    assert len(memory_store.queries) == 2


async def test_sentinel_still_visible_after_load_fires_again(controller, memory_store):
    """The observer is re-attached after each load, so a visible report is a new transition."""
    trigger = InfiniteScrollTrigger(controller)

    await trigger.on_visibility(True)
    await trigger.on_visibility(True)

    assert len(controller.records) == 25
    assert controller.has_more is False


async def test_repeated_visible_reports_without_load_fire_once(controller, memory_store):
    trigger = InfiniteScrollTrigger(controller)
    memory_store.paused = True

    first = asyncio.create_task(trigger.on_visibility(True))
    await asyncio.sleep(0)
    # Loading: the second report is ignored and never reaches the store
    assert await trigger.on_visibility(True) is None

    await memory_store.release(0)
    assert (await first).status is FetchStatus.MERGED
    assert len(memory_store.queries) == 2


async def test_partial_visibility_does_not_fire(controller, memory_store):
    trigger = InfiniteScrollTrigger(controller)

    assert await trigger.on_visibility(False) is None
    assert len(memory_store.queries) == 1


async def test_stops_observing_once_exhausted(controller, memory_store):
    trigger = InfiniteScrollTrigger(controller)
    await trigger.on_visibility(True)
    await trigger.on_visibility(True)
    assert not trigger.observing

    assert await trigger.on_visibility(False) is None
    assert await trigger.on_visibility(True) is None
    assert len(memory_store.queries) == 3


async def test_unmounted_trigger_never_fires(controller, memory_store):
    trigger = InfiniteScrollTrigger(controller)
    trigger.unmount()

    assert trigger.mounted is False
    assert await trigger.on_visibility(True) is None
    assert len(memory_store.queries) == 1
