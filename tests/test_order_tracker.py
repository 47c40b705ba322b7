# tests/test_order_tracker.py
import asyncio
from datetime import datetime, timezone

import pytest

from conftest import FIXED_NOW
from tradesync.enums import OrderStatus, Side
from tradesync.errors import InvalidTransition, NotTracked

ACCEPTED = datetime.fromtimestamp(1700000000, tz=timezone.utc)


@pytest.mark.asyncio
async def test_new_order_recorded_as_submitted(tracker):
    order = await tracker.new_order("BTC_USDT", Side.BUY, OrderStatus.SUBMITTED, 42, 1, 100)
    assert order.status is OrderStatus.SUBMITTED
    assert order.created_at == FIXED_NOW
    assert order.completed_at is None
    assert await tracker.status(42) == "submitted"


@pytest.mark.asyncio
async def test_readers_get_copies(tracker):
    await tracker.new_order("BTC_USDT", Side.BUY, OrderStatus.SUBMITTED, 42, 1, 100)
    got = await tracker.get(42)
    got.status = OrderStatus.CANCELLED
    assert (await tracker.get(42)).status is OrderStatus.SUBMITTED


@pytest.mark.asyncio
async def test_new_order_keeps_existing_record(tracker):
    await tracker.new_order("BTC_USDT", Side.BUY, OrderStatus.OPENED, 42, 1, 100, created_at=ACCEPTED)
    again = await tracker.new_order("BTC_USDT", Side.BUY, OrderStatus.SUBMITTED, 42, 1, 100)
    assert again.status is OrderStatus.OPENED
    assert again.created_at == ACCEPTED


@pytest.mark.asyncio
async def test_update_details_is_idempotent(tracker):
    await tracker.new_order("BTC_USDT", Side.BUY, OrderStatus.SUBMITTED, 42, 1, 100)
    first = await tracker.update_details(42, "BTC_USDT", ACCEPTED, OrderStatus.OPENED)
    second = await tracker.update_details(42, "BTC_USDT", ACCEPTED, OrderStatus.OPENED)
    assert first == second
    assert second.status is OrderStatus.OPENED
    assert second.created_at == ACCEPTED


@pytest.mark.asyncio
async def test_terminal_orders_never_move(tracker):
    await tracker.new_order("BTC_USDT", Side.BUY, OrderStatus.SUBMITTED, 42, 1, 100)
    done = await tracker.complete(42, FIXED_NOW)
    assert done.completed_at == FIXED_NOW

    with pytest.raises(InvalidTransition):
        await tracker.update_details(42, "BTC_USDT", ACCEPTED, OrderStatus.OPENED)
    with pytest.raises(InvalidTransition):
        await tracker.cancel(42)

    order = await tracker.get(42)
    assert order.status is OrderStatus.COMPLETED
    assert order.created_at == FIXED_NOW


@pytest.mark.asyncio
async def test_complete_twice_keeps_first_timestamp(tracker):
    later = datetime(2024, 1, 2, tzinfo=timezone.utc)
    await tracker.new_order("BTC_USDT", Side.SELL, OrderStatus.OPENED, 7, 1, 100)
    await tracker.complete(7, FIXED_NOW)
    await tracker.complete(7, later)
    assert (await tracker.get(7)).completed_at == FIXED_NOW


@pytest.mark.asyncio
async def test_partial_cannot_go_back_to_opened(tracker):
    await tracker.new_order("BTC_USDT", Side.BUY, OrderStatus.PARTIALLY_FILLED, 42, 1, 100)
    with pytest.raises(InvalidTransition) as ei:
        await tracker.update_details(42, "BTC_USDT", ACCEPTED, OrderStatus.OPENED)
    assert ei.value.current is OrderStatus.PARTIALLY_FILLED


@pytest.mark.asyncio
async def test_cancel_is_idempotent(tracker):
    await tracker.new_order("BTC_USDT", Side.BUY, OrderStatus.OPENED, 42, 1, 100)
    await tracker.cancel(42)
    again = await tracker.cancel(42)
    assert again.status is OrderStatus.CANCELLED


@pytest.mark.asyncio
async def test_unknown_id_raises_not_tracked(tracker):
    with pytest.raises(NotTracked):
        await tracker.get(1)
    with pytest.raises(NotTracked):
        await tracker.cancel(1)
    with pytest.raises(NotTracked):
        await tracker.update_details(1, "BTC_USDT", ACCEPTED)
    assert not await tracker.has(1)


@pytest.mark.asyncio
async def test_executed_and_completed_listings(tracker):
    await tracker.new_order("BTC_USDT", Side.BUY, OrderStatus.SUBMITTED, 1, 1, 100)
    await tracker.new_order("BTC_USDT", Side.BUY, OrderStatus.OPENED, 2, 1, 100)
    await tracker.new_order("ETH_USDT", Side.SELL, OrderStatus.OPENED, 3, 1, 100)
    await tracker.complete(2, FIXED_NOW)
    await tracker.cancel(3)

    assert [o.id for o in await tracker.executed()] == [1]
    assert [o.id for o in await tracker.completed()] == [2]


@pytest.mark.asyncio
async def test_concurrent_writers(tracker):
    for i in range(20):
        await tracker.new_order("BTC_USDT", Side.BUY, OrderStatus.SUBMITTED, i, 1, 100)

    await asyncio.gather(
        *(tracker.update_details(i, "BTC_USDT", ACCEPTED, OrderStatus.OPENED) for i in range(20)),
        *(tracker.complete(i, FIXED_NOW) for i in range(0, 20, 2)),
    )
    completed = {o.id for o in await tracker.completed()}
    assert completed == set(range(0, 20, 2))
    assert len(await tracker.executed()) == 10
