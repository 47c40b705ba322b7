# tests/conftest.py
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import asyncio
from collections import defaultdict
from datetime import datetime, timezone

import pytest

from tradesync.config import ReconcileSettings
from tradesync.enums import OrderStatus, Side
from tradesync.errors import RemoteError
from tradesync.models import BookLevel, OrderBookSnapshot, RemoteOrder
from tradesync.stores.book_tracker import OrderBookTracker
from tradesync.stores.order_tracker import OrderTracker

FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def remote(order_id, symbol="BTC_USDT", status=OrderStatus.OPENED, *,
           create_date=1700000000, side=Side.BUY, amount=1.0, price=100.0):
    return RemoteOrder(order_id=order_id, symbol=symbol, status=status, side=side,
                       amount=amount, price=price, create_date=create_date)


def book(symbol, bid=99.0, ask=101.0):
    return OrderBookSnapshot(symbol, bids=[BookLevel(bid, 1.0)], asks=[BookLevel(ask, 2.0)])


class FakeGateway:
    """In-memory venue: records every call, failures injected per call site."""

    def __init__(self) -> None:
        self.next_id = 42
        self.placed = []
        self.cancelled = []
        self.fail_place = None
        self.cancel_errors = {}
        self.balance = {"btc": "1.5", "usdt": "100.25"}

        self.orders = {}            # (symbol, status) -> list[RemoteOrder] | Exception
        self.order_delay = 0.0
        self.order_queries = []

        self.books = {}             # symbol -> OrderBookSnapshot | Exception
        self.book_delay = 0.0
        self.book_calls = []
        self._book_inflight = defaultdict(int)
        self.max_book_inflight = defaultdict(int)

    async def place_order(self, symbol, side, price_type, amount, quantity, price):
        if self.fail_place is not None:
            raise self.fail_place
        oid = self.next_id
        self.next_id += 1
        self.placed.append((oid, symbol, side, price_type, amount, quantity, price))
        return oid

    async def cancel_order(self, order_id):
        self.cancelled.append(order_id)
        err = self.cancel_errors.get(order_id)
        if err is not None:
            raise err

    async def get_balance(self):
        return dict(self.balance)

    async def get_order_book(self, symbol):
        self.book_calls.append(symbol)
        self._book_inflight[symbol] += 1
        self.max_book_inflight[symbol] = max(self.max_book_inflight[symbol], self._book_inflight[symbol])
        try:
            await asyncio.sleep(self.book_delay)
            res = self.books.get(symbol)
            if isinstance(res, Exception):
                raise res
            if res is None:
                raise RemoteError("no book", code="404")
            return res
        finally:
            self._book_inflight[symbol] -= 1

    async def get_orders_by_status(self, symbol, status, limit=None):
        self.order_queries.append((symbol, status, limit))
        await asyncio.sleep(self.order_delay)
        res = self.orders.get((symbol, status), [])
        if isinstance(res, Exception):
            raise res
        return list(res)


class FakeHttp:
    """Transport stub keyed by path; answers with the envelope data or raises."""

    def __init__(self, responses):
        self._responses = responses
        self.calls = []

    async def _answer(self, kind, path, params):
        self.calls.append((kind, path, params))
        res = self._responses[path]
        if isinstance(res, Exception):
            raise res
        return res

    async def get_public(self, path, params=None):
        return await self._answer("public", path, params)

    async def get_private(self, path, params=None):
        return await self._answer("private", path, params)

    async def post_private(self, path, json_body):
        return await self._answer("post", path, json_body)


@pytest.fixture
def settings():
    return ReconcileSettings(
        symbols=("BTC_USDT", "ETH_USDT"),
        api_key="test_key",
        api_secret="test_secret",
        refresh_interval_ms=10,
    )


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def tracker():
    return OrderTracker(clock=lambda: FIXED_NOW)


@pytest.fixture
def book_tracker():
    return OrderBookTracker(clock=lambda: FIXED_NOW)
