# tradesync/stores/order_tracker.py
import asyncio
from datetime import datetime
from typing import Callable, Dict, List, Optional

from utils.time import utc_now
from tradesync.enums import OrderStatus, Side, TRANSITIONS
from tradesync.errors import InvalidTransition, NotTracked
from tradesync.models import Order


class OrderTracker:
    """
    In-memory order mirror keyed by venue order id.

    All mutations go through the order state machine: re-applying the current
    status is a no-op, a transition outside the table raises InvalidTransition.
    Readers always get copies.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._by_id: Dict[int, Order] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def new_order(self,
                        symbol: str,
                        side: Side,
                        status: OrderStatus,
                        order_id: int,
                        amount: float,
                        price: float,
                        created_at: Optional[datetime] = None) -> Order:
        """Record an order; an id that is already tracked keeps its current record."""
        async with self._lock:
            cur = self._by_id.get(order_id)
            if cur is None:
                cur = Order(
                    id=order_id,
                    symbol=symbol,
                    side=side,
                    status=status,
                    amount=float(amount),
                    price=float(price),
                    created_at=created_at or self._clock(),
                )
                self._by_id[order_id] = cur
            return cur.copy()

    async def cancel(self, order_id: int) -> Order:
        async with self._lock:
            order = self._require(order_id)
            self._move(order, OrderStatus.CANCELLED)
            return order.copy()

    async def complete(self, order_id: int, observed_at: datetime) -> Order:
        async with self._lock:
            order = self._require(order_id)
            if self._move(order, OrderStatus.COMPLETED):
                order.completed_at = observed_at
            return order.copy()

    async def update_details(self,
                             order_id: int,
                             symbol: str,
                             created_at: Optional[datetime],
                             status: OrderStatus = OrderStatus.OPENED) -> Order:
        """created_at=None keeps the local submission time."""
        async with self._lock:
            order = self._require(order_id)
            self._move(order, status)
            order.symbol = symbol
            if created_at is not None:
                order.created_at = created_at
            return order.copy()

    async def get(self, order_id: int) -> Order:
        async with self._lock:
            return self._require(order_id).copy()

    async def status(self, order_id: int) -> str:
        async with self._lock:
            return self._require(order_id).status.value

    async def has(self, order_id: int) -> bool:
        async with self._lock:
            return order_id in self._by_id

    async def executed(self) -> List[Order]:
        """Orders still live on the venue (submitted, opened, partially filled)."""
        return await self._select(lambda o: o.is_live)

    async def completed(self) -> List[Order]:
        return await self._select(lambda o: o.status is OrderStatus.COMPLETED)

    async def _select(self, pred: Callable[[Order], bool]) -> List[Order]:
        async with self._lock:
            return [o.copy() for o in self._by_id.values() if pred(o)]

    def _require(self, order_id: int) -> Order:
        order = self._by_id.get(order_id)
        if order is None:
            raise NotTracked(order_id)
        return order

    @staticmethod
    def _move(order: Order, target: OrderStatus) -> bool:
        """Apply a transition; False when the order is already in `target`."""
        if order.status is target:
            return False
        if target not in TRANSITIONS[order.status]:
            raise InvalidTransition(order.id, order.status, target)
        order.status = target
        return True
