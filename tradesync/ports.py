# tradesync/ports.py
"""
Capability interfaces the services depend on.

RestGateway, OrderTracker and OrderBookTracker are the shipped
implementations; tests substitute in-memory fakes.
"""
from datetime import datetime
from typing import Dict, List, Optional, Protocol, Sequence

from tradesync.enums import OrderStatus, PriceType, Side
from tradesync.models import BookLevel, Order, OrderBookSnapshot, RemoteOrder


class Gateway(Protocol):
    async def place_order(self, symbol: str, side: Side, price_type: PriceType,
                          amount: float, quantity: float, price: float) -> int: ...
    async def cancel_order(self, order_id: int) -> None: ...
    async def get_balance(self) -> Dict[str, str]: ...
    async def get_order_book(self, symbol: str) -> OrderBookSnapshot: ...
    async def get_orders_by_status(self, symbol: str, status: OrderStatus,
                                   limit: Optional[int] = None) -> List[RemoteOrder]: ...


class OrderTrackerPort(Protocol):
    async def new_order(self, symbol: str, side: Side, status: OrderStatus, order_id: int,
                        amount: float, price: float, created_at: Optional[datetime] = None) -> Order: ...
    async def cancel(self, order_id: int) -> Order: ...
    async def complete(self, order_id: int, observed_at: datetime) -> Order: ...
    async def update_details(self, order_id: int, symbol: str, created_at: Optional[datetime],
                             status: OrderStatus = OrderStatus.OPENED) -> Order: ...
    async def get(self, order_id: int) -> Order: ...
    async def status(self, order_id: int) -> str: ...
    async def executed(self) -> List[Order]: ...
    async def completed(self) -> List[Order]: ...


class BookTrackerPort(Protocol):
    async def update_symbol(self, symbol: str, bids: Sequence[BookLevel], asks: Sequence[BookLevel]) -> None: ...
    async def get(self, symbol: str) -> Optional[OrderBookSnapshot]: ...
