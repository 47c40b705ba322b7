# tradesync/models.py
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, NamedTuple, Optional

from tradesync.enums import OrderStatus, Side


class BookLevel(NamedTuple):
    price: float
    size: float


@dataclass
class Order:
    id: int
    symbol: str             # normalized, e.g. "BTC_USDT"
    side: Side
    status: OrderStatus
    amount: float
    price: float
    created_at: datetime    # venue create time once known, local submit time before
    completed_at: Optional[datetime] = None

    @property
    def is_live(self) -> bool:
        return not self.status.is_terminal

    def copy(self) -> "Order":
        return replace(self)


@dataclass
class OrderBookSnapshot:
    symbol: str
    bids: List[BookLevel] = field(default_factory=list)
    asks: List[BookLevel] = field(default_factory=list)
    updated_at: Optional[datetime] = None

    def best_bid(self) -> Optional[BookLevel]:
        return self.bids[0] if self.bids else None

    def best_ask(self) -> Optional[BookLevel]:
        return self.asks[0] if self.asks else None


@dataclass
class RemoteOrder:
    """Order record as reported by the venue's orders-by-status query."""
    order_id: int
    symbol: str
    status: OrderStatus
    side: Optional[Side]
    amount: float
    price: float
    create_date: Optional[int]      # epoch seconds, None when the venue omits it
    raw: Optional[dict] = None
