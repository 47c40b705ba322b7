# tradesync/enums.py
from enum import Enum


class Side(Enum):
    BUY = "buy"
    SELL = "sell"


class PriceType(Enum):
    LIMIT = "limit"
    MARKET = "market"


class OrderStatus(str, Enum):
    SUBMITTED = "submitted"
    OPENED = "opened"
    PARTIALLY_FILLED = "partially_filled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


# Statuses queried by the order sweep, in the order they are fanned out.
SWEEP_STATUSES = (
    OrderStatus.OPENED,
    OrderStatus.PARTIALLY_FILLED,
    OrderStatus.CANCELLED,
    OrderStatus.COMPLETED,
)

# Allowed forward transitions; anything else (except same-status) is refused.
TRANSITIONS = {
    OrderStatus.SUBMITTED: {
        OrderStatus.OPENED,
        OrderStatus.PARTIALLY_FILLED,
        OrderStatus.CANCELLED,
        OrderStatus.COMPLETED,
    },
    OrderStatus.OPENED: {
        OrderStatus.PARTIALLY_FILLED,
        OrderStatus.CANCELLED,
        OrderStatus.COMPLETED,
    },
    OrderStatus.PARTIALLY_FILLED: {
        OrderStatus.CANCELLED,
        OrderStatus.COMPLETED,
    },
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}
