# tradesync/errors.py
from typing import List, Optional


class TradingError(Exception):
    """Base trading error."""
    def __init__(self, msg: str = ""):
        super().__init__(msg)
        self.msg = msg

    def __str__(self):
        return self.msg or self.__class__.__name__


class ConfigError(TradingError):
    """Missing or malformed configuration."""


class RemoteError(TradingError):
    """Any venue call failure: network, rejected by venue, malformed response."""
    def __init__(self, msg: str = "", code: Optional[str] = None):
        super().__init__(msg)
        self.code = code

    def __str__(self):
        base = super().__str__()
        if self.code is not None:
            return f"{base} [code={self.code}]"
        return base


class InvalidSymbol(TradingError):
    """Symbol cannot be normalized into a venue trading pair."""

    def __init__(self, symbol: str, reason: str = ""):
        msg = f"invalid symbol {symbol!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
        self.symbol = symbol


class NotTracked(TradingError):
    """No local record for the order id."""

    def __init__(self, order_id: int):
        super().__init__(f"order {order_id} is not tracked")
        self.order_id = order_id


class CurrencyNotFound(TradingError):
    def __init__(self, currency: str):
        super().__init__(f"currency {currency} does not found")
        self.currency = currency


class InvalidTransition(TradingError):
    """Tracker refused a status change not allowed by the order state machine."""

    def __init__(self, order_id: int, current, target):
        super().__init__(f"order {order_id}: {current.value} -> {target.value} not allowed")
        self.order_id = order_id
        self.current = current
        self.target = target


class OrderTerminal(TradingError):
    """Order is already completed or cancelled."""

    def __init__(self, order_id: int, status):
        super().__init__(f"order {order_id} is already {status.value}")
        self.order_id = order_id
        self.status = status


class BatchCancelError(TradingError):
    """
    Batch cancellation stopped at the first failure.

    `cancelled` holds the orders cancelled before the failure; the failure
    itself is chained as __cause__. Remaining orders may still be live.
    """

    def __init__(self, cancelled: List, error: Exception):
        super().__init__(f"cancelled {len(cancelled)} order(s) before failure: {error}")
        self.cancelled = cancelled
        self.error = error
