# tradesync/services/trading_service.py
from typing import List, Optional

from tradesync.config import ReconcileSettings
from tradesync.enums import OrderStatus, Side
from tradesync.errors import BatchCancelError, CurrencyNotFound, NotTracked, OrderTerminal, TradingError
from tradesync.models import Order
from tradesync.ports import Gateway, OrderTrackerPort
from tradesync.symbols import normalize_symbol
from utils.logger import get_logger


async def fetch_balance(gateway: Gateway, currency: str) -> str:
    """Balance of one currency; needs no order tracker."""
    info = await gateway.get_balance()
    v: Optional[str] = info.get(currency.lower())
    if v is None:
        raise CurrencyNotFound(currency)
    return v


class TradingService:
    """
    Place/cancel orders against the venue and keep the tracker in step.

    A tracker mutation happens only after the venue call succeeded, so a
    failed call leaves local state untouched.
    """

    def __init__(self,
                 gateway: Gateway,
                 tracker: OrderTrackerPort,
                 settings: ReconcileSettings,
                 logger=None) -> None:
        self._gw = gateway
        self._tracker = tracker
        self._settings = settings
        self._log = logger or get_logger("TradingService")

    async def place(self, symbol: str, side: Side, price: float, amount: float) -> int:
        symbol = normalize_symbol(symbol, self._settings.symbols)

        order_id = await self._gw.place_order(
            symbol, side, self._settings.price_type, amount, 1, price,
        )
        await self._tracker.new_order(symbol, side, OrderStatus.SUBMITTED, order_id, amount, price)
        self._log.info(f"placed {side.value} {symbol} amount={amount} price={price} id={order_id}")
        return order_id

    async def buy(self, symbol: str, price: float, amount: float) -> int:
        return await self.place(symbol, Side.BUY, price, amount)

    async def sell(self, symbol: str, price: float, amount: float) -> int:
        return await self.place(symbol, Side.SELL, price, amount)

    async def cancel(self, order_id: int) -> Order:
        try:
            known = await self._tracker.get(order_id)
        except NotTracked:
            known = None
        if known is not None and known.status.is_terminal:
            raise OrderTerminal(order_id, known.status)

        await self._gw.cancel_order(order_id)
        # Unknown ids fail here, after the venue already accepted the cancel.
        order = await self._tracker.cancel(order_id)
        self._log.info(f"cancelled id={order_id} {order.symbol}")
        return order

    async def cancel_all(self) -> List[Order]:
        return await self._cancel_each(await self._tracker.executed())

    async def cancel_market(self, symbol: str) -> List[Order]:
        symbol = normalize_symbol(symbol, self._settings.symbols)
        orders = [o for o in await self._tracker.executed() if o.symbol == symbol]
        return await self._cancel_each(orders)

    async def _cancel_each(self, orders: List[Order]) -> List[Order]:
        """Cancel in turn; stop at the first failure and report what got through."""
        result: List[Order] = []
        for o in orders:
            try:
                result.append(await self.cancel(o.id))
            except TradingError as e:
                self._log.warning(f"batch cancel stopped at id={o.id} after {len(result)} order(s): {e}")
                raise BatchCancelError(result, e) from e
        return result

    async def get_balance(self, currency: str) -> str:
        return await fetch_balance(self._gw, currency)

    async def order_status(self, order_id: int) -> str:
        return await self._tracker.status(order_id)

    async def order_details(self, order_id: int) -> Order:
        return await self._tracker.get(order_id)

    async def executed(self) -> List[Order]:
        return await self._tracker.executed()

    async def completed(self) -> List[Order]:
        return await self._tracker.completed()
