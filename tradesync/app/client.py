# tradesync/app/client.py
from typing import Any, List, Mapping, Optional

from infra.http_client import HttpClient
from tradesync.config import ReconcileSettings
from tradesync.enums import Side
from tradesync.errors import TradingError
from tradesync.models import Order
from tradesync.ports import Gateway
from tradesync.services.endpoints import make_endpoints_from_cfg
from tradesync.services.gateway import RestGateway
from tradesync.services.reconcile_service import ReconcileService
from tradesync.services.trading_service import TradingService, fetch_balance
from tradesync.stores.book_tracker import OrderBookTracker
from tradesync.stores.order_tracker import OrderTracker
from utils.logger import get_logger


class VenueClient:
    """
    Application-facing client for one venue account.

    Tracks every order created through it and keeps order/order-book state
    reconciled in the background once start() is called. Without credentials
    (or with track_orders off) it only tracks order books, and the trading
    operations raise TradingError.
    """

    def __init__(self,
                 gateway: Gateway,
                 settings: ReconcileSettings,
                 *,
                 order_tracker: Optional[OrderTracker] = None,
                 book_tracker: Optional[OrderBookTracker] = None,
                 http: Optional[HttpClient] = None,
                 logger=None) -> None:
        self.settings = settings
        self.log = logger or get_logger("VenueClient")
        self._gw = gateway
        self._http = http

        if order_tracker is None and settings.track_orders and settings.has_credentials:
            order_tracker = OrderTracker()
        if book_tracker is None and settings.track_books:
            book_tracker = OrderBookTracker()
        self.tracker = order_tracker
        self.book_tracker = book_tracker

        self._trading = (
            TradingService(gateway, order_tracker, settings, logger=logger)
            if order_tracker is not None else None
        )
        self.reconciler = ReconcileService(
            gateway, settings,
            order_tracker=order_tracker,
            book_tracker=book_tracker,
            logger=logger,
        )

    @classmethod
    def from_cfg(cls, cfg: Mapping[str, Any], logger=None) -> "VenueClient":
        settings = ReconcileSettings.from_cfg(cfg)
        endpoints = make_endpoints_from_cfg(cfg)
        http = HttpClient(cfg, logger=logger, api_key=settings.api_key, secret_key=settings.api_secret)
        return cls(RestGateway(http, endpoints, logger=logger), settings, http=http, logger=logger)

    # ---- lifecycle ----------------------------------------------------------------
    async def __aenter__(self) -> "VenueClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def start(self):
        return self.reconciler.start()

    async def run(self) -> None:
        await self.reconciler.run()

    async def stop(self) -> None:
        await self.reconciler.stop()

    async def wait_idle(self) -> None:
        await self.reconciler.wait_idle()

    async def close(self) -> None:
        await self.stop()
        await self.wait_idle()
        if self._http is not None:
            await self._http.close()

    # ---- trading ------------------------------------------------------------------
    @property
    def trading(self) -> TradingService:
        if self._trading is None:
            raise TradingError("order tracking disabled")
        return self._trading

    async def buy(self, symbol: str, price: float, amount: float) -> int:
        return await self.trading.buy(symbol, price, amount)

    async def sell(self, symbol: str, price: float, amount: float) -> int:
        return await self.trading.sell(symbol, price, amount)

    async def place(self, symbol: str, side: Side, price: float, amount: float) -> int:
        return await self.trading.place(symbol, side, price, amount)

    async def cancel(self, order_id: int) -> Order:
        return await self.trading.cancel(order_id)

    async def cancel_all(self) -> List[Order]:
        return await self.trading.cancel_all()

    async def cancel_market(self, symbol: str) -> List[Order]:
        return await self.trading.cancel_market(symbol)

    async def get_balance(self, currency: str) -> str:
        return await fetch_balance(self._gw, currency)

    # ---- introspection ------------------------------------------------------------
    async def order_status(self, order_id: int) -> str:
        return await self.trading.order_status(order_id)

    async def order_details(self, order_id: int) -> Order:
        return await self.trading.order_details(order_id)

    async def executed(self) -> List[Order]:
        return await self.trading.executed()

    async def completed(self) -> List[Order]:
        return await self.trading.completed()

    def order_book(self) -> Optional[OrderBookTracker]:
        return self.book_tracker
