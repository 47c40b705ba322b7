# tradesync/services/reconcile_service.py
import asyncio
from datetime import datetime
from typing import Callable, Optional, Set

from tradesync.config import ReconcileSettings
from tradesync.enums import OrderStatus
from tradesync.errors import InvalidTransition, NotTracked, RemoteError
from tradesync.models import RemoteOrder
from tradesync.ports import BookTrackerPort, Gateway, OrderTrackerPort
from utils.logger import get_logger
from utils.time import from_unix_seconds, utc_now


class ReconcileService:
    """
    Periodic REST reconciliation of local trackers against the venue.

    Each tick:
    - order books: one detached sweep, serialized by a single-slot token
      (a new sweep waits for the previous one, it is never dropped)
    - orders: one task per (symbol, status) pair; the tick waits for all of
      them before the next tick may start another order sweep

    Failures stay inside the task that hit them.
    """

    def __init__(self,
                 gateway: Gateway,
                 settings: ReconcileSettings,
                 order_tracker: Optional[OrderTrackerPort] = None,
                 book_tracker: Optional[BookTrackerPort] = None,
                 logger=None,
                 clock: Callable[[], datetime] = utc_now) -> None:
        self._gw = gateway
        self._settings = settings
        self._orders = order_tracker
        self._books = book_tracker
        self._log = logger or get_logger("ReconcileService")
        self._clock = clock

        self._book_token = asyncio.Semaphore(1)
        self._book_tasks: Set[asyncio.Task] = set()
        self._stop = asyncio.Event()
        self._runner: Optional[asyncio.Task] = None
        self.ticks = 0

    # ---- order sweep ------------------------------------------------------------
    async def sweep_orders(self) -> None:
        if self._orders is None:
            return
        pairs = [(sym, st) for sym in self._settings.symbols for st in self._settings.polled_statuses]
        results = await asyncio.gather(
            *(self._reconcile_pair(sym, st) for sym, st in pairs),
            return_exceptions=True,
        )
        for (sym, st), res in zip(pairs, results):
            if isinstance(res, BaseException):
                self._log.opt(exception=res).error(f"order sweep task {sym}/{st.value} crashed")

    async def _reconcile_pair(self, symbol: str, status: OrderStatus) -> int:
        """Merge one (symbol, status) listing; returns the number of records applied."""
        try:
            remote = await self._gw.get_orders_by_status(symbol, status, limit=None)
        except RemoteError as e:
            self._log.warning(f"update order info failed {symbol}/{status.value}: {e}")
            return 0

        observed_at = self._clock()
        applied = 0
        for ro in remote:
            try:
                await self._apply(ro, symbol, status, observed_at)
                applied += 1
            except NotTracked:
                self._log.debug(f"skip untracked order id={ro.order_id} {symbol}/{status.value}")
            except InvalidTransition as e:
                self._log.debug(f"skip stale report: {e}")
        return applied

    async def _apply(self, ro: RemoteOrder, symbol: str, status: OrderStatus, observed_at: datetime) -> None:
        if status in (OrderStatus.OPENED, OrderStatus.PARTIALLY_FILLED):
            accepted = from_unix_seconds(ro.create_date) if ro.create_date else None
            try:
                await self._orders.update_details(ro.order_id, symbol, accepted, status)
            except NotTracked:
                if not self._settings.adopt_unknown_orders or ro.side is None:
                    raise
                await self._orders.new_order(symbol, ro.side, status, ro.order_id,
                                             ro.amount, ro.price, created_at=accepted)
                self._log.info(f"adopted venue order id={ro.order_id} {symbol} {status.value}")
        elif status is OrderStatus.CANCELLED:
            await self._orders.cancel(ro.order_id)
        elif status is OrderStatus.COMPLETED:
            # venue reports no completion time, stamp with our observation
            await self._orders.complete(ro.order_id, observed_at)

    # ---- order-book sweep -------------------------------------------------------
    async def sweep_books(self) -> int:
        """Refresh every symbol's snapshot; returns how many were replaced."""
        if self._books is None:
            return 0
        async with self._book_token:
            results = await asyncio.gather(
                *(self._refresh_book(sym) for sym in self._settings.symbols),
                return_exceptions=True,
            )
        updated = 0
        for sym, res in zip(self._settings.symbols, results):
            if isinstance(res, BaseException):
                self._log.opt(exception=res).error(f"book sweep task {sym} crashed")
            elif res:
                updated += 1
        return updated

    async def _refresh_book(self, symbol: str) -> bool:
        try:
            snap = await self._gw.get_order_book(symbol)
        except RemoteError as e:
            self._log.debug(f"update orderbook error: {e}, {symbol}")
            return False
        await self._books.update_symbol(symbol, snap.bids, snap.asks)
        return True

    def _spawn_book_sweep(self) -> asyncio.Task:
        task = asyncio.create_task(self.sweep_books())
        self._book_tasks.add(task)
        task.add_done_callback(self._book_tasks.discard)
        return task

    # ---- scheduler --------------------------------------------------------------
    async def tick(self) -> None:
        """One reconciliation cycle."""
        self.ticks += 1
        if self._books is not None:
            self._spawn_book_sweep()
        if self._orders is not None:
            await self.sweep_orders()

    def start(self) -> asyncio.Task:
        """Launch the scheduler in the background (restarts it after stop())."""
        if self._runner is not None and not self._runner.done():
            return self._runner
        self._stop.clear()
        self._runner = asyncio.create_task(self._run_loop())
        return self._runner

    async def run(self) -> None:
        """Run the scheduler in the foreground until stop() is signalled."""
        self._stop.clear()
        await self._run_loop()

    async def stop(self) -> None:
        """
        Stop ticking. Sweeps already in flight are not cancelled; they finish
        and write back (see wait_idle()).
        """
        self._stop.set()
        if self._runner is not None:
            await self._runner
            self._runner = None

    @property
    def running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    async def wait_idle(self) -> None:
        """Wait for detached order-book sweeps still in flight."""
        while self._book_tasks:
            await asyncio.gather(*list(self._book_tasks), return_exceptions=True)

    async def _run_loop(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self._settings.refresh_interval_s
        self._log.info(
            f"reconcile started interval={interval}s symbols={list(self._settings.symbols)} "
            f"orders={self._orders is not None} books={self._books is not None}"
        )
        next_at = loop.time() + interval
        while not self._stop.is_set():
            delay = next_at - loop.time()
            if delay > 0:
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=delay)
                    break
                except asyncio.TimeoutError:
                    pass
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._log.opt(exception=e).error("reconcile tick failed")

            next_at += interval
            behind = loop.time() - next_at
            if behind >= 0:
                # the cycle overran; skip the ticks it missed
                next_at += (int(behind // interval) + 1) * interval
        self._log.info(f"reconcile stopped after {self.ticks} tick(s)")
