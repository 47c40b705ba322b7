# tradesync/stores/book_tracker.py
import asyncio
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from utils.time import utc_now
from tradesync.models import BookLevel, OrderBookSnapshot


class OrderBookTracker:
    """
    In-memory best-of-book mirror keyed by symbol.
    Every update replaces the symbol's snapshot wholesale.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._data: Dict[str, OrderBookSnapshot] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def update_symbol(self,
                            symbol: str,
                            bids: Sequence[BookLevel],
                            asks: Sequence[BookLevel]) -> None:
        snap = OrderBookSnapshot(
            symbol=symbol,
            bids=[BookLevel(*lv) for lv in bids],
            asks=[BookLevel(*lv) for lv in asks],
            updated_at=self._clock(),
        )
        async with self._lock:
            self._data[symbol] = snap

    async def get(self, symbol: str) -> Optional[OrderBookSnapshot]:
        async with self._lock:
            snap = self._data.get(symbol)
            if snap is None:
                return None
            return OrderBookSnapshot(snap.symbol, list(snap.bids), list(snap.asks), snap.updated_at)

    async def symbols(self) -> List[str]:
        async with self._lock:
            return sorted(self._data)
