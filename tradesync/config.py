# tradesync/config.py
from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from utils.time import parse_tf
from tradesync.enums import OrderStatus, PriceType, SWEEP_STATUSES
from tradesync.errors import ConfigError


@dataclass(frozen=True)
class ReconcileSettings:
    """Reconciliation runtime configuration, an immutable snapshot per run."""
    symbols: Tuple[str, ...]
    api_key: str = ""
    api_secret: str = ""

    refresh_interval_ms: int = 1000
    polled_statuses: Tuple[OrderStatus, ...] = SWEEP_STATUSES
    price_type: PriceType = PriceType.MARKET

    track_orders: bool = True
    track_books: bool = True
    adopt_unknown_orders: bool = False  # record venue-only orders found by the sweep

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_secret)

    @property
    def refresh_interval_s(self) -> float:
        return self.refresh_interval_ms / 1000.0

    @classmethod
    def from_cfg(cls, cfg: Mapping[str, Any]) -> "ReconcileSettings":
        try:
            venue = cfg["venue"]
            rec = cfg.get("reconcile", {}) or {}
            symbols = tuple(str(s).upper() for s in venue["symbols"])
        except (KeyError, TypeError) as e:
            raise ConfigError(f"Invalid cfg missing key: {e}") from e

        if not symbols:
            raise ConfigError("venue.symbols must not be empty")

        try:
            statuses = tuple(OrderStatus(s) for s in rec.get("statuses", [s.value for s in SWEEP_STATUSES]))
            price_type = PriceType(rec.get("price_type", PriceType.MARKET.value))
            if "refresh_interval" in rec:
                interval = parse_tf(str(rec["refresh_interval"]))
            else:
                interval = int(rec.get("refresh_interval_ms", 1000))
        except ValueError as e:
            raise ConfigError(f"Invalid reconcile cfg: {e}") from e

        if interval <= 0:
            raise ConfigError("reconcile.refresh_interval_ms must be positive")

        return cls(
            symbols=symbols,
            api_key=venue.get("api_key") or "",
            api_secret=venue.get("api_secret") or "",
            refresh_interval_ms=interval,
            polled_statuses=statuses,
            price_type=price_type,
            track_orders=bool(rec.get("track_orders", True)),
            track_books=bool(rec.get("track_books", True)),
            adopt_unknown_orders=bool(rec.get("adopt_unknown_orders", False)),
        )
