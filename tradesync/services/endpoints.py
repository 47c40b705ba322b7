# tradesync/services/endpoints.py
from dataclasses import dataclass
from typing import Any, Mapping

from tradesync.errors import ConfigError


@dataclass(frozen=True)
class Endpoints:
    rest_base: str

    # REST paths
    order_book: str = "/v1/orderbook"
    balance: str = "/v1/balance"
    create_order: str = "/v1/order/create"
    cancel_order: str = "/v1/order/cancel"
    orders_by_status: str = "/v1/orders"


def make_endpoints_from_cfg(cfg: Mapping[str, Any]) -> Endpoints:
    try:
        venue = cfg["venue"]
        rest_base = str(venue["rest_base"]).rstrip("/")
    except (KeyError, TypeError) as e:
        raise ConfigError(f"Invalid cfg missing key: {e}") from e

    overrides = {k: v for k, v in (venue.get("paths") or {}).items()
                 if k in Endpoints.__dataclass_fields__ and k != "rest_base"}
    return Endpoints(rest_base=rest_base, **overrides)
