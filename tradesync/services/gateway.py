# tradesync/services/gateway.py
from typing import Any, Dict, List, Optional

from infra import HttpPort
from infra.http_client import HttpError
from tradesync.enums import OrderStatus, PriceType, Side
from tradesync.models import BookLevel, OrderBookSnapshot, RemoteOrder
from tradesync.services.endpoints import Endpoints
from utils.logger import get_logger

_STATUS_ALIASES = {
    "open": OrderStatus.OPENED,
    "active": OrderStatus.OPENED,
    "partial": OrderStatus.PARTIALLY_FILLED,
    "partially-filled": OrderStatus.PARTIALLY_FILLED,
    "filled": OrderStatus.COMPLETED,
    "canceled": OrderStatus.CANCELLED,
}


def _to_float(x: Any) -> float:
    if x is None:
        return 0.0
    if isinstance(x, (int, float)):
        return float(x)
    s = str(x).strip()
    if not s:
        return 0.0
    try:
        return float(s)
    except ValueError:
        return 0.0


def _parse_status(raw: Any, default: OrderStatus) -> OrderStatus:
    if raw is None or raw == "":
        return default
    s = str(raw).strip().lower()
    try:
        return OrderStatus(s)
    except ValueError:
        return _STATUS_ALIASES.get(s, default)


def _parse_side(raw: Any) -> Optional[Side]:
    try:
        return Side(str(raw).strip().lower())
    except ValueError:
        return None


def _parse_levels(rows: Any) -> List[BookLevel]:
    levels: List[BookLevel] = []
    for row in rows or []:
        if isinstance(row, dict):
            levels.append(BookLevel(_to_float(row.get("price")), _to_float(row.get("amount", row.get("size")))))
        else:
            levels.append(BookLevel(_to_float(row[0]), _to_float(row[1])))
    return levels


class RestGateway:
    """
    Venue REST operations, one round-trip each.
    Stateless apart from the injected transport; every failure is a RemoteError.
    """

    def __init__(self, http_client: HttpPort, endpoints: Endpoints, logger=None) -> None:
        self._http = http_client
        self._ep = endpoints
        self.log = logger or get_logger("RestGateway")

    async def place_order(self,
                          symbol: str,
                          side: Side,
                          price_type: PriceType,
                          amount: float,
                          quantity: float,
                          price: float) -> int:
        body = {
            "symbol": symbol,
            "side": side.value,
            "priceType": price_type.value,
            "amount": amount,
            "quantity": quantity,
            "price": price,
        }
        data = await self._http.post_private(self._ep.create_order, body)
        try:
            order_id = int(data["orderId"])
        except (KeyError, TypeError, ValueError) as e:
            raise HttpError(200, f"create order: unexpected payload {data!r}") from e
        self.log.debug(f"create order ok id={order_id} {symbol} {side.value} amount={amount} price={price}")
        return order_id

    async def cancel_order(self, order_id: int) -> None:
        await self._http.post_private(self._ep.cancel_order, {"orderId": order_id})

    async def get_balance(self) -> Dict[str, str]:
        """Currency (lower-case) -> balance string."""
        data = await self._http.get_private(self._ep.balance)
        if not isinstance(data, dict):
            raise HttpError(200, f"balance: unexpected payload {data!r}")
        bal = data.get("balance", data)
        if not isinstance(bal, dict):
            raise HttpError(200, f"balance: unexpected payload {data!r}")
        return {str(k).lower(): str(v) for k, v in bal.items()}

    async def get_order_book(self, symbol: str) -> OrderBookSnapshot:
        data = await self._http.get_public(self._ep.order_book, params={"symbol": symbol})
        if not isinstance(data, dict):
            raise HttpError(200, f"orderbook {symbol}: unexpected payload {data!r}")
        try:
            return OrderBookSnapshot(
                symbol=symbol,
                bids=_parse_levels(data.get("bids")),
                asks=_parse_levels(data.get("asks")),
            )
        except (IndexError, TypeError) as e:
            raise HttpError(200, f"orderbook {symbol}: malformed levels") from e

    async def get_orders_by_status(self,
                                   symbol: str,
                                   status: OrderStatus,
                                   limit: Optional[int] = None) -> List[RemoteOrder]:
        """limit=None asks the venue for every matching order."""
        params = {"symbol": symbol, "status": status.value}
        if limit is not None:
            params["limit"] = limit
        data = await self._http.get_private(self._ep.orders_by_status, params=params)

        rows = data.get("rows") if isinstance(data, dict) else data
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise HttpError(200, f"orders {symbol}/{status.value}: unexpected payload {data!r}")

        out: List[RemoteOrder] = []
        for it in rows:
            try:
                created = it.get("createDate")
                out.append(RemoteOrder(
                    order_id=int(it["orderId"]),
                    symbol=str(it.get("symbol") or symbol).upper(),
                    status=_parse_status(it.get("status"), status),
                    side=_parse_side(it.get("side", it.get("type"))),
                    amount=_to_float(it.get("amount")),
                    price=_to_float(it.get("price")),
                    create_date=int(created) if created else None,
                    raw=it,
                ))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                self.log.warning(f"orders {symbol}/{status.value}: skip malformed row {it!r}: {e}")
                continue
        return out
