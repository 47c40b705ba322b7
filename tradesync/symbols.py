# tradesync/symbols.py
import re
from typing import Iterable

from tradesync.errors import InvalidSymbol

_PAIR_RE = re.compile(r"^[A-Z0-9]+_[A-Z0-9]+$")


def normalize_symbol(symbol: str, allowed: Iterable[str]) -> str:
    """
    Map a user-supplied pair into the venue's canonical form.

    - "btc/usdt", "BTC-USDT", " eth_usdt " -> "BTC_USDT", "ETH_USDT"
    - the result must be one of `allowed`
    """
    if not isinstance(symbol, str) or not symbol.strip():
        raise InvalidSymbol(str(symbol), "empty")

    s = symbol.strip().upper().replace("/", "_").replace("-", "_")
    if not _PAIR_RE.match(s):
        raise InvalidSymbol(symbol, "expected BASE_QUOTE")
    if s not in set(allowed):
        raise InvalidSymbol(symbol, "not traded by this client")
    return s
