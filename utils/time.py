# utils/time.py
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def utc_ms() -> int:
    return int(utc_now().timestamp() * 1000)


def from_unix_seconds(ts: int) -> datetime:
    """Venue epoch seconds -> aware UTC datetime."""
    return datetime.fromtimestamp(int(ts), tz=timezone.utc)


def parse_tf(tf: str) -> int:
    """Duration string ("500ms", "2s", "1m") -> milliseconds."""
    tf = tf.strip()
    if tf.endswith("ms"):
        return int(tf[:-2])
    if tf.endswith("s"):
        return int(tf[:-1]) * 1000
    if tf.endswith("m"):
        return int(tf[:-1]) * 60_000
    if tf.endswith("h"):
        return int(tf[:-1]) * 3_600_000
    if tf.isdigit():
        return int(tf)
    raise ValueError(f"unknown timeframe: {tf}")
