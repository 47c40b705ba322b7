# utils/logger.py
import os
import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

level = os.getenv("TRADESYNC_LOG_LEVEL", "INFO").upper()
log_dir = os.getenv("TRADESYNC_LOG_DIR")

logger.remove()
logger.configure(extra={"component": "-"})

logger.add(
    sys.stdout,
    level=level,
    enqueue=True,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | {level} | {extra[component]} | {message}",
)

if log_dir:
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    start_time = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = Path(log_dir) / f"tradesync_{start_time}.log"
    logger.add(
        log_file,
        level="DEBUG",
        rotation="100 MB",
        retention="90 days",
        enqueue=True,
        encoding="utf-8",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra[component]} | {message}",
    )
    logger.info(f"Logger initialized. Writing logs to {log_file}")


def get_logger(component: str):
    return logger.bind(component=component)
