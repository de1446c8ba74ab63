import logging
import os
from dotenv import load_dotenv

load_dotenv()


def get_logger(name: str) -> logging.Logger:
    """Logger standardisé, niveau pris dans VERY_HTTPX_LOG_LEVEL (ou LOG_LEVEL)."""
    log_level = (os.getenv("VERY_HTTPX_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "INFO").upper()

    logger = logging.getLogger(name)
    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(handler)
        logger.setLevel(log_level)
        logger.debug("Logger '%s' prêt (level=%s)", name, log_level)
    return logger
