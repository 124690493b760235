"""
Lifespan FastAPI: initialisation au démarrage.
- Configure le logging applicatif (LOG_LEVEL).
- Signale les secrets manquants sans bloquer le démarrage.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from printstream.config import LOG_LEVEL, REQUIRED_SETTINGS

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Handler console sur le logger 'printstream'; les loggers uvicorn restent inchangés."""
    root = logging.getLogger("printstream")
    root.setLevel(getattr(logging, (level or "INFO").upper(), logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)


def missing_settings() -> list:
    return [name for name, value in REQUIRED_SETTINGS.items() if not value]


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger = logging.getLogger("printstream.app")
    missing = missing_settings()
    for name in missing:
        logger.warning("Missing setting %s: dependent endpoints will fail", name)
    app.state.missing_settings = missing
    logger.info("printstream API started")
    yield
    logger.info("printstream API stopped")
