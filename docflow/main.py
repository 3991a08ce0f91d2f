"""Console factory used by the presentation layer."""
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from .config import Settings, settings as default_settings
from .console import DocumentConsole
from .logging_setup import setup_logging
from .seed_data import seed
from .services.task_rules import now_utc


def create_console(
    settings: Optional[Settings] = None,
    *,
    clock: Callable[[], datetime] = now_utc,
    configure_logging: bool = True,
) -> DocumentConsole:
    """Create a console for one session, seeded per configuration."""
    cfg = settings or default_settings

    # Production safety checks (fail closed on demo configuration).
    if cfg.ENV.lower() == "production" and cfg.SEED_DEMO_DATA:
        raise RuntimeError("SEED_DEMO_DATA must be false in production.")
    if cfg.SEARCH_LATENCY_SECONDS < 0:
        raise RuntimeError("SEARCH_LATENCY_SECONDS must not be negative.")

    if configure_logging:
        setup_logging(level=cfg.LOG_LEVEL.upper(), fmt=cfg.LOG_FORMAT)

    console = DocumentConsole(settings=cfg, clock=clock)
    if cfg.SEED_DEMO_DATA:
        seed(console, now=clock())
    return console
