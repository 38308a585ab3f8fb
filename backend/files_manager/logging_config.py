"""Process-wide logging setup, called once by each entry point."""
import logging

from files_manager.config import settings


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
