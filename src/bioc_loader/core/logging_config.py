# src/bioc_loader/core/logging_config.py
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Root logger setup for the command line and API entry points.
    Library modules only ever call logging.getLogger(__name__).
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)
    # SQL echo is controlled by the engine, keep the pool quiet
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
