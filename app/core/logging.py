import logging
from typing import Optional


def configure_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging for the API."""
    logging.basicConfig(
        level=(level or "INFO").upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # Multipart parsing is chatty at DEBUG.
    logging.getLogger("multipart").setLevel(logging.WARNING)
