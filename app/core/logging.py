"""
Logging Configuration
Single place where the root logger is configured for the API process.
"""

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level.upper(), format=LOG_FORMAT, datefmt=DATE_FORMAT)
    root.setLevel(level.upper())
    # Chatty HTTP client logs from the LLM SDK
    logging.getLogger("httpx").setLevel(logging.WARNING)
