"""Infrastructure - logging, local cart storage."""

from storefront.infra.logging import get_logger, setup_logging
from storefront.infra.storage import CartStorage, FileCartStorage

__all__ = [
    "CartStorage",
    "FileCartStorage",
    "get_logger",
    "setup_logging",
]
