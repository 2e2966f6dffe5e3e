"""Durable local storage for the cart.

Provides:
- A storage protocol the cart store writes through
- A JSON file implementation with atomic writes
- Fail-open loading: missing or corrupt data yields an empty cart
"""

import os
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from storefront.infra.logging import get_logger
from storefront.schemas.cart import CartLineItem

logger = get_logger(__name__)

_lines_adapter = TypeAdapter(list[CartLineItem])


class CartStorage(Protocol):
    """Where cart lines live between sessions."""

    def load(self) -> list[CartLineItem]:
        """Return stored lines, or [] when nothing usable is stored."""
        ...

    def save(self, lines: list[CartLineItem]) -> None:
        """Persist the full line list."""
        ...


class FileCartStorage:
    """Cart storage backed by a JSON file."""

    def __init__(self, path: Path | str) -> None:
        """Initialize file storage.

        Args:
            path: JSON file path. Parent directories are created on first save.
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[CartLineItem]:
        """Load stored lines.

        Never raises: a missing, unreadable or invalid file is logged and
        treated as an empty cart.
        """
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning("Cart storage unreadable, starting empty", path=str(self._path), error=str(e))
            return []

        try:
            return _lines_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Cart storage corrupt, starting empty",
                path=str(self._path),
                error_count=e.error_count(),
            )
            return []

    def save(self, lines: list[CartLineItem]) -> None:
        """Write lines atomically (temp file in the same directory + replace)."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = _lines_adapter.dump_json(lines)

        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Cart saved", path=str(self._path), lines=len(lines))
