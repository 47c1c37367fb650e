"""SQLite-backed cache for generated item images.

Images are keyed by ``img_<epoch>_<item id>``. Changing the epoch is the
invalidation mechanism: rows written under an older epoch stay in the
database but are never looked up again. ``purge_other_epochs()`` removes
them explicitly when disk space matters.

Reads never raise and writes are best effort; a failed write only means
the image is generated again in a later session.

Typical usage:
    from kidsjoy.assets.image_cache import AssetCache

    cache = AssetCache(epoch="v5")
    key = cache.key_for(item.id)
    asset = cache.get(key)
    if asset is None:
        cache.set(key, generated_asset)
"""

import base64
import logging
import re
import sqlite3
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from kidsjoy.core.resource_path import get_user_data_dir

logger = logging.getLogger(__name__)

DEFAULT_EPOCH = "v5"
# Epochs are plain alphanumeric tags so the "_" after them always ends the prefix
EPOCH_PATTERN = re.compile(r"[A-Za-z0-9]+")
DB_FILENAME = "image_cache.db"


@dataclass(frozen=True)
class ImageAsset:
    """An encoded image payload.

    Attributes:
        data: Encoded image bytes (PNG, JPEG, ...).
        mime_type: MIME type of ``data``.
    """

    data: bytes
    mime_type: str = "image/png"

    @property
    def data_url(self) -> str:
        """The image as a ``data:`` URL."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    @classmethod
    def from_data_url(cls, url: str) -> "ImageAsset":
        """Parse a base64 ``data:`` URL.

        Raises:
            ValueError: If ``url`` is not a base64 data URL.
        """
        header, sep, payload = url.partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(";base64"):
            raise ValueError("Not a base64 data URL")
        mime_type = header[len("data:") : -len(";base64")] or "application/octet-stream"
        return cls(data=base64.b64decode(payload, validate=True), mime_type=mime_type)


def is_valid_epoch(epoch: str) -> bool:
    """Check that an epoch tag is non-empty and alphanumeric."""
    return isinstance(epoch, str) and EPOCH_PATTERN.fullmatch(epoch) is not None


class AssetCache:
    """Durable key-value store for generated images.

    Attributes:
        db_path: Path to the SQLite database file.
        epoch: Epoch tag embedded in every key built by ``key_for``.
    """

    def __init__(self, db_path: Path | str | None = None, epoch: str = DEFAULT_EPOCH) -> None:
        """Initialize the cache.

        Args:
            db_path: Database file. Defaults to ``<user data dir>/image_cache.db``.
            epoch: Cache epoch tag (letters and digits only).

        Raises:
            ValueError: If ``epoch`` is not a valid epoch tag.
        """
        if not is_valid_epoch(epoch):
            raise ValueError(f"Invalid cache epoch: {epoch!r}")
        self.db_path = Path(db_path) if db_path is not None else get_user_data_dir() / DB_FILENAME
        self.epoch = epoch
        self._available = self._init_database()

    def _init_database(self) -> bool:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS assets (
                        cache_key TEXT PRIMARY KEY,
                        mime_type TEXT NOT NULL,
                        data BLOB NOT NULL,
                        created_at REAL NOT NULL
                    )
                    """
                )
        except (OSError, sqlite3.Error) as e:
            logger.warning("Image cache unavailable at %s: %s", self.db_path, e)
            return False

        logger.info("AssetCache initialized: db=%s, epoch=%s", self.db_path, self.epoch)
        return True

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection that commits on success and always closes."""
        conn = sqlite3.connect(self.db_path)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def key_for(self, item_id: str) -> str:
        """Build the cache key for an item under the current epoch.

        Args:
            item_id: Item identifier.

        Returns:
            Cache key string.
        """
        return f"img_{self.epoch}_{item_id}"

    def get(self, key: str) -> ImageAsset | None:
        """Read a cached asset.

        Args:
            key: Cache key (see ``key_for``).

        Returns:
            The cached asset, or None if absent or unreadable.
        """
        if not self._available:
            return None

        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT mime_type, data FROM assets WHERE cache_key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as e:
            logger.warning("Image cache read failed for %s: %s", key, e)
            return None

        if row is None:
            return None
        mime_type, data = row
        return ImageAsset(data=bytes(data), mime_type=mime_type)

    def set(self, key: str, asset: ImageAsset) -> bool:
        """Store an asset, replacing any previous value.

        Args:
            key: Cache key (see ``key_for``).
            asset: Asset to store.

        Returns:
            True if the write succeeded.
        """
        if not self._available:
            return False

        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO assets (cache_key, mime_type, data, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (key, asset.mime_type, sqlite3.Binary(asset.data), time.time()),
                )
        except sqlite3.Error as e:
            logger.warning("Image cache write failed for %s: %s", key, e)
            return False

        logger.debug("Cached image %s (%d bytes)", key, len(asset.data))
        return True

    def purge_other_epochs(self) -> int:
        """Delete rows written under any epoch other than the current one.

        Returns:
            Number of rows deleted.
        """
        if not self._available:
            return 0

        prefix = f"img_{self.epoch}_"
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "DELETE FROM assets WHERE substr(cache_key, 1, ?) != ?",
                    (len(prefix), prefix),
                )
                deleted = cursor.rowcount
        except sqlite3.Error as e:
            logger.warning("Image cache purge failed: %s", e)
            return 0

        logger.info("Purged %d cached images from older epochs", deleted)
        return deleted

    def stats(self) -> dict[str, int | str]:
        """Get cache statistics.

        Returns:
            Dictionary with total rows, rows in the current epoch, and the epoch.
        """
        if not self._available:
            return {"total": 0, "current_epoch": 0, "epoch": self.epoch}

        prefix = f"img_{self.epoch}_"
        try:
            with self._connect() as conn:
                total = conn.execute("SELECT COUNT(*) FROM assets").fetchone()[0]
                current = conn.execute(
                    "SELECT COUNT(*) FROM assets WHERE substr(cache_key, 1, ?) = ?",
                    (len(prefix), prefix),
                ).fetchone()[0]
        except sqlite3.Error as e:
            logger.warning("Image cache stats failed: %s", e)
            return {"total": 0, "current_epoch": 0, "epoch": self.epoch}

        return {"total": total, "current_epoch": current, "epoch": self.epoch}
