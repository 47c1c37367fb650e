"""Persisted catalog store.

The whole catalog is stored as one JSON record named after a versioned
storage key, so a schema change only needs a new key suffix and never
trips over a record written by an older version.

Typical usage:
    from kidsjoy.catalog.store import CatalogStore

    store = CatalogStore()
    catalog = store.load()  # Falls back to the starter catalog
    store.save(catalog)
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from kidsjoy.catalog.defaults import build_default_catalog
from kidsjoy.catalog.models import Catalog
from kidsjoy.core.resource_path import get_user_data_dir

logger = logging.getLogger(__name__)

STORAGE_KEY = "kids_joy_v5_data"


class CatalogStore:
    """Durable single-record store for the vocabulary catalog.

    A missing, unreadable or malformed record is treated exactly like no
    record at all: ``load()`` returns the starter catalog and logs a
    warning, it never raises.

    Attributes:
        path: Location of the JSON record.
    """

    def __init__(self, path: Path | str | None = None, storage_key: str = STORAGE_KEY) -> None:
        """Initialize the store.

        Args:
            path: Explicit record path. Defaults to
                ``<user data dir>/<storage_key>.json``.
            storage_key: Versioned record name used when ``path`` is None.
        """
        self.path = Path(path) if path is not None else get_user_data_dir() / f"{storage_key}.json"

    def load(self) -> Catalog:
        """Load the catalog.

        Returns:
            The persisted catalog, or the starter catalog if no valid
            record exists.
        """
        if not self.path.exists():
            logger.info("No catalog record at %s, using starter catalog", self.path)
            return build_default_catalog()

        # ValueError includes decode, format and integer-size errors
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            catalog = Catalog.from_list(data)
        except (OSError, ValueError, RecursionError) as e:
            logger.warning("Catalog record %s is unusable (%s), using starter catalog", self.path, e)
            return build_default_catalog()

        logger.info(
            "Loaded catalog from %s: %d categories, %d items",
            self.path,
            len(catalog),
            sum(len(category.items) for category in catalog),
        )
        return catalog

    def save(self, catalog: Catalog) -> bool:
        """Write the complete catalog.

        The record is written to a temporary file and moved into place so
        readers never observe a partial write.

        Args:
            catalog: Catalog to persist.

        Returns:
            True if saved successfully, False otherwise.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(catalog.to_list(), f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("Failed to save catalog to %s: %s", self.path, e)
            return False

        logger.debug("Saved catalog to %s", self.path)
        return True
