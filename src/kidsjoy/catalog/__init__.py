"""Vocabulary catalog: data model, starter content, persistence and merging."""

from kidsjoy.catalog.defaults import build_default_catalog
from kidsjoy.catalog.merge import ItemDraft, MergeResult, merge_drafts, mint_item_id
from kidsjoy.catalog.models import Catalog, CatalogFormatError, Category, Item
from kidsjoy.catalog.store import STORAGE_KEY, CatalogStore

__all__ = [
    "Catalog",
    "CatalogFormatError",
    "CatalogStore",
    "Category",
    "Item",
    "ItemDraft",
    "MergeResult",
    "STORAGE_KEY",
    "build_default_catalog",
    "merge_drafts",
    "mint_item_id",
]
