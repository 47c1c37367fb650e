"""Vocabulary catalog data model.

The catalog is an ordered tuple of categories, each holding an ordered
tuple of items. All three types are immutable: mutations produce new
values (see ``Category.with_items_appended`` and ``Catalog.replace_category``).

On-disk dictionaries use the keys of the persisted record
(``persianName`` for the localized name, ``icon`` for a category glyph).
"""

from dataclasses import dataclass, field, replace
from typing import Any

DEFAULT_ITEM_COLOR = "bg-white"


class CatalogFormatError(ValueError):
    """Raised when a serialized catalog does not have the expected shape."""


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise CatalogFormatError(f"Expected string for '{key}', got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Item:
    """A single vocabulary word.

    Attributes:
        id: Identifier, unique within the owning category.
        name: English display name.
        localized_name: Persian translation.
        emoji: Pictogram shown when no generated image is available.
        color: Display color tag.
    """

    id: str
    name: str
    localized_name: str
    emoji: str
    color: str = DEFAULT_ITEM_COLOR

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted dictionary shape."""
        return {
            "id": self.id,
            "name": self.name,
            "persianName": self.localized_name,
            "emoji": self.emoji,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Item":
        """Create from the persisted dictionary shape.

        Raises:
            CatalogFormatError: If a required field is missing or mistyped.
        """
        if not isinstance(data, dict):
            raise CatalogFormatError("Item record must be an object")
        return cls(
            id=_require_str(data, "id"),
            name=_require_str(data, "name"),
            localized_name=_require_str(data, "persianName"),
            emoji=_require_str(data, "emoji"),
            color=data.get("color") or DEFAULT_ITEM_COLOR,
        )


@dataclass(frozen=True)
class Category:
    """A topic category and its ordered items.

    Attributes:
        id: Category identifier, unique within the catalog.
        name: Display name (also sent to the generative service).
        icon: Glyph shown in category pickers.
        color: Display color tag.
        items: Items in insertion order.
    """

    id: str
    name: str
    icon: str
    color: str
    items: tuple[Item, ...] = field(default_factory=tuple)

    @property
    def item_names(self) -> list[str]:
        """Display names of all items, in order."""
        return [item.name for item in self.items]

    def with_items_appended(self, new_items: list[Item] | tuple[Item, ...]) -> "Category":
        """Return a copy with ``new_items`` added after the existing items."""
        return replace(self, items=self.items + tuple(new_items))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted dictionary shape."""
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Category":
        """Create from the persisted dictionary shape.

        Raises:
            CatalogFormatError: If a required field is missing or mistyped.
        """
        if not isinstance(data, dict):
            raise CatalogFormatError("Category record must be an object")
        raw_items = data.get("items", [])
        if not isinstance(raw_items, list):
            raise CatalogFormatError("Category 'items' must be a list")
        return cls(
            id=_require_str(data, "id"),
            name=_require_str(data, "name"),
            icon=_require_str(data, "icon"),
            color=data.get("color") or "",
            items=tuple(Item.from_dict(item) for item in raw_items),
        )


@dataclass(frozen=True)
class Catalog:
    """The full ordered set of categories.

    Attributes:
        categories: Categories in display order.
    """

    categories: tuple[Category, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        ids = [category.id for category in self.categories]
        if len(ids) != len(set(ids)):
            raise CatalogFormatError("Duplicate category identifiers in catalog")

    def __len__(self) -> int:
        return len(self.categories)

    def __iter__(self):
        return iter(self.categories)

    @property
    def first(self) -> Category | None:
        """First category, or None for an empty catalog."""
        return self.categories[0] if self.categories else None

    def get(self, category_id: str) -> Category | None:
        """Look up a category by identifier."""
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def replace_category(self, updated: Category) -> "Catalog":
        """Return a copy with the category of the same id swapped for ``updated``.

        Raises:
            KeyError: If no category has ``updated.id``.
        """
        if self.get(updated.id) is None:
            raise KeyError(updated.id)
        return Catalog(
            categories=tuple(
                updated if category.id == updated.id else category
                for category in self.categories
            )
        )

    def to_list(self) -> list[dict[str, Any]]:
        """Convert to the persisted JSON list."""
        return [category.to_dict() for category in self.categories]

    @classmethod
    def from_list(cls, data: Any) -> "Catalog":
        """Create from the persisted JSON list.

        Raises:
            CatalogFormatError: If ``data`` is not a non-empty list of
                valid category records.
        """
        if not isinstance(data, list) or not data:
            raise CatalogFormatError("Catalog record must be a non-empty list")
        return cls(categories=tuple(Category.from_dict(entry) for entry in data))
