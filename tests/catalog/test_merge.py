"""Tests for merging generated items into categories."""

import pytest

from kidsjoy.catalog.defaults import build_default_catalog
from kidsjoy.catalog.merge import ItemDraft, merge_drafts, mint_item_id
from kidsjoy.catalog.models import DEFAULT_ITEM_COLOR, Category


@pytest.fixture
def fruits() -> Category:
    """Get the starter fruit category."""
    return build_default_catalog().get("fruits")


class TestMintItemId:
    """Test suite for mint_item_id."""

    def test_format(self) -> None:
        """Test the id carries the category name and batch index."""
        item_id = mint_item_id("Fruits", 3)

        assert item_id.startswith("dyn-Fruits-")
        assert item_id.endswith("-3")

    def test_unique_across_rapid_calls(self) -> None:
        """Test that ids minted back to back never collide."""
        ids = {mint_item_id("Fruits", 0) for _ in range(1000)}

        assert len(ids) == 1000


class TestMergeDrafts:
    """Test suite for merge_drafts."""

    def test_appends_mango_and_kiwi(self, fruits: Category) -> None:
        """Test that new fruits are appended after the existing ones."""
        drafts = [ItemDraft("Mango", "انبه", "🥭"), ItemDraft("Kiwi", "کیوی", "🥝")]

        result = merge_drafts(fruits, drafts)

        assert result.category.item_names == fruits.item_names + ["Mango", "Kiwi"]
        assert result.category.items[: len(fruits.items)] == fruits.items
        assert [item.name for item in result.added] == ["Mango", "Kiwi"]
        assert result.skipped == ()

    def test_new_items_get_default_color_and_fresh_ids(self, fruits: Category) -> None:
        """Test the fields of appended items."""
        result = merge_drafts(fruits, [ItemDraft("Mango", "انبه", "🥭")])

        mango = result.added[0]
        assert mango.color == DEFAULT_ITEM_COLOR
        assert mango.localized_name == "انبه"
        assert mango.id.startswith("dyn-Fruits-")
        assert mango.id not in {item.id for item in fruits.items}

    def test_skips_existing_names(self, fruits: Category) -> None:
        """Test that a draft named like an existing item is dropped."""
        result = merge_drafts(fruits, [ItemDraft("Apple", "سیب", "🍏"), ItemDraft("Mango", "انبه", "🥭")])

        assert result.skipped == ("Apple",)
        assert [item.name for item in result.added] == ["Mango"]
        assert result.category.item_names.count("Apple") == 1

    def test_skips_duplicates_within_batch(self, fruits: Category) -> None:
        """Test that the same name twice in one batch is added once."""
        result = merge_drafts(fruits, [ItemDraft("Mango", "انبه", "🥭"), ItemDraft("Mango", "انبه", "🥭")])

        assert [item.name for item in result.added] == ["Mango"]
        assert result.skipped == ("Mango",)

    def test_no_drafts_returns_same_category(self, fruits: Category) -> None:
        """Test that an empty batch leaves the category untouched."""
        result = merge_drafts(fruits, [])

        assert result.category is fruits
        assert result.added == ()

    def test_ids_unique_across_batches(self, fruits: Category) -> None:
        """Test that repeated expansions never reuse an id."""
        first = merge_drafts(fruits, [ItemDraft("Mango", "انبه", "🥭")])
        second = merge_drafts(first.category, [ItemDraft("Kiwi", "کیوی", "🥝")])

        ids = [item.id for item in second.category.items]
        assert len(ids) == len(set(ids))
