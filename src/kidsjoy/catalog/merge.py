"""Merging generated vocabulary into a category.

Generated items arrive as drafts (name, Persian name, emoji) and are given
freshly minted identifiers here. Identifiers combine the category name, a
nanosecond timestamp, a process-wide sequence number and the position in
the batch, so two batches minted within the same clock tick still get
distinct ids.
"""

import itertools
import logging
import threading
import time
from dataclasses import dataclass

from kidsjoy.catalog.models import DEFAULT_ITEM_COLOR, Category, Item

logger = logging.getLogger(__name__)

_sequence = itertools.count()
_sequence_lock = threading.Lock()


@dataclass(frozen=True)
class ItemDraft:
    """A generated item before it has an identifier.

    Attributes:
        name: English display name.
        localized_name: Persian translation.
        emoji: Pictogram.
    """

    name: str
    localized_name: str
    emoji: str


@dataclass(frozen=True)
class MergeResult:
    """Outcome of merging drafts into a category.

    Attributes:
        category: The updated category (same object if nothing was added).
        added: Items appended, in order.
        skipped: Draft names rejected as duplicates.
    """

    category: Category
    added: tuple[Item, ...]
    skipped: tuple[str, ...]


def mint_item_id(category_name: str, index: int) -> str:
    """Create a unique identifier for a generated item.

    Args:
        category_name: Name of the owning category.
        index: Position of the item within its batch.

    Returns:
        Identifier of the form ``dyn-<category>-<ns timestamp>-<seq>-<index>``.
    """
    with _sequence_lock:
        seq = next(_sequence)
    return f"dyn-{category_name}-{time.time_ns()}-{seq}-{index}"


def merge_drafts(category: Category, drafts: list[ItemDraft]) -> MergeResult:
    """Append generated drafts to a category.

    Existing items are never removed or reordered. Drafts whose display
    name already exists in the category (or earlier in the same batch) are
    skipped, so display names stay unique within a category.

    Args:
        category: Category to extend.
        drafts: Generated drafts, in the order returned by the service.

    Returns:
        MergeResult with the updated category.
    """
    seen = set(category.item_names)
    added: list[Item] = []
    skipped: list[str] = []

    for index, draft in enumerate(drafts):
        if draft.name in seen:
            skipped.append(draft.name)
            continue
        seen.add(draft.name)
        added.append(
            Item(
                id=mint_item_id(category.name, index),
                name=draft.name,
                localized_name=draft.localized_name,
                emoji=draft.emoji,
                color=DEFAULT_ITEM_COLOR,
            )
        )

    if skipped:
        logger.info("Skipped %d duplicate generated items in %s: %s", len(skipped), category.name, skipped)

    updated = category.with_items_appended(added) if added else category
    return MergeResult(category=updated, added=tuple(added), skipped=tuple(skipped))
