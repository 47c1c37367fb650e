"""Session and navigation state.

``SessionState`` is immutable; every transition returns a new value. The
functions in this module are pure and take the catalog where they need
to resolve categories, which keeps them easy to test in isolation.
"""

from dataclasses import dataclass, replace
from enum import Enum, IntEnum

from kidsjoy.assets.image_cache import ImageAsset
from kidsjoy.catalog.models import Catalog, Category, Item

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


class View(Enum):
    """Top-level screens."""

    MAIN = "main"
    ALPHABET = "alphabet"
    LEARNING_DETAIL = "learning_detail"
    GAME_TYPES = "game_types"
    GAME_CATS = "game_cats"
    GAME_ACTIVE = "game_active"


class GameType(Enum):
    """Available games."""

    FLASHCARDS = "flashcards"
    QUIZ = "quiz"


class Direction(IntEnum):
    """Item navigation direction."""

    PREV = -1
    NEXT = 1


@dataclass(frozen=True)
class SessionState:
    """Transient per-session state.

    Attributes:
        view: Current screen.
        selected_category_id: Category shown in learning or game views.
        selected_game: Game chosen in the game-type picker.
        score: Points earned this session.
        item_index: Index of the displayed item in the selected category.
        show_localized: Whether the Persian name is revealed.
        item_image: Generated image for the displayed item, if loaded.
        fun_fact: Last fetched fun fact for the displayed item.
        speaking: A speech request is in flight.
        expanding: A category expansion is in flight.
        generating_image: An image generation is in flight.
    """

    view: View = View.MAIN
    selected_category_id: str | None = None
    selected_game: GameType | None = None
    score: int = 0
    item_index: int = 0
    show_localized: bool = False
    item_image: ImageAsset | None = None
    fun_fact: str | None = None
    speaking: bool = False
    expanding: bool = False
    generating_image: bool = False

    @property
    def busy(self) -> bool:
        """True if any operation is in flight."""
        return self.speaking or self.expanding or self.generating_image


def initial_state(catalog: Catalog) -> SessionState:
    """Create the session-start state.

    Args:
        catalog: Loaded catalog.

    Returns:
        State on the main view with the first category selected.
    """
    first = catalog.first
    return SessionState(selected_category_id=first.id if first else None)


def selected_category(state: SessionState, catalog: Catalog) -> Category | None:
    """Resolve the selected category against the current catalog."""
    if state.selected_category_id is None:
        return None
    return catalog.get(state.selected_category_id)


def current_item(state: SessionState, catalog: Catalog) -> Item | None:
    """Resolve the displayed item, or None if there is none."""
    category = selected_category(state, catalog)
    if category is None or not category.items:
        return None
    if 0 <= state.item_index < len(category.items):
        return category.items[state.item_index]
    return None


def _reset_item_view(state: SessionState, **changes) -> SessionState:
    """Apply changes and clear per-item view state."""
    return replace(
        state,
        item_index=0,
        show_localized=False,
        item_image=None,
        fun_fact=None,
        **changes,
    )


def go_home(state: SessionState) -> SessionState:
    """Return to the main view."""
    return replace(state, view=View.MAIN)


def open_view(state: SessionState, catalog: Catalog, view: View, category_id: str | None = None) -> SessionState:
    """Move to a view.

    Opening ``learning_detail`` without a category shows the first category,
    as the main menu does. Opening it with the already-selected category
    keeps the current item.

    Args:
        state: Current state.
        catalog: Current catalog.
        view: Target view.
        category_id: Category to select (learning and game views).

    Returns:
        New state.

    Raises:
        KeyError: If ``category_id`` is not in the catalog.
    """
    if view is View.MAIN:
        return go_home(state)

    if view is View.LEARNING_DETAIL:
        target = catalog.get(category_id) if category_id else catalog.first
        if category_id and target is None:
            raise KeyError(category_id)
        target_id = target.id if target else None
        if target_id == state.selected_category_id and state.view is View.LEARNING_DETAIL:
            return state
        return _reset_item_view(state, view=view, selected_category_id=target_id)

    if view is View.GAME_ACTIVE:
        if category_id is None or catalog.get(category_id) is None:
            raise KeyError(category_id)
        return _reset_item_view(state, view=view, selected_category_id=category_id)

    return replace(state, view=view)


def select_category(state: SessionState, catalog: Catalog, category_id: str) -> SessionState:
    """Switch the selected category.

    The item index returns to 0 and the localized reveal is cleared.

    Raises:
        KeyError: If ``category_id`` is not in the catalog.
    """
    if catalog.get(category_id) is None:
        raise KeyError(category_id)
    return _reset_item_view(state, selected_category_id=category_id)


def advance_item(state: SessionState, catalog: Catalog, direction: Direction) -> SessionState:
    """Move to the next or previous item, wrapping around at both ends."""
    category = selected_category(state, catalog)
    if category is None or not category.items:
        return state
    index = (state.item_index + int(direction)) % len(category.items)
    return replace(state, item_index=index, show_localized=False, item_image=None, fun_fact=None)


def toggle_localized(state: SessionState) -> SessionState:
    """Flip the Persian-name reveal."""
    return replace(state, show_localized=not state.show_localized)


def choose_game(state: SessionState, game: GameType) -> SessionState:
    """Pick a game type and move to the category picker."""
    return replace(state, selected_game=game, view=View.GAME_CATS)


def award_point(state: SessionState, points: int = 1) -> SessionState:
    """Add to the learner's score."""
    return replace(state, score=state.score + points)


def show_item(state: SessionState, catalog: Catalog, item_id: str) -> SessionState:
    """Display a specific item of the selected category.

    Raises:
        KeyError: If the item is not in the selected category.
    """
    category = selected_category(state, catalog)
    items = category.items if category else ()
    for index, item in enumerate(items):
        if item.id == item_id:
            if index == state.item_index:
                return state
            return replace(state, item_index=index, show_localized=False, item_image=None, fun_fact=None)
    raise KeyError(item_id)
