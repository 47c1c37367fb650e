"""Tests for the session state machine."""

from dataclasses import FrozenInstanceError, replace

import pytest

from kidsjoy.assets.image_cache import ImageAsset
from kidsjoy.catalog.defaults import build_default_catalog
from kidsjoy.catalog.models import Catalog
from kidsjoy.controller import session
from kidsjoy.controller.session import Direction, GameType, SessionState, View


@pytest.fixture
def catalog() -> Catalog:
    """Starter catalog."""
    return build_default_catalog()


@pytest.fixture
def learning(catalog: Catalog) -> SessionState:
    """State on the learning view of the first category."""
    return session.open_view(session.initial_state(catalog), catalog, View.LEARNING_DETAIL)


class TestSessionState:
    """Test suite for SessionState."""

    def test_initial_state(self, catalog: Catalog) -> None:
        """Test the session-start state."""
        state = session.initial_state(catalog)

        assert state.view is View.MAIN
        assert state.selected_category_id == "fruits"
        assert state.item_index == 0
        assert state.score == 0
        assert state.busy is False

    def test_immutable(self, catalog: Catalog) -> None:
        """Test that states cannot be mutated in place."""
        state = session.initial_state(catalog)

        with pytest.raises(FrozenInstanceError):
            state.item_index = 3  # type: ignore[misc]

    def test_busy(self) -> None:
        """Test the busy summary flag."""
        assert SessionState(expanding=True).busy is True
        assert SessionState(speaking=True).busy is True
        assert SessionState(generating_image=True).busy is True


class TestNavigation:
    """Test suite for view and item transitions."""

    def test_open_learning_defaults_to_first_category(self, learning: SessionState) -> None:
        """Test opening the learning view from the main menu."""
        assert learning.view is View.LEARNING_DETAIL
        assert learning.selected_category_id == "fruits"

    def test_open_learning_with_category(self, catalog: Catalog) -> None:
        """Test opening a specific category."""
        state = session.open_view(session.initial_state(catalog), catalog, View.LEARNING_DETAIL, "animals")

        assert state.selected_category_id == "animals"
        assert session.current_item(state, catalog).name == "Cat"

    def test_reopen_same_category_keeps_item(self, catalog: Catalog, learning: SessionState) -> None:
        """Test that reopening the shown category does not reset the item."""
        state = session.advance_item(learning, catalog, Direction.NEXT)

        assert session.open_view(state, catalog, View.LEARNING_DETAIL, "fruits") is state

    def test_open_unknown_category(self, catalog: Catalog) -> None:
        """Test that an unknown category is refused."""
        with pytest.raises(KeyError):
            session.open_view(session.initial_state(catalog), catalog, View.LEARNING_DETAIL, "nope")

    def test_go_home(self, learning: SessionState) -> None:
        """Test returning to the main view keeps the selection."""
        state = session.go_home(learning)

        assert state.view is View.MAIN
        assert state.selected_category_id == "fruits"

    def test_alphabet_view(self, catalog: Catalog, learning: SessionState) -> None:
        """Test opening the alphabet room."""
        assert session.open_view(learning, catalog, View.ALPHABET).view is View.ALPHABET

    def test_next_wraps_to_first(self, catalog: Catalog, learning: SessionState) -> None:
        """Test that next on the last item shows the first."""
        count = len(catalog.get("fruits").items)
        state = learning
        for _ in range(count - 1):
            state = session.advance_item(state, catalog, Direction.NEXT)
        assert state.item_index == count - 1

        state = session.advance_item(state, catalog, Direction.NEXT)

        assert state.item_index == 0

    def test_prev_wraps_to_last(self, catalog: Catalog, learning: SessionState) -> None:
        """Test that prev on the first item shows the last."""
        state = session.advance_item(learning, catalog, Direction.PREV)

        assert state.item_index == len(catalog.get("fruits").items) - 1
        assert session.current_item(state, catalog).name == "Watermelon"

    def test_advance_clears_item_view(self, catalog: Catalog, learning: SessionState) -> None:
        """Test that moving to another item hides its reveal, image and fact."""
        state = replace(
            session.toggle_localized(learning),
            item_image=ImageAsset(b"x"),
            fun_fact="Apples float!",
        )

        state = session.advance_item(state, catalog, Direction.NEXT)

        assert state.show_localized is False
        assert state.item_image is None
        assert state.fun_fact is None

    def test_select_category_resets_index(self, catalog: Catalog, learning: SessionState) -> None:
        """Test that switching category starts at its first item."""
        state = session.advance_item(learning, catalog, Direction.NEXT)
        state = session.toggle_localized(state)

        state = session.select_category(state, catalog, "animals")

        assert state.item_index == 0
        assert state.show_localized is False
        assert state.selected_category_id == "animals"

    def test_select_unknown_category(self, catalog: Catalog, learning: SessionState) -> None:
        """Test that an unknown category is refused."""
        with pytest.raises(KeyError):
            session.select_category(learning, catalog, "nope")

    def test_show_item(self, catalog: Catalog, learning: SessionState) -> None:
        """Test jumping to an item."""
        state = session.show_item(learning, catalog, "fruits-orange")

        assert session.current_item(state, catalog).name == "Orange"

        with pytest.raises(KeyError):
            session.show_item(state, catalog, "animals-cat")

    def test_toggle_localized(self, learning: SessionState) -> None:
        """Test flipping the Persian reveal twice."""
        state = session.toggle_localized(learning)
        assert state.show_localized is True
        assert session.toggle_localized(state).show_localized is False


class TestGames:
    """Test suite for game transitions."""

    def test_game_flow(self, catalog: Catalog) -> None:
        """Test picking a game, a category and earning points."""
        state = session.open_view(session.initial_state(catalog), catalog, View.GAME_TYPES)

        state = session.choose_game(state, GameType.QUIZ)
        assert state.view is View.GAME_CATS
        assert state.selected_game is GameType.QUIZ

        state = session.open_view(state, catalog, View.GAME_ACTIVE, "animals")
        assert state.view is View.GAME_ACTIVE
        assert state.selected_category_id == "animals"

        state = session.award_point(session.award_point(state))
        assert state.score == 2

    def test_game_requires_category(self, catalog: Catalog) -> None:
        """Test that an active game needs a known category."""
        with pytest.raises(KeyError):
            session.open_view(session.initial_state(catalog), catalog, View.GAME_ACTIVE)
