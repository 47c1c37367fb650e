"""Catalog controller: the owner of the catalog and the session state.

The controller receives learner intents, drives category expansion, image
generation and speech, and publishes every new ``SessionState`` and every
``Notice`` to registered listeners.

Each long-running operation kind (expand, generate image, speak) is
single-flight: while its busy flag is set, a new request of the same kind
is ignored. Flags are released in ``finally`` blocks, so no failure can
leave one stuck. Remote failures are classified and turned into notices
here; they never propagate to the caller.

Typical usage:
    controller = CatalogController(store, cache, gemini, gemini, speech, gemini, credentials)
    controller.add_state_listener(render)
    controller.add_notice_listener(show_toast)

    controller.navigate(View.LEARNING_DETAIL)
    await controller.expand_current_category()
    controller.advance_item(Direction.NEXT)
    await controller.generate_image_for_current_item()
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import replace

from kidsjoy.assets.image_cache import AssetCache, ImageAsset
from kidsjoy.audio.speech import SpeechOrchestrator, SpeechOutcome
from kidsjoy.catalog.merge import merge_drafts
from kidsjoy.catalog.models import Catalog, Category, Item
from kidsjoy.catalog.store import CatalogStore
from kidsjoy.controller import session
from kidsjoy.controller.notices import FAILURE_NOTICES, Notice, NoticeKind
from kidsjoy.controller.session import ALPHABET, Direction, GameType, SessionState, View
from kidsjoy.core.i18n import Translator, get_translator
from kidsjoy.core.logging_system import get_logger
from kidsjoy.services.base import (
    Empty,
    Failure,
    FailureReason,
    GenerationResult,
    IContentExpander,
    ICredentialProvider,
    IImageGenerator,
    ITextGenerator,
    Success,
)
from kidsjoy.services.errors import classify_exception
from kidsjoy.services.gemini import fun_fact_prompt

logger = get_logger(__name__)

StateListener = Callable[[SessionState], None]
NoticeListener = Callable[[Notice], None]


class CatalogController:
    """Owns the catalog and session state and handles learner intents.

    Attributes:
        catalog: Current catalog (read-only from outside).
        state: Current session state (read-only from outside).
    """

    def __init__(
        self,
        store: CatalogStore,
        cache: AssetCache,
        expander: IContentExpander,
        image_generator: IImageGenerator,
        speech: SpeechOrchestrator,
        text_generator: ITextGenerator,
        credentials: ICredentialProvider,
        translator: Translator | None = None,
    ) -> None:
        """Initialize the controller and load the catalog.

        Args:
            store: Persisted catalog store.
            cache: Generated image cache.
            expander: Category expansion capability.
            image_generator: Image generation capability.
            speech: Speech orchestrator.
            text_generator: Fun-fact capability.
            credentials: API key provider, used for the key-selection flow.
            translator: Translator for notices (defaults to the global one).
        """
        self._store = store
        self._cache = cache
        self._expander = expander
        self._image_generator = image_generator
        self._speech = speech
        self._text_generator = text_generator
        self._credentials = credentials
        self._translator = translator or get_translator()

        self._catalog = store.load()
        self._state = session.initial_state(self._catalog)

        self._state_listeners: list[StateListener] = []
        self._notice_listeners: list[NoticeListener] = []

        logger.info("CatalogController ready: %d categories", len(self._catalog))

    # Observation

    @property
    def catalog(self) -> Catalog:
        """Current catalog."""
        return self._catalog

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def current_category(self) -> Category | None:
        """Selected category, if any."""
        return session.selected_category(self._state, self._catalog)

    @property
    def current_item(self) -> Item | None:
        """Displayed item, if any."""
        return session.current_item(self._state, self._catalog)

    def add_state_listener(self, listener: StateListener) -> None:
        """Register a callback invoked with every new state."""
        self._state_listeners.append(listener)

    def add_notice_listener(self, listener: NoticeListener) -> None:
        """Register a callback invoked with every notice."""
        self._notice_listeners.append(listener)

    def _set_state(self, new_state: SessionState) -> None:
        if new_state == self._state:
            return
        self._state = new_state
        self._publish()

    def _publish(self) -> None:
        for listener in list(self._state_listeners):
            try:
                listener(self._state)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("State listener failed: %s", e)

    def _notify(self, kind: NoticeKind, key: str, operation: str = "", **kwargs) -> Notice:
        notice = Notice(
            kind=kind,
            key=key,
            message=self._translator.translate(key, **kwargs),
            operation=operation,
        )
        for listener in list(self._notice_listeners):
            try:
                listener(notice)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("Notice listener failed: %s", e)
        return notice

    # Busy flags and failures

    @asynccontextmanager
    async def _busy(self, flag: str) -> AsyncIterator[None]:
        """Hold a busy flag for the duration of the block."""
        self._set_state(replace(self._state, **{flag: True}))
        try:
            yield
        finally:
            self._set_state(replace(self._state, **{flag: False}))

    async def _ensure_credentials(self, operation: str) -> bool:
        """Make sure an API key exists before a remote call.

        Runs the key-selection flow when no key is configured.
        """
        if self._credentials.has_api_key():
            return True
        if await self._credentials.request_new_key():
            return True
        self._notify(NoticeKind.CREDENTIALS, "errors.credentials", operation)
        return False

    async def _handle_failure(self, failure: Failure, operation: str) -> None:
        """Surface a classified failure to the learner."""
        logger.warning("%s failed (%s): %s", operation, failure.reason.value, failure.message)
        kind, key = FAILURE_NOTICES[failure.reason]
        self._notify(kind, key, operation)
        if failure.reason is FailureReason.CREDENTIAL:
            # No automatic retry; the learner triggers the operation again
            await self._credentials.request_new_key()

    @staticmethod
    async def _call_remote(
        operation: str, method: Callable[..., Awaitable[GenerationResult]], *args
    ) -> GenerationResult:
        """Await a remote call, converting stray exceptions to failures."""
        try:
            return await method(*args)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Unexpected error during %s: %s", operation, e)
            return Failure(classify_exception(e), str(e))

    # Navigation intents

    def navigate(self, view: View, category_id: str | None = None) -> SessionState:
        """Move to a view.

        Args:
            view: Target view.
            category_id: Category for learning or active-game views.

        Returns:
            The new state.

        Raises:
            KeyError: If ``category_id`` is not in the catalog.
        """
        self._set_state(session.open_view(self._state, self._catalog, view, category_id))
        if self._state.view is View.LEARNING_DETAIL:
            self._load_cached_image()
        return self._state

    def go_home(self) -> SessionState:
        """Return to the main view."""
        return self.navigate(View.MAIN)

    def select_category(self, category_id: str) -> SessionState:
        """Switch the selected category (index resets to 0).

        Raises:
            KeyError: If ``category_id`` is not in the catalog.
        """
        self._set_state(session.select_category(self._state, self._catalog, category_id))
        self._load_cached_image()
        return self._state

    def advance_item(self, direction: Direction | int) -> SessionState:
        """Show the next or previous item, wrapping at both ends."""
        self._set_state(session.advance_item(self._state, self._catalog, Direction(direction)))
        self._load_cached_image()
        return self._state

    def show_item(self, item_id: str) -> SessionState:
        """Display a specific item of the selected category.

        Raises:
            KeyError: If the item is not in the selected category.
        """
        self._set_state(session.show_item(self._state, self._catalog, item_id))
        self._load_cached_image()
        return self._state

    def toggle_localized_view(self) -> SessionState:
        """Reveal or hide the Persian name of the displayed item."""
        self._set_state(session.toggle_localized(self._state))
        return self._state

    def choose_game(self, game: GameType) -> SessionState:
        """Pick a game type and move to the game category picker."""
        self._set_state(session.choose_game(self._state, game))
        return self._state

    def choose_game_category(self, category_id: str) -> SessionState:
        """Start the selected game with a category.

        Raises:
            KeyError: If ``category_id`` is not in the catalog.
        """
        return self.navigate(View.GAME_ACTIVE, category_id)

    def leave_game(self) -> SessionState:
        """Leave the active game and return to the game-type picker."""
        return self.navigate(View.GAME_TYPES)

    def award_point(self, points: int = 1) -> SessionState:
        """Add to the learner's score."""
        self._set_state(session.award_point(self._state, points))
        return self._state

    def _load_cached_image(self) -> None:
        """Show the cached image of the displayed item, or none.

        Navigation intents are synchronous, so this single-row lookup runs
        inline; the async image operations read the cache in a worker thread.
        """
        item = self.current_item
        asset = self._cache.get(self._cache.key_for(item.id)) if item else None
        if asset != self._state.item_image:
            self._set_state(replace(self._state, item_image=asset))

    # Category expansion

    async def expand_current_category(self) -> tuple[Item, ...] | None:
        """Ask the expansion service for new items for the selected category.

        Returns:
            Items added (possibly empty), or None if the request was ignored
            because an expansion is already in flight or nothing is selected.
        """
        if self._state.expanding:
            logger.debug("Expansion already in flight, ignoring request")
            return None

        category = self.current_category
        if category is None:
            return None

        async with self._busy("expanding"):
            if not await self._ensure_credentials("expand"):
                return ()

            result = await self._call_remote(
                "expand", self._expander.expand, category.name, category.item_names
            )

            if isinstance(result, Failure):
                await self._handle_failure(result, "expand")
                return ()
            if isinstance(result, Empty) or not result.payload:
                logger.info("Expansion of %s produced no items", category.name)
                return ()

            # Merge into the catalog as it is now, not as it was at request time
            target = self._catalog.get(category.id)
            if target is None:
                logger.warning("Category %s disappeared during expansion", category.id)
                return ()

            merge = merge_drafts(target, result.payload)
            if merge.added:
                self._catalog = self._catalog.replace_category(merge.category)
                await asyncio.to_thread(self._store.save, self._catalog)
                self._publish()
                logger.info("Added %d items to %s", len(merge.added), category.name)
            return merge.added

    # Images

    async def ensure_image(self, item: Item, category: Category, generate: bool = False) -> ImageAsset | None:
        """Get the image of an item, generating it only when asked.

        Args:
            item: Item to illustrate.
            category: Owning category (its name is sent with the request).
            generate: Call the image generator on a cache miss.

        Returns:
            The cached or newly generated image, or None.
        """
        key = self._cache.key_for(item.id)
        cached = await asyncio.to_thread(self._cache.get, key)
        if cached is not None:
            logger.debug("Image cache hit for %s", item.id)
            return cached
        if not generate:
            return None

        if not await self._ensure_credentials("image"):
            return None

        result = await self._call_remote(
            "image", self._image_generator.generate_image, item.name, category.name
        )
        if isinstance(result, Success):
            await asyncio.to_thread(self._cache.set, key, result.payload)
            return result.payload

        if isinstance(result, Empty):
            result = Failure(FailureReason.NO_CONTENT, "empty image response")
        await self._handle_failure(result, "image")
        return None

    async def generate_image_for_current_item(self) -> ImageAsset | None:
        """Show an image for the displayed item, generating it on a cache miss.

        Returns:
            The image, or None if the request was ignored or failed.
        """
        if self._state.generating_image:
            logger.debug("Image generation already in flight, ignoring request")
            return None

        item = self.current_item
        category = self.current_category
        if item is None or category is None:
            return None

        async with self._busy("generating_image"):
            asset = await self.ensure_image(item, category, generate=True)

        # Only show it if the learner is still looking at the same item
        if asset is not None and self.current_item == item:
            self._set_state(replace(self._state, item_image=asset))
        return asset

    # Speech and facts

    async def speak(self, text: str) -> SpeechOutcome:
        """Speak text through the speech orchestrator.

        Returns:
            How the text was delivered; DROPPED if speech is in flight.
        """
        if self._state.speaking or self._speech.is_speaking:
            return SpeechOutcome.DROPPED
        if not text:
            return SpeechOutcome.DROPPED

        async with self._busy("speaking"):
            return await self._speech.speak(text)

    async def speak_current_item(self) -> SpeechOutcome:
        """Speak the English name of the displayed item."""
        item = self.current_item
        return await self.speak(item.name if item else "")

    async def speak_letter(self, letter: str) -> SpeechOutcome:
        """Speak a letter from the alphabet room.

        Raises:
            ValueError: If ``letter`` is not a single A-Z letter.
        """
        letter = letter.upper()
        if len(letter) != 1 or letter not in ALPHABET:
            raise ValueError(f"Not an alphabet letter: {letter!r}")
        return await self.speak(letter)

    async def fetch_fun_fact(self) -> str | None:
        """Fetch a fun fact about the displayed item.

        Returns:
            The fact (or the default phrase for an empty answer), or None
            on failure.
        """
        item = self.current_item
        category = self.current_category
        if item is None or category is None:
            return None

        result = await self._call_remote(
            "fact", self._text_generator.generate_text, fun_fact_prompt(item.name, category.name)
        )
        if isinstance(result, Failure):
            await self._handle_failure(result, "fact")
            return None

        fact = result.payload if isinstance(result, Success) else self._translator.translate(
            "learning.fun_fact_default"
        )
        if self.current_item == item:
            self._set_state(replace(self._state, fun_fact=fact))
        return fact
