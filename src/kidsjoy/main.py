"""KidsJoy - vocabulary learning for children.

Command line entry point. Wires the catalog store, image cache, Gemini
service and speech orchestrator into a ``CatalogController`` and runs one
learner operation per invocation.

Typical usage:
    kidsjoy categories
    kidsjoy expand Fruits
    kidsjoy speak "Banana"
    kidsjoy image Fruits Apple --output apple.png
    kidsjoy fact Animals Lion
"""

import argparse
import asyncio
import getpass
import sys
from pathlib import Path

from kidsjoy.assets.image_cache import AssetCache
from kidsjoy.audio import LocalSpeech, MixerAudioPlayer, SpeechOrchestrator
from kidsjoy.catalog.models import Catalog, Category, Item
from kidsjoy.catalog.store import CatalogStore
from kidsjoy.controller import CatalogController, Notice
from kidsjoy.core.i18n import set_language, t
from kidsjoy.core.logging_system import get_logger, initialize_logging
from kidsjoy.core.resource_path import get_config_path
from kidsjoy.services.credentials import SettingsCredentialProvider
from kidsjoy.services.gemini import GeminiService
from kidsjoy.settings.app_settings import AppSettings, get_app_settings
from kidsjoy.version import get_version

logger = get_logger(__name__)


def prompt_for_api_key() -> str | None:
    """Ask the user for an API key on the terminal.

    Returns:
        The entered key, or None if the user entered nothing.
    """
    if not sys.stdin.isatty():
        return None
    try:
        key = getpass.getpass("Gemini API key (leave empty to cancel): ").strip()
    except (EOFError, KeyboardInterrupt):
        return None
    return key or None


def create_controller(settings: AppSettings, interactive: bool = True) -> CatalogController:
    """Build a controller with the Gemini-backed capabilities.

    Args:
        settings: Application settings.
        interactive: Offer a terminal prompt when no API key is configured.

    Returns:
        Ready controller.
    """
    credentials = SettingsCredentialProvider(settings, prompt=prompt_for_api_key if interactive else None)
    gemini = GeminiService(credentials, settings)
    speech = SpeechOrchestrator(
        gemini,
        MixerAudioPlayer(),
        LocalSpeech(rate=settings.speech_rate),
    )

    return CatalogController(
        store=CatalogStore(),
        cache=AssetCache(epoch=settings.cache_epoch),
        expander=gemini,
        image_generator=gemini,
        speech=speech,
        text_generator=gemini,
        credentials=credentials,
    )


def find_category(controller: CatalogController, name: str) -> Category:
    """Resolve a category by id or display name (case-insensitive).

    Raises:
        KeyError: If no category matches.
    """
    wanted = name.strip().lower()
    for category in controller.catalog:
        if wanted in (category.id.lower(), category.name.lower()):
            return category
    raise KeyError(name)


def find_item(category: Category, name: str) -> Item:
    """Resolve an item by id or display name (case-insensitive).

    Raises:
        KeyError: If no item matches.
    """
    wanted = name.strip().lower()
    for item in category.items:
        if wanted in (item.id.lower(), item.name.lower()):
            return item
    raise KeyError(name)


def print_notice(notice: Notice) -> None:
    """Show a controller notice on stderr."""
    print(notice.message, file=sys.stderr)


def cmd_categories(catalog: Catalog, args: argparse.Namespace) -> int:
    for category in catalog:
        print(f"{category.icon} {category.name} ({len(category.items)})")
        if args.items:
            for item in category.items:
                print(f"    {item.emoji} {item.name} - {item.localized_name}")
    return 0


async def cmd_expand(controller: CatalogController, args: argparse.Namespace) -> int:
    category = find_category(controller, args.category)
    controller.select_category(category.id)

    print(t("learning.expanding"))
    added = await controller.expand_current_category()
    if not added:
        print(t("learning.no_new_items"))
        return 0

    print(t("learning.added_items", count=len(added), category=category.name))
    for item in added:
        print(f"    {item.emoji} {item.name} - {item.localized_name}")
    return 0


async def cmd_speak(controller: CatalogController, args: argparse.Namespace) -> int:
    outcome = await controller.speak(args.text)
    logger.info("Speech outcome: %s", outcome.value)
    return 0


async def cmd_image(controller: CatalogController, args: argparse.Namespace) -> int:
    category = find_category(controller, args.category)
    item = find_item(category, args.item)
    controller.select_category(category.id)
    controller.show_item(item.id)

    asset = await controller.generate_image_for_current_item()
    if asset is None:
        return 1

    extension = asset.mime_type.split("/")[-1] or "png"
    output = Path(args.output) if args.output else Path(f"{item.id}.{extension}")
    output.write_bytes(asset.data)
    print(output)
    return 0


async def cmd_fact(controller: CatalogController, args: argparse.Namespace) -> int:
    category = find_category(controller, args.category)
    item = find_item(category, args.item)
    controller.select_category(category.id)
    controller.show_item(item.id)

    fact = await controller.fetch_fun_fact()
    if fact is None:
        return 1
    print(fact)
    if args.say:
        await controller.speak(fact)
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments (defaults to ``sys.argv[1:]``).

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="KidsJoy - vocabulary learning for children")
    parser.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    parser.add_argument(
        "--language",
        choices=["en", "fa"],
        help="Interface language (overrides the saved setting)",
    )
    parser.add_argument(
        "--no-prompt",
        action="store_true",
        help="Never ask for an API key on the terminal",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    categories = subparsers.add_parser("categories", help="List categories")
    categories.add_argument("--items", action="store_true", help="Also list items")

    expand = subparsers.add_parser("expand", help="Add new words to a category")
    expand.add_argument("category", help="Category id or name")

    speak = subparsers.add_parser("speak", help="Say a word or sentence")
    speak.add_argument("text")

    image = subparsers.add_parser("image", help="Draw an item")
    image.add_argument("category", help="Category id or name")
    image.add_argument("item", help="Item id or name")
    image.add_argument("--output", "-o", help="Output file (default: <item id>.<ext>)")

    fact = subparsers.add_parser("fact", help="Tell a fun fact about an item")
    fact.add_argument("category", help="Category id or name")
    fact.add_argument("item", help="Item id or name")
    fact.add_argument("--say", action="store_true", help="Also speak the fact")

    return parser.parse_args(argv)


ASYNC_COMMANDS = {
    "expand": cmd_expand,
    "speak": cmd_speak,
    "image": cmd_image,
    "fact": cmd_fact,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success).
    """
    args = parse_args(argv)
    initialize_logging(str(get_config_path("logging.yaml")), use_platform_dir=True)
    logger.info("KidsJoy %s starting: %s", get_version(), args.command)

    try:
        settings = get_app_settings()
        if args.language:
            settings.set_language(args.language)
        set_language(settings.language)

        if args.command == "categories":
            return cmd_categories(CatalogStore().load(), args)

        controller = create_controller(settings, interactive=not args.no_prompt)
        controller.add_notice_listener(print_notice)
        return asyncio.run(ASYNC_COMMANDS[args.command](controller, args))
    except KeyError as e:
        print(f"Not found: {e.args[0]}", file=sys.stderr)
        return 2
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
