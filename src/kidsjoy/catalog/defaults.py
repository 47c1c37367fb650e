"""Built-in starter catalog.

Used on first launch and whenever the persisted catalog cannot be read.
Item identifiers here are stable slugs; generated items get minted ids
(see ``kidsjoy.catalog.merge``).
"""

from kidsjoy.catalog.models import Catalog, Category, Item

# (id, name, icon, color, [(slug, name, persian name, emoji, color), ...])
_STARTER_DATA: list[tuple[str, str, str, str, list[tuple[str, str, str, str, str]]]] = [
    (
        "fruits",
        "Fruits",
        "🍎",
        "bg-red-400",
        [
            ("apple", "Apple", "سیب", "🍎", "bg-red-100"),
            ("banana", "Banana", "موز", "🍌", "bg-yellow-100"),
            ("grapes", "Grapes", "انگور", "🍇", "bg-purple-100"),
            ("orange", "Orange", "پرتقال", "🍊", "bg-orange-100"),
            ("strawberry", "Strawberry", "توت فرنگی", "🍓", "bg-pink-100"),
            ("watermelon", "Watermelon", "هندوانه", "🍉", "bg-green-100"),
        ],
    ),
    (
        "animals",
        "Animals",
        "🦁",
        "bg-amber-400",
        [
            ("cat", "Cat", "گربه", "🐱", "bg-amber-100"),
            ("dog", "Dog", "سگ", "🐶", "bg-amber-100"),
            ("lion", "Lion", "شیر", "🦁", "bg-yellow-100"),
            ("elephant", "Elephant", "فیل", "🐘", "bg-slate-100"),
            ("rabbit", "Rabbit", "خرگوش", "🐰", "bg-pink-100"),
            ("fish", "Fish", "ماهی", "🐟", "bg-blue-100"),
        ],
    ),
    (
        "vehicles",
        "Vehicles",
        "🚗",
        "bg-blue-400",
        [
            ("car", "Car", "ماشین", "🚗", "bg-red-100"),
            ("bus", "Bus", "اتوبوس", "🚌", "bg-yellow-100"),
            ("bicycle", "Bicycle", "دوچرخه", "🚲", "bg-green-100"),
            ("airplane", "Airplane", "هواپیما", "✈️", "bg-sky-100"),
            ("train", "Train", "قطار", "🚆", "bg-slate-100"),
            ("boat", "Boat", "قایق", "⛵", "bg-blue-100"),
        ],
    ),
    (
        "colors",
        "Colors",
        "🎨",
        "bg-pink-400",
        [
            ("red", "Red", "قرمز", "🟥", "bg-red-100"),
            ("blue", "Blue", "آبی", "🟦", "bg-blue-100"),
            ("green", "Green", "سبز", "🟩", "bg-green-100"),
            ("yellow", "Yellow", "زرد", "🟨", "bg-yellow-100"),
            ("purple", "Purple", "بنفش", "🟪", "bg-purple-100"),
        ],
    ),
    (
        "body",
        "Body",
        "🖐️",
        "bg-orange-400",
        [
            ("eye", "Eye", "چشم", "👁️", "bg-white"),
            ("ear", "Ear", "گوش", "👂", "bg-white"),
            ("nose", "Nose", "بینی", "👃", "bg-white"),
            ("hand", "Hand", "دست", "✋", "bg-white"),
            ("foot", "Foot", "پا", "🦶", "bg-white"),
        ],
    ),
    (
        "food",
        "Food",
        "🍞",
        "bg-lime-500",
        [
            ("bread", "Bread", "نان", "🍞", "bg-amber-100"),
            ("milk", "Milk", "شیر", "🥛", "bg-white"),
            ("cheese", "Cheese", "پنیر", "🧀", "bg-yellow-100"),
            ("egg", "Egg", "تخم مرغ", "🥚", "bg-white"),
            ("rice", "Rice", "برنج", "🍚", "bg-white"),
        ],
    ),
]


def build_default_catalog() -> Catalog:
    """Build a fresh copy of the starter catalog.

    Returns:
        Catalog with the built-in categories and items.
    """
    categories = []
    for category_id, name, icon, color, items in _STARTER_DATA:
        categories.append(
            Category(
                id=category_id,
                name=name,
                icon=icon,
                color=color,
                items=tuple(
                    Item(
                        id=f"{category_id}-{slug}",
                        name=item_name,
                        localized_name=persian_name,
                        emoji=emoji,
                        color=item_color,
                    )
                    for slug, item_name, persian_name, emoji, item_color in items
                ),
            )
        )
    return Catalog(categories=tuple(categories))
