"""Decide whether a modification request reshapes the dish or tweaks it.

Keyword matching against the request text. Transformative requests change the
dish type, format or diet; everything else is a minor modification that keeps
the dish's name and structure.
"""

DISH_TYPE_KEYWORDS = (
    "dessert",
    "breakfast",
    "appetizer",
    "soup",
    "salad",
    "pasta",
    "pizza",
    "turn this into",
    "make it a",
    "bento box",
    "finger food",
)

DIETARY_KEYWORDS = (
    "vegan",
    "vegetarian",
    "pescatarian",
    "keto",
    "paleo",
    "low carb",
    "low fat",
    "high protein",
    "gluten-free",
    "dairy-free",
    "low sugar",
    "diabetic",
)

STYLE_KEYWORDS = ("spicy", "mexican", "italian", "asian", "indian")


def _mentions(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def is_style_modification(modification: str) -> bool:
    text = modification.lower()
    return "style" in text and _mentions(text, STYLE_KEYWORDS)


def is_transformative(modification: str) -> bool:
    text = modification.lower()
    if is_style_modification(text):
        return False
    return _mentions(text, DISH_TYPE_KEYWORDS) or _mentions(text, DIETARY_KEYWORDS)
