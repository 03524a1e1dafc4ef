"""
Enums for type-safe string constants in the Cellar Pairing backend.
"""

from enum import Enum
from typing import Optional


class FoodCategory(str, Enum):
    """Dish category derived from free-text dish descriptions."""
    RED_MEAT = "red-meat"
    WHITE_MEAT = "white-meat"
    FISH_SEAFOOD = "fish-seafood"
    PASTA = "pasta"
    CHEESE = "cheese"
    VEGETABLES = "vegetables"
    SPICY = "spicy"
    RICH_FATTY = "rich-fatty"
    GRILLED_SMOKED = "grilled-smoked"
    DESSERT = "dessert"
    UNKNOWN = "unknown"


class WineType(str, Enum):
    """Broad wine style used by the pairing rule table."""
    RED = "red"
    WHITE = "white"
    ROSE = "rose"
    SPARKLING = "sparkling"
    DESSERT = "dessert"
    FORTIFIED = "fortified"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["WineType"]:
        """Lenient parse from stored/label text ("Rosé", "RED"). None if unknown."""
        if not value:
            return None
        key = value.strip().lower().replace("é", "e")
        try:
            return cls(key)
        except ValueError:
            return None


class Body(str, Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    FULL = "full"


class Level(str, Enum):
    """Tannin / acidity level."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Sweetness(str, Enum):
    DRY = "dry"
    OFF_DRY = "off-dry"
    MEDIUM = "medium"
    SWEET = "sweet"
    VERY_SWEET = "very_sweet"


class BottleStatus(str, Enum):
    """Inventory status of a user's bottle."""
    IN_CELLAR = "in_cellar"
    CONSUMED = "consumed"
    GIFTED = "gifted"
    OTHER = "other"
