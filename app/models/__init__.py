from app.models.base import Base
from app.models.beta import BetaApplication
from app.models.catalog import Arc, Book, Issue, Saga, Volume
from app.models.character import Character, CharacterRelationship, CharacterTag, CharacterTagAssignment
from app.models.easter_egg import EasterEgg, UserEasterEggDiscovery
from app.models.post import Post
from app.models.reader import Review, StoryRoute, UserProgress
from app.models.shop import ShopItem
from app.models.timeline import TimelineEvent
from app.models.user import User

# Export all
__all__ = [
    "Base",
    "User",
    "Book",
    "Volume",
    "Saga",
    "Arc",
    "Issue",
    "ShopItem",
    "Character",
    "CharacterRelationship",
    "CharacterTag",
    "CharacterTagAssignment",
    "Post",
    "Review",
    "UserProgress",
    "StoryRoute",
    "EasterEgg",
    "UserEasterEggDiscovery",
    "BetaApplication",
    "TimelineEvent",
]
