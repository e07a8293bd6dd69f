import motor.motor_asyncio

from core.config import settings

# Collection names
RECIPES = "recipes"
RECIPE_INGREDIENTS = "recipe_ingredients"
RECIPE_INSTRUCTIONS = "recipe_instructions"
RECIPE_LIKES = "recipe_likes"
RECIPE_RATINGS = "recipe_ratings"
RECIPE_COMMENTS = "recipe_comments"
USER_PROFILES = "user_profiles"


def create_client(uri: str = None) -> motor.motor_asyncio.AsyncIOMotorClient:
    """
    ASYNC MongoDB client (Motor). Does not connect until the first operation.
    """
    return motor.motor_asyncio.AsyncIOMotorClient(
        uri or settings.MONGODB_URI,
        tls=settings.MONGODB_TLS,
        serverSelectionTimeoutMS=settings.MONGODB_TIMEOUT_MS,
        uuidRepresentation="standard",
    )
