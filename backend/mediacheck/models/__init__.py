from mediacheck.models.entities import (
    AIResponse,
    AIResponseStatus,
    AIResponseType,
    Article,
    Base,
    User,
    as_utc,
)

__all__ = [
    "AIResponse",
    "AIResponseStatus",
    "AIResponseType",
    "Article",
    "Base",
    "User",
    "as_utc",
]
