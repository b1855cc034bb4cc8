from typing import Any, TypedDict

from launchpal.platforms.adapters.base import PlatformAdapter
from launchpal.platforms.adapters.producthunt import ProductHuntAdapter
from launchpal.shared.errors import UnsupportedPlatform

class PlatformMeta(TypedDict, total=False):
    id: str
    name: str
    description: str
    required_credentials: list[str]
    launch_tips: list[str]

PLATFORMS: list[PlatformMeta] = [
    {
        "id": "producthunt",
        "name": "Product Hunt",
        "description": "Launch tech products to a community of early adopters",
        "required_credentials": ["clientId", "clientSecret"],
        "launch_tips": [
            "Launch on Tuesday at 12:01 AM PST",
            "Prepare high-quality gallery images (1270x760px)",
            "Engage with comments in first 2 hours",
        ],
    },
    {
        "id": "hackernews",
        "name": "Hacker News",
        "description": "Share with the tech-savvy community",
        "required_credentials": ["username", "password"],
        "launch_tips": [
            "Post between 7-9 AM PST on weekdays",
            "Use Show HN format for new products",
            "Focus on technical innovation",
        ],
    },
    {
        "id": "reddit",
        "name": "Reddit",
        "description": "Launch on relevant subreddits",
        "required_credentials": ["clientId", "clientSecret", "username", "password"],
        "launch_tips": [
            "Read subreddit rules first",
            "Engage authentically with community",
            "Avoid overly promotional language",
        ],
    },
    {
        "id": "indiehackers",
        "name": "Indie Hackers",
        "description": "Share with the indie maker community",
        "required_credentials": ["apiKey"],
        "launch_tips": [
            "Share your building journey",
            "Be transparent about metrics",
            "Help others in the community",
        ],
    },
]

# platform id -> adapter class; catalog entries missing here are "coming soon"
ADAPTERS: dict[str, type[PlatformAdapter]] = {
    "producthunt": ProductHuntAdapter,
}

def get_platform_meta(platform: str) -> PlatformMeta | None:
    return next((p for p in PLATFORMS if p["id"] == platform), None)

def is_known_platform(platform: str) -> bool:
    return get_platform_meta(platform) is not None

def get_platform_adapter(platform: str, credentials: dict[str, Any] | None, **kwargs) -> PlatformAdapter:
    """
    Resolve a platform id to a ready adapter instance.
    Raises UnsupportedPlatform before constructing anything when no adapter exists.
    """
    adapter_cls = ADAPTERS.get(platform)
    if adapter_cls is None:
        meta = get_platform_meta(platform)
        if meta:
            raise UnsupportedPlatform(f"{meta['name']} adapter coming soon")
        raise UnsupportedPlatform(f"Unknown platform: {platform}")
    return adapter_cls(credentials or {}, **kwargs)
