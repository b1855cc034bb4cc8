# launchpal/platforms/adapters/base.py

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ProductDraft(BaseModel):
    name: str
    tagline: str
    description: str
    website: str
    media: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)


class PlatformAdapter(ABC):
    """One external launch platform behind the four generic launch operations.

    Adapters own their platform access token. ``authenticate`` is idempotent
    and keeps the token until a caller asks for a fresh one.
    """

    platform_id: str = ""

    def __init__(self, credentials: Optional[Dict[str, Any]] = None):
        self.credentials = credentials or {}

    @abstractmethod
    async def authenticate(self, force: bool = False) -> str:
        """Return a platform access token, exchanging credentials if needed."""
        ...

    @abstractmethod
    async def create_product(self, draft: ProductDraft) -> Dict[str, Any]:
        """Create the product on the platform.

        Returns:
            ``{"platform_id": str, "url": str}``
        """
        ...

    @abstractmethod
    async def schedule_launch(self, platform_product_id: str, when: datetime) -> Dict[str, Any]:
        """Schedule a launch. Returns at least ``{"id": str, "status": str}``."""
        ...

    @abstractmethod
    async def get_launch_metrics(self, platform_launch_id: str) -> Dict[str, Any]:
        """Fetch votes/comments/rank and the derived engagement score."""
        ...

    async def get_trending(self, period: str = "day", limit: int = 10) -> List[Dict[str, Any]]:
        raise NotImplementedError(f"{self.platform_id} does not expose trending products")

    async def close(self) -> None:
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()
