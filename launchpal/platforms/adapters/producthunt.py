# launchpal/platforms/adapters/producthunt.py
"""
GraphQL v2 API client: client-credentials auth, post creation, post metrics
and trending lists. No retries; every failure surfaces as PlatformAPIError.
"""

import time
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from launchpal.platforms.adapters.base import PlatformAdapter, ProductDraft
from launchpal.shared.config import settings
from launchpal.shared.errors import PlatformAPIError
from launchpal.shared.logging import get_logger

logger = get_logger("platforms.producthunt")

CREATE_POST_MUTATION = """
mutation CreatePost($input: CreatePostInput!) {
  createPost(input: $input) {
    id
    slug
    url
  }
}
"""

POST_METRICS_QUERY = """
query GetPost($id: ID!) {
  post(id: $id) {
    votesCount
    commentsCount
    rank
  }
}
"""

TRENDING_QUERY = """
query GetTrending($first: Int!, $order: PostsOrder!) {
  posts(first: $first, order: $order) {
    edges {
      node {
        id
        name
        tagline
        url
        votesCount
        commentsCount
      }
    }
  }
}
"""

TRENDING_ORDER = {
    "day": "VOTES_COUNT",
    "week": "WEEKLY_RANK",
    "month": "RANKING",
}


def engagement_score(votes: int, comments: int) -> float:
    return (votes + comments * 2) / 100


class ProductHuntAdapter(PlatformAdapter):
    """Async HTTP client for the Product Hunt v2 API."""

    platform_id = "producthunt"

    def __init__(
        self,
        credentials: Optional[Dict[str, Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(credentials)
        self.client_id = self.credentials.get("clientId") or self.credentials.get("client_id", "")
        self.client_secret = self.credentials.get("clientSecret") or self.credentials.get("client_secret", "")
        # a token from the browser login flow short-circuits the exchange
        self._static_token = self.credentials.get("accessToken") or self.credentials.get("access_token")
        self.access_token: Optional[str] = self._static_token
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=settings.HTTP_TIMEOUT_SECONDS, transport=self._transport
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    # ── Auth ──

    async def authenticate(self, force: bool = False) -> str:
        if self.access_token and not force:
            return self.access_token
        if self._static_token and not (self.client_id and self.client_secret):
            return self._static_token

        client = await self._get_client()
        try:
            resp = await client.post(
                settings.PRODUCTHUNT_TOKEN_URL,
                json={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.RequestError as e:
            raise PlatformAPIError(f"Product Hunt authentication failed: {e}") from e

        if resp.status_code >= 400:
            raise PlatformAPIError(
                f"Product Hunt authentication failed (HTTP {resp.status_code})", resp.status_code
            )
        token = resp.json().get("access_token")
        if not token:
            raise PlatformAPIError("Product Hunt authentication failed: no access_token in response")
        self.access_token = token
        logger.info("Product Hunt token acquired", extra={"platform": self.platform_id})
        return token

    # ── Core Request Method ──

    async def _graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        token = await self.authenticate()
        client = await self._get_client()
        try:
            resp = await client.post(
                settings.PRODUCTHUNT_API_URL,
                json={"query": query, "variables": variables},
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.RequestError as e:
            raise PlatformAPIError(f"Product Hunt request failed: {e}") from e

        if resp.status_code >= 400:
            raise PlatformAPIError(
                f"Product Hunt API error (HTTP {resp.status_code}): {resp.text[:200]}",
                resp.status_code,
            )
        body = resp.json()
        if body.get("errors"):
            messages = "; ".join(e.get("message", "unknown error") for e in body["errors"])
            raise PlatformAPIError(f"Product Hunt API error: {messages}", resp.status_code)
        return body.get("data") or {}

    # ── Launch Operations ──

    async def create_product(self, draft: ProductDraft) -> Dict[str, Any]:
        data = await self._graphql(
            CREATE_POST_MUTATION,
            {
                "input": {
                    "name": draft.name,
                    "tagline": draft.tagline,
                    "description": draft.description,
                    "url": draft.website,
                    "media": draft.media,
                }
            },
        )
        post = data.get("createPost")
        if not post:
            raise PlatformAPIError("Product Hunt API error: createPost returned no post")
        return {
            "platform_id": str(post["id"]),
            "url": f"{settings.PRODUCTHUNT_POST_URL}/{post['slug']}",
        }

    async def schedule_launch(self, platform_product_id: str, when: datetime) -> Dict[str, Any]:
        # The public API has no scheduling endpoint; the id is fabricated locally
        # and nothing is sent to Product Hunt.
        return {
            "id": f"ph_launch_{int(time.time() * 1000)}",
            "product_id": platform_product_id,
            "platform": self.platform_id,
            "scheduled_at": when,
            "status": "scheduled",
        }

    async def get_launch_metrics(self, platform_launch_id: str) -> Dict[str, Any]:
        data = await self._graphql(POST_METRICS_QUERY, {"id": platform_launch_id})
        post = data.get("post")
        if not post:
            raise PlatformAPIError(f"Product Hunt post {platform_launch_id} not found")
        votes = int(post.get("votesCount") or 0)
        comments = int(post.get("commentsCount") or 0)
        return {
            "votes": votes,
            "comments": comments,
            "rank": post.get("rank"),
            "engagement": engagement_score(votes, comments),
        }

    async def get_trending(self, period: str = "day", limit: int = 10) -> List[Dict[str, Any]]:
        data = await self._graphql(
            TRENDING_QUERY, {"first": limit, "order": TRENDING_ORDER.get(period, "VOTES_COUNT")}
        )
        edges = (data.get("posts") or {}).get("edges", [])
        return [
            {
                "id": str(e["node"]["id"]),
                "name": e["node"].get("name"),
                "tagline": e["node"].get("tagline"),
                "url": e["node"].get("url"),
                "votes": e["node"].get("votesCount", 0),
                "comments": e["node"].get("commentsCount", 0),
            }
            for e in edges
        ]
