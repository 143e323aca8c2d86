# app/core/cosmic_client.py
import json
import logging
from functools import lru_cache
from typing import Any

import httpx

from app.core.config import get_settings

logger = logging.getLogger(__name__)


class ContentStoreError(Exception):
    """
    Raised when the content API request fails for any reason
    other than "not found".
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ContentNotFoundError(ContentStoreError):
    """
    Raised when the content API reports that nothing matched (HTTP 404).
    """


class CosmicClient:
    """
    Minimal read-only client for the Cosmic v3 REST API.

    Query surface:
      - find(type, filters)      -> list of raw objects
      - find_one(type, filters)  -> single raw object

    Both accept:
      - props: which fields to return
      - depth: relationship expansion depth (e.g. category inside a prompt)

    Cosmic answers 404 when a query matches no objects; that is surfaced
    as ContentNotFoundError so callers can normalize it.
    """

    def __init__(
        self,
        bucket_slug: str,
        read_key: str,
        base_url: str = "https://api.cosmicjs.com/v3",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.read_key = read_key
        self._http = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/buckets/{bucket_slug}",
            timeout=timeout,
            transport=transport,
        )

    def find(
        self,
        object_type: str,
        filters: dict[str, Any] | None = None,
        *,
        props: list[str],
        depth: int | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        query: dict[str, Any] = {"type": object_type}
        if filters:
            query.update(filters)

        params: dict[str, Any] = {
            "read_key": self.read_key,
            "query": json.dumps(query),
            "props": ",".join(props),
        }
        if depth is not None:
            params["depth"] = depth
        if limit is not None:
            params["limit"] = limit

        payload = self._get("/objects", params)
        return payload.get("objects") or []

    def find_one(
        self,
        object_type: str,
        filters: dict[str, Any],
        *,
        props: list[str],
        depth: int | None = None,
    ) -> dict[str, Any]:
        objects = self.find(object_type, filters, props=props, depth=depth, limit=1)
        if not objects:
            raise ContentNotFoundError(f"No {object_type} matched", status_code=404)
        return objects[0]

    def close(self) -> None:
        self._http.close()

    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._http.get(path, params=params)
        except httpx.HTTPError as exc:
            raise ContentStoreError(f"Content API request failed: {exc}") from exc

        if response.status_code == 404:
            raise ContentNotFoundError("Content not found", status_code=404)
        if response.is_error:
            raise ContentStoreError(
                f"Content API returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ContentStoreError("Content API returned invalid JSON") from exc


@lru_cache
def cosmic_client() -> CosmicClient:
    """
    Create the shared Cosmic client with the bucket read key.

    Raises:
        RuntimeError: if COSMIC_BUCKET_SLUG or COSMIC_READ_KEY is not set.
    """
    settings = get_settings()
    if not settings.COSMIC_BUCKET_SLUG or not settings.COSMIC_READ_KEY:
        raise RuntimeError("Missing COSMIC_BUCKET_SLUG / COSMIC_READ_KEY in .env")
    logger.info("Cosmic client configured for bucket %s", settings.COSMIC_BUCKET_SLUG)
    return CosmicClient(
        bucket_slug=settings.COSMIC_BUCKET_SLUG,
        read_key=settings.COSMIC_READ_KEY,
        base_url=settings.COSMIC_API_URL,
        timeout=settings.COSMIC_TIMEOUT_SECONDS,
    )


def close_cosmic_client() -> None:
    """
    Close the shared client if one was created, and forget it.
    Called on application shutdown.
    """
    if cosmic_client.cache_info().currsize:
        cosmic_client().close()
        cosmic_client.cache_clear()
