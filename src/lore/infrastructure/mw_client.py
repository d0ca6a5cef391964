import asyncio
import json
from datetime import datetime, timezone
from typing import Any

import aiohttp
from aiohttp import ContentTypeError

from src.config.logger_config import logger
from src.config.settings import DEFAULT_USER_AGENT
from src.lore.domain.models import SearchResult, WikiPage, WikiSource
from src.lore.domain.rules import (
    CATEGORY_PREFIX,
    build_canonical_url,
    sanitize_snippet,
    strip_category_prefix,
)
from src.lore.infrastructure.event_sink import ApiEventJsonlSink, WikiApiEvent

SEARCH_PROPS = "title|snippet|size|wordcount|timestamp"


class WikiRequestError(Exception):
    """A single wiki request failed at the transport level (non-2xx, network, timeout)."""

    def __init__(self, message: str, *, status: int | None = None, source_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.source_id = source_id

    def __str__(self) -> str:
        prefix = f"[{self.source_id}] " if self.source_id else ""
        if self.status is not None:
            return f"{prefix}HTTP {self.status}: {self.message}"
        return f"{prefix}{self.message}"


class MediaWikiClient:
    def __init__(
        self,
        source: WikiSource,
        *,
        timeout: aiohttp.ClientTimeout | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        event_sink: ApiEventJsonlSink | None = None,
    ) -> None:
        self.source = source
        self.timeout = timeout
        self.user_agent = user_agent
        self.event_sink = event_sink

    async def search(
        self,
        session: aiohttp.ClientSession,
        query: str,
        limit: int = 10,
    ) -> list[SearchResult]:
        params = {
            "action": "query",
            "list": "search",
            "srsearch": query,
            "srlimit": str(limit),
            "srprop": SEARCH_PROPS,
        }
        data = await self._fetch(session, params, operation="search")
        items = _query_section(data, "search")
        if not isinstance(items, list):
            return []

        results: list[SearchResult] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            title = str(item.get("title") or "").strip()
            if not title:
                continue
            results.append(
                SearchResult(
                    title=title,
                    snippet=sanitize_snippet(str(item.get("snippet") or "")),
                    size=_as_int(item.get("size")),
                    wordcount=_as_int(item.get("wordcount")),
                    timestamp=str(item.get("timestamp") or ""),
                    url=build_canonical_url(title, self.source.base_url),
                )
            )
        return results

    async def get_page(self, session: aiohttp.ClientSession, title: str) -> WikiPage | None:
        params = {
            "action": "query",
            "prop": "extracts|info|categories|images",
            "titles": title,
            "exintro": "true",
            "explaintext": "true",
            "exsectionformat": "plain",
            "inprop": "url",
            "cllimit": "50",
            "imlimit": "10",
        }
        data = await self._fetch(session, params, operation="get_page")
        pages = _query_section(data, "pages")
        if isinstance(pages, dict):
            pages = list(pages.values())
        if not isinstance(pages, list) or not pages:
            logger.debug("[{}] No pages section for '{}'", self.source.id, title)
            return None

        page = pages[0]
        if not isinstance(page, dict) or "missing" in page or "invalid" in page:
            logger.info("[{}] Page '{}' not found.", self.source.id, title)
            return None

        categories = tuple(
            strip_category_prefix(str(cat.get("title")))
            for cat in page.get("categories") or []
            if isinstance(cat, dict) and str(cat.get("title") or "").strip()
        )
        images = tuple(
            str(img.get("title")).strip()
            for img in page.get("images") or []
            if isinstance(img, dict) and str(img.get("title") or "").strip()
        )
        return WikiPage(
            title=str(page.get("title") or title),
            extract=str(page.get("extract") or ""),
            full_url=str(page.get("fullurl") or build_canonical_url(title, self.source.base_url)),
            categories=categories,
            images=images,
            last_modified=str(page.get("touched") or ""),
        )

    async def search_categories(
        self,
        session: aiohttp.ClientSession,
        category: str,
        limit: int = 20,
    ) -> list[str]:
        params = {
            "action": "query",
            "list": "categorymembers",
            "cmtitle": f"{CATEGORY_PREFIX}{category}",
            "cmlimit": str(limit),
            "cmtype": "page",
        }
        data = await self._fetch(session, params, operation="search_categories")
        members = _query_section(data, "categorymembers")
        if not isinstance(members, list):
            return []
        return [
            str(member.get("title")).strip()
            for member in members
            if isinstance(member, dict) and str(member.get("title") or "").strip()
        ]

    async def _fetch(
        self,
        session: aiohttp.ClientSession,
        params: dict[str, str],
        *,
        operation: str,
    ) -> dict[str, Any]:
        request_params = {**params, "format": "json", "origin": "*"}
        request_kwargs: dict[str, Any] = {
            "params": request_params,
            "headers": {"User-Agent": self.user_agent},
        }
        if self.timeout is not None:
            request_kwargs["timeout"] = self.timeout

        started_at = datetime.now(timezone.utc).isoformat()
        try:
            async with session.get(self.source.api_url, **request_kwargs) as resp:
                if not 200 <= resp.status < 300:
                    body = await resp.text()
                    await self._write_event(
                        operation,
                        request_params,
                        started_at,
                        status=resp.status,
                        outcome="http_error",
                        error=body,
                    )
                    logger.warning("[{}] HTTP {} for {}", self.source.id, resp.status, operation)
                    raise WikiRequestError(
                        getattr(resp, "reason", None) or "Request failed",
                        status=resp.status,
                        source_id=self.source.id,
                    )

                try:
                    data = await resp.json()
                except (ContentTypeError, json.JSONDecodeError, ValueError) as exc:
                    await self._write_event(
                        operation,
                        request_params,
                        started_at,
                        status=resp.status,
                        outcome="malformed_json",
                        error=exc,
                    )
                    logger.warning("[{}] Malformed JSON for {}: {}", self.source.id, operation, exc)
                    return {}

                await self._write_event(
                    operation,
                    request_params,
                    started_at,
                    status=resp.status,
                    outcome="success",
                )
                if not isinstance(data, dict):
                    logger.warning("[{}] Unexpected payload type for {}", self.source.id, operation)
                    return {}
                return data

        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            await self._write_event(
                operation,
                request_params,
                started_at,
                status=getattr(exc, "status", None),
                outcome="transport_error",
                error=exc,
            )
            logger.warning("[{}] Request error for {}: {}", self.source.id, operation, exc)
            raise WikiRequestError(
                str(exc) or type(exc).__name__,
                status=getattr(exc, "status", None),
                source_id=self.source.id,
            ) from exc

    async def _write_event(
        self,
        operation: str,
        params: dict[str, str],
        started_at: str,
        *,
        status: int | None,
        outcome: str,
        error: Exception | str | None = None,
    ) -> None:
        if self.event_sink is None:
            return
        if isinstance(error, Exception):
            error_type, error_message = type(error).__name__, str(error)
        elif error is not None:
            error_type, error_message = "HTTPError", error[:500]
        else:
            error_type = error_message = None
        event = WikiApiEvent(
            source_id=self.source.id,
            operation=operation,
            api_url=self.source.api_url,
            params=params,
            outcome=outcome,
            status=status,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc).isoformat(),
            error_type=error_type,
            error_message=error_message,
        )
        try:
            await self.event_sink.write_event(event)
        except Exception as exc:
            logger.warning("Failed to persist wiki API event: {}", exc)


def _query_section(data: Any, key: str) -> Any:
    if not isinstance(data, dict):
        return None
    query = data.get("query")
    if not isinstance(query, dict):
        return None
    return query.get(key)


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0
