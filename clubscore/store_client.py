from __future__ import annotations

from collections.abc import Iterable, Mapping
import logging
from typing import Any

import httpx

from .config import Settings

logger = logging.getLogger(__name__)

_COMPETITION_EVENT_TYPES = ("个人赛", "团体赛", "individual", "team")


class ScoreStoreError(RuntimeError):
    pass


class ScoreStoreClient:
    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self._settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.store_base_url.rstrip("/"),
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "ScoreStoreClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _select(self, table: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        api_key = self._settings.store_api_key.strip()
        if not api_key:
            raise ScoreStoreError(
                "CLUBSCORE_STORE_API_KEY is not configured. Set it in the environment or .env."
            )

        query_params: dict[str, Any] = {"select": "*"}
        if params:
            query_params.update({k: v for k, v in params.items() if v is not None})

        path = f"/rest/v1/{table.lstrip('/')}"
        try:
            response = await self._client.get(
                path,
                params=query_params,
                headers={"apikey": api_key, "Authorization": f"Bearer {api_key}"},
            )
        except httpx.HTTPError as exc:
            logger.warning("Record store request for %s failed: %s", table, exc)
            raise ScoreStoreError(f"Record store request failed for {table}: {exc}") from exc

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Record store returned %s for %s", exc.response.status_code, table
            )
            raise ScoreStoreError(
                f"Record store request failed ({exc.response.status_code}) for {table}"
            ) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise ScoreStoreError(f"Record store returned non-JSON payload for {table}") from exc

        if isinstance(payload, dict) and payload.get("message"):
            raise ScoreStoreError(f"Record store error for {table}: {payload['message']}")
        if not isinstance(payload, list):
            raise ScoreStoreError(f"Record store returned unexpected payload for {table}")
        return [row for row in payload if isinstance(row, dict)]

    async def get_competition(self, competition_id: str) -> dict[str, Any] | None:
        rows = await self._select("events", params={"id": f"eq.{competition_id}"})
        return rows[0] if rows else None

    async def list_competitions(self, ended_before: str | None = None) -> list[dict[str, Any]]:
        return await self._select(
            "events",
            params={
                "event_type": f"in.({','.join(_COMPETITION_EVENT_TYPES)})",
                "end_time": f"lt.{ended_before}" if ended_before else None,
                "order": "end_time.desc",
            },
        )

    async def get_member_scores(self, competition_id: str) -> list[dict[str, Any]]:
        return await self._select("scores", params={"event_id": f"eq.{competition_id}"})

    async def get_guest_scores(self, competition_id: str) -> list[dict[str, Any]]:
        return await self._select("guest_scores", params={"event_id": f"eq.{competition_id}"})

    async def get_profiles(self, player_ids: Iterable[str]) -> dict[str, dict[str, Any]]:
        ids = sorted({pid for pid in player_ids if pid})
        if not ids:
            return {}
        rows = await self._select(
            "user_profiles",
            params={"id": f"in.({','.join(ids)})", "select": "id,full_name"},
        )
        return {str(row["id"]): row for row in rows if row.get("id") is not None}

    async def get_player_scores(self, player_id: str) -> list[dict[str, Any]]:
        return await self._select(
            "scores",
            params={"user_id": f"eq.{player_id}", "order": "competition_date.desc"},
        )
