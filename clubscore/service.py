from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
from typing import Any

from .config import Settings, get_settings
from .errors import CompetitionNotFoundError, ScoringInputError
from .models import (
    Competition,
    CompetitionFormat,
    CompetitionResultsResponse,
    CompetitionSummary,
    DataIssue,
    PlayerScoreStats,
    RankingResult,
    ScoreEntry,
)
from .normalizer import NormalizationResult, normalize_entries, parse_competition
from .player_stats import player_score_stats
from .ranking import rank_entries
from .standings import team_standings
from .store_client import ScoreStoreClient
from .summary import select_finished, summarize_competitions

logger = logging.getLogger(__name__)

_PLAYER_ID_KEYS = ("user_id", "player_id", "member_id")


class ScoringService:
    def __init__(self, store: ScoreStoreClient, settings: Settings | None = None):
        self._store = store
        self._settings = settings or get_settings()

    async def competition_results(self, competition_id: str) -> CompetitionResultsResponse:
        competition_row, normalized = await asyncio.gather(
            self._store.get_competition(competition_id),
            self._load_entries(competition_id),
        )
        if competition_row is None:
            raise CompetitionNotFoundError(f"Competition {competition_id} not found.")

        competition, config_issues = parse_competition(competition_row)
        if competition is None:
            raise ScoringInputError(f"Event {competition_id} is not a scored competition.")

        entries = normalized.entries
        issues: list[DataIssue] = list(config_issues) + list(normalized.issues)
        ranking = (
            rank_entries(entries, total_par=competition.total_par) if entries else RankingResult()
        )
        issues.extend(ranking.issues)

        standings = None
        if competition.format is CompetitionFormat.TEAM and entries:
            standings = team_standings(competition, entries, palette=self._settings.team_palette)
            issues.extend(standings.issues)

        return CompetitionResultsResponse(
            generated_at=datetime.now(timezone.utc),
            competition=competition,
            entries=entries,
            ranking=ranking,
            team_standings=standings,
            issues=issues,
        )

    async def dashboard_summaries(
        self,
        limit: int | None = None,
        now: datetime | None = None,
    ) -> list[CompetitionSummary]:
        now = now or datetime.now(timezone.utc)
        limit = limit if limit is not None else self._settings.dashboard_competition_limit

        rows = await self._store.list_competitions(ended_before=now.isoformat())
        competitions: list[Competition] = []
        for row in rows:
            try:
                competition, _ = parse_competition(row)
            except ScoringInputError as exc:
                logger.warning("Skipping unreadable competition record: %s", exc)
                continue
            if competition is not None:
                competitions.append(competition)

        selected = select_finished(competitions, now=now, limit=limit)
        loaded = await asyncio.gather(*(self._load_entries(c.id) for c in selected))
        entries_by_competition: dict[str, list[ScoreEntry]] = {
            competition.id: result.entries for competition, result in zip(selected, loaded)
        }
        return summarize_competitions(
            selected,
            entries_by_competition,
            now=now,
            limit=limit,
            podium_size=self._settings.podium_size,
            palette=self._settings.team_palette,
        )

    async def player_stats(self, player_id: str) -> PlayerScoreStats:
        rows = await self._store.get_player_scores(player_id)
        normalized = normalize_entries(
            rows,
            [],
            fallback_display_name=self._settings.fallback_display_name,
        )
        return player_score_stats(player_id, normalized.entries)

    async def _load_entries(self, competition_id: str) -> NormalizationResult:
        member_rows, guest_rows = await asyncio.gather(
            self._store.get_member_scores(competition_id),
            self._store.get_guest_scores(competition_id),
        )
        profiles = await self._store.get_profiles(_player_ids(member_rows))
        return normalize_entries(
            member_rows,
            guest_rows,
            profiles=profiles,
            competition_id=competition_id,
            fallback_display_name=self._settings.fallback_display_name,
        )


def _player_ids(rows: list[dict[str, Any]]) -> list[str]:
    ids: list[str] = []
    for row in rows:
        for key in _PLAYER_ID_KEYS:
            value = row.get(key)
            if value is not None and str(value).strip():
                ids.append(str(value).strip())
                break
    return ids
