from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
import logging

from .config import DEFAULT_DASHBOARD_LIMIT, DEFAULT_PODIUM_SIZE, DEFAULT_TEAM_PALETTE
from .models import (
    Competition,
    CompetitionFormat,
    CompetitionSummary,
    ScoreEntry,
    TeamScoringMode,
)
from .ranking import podium, rank_entries
from .standings import team_standings

logger = logging.getLogger(__name__)


def select_finished(
    competitions: Iterable[Competition],
    now: datetime | None = None,
    limit: int = DEFAULT_DASHBOARD_LIMIT,
) -> list[Competition]:
    now = _aware(now or datetime.now(timezone.utc))
    finished = [
        competition
        for competition in competitions
        if competition.end_time is not None and _aware(competition.end_time) < now
    ]
    finished.sort(key=lambda c: c.id)
    finished.sort(key=lambda c: _aware(c.end_time), reverse=True)  # type: ignore[arg-type]
    return finished[: max(0, limit)]


def summarize_competition(
    competition: Competition,
    entries: Iterable[ScoreEntry],
    podium_size: int = DEFAULT_PODIUM_SIZE,
    palette: Sequence[str] = DEFAULT_TEAM_PALETTE,
) -> CompetitionSummary | None:
    entry_list = [entry for entry in entries if entry.competition_id in ("", competition.id)]
    if not entry_list:
        logger.debug("Competition %s has no entries; omitted from summary", competition.id)
        return None

    if competition.format is CompetitionFormat.INDIVIDUAL:
        ranking = rank_entries(entry_list, total_par=competition.total_par)
        if not ranking.ranked:
            logger.debug("Competition %s has no scored entries; omitted", competition.id)
            return None
        return CompetitionSummary(
            competition_id=competition.id,
            title=competition.title,
            end_time=competition.end_time,
            location=competition.location,
            format=competition.format,
            podium=podium(ranking, size=podium_size),
            incomplete=bool(ranking.unscored),
        )

    result = team_standings(competition, entry_list, palette=palette)
    usable = bool(result.standings) and (
        competition.team_scoring_mode is TeamScoringMode.AGGREGATE_STROKES or bool(result.groups)
    )
    if not usable:
        logger.debug("Competition %s has no usable team scores; omitted", competition.id)
        return None
    return CompetitionSummary(
        competition_id=competition.id,
        title=competition.title,
        end_time=competition.end_time,
        location=competition.location,
        format=competition.format,
        team_scoring_mode=result.mode,
        standings=result.standings,
        winners=result.winners,
        is_tie=result.is_tie,
        incomplete=bool(result.issues),
    )


def summarize_competitions(
    competitions: Iterable[Competition],
    entries_by_competition: Mapping[str, Iterable[ScoreEntry]],
    now: datetime | None = None,
    limit: int = DEFAULT_DASHBOARD_LIMIT,
    podium_size: int = DEFAULT_PODIUM_SIZE,
    palette: Sequence[str] = DEFAULT_TEAM_PALETTE,
) -> list[CompetitionSummary]:
    summaries: list[CompetitionSummary] = []
    for competition in select_finished(competitions, now=now, limit=limit):
        summary = summarize_competition(
            competition,
            entries_by_competition.get(competition.id, ()),
            podium_size=podium_size,
            palette=palette,
        )
        if summary is not None:
            summaries.append(summary)
    return summaries


def _aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
