from __future__ import annotations

from collections.abc import Iterable
import logging
import math

from .config import DEFAULT_PODIUM_SIZE
from .errors import ScoringInputError
from .grouping import entry_sort_key
from .models import (
    DataIssue,
    IssueKind,
    PodiumEntry,
    RankedEntry,
    RankingResult,
    ScoreEntry,
)

logger = logging.getLogger(__name__)


def rank_entries(entries: Iterable[ScoreEntry], total_par: int | None = None) -> RankingResult:
    entry_list = list(entries)
    if not entry_list:
        raise ScoringInputError("Cannot rank an empty entry collection.")

    scored = [entry for entry in entry_list if entry.total_strokes is not None]
    unscored = sorted(
        (entry for entry in entry_list if entry.total_strokes is None),
        key=entry_sort_key,
    )
    issues = [
        DataIssue(
            kind=IssueKind.UNSCORABLE_ENTRY,
            message=f"{entry.display_name} has no total strokes and is not ranked.",
            competition_id=entry.competition_id or None,
            entry_id=entry.entry_id,
        )
        for entry in unscored
    ]
    if unscored:
        logger.debug("%d entries without total strokes left unranked", len(unscored))

    ordered = sorted(scored, key=_ranking_key)
    ranked: list[RankedEntry] = []
    rank = 0
    previous: int | None = None
    for entry in ordered:
        if entry.total_strokes != previous:
            rank += 1
            previous = entry.total_strokes
        ranked.append(
            RankedEntry(
                entry=entry,
                rank=rank,
                to_par=(
                    entry.total_strokes - total_par
                    if total_par is not None and entry.total_strokes is not None
                    else None
                ),
            )
        )

    return RankingResult(ranked=ranked, unscored=unscored, issues=issues)


def podium(result: RankingResult, size: int = DEFAULT_PODIUM_SIZE) -> list[PodiumEntry]:
    # Slots are positional: tied entries still occupy one slot each.
    out: list[PodiumEntry] = []
    for ranked in result.ranked[: max(0, size)]:
        entry = ranked.entry
        if entry.total_strokes is None:
            continue
        out.append(
            PodiumEntry(
                display_name=entry.display_name,
                is_guest=entry.is_guest,
                total_strokes=entry.total_strokes,
                net_strokes=entry.net_strokes,
                rank=ranked.rank,
                to_par=ranked.to_par,
            )
        )
    return out


def _ranking_key(entry: ScoreEntry) -> tuple[int, float, tuple[str, str, str]]:
    hint = float(entry.assigned_rank) if entry.assigned_rank is not None else math.inf
    return (entry.total_strokes or 0, hint, entry_sort_key(entry))
