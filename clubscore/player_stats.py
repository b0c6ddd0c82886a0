from __future__ import annotations

from collections.abc import Iterable
import math

import numpy as np

from .models import PlayerScoreStats, ScoreEntry, ScoreTrend

TREND_WINDOW = 5


def player_score_stats(player_id: str, entries: Iterable[ScoreEntry]) -> PlayerScoreStats:
    rounds = [
        entry
        for entry in entries
        if entry.player_id == player_id and entry.total_strokes is not None
    ]
    if not rounds:
        return PlayerScoreStats(player_id=player_id)

    strokes = np.asarray([entry.total_strokes for entry in rounds], dtype=np.float64)
    return PlayerScoreStats(
        player_id=player_id,
        total_rounds=len(rounds),
        average_strokes=_round_half_up(float(strokes.mean()), 1),
        best_score=int(strokes.min()),
        top_three_count=sum(
            1 for entry in rounds if entry.assigned_rank is not None and 1 <= entry.assigned_rank <= 3
        ),
        trend=score_trend(rounds),
    )


def score_trend(entries: Iterable[ScoreEntry], window: int = TREND_WINDOW) -> ScoreTrend | None:
    dated = [entry for entry in entries if entry.total_strokes is not None]
    if len(dated) < 2:
        return None

    # Most recent first; undated rounds sort after dated ones.
    dated.sort(key=lambda e: e.entry_id)
    dated.sort(key=lambda e: (e.competition_date is not None, e.competition_date or ""), reverse=True)
    recent = np.asarray([e.total_strokes for e in dated[:window]], dtype=np.float64)
    delta = float(recent[0] - recent[-1])
    return ScoreTrend(
        improving=delta < 0,
        value=int(abs(delta)),
        average_strokes=int(_round_half_up(float(recent.mean()), 0)),
        rounds_considered=int(recent.size),
    )


def _round_half_up(value: float, digits: int) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor
