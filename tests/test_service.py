import asyncio
from datetime import datetime, timezone

import pytest

from clubscore.errors import CompetitionNotFoundError, ScoringInputError
from clubscore.models import IssueKind, TeamScoringMode
from clubscore.service import ScoringService

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def test_individual_results_merge_members_and_guests(scoring_service: ScoringService) -> None:
    result = asyncio.run(scoring_service.competition_results("ind"))

    assert [(r.entry.display_name, r.rank) for r in result.ranking.ranked] == [
        ("Visitor", 1),
        ("Bo", 2),
        ("Alice", 3),
    ]
    assert [e.entry_id for e in result.ranking.unscored] == ["s3"]
    assert result.team_standings is None
    assert IssueKind.UNSCORABLE_ENTRY in {issue.kind for issue in result.issues}


def test_team_results_include_standings_and_all_entries(scoring_service: ScoringService) -> None:
    result = asyncio.run(scoring_service.competition_results("cup"))

    standings = result.team_standings
    assert standings is not None
    assert standings.mode is TeamScoringMode.MATCH_PLAY
    assert [(s.display_name, s.score) for s in standings.standings] == [
        ("Red Team", 18.0),
        ("blue", 0.0),
    ]
    # The guest without a team still appears in the all-entries ranking.
    assert len(result.ranking.ranked) == 3
    assert IssueKind.MISSING_TEAM in {issue.kind for issue in result.issues}


def test_unknown_competition_raises_not_found(scoring_service: ScoringService) -> None:
    with pytest.raises(CompetitionNotFoundError):
        asyncio.run(scoring_service.competition_results("missing"))


def test_non_competition_event_is_rejected(scoring_service: ScoringService) -> None:
    with pytest.raises(ScoringInputError):
        asyncio.run(scoring_service.competition_results("social"))


def test_dashboard_summaries_take_two_most_recent(scoring_service: ScoringService) -> None:
    summaries = asyncio.run(scoring_service.dashboard_summaries(now=NOW))

    assert [s.competition_id for s in summaries] == ["cup", "ind"]
    assert summaries[0].winners == ["red"]
    assert [p.display_name for p in summaries[1].podium] == ["Visitor", "Bo", "Alice"]


def test_player_stats_from_member_history(scoring_service: ScoringService) -> None:
    stats = asyncio.run(scoring_service.player_stats("u1"))
    assert stats.total_rounds == 2
    assert stats.best_score == 84
    assert stats.top_three_count == 1
    assert stats.trend is not None and stats.trend.improving is True
