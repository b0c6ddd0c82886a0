from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from fractions import Fraction

from .config import DEFAULT_TEAM_PALETTE
from .errors import ScoringInputError
from .grouping import Grouping, group_entries
from .match_play import MatchPlayResult, score_competition
from .models import (
    Competition,
    CompetitionFormat,
    GroupTeamScore,
    ScoreEntry,
    TeamScoringMode,
    TeamStanding,
    TeamStandingsResult,
)
from .stroke_aggregate import StrokeAggregateResult, aggregate_competition
from .teams import team_presentation


def team_standings(
    competition: Competition,
    entries: Iterable[ScoreEntry],
    palette: Sequence[str] = DEFAULT_TEAM_PALETTE,
) -> TeamStandingsResult:
    if competition.format is not CompetitionFormat.TEAM:
        raise ScoringInputError(f"Competition {competition.id} is not a team competition.")

    entry_list = list(entries)
    if not entry_list:
        raise ScoringInputError(f"Competition {competition.id} has no entries.")

    grouping = group_entries(entry_list, CompetitionFormat.TEAM, competition_id=competition.id)
    if competition.team_scoring_mode is TeamScoringMode.AGGREGATE_STROKES:
        return _from_aggregate(competition, grouping, palette)
    return _from_match_play(competition, grouping, palette)


def _from_match_play(
    competition: Competition,
    grouping: Grouping,
    palette: Sequence[str],
) -> TeamStandingsResult:
    if not grouping.groups:
        return _empty_result(competition, TeamScoringMode.MATCH_PLAY, grouping)

    result: MatchPlayResult = score_competition(grouping.groups, competition_id=competition.id)
    standings = _standings(
        competition,
        result.totals,
        palette,
        higher_is_better=True,
    )
    return TeamStandingsResult(
        competition_id=competition.id,
        mode=TeamScoringMode.MATCH_PLAY,
        standings=standings,
        winners=list(result.winners),
        is_tie=result.is_tie,
        groups=[
            GroupTeamScore(
                group_number=score.group_number,
                scores={name: float(points) for name, points in score.points.items()},
                holes_contested=score.holes_contested,
            )
            for score in result.groups
            if not score.incomplete
        ],
        incomplete_groups=list(result.incomplete_groups),
        issues=list(grouping.issues) + list(result.issues),
    )


def _from_aggregate(
    competition: Competition,
    grouping: Grouping,
    palette: Sequence[str],
) -> TeamStandingsResult:
    if not grouping.groups:
        return _empty_result(competition, TeamScoringMode.AGGREGATE_STROKES, grouping)

    result: StrokeAggregateResult = aggregate_competition(
        grouping.groups, competition_id=competition.id
    )
    standings = _standings(
        competition,
        result.totals,
        palette,
        higher_is_better=False,
    )
    return TeamStandingsResult(
        competition_id=competition.id,
        mode=TeamScoringMode.AGGREGATE_STROKES,
        standings=standings,
        winners=list(result.winners),
        is_tie=result.is_tie,
        groups=[
            GroupTeamScore(
                group_number=group.group_number,
                scores={name: float(total) for name, total in group.totals.items()},
            )
            for group in result.groups
        ],
        issues=list(grouping.issues) + list(result.issues),
    )


def _standings(
    competition: Competition,
    totals: Mapping[str, Fraction | int],
    palette: Sequence[str],
    higher_is_better: bool,
) -> list[TeamStanding]:
    presentation = team_presentation(competition, totals.keys(), palette)
    sign = -1 if higher_is_better else 1
    ordered = sorted(totals.items(), key=lambda item: (sign * item[1], item[0]))
    return [
        TeamStanding(
            team_name=name,
            display_name=presentation[name][0],
            color=presentation[name][1],
            score=float(score),
        )
        for name, score in ordered
    ]


def _empty_result(
    competition: Competition, mode: TeamScoringMode, grouping: Grouping
) -> TeamStandingsResult:
    return TeamStandingsResult(
        competition_id=competition.id,
        mode=mode,
        issues=list(grouping.issues),
    )
