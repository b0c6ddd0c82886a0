from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from fractions import Fraction
import logging
from types import MappingProxyType

import numpy as np

from .errors import ScoringInputError
from .grouping import Group
from .models import HOLE_COUNT, DataIssue, IssueKind

logger = logging.getLogger(__name__)

_ZERO = Fraction(0)
_ONE = Fraction(1)


@dataclass(frozen=True)
class GroupMatchScore:
    group_number: int
    points: Mapping[str, Fraction]
    holes_contested: int = 0
    incomplete: bool = False
    reason: str | None = None


@dataclass(frozen=True)
class MatchPlayResult:
    competition_id: str
    totals: Mapping[str, Fraction]
    groups: tuple[GroupMatchScore, ...] = ()
    incomplete_groups: tuple[int, ...] = ()
    winners: tuple[str, ...] = ()
    issues: tuple[DataIssue, ...] = field(default_factory=tuple)

    @property
    def is_tie(self) -> bool:
        return len(self.winners) > 1


def best_ball_matrix(group: Group) -> tuple[tuple[str, ...], np.ndarray]:
    """Lowest valid score per team per hole; ``inf`` where a team has no valid value."""
    team_names = tuple(sorted(group.teams))
    best = np.full((len(team_names), HOLE_COUNT), np.inf, dtype=np.float64)
    for row, team_name in enumerate(team_names):
        for entry in group.teams[team_name]:
            if entry.hole_scores is None:
                continue
            scores = np.array(
                [np.inf if value is None else float(value) for value in entry.hole_scores],
                dtype=np.float64,
            )
            best[row] = np.minimum(best[row], scores)
    return team_names, best


def hole_points(group: Group, hole: int) -> Mapping[str, Fraction]:
    if not 0 <= hole < HOLE_COUNT:
        raise ValueError(f"hole index must be in 0..{HOLE_COUNT - 1}, got {hole}")
    team_names, best = best_ball_matrix(group)
    return _split_hole(team_names, best[:, hole])


def score_group(group: Group) -> GroupMatchScore:
    team_names, best = best_ball_matrix(group)
    empty = MappingProxyType({name: _ZERO for name in team_names})

    if len(team_names) < 2:
        return GroupMatchScore(
            group_number=group.group_number,
            points=empty,
            incomplete=True,
            reason=f"only {len(team_names)} team(s) present",
        )

    scoring_teams = int(np.isfinite(best).any(axis=1).sum())
    if scoring_teams < 2:
        return GroupMatchScore(
            group_number=group.group_number,
            points=empty,
            incomplete=True,
            reason=(
                "no valid hole scores"
                if scoring_teams == 0
                else f"only {scoring_teams} team(s) with hole scores"
            ),
        )

    per_hole = [_split_hole(team_names, best[:, hole]) for hole in range(HOLE_COUNT)]
    contested = sum(1 for hole in range(HOLE_COUNT) if np.isfinite(best[:, hole]).any())

    points = MappingProxyType(
        {name: sum((table[name] for table in per_hole), _ZERO) for name in team_names}
    )
    return GroupMatchScore(
        group_number=group.group_number,
        points=points,
        holes_contested=contested,
    )


def score_competition(groups: Iterable[Group], competition_id: str | None = None) -> MatchPlayResult:
    group_list = list(groups)
    if not group_list:
        raise ScoringInputError("Cannot score a competition without groups.")
    competition_id = competition_id if competition_id is not None else group_list[0].competition_id

    scored = tuple(score_group(group) for group in sorted(group_list, key=lambda g: g.group_number))
    incomplete = tuple(score.group_number for score in scored if score.incomplete)
    issues = tuple(
        DataIssue(
            kind=IssueKind.INCOMPLETE_GROUP,
            message=f"Group {score.group_number} skipped for match play: {score.reason}.",
            competition_id=competition_id or None,
            group_number=score.group_number,
        )
        for score in scored
        if score.incomplete
    )
    if incomplete:
        logger.info(
            "Competition %s: %d incomplete match-play group(s) skipped",
            competition_id,
            len(incomplete),
        )

    team_names = sorted({name for group in group_list for name in group.teams})
    totals = MappingProxyType(
        {
            name: sum(
                (score.points.get(name, _ZERO) for score in scored if not score.incomplete),
                _ZERO,
            )
            for name in team_names
        }
    )

    winners: tuple[str, ...] = ()
    if len(incomplete) < len(scored) and totals:
        best_total = max(totals.values())
        winners = tuple(name for name in team_names if totals[name] == best_total)

    return MatchPlayResult(
        competition_id=competition_id,
        totals=totals,
        groups=scored,
        incomplete_groups=incomplete,
        winners=winners,
        issues=issues,
    )


def _split_hole(team_names: tuple[str, ...], column: np.ndarray) -> Mapping[str, Fraction]:
    valid = np.isfinite(column)
    if not valid.any():
        return MappingProxyType({name: _ZERO for name in team_names})
    low = column[valid].min()
    winners = {name for name, value, ok in zip(team_names, column, valid) if ok and value == low}
    share = _ONE / len(winners)
    return MappingProxyType({name: share if name in winners else _ZERO for name in team_names})
