from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import logging
from types import MappingProxyType

from .errors import ScoringInputError
from .grouping import Group
from .models import DataIssue, IssueKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupStrokeTotals:
    group_number: int
    totals: Mapping[str, int]
    issues: tuple[DataIssue, ...] = ()


@dataclass(frozen=True)
class StrokeAggregateResult:
    competition_id: str
    totals: Mapping[str, int]
    groups: tuple[GroupStrokeTotals, ...] = ()
    winners: tuple[str, ...] = ()
    issues: tuple[DataIssue, ...] = ()

    @property
    def is_tie(self) -> bool:
        return len(self.winners) > 1


def aggregate_group(group: Group) -> GroupStrokeTotals:
    totals: dict[str, int] = {}
    issues: list[DataIssue] = []
    for team_name in sorted(group.teams):
        team_sum = 0
        counted = 0
        for entry in group.teams[team_name]:
            strokes = entry.strokes_for_aggregate
            if strokes is None:
                issues.append(
                    DataIssue(
                        kind=IssueKind.UNSCORABLE_ENTRY,
                        message=f"{entry.display_name} has no strokes and is left out of {team_name}'s total.",
                        competition_id=group.competition_id or None,
                        group_number=group.group_number,
                        entry_id=entry.entry_id,
                        team_name=team_name,
                    )
                )
                continue
            team_sum += strokes
            counted += 1
        if counted:
            totals[team_name] = team_sum
    return GroupStrokeTotals(
        group_number=group.group_number,
        totals=MappingProxyType(totals),
        issues=tuple(issues),
    )


def aggregate_competition(
    groups: Iterable[Group], competition_id: str | None = None
) -> StrokeAggregateResult:
    group_list = sorted(groups, key=lambda g: g.group_number)
    if not group_list:
        raise ScoringInputError("Cannot aggregate a competition without groups.")
    competition_id = competition_id if competition_id is not None else group_list[0].competition_id

    per_group = tuple(aggregate_group(group) for group in group_list)
    team_names = sorted({name for group in per_group for name in group.totals})
    totals = MappingProxyType(
        {name: sum(group.totals.get(name, 0) for group in per_group) for name in team_names}
    )

    winners: tuple[str, ...] = ()
    if totals:
        lowest = min(totals.values())
        winners = tuple(name for name in team_names if totals[name] == lowest)

    issues = tuple(issue for group in per_group for issue in group.issues)
    if issues:
        logger.debug(
            "Competition %s: %d entries without strokes left out of team totals",
            competition_id,
            len(issues),
        )
    return StrokeAggregateResult(
        competition_id=competition_id,
        totals=totals,
        groups=per_group,
        winners=winners,
        issues=issues,
    )
