from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging
from types import MappingProxyType

from .models import CompetitionFormat, DataIssue, IssueKind, ScoreEntry

logger = logging.getLogger(__name__)

IMPLICIT_GROUP = 0


@dataclass(frozen=True)
class Group:
    competition_id: str
    group_number: int
    teams: Mapping[str, tuple[ScoreEntry, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    entries: tuple[ScoreEntry, ...] = ()

    @property
    def team_names(self) -> tuple[str, ...]:
        return tuple(self.teams.keys())

    @property
    def members(self) -> tuple[ScoreEntry, ...]:
        if self.teams:
            return tuple(entry for team in self.teams.values() for entry in team)
        return self.entries


@dataclass(frozen=True)
class Grouping:
    groups: tuple[Group, ...] = ()
    unassigned: tuple[ScoreEntry, ...] = ()
    issues: tuple[DataIssue, ...] = ()


def entry_sort_key(entry: ScoreEntry) -> tuple[str, str, str]:
    return (entry.display_name.lower(), entry.entry_id, entry.competition_id)


def group_entries(
    entries: Iterable[ScoreEntry],
    competition_format: CompetitionFormat,
    competition_id: str | None = None,
) -> Grouping:
    entry_list = sorted(entries, key=entry_sort_key)
    if competition_id is None and entry_list:
        competition_id = entry_list[0].competition_id
    competition_id = competition_id or ""

    if competition_format is CompetitionFormat.INDIVIDUAL:
        by_group: dict[int, list[ScoreEntry]] = {}
        for entry in entry_list:
            by_group.setdefault(_group_number(entry), []).append(entry)
        groups = tuple(
            Group(
                competition_id=competition_id,
                group_number=number,
                entries=tuple(members),
            )
            for number, members in sorted(by_group.items())
        )
        return Grouping(groups=groups)

    by_team: dict[int, dict[str, list[ScoreEntry]]] = {}
    unassigned: list[ScoreEntry] = []
    issues: list[DataIssue] = []
    for entry in entry_list:
        team_name = (entry.team_name or "").strip()
        if not team_name:
            unassigned.append(entry)
            issues.append(
                DataIssue(
                    kind=IssueKind.MISSING_TEAM,
                    message=f"{entry.display_name} has no team and is excluded from team scoring.",
                    competition_id=competition_id or None,
                    group_number=_group_number(entry),
                    entry_id=entry.entry_id,
                )
            )
            continue
        by_team.setdefault(_group_number(entry), {}).setdefault(team_name, []).append(entry)

    if unassigned:
        logger.info(
            "Competition %s: %d entries without a team excluded from team scoring",
            competition_id,
            len(unassigned),
        )

    groups = tuple(
        Group(
            competition_id=competition_id,
            group_number=number,
            teams=MappingProxyType(
                {name: tuple(members) for name, members in sorted(teams.items())}
            ),
        )
        for number, teams in sorted(by_team.items())
    )
    return Grouping(groups=groups, unassigned=tuple(unassigned), issues=tuple(issues))


def _group_number(entry: ScoreEntry) -> int:
    return entry.group_number if entry.group_number is not None else IMPLICIT_GROUP
