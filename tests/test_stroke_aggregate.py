from types import MappingProxyType

import pytest

from clubscore.errors import ScoringInputError
from clubscore.grouping import Group
from clubscore.models import IssueKind, MemberSource, ScoreEntry
from clubscore.stroke_aggregate import aggregate_competition, aggregate_group


def _entry(entry_id: str, team: str, total, net=None, group: int = 1) -> ScoreEntry:
    return ScoreEntry(
        entry_id=entry_id,
        competition_id="c1",
        source=MemberSource(player_id=entry_id),
        display_name=entry_id,
        group_number=group,
        team_name=team,
        total_strokes=total,
        net_strokes=net,
    )


def _group(number: int, members: list[ScoreEntry]) -> Group:
    teams: dict[str, list[ScoreEntry]] = {}
    for member in members:
        teams.setdefault(member.team_name or "", []).append(member)
    return Group(
        competition_id="c1",
        group_number=number,
        teams=MappingProxyType({k: tuple(v) for k, v in teams.items()}),
    )


def test_lower_net_total_wins() -> None:
    group = _group(
        1,
        [
            _entry("a1", "A", 80, net=70),
            _entry("a2", "A", 82, net=72),
            _entry("b1", "B", 75, net=68),
            _entry("b2", "B", 85, net=76),
        ],
    )
    result = aggregate_competition([group])
    assert result.totals == {"A": 142, "B": 144}
    assert result.winners == ("A",)
    assert result.is_tie is False


def test_total_strokes_used_when_net_missing() -> None:
    totals = aggregate_group(_group(1, [_entry("a1", "A", 80), _entry("a2", "A", 90, net=85)]))
    assert totals.totals == {"A": 165}


def test_totals_accumulate_across_groups() -> None:
    groups = [
        _group(1, [_entry("a1", "A", 70), _entry("b1", "B", 71)]),
        _group(2, [_entry("a2", "A", 74, group=2), _entry("b2", "B", 72, group=2)]),
    ]
    result = aggregate_competition(groups)
    assert result.totals == {"A": 144, "B": 143}
    assert result.winners == ("B",)
    assert [g.group_number for g in result.groups] == [1, 2]


def test_equal_totals_are_a_tie() -> None:
    result = aggregate_competition([_group(1, [_entry("a1", "A", 72), _entry("b1", "B", 72)])])
    assert result.winners == ("A", "B")
    assert result.is_tie is True


def test_member_without_strokes_is_flagged_not_counted() -> None:
    result = aggregate_competition(
        [_group(1, [_entry("a1", "A", 72), _entry("a2", "A", None), _entry("b1", "B", 75)])]
    )
    assert result.totals == {"A": 72, "B": 75}
    assert [issue.kind for issue in result.issues] == [IssueKind.UNSCORABLE_ENTRY]
    assert result.issues[0].team_name == "A"


def test_no_groups_is_a_hard_failure() -> None:
    with pytest.raises(ScoringInputError):
        aggregate_competition([])
