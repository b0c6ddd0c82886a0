from clubscore.grouping import IMPLICIT_GROUP, group_entries
from clubscore.models import CompetitionFormat, IssueKind, MemberSource, ScoreEntry


def _entry(entry_id: str, group=None, team=None) -> ScoreEntry:
    return ScoreEntry(
        entry_id=entry_id,
        competition_id="c1",
        source=MemberSource(player_id=entry_id),
        display_name=entry_id,
        group_number=group,
        team_name=team,
        total_strokes=72,
    )


def test_individual_entries_without_group_go_to_implicit_group() -> None:
    grouping = group_entries(
        [_entry("a", 2), _entry("b"), _entry("c", 1)], CompetitionFormat.INDIVIDUAL
    )
    assert [g.group_number for g in grouping.groups] == [IMPLICIT_GROUP, 1, 2]
    assert [e.entry_id for g in grouping.groups for e in g.entries] == ["b", "c", "a"]
    assert grouping.unassigned == ()


def test_team_entries_are_partitioned_by_group_and_team() -> None:
    entries = [
        _entry("b1", 1, "Blue"),
        _entry("r1", 1, "Red"),
        _entry("r2", 1, "Red"),
        _entry("b2", 2, "Blue"),
    ]
    grouping = group_entries(list(reversed(entries)), CompetitionFormat.TEAM)

    first, second = grouping.groups
    assert first.team_names == ("Blue", "Red")
    assert [e.entry_id for e in first.teams["Red"]] == ["r1", "r2"]
    assert second.team_names == ("Blue",)
    assert len(first.members) == 3


def test_team_entries_without_team_are_excluded_and_flagged() -> None:
    grouping = group_entries([_entry("x", 1), _entry("r1", 1, "Red")], CompetitionFormat.TEAM)
    assert [e.entry_id for e in grouping.unassigned] == ["x"]
    assert grouping.issues[0].kind is IssueKind.MISSING_TEAM
    assert grouping.groups[0].team_names == ("Red",)
