import pytest

from clubscore.errors import ScoringInputError
from clubscore.models import GuestSource, IssueKind, MemberSource, ScoreEntry
from clubscore.ranking import podium, rank_entries


def _entry(entry_id: str, strokes, net=None, rank=None, guest: bool = False) -> ScoreEntry:
    source = GuestSource(guest_name=entry_id) if guest else MemberSource(player_id=entry_id)
    return ScoreEntry(
        entry_id=entry_id,
        competition_id="c1",
        source=source,
        display_name=f"Player {entry_id}",
        total_strokes=strokes,
        net_strokes=net,
        assigned_rank=rank,
    )


def test_ranks_ascending_by_total_strokes() -> None:
    entries = [_entry("a", 72), _entry("b", 75), _entry("c", 70), _entry("d", 80)]
    result = rank_entries(entries)

    assert [r.entry.total_strokes for r in result.ranked] == [70, 72, 75, 80]
    assert [r.rank for r in result.ranked] == [1, 2, 3, 4]
    assert [p.total_strokes for p in podium(result)] == [70, 72, 75]


def test_equal_strokes_share_a_rank() -> None:
    entries = [_entry("a", 72), _entry("b", 70), _entry("c", 72), _entry("d", 75)]
    result = rank_entries(entries)

    assert [r.rank for r in result.ranked] == [1, 2, 2, 3]
    # Podium slots are positional, so both tied players take a slot.
    assert [p.display_name for p in podium(result)] == ["Player b", "Player a", "Player c"]


def test_stored_rank_breaks_ordering_ties_without_changing_rank() -> None:
    entries = [_entry("a", 72, rank=3), _entry("b", 72, rank=2)]
    result = rank_entries(entries)
    assert [r.entry.entry_id for r in result.ranked] == ["b", "a"]
    assert [r.rank for r in result.ranked] == [1, 1]


def test_ranking_is_independent_of_input_order() -> None:
    entries = [_entry("a", 72), _entry("b", 70), _entry("c", 72), _entry("d", 75, guest=True)]
    forward = rank_entries(entries)
    backward = rank_entries(list(reversed(entries)))
    assert forward == backward


def test_entries_without_strokes_are_reported_unscored() -> None:
    entries = [_entry("a", 72), _entry("b", None)]
    result = rank_entries(entries)

    assert [r.entry.entry_id for r in result.ranked] == ["a"]
    assert [e.entry_id for e in result.unscored] == ["b"]
    assert result.issues[0].kind is IssueKind.UNSCORABLE_ENTRY


def test_to_par_uses_course_par_when_available() -> None:
    result = rank_entries([_entry("a", 70), _entry("b", 75)], total_par=72)
    assert [r.to_par for r in result.ranked] == [-2, 3]
    assert podium(result, size=1)[0].to_par == -2


def test_podium_carries_net_and_guest_flag() -> None:
    result = rank_entries([_entry("g", 68, net=64, guest=True), _entry("m", 71)])
    top = podium(result)
    assert len(top) == 2
    assert top[0].is_guest is True
    assert top[0].net_strokes == 64
    assert top[1].net_strokes is None


def test_empty_collection_is_rejected() -> None:
    with pytest.raises(ScoringInputError):
        rank_entries([])
