from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
import json
import logging
import re
from typing import Any

from .config import DEFAULT_FALLBACK_NAME
from .errors import ScoringInputError
from .models import (
    HOLE_COUNT,
    Competition,
    CompetitionFormat,
    DataIssue,
    GuestSource,
    IssueKind,
    MemberSource,
    ScoreEntry,
    TeamScoringMode,
)

logger = logging.getLogger(__name__)

_ENTRY_ID_KEYS = ("id", "score_id", "entry_id")
_COMPETITION_ID_KEYS = ("event_id", "competition_id", "eventid")
_PLAYER_ID_KEYS = ("user_id", "player_id", "member_id")
_GUEST_NAME_KEYS = ("guest_name", "guest", "name", "player_name")
_PROFILE_NAME_KEYS = ("full_name", "name", "display_name")
_PROFILE_KEYS = ("user_profiles", "profile", "user_profile")
_GROUP_KEYS = ("group_number", "group", "flight", "group_no")
_TEAM_KEYS = ("team_name", "team")
_HOLE_KEYS = ("hole_scores", "holes", "scorecard")
_TOTAL_KEYS = ("total_strokes", "total", "gross_strokes", "strokes")
_NET_KEYS = ("net_strokes", "net")
_HANDICAP_KEYS = ("handicap", "hcp")
_RANK_KEYS = ("rank", "assigned_rank", "position")
_DATE_KEYS = ("competition_date", "date", "created_at")

_EVENT_TYPE_KEYS = ("event_type", "format", "competition_type")
_SCORING_MODE_KEYS = ("scoring_mode", "team_scoring_mode")
_TITLE_KEYS = ("title", "event_name", "name", "competition_name")
_INDIVIDUAL_TYPES = {"个人赛", "individual", "stroke_play"}
_TEAM_TYPES = {"团体赛", "team", "团队赛"}
_MATCH_PLAY_MODES = {"ryder_cup", "match_play", "matchplay"}
_AGGREGATE_MODES = {"total_strokes", "aggregate_strokes", "aggregate", "stroke_play"}
_HOLE_KEY_PATTERN = re.compile(r"(\d+)$")


@dataclass
class NormalizationResult:
    entries: list[ScoreEntry] = field(default_factory=list)
    issues: list[DataIssue] = field(default_factory=list)


def normalize_entries(
    member_rows: Iterable[Mapping[str, Any]],
    guest_rows: Iterable[Mapping[str, Any]],
    profiles: Mapping[str, Any] | None = None,
    competition_id: str | None = None,
    fallback_display_name: str = DEFAULT_FALLBACK_NAME,
) -> NormalizationResult:
    members = _as_row_list(member_rows, "member")
    guests = _as_row_list(guest_rows, "guest")

    result = NormalizationResult()
    for index, row in enumerate(members):
        entry, issues = normalize_member_row(
            row,
            profiles=profiles,
            competition_id=competition_id,
            fallback_display_name=fallback_display_name,
            index=index,
        )
        result.entries.append(entry)
        result.issues.extend(issues)

    for index, row in enumerate(guests):
        entry, issues = normalize_guest_row(
            row,
            competition_id=competition_id,
            fallback_display_name=fallback_display_name,
            index=index,
        )
        result.entries.append(entry)
        result.issues.extend(issues)

    if result.issues:
        logger.debug(
            "Normalized %d entries with %d data issues", len(result.entries), len(result.issues)
        )
    return result


def normalize_member_row(
    row: Mapping[str, Any],
    profiles: Mapping[str, Any] | None = None,
    competition_id: str | None = None,
    fallback_display_name: str = DEFAULT_FALLBACK_NAME,
    index: int = 0,
) -> tuple[ScoreEntry, list[DataIssue]]:
    player_id = _string_from_keys(row, _PLAYER_ID_KEYS)
    guest_name = _string_from_keys(row, ("guest_name",))
    if not player_id and guest_name:
        # Member feed rows occasionally carry guest results.
        return normalize_guest_row(row, competition_id, fallback_display_name, index)

    display_name = _profile_name(row, player_id, profiles) or fallback_display_name
    return _build_entry(
        row,
        source=MemberSource(player_id=player_id or ""),
        display_name=display_name,
        competition_id=competition_id,
        default_id=f"member-{index}",
    )


def normalize_guest_row(
    row: Mapping[str, Any],
    competition_id: str | None = None,
    fallback_display_name: str = DEFAULT_FALLBACK_NAME,
    index: int = 0,
) -> tuple[ScoreEntry, list[DataIssue]]:
    guest_name = _string_from_keys(row, _GUEST_NAME_KEYS)
    return _build_entry(
        row,
        source=GuestSource(guest_name=guest_name or ""),
        display_name=guest_name or fallback_display_name,
        competition_id=competition_id,
        default_id=f"guest-{index}",
    )


def parse_competition(row: Mapping[str, Any]) -> tuple[Competition | None, list[DataIssue]]:
    if not isinstance(row, Mapping):
        raise ScoringInputError("Competition record must be a mapping.")

    competition_id = _string_from_keys(row, ("id", "event_id", "competition_id"))
    if not competition_id:
        raise ScoringInputError("Competition record has no id.")

    event_type = (_string_from_keys(row, _EVENT_TYPE_KEYS) or "").lower()
    if event_type in _INDIVIDUAL_TYPES:
        competition_format = CompetitionFormat.INDIVIDUAL
    elif event_type in _TEAM_TYPES:
        competition_format = CompetitionFormat.TEAM
    else:
        return None, []

    issues: list[DataIssue] = []
    raw_mode = (_string_from_keys(row, _SCORING_MODE_KEYS) or "").lower()
    if raw_mode in _AGGREGATE_MODES:
        mode = TeamScoringMode.AGGREGATE_STROKES
    elif raw_mode in _MATCH_PLAY_MODES:
        mode = TeamScoringMode.MATCH_PLAY
    else:
        mode = TeamScoringMode.MATCH_PLAY
        if competition_format is CompetitionFormat.TEAM:
            issues.append(
                DataIssue(
                    kind=IssueKind.MISSING_CONFIGURATION,
                    message=(
                        f"Team scoring mode {raw_mode or 'unset'!r} not recognised; "
                        "defaulting to match play."
                    ),
                    competition_id=competition_id,
                )
            )

    competition = Competition(
        id=competition_id,
        title=_string_from_keys(row, _TITLE_KEYS) or competition_id,
        start_time=_datetime_from_value(row.get("start_time")),
        end_time=_datetime_from_value(row.get("end_time")),
        location=_string_from_keys(row, ("location", "course_name")),
        format=competition_format,
        team_scoring_mode=mode,
        team_display_names=_string_mapping(row.get("team_name_mapping") or row.get("team_display_names")),
        team_colors=_string_mapping(row.get("team_colors")),
        par=_par_from_value(row.get("par")),
    )
    return competition, issues


def _build_entry(
    row: Mapping[str, Any],
    source: MemberSource | GuestSource,
    display_name: str,
    competition_id: str | None,
    default_id: str,
) -> tuple[ScoreEntry, list[DataIssue]]:
    entry_competition = _string_from_keys(row, _COMPETITION_ID_KEYS) or competition_id or ""
    entry_id = _string_from_keys(row, _ENTRY_ID_KEYS) or f"{entry_competition}:{default_id}"

    issues: list[DataIssue] = []
    hole_scores, hole_problem = _hole_scores_from_row(row)
    if hole_problem:
        issues.append(
            DataIssue(
                kind=IssueKind.MALFORMED_ENTRY,
                message=f"{display_name}: {hole_problem}",
                competition_id=entry_competition or None,
                entry_id=entry_id,
            )
        )
        logger.debug("Entry %s has malformed hole scores: %s", entry_id, hole_problem)

    group_number = _int_from_keys(row, _GROUP_KEYS)
    entry = ScoreEntry(
        entry_id=entry_id,
        competition_id=entry_competition,
        source=source,
        display_name=display_name,
        group_number=group_number,
        team_name=_string_from_keys(row, _TEAM_KEYS),
        hole_scores=hole_scores,
        total_strokes=_int_from_keys(row, _TOTAL_KEYS),
        net_strokes=_int_from_keys(row, _NET_KEYS),
        handicap=_float_from_keys(row, _HANDICAP_KEYS) or 0.0,
        assigned_rank=_int_from_keys(row, _RANK_KEYS),
        competition_date=_string_from_keys(row, _DATE_KEYS),
    )
    return entry, issues


def _as_row_list(rows: Any, label: str) -> list[Mapping[str, Any]]:
    if rows is None:
        return []
    if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Iterable):
        raise ScoringInputError(f"{label} rows must be a collection of records.")
    out = list(rows)
    for row in out:
        if not isinstance(row, Mapping):
            raise ScoringInputError(
                f"{label} rows must be mappings, got {type(row).__name__}."
            )
    return out


def _profile_name(
    row: Mapping[str, Any],
    player_id: str | None,
    profiles: Mapping[str, Any] | None,
) -> str | None:
    for key in _PROFILE_KEYS:
        nested = row.get(key)
        if isinstance(nested, Mapping):
            name = _string_from_keys(nested, _PROFILE_NAME_KEYS)
            if name:
                return name

    if player_id and profiles:
        profile = profiles.get(player_id)
        if isinstance(profile, Mapping):
            return _string_from_keys(profile, _PROFILE_NAME_KEYS)
        if profile is not None and str(profile).strip():
            return str(profile).strip()
    return None


def _hole_scores_from_row(
    row: Mapping[str, Any],
) -> tuple[tuple[int | None, ...] | None, str | None]:
    raw: Any = None
    for key in _HOLE_KEYS:
        if row.get(key) is not None:
            raw = row[key]
            break
    if raw is None:
        return None, None

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None, None
        try:
            raw = json.loads(text)
        except ValueError:
            return None, "hole scores are not a readable list"

    if isinstance(raw, Mapping):
        raw = _hole_values_from_mapping(raw)
        if raw is None:
            return None, "hole scores mapping has no hole numbers"

    if not isinstance(raw, (list, tuple)):
        return None, "hole scores are not a list"
    if len(raw) != HOLE_COUNT:
        return None, f"expected {HOLE_COUNT} hole scores, got {len(raw)}"

    values = tuple(_hole_value(value) for value in raw)
    unusable = sum(1 for value in values if value is None)
    if unusable == HOLE_COUNT:
        return values, "no usable hole scores"
    if unusable:
        return values, f"{unusable} hole score(s) unusable and treated as missing"
    return values, None


def _hole_values_from_mapping(raw: Mapping[Any, Any]) -> list[Any] | None:
    by_hole: dict[int, Any] = {}
    for key, value in raw.items():
        match = _HOLE_KEY_PATTERN.search(str(key))
        if match:
            by_hole[int(match.group(1))] = value
    if not by_hole:
        return None
    last = max(by_hole)
    return [by_hole.get(hole) for hole in range(1, last + 1)]


def _hole_value(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not number.is_integer() or number <= 0:
        return None
    return int(number)


def _par_from_value(value: Any) -> list[int] | None:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return None
    if not isinstance(value, (list, tuple)) or len(value) != HOLE_COUNT:
        return None
    pars = [_hole_value(v) for v in value]
    if any(p is None for p in pars):
        return None
    return [int(p) for p in pars if p is not None]


def _string_mapping(value: Any) -> dict[str, str]:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return {}
    if not isinstance(value, Mapping):
        return {}
    return {
        str(k).strip(): str(v).strip()
        for k, v in value.items()
        if v is not None and str(k).strip() and str(v).strip()
    }


def _datetime_from_value(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _string_from_keys(row: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    lowered = {str(k).lower(): v for k, v in row.items()}
    for key in keys:
        if key in lowered:
            value = lowered[key]
            if value is None:
                continue
            if isinstance(value, (dict, list)):
                continue
            text = str(value).strip()
            if text:
                return text
    return None


def _float_from_keys(row: Mapping[str, Any], keys: tuple[str, ...]) -> float | None:
    lowered = {str(k).lower(): v for k, v in row.items()}
    for key in keys:
        if key in lowered:
            value = _to_float(lowered[key])
            if value is not None:
                return value
    return None


def _int_from_keys(row: Mapping[str, Any], keys: tuple[str, ...]) -> int | None:
    value = _float_from_keys(row, keys)
    if value is None or not value.is_integer():
        return None
    return int(value)


def _to_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return None
