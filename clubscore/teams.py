from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

from .config import DEFAULT_TEAM_PALETTE
from .models import Competition


def resolve_display_name(team_name: str, display_names: Mapping[str, str] | None = None) -> str:
    if display_names:
        mapped = display_names.get(team_name)
        if mapped and str(mapped).strip():
            return str(mapped).strip()
    return team_name


def assign_team_colors(
    team_names: Iterable[str],
    explicit_colors: Mapping[str, str] | None = None,
    palette: Sequence[str] = DEFAULT_TEAM_PALETTE,
) -> Mapping[str, str]:
    if not palette:
        raise ValueError("Team colour palette must not be empty.")

    # Palette slots follow sorted name order so discovery order never matters.
    ordered = sorted(set(team_names))
    colors: dict[str, str] = {}
    for index, team_name in enumerate(ordered):
        explicit = (explicit_colors or {}).get(team_name)
        if explicit and str(explicit).strip():
            colors[team_name] = str(explicit).strip()
        else:
            colors[team_name] = palette[index % len(palette)]
    return MappingProxyType(colors)


def team_presentation(
    competition: Competition,
    team_names: Iterable[str],
    palette: Sequence[str] = DEFAULT_TEAM_PALETTE,
) -> dict[str, tuple[str, str]]:
    names = sorted(set(team_names))
    colors = assign_team_colors(names, competition.team_colors, palette)
    return {
        name: (resolve_display_name(name, competition.team_display_names), colors[name])
        for name in names
    }
