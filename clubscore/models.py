from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

HOLE_COUNT = 18


class CompetitionFormat(str, Enum):
    INDIVIDUAL = "individual"
    TEAM = "team"


class TeamScoringMode(str, Enum):
    MATCH_PLAY = "match_play"
    AGGREGATE_STROKES = "aggregate_strokes"


class IssueKind(str, Enum):
    MALFORMED_ENTRY = "malformed_entry"
    MISSING_CONFIGURATION = "missing_configuration"
    INCOMPLETE_GROUP = "incomplete_group"
    UNSCORABLE_ENTRY = "unscorable_entry"
    MISSING_TEAM = "missing_team"


class DataIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: IssueKind
    message: str
    competition_id: Optional[str] = None
    group_number: Optional[int] = None
    entry_id: Optional[str] = None
    team_name: Optional[str] = None


class MemberSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["member"] = "member"
    player_id: str


class GuestSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["guest"] = "guest"
    guest_name: str


EntrySource = Annotated[Union[MemberSource, GuestSource], Field(discriminator="kind")]


class ScoreEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    entry_id: str
    competition_id: str
    source: EntrySource
    display_name: str
    group_number: Optional[int] = None
    team_name: Optional[str] = None
    hole_scores: Optional[tuple[Optional[int], ...]] = None
    total_strokes: Optional[int] = None
    net_strokes: Optional[int] = None
    handicap: float = 0.0
    assigned_rank: Optional[int] = None
    competition_date: Optional[str] = None

    @field_validator("hole_scores")
    @classmethod
    def _fixed_round_length(
        cls, value: Optional[tuple[Optional[int], ...]]
    ) -> Optional[tuple[Optional[int], ...]]:
        if value is not None and len(value) != HOLE_COUNT:
            raise ValueError(f"hole_scores must contain exactly {HOLE_COUNT} values")
        return value

    @property
    def is_guest(self) -> bool:
        return isinstance(self.source, GuestSource)

    @property
    def player_id(self) -> Optional[str]:
        return self.source.player_id if isinstance(self.source, MemberSource) else None

    @property
    def guest_name(self) -> Optional[str]:
        return self.source.guest_name if isinstance(self.source, GuestSource) else None

    @property
    def has_hole_scores(self) -> bool:
        return self.hole_scores is not None and any(v is not None for v in self.hole_scores)

    @property
    def strokes_for_aggregate(self) -> Optional[int]:
        return self.net_strokes if self.net_strokes is not None else self.total_strokes


class Competition(BaseModel):
    id: str
    title: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    format: CompetitionFormat = CompetitionFormat.INDIVIDUAL
    team_scoring_mode: TeamScoringMode = TeamScoringMode.MATCH_PLAY
    team_display_names: dict[str, str] = Field(default_factory=dict)
    team_colors: dict[str, str] = Field(default_factory=dict)
    par: Optional[list[int]] = None

    @property
    def total_par(self) -> Optional[int]:
        if self.par is None or len(self.par) != HOLE_COUNT:
            return None
        return sum(self.par)


class RankedEntry(BaseModel):
    entry: ScoreEntry
    rank: int
    to_par: Optional[int] = None


class RankingResult(BaseModel):
    ranked: list[RankedEntry] = Field(default_factory=list)
    unscored: list[ScoreEntry] = Field(default_factory=list)
    issues: list[DataIssue] = Field(default_factory=list)


class TeamStanding(BaseModel):
    team_name: str
    display_name: str
    color: str
    score: float


class GroupTeamScore(BaseModel):
    group_number: int
    scores: dict[str, float]
    holes_contested: int = 0


class TeamStandingsResult(BaseModel):
    competition_id: str
    mode: TeamScoringMode
    standings: list[TeamStanding] = Field(default_factory=list)
    winners: list[str] = Field(default_factory=list)
    is_tie: bool = False
    groups: list[GroupTeamScore] = Field(default_factory=list)
    incomplete_groups: list[int] = Field(default_factory=list)
    issues: list[DataIssue] = Field(default_factory=list)


class PodiumEntry(BaseModel):
    display_name: str
    is_guest: bool
    total_strokes: int
    net_strokes: Optional[int] = None
    rank: int
    to_par: Optional[int] = None


class CompetitionSummary(BaseModel):
    competition_id: str
    title: str
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    format: CompetitionFormat
    team_scoring_mode: Optional[TeamScoringMode] = None
    podium: list[PodiumEntry] = Field(default_factory=list)
    standings: list[TeamStanding] = Field(default_factory=list)
    winners: list[str] = Field(default_factory=list)
    is_tie: bool = False
    incomplete: bool = False


class CompetitionResultsResponse(BaseModel):
    generated_at: datetime
    competition: Competition
    entries: list[ScoreEntry] = Field(default_factory=list)
    ranking: RankingResult
    team_standings: Optional[TeamStandingsResult] = None
    issues: list[DataIssue] = Field(default_factory=list)


class ScoreTrend(BaseModel):
    improving: bool
    value: int
    average_strokes: int
    rounds_considered: int


class PlayerScoreStats(BaseModel):
    player_id: str
    total_rounds: int = 0
    average_strokes: float = 0.0
    best_score: Optional[int] = None
    top_three_count: int = 0
    trend: Optional[ScoreTrend] = None
