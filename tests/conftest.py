from typing import Any, Optional

import pytest

from clubscore.config import Settings
from clubscore.service import ScoringService


class FakeScoreStore:
    def __init__(self) -> None:
        self.events = {
            "ind": {
                "id": "ind",
                "title": "Monthly Medal",
                "event_type": "个人赛",
                "end_time": "2024-10-10T18:00:00Z",
            },
            "cup": {
                "id": "cup",
                "title": "Club Ryder Cup",
                "event_type": "团体赛",
                "scoring_mode": "ryder_cup",
                "end_time": "2024-10-15T18:00:00Z",
                "team_name_mapping": {"red": "Red Team"},
            },
            "old": {
                "id": "old",
                "title": "Spring Open",
                "event_type": "个人赛",
                "end_time": "2024-03-01T18:00:00Z",
            },
            "social": {"id": "social", "title": "Dinner", "event_type": "普通活动"},
        }
        self.members: dict[str, list[dict[str, Any]]] = {
            "ind": [
                {"id": "s1", "user_id": "u1", "event_id": "ind", "total_strokes": 74},
                {"id": "s2", "user_id": "u2", "event_id": "ind", "total_strokes": 71},
                {"id": "s3", "user_id": "u3", "event_id": "ind"},
            ],
            "cup": [
                {
                    "id": "c1",
                    "user_id": "u1",
                    "event_id": "cup",
                    "team_name": "red",
                    "group_number": 1,
                    "total_strokes": 76,
                    "hole_scores": [4] * 18,
                },
                {
                    "id": "c2",
                    "user_id": "u2",
                    "event_id": "cup",
                    "team_name": "blue",
                    "group_number": 1,
                    "total_strokes": 80,
                    "hole_scores": [5] * 18,
                },
            ],
            "old": [{"id": "o1", "user_id": "u1", "event_id": "old", "total_strokes": 88}],
        }
        self.guests: dict[str, list[dict[str, Any]]] = {
            "ind": [{"id": "g1", "guest_name": "Visitor", "event_id": "ind", "total_strokes": 69}],
            "cup": [{"id": "g2", "guest_name": "Loner", "event_id": "cup", "total_strokes": 90}],
        }
        self.profiles = {"u1": {"id": "u1", "full_name": "Alice"}, "u2": {"id": "u2", "full_name": "Bo"}}
        self.player_rows = [
            {"id": "p1", "user_id": "u1", "total_strokes": 90, "rank": 4, "competition_date": "2026-08-01"},
            {"id": "p2", "user_id": "u1", "total_strokes": 84, "rank": 1, "competition_date": "2026-09-01"},
        ]

    async def get_competition(self, competition_id: str) -> Optional[dict[str, Any]]:
        return self.events.get(competition_id)

    async def list_competitions(self, ended_before: Optional[str] = None) -> list[dict[str, Any]]:
        return list(self.events.values())

    async def get_member_scores(self, competition_id: str) -> list[dict[str, Any]]:
        return self.members.get(competition_id, [])

    async def get_guest_scores(self, competition_id: str) -> list[dict[str, Any]]:
        return self.guests.get(competition_id, [])

    async def get_profiles(self, player_ids) -> dict[str, dict[str, Any]]:
        return {pid: self.profiles[pid] for pid in player_ids if pid in self.profiles}

    async def get_player_scores(self, player_id: str) -> list[dict[str, Any]]:
        return [row for row in self.player_rows if row["user_id"] == player_id]



@pytest.fixture
def scoring_service() -> ScoringService:
    return ScoringService(FakeScoreStore(), settings=Settings())  # type: ignore[arg-type]
