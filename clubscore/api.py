from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Query
import uvicorn

from .config import get_settings
from .errors import CompetitionNotFoundError, ScoringInputError
from .models import CompetitionResultsResponse, CompetitionSummary, PlayerScoreStats
from .service import ScoringService
from .store_client import ScoreStoreClient, ScoreStoreError

_settings = get_settings()
logging.basicConfig(level=_settings.log_level.upper())
_client = ScoreStoreClient(_settings)
_service = ScoringService(_client, settings=_settings)


@asynccontextmanager
async def lifespan(_: FastAPI):
    try:
        yield
    finally:
        await _client.aclose()


app = FastAPI(
    title="Club Competition Scoring",
    version="0.1.0",
    description="Rankings and team standings for golf club competitions.",
    lifespan=lifespan,
)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/competitions/{competition_id}/results", response_model=CompetitionResultsResponse)
async def competition_results(competition_id: str) -> CompetitionResultsResponse:
    try:
        return await _service.competition_results(competition_id)
    except CompetitionNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ScoreStoreError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/dashboard/summaries", response_model=list[CompetitionSummary])
async def dashboard_summaries(
    limit: Optional[int] = Query(default=None, ge=1, le=20),
) -> list[CompetitionSummary]:
    try:
        return await _service.dashboard_summaries(limit=limit)
    except ScoreStoreError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except ScoringInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/players/{player_id}/stats", response_model=PlayerScoreStats)
async def player_stats(player_id: str) -> PlayerScoreStats:
    try:
        return await _service.player_stats(player_id)
    except ScoreStoreError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except ScoringInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def run() -> None:
    uvicorn.run("clubscore.api:app", host="127.0.0.1", port=8000, reload=False)


if __name__ == "__main__":
    run()
