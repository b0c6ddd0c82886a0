from __future__ import annotations

import argparse
import asyncio
import logging

from .config import get_settings
from .errors import CompetitionNotFoundError, ScoringInputError
from .models import CompetitionFormat, CompetitionSummary
from .service import ScoringService
from .store_client import ScoreStoreClient, ScoreStoreError


async def _run_results_command(competition_id: str) -> None:
    settings = get_settings()
    async with ScoreStoreClient(settings) as client:
        service = ScoringService(client, settings=settings)
        result = await service.competition_results(competition_id)

    competition = result.competition
    print(f"\n{competition.title} (id={competition.id}) | {competition.format.value}")
    print(f"{'Rank':<5} {'Player':<26} {'Gross':>6} {'Net':>6} {'ToPar':>6}")
    print("-" * 54)
    for ranked in result.ranking.ranked:
        entry = ranked.entry
        name = entry.display_name + (" (guest)" if entry.is_guest else "")
        print(
            f"{ranked.rank:<5} "
            f"{name[:26]:<26} "
            f"{entry.total_strokes:>6} "
            f"{(entry.net_strokes if entry.net_strokes is not None else '-'):>6} "
            f"{(_signed(ranked.to_par) if ranked.to_par is not None else '-'):>6}"
        )
    for entry in result.ranking.unscored:
        print(f"{'-':<5} {entry.display_name[:26]:<26} {'no score':>6}")

    if result.team_standings is not None:
        standings = result.team_standings
        print(f"\nTeam standings ({standings.mode.value})")
        print("-" * 54)
        for standing in standings.standings:
            marker = "*" if standing.team_name in standings.winners else " "
            print(f"{marker} {standing.display_name[:30]:<30} {standing.score:>8.1f}")
        if standings.is_tie:
            print("Result: tie between " + ", ".join(standings.winners))
        if standings.incomplete_groups:
            groups = ", ".join(str(g) for g in standings.incomplete_groups)
            print(f"Incomplete groups skipped: {groups}")

    if result.issues:
        print(f"\n{len(result.issues)} data issue(s):")
        for issue in result.issues:
            print(f"  [{issue.kind.value}] {issue.message}")


async def _run_dashboard_command(limit: int | None) -> None:
    settings = get_settings()
    async with ScoreStoreClient(settings) as client:
        service = ScoringService(client, settings=settings)
        summaries = await service.dashboard_summaries(limit=limit)

    if not summaries:
        print("No finished competitions with scores.")
        return
    for summary in summaries:
        _print_summary(summary)


async def _run_player_command(player_id: str) -> None:
    settings = get_settings()
    async with ScoreStoreClient(settings) as client:
        service = ScoringService(client, settings=settings)
        stats = await service.player_stats(player_id)

    print(f"Rounds: {stats.total_rounds}")
    print(f"Average strokes: {stats.average_strokes:.1f}")
    print(f"Best score: {stats.best_score if stats.best_score is not None else '-'}")
    print(f"Top-3 finishes: {stats.top_three_count}")
    if stats.trend is not None:
        direction = "improving" if stats.trend.improving else "worsening"
        print(
            f"Trend over last {stats.trend.rounds_considered} rounds: "
            f"{direction} by {stats.trend.value} (avg {stats.trend.average_strokes})"
        )


def _print_summary(summary: CompetitionSummary) -> None:
    ended = summary.end_time.date().isoformat() if summary.end_time else "-"
    print(f"\n{summary.title} | ended {ended}")
    print("-" * 54)
    if summary.format is CompetitionFormat.INDIVIDUAL:
        for entry in summary.podium:
            net = entry.net_strokes if entry.net_strokes is not None else "-"
            print(f"{entry.rank:<4} {entry.display_name[:26]:<26} {entry.total_strokes:>6} {net:>6}")
    else:
        for standing in summary.standings:
            print(f"{standing.display_name[:30]:<30} {standing.score:>8.1f}")
        if summary.is_tie:
            print("Result: tie")
    if summary.incomplete:
        print("(incomplete data)")


def _signed(value: int) -> str:
    return "E" if value == 0 else f"{value:+d}"


def main() -> None:
    parser = argparse.ArgumentParser(description="Golf club competition scoring CLI.")
    sub = parser.add_subparsers(dest="command", required=True)

    results_parser = sub.add_parser("results", help="Show rankings and standings for a competition")
    results_parser.add_argument("competition_id")

    dashboard_parser = sub.add_parser("dashboard", help="Summarize recently finished competitions")
    dashboard_parser.add_argument("--limit", type=int, default=None)

    player_parser = sub.add_parser("player", help="Show a member's score statistics")
    player_parser.add_argument("player_id")

    args = parser.parse_args()
    logging.basicConfig(level=get_settings().log_level.upper())
    try:
        if args.command == "results":
            asyncio.run(_run_results_command(args.competition_id))
            return
        if args.command == "dashboard":
            asyncio.run(_run_dashboard_command(args.limit))
            return
        if args.command == "player":
            asyncio.run(_run_player_command(args.player_id))
            return
        parser.error(f"Unsupported command: {args.command}")
    except ScoreStoreError as exc:
        print(f"Record store error: {exc}")
    except (CompetitionNotFoundError, ScoringInputError) as exc:
        print(f"Error: {exc}")


if __name__ == "__main__":
    main()
