#!/usr/bin/env python3
"""
Competition scoring CLI

Scores activities in a competition file and prints the standings.

Usage:
    python score_competition.py -c data/competitions/ABC123.json --activity tug --winner red
    python score_competition.py -c data/competitions/ABC123.json --activity relay --team-score red=42 --team-score blue=37
    python score_competition.py -c data/competitions/ABC123.json --activity darts --score alice=20 --score bob=15
    python score_competition.py -c data/competitions/ABC123.json --rules my_rules.json
    python score_competition.py -c data/competitions/ABC123.json --delete-activity darts
"""

import argparse
import sys
from pathlib import Path

from squadscore import (
    CompetitionStore,
    RawScores,
    ScoringError,
    TeamScoringMode,
    build_results,
    format_results,
)
from squadscore.config import load_scoring_rules
from squadscore.logging_config import setup_logging


def parse_assignments(values: list[str], label: str) -> dict[str, float]:
    """Parse repeated ID=VALUE arguments."""
    parsed = {}
    for value in values:
        key, sep, number = value.partition('=')
        if not sep or not key:
            raise argparse.ArgumentTypeError(f'{label} must look like ID=VALUE, got {value!r}')
        try:
            parsed[key] = float(number)
        except ValueError:
            raise argparse.ArgumentTypeError(f'{label} for {key} is not a number: {number!r}') from None
    return parsed


def main():
    parser = argparse.ArgumentParser(description="Team competition scorer")
    parser.add_argument(
        "--competition", "-c",
        required=True,
        help="Path to the competition JSON file",
    )
    parser.add_argument(
        "--activity", "-a",
        default=None,
        help="Activity id to score",
    )
    parser.add_argument(
        "--winner", "-w",
        default=None,
        help="Winning team id (team activity, win/loss)",
    )
    parser.add_argument(
        "--team-score",
        action="append",
        default=[],
        metavar="TEAM=VALUE",
        help="Custom score for a team (team activity, repeatable)",
    )
    parser.add_argument(
        "--score",
        action="append",
        default=[],
        metavar="PARTICIPANT=VALUE",
        help="Score for a participant (individual activity, repeatable)",
    )
    parser.add_argument(
        "--delete-activity",
        default=None,
        help="Delete an activity and its points",
    )
    parser.add_argument(
        "--rules", "-r",
        default=None,
        help="Apply scoring rules from a JSON file and rescore completed activities",
    )
    parser.add_argument(
        "--recompute",
        action="store_true",
        help="Rebuild team totals from stored point records",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress the results summary",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging (same as --log-level debug)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: info)",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Also write a per-run log file to this directory",
    )

    args = parser.parse_args()

    if args.winner and args.team_score:
        parser.error("--winner and --team-score are mutually exclusive")

    setup_logging(
        level="debug" if args.verbose else args.log_level,
        log_dir=args.log_dir,
        competition_code=Path(args.competition).stem,
        quiet=args.quiet,
    )

    try:
        team_scores = parse_assignments(args.team_score, "--team-score")
        participant_scores = parse_assignments(args.score, "--score")
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    try:
        store = CompetitionStore(args.competition)

        if args.rules:
            totals = store.update_rules(load_scoring_rules(args.rules))
            print(f"Rules applied, totals: {totals}")

        if args.delete_activity:
            store.delete_activity(args.delete_activity)
            print(f"Deleted activity {args.delete_activity}")

        if args.activity:
            mode = TeamScoringMode.CUSTOM if team_scores else TeamScoringMode.WIN_LOSS
            raw_scores = RawScores(
                winning_team_id=args.winner,
                team_scores=team_scores,
                participant_scores=participant_scores,
            )
            result = store.save_activity_scores(args.activity, raw_scores, mode=mode)
            print(f"Scored {args.activity}: winner {result.winner_name or 'none'}")

        if args.recompute:
            store.recompute_totals()

    except FileNotFoundError as e:
        print(f"❌ {e}")
        sys.exit(1)
    except (ScoringError, ValueError) as e:
        print(f"❌ {e}")
        sys.exit(1)

    errors, warnings = store.validate()
    for warning in warnings:
        print(f"⚠️  {warning}")
    for error in errors:
        print(f"❌ {error}")

    if not args.quiet:
        results = build_results(
            store.teams,
            store.participants,
            store.activities,
            store.point_records_by_activity,
        )
        print()
        print(format_results(results))

    if errors:
        sys.exit(1)


if __name__ == "__main__":
    main()
