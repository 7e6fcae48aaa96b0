"""Mailtime challenge command-line entry point.

Usage::

    python -m src.mailtime.main example
    python -m src.mailtime.main solve challenge.json --naive
    python -m src.mailtime.main evaluate --run-id run-1 \\
        --team-url http://team:8080 --callback-url http://coordinator/results

Subcommands:
    example     Print a generated EXAMPLE input with its expected output
    solve       Print the output for a challenge input file
    evaluate    Evaluate one team and post the result to the coordinator

Every subcommand also accepts the MailtimeConfig flags (``--log-level``,
``--seed``, ``--levels``, ...). Environment variables prefixed with
``MAILTIME_`` are supported as well.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from src.common.challenge.config import MailtimeConfig, validate_config
from src.common.challenge.results import EvaluationRequest
from src.mailtime.checker import MailtimeChecker
from src.mailtime.coordinator import CoordinatorService
from src.mailtime.core.durations import DurationMode
from src.mailtime.evaluator import LevelBasedEvaluator
from src.mailtime.generator import ChallengeGenerator, DifficultyLevel
from src.mailtime.schema import ChallengeInput
from src.mailtime.solver import MailtimeSolver


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the subcommand parser."""
    parser = argparse.ArgumentParser(
        prog="mailtime",
        description="Mailtime response-time challenge",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("example", help="Print an example input and output")

    solve = commands.add_parser("solve", help="Solve a challenge input file")
    solve.add_argument("path", type=Path, help="JSON challenge input")
    solve.add_argument(
        "--naive",
        action="store_true",
        help="Measure wall-clock time instead of business hours",
    )

    evaluate = commands.add_parser("evaluate", help="Evaluate one team")
    evaluate.add_argument("--run-id", required=True, dest="run_id")
    evaluate.add_argument("--team-url", required=True, dest="team_url")
    evaluate.add_argument("--callback-url", required=True, dest="callback_url")

    return parser


def print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2))


def run_example(config: MailtimeConfig) -> int:
    example = ChallengeGenerator.seeded(config.seed).generate_example()
    print_json(example.to_payload())
    return 0


def run_solve(path: Path, naive: bool) -> int:
    challenge = ChallengeInput.model_validate_json(path.read_text())
    mode = DurationMode.NAIVE if naive else DurationMode.BUSINESS_HOURS
    print_json(MailtimeSolver(mode).solve(challenge).to_payload())
    return 0


async def run_evaluate(config: MailtimeConfig, request: EvaluationRequest) -> int:
    """Evaluate one team and report to the coordinator."""
    evaluator = LevelBasedEvaluator(
        checker=MailtimeChecker(),
        generator=ChallengeGenerator.seeded(config.seed),
        levels=DifficultyLevel.from_names(config.levels) or None,
    )
    async with CoordinatorService(config, evaluator) as service:
        result = await service.run(request)
    print_json(result.model_dump(mode="json"))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, configure logging, and run one subcommand."""
    args, rest = build_parser().parse_known_args(argv)
    config = MailtimeConfig.from_cli_args(rest)

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "example":
        return run_example(config)
    if args.command == "solve":
        return run_solve(args.path, args.naive)

    known_levels = [level.name for level in DifficultyLevel]
    for warning in validate_config(config, known_levels=known_levels):
        logger.warning(warning)

    request = EvaluationRequest(
        run_id=args.run_id,
        team_url=args.team_url,
        callback_url=args.callback_url,
    )
    return asyncio.run(run_evaluate(config, request))


if __name__ == "__main__":
    sys.exit(main())
