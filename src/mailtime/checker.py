"""Scoring of submitted mailtime answers.

Each user of a challenge is scored by comparing the submitted average
response time with the two expected averages:

    matches the business-hours average   -> 4 points
    else matches the naive average       -> 1 point
    else                                 -> 0 points

The challenge score is ``5 * floor(mean(points))`` over all users (0 to 20).

Classes:
    Tier: Per-user scoring bucket.
    UserVerdict: Outcome of scoring one user.
    MailtimeChecker: Converts raw submissions and scores them.

Design Notes:
    - A missing user or a malformed value (anything but a non-negative
      integer) scores 0 for that user only; the rest are still scored.
    - A submission body that cannot be read at all raises
      MalformedResponseError from ``convert``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from src.common.challenge.results import ChallengeResult
from src.mailtime.errors import MalformedResponseError
from src.mailtime.schema import ChallengeInput
from src.mailtime.solver import GroundTruth, compute_ground_truth


logger = logging.getLogger(__name__)

# Multiplier from mean tier points (0-4) to the challenge score (0-20)
SCORE_SCALE = 5


class Tier(IntEnum):
    """Per-user scoring bucket; the value is the points awarded."""

    EXACT_BUSINESS_HOURS = 4
    EXACT_NAIVE = 1
    MISMATCH = 0


@dataclass(frozen=True)
class UserVerdict:
    """Outcome of scoring one user.

    Attributes:
        user: The user name.
        tier: The awarded tier.
        reported: The submitted value, None when missing or malformed.
        expected: The ground truth the value was compared with.
    """

    user: str
    tier: Tier
    reported: int | None
    expected: GroundTruth


def parse_reported_seconds(value: Any) -> int:
    """Validate one submitted average.

    Args:
        value: The raw submitted value.

    Returns:
        The value as a non-negative integer number of seconds.

    Raises:
        MalformedResponseError: If the value is not a non-negative integer.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedResponseError(
            f"Expected integer seconds, got {type(value).__name__}: {value!r}"
        )
    if value < 0:
        raise MalformedResponseError(f"Expected non-negative seconds, got {value}")
    return value


def classify(reported: int, expected: GroundTruth) -> Tier:
    """Tier for one reported value."""
    if reported == expected.business_hours:
        return Tier.EXACT_BUSINESS_HOURS
    if reported == expected.naive:
        return Tier.EXACT_NAIVE
    return Tier.MISMATCH


def overall_score(verdicts: list[UserVerdict]) -> int:
    """``5 * floor(mean(points))``, or 0 without users."""
    if not verdicts:
        return 0
    points = sum(int(verdict.tier) for verdict in verdicts)
    return SCORE_SCALE * (points // len(verdicts))


class MailtimeChecker:
    """Scores submissions against the expected averages of a challenge.

    Example:
        >>> checker = MailtimeChecker()
        >>> submission = checker.convert('{"response": {"alice": 60}}')
        >>> result = checker.check(challenge, submission)
        >>> result.score
        20
    """

    def convert(self, raw_response: str | bytes) -> dict[str, Any]:
        """Read a raw submission body.

        Args:
            raw_response: JSON text of the form ``{"response": {user: seconds}}``.

        Returns:
            The submitted mapping of user name to (unvalidated) value.

        Raises:
            MalformedResponseError: If the body is not such a JSON object.
        """
        try:
            data = json.loads(raw_response)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedResponseError(f"Submission is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("response"), dict):
            raise MalformedResponseError(
                "Submission must be a JSON object with a 'response' object"
            )
        return data["response"]

    def score_users(
        self,
        challenge: ChallengeInput,
        submission: Mapping[str, Any],
    ) -> list[UserVerdict]:
        """Score every user of the challenge.

        Raises:
            UnknownUserError: If the challenge itself references unknown users.
        """
        ground_truth = compute_ground_truth(challenge)
        verdicts: list[UserVerdict] = []

        for user in challenge.users:
            expected = ground_truth[user.name]
            if user.name not in submission:
                logger.warning("Submission has no answer for user '%s'", user.name)
                verdicts.append(UserVerdict(user.name, Tier.MISMATCH, None, expected))
                continue
            try:
                reported = parse_reported_seconds(submission[user.name])
            except MalformedResponseError as e:
                logger.warning("Malformed answer for user '%s': %s", user.name, e)
                verdicts.append(UserVerdict(user.name, Tier.MISMATCH, None, expected))
                continue
            verdicts.append(
                UserVerdict(user.name, classify(reported, expected), reported, expected)
            )

        return verdicts

    def check(
        self,
        challenge: ChallengeInput,
        submission: Mapping[str, Any],
    ) -> ChallengeResult:
        """Score a submission.

        Args:
            challenge: The challenge that was answered.
            submission: Submitted mapping of user name to average seconds.

        Returns:
            ChallengeResult whose message lists, comma-separated, the users
            that did not match the business-hours average (empty when all did).
        """
        verdicts = self.score_users(challenge, submission)
        score = overall_score(verdicts)
        missed = [v.user for v in verdicts if v.tier is not Tier.EXACT_BUSINESS_HOURS]

        logger.debug(
            "Scored %d users: %d exact, %d naive, score %d",
            len(verdicts),
            sum(1 for v in verdicts if v.tier is Tier.EXACT_BUSINESS_HOURS),
            sum(1 for v in verdicts if v.tier is Tier.EXACT_NAIVE),
            score,
        )
        return ChallengeResult(score=score, message=",".join(missed))
