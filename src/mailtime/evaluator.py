"""Level-based evaluation of a team's solver.

A team is challenged once per difficulty level. Each level generates a fresh
challenge, hands it to the team, and scores the answer; the level results are
summed into one ChallengeResult.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence

from src.common.challenge.results import ChallengeResult
from src.mailtime.checker import MailtimeChecker
from src.mailtime.generator import ChallengeGenerator, DifficultyLevel
from src.mailtime.schema import ChallengeInput


logger = logging.getLogger(__name__)

# Sends one challenge to a team and returns the raw answer body, or None
# when the team produced no usable answer.
ChallengeRun = Callable[[ChallengeInput], Awaitable[str | None]]


class LevelBasedEvaluator:
    """Scores a team across several difficulty levels.

    Attributes:
        checker: Converts and scores submissions.
        generator: Builds the challenge for each level.
        levels: Levels to play, or None for every scored level in random order.
    """

    def __init__(
        self,
        checker: MailtimeChecker | None = None,
        generator: ChallengeGenerator | None = None,
        levels: Sequence[DifficultyLevel] | None = None,
    ) -> None:
        self.checker = checker or MailtimeChecker()
        self.generator = generator or ChallengeGenerator()
        self.levels = list(levels) if levels else None

    def plan_levels(self) -> list[DifficultyLevel]:
        """Levels for one evaluation, in play order."""
        if self.levels is not None:
            return list(self.levels)
        levels = DifficultyLevel.scored_levels()
        self.generator.rng.shuffle(levels)
        return levels

    async def evaluate_level(
        self,
        level: DifficultyLevel,
        run: ChallengeRun,
    ) -> ChallengeResult | None:
        """Play one level.

        Returns:
            The level's result, or None when the team gave no answer.

        Raises:
            MalformedResponseError: If the answer body cannot be read.
            UnknownUserError: If the generated challenge is inconsistent.
        """
        challenge = self.generator.generate(level)
        raw_response = await run(challenge)
        if raw_response is None:
            logger.info("Level %s: no answer from team", level.name)
            return None

        submission = self.checker.convert(raw_response)
        result = self.checker.check(challenge, submission)
        logger.info("Level %s: score %d", level.name, result.score)
        return result

    async def evaluate_team(self, run: ChallengeRun) -> ChallengeResult:
        """Play every planned level and sum the results.

        A level that fails or gets no answer contributes nothing; the
        remaining levels are still played.
        """
        total = ChallengeResult()
        for level in self.plan_levels():
            try:
                result = await self.evaluate_level(level, run)
            except Exception as e:
                logger.error("Level %s failed: %s", level.name, e, exc_info=True)
                continue
            if result is not None:
                total = total + result
        return total
