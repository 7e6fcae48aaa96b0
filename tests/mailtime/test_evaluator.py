"""Tests for LevelBasedEvaluator.

Tests cover:
- Level planning (explicit and shuffled defaults)
- Summing results across levels
- Levels without answers, with unreadable answers, or failing runs
"""

from __future__ import annotations

import json
import random

import pytest

from src.common.challenge.results import ChallengeResult
from src.mailtime.checker import MailtimeChecker
from src.mailtime.core.durations import DurationMode
from src.mailtime.evaluator import LevelBasedEvaluator
from src.mailtime.generator import ChallengeGenerator, DifficultyLevel
from src.mailtime.schema import ChallengeInput
from src.mailtime.solver import MailtimeSolver


def solving_run(mode: DurationMode = DurationMode.BUSINESS_HOURS):
    """A team that answers with the solver in the given mode."""

    async def run(challenge: ChallengeInput) -> str | None:
        return json.dumps(MailtimeSolver(mode).solve(challenge).to_payload())

    return run


@pytest.fixture
def evaluator() -> LevelBasedEvaluator:
    """Evaluator playing EXTRA_SMALL twice with a seeded generator."""
    return LevelBasedEvaluator(
        checker=MailtimeChecker(),
        generator=ChallengeGenerator(random.Random(99)),
        levels=[DifficultyLevel.EXTRA_SMALL, DifficultyLevel.EXTRA_SMALL],
    )


class TestPlanLevels:
    """Tests for LevelBasedEvaluator.plan_levels."""

    def test_explicit_levels_kept_in_order(self) -> None:
        evaluator = LevelBasedEvaluator(
            levels=[DifficultyLevel.LARGE, DifficultyLevel.SMALL]
        )
        assert evaluator.plan_levels() == [DifficultyLevel.LARGE, DifficultyLevel.SMALL]

    def test_default_levels_are_scored_levels(self) -> None:
        """Test that the default plan is every level but EXAMPLE."""
        evaluator = LevelBasedEvaluator(generator=ChallengeGenerator(random.Random(3)))
        planned = evaluator.plan_levels()

        assert len(planned) == len(DifficultyLevel.scored_levels())
        assert set(planned) == set(DifficultyLevel.scored_levels())

    def test_default_plan_is_seeded(self) -> None:
        first = LevelBasedEvaluator(generator=ChallengeGenerator.seeded(5)).plan_levels()
        second = LevelBasedEvaluator(generator=ChallengeGenerator.seeded(5)).plan_levels()
        assert first == second

    def test_empty_levels_mean_default(self) -> None:
        assert LevelBasedEvaluator(levels=[]).levels is None


class TestEvaluateTeam:
    """Tests for LevelBasedEvaluator.evaluate_team."""

    @pytest.mark.asyncio
    async def test_perfect_team(self, evaluator: LevelBasedEvaluator) -> None:
        """Test that correct answers score 20 on each level."""
        result = await evaluator.evaluate_team(solving_run())

        assert result == ChallengeResult(score=40, message="")

    @pytest.mark.asyncio
    async def test_naive_team_scores_less(self, evaluator: LevelBasedEvaluator) -> None:
        result = await evaluator.evaluate_team(solving_run(DurationMode.NAIVE))
        assert result.score < 40

    @pytest.mark.asyncio
    async def test_no_answer_contributes_nothing(
        self, evaluator: LevelBasedEvaluator
    ) -> None:
        async def silent(challenge: ChallengeInput) -> str | None:
            return None

        assert await evaluator.evaluate_team(silent) == ChallengeResult()

    @pytest.mark.asyncio
    async def test_unreadable_answer_contributes_nothing(
        self, evaluator: LevelBasedEvaluator
    ) -> None:
        async def garbage(challenge: ChallengeInput) -> str | None:
            return "<html>oops</html>"

        assert await evaluator.evaluate_team(garbage) == ChallengeResult()

    @pytest.mark.asyncio
    async def test_failing_level_does_not_stop_others(
        self,
        evaluator: LevelBasedEvaluator,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that an exception on one level is logged and skipped."""
        calls = 0
        solve = solving_run()

        async def flaky(challenge: ChallengeInput) -> str | None:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("connection reset")
            return await solve(challenge)

        with caplog.at_level("ERROR", logger="src.mailtime.evaluator"):
            result = await evaluator.evaluate_team(flaky)

        assert calls == 2
        assert result.score == 20
        assert "connection reset" in caplog.text

    @pytest.mark.asyncio
    async def test_wrong_answers_listed(self) -> None:
        """Test that mismatched users appear in the message."""
        evaluator = LevelBasedEvaluator(
            generator=ChallengeGenerator.seeded(11),
            levels=[DifficultyLevel.EXTRA_SMALL],
        )

        async def wrong(challenge: ChallengeInput) -> str | None:
            return json.dumps({"response": {u.name: 10**9 for u in challenge.users}})

        result = await evaluator.evaluate_team(wrong)

        assert result.score == 0
        assert len(result.message.split(",")) == 10
