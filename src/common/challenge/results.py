"""Challenge result and coordinator payload models.

This module defines Pydantic models exchanged between the evaluator and the
coordinator that commissioned an evaluation run.

Models:
    - ChallengeResult: Score and diagnostic message for one or more levels
    - EvaluationRequest: A coordinator's request to evaluate one team
    - EvaluationResultRequest: The result payload posted back to the coordinator

Design Note:
    Wire field names follow the coordinator's camelCase JSON (``runId``,
    ``teamUrl``, ``callbackUrl``). Models accept either spelling on input and
    serialize with aliases via ``model_dump(by_alias=True)``.

Example:
    >>> from src.common.challenge.results import ChallengeResult
    >>> total = ChallengeResult(score=20) + ChallengeResult(score=5, message="bob")
    >>> total.score
    25
    >>> total.message
    'bob'
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Challenge Result
# =============================================================================


class ChallengeResult(BaseModel):
    """Score and diagnostic message produced by checking one submission.

    Results from several difficulty levels combine with ``+``: scores add up
    and messages are joined with a newline.

    Attributes:
        score: The achieved score.
        message: Diagnostic message; empty on a perfect result.

    Example:
        >>> ChallengeResult(score=4, message="a") + ChallengeResult(score=1, message="b")
        ChallengeResult(score=5, message='a\\nb')
    """

    model_config = ConfigDict(frozen=True)

    score: int = Field(default=0, ge=0, description="Achieved score")
    message: str = Field(default="", description="Diagnostic message")

    def __add__(self, other: ChallengeResult) -> ChallengeResult:
        if not isinstance(other, ChallengeResult):
            return NotImplemented
        return ChallengeResult(
            score=self.score + other.score,
            message=f"{self.message}\n{other.message}".strip(),
        )


# =============================================================================
# Coordinator Payloads
# =============================================================================


class EvaluationRequest(BaseModel):
    """Request from a coordinator to evaluate one team.

    Attributes:
        run_id: Identifier of the evaluation run.
        team_url: Base URL of the team's solver.
        callback_url: URL the result is posted to once evaluation finishes.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    run_id: str = Field(..., min_length=1, alias="runId")
    team_url: str = Field(..., min_length=1, alias="teamUrl")
    callback_url: str = Field(..., min_length=1, alias="callbackUrl")


class EvaluationResultRequest(BaseModel):
    """Result payload posted back to the coordinator.

    Attributes:
        run_id: Identifier of the evaluation run.
        score: Total score across all evaluated levels.
        message: Combined diagnostic message.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    run_id: str = Field(..., min_length=1, alias="runId")
    score: int = Field(..., ge=0)
    message: str = Field(default="")

    @classmethod
    def from_result(cls, run_id: str, result: ChallengeResult) -> EvaluationResultRequest:
        """Build the callback payload for a finished run."""
        return cls(run_id=run_id, score=result.score, message=result.message)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the coordinator's camelCase JSON shape."""
        return self.model_dump(mode="json", by_alias=True)
