"""Coordinator client for mailtime evaluation runs.

A coordinator commissions a run by naming a team and a callback URL. The
service delivers each generated challenge to the team over HTTP, scores the
answers with a LevelBasedEvaluator, and posts the total back to the callback.

Example:
    >>> config = MailtimeConfig(coordinator_auth_token="secret")
    >>> async with CoordinatorService(config, LevelBasedEvaluator()) as service:
    ...     request = EvaluationRequest(
    ...         run_id="run-1",
    ...         team_url="http://team:8080",
    ...         callback_url="http://coordinator/results",
    ...     )
    ...     result = await service.run(request)
"""

from __future__ import annotations

import logging

import httpx

from src.common.challenge.config import MailtimeConfig
from src.common.challenge.results import (
    ChallengeResult,
    EvaluationRequest,
    EvaluationResultRequest,
)
from src.mailtime.evaluator import ChallengeRun, LevelBasedEvaluator
from src.mailtime.schema import ChallengeInput


logger = logging.getLogger(__name__)


class CoordinatorService:
    """Runs commissioned evaluations and reports their results.

    The service owns an httpx.AsyncClient unless one is passed in; an owned
    client is closed on context exit, a borrowed one is left open.
    """

    def __init__(
        self,
        config: MailtimeConfig,
        evaluator: LevelBasedEvaluator,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            config: Endpoint, timeout and auth settings.
            evaluator: Scores the team across difficulty levels.
            http_client: Optional client to borrow instead of creating one.
        """
        self.config = config
        self.evaluator = evaluator
        self._external_client = http_client is not None
        self._http_client = http_client

    async def __aenter__(self) -> CoordinatorService:
        """Async context manager entry."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if not self._external_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure the httpx client is available.

        Raises:
            RuntimeError: If the client is not initialized.
        """
        if self._http_client is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with' context manager or "
                "call __aenter__ first."
            )
        return self._http_client

    def challenge_url(self, team_url: str) -> str:
        """Where challenges for a team are delivered."""
        return f"{team_url.rstrip('/')}/{self.config.endpoint_suffix}"

    def team_run(self, request: EvaluationRequest) -> ChallengeRun:
        """Build the callable that delivers one challenge to the team.

        The callable returns the team's raw answer body, or None when the
        team answered with a non-success status.

        Raises:
            httpx.HTTPError: From the callable, on transport failures and
                timeouts.
        """
        url = self.challenge_url(request.team_url)

        async def run(challenge: ChallengeInput) -> str | None:
            client = self._ensure_client()
            response = await client.post(
                url,
                json=challenge.to_payload(),
                timeout=self.config.challenge_timeout,
            )
            if not response.is_success:
                logger.warning(
                    "Team at %s answered with status %d", url, response.status_code
                )
                return None
            return response.text

        return run

    async def report(self, request: EvaluationRequest, result: ChallengeResult) -> bool:
        """Post a result to the run's callback URL.

        Returns:
            True if the coordinator accepted the result.
        """
        client = self._ensure_client()
        payload = EvaluationResultRequest.from_result(request.run_id, result).to_payload()
        headers = {}
        if self.config.bearer_token is not None:
            headers["Authorization"] = self.config.bearer_token

        try:
            response = await client.post(
                request.callback_url,
                json=payload,
                headers=headers,
                timeout=self.config.callback_timeout,
            )
        except httpx.HTTPError as e:
            logger.error(
                "Failed to post result of run %s to %s: %s",
                request.run_id,
                request.callback_url,
                e,
            )
            return False

        if not response.is_success:
            logger.warning(
                "Coordinator rejected result of run %s with status %d: %s",
                request.run_id,
                response.status_code,
                response.text,
            )
            return False

        logger.info("Posted result of run %s (score %d)", request.run_id, result.score)
        return True

    async def run(self, request: EvaluationRequest) -> ChallengeResult:
        """Evaluate the requested team and report the result."""
        logger.info("Evaluating run %s against %s", request.run_id, request.team_url)
        result = await self.evaluator.evaluate_team(self.team_run(request))
        await self.report(request, result)
        return result
