"""Challenge-harness helper code shared by every challenge.

Modules:
    config: Configuration models for challenge evaluators
    results: Pydantic models for challenge results and coordinator payloads
"""

from __future__ import annotations

from src.common.challenge.config import (
    ChallengeConfig,
    MailtimeConfig,
    validate_config,
)
from src.common.challenge.results import (
    ChallengeResult,
    EvaluationRequest,
    EvaluationResultRequest,
)

__all__ = [
    # Result models
    "ChallengeResult",
    "EvaluationRequest",
    "EvaluationResultRequest",
    # Configuration models
    "ChallengeConfig",
    "MailtimeConfig",
    # Configuration utilities
    "validate_config",
]
