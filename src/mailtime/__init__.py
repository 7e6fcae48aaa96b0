"""Mailtime: average email response times within office hours.

Users in different time zones exchange email threads. For every user the
challenge asks for their average response time, counting only the time that
falls inside the user's weekday office hours. This package generates such
challenges, computes the expected answers, scores submitted answers, and runs
coordinator-commissioned evaluations of remote teams.

Subpackages:
    core: Office hours, interval segmentation and elapsed-time measures

Modules:
    schema: Wire models for challenge inputs and outputs
    solver: Per-user average response times
    checker: Scoring of submitted answers
    generator: Synthetic challenges by difficulty level
    evaluator: Multi-level evaluation of a team
    coordinator: HTTP delivery of challenges and results
    main: Command-line entry point

Example:
    >>> from src.mailtime import ChallengeGenerator, MailtimeSolver
    >>> example = ChallengeGenerator.seeded(1).generate_example()
    >>> MailtimeSolver().solve(example.input) == example.output
    True
"""

from src.mailtime.checker import MailtimeChecker, Tier, UserVerdict
from src.mailtime.coordinator import CoordinatorService
from src.mailtime.core import DurationMode, OfficeHours
from src.mailtime.errors import (
    InvalidConfigurationError,
    MailtimeError,
    MalformedResponseError,
    UnknownUserError,
)
from src.mailtime.evaluator import ChallengeRun, LevelBasedEvaluator
from src.mailtime.generator import ChallengeGenerator, DifficultyLevel
from src.mailtime.schema import (
    ChallengeExample,
    ChallengeInput,
    ChallengeOutput,
    Message,
    User,
)
from src.mailtime.solver import GroundTruth, MailtimeSolver, compute_ground_truth

__all__ = [
    # Core
    "DurationMode",
    "OfficeHours",
    # Errors
    "InvalidConfigurationError",
    "MailtimeError",
    "MalformedResponseError",
    "UnknownUserError",
    # Schema
    "ChallengeExample",
    "ChallengeInput",
    "ChallengeOutput",
    "Message",
    "User",
    # Solving and scoring
    "GroundTruth",
    "MailtimeSolver",
    "compute_ground_truth",
    "MailtimeChecker",
    "Tier",
    "UserVerdict",
    # Generation and evaluation
    "ChallengeGenerator",
    "DifficultyLevel",
    "ChallengeRun",
    "LevelBasedEvaluator",
    "CoordinatorService",
]
