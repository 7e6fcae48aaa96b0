"""Synthetic mailtime challenges.

Generates users with office hours drawn from a fixed pool and email threads
between them. All randomness comes from an injectable ``random.Random`` so a
seeded generator always produces the same challenge.

Classes:
    LevelShape: Size parameters of one difficulty level.
    DifficultyLevel: The available difficulty levels.
    ChallengeGenerator: Builds challenges and examples.

Thread Shape:
    A thread starts on THREAD_START_DATE at a random time inside the first
    sender's office hours. Each response comes from the previous receiver
    and goes to another random thread member, at a random time inside the
    responder's office hours: on the day received, or the next day if that
    would precede receipt, one more day with 25% probability, and never on
    a weekend.

Example:
    >>> generator = ChallengeGenerator(random.Random(42))
    >>> challenge = generator.generate(DifficultyLevel.SMALL)
    >>> len(challenge.users)
    10
"""

from __future__ import annotations

import logging
import random
import string
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum

from src.mailtime.core.durations import DurationMode
from src.mailtime.core.office_hours import LAST_WEEKDAY, OfficeHours
from src.mailtime.core.segmentation import to_instant
from src.mailtime.schema import (
    REPLY_PREFIX,
    ChallengeExample,
    ChallengeInput,
    Message,
    User,
)
from src.mailtime.solver import MailtimeSolver


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

OFFICE_HOURS_POOL: tuple[OfficeHours, ...] = (
    OfficeHours("Europe/Paris", 9, 18),
    OfficeHours("Australia/Sydney", 10, 18),
    OfficeHours("Asia/Singapore", 8, 17),
    OfficeHours("Asia/Hong_Kong", 8, 17),
    OfficeHours("America/New_York", 10, 18),
    OfficeHours("America/Los_Angeles", 7, 16),
)

THREAD_START_DATE = date(2024, 5, 1)
NAME_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
USER_NAME_LENGTH = 5
SUBJECT_LENGTH = 10
EXTRA_DAY_ODDS = 4  # one in four responses skips an extra day


# =============================================================================
# Difficulty Levels
# =============================================================================


@dataclass(frozen=True)
class LevelShape:
    """Size parameters of a difficulty level (ranges are inclusive).

    Attributes:
        user_count: Number of users in the challenge.
        users_per_thread: Number of users taking part in each thread.
        thread_count: Range of the number of threads.
        responses_per_thread: Range of the number of emails per thread.
    """

    user_count: int
    users_per_thread: int
    thread_count: tuple[int, int]
    responses_per_thread: tuple[int, int]


class DifficultyLevel(Enum):
    """Challenge difficulty levels, easiest first."""

    EXAMPLE = LevelShape(2, 2, (1, 1), (2, 2))
    EXTRA_SMALL = LevelShape(10, 5, (5, 10), (5, 10))
    SMALL = LevelShape(10, 10, (10, 20), (10, 20))
    DEFAULT = LevelShape(25, 10, (20, 30), (10, 20))
    LARGE = LevelShape(50, 20, (25, 50), (25, 50))
    EXTRA_LARGE = LevelShape(50, 25, (100, 150), (50, 100))

    @classmethod
    def scored_levels(cls) -> list[DifficultyLevel]:
        """Every level a team is scored on (all but EXAMPLE)."""
        return [level for level in cls if level is not cls.EXAMPLE]

    @classmethod
    def from_names(cls, names: Iterable[str]) -> list[DifficultyLevel]:
        """Look up levels by name, skipping unknown names."""
        levels: list[DifficultyLevel] = []
        for name in names:
            try:
                levels.append(cls[name.upper()])
            except KeyError:
                logger.warning("Ignoring unknown difficulty level: %s", name)
        return levels


# =============================================================================
# Generator
# =============================================================================


class ChallengeGenerator:
    """Builds synthetic mailtime challenges.

    Attributes:
        rng: Source of all randomness.
        start_date: Day on which every thread starts.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        start_date: date = THREAD_START_DATE,
    ) -> None:
        """Initialize the generator.

        Args:
            rng: Random source; a fresh unseeded one when omitted.
            start_date: Day on which every thread starts.
        """
        self.rng = rng if rng is not None else random.Random()
        self.start_date = start_date

    @classmethod
    def seeded(cls, seed: int | None) -> ChallengeGenerator:
        """Generator over ``random.Random(seed)``."""
        return cls(random.Random(seed))

    def random_string(self, length: int) -> str:
        return "".join(self.rng.choice(NAME_ALPHABET) for _ in range(length))

    def random_time_on(self, office_hours: OfficeHours, instant: datetime) -> datetime:
        """A random local time inside office hours, on the local day of ``instant``."""
        local = office_hours.localize(instant)
        return local.replace(
            hour=self.rng.randrange(office_hours.start, office_hours.end),
            minute=self.rng.randrange(60),
            second=self.rng.randrange(60),
            microsecond=0,
        )

    def response_time(self, received: datetime, responder: User) -> datetime:
        """When ``responder`` answers an email received at ``received``."""
        responded = self.random_time_on(responder.office_hours, received)
        if to_instant(responded) < to_instant(received):
            responded += timedelta(days=1)
        if self.rng.randrange(EXTRA_DAY_ODDS) == 0:
            responded += timedelta(days=1)
        if responded.weekday() > LAST_WEEKDAY:
            responded += timedelta(days=7 - responded.weekday())
        return responded

    def generate_users(self, count: int) -> list[User]:
        """``count`` users with unique random names."""
        names: set[str] = set()
        while len(names) < count:
            names.add(self.random_string(USER_NAME_LENGTH))
        return [
            User(name=name, office_hours=self.rng.choice(OFFICE_HOURS_POOL))
            for name in sorted(names)
        ]

    def generate_thread(self, members: Sequence[User], length: int) -> list[Message]:
        """One conversation of ``length`` emails between ``members``.

        Args:
            members: Thread participants; the first two open the thread.
            length: Number of emails, including the opening one.

        Returns:
            The emails in send order.
        """
        by_name = {user.name: user for user in members}
        sender, receiver = members[0], members[1]
        start_of_day = datetime.combine(
            self.start_date, time(), tzinfo=sender.office_hours.zone
        )
        thread = [
            Message(
                subject=self.random_string(SUBJECT_LENGTH),
                sender=sender.name,
                receiver=receiver.name,
                time_sent=self.random_time_on(sender.office_hours, start_of_day),
            )
        ]

        while len(thread) < length:
            previous = thread[-1]
            responder = by_name[previous.receiver]
            next_receiver = self.rng.choice(
                [user for user in members if user.name != responder.name]
            )
            thread.append(
                Message(
                    subject=f"{REPLY_PREFIX}{previous.subject}",
                    sender=responder.name,
                    receiver=next_receiver.name,
                    time_sent=self.response_time(previous.time_sent, responder),
                )
            )
        return thread

    def generate(self, level: DifficultyLevel) -> ChallengeInput:
        """A challenge of the given difficulty, emails shuffled."""
        shape = level.value
        users = self.generate_users(shape.user_count)
        emails: list[Message] = []

        for _ in range(self.rng.randint(*shape.thread_count)):
            members = self.rng.sample(users, shape.users_per_thread)
            length = self.rng.randint(*shape.responses_per_thread)
            emails.extend(self.generate_thread(members, length))

        self.rng.shuffle(emails)
        logger.debug(
            "Generated %s challenge: %d users, %d emails",
            level.name,
            len(users),
            len(emails),
        )
        return ChallengeInput(emails=emails, users=users)

    def generate_example(self) -> ChallengeExample:
        """An EXAMPLE-level challenge with its expected business-hours output."""
        challenge = self.generate(DifficultyLevel.EXAMPLE)
        output = MailtimeSolver(DurationMode.BUSINESS_HOURS).solve(challenge)
        return ChallengeExample(input=challenge, output=output)
