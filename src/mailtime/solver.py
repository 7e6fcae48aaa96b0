"""Per-user response times over conversations.

Emails sharing a root subject form a conversation. Ordered by send time,
every email after the first is a response: the time between the previous
email and this one is attributed to this email's sender, measured against
the sender's office hours.

Classes:
    ResponseTally: Immutable per-user list of response durations.
    GroundTruth: Both average response times of one user.
    MailtimeSolver: Computes a ChallengeOutput in one duration mode.

Functions:
    group_threads: Group emails into ordered conversations.
    reduce_thread: Tally the responses of one conversation.
    merge_tallies: Combine partial tallies.
    compute_ground_truth: Both averages for every user.

Design Notes:
    - Accumulation is a fold: each conversation produces its own tally map
      and maps are merged afterwards. Merging is commutative and
      associative, so conversations can be reduced in any order.
    - References to unknown users are checked for every email before any
      reduction; one bad reference fails the whole computation.

Example:
    >>> solver = MailtimeSolver(DurationMode.BUSINESS_HOURS)
    >>> output = solver.solve(challenge)
    >>> output.response["alice"]
    60
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import reduce

from src.mailtime.core.durations import DurationMode, elapsed_seconds
from src.mailtime.core.segmentation import to_instant
from src.mailtime.errors import UnknownUserError
from src.mailtime.schema import ChallengeInput, ChallengeOutput, Message, User


logger = logging.getLogger(__name__)

Tallies = Mapping[str, "ResponseTally"]


# =============================================================================
# Tallies
# =============================================================================


def round_half_up(total: int, count: int) -> int:
    """Integer mean of non-negative seconds, ties rounded up.

    Uses integer arithmetic so ties are never lost to float error.
    """
    if count <= 0:
        return 0
    return (2 * total + count) // (2 * count)


@dataclass(frozen=True)
class ResponseTally:
    """Response durations (seconds) authored by one user.

    Attributes:
        durations: One entry per response, in reduction order.
    """

    durations: tuple[int, ...] = ()

    def __add__(self, other: ResponseTally) -> ResponseTally:
        if not isinstance(other, ResponseTally):
            return NotImplemented
        return ResponseTally(self.durations + other.durations)

    @property
    def count(self) -> int:
        return len(self.durations)

    @property
    def total(self) -> int:
        return sum(self.durations)

    def average(self) -> int:
        """Rounded average response time; 0 when the user never responded."""
        return round_half_up(self.total, self.count)


def merge_tallies(left: Tallies, right: Tallies) -> dict[str, ResponseTally]:
    """Merge two per-user tally maps into a new one."""
    merged = dict(left)
    for user, tally in right.items():
        merged[user] = merged[user] + tally if user in merged else tally
    return merged


# =============================================================================
# Reduction
# =============================================================================


def check_references(messages: Iterable[Message], users_by_name: Mapping[str, User]) -> None:
    """Ensure every email names known users.

    Raises:
        UnknownUserError: For the first unknown sender or receiver.
    """
    for message in messages:
        for name in (message.sender, message.receiver):
            if name not in users_by_name:
                raise UnknownUserError(name, message.subject)


def group_threads(messages: Iterable[Message]) -> list[list[Message]]:
    """Group emails by root subject, each group ordered by send time.

    Sorting is stable, so emails sent at the same instant keep their input
    order.
    """
    threads: dict[str, list[Message]] = defaultdict(list)
    for message in messages:
        threads[message.root_subject].append(message)
    return [
        sorted(thread, key=lambda m: to_instant(m.time_sent))
        for thread in threads.values()
    ]


def reduce_thread(
    thread: list[Message],
    users_by_name: Mapping[str, User],
    mode: DurationMode,
) -> dict[str, ResponseTally]:
    """Tally the responses of one ordered conversation.

    Args:
        thread: Emails of one conversation, ordered by send time.
        users_by_name: Known users keyed by name.
        mode: How elapsed time is measured.

    Returns:
        Mapping of responder name to the durations they authored in this
        conversation. Empty for conversations of fewer than two emails.
    """
    tallies: dict[str, ResponseTally] = {}
    for previous, current in zip(thread, thread[1:]):
        responder = users_by_name[current.sender]
        seconds = elapsed_seconds(
            mode,
            responder.office_hours,
            previous.time_sent,
            current.time_sent,
        )
        logger.debug(
            "%s: %s responded after %ds (%s, %s .. %s)",
            current.subject,
            responder.name,
            seconds,
            responder.office_hours,
            previous.time_sent.isoformat(),
            current.time_sent.isoformat(),
        )
        tallies = merge_tallies(tallies, {responder.name: ResponseTally((seconds,))})
    return tallies


def tally_responses(
    challenge: ChallengeInput,
    mode: DurationMode,
) -> dict[str, ResponseTally]:
    """Tally every user's responses across all conversations.

    Every user of the challenge is present in the result, with an empty
    tally when they never responded.

    Raises:
        UnknownUserError: If any email names an unknown user.
    """
    users_by_name = challenge.users_by_name
    check_references(challenge.emails, users_by_name)

    partials = (
        reduce_thread(thread, users_by_name, mode)
        for thread in group_threads(challenge.emails)
    )
    empty = {name: ResponseTally() for name in users_by_name}
    return reduce(merge_tallies, partials, empty)


# =============================================================================
# Solvers
# =============================================================================


class MailtimeSolver:
    """Computes every user's average response time in one mode.

    Attributes:
        mode: How elapsed time is measured.
    """

    def __init__(self, mode: DurationMode = DurationMode.BUSINESS_HOURS) -> None:
        self.mode = mode

    def solve(self, challenge: ChallengeInput) -> ChallengeOutput:
        """Average response seconds for every user of the challenge.

        Raises:
            UnknownUserError: If any email names an unknown user.
        """
        tallies = tally_responses(challenge, self.mode)
        return ChallengeOutput(
            response={name: tally.average() for name, tally in tallies.items()}
        )

    def __call__(self, challenge: ChallengeInput) -> ChallengeOutput:
        return self.solve(challenge)


@dataclass(frozen=True)
class GroundTruth:
    """Both expected averages for one user.

    Attributes:
        business_hours: Rounded average response seconds within office hours.
        naive: Rounded average wall-clock response seconds.
    """

    business_hours: int
    naive: int


def compute_ground_truth(challenge: ChallengeInput) -> dict[str, GroundTruth]:
    """Expected averages in both modes for every user.

    Raises:
        UnknownUserError: If any email names an unknown user.
    """
    business = MailtimeSolver(DurationMode.BUSINESS_HOURS).solve(challenge).response
    naive = MailtimeSolver(DurationMode.NAIVE).solve(challenge).response
    return {
        name: GroundTruth(business_hours=business[name], naive=naive[name])
        for name in challenge.users_by_name
    }
