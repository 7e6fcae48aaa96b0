"""Tests for per-user response-time solving.

Tests cover:
- Rounding and tally arithmetic
- Grouping emails into ordered conversations
- Averages in both duration modes
- Order independence and unknown-user handling
"""

from __future__ import annotations

from datetime import datetime

import pytest

from src.mailtime.core.durations import DurationMode
from src.mailtime.core.office_hours import OfficeHours
from src.mailtime.errors import UnknownUserError
from src.mailtime.schema import ChallengeInput, Message, User
from src.mailtime.solver import (
    GroundTruth,
    MailtimeSolver,
    ResponseTally,
    compute_ground_truth,
    group_threads,
    merge_tallies,
    round_half_up,
    tally_responses,
)


def email(subject: str, sender: str, receiver: str, sent: str) -> Message:
    return Message(
        subject=subject,
        sender=sender,
        receiver=receiver,
        time_sent=datetime.fromisoformat(sent),
    )


@pytest.fixture
def users() -> list[User]:
    """Alice in Singapore, Bob in Tokyo, Carol who never answers."""
    return [
        User(name="alice", office_hours=OfficeHours("Asia/Singapore", 8, 17)),
        User(name="bob", office_hours=OfficeHours("Asia/Tokyo", 9, 18)),
        User(name="carol", office_hours=OfficeHours("Europe/Paris", 9, 18)),
    ]


@pytest.fixture
def emails() -> list[Message]:
    """One conversation of three emails, given out of order."""
    return [
        email("RE: RE: budget", "alice", "bob", "2024-01-09T09:00:00+08:00"),
        email("budget", "alice", "bob", "2024-01-08T12:00:00+08:00"),
        email("RE: budget", "bob", "alice", "2024-01-08T15:00:00+09:00"),
    ]


@pytest.fixture
def challenge(users: list[User], emails: list[Message]) -> ChallengeInput:
    return ChallengeInput(emails=emails, users=users)


class TestRounding:
    """Tests for round_half_up and ResponseTally."""

    @pytest.mark.parametrize(
        "total,count,expected",
        [(0, 0, 0), (10, 0, 0), (3, 2, 2), (5, 2, 3), (1, 3, 0), (2, 3, 1), (7200, 1, 7200)],
    )
    def test_round_half_up(self, total: int, count: int, expected: int) -> None:
        assert round_half_up(total, count) == expected

    def test_empty_tally(self) -> None:
        tally = ResponseTally()
        assert tally.count == 0
        assert tally.average() == 0

    def test_tally_addition(self) -> None:
        """Test that tallies concatenate their durations."""
        tally = ResponseTally((1,)) + ResponseTally((2,))

        assert tally.durations == (1, 2)
        assert tally.total == 3
        assert tally.average() == 2

    def test_merge_tallies(self) -> None:
        """Test that merging combines shared users and keeps the rest."""
        left = {"alice": ResponseTally((60,)), "bob": ResponseTally((10,))}
        right = {"alice": ResponseTally((120,)), "carol": ResponseTally((5,))}

        merged = merge_tallies(left, right)

        assert merged["alice"].durations == (60, 120)
        assert merged["bob"].durations == (10,)
        assert merged["carol"].durations == (5,)
        assert left["alice"].durations == (60,)


class TestGroupThreads:
    """Tests for group_threads."""

    def test_groups_by_root_subject_in_time_order(self, emails: list[Message]) -> None:
        threads = group_threads(emails)

        assert len(threads) == 1
        assert [m.subject for m in threads[0]] == ["budget", "RE: budget", "RE: RE: budget"]

    def test_orders_by_instant_across_offsets(self) -> None:
        """Test that ordering uses absolute time, not local wall clock."""
        early = email("q", "alice", "bob", "2024-01-08T12:00:00+09:00")
        late = email("RE: q", "bob", "alice", "2024-01-08T11:30:00+08:00")

        assert group_threads([late, early]) == [[early, late]]

    def test_separate_conversations(self) -> None:
        threads = group_threads(
            [
                email("a", "alice", "bob", "2024-01-08T12:00:00+08:00"),
                email("b", "bob", "alice", "2024-01-08T12:00:00+08:00"),
            ]
        )
        assert len(threads) == 2


class TestMailtimeSolver:
    """Tests for MailtimeSolver."""

    def test_business_hours_averages(self, challenge: ChallengeInput) -> None:
        """Test averages measured within each responder's office hours."""
        output = MailtimeSolver(DurationMode.BUSINESS_HOURS).solve(challenge)

        # bob: Tokyo 13:00 -> 15:00; alice: Singapore 14:00-17:00 and 08:00-09:00
        assert output.response == {"alice": 14400, "bob": 7200, "carol": 0}

    def test_naive_averages(self, challenge: ChallengeInput) -> None:
        """Test wall-clock averages."""
        output = MailtimeSolver(DurationMode.NAIVE)(challenge)

        assert output.response == {"alice": 68400, "bob": 7200, "carol": 0}

    def test_default_mode_is_business_hours(self) -> None:
        assert MailtimeSolver().mode is DurationMode.BUSINESS_HOURS

    def test_input_order_irrelevant(
        self, users: list[User], emails: list[Message]
    ) -> None:
        """Test that shuffling emails does not change the output."""
        forward = ChallengeInput(emails=emails, users=users)
        backward = ChallengeInput(emails=list(reversed(emails)), users=users)

        assert MailtimeSolver().solve(forward) == MailtimeSolver().solve(backward)

    def test_averages_across_conversations(self, users: list[User]) -> None:
        """Test that a user's responses from several threads are averaged."""
        challenge = ChallengeInput(
            users=users,
            emails=[
                email("a", "alice", "bob", "2024-01-08T12:00:00+09:00"),
                email("RE: a", "bob", "alice", "2024-01-08T12:01:00+09:00"),
                email("b", "alice", "bob", "2024-01-08T12:00:00+09:00"),
                email("RE: b", "bob", "alice", "2024-01-08T12:02:00+09:00"),
            ],
        )

        output = MailtimeSolver().solve(challenge)

        assert output.response["bob"] == 90

    def test_empty_challenge(self) -> None:
        assert MailtimeSolver().solve(ChallengeInput()).response == {}

    def test_unknown_sender_rejected(self, users: list[User]) -> None:
        """Test that an email from an unknown user fails the computation."""
        challenge = ChallengeInput(
            users=users,
            emails=[email("a", "mallory", "bob", "2024-01-08T12:00:00+08:00")],
        )

        with pytest.raises(UnknownUserError) as exc_info:
            MailtimeSolver().solve(challenge)

        assert exc_info.value.user == "mallory"
        assert exc_info.value.subject == "a"

    def test_unknown_receiver_rejected(self, users: list[User]) -> None:
        """Test that a lone email to an unknown user is still checked."""
        challenge = ChallengeInput(
            users=users,
            emails=[email("a", "alice", "zed", "2024-01-08T12:00:00+08:00")],
        )

        with pytest.raises(UnknownUserError, match="zed"):
            tally_responses(challenge, DurationMode.NAIVE)


class TestGroundTruth:
    """Tests for compute_ground_truth."""

    def test_both_modes(self, challenge: ChallengeInput) -> None:
        truth = compute_ground_truth(challenge)

        assert truth == {
            "alice": GroundTruth(business_hours=14400, naive=68400),
            "bob": GroundTruth(business_hours=7200, naive=7200),
            "carol": GroundTruth(business_hours=0, naive=0),
        }

    def test_business_bounded_by_naive(self, challenge: ChallengeInput) -> None:
        for truth in compute_ground_truth(challenge).values():
            assert 0 <= truth.business_hours <= truth.naive
