"""Wire schema for mailtime challenges.

This module defines Pydantic models for the JSON exchanged with candidate
solvers: the challenge input (users and emails) and the expected output
(average response seconds per user).

Models:
    User: A challenge participant and their office hours
    Message: One email of a thread
    ChallengeInput: Users plus the (shuffled) emails between them
    ChallengeOutput: Average response seconds per user
    ChallengeExample: An input together with its expected output

Design Note:
    Field names follow the challenge's camelCase JSON (``officeHours``,
    ``timeZone``, ``timeSent``). Models accept either spelling on input;
    ``to_payload()`` serializes with the camelCase names. Timestamps must
    carry an offset; sub-second precision is dropped on input.

Example:
    >>> data = {
    ...     "users": [{"name": "alice", "officeHours": {"timeZone": "Asia/Singapore", "start": 8, "end": 17}}],
    ...     "emails": [{"subject": "hi", "sender": "alice", "receiver": "alice",
    ...                 "timeSent": "2024-01-08T12:00:00+08:00"}],
    ... }
    >>> challenge = ChallengeInput.model_validate(data)
    >>> challenge.users[0].office_hours.start
    8
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    field_serializer,
    field_validator,
    model_validator,
)

from src.mailtime.core.office_hours import OfficeHours


# =============================================================================
# Constants
# =============================================================================

REPLY_PREFIX = "RE: "


def normalize_subject(subject: str) -> str:
    """Strip every leading reply prefix from a subject.

    Example:
        >>> normalize_subject("RE: RE: budget")
        'budget'
    """
    while subject.startswith(REPLY_PREFIX):
        subject = subject[len(REPLY_PREFIX):]
    return subject


# =============================================================================
# Participants and Messages
# =============================================================================


class User(BaseModel):
    """A challenge participant.

    Attributes:
        name: Unique user id.
        office_hours: The user's recurring weekday availability.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1, description="Unique user id")
    office_hours: OfficeHours = Field(
        ...,
        alias="officeHours",
        description="Weekday office hours in the user's zone",
    )

    @field_validator("office_hours", mode="before")
    @classmethod
    def build_office_hours(cls, value: Any) -> Any:
        """Build OfficeHours from its JSON object form."""
        if isinstance(value, Mapping):
            return OfficeHours(
                time_zone=value.get("timeZone", value.get("time_zone")),
                start=value.get("start"),
                end=value.get("end"),
            )
        return value

    @field_serializer("office_hours")
    def serialize_office_hours(self, value: OfficeHours) -> dict[str, Any]:
        return {"timeZone": value.time_zone, "start": value.start, "end": value.end}


class Message(BaseModel):
    """One email of a conversation.

    Attributes:
        subject: Root subject, or ``"RE: "`` followed by the parent's subject.
        sender: Name of the sending user.
        receiver: Name of the receiving user.
        time_sent: When the email was sent (offset-aware).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    subject: str = Field(..., description="Email subject")
    sender: str = Field(..., min_length=1, description="Sending user")
    receiver: str = Field(..., min_length=1, description="Receiving user")
    time_sent: AwareDatetime = Field(
        ...,
        alias="timeSent",
        description="Send time (ISO 8601 with offset)",
    )

    @field_validator("time_sent")
    @classmethod
    def truncate_to_seconds(cls, value: datetime) -> datetime:
        """Drop sub-second precision."""
        return value.replace(microsecond=0)

    @property
    def root_subject(self) -> str:
        """Subject with every leading reply prefix removed."""
        return normalize_subject(self.subject)


# =============================================================================
# Challenge Payloads
# =============================================================================


class ChallengeInput(BaseModel):
    """A mailtime challenge: users and the emails they exchanged.

    Attributes:
        emails: Emails of every thread, in no particular order.
        users: Participants; names must be unique.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    emails: list[Message] = Field(default_factory=list)
    users: list[User] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_user_names(self) -> "ChallengeInput":
        """Ensure every user name appears once."""
        seen: set[str] = set()
        for user in self.users:
            if user.name in seen:
                raise ValueError(f"Duplicate user name: {user.name!r}")
            seen.add(user.name)
        return self

    @property
    def users_by_name(self) -> dict[str, User]:
        """Users keyed by name."""
        return {user.name: user for user in self.users}

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the challenge's camelCase JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


class ChallengeOutput(BaseModel):
    """Average response seconds per user.

    Attributes:
        response: Mapping of user name to average response seconds.
    """

    model_config = ConfigDict(frozen=True)

    response: dict[str, NonNegativeInt] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the challenge's JSON shape."""
        return self.model_dump(mode="json")


class ChallengeExample(BaseModel):
    """A challenge input together with its expected output."""

    model_config = ConfigDict(frozen=True)

    input: ChallengeInput
    output: ChallengeOutput

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the challenge's camelCase JSON shape."""
        return self.model_dump(mode="json", by_alias=True)
