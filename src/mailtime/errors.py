"""Exceptions raised by the mailtime challenge.

Classes:
    MailtimeError: Base exception for mailtime errors.
    InvalidConfigurationError: Malformed office hours.
    UnknownUserError: A message references a user absent from the input.
    MalformedResponseError: A submission is not a usable answer.
"""

from __future__ import annotations


class MailtimeError(Exception):
    """Base exception for mailtime errors."""

    pass


class InvalidConfigurationError(MailtimeError, ValueError):
    """Office hours with out-of-range or non-monotonic hours, or an unknown zone."""

    pass


class UnknownUserError(MailtimeError):
    """A message names a sender or receiver that is not in the user set.

    Attributes:
        user: The unknown user name.
        subject: Subject of the message that referenced it.
    """

    def __init__(self, user: str, subject: str) -> None:
        """Initialize the error.

        Args:
            user: The unknown user name.
            subject: Subject of the message that referenced it.
        """
        super().__init__(f"Message '{subject}' references unknown user '{user}'")
        self.user = user
        self.subject = subject


class MalformedResponseError(MailtimeError):
    """A submitted answer, or one value in it, cannot be scored."""

    pass
