"""Challenge harness configuration models.

This module provides Pydantic-based configuration models for the challenge
harness, with support for CLI argument parsing and environment variable
loading.

Configuration Hierarchy:
    - ChallengeConfig: Base configuration shared by every challenge
    - MailtimeConfig: Configuration specific to the mailtime challenge

Configuration Sources (in order of precedence, highest first):
    1. Explicit constructor arguments
    2. CLI arguments (via from_cli_args)
    3. Environment variables (automatic via pydantic-settings)
    4. Default values

Environment Variables:
    Environment variables are prefixed with "CHALLENGE_" for base config and
    "MAILTIME_" for mailtime config. Variable names are derived from field
    names in SCREAMING_SNAKE_CASE.

    Examples:
        CHALLENGE_LOG_LEVEL=DEBUG
        CHALLENGE_COORDINATOR_AUTH_TOKEN=secret
        MAILTIME_ENDPOINT_SUFFIX=mailtime
        MAILTIME_LEVELS='["SMALL", "LARGE"]'

CLI Arguments:
    Use the from_cli_args() class method to parse command-line arguments.
    Standard arguments supported:
        --log-level: Logging level (default: INFO)
        --seed: Seed for the challenge generator
        --callback-timeout: Timeout for posting results (seconds)

Example:
    >>> from src.common.challenge.config import MailtimeConfig
    >>> config = MailtimeConfig()
    >>> config.endpoint_suffix
    'mailtime'
    >>> config = MailtimeConfig.from_cli_args(['--seed', '42'])
    >>> config.seed
    42
"""

from __future__ import annotations

import argparse
from typing import Any, Literal, Self, Sequence

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# Base Configuration
# =============================================================================


class ChallengeConfig(BaseSettings):
    """Base configuration for all challenge evaluators.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        seed: Optional seed for the challenge generator. When None, every
            run draws fresh randomness.
        coordinator_auth_token: Bearer token attached to result callbacks.
            Stored as SecretStr to prevent accidental logging.
        callback_timeout: Timeout in seconds for posting results to the
            coordinator callback URL.

    Example:
        >>> config = ChallengeConfig(seed=7)
        >>> config.seed
        7
        >>> config.bearer_token is None
        True
    """

    model_config = SettingsConfigDict(
        env_prefix="CHALLENGE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    seed: int | None = Field(
        default=None,
        description="Seed for the challenge generator",
    )
    coordinator_auth_token: SecretStr | None = Field(
        default=None,
        description="Bearer token attached to coordinator callbacks",
    )
    callback_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Timeout for posting results to the callback URL (seconds)",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Normalize log level to uppercase."""
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def bearer_token(self) -> str | None:
        """Get the Authorization header value for coordinator callbacks.

        Returns:
            ``"Bearer <token>"``, or None when no token is configured.
        """
        if self.coordinator_auth_token is None:
            return None
        return f"Bearer {self.coordinator_auth_token.get_secret_value()}"

    @classmethod
    def from_cli_args(
        cls,
        args: Sequence[str] | None = None,
        **overrides: Any,
    ) -> Self:
        """Create configuration from CLI arguments.

        Parses command-line arguments and combines them with environment
        variables and defaults. Explicit overrides take highest precedence.

        Args:
            args: Command-line arguments to parse. If None, uses sys.argv[1:].
            **overrides: Additional keyword arguments that override all other
                sources.

        Returns:
            A new configuration instance.
        """
        parser = cls._create_argument_parser()
        parsed, _ = parser.parse_known_args(args)
        cli_values = cls._parsed_args_to_dict(parsed)

        # Filter out None values so they don't override environment defaults
        cli_values = {k: v for k, v in cli_values.items() if v is not None}

        merged = {**cli_values, **overrides}
        return cls(**merged)

    @classmethod
    def _create_argument_parser(cls) -> argparse.ArgumentParser:
        """Create the argument parser for this config class.

        Subclasses can override to add additional arguments.

        Returns:
            An ArgumentParser configured with base arguments.
        """
        parser = argparse.ArgumentParser(
            description="Challenge Harness Configuration",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter,
            add_help=False,
        )
        parser.add_argument(
            "--log-level",
            type=str,
            default=None,
            dest="log_level",
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Logging level",
        )
        parser.add_argument(
            "--seed",
            type=int,
            default=None,
            help="Seed for the challenge generator",
        )
        parser.add_argument(
            "--callback-timeout",
            type=float,
            default=None,
            dest="callback_timeout",
            help="Timeout for posting results to the callback URL (seconds)",
        )
        return parser

    @classmethod
    def _parsed_args_to_dict(cls, parsed: argparse.Namespace) -> dict[str, Any]:
        """Convert parsed arguments to a dictionary.

        Args:
            parsed: The parsed argument namespace.

        Returns:
            Dictionary of configuration values from CLI arguments.
        """
        return {
            "log_level": parsed.log_level,
            "seed": parsed.seed,
            "callback_timeout": parsed.callback_timeout,
        }


# =============================================================================
# Mailtime Configuration
# =============================================================================


class MailtimeConfig(ChallengeConfig):
    """Configuration specific to the mailtime challenge.

    Attributes:
        endpoint_suffix: Path segment appended to a team URL when delivering
            a challenge (``{team_url}/{endpoint_suffix}``).
        challenge_timeout: Timeout in seconds for a team to answer one
            challenge level.
        levels: Names of the difficulty levels to run. Empty means every
            level except EXAMPLE, in shuffled order.

    Environment Variables:
        MAILTIME_ENDPOINT_SUFFIX: Team endpoint path segment
        MAILTIME_CHALLENGE_TIMEOUT: Per-level answer timeout
        MAILTIME_LEVELS: JSON list of difficulty level names
    """

    model_config = SettingsConfigDict(
        env_prefix="MAILTIME_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    endpoint_suffix: str = Field(
        default="mailtime",
        min_length=1,
        description="Path segment appended to the team URL",
    )
    challenge_timeout: float = Field(
        default=1.0,
        gt=0,
        description="Timeout for a team to answer one level (seconds)",
    )
    levels: list[str] = Field(
        default_factory=list,
        description="Difficulty levels to run (empty: all but EXAMPLE)",
    )

    @field_validator("endpoint_suffix")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        """Store the suffix without surrounding slashes."""
        return v.strip("/")

    @field_validator("levels", mode="before")
    @classmethod
    def split_levels(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [part.strip().upper() for part in v.split(",") if part.strip()]
        if isinstance(v, list):
            return [str(part).upper() for part in v]
        return v

    @classmethod
    def _create_argument_parser(cls) -> argparse.ArgumentParser:
        """Create the argument parser with mailtime-specific arguments."""
        parser = super()._create_argument_parser()
        parser.description = "Mailtime Challenge Configuration"

        parser.add_argument(
            "--endpoint-suffix",
            type=str,
            default=None,
            dest="endpoint_suffix",
            help="Path segment appended to the team URL",
        )
        parser.add_argument(
            "--challenge-timeout",
            type=float,
            default=None,
            dest="challenge_timeout",
            help="Timeout for a team to answer one level (seconds)",
        )
        parser.add_argument(
            "--levels",
            type=str,
            default=None,
            help="Comma-separated difficulty levels to run",
        )
        return parser

    @classmethod
    def _parsed_args_to_dict(cls, parsed: argparse.Namespace) -> dict[str, Any]:
        """Convert parsed arguments to a dictionary with mailtime-specific args."""
        base = super()._parsed_args_to_dict(parsed)
        base.update(
            {
                "endpoint_suffix": parsed.endpoint_suffix,
                "challenge_timeout": parsed.challenge_timeout,
                "levels": parsed.levels,
            }
        )
        return base


# =============================================================================
# Configuration Utilities
# =============================================================================


def validate_config(
    config: ChallengeConfig,
    known_levels: Sequence[str] = (),
) -> list[str]:
    """Validate a configuration and return any warnings.

    Performs checks beyond Pydantic's built-in validation for values that
    don't prevent operation but are likely mistakes.

    Args:
        config: The configuration to validate.
        known_levels: Difficulty level names the challenge understands. When
            empty, level names are not checked.

    Returns:
        A list of warning messages. Empty if no issues found.
    """
    warnings: list[str] = []

    if config.coordinator_auth_token is None:
        warnings.append(
            "No coordinator auth token configured. Result callbacks will be "
            "sent without an Authorization header."
        )
    if config.callback_timeout < 1.0:
        warnings.append(
            f"Callback timeout of {config.callback_timeout}s is very short "
            "and may drop results"
        )

    if isinstance(config, MailtimeConfig):
        if config.challenge_timeout < 0.5:
            warnings.append(
                f"Challenge timeout of {config.challenge_timeout}s is very short; "
                "most teams will not answer in time"
            )
        if known_levels:
            unknown = [level for level in config.levels if level not in known_levels]
            if unknown:
                warnings.append(
                    f"Unknown difficulty level(s) {', '.join(unknown)} will be ignored"
                )

    return warnings
