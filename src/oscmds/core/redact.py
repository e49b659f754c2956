"""Masking of secrets in command text before it is logged."""

import re

from pydantic import Field, field_validator

from oscmds.core.base import BaseConfig

DEFAULT_MASK = "[~REDACTED~]"


class RedactionRules(BaseConfig):
    """What to mask in logged command lines.

    Passed explicitly to redact() so that callers and tests control
    exactly which rules apply.
    """

    enabled: bool = Field(
        default=True,
        description="Mask secrets in logged command lines",
    )
    secrets: list[str] = Field(
        default_factory=list,
        description=(
            "Literal strings to mask (database passwords, admin "
            "credentials, API tokens)"
        ),
    )
    patterns: list[str] = Field(
        default_factory=list,
        description=(
            "Regular expressions to mask, e.g. 'PASSWORD=\\S+'"
        ),
    )
    mask: str = Field(
        default=DEFAULT_MASK,
        description="Replacement text for masked values",
    )

    @field_validator("patterns")
    @classmethod
    def _patterns_compile(cls, value: list[str]) -> list[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(
                    f"Invalid redaction pattern {pattern!r}: {e}"
                ) from e
        return value


def redact(text: str, rules: RedactionRules | None) -> str:
    """Return text with every secret and pattern match masked.

    Args:
        text: Command line as it will be executed
        rules: Rules to apply; None or disabled rules return text as is

    Returns:
        Text safe to write to logs
    """
    if rules is None or not rules.enabled:
        return text

    clean = text
    # Longest first so a secret containing another is masked whole
    for secret in sorted(filter(None, rules.secrets), key=len, reverse=True):
        clean = clean.replace(secret, rules.mask)
    for pattern in rules.patterns:
        clean = re.sub(pattern, lambda _match: rules.mask, clean)
    return clean
