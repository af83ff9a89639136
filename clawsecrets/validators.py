"""
Validator registry — per-kind format checks for candidate credential values.

Every validator is a pure full-match pattern check: it never raises and never
touches state. The registry is closed; adding a credential kind means adding a
CredentialKind member and an entry in VALIDATORS.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from clawsecrets.credentials import CredentialKind

_ANTHROPIC = re.compile(r"sk-ant-[A-Za-z0-9_-]{95,}")
_OPENAI_LEGACY = re.compile(r"sk-[A-Za-z0-9]{32,}")
_OPENAI_PROJECT = re.compile(r"sk-proj-[A-Za-z0-9_-]{32,}")
_GOOGLE = re.compile(r"AIza[A-Za-z0-9_-]{35}")
_TELEGRAM = re.compile(r"[0-9]{8,10}:[A-Za-z0-9_-]{35}")


def _matches(pattern: re.Pattern[str], value: object) -> bool:
    return isinstance(value, str) and pattern.fullmatch(value) is not None


def validate_anthropic_key(value: object) -> bool:
    return _matches(_ANTHROPIC, value)


def validate_openai_key(value: object) -> bool:
    return _matches(_OPENAI_LEGACY, value) or _matches(_OPENAI_PROJECT, value)


def validate_google_key(value: object) -> bool:
    return _matches(_GOOGLE, value)


def validate_moonshot_key(value: object) -> bool:
    # Same shape as the legacy OpenAI form; the providers really do overlap.
    return _matches(_OPENAI_LEGACY, value)


def validate_telegram_token(value: object) -> bool:
    return _matches(_TELEGRAM, value)


VALIDATORS: dict[CredentialKind, Callable[[object], bool]] = {
    CredentialKind.ANTHROPIC: validate_anthropic_key,
    CredentialKind.OPENAI: validate_openai_key,
    CredentialKind.GOOGLE: validate_google_key,
    CredentialKind.MOONSHOT: validate_moonshot_key,
    CredentialKind.TELEGRAM: validate_telegram_token,
}


def validate(kind: CredentialKind, value: object) -> bool:
    """Return True if ``value`` is well-formed for ``kind``."""
    validator = VALIDATORS.get(kind)
    if validator is None:
        return False
    return validator(value)
