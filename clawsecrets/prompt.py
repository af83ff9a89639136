"""
Interactive secret entry — masked input that loops until the value validates.

There is no retry limit: the loop blocks until a valid value is entered or the
operator interrupts the process (KeyboardInterrupt / EOFError propagate).
"""

from __future__ import annotations

import getpass
import logging
from collections.abc import Callable

from clawsecrets.credentials import Credential
from clawsecrets.errors import EmptyInput, ValidationFailed
from clawsecrets.validators import validate

logger = logging.getLogger(__name__)


def check_candidate(credential: Credential, value: str) -> str:
    """Return ``value`` if acceptable, else raise EmptyInput / ValidationFailed."""
    if not value:
        raise EmptyInput("Secret cannot be empty. Try again.")
    if not validate(credential.kind, value):
        raise ValidationFailed(
            f"Invalid format (expected {credential.format}). Please check and try again."
        )
    return value


class SecretPrompt:
    """Reads secrets from the terminal without echo."""

    def __init__(
        self,
        read_secret: Callable[[str], str] = getpass.getpass,
        read_line: Callable[[str], str] = input,
        echo: Callable[[str], None] = print,
    ):
        self._read_secret = read_secret
        self._read_line = read_line
        self._echo = echo

    def ask_secret(self, credential: Credential, prompt: str | None = None) -> str:
        prompt = prompt or f"Enter {credential.label}"
        while True:
            value = self._read_secret(f"{prompt}: ").strip()
            try:
                return check_candidate(credential, value)
            except (EmptyInput, ValidationFailed) as e:
                logger.debug("Rejected candidate for %s: %s", credential.name, type(e).__name__)
                self._echo(f"  [WARN] {e}")

    def confirm(self, question: str, default: bool = False) -> bool:
        suffix = "(Y/n)" if default else "(y/N)"
        answer = self._read_line(f"{question} {suffix}: ").strip().lower()
        if not answer:
            return default
        return answer in ("y", "yes")

    def ask_line(self, question: str) -> str:
        return self._read_line(f"{question}: ").strip()
