"""Credential catalogue — the fixed set of secrets the OpenClaw service consumes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from clawsecrets.errors import UnknownCredential


class CredentialKind(str, Enum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GOOGLE = "google"
    MOONSHOT = "moonshot"
    TELEGRAM = "telegram"


@dataclass(frozen=True)
class Credential:
    """A named secret. The value itself never lives on this object."""

    name: str
    kind: CredentialKind
    service: str
    format: str
    url: str
    label: str

    @property
    def filename(self) -> str:
        return f"{self.name}.txt"


# Rotation order for "rotate all"
CREDENTIALS: tuple[Credential, ...] = (
    Credential(
        name="anthropic_api_key",
        kind=CredentialKind.ANTHROPIC,
        service="Anthropic Claude",
        format="sk-ant-*",
        url="https://console.anthropic.com/settings/keys",
        label="Anthropic API Key",
    ),
    Credential(
        name="openai_api_key",
        kind=CredentialKind.OPENAI,
        service="OpenAI GPT",
        format="sk-* or sk-proj-*",
        url="https://platform.openai.com/api-keys",
        label="OpenAI API Key",
    ),
    Credential(
        name="google_api_key",
        kind=CredentialKind.GOOGLE,
        service="Google Gemini",
        format="AIza*",
        url="https://aistudio.google.com/app/apikey",
        label="Google API Key",
    ),
    Credential(
        name="moonshot_api_key",
        kind=CredentialKind.MOONSHOT,
        service="Moonshot Kimi",
        format="sk-*",
        url="https://platform.moonshot.cn/console/api-keys",
        label="Moonshot API Key (Kimi-k2)",
    ),
    Credential(
        name="telegram_bot_token",
        kind=CredentialKind.TELEGRAM,
        service="Telegram Bot API",
        format="NNNNNNNN:AAA*",
        url="@BotFather on Telegram (/newbot)",
        label="Telegram Bot Token",
    ),
)

_BY_NAME = {c.name: c for c in CREDENTIALS}


def get_credential(name: str) -> Credential:
    """Look up a credential by name. Raises UnknownCredential."""
    try:
        return _BY_NAME[name]
    except KeyError:
        raise UnknownCredential(name) from None


def credential_names() -> list[str]:
    return [c.name for c in CREDENTIALS]
