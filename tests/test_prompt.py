"""Tests for clawsecrets.prompt — masked entry loop."""

import pytest

from clawsecrets.credentials import get_credential
from clawsecrets.errors import EmptyInput, ValidationFailed
from clawsecrets.prompt import check_candidate

from tests.helpers import VALID, scripted_prompt

GOOGLE = get_credential("google_api_key")


class TestCheckCandidate:
    def test_accepts_valid(self):
        assert check_candidate(GOOGLE, VALID["google_api_key"]) == VALID["google_api_key"]

    def test_empty(self):
        with pytest.raises(EmptyInput):
            check_candidate(GOOGLE, "")

    def test_invalid(self):
        with pytest.raises(ValidationFailed, match="AIza"):
            check_candidate(GOOGLE, "AIza-too-short")


class TestAskSecret:
    def test_loops_until_valid(self):
        prompt = scripted_prompt(["", "nope", "   ", VALID["google_api_key"]])
        assert prompt.ask_secret(GOOGLE) == VALID["google_api_key"]
        warnings = prompt.echoed
        assert len(warnings) == 3
        assert "empty" in warnings[0]
        assert "Invalid format" in warnings[1]

    def test_strips_surrounding_whitespace(self):
        prompt = scripted_prompt(["  " + VALID["google_api_key"] + "\n"])
        assert prompt.ask_secret(GOOGLE) == VALID["google_api_key"]

    def test_never_echoes_the_value(self):
        bad = "AIza" + "q" * 10
        prompt = scripted_prompt([bad, VALID["google_api_key"]])
        prompt.ask_secret(GOOGLE)
        assert all(bad not in line for line in prompt.echoed)

    def test_interrupt_propagates(self):
        prompt = scripted_prompt(["bad", KeyboardInterrupt()])
        with pytest.raises(KeyboardInterrupt):
            prompt.ask_secret(GOOGLE)


class TestConfirm:
    @pytest.mark.parametrize(
        ("answer", "expected"),
        [("y", True), ("Y", True), ("yes", True), ("n", False), ("", False), ("maybe", False)],
    )
    def test_answers(self, answer, expected):
        prompt = scripted_prompt([], [answer])
        assert prompt.confirm("Continue?") is expected

    def test_default_true(self):
        prompt = scripted_prompt([], [""])
        assert prompt.confirm("Continue?", default=True) is True
