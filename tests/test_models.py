"""Tests for peer_review/models.py dataclasses."""

import dataclasses

import pytest

from peer_review.errors import ValidationError
from peer_review.models import PROMPT_MAX_CHARS, Prompt, ReviewResult


def test_prompt_parse_trims():
    assert Prompt.parse("  What is 2+2?\n").text == "What is 2+2?"


def test_prompt_exactly_max_length_is_accepted():
    assert len(Prompt.parse("a" * PROMPT_MAX_CHARS).text) == PROMPT_MAX_CHARS


def test_prompt_over_max_length_is_rejected():
    with pytest.raises(ValidationError, match="10,000 characters or fewer"):
        Prompt.parse("a" * (PROMPT_MAX_CHARS + 1))


def test_prompt_custom_max_length():
    Prompt.parse("abc", max_chars=3)
    with pytest.raises(ValidationError, match="3 characters"):
        Prompt.parse("abcd", max_chars=3)


@pytest.mark.parametrize("raw", ["", "   ", "\n\t  \n", None, 123])
def test_prompt_empty_or_non_string_is_rejected(raw):
    with pytest.raises(ValidationError, match="non-empty prompt"):
        Prompt.parse(raw)


def test_prompt_is_immutable():
    prompt = Prompt.parse("hello")
    with pytest.raises(dataclasses.FrozenInstanceError):
        prompt.text = "changed"  # type: ignore[misc]


@pytest.fixture
def sample_result() -> ReviewResult:
    return ReviewResult(
        prompt="What is 2+2?",
        initial_response_a="4",
        initial_response_b="Four.",
        critique_a_of_b="Fine.",
        critique_b_of_a="Terse.",
        summary="Both correct.",
    )


def test_review_result_to_dict(sample_result):
    assert sample_result.to_dict() == {
        "prompt": "What is 2+2?",
        "initialResponseA": "4",
        "initialResponseB": "Four.",
        "critiqueAofB": "Fine.",
        "critiqueBofA": "Terse.",
        "summary": "Both correct.",
    }


def test_review_result_is_immutable(sample_result):
    with pytest.raises(dataclasses.FrozenInstanceError):
        sample_result.summary = "changed"  # type: ignore[misc]
