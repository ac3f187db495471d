"""Value types for the peer review pipeline. No I/O, no provider calls."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from peer_review.errors import ValidationError

if TYPE_CHECKING:
    from peer_review.providers.base import TextGenerationProvider

PROMPT_MAX_CHARS = 10_000


@dataclass(frozen=True)
class Prompt:
    text: str

    @classmethod
    def parse(cls, raw: object, max_chars: int = PROMPT_MAX_CHARS) -> Prompt:
        """Trim and validate raw user input.

        Raises:
            ValidationError: Empty after trimming, or longer than max_chars.
        """
        text = raw.strip() if isinstance(raw, str) else ""
        if not text:
            raise ValidationError("Please enter a non-empty prompt.")
        if len(text) > max_chars:
            raise ValidationError(f"Prompt must be {max_chars:,} characters or fewer.")
        return cls(text=text)


@dataclass(frozen=True)
class Role:
    label: str                         # "Claude", "GPT", ... for prompts and messages only
    provider: TextGenerationProvider


@dataclass(frozen=True)
class StageTask:
    role: str
    provider: TextGenerationProvider
    system_instruction: str
    user_message: str


@dataclass(frozen=True)
class StageOutput:
    role: str
    text: str


class PipelineState(str, Enum):
    PENDING = "pending"
    STAGE1_RUNNING = "stage1_running"
    STAGE2_RUNNING = "stage2_running"
    STAGE3_RUNNING = "stage3_running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ReviewResult:
    prompt: str
    initial_response_a: str
    initial_response_b: str
    critique_a_of_b: str      # reviewer A's critique of B's initial response
    critique_b_of_a: str
    summary: str

    def to_dict(self) -> dict[str, str]:
        return {
            "prompt": self.prompt,
            "initialResponseA": self.initial_response_a,
            "initialResponseB": self.initial_response_b,
            "critiqueAofB": self.critique_a_of_b,
            "critiqueBofA": self.critique_b_of_a,
            "summary": self.summary,
        }
