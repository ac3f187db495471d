"""Single-provider peer review commands: review, respond, summary.

A reviewer model gives an initial review of a document, answers the
author's replies, and finally summarizes the debate. Each command is one
provider call through ProviderInvoker.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import frontmatter

from config.config_loader import PromptsConfig
from peer_review.errors import ValidationError
from peer_review.invoker import ProviderInvoker
from peer_review.providers.base import TextGenerationProvider

logger = logging.getLogger(__name__)


class Command(str, Enum):
    REVIEW = "review"
    RESPOND = "respond"
    SUMMARY = "summary"


# Shown around the printed result
COMMAND_TITLES: dict[Command, str] = {
    Command.REVIEW: "{reviewer} Review",
    Command.RESPOND: "{reviewer} Response",
    Command.SUMMARY: "Debate Summary",
}


@dataclass
class ReviewContext:
    text: str
    source: str
    review_type: str | None = None   # from frontmatter, if present


def read_context_file(path: Path) -> ReviewContext:
    """Read the document under review. Optional YAML frontmatter may set ``review_type``.

    Raises:
        ValidationError: File missing or empty.
    """
    if not path.is_file():
        raise ValidationError(f"File not found: {path}")
    post = frontmatter.load(str(path))
    text = post.content.strip()
    if not text:
        raise ValidationError(f"Context file is empty: {path}")
    review_type = post.metadata.get("review_type")
    return ReviewContext(
        text=text,
        source=str(path),
        review_type=str(review_type) if review_type else None,
    )


def read_debate_file(path: Path) -> str:
    if not path.is_file():
        raise ValidationError(f"File not found: {path}")
    return path.read_text(encoding="utf-8").strip()


def build_messages(
    command: Command,
    prompts: PromptsConfig,
    context: str,
    *,
    review_type: str = "code",
    debate: str | None = None,
    reviewer: str = "Reviewer",
) -> tuple[str, str]:
    """Return (system_instruction, user_message) for a command.

    Raises:
        ValidationError: respond/summary without debate history.
    """
    if command is Command.REVIEW:
        return prompts.review_system, prompts.review_user.format(review_type=review_type, context=context)

    if not debate:
        raise ValidationError("Missing required argument: --debate-file")
    if command is Command.RESPOND:
        return prompts.respond_system, prompts.respond_user.format(context=context, debate=debate)
    return (
        prompts.debate_summary_system.format(reviewer=reviewer),
        prompts.debate_summary_user.format(context=context, debate=debate),
    )


async def run_command(
    command: Command,
    provider: TextGenerationProvider,
    prompts: PromptsConfig,
    context: str,
    *,
    review_type: str = "code",
    debate: str | None = None,
    reviewer: str | None = None,
    invoker: ProviderInvoker | None = None,
) -> str:
    """Run one command against one provider and return its text.

    Raises:
        ValidationError: Bad inputs.
        ProviderError: Provider failed after the invoker's retry policy.
    """
    label = reviewer or provider.name()
    system_instruction, user_message = build_messages(
        command, prompts, context, review_type=review_type, debate=debate, reviewer=label
    )
    logger.info("Running %s via %s", command.value, label)
    return await (invoker or ProviderInvoker()).invoke(provider, system_instruction, user_message, role=label)
