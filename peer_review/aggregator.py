"""Assemble stage outputs into the final ReviewResult."""

from collections.abc import Mapping, Sequence

from peer_review.models import Prompt, ReviewResult, StageOutput


def aggregate(
    prompt: Prompt,
    reviewer_labels: Sequence[str],
    initial: Mapping[str, StageOutput],
    critiques: Mapping[str, StageOutput],
    summary: StageOutput,
) -> ReviewResult:
    """Build the result record. Only called once every stage has succeeded.

    ``critiques`` is keyed by critic, so ``critiques[a]`` is A's critique of B.
    """
    label_a, label_b = reviewer_labels
    return ReviewResult(
        prompt=prompt.text,
        initial_response_a=initial[label_a].text,
        initial_response_b=initial[label_b].text,
        critique_a_of_b=critiques[label_a].text,
        critique_b_of_a=critiques[label_b].text,
        summary=summary.text,
    )
